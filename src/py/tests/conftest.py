import io
import threading
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from rich.console import Console

from catal_new.config import GeneratorConfig
from catal_new.context import ExecutionContext
from catal_new.exceptions import CommandExecutionError
from catal_new.executor import CommandResult, CommandRunner

# Environment variables that may affect test behavior - clear before each test
_CATAL_ENV_VARS = [
    "PHX_NEW_CACHE_DIR",
    "CATAL_NEW_VERSION_CHECK",
    "CATAL_NEW_REGISTRY_URL",
    "CATAL_NEW_VERSION_TIMEOUT",
]


@pytest.fixture(autouse=True)
def clean_catal_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear generator environment variables before each test for isolation."""
    for var in _CATAL_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield


class FakeRunner(CommandRunner):
    """Records commands instead of running them.

    Commands listed in ``failing`` raise :class:`CommandExecutionError`. Captured
    commands answer from ``results``, keyed by the space-joined arguments.
    """

    def __init__(
        self,
        failing: "set[str] | None" = None,
        results: "dict[str, CommandResult] | None" = None,
        on_execute: "Callable[[str], None] | None" = None,
    ) -> None:
        super().__init__(quiet=True)
        self.failing = failing or set()
        self.results = results or {}
        self.on_execute = on_execute
        self.executed: list[tuple[str, Path]] = []
        self.captured: list[list[str]] = []
        self._lock = threading.Lock()

    def execute(self, command: str, cwd: Path) -> None:
        if self.on_execute is not None:
            self.on_execute(command)
        with self._lock:
            self.executed.append((command, cwd))
        if command in self.failing:
            raise CommandExecutionError(command, 1, "failed")

    def capture(self, args: "list[str]", cwd: Path) -> CommandResult:
        with self._lock:
            self.captured.append(list(args))
        return self.results.get(" ".join(args), CommandResult(1, ""))

    @property
    def commands(self) -> list[str]:
        return [command for command, _ in self.executed]


@pytest.fixture
def runner_factory() -> Callable[..., FakeRunner]:
    return FakeRunner


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=240, soft_wrap=True, color_system=None, highlight=False)


@pytest.fixture
def context(tmp_path: Path, console: Console, fake_runner: FakeRunner) -> ExecutionContext:
    """A context that never prompts, finds no executables and runs nothing."""
    return ExecutionContext(
        console=console,
        env={},
        runner=fake_runner,
        config=GeneratorConfig(version_check=False),
        cwd=tmp_path,
        which=lambda name: None,
        confirm=lambda question: True,
    )


@pytest.fixture
def output(console: Console) -> Callable[[], str]:
    """Return everything printed to the test console so far."""

    def _output() -> str:
        file = console.file
        assert isinstance(file, io.StringIO)
        return file.getvalue()

    return _output


def read_tree(root: Path) -> dict[str, bytes]:
    return {str(path.relative_to(root)): path.read_bytes() for path in sorted(root.rglob("*")) if path.is_file()}


@pytest.fixture
def tree_reader() -> Callable[[Path], dict[str, bytes]]:
    return read_tree
