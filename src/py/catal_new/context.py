"""Execution context shared by every generator component."""

import os
import shutil
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.prompt import Confirm

from catal_new.config import GeneratorConfig
from catal_new.executor import CommandRunner

__all__ = ("ExecutionContext",)


def _cwd_factory() -> Path:
    return Path.cwd()


@dataclass
class ExecutionContext:
    """Output sink, environment lookup and process capabilities for a run.

    Components never touch ``os.environ``, the global console or ``subprocess``
    directly; tests build a context with fakes instead.

    Attributes:
        console: Where user facing output is printed.
        env: Environment variables visible to the generator.
        runner: Executes external commands.
        config: Environment driven generator settings.
        cwd: Directory that relative paths in the summary are computed from.
        which: Locates executables on ``PATH``.
        confirm: Asks the user a yes/no question.
    """

    console: Console
    env: Mapping[str, str]
    runner: CommandRunner
    config: GeneratorConfig
    cwd: Path = field(default_factory=_cwd_factory)
    which: "Callable[[str], str | None]" = shutil.which
    confirm: "Callable[[str], bool] | None" = None

    def ask(self, question: str) -> bool:
        """Ask a yes/no question, defaulting to yes."""
        if self.confirm is not None:
            return self.confirm(question)
        return Confirm.ask(question, console=self.console, default=True)

    def info(self, message: str) -> None:
        self.console.print(message)

    def error(self, message: str) -> None:
        self.console.print(f"[red]{message}[/]")

    @classmethod
    def default(cls, verbose: bool = False, console: "Console | None" = None) -> "ExecutionContext":
        """Build a context bound to the real process environment."""
        env = dict(os.environ)
        return cls(
            console=console or Console(highlight=False),
            env=env,
            runner=CommandRunner(quiet=not verbose),
            config=GeneratorConfig.from_env(env),
        )
