"""External command execution.

The generator shells out to ``mix``, ``git`` and ``elixir``. All of those calls
go through a :class:`CommandRunner` so that they can be replaced in tests.
"""

import logging
import platform
import shlex
import shutil
import subprocess
from pathlib import Path

from catal_new.exceptions import CommandExecutionError, ExecutableNotFoundError

__all__ = ("CommandResult", "CommandRunner")

logger = logging.getLogger("catal_new")


class CommandResult:
    """Exit status and captured output of a finished command."""

    __slots__ = ("output", "return_code")

    def __init__(self, return_code: int, output: str = "") -> None:
        self.return_code = return_code
        self.output = output

    @property
    def ok(self) -> bool:
        return self.return_code == 0


class CommandRunner:
    """Run external commands.

    Args:
        quiet: Discard the standard output of executed commands. Standard error is
            always captured so it can be attached to the raised exception.
    """

    def __init__(self, quiet: bool = True) -> None:
        self.quiet = quiet

    def _resolve_executable(self, name: str) -> str:
        path = shutil.which(name)
        if path is None:
            raise ExecutableNotFoundError(name)
        return path

    def execute(self, command: str, cwd: Path) -> None:
        """Execute a command and wait for it to finish.

        Args:
            command: The command line, as it would be typed into a shell.
            cwd: Directory to run the command in.

        Raises:
            ExecutableNotFoundError: If the program is not on ``PATH``.
            CommandExecutionError: If the command exits with a non-zero status.
        """
        args = shlex.split(command)
        executable = self._resolve_executable(args[0])
        logger.debug("Running %r in %s", command, cwd)
        process = subprocess.run(
            [executable, *args[1:]],
            cwd=cwd,
            shell=platform.system() == "Windows",
            check=False,
            stdout=subprocess.DEVNULL if self.quiet else None,
            stderr=subprocess.PIPE,
        )
        if process.returncode != 0:
            stderr = process.stderr.decode() if process.stderr else ""
            raise CommandExecutionError(command, process.returncode, stderr)

    def capture(self, args: "list[str]", cwd: Path) -> CommandResult:
        """Run a command and capture its combined output without raising on failure.

        Returns:
            The exit status and decoded output. A missing executable or an
            ``OSError`` while spawning is reported as return code ``127``.
        """
        try:
            process = subprocess.run(
                args,
                cwd=cwd,
                check=False,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as e:
            logger.debug("Could not run %r: %s", args, e)
            return CommandResult(127, str(e))
        return CommandResult(process.returncode, process.stdout.decode(errors="replace") if process.stdout else "")
