"""Project validation.

Checks run in a fixed order so that the most actionable error is reported
first, and always before a single file is written.
"""

import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

from catal_new.config import MIN_ELIXIR_VERSION, RESERVED_APP_NAMES
from catal_new.exceptions import (
    DirectoryConflictError,
    InvalidNameFormatError,
    ModuleNameFormatError,
    ModuleNameTakenError,
    ReservedNameError,
    UnsupportedEnvironmentError,
)

if TYPE_CHECKING:
    from catal_new.context import ExecutionContext
    from catal_new.project import ProjectDescriptor

__all__ = (
    "ElixirModuleRegistry",
    "ModuleRegistry",
    "StaticModuleRegistry",
    "check_app_name",
    "check_directory_existence",
    "check_environment",
    "check_module_name_availability",
    "check_module_name_validity",
    "validate_project",
)

logger = logging.getLogger("catal_new")

APP_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")
MODULE_NAME_PATTERN = re.compile(r"^[A-Z]\w*(\.[A-Z]\w*)*$")
_VERSION_PATTERN = re.compile(r"Elixir (\d+)\.(\d+)(?:\.(\d+))?")

# Top level namespaces shipped with Elixir, OTP applications commonly loaded by
# Mix, and the libraries every generated project depends on.
KNOWN_MODULES = frozenset(
    {
        "Access", "Agent", "Application", "Atom", "Base", "Bitwise", "Calendar", "Code", "Config",
        "Date", "DateTime", "Dict", "DynamicSupervisor", "Ecto", "Elixir", "Enum", "Exception",
        "ExUnit", "File", "Float", "Function", "GenEvent", "GenServer", "Gettext", "HashDict",
        "HashSet", "IEx", "IO", "Inspect", "Integer", "Jason", "Kernel", "Keyword", "List",
        "Logger", "Macro", "Map", "MapSet", "Mix", "Module", "NaiveDateTime", "Node", "OptionParser",
        "Path", "Phoenix", "Plug", "Port", "Process", "Protocol", "Range", "Record", "Regex",
        "Registry", "Set", "Stream", "String", "StringIO", "Supervisor", "Swoosh", "System",
        "Task", "Telemetry", "Time", "Tuple", "URI", "Version",
    }
)  # fmt: skip


class ModuleRegistry(Protocol):
    """Answers whether a module is already defined in the target namespace."""

    def name_exists(self, candidate: str) -> bool: ...


class StaticModuleRegistry:
    """A registry backed by a fixed set of module names."""

    def __init__(self, names: "Iterable[str]" = KNOWN_MODULES) -> None:
        self.names = frozenset(names)

    def name_exists(self, candidate: str) -> bool:
        return candidate in self.names


class ElixirModuleRegistry(StaticModuleRegistry):
    """A registry that also asks the installed Elixir runtime.

    When ``elixir`` is not on ``PATH`` only the static set of known modules is
    consulted.
    """

    def __init__(self, context: "ExecutionContext", names: "Iterable[str]" = KNOWN_MODULES) -> None:
        super().__init__(names)
        self.context = context

    def name_exists(self, candidate: str) -> bool:
        if super().name_exists(candidate):
            return True
        elixir = self.context.which("elixir")
        if elixir is None:
            return False
        result = self.context.runner.capture(
            [elixir, "--eval", f"IO.puts(Code.ensure_loaded?({candidate}))"], self.context.cwd
        )
        return result.ok and result.output.strip().splitlines()[-1:] == ["true"]


def check_app_name(name: str, from_app_flag: bool) -> None:
    """Check that ``name`` is not reserved and is a valid application name.

    Raises:
        ReservedNameError: If the name is reserved.
        InvalidNameFormatError: If the name is not a lowercase identifier.
    """
    if name in RESERVED_APP_NAMES:
        raise ReservedNameError(name)
    if not APP_NAME_PATTERN.match(name):
        raise InvalidNameFormatError(name, from_app_flag)


def check_directory_existence(project: "ProjectDescriptor", context: "ExecutionContext") -> None:
    """Ask before generating into a directory that already exists.

    Raises:
        DirectoryConflictError: If the user declines to continue.
    """
    path = project.root_path
    if path.is_dir() and not context.ask(f"The directory {path} already exists. Are you sure you want to continue?"):
        raise DirectoryConflictError(str(path))


def check_module_name_validity(name: str) -> None:
    if not MODULE_NAME_PATTERN.match(name):
        raise ModuleNameFormatError(name)


def check_module_name_availability(name: str, registry: ModuleRegistry) -> None:
    """Check that neither ``name`` nor any of its prefixes is already defined.

    ``Foo.Bar`` is rejected when either ``Foo`` or ``Foo.Bar`` exists.

    Raises:
        ModuleNameTakenError: For the first taken prefix.
    """
    segments = name.split(".")
    for index in range(1, len(segments) + 1):
        candidate = ".".join(segments[:index])
        if registry.name_exists(candidate):
            raise ModuleNameTakenError(candidate)


def validate_project(
    project: "ProjectDescriptor",
    context: "ExecutionContext",
    registry: "ModuleRegistry | None" = None,
) -> "ProjectDescriptor":
    """Run every project check in order.

    Returns:
        The unchanged descriptor.
    """
    registry = registry or ElixirModuleRegistry(context)
    check_app_name(project.app_name, project.from_app_flag)
    check_directory_existence(project, context)
    check_module_name_validity(project.module_name)
    check_module_name_availability(project.module_name, registry)
    return project


def check_environment(context: "ExecutionContext") -> None:
    """Check that the installed Elixir is recent enough for generated projects.

    A missing ``elixir`` executable is not an error: the project can still be
    generated and the toolchain installed afterwards.

    Raises:
        UnsupportedEnvironmentError: If ``elixir`` reports a version that is too old.
    """
    elixir = context.which("elixir")
    if elixir is None:
        logger.warning("Elixir was not found on PATH, dependencies will have to be installed manually")
        return
    result = context.runner.capture([elixir, "--version"], context.cwd)
    match = _VERSION_PATTERN.search(result.output)
    if not result.ok or match is None:
        logger.debug("Could not determine the Elixir version from %r", result.output)
        return
    found = (int(match.group(1)), int(match.group(2)))
    if found < MIN_ELIXIR_VERSION:
        required = ".".join(str(part) for part in MIN_ELIXIR_VERSION)
        raise UnsupportedEnvironmentError(required, match.group(0))
