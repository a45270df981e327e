"""Catal-New exception classes."""

__all__ = [
    "CatalNewError",
    "CommandExecutionError",
    "DirectoryConflictError",
    "ExecutableNotFoundError",
    "InvalidNameError",
    "InvalidNameFormatError",
    "InvalidOptionError",
    "ModuleNameFormatError",
    "ModuleNameTakenError",
    "ReservedNameError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateSyntaxError",
    "UndefinedBindingError",
    "UnknownOptionError",
    "UnsupportedEnvironmentError",
    "ValidationError",
]


class CatalNewError(Exception):
    """Base exception for Catal-New related errors."""


class ValidationError(CatalNewError):
    """Raised when the requested project cannot be generated as described.

    Validation always runs before any file is written.
    """


class InvalidNameError(ValidationError):
    """Raised when no usable application name can be derived."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Could not derive an application name from {name!r}. "
            "Application names must not be empty or start with a digit."
        )


class ReservedNameError(ValidationError):
    """Raised when the application name is reserved."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Application name cannot be {name!r} as it is reserved")


class InvalidNameFormatError(ValidationError):
    """Raised when the application name is not a valid identifier."""

    def __init__(self, name: str, from_app_flag: bool) -> None:
        extra = (
            ""
            if from_app_flag
            else (
                ". The application name is inferred from the path, if you'd like to "
                "explicitly name the application then use the `--app APP` option."
            )
        )
        super().__init__(
            "Application name must start with a letter and have only lowercase "
            f"letters, numbers and underscore, got: {name!r}{extra}"
        )


class ModuleNameFormatError(ValidationError):
    """Raised when the module name is not a valid alias."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Module name must be a valid Elixir alias (for example: Foo.Bar), got: {name!r}")


class ModuleNameTakenError(ValidationError):
    """Raised when the module name, or one of its prefixes, is already defined."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Module name {name} is already taken, please choose another name")


class DirectoryConflictError(ValidationError):
    """Raised when the target directory exists and overwriting was declined."""

    def __init__(self, path: str) -> None:
        super().__init__(f"The directory {path} already exists. Please select another directory for installation.")
        self.path = path


class UnknownOptionError(ValidationError):
    """Raised when an option is not part of the generator option set."""

    def __init__(self, option: str) -> None:
        super().__init__(f"Unknown option {option!r}.")


class InvalidOptionError(ValidationError):
    """Raised when an option value is outside of its allowed choices."""

    def __init__(self, option: str, value: object, choices: "list[str]") -> None:
        super().__init__(f"Invalid value {value!r} for option {option!r}. Expected one of: {', '.join(choices)}")


class UnsupportedEnvironmentError(CatalNewError):
    """Raised when the installed toolchain is too old to run the generated project."""

    def __init__(self, required: str, found: str) -> None:
        super().__init__(f"Catal requires at least Elixir v{required}\n You have {found}. Please update accordingly")


class ExecutableNotFoundError(CatalNewError):
    """Raised when an external executable is not found."""

    def __init__(self, executable: str) -> None:
        super().__init__(f"Executable {executable!r} not found.")
        self.executable = executable


class CommandExecutionError(CatalNewError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: str, return_code: int, stderr: str = "") -> None:
        super().__init__(f"Command {command!r} failed with return code {return_code}.\nStderr: {stderr}")
        self.command = command
        self.return_code = return_code
        self.stderr = stderr


class TemplateError(CatalNewError):
    """Base exception for template rendering errors."""


class TemplateNotFoundError(TemplateError):
    """Raised when a bundled template file is missing."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Template {name!r} not found.")


class TemplateSyntaxError(TemplateError):
    """Raised when a template contains an unknown or unbalanced tag."""

    def __init__(self, message: str, name: str = "<string>", line: int = 0) -> None:
        super().__init__(f"{name}:{line}: {message}")
        self.name = name
        self.line = line


class UndefinedBindingError(TemplateError):
    """Raised when a template references a binding that was not provided."""

    def __init__(self, binding: str, name: str = "<string>") -> None:
        super().__init__(f"Undefined binding {binding!r} in template {name!r}.")
        self.binding = binding
