"""Application and module name derivation."""

import re
from pathlib import Path

from catal_new.exceptions import InvalidNameError

__all__ = ("camelize", "derive_app_name", "derive_module_name", "derive_names")

_SEPARATORS = re.compile(r"[-\s]+")


def derive_app_name(path: "str | Path", app: "str | None" = None) -> str:
    """Return the application name for ``path``.

    An explicit ``app`` is returned untouched so that validation can report it
    as given. Otherwise the last path segment is lowercased and dashes or
    whitespace become underscores.
    """
    if app:
        return app
    name = Path(str(path).rstrip("/\\")).expanduser().name
    return _SEPARATORS.sub("_", name.strip()).lower()


def camelize(name: str) -> str:
    """Convert a snake_case name into a CamelCase alias.

    ``hello_world`` becomes ``HelloWorld``. Slashes and dots start a new alias
    segment, so ``admin/hello_world`` becomes ``Admin.HelloWorld``.
    """
    segments = re.split(r"[./]", name)
    return ".".join(
        "".join(part[:1].upper() + part[1:] for part in segment.split("_")) for segment in segments if segment
    )


def derive_module_name(app_name: str, module: "str | None" = None, namespace: "str | None" = None) -> str:
    """Return the base module for ``app_name``.

    Args:
        app_name: The validated application name.
        module: Explicit module override.
        namespace: Optional alias prepended to the derived module.
    """
    if module:
        return module
    derived = camelize(app_name)
    return f"{namespace}.{derived}" if namespace else derived


def derive_names(
    path: "str | Path",
    app: "str | None" = None,
    module: "str | None" = None,
    namespace: "str | None" = None,
) -> "tuple[str, str]":
    """Derive the ``(app_name, module_name)`` pair for a project path.

    Raises:
        InvalidNameError: If the application name is empty or starts with a digit.
    """
    app_name = derive_app_name(path, app)
    if not app_name or app_name[0].isdigit():
        raise InvalidNameError(app_name or str(path))
    return app_name, derive_module_name(app_name, module, namespace)
