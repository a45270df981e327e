"""Distribution metadata for catal-new.

The version is read from the installed distribution so that ``--version``, the
registry user agent and the outdated-release notice agree with what pip
installed.
"""

from importlib.metadata import PackageNotFoundError, version

__all__ = ("DISTRIBUTION", "__project__", "__version__")

DISTRIBUTION = "catal-new"


def _installed_version() -> str:
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        # Source checkout that was never installed.
        return "0.0.0"


__version__ = _installed_version()
__project__ = DISTRIBUTION
