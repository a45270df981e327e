"""Generator configuration.

Settings that are not part of a single project description are read from
environment variables, following the same conventions used for CLI flags:

- ``PHX_NEW_CACHE_DIR``: a previously built ``_build``/``deps`` tree that is
  copied into every new project before dependencies are installed.
- ``CATAL_NEW_VERSION_CHECK``: set to a falsy value to skip the registry lookup.
- ``CATAL_NEW_REGISTRY_URL``: package endpoint queried for the latest release.
- ``CATAL_NEW_VERSION_TIMEOUT``: seconds to wait for the lookup at shutdown.
"""

import logging
import math
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

__all__ = (
    "CACHE_DIR_ENV",
    "DEFAULT_REGISTRY_URL",
    "DEFAULT_VERSION_TIMEOUT",
    "FALSE_VALUES",
    "MIN_ELIXIR_VERSION",
    "RESERVED_APP_NAMES",
    "GeneratorConfig",
)

FALSE_VALUES = {"False", "false", "0", "no", "N", "F"}

CACHE_DIR_ENV = "PHX_NEW_CACHE_DIR"
DEFAULT_REGISTRY_URL = "https://hex.pm/api/packages/catal_new"
MIN_ELIXIR_VERSION = (1, 15)
RESERVED_APP_NAMES = frozenset({"server", "table"})
DEFAULT_VERSION_TIMEOUT = 3.0

logger = logging.getLogger("catal_new")


def _parse_timeout(value: "str | None") -> float:
    if not value:
        return DEFAULT_VERSION_TIMEOUT
    try:
        timeout = float(value)
    except ValueError:
        timeout = 0.0
    if not math.isfinite(timeout) or timeout <= 0:
        logger.warning("Ignoring CATAL_NEW_VERSION_TIMEOUT=%r, expected a positive number of seconds", value)
        return DEFAULT_VERSION_TIMEOUT
    return timeout


@dataclass(frozen=True)
class GeneratorConfig:
    """Environment driven settings for a generator run.

    Attributes:
        cache_dir: Cached build directory copied into new projects, if configured.
        version_check: Whether to look up the latest published release.
        registry_url: Endpoint returning the package release list.
        version_timeout: Seconds to wait for the release lookup before giving up.
    """

    cache_dir: "Path | None" = None
    version_check: bool = True
    registry_url: str = DEFAULT_REGISTRY_URL
    version_timeout: float = DEFAULT_VERSION_TIMEOUT

    @classmethod
    def from_env(cls, env: "Mapping[str, str] | None" = None) -> "GeneratorConfig":
        """Build the configuration from environment variables.

        Args:
            env: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            The resolved configuration.
        """
        env = os.environ if env is None else env
        cache_dir = env.get(CACHE_DIR_ENV)
        return cls(
            cache_dir=Path(cache_dir) if cache_dir else None,
            version_check=env.get("CATAL_NEW_VERSION_CHECK", "true") not in FALSE_VALUES,
            registry_url=env.get("CATAL_NEW_REGISTRY_URL") or DEFAULT_REGISTRY_URL,
            version_timeout=_parse_timeout(env.get("CATAL_NEW_VERSION_TIMEOUT")),
        )
