"""Best effort check for a newer release of the generator.

The lookup starts in a daemon thread as soon as the command runs and is only
joined once, right before exit, with a short timeout. A lookup that is still
running at that point is abandoned and does not keep the process alive. Any
failure is ignored so that the check can never change the outcome of a run.
"""

import logging
import re
import threading
from concurrent.futures import Future
from typing import TYPE_CHECKING, Optional

import httpx
import msgspec

from catal_new.__metadata__ import __version__

if TYPE_CHECKING:
    from catal_new.config import GeneratorConfig
    from catal_new.context import ExecutionContext

__all__ = (
    "Package",
    "Release",
    "discard_version_check",
    "fetch_latest_version",
    "latest_release",
    "maybe_warn_outdated",
    "parse_version",
    "start_version_check",
)

logger = logging.getLogger("catal_new")

VersionTuple = tuple[int, int, int]

_SEMVER = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)(?:-(?P<pre>[0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$")
_LEADING = re.compile(r"^v?(\d+)\.(\d+)(?:\.(\d+))?")


class Release(msgspec.Struct):
    """A published release."""

    version: str


class Package(msgspec.Struct):
    """The subset of the registry package document that is needed."""

    releases: list[Release] = []


def parse_version(text: str) -> "tuple[VersionTuple, bool]":
    """Parse a semantic version.

    Returns:
        The ``(major, minor, patch)`` tuple and whether it is a pre-release.

    Raises:
        ValueError: If ``text`` is not a semantic version.
    """
    match = _SEMVER.match(text.strip())
    if match is None:
        msg = f"Invalid version: {text!r}"
        raise ValueError(msg)
    major, minor, patch = (int(part) for part in match.group(1, 2, 3))
    return (major, minor, patch), match.group("pre") is not None


def _current_version(text: str) -> VersionTuple:
    match = _LEADING.match(text)
    if match is None:
        return (0, 0, 0)
    return int(match.group(1)), int(match.group(2)), int(match.group(3) or 0)


def latest_release(package: Package) -> "Optional[VersionTuple]":
    """Return the highest release that is not a pre-release.

    Releases whose version cannot be parsed are skipped.
    """
    versions = []
    for release in package.releases:
        try:
            version, pre = parse_version(release.version)
        except ValueError:
            logger.debug("Skipping release with invalid version %r", release.version)
            continue
        if not pre:
            versions.append(version)
    return max(versions, default=None)


def fetch_latest_version(
    url: str, timeout: float = 3.0, client: "Optional[httpx.Client]" = None
) -> "Optional[VersionTuple]":
    """Fetch the package document at ``url`` and return its latest stable version.

    Args:
        url: The registry package endpoint.
        timeout: Request timeout in seconds.
        client: Optional client to send the request with. A short lived client is
            created when omitted.

    Raises:
        httpx.HTTPError: If the request fails or returns an error status.
        msgspec.DecodeError: If the response is not a package document.
    """
    headers = {"user-agent": f"catal-new/{__version__}"}
    owns_client = client is None
    http = client or httpx.Client(follow_redirects=True)
    try:
        response = http.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()
    finally:
        if owns_client:
            http.close()
    return latest_release(msgspec.json.decode(response.content, type=Package))


def start_version_check(config: "GeneratorConfig") -> "Optional[Future[Optional[VersionTuple]]]":
    """Start the release lookup in the background.

    Returns:
        A future for the latest version, or ``None`` when the check is disabled.
    """
    if not config.version_check:
        return None
    future: "Future[Optional[VersionTuple]]" = Future()

    def _lookup() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            latest = fetch_latest_version(config.registry_url, config.version_timeout)
        except Exception as e:  # noqa: BLE001
            future.set_exception(e)
        else:
            future.set_result(latest)

    threading.Thread(target=_lookup, name="catal-new-version", daemon=True).start()
    return future


def discard_version_check(future: "Optional[Future[Optional[VersionTuple]]]") -> None:
    """Drop a lookup whose result will never be read."""
    if future is not None and future.cancel():
        logger.debug("Version check discarded before it started")


def maybe_warn_outdated(
    future: "Optional[Future[Optional[VersionTuple]]]",
    context: "ExecutionContext",
    current: str = __version__,
    timeout: float = 3.0,
) -> None:
    """Wait for the lookup and print an upgrade notice if a newer version exists.

    Never raises: a lookup that failed or did not finish within ``timeout`` is
    discarded.
    """
    if future is None:
        return
    try:
        latest = future.result(timeout=timeout)
    except Exception as e:  # noqa: BLE001
        logger.debug("Version check failed: %s", e)
        discard_version_check(future)
        return
    if latest is None or latest <= _current_version(current):
        return
    context.info(
        f"[yellow]A new version of catal-new is available:[/] [green]v{'.'.join(map(str, latest))}[/].\n"
        f"You are currently running [red]v{current}[/].\n"
        "To update, run:\n\n"
        "    $ mix local.catal\n"
    )
