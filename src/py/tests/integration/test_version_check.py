"""The release lookup against a registry that answers too slowly."""

import os
import subprocess
import sys
import textwrap
import threading
import time
from collections.abc import Generator
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

import catal_new

TRICKLE_SECONDS = 8.0


class _TrickleHandler(BaseHTTPRequestHandler):
    """Sends headers at once, then one byte of the body at a time."""

    def do_GET(self) -> None:
        self.send_response(200)
        self.send_header("content-type", "application/json")
        self.send_header("content-length", "1024")
        self.end_headers()
        deadline = time.monotonic() + TRICKLE_SECONDS
        while time.monotonic() < deadline:
            try:
                self.wfile.write(b" ")
                self.wfile.flush()
            except OSError:
                return
            time.sleep(0.2)

    def log_message(self, format: str, *args: object) -> None:
        pass


@pytest.fixture
def slow_registry() -> Generator[str, None, None]:
    server = ThreadingHTTPServer(("127.0.0.1", 0), _TrickleHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}/api/packages/catal_new"
    finally:
        server.shutdown()
        server.server_close()


def _run(script: str, registry_url: str) -> float:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        filter(None, [str(Path(catal_new.__file__).parents[1]), env.get("PYTHONPATH")])
    )
    env["CATAL_NEW_REGISTRY_URL"] = registry_url
    begin = time.monotonic()
    subprocess.run([sys.executable, "-c", textwrap.dedent(script)], env=env, check=True, timeout=30)
    return time.monotonic() - begin


def test_process_exits_when_lookup_times_out(slow_registry: str) -> None:
    script = """
        import io, os
        from rich.console import Console
        from catal_new.config import GeneratorConfig
        from catal_new.context import ExecutionContext
        from catal_new.executor import CommandRunner
        from catal_new.version import maybe_warn_outdated, start_version_check

        config = GeneratorConfig(registry_url=os.environ["CATAL_NEW_REGISTRY_URL"], version_timeout=1.0)
        context = ExecutionContext(
            console=Console(file=io.StringIO()), env={}, runner=CommandRunner(), config=config
        )
        maybe_warn_outdated(start_version_check(config), context, timeout=1.0)
    """

    assert _run(script, slow_registry) < TRICKLE_SECONDS / 2


def test_failed_run_does_not_wait_for_lookup(slow_registry: str, tmp_path: Path) -> None:
    script = f"""
        from catal_new.cli import new

        try:
            new.main([{str(tmp_path / "server")!r}, "--version-check"], standalone_mode=False)
        except Exception:
            pass
    """

    assert _run(script, slow_registry) < TRICKLE_SECONDS / 2
    assert not (tmp_path / "server").exists()
