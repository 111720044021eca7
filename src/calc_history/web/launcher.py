"""Standalone launcher for the calc-history web API.

Starts uvicorn on the configured port (or the first free one), waits for
``/health`` to answer, then blocks until interrupted.

Usage:
    python -m calc_history.web [--port 8400] [--config settings.yml]
"""

from __future__ import annotations

import argparse
import logging
import os
import socket
import threading
import time
import urllib.error
import urllib.request

import uvicorn

from calc_history.config import ENV_PREFIX, load_config
from calc_history.logging_config import setup_logging

_log = logging.getLogger(__name__)


def find_free_port(start: int = 8400, end: int = 8500) -> int:
    """Return the first free TCP port in [start, end)."""
    for port in range(start, end):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind(("127.0.0.1", port))
                return port
            except OSError:
                continue
    raise RuntimeError(f"No free port found between {start} and {end}.")


def wait_for_health(url: str, timeout: float = 15.0) -> bool:
    """Poll *url* every 200 ms until it returns HTTP 200 or *timeout* elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            with urllib.request.urlopen(url, timeout=1) as resp:
                if resp.status == 200:
                    return True
        except (urllib.error.URLError, OSError):
            pass
        time.sleep(0.2)
    return False


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="calc-history web server")
    parser.add_argument("--port", type=int, default=None, help="TCP port (default: first free port)")
    parser.add_argument("--config", default=None, help="YAML configuration file")
    args = parser.parse_args(argv)

    if args.config:
        # The app module reads its configuration at import time.
        os.environ[f"{ENV_PREFIX}CONFIG"] = args.config
    config = load_config(args.config)
    setup_logging(config.log_level)

    port = args.port or config.port or find_free_port()
    health_url = f"http://{config.host}:{port}/health"

    from calc_history.web.app import app

    server = uvicorn.Server(
        uvicorn.Config(app, host=config.host, port=port, log_level=config.log_level.lower())
    )
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    if not wait_for_health(health_url):
        _log.error("Server did not become ready on port %d", port)
        server.should_exit = True
        return 1

    _log.info("Server ready at http://%s:%d", config.host, port)
    try:
        while thread.is_alive():
            thread.join(timeout=1)
    except KeyboardInterrupt:
        _log.info("Stopping server")
        server.should_exit = True
        thread.join()
    return 0
