"""Shared pytest fixtures for the proxybench tests.

Provides reusable fakes and configuration objects to keep tests
deterministic and isolated from real proxies and the public network.
"""

import logging
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Generator, Tuple
from urllib.parse import parse_qs, urlparse

import pytest

from proxybench.config import AppConfig
from tests.fakes import LoopbackDialer

SLOW_BYTE_INTERVAL = 0.5


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Generator[None, None, None]:
    """Drop the run-scoped handlers ``configure_logging`` installs within a test."""
    root_logger = logging.getLogger()
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        # configure_logging tags each handler it creates with a run filter
        if handler.filters:
            handler.close()
            root_logger.removeHandler(handler)
    root_logger.setLevel(level)


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """Application config fixture pointing logs to a temporary directory."""
    return AppConfig(
        log_directory=tmp_path,
        log_level="INFO",
    )


class _PayloadHandler(BaseHTTPRequestHandler):
    """Serves ``/__down?bytes=N`` with N bytes and ``/status/<code>`` with a tiny body.

    ``/slow?bytes=N`` sends its headers at once, then one body byte every
    ``SLOW_BYTE_INTERVAL`` seconds.
    """

    def do_GET(self) -> None:  # noqa: N802 - http.server naming
        parsed = urlparse(self.path)
        if parsed.path == "/slow":
            self._send_slowly(int(parse_qs(parsed.query).get("bytes", ["0"])[0]))
            return
        if parsed.path.startswith("/status/"):
            code = int(parsed.path.rsplit("/", 1)[-1])
            body = b"nope"
        else:
            code = 200
            size = int(parse_qs(parsed.query).get("bytes", ["0"])[0])
            body = b"x" * size
        self.send_response(code)
        self.send_header("Content-Type", "application/octet-stream")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_slowly(self, size: int) -> None:
        self.send_response(200)
        self.send_header("Content-Type", "application/octet-stream")
        self.send_header("Content-Length", str(size))
        self.end_headers()
        try:
            for _ in range(size):
                self.wfile.write(b"x")
                self.wfile.flush()
                time.sleep(SLOW_BYTE_INTERVAL)
        except (BrokenPipeError, ConnectionResetError):
            # The client gave up on the download
            return

    def log_message(self, format, *args) -> None:  # noqa: A002 - silence test output
        pass


@pytest.fixture
def payload_server() -> Generator[Tuple[str, int], None, None]:
    """Local HTTP server standing in for the liveness object host."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _PayloadHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server.server_address[0], server.server_address[1]
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def loopback_dialer(payload_server: Tuple[str, int]) -> LoopbackDialer:
    return LoopbackDialer(payload_server)


@pytest.fixture
def sample_config_yaml() -> str:
    return """
proxies:
  - name: "🇯🇵 Tokyo  01"
    type: socks5
    server: 10.0.0.1
    port: 1080
  - name: "HK http"
    type: http
    server: 10.0.0.2
    port: 8080
    username: user
    password: secret
  - name: "SS good"
    type: ss
    server: 10.0.0.3
    port: 8388
    cipher: chacha20-ietf-poly1305
    password: pw
  - name: "SS weak"
    type: ss
    server: 10.0.0.4
    port: 8388
    cipher: aes-128-gcm
    password: pw
  - name: "Auto"
    type: url-test
    proxies: ["HK http"]
"""
