"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from homeserve import ServerConfig, WebServer
from homeserve.bootstrap import ensure_site_tree


SITE_FILES = {
    "home.html": b"<!DOCTYPE html><html><body><h1>Home</h1></body></html>",
    "about.html": b"<html><body>About</body></html>",
    "about.html.html": b"<html><body>About, by html target</body></html>",
    "css/site.css": b"body { color: rebeccapurple; }\n",
    "img/logo.png": b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01",
    "favicon.ico": b"\x00\x00\x01\x00\x01\x00\x10\x10",
    "js/app.js": b"console.log('hello');\n",
    "pkg/app.wasm": b"\x00asm\x01\x00\x00\x00",
    "setup.exe": b"MZ\x90\x00",
}


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A document root with one file per supported type and error pages."""
    root = tmp_path / "website"
    for name, content in SITE_FILES.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    ensure_site_tree(root)
    return root


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request for a stylesheet."""
    return (
        b"GET /css/site.css HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/css\r\n"
        b"\r\n"
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def config(site: Path, free_port: int) -> ServerConfig:
    """Test server configuration serving the `site` fixture."""
    return ServerConfig(
        host="127.0.0.1",
        port=free_port,
        threads=2,
        document_root=str(site),
        timeout=5.0,
        log_level="WARNING",
    )


class ServerHarness:
    """Runs a WebServer in a background thread."""

    def __init__(self, server: WebServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it accepts."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw request bytes and read the response until the server closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            if raw:
                s.sendall(raw)
            s.shutdown(socket.SHUT_WR)

            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)

        return b"".join(chunks)

    def get(self, target: str) -> bytes:
        return self.request(f"GET {target} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode())


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[ServerHarness, None, None]:
    """A running server on a free port."""
    harness = ServerHarness(WebServer(config))
    harness.start()

    yield harness

    harness.stop()

