"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import ServerConfig, create_app
from minihttp.server import HTTPServer


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request uploading a small file."""
    body = b"12345"
    return (
        b"POST /files/number HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
    ) + f"Content-Length: {len(body)}\r\n\r\n".encode() + body


@pytest.fixture
def served_dir(tmp_path: Path) -> Path:
    """An empty directory to serve under /files/."""
    directory = tmp_path / "files"
    directory.mkdir()
    return directory


@pytest.fixture
def config(served_dir: Path) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        directory=str(served_dir),
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


def recv_all(sock: socket.socket) -> bytes:
    """Read until the server closes the connection."""
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def split_response(raw: bytes) -> tuple[str, dict, bytes]:
    """Split raw response bytes into (status line, lowercase headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name.lower()] = value
    return lines[0], headers, body


class LiveServer:
    """Runs an HTTPServer on a background thread and talks to it over TCP."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def connect(self) -> socket.socket:
        sock = socket.create_connection(("127.0.0.1", self.port), timeout=5.0)
        return sock

    def send_raw(self, data: bytes) -> bytes:
        """Send raw bytes, return everything the server answers."""
        with self.connect() as sock:
            sock.sendall(data)
            return recv_all(sock)

    def request(
        self,
        method: str,
        path: str,
        headers: Optional[dict] = None,
        body: bytes = b"",
    ) -> tuple[str, dict, bytes]:
        """Send one well-formed request and return the split response."""
        lines = [f"{method} {path} HTTP/1.1", "Host: localhost"]
        for name, value in (headers or {}).items():
            lines.append(f"{name}: {value}")
        if body:
            lines.append(f"Content-Length: {len(body)}")
        data = ("\r\n".join(lines) + "\r\n\r\n").encode() + body
        return self.exchange(data)

    def exchange(self, data: bytes) -> tuple[str, dict, bytes]:
        """Send raw bytes, return the split response."""
        return split_response(self.send_raw(data))


@pytest.fixture
def live_server(config: ServerConfig) -> Generator[LiveServer, None, None]:
    """The full application, listening on a free port."""
    live = LiveServer(create_app(config))
    live.start()

    yield live

    live.stop()


@pytest.fixture
def make_live_server(config: ServerConfig) -> Generator:
    """Factory for servers with config overrides; all stopped at teardown."""
    started = []

    def factory(**overrides) -> LiveServer:
        for name, value in overrides.items():
            setattr(config, name, value)
        live = LiveServer(create_app(config))
        live.start()
        started.append(live)
        return live

    yield factory

    for live in started:
        live.stop()
