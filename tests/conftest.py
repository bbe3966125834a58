"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Callable, Generator, Optional

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tinyhttpd import HTTPServer, ServerConfig
from tinyhttpd.http import HTTPRequest, HTTPResponse, ok


@pytest.fixture
def sample_get_request() -> bytes:
    """GET /echo/abc with a couple of headers."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """POST /files/notes.txt with a plain body."""
    body = b"hello\r\nworld"
    return (
        b"POST /files/notes.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
    ) + f"Content-Length: {len(body)}\r\n".encode() + b"\r\n" + body


@pytest.fixture
def config(tmp_path) -> ServerConfig:
    """Test configuration with a files directory and an OS-picked port."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,
        directory=str(tmp_path),
        workers=2,
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestServer:
    """Runs an HTTPServer on a background thread."""

    __test__ = False

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self) -> "TestServer":
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()
        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")
        return self

    def stop(self) -> None:
        self.server.stop()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, data: bytes) -> bytes:
        """Send raw bytes, half-close, and read until the server closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as sock:
            sock.sendall(data)
            sock.shutdown(socket.SHUT_WR)
            return recv_all(sock)


def recv_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server with the built-in routes plus two test routes."""
    server = HTTPServer(config)

    @server.route("boom")
    def boom(request: HTTPRequest) -> HTTPResponse:
        raise RuntimeError("handler failure")

    @server.route("method")
    def method(request: HTTPRequest) -> HTTPResponse:
        return ok(request.method)

    test_srv = TestServer(server).start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def server_factory() -> Generator[Callable[..., TestServer], None, None]:
    """Start servers with custom settings; all are stopped afterwards."""
    started = []

    def start(**overrides) -> TestServer:
        options = dict(host="127.0.0.1", port=0, workers=2, log_level="WARNING")
        options.update(overrides)
        srv = TestServer(HTTPServer(ServerConfig(**options))).start()
        started.append(srv)
        return srv

    yield start

    for srv in started:
        srv.stop()
