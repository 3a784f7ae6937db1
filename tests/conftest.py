"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from userapi import UserServer, ServerConfig, UserStore, Dispatcher


def build_request(method: str, path: str, body: bytes = b"") -> bytes:
    """Build raw request bytes the way a client would send them."""
    head = (
        f"{method} {path} HTTP/1.1\r\n"
        f"Host: localhost:8080\r\n"
        f"User-Agent: pytest\r\n"
    )
    if body:
        head += f"Content-Type: application/json\r\nContent-Length: {len(body)}\r\n"
    return head.encode() + b"\r\n" + body


@pytest.fixture
def make_request():
    """The build_request helper, for tests that need custom requests."""
    return build_request


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample read-one request."""
    return (
        b"GET /user/1?verbose=1 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: application/json\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample create request with JSON body."""
    return build_request("POST", "/users", b'{"name": "Ann", "email": "a@x.com"}')


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """A fresh SQLite database file per test."""
    return f"sqlite:///{tmp_path / 'users.db'}"


@pytest.fixture
def config(database_url: str) -> ServerConfig:
    """Test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        database_url=database_url,
        log_level="WARNING",
    )


@pytest.fixture
def store(config: ServerConfig) -> Generator[UserStore, None, None]:
    """A store with its schema created."""
    user_store = UserStore(config)
    user_store.ensure_schema()
    yield user_store
    user_store.dispose()


@pytest.fixture
def dispatcher(store: UserStore) -> Dispatcher:
    return Dispatcher(store)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class, despite the name

    def __init__(self, server: UserServer):
        self.server = server
        self._thread: threading.Thread = None

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
            self._thread.join(timeout=5.0)

    def send(self, raw: bytes) -> bytes:
        """Send raw bytes and read the response until the server closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as sock:
            sock.sendall(raw)
            chunks = []
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server on a free port, backed by a temporary database."""
    test_srv = TestServer(UserServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()
