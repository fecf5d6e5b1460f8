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

from minihttp import HTTPServer, ServerConfig


INDEX_CONTENT = b"hello\n"


@pytest.fixture
def sample_get_request() -> bytes:
    """The request the client sends for http://localhost/index.html."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost\r\n"
        b"Connection: close\r\n"
        b"\r\n"
    )


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """A document root with an index page, a text file and a subdirectory."""
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_CONTENT)
    (root / "notes.txt").write_bytes(b"line one\nline two\nno newline at end")
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_bytes(b"<h1>docs</h1>\n")
    (root / "docs" / "home.html").write_bytes(b"<h1>home</h1>\n")
    return root


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class ServerThread:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"setup_logs": False},
            daemon=True,
        )

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self) -> "ServerThread":
        self._thread.start()
        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")
        return self

    def stop(self) -> None:
        self.server.shutdown()
        self._thread.join(timeout=5.0)

    @property
    def is_alive(self) -> bool:
        return self._thread.is_alive()


@pytest.fixture
def server_config(doc_root: Path, free_port: int) -> ServerConfig:
    return ServerConfig(
        doc_root=str(doc_root),
        host="127.0.0.1",
        port=str(free_port),
        accept_timeout=0.1,
        log_level="WARNING",
    )


@pytest.fixture
def running_server(server_config: ServerConfig) -> Generator[ServerThread, None, None]:
    """A server on a free port serving the doc_root fixture."""
    thread = ServerThread(HTTPServer(server_config)).start()
    yield thread
    thread.stop()


def _raw_exchange(port: int, request: bytes) -> bytes:
    with socket.create_connection(("127.0.0.1", port), timeout=5.0) as sock:
        sock.sendall(request)
        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def raw_exchange():
    """Send raw request bytes to a port and read until the server closes."""
    return _raw_exchange


@pytest.fixture
def start_server():
    """Start extra servers from a test; all are stopped on teardown."""
    started = []

    def start(config: ServerConfig) -> ServerThread:
        thread = ServerThread(HTTPServer(config)).start()
        started.append(thread)
        return thread

    yield start
    for thread in started:
        thread.stop()
