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

from tinyhttpd import HTTPServer, ServerConfig


INDEX_HTML = b"<!DOCTYPE html><html><body><h1>docroot index</h1></body></html>"
DOCS_INDEX_HTML = b"<html><body>docs index</body></html>"
SITE_CSS = b"body { color: #333; }\n"
NOTES_TXT = b"plain notes\n"


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request with headers the parser ignores."""
    return (
        b"GET /hello?name=Ada+Lovelace&lang=en HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request; the body is never read."""
    body = b'{"name": "Ada"}'
    head = (
        b"POST / HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/json\r\n"
    )
    return head + f"Content-Length: {len(body)}\r\n".encode() + b"\r\n" + body


@pytest.fixture
def docroot(tmp_path: Path) -> Path:
    """
    A small document root:

        index.html
        css/site.css
        docs/index.html
        empty/            (directory without an index file)
        notes.TXT
    """
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "css").mkdir()
    (root / "css" / "site.css").write_bytes(SITE_CSS)
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_bytes(DOCS_INDEX_HTML)
    (root / "empty").mkdir()
    (root / "notes.TXT").write_bytes(NOTES_TXT)
    return root


@pytest.fixture
def config(docroot: Path) -> ServerConfig:
    """Test server configuration pointing at the temporary document root."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        accept_timeout=0.1,
        document_root=str(docroot),
        log_level="WARNING",
    )


@pytest.fixture
def server(config: ServerConfig) -> HTTPServer:
    """An HTTPServer that is never started; drive it with handle_connection()."""
    return HTTPServer(config)


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class LiveServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.socket_server.bound_address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.socket_server.ready.wait(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Cancel the token and wait for the accept loop to exit."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    @property
    def stopped(self) -> bool:
        return self._thread is not None and not self._thread.is_alive()

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes and return everything the server writes back."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            if raw:
                s.sendall(raw)
            # EOF tells the server nothing more is coming
            s.shutdown(socket.SHUT_WR)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def live_server(config: ServerConfig) -> Generator[LiveServer, None, None]:
    """A real server on an OS-assigned port."""
    live = LiveServer(HTTPServer(config))
    live.start()

    yield live

    live.stop()


def split_response(raw: bytes) -> tuple[str, dict, bytes]:
    """Split raw response bytes into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


@pytest.fixture
def parse_response():
    """The split_response helper, for tests that inspect raw bytes."""
    return split_response
