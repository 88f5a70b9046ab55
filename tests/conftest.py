"""
pytest configuration and fixtures.
"""

import http.client
import threading
from typing import Generator, Optional

import pytest

import sys
from pathlib import Path

# Make src/ importable without installing the package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from socialserve import HTTPServer, ServerConfig, create_app
from socialserve.http import HTTPRequest
from socialserve.store import SharedStore, Store


# =============================================================================
# REQUEST FIXTURES
# =============================================================================

@pytest.fixture
def sample_get_request() -> bytes:
    """A like action as a browser form submission sends it."""
    return (
        b"GET /like?post_id=1&post_username=alice&username=bob HTTP/1.1\r\n"
        b"Host: localhost:8000\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/html\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


def make_request(
    path: str,
    method: str = "GET",
    query: Optional[dict] = None,
    path_params: Optional[dict] = None,
) -> HTTPRequest:
    """An HTTPRequest as the router would hand it to a handler."""
    return HTTPRequest(
        method=method,
        path=path,
        query_params={k: [v] for k, v in (query or {}).items()},
        path_params=dict(path_params or {}),
        client_address=("127.0.0.1", 50000),
    )


# =============================================================================
# STORE FIXTURES
# =============================================================================

@pytest.fixture
def store() -> Store:
    return Store()


@pytest.fixture
def shared() -> SharedStore:
    return SharedStore()


@pytest.fixture
def config() -> ServerConfig:
    """Test server configuration on an OS-assigned port."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        keep_alive_timeout=1.0,
        log_level="WARNING",
    )


# =============================================================================
# LIVE SERVER
# =============================================================================

class LiveServer:
    """Runs an HTTPServer on a background thread for the length of a test."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self) -> "LiveServer":
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()
        if not self.server.wait_until_ready(5.0):
            raise RuntimeError("Server failed to start")
        return self

    def stop(self) -> None:
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def get(self, path: str, headers: Optional[dict] = None) -> http.client.HTTPResponse:
        """GET path on a fresh connection; the body is read before returning."""
        conn = http.client.HTTPConnection("127.0.0.1", self.port, timeout=5)
        try:
            conn.request("GET", path, headers=headers or {})
            response = conn.getresponse()
            response.body = response.read()
            return response
        finally:
            conn.close()


@pytest.fixture
def live_app(config: ServerConfig, shared: SharedStore) -> Generator[LiveServer, None, None]:
    """The full social application, listening on 127.0.0.1:<free port>."""
    live = LiveServer(create_app(config, store=shared)).start()
    yield live
    live.stop()
