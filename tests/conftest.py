"""Shared fixtures.

- ``FakeSession`` is a real ``requests.Session`` whose ``send`` is answered
  from a URL -> (status, body) table, so no network calls are made. Unknown
  URLs raise ``requests.ConnectionError``.
- ``site_server`` serves the same kind of table from a real local
  ``http.server`` for tests that need the full socket path. Paths can be
  delayed before the response starts, or have their body dripped slowly.
"""

from __future__ import annotations

import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Dict, List, Tuple

import pytest
import requests

from sitecrawl.ratelimit import RateLimiter
from tests.helpers import make_response

DRIP_PIECE = 16


def _normalize(url: str) -> str:
    return requests.Request("GET", url).prepare().url


class FakeSession(requests.Session):
    def __init__(self, pages: Dict[str, Tuple[int, bytes]] | None = None) -> None:
        super().__init__()
        self.pages: Dict[str, Tuple[int, bytes]] = {}
        self.sent: List[requests.PreparedRequest] = []
        self.sent_at: List[float] = []
        self._lock = threading.Lock()
        for url, page in (pages or {}).items():
            self.add(url, *page)

    def add(self, url: str, status: int = 200, body: bytes | str = b"") -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.pages[_normalize(url)] = (status, body)

    def send(self, request, **kwargs):
        with self._lock:
            self.sent.append(request)
            self.sent_at.append(time.monotonic())
        if request.url not in self.pages:
            raise requests.ConnectionError(f"no route to {request.url}")
        status, body = self.pages[request.url]
        return make_response(request.url, status, body)

    def sent_urls(self) -> List[str]:
        return [r.url for r in self.sent]


@pytest.fixture
def fake_session():
    with FakeSession() as session:
        yield session


@pytest.fixture
def fast_limiter():
    return RateLimiter(rate=10_000, burst=10_000)


@pytest.fixture
def site_server():
    """
    Local HTTP server. Tests fill ``server.pages`` with path -> (status, html),
    ``server.delays`` with path -> seconds to wait before responding, and
    ``server.drips`` with path -> seconds to wait between body pieces.
    """
    pages: Dict[str, Tuple[int, str]] = {}
    delays: Dict[str, float] = {}
    drips: Dict[str, float] = {}

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self):  # noqa: N802
            status, body = pages.get(self.path, (404, "<html><body>not found</body></html>"))
            data = body.encode("utf-8")
            try:
                time.sleep(delays.get(self.path, 0))
                self.send_response(status)
                self.send_header("Content-Type", "text/html; charset=utf-8")
                self.send_header("Content-Length", str(len(data)))
                self.end_headers()
                interval = drips.get(self.path)
                if interval is None:
                    self.wfile.write(data)
                    return
                for i in range(0, len(data), DRIP_PIECE):
                    self.wfile.write(data[i:i + DRIP_PIECE])
                    self.wfile.flush()
                    time.sleep(interval)
            except (BrokenPipeError, ConnectionResetError):
                # client gave up
                return

        def log_message(self, format, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    server.pages = pages
    server.delays = delays
    server.drips = drips
    server.url = f"http://127.0.0.1:{server.server_address[1]}"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
