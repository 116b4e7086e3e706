"""
pytest configuration and fixtures.
"""

import asyncio
import threading
from dataclasses import replace
from typing import Generator, Optional
from urllib.parse import quote
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from basic_http_server import HTTPServer, ServerConfig
from basic_http_server.http.request import HTTPRequest


INDEX_HTML = b"<h1>home</h1>\n"
DOCS_INDEX_HTML = b"<h1>docs</h1>\n"
ABOUT_HTML = b"<h1>about</h1>\n"
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


@pytest.fixture
def root_dir(tmp_path: Path) -> Path:
    """
    A small site:

        site/
        ├── index.html
        ├── about.html
        ├── style.css
        ├── notes.md
        ├── logo.png
        ├── README
        ├── hello world.txt
        ├── a?b.txt
        ├── docs/index.html
        ├── empty/
        └── assets/{b.txt, a.png, sub/}
    """
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "about.html").write_bytes(ABOUT_HTML)
    (root / "style.css").write_bytes(b"body { color: red; }\n")
    (root / "notes.md").write_bytes(b"# Notes\n")
    (root / "logo.png").write_bytes(PNG_BYTES)
    (root / "README").write_bytes(b"read me\n")
    (root / "hello world.txt").write_bytes(b"spaces\n")
    (root / "a?b.txt").write_bytes(b"question\n")

    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_bytes(DOCS_INDEX_HTML)

    (root / "empty").mkdir()

    (root / "assets").mkdir()
    (root / "assets" / "b.txt").write_bytes(b"b\n")
    (root / "assets" / "a.png").write_bytes(PNG_BYTES)
    (root / "assets" / "sub").mkdir()

    # Outside the document root; must never be served.
    (tmp_path / "secret.txt").write_bytes(b"secret\n")
    return root


@pytest.fixture
def config(root_dir: Path) -> ServerConfig:
    """Test server configuration, extensions off."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        root_dir=root_dir,
        keep_alive_timeout=2.0,
        log_level="WARNING",
    )


@pytest.fixture
def extensions_config(config: ServerConfig) -> ServerConfig:
    """Same as config, with the development extensions on."""
    return replace(config, use_extensions=True)


@pytest.fixture
def make_request():
    """Factory for HTTPRequest objects as the parser would produce them."""
    def make(path: str, method: str = "GET", query: str = "", **kwargs) -> HTTPRequest:
        kwargs.setdefault("raw_path", quote(path, safe="/*"))
        target = f"{kwargs['raw_path']}?{query}" if query else kwargs["raw_path"]
        return HTTPRequest(method=method, path=path, query=query, target=target, **kwargs)

    return make


class TestServer:
    """Test server helper that runs the asyncio server in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._ready = threading.Event()

    @property
    def port(self) -> int:
        return self.server.port

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=asyncio.run, args=(self._serve(),), daemon=True)
        self._thread.start()

        if not self._ready.wait(timeout=5.0) or self.server.port == 0:
            raise RuntimeError("Server failed to start")

    async def _serve(self):
        self._loop = asyncio.get_running_loop()
        try:
            await self.server.start()
        finally:
            self._ready.set()
        await self.server.serve_forever()

    def stop(self):
        """Stop the server."""
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self.server.request_stop)

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A live server on a free port, extensions off."""
    test_srv = TestServer(HTTPServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def extensions_server(extensions_config: ServerConfig) -> Generator[TestServer, None, None]:
    """A live server on a free port, extensions on."""
    test_srv = TestServer(HTTPServer(extensions_config))
    test_srv.start()

    yield test_srv

    test_srv.stop()
