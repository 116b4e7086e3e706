"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

The request pipeline: map a request path to a file under the root, read it
without blocking the event loop, and answer with its bytes or an error page.

    request.raw_path
         │
         ▼
    resolve_request_path()  ── None ──────────────────────► 500 page
         │
         ▼
    is_within_root()        ── outside ───────────────────► 404 page
         │
         ▼
    await open_file()       ── FileNotFoundError ─────────► 404 page
         │                  ── any other OSError ─────────► 500 page
         ▼
    await respond_with_file()
         │  read whole file ── OSError ───────────────────► 500 page
         ▼
    200, Content-Length, Content-Type from the extension
         │
         ▼
    hook(request, response, root_dir, use_extensions)  → final response

=============================================================================
PATH RESOLUTION
=============================================================================

    root_dir = /srv/site

    /                       → /srv/site/index.html
    /css/main.css           → /srv/site/css/main.css
    /docs/                  → /srv/site/docs/index.html
    /docs/?page=2           → /srv/site/docs/index.html
    /a%3Fb.txt              → /srv/site/a?b.txt
    *                       → None (500)

resolve_request_path() works on the raw, still-encoded path: it cuts the
query at the first literal "?", then decodes each segment on its own, so
an encoded "?" never cuts a file name short. It does not collapse ".."
or follow symlinks. The containment check runs afterwards on a lexically
normalized copy, so "/../etc/passwd" is refused while a symlink placed
inside the root still works.

=============================================================================
FILE HANDLES AND CANCELLATION
=============================================================================

open() and read() run on the default executor. If the request task is
cancelled (client gone) while one of them is in flight, the thread cannot
be interrupted; instead the handle is closed as soon as that thread
finishes. No handle outlives its request.

=============================================================================
"""

import asyncio
import errno
import logging
import os
from pathlib import Path
from typing import Awaitable, BinaryIO, Callable, Optional

from ..config import ServerConfig
from ..errors import BadRequestPath, classify
from ..http.mime_types import file_path_mime
from ..http.request import HTTPRequest, decode_path
from ..http.response import HTTPResponse, ResponseBuilder
from ..http.status_codes import HTTPStatus
from ..rendering import render_error_html


logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"

# hook(original_request, response, root_dir, use_extensions) -> final response
ResponseHook = Callable[[HTTPRequest, HTTPResponse, Path, bool], Awaitable[HTTPResponse]]


# =============================================================================
# PATH RESOLUTION
# =============================================================================

def resolve_request_path(request_path: str, root_dir: Path) -> Optional[Path]:
    """
    Map a request path to a candidate file under root_dir.

    Args:
        request_path: Raw (percent-encoded) path of the request target,
                      may carry "?query".
        root_dir: Document root.

    Returns:
        The joined path, or None if request_path does not start with "/".
    """
    if not request_path.startswith("/"):
        return None

    end = request_path.find("?")
    if end != -1:
        request_path = request_path[:end]

    # Join segment by segment: an empty segment ("//etc") must not turn
    # the remainder into an absolute path that replaces the root.
    path = Path(root_dir)
    for segment in request_path[1:].split("/"):
        if segment:
            path = path / decode_path(segment)

    if request_path.endswith("/"):
        path = path / INDEX_FILE

    return path


def is_within_root(path: Path, root_dir: Path) -> bool:
    """True if path, after lexical ".." collapsing, is root_dir or below it."""
    root = os.path.normpath(os.path.abspath(root_dir))
    candidate = os.path.normpath(os.path.abspath(path))
    return os.path.commonpath([root, candidate]) == root


# =============================================================================
# ASYNC FILE ACCESS
# =============================================================================

def _open_for_reading(path: Path) -> BinaryIO:
    try:
        return open(path, "rb")
    except ValueError as e:
        # "embedded null byte" and friends; report them like any bad path
        raise OSError(errno.EINVAL, str(e), str(path)) from e


def _close_abandoned(future: "asyncio.Future[BinaryIO]") -> None:
    if future.cancelled() or future.exception() is not None:
        return
    future.result().close()


def _close_when_done(file: BinaryIO) -> Callable[["asyncio.Future[bytes]"], None]:
    def close(future: "asyncio.Future[bytes]") -> None:
        if not future.cancelled():
            # retrieve it, so a failure nobody awaited is not logged as unhandled
            future.exception()
        file.close()

    return close


async def open_file(path: Path) -> BinaryIO:
    """
    Open path for binary reading off the event loop.

    Raises:
        OSError: Whatever open() raised (FileNotFoundError, PermissionError,
                 IsADirectoryError...).
    """
    opening = asyncio.ensure_future(asyncio.to_thread(_open_for_reading, path))
    try:
        return await asyncio.shield(opening)
    except asyncio.CancelledError:
        opening.add_done_callback(_close_abandoned)
        raise


async def read_file(file: BinaryIO) -> bytes:
    """
    Read a file to the end off the event loop, then close it.

    The file is closed on every outcome, including cancellation of the
    caller while the read is still running.
    """
    reading = asyncio.ensure_future(asyncio.to_thread(file.read))
    reading.add_done_callback(_close_when_done(file))
    return await asyncio.shield(reading)


# =============================================================================
# RESPONSES
# =============================================================================

async def respond_with_file(file: BinaryIO, path: Path) -> HTTPResponse:
    """
    Read an opened file completely and build the 200 response.

    The whole file is buffered in memory; there is no streaming.
    A read failure after a successful open becomes a 500 page.
    """
    try:
        content = await read_file(file)
    except OSError as e:
        logger.warning("Error reading %s: %s", path, e)
        return internal_server_error()

    return (ResponseBuilder()
        .status(HTTPStatus.OK)
        .content_length(len(content))
        .content_type(file_path_mime(path))
        .body(content)
        .build())


def error_response(status: HTTPStatus) -> HTTPResponse:
    """
    Rendered error page for a status.

    Content-Length is exact and Content-Type is text/html for every error
    page. A template failure propagates; it is not a per-request error.
    """
    return (ResponseBuilder()
        .status(status)
        .html(render_error_html(status))
        .build())


def internal_server_error() -> HTTPResponse:
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR)


def handle_io_error(error: OSError) -> HTTPResponse:
    """404 page for a missing file, 500 page for any other OSError."""
    status = classify(error)
    if status == HTTPStatus.NOT_FOUND:
        logger.debug("Not found: %s", error.filename)
    else:
        logger.warning("I/O error for %s: %s", error.filename, error)
    return error_response(status)


# =============================================================================
# REQUEST HANDLER
# =============================================================================

class StaticFileHandler:
    """
    Serves files from config.root_dir.

    Usage:
        handler = StaticFileHandler(config)
        response = await handler.handle(request)

    The handler keeps no per-request state; one instance serves every
    connection concurrently.
    """

    def __init__(self, config: ServerConfig, hook: Optional[ResponseHook] = None):
        """
        Args:
            config: Shared, read-only server configuration.
            hook: Post-processing hook applied to every response. Defaults
                  to the development extensions, which do nothing unless
                  config.use_extensions is set.
        """
        if hook is None:
            from ..extensions import map_response
            hook = map_response

        self.config = config
        self.hook = hook

    @property
    def root_dir(self) -> Path:
        return self.config.root_dir

    async def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Produce the final response for a request.

        The hook runs exactly once, on success and error responses alike.
        If it raises, the exception propagates to the transport.
        """
        response = await self.serve(request)
        return await self.hook(request, response, self.config.root_dir, self.config.use_extensions)

    async def serve(self, request: HTTPRequest) -> HTTPResponse:
        """
        Answer a request from the filesystem, before the hook.

        All per-request failures come back as error pages; nothing here
        raises for a missing or unreadable file.
        """
        path = resolve_request_path(request.raw_path, self.root_dir)
        if path is None:
            error = BadRequestPath(request.target or request.raw_path)
            logger.warning("%s", error)
            return error_response(error.status)

        if not is_within_root(path, self.root_dir):
            logger.warning("Path traversal attempt: %s", request.raw_path)
            return error_response(HTTPStatus.NOT_FOUND)

        try:
            file = await open_file(path)
        except OSError as e:
            return handle_io_error(e)

        return await respond_with_file(file, path)
