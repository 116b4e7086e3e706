"""
=============================================================================
DEVELOPMENT EXTENSIONS (-x)
=============================================================================

A post-processing hook that gets the static handler's response and may
replace it with something friendlier for local development. With the flag
off it returns the response untouched.

    ┌──────────────────────────────────┬──────────────────────────────────┐
    │ handler said                     │ extensions answer                │
    ├──────────────────────────────────┼──────────────────────────────────┤
    │ 404 for /dir/ (no index.html)    │ 200 directory listing            │
    │ 500 for /dir  (is a directory)   │ 302 Location: /dir/              │
    │ 404 for /about (no extension)    │ 200 with the bytes of about.html │
    │ 200 for /notes.md                │ 200 Markdown rendered as HTML    │
    │                                  │ (500 if the file is not UTF-8)   │
    │ anything else                    │ unchanged                        │
    └──────────────────────────────────┴──────────────────────────────────┘

The hook works from the original request and recomputes the resolved path
itself; it never trusts anything outside the document root.

=============================================================================
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import quote

from .errors import MarkdownNotUTF8
from .handlers.static import (
    error_response,
    is_within_root,
    open_file,
    resolve_request_path,
    respond_with_file,
)
from .http.mime_types import path_extension
from .http.request import HTTPRequest
from .http.response import HTTPResponse, ResponseBuilder
from .http.status_codes import HTTPStatus
from .rendering import render_html, render_listing, render_markdown


logger = logging.getLogger(__name__)

MARKDOWN_EXTENSION = "md"


async def map_response(
    request: HTTPRequest,
    response: HTTPResponse,
    root_dir: Path,
    use_extensions: bool,
) -> HTTPResponse:
    """
    Post-process a response from the static handler.

    Args:
        request: The original request.
        response: What the static handler produced.
        root_dir: Document root.
        use_extensions: The -x flag; False means pass-through.

    Returns:
        The response to send.
    """
    if not use_extensions:
        return response

    path = resolve_request_path(request.raw_path, root_dir)
    if path is None or not is_within_root(path, root_dir):
        return response

    if response.status == HTTPStatus.OK:
        if path_extension(path) == MARKDOWN_EXTENSION:
            return await render_markdown_file(path, response)

    elif response.status == HTTPStatus.NOT_FOUND:
        if request.raw_path.endswith("/"):
            listing = await maybe_list_dir(request.path, path.parent, root_dir)
            if listing is not None:
                return listing
        elif path_extension(path) is None:
            page = await maybe_serve_html(path.with_name(path.name + ".html"))
            if page is not None:
                return page

    elif response.status == HTTPStatus.INTERNAL_SERVER_ERROR:
        if not request.raw_path.endswith("/") and await asyncio.to_thread(path.is_dir):
            return redirect_to_directory(request)

    return response


def display_name(name: str) -> str:
    """A file name fit for an HTML page; undecodable bytes become U+FFFD."""
    return os.fsencode(name).decode("utf-8", "replace")


def redirect_to_directory(request: HTTPRequest) -> HTTPResponse:
    """302 to the same path with a trailing slash, keeping the query."""
    location = request.raw_path + "/"
    if request.query:
        location += "?" + request.query
    logger.debug("Redirecting %s to %s", request.raw_path, location)
    return ResponseBuilder().redirect(location).build()


async def maybe_serve_html(path: Path) -> Optional[HTTPResponse]:
    """The file at path served as HTML, or None if it cannot be opened."""
    try:
        file = await open_file(path)
    except OSError:
        return None
    return await respond_with_file(file, path)


async def render_markdown_file(path: Path, response: HTTPResponse) -> HTTPResponse:
    """
    Replace a served .md file with its HTML rendering.

    The source must be UTF-8; anything else is answered with a 500 page.
    """
    try:
        page = await asyncio.to_thread(render_markdown, display_name(path.name), response.body)
    except MarkdownNotUTF8 as e:
        logger.warning("Cannot render %s: %s", path, e)
        return error_response(e.status)

    return (ResponseBuilder()
        .status(HTTPStatus.OK)
        .html(page)
        .build())


def _scan_dir(directory: Path) -> List[Tuple[str, bool]]:
    with os.scandir(directory) as entries:
        return sorted((entry.name, entry.is_dir()) for entry in entries)


async def maybe_list_dir(
    request_path: str,
    directory: Path,
    root_dir: Path,
) -> Optional[HTTPResponse]:
    """
    HTML listing of directory, or None if it cannot be read.

    Entries are sorted by name; directories get a trailing "/". Links are
    built from the raw name bytes, so every entry links back to its file
    even when the name is not valid UTF-8. A "../" link is offered
    everywhere except at the document root.
    """
    try:
        names = await asyncio.to_thread(_scan_dir, directory)
    except OSError as e:
        logger.debug("Cannot list %s: %s", directory, e)
        return None

    entries = []
    for name, is_dir in names:
        suffix = "/" if is_dir else ""
        entries.append({
            "name": display_name(name) + suffix,
            "href": quote(os.fsencode(name)) + suffix,
        })

    at_root = os.path.normpath(os.path.abspath(directory)) == os.path.normpath(os.path.abspath(root_dir))
    heading = display_name(request_path)
    fragment = render_listing(heading, entries, parent=not at_root)

    return (ResponseBuilder()
        .status(HTTPStatus.OK)
        .html(render_html(f"Index of {heading}", fragment))
        .build())
