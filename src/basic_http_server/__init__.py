"""
=============================================================================
BASIC HTTP SERVER
=============================================================================

A small static-content HTTP server for local development. It serves the
files under one directory over HTTP/1.1, renders HTML error pages, and can
optionally list directories, redirect "/dir" to "/dir/", resolve
extension-less paths to ".html" files and render Markdown as HTML (the -x
development extensions).

    basic_http_server/
    ├── config.py           ServerConfig, listen address parsing
    ├── errors.py           error kinds and their HTTP statuses
    ├── rendering.py        jinja2 page template, Markdown pages
    ├── extensions.py       development extensions hook
    ├── server.py           asyncio transport
    ├── http/               request parsing, responses, statuses, MIME types
    ├── handlers/           static file handler
    └── middleware/         pipeline and access logging

    $ basic-http-server ./site -a 127.0.0.1:4000 -x

=============================================================================
"""

__version__ = "0.1.0"

from .config import ServerConfig
from .errors import ServerError
from .server import HTTPServer

__all__ = ["HTTPServer", "ServerConfig", "ServerError", "__version__"]
