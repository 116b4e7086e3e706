"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

    request.py       Raw bytes -> HTTPRequest (request line, headers, body)
    response.py      ResponseBuilder -> HTTPResponse -> raw bytes
    status_codes.py  HTTPStatus enum with reason phrases
    mime_types.py    File extension -> Content-Type

Only the leaf modules are re-exported here. request and response depend on
the package's error types, which in turn depend on HTTPStatus, so they are
imported by their full module path.

=============================================================================
"""

from .status_codes import HTTPStatus
from .mime_types import mime_for, file_path_mime

__all__ = [
    "HTTPStatus",
    "mime_for",
    "file_path_mime",
]
