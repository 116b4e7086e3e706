"""
Request handlers.

    static.py   StaticFileHandler - files under the document root
"""

from .static import (
    StaticFileHandler,
    ResponseHook,
    resolve_request_path,
    error_response,
)

__all__ = [
    "StaticFileHandler",
    "ResponseHook",
    "resolve_request_path",
    "error_response",
]
