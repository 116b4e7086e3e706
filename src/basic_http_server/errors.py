"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure this server knows about is a ServerError subclass. Each kind
carries the HTTP status it turns into, so handlers never guess:

    ┌──────────────────────┬────────┬──────────────────────────────────────┐
    │ kind                 │ status │ what happens                         │
    ├──────────────────────┼────────┼──────────────────────────────────────┤
    │ BadRequestPath       │  500   │ error page, no filesystem access     │
    │ ResourceNotFound     │  404   │ error page                           │
    │ FileIOError          │  500   │ error page                           │
    │ ResponseError        │   -    │ propagates to the transport          │
    │ MarkdownNotUTF8      │  500   │ error page (-x Markdown rendering)   │
    │ TemplateError        │   -    │ fatal at startup                     │
    │ ConfigError          │   -    │ fatal at startup                     │
    └──────────────────────┴────────┴──────────────────────────────────────┘

Lower-level exceptions never leak through implicitly. OSError becomes a
ServerError only through from_os_error(), and the original exception is kept
as __cause__ for the logs.

=============================================================================
"""

from .http.status_codes import HTTPStatus


class ServerError(Exception):
    """
    Base class for all errors raised by this package.

    Attributes:
        status: HTTP status the error maps to when it is recovered into a
                response. Kinds that are never recovered keep the 500 default.
    """

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = ""):
        super().__init__(message or self.status.phrase)


class BadRequestPath(ServerError):
    """The request target does not start with '/' (e.g. "*" or empty)."""

    def __init__(self, target: str):
        super().__init__(f"Request path does not start with '/': {target!r}")
        self.target = target


class ResourceNotFound(ServerError):
    """The resolved file does not exist, or lies outside the root."""

    status = HTTPStatus.NOT_FOUND


class FileIOError(ServerError):
    """Any filesystem failure other than not-found."""


class ResponseError(ServerError):
    """An outgoing response could not be constructed (bad header value)."""


class TemplateError(ServerError):
    """The page template failed to load or render."""


class MarkdownNotUTF8(ServerError):
    """A Markdown file (development extensions) is not valid UTF-8."""

    def __init__(self, message: str = "Markdown is not UTF-8"):
        super().__init__(message)


class ConfigError(ServerError):
    """Invalid startup configuration (listen address, root directory...)."""


def from_os_error(error: OSError) -> ServerError:
    """
    Map an OSError from open()/read() to its ServerError kind.

    FileNotFoundError is the only not-found kind. Permission problems,
    directories, ENOTDIR, too many open files and the rest are all
    FileIOError.
    """
    if isinstance(error, FileNotFoundError):
        mapped: ServerError = ResourceNotFound(str(error))
    else:
        mapped = FileIOError(str(error))
    mapped.__cause__ = error
    return mapped


def classify(error: OSError) -> HTTPStatus:
    """HTTP status for a filesystem failure: 404 if not found, else 500."""
    return from_os_error(error).status
