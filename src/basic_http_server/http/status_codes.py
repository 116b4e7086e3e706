"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The subset of RFC 7231 status codes this server can produce, with their
reason phrases.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK              - File found and read                │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  3xx   │ 302 Found           - Directory without trailing slash   │
    │        │                       (development extensions only)      │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 400 Bad Request     - Unparseable request                │
    │        │ 404 Not Found       - No such file under the root        │
    │        │ 408 Request Timeout - Client too slow to send headers    │
    │        │ 413 Payload Too Large                                    │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 500 Internal Server Error - Any other I/O failure        │
    │        │ 505 HTTP Version Not Supported                           │
    └────────┴───────────────────────────────────────────────────────────┘

Error pages use "<code> <phrase>" as their title, so the phrase table
below is user-visible.
=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so statuses compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200

    FOUND = 302

    BAD_REQUEST = 400
    NOT_FOUND = 404
    REQUEST_TIMEOUT = 408
    PAYLOAD_TOO_LARGE = 413

    INTERNAL_SERVER_ERROR = 500
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line and error page titles."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def line(self) -> str:
        """
        Code and phrase together, e.g. "404 Not Found".

        Used as the title of rendered error pages.
        """
        return f"{int(self)} {self.phrase}"

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx. Used to pick the access log level."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.FOUND: "Found",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
