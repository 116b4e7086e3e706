"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

Responses are immutable once built. Handlers construct them through
ResponseBuilder and hand the finished HTTPResponse to the transport, which
serializes it with to_bytes().

    ResponseBuilder()                 HTTPResponse               bytes
      .status(HTTPStatus.OK)   ──►   (frozen dataclass)   ──►   HTTP/1.1 200 OK\r\n
      .header(...)                                              Content-Length: 5\r\n
      .body(b"hello")                                           ...
      .build()                                                  \r\n
                                                                hello

build() is where header values are checked. A value that cannot be put on
the wire (CR/LF, non-latin-1 text) raises ResponseError instead of producing
a corrupt response.

=============================================================================
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, Union

from ..errors import ResponseError
from .status_codes import HTTPStatus


@dataclass(frozen=True)
class HTTPResponse:
    """
    An HTTP response ready to be sent.

    The headers dict belongs to the response; use with_header() to derive a
    modified copy rather than mutating it.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def with_header(self, name: str, value: str) -> "HTTPResponse":
        """Return a copy of this response with one header set."""
        _check_header(name, value)
        headers = dict(self.headers)
        headers[name] = value
        return replace(self, headers=headers)

    def to_bytes(self, server_name: str = "basic-http-server", include_body: bool = True) -> bytes:
        """
        Serialize the response for the socket.

        Content-Length is always present (handlers set it, this fills it in
        if they did not). Date and Server are transport headers added here
        so that handler output stays free of per-call values.

        Args:
            server_name: Value for the Server header.
            include_body: False for HEAD, where headers describe the body
                          that would have been sent.
        """
        response_headers = dict(self.headers)

        if "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))
        if "Date" not in response_headers:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))
        if "Server" not in response_headers:
            response_headers["Server"] = server_name

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("latin-1") + b"\r\n"
        return header_bytes + self.body if include_body else header_bytes


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .html(page)
            .build())

    Every method except build() returns self.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: Union[str, int]) -> "ResponseBuilder":
        """Set a single header. Integers (Content-Length) are stringified."""
        self._headers[name] = str(value)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def content_length(self, length: int) -> "ResponseBuilder":
        return self.header("Content-Length", length)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the raw body. Strings are encoded as UTF-8."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def html(self, html: str) -> "ResponseBuilder":
        """
        HTML body with its Content-Type and Content-Length.

        Error pages and directory listings go through here, so all of them
        share one Content-Type.
        """
        self._body = html.encode("utf-8")
        self._headers["Content-Type"] = "text/html; charset=utf-8"
        self._headers["Content-Length"] = str(len(self._body))
        return self

    def redirect(self, location: str) -> "ResponseBuilder":
        """302 Found to location, with an empty body."""
        self._status = HTTPStatus.FOUND
        self._headers["Location"] = location
        self._headers["Content-Length"] = "0"
        self._body = b""
        return self

    def build(self) -> HTTPResponse:
        """
        Build the response.

        Raises:
            ResponseError: A header name or value is not valid on the wire.
        """
        for name, value in self._headers.items():
            _check_header(name, value)
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )


def _check_header(name: str, value: str) -> None:
    if not name or any(c in name for c in " \t\r\n:"):
        raise ResponseError(f"Invalid header name: {name!r}")
    if "\r" in value or "\n" in value:
        raise ResponseError(f"Invalid value for header {name}: {value!r}")
    try:
        value.encode("latin-1")
    except UnicodeEncodeError as e:
        raise ResponseError(f"Header {name} is not latin-1 encodable") from e


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Example: Thu, 01 Jan 2026 12:00:00 GMT
    HTTP dates are always GMT; pass an aware UTC datetime.
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
