"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Turns the bytes read from a connection into an HTTPRequest.

    GET /docs/intro.html?lang=en HTTP/1.1\r\n     ← request line
    Host: localhost:4000\r\n                      ← headers
    Connection: keep-alive\r\n
    \r\n                                          ← end of head
    [body, Content-Length bytes]

The transport reads the head first (up to the blank line), parses it with
RequestParser.parse_head(), then reads exactly Content-Length more bytes
for the body.

=============================================================================
REQUEST TARGET FORMS (RFC 7230 §5.3)
=============================================================================

    origin-form     /where?q=now          path "/where", query "q=now"
    absolute-form   http://host/where     path "/where"
    asterisk-form   *                     path "*"

Only origin-form and absolute-form produce a path starting with "/". The
static handler answers anything else with 500, so the parser must not
"fix" such targets up.

The query is split off the raw target before anything is decoded. The
request keeps both the raw path ("/a%3Fb.txt", what the static handler
resolves segment by segment) and its decoded form ("/a?b.txt", for logs
and display).

=============================================================================
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional
from urllib.parse import unquote_to_bytes, urlsplit
import os
import re


class HTTPParseError(Exception):
    """
    Raised when the bytes on the wire are not a valid HTTP request.

    Carries the status code the transport should answer with:
        400 Bad Request                 - Malformed request syntax
        413 Payload Too Large           - Body larger than allowed
        505 HTTP Version Not Supported  - Unknown HTTP version
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method:         Request method, any valid token (GET, HEAD, PROPFIND...)
        path:           Percent-decoded path without the query string
        raw_path:       The same path still percent-encoded, as received
        query:          Raw query string without the '?' ("" if absent)
        version:        "HTTP/1.1" or "HTTP/1.0"
        headers:        Header name (lower-case) → value
        body:           Request body bytes
        target:         The request-target exactly as received
        client_address: (ip, port) of the peer, for logging
    """

    method: str
    path: str
    raw_path: str = ""
    query: str = ""
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    target: str = ""
    client_address: tuple = ("", 0)

    @property
    def content_length(self) -> int:
        """Declared body length; 0 when absent."""
        try:
            return int(self.headers.get("content-length", 0))
        except ValueError:
            return 0

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def is_keep_alive(self) -> bool:
        """
        HTTP/1.1 keeps the connection unless "Connection: close".
        HTTP/1.0 closes it unless "Connection: keep-alive".
        """
        connection = self.headers.get("connection", "").lower()
        if self.version == "HTTP/1.1":
            return connection != "close"
        return connection == "keep-alive"


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    Methods are not restricted to a fixed list; any RFC 7230 token is
    accepted and every method is served the same way.
    """

    REQUEST_LINE_PATTERN = re.compile(
        r"^([!#$%&'*+\-.^_`|~0-9A-Za-z]+) ([^ ]+) (HTTP/\d\.\d)$"
    )
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 10 * 1024 * 1024):
        self.max_request_size = max_request_size

    def parse_head(self, head: bytes, client_address: tuple = ("", 0)) -> HTTPRequest:
        """
        Parse the request line and headers.

        Args:
            head: Bytes up to and including the blank line.
            client_address: Peer address, stored on the request.

        Returns:
            An HTTPRequest with an empty body.
        """
        if len(head) > self.max_request_size:
            raise HTTPParseError(f"Request head too large: {len(head)} bytes", status_code=413)

        # latin-1 never fails; header octets outside ASCII survive unchanged
        text = head.decode("latin-1").rstrip("\r\n")
        lines = text.split("\r\n")
        if not lines or not lines[0]:
            raise HTTPParseError("Empty request")

        method, target, version = self._parse_request_line(lines[0])
        raw_path, query = split_target(target)
        headers = self._parse_headers(lines[1:])

        content_length = headers.get("content-length", "0")
        if not content_length.isdigit():
            raise HTTPParseError(f"Invalid Content-Length: {content_length!r}")
        if int(content_length) > self.max_request_size:
            raise HTTPParseError(
                f"Request body too large: {content_length} bytes", status_code=413
            )

        return HTTPRequest(
            method=method,
            path=decode_path(raw_path),
            raw_path=raw_path,
            query=query,
            version=version,
            headers=headers,
            target=target,
            client_address=client_address,
        )

    @staticmethod
    def with_body(request: HTTPRequest, body: bytes) -> HTTPRequest:
        """Copy of a head-only request with its body attached."""
        return replace(request, body=body)

    def _parse_request_line(self, line: str) -> tuple:
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, target, version = match.groups()
        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505,
            )
        return method, target, version

    def _parse_headers(self, lines: list) -> Dict[str, str]:
        """
        Header lines → dict with lower-case names.

        Repeated headers are joined with ", ". Continuation lines (leading
        whitespace) are appended to the previous header. Lines without a
        colon are skipped.
        """
        headers: Dict[str, str] = {}
        current_name: Optional[str] = None

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                if current_name is not None:
                    headers[current_name] += " " + line.strip()
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue

            name = match.group(1).strip().lower()
            value = match.group(2).strip()
            current_name = name

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers


def split_target(target: str) -> tuple:
    """
    Split a request-target into (raw path, raw query).

    Neither part is decoded: the query is cut off first, so an encoded "?"
    ("%3F") inside a file name stays part of the path. Origin-form targets
    are split by hand: urlsplit would read "//a/b" as a network location
    "a" with path "/b".
    """
    if target.startswith("/"):
        path, _, query = target.partition("?")
    elif "://" in target:
        parts = urlsplit(target)
        path, query = parts.path or "/", parts.query
    else:
        path, query = target, ""
    return path, query


def decode_path(raw_path: str) -> str:
    """
    Percent-decode a raw path the way file names are decoded.

    The octets go through os.fsdecode, so a name that is not valid UTF-8
    ("%FF.txt") still maps back to the file it came from:

        >>> decode_path("/caf%C3%A9.txt")
        '/café.txt'
    """
    return os.fsdecode(unquote_to_bytes(raw_path.encode("latin-1")))
