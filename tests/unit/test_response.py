"""
Unit tests for HTTP response building.
"""

from datetime import datetime, timezone

import pytest

from basic_http_server.errors import ResponseError
from basic_http_server.http.response import (
    HTTPResponse,
    ResponseBuilder,
    format_http_date,
)
from basic_http_server.http.status_codes import HTTPStatus


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        response = HTTPResponse(status=HTTPStatus.OK)
        assert response.status_line == "HTTP/1.1 200 OK"

        response = HTTPResponse(status=HTTPStatus.NOT_FOUND)
        assert response.status_line == "HTTP/1.1 404 Not Found"

    def test_to_bytes_includes_headers(self):
        """Test that to_bytes includes all headers."""
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"X-Custom": "value"},
            body=b"test",
        )

        result = response.to_bytes()

        assert result.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"X-Custom: value\r\n" in result
        assert b"Content-Length: 4\r\n" in result
        assert b"Server: basic-http-server\r\n" in result
        assert b"\r\nDate: " in result
        assert result.endswith(b"\r\n\r\ntest")

    def test_to_bytes_keeps_explicit_content_length(self):
        response = HTTPResponse(headers={"Content-Length": "11"}, body=b"hello world")
        assert response.to_bytes().count(b"Content-Length") == 1

    def test_to_bytes_without_body(self):
        """Test HEAD serialization: headers describe the body, body omitted."""
        response = HTTPResponse(body=b"hello world")
        result = response.to_bytes(include_body=False)

        assert b"Content-Length: 11\r\n" in result
        assert result.endswith(b"\r\n\r\n")
        assert b"hello world" not in result

    def test_server_name(self):
        result = HTTPResponse().to_bytes(server_name="test/1.0")
        assert b"Server: test/1.0\r\n" in result

    def test_with_header_returns_copy(self):
        """Test that with_header leaves the original untouched."""
        original = HTTPResponse(headers={"X-One": "1"})
        updated = original.with_header("X-Two", "2")

        assert updated.headers == {"X-One": "1", "X-Two": "2"}
        assert original.headers == {"X-One": "1"}


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status(self):
        """Test setting status code."""
        response = ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()
        assert response.status == HTTPStatus.NOT_FOUND

    def test_defaults(self):
        response = ResponseBuilder().build()

        assert response.status == HTTPStatus.OK
        assert response.headers == {}
        assert response.body == b""

    def test_html_body(self):
        """Test HTML body."""
        html = "<html><body>Grüße</body></html>"
        response = ResponseBuilder().html(html).build()

        assert response.headers["Content-Type"] == "text/html; charset=utf-8"
        assert response.body == html.encode("utf-8")
        assert response.headers["Content-Length"] == str(len(html.encode("utf-8")))

    def test_raw_body_and_headers(self):
        response = (ResponseBuilder()
            .content_type("image/png")
            .content_length(3)
            .body(b"\x89PN")
            .build())

        assert response.headers == {"Content-Type": "image/png", "Content-Length": "3"}
        assert response.body == b"\x89PN"

    def test_redirect(self):
        """Test redirect response."""
        response = ResponseBuilder().redirect("/new-location").build()

        assert response.status == HTTPStatus.FOUND
        assert response.headers["Location"] == "/new-location"
        assert response.headers["Content-Length"] == "0"

    @pytest.mark.parametrize("name,value", [
        ("X-Bad", "a\r\nInjected: yes"),
        ("X-Bad", "line\nbreak"),
        ("X-Bad", "snow ☃"),
        ("Bad Name", "v"),
        ("", "v"),
    ])
    def test_invalid_headers_raise(self, name, value):
        """Test that headers which cannot go on the wire are refused."""
        with pytest.raises(ResponseError):
            ResponseBuilder().header(name, value).build()

    def test_with_header_validates(self):
        with pytest.raises(ResponseError):
            HTTPResponse().with_header("X-Bad", "a\r\nb")


class TestFormatHttpDate:
    """Tests for format_http_date()."""

    def test_format(self):
        dt = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert format_http_date(dt) == "Thu, 01 Jan 2026 12:00:00 GMT"

    def test_zero_padding(self):
        dt = datetime(2026, 3, 5, 7, 8, 9, tzinfo=timezone.utc)
        assert format_http_date(dt) == "Thu, 05 Mar 2026 07:08:09 GMT"
