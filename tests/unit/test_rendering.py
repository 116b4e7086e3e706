"""
Unit tests for HTML page rendering.
"""

import pytest

from basic_http_server.errors import MarkdownNotUTF8
from basic_http_server.http.status_codes import HTTPStatus
from basic_http_server.rendering import (
    check_templates,
    render_error_html,
    render_html,
    render_listing,
    render_markdown,
)


class TestRenderHtml:
    """Tests for the page template."""

    def test_title_and_body(self):
        page = render_html("Hello", "<p>world</p>")

        assert page.lstrip().lower().startswith("<!doctype html>")
        assert "<title>Hello</title>" in page
        assert "<p>world</p>" in page

    def test_title_is_escaped(self):
        """Test that the title is text while the body is trusted HTML."""
        page = render_html("<b>x</b>", "<i>y</i>")

        assert "<title>&lt;b&gt;x&lt;/b&gt;</title>" in page
        assert "<i>y</i>" in page

    def test_error_page(self):
        page = render_error_html(HTTPStatus.NOT_FOUND)
        assert "<title>404 Not Found</title>" in page

        page = render_error_html(HTTPStatus.INTERNAL_SERVER_ERROR)
        assert "<title>500 Internal Server Error</title>" in page

    def test_rendering_is_deterministic(self):
        assert render_error_html(HTTPStatus.NOT_FOUND) == render_error_html(HTTPStatus.NOT_FOUND)

    def test_check_templates(self):
        """Test that the bundled templates load and render."""
        check_templates()


class TestRenderListing:
    """Tests for the directory listing fragment."""

    def test_entries_in_order(self):
        fragment = render_listing("/assets/", [
            {"name": "a.png", "href": "a.png"},
            {"name": "sub/", "href": "sub/"},
        ], parent=True)

        assert "Index of /assets/" in fragment
        assert '<a href="../">../</a>' in fragment
        assert fragment.index('href="a.png"') < fragment.index('href="sub/"')

    def test_without_parent(self):
        fragment = render_listing("/", [], parent=False)
        assert "../" not in fragment

    def test_names_are_escaped(self):
        fragment = render_listing("/", [{"name": "<x>.txt", "href": "%3Cx%3E.txt"}], parent=False)

        assert "&lt;x&gt;.txt" in fragment
        assert "<x>.txt" not in fragment


class TestRenderMarkdown:
    """Tests for Markdown pages."""

    def test_renders_into_page(self):
        page = render_markdown("notes.md", "# Grüße\n\n*hi*\n".encode("utf-8"))

        assert "<title>notes.md</title>" in page
        assert "<h1>Grüße</h1>" in page
        assert "<em>hi</em>" in page

    def test_not_utf8(self):
        with pytest.raises(MarkdownNotUTF8) as exc_info:
            render_markdown("latin1.md", b"# Caf\xe9\n")

        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)
