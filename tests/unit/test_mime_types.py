"""
Unit tests for MIME type detection.
"""

from pathlib import Path

import pytest

from basic_http_server.http.mime_types import (
    DEFAULT_MIME_TYPE,
    file_path_mime,
    mime_for,
    path_extension,
)


class TestMimeFor:
    """Tests for mime_for()."""

    @pytest.mark.parametrize("extension,expected", [
        ("html", "text/html"),
        ("css", "text/css"),
        ("js", "text/javascript"),
        ("jpg", "image/jpeg"),
        ("md", "text/markdown;charset=UTF-8"),
        ("png", "image/png"),
        ("svg", "image/svg+xml"),
        ("wasm", "application/wasm"),
    ])
    def test_known_extensions(self, extension, expected):
        assert mime_for(extension) == expected

    def test_unknown_extension(self):
        """Test that unlisted extensions fall back to text/plain."""
        assert mime_for("exe") == DEFAULT_MIME_TYPE
        assert mime_for("jpeg") == "text/plain"

    def test_no_extension(self):
        assert mime_for(None) == "text/plain"

    def test_case_sensitive(self):
        """Test that upper-case extensions are not matched."""
        assert mime_for("HTML") == "text/plain"
        assert mime_for("Png") == "text/plain"


class TestFilePathMime:
    """Tests for path-based lookup."""

    def test_path_extension(self):
        assert path_extension("a/b.tar.gz") == "gz"
        assert path_extension("a/b") is None
        assert path_extension("a/.profile") is None
        assert path_extension(Path("site/index.html")) == "html"

    def test_file_path_mime(self):
        assert file_path_mime(Path("/srv/site/index.html")) == "text/html"
        assert file_path_mime("/srv/site/README") == "text/plain"
        assert file_path_mime("/srv/site/INDEX.HTML") == "text/plain"
