"""
Unit tests for extension parsing and the Content-Type table.
"""

import pytest

from homeserve.http.mime_types import get_content_type, get_extension


class TestGetExtension:
    """Tests for get_extension."""

    @pytest.mark.parametrize("path, expected", [
        ("/index.html", "html"),
        ("/css/site.css", "css"),
        ("/archive.tar.gz", "gz"),
        ("/notes.", ""),
        ("/", None),
        ("/about", None),
        ("/docs/", None),
        ("/.hidden", None),
        ("/dir.d/readme", None),
        ("/..", None),
    ])
    def test_extension(self, path, expected):
        assert get_extension(path) == expected


class TestGetContentType:
    """Tests for get_content_type."""

    def test_no_extension_is_html(self):
        assert get_content_type(None) == "text/html"

    def test_table(self):
        assert get_content_type("html") == "text/html"
        assert get_content_type("css") == "text/css"
        assert get_content_type("png") == "image/png"
        assert get_content_type("ico") == "image/x-icon"
        assert get_content_type("js") == "application/javascript"
        assert get_content_type("wasm") == "application/wasm"

    @pytest.mark.parametrize("extension", ["exe", "jpg", "", "HTML"])
    def test_unlisted_extension(self, extension):
        """Test anything outside the table (including case variants) is unserved."""
        assert get_content_type(extension) is None
