"""
Unit tests for MIME type detection.
"""

from pathlib import Path

import pytest

from tinyhttpd.http.mime_types import MIME_TYPES, DEFAULT_MIME_TYPE, get_mime_type


class TestGetMimeType:
    """Tests for get_mime_type()."""

    @pytest.mark.parametrize("path, expected", [
        ("/index.html", "text/html"),
        ("/css/site.css", "text/css"),
        ("/app.js", "text/javascript"),
        ("/data.json", "application/json"),
        ("/logo.png", "image/png"),
        ("/photo.jpeg", "image/jpeg"),
        ("/doc.pdf", "application/pdf"),
    ])
    def test_known_extensions(self, path: str, expected: str):
        assert get_mime_type(path) == expected

    def test_case_insensitive(self):
        assert get_mime_type("/PAGE.HTML") == "text/html"
        assert get_mime_type("/notes.TxT") == "text/plain"

    def test_last_extension_only(self):
        """Test that .tar.gz resolves on .gz."""
        assert get_mime_type("/backup.tar.gz") == "application/gzip"

    def test_no_dot(self):
        assert get_mime_type("/Makefile") == DEFAULT_MIME_TYPE

    def test_unknown_extension(self):
        assert get_mime_type("/file.unknownext") == DEFAULT_MIME_TYPE

    def test_trailing_dot(self):
        assert get_mime_type("/file.") == DEFAULT_MIME_TYPE

    def test_accepts_path_objects(self):
        assert get_mime_type(Path("/srv/www/index.html")) == "text/html"

    def test_default_is_octet_stream(self):
        assert DEFAULT_MIME_TYPE == "application/octet-stream"


class TestMimeTable:
    """Tests for the shared MIME table."""

    def test_read_only(self):
        with pytest.raises(TypeError):
            MIME_TYPES["html"] = "text/plain"

    def test_keys_are_lowercase_without_dot(self):
        for extension in MIME_TYPES:
            assert extension == extension.lower()
            assert not extension.startswith(".")
