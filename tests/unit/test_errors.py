"""
Unit tests for the error taxonomy and error-page cache.
"""

import threading
from pathlib import Path

import pytest

from homeserve.http.errors import (
    BAD_REQUEST_RESPONSE,
    ErrorKind,
    ErrorPages,
    RequestError,
)


@pytest.fixture
def error_dir(tmp_path: Path) -> Path:
    path = tmp_path / "__errors__"
    path.mkdir()
    (path / "404.html").write_bytes(b"<h1>gone</h1>")
    (path / "500.html").write_bytes(b"<h1>broken</h1>")
    return path


class TestRequestError:
    """Tests for RequestError."""

    def test_carries_kind(self):
        """Test the exception exposes its kind."""
        error = RequestError(ErrorKind.NOT_FOUND, "no such file")

        assert error.kind is ErrorKind.NOT_FOUND
        assert str(error) == "no such file"

    def test_default_message(self):
        """Test the kind is the message when none is given."""
        assert str(RequestError(ErrorKind.READ_FAILED)) == "read_failed"


class TestErrorPages:
    """Tests for ErrorPages.get_response_bytes."""

    def test_read_failed_is_bare_status_line(self, error_dir):
        """Test READ_FAILED returns the literal 400 line, no headers, no body."""
        pages = ErrorPages(error_dir)

        assert pages.get_response_bytes(ErrorKind.READ_FAILED) == b"HTTP/1.1 400 BAD REQUEST"
        assert BAD_REQUEST_RESPONSE == b"HTTP/1.1 400 BAD REQUEST"

    def test_not_found_page(self, error_dir):
        """Test NOT_FOUND frames 404.html as a full response."""
        pages = ErrorPages(error_dir)

        assert pages.get_response_bytes(ErrorKind.NOT_FOUND) == (
            b"HTTP/1.1 404 NOT FOUND\r\nContent-Len: 13\r\n\r\n<h1>gone</h1>"
        )

    def test_internal_error_page(self, error_dir):
        """Test INTERNAL_ERROR frames 500.html as a full response."""
        pages = ErrorPages(error_dir)

        assert pages.get_response_bytes(ErrorKind.INTERNAL_ERROR) == (
            b"HTTP/1.1 500 Internal Server Error\r\nContent-Len: 15\r\n\r\n<h1>broken</h1>"
        )

    def test_length_counts_bytes(self, error_dir):
        """Test the length header counts encoded bytes, not characters."""
        page = "<h1>Ø</h1>".encode("utf-8")
        (error_dir / "404.html").write_bytes(page)

        result = ErrorPages(error_dir).get_response_bytes(ErrorKind.NOT_FOUND)

        assert f"Content-Len: {len(page)}\r\n".encode() in result

    def test_page_is_computed_lazily(self, error_dir):
        """Test nothing is cached until a kind is first requested."""
        pages = ErrorPages(error_dir)
        assert not pages.is_cached(ErrorKind.NOT_FOUND)

        pages.get_response_bytes(ErrorKind.NOT_FOUND)

        assert pages.is_cached(ErrorKind.NOT_FOUND)
        assert not pages.is_cached(ErrorKind.INTERNAL_ERROR)

    def test_cached_bytes_survive_file_deletion(self, error_dir):
        """Test later lookups reuse the first bytes without touching disk."""
        pages = ErrorPages(error_dir)
        first = pages.get_response_bytes(ErrorKind.NOT_FOUND)

        (error_dir / "404.html").unlink()

        assert pages.get_response_bytes(ErrorKind.NOT_FOUND) is first

    def test_cached_bytes_ignore_file_changes(self, error_dir):
        """Test editing the page after first use has no effect."""
        pages = ErrorPages(error_dir)
        first = pages.get_response_bytes(ErrorKind.INTERNAL_ERROR)

        (error_dir / "500.html").write_bytes(b"changed")

        assert pages.get_response_bytes(ErrorKind.INTERNAL_ERROR) == first

    @pytest.mark.parametrize("kind, status_line, heading", [
        (ErrorKind.NOT_FOUND, b"HTTP/1.1 404 NOT FOUND", b"<h1>404</h1>"),
        (ErrorKind.INTERNAL_ERROR, b"HTTP/1.1 500 Internal Server Error", b"<h1>500</h1>"),
    ])
    def test_missing_page_uses_fallback(self, tmp_path, kind, status_line, heading):
        """Test a missing page file falls back to a built-in page."""
        pages = ErrorPages(tmp_path / "nowhere")

        result = pages.get_response_bytes(kind)

        assert result.startswith(status_line + b"\r\nContent-Len: ")
        assert result.endswith(heading + b"</body></html>")
        assert pages.is_cached(kind)

    def test_concurrent_first_use_yields_one_value(self, error_dir):
        """Test racing first lookups all observe the same stored bytes."""
        pages = ErrorPages(error_dir)
        barrier = threading.Barrier(8)
        results = []
        lock = threading.Lock()

        def lookup():
            barrier.wait()
            value = pages.get_response_bytes(ErrorKind.NOT_FOUND)
            with lock:
                results.append(value)

        threads = [threading.Thread(target=lookup) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5.0)

        assert len(results) == 8
        assert all(r is results[0] for r in results)
