"""
=============================================================================
ERROR TAXONOMY AND ERROR PAGES
=============================================================================

Every failure while handling a request is classified exactly once into one
of three kinds. The kind decides which pre-rendered bytes go back to the
client in place of the requested file.

    ┌────────────────┬──────────────────────────────────────────────────────┐
    │  KIND          │  BYTES SENT                                          │
    ├────────────────┼──────────────────────────────────────────────────────┤
    │  READ_FAILED   │  HTTP/1.1 400 BAD REQUEST   (no headers, no body)    │
    │  NOT_FOUND     │  404 status line + Content-Len + __errors__/404.html │
    │  INTERNAL_ERROR│  500 status line + Content-Len + __errors__/500.html │
    └────────────────┴──────────────────────────────────────────────────────┘

No error is retried or escalated: the worker writes these bytes and moves
on to its next connection.

=============================================================================
THE ERROR-PAGE CACHE
=============================================================================

The 404 and 500 pages are read from disk the first time they are needed
and kept for the lifetime of the ErrorPages instance:

    first NOT_FOUND     ──► read 404.html ──► build bytes ──► store
    every later one     ──► return stored bytes (disk is never touched)

Two workers can race on the first lookup. Both build the same bytes; the
first one stored wins and the other's copy is discarded, so every caller
sees one value per kind.

If a page file is missing or unreadable, a minimal inline page is cached in
its place. NOT_FOUND and INTERNAL_ERROR always produce a response.

=============================================================================
"""

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Dict, Union

logger = logging.getLogger(__name__)

BAD_REQUEST_RESPONSE = b"HTTP/1.1 400 BAD REQUEST"


class ErrorKind(Enum):
    """Why a connection could not be answered with the requested file."""

    READ_FAILED = "read_failed"        # Request unreadable or malformed
    NOT_FOUND = "not_found"            # Target could not be opened
    INTERNAL_ERROR = "internal_error"  # Anything else


class RequestError(Exception):
    """
    Raised by the router when a request cannot be answered with a file.

    Carries the ErrorKind used to pick the error page.
    """

    def __init__(self, kind: ErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind


# Status line, page file name and fallback body for each page-backed kind.
_PAGE_SOURCES = {
    ErrorKind.NOT_FOUND: (
        "HTTP/1.1 404 NOT FOUND",
        "404.html",
        "<html><body><h1>404</h1></body></html>",
    ),
    ErrorKind.INTERNAL_ERROR: (
        "HTTP/1.1 500 Internal Server Error",
        "500.html",
        "<html><body><h1>500</h1></body></html>",
    ),
}


def render_error_response(status_line: str, page: bytes) -> bytes:
    """
    Frame an error page as a complete HTTP response.

    The length header is written as "Content-Len", matching the format the
    error pages have always been served with.
    """
    head = f"{status_line}\r\nContent-Len: {len(page)}\r\n\r\n"
    return head.encode("utf-8") + page


class ErrorPages:
    """
    Write-once cache of error responses, one entry per ErrorKind.

    Usage:
        pages = ErrorPages("website/__errors__")
        conn.write(pages.get_response_bytes(ErrorKind.NOT_FOUND))
    """

    def __init__(self, error_dir: Union[str, Path]):
        """
        Args:
            error_dir: Directory holding 404.html and 500.html.
        """
        self.error_dir = Path(error_dir)
        self._cache: Dict[ErrorKind, bytes] = {}
        self._lock = threading.Lock()  # Guards the store, not the disk read

    def get_response_bytes(self, kind: ErrorKind) -> bytes:
        """
        Get the full response bytes for an error kind.

        READ_FAILED is a fixed literal. Page-backed kinds are built on first
        use and served from the cache afterwards.
        """
        if kind is ErrorKind.READ_FAILED:
            return BAD_REQUEST_RESPONSE

        cached = self._cache.get(kind)
        if cached is not None:
            return cached

        rendered = self._render(kind)

        with self._lock:
            # First writer wins; a racing caller gets the stored value
            return self._cache.setdefault(kind, rendered)

    def is_cached(self, kind: ErrorKind) -> bool:
        return kind in self._cache

    def _render(self, kind: ErrorKind) -> bytes:
        status_line, file_name, fallback = _PAGE_SOURCES[kind]
        page_path = self.error_dir / file_name

        try:
            page = page_path.read_bytes()
        except OSError as e:
            logger.warning(f"Error page {page_path} unavailable ({e}), using built-in page")
            page = fallback.encode("utf-8")

        return render_error_response(status_line, page)
