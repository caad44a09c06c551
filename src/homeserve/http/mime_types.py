"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps a request target's file extension to the Content-Type it is served
with. The table is deliberately closed: an extension that is not listed is
not served at all (the router reports it as an internal error).

    ┌──────────────┬──────────────────────────┐
    │  EXTENSION   │  CONTENT-TYPE            │
    ├──────────────┼──────────────────────────┤
    │  (none)      │  text/html               │
    │  html        │  text/html               │
    │  css         │  text/css                │
    │  png         │  image/png               │
    │  ico         │  image/x-icon            │
    │  js          │  application/javascript  │
    │  wasm        │  application/wasm        │
    └──────────────┴──────────────────────────┘

Extensions are compared case-sensitively, without the leading dot.

=============================================================================
"""

from typing import Optional

HTML_CONTENT_TYPE = "text/html"

MIME_TYPES = {
    "html": HTML_CONTENT_TYPE,
    "css": "text/css",
    "png": "image/png",
    "ico": "image/x-icon",
    "js": "application/javascript",
    "wasm": "application/wasm",
}


def get_extension(path: str) -> Optional[str]:
    """
    Get the extension of the last component of a URL path.

    A name that only starts with a dot (".hidden") has no extension, and
    neither does an empty final component ("/docs/").

    Examples:
        >>> get_extension("/css/site.css")
        'css'
        >>> get_extension("/about") is None
        True
        >>> get_extension("/archive.tar.gz")
        'gz'
        >>> get_extension("/notes.")
        ''
    """
    name = path.rsplit("/", 1)[-1]
    if name in ("", ".", ".."):
        return None

    stem, dot, extension = name.rpartition(".")

    if not dot or not stem:
        return None

    return extension


def get_content_type(extension: Optional[str]) -> Optional[str]:
    """
    Look up the Content-Type for an extension.

    Returns:
        The MIME type, text/html when there is no extension, or None when
        the extension is not served.
    """
    if extension is None:
        return HTML_CONTENT_TYPE
    return MIME_TYPES.get(extension)
