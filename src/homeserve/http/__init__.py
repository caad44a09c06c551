"""
=============================================================================
HTTP LAYER
=============================================================================

Everything that knows about HTTP bytes, with no sockets or threads:

    status_codes   protocol / status / header-name enums
    response       HTTPResponse: status line, header block, payload
    mime_types     extension → Content-Type table
    errors         ErrorKind, RequestError, cached error pages
    router         request stream → HTTPResponse or RequestError

=============================================================================
"""

from .status_codes import HTTPProtocol, HTTPStatus, HeaderName
from .response import HTTPResponse
from .mime_types import MIME_TYPES, get_content_type, get_extension
from .errors import ErrorKind, ErrorPages, RequestError
from .router import RequestRouter

# Public API - what you get when you do:
# from homeserve.http import *
__all__ = [
    # Vocabulary
    "HTTPProtocol",
    "HTTPStatus",
    "HeaderName",

    # Response model
    "HTTPResponse",

    # MIME types
    "MIME_TYPES",
    "get_content_type",
    "get_extension",

    # Errors
    "ErrorKind",
    "ErrorPages",
    "RequestError",

    # Routing
    "RequestRouter",
]
