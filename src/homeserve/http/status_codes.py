"""
=============================================================================
PROTOCOLS, STATUS CODES AND HEADER NAMES
=============================================================================

The closed vocabularies of the response model. The server only ever emits
three statuses and two headers, so each is a small Enum rather than an open
string.

    ┌────────────────────────────────────────────────────────────────────┐
    │                      WHAT A RESPONSE CAN SAY                       │
    ├──────────────┬─────────────────────────────────────────────────────┤
    │  PROTOCOL    │ HTTP/0.9  HTTP/1.0  HTTP/1.1 (supported)  HTTP/2.0  │
    ├──────────────┼─────────────────────────────────────────────────────┤
    │  STATUS      │ 200 OK                                             │
    │              │ 404 Not Found                                      │
    │              │ 500 Internal Server Error                          │
    ├──────────────┼─────────────────────────────────────────────────────┤
    │  HEADERS     │ Content-Type                                       │
    │              │ Content-Length                                     │
    └──────────────┴─────────────────────────────────────────────────────┘

Status codes keep the IntEnum trick so `HTTPStatus.OK == 200` holds:

    >>> HTTPStatus.NOT_FOUND.status_line
    '404 Not Found'

=============================================================================
"""

from enum import Enum, IntEnum


class HTTPProtocol(Enum):
    """HTTP protocol versions a response can be written in."""

    HTTP_0_9 = "HTTP/0.9"
    HTTP_1_0 = "HTTP/1.0"
    HTTP_1_1 = "HTTP/1.1"
    HTTP_2_0 = "HTTP/2.0"

    @property
    def is_supported(self) -> bool:
        """Only HTTP/1.1 framing is actually implemented."""
        return self is HTTPProtocol.HTTP_1_1


class HTTPStatus(IntEnum):
    """
    Response status codes.

    Each member has a `.phrase` (reason phrase) and a `.status_line`
    ("200 OK") used when serializing the first line of a response.
    """

    OK = 200
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        return _STATUS_PHRASES[self]

    @property
    def status_line(self) -> str:
        return f"{self.value} {self.phrase}"


class HeaderName(Enum):
    """
    Response header names.

    Declaration order is the emission order used by
    HTTPResponse.serialize_header(); it does not depend on the order in
    which options were set.
    """

    CONTENT_TYPE = "Content-Type"
    CONTENT_LENGTH = "Content-Length"


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
