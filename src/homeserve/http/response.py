"""
=============================================================================
HTTP RESPONSE MODEL
=============================================================================

A response is four things: the protocol it is written in, a status, a
small set of header options, and a payload of raw bytes.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\\r\\n               ← Status line
    Content-Type: text/css\\r\\n        ← One line per option
    Content-Length: 27\\r\\n
    \\r\\n                              ← Blank line ends the header block
    body { color: rebeccapurple; }    ← Payload bytes, sent as-is

The header block always ends in exactly one blank line, including when no
options are set ("HTTP/1.1 200 OK\\r\\n\\r\\n").

=============================================================================
CONTENT-LENGTH IS THE CALLER'S JOB
=============================================================================

set_payload() does not touch Content-Length. Every call site that sets a
payload sets the length next to it:

    response.set_option(HeaderName.CONTENT_LENGTH, str(len(data)))
    response.set_payload(data)

=============================================================================
"""

import logging
from typing import Dict, Protocol

from .status_codes import HTTPProtocol, HTTPStatus, HeaderName

logger = logging.getLogger(__name__)

SEPARATOR = "\r\n"


class ByteSink(Protocol):
    """Anything bytes can be written to (a Connection, io.BytesIO, ...)."""

    def write(self, data: bytes) -> object:
        ...


class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Created per request, mutated only by the worker that owns it, and
    discarded after transmit().

        response = HTTPResponse()
        response.set_option(HeaderName.CONTENT_TYPE, "text/html")
        response.set_option(HeaderName.CONTENT_LENGTH, str(len(page)))
        response.set_payload(page)
        response.transmit(conn)
    """

    def __init__(self, protocol: HTTPProtocol = HTTPProtocol.HTTP_1_1):
        """
        Initialize an empty 200 response.

        Args:
            protocol: Protocol written in the status line. Anything other
                      than HTTP/1.1 is allowed but logged as a warning,
                      since only HTTP/1.1 framing is implemented.
        """
        if not protocol.is_supported:
            logger.warning(
                f'Using the "{protocol.value}" HTTP protocol, which is not '
                f"directly supported. Only proceed if you know what you are doing!"
            )
        self.protocol = protocol
        self.status = HTTPStatus.OK
        self.options: Dict[HeaderName, str] = {}
        self.payload = b""

    def __repr__(self) -> str:
        return (
            f"HTTPResponse(protocol={self.protocol.value!r}, "
            f"status={self.status.status_line!r}, payload={len(self.payload)} bytes)"
        )

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 404 Not Found"."""
        return f"{self.protocol.value} {self.status.status_line}"

    def set_status(self, status: HTTPStatus) -> None:
        self.status = status

    def set_option(self, name: HeaderName, value: str) -> None:
        """Set a header option, replacing any previous value for `name`."""
        self.options[name] = value

    def set_payload(self, payload: bytes) -> None:
        """Replace the payload. Content-Length is left to the caller."""
        self.payload = bytes(payload)

    def serialize_header(self) -> bytes:
        """
        Serialize the status line and header block.

        Options are emitted in HeaderName declaration order.

        Returns:
            Header bytes ending in b"\\r\\n\\r\\n".
        """
        lines = [self.status_line]

        for name in HeaderName:
            if name in self.options:
                lines.append(f"{name.value}: {self.options[name]}")

        # Empty line separates headers from body
        lines.append("")

        return (SEPARATOR.join(lines) + SEPARATOR).encode("utf-8")

    def to_bytes(self) -> bytes:
        """Header block followed by the payload."""
        return self.serialize_header() + self.payload

    def transmit(self, sink: ByteSink) -> None:
        """
        Write the header block and payload to `sink`.

        Delivery is best-effort: a failed write is logged and dropped,
        never retried and never raised.
        """
        try:
            sink.write(self.serialize_header())
            sink.write(self.payload)
        except OSError as e:
            logger.debug(f"Transmit failed: {e}")
