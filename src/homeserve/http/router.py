"""
=============================================================================
REQUEST ROUTER
=============================================================================

Turns the raw byte stream of one HTTP request into either a ready-to-send
HTTPResponse or a RequestError carrying an ErrorKind.

=============================================================================
ROUTING FLOW
=============================================================================

    GET /css/site.css HTTP/1.1\\r\\n     ┐
    Host: example.com\\r\\n              │ 1. read lines up to the blank line
    \\r\\n                               ┘    (headers are read, then ignored)
            │
            ▼
    "/css/site.css"                     2. second token of the request line
            │
            ▼
    extension "css" → text/css          3. extension table (mime_types)
            │
            ▼
    website/css/site.css                4. resolve under the document root
            │
            ▼
    200 + Content-Type + Content-Length 5. whole file read into the payload

Targets without an extension, or with an html extension, are pages and
always get ".html" appended:

    /              → website/<home_name>.html
    /about         → website/about.html
    /about.html    → website/about.html.html

=============================================================================
HOW FAILURES ARE CLASSIFIED
=============================================================================

    unreadable stream, no request line, no target  → READ_FAILED
    extension not in the table                     → INTERNAL_ERROR
    target escapes the document root               → NOT_FOUND
    file cannot be opened                          → NOT_FOUND
    file opened but the read fails                 → INTERNAL_ERROR

An unsupported extension is treated as a server-side condition, not a
client error, so it never maps to 404.

=============================================================================
"""

import logging
from pathlib import Path
from typing import BinaryIO, List, Tuple, Union

from .errors import ErrorKind, RequestError
from .mime_types import get_content_type, get_extension
from .response import HTTPResponse
from .status_codes import HTTPProtocol, HeaderName

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINE_SIZE = 64 * 1024


class RequestRouter:
    """
    Maps request targets to files under a document root.

    The router holds no per-request state and is shared by every worker.

    Usage:
        router = RequestRouter("website", home_name="home")
        response = router.route(conn.reader)   # may raise RequestError
    """

    def __init__(
        self,
        document_root: Union[str, Path],
        home_name: str = "home",
        max_line_size: int = DEFAULT_MAX_LINE_SIZE,
    ):
        """
        Args:
            document_root: Directory that request targets resolve against.
            home_name: Page stem served for "/".
            max_line_size: Longest request or header line accepted, in bytes.
        """
        self.document_root = Path(document_root).resolve()
        self.home_name = home_name
        self.max_line_size = max_line_size

    def route(self, reader: BinaryIO) -> HTTPResponse:
        """
        Read one request from `reader` and build the response for it.

        Args:
            reader: Binary stream positioned at the start of a request.

        Returns:
            A 200 response carrying the file.

        Raises:
            RequestError: With the kind that decides the error page.
        """
        lines = self.read_request_head(reader)
        target = self.parse_target(lines)
        file_path, content_type = self.resolve(target)

        return self.load(file_path, content_type)

    def read_request_head(self, reader: BinaryIO) -> List[str]:
        """
        Read lines until the first empty line or end of stream.

        Line terminators (LF or CRLF) are stripped.
        """
        lines = []

        while True:
            try:
                raw = reader.readline(self.max_line_size + 1)
            except OSError as e:
                raise RequestError(ErrorKind.READ_FAILED, f"Read failed: {e}") from e

            if not raw:
                break  # End of stream

            if len(raw) > self.max_line_size:
                raise RequestError(ErrorKind.READ_FAILED, "Request line too long")

            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise RequestError(ErrorKind.READ_FAILED, "Request is not valid UTF-8") from e

            line = line.rstrip("\n").rstrip("\r")
            if not line:
                break  # Blank line ends the header block

            lines.append(line)

        return lines

    def parse_target(self, lines: List[str]) -> str:
        """
        Extract the request target from the request line.

        Example: "GET /index.html HTTP/1.1" → "/index.html"
        """
        if not lines:
            raise RequestError(ErrorKind.READ_FAILED, "Empty request")

        parts = lines[0].split()
        if len(parts) < 2:
            raise RequestError(ErrorKind.READ_FAILED, f"Malformed request line: {lines[0]!r}")

        return parts[1]

    def resolve(self, target: str) -> Tuple[Path, str]:
        """
        Map a request target to a file path and its Content-Type.

        Returns:
            (absolute file path, content type)
        """
        extension = get_extension(target)
        content_type = get_content_type(extension)

        if content_type is None:
            raise RequestError(ErrorKind.INTERNAL_ERROR, f"Unsupported extension: {extension!r}")

        if extension is None or extension == "html":
            if target == "/":
                target = f"/{self.home_name}"
            target += ".html"

        # ─────────────────────────────────────────────────────────────────
        # CONTAINMENT CHECK
        # ─────────────────────────────────────────────────────────────────
        # resolve() folds ".." segments and symlinks; the result must still
        # sit inside the document root.
        file_path = (self.document_root / target.lstrip("/")).resolve()

        try:
            file_path.relative_to(self.document_root)
        except ValueError:
            logger.warning(f"Path traversal attempt: {target}")
            raise RequestError(ErrorKind.NOT_FOUND, f"Outside document root: {target}")

        return file_path, content_type

    def load(self, file_path: Path, content_type: str) -> HTTPResponse:
        """Read the whole file and wrap it in a 200 response."""
        try:
            file = open(file_path, "rb")
        except OSError as e:
            raise RequestError(ErrorKind.NOT_FOUND, f"Cannot open {file_path}: {e}") from e

        with file:
            try:
                content = file.read()
            except OSError as e:
                raise RequestError(ErrorKind.INTERNAL_ERROR, f"Cannot read {file_path}: {e}") from e

        response = HTTPResponse(HTTPProtocol.HTTP_1_1)
        response.set_option(HeaderName.CONTENT_TYPE, content_type)
        response.set_option(HeaderName.CONTENT_LENGTH, str(len(content)))
        response.set_payload(content)

        logger.debug(f"Serving {file_path} ({len(content)} bytes, {content_type})")
        return response
