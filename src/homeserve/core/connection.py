"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for the worker that handles it.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

There is no keep-alive: a connection is read once, answered at most once,
and closed.

    NEW ──► READING ──► WRITING ──► CLOSED
             │                        ▲
             └── read/parse failure ──┘ (error bytes are still written)

=============================================================================
READING
=============================================================================

TCP delivers a byte stream, not lines. The connection exposes a buffered
binary reader (socket.makefile("rb")) so the router can call readline()
and let the io layer handle partial recv() chunks.

=============================================================================
WRITING
=============================================================================

write() uses sendall() and never raises: a client that hangs up early
just means the rest of the response goes nowhere. The return value says
whether the bytes left the process.

=============================================================================
"""

import socket
import time
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used in logs."""

    NEW = "new"              # Just accepted, nothing read yet
    READING = "reading"      # Reading the request head
    WRITING = "writing"      # Sending response or error bytes
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier for logging.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        timeout: Socket timeout in seconds, or None to block indefinitely.
    """

    # Required parameters
    socket: socket.socket
    address: tuple

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = None

    _reader: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        # Accepted sockets can inherit the listener's accept-polling timeout
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    @property
    def reader(self) -> BinaryIO:
        """Buffered binary reader over the socket, created on first use."""
        if self._reader is None:
            self._reader = self.socket.makefile("rb")
        self.state = ConnectionState.READING
        return self._reader

    def write(self, data: bytes) -> bool:
        """
        Send bytes to the client.

        Returns:
            True if the send succeeded, False if the connection was lost.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def flush(self):
        """
        Flush pending output.

        sendall() hands every byte to the kernel before returning, so this
        is a no-op kept for sinks that buffer.
        """

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_WR) sends FIN so the client sees end-of-response
        before the descriptor is released:

            Server                              Client
               │   FIN ──────────────────────────► │  (shutdown SHUT_WR)
               │   drain buffered bytes, no wait   │
            (socket closed)                  (closes whenever it likes)
        """
        if self.state == ConnectionState.CLOSED:
            return

        if self._reader is not None:
            try:
                self._reader.close()
            except OSError:
                pass

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        # Drain request bytes already buffered so close() does not reset the
        # connection before the client has read the response. Non-blocking:
        # a client that keeps its end open must not hold the worker.
        try:
            self.socket.setblocking(False)
            while self.socket.recv(4096):
                pass
        except OSError:
            pass  # BlockingIOError: nothing left to drain

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
