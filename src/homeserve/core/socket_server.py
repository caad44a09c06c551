"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket and the accept loop. It does no parsing and no
I/O on client sockets: each accepted socket is wrapped in a Connection and
handed to a callback, which queues it on the thread pool.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a TCP socket
    2. bind()      Associate it with IP:PORT
    3. listen()    Let the OS queue incoming connections (backlog)
    4. accept()    Wait for a client; returns a NEW socket for it
    5. close()     Release the listening socket on shutdown

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── bound to ip:port
                    └───────────┬───────────┘
                                │ accept()
            ┌───────────────────┼───────────────────┐
            ▼                   ▼                   ▼
       Connection           Connection          Connection
     (→ thread pool)      (→ thread pool)     (→ thread pool)

=============================================================================
INTERRUPTIBLE ACCEPT
=============================================================================

The listening socket has a 1-second timeout, so accept() wakes up once a
second to check whether shutdown() was called from another thread (the
console, a signal handler, a test).

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection

logger = logging.getLogger(__name__)

ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            pool.submit(process, args=(conn,))

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        """
        Initialize the socket server.

        Args:
            config: Server configuration (host, port, backlog, timeout).

        The socket is created in start(), not here.
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the listener is bound, cleared again on cleanup
        self._ready_event = threading.Event()

        # Original signal handlers, restored on cleanup
        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (ip, port); the real port once bound to port 0."""
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create the listening socket with its options set."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # SO_REUSEADDR: rebind right after a restart despite TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # TCP_NODELAY: send small responses without Nagle delay
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)

        return sock

    def _setup_signals(self):
        """
        Install SIGTERM/SIGINT handlers that call shutdown().

        Python only allows this from the main thread; a server started on
        any other thread (tests, embedding) keeps the existing handlers.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def bind(self):
        """
        Create, bind and listen.

        Raises:
            OSError: If the address cannot be bound (in use, no permission).
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Unable to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Start accepting connections. Blocks until shutdown() is called.

        Args:
            connection_handler: Called on the accept thread with each new
                                Connection. It must not block.
        """
        if self._socket is None:
            self.bind()

        self._running = True
        self._setup_signals()

        host, port = self.address
        logger.info(f"Successfully started! Listening on: {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections sequentially and hand each one off.

        A failure on one connection (reset before accept completed, fd
        exhaustion) is logged and skipped; the loop keeps going until
        shutdown() clears the running flag.
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # Check self._running, then accept again
            except OSError as e:
                if not self._running:
                    break
                logger.warning(f"Accept error: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            try:
                conn = Connection(
                    socket=client_socket,
                    address=client_address,
                    timeout=self.config.timeout,
                )
                connection_handler(conn)
            except Exception as e:
                logger.exception(f"Failed to dispatch connection from {client_address[0]}: {e}")
                client_socket.close()

    def shutdown(self):
        """
        Stop the accept loop. Safe to call from any thread, more than once.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Close the listening socket and restore signal handlers."""
        self._restore_signals()
        self.close()

        self._ready_event.clear()
        logger.info("Socket server stopped")

    def close(self):
        """
        Release the listening socket.

        start() does this on its way out; call it directly after a bind()
        that is never followed by start().
        """
        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Wait until the listener is bound and accepting."""
        return self._ready_event.wait(timeout)
