"""
=============================================================================
WEB SERVER
=============================================================================

Glues the pieces together:

    ┌──────────────┐  accept   ┌──────────────┐  submit   ┌──────────────┐
    │ SocketServer │ ────────► │  WebServer   │ ────────► │  ThreadPool  │
    │ (1 thread)   │           │ _handle_conn │           │ (N workers)  │
    └──────────────┘           └──────────────┘           └──────┬───────┘
                                                                 │
                                          _process_connection(conn)
                                                                 │
                             ┌───────────────────────────────────┴──────┐
                             │ RequestRouter.route(conn.reader)         │
                             │   ├─ HTTPResponse  → response.transmit() │
                             │   └─ RequestError  → error page bytes    │
                             │ flush, close                             │
                             └──────────────────────────────────────────┘

=============================================================================
INITIALIZATION PHASE
=============================================================================

Everything shared between workers is built once in __init__ and handed to
the components that need it:

    config       ServerConfig, validated, never mutated afterwards
    router       RequestRouter(document_root, home_name)
    error_pages  ErrorPages(<document_root>/__errors__), write-once cache

Workers share nothing else.

=============================================================================
"""

import logging
from typing import Optional

from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool
from .http import ErrorKind, ErrorPages, RequestError, RequestRouter

logger = logging.getLogger(__name__)

_ERROR_STATUS = {
    ErrorKind.READ_FAILED: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL_ERROR: 500,
}


class WebServer:
    """
    Static-file web server: one listener, a fixed pool of workers.

    Usage:
        config = ServerConfig.from_file("settings.cfg")
        server = WebServer(config)
        server.run()          # Blocks until server.shutdown()
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        error_pages: Optional[ErrorPages] = None,
    ):
        """
        Args:
            config: Server configuration. Uses defaults if not provided.
            error_pages: Error-page cache; built from the config if omitted.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self.router = RequestRouter(self.config.document_root, self.config.home_name)
        self.error_pages = error_pages or ErrorPages(self.config.error_dir)

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(num_workers=self.config.threads)

    @property
    def address(self):
        """The bound (ip, port)."""
        return self._socket_server.address

    @property
    def thread_pool(self) -> ThreadPool:
        return self._thread_pool

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def bind(self):
        """
        Bind the listener without starting to accept.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket_server.bind()

    def run(self):
        """
        Start the workers and the accept loop (blocking).

        Returns after shutdown() is called. In-flight requests are not
        waited on.
        """
        self._thread_pool.start()

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._thread_pool.shutdown(wait=False)
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. Safe to call from any thread."""
        self._socket_server.shutdown()

    def close(self):
        """Release a listener that was bound but never run."""
        self._socket_server.close()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Wait until the listener is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Queue a connection for a worker (runs on the accept thread).

        The pool queue is unbounded, so this never blocks and never rejects.
        """
        self._thread_pool.submit(self._process_connection, args=(conn,))

    def _process_connection(self, conn: Connection):
        """
        Handle one connection from request to close (runs in a worker).

        Exactly one request is read and at most one response written.
        """
        with conn:  # Context manager ensures connection is closed
            try:
                response = self.router.route(conn.reader)
            except RequestError as e:
                logger.debug(f"[{conn.id}] {e.kind.value}: {e}")
                self._send_error(conn, e.kind)
            except Exception as e:
                logger.exception(f"[{conn.id}] Unexpected error while routing: {e}")
                self._send_error(conn, ErrorKind.INTERNAL_ERROR)
            else:
                response.transmit(conn)
                logger.info(f"{conn.client_ip} {response.status.value} {len(response.payload)}")

            conn.flush()

    def _send_error(self, conn: Connection, kind: ErrorKind):
        """Write the cached error bytes for `kind`."""
        conn.write(self.error_pages.get_response_bytes(kind))
        logger.info(f"{conn.client_ip} {_ERROR_STATUS[kind]} {kind.value}")
