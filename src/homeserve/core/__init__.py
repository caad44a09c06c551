"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking and concurrency plumbing underneath the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  SOCKET SERVER    one thread: bind, listen, accept, hand off        │
    └──────────────────────────────┬──────────────────────────────────────┘
                                   │ submit(process, conn)
                                   ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  THREAD POOL      N workers, unbounded queue                        │
    └──────────────────────────────┬──────────────────────────────────────┘
                                   │ worker runs the task
                                   ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  CONNECTION       reader for the request, write/close for the reply │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer
from .thread_pool import ThreadPool

__all__ = [
    "Connection",
    "ConnectionState",
    "SocketServer",
    "ThreadPool",
]
