"""
=============================================================================
HOMESERVE - A Small Static-File Web Server
=============================================================================

Serves a `website/` directory over one TCP listener with a fixed pool of
worker threads. Built for personal sites and embedded boxes, not as a
general-purpose HTTP implementation.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HOMESERVE ARCHITECTURE                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   config.py      settings.cfg → ServerConfig                         │
    │   bootstrap.py   website/ and default error pages                    │
    │   console.py     stdin commands: stop, config-reload                 │
    │   server.py      WebServer: accept → pool → route → transmit         │
    │                                                                      │
    │   core/          socket server, thread pool, connection              │
    │   http/          response model, MIME table, router, error pages     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Supported: HTTP/1.1 GET-style requests for html, css, png, ico, js and
wasm files. Not supported: keep-alive, range requests, request bodies, TLS,
HTTP/2.

=============================================================================
"""

__version__ = "1.0.0"

from .server import WebServer
from .config import ServerConfig, ConfigError

__all__ = ["WebServer", "ServerConfig", "ConfigError", "__version__"]
