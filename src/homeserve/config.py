"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web server, loaded once at startup from
`settings.cfg` and treated as read-only afterwards.

=============================================================================
settings.cfg FORMAT
=============================================================================

One `key = value` per line. Blank lines and lines starting with `#` are
skipped; surrounding double quotes on string values are dropped.

    # settings.cfg
    suppress-warnings = false
    ip = "0.0.0.0"
    port = "8080"
    num-threads = 20
    home-name = "home"
    ssl-cert = ""

    ┌─────────────────────┬───────────────────┬─────────────────────────┐
    │  KEY                │  FIELD            │  DEFAULT                │
    ├─────────────────────┼───────────────────┼─────────────────────────┤
    │  ip                 │  host             │  127.0.0.1              │
    │  port               │  port             │  8080                   │
    │  num-threads        │  threads          │  20 (also if invalid)   │
    │  home-name          │  home_name        │  home                   │
    │  ssl-cert           │  ssl_cert         │  "" (not used yet)      │
    │  suppress-warnings  │  suppress_warnings│  false                  │
    └─────────────────────┴───────────────────┴─────────────────────────┘

Unknown keys are ignored. A line that is not exactly `key = value` is
skipped with a warning, unless an EARLIER line set suppress-warnings, so
put it at the top of the file. A suppress-warnings value that is not
"true" or "false" counts as true.

=============================================================================
FAIL-FAST
=============================================================================

A missing config file, a non-numeric port or a failed validate() stops the
server before it binds. Nothing is re-read while the server runs.

=============================================================================
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "settings.cfg"
DEFAULT_THREADS = 20


class ConfigError(Exception):
    """Raised when the configuration file cannot be used."""


@dataclass
class ServerConfig:
    """
    Configuration for the web server.

    Development:
        ServerConfig(host="127.0.0.1", port=8080, log_level="DEBUG")

    From disk:
        config = ServerConfig.from_file("settings.cfg")
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """The port number to listen on (0 lets the OS pick one)."""

    backlog: int = 128
    """Connections the OS queues before accept() picks them up."""

    timeout: Optional[float] = None
    """
    Client socket timeout in seconds.
    None = block indefinitely while reading the request.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL
    # ─────────────────────────────────────────────────────────────────────

    threads: int = DEFAULT_THREADS
    """Number of worker threads; the cap on connections handled at once."""

    # ─────────────────────────────────────────────────────────────────────
    # SITE
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "website"
    """Directory request targets are resolved against."""

    home_name: str = "home"
    """Page served for "/" (home → <document_root>/home.html)."""

    ssl_cert: str = ""
    """Path to a TLS certificate. Parsed and kept, but not used yet."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR)."""

    suppress_warnings: bool = False
    """Silence warnings about malformed lines in settings.cfg."""

    @property
    def error_dir(self) -> Path:
        """Directory holding the 404/500 error pages."""
        return Path(self.document_root) / "__errors__"

    @classmethod
    def from_file(cls, path: Union[str, Path] = DEFAULT_CONFIG_FILE, **overrides) -> "ServerConfig":
        """
        Load configuration from a settings.cfg file.

        Args:
            path: Config file path.
            **overrides: Field values applied on top of the file's values
                         (e.g. document_root for tests).

        Raises:
            ConfigError: If the file cannot be read or the port is invalid.
        """
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Error opening configuration file {path}: {e}") from e

        config = cls()

        for line in text.splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue

            parts = [part.strip() for part in line.split("=")]

            if len(parts) != 2:
                if not config.suppress_warnings:
                    logger.warning(
                        f"Invalid line in {path}: {line}\n"
                        f"Continuing, but this line will be skipped.\n"
                        f'To ignore these warnings add "suppress-warnings = true" '
                        f"at the top of the {path} file."
                    )
                continue

            config._apply(*parts)

        for name, value in overrides.items():
            setattr(config, name, value)

        return config

    def _apply(self, key: str, value: str):
        """Apply one `key = value` pair from the config file."""
        if key == "ip":
            self.host = value.strip('"')

        elif key == "port":
            port = value.strip('"')
            try:
                self.port = int(port)
            except ValueError:
                raise ConfigError(f"Invalid port: {port!r}") from None

        elif key == "num-threads":
            try:
                threads = int(value)
            except ValueError:
                threads = DEFAULT_THREADS
            # Negative counts are unparseable too, not a validation error
            self.threads = threads if threads >= 0 else DEFAULT_THREADS

        elif key == "suppress-warnings":
            self.suppress_warnings = value != "false"

        elif key == "home-name":
            self.home_name = value.strip('"')

        elif key == "ssl-cert":
            self.ssl_cert = value.strip('"')

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.threads < 1:
            raise ValueError(f"threads must be >= 1, got {self.threads}")

        if not self.home_name:
            raise ValueError("home_name must not be empty")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")
