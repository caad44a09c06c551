"""
=============================================================================
HOMESERVE CLI ENTRY POINT
=============================================================================

Run the server with:

    python -m homeserve
    python -m homeserve --config /etc/homeserve/settings.cfg
    python -m homeserve --log-level DEBUG

Startup order:

    1. configure logging
    2. load and validate settings.cfg      ─┐
    3. create website/ and error pages      │ any failure here is fatal:
    4. bind the listener                   ─┘ log, wait for Enter, exit 1
    5. start the stdin console (stop / config-reload)
    6. accept connections until stopped

=============================================================================
"""

import argparse
import logging
import sys
from typing import NoReturn

from . import __version__
from .bootstrap import ensure_site_tree
from .config import DEFAULT_CONFIG_FILE, ConfigError, ServerConfig
from .console import CommandConsole
from .server import WebServer

logger = logging.getLogger("homeserve")


def setup_logging(level_name: str):
    """Configure the root logger."""
    level = getattr(logging, level_name.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("homeserve").setLevel(level)


def finish_wait(code: int, prompt: bool = True) -> NoReturn:
    """
    Exit after the operator acknowledges.

    The prompt is only shown on an interactive terminal, so the server can
    run under a supervisor without hanging on exit.
    """
    if prompt and sys.stdin.isatty():
        print("Press enter to continue...")
        try:
            input()
        except EOFError:
            pass
    sys.exit(code)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="homeserve",
        description="Small static-file web server with a fixed worker pool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Console commands (type while the server runs):
  stop            Stop the web server
  config-reload   Show the reload notice; ip and port need a restart
        """
    )

    parser.add_argument(
        "--config", "-c",
        default=DEFAULT_CONFIG_FILE,
        help=f"Path to the settings file (default: {DEFAULT_CONFIG_FILE})"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"homeserve {__version__}"
    )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    logger.info("Starting web server...")

    # =========================================================================
    # CONFIGURATION
    # =========================================================================
    try:
        config = ServerConfig.from_file(args.config, log_level=args.log_level)
        config.validate()
    except (ConfigError, ValueError) as e:
        logger.error(f"The config cannot be properly parsed: {e}")
        logger.error("Aborting the startup of the web server until the config file can be accessed.")
        finish_wait(1)

    # =========================================================================
    # SITE TREE
    # =========================================================================
    try:
        ensure_site_tree(config.document_root)
    except OSError as e:
        logger.error(f"Unable to prepare {config.document_root}/: {e}")
        finish_wait(1)

    # =========================================================================
    # LISTENER
    # =========================================================================
    server = WebServer(config)

    try:
        server.bind()
    except OSError:
        # SocketServer has already logged the address and the cause
        finish_wait(1)

    console = CommandConsole(on_stop=server.shutdown)
    console.start()

    # Blocks until "stop" or SIGINT/SIGTERM
    server.run()

    # Only prompt when the console is done with stdin
    finish_wait(0, prompt=not console.is_alive())


# This allows running: python -m homeserve
if __name__ == "__main__":
    main()
