"""
Line-oriented control console on stdin.

    stop            stop the web server
    config-reload   print the reload notice (the loaded config is kept)

Anything else is ignored. End of input closes the console but leaves the
server running, so the server can be started with stdin redirected.
"""

import logging
import sys
import threading
from typing import Callable, Optional, TextIO

logger = logging.getLogger(__name__)


class CommandConsole:
    """
    Reads commands from a text stream on a daemon thread.

    Usage:
        console = CommandConsole(on_stop=server.shutdown)
        console.start()
    """

    def __init__(self, on_stop: Callable[[], None], stream: Optional[TextIO] = None):
        """
        Args:
            on_stop: Called on the console thread when "stop" is read.
            stream: Command source; defaults to sys.stdin.
        """
        self.on_stop = on_stop
        self.stream = stream if stream is not None else sys.stdin
        self._thread: Optional[threading.Thread] = None

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(target=self.run, name="Console", daemon=True)
        self._thread.start()
        return self._thread

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def join(self, timeout: Optional[float] = None):
        if self._thread is not None:
            self._thread.join(timeout)

    def run(self):
        """Process commands until "stop" or end of input."""
        for line in self.stream:
            if not self.handle(line.strip()):
                return

        logger.debug("Console input closed")

    def handle(self, command: str) -> bool:
        """
        Execute one command.

        Returns:
            False once the console should stop reading.
        """
        if command == "stop":
            logger.info("Stopping the web server...")
            self.on_stop()
            return False

        if command == "config-reload":
            # TODO: re-read home_name from settings.cfg and hand it to the router
            logger.info("Reloading the config...")
            logger.info(
                "Beware that only changeable values will change, such as the location "
                "of the website. Static values will not, like the ip and port. To "
                "change those settings, restart the server."
            )

        return True
