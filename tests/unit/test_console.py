"""
Unit tests for the stdin command console.
"""

import io
from unittest.mock import Mock

from homeserve.console import CommandConsole


class TestCommandConsole:
    """Tests for CommandConsole."""

    def test_stop_calls_on_stop(self):
        on_stop = Mock()
        console = CommandConsole(on_stop, stream=io.StringIO("stop\n"))

        console.run()

        on_stop.assert_called_once_with()

    def test_stop_ends_reading(self):
        """Test lines after "stop" are not processed."""
        on_stop = Mock()
        console = CommandConsole(on_stop, stream=io.StringIO("stop\nstop\n"))

        console.run()

        assert on_stop.call_count == 1

    def test_config_reload_keeps_running(self, caplog):
        """Test config-reload prints its notice and does not stop anything."""
        on_stop = Mock()
        console = CommandConsole(on_stop, stream=io.StringIO("config-reload\n"))

        with caplog.at_level("INFO", logger="homeserve.console"):
            console.run()

        on_stop.assert_not_called()
        assert "Reloading the config" in caplog.text

    def test_unknown_commands_ignored(self):
        on_stop = Mock()
        console = CommandConsole(on_stop, stream=io.StringIO("help\nquit\n\n  stop  \n"))

        console.run()

        on_stop.assert_called_once_with()

    def test_end_of_input_does_not_stop_server(self):
        on_stop = Mock()
        console = CommandConsole(on_stop, stream=io.StringIO(""))

        console.run()

        on_stop.assert_not_called()

    def test_runs_on_background_thread(self):
        on_stop = Mock()
        console = CommandConsole(on_stop, stream=io.StringIO("stop\n"))

        thread = console.start()
        console.join(timeout=5.0)

        assert thread.daemon
        assert not console.is_alive()
        on_stop.assert_called_once_with()
