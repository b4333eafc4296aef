"""Unit tests for terminal output."""

import io
import os
from unittest.mock import Mock, patch

from calpick.display.console_renderer import Frame
from calpick.display.terminal import (
    CLEAR_SCREEN,
    ENTER_ALTERNATE_SCREEN,
    LEAVE_ALTERNATE_SCREEN,
    SHOW_CURSOR,
    Terminal,
)


class TestTerminalDrawing:
    """Test frame drawing."""

    def test_draw_writes_lines_and_cursor(self):
        """Test that frames clear the screen and place the cursor (1-based)."""
        stream = io.StringIO()
        terminal = Terminal(stream)

        terminal.draw(Frame(lines=("first", "second"), cursor_row=1, cursor_column=3))

        assert stream.getvalue() == CLEAR_SCREEN + "first\r\nsecond" + "\033[2;4H" + SHOW_CURSOR

    def test_alternate_screen_entered_once(self):
        """Test that entering and leaving are idempotent."""
        stream = io.StringIO()
        terminal = Terminal(stream)

        terminal.enter()
        terminal.enter()
        terminal.leave()
        terminal.leave()

        output = stream.getvalue()
        assert output.count(ENTER_ALTERNATE_SCREEN) == 1
        assert output.count(LEAVE_ALTERNATE_SCREEN) == 1

    def test_context_manager_restores_screen(self):
        """Test that leaving the context restores the screen even on errors."""
        stream = io.StringIO()

        try:
            with Terminal(stream):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert stream.getvalue().endswith(LEAVE_ALTERNATE_SCREEN + SHOW_CURSOR)
        assert not stream.closed

    def test_owned_stream_closed(self):
        """Test that an opened terminal stream is closed."""
        stream = io.StringIO()
        Terminal(stream, owns_stream=True).close()

        assert stream.closed


class TestTerminalOpen:
    """Test opening the controlling terminal."""

    def test_falls_back_to_stderr(self):
        """Test that drawing goes to stderr without a controlling terminal."""
        with patch("builtins.open", side_effect=OSError("No such device")):
            terminal = Terminal.open()

        assert terminal.stream is not None
        assert terminal._owns_stream is False

    def test_opens_controlling_terminal(self):
        """Test that /dev/tty is preferred."""
        tty_stream = Mock()
        with patch("builtins.open", return_value=tty_stream) as mock_open:
            terminal = Terminal.open()

        mock_open.assert_called_once_with("/dev/tty", "r+", encoding="utf-8", buffering=1)
        assert terminal.stream is tty_stream
        assert terminal._owns_stream is True

    def test_fileno_of_owned_stream(self):
        """Test that keys are read from the opened terminal."""
        read_fd, write_fd = os.pipe()
        try:
            with os.fdopen(write_fd, "w") as stream:
                assert Terminal(stream, owns_stream=True).fileno() == write_fd
        finally:
            os.close(read_fd)

    def test_fileno_falls_back_to_stdin(self):
        """Test that keys are read from stdin when drawing on stderr."""
        with patch("calpick.display.terminal.sys.stdin") as mock_stdin:
            mock_stdin.fileno.return_value = 0
            assert Terminal(io.StringIO()).fileno() == 0

    def test_width_fallback(self):
        """Test that streams without a terminal size use the fallback width."""
        with patch(
            "calpick.display.terminal.shutil.get_terminal_size",
            return_value=os.terminal_size((100, 30)),
        ):
            assert Terminal(io.StringIO()).width == 100
