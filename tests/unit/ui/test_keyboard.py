"""
Unit tests for keyboard input handling functionality.

This module tests the KeyboardHandler class and KeyCode enum, focusing on:
- Key sequence parsing
- Escape sequence reading
- Callback registration and execution
- Terminal setup and input loop functionality
"""

import os
import termios
from unittest.mock import AsyncMock, Mock, patch

import pytest

from calpick.ui.keyboard import KeyboardHandler, KeyCode, parse_key_sequence
from calpick.utils.exceptions import TerminalError


@pytest.fixture
def pipe_fds():
    """Pipe standing in for terminal input."""
    read_fd, write_fd = os.pipe()
    yield read_fd, write_fd
    for fd in (read_fd, write_fd):
        try:
            os.close(fd)
        except OSError:
            pass


class TestKeySequenceParsing:
    """Test key sequence parsing functionality."""

    def test_parse_empty(self) -> None:
        """Test parsing empty key data."""
        assert parse_key_sequence("") == KeyCode.UNKNOWN

    @pytest.mark.parametrize(
        "key_data,expected",
        [
            ("\x1b[A", KeyCode.UP_ARROW),
            ("\x1b[B", KeyCode.DOWN_ARROW),
            ("\x1b[C", KeyCode.RIGHT_ARROW),
            ("\x1b[D", KeyCode.LEFT_ARROW),
            ("\x1bOA", KeyCode.UP_ARROW),
            ("\x1b[H", KeyCode.HOME),
            ("\x1b[F", KeyCode.END),
            ("\x1bOH", KeyCode.HOME),
            ("\x1b[1~", KeyCode.HOME),
            ("\x1b[4~", KeyCode.END),
            ("\x1b[5~", KeyCode.PAGE_UP),
            ("\x1b[6~", KeyCode.PAGE_DOWN),
            ("\x1b[Z", KeyCode.UNKNOWN),
        ],
    )
    def test_parse_escape_sequences(self, key_data: str, expected: KeyCode) -> None:
        """Test parsing of CSI and SS3 escape sequences."""
        assert parse_key_sequence(key_data) == expected

    @pytest.mark.parametrize(
        "key_data,expected",
        [
            ("\x1b", KeyCode.ESCAPE),
            ("\r", KeyCode.ENTER),
            ("\n", KeyCode.ENTER),
            ("\t", KeyCode.TAB),
            ("\x7f", KeyCode.BACKSPACE),
            ("\x08", KeyCode.BACKSPACE),
            ("\x03", KeyCode.CTRL_C),
            ("\x01", KeyCode.UNKNOWN),
        ],
    )
    def test_parse_control_characters(self, key_data: str, expected: KeyCode) -> None:
        """Test parsing of single control characters."""
        assert parse_key_sequence(key_data) == expected

    @pytest.mark.parametrize("key_data", ["a", "Q", "7", ".", " ", "é"])
    def test_parse_printable_characters(self, key_data: str) -> None:
        """Test that printable characters are reported as CHARACTER."""
        assert parse_key_sequence(key_data) == KeyCode.CHARACTER

    def test_parse_unknown_multi_character(self) -> None:
        """Test that other multi-character data is unknown."""
        assert parse_key_sequence("ab") == KeyCode.UNKNOWN


class TestKeyboardHandlerInitialization:
    """Test KeyboardHandler initialization."""

    def test_init_default_state(self) -> None:
        """Test that KeyboardHandler initializes with expected default state."""
        handler = KeyboardHandler()

        assert handler.is_running is False
        assert handler._key_callbacks == {}
        assert handler._char_callback is None
        assert handler._raw_key_callback is None

    def test_input_fd_defaults_to_stdin(self) -> None:
        """Test that the input descriptor defaults to standard input."""
        with patch("calpick.ui.keyboard.sys.stdin") as mock_stdin:
            mock_stdin.fileno.return_value = 42
            assert KeyboardHandler().input_fd == 42

    def test_input_fd_explicit(self) -> None:
        """Test an explicit input descriptor."""
        assert KeyboardHandler(7).input_fd == 7


class TestTerminalSetup:
    """Test raw mode setup and restore."""

    def test_setup_requires_terminal(self, pipe_fds) -> None:
        """Test that non-terminal input is rejected."""
        handler = KeyboardHandler(pipe_fds[0])

        with pytest.raises(TerminalError):
            handler._setup_terminal()

    @patch("calpick.ui.keyboard.os.isatty", return_value=True)
    @patch("calpick.ui.keyboard.termios.tcsetattr")
    @patch("calpick.ui.keyboard.termios.tcgetattr")
    def test_setup_and_restore(
        self, mock_getattr: Mock, mock_setattr: Mock, _mock_isatty: Mock
    ) -> None:
        """Test that settings are saved, switched to raw mode and restored."""
        mock_getattr.side_effect = lambda fd: [0, 0, 0, 0xFFFF, 0, 0, [0] * 32]
        handler = KeyboardHandler(3)

        handler._setup_terminal()

        new_settings = mock_setattr.call_args[0][2]
        assert new_settings[3] & (termios.ICANON | termios.ECHO | termios.ISIG) == 0
        assert new_settings[6][termios.VMIN] == 0
        assert new_settings[6][termios.VTIME] == 1
        assert handler._old_settings is not None

        handler._restore_terminal()

        assert mock_setattr.call_count == 2
        assert mock_setattr.call_args[0][2][3] == 0xFFFF
        assert handler._old_settings is None

    def test_restore_without_setup_is_noop(self) -> None:
        """Test that restoring without saved settings does nothing."""
        with patch("calpick.ui.keyboard.termios") as mock_termios:
            KeyboardHandler(3)._restore_terminal()

            mock_termios.tcsetattr.assert_not_called()


class TestKeyReading:
    """Test reading characters and escape sequences."""

    def test_getch_decodes_utf8(self, pipe_fds) -> None:
        """Test that multi-byte characters are decoded as one key."""
        read_fd, write_fd = pipe_fds
        os.write(write_fd, "é1".encode("utf-8"))
        handler = KeyboardHandler(read_fd)

        assert handler._getch() == "é"
        assert handler._getch() == "1"

    def test_getch_returns_empty_at_end_of_input(self, pipe_fds) -> None:
        """Test that a timed out or closed read gives an empty string."""
        read_fd, write_fd = pipe_fds
        os.close(write_fd)

        assert KeyboardHandler(read_fd)._getch() == ""

    def test_kbhit(self, pipe_fds) -> None:
        """Test input availability check."""
        read_fd, write_fd = pipe_fds
        handler = KeyboardHandler(read_fd)

        assert handler._kbhit() is False
        os.write(write_fd, b"x")
        assert handler._kbhit() is True

    def test_read_plain_key(self) -> None:
        """Test that plain keys are returned as read."""
        handler = KeyboardHandler()
        with patch.object(handler, "_getch", side_effect=["a"]):
            assert handler._read_key_sequence() == "a"

    @pytest.mark.parametrize(
        "chars,expected",
        [
            (["\x1b", "[", "A"], "\x1b[A"),
            (["\x1b", "O", "H"], "\x1bOH"),
            (["\x1b", "[", "5", "~"], "\x1b[5~"),
            (["\x1b", ""], "\x1b"),
        ],
    )
    def test_read_escape_sequence(self, chars, expected) -> None:
        """Test reading complete escape sequences and a lone escape."""
        handler = KeyboardHandler()
        with patch.object(handler, "_getch", side_effect=chars):
            assert handler._read_key_sequence() == expected

    def test_read_escape_followed_by_other_key(self) -> None:
        """Test that ESC followed by a non-sequence character stops reading."""
        handler = KeyboardHandler()
        with patch.object(handler, "_getch", side_effect=["\x1b", "x"]):
            assert handler._read_key_sequence() == "\x1bx"


class TestKeyboardHandlerCallbacks:
    """Test callback registration and dispatch."""

    def test_register_and_unregister(self) -> None:
        """Test registering and unregistering key handlers."""
        handler = KeyboardHandler()
        callback = Mock()

        handler.register_key_handler(KeyCode.ENTER, callback)
        assert handler._key_callbacks[KeyCode.ENTER] is callback

        handler.unregister_key_handler(KeyCode.ENTER)
        assert KeyCode.ENTER not in handler._key_callbacks

    @pytest.mark.asyncio
    async def test_special_key_dispatch(self) -> None:
        """Test that special keys call their callbacks."""
        handler = KeyboardHandler()
        callback = Mock()
        handler.register_key_handler(KeyCode.LEFT_ARROW, callback)

        await handler._handle_key_input("\x1b[D")

        callback.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_async_callback_is_awaited(self) -> None:
        """Test that coroutine callbacks are awaited."""
        handler = KeyboardHandler()
        callback = AsyncMock()
        handler.register_key_handler(KeyCode.ENTER, callback)

        await handler._handle_key_input("\r")

        callback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_character_dispatch(self) -> None:
        """Test that printable characters go to the character handler."""
        handler = KeyboardHandler()
        char_callback = AsyncMock()
        handler.register_char_handler(char_callback)

        await handler._handle_key_input("m")

        char_callback.assert_awaited_once_with("m")

    @pytest.mark.asyncio
    async def test_raw_callback_sees_every_key(self) -> None:
        """Test that the raw handler receives unhandled keys too."""
        handler = KeyboardHandler()
        raw_callback = Mock()
        handler.register_raw_key_handler(raw_callback)

        await handler._handle_key_input("\x1b[Z")

        raw_callback.assert_called_once_with("\x1b[Z")

    @pytest.mark.asyncio
    async def test_callback_errors_propagate(self) -> None:
        """Test that callback exceptions end the input loop."""
        handler = KeyboardHandler()
        handler.register_key_handler(KeyCode.ENTER, Mock(side_effect=RuntimeError("boom")))

        with pytest.raises(RuntimeError):
            await handler._handle_key_input("\r")


class TestInputLoop:
    """Test the listening loop."""

    @pytest.mark.asyncio
    async def test_loop_runs_until_stopped(self) -> None:
        """Test that keys are handled until a callback stops listening."""
        handler = KeyboardHandler()
        handled = []

        def on_enter() -> None:
            handled.append("enter")
            handler.stop_listening()

        handler.register_key_handler(KeyCode.ENTER, on_enter)
        handler.register_char_handler(handled.append)

        with (
            patch.object(handler, "_setup_terminal") as mock_setup,
            patch.object(handler, "_restore_terminal") as mock_restore,
            patch.object(handler, "_kbhit", side_effect=[False, True, True]),
            patch.object(handler, "_read_key_sequence", side_effect=["x", "\r"]),
        ):
            await handler.start_listening()

        assert handled == ["x", "enter"]
        mock_setup.assert_called_once()
        mock_restore.assert_called_once()
        assert handler.is_running is False

    @pytest.mark.asyncio
    async def test_terminal_restored_on_error(self) -> None:
        """Test that raw mode is left when a callback fails."""
        handler = KeyboardHandler()
        handler.register_key_handler(KeyCode.ENTER, Mock(side_effect=RuntimeError("boom")))

        with (
            patch.object(handler, "_setup_terminal"),
            patch.object(handler, "_restore_terminal") as mock_restore,
            patch.object(handler, "_kbhit", return_value=True),
            patch.object(handler, "_read_key_sequence", return_value="\r"),
        ):
            with pytest.raises(RuntimeError):
                await handler.start_listening()

        mock_restore.assert_called_once()
        assert handler.is_running is False

    @pytest.mark.asyncio
    async def test_setup_failure_propagates(self) -> None:
        """Test that a missing terminal is reported before listening."""
        handler = KeyboardHandler()

        with patch.object(handler, "_setup_terminal", side_effect=TerminalError("no tty")):
            with pytest.raises(TerminalError):
                await handler.start_listening()

        assert handler.is_running is False
