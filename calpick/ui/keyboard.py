"""Keyboard input handling for interactive navigation."""

import asyncio
import codecs
import logging
import os
import select
import sys
import termios
from collections.abc import Awaitable
from enum import Enum
from typing import Any, Callable, Optional, Union

from ..utils.exceptions import TerminalError

logger = logging.getLogger(__name__)

KeyCallback = Union[Callable[[], None], Callable[[], Awaitable[None]]]
CharCallback = Union[Callable[[str], None], Callable[[str], Awaitable[None]]]
RawCallback = Callable[[str], None]

ESCAPE = "\x1b"
MAX_SEQUENCE_LENGTH = 8


class KeyCode(Enum):
    """Key codes for navigation commands."""

    LEFT_ARROW = "left"
    RIGHT_ARROW = "right"
    UP_ARROW = "up"
    DOWN_ARROW = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HOME = "home"
    END = "end"
    TAB = "tab"
    BACKSPACE = "backspace"
    ENTER = "enter"
    ESCAPE = "escape"
    CTRL_C = "ctrl_c"
    CHARACTER = "character"
    UNKNOWN = "unknown"


# Sequences after the "\x1b[" (CSI) or "\x1bO" (SS3) prefix
_ESCAPE_SEQUENCES = {
    "A": KeyCode.UP_ARROW,
    "B": KeyCode.DOWN_ARROW,
    "C": KeyCode.RIGHT_ARROW,
    "D": KeyCode.LEFT_ARROW,
    "H": KeyCode.HOME,
    "F": KeyCode.END,
    "1~": KeyCode.HOME,
    "7~": KeyCode.HOME,
    "4~": KeyCode.END,
    "8~": KeyCode.END,
    "5~": KeyCode.PAGE_UP,
    "6~": KeyCode.PAGE_DOWN,
}

_CONTROL_CHARACTERS = {
    ESCAPE: KeyCode.ESCAPE,
    "\r": KeyCode.ENTER,
    "\n": KeyCode.ENTER,
    "\t": KeyCode.TAB,
    "\x7f": KeyCode.BACKSPACE,
    "\x08": KeyCode.BACKSPACE,
    "\x03": KeyCode.CTRL_C,
}


def parse_key_sequence(key_data: str) -> KeyCode:
    """Parse a raw key sequence into a KeyCode.

    Printable single characters map to KeyCode.CHARACTER; the character itself
    is the raw key data.

    Args:
        key_data: Raw key data as read from the terminal

    Returns:
        Corresponding KeyCode
    """
    if not key_data:
        return KeyCode.UNKNOWN

    if len(key_data) == 1:
        if key_data in _CONTROL_CHARACTERS:
            return _CONTROL_CHARACTERS[key_data]
        if key_data.isprintable():
            return KeyCode.CHARACTER
        return KeyCode.UNKNOWN

    if key_data.startswith(ESCAPE + "[") or key_data.startswith(ESCAPE + "O"):
        return _ESCAPE_SEQUENCES.get(key_data[2:], KeyCode.UNKNOWN)

    return KeyCode.UNKNOWN


class KeyboardHandler:
    """Handles raw keyboard input from a terminal for interactive navigation."""

    def __init__(self, input_fd: Optional[int] = None) -> None:
        """Initialize keyboard handler.

        Args:
            input_fd: File descriptor of the terminal to read, defaults to stdin
        """
        self._input_fd = input_fd
        self._running = False
        self._key_callbacks: dict[KeyCode, KeyCallback] = {}
        self._char_callback: Optional[CharCallback] = None
        self._raw_key_callback: Optional[RawCallback] = None
        self._old_settings: Optional[list[Any]] = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

        logger.debug("Keyboard handler initialized")

    @property
    def input_fd(self) -> int:
        """File descriptor keys are read from."""
        if self._input_fd is None:
            return sys.stdin.fileno()
        return self._input_fd

    def _setup_terminal(self) -> None:
        """Set up the terminal for raw, non-echoing input with a short read timeout.

        Raises:
            TerminalError: If the input is not a terminal
        """
        fd = self.input_fd
        if not os.isatty(fd):
            raise TerminalError("Interactive input requires a terminal")

        try:
            self._old_settings = termios.tcgetattr(fd)

            new_settings = termios.tcgetattr(fd)
            # Ctrl-C arrives as a key instead of SIGINT
            new_settings[3] &= ~(termios.ICANON | termios.ECHO | termios.ISIG)
            new_settings[6][termios.VMIN] = 0  # Don't wait for characters
            new_settings[6][termios.VTIME] = 1  # Wait 0.1 seconds for input

            termios.tcsetattr(fd, termios.TCSAFLUSH, new_settings)
            logger.debug("Terminal set to raw input mode with timeout")
        except termios.error as e:
            raise TerminalError(f"Could not set terminal to raw mode: {e}") from e

    def _restore_terminal(self) -> None:
        """Restore terminal settings saved by _setup_terminal."""
        if self._old_settings is None:
            return
        try:
            termios.tcsetattr(self.input_fd, termios.TCSADRAIN, self._old_settings)
            logger.debug("Terminal settings restored")
        except termios.error as e:
            logger.warning(f"Could not restore terminal settings: {e}")
        finally:
            self._old_settings = None

    def _getch(self) -> str:
        """Read one character, empty string on timeout."""
        while True:
            data = os.read(self.input_fd, 1)
            if not data:
                return ""
            char = self._decoder.decode(data)
            if char:
                return char

    def _kbhit(self) -> bool:
        """Check for available input using select."""
        readable, _, _ = select.select([self.input_fd], [], [], 0)
        return bool(readable)

    def register_key_handler(self, key_code: KeyCode, callback: KeyCallback) -> None:
        """Register a callback for a specific special key.

        Args:
            key_code: Key code to handle
            callback: Function to call when key is pressed
        """
        self._key_callbacks[key_code] = callback
        logger.debug(f"Registered handler for key: {key_code}")

    def register_char_handler(self, callback: CharCallback) -> None:
        """Register a callback receiving printable characters.

        Args:
            callback: Function to call with the typed character
        """
        self._char_callback = callback
        logger.debug("Registered character handler")

    def register_raw_key_handler(self, callback: RawCallback) -> None:
        """Register a callback for raw key input.

        Args:
            callback: Function to call with raw key data
        """
        self._raw_key_callback = callback
        logger.debug("Registered raw key handler")

    def unregister_key_handler(self, key_code: KeyCode) -> None:
        """Unregister a key handler.

        Args:
            key_code: Key code to unregister
        """
        if key_code in self._key_callbacks:
            del self._key_callbacks[key_code]
            logger.debug(f"Unregistered handler for key: {key_code}")

    async def start_listening(self) -> None:
        """Start listening for keyboard input until stop_listening() is called."""
        if self._running:
            logger.warning("Keyboard handler already running")
            return

        self._setup_terminal()
        self._running = True

        logger.debug("Started keyboard input listening")

        try:
            await self._input_loop()
        finally:
            self._restore_terminal()
            self._running = False
            logger.debug("Stopped keyboard input listening")

    def stop_listening(self) -> None:
        """Stop listening for keyboard input."""
        self._running = False
        logger.debug("Keyboard handler stop requested")

    async def _input_loop(self) -> None:
        """Main input loop, handles one key at a time."""
        while self._running:
            if not self._kbhit():
                await asyncio.sleep(0.05)
                continue

            key_data = self._read_key_sequence()
            if key_data:
                await self._handle_key_input(key_data)

    def _read_key_sequence(self) -> str:
        """Read a complete key sequence, handling escape sequences."""
        key_data = self._getch()
        if key_data != ESCAPE:
            return key_data

        sequence = key_data
        # With VTIME=1 _getch() times out when a lone ESC was pressed
        while len(sequence) < MAX_SEQUENCE_LENGTH:
            next_char = self._getch()
            if not next_char:
                break
            sequence += next_char
            # Escape sequences end with a letter or ~, the prefix letter O does not count
            if len(sequence) > 2 and (next_char.isalpha() or next_char == "~"):
                break
            if len(sequence) == 2 and next_char not in "[O":
                break

        logger.debug(f"Escape sequence: {sequence!r}")
        return sequence

    def _parse_key_sequence(self, key_data: str) -> KeyCode:
        return parse_key_sequence(key_data)

    async def _handle_key_input(self, key_data: str) -> None:
        """Dispatch one key to its registered callback.

        Args:
            key_data: Raw key data
        """
        key_code = self._parse_key_sequence(key_data)
        logger.debug(f"Received key_data={key_data!r}, parsed as={key_code}")

        if self._raw_key_callback:
            self._raw_key_callback(key_data)

        result: Any = None
        if key_code == KeyCode.CHARACTER and self._char_callback is not None:
            result = self._char_callback(key_data)
        elif key_code in self._key_callbacks:
            result = self._key_callbacks[key_code]()
        else:
            logger.debug(f"Unhandled key sequence: {key_data!r}")

        if asyncio.iscoroutine(result):
            await result

    @property
    def is_running(self) -> bool:
        """Check if keyboard handler is currently running."""
        return self._running
