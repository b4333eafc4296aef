"""Terminal output primitives for drawing rendered frames."""

import logging
import os
import shutil
import sys
from typing import Optional, TextIO

from .console_renderer import Frame

logger = logging.getLogger(__name__)

CONTROLLING_TERMINAL = "/dev/tty"

ENTER_ALTERNATE_SCREEN = "\033[?1049h"
LEAVE_ALTERNATE_SCREEN = "\033[?1049l"
CLEAR_SCREEN = "\033[H\033[2J"
SHOW_CURSOR = "\033[?25h"


class Terminal:
    """Draws frames on the terminal, away from standard output.

    Standard output only carries the chosen date, so the calendar is drawn on
    the controlling terminal, or on standard error when there is none.
    """

    def __init__(self, stream: TextIO, owns_stream: bool = False) -> None:
        """Initialize terminal.

        Args:
            stream: Text stream connected to the terminal
            owns_stream: Close the stream in close()
        """
        self.stream = stream
        self._owns_stream = owns_stream
        self._active = False

    @classmethod
    def open(cls) -> "Terminal":
        """Open the controlling terminal, falling back to standard error."""
        try:
            stream = open(CONTROLLING_TERMINAL, "r+", encoding="utf-8", buffering=1)
        except OSError as e:
            logger.debug(f"No controlling terminal ({e}), drawing on stderr")
            return cls(sys.stderr)
        return cls(stream, owns_stream=True)

    def fileno(self) -> int:
        """File descriptor of the terminal, also used for keyboard input."""
        if self._owns_stream:
            return self.stream.fileno()
        return sys.stdin.fileno()

    @property
    def width(self) -> int:
        """Terminal width in columns."""
        try:
            return os.get_terminal_size(self.stream.fileno()).columns
        except (OSError, ValueError):
            return shutil.get_terminal_size().columns

    def enter(self) -> None:
        """Switch to the alternate screen so the user's scrollback stays intact."""
        if not self._active:
            self.stream.write(ENTER_ALTERNATE_SCREEN)
            self.stream.flush()
            self._active = True

    def leave(self) -> None:
        """Return to the normal screen."""
        if self._active:
            self.stream.write(CLEAR_SCREEN + LEAVE_ALTERNATE_SCREEN + SHOW_CURSOR)
            self.stream.flush()
            self._active = False

    def draw(self, frame: Frame) -> None:
        """Clear the screen, print the frame and place the cursor.

        Args:
            frame: Rendered frame
        """
        body = "\r\n".join(frame.lines)
        position = f"\033[{frame.cursor_row + 1};{frame.cursor_column + 1}H"
        self.stream.write(CLEAR_SCREEN + body + position + SHOW_CURSOR)
        self.stream.flush()

    def close(self) -> None:
        """Leave the alternate screen and close the terminal stream if it was opened here."""
        self.leave()
        if self._owns_stream:
            self.stream.close()

    def __enter__(self) -> "Terminal":
        self.enter()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        name: Optional[str] = getattr(self.stream, "name", None)
        return f"Terminal(stream={name!r}, active={self._active})"
