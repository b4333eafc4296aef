"""Console renderer turning month grids and picker status into styled text lines."""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..utils.helpers import truncate_string
from .calendar_grid import DayCell, DayClassification, MonthGrid

logger = logging.getLogger(__name__)

PANEL_WIDTH = 28  # 7 slots of 4 columns
PANEL_GAP = 2
MIN_STATUS_ROW = 8

_ANSI_PATTERN = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")

RESET = "\033[0m"
BOLD = "1"
UNDERLINE = "4"
RED = "31"
BLUE = "34"
CYAN = "36"
DARK_GREY = "90"
LIGHT_RED = "91"
LIGHT_CYAN = "96"

# SGR parameters per classification
DAY_STYLES: Dict[DayClassification, str] = {
    DayClassification.CHOSEN: f"{BOLD};{BLUE}",
    DayClassification.CHOSEN_TODAY: f"{BOLD};{UNDERLINE};{BLUE}",
    DayClassification.TODAY: f"{UNDERLINE};{RED}",
    DayClassification.TODAY_HIGHLIGHTED: f"{BOLD};{UNDERLINE};{CYAN}",
    DayClassification.PAST: DARK_GREY,
    DayClassification.PAST_HIGHLIGHTED: LIGHT_CYAN,
    DayClassification.FUTURE: "",
    DayClassification.FUTURE_HIGHLIGHTED: f"{BOLD};{CYAN}",
}

WEEKEND_STYLE = LIGHT_RED

# Weekday name and the position of its seek key letter
HEADER_DAYS: Tuple[Tuple[str, int], ...] = (
    ("Mon", 0),
    ("Tue", 0),
    ("Wed", 0),
    ("Thu", 1),
    ("Fri", 0),
    ("Sat", 0),
    ("Sun", 1),
)
HEADER_WIDTH = len(" ".join(name for name, _ in HEADER_DAYS))


def visible_width(text: str) -> int:
    """Width of text on screen, ignoring ANSI escape sequences."""
    return len(_ANSI_PATTERN.sub("", text))


def pad_visible(text: str, width: int) -> str:
    """Left-align text to width visible columns."""
    return text + " " * max(width - visible_width(text), 0)


@dataclass(frozen=True)
class Frame:
    """A fully rendered screen: text lines plus the terminal cursor position."""

    lines: Tuple[str, ...]
    cursor_row: int
    cursor_column: int


class ConsoleRenderer:
    """Renders calendar panels, status line and search results as ANSI text."""

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize console renderer.

        Args:
            use_colors: Emit ANSI styles, plain text otherwise
        """
        self.use_colors = use_colors

        logger.debug("Console renderer initialized")

    def _style(self, text: str, sgr: str) -> str:
        if not self.use_colors or not sgr:
            return text
        return f"\033[{sgr}m{text}{RESET}"

    def render_header(self) -> str:
        """Weekday header with weekend names colored and seek keys underlined."""
        parts = []
        for index, (name, key_position) in enumerate(HEADER_DAYS):
            weekend = index >= 5
            base = WEEKEND_STYLE if weekend else ""
            key_style = f"{UNDERLINE};{WEEKEND_STYLE}" if weekend else UNDERLINE
            parts.append(
                self._style(name[:key_position], base)
                + self._style(name[key_position], key_style)
                + self._style(name[key_position + 1 :], base)
            )
        return " ".join(parts)

    def render_day(self, cell: DayCell) -> str:
        """Day number right-aligned in two columns, styled by its classification."""
        return self._style(f"{cell.day:>2}", DAY_STYLES[cell.classification])

    def render_month(self, grid: MonthGrid) -> List[str]:
        """Render one month panel.

        Args:
            grid: Month grid to render

        Returns:
            Lines: centered title, weekday header, one line per week
        """
        title_padding = max(HEADER_WIDTH - len(grid.title), 0)
        left = title_padding // 2
        lines = [" " * left + grid.title + " " * (title_padding - left), self.render_header()]

        for row in grid.rows:
            slots = []
            for slot in row:
                slots.append("  " if slot is None else self.render_day(slot))
            lines.append("  ".join(slots))

        return lines

    def render_panels(self, grids: Sequence[MonthGrid]) -> List[str]:
        """Render month panels side by side, separated by a two column gap.

        Args:
            grids: Month grids in display order

        Returns:
            Combined lines, as many as the tallest panel
        """
        panels = [self.render_month(grid) for grid in grids]
        height = max((len(panel) for panel in panels), default=0)

        lines = []
        for row in range(height):
            cells = []
            for panel in panels:
                text = panel[row] if row < len(panel) else ""
                cells.append(pad_visible(text, PANEL_WIDTH))
            lines.append((" " * PANEL_GAP).join(cells).rstrip())
        return lines

    def render_frame(
        self,
        grids: Sequence[MonthGrid],
        status_text: str,
        cursor: int,
        title: str = "",
        search_lines: Sequence[str] = (),
        debug_line: Optional[str] = None,
        terminal_width: int = 80,
    ) -> Frame:
        """Render the whole picker screen.

        The status line (title and selected date) is centered under the
        calendar panels, at row 8 at the earliest. The terminal cursor is placed
        on the date character at the edit cursor.

        Args:
            grids: Month grids in display order
            status_text: Selected date text, starting with YYYY-MM-DD
            cursor: Edit column inside the date text
            title: Optional title shown as "title: " before the date
            search_lines: Search result lines shown below the status line
            debug_line: Optional line shown between status and search results
            terminal_width: Width search result lines are truncated to

        Returns:
            Rendered frame
        """
        lines = self.render_panels(grids)
        calendar_width = len(grids) * PANEL_WIDTH + max(len(grids) - 1, 0) * PANEL_GAP

        status_row = max(len(lines), MIN_STATUS_ROW)
        lines.extend([""] * (status_row - len(lines)))

        prefix = f"{title}: " if title else ""
        status = prefix + status_text
        left = max((calendar_width - len(status)) // 2, 0)
        lines.append(" " * left + status)
        cursor_column = left + len(prefix) + cursor

        if debug_line is not None:
            lines.append(truncate_string(debug_line, terminal_width))

        for line in search_lines:
            lines.append(truncate_string(line, terminal_width))

        return Frame(lines=tuple(lines), cursor_row=status_row, cursor_column=cursor_column)
