"""Date cursor state machine for interactive date picking.

The module-level functions are the pure transitions: each takes a
SelectionState and returns a new one, never an invalid date. NavigationState
owns the live state for the interactive loop and notifies listeners about
changes.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Callable, List, Optional

from ..utils.exceptions import InvalidDateError
from ..utils.helpers import (
    ISO_DATE_LENGTH,
    Clock,
    add_months,
    format_iso_date,
    parse_iso_date,
    system_today,
)
from .commands import Command, CommandKind

logger = logging.getLogger(__name__)

DASH_POSITIONS = (4, 7)
DIGIT_POSITIONS = (0, 1, 2, 3, 5, 6, 8, 9)
MONTH_TENS = 5
DAY_TENS = 8

WEEKDAY_ABBREVIATIONS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


@dataclass(frozen=True)
class SelectionState:
    """Selected date, edit column into its YYYY-MM-DD text and the default date.

    Attributes:
        current: Currently selected date
        cursor: Edit column, always one of DIGIT_POSITIONS
        anchor: Start date restored by the reset command
    """

    current: date
    cursor: int
    anchor: date

    def __post_init__(self) -> None:
        if self.cursor not in DIGIT_POSITIONS:
            raise ValueError(f"Edit cursor must be on a digit position, got {self.cursor}")

    @classmethod
    def start(cls, start_date: date) -> "SelectionState":
        """Initial state for a start date: current and anchor equal, cursor on the first digit."""
        return cls(current=start_date, cursor=0, anchor=start_date)

    @property
    def text(self) -> str:
        """Current date as YYYY-MM-DD."""
        return format_iso_date(self.current)


def _with_date(state: SelectionState, new_date: Optional[date]) -> SelectionState:
    if new_date is None or new_date == state.current:
        return state
    return replace(state, current=new_date)


def _add_days(value: date, days: int) -> Optional[date]:
    try:
        return value + timedelta(days=days)
    except OverflowError:
        return None


def step_days(state: SelectionState, days: int) -> SelectionState:
    """Move the selected date by days (day and week steps), cursor untouched."""
    return _with_date(state, _add_days(state.current, days))


def step_months(state: SelectionState, months: int) -> SelectionState:
    """Move the selected date by whole months (month and year steps), cursor untouched."""
    return _with_date(state, add_months(state.current, months))


def goto_today(state: SelectionState, today: date) -> SelectionState:
    """Select today's date."""
    return _with_date(state, today)


def goto_anchor(state: SelectionState) -> SelectionState:
    """Select the start date again."""
    return _with_date(state, state.anchor)


def goto_adjacent_day(state: SelectionState, today: date, offset: int) -> SelectionState:
    """Select the day at offset from today (yesterday/tomorrow), independent of the selection."""
    return _with_date(state, _add_days(today, offset))


def seek_weekday(state: SelectionState, weekday: int, direction: int) -> SelectionState:
    """Select the next (direction=1) or previous (direction=-1) date falling on weekday.

    The search starts one day away from the current date, so the result is
    always between 1 and 7 days away, even if the current date is already on
    the requested weekday.

    Args:
        state: Current selection
        weekday: Target weekday, Monday=0 .. Sunday=6
        direction: 1 to seek forward, -1 to seek backward

    Returns:
        New selection, unchanged if the search would leave the supported date range
    """
    if weekday not in range(7) or direction not in (1, -1):
        logger.debug(f"Rejected weekday seek to {weekday} in direction {direction}")
        return state

    candidate = _add_days(state.current, direction)
    for _ in range(7):
        if candidate is None:
            return state
        if candidate.weekday() == weekday:
            return _with_date(state, candidate)
        candidate = _add_days(candidate, direction)

    return state


def cursor_backspace(state: SelectionState) -> SelectionState:
    """Move the edit cursor one digit to the left, skipping dashes, stopping at 0."""
    cursor = max(state.cursor - 1, 0)
    if cursor in DASH_POSITIONS:
        cursor -= 1
    return replace(state, cursor=cursor)


def cursor_tab(state: SelectionState) -> SelectionState:
    """Move the edit cursor to the start of the next field, wrapping from day to year."""
    if state.cursor < 4:
        cursor = MONTH_TENS
    elif state.cursor < 7:
        cursor = DAY_TENS
    else:
        cursor = 0
    return replace(state, cursor=cursor)


def _advance_cursor(cursor: int) -> int:
    cursor += 1
    if cursor in DASH_POSITIONS:
        cursor += 1
    elif cursor >= ISO_DATE_LENGTH:
        cursor = 0
    return cursor


def _parse_or_none(text: str) -> Optional[date]:
    try:
        return parse_iso_date(text)
    except InvalidDateError:
        return None


def enter_digit(state: SelectionState, digit: int) -> SelectionState:
    """Overwrite the digit under the edit cursor and advance the cursor.

    When the edited text is not a valid date and the cursor sits on the tens
    digit of the month or day, the units digit is forced to 1 (for a typed 0)
    or 0 (otherwise) and parsing is retried. If neither attempt gives a valid
    date the state is returned unchanged.

    Args:
        state: Current selection
        digit: Digit 0-9 typed by the user

    Returns:
        New selection, or the same one if the edit is rejected

    Example:
        >>> state = SelectionState(date(2024, 1, 25), 5, date(2024, 1, 25))
        >>> enter_digit(state, 1).current  # "2024-11-25"
        datetime.date(2024, 11, 25)
        >>> enter_digit(replace(state, cursor=8), 3).current  # "2024-01-35" -> "2024-01-30"
        datetime.date(2024, 1, 30)
    """
    if digit not in range(10):
        logger.debug(f"Rejected non-digit value {digit!r}")
        return state

    chars = list(state.text)
    chars[state.cursor] = str(digit)
    new_date = _parse_or_none("".join(chars))

    if new_date is None and state.cursor in (MONTH_TENS, DAY_TENS):
        chars[state.cursor + 1] = "1" if digit == 0 else "0"
        new_date = _parse_or_none("".join(chars))

    if new_date is None:
        logger.debug(f"Digit {digit} at column {state.cursor} of {state.text} gives no valid date")
        return state

    return SelectionState(current=new_date, cursor=_advance_cursor(state.cursor), anchor=state.anchor)


def apply_command(state: SelectionState, command: Command, today: date) -> SelectionState:
    """Apply one command to a selection state.

    CONFIRM and CANCEL do not change the selection; the caller ends the loop.

    Args:
        state: Current selection
        command: Command to apply
        today: Today's date for the commands relative to it

    Returns:
        New selection state
    """
    kind = command.kind
    if kind == CommandKind.STEP_DAYS:
        return step_days(state, command.amount)
    if kind == CommandKind.STEP_MONTHS:
        return step_months(state, command.amount)
    if kind == CommandKind.GOTO_TODAY:
        return goto_today(state, today)
    if kind == CommandKind.GOTO_ANCHOR:
        return goto_anchor(state)
    if kind == CommandKind.GOTO_ADJACENT_DAY:
        return goto_adjacent_day(state, today, command.amount)
    if kind == CommandKind.SEEK_WEEKDAY and command.weekday is not None:
        return seek_weekday(state, command.weekday, command.amount)
    if kind == CommandKind.CURSOR_BACKSPACE:
        return cursor_backspace(state)
    if kind == CommandKind.CURSOR_TAB:
        return cursor_tab(state)
    if kind == CommandKind.ENTER_DIGIT:
        return enter_digit(state, command.amount)
    return state


class NavigationState:
    """Manages the live selection state for the interactive loop."""

    def __init__(self, initial_date: Optional[date] = None, clock: Clock = system_today):
        """Initialize navigation state.

        Args:
            initial_date: Start (and anchor) date, defaults to today
            clock: Callable returning today's date
        """
        self._clock = clock
        self._state = SelectionState.start(initial_date or clock())
        self._change_callbacks: List[Callable[[SelectionState], None]] = []

        logger.debug(f"Navigation state initialized with date: {self._state.text}")

    @property
    def state(self) -> SelectionState:
        """Current selection state."""
        return self._state

    @property
    def selected_date(self) -> date:
        """Currently selected date."""
        return self._state.current

    @property
    def anchor(self) -> date:
        """Start date restored by the reset command."""
        return self._state.anchor

    @property
    def cursor(self) -> int:
        """Edit column into the YYYY-MM-DD text."""
        return self._state.cursor

    @property
    def today(self) -> date:
        """Today's date according to the clock."""
        return self._clock()

    def apply(self, command: Command) -> SelectionState:
        """Apply a command and notify listeners if the selection changed.

        Args:
            command: Command to apply

        Returns:
            The resulting selection state
        """
        old_state = self._state
        self._state = apply_command(old_state, command, self._clock())

        if self._state != old_state:
            logger.debug(
                f"{command}: {old_state.text}@{old_state.cursor} -> "
                f"{self._state.text}@{self._state.cursor}"
            )
            self._notify_change()
        else:
            logger.debug(f"{command}: no change")

        return self._state

    def get_status_text(self) -> str:
        """Selected date with weekday and ISO week number, e.g. "2024-05-17 Fri WN 20"."""
        current = self._state.current
        week_number = current.isocalendar()[1]
        return f"{self._state.text} {WEEKDAY_ABBREVIATIONS[current.weekday()]} WN {week_number:02d}"

    def add_change_callback(self, callback: Callable[[SelectionState], None]) -> None:
        """Add a callback to be called when the selection changes.

        Args:
            callback: Function to call with the new state
        """
        self._change_callbacks.append(callback)
        logger.debug("Added selection change callback")

    def remove_change_callback(self, callback: Callable[[SelectionState], None]) -> None:
        """Remove a selection change callback.

        Args:
            callback: Callback function to remove
        """
        if callback in self._change_callbacks:
            self._change_callbacks.remove(callback)
            logger.debug("Removed selection change callback")

    def _notify_change(self) -> None:
        """Notify all registered callbacks of a selection change."""
        for callback in self._change_callbacks:
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Error in selection change callback: {e}")

    def __str__(self) -> str:
        """String representation of navigation state."""
        return f"NavigationState(selected={self._state.text}, cursor={self._state.cursor})"

    def __repr__(self) -> str:
        """Detailed string representation."""
        return (
            f"NavigationState(selected_date={self._state.current!r}, "
            f"cursor={self._state.cursor!r}, anchor={self._state.anchor!r})"
        )
