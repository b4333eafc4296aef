"""Command alphabet for interactive date picking and the keys bound to it."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .keyboard import KeyCode

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(7)


class CommandKind(Enum):
    """Kinds of commands a single keystroke can issue."""

    STEP_DAYS = "step_days"
    STEP_MONTHS = "step_months"
    GOTO_TODAY = "goto_today"
    GOTO_ANCHOR = "goto_anchor"
    GOTO_ADJACENT_DAY = "goto_adjacent_day"
    SEEK_WEEKDAY = "seek_weekday"
    CURSOR_BACKSPACE = "cursor_backspace"
    CURSOR_TAB = "cursor_tab"
    ENTER_DIGIT = "enter_digit"
    CONFIRM = "confirm"
    CANCEL = "cancel"


@dataclass(frozen=True)
class Command:
    """One keystroke's intent.

    Attributes:
        kind: What the command does
        amount: Days, months, day offset, seek direction or digit, depending on kind
        weekday: Target weekday (Monday=0) for SEEK_WEEKDAY
    """

    kind: CommandKind
    amount: int = 0
    weekday: Optional[int] = None

    @property
    def ends_session(self) -> bool:
        """Whether the command stops the interactive loop."""
        return self.kind in (CommandKind.CONFIRM, CommandKind.CANCEL)

    def __str__(self) -> str:
        if self.kind == CommandKind.SEEK_WEEKDAY:
            return f"{self.kind.value}({self.weekday}, {self.amount:+d})"
        if self.kind in (CommandKind.STEP_DAYS, CommandKind.STEP_MONTHS, CommandKind.GOTO_ADJACENT_DAY):
            return f"{self.kind.value}({self.amount:+d})"
        if self.kind == CommandKind.ENTER_DIGIT:
            return f"{self.kind.value}({self.amount})"
        return self.kind.value


def step_days(days: int) -> Command:
    """Command moving the date by a number of days."""
    return Command(CommandKind.STEP_DAYS, days)


def step_months(months: int) -> Command:
    """Command moving the date by a number of calendar months."""
    return Command(CommandKind.STEP_MONTHS, months)


def seek_weekday(weekday: int, direction: int) -> Command:
    """Command seeking the next (direction=1) or previous (direction=-1) weekday."""
    return Command(CommandKind.SEEK_WEEKDAY, direction, weekday)


def enter_digit(digit: int) -> Command:
    """Command typing a digit at the edit cursor."""
    return Command(CommandKind.ENTER_DIGIT, digit)


GOTO_TODAY = Command(CommandKind.GOTO_TODAY)
GOTO_ANCHOR = Command(CommandKind.GOTO_ANCHOR)
CURSOR_BACKSPACE = Command(CommandKind.CURSOR_BACKSPACE)
CURSOR_TAB = Command(CommandKind.CURSOR_TAB)
CONFIRM = Command(CommandKind.CONFIRM)
CANCEL = Command(CommandKind.CANCEL)

# Home moves forward and End backward by a year
KEY_BINDINGS: dict[KeyCode, Command] = {
    KeyCode.LEFT_ARROW: step_days(-1),
    KeyCode.RIGHT_ARROW: step_days(1),
    KeyCode.UP_ARROW: step_days(-7),
    KeyCode.DOWN_ARROW: step_days(7),
    KeyCode.PAGE_UP: step_months(-1),
    KeyCode.PAGE_DOWN: step_months(1),
    KeyCode.HOME: step_months(12),
    KeyCode.END: step_months(-12),
    KeyCode.TAB: CURSOR_TAB,
    KeyCode.BACKSPACE: CURSOR_BACKSPACE,
    KeyCode.ENTER: CONFIRM,
    KeyCode.ESCAPE: CANCEL,
    KeyCode.CTRL_C: CANCEL,
}

WEEKDAY_KEYS = {
    "m": MONDAY,
    "t": TUESDAY,
    "w": WEDNESDAY,
    "h": THURSDAY,
    "f": FRIDAY,
    "s": SATURDAY,
    "u": SUNDAY,
}

CHAR_BINDINGS: dict[str, Command] = {
    ".": GOTO_TODAY,
    ",": GOTO_ANCHOR,
    "<": Command(CommandKind.GOTO_ADJACENT_DAY, -1),
    ">": Command(CommandKind.GOTO_ADJACENT_DAY, 1),
    "q": CANCEL,
}
for _key, _weekday in WEEKDAY_KEYS.items():
    CHAR_BINDINGS[_key] = seek_weekday(_weekday, 1)
    CHAR_BINDINGS[_key.upper()] = seek_weekday(_weekday, -1)
for _digit in range(10):
    CHAR_BINDINGS[str(_digit)] = enter_digit(_digit)


def command_for_char(char: str) -> Optional[Command]:
    """Look up the command bound to a printable character, None if unbound."""
    return CHAR_BINDINGS.get(char)


HELP_TEXT = """\
Keyboard input:
  left/right             move one day back/forward
  up/down                move one week back/forward
  page up/page down      move one month back/forward
  home/end               move one year forward/back
  .                      go to today
  >                      go to tomorrow
  <                      go to yesterday
  ,                      go to the default date (today unless given)
  m/t/w/h/f/s/u          go to next monday/tuesday/wednesday/thursday/friday/saturday/sunday
  M/T/W/H/F/S/U          go to last monday/tuesday/wednesday/thursday/friday/saturday/sunday
  digits                 enter date, no '-' necessary
  tab                    jump to the next section of the date (year/month/day)
  backspace              go back one character in the entered date
  enter                  print the chosen date and exit with code 0
  escape/q               exit with code 1"""
