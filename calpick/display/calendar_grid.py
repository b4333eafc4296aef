"""Month grid layout and day classification for the calendar panels.

Everything here is pure: grids are built from the reference month, the chosen
date, today's date and the highlighted dates, with no terminal concerns.
"""

import calendar
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import AbstractSet, Optional, Tuple

from ..utils.helpers import add_months

DAYS_PER_WEEK = 7
SATURDAY = 5


class DayClassification(Enum):
    """Semantic category of a calendar cell, drives its display style."""

    CHOSEN = "chosen"
    CHOSEN_TODAY = "chosen_today"
    TODAY = "today"
    TODAY_HIGHLIGHTED = "today_highlighted"
    PAST = "past"
    PAST_HIGHLIGHTED = "past_highlighted"
    FUTURE = "future"
    FUTURE_HIGHLIGHTED = "future_highlighted"

    @property
    def is_chosen(self) -> bool:
        return self in (DayClassification.CHOSEN, DayClassification.CHOSEN_TODAY)


@dataclass(frozen=True)
class DayCell:
    """A real day inside a month grid."""

    day: int
    classification: DayClassification
    weekday: int

    @property
    def is_weekend(self) -> bool:
        return self.weekday >= SATURDAY


Slot = Optional[DayCell]
WeekRow = Tuple[Slot, ...]


@dataclass(frozen=True)
class MonthGrid:
    """Week rows of one month, seven slots per row, Monday first.

    Empty slots (None) pad the first row before day 1 and the last row after
    the last day of the month.
    """

    year: int
    month: int
    rows: Tuple[WeekRow, ...]

    @property
    def title(self) -> str:
        """Heading such as "2024 February"."""
        return f"{self.year} {calendar.month_name[self.month]}"


def classify_day(
    day: date, chosen: date, today: date, highlights: AbstractSet[date]
) -> DayClassification:
    """Classify a day for display, the first matching rule wins.

    Precedence: chosen (today or not), today, past, future; each of the last
    three split by whether the day is highlighted.

    Args:
        day: Day to classify
        chosen: Currently selected date
        today: Today's date
        highlights: Highlighted dates

    Returns:
        Classification of the day
    """
    if day == chosen:
        return DayClassification.CHOSEN_TODAY if day == today else DayClassification.CHOSEN

    highlighted = day in highlights
    if day == today:
        return DayClassification.TODAY_HIGHLIGHTED if highlighted else DayClassification.TODAY
    if day < today:
        return DayClassification.PAST_HIGHLIGHTED if highlighted else DayClassification.PAST
    return DayClassification.FUTURE_HIGHLIGHTED if highlighted else DayClassification.FUTURE


def build_month_grid(
    year: int, month: int, chosen: date, today: date, highlights: AbstractSet[date] = frozenset()
) -> MonthGrid:
    """Lay out one month as Monday-first week rows with classified day cells.

    Args:
        year: Reference year
        month: Reference month, 1-12
        chosen: Currently selected date
        today: Today's date
        highlights: Highlighted dates

    Returns:
        Month grid with exactly as many rows as needed to hold every day

    Example:
        >>> grid = build_month_grid(2024, 2, date(2024, 2, 29), date(2024, 2, 1))
        >>> len(grid.rows), grid.rows[0][:3]  # February 2024 starts on a Thursday
        (5, (None, None, None))
    """
    leading, last_day = calendar.monthrange(year, month)

    slots: list = [None] * leading
    for day_number in range(1, last_day + 1):
        day = date(year, month, day_number)
        slots.append(
            DayCell(
                day=day_number,
                classification=classify_day(day, chosen, today, highlights),
                weekday=day.weekday(),
            )
        )

    trailing = -len(slots) % DAYS_PER_WEEK
    slots.extend([None] * trailing)

    rows = tuple(
        tuple(slots[start : start + DAYS_PER_WEEK]) for start in range(0, len(slots), DAYS_PER_WEEK)
    )
    return MonthGrid(year=year, month=month, rows=rows)


def compose_panels(
    current: date, today: date, highlights: AbstractSet[date] = frozenset()
) -> Tuple[MonthGrid, ...]:
    """Build the previous, current and next month grids around the selected date.

    A neighbouring month outside the supported year range is left out.

    Args:
        current: Selected date, chosen in every panel
        today: Today's date
        highlights: Highlighted dates

    Returns:
        Month grids in display order
    """
    panels = []
    for offset in (-1, 0, 1):
        reference = add_months(current, offset)
        if reference is None:
            continue
        panels.append(build_month_grid(reference.year, reference.month, current, today, highlights))
    return tuple(panels)
