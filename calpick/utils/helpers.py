"""Helper functions for date text handling and display."""

import re
from datetime import date
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta

from .exceptions import InvalidDateError

ISO_DATE_LENGTH = 10

_ISO_DATE_PATTERN = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")

Clock = Callable[[], date]
"""Callable returning the current local date, injectable for testing."""


def system_today() -> date:
    """Return today's date from the system clock."""
    return date.today()


def parse_iso_date(text: str) -> date:
    """Parse a strict YYYY-MM-DD date string.

    Exactly four year digits, two month digits and two day digits are required,
    and the result must be a real calendar date.

    Args:
        text: Date string to parse

    Returns:
        Parsed date

    Raises:
        InvalidDateError: If the text is not a valid ISO date

    Example:
        >>> parse_iso_date("2024-02-29")
        datetime.date(2024, 2, 29)
        >>> parse_iso_date("2023-02-29")  # Raises InvalidDateError
    """
    match = _ISO_DATE_PATTERN.fullmatch(text)
    if match is None:
        raise InvalidDateError(text)

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as err:
        raise InvalidDateError(text, f"Invalid date '{text}': {err}") from err


def format_iso_date(value: date) -> str:
    """Format a date as a zero padded YYYY-MM-DD string."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def truncate_string(text: str, max_length: int, suffix: str = "") -> str:
    """Truncate string to max_length, optionally ending with suffix.

    Args:
        text: String to truncate
        max_length: Maximum length of the result
        suffix: Suffix to mark truncation, empty by default

    Returns:
        Truncated string
    """
    if max_length <= 0:
        return ""
    if len(text) <= max_length:
        return text
    if len(suffix) >= max_length:
        return text[:max_length]
    return text[: max_length - len(suffix)] + suffix


def add_months(value: date, months: int) -> Optional[date]:
    """Add calendar months, clamping the day only if it does not exist in the target month.

    Args:
        value: Start date
        months: Months to add, may be negative

    Returns:
        Resulting date, None if it falls outside the supported year range

    Example:
        >>> add_months(date(2024, 3, 31), 1)
        datetime.date(2024, 4, 30)
        >>> add_months(date(2024, 2, 29), -1)
        datetime.date(2024, 1, 29)
    """
    try:
        return value + relativedelta(months=months)
    except (ValueError, OverflowError):
        return None
