"""Utility functions and helpers package."""

from .exceptions import CalpickError, InvalidDateError, SearchCommandError, TerminalError
from .helpers import (
    add_months,
    format_iso_date,
    parse_iso_date,
    system_today,
    truncate_string,
)
from .logging import setup_logging

__all__ = [
    "CalpickError",
    "InvalidDateError",
    "SearchCommandError",
    "TerminalError",
    "add_months",
    "format_iso_date",
    "parse_iso_date",
    "setup_logging",
    "system_today",
    "truncate_string",
]
