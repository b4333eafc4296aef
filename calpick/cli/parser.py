"""Command-line argument parsing for calpick.

This module handles command-line argument parsing: the start date, highlight
dates, search command options, output options and logging options.
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, List, NoReturn, Optional

from .. import __version__
from ..ui.commands import HELP_TEXT
from ..utils.exceptions import InvalidDateError
from ..utils.helpers import parse_iso_date

logger = logging.getLogger(__name__)

LOG_LEVEL_CHOICES = ["DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL"]


class PickerArgumentParser(argparse.ArgumentParser):
    """ArgumentParser exiting with status 1 on errors, like a cancelled selection."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


class HighlightAction(argparse.Action):
    """Collect comma separated highlight dates from repeated --highlight options."""

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Any,
        option_string: Optional[str] = None,
    ) -> None:
        """Validate the dates and append them to the namespace list.

        Args:
            parser: The ArgumentParser instance
            namespace: The Namespace object to store parsed values
            values: Comma separated ISO dates
            option_string: The option string used to invoke this action

        Raises:
            argparse.ArgumentError: If any date is malformed
        """
        highlights: List[date] = list(getattr(namespace, self.dest, None) or [])
        for value in str(values).split(","):
            try:
                highlights.append(parse_iso_date(value.strip()))
            except InvalidDateError as e:
                raise argparse.ArgumentError(self, str(e)) from e
        setattr(namespace, self.dest, highlights)


def parse_date(date_str: str) -> date:
    """Parse date string in YYYY-MM-DD format for command-line arguments.

    Args:
        date_str (str): Date string to parse in YYYY-MM-DD format

    Returns:
        date: Parsed date

    Raises:
        argparse.ArgumentTypeError: If the date is malformed or does not exist

    Example:
        >>> parse_date("2024-01-15")
        datetime.date(2024, 1, 15)
        >>> parse_date("15-01-2024")  # Raises ArgumentTypeError
    """
    try:
        return parse_iso_date(date_str)
    except InvalidDateError as err:
        raise argparse.ArgumentTypeError(str(err)) from err


def non_negative_int(value: str) -> int:
    """Parse a non-negative integer option value.

    Raises:
        argparse.ArgumentTypeError: If the value is not an integer >= 0
    """
    try:
        number = int(value)
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"Failed to parse number '{value}'") from err
    if number < 0:
        raise argparse.ArgumentTypeError(f"Number must not be negative: {value}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser.

    Returns:
        argparse.ArgumentParser: Parser for all calpick options

    Example:
        >>> parser = create_parser()
        >>> args = parser.parse_args(["2024-05-17", "--highlight=2024-05-20,2024-05-21"])
        >>> args.start_date, len(args.highlights)
        (datetime.date(2024, 5, 17), 2)
    """
    parser = PickerArgumentParser(
        prog="calpick",
        description="calpick - show an interactive calendar on the console and print the chosen date",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
{HELP_TEXT}

Examples:
  %(prog)s                                   # Pick a date starting today
  %(prog)s 2024-05-17 --title=Deadline       # Start at a given date with a title
  %(prog)s --highlight=2024-05-20,2024-05-27 # Highlight dates
  %(prog)s --search='grep -h {{}} notes.txt' --search-ignore-exit-status
                                             # Show matching notes for each date
        """,
    )

    parser.add_argument(
        "start_date",
        nargs="?",
        type=parse_date,
        default=None,
        metavar="YYYY-MM-DD",
        help="Start and default date (default: today)",
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}", help="Show version information"
    )

    # Display arguments
    display_group = parser.add_argument_group("display", "Calendar display options")

    display_group.add_argument(
        "--title", default=None, help="Show this as title before the chosen date"
    )

    display_group.add_argument(
        "--highlight",
        action=HighlightAction,
        dest="highlights",
        default=[],
        metavar="YYYY-MM-DD[,YYYY-MM-DD...]",
        help="Highlight these dates (can be passed multiple times)",
    )

    display_group.add_argument(
        "--debug", action="store_true", help="Show pressed keys and write a debug log file"
    )

    # Search arguments
    search_group = parser.add_argument_group("search", "External search command options")

    search_group.add_argument(
        "--search",
        default=None,
        metavar="COMMAND",
        help="Whenever the date changes, run this command with the date as argument. "
        "Use '{}' as placeholder for the date. The results are shown below the calendar",
    )

    search_group.add_argument(
        "--max-results",
        type=non_negative_int,
        default=None,
        metavar="N",
        help="Maximum number of lines to show for --search (default: 5)",
    )

    search_group.add_argument(
        "--sort-search", action="store_true", help="Sort the lines shown for --search"
    )

    search_group.add_argument(
        "--search-ignore-exit-status",
        action="store_true",
        help="Show the output of --search even if the command exits non-zero "
        "(e.g. grep finding nothing)",
    )

    # Output arguments
    parser.add_argument(
        "--output-filename",
        type=Path,
        default=None,
        metavar="FILE",
        help="Write the chosen date to this file as well as printing it on stdout",
    )

    # Logging arguments
    logging_group = parser.add_argument_group("logging", "Logging configuration options")

    logging_group.add_argument(
        "--log-level",
        choices=LOG_LEVEL_CHOICES,
        help="Set both console and file log levels",
    )

    logging_group.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    logging_group.add_argument(
        "--quiet", action="store_true", help="Only show errors on console"
    )

    logging_group.add_argument(
        "--log-dir", type=Path, help="Write log files to this directory"
    )

    logging_group.add_argument(
        "--no-log-colors", action="store_true", help="Disable colored console output"
    )

    return parser


__all__ = [
    "HighlightAction",
    "PickerArgumentParser",
    "create_parser",
    "non_negative_int",
    "parse_date",
]
