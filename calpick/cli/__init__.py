"""CLI module for calpick.

This module provides the command-line interface of calpick: argument parsing,
settings loading and running the interactive picker.
"""

import sys
from typing import List, Optional

from pydantic import ValidationError

from ..config.settings import PickerSettings
from .modes.interactive import run_interactive_mode
from .parser import create_parser, parse_date


async def main_entry(argv: Optional[List[str]] = None) -> int:
    """Main entry point with argument parsing.

    Args:
        argv: Command line arguments, sys.argv[1:] if omitted

    Returns:
        Exit code (0 for a confirmed date, 1 otherwise)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        settings = PickerSettings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    return await run_interactive_mode(args, settings)


__all__ = [
    "create_parser",
    "main_entry",
    "parse_date",
    "run_interactive_mode",
]
