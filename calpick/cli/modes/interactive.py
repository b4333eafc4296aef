"""Interactive mode handler for calpick CLI.

This module runs the interactive calendar on the terminal and turns its outcome
into the process exit contract: the confirmed date on standard output and exit
code 0, or exit code 1 when the selection is cancelled or fails.
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Optional

from ...config.settings import PickerSettings, apply_cli_overrides
from ...display.console_renderer import ConsoleRenderer
from ...display.terminal import Terminal
from ...search.runner import SearchRunner
from ...ui.interactive import InteractiveController
from ...utils.exceptions import CalpickError
from ...utils.helpers import Clock, format_iso_date, system_today
from ...utils.logging import apply_command_line_overrides, setup_logging

logger = logging.getLogger(__name__)

EXIT_CONFIRMED = 0
EXIT_CANCELLED = 1


def write_result(chosen: date, output_filename: Optional[Path]) -> None:
    """Print the chosen date on standard output and optionally to a file.

    The file receives the bare date without a trailing newline.

    Args:
        chosen: Confirmed date
        output_filename: Optional file to write the date to

    Raises:
        OSError: If the output file cannot be written
    """
    text = format_iso_date(chosen)
    if output_filename is not None:
        output_filename.expanduser().write_text(text, encoding="utf-8")
        logger.debug(f"Wrote {text} to {output_filename}")
    print(text)


def create_search_runner(settings: PickerSettings) -> Optional[SearchRunner]:
    """Build the search runner from settings, None without a search command."""
    if not settings.search_command:
        return None
    return SearchRunner(
        settings.search_command,
        max_results=settings.max_results,
        sort_results=settings.sort_search,
        ignore_exit_status=settings.search_ignore_exit_status,
    )


async def run_interactive_mode(
    args: Any,
    settings: Optional[PickerSettings] = None,
    clock: Clock = system_today,
) -> int:
    """Run the interactive date picker.

    Args:
        args: Parsed command line arguments
        settings: Settings loaded from defaults, YAML and environment
        clock: Callable returning today's date

    Returns:
        Exit code (0 when a date was confirmed, 1 when cancelled or failed)
    """
    try:
        if settings is None:
            settings = PickerSettings()

        # Apply command-line logging overrides with priority system
        updated_settings = apply_command_line_overrides(settings, args)

        # Apply CLI-specific overrides
        updated_settings = apply_cli_overrides(updated_settings, args)

        setup_logging(updated_settings)
        logger.debug(f"Starting picker with start date {args.start_date}")

        search_runner = create_search_runner(updated_settings)

        with Terminal.open() as terminal:
            interactive = InteractiveController(
                terminal,
                ConsoleRenderer(),
                start_date=args.start_date,
                highlights=frozenset(args.highlights or ()),
                title=updated_settings.title,
                search_runner=search_runner,
                debug=updated_settings.debug,
                clock=clock,
            )
            chosen = await interactive.start()

        if chosen is None:
            return EXIT_CANCELLED

        write_result(chosen, updated_settings.output_filename)
        return EXIT_CONFIRMED

    except CalpickError as e:
        logger.debug(f"Picker failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


__all__ = ["create_search_runner", "run_interactive_mode", "write_result"]
