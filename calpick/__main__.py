"""Entry point for `python -m calpick` command."""

import asyncio
import sys

from calpick.cli import main_entry


def main() -> None:
    """Entry point for python -m calpick and the calpick console script."""
    try:
        exit_code = asyncio.run(main_entry())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        # Interrupted before the keyboard loop took over, same as cancelling
        sys.exit(1)


if __name__ == "__main__":
    main()
