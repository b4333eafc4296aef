"""Runs the external search command for the selected date and collects its output."""

import asyncio
import codecs
import logging
import shlex
from datetime import date
from typing import List, Optional

from ..config.settings import MAX_SEARCH_RESULTS_DEFAULT
from ..utils.exceptions import SearchCommandError
from ..utils.helpers import format_iso_date

logger = logging.getLogger(__name__)

PLACEHOLDER = "{}"
READ_CHUNK_SIZE = 64 * 1024
LINE_LIMIT = 1024 * 1024


def build_search_command(template: str, iso_date: str) -> List[str]:
    """Split a command template into arguments and insert the date.

    The template is split with POSIX shell rules. The first argument that is
    exactly "{}" is replaced by the date; without one the date is appended.

    Args:
        template: Command template, e.g. "grep -h {} notes.txt"
        iso_date: Date in YYYY-MM-DD form

    Returns:
        Argument list ready for execution

    Raises:
        SearchCommandError: If the template is empty or cannot be split

    Example:
        >>> build_search_command("grep -h {} notes.txt", "2024-05-17")
        ['grep', '-h', '2024-05-17', 'notes.txt']
        >>> build_search_command("agenda --day", "2024-05-17")
        ['agenda', '--day', '2024-05-17']
    """
    try:
        arguments = shlex.split(template)
    except ValueError as e:
        raise SearchCommandError(template, f"cannot parse command: {e}") from e

    if not arguments:
        raise SearchCommandError(template, "command is empty")

    if PLACEHOLDER in arguments:
        arguments[arguments.index(PLACEHOLDER)] = iso_date
    else:
        arguments.append(iso_date)
    return arguments


def _strip_line_ending(line: str) -> str:
    line = line[:-1] if line.endswith("\n") else line
    return line[:-1] if line.endswith("\r") else line


async def _discard_line(stdout: asyncio.StreamReader, decoder: codecs.IncrementalDecoder) -> None:
    """Skip the rest of an overlong line, up to and including its newline."""
    while True:
        try:
            decoder.decode(await stdout.readuntil(b"\n"))
            return
        except asyncio.IncompleteReadError as e:
            decoder.decode(e.partial)
            return
        except asyncio.LimitOverrunError as e:
            decoder.decode(await stdout.read(e.consumed))


async def _read_line(
    stdout: asyncio.StreamReader, decoder: codecs.IncrementalDecoder
) -> Optional[str]:
    """Read and decode one output line, None at end of output.

    A line longer than LINE_LIMIT keeps its first chunk and the rest is
    discarded. A character split at the cut stays in the decoder.
    """
    try:
        raw_line = await stdout.readuntil(b"\n")
    except asyncio.IncompleteReadError as e:
        if not e.partial:
            return None
        raw_line = e.partial
    except asyncio.LimitOverrunError as e:
        head = decoder.decode(await stdout.read(e.consumed))
        await _discard_line(stdout, decoder)
        return _strip_line_ending(head)
    return _strip_line_ending(decoder.decode(raw_line))


class SearchRunner:
    """Runs the search command once per date and returns at most max_results lines."""

    def __init__(
        self,
        command_template: str,
        max_results: int = MAX_SEARCH_RESULTS_DEFAULT,
        sort_results: bool = False,
        ignore_exit_status: bool = False,
    ) -> None:
        """Initialize search runner.

        Args:
            command_template: Command with an optional "{}" date placeholder
            max_results: Maximum number of output lines kept
            sort_results: Sort kept lines lexicographically
            ignore_exit_status: Keep output of commands exiting non-zero
        """
        self.command_template = command_template
        self.max_results = max_results
        self.sort_results = sort_results
        self.ignore_exit_status = ignore_exit_status

    async def run(self, day: date) -> List[str]:
        """Run the command for a date.

        Output beyond max_results lines is read and discarded so the command
        never blocks on a full pipe, but all of it must be valid UTF-8. Lines
        longer than LINE_LIMIT bytes are cut.

        Args:
            day: Selected date

        Returns:
            Output lines without line endings

        Raises:
            SearchCommandError: If the command cannot be started, exits
                non-zero or writes output that is not UTF-8
        """
        arguments = build_search_command(self.command_template, format_iso_date(day))
        command_line = shlex.join(arguments)
        logger.debug(f"Running search command: {command_line}")

        try:
            process = await asyncio.create_subprocess_exec(
                *arguments,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
                limit=LINE_LIMIT,
            )
        except OSError as e:
            raise SearchCommandError(command_line, f"cannot start: {e}") from e

        lines = await self._read_lines(process, command_line)
        return_code = await process.wait()

        if return_code != 0 and not self.ignore_exit_status:
            raise SearchCommandError(command_line, f"exited with status {return_code}")

        if self.sort_results:
            lines.sort()

        logger.verbose(f"Search for {format_iso_date(day)} returned {len(lines)} lines")  # type: ignore[attr-defined]
        return lines

    async def _read_lines(
        self, process: asyncio.subprocess.Process, command_line: str
    ) -> List[str]:
        stdout = process.stdout
        if stdout is None:
            return []

        # Every byte of output passes through the decoder, kept or discarded
        decoder = codecs.getincrementaldecoder("utf-8")()
        lines: List[str] = []
        try:
            while len(lines) < self.max_results:
                line = await _read_line(stdout, decoder)
                if line is None:
                    break
                lines.append(line)

            # Drain and discard the rest
            while True:
                chunk = await stdout.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                decoder.decode(chunk)
            decoder.decode(b"", final=True)
        except UnicodeDecodeError as e:
            try:
                process.kill()
            except ProcessLookupError:
                pass  # Already exited
            await process.wait()
            raise SearchCommandError(command_line, f"output is not valid UTF-8: {e}") from e

        return lines
