"""Interactive controller running the date picking loop."""

import functools
import logging
from datetime import date
from typing import AbstractSet, List, Optional

from ..display.calendar_grid import compose_panels
from ..display.console_renderer import ConsoleRenderer
from ..display.terminal import Terminal
from ..search.runner import SearchRunner
from ..utils.helpers import Clock, system_today
from .commands import KEY_BINDINGS, Command, CommandKind, command_for_char
from .keyboard import KeyboardHandler
from .navigation import NavigationState, SelectionState

logger = logging.getLogger(__name__)


class InteractiveController:
    """Controls the interactive calendar: one key, one command, one redraw."""

    def __init__(
        self,
        terminal: Terminal,
        renderer: ConsoleRenderer,
        start_date: Optional[date] = None,
        highlights: AbstractSet[date] = frozenset(),
        title: str = "",
        search_runner: Optional[SearchRunner] = None,
        debug: bool = False,
        clock: Clock = system_today,
    ):
        """Initialize interactive controller.

        Args:
            terminal: Terminal frames are drawn on and keys are read from
            renderer: Renderer producing frames
            start_date: Start and default date, today if omitted
            highlights: Dates shown highlighted
            title: Title shown before the selected date
            search_runner: Optional search command run for every selected date
            debug: Show the last pressed key below the date
            clock: Callable returning today's date
        """
        self.terminal = terminal
        self.renderer = renderer
        self.highlights = frozenset(highlights)
        self.title = title
        self.search_runner = search_runner
        self.debug = debug

        # UI components
        self.navigation = NavigationState(start_date, clock=clock)
        self.keyboard = KeyboardHandler(terminal.fileno())

        # State
        self._running = False
        self._result: Optional[date] = None
        self._last_key: Optional[str] = None
        self._search_date: Optional[date] = None
        self._search_lines: List[str] = []

        self._setup_keyboard_handlers()
        self.navigation.add_change_callback(self._on_selection_changed)

        logger.debug("Interactive controller initialized")

    def _setup_keyboard_handlers(self) -> None:
        """Bind every special key with a command and route printable characters."""
        for key_code, command in KEY_BINDINGS.items():
            self.keyboard.register_key_handler(
                key_code, functools.partial(self._handle_command, command)
            )
        self.keyboard.register_char_handler(self._handle_character)
        self.keyboard.register_raw_key_handler(self._record_key)

        logger.debug("Keyboard handlers configured")

    def _record_key(self, key_data: str) -> None:
        self._last_key = key_data

    async def _handle_character(self, char: str) -> None:
        """Handle a printable character: run its command or just redraw."""
        command = command_for_char(char)
        if command is None:
            logger.debug(f"No command bound to {char!r}")
            await self._update_display()
            return
        await self._handle_command(command)

    async def _handle_command(self, command: Command) -> None:
        """Apply one command and redraw, or end the session on confirm/cancel.

        Args:
            command: Command issued by the pressed key
        """
        if command.ends_session:
            if command.kind == CommandKind.CONFIRM:
                self._result = self.navigation.selected_date
                logger.info(f"User confirmed {self.navigation.state.text}")
            else:
                self._result = None
                logger.info("User cancelled date selection")
            self.stop()
            return

        self.navigation.apply(command)
        await self._update_display()

    def _on_selection_changed(self, state: SelectionState) -> None:
        """Forget search results that belong to another date."""
        if self._search_date is not None and state.current != self._search_date:
            self._search_date = None
            self._search_lines = []

    async def _refresh_search(self, selected: date) -> List[str]:
        """Run the search command once per selected date.

        Raises:
            SearchCommandError: If the search command fails
        """
        if self.search_runner is None:
            return []
        if self._search_date != selected:
            self._search_lines = await self.search_runner.run(selected)
            self._search_date = selected
        return self._search_lines

    async def _update_display(self) -> None:
        """Render the three month panels, the status line and search results."""
        state = self.navigation.state
        grids = compose_panels(state.current, self.navigation.today, self.highlights)
        search_lines = await self._refresh_search(state.current)

        debug_line = None
        if self.debug and self._last_key is not None:
            debug_line = f"Key pressed: {self._last_key!r}"

        frame = self.renderer.render_frame(
            grids,
            self.navigation.get_status_text(),
            state.cursor,
            title=self.title,
            search_lines=search_lines,
            debug_line=debug_line,
            terminal_width=self.terminal.width,
        )
        self.terminal.draw(frame)

    async def start(self) -> Optional[date]:
        """Run the interactive loop until the user confirms or cancels.

        Returns:
            Confirmed date, None if the user cancelled

        Raises:
            TerminalError: If keys cannot be read from the terminal
            SearchCommandError: If the search command fails
        """
        if self._running:
            logger.warning("Interactive controller already running")
            return None

        self._running = True
        self._result = None
        logger.debug("Starting interactive date selection")

        try:
            await self._update_display()
            await self.keyboard.start_listening()
        finally:
            self._running = False
            logger.debug("Interactive date selection stopped")

        return self._result

    def stop(self) -> None:
        """Stop the interactive loop after the current key."""
        self._running = False
        self.keyboard.stop_listening()

    @property
    def is_running(self) -> bool:
        """Check if interactive controller is running."""
        return self._running

    @property
    def current_date(self) -> date:
        """Get the currently selected date."""
        return self.navigation.selected_date
