"""Shared fixtures for UI tests."""

from datetime import date
from unittest.mock import AsyncMock, Mock

import pytest

from calpick.display.console_renderer import ConsoleRenderer
from calpick.ui.interactive import InteractiveController


@pytest.fixture
def mock_terminal():
    """Mock terminal recording drawn frames."""
    terminal = Mock()
    terminal.width = 80
    terminal.fileno.return_value = 0
    return terminal


@pytest.fixture
def mock_search_runner():
    """Mock search runner returning two lines."""
    runner = Mock()
    runner.run = AsyncMock(return_value=["first match", "second match"])
    return runner


@pytest.fixture
def interactive_controller(mock_terminal, clock):
    """Pre-configured InteractiveController starting on 2024-05-17."""
    return InteractiveController(
        mock_terminal,
        ConsoleRenderer(use_colors=False),
        start_date=date(2024, 5, 17),
        clock=clock,
    )
