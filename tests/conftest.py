"""Shared test configuration and fixtures."""

import logging
import os
from datetime import date
from pathlib import Path

import pytest

from calpick.config.settings import PickerSettings
from calpick.utils.logging import LOGGER_NAME

FIXED_TODAY = date(2024, 5, 17)  # A Friday


@pytest.fixture
def today() -> date:
    """Fixed "today" so no test depends on the wall clock."""
    return FIXED_TODAY


@pytest.fixture
def clock(today):
    """Clock callable returning the fixed today."""
    return lambda: today


@pytest.fixture
def isolated_env(monkeypatch, tmp_path: Path) -> Path:
    """Remove CALPICK_ environment variables and point HOME at a temporary directory."""
    for name in list(os.environ):
        if name.startswith("CALPICK_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def picker_settings(isolated_env: Path) -> PickerSettings:
    """Settings isolated from the user's configuration and environment."""
    return PickerSettings(
        config_dir=isolated_env / "config",
        data_dir=isolated_env / "data",
    )


@pytest.fixture(autouse=True)
def reset_calpick_logger():
    """Remove handlers installed by setup_logging() between tests."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
