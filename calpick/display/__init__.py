"""Calendar layout and console display components."""

from .calendar_grid import (
    DayCell,
    DayClassification,
    MonthGrid,
    build_month_grid,
    classify_day,
    compose_panels,
)
from .console_renderer import ConsoleRenderer, Frame
from .terminal import Terminal

__all__ = [
    "ConsoleRenderer",
    "DayCell",
    "DayClassification",
    "Frame",
    "MonthGrid",
    "Terminal",
    "build_month_grid",
    "classify_day",
    "compose_panels",
]
