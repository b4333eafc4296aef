"""User interface components for interactive date picking."""

from .interactive import InteractiveController
from .keyboard import KeyboardHandler, KeyCode
from .navigation import NavigationState, SelectionState

__all__ = [
    "InteractiveController",
    "KeyCode",
    "KeyboardHandler",
    "NavigationState",
    "SelectionState",
]
