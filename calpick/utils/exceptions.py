"""Exceptions shared across calpick."""

from typing import Optional


class CalpickError(Exception):
    """Base exception for all calpick errors."""


class InvalidDateError(CalpickError):
    """Exception raised when a date given at startup cannot be parsed."""

    def __init__(self, value: str, message: Optional[str] = None) -> None:
        """Initialize InvalidDateError.

        Args:
            value: The offending date string
            message: Optional error message, a default naming the value is used otherwise
        """
        super().__init__(message or f"Failed to parse date '{value}' (expected YYYY-MM-DD)")
        self.value = value


class SearchCommandError(CalpickError):
    """Exception raised when the external search command cannot produce results."""

    def __init__(self, command: str, reason: str) -> None:
        """Initialize SearchCommandError.

        Args:
            command: The search command (template or expanded command line)
            reason: Why the command failed
        """
        super().__init__(f"Search command '{command}' failed: {reason}")
        self.command = command
        self.reason = reason


class TerminalError(CalpickError):
    """Exception raised when no usable terminal is available for interactive input."""
