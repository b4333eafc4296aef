"""Execution modes for the calpick CLI."""

from .interactive import run_interactive_mode

__all__ = ["run_interactive_mode"]
