"""Configuration package for calpick."""

from .settings import LoggingSettings, PickerSettings, apply_cli_overrides

__all__ = ["LoggingSettings", "PickerSettings", "apply_cli_overrides"]
