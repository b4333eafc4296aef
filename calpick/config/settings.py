"""Settings management using Pydantic for type validation and configuration."""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

MAX_SEARCH_RESULTS_DEFAULT = 5
CONFIG_FILE_NAME = "config.yaml"

_LOG_LEVELS = ("DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    model_config = ConfigDict(validate_assignment=True)

    # Console Logging
    console_enabled: bool = Field(default=True, description="Enable console logging")
    console_level: str = Field(
        default="WARNING",
        description="Console log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL",
    )
    console_colors: bool = Field(
        default=True, description="Enable colored console output (auto-detected)"
    )

    # File Logging
    file_enabled: bool = Field(default=False, description="Enable file logging")
    file_level: str = Field(
        default="DEBUG",
        description="File log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL",
    )
    file_directory: Optional[str] = Field(
        default=None, description="Custom log directory (defaults to data_dir/logs)"
    )
    file_prefix: str = Field(default="calpick", description="Log file prefix")
    max_log_files: int = Field(default=5, ge=1, description="Maximum number of log files to keep")
    include_function_names: bool = Field(
        default=True, description="Include function names and line numbers in file logs"
    )

    # Third-party Libraries
    third_party_level: str = Field(
        default="WARNING", description="Log level for third-party libraries"
    )

    @field_validator("console_level", "file_level", "third_party_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and validate a log level name.

        Args:
            v: Level name in any case

        Returns:
            Upper-case level name

        Raises:
            ValueError: If the level is unknown
        """
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level '{v}'. Use one of: {', '.join(_LOG_LEVELS)}")
        return level


class PickerSettings(BaseSettings):
    """Application settings with YAML file and environment variable support.

    Priority: Command-line > Environment > YAML > Defaults. Command-line values
    are applied afterwards by apply_cli_overrides().
    """

    # Display
    title: str = Field(default="", description="Text shown before the chosen date")

    # External search command
    search_command: Optional[str] = Field(
        default=None,
        description="Command run for every date change, '{}' is replaced by the ISO date",
    )
    max_results: int = Field(
        default=MAX_SEARCH_RESULTS_DEFAULT, ge=0, description="Maximum search result lines shown"
    )
    sort_search: bool = Field(default=False, description="Sort search result lines")
    search_ignore_exit_status: bool = Field(
        default=False, description="Accept search output even if the command exits non-zero"
    )

    # Result output
    output_filename: Optional[Path] = Field(
        default=None, description="File that receives the chosen date in addition to stdout"
    )
    debug: bool = Field(default=False, description="Show pressed keys below the calendar")

    # Paths
    config_dir: Path = Field(
        default_factory=lambda: Path.home() / ".config" / "calpick",
        description="Directory searched for config.yaml",
    )
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".local" / "share" / "calpick",
        description="Directory for log files",
    )
    config_file: Optional[Path] = Field(
        default=None, description="Explicit YAML configuration file"
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_prefix="CALPICK_",
        env_nested_delimiter="__",
        case_sensitive=False,
        validate_assignment=True,
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._load_yaml_config()

    def _find_config_file(self) -> Optional[Path]:
        """Find the YAML config file, an explicit path wins over the config directory."""
        if self.config_file is not None:
            return self.config_file.expanduser()

        user_config = self.config_dir / CONFIG_FILE_NAME
        if user_config.exists():
            return user_config

        return None

    def _load_yaml_config(self) -> None:
        """Load configuration from YAML file if it exists.

        Values already provided by the environment or constructor arguments are
        kept. A broken file is reported and ignored.
        """
        config_file = self._find_config_file()
        if config_file is None or not config_file.exists():
            return

        try:
            with open(config_file, encoding="utf-8") as f:
                config_data = yaml.safe_load(f)

            if not config_data:
                return
            if not isinstance(config_data, dict):
                raise ValueError("top level must be a mapping")

            explicit = self.model_fields_set

            if "title" in config_data and "title" not in explicit:
                self.title = str(config_data["title"])
            if "output_filename" in config_data and "output_filename" not in explicit:
                self.output_filename = config_data["output_filename"]
            if "debug" in config_data and "debug" not in explicit:
                self.debug = config_data["debug"]

            search_config = config_data.get("search") or {}
            search_fields = {
                "command": "search_command",
                "max_results": "max_results",
                "sort": "sort_search",
                "ignore_exit_status": "search_ignore_exit_status",
            }
            for yaml_key, field_name in search_fields.items():
                if yaml_key in search_config and field_name not in explicit:
                    setattr(self, field_name, search_config[yaml_key])

            logging_config = config_data.get("logging") or {}
            for key, value in logging_config.items():
                if key not in LoggingSettings.model_fields:
                    logger.warning(f"Ignoring unknown logging option '{key}' in {config_file}")
                    continue
                if key not in self.logging.model_fields_set:
                    setattr(self.logging, key, value)

            logger.debug(f"Loaded configuration from {config_file}")

        except (OSError, yaml.YAMLError, ValueError, ValidationError) as e:
            # Don't fail if YAML loading fails, just continue with defaults/env vars
            logger.warning(f"Could not load YAML config from {config_file}: {e}")

    @property
    def log_dir(self) -> Path:
        """Directory receiving log files."""
        if self.logging.file_directory:
            return Path(self.logging.file_directory).expanduser()
        return self.data_dir / "logs"


def apply_cli_overrides(settings: PickerSettings, args: Any) -> PickerSettings:
    """Apply command-line picker options to settings.

    Only options actually given on the command line override configured values.

    Args:
        settings: Settings loaded from defaults, YAML and environment
        args: Parsed command-line arguments

    Returns:
        The same settings object with overrides applied
    """
    if getattr(args, "title", None) is not None:
        settings.title = args.title
    if getattr(args, "search", None) is not None:
        settings.search_command = args.search
    if getattr(args, "max_results", None) is not None:
        settings.max_results = args.max_results
    if getattr(args, "sort_search", False):
        settings.sort_search = True
    if getattr(args, "search_ignore_exit_status", False):
        settings.search_ignore_exit_status = True
    if getattr(args, "output_filename", None) is not None:
        settings.output_filename = args.output_filename
    if getattr(args, "debug", False):
        settings.debug = True

    return settings
