"""Configuration management for Marrow."""

from pathlib import Path
from typing import Optional

import click
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from marrow import ConfigurationError


class MarrowConfig(BaseSettings):
    """Application configuration loaded from environment variables.

    Environment variables should be prefixed with MARROW_
    Example: MARROW_TRUNCATE_THRESHOLD=500

    Attributes:
        truncate_threshold: Outputs with more lines than this are paginated
        head_lines: Lines shown before the hidden middle of a long output
        tail_lines: Lines shown after the hidden middle of a long output
        reveal_step: Default "show more" amount
        settings_path: Location of the per-extension view settings file
        log_level: Logging level used by the CLI
    """

    # Output pagination
    truncate_threshold: int = Field(
        default=290,
        ge=1,
        description="Line count above which an output is truncated",
    )
    head_lines: int = Field(
        default=200,
        ge=0,
        description="Lines rendered before the hidden middle",
    )
    tail_lines: int = Field(
        default=10,
        ge=0,
        description="Lines rendered after the hidden middle",
    )
    reveal_step: int = Field(
        default=50,
        ge=1,
        description="Default number of lines revealed per request",
    )

    # Persistence
    settings_path: Optional[Path] = Field(
        default=None,
        description="Path of the view settings JSON file",
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Log level for the command-line interface",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MARROW_",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def check_window(self) -> "MarrowConfig":
        """Ensure head and tail leave a hidden middle to paginate."""
        if self.head_lines + self.tail_lines >= self.truncate_threshold:
            raise ConfigurationError(
                f"head_lines + tail_lines ({self.head_lines + self.tail_lines}) "
                f"must be below truncate_threshold ({self.truncate_threshold})"
            )
        return self

    def resolved_settings_path(self) -> Path:
        """Return the settings file path, defaulting to the user config dir."""
        if self.settings_path is not None:
            return self.settings_path
        return Path(click.get_app_dir("marrow")) / "settings.json"


# Global config instance (lazy-loaded)
_config: MarrowConfig | None = None


def get_config() -> MarrowConfig:
    """Get or create the global configuration instance.

    Returns:
        MarrowConfig: The configuration object
    """
    global _config
    if _config is None:
        _config = MarrowConfig()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
