"""
Configuration management for the directory poller.

Handles environment variables, optional ``.env`` loading, and provides
default settings with validation for the poller, its output channels and
logging.
"""

import fnmatch
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dirpoll.models.exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Logging level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BackpressurePolicy(str, Enum):
    """What an output channel does when its consumer falls behind."""

    GROW = "grow"  # unbounded queue
    BLOCK = "block"  # publisher waits for free space
    DROP_OLDEST = "drop_oldest"  # discard the oldest queued item


class PollerConfig(BaseSettings):
    """
    Central configuration class for the directory poller.

    Every option can be set through a ``DIRPOLL_`` prefixed environment
    variable or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="DIRPOLL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # === Polling Configuration ===
    root_path: Path = Field(default=Path("."), description="Root directory tracked by the poller")
    poll_interval_seconds: float = Field(
        default=1.0, ge=0.01, le=3600.0, description="Delay between two poll cycles"
    )
    follow_symlinks: bool = Field(default=False, description="Descend into symlinked directories")
    ignored_patterns: list[str] = Field(
        default_factory=list, description="fnmatch patterns for entries left out of snapshots"
    )

    # === Output Channel Configuration ===
    channel_capacity: int = Field(
        default=0, ge=0, le=1_000_000, description="Maximum queued items per output channel (0 = unbounded)"
    )
    backpressure: BackpressurePolicy = Field(
        default=BackpressurePolicy.GROW, description="Behaviour of a full output channel"
    )

    # === Native Notification Trigger ===
    native_trigger_enabled: bool = Field(
        default=False, description="Use OS change notifications to trigger early polls"
    )
    trigger_debounce_seconds: float = Field(
        default=0.5, ge=0.0, le=30.0, description="Quiet period before a native change triggers a poll"
    )

    # === Logging Configuration ===
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_file: Path | None = Field(default=None, description="Log file path (stderr if None)")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log message format"
    )

    # === Development Configuration ===
    debug_mode: bool = Field(default=False, description="Enable debug mode with verbose logging")

    @model_validator(mode='after')
    def validate_channel_settings(self):
        """Ensure the backpressure policy matches the channel capacity."""
        if self.backpressure == BackpressurePolicy.GROW and self.channel_capacity != 0:
            raise ConfigurationError(
                "channel_capacity must be 0 when backpressure is 'grow'",
                config_key="channel_capacity",
                expected_type="0 for unbounded channels",
                actual_value=self.channel_capacity,
            )
        if self.backpressure != BackpressurePolicy.GROW and self.channel_capacity == 0:
            raise ConfigurationError(
                f"channel_capacity must be positive when backpressure is '{self.backpressure.value}'",
                config_key="channel_capacity",
                expected_type="int > 0",
                actual_value=self.channel_capacity,
            )
        return self

    def should_ignore(self, relative_path: str) -> bool:
        """Check if an entry should be left out based on the ignore patterns."""
        name = relative_path.rsplit('/', 1)[-1]
        return any(
            fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(relative_path, pattern)
            for pattern in self.ignored_patterns
        )

    def effective_log_level(self) -> str:
        """Log level after applying debug mode."""
        if self.debug_mode:
            return LogLevel.DEBUG.value
        return self.log_level.value

    def get_log_config(self) -> dict[str, Any]:
        """Get logging configuration dictionary."""
        level = self.effective_log_level()
        config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"standard": {"format": self.log_format}},
            "handlers": {
                "default": {
                    "level": level,
                    "formatter": "standard",
                    "class": "logging.StreamHandler" if not self.log_file else "logging.FileHandler",
                }
            },
            "loggers": {"dirpoll": {"handlers": ["default"], "level": level, "propagate": False}},
        }

        if self.log_file:
            config["handlers"]["default"]["filename"] = str(self.log_file)

        return config


# Global configuration instance
_config: PollerConfig | None = None


def get_config() -> PollerConfig:
    """
    Get the global configuration instance.

    Creates a new instance on first call and reuses it for subsequent calls.
    """
    global _config
    if _config is None:
        _config = PollerConfig()
    return _config


def reload_config() -> PollerConfig:
    """
    Force reload the configuration from environment/files.

    Useful for testing or when configuration needs to be updated at runtime.
    """
    global _config
    _config = PollerConfig()
    return _config


def set_config(config: PollerConfig) -> None:
    """
    Set a custom configuration instance.

    Primarily used for testing or advanced configuration scenarios.
    """
    global _config
    _config = config
