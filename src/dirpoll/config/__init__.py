"""Configuration management and settings."""

from dirpoll.config.settings import BackpressurePolicy, LogLevel, PollerConfig, get_config, reload_config, set_config

__all__ = ["PollerConfig", "BackpressurePolicy", "LogLevel", "get_config", "reload_config", "set_config"]
