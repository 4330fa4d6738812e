"""Unit tests for poller configuration."""

from pathlib import Path

import pytest
from dirpoll.config import BackpressurePolicy, LogLevel, PollerConfig, get_config, reload_config, set_config
from dirpoll.models import ConfigurationError
from pydantic import ValidationError


class TestPollerConfig:
    """Test cases for PollerConfig."""

    def test_defaults(self):
        """Test default configuration values."""
        config = PollerConfig()

        assert config.root_path == Path(".")
        assert config.poll_interval_seconds == 1.0
        assert config.follow_symlinks is False
        assert config.ignored_patterns == []
        assert config.channel_capacity == 0
        assert config.backpressure == BackpressurePolicy.GROW
        assert config.native_trigger_enabled is False
        assert config.log_level == LogLevel.INFO

    def test_environment_overrides(self, monkeypatch):
        """Test that DIRPOLL_ environment variables are honoured."""
        monkeypatch.setenv("DIRPOLL_POLL_INTERVAL_SECONDS", "2.5")
        monkeypatch.setenv("DIRPOLL_BACKPRESSURE", "drop_oldest")
        monkeypatch.setenv("DIRPOLL_CHANNEL_CAPACITY", "10")
        monkeypatch.setenv("DIRPOLL_IGNORED_PATTERNS", '["*.tmp", ".git"]')

        config = PollerConfig()

        assert config.poll_interval_seconds == 2.5
        assert config.backpressure == BackpressurePolicy.DROP_OLDEST
        assert config.channel_capacity == 10
        assert config.ignored_patterns == ["*.tmp", ".git"]

    def test_interval_bounds(self):
        """Test that the poll interval must be positive."""
        with pytest.raises(ValidationError):
            PollerConfig(poll_interval_seconds=0)

    def test_grow_with_capacity_rejected(self):
        """Test that an unbounded channel cannot have a capacity."""
        with pytest.raises(ConfigurationError) as exc_info:
            PollerConfig(channel_capacity=5)

        assert exc_info.value.context["config_key"] == "channel_capacity"

    @pytest.mark.parametrize("policy", [BackpressurePolicy.BLOCK, BackpressurePolicy.DROP_OLDEST])
    def test_bounded_policy_needs_capacity(self, policy):
        """Test that bounded policies need a positive capacity."""
        with pytest.raises(ConfigurationError):
            PollerConfig(backpressure=policy)

        assert PollerConfig(backpressure=policy, channel_capacity=3).channel_capacity == 3

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("notes.tmp", True),
            ("sub/notes.tmp", True),
            (".git", True),
            ("sub/.git", True),
            ("build/output", True),
            ("src/main.py", False),
            ("output", False),
        ],
    )
    def test_should_ignore(self, path, expected):
        """Test matching ignore patterns against names and relative paths."""
        config = PollerConfig(ignored_patterns=["*.tmp", ".git", "build/*"])

        assert config.should_ignore(path) is expected

    def test_debug_mode_forces_debug_level(self):
        """Test effective log level in debug mode."""
        assert PollerConfig(log_level=LogLevel.ERROR).effective_log_level() == "ERROR"
        assert PollerConfig(log_level=LogLevel.ERROR, debug_mode=True).effective_log_level() == "DEBUG"

    def test_log_config_stream(self):
        """Test logging configuration without a log file."""
        log_config = PollerConfig(log_level=LogLevel.WARNING).get_log_config()

        handler = log_config["handlers"]["default"]
        assert handler["class"] == "logging.StreamHandler"
        assert handler["level"] == "WARNING"
        assert log_config["loggers"]["dirpoll"]["level"] == "WARNING"

    def test_log_config_file(self, tmp_path):
        """Test logging configuration with a log file."""
        log_file = tmp_path / "dirpoll.log"

        handler = PollerConfig(log_file=log_file).get_log_config()["handlers"]["default"]

        assert handler["class"] == "logging.FileHandler"
        assert handler["filename"] == str(log_file)


class TestGlobalConfig:
    """Test cases for the global configuration accessors."""

    @pytest.fixture(autouse=True)
    def reset_global(self, monkeypatch):
        """Isolate the global configuration instance."""
        monkeypatch.setattr("dirpoll.config.settings._config", None)

    def test_get_config_is_cached(self):
        """Test that get_config returns the same instance."""
        assert get_config() is get_config()

    def test_set_config(self):
        """Test replacing the global configuration."""
        config = PollerConfig(poll_interval_seconds=5)
        set_config(config)

        assert get_config() is config

    def test_reload_config(self, monkeypatch):
        """Test reloading picks up environment changes."""
        first = get_config()
        monkeypatch.setenv("DIRPOLL_FOLLOW_SYMLINKS", "true")

        reloaded = reload_config()

        assert reloaded is not first
        assert reloaded.follow_symlinks is True
        assert get_config() is reloaded
