"""Unit tests for custom exception classes."""

import pytest
from dirpoll.models import (
    BaseError,
    ChannelClosedError,
    ConfigurationError,
    FilesystemError,
    FilesystemErrorKind,
    MonitoringError,
)
from dirpoll.models.exceptions import filesystem_error_from_os_error


class TestBaseError:
    """Test cases for BaseError."""

    def test_str_with_code(self):
        """Test that the error code prefixes the message."""
        assert str(BaseError("boom", error_code="X")) == "[X] boom"

    def test_str_without_code(self):
        """Test the plain message when no code is set."""
        error = BaseError("boom")

        assert str(error) == "boom"
        assert error.context == {}

    def test_repr(self):
        """Test debugging representation."""
        assert repr(BaseError("boom", error_code="X")) == "BaseError(message='boom', error_code='X', context={})"


class TestFilesystemError:
    """Test cases for FilesystemError."""

    def test_attributes(self):
        """Test that path, kind and operation are exposed."""
        cause = PermissionError("denied")
        error = FilesystemError(
            "Cannot list a",
            path="a",
            kind=FilesystemErrorKind.PERMISSION_DENIED,
            operation="list_entries",
            underlying_error=cause,
        )

        assert isinstance(error, BaseError)
        assert error.error_code == "FILESYSTEM_ERROR"
        assert error.path == "a"
        assert error.kind == FilesystemErrorKind.PERMISSION_DENIED
        assert error.operation == "list_entries"
        assert error.cause is cause
        assert error.context == {"kind": "permission_denied", "path": "a", "operation": "list_entries"}

    def test_default_kind(self):
        """Test that the kind defaults to unreadable."""
        assert FilesystemError("broken").kind == FilesystemErrorKind.UNREADABLE

    @pytest.mark.parametrize(
        "os_error,kind",
        [
            (FileNotFoundError(2, "missing"), FilesystemErrorKind.NOT_FOUND),
            (NotADirectoryError(20, "not a dir"), FilesystemErrorKind.NOT_A_DIRECTORY),
            (PermissionError(13, "denied"), FilesystemErrorKind.PERMISSION_DENIED),
            (OSError(5, "I/O error"), FilesystemErrorKind.UNREADABLE),
        ],
    )
    def test_from_os_error(self, os_error, kind):
        """Test mapping OS errors to filesystem error kinds."""
        error = filesystem_error_from_os_error("failed", path="p", operation="stat", underlying_error=os_error)

        assert error.kind == kind
        assert error.cause is os_error


class TestOtherErrors:
    """Test cases for the remaining error types."""

    def test_configuration_error_context(self):
        """Test configuration error context."""
        error = ConfigurationError("bad", config_key="channel_capacity", expected_type="int", actual_value=0)

        assert error.error_code == "CONFIG_ERROR"
        assert error.context == {"config_key": "channel_capacity", "expected_type": "int", "actual_value": "0"}

    def test_monitoring_error(self):
        """Test monitoring error context."""
        error = MonitoringError("Poller is closed", path="/data", operation="poll")

        assert str(error) == "[MONITORING_ERROR] Poller is closed"
        assert error.context == {"path": "/data", "operation": "poll"}

    def test_channel_closed_error(self):
        """Test channel closed error."""
        error = ChannelClosedError("events")

        assert error.message == "Channel is closed"
        assert error.context == {"channel": "events"}
