"""
Custom exception classes for the directory poller.

Provides specific exception types for the failure scenarios of snapshot
building, polling and configuration so callers can react to each one.
"""

from enum import Enum
from typing import Any


class BaseError(Exception):
    """
    Base exception class for all dirpoll errors.

    All custom exceptions in the package inherit from this base class
    to enable consistent error handling and logging.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize the error.

        Args:
            message: Human-readable error description
            error_code: Optional error code for programmatic handling
            context: Optional dictionary with error context information
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation including error code if present."""
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}', "
            f"context={self.context})"
        )


class ConfigurationError(BaseError):
    """Raised when there are configuration or settings issues."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        expected_type: str | None = None,
        actual_value: Any | None = None,
    ):
        context = {}
        if config_key:
            context["config_key"] = config_key
        if expected_type:
            context["expected_type"] = expected_type
        if actual_value is not None:
            context["actual_value"] = str(actual_value)

        super().__init__(message, error_code="CONFIG_ERROR", context=context)


class FilesystemErrorKind(str, Enum):
    """Reason a filesystem read failed."""

    NOT_FOUND = "not_found"
    NOT_A_DIRECTORY = "not_a_directory"
    PERMISSION_DENIED = "permission_denied"
    UNREADABLE = "unreadable"


class FilesystemError(BaseError):
    """
    Raised when the filesystem capability cannot list or stat an entry.

    Always recoverable at the poller level: a failed snapshot build is
    reported on the error stream and the previous baseline is kept.
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        kind: FilesystemErrorKind = FilesystemErrorKind.UNREADABLE,
        operation: str | None = None,
        underlying_error: Exception | None = None,
    ):
        context: dict[str, Any] = {"kind": kind.value}
        if path:
            context["path"] = path
        if operation:
            context["operation"] = operation

        super().__init__(
            message,
            error_code="FILESYSTEM_ERROR",
            context=context,
            cause=underlying_error,
        )
        self.path = path
        self.kind = kind
        self.operation = operation


class MonitoringError(BaseError):
    """Raised when poller or trigger lifecycle operations fail."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        operation: str | None = None,
        underlying_error: Exception | None = None,
    ):
        context = {}
        if path:
            context["path"] = path
        if operation:
            context["operation"] = operation

        super().__init__(
            message,
            error_code="MONITORING_ERROR",
            context=context,
            cause=underlying_error,
        )


class ChannelClosedError(BaseError):
    """Raised when reading from an output channel that is closed and drained."""

    def __init__(self, channel_name: str | None = None):
        context = {}
        if channel_name:
            context["channel"] = channel_name

        super().__init__("Channel is closed", error_code="CHANNEL_CLOSED", context=context)


def filesystem_error_from_os_error(
    message: str,
    path: str,
    operation: str,
    underlying_error: OSError,
) -> FilesystemError:
    """Translate an ``OSError`` into a ``FilesystemError`` with the matching kind."""
    if isinstance(underlying_error, FileNotFoundError):
        kind = FilesystemErrorKind.NOT_FOUND
    elif isinstance(underlying_error, NotADirectoryError):
        kind = FilesystemErrorKind.NOT_A_DIRECTORY
    elif isinstance(underlying_error, PermissionError):
        kind = FilesystemErrorKind.PERMISSION_DENIED
    else:
        kind = FilesystemErrorKind.UNREADABLE

    return FilesystemError(
        message=message,
        path=path,
        kind=kind,
        operation=operation,
        underlying_error=underlying_error,
    )
