"""Data models and error types for the directory poller."""

from dirpoll.models.events import DiffEvent, DiffKind
from dirpoll.models.exceptions import (
    BaseError,
    ChannelClosedError,
    ConfigurationError,
    FilesystemError,
    FilesystemErrorKind,
    MonitoringError,
)
from dirpoll.models.snapshot import EntryInfo, Node, Snapshot

__all__ = [
    "DiffEvent",
    "DiffKind",
    "EntryInfo",
    "Node",
    "Snapshot",
    "BaseError",
    "ChannelClosedError",
    "ConfigurationError",
    "FilesystemError",
    "FilesystemErrorKind",
    "MonitoringError",
]
