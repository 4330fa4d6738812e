"""
dirpoll: polling-based change detection for directory trees.

Builds immutable snapshots of a tracked root, diffs consecutive snapshots
and delivers the resulting created/modified/deleted events in an order
that is safe to apply sequentially.
"""

from dirpoll.config import PollerConfig, get_config
from dirpoll.diff import diff, iter_diff
from dirpoll.filesystem import InMemoryFileSystem, LocalFileSystem
from dirpoll.models import (
    DiffEvent,
    DiffKind,
    EntryInfo,
    FilesystemError,
    FilesystemErrorKind,
    Node,
    Snapshot,
)
from dirpoll.monitoring import EventChannel, NativeChangeTrigger, Poller, PollerState
from dirpoll.scanner import SnapshotBuilder

__version__ = "0.1.0"

__all__ = [
    "DiffEvent",
    "DiffKind",
    "EntryInfo",
    "EventChannel",
    "FilesystemError",
    "FilesystemErrorKind",
    "InMemoryFileSystem",
    "LocalFileSystem",
    "NativeChangeTrigger",
    "Node",
    "Poller",
    "PollerConfig",
    "PollerState",
    "Snapshot",
    "SnapshotBuilder",
    "diff",
    "get_config",
    "iter_diff",
]
