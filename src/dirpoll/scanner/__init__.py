"""Snapshot building."""

from .snapshot_builder import SnapshotBuilder

__all__ = ["SnapshotBuilder"]
