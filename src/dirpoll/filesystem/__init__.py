"""Filesystem capabilities the snapshot builder reads through."""

from .local import LocalFileSystem
from .memory import InMemoryFileSystem

__all__ = [
    "LocalFileSystem",
    "InMemoryFileSystem",
]
