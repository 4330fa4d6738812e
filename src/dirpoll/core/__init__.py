"""Core contracts shared by the poller components."""

from dirpoll.core.interfaces import IFileSystem, IPollTarget

__all__ = [
    "IFileSystem",
    "IPollTarget",
]
