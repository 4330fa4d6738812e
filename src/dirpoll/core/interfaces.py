"""
Abstract interfaces for the directory poller.

These interfaces define the contracts between the poller and the outside
world, enabling dependency injection of real or in-memory filesystems and
of anything that can be asked to poll.
"""

from abc import ABC, abstractmethod

from dirpoll.models import EntryInfo


class IFileSystem(ABC):
    """
    Capability to enumerate directory entries and stat them.

    Implementations must not promise anything beyond what these two
    operations return: no inode numbers, no case sensitivity guarantees.
    """

    @abstractmethod
    def stat(self, path: str) -> EntryInfo:
        """
        Get metadata for a single entry.

        Args:
            path: Path of the entry

        Returns:
            Entry metadata (name, type, modification time)

        Raises:
            FilesystemError: If the entry does not exist or cannot be read
        """
        pass

    @abstractmethod
    def list_entries(self, path: str) -> list[EntryInfo]:
        """
        List the entries of a directory.

        Args:
            path: Path of the directory

        Returns:
            Metadata for every entry in the directory, in any order

        Raises:
            FilesystemError: If the directory cannot be listed
        """
        pass

    def join(self, parent: str, name: str) -> str:
        """Build the path of ``name`` inside ``parent``."""
        if parent in ("", "."):
            return name
        return f"{parent.rstrip('/')}/{name}"


class IPollTarget(ABC):
    """Anything that can be asked to run a poll cycle as soon as possible."""

    @abstractmethod
    def request_poll(self) -> None:
        """
        Ask for an early poll cycle.

        Must be called from the target's event loop thread.
        """
        pass
