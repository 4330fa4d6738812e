"""
Snapshot builder: walks a directory tree through a filesystem capability
and produces an immutable ``Snapshot``.
"""

import logging
import time
from collections.abc import Callable
from pathlib import Path

from dirpoll.core.interfaces import IFileSystem
from dirpoll.models import EntryInfo, FilesystemError, FilesystemErrorKind, Node, Snapshot
from dirpoll.models.exceptions import filesystem_error_from_os_error
from dirpoll.models.snapshot import join_path

logger = logging.getLogger(__name__)


class SnapshotBuilder:
    """
    Builds snapshots of a tracked root.

    The build either returns a complete snapshot or raises
    ``FilesystemError``; a listing failure anywhere in the tree aborts the
    whole build.
    """

    def __init__(
        self,
        filesystem: IFileSystem,
        should_ignore: Callable[[str], bool] | None = None,
    ):
        """
        Initialize the builder.

        Args:
            filesystem: Capability used to stat and list entries
            should_ignore: Optional predicate on an entry's relative path;
                matching entries (and everything below them) are left out
        """
        self.filesystem = filesystem
        self.should_ignore = should_ignore

    def build(self, root_path: str | Path) -> Snapshot:
        """
        Capture the tree below ``root_path``.

        Args:
            root_path: Root directory in the filesystem's path space

        Returns:
            A fully populated snapshot

        Raises:
            FilesystemError: If the root is missing, is not a directory, or
                any directory below it cannot be listed
        """
        root = str(root_path)
        started = time.perf_counter()

        try:
            root_info = self.filesystem.stat(root)
            if not root_info.is_dir:
                raise FilesystemError(
                    f"Root path is not a directory: {root}",
                    path=root,
                    kind=FilesystemErrorKind.NOT_A_DIRECTORY,
                    operation="build",
                )
            listings = self._list_tree(root, root_info)
        except OSError as e:
            raise filesystem_error_from_os_error(
                f"Failed to read {root}: {e}", path=root, operation="build", underlying_error=e
            ) from e

        snapshot = Snapshot(root_path=root, root=self._assemble(listings))
        logger.debug(
            "Built snapshot of %s: %d entries in %.3fs",
            root,
            snapshot.entry_count,
            time.perf_counter() - started,
        )
        return snapshot

    def _list_tree(self, root: str, root_info: EntryInfo) -> list[tuple[str, EntryInfo, list[EntryInfo]]]:
        """List every directory, parents strictly before their subdirectories."""
        listings: list[tuple[str, EntryInfo, list[EntryInfo]]] = []
        pending: list[tuple[str, str, EntryInfo]] = [("", root, root_info)]

        while pending:
            relative, fs_path, info = pending.pop()
            entries = [
                entry for entry in self.filesystem.list_entries(fs_path) if not self._ignored(relative, entry)
            ]
            listings.append((relative, info, entries))

            for entry in entries:
                if entry.is_dir:
                    pending.append(
                        (join_path(relative, entry.name), self.filesystem.join(fs_path, entry.name), entry)
                    )

        return listings

    def _assemble(self, listings: list[tuple[str, EntryInfo, list[EntryInfo]]]) -> Node:
        """Create nodes bottom-up so each one is constructed exactly once, complete."""
        directories: dict[str, Node] = {}

        for relative, info, entries in reversed(listings):
            children: dict[str, Node] = {}
            for entry in entries:
                if entry.is_dir:
                    children[entry.name] = directories.pop(join_path(relative, entry.name))
                else:
                    children[entry.name] = Node.from_entry(entry)
            directories[relative] = Node.from_entry(info, children)

        return directories[""]

    def _ignored(self, parent: str, entry: EntryInfo) -> bool:
        if self.should_ignore is None:
            return False
        return self.should_ignore(join_path(parent, entry.name))
