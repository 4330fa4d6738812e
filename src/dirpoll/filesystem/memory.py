"""
In-memory filesystem capability.

Used as a deterministic stand-in for the OS filesystem: every mutation
advances a logical clock by one second, so a modified entry always gets a
strictly later modification time than the one it had before.
"""

from datetime import UTC, datetime, timedelta
from pathlib import PurePosixPath

from dirpoll.core.interfaces import IFileSystem
from dirpoll.models import EntryInfo, FilesystemError, FilesystemErrorKind

EPOCH = datetime(2024, 1, 1, tzinfo=UTC)


class _MemoryEntry:
    def __init__(self, name: str, is_dir: bool, mod_time: datetime):
        self.name = name
        self.is_dir = is_dir
        self.mod_time = mod_time
        self.children: dict[str, _MemoryEntry] = {}
        self.unreadable = False

    def info(self) -> EntryInfo:
        return EntryInfo(name=self.name, is_dir=self.is_dir, mod_time=self.mod_time)


class InMemoryFileSystem(IFileSystem):
    """
    Mutable directory tree held in memory.

    Paths are '/' separated and relative to the root; "" and "." name the
    root itself. Mutators raise the same ``OSError`` subclasses the ``os``
    module would, while the read side raises ``FilesystemError``.
    """

    def __init__(self, root_name: str = "."):
        self._clock = EPOCH
        self._root = _MemoryEntry(root_name, True, self._tick())

    @classmethod
    def with_default_tree(cls) -> "InMemoryFileSystem":
        """Create a filesystem holding ``file1``, ``file2`` and ``subfolder/file3``."""
        fs = cls()
        fs.add_file("file1")
        fs.add_file("file2")
        fs.add_dir("subfolder")
        fs.add_file("subfolder/file3")
        return fs

    @property
    def now(self) -> datetime:
        """Current value of the logical clock."""
        return self._clock

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    @staticmethod
    def _parts(path: str) -> list[str]:
        return [part for part in PurePosixPath(path).parts if part not in ("/", ".")]

    def _lookup(self, path: str, operation: str) -> _MemoryEntry:
        entry = self._root
        for part in self._parts(path):
            if not entry.is_dir:
                raise FilesystemError(
                    f"Not a directory: {path}", path=path, kind=FilesystemErrorKind.NOT_A_DIRECTORY, operation=operation
                )
            if entry.unreadable:
                raise FilesystemError(
                    f"Permission denied: {path}",
                    path=path,
                    kind=FilesystemErrorKind.PERMISSION_DENIED,
                    operation=operation,
                )
            child = entry.children.get(part)
            if child is None:
                raise FilesystemError(
                    f"No such file or directory: {path}",
                    path=path,
                    kind=FilesystemErrorKind.NOT_FOUND,
                    operation=operation,
                )
            entry = child
        return entry

    def _parent_for_change(self, path: str) -> tuple[_MemoryEntry, str]:
        parts = self._parts(path)
        if not parts:
            raise ValueError("The root entry cannot be created or removed")
        parent = self._root
        for part in parts[:-1]:
            child = parent.children.get(part)
            if child is None:
                raise FileNotFoundError(f"No such directory: {part} in {path}")
            if not child.is_dir:
                raise NotADirectoryError(f"Not a directory: {part} in {path}")
            parent = child
        return parent, parts[-1]

    # Read side (IFileSystem)

    def stat(self, path: str) -> EntryInfo:
        return self._lookup(path, "stat").info()

    def list_entries(self, path: str) -> list[EntryInfo]:
        entry = self._lookup(path, "list_entries")
        if not entry.is_dir:
            raise FilesystemError(
                f"Not a directory: {path}", path=path, kind=FilesystemErrorKind.NOT_A_DIRECTORY, operation="list_entries"
            )
        if entry.unreadable:
            raise FilesystemError(
                f"Permission denied: {path}",
                path=path,
                kind=FilesystemErrorKind.PERMISSION_DENIED,
                operation="list_entries",
            )
        return [child.info() for child in entry.children.values()]

    # Mutators

    def exists(self, path: str) -> bool:
        try:
            self._lookup(path, "exists")
        except FilesystemError:
            return False
        return True

    def add_file(self, path: str, mod_time: datetime | None = None) -> None:
        """Create a file; its parent directory must exist."""
        self._add(path, is_dir=False, mod_time=mod_time)

    def add_dir(self, path: str, parents: bool = False) -> None:
        """Create a directory, optionally creating missing parents."""
        if parents:
            prefix = ""
            for part in self._parts(path)[:-1]:
                prefix = f"{prefix}/{part}" if prefix else part
                if not self.exists(prefix):
                    self._add(prefix, is_dir=True)
        self._add(path, is_dir=True)

    def _add(self, path: str, is_dir: bool, mod_time: datetime | None = None) -> None:
        parent, name = self._parent_for_change(path)
        if name in parent.children:
            raise FileExistsError(f"Entry already exists: {path}")
        stamp = self._tick()
        parent.children[name] = _MemoryEntry(name, is_dir, mod_time or stamp)
        parent.mod_time = stamp

    def touch(self, path: str, mod_time: datetime | None = None) -> None:
        """Update an entry's modification time, creating a file if it is missing."""
        parent, name = self._parent_for_change(path)
        entry = parent.children.get(name)
        if entry is None:
            self.add_file(path, mod_time=mod_time)
            return
        stamp = self._tick()
        entry.mod_time = mod_time or stamp

    def remove(self, path: str) -> None:
        """Remove an entry and, for a directory, everything below it."""
        parent, name = self._parent_for_change(path)
        if name not in parent.children:
            raise FileNotFoundError(f"No such file or directory: {path}")
        del parent.children[name]
        parent.mod_time = self._tick()

    def set_unreadable(self, path: str, unreadable: bool = True) -> None:
        """Make listing a directory fail with a permission error."""
        entry = self._lookup(path, "set_unreadable")
        if not entry.is_dir:
            raise NotADirectoryError(f"Not a directory: {path}")
        entry.unreadable = unreadable
