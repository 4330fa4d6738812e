"""
Filesystem capability backed by the operating system.
"""

import logging
import os
from datetime import UTC, datetime
from stat import S_ISDIR

from dirpoll.core.interfaces import IFileSystem
from dirpoll.models import EntryInfo
from dirpoll.models.exceptions import filesystem_error_from_os_error

logger = logging.getLogger(__name__)


def _mod_time(st: os.stat_result) -> datetime:
    return datetime.fromtimestamp(st.st_mtime_ns / 1_000_000_000, tz=UTC)


class LocalFileSystem(IFileSystem):
    """
    Reads directory entries with ``os.scandir`` and ``os.stat``.

    Symbolic links below the root are reported as non-directories unless
    ``follow_symlinks`` is set, so link cycles cannot make a walk endless.
    ``stat()`` always resolves links.
    """

    def __init__(self, follow_symlinks: bool = False):
        self.follow_symlinks = follow_symlinks

    def join(self, parent: str, name: str) -> str:
        return os.path.join(parent, name)

    def stat(self, path: str) -> EntryInfo:
        # Always resolved: a tracked root given as a symlink is still a directory.
        try:
            st = os.stat(path)
        except OSError as e:
            raise filesystem_error_from_os_error(
                f"Cannot stat {path}: {e.strerror or e}", path=path, operation="stat", underlying_error=e
            ) from e

        name = os.path.basename(os.path.normpath(path)) or path
        return EntryInfo(name=name, is_dir=S_ISDIR(st.st_mode), mod_time=_mod_time(st))

    def list_entries(self, path: str) -> list[EntryInfo]:
        entries: list[EntryInfo] = []
        try:
            with os.scandir(path) as it:
                for entry in it:
                    try:
                        st = entry.stat(follow_symlinks=self.follow_symlinks)
                    except FileNotFoundError:
                        # Removed between listing and stat; the next cycle reports it as deleted.
                        logger.debug("Entry vanished during scan: %s", entry.path)
                        continue
                    entries.append(
                        EntryInfo(name=entry.name, is_dir=S_ISDIR(st.st_mode), mod_time=_mod_time(st))
                    )
        except OSError as e:
            raise filesystem_error_from_os_error(
                f"Cannot list {path}: {e.strerror or e}", path=path, operation="list_entries", underlying_error=e
            ) from e

        return entries
