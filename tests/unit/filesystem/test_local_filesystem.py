"""Unit tests for the OS-backed filesystem."""

import os
from unittest.mock import patch

import pytest
from dirpoll.filesystem import LocalFileSystem
from dirpoll.models import FilesystemError, FilesystemErrorKind


class TestLocalFileSystem:
    """Test cases for LocalFileSystem."""

    @pytest.fixture
    def tree(self, tmp_path):
        """Create a small directory tree."""
        (tmp_path / "file1").write_text("one")
        (tmp_path / "subfolder").mkdir()
        (tmp_path / "subfolder" / "file3").write_text("three")
        return tmp_path

    def test_stat_directory(self, tree):
        """Test stat of a directory."""
        info = LocalFileSystem().stat(str(tree / "subfolder"))

        assert info.name == "subfolder"
        assert info.is_dir
        assert info.mod_time.tzinfo is not None

    def test_stat_with_trailing_separator(self, tree):
        """Test that the entry name ignores a trailing separator."""
        info = LocalFileSystem().stat(str(tree / "subfolder") + os.sep)

        assert info.name == "subfolder"

    def test_stat_file_mod_time(self, tree):
        """Test that modification times come from the OS."""
        path = tree / "file1"
        os.utime(path, ns=(1_700_000_000_000_000_000, 1_700_000_000_000_000_000))

        info = LocalFileSystem().stat(str(path))

        assert not info.is_dir
        assert info.mod_time.timestamp() == 1_700_000_000

    def test_list_entries(self, tree):
        """Test listing a directory."""
        entries = {e.name: e for e in LocalFileSystem().list_entries(str(tree))}

        assert set(entries) == {"file1", "subfolder"}
        assert entries["subfolder"].is_dir
        assert not entries["file1"].is_dir

    def test_stat_missing(self, tmp_path):
        """Test stat of a missing path."""
        with pytest.raises(FilesystemError) as exc_info:
            LocalFileSystem().stat(str(tmp_path / "missing"))

        assert exc_info.value.kind == FilesystemErrorKind.NOT_FOUND
        assert exc_info.value.operation == "stat"
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_list_file(self, tree):
        """Test listing something that is not a directory."""
        with pytest.raises(FilesystemError) as exc_info:
            LocalFileSystem().list_entries(str(tree / "file1"))

        assert exc_info.value.kind == FilesystemErrorKind.NOT_A_DIRECTORY

    def test_list_permission_denied(self, tree):
        """Test that permission errors are classified."""
        with patch("dirpoll.filesystem.local.os.scandir", side_effect=PermissionError(13, "Permission denied")):
            with pytest.raises(FilesystemError) as exc_info:
                LocalFileSystem().list_entries(str(tree))

        assert exc_info.value.kind == FilesystemErrorKind.PERMISSION_DENIED

    @pytest.mark.skipif(os.name == "nt", reason="requires symlink support")
    def test_symlinks_not_followed_by_default(self, tree):
        """Test that a link to a directory is reported as a non-directory."""
        os.symlink(tree / "subfolder", tree / "link")

        entries = {e.name: e for e in LocalFileSystem().list_entries(str(tree))}
        followed = {e.name: e for e in LocalFileSystem(follow_symlinks=True).list_entries(str(tree))}

        assert not entries["link"].is_dir
        assert followed["link"].is_dir

    @pytest.mark.skipif(os.name == "nt", reason="requires symlink support")
    def test_dangling_symlink_is_skipped_when_following(self, tree):
        """Test that an entry vanishing during the scan is left out."""
        os.symlink(tree / "gone", tree / "dangling")

        names = {e.name for e in LocalFileSystem(follow_symlinks=True).list_entries(str(tree))}

        assert names == {"file1", "subfolder"}

    def test_join(self):
        """Test joining paths with the OS separator."""
        assert LocalFileSystem().join("a", "b") == os.path.join("a", "b")

    @pytest.mark.skipif(os.name == "nt", reason="requires symlink support")
    def test_stat_resolves_symlinked_directory(self, tree):
        """Test that stat reports the link target's type."""
        os.symlink(tree / "subfolder", tree / "link")

        info = LocalFileSystem().stat(str(tree / "link"))

        assert info.name == "link"
        assert info.is_dir
