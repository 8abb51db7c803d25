"""Unit tests for replacement of the running executable.

Failure injection covers each filesystem step; the executable path must
hold either the old or the new binary afterwards.
"""

import os
import stat
import sys
from pathlib import Path

import pytest
from unittest.mock import patch

from autoupdater.updater import replacer
from autoupdater.updater.exceptions import FilesystemError
from autoupdater.updater.replacer import (
    cleanup_old,
    get_current_executable,
    make_executable,
    old_path_for,
    replace_current_executable,
    rollback,
    staged_path_for,
)

OLD_CONTENT = b"#!old binary\n" + b"\x00" * 64
NEW_CONTENT = b"#!new binary\n" + b"\x01" * 128

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")


def failing_replace_for(source: Path):
    """Build an os.replace stand-in that fails only for one source path."""
    real_replace = os.replace

    def fake_replace(src, dst):
        if Path(src) == source:
            raise OSError(f"simulated rename failure for {src}")
        return real_replace(src, dst)

    return fake_replace


class TestSiblingPaths:
    """Tests for backup and staging path names."""

    def test_old_path(self):
        assert old_path_for(Path("/opt/app/tool")) == Path("/opt/app/tool.exe.old")

    def test_old_path_windows_style(self):
        assert old_path_for(Path("C:/app/tool.exe")) == Path("C:/app/tool.exe.old")

    def test_staged_path(self):
        assert staged_path_for(Path("/opt/app/tool.exe")) == Path("/opt/app/tool.updated")


class TestGetCurrentExecutable:
    """Tests for get_current_executable."""

    def test_frozen_uses_sys_executable(self, tmp_path, monkeypatch):
        """Test frozen builds report their own binary."""
        binary = tmp_path / "frozen-app"
        monkeypatch.setattr(sys, "frozen", True, raising=False)
        monkeypatch.setattr(sys, "executable", str(binary))
        assert get_current_executable() == binary.resolve()

    def test_script_uses_argv0(self, tmp_path, monkeypatch):
        """Test scripts report the launched file."""
        script = tmp_path / "tool"
        monkeypatch.delattr(sys, "frozen", raising=False)
        monkeypatch.setattr(sys, "argv", [str(script), "update"])
        assert get_current_executable() == script.resolve()


class TestMakeExecutable:
    """Tests for make_executable."""

    @posix_only
    def test_sets_execute_bits(self, downloaded_binary):
        """Test owner, group and other execute bits are set."""
        make_executable(downloaded_binary)
        mode = stat.S_IMODE(downloaded_binary.stat().st_mode)
        assert mode == 0o755

    def test_noop_on_windows(self, downloaded_binary, monkeypatch):
        """Test no chmod happens on Windows."""
        monkeypatch.setattr(sys, "platform", "win32")
        with patch.object(replacer.os, "chmod") as mock_chmod:
            make_executable(downloaded_binary)
            mock_chmod.assert_not_called()

    @posix_only
    def test_missing_file(self, tmp_path):
        """Test chmod failure raises FilesystemError."""
        with pytest.raises(FilesystemError) as exc_info:
            make_executable(tmp_path / "missing")
        assert exc_info.value.operation == "set permissions on"


class TestReplaceCurrentExecutable:
    """Tests for replace_current_executable."""

    def test_success(self, fake_executable, downloaded_binary):
        """Test new binary in place, old one kept as backup."""
        old = replace_current_executable(downloaded_binary, fake_executable)

        assert fake_executable.read_bytes() == NEW_CONTENT
        assert old == old_path_for(fake_executable)
        assert old.read_bytes() == OLD_CONTENT
        assert not staged_path_for(fake_executable).exists()

    @posix_only
    def test_new_binary_is_executable(self, fake_executable, downloaded_binary):
        """Test the installed binary carries execute permission."""
        replace_current_executable(downloaded_binary, fake_executable)
        assert os.access(fake_executable, os.X_OK)

    def test_download_left_in_place(self, fake_executable, downloaded_binary):
        """Test the downloaded file is copied, not moved."""
        replace_current_executable(downloaded_binary, fake_executable)
        assert downloaded_binary.read_bytes() == NEW_CONTENT

    def test_replaces_stale_backup(self, fake_executable, downloaded_binary):
        """Test a backup from a previous update is discarded."""
        old = old_path_for(fake_executable)
        old.write_bytes(b"ancient binary")

        replace_current_executable(downloaded_binary, fake_executable)

        assert old.read_bytes() == OLD_CONTENT

    def test_stale_backup_removal_failure_ignored(self, fake_executable, downloaded_binary):
        """Test failing to delete the stale backup does not abort."""
        old = old_path_for(fake_executable)
        old.write_bytes(b"ancient binary")

        with patch.object(Path, "unlink", side_effect=PermissionError("locked")):
            replace_current_executable(downloaded_binary, fake_executable)

        assert fake_executable.read_bytes() == NEW_CONTENT

    def test_defaults_to_running_program(self, fake_executable, downloaded_binary, monkeypatch):
        """Test the running program is replaced when no path is given."""
        monkeypatch.setattr(replacer, "get_current_executable", lambda: fake_executable)

        replace_current_executable(downloaded_binary)

        assert fake_executable.read_bytes() == NEW_CONTENT

    def test_copy_failure_keeps_original(self, fake_executable, downloaded_binary):
        """Test a failed copy leaves the original binary intact."""
        with patch.object(replacer.shutil, "copy", side_effect=OSError("disk full")):
            with pytest.raises(FilesystemError) as exc_info:
                replace_current_executable(downloaded_binary, fake_executable)

        assert exc_info.value.operation == "stage new executable at"
        assert fake_executable.read_bytes() == OLD_CONTENT
        assert not staged_path_for(fake_executable).exists()
        assert not old_path_for(fake_executable).exists()

    def test_partial_copy_failure_never_truncates_original(
        self, fake_executable, downloaded_binary
    ):
        """Test a copy dying mid-write only affects the staging file."""

        def partial_copy(src, dst):
            Path(dst).write_bytes(b"")
            raise OSError("I/O error")

        with patch.object(replacer.shutil, "copy", side_effect=partial_copy):
            with pytest.raises(FilesystemError):
                replace_current_executable(downloaded_binary, fake_executable)

        assert fake_executable.stat().st_size > 0
        assert fake_executable.read_bytes() == OLD_CONTENT
        assert not staged_path_for(fake_executable).exists()

    def test_rename_to_old_failure_keeps_original(self, fake_executable, downloaded_binary):
        """Test failing to move the current binary aborts safely."""
        fake_replace = failing_replace_for(fake_executable)

        with patch.object(replacer.os, "replace", side_effect=fake_replace):
            with pytest.raises(FilesystemError) as exc_info:
                replace_current_executable(downloaded_binary, fake_executable)

        assert exc_info.value.operation == "move current executable to"
        assert fake_executable.read_bytes() == OLD_CONTENT
        assert not staged_path_for(fake_executable).exists()

    def test_install_failure_restores_original(self, fake_executable, downloaded_binary):
        """Test failing to move the new binary in place restores the old one."""
        fake_replace = failing_replace_for(staged_path_for(fake_executable))

        with patch.object(replacer.os, "replace", side_effect=fake_replace):
            with pytest.raises(FilesystemError) as exc_info:
                replace_current_executable(downloaded_binary, fake_executable)

        assert exc_info.value.operation == "install new executable at"
        assert fake_executable.read_bytes() == OLD_CONTENT
        assert not staged_path_for(fake_executable).exists()

    def test_install_and_restore_failure_keeps_backup(
        self, fake_executable, downloaded_binary
    ):
        """Test the documented crash window: the backup survives for recovery."""
        staged = staged_path_for(fake_executable)
        old = old_path_for(fake_executable)
        real_replace = os.replace

        def fake_replace(src, dst):
            if Path(src) in (staged, old):
                raise OSError("simulated crash")
            return real_replace(src, dst)

        with patch.object(replacer.os, "replace", side_effect=fake_replace):
            with pytest.raises(FilesystemError):
                replace_current_executable(downloaded_binary, fake_executable)

        assert not fake_executable.exists()
        assert old.read_bytes() == OLD_CONTENT

        rollback(fake_executable)
        assert fake_executable.read_bytes() == OLD_CONTENT


class TestRollbackAndCleanup:
    """Tests for rollback and cleanup_old."""

    def test_rollback_restores_previous(self, fake_executable, downloaded_binary):
        """Test rollback puts the previous binary back."""
        replace_current_executable(downloaded_binary, fake_executable)

        rollback(fake_executable)

        assert fake_executable.read_bytes() == OLD_CONTENT
        assert not old_path_for(fake_executable).exists()

    def test_rollback_without_backup(self, fake_executable):
        """Test rollback fails when there is no backup."""
        with pytest.raises(FilesystemError) as exc_info:
            rollback(fake_executable)
        assert exc_info.value.operation == "find backup executable"

    def test_cleanup_old(self, fake_executable, downloaded_binary):
        """Test cleanup_old removes the backup."""
        replace_current_executable(downloaded_binary, fake_executable)

        assert cleanup_old(fake_executable) is True
        assert not old_path_for(fake_executable).exists()
        assert fake_executable.read_bytes() == NEW_CONTENT

    def test_cleanup_old_nothing_to_do(self, fake_executable):
        """Test cleanup_old without a backup."""
        assert cleanup_old(fake_executable) is False
