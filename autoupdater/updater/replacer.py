"""Replacement of the running executable.

The swap uses sibling paths of the current executable:

    <dir>/<stem>.updated    staged copy of the new binary
    <dir>/<stem>.exe.old    previous binary, kept for manual rollback

The new binary is staged first. Only then is the current executable
renamed away and the staged copy renamed into its place, so the window
in which the original path is empty is two back-to-back renames.
Not safe to call from several threads or processes at once.
"""

import os
import shutil
import sys
from pathlib import Path
from typing import Optional, Union

from autoupdater.updater.exceptions import FilesystemError
from autoupdater.utils.logging import get_logger

logger = get_logger("replacer")


EXECUTABLE_MODE = 0o755
OLD_SUFFIX = ".exe.old"
STAGED_SUFFIX = ".updated"

PathLike = Union[str, Path]


def get_current_executable() -> Path:
    """
    Locate the currently running program.

    Frozen applications (PyInstaller and similar) report their own binary
    in sys.executable. Otherwise the launched script or console entry
    point in sys.argv[0] is the program being updated.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve()
    return Path(sys.argv[0]).resolve()


def old_path_for(executable: Path) -> Path:
    """Backup location of the previous binary."""
    return executable.with_name(executable.stem + OLD_SUFFIX)


def staged_path_for(executable: Path) -> Path:
    """Staging location of the new binary."""
    return executable.with_name(executable.stem + STAGED_SUFFIX)


def make_executable(path: PathLike) -> None:
    """Restore execute permission on a downloaded file (no-op on Windows)."""
    if sys.platform == "win32":
        return
    try:
        os.chmod(path, EXECUTABLE_MODE)
    except OSError as e:
        raise FilesystemError("set permissions on", path, e)


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.debug(f"Could not remove {path}: {e}")


def replace_current_executable(
    downloaded_path: PathLike,
    current_executable: Optional[PathLike] = None
) -> Path:
    """
    Replace the running executable with a downloaded file.

    Args:
        downloaded_path: New binary, typically from AssetDownloader
        current_executable: Path to replace, defaults to the running program

    Returns:
        Path of the backup of the previous binary

    Raises:
        FilesystemError: If any step fails. The operation attribute names
            the failed step. A failure while moving the new binary into
            place triggers an attempt to restore the backup; if that also
            fails the original path is empty and the previous binary must
            be recovered manually from the backup.
    """
    downloaded = Path(downloaded_path)
    current = Path(current_executable) if current_executable else get_current_executable()
    old = old_path_for(current)
    staged = staged_path_for(current)

    make_executable(downloaded)

    # Stale backup from a previous update
    _remove_quietly(old)

    try:
        shutil.copy(downloaded, staged)
    except OSError as e:
        _remove_quietly(staged)
        raise FilesystemError("stage new executable at", staged, e)

    try:
        os.replace(current, old)
    except OSError as e:
        _remove_quietly(staged)
        raise FilesystemError("move current executable to", old, e)

    try:
        os.replace(staged, current)
    except OSError as e:
        logger.error(f"Failed to install new executable: {e}")
        try:
            os.replace(old, current)
        except OSError as restore_error:
            logger.critical(
                f"{current} is missing, restore it manually from {old}: "
                f"{restore_error}"
            )
        else:
            logger.info(f"Restored previous executable at {current}")
        _remove_quietly(staged)
        raise FilesystemError("install new executable at", current, e)

    logger.info(f"Replaced {current}, previous version kept at {old}")
    return old


def rollback(current_executable: Optional[PathLike] = None) -> Path:
    """
    Put the backed-up binary back in place of the current one.

    Raises:
        FilesystemError: If there is no backup or it cannot be moved
    """
    current = Path(current_executable) if current_executable else get_current_executable()
    old = old_path_for(current)
    if not old.exists():
        raise FilesystemError("find backup executable", old)

    try:
        os.replace(old, current)
    except OSError as e:
        raise FilesystemError("restore backup executable to", current, e)

    logger.info(f"Rolled back {current} from {old}")
    return current


def cleanup_old(current_executable: Optional[PathLike] = None) -> bool:
    """
    Delete the backup left by a previous update.

    Returns:
        True if a backup was removed
    """
    current = Path(current_executable) if current_executable else get_current_executable()
    old = old_path_for(current)
    if not old.exists():
        return False
    try:
        old.unlink()
    except OSError as e:
        raise FilesystemError("remove backup executable", old, e)
    logger.info(f"Removed backup {old}")
    return True
