"""Scoped changes of the process working directory."""

from __future__ import annotations

import os
from pathlib import Path

from shellstate.concurrency.global_lock import LockToken, acquire
from shellstate.config.logging_config import get_logger
from shellstate.guards.errors import ConcurrentModificationError, FsError, RestoreError, fs_err

log = get_logger(__name__)


def cwd() -> Path:
    """Return the current working directory.

    Raises:
        FsError: If the working directory cannot be read (e.g. it was deleted).
    """
    try:
        return Path(os.getcwd())
    except OSError as e:
        raise fs_err("getcwd", None, e) from e


def set_current_dir(path: os.PathLike[str] | str) -> None:
    """Change the working directory to ``path``.

    Raises:
        FsError: If ``path`` does not exist, is not a directory, or cannot be entered.
    """
    try:
        os.chdir(path)
    except OSError as e:
        raise fs_err("chdir", path, e) from e


class DirectoryGuard:
    """
    Holds the process in a working directory until closed.

    The guard keeps the global mutation lock for its whole lifetime. On close
    it checks that the working directory is still the one it set, changes
    back to the directory that was active when it was opened, and releases
    the lock.

    Example:
        with pushd("build") as guard:
            subprocess.run(["make"], check=True)
            print(guard.dir)
    """

    def __init__(self, token: LockToken, prev_dir: Path, dir: Path) -> None:
        self._token = token
        self.prev_dir = prev_dir
        self.dir = dir
        self._closed = False

    @classmethod
    def open(cls, directory: os.PathLike[str] | str) -> DirectoryGuard:
        """
        Change into ``directory`` and return the guard that undoes it.

        Args:
            directory: Target directory, absolute or relative to the current one.

        Returns:
            DirectoryGuard: Active guard; ``dir`` holds the canonical form of
                ``directory`` as reported by the OS.

        Raises:
            FsError: If the current directory cannot be read or ``directory``
                cannot be entered. The working directory is unchanged.
        """
        token = acquire()
        try:
            prev_dir = cwd()
            set_current_dir(directory)
            try:
                new_dir = cwd()
            except FsError:
                _restore_dir(prev_dir)
                raise
        except BaseException:
            token.release()
            raise
        log.debug("pushd %s -> %s", prev_dir, new_dir)
        return cls(token, prev_dir, new_dir)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """
        Validate and restore the working directory, then release the lock.

        Raises:
            ConcurrentModificationError: The working directory is no longer
                the one this guard set.
            RestoreError: The previous working directory could not be entered.
        """
        if self._closed:
            return
        self._closed = True
        try:
            try:
                current = cwd()
            except FsError as e:
                log.critical("Current directory became unreadable while %s was pushed", self.dir)
                raise ConcurrentModificationError("current directory", self.dir, None) from e
            if current != self.dir:
                error = ConcurrentModificationError("current directory", self.dir, current)
                log.critical("%s", error)
                raise error
            _restore_dir(self.prev_dir)
            log.debug("popd %s -> %s", self.dir, self.prev_dir)
        finally:
            self._token.release()

    def __enter__(self) -> DirectoryGuard:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "active"
        return f"DirectoryGuard(dir={str(self.dir)!r}, prev_dir={str(self.prev_dir)!r}, {state})"


def _restore_dir(prev_dir: Path) -> None:
    try:
        os.chdir(prev_dir)
    except OSError as e:
        log.critical("Failed to restore working directory %s: %s", prev_dir, e)
        raise RestoreError(f"failed to restore working directory {str(prev_dir)!r}: {e}") from e


def pushd(directory: os.PathLike[str] | str) -> DirectoryGuard:
    """Change the working directory until the returned guard is closed.

    See :meth:`DirectoryGuard.open`.
    """
    return DirectoryGuard.open(directory)


__all__ = [
    "DirectoryGuard",
    "cwd",
    "pushd",
    "set_current_dir",
]
