"""
Scoped, thread-safe changes of the working directory and environment variables.

Every guard holds one process-wide mutation lock for as long as it is open.
A thread that already holds the lock may open more guards without blocking,
so guards nest freely within a thread while mutations from different threads
never overlap.

Example:
    from shellstate import pushd, pushenv

    with pushd("services/api"), pushenv("ENV", "test"):
        subprocess.run(["pytest"], check=True)
"""

from shellstate.concurrency import LockToken, acquire, global_lock, is_held_by_current_thread, is_locked
from shellstate.guards import (
    ConcurrentModificationError,
    DirectoryGuard,
    EnvironmentGuard,
    EnvironmentGuards,
    FsError,
    GuardConsistencyError,
    RestoreError,
    cwd,
    pushd,
    pushenv,
    pushenv_file,
    pushenvs,
    set_current_dir,
)

__version__ = "0.1.0"

__all__ = [
    "ConcurrentModificationError",
    "DirectoryGuard",
    "EnvironmentGuard",
    "EnvironmentGuards",
    "FsError",
    "GuardConsistencyError",
    "LockToken",
    "RestoreError",
    "acquire",
    "cwd",
    "global_lock",
    "is_held_by_current_thread",
    "is_locked",
    "pushd",
    "pushenv",
    "pushenv_file",
    "pushenvs",
    "set_current_dir",
]
