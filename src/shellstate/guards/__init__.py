from .directory import DirectoryGuard, cwd, pushd, set_current_dir
from .environment import EnvironmentGuard, EnvironmentGuards, pushenv, pushenv_file, pushenvs
from .errors import (
    ConcurrentModificationError,
    FsError,
    GuardConsistencyError,
    RestoreError,
    fs_err,
)

__all__ = [
    "ConcurrentModificationError",
    "DirectoryGuard",
    "EnvironmentGuard",
    "EnvironmentGuards",
    "FsError",
    "GuardConsistencyError",
    "RestoreError",
    "cwd",
    "fs_err",
    "pushd",
    "pushenv",
    "pushenv_file",
    "pushenvs",
    "set_current_dir",
]
