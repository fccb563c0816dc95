"""Error types raised by the directory and environment guards.

Two families exist:

- ``FsError`` is an ordinary ``OSError`` raised while a guard is being set up.
  Nothing has been mutated when it is raised, so callers may handle it.
- ``GuardConsistencyError`` is raised while a guard is being torn down and the
  guarded resource is not in the state the guard left it in, or could not be
  restored. It derives from ``BaseException`` so that ``except Exception``
  handlers do not swallow it; the process state is unknown at that point.
"""

from __future__ import annotations

import os
from typing import Any


class FsError(OSError):
    """A filesystem operation failed while setting up a guard."""

    def __init__(self, operation: str, path: os.PathLike[str] | str | None, err: OSError):
        super().__init__(err.errno, err.strerror)
        self.operation = operation
        self.path = os.fspath(path) if path is not None else None
        self.filename = self.path
        self.reason = err.strerror or str(err)

    def __str__(self) -> str:
        if self.path is None:
            return f"failed to {self.operation}: {self.reason}"
        return f"failed to {self.operation} {self.path!r}: {self.reason}"

    def __reduce__(self):
        err = OSError(self.errno, self.strerror)
        return (type(self), (self.operation, self.path, err))


def fs_err(operation: str, path: os.PathLike[str] | str | None, err: OSError) -> FsError:
    """Wrap ``err`` with the operation and path that produced it."""
    return FsError(operation, path, err)


class GuardConsistencyError(BaseException):
    """Base class for unrecoverable guard teardown failures."""

    pass


class ConcurrentModificationError(GuardConsistencyError):
    """The guarded resource was changed by someone else while the guard was live."""

    def __init__(self, resource: str, expected: Any, actual: Any, key: str | None = None):
        self.resource = resource
        self.expected = expected
        self.actual = actual
        self.key = key
        super().__init__(self._format())

    def _format(self) -> str:
        lines = [f"{self.resource} was changed concurrently."]
        if self.key is not None:
            lines.append(f"var      {self.key!r}")
        lines.append(f"expected {self.expected!r}")
        lines.append(f"got      {self.actual!r}")
        return "\n".join(lines)


class RestoreError(GuardConsistencyError):
    """Restoring the value recorded before the guard was opened failed."""

    pass


__all__ = [
    "ConcurrentModificationError",
    "FsError",
    "GuardConsistencyError",
    "RestoreError",
    "fs_err",
]
