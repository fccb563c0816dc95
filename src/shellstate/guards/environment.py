"""Scoped changes of process environment variables."""

from __future__ import annotations

import errno
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Union

from dotenv import dotenv_values

from shellstate.concurrency.global_lock import LockToken, acquire
from shellstate.config.env_guard import (
    get_system_env_value,
    remove_system_env_value,
    set_system_env_value,
)
from shellstate.config.logging_config import get_logger
from shellstate.guards.errors import ConcurrentModificationError, GuardConsistencyError, fs_err

log = get_logger(__name__)

EnvValue = Union[str, bytes, "os.PathLike[str]", "os.PathLike[bytes]"]


def _to_str(value: EnvValue) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, os.PathLike)):
        return os.fsdecode(value)
    raise TypeError(f"expected str, bytes or os.PathLike, not {type(value).__name__}")


class EnvironmentGuard:
    """
    Holds an environment variable at a value until closed.

    On close the guard checks that the variable still has the value it set,
    then puts back the previous value, or removes the variable if it was not
    set before, and releases the global mutation lock.

    Example:
        with pushenv("RUST_LOG", "debug"):
            subprocess.run(["cargo", "test"], check=True)
    """

    def __init__(self, token: LockToken, key: str, prev_value: str | None, value: str) -> None:
        self._token = token
        self.key = key
        self.prev_value = prev_value
        self.value = value
        self._closed = False

    @classmethod
    def open(cls, key: EnvValue, value: EnvValue) -> EnvironmentGuard:
        """
        Set ``key`` to ``value`` and return the guard that undoes it.

        Args:
            key: Variable name.
            value: New value. An empty string sets the variable to empty.

        Returns:
            EnvironmentGuard: Active guard recording the previous value
                (``None`` if the variable was absent).
        """
        key = _to_str(key)
        value = _to_str(value)
        token = acquire()
        try:
            prev_value = get_system_env_value(key)
            set_system_env_value(key, value)
        except BaseException:
            token.release()
            raise
        log.debug("pushenv %s (previously %s)", key, "set" if prev_value is not None else "unset")
        return cls(token, key, prev_value, value)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """
        Validate and restore the variable, then release the lock.

        Raises:
            ConcurrentModificationError: The variable no longer holds the
                value this guard set.
        """
        if self._closed:
            return
        self._closed = True
        try:
            current = get_system_env_value(self.key)
            if current != self.value:
                error = ConcurrentModificationError(
                    "environment variable", self.value, current, key=self.key
                )
                log.critical("%s", error)
                raise error
            if self.prev_value is None:
                remove_system_env_value(self.key)
            else:
                set_system_env_value(self.key, self.prev_value)
            log.debug("popenv %s", self.key)
        finally:
            self._token.release()

    def __enter__(self) -> EnvironmentGuard:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "active"
        return f"EnvironmentGuard(key={self.key!r}, {state})"


class EnvironmentGuards:
    """
    A group of environment guards opened in one session.

    Guards are opened in order and closed in reverse order. The group holds
    the global mutation lock itself, so no other thread can observe a
    partially applied group.
    """

    def __init__(self, token: LockToken, guards: Iterable[EnvironmentGuard]) -> None:
        self._token = token
        self._guards = list(guards)
        self._closed = False

    @classmethod
    def open(cls, variables: Mapping[str, EnvValue]) -> EnvironmentGuards:
        token = acquire()
        guards: list[EnvironmentGuard] = []
        try:
            for key, value in variables.items():
                guards.append(EnvironmentGuard.open(key, value))
        except BaseException:
            try:
                for guard in reversed(guards):
                    guard.close()
            finally:
                token.release()
            raise
        return cls(token, guards)

    @property
    def guards(self) -> list[EnvironmentGuard]:
        return list(self._guards)

    @property
    def keys(self) -> list[str]:
        return [guard.key for guard in self._guards]

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """
        Close every guard in reverse order, then release the lock.

        All guards are closed even if one of them fails; the first failure is
        raised afterwards.
        """
        if self._closed:
            return
        self._closed = True
        first_error: GuardConsistencyError | None = None
        try:
            for guard in reversed(self._guards):
                try:
                    guard.close()
                except GuardConsistencyError as e:
                    if first_error is None:
                        first_error = e
        finally:
            self._token.release()
        if first_error is not None:
            raise first_error

    def __enter__(self) -> EnvironmentGuards:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._guards)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "active"
        return f"EnvironmentGuards(keys={self.keys!r}, {state})"


def pushenv(key: EnvValue, value: EnvValue) -> EnvironmentGuard:
    """Set an environment variable until the returned guard is closed.

    See :meth:`EnvironmentGuard.open`.
    """
    return EnvironmentGuard.open(key, value)


def pushenvs(variables: Mapping[str, EnvValue]) -> EnvironmentGuards:
    """Set several environment variables until the returned guard is closed."""
    return EnvironmentGuards.open(variables)


def pushenv_file(path: os.PathLike[str] | str, encoding: str = "utf-8") -> EnvironmentGuards:
    """
    Apply the variables of a ``.env`` file until the returned guard is closed.

    Lines declaring a key without a value (``KEY`` with no ``=``) are skipped.
    ``${VAR}`` references are expanded against the current environment.

    Raises:
        FsError: If the file does not exist or cannot be read.
    """
    path = Path(path)
    try:
        if not path.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path))
        values = dotenv_values(path, encoding=encoding)
    except OSError as e:
        raise fs_err("read", path, e) from e
    return pushenvs({key: value for key, value in values.items() if value is not None})


__all__ = [
    "EnvironmentGuard",
    "EnvironmentGuards",
    "pushenv",
    "pushenv_file",
    "pushenvs",
]
