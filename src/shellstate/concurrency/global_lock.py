import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

from shellstate.config.logging_config import get_logger

log = get_logger(__name__)

_mutex: Optional[threading.Lock] = None
_mutex_init_lock = threading.Lock()
_thread_state = threading.local()


def _get_mutex() -> threading.Lock:
    """Return the process-wide mutation mutex, creating it on first use."""
    global _mutex
    if _mutex is None:
        with _mutex_init_lock:
            if _mutex is None:
                _mutex = threading.Lock()
    return _mutex


def is_held_by_current_thread() -> bool:
    """Return True if the calling thread is inside a mutation session."""
    return getattr(_thread_state, "locked", False)


def is_locked() -> bool:
    """Return True if any thread currently holds a mutation session."""
    return _get_mutex().locked()


class LockToken:
    """
    A scoped hold on the global mutation lock.

    A token either owns the mutex (it was the outermost acquisition on its
    thread) or rides on a session the thread already holds. Only an owning
    token does anything on release.

    Example:
        token = acquire()
        try:
            os.chdir(path)
        finally:
            token.release()

        with acquire():
            os.environ["KEY"] = "value"
    """

    def __init__(self, mutex: Optional[threading.Lock]) -> None:
        self._mutex = mutex

    @property
    def owns_lock(self) -> bool:
        """Return True if releasing this token releases the mutex."""
        return self._mutex is not None

    def release(self) -> None:
        """
        Give up the hold, if this token has one.

        The thread flag is cleared while the mutex is still held, then the
        mutex is released. Subsequent calls do nothing.
        """
        mutex = self._mutex
        if mutex is None:
            return
        self._mutex = None
        _thread_state.locked = False
        mutex.release()
        log.debug("Released global mutation lock on %s", threading.current_thread().name)

    def __enter__(self) -> "LockToken":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "owning" if self.owns_lock else "reentrant"
        return f"LockToken({state})"


def acquire() -> LockToken:
    """
    Acquire the global mutation lock for the calling thread.

    If the thread already holds a session the returned token owns nothing
    and the call never blocks. Otherwise this blocks until no other thread
    holds a session. There is no timeout.

    Returns:
        LockToken: The token to release when the mutation is undone.
    """
    if is_held_by_current_thread():
        log.debug("Reentrant global mutation lock on %s", threading.current_thread().name)
        return LockToken(None)

    mutex = _get_mutex()
    mutex.acquire()
    _thread_state.locked = True
    log.debug("Acquired global mutation lock on %s", threading.current_thread().name)
    return LockToken(mutex)


@contextmanager
def global_lock() -> Iterator[LockToken]:
    """
    Context manager holding the global mutation lock for the enclosed block.

    Example:
        with global_lock():
            run_command_that_reads_cwd()
    """
    token = acquire()
    try:
        yield token
    finally:
        token.release()


__all__ = [
    "LockToken",
    "acquire",
    "global_lock",
    "is_held_by_current_thread",
    "is_locked",
]
