from .global_lock import LockToken, acquire, global_lock, is_held_by_current_thread, is_locked

__all__ = [
    "LockToken",
    "acquire",
    "global_lock",
    "is_held_by_current_thread",
    "is_locked",
]
