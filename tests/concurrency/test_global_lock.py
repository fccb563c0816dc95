import threading

from shellstate.concurrency.global_lock import (
    LockToken,
    acquire,
    global_lock,
    is_held_by_current_thread,
    is_locked,
)


class TestAcquire:
    """Tests for acquire and LockToken."""

    def test_initially_unlocked(self):
        """Test that no session is held before anything is acquired."""
        assert not is_locked()
        assert not is_held_by_current_thread()

    def test_outermost_token_owns_lock(self):
        """Test that the first acquisition on a thread owns the mutex."""
        token = acquire()
        try:
            assert token.owns_lock
            assert is_locked()
            assert is_held_by_current_thread()
        finally:
            token.release()
        assert not is_locked()
        assert not is_held_by_current_thread()

    def test_reentrant_token_owns_nothing(self):
        """Test that nested acquisitions on one thread do not block."""
        outer = acquire()
        try:
            inner = acquire()
            assert not inner.owns_lock
            inner.release()
            assert is_locked()
            assert is_held_by_current_thread()
        finally:
            outer.release()
        assert not is_locked()

    def test_release_twice_is_noop(self):
        """Test that a token only releases the mutex once."""
        token = acquire()
        token.release()
        token.release()
        assert not is_locked()
        assert not token.owns_lock

    def test_context_manager(self):
        """Test that the token releases on scope exit."""
        with acquire() as token:
            assert token.owns_lock
            assert is_locked()
        assert not is_locked()

    def test_global_lock_releases_on_error(self):
        """Test that global_lock releases when the block raises."""
        try:
            with global_lock():
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert not is_locked()
        assert not is_held_by_current_thread()

    def test_repr(self):
        """Test string representation."""
        with acquire() as token:
            assert repr(token) == "LockToken(owning)"
            assert repr(acquire()) == "LockToken(reentrant)"
        assert isinstance(token, LockToken)


class TestCrossThread:
    """Tests for exclusion between threads."""

    def test_flag_is_per_thread(self):
        """Test that another thread does not see this thread's session."""
        seen = {}

        def probe():
            seen["held"] = is_held_by_current_thread()
            seen["locked"] = is_locked()

        with global_lock():
            worker = threading.Thread(target=probe)
            worker.start()
            worker.join(timeout=5)

        assert seen == {"held": False, "locked": True}

    def test_other_thread_blocks_until_release(self):
        """Test that a second thread waits for the holder to release."""
        acquired = threading.Event()

        def contender():
            with global_lock():
                acquired.set()

        token = acquire()
        worker = threading.Thread(target=contender)
        try:
            worker.start()
            assert not acquired.wait(timeout=0.2)
        finally:
            token.release()
        worker.join(timeout=5)
        assert acquired.is_set()

    def test_nested_session_blocks_other_thread_until_outermost_release(self):
        """Test that releasing an inner token does not let other threads in."""
        acquired = threading.Event()

        def contender():
            with global_lock():
                acquired.set()

        outer = acquire()
        worker = threading.Thread(target=contender)
        try:
            inner = acquire()
            worker.start()
            inner.release()
            assert not acquired.wait(timeout=0.2)
        finally:
            outer.release()
        worker.join(timeout=5)
        assert acquired.is_set()

    def test_sessions_do_not_overlap(self):
        """Test that many threads never hold a session at the same time."""
        active = 0
        max_active = 0
        counter_lock = threading.Lock()

        def worker():
            nonlocal active, max_active
            for _ in range(50):
                with global_lock():
                    with counter_lock:
                        active += 1
                        max_active = max(max_active, active)
                    with counter_lock:
                        active -= 1

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert max_active == 1
        assert not is_locked()
