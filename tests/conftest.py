import os
import uuid

import pytest

from shellstate.concurrency.global_lock import is_held_by_current_thread, is_locked


@pytest.fixture(autouse=True)
def _restore_process_state():
    """Put the working directory back and fail if a test leaked a session."""
    start_dir = os.getcwd()
    yield
    try:
        assert not is_held_by_current_thread(), "test leaked a mutation session"
        assert not is_locked(), "global mutation lock still held after test"
    finally:
        os.chdir(start_dir)


@pytest.fixture
def env_key():
    """A variable name unique to the test, removed afterwards."""
    key = f"SHELLSTATE_TEST_{uuid.uuid4().hex.upper()}"
    yield key
    os.environ.pop(key, None)


@pytest.fixture
def workdir(tmp_path):
    """A resolved scratch directory with a couple of subdirectories."""
    root = tmp_path.resolve()
    (root / "a" / "b").mkdir(parents=True)
    (root / "c").mkdir()
    return root
