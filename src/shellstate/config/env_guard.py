"""Process environment primitives.

Every read and write of ``os.environ`` made by the guards goes through
these helpers so tests can patch a single seam.
"""

import os
from typing import Any


def get_system_env_value(key: str, default: Any = None) -> Any:
    """Return an environment variable value.

    Always reads the live process environment; an absent variable and a
    variable set to the empty string are distinguished (``default`` vs ``""``).
    """
    return os.environ.get(key, default)


def set_system_env_value(key: str, value: str) -> None:
    """Set an environment variable for this process and its children."""
    os.environ[key] = value


def remove_system_env_value(key: str) -> None:
    """Remove an environment variable. Removing an absent variable is a no-op."""
    os.environ.pop(key, None)
