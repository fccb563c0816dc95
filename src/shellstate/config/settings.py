"""Settings lookup for shellstate.

Values are resolved from, in order of precedence:

- the process environment
- the settings file (``settings.yaml`` in the per-user config folder, or the
  path named by ``SHELLSTATE_SETTINGS_FILE``)
- the defaults of the registered setting
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml

from shellstate.config.configuration import get_setting, register_setting

# Constants
SETTINGS_FILE = "settings.yaml"
MISSING_MESSAGE = "Missing required setting: {}"
NOT_GIVEN = object()

register_setting(
    package_name="shellstate",
    env_var="SHELLSTATE_LOG_LEVEL",
    group="Logging",
    description="Log level used by shellstate loggers",
    default="INFO",
    enum=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
)
register_setting(
    package_name="shellstate",
    env_var="SHELLSTATE_LOG_FORMAT",
    group="Logging",
    description="logging format string for the root handler",
    default="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
register_setting(
    package_name="shellstate",
    env_var="SHELLSTATE_LOG_DATEFMT",
    group="Logging",
    description="Date format used in log records",
    default="%Y-%m-%d %H:%M:%S",
)
register_setting(
    package_name="shellstate",
    env_var="SHELLSTATE_SETTINGS_FILE",
    group="Folders",
    description="Path of the YAML settings file. Defaults to the per-user config folder.",
)


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def get_system_file_path(filename: str) -> Path:
    """Return the path to the configuration file for the current OS."""
    import platform

    os_name = platform.system()
    if os_name in {"Linux", "Darwin"}:
        return Path.home() / ".config" / "shellstate" / filename
    elif os_name == "Windows":
        appdata = os.getenv("APPDATA")
        if appdata is not None:
            return Path(appdata) / "shellstate" / filename
        return Path("data") / filename
    return Path("data") / filename


def get_settings_path() -> Path:
    override = os.environ.get("SHELLSTATE_SETTINGS_FILE")
    if override:
        return Path(override)
    return get_system_file_path(SETTINGS_FILE)


# ---------------------------------------------------------------------------
# Settings helpers
# ---------------------------------------------------------------------------


def load_settings() -> Dict[str, Any]:
    """Load settings from the YAML settings file, if it exists."""
    settings_file = get_settings_path()
    if not settings_file.exists():
        return {}
    with open(settings_file, "r") as f:
        settings = yaml.safe_load(f) or {}
    if not isinstance(settings, dict):
        raise ValueError(f"Settings file {settings_file} must contain a mapping")
    return settings


def get_value(
    key: str,
    default: Any = NOT_GIVEN,
    settings: Dict[str, Any] | None = None,
) -> Any:
    """Retrieve a configuration value from the environment, settings, or defaults."""
    value = os.environ.get(key)
    if value is None or value == "":
        if settings is None:
            settings = load_settings()
        value = settings.get(key)

    if value is None or str(value) == "":
        setting = get_setting(key)
        value = setting.default if setting is not None else None

    if value is not None:
        return value
    if default is not NOT_GIVEN:
        return default
    raise KeyError(MISSING_MESSAGE.format(key))
