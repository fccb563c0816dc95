import logging
import os
import sys
import warnings
from typing import Any, ClassVar, Optional

import yaml


def _supports_color() -> bool:
    try:
        return sys.stdout.isatty() and os.getenv("NO_COLOR") is None
    except Exception:
        return False


class _LevelColorFormatter(logging.Formatter):
    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\x1b[37m",  # light gray
        "INFO": "\x1b[32m",  # green
        "WARNING": "\x1b[33m",  # yellow
        "ERROR": "\x1b[31m",  # red
        "CRITICAL": "\x1b[41m",  # red background
    }

    RESET: ClassVar[str] = "\x1b[0m"

    def __init__(self, fmt: str, datefmt: str, use_color: bool) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        color = self.COLORS.get(levelname, "") if self.use_color else ""
        record.levelname_color = f"{color}{levelname}{self.RESET}" if color else levelname
        return super().format(record)


def _setting_or_default(key: str, problems: list[str]) -> Any:
    from shellstate.config.configuration import get_setting
    from shellstate.config.settings import get_value

    try:
        return get_value(key)
    except (ValueError, OSError, yaml.YAMLError) as e:
        problems.append(f"could not read {key} ({e}); using the default")
        setting = get_setting(key)
        return setting.default if setting is not None else None


def _is_valid_level(level: str | int) -> bool:
    if isinstance(level, int):
        return True
    return isinstance(logging.getLevelName(level), int)


def configure_logging(
    level: Optional[str | int] = None,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    propagate: bool = False,
) -> str | int:
    """Attach a formatted handler to the ``shellstate`` logger.

    Environment overrides:
    - `SHELLSTATE_LOG_LEVEL`
    - `SHELLSTATE_LOG_FORMAT`
    - `SHELLSTATE_LOG_DATEFMT`

    Only the package logger is touched; the host application's root logger
    is left alone. Records stop propagating to the root logger unless
    ``propagate`` is True, so they are not printed twice.

    An unreadable settings file or an unknown level name coming from the
    environment falls back to the registered default with a RuntimeWarning.

    Raises:
        ValueError: If ``level`` is passed explicitly and is not a level name.
    """
    from shellstate.config.configuration import get_setting

    problems: list[str] = []
    if level is None:
        level = _setting_or_default("SHELLSTATE_LOG_LEVEL", problems)
        if isinstance(level, str):
            level = level.upper()
        if not _is_valid_level(level):
            problems.append(f"unknown log level {level!r}; using the default")
            level = get_setting("SHELLSTATE_LOG_LEVEL").default
    elif isinstance(level, str):
        level = level.upper()
        if not _is_valid_level(level):
            raise ValueError(f"Unknown log level: {level!r}")

    use_color = _supports_color()
    if fmt is None:
        if os.getenv("SHELLSTATE_LOG_FORMAT") is None and use_color:
            # Color by level using ANSI; name in cyan, ts in gray
            fmt = "\x1b[90m%(asctime)s\x1b[0m | %(levelname_color)s | \x1b[36m%(name)s\x1b[0m | %(message)s"
        else:
            fmt = _setting_or_default("SHELLSTATE_LOG_FORMAT", problems)
    if datefmt is None:
        datefmt = _setting_or_default("SHELLSTATE_LOG_DATEFMT", problems)

    package_logger = logging.getLogger("shellstate")
    package_logger.setLevel(level)
    package_logger.propagate = propagate

    handler = next(
        (h for h in package_logger.handlers if isinstance(h.formatter, _LevelColorFormatter)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler()
        package_logger.addHandler(handler)
    handler.setFormatter(_LevelColorFormatter(fmt=fmt, datefmt=datefmt, use_color=use_color))

    for problem in dict.fromkeys(problems):
        warnings.warn(f"shellstate logging: {problem}", RuntimeWarning, stacklevel=2)
    return level


def get_logger(name: str) -> logging.Logger:
    """Return a module-scoped logger.

    Records go to the host's logging setup until :func:`configure_logging`
    is called; importing a module never reads settings.
    """
    return logging.getLogger(name)
