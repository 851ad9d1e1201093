"""Logging interface used throughout the package, with a standard-library backend."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Protocol, runtime_checkable

# Above CRITICAL: only "panic" messages would pass, so every regular message is muted.
_PANIC_LEVEL = logging.CRITICAL + 10


class Level(Enum):
    """Log levels that callers can switch a logger to."""

    DEBUG = 0
    PANIC = 1


@runtime_checkable
class Logger(Protocol):
    """What the package needs from a logger. Messages use %-style arguments."""

    def debug(self, msg: str, *args: Any) -> None:
        """Log a message at debug level."""

    def info(self, msg: str, *args: Any) -> None:
        """Log a message at info level."""

    def warning(self, msg: str, *args: Any) -> None:
        """Log a message at warning level."""

    def error(self, msg: str, *args: Any) -> None:
        """Log a message at error level."""

    def fatal(self, msg: str, *args: Any) -> None:
        """Log a message and terminate the program."""

    def set_level(self, level: Level) -> None:
        """Change the minimum level that is emitted."""


_LEVELS = {
    Level.DEBUG: logging.DEBUG,
    Level.PANIC: _PANIC_LEVEL,
}


class StdLogger:
    """Logger backed by the standard :mod:`logging` module."""

    def __init__(self, name: str = "finch") -> None:
        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.INFO)

    def debug(self, msg: str, *args: Any) -> None:
        self._logger.debug(msg, *args)

    def info(self, msg: str, *args: Any) -> None:
        self._logger.info(msg, *args)

    def warning(self, msg: str, *args: Any) -> None:
        self._logger.warning(msg, *args)

    def error(self, msg: str, *args: Any) -> None:
        self._logger.error(msg, *args)

    def fatal(self, msg: str, *args: Any) -> None:
        """Log at critical level, then exit with status 1."""
        self._logger.critical(msg, *args)
        raise SystemExit(1)

    def set_level(self, level: Level) -> None:
        self._logger.setLevel(_LEVELS[level])