"""Level-filtered, printf-style logging to a text sink."""

from __future__ import annotations

import enum
from typing import Callable


class LogLevel(enum.IntEnum):
    """Severity of a log message; lower is more severe."""

    ERROR = 3
    WARN = 4
    INFO = 6
    DEBUG = 7


class Logger:
    """Formats messages and forwards those within the current level to ``sink``."""

    def __init__(self, sink: Callable[[str], object], level: LogLevel = LogLevel.WARN) -> None:
        self._sink = sink
        self.level = level

    def log(self, level: LogLevel, format: str, *args: object) -> int:
        """Emit a %-formatted message; return its length, or 0 if filtered out."""
        if level > self.level:
            return 0
        text = format % args
        self._sink(text)
        return len(text)