from __future__ import annotations

from enum import Enum
from typing import Literal

LogLevelName = Literal[
    "trace",
    "debug",
    "info",
    "warn",
    "error",
    "critical",
]


class LogLevel(Enum):
    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @classmethod
    def to_level(cls, level_name: LogLevelName) -> LogLevel:
        return cls(level_name.upper())

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def at_least(self, threshold: LogLevel) -> bool:
        return self.severity >= threshold.severity


_SEVERITY = {level: index for index, level in enumerate(LogLevel)}
