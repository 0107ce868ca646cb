"""
Process-wide logging settings.

Values live in context variables so the poll loop, the HTTP handlers and
every stream they open read the same level and output without a config
object being threaded through constructors.
"""

import contextvars
import sys
from typing import List, Literal, TextIO

from statusgate.logging.models import LogLevel, LogLevelName

LogOutput = Literal["stdout", "stderr"]

_log_level: contextvars.ContextVar[LogLevel] = contextvars.ContextVar(
    "_log_level", default=LogLevel.INFO
)
_log_output: contextvars.ContextVar[LogOutput] = contextvars.ContextVar(
    "_log_output", default="stdout"
)
_log_directory: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "_log_directory", default=None
)
_disabled_loggers: contextvars.ContextVar[List[str]] = contextvars.ContextVar(
    "_disabled_loggers", default=[]
)


class LoggingConfig:
    def update(
        self,
        log_directory: str | None = None,
        log_level: LogLevelName | None = None,
        log_output: LogOutput | None = None,
    ):
        if log_directory:
            _log_directory.set(log_directory)

        if log_level:
            _log_level.set(LogLevel.to_level(log_level))

        if log_output:
            _log_output.set(log_output)

    def disable(self, logger_name: str):
        if logger_name not in _disabled_loggers.get():
            _disabled_loggers.set([*_disabled_loggers.get(), logger_name])

    def enable(self, logger_name: str):
        _disabled_loggers.set(
            [name for name in _disabled_loggers.get() if name != logger_name]
        )

    def enabled(self, logger_name: str, log_level: LogLevel) -> bool:
        return logger_name not in _disabled_loggers.get() and log_level.at_least(
            _log_level.get()
        )

    @property
    def level(self) -> LogLevel:
        return _log_level.get()

    @property
    def output(self) -> LogOutput:
        return _log_output.get()

    @property
    def stream(self) -> TextIO:
        return sys.stdout if _log_output.get() == "stdout" else sys.stderr

    @property
    def directory(self) -> str | None:
        return _log_directory.get()
