import asyncio
import os
import pathlib
import sys
from typing import Callable, Dict, TypeVar

from statusgate.logging.config import LoggingConfig
from statusgate.logging.models import Entry, Log

from .logger_stream import LoggerStream

T = TypeVar("T", bound=Entry)


class Logger:
    """
    Named log streams sharing the process-wide ``LoggingConfig``.

    Every component logs to ``default`` unless told otherwise, which goes
    to the console. ``configure`` points a name at a JSON-lines file
    instead.
    """

    def __init__(self) -> None:
        self._streams: Dict[str, LoggerStream] = {}

    def configure(
        self,
        name: str = "default",
        template: str | None = None,
        path: str | None = None,
    ) -> LoggerStream:
        """
        Args:
            name: Stream name passed to ``log``.
            template: Console line template. Ignored for file streams.
            path: A ``.json`` file, or a directory that receives
                ``{name}.json``. Relative paths resolve against the
                configured logs directory.
        """
        logfile: str | None = None

        if path:
            logfile_path = pathlib.Path(path)
            if logfile_path.suffix == "":
                logfile_path = logfile_path / f"{name}.json"

            if logfile_path.suffix != ".json":
                raise ValueError(f"Log file '{path}' must be a .json file")

            if not logfile_path.is_absolute():
                logfile_path = (
                    pathlib.Path(LoggingConfig().directory or os.getcwd()) / logfile_path
                )

            logfile = str(logfile_path)

        stream = LoggerStream(name=name, template=template, logfile=logfile)
        self._streams[name] = stream

        return stream

    def stream(self, name: str = "default") -> LoggerStream:
        if (stream := self._streams.get(name)) is None:
            stream = self.configure(name)

        return stream

    async def log(
        self,
        entry: T,
        name: str = "default",
        template: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        stream = self.stream(name)

        if not stream.accepts(entry):
            return

        if filter and filter(entry) is False:
            return

        await stream.write(
            Log.capture(entry, sys._getframe(1)),
            template=template,
        )

    async def close(self):
        await asyncio.gather(*[stream.close() for stream in self._streams.values()])
