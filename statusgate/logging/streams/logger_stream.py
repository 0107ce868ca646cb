import asyncio
import io
import pathlib
import sys

import msgspec

from statusgate.logging.config import LoggingConfig
from statusgate.logging.models import Entry, Log


DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"


class LoggerStream:
    """
    One named log output.

    Without a logfile, entries are rendered through a template onto the
    configured console stream. With one, every entry is appended to the
    file as a JSON line, written from the default executor so disk
    latency never blocks the loop.
    """

    def __init__(
        self,
        name: str = "default",
        template: str | None = None,
        logfile: str | None = None,
    ) -> None:
        self.name = name
        self.template = template or DEFAULT_TEMPLATE
        self.logfile = logfile

        self._config = LoggingConfig()
        self._file: io.BufferedWriter | None = None
        self._file_lock = asyncio.Lock()

    def accepts(self, entry: Entry) -> bool:
        return self._config.enabled(self.name, entry.level)

    async def write(self, log: Log, template: str | None = None):
        if self.logfile is None:
            self._write_console(log, template or self.template)
            return

        async with self._file_lock:
            await asyncio.get_running_loop().run_in_executor(
                None,
                self._append,
                log,
            )

    def _write_console(self, log: Log, template: str):
        stream = self._config.stream

        try:
            line = log.render(template)

        except (KeyError, ValueError) as err:
            # A template naming a field the entry lacks must not lose the entry.
            line = f"{log.timestamp} - {log.entry.level.value} - {log.entry.message} (bad log template: {err!r})"

        try:
            stream.write(line + "\n")
            stream.flush()

        except OSError as err:
            sys.stderr.write(f"{log.timestamp} - failed to write log line: {err}\n")

    def _append(self, log: Log):
        if self._file is None or self._file.closed:
            path = pathlib.Path(self.logfile)
            path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(path, "ab")

        self._file.write(msgspec.json.encode(log) + b"\n")
        self._file.flush()

    async def close(self):
        async with self._file_lock:
            if self._file is not None and not self._file.closed:
                self._file.close()

            self._file = None
