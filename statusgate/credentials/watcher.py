import asyncio
import contextvars
import os
import pathlib

import orjson
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from statusgate.logging import Logger
from statusgate.logging.statusgate_logging_models import (
    CredentialsError,
    CredentialsInfo,
)

from .credential_resolver import CredentialResolver
from .credentials_file import parse_credentials_file


class _CredentialsDirectoryHandler(FileSystemEventHandler):
    """Forwards file events from the observer thread to the event loop."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        watcher: "CredentialFileWatcher",
        context: contextvars.Context,
    ) -> None:
        super().__init__()
        self._loop = loop
        self._watcher = watcher
        self._context = context

    def _forward(self, path: str | bytes):
        if isinstance(path, bytes):
            path = os.fsdecode(path)

        # Reloads run with the starting task's context vars, logging config included.
        self._loop.call_soon_threadsafe(
            self._watcher.schedule_reload,
            path,
            context=self._context,
        )

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.dest_path)


class CredentialFileWatcher:
    """
    Watches the credentials directory and feeds parsed credentials to the
    resolver.

    Existing files are read once at start-up, oldest first, so the most
    recently written file wins. After that every create/modify/move event
    triggers a reload of the affected file. Deletions are ignored: removing
    the file never reverts the resolver to its fallback pair.
    """

    def __init__(
        self,
        directory: str,
        resolver: CredentialResolver,
        logger: Logger | None = None,
    ) -> None:
        self._directory = directory
        self._resolver = resolver
        self._logger = logger or Logger()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._observer: Observer | None = None
        self._pending: set[asyncio.Task] = set()

    async def start(self):
        self._loop = asyncio.get_running_loop()

        directory = pathlib.Path(self._directory)
        if not directory.is_dir():
            await self._logger.log(
                CredentialsError(
                    message="Credentials directory does not exist, using fallback toggling only",
                    path=self._directory,
                )
            )
            return

        existing = await self._loop.run_in_executor(None, self._list_files)
        for path in existing:
            await self.reload(path)

        self._observer = Observer()
        self._observer.schedule(
            _CredentialsDirectoryHandler(
                self._loop,
                self,
                contextvars.copy_context(),
            ),
            str(directory.resolve()),
            recursive=False,
        )
        self._observer.daemon = True
        self._observer.start()

    def _list_files(self) -> list[str]:
        files = [
            entry for entry in pathlib.Path(self._directory).iterdir() if entry.is_file()
        ]
        files.sort(key=lambda entry: entry.stat().st_mtime)

        return [str(entry) for entry in files]

    def schedule_reload(self, path: str):
        task = asyncio.ensure_future(self.reload(path))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def reload(self, path: str):
        try:
            credentials = await asyncio.get_running_loop().run_in_executor(
                None,
                parse_credentials_file,
                path,
            )

        except (OSError, orjson.JSONDecodeError) as err:
            await self._logger.log(
                CredentialsError(
                    message=f"Failed to read credentials file: {err}",
                    path=path,
                )
            )
            return

        if credentials is None:
            return

        self._resolver.on_credential_file_changed(credentials)
        await self._logger.log(
            CredentialsInfo(
                message=f"Loaded credentials for user {credentials.user}",
                path=path,
            )
        )

    async def stop(self):
        if self._observer is not None:
            observer = self._observer
            self._observer = None

            observer.stop()
            await self._loop.run_in_executor(None, observer.join)

        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
