"""
Tests for credential selection and credential file loading.

Covers:
- fallback toggling and file-sourced replacement
- parsing of marked credential files
- watcher reloads: start-up scan ordering, invalid files, missing directory
- live reloads from file events, run with the starting task's logging config
"""

import asyncio
import os
import pathlib
import time

import orjson
import pytest

from statusgate.credentials import (
    FALLBACK_CREDENTIALS,
    CredentialFileWatcher,
    CredentialResolver,
    parse_credentials_file,
)
from statusgate.logging import Logger, LoggingConfig, LogLevel
from statusgate.logging.statusgate_logging_models import CredentialsInfo
from statusgate.models import Credentials


ADMIN = Credentials(user="admin", password="s3cret")


class LevelRecordingLogger(Logger):
    """Records each entry with the log level in effect where it was logged."""

    def __init__(self) -> None:
        super().__init__()
        self.records: list = []

    async def log(self, entry, name="default", template=None, filter=None):
        self.records.append((entry, LoggingConfig().level))


async def wait_for(condition, timeout: float = 5.0):
    deadline = time.monotonic() + timeout
    while not condition():
        assert time.monotonic() < deadline, "condition not met before timeout"
        await asyncio.sleep(0.02)


def write_json(path: pathlib.Path, contents) -> str:
    path.write_bytes(orjson.dumps(contents))
    return str(path)


class TestCredentialResolver:
    def test_no_file_means_no_credentials(self):
        assert CredentialResolver().current() is None

    def test_file_credentials_are_used_until_toggled(self):
        resolver = CredentialResolver()
        resolver.on_credential_file_changed(ADMIN)

        assert resolver.current() == ADMIN

        assert resolver.toggle() is True
        assert resolver.current() == FALLBACK_CREDENTIALS

        assert resolver.toggle() is False
        assert resolver.current() == ADMIN

    def test_file_change_never_flips_the_selection(self):
        resolver = CredentialResolver()
        resolver.toggle()

        resolver.on_credential_file_changed(ADMIN)

        assert resolver.using_fallback
        assert resolver.current() == FALLBACK_CREDENTIALS
        assert resolver.from_file == ADMIN

    def test_missing_file_keeps_previous_pair(self):
        resolver = CredentialResolver()
        resolver.on_credential_file_changed(ADMIN)
        resolver.on_credential_file_changed(None)

        assert resolver.current() == ADMIN


class TestParseCredentialsFile:
    def test_marked_file_is_parsed(self, tmp_path: pathlib.Path):
        path = write_json(
            tmp_path / "admin.json",
            {"nodetoolUser": True, "username": "admin", "password": "s3cret"},
        )

        assert parse_credentials_file(path) == ADMIN

    def test_unmarked_file_is_ignored(self, tmp_path: pathlib.Path):
        path = write_json(
            tmp_path / "app.json",
            {"nodetoolUser": False, "username": "app", "password": "pw"},
        )

        assert parse_credentials_file(path) is None

    def test_file_without_password_is_ignored(self, tmp_path: pathlib.Path):
        path = write_json(tmp_path / "broken.json", {"nodetoolUser": True, "username": "x"})

        assert parse_credentials_file(path) is None

    def test_invalid_json_raises(self, tmp_path: pathlib.Path):
        path = tmp_path / "garbage.json"
        path.write_text("{not json")

        with pytest.raises(orjson.JSONDecodeError):
            parse_credentials_file(str(path))

    def test_missing_file_is_ignored(self, tmp_path: pathlib.Path):
        assert parse_credentials_file(str(tmp_path / "gone.json")) is None


class TestCredentialFileWatcher:
    async def test_start_loads_most_recent_marked_file(self, tmp_path: pathlib.Path):
        older = write_json(
            tmp_path / "old.json",
            {"nodetoolUser": True, "username": "old", "password": "pw"},
        )
        newer = write_json(
            tmp_path / "new.json",
            {"nodetoolUser": True, "username": "new", "password": "pw"},
        )

        now = time.time()
        os.utime(older, (now - 60, now - 60))
        os.utime(newer, (now, now))

        resolver = CredentialResolver()
        watcher = CredentialFileWatcher(str(tmp_path), resolver)

        await watcher.start()
        try:
            assert resolver.from_file == Credentials(user="new", password="pw")

        finally:
            await watcher.stop()

    async def test_invalid_file_keeps_previous_pair(self, tmp_path: pathlib.Path):
        resolver = CredentialResolver()
        resolver.on_credential_file_changed(ADMIN)
        watcher = CredentialFileWatcher(str(tmp_path), resolver)

        path = tmp_path / "broken.json"
        path.write_text("{not json")

        await watcher.reload(str(path))

        assert resolver.from_file == ADMIN

    async def test_reload_replaces_pair(self, tmp_path: pathlib.Path):
        resolver = CredentialResolver()
        watcher = CredentialFileWatcher(str(tmp_path), resolver)

        path = write_json(
            tmp_path / "admin.json",
            {"nodetoolUser": True, "username": "admin", "password": "s3cret"},
        )

        await watcher.reload(path)

        assert resolver.from_file == ADMIN

    async def test_missing_directory_does_not_raise(self, tmp_path: pathlib.Path):
        resolver = CredentialResolver()
        watcher = CredentialFileWatcher(str(tmp_path / "absent"), resolver)

        await watcher.start()
        await watcher.stop()

        assert resolver.current() is None

    async def test_file_written_after_start_is_loaded(self, tmp_path: pathlib.Path):
        LoggingConfig().update(log_level="debug")

        logger = LevelRecordingLogger()
        resolver = CredentialResolver()
        watcher = CredentialFileWatcher(str(tmp_path), resolver, logger=logger)

        await watcher.start()
        try:
            assert resolver.from_file is None

            write_json(
                tmp_path / "admin.json",
                {"nodetoolUser": True, "username": "admin", "password": "s3cret"},
            )

            await wait_for(lambda: resolver.from_file == ADMIN)

        finally:
            await watcher.stop()

        loaded = [level for entry, level in logger.records if isinstance(entry, CredentialsInfo)]
        assert loaded
        assert all(level is LogLevel.DEBUG for level in loaded)

    async def test_unmarked_file_written_after_start_is_ignored(
        self,
        tmp_path: pathlib.Path,
    ):
        resolver = CredentialResolver()
        resolver.on_credential_file_changed(ADMIN)
        watcher = CredentialFileWatcher(str(tmp_path), resolver)

        await watcher.start()
        try:
            write_json(tmp_path / "other.json", {"username": "x", "password": "y"})
            write_json(
                tmp_path / "next.json",
                {"nodetoolUser": True, "username": "next", "password": "pw"},
            )

            await wait_for(lambda: resolver.from_file.user == "next")

        finally:
            await watcher.stop()

        assert resolver.from_file == Credentials(user="next", password="pw")
