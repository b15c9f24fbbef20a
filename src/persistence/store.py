"""File-backed key-value store and the best-effort pomodoro session store."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from pomodoro.constants import STORAGE_KEY
from pomodoro.snapshot import StoredSession, parse_stored_session

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class StorageError(Exception):
    """Raised when the key-value store cannot read, write, or delete a record."""


class JsonFileKeyValueStore:
    """Stores one UTF-8 text value per key as `<directory>/<key>.json`.

    Blocking file I/O runs in a worker thread. Writes go through a temporary
    file and `os.replace`, so readers never observe a partial record.
    """

    def __init__(self, directory: str | Path):
        self._directory = Path(directory).expanduser()

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    async def get_item(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read, self.path_for(key))

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, self.path_for(key), value)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._remove, self.path_for(key))

    @staticmethod
    def _read(path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as error:
            raise StorageError(f"Failed to read {path}: {error}") from error

    @staticmethod
    def _write(path: Path, value: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                dir=path.parent,
                prefix=f".{path.stem}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(value)
                os.replace(temp_name, path)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise
        except OSError as error:
            raise StorageError(f"Failed to write {path}: {error}") from error

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as error:
            raise StorageError(f"Failed to remove {path}: {error}") from error


class PomodoroStateStore:
    """Loads, saves, and clears the persisted session record.

    Every failure is logged and absorbed: a record that cannot be read or
    parsed loads as `None`, and failed writes or deletes are dropped.
    """

    def __init__(
        self,
        backend: JsonFileKeyValueStore,
        *,
        key: str = STORAGE_KEY,
        logger: Optional[logging.Logger] = None,
    ):
        self._backend = backend
        self._key = key
        self._logger = logger or logging.getLogger("persistence")

    async def load(self) -> Optional[StoredSession]:
        try:
            raw = await self._backend.get_item(self._key)
        except Exception as error:
            self._logger.warning("Failed to load pomodoro state: %s", error)
            return None
        if not raw:
            return None

        try:
            decoded = json.loads(raw)
        except ValueError as error:
            self._logger.warning("Ignoring malformed pomodoro state: %s", error)
            return None

        stored = parse_stored_session(decoded)
        if stored is None:
            self._logger.warning("Ignoring pomodoro state with unexpected fields")
        return stored

    async def save(self, stored: StoredSession) -> None:
        try:
            await self._backend.set_item(self._key, json.dumps(stored.to_dict()))
        except Exception as error:
            self._logger.warning("Failed to save pomodoro state: %s", error)

    async def clear(self) -> None:
        try:
            await self._backend.remove_item(self._key)
        except Exception as error:
            self._logger.warning("Failed to clear pomodoro state: %s", error)
