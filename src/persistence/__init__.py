"""Persistence gateway for the pomodoro session record."""

from .store import JsonFileKeyValueStore, PomodoroStateStore, StorageError

__all__ = [
    "JsonFileKeyValueStore",
    "PomodoroStateStore",
    "StorageError",
]
