import json
import tempfile
import unittest
from pathlib import Path

from persistence import JsonFileKeyValueStore, PomodoroStateStore, StorageError
from pomodoro import PomodoroSettings, StoredSession, segment_durations


def _stored(**overrides) -> StoredSession:
    values = {
        "mode": "paused",
        "is_running": False,
        "current_segment": "focus",
        "pomodoros_completed": 2,
        "end_timestamp_ms": None,
        "remaining_seconds": 420,
        "settings": PomodoroSettings(),
        "durations": segment_durations(PomodoroSettings()),
        "updated_at_ms": 1_700_000_000_000,
    }
    values.update(overrides)
    return StoredSession(**values)


class JsonFileKeyValueStoreTests(unittest.IsolatedAsyncioTestCase):
    async def test_set_get_remove(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            backend = JsonFileKeyValueStore(Path(temp_dir) / "nested")

            self.assertIsNone(await backend.get_item("pomodoro.state.v1"))
            await backend.set_item("pomodoro.state.v1", '{"a": 1}')
            self.assertEqual('{"a": 1}', await backend.get_item("pomodoro.state.v1"))
            self.assertTrue(backend.path_for("pomodoro.state.v1").is_file())

            await backend.remove_item("pomodoro.state.v1")
            await backend.remove_item("pomodoro.state.v1")
            self.assertIsNone(await backend.get_item("pomodoro.state.v1"))

    def test_rejects_path_like_keys(self) -> None:
        backend = JsonFileKeyValueStore("/tmp")

        with self.assertRaises(StorageError):
            backend.path_for("../escape")


class PomodoroStateStoreTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self.backend = JsonFileKeyValueStore(self._temp_dir.name)
        self.store = PomodoroStateStore(self.backend)

    async def asyncTearDown(self) -> None:
        self._temp_dir.cleanup()

    async def test_save_then_load(self) -> None:
        stored = _stored()

        await self.store.save(stored)

        self.assertEqual(stored, await self.store.load())
        raw = json.loads(self.backend.path_for("pomodoro.state.v1").read_text("utf-8"))
        self.assertEqual("paused", raw["mode"])
        self.assertEqual(420, raw["remainingSeconds"])
        self.assertEqual({"focus": 1500, "shortBreak": 300, "longBreak": 900}, raw["durations"])

    async def test_clear_makes_load_return_none(self) -> None:
        await self.store.save(_stored())

        await self.store.clear()

        self.assertIsNone(await self.store.load())

    async def test_malformed_record_loads_as_none(self) -> None:
        await self.backend.set_item("pomodoro.state.v1", "{not json")

        with self.assertLogs("persistence", level="WARNING"):
            self.assertIsNone(await self.store.load())

        await self.backend.set_item("pomodoro.state.v1", json.dumps({"mode": "focus"}))
        with self.assertLogs("persistence", level="WARNING"):
            self.assertIsNone(await self.store.load())

    async def test_backend_failures_are_absorbed(self) -> None:
        class _BrokenBackend:
            async def get_item(self, key):
                raise StorageError("read failed")

            async def set_item(self, key, value):
                raise StorageError("write failed")

            async def remove_item(self, key):
                raise StorageError("delete failed")

        store = PomodoroStateStore(_BrokenBackend())  # type: ignore[arg-type]

        with self.assertLogs("persistence", level="WARNING") as logs:
            self.assertIsNone(await store.load())
            await store.save(_stored())
            await store.clear()

        self.assertEqual(3, len(logs.output))


if __name__ == "__main__":
    unittest.main()
