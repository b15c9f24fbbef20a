import asyncio
import unittest

from pomodoro import PomodoroSession, parse_stored_session

NOW_MS = 1_700_000_000_000


class _Clock:
    def __init__(self, now_ms: int = NOW_MS):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms


class _MemoryStore:
    def __init__(self, stored=None):
        self.stored = stored
        self.saved = []

    async def load(self):
        return self.stored

    async def save(self, stored) -> None:
        self.saved.append(stored)
        self.stored = stored

    async def clear(self) -> None:
        self.stored = None


class _GatedStore(_MemoryStore):
    def __init__(self, stored=None):
        super().__init__(stored)
        self.loading = asyncio.Event()
        self.release = asyncio.Event()

    async def load(self):
        self.loading.set()
        await self.release.wait()
        return self.stored


class _RecordingReminders:
    def __init__(self):
        self.calls: list[tuple] = []

    async def schedule_reminder(self, kind: str, seconds_from_now: int) -> None:
        self.calls.append(("schedule", kind, seconds_from_now))

    async def cancel_all_reminders(self) -> None:
        self.calls.append(("cancel",))


def _record(**overrides):
    raw = {
        "mode": "focus",
        "isRunning": True,
        "currentSegment": "focus",
        "pomodorosCompleted": 0,
        "endTimestampMs": NOW_MS + 600_000,
        "remainingSeconds": 600,
        "settings": {"focusMin": 25, "shortBreakMin": 5, "longBreakMin": 15, "longBreakEvery": 4},
        "durations": {"focus": 1500, "shortBreak": 300, "longBreak": 900},
        "updatedAt": NOW_MS - 900_000,
    }
    raw.update(overrides)
    stored = parse_stored_session(raw)
    assert stored is not None
    return stored


class SessionRehydrationTests(unittest.IsolatedAsyncioTestCase):
    async def _rehydrate(self, stored, *, auto_start: bool = False) -> PomodoroSession:
        self.store = _MemoryStore(stored)
        self.reminders = _RecordingReminders()
        session = PomodoroSession(
            auto_start=auto_start,
            store=self.store,
            reminders=self.reminders,
            now_ms_fn=_Clock(),
        )
        self.addAsyncCleanup(session.close)
        await session.rehydrate()
        await session.flush()
        return session

    async def test_running_session_continues_against_end_timestamp(self) -> None:
        session = await self._rehydrate(_record())
        view = session.view()

        self.assertEqual("focus", view.mode)
        self.assertTrue(view.is_running)
        self.assertEqual(600, view.remaining_seconds)
        self.assertEqual(NOW_MS + 600_000, session.end_timestamp_ms)
        self.assertEqual(("schedule", "focus", 600), self.reminders.calls[-1])

    async def test_expired_focus_without_auto_start_stops_in_short_break(self) -> None:
        session = await self._rehydrate(_record(endTimestampMs=NOW_MS - 3_700_000))
        view = session.view()

        self.assertEqual("shortBreak", view.mode)
        self.assertFalse(view.is_running)
        self.assertEqual(300, view.remaining_seconds)
        self.assertEqual(1, view.pomodoros_completed)
        self.assertEqual("shortBreak", self.store.stored.mode)
        self.assertEqual([], self.reminders.calls)

    async def test_expired_focus_with_auto_start_runs_into_break(self) -> None:
        session = await self._rehydrate(
            _record(endTimestampMs=NOW_MS - 200_000),
            auto_start=True,
        )
        view = session.view()

        self.assertEqual("shortBreak", view.mode)
        self.assertTrue(view.is_running)
        self.assertEqual(100, view.remaining_seconds)
        self.assertEqual(NOW_MS + 100_000, session.end_timestamp_ms)
        self.assertEqual(("schedule", "break", 100), self.reminders.calls[-1])

    async def test_catch_up_stops_after_two_transitions(self) -> None:
        session = await self._rehydrate(
            _record(endTimestampMs=NOW_MS - 10 * 3600 * 1000),
            auto_start=True,
        )
        view = session.view()

        self.assertEqual("focus", view.mode)
        self.assertTrue(view.is_running)
        self.assertEqual(0, view.remaining_seconds)
        self.assertEqual(1, view.pomodoros_completed)

        tick = session.tick()
        self.assertTrue(tick.completed)
        self.assertEqual("shortBreak", tick.view.mode)
        self.assertEqual(2, tick.view.pomodoros_completed)

    async def test_paused_record_restores_as_paused(self) -> None:
        session = await self._rehydrate(
            _record(mode="paused", isRunning=False, endTimestampMs=None, remainingSeconds=420)
        )
        view = session.view()

        self.assertEqual("paused", view.mode)
        self.assertFalse(view.is_running)
        self.assertEqual(420, view.remaining_seconds)
        self.assertEqual("focus", view.segment)
        self.assertEqual("resumed", session.resume().reason)

    async def test_running_record_without_end_timestamp_restores_paused(self) -> None:
        session = await self._rehydrate(_record(endTimestampMs="later", remainingSeconds=321))
        view = session.view()

        self.assertEqual("paused", view.mode)
        self.assertFalse(view.is_running)
        self.assertEqual(321, view.remaining_seconds)

    async def test_stopped_record_with_no_time_left_reloads_full_duration(self) -> None:
        session = await self._rehydrate(
            _record(
                mode="longBreak",
                currentSegment="longBreak",
                isRunning=False,
                endTimestampMs=None,
                remainingSeconds=0,
            )
        )

        self.assertEqual(900, session.view().remaining_seconds)

    async def test_restored_settings_replace_defaults(self) -> None:
        session = await self._rehydrate(
            _record(settings={"focusMin": 45, "longBreakEvery": 3})
        )

        self.assertEqual(45, session.settings.focus_minutes)
        self.assertEqual(3, session.settings.long_break_every)

    async def test_command_before_load_wins(self) -> None:
        self.store = _MemoryStore(_record(endTimestampMs=NOW_MS - 3_700_000))
        session = PomodoroSession(store=self.store, now_ms_fn=_Clock())
        self.addAsyncCleanup(session.close)

        session.start()
        restored = await session.rehydrate()

        self.assertIsNone(restored)
        self.assertEqual("focus", session.view().mode)
        self.assertEqual(1500, session.view().remaining_seconds)

    async def test_command_while_load_pending_wins(self) -> None:
        store = _GatedStore(_record(endTimestampMs=NOW_MS - 3_700_000))
        session = PomodoroSession(store=store, now_ms_fn=_Clock())
        self.addAsyncCleanup(session.close)

        loading = asyncio.create_task(session.rehydrate())
        await store.loading.wait()
        result = session.start()
        store.release.set()
        restored = await loading

        self.assertTrue(result.accepted)
        self.assertIsNone(restored)
        self.assertEqual("focus", session.view().mode)
        self.assertTrue(session.view().is_running)
        self.assertEqual(1500, session.view().remaining_seconds)

    async def test_corrupt_end_timestamp_restores_paused(self) -> None:
        session = await self._rehydrate(_record(endTimestampMs=10**400, remainingSeconds=77))
        view = session.view()

        self.assertEqual("paused", view.mode)
        self.assertFalse(view.is_running)
        self.assertEqual(77, view.remaining_seconds)
        self.assertIsNone(self.store.stored.end_timestamp_ms)

    async def test_missing_record_keeps_idle(self) -> None:
        session = await self._rehydrate(None)

        self.assertEqual("idle", session.view().mode)


if __name__ == "__main__":
    unittest.main()
