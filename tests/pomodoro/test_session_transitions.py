import unittest

from pomodoro import PomodoroSession


class _Clock:
    def __init__(self, now_ms: int = 1_700_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)


class _RecordingReminders:
    def __init__(self):
        self.calls: list[tuple] = []

    async def schedule_reminder(self, kind: str, seconds_from_now: int) -> None:
        self.calls.append(("schedule", kind, seconds_from_now))

    async def cancel_all_reminders(self) -> None:
        self.calls.append(("cancel",))


class _RecordingFeedback:
    def __init__(self):
        self.calls: list[str] = []

    async def play_start_cue(self) -> None:
        self.calls.append("start_cue")

    async def play_focus_end_cue(self) -> None:
        self.calls.append("focus_end_cue")

    async def play_break_end_cue(self) -> None:
        self.calls.append("break_end_cue")

    async def haptic_start(self) -> None:
        self.calls.append("haptic_start")

    async def haptic_end(self) -> None:
        self.calls.append("haptic_end")


class SessionTransitionTests(unittest.IsolatedAsyncioTestCase):
    def _session(self, **kwargs) -> PomodoroSession:
        self.clock = _Clock()
        self.reminders = _RecordingReminders()
        self.feedback = _RecordingFeedback()
        return PomodoroSession(
            reminders=self.reminders,
            feedback=self.feedback,
            now_ms_fn=self.clock,
            **kwargs,
        )

    def _finish_segment(self, session: PomodoroSession):
        self.clock.advance(session.view().remaining_seconds)
        return session.tick()

    def test_tick_reports_each_second_once(self) -> None:
        session = self._session()
        session.start()

        first = session.tick()
        repeat = session.tick()
        self.clock.advance(1)
        second = session.tick()

        self.assertIsNotNone(first)
        self.assertEqual(1500, first.view.remaining_seconds)
        self.assertIsNone(repeat)
        self.assertEqual(1499, second.view.remaining_seconds)
        self.assertFalse(second.completed)

    def test_tick_is_silent_while_stopped(self) -> None:
        session = self._session()

        self.assertIsNone(session.tick())

    async def test_focus_end_moves_to_stopped_short_break(self) -> None:
        session = self._session()
        session.start()

        tick = self._finish_segment(session)
        await session.flush()

        self.assertTrue(tick.completed)
        self.assertEqual("focus", tick.finished_segment)
        self.assertEqual("shortBreak", tick.view.mode)
        self.assertFalse(tick.view.is_running)
        self.assertEqual(300, tick.view.remaining_seconds)
        self.assertEqual(1, tick.view.pomodoros_completed)
        self.assertEqual(
            ["start_cue", "haptic_start", "focus_end_cue", "haptic_end"],
            self.feedback.calls,
        )
        self.assertEqual(("cancel",), self.reminders.calls[-1])
        await session.close()

    async def test_break_end_returns_to_focus_without_counting(self) -> None:
        session = self._session()
        session.start()
        self._finish_segment(session)
        session.start()

        tick = self._finish_segment(session)
        await session.flush()

        self.assertEqual("shortBreak", tick.finished_segment)
        self.assertEqual("focus", tick.view.mode)
        self.assertEqual(1, tick.view.pomodoros_completed)
        self.assertEqual("break_end_cue", self.feedback.calls[-2])
        await session.close()

    async def test_auto_start_cycles_with_long_break_every_second_pomodoro(self) -> None:
        session = self._session(auto_start=True, settings={"long_break_every": 2})
        session.start()

        modes = []
        for _ in range(5):
            tick = self._finish_segment(session)
            modes.append(tick.view.mode)
            self.assertTrue(tick.view.is_running)
        await session.flush()

        self.assertEqual(
            ["shortBreak", "focus", "longBreak", "focus", "shortBreak"],
            modes,
        )
        self.assertEqual(3, session.view().pomodoros_completed)
        self.assertEqual(1, self.feedback.calls.count("start_cue"))
        self.assertEqual(("schedule", "break", 300), self.reminders.calls[-1])
        await session.close()

    def test_auto_start_anchors_next_segment_at_completion_time(self) -> None:
        session = self._session(auto_start=True)
        session.start()
        self.clock.advance(1502)

        session.tick()

        self.assertEqual(self.clock.now_ms + 300 * 1000, session.end_timestamp_ms)
        self.assertEqual(300, session.view().remaining_seconds)

    async def test_skip_break_starts_focus(self) -> None:
        session = self._session()
        session.start()
        self._finish_segment(session)

        result = session.skip_break()
        await session.flush()

        self.assertTrue(result.accepted)
        self.assertEqual("focus", result.view.mode)
        self.assertTrue(result.view.is_running)
        self.assertEqual(1500, result.view.remaining_seconds)
        self.assertEqual(1, result.view.pomodoros_completed)
        self.assertEqual(("schedule", "focus", 1500), self.reminders.calls[-1])
        await session.close()

    def test_pause_at_zero_reloads_full_duration_on_resume(self) -> None:
        session = self._session()
        session.start()
        self.clock.advance(1500)

        paused = session.pause()
        resumed = session.resume()

        self.assertEqual(0, paused.view.remaining_seconds)
        self.assertEqual(1500, resumed.view.remaining_seconds)

    def test_dev_durations_use_seconds(self) -> None:
        session = self._session(dev_durations=True)
        session.start()

        self.assertEqual(5, session.view().remaining_seconds)
        tick = self._finish_segment(session)
        self.assertEqual(3, tick.view.remaining_seconds)


if __name__ == "__main__":
    unittest.main()
