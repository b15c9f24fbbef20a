import logging
import unittest

from pomodoro import PomodoroSession
from runtime.commands import SessionCommandDispatcher
from runtime.ui import RuntimeUIPublisher


class _UIServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []

    def publish(self, event_type: str, **payload):
        self.events.append((event_type, payload))


class _Clock:
    def __init__(self):
        self.now_ms = 1_700_000_000_000

    def __call__(self) -> int:
        return self.now_ms


class SessionCommandDispatcherTests(unittest.TestCase):
    def setUp(self) -> None:
        self.ui_server = _UIServerStub()
        self.session = PomodoroSession(now_ms_fn=_Clock())
        self.dispatcher = SessionCommandDispatcher(
            session=self.session,
            ui=RuntimeUIPublisher(self.ui_server),
            logger=logging.getLogger("test"),
        )

    def test_start_command_is_applied(self) -> None:
        result = self.dispatcher.handle_command("start", {"type": "command"})

        self.assertTrue(result["accepted"])
        self.assertEqual("started", result["reason"])
        self.assertEqual("focus", result["session"]["mode"])
        self.assertTrue(self.session.is_running)
        self.assertEqual([], self.ui_server.events)

    def test_rejection_is_published(self) -> None:
        result = self.dispatcher.handle_command("pause", {})

        self.assertFalse(result["accepted"])
        self.assertEqual("not_running", result["reason"])
        kind, payload = self.ui_server.events[-1]
        self.assertEqual("session", kind)
        self.assertEqual("pause", payload["action"])
        self.assertFalse(payload["accepted"])

    def test_update_settings_requires_settings_object(self) -> None:
        rejected = self.dispatcher.handle_command("update_settings", {"settings": 5})
        accepted = self.dispatcher.handle_command(
            "update_settings",
            {"settings": {"focusMin": 45}},
        )

        self.assertEqual("invalid_settings", rejected["reason"])
        self.assertTrue(accepted["accepted"])
        self.assertEqual(45, accepted["session"]["settings"]["focusMin"])
        self.assertEqual(2700, accepted["session"]["remaining_seconds"])

    def test_unknown_command_is_rejected(self) -> None:
        result = self.dispatcher.handle_command("snooze", {})

        self.assertFalse(result["accepted"])
        self.assertEqual("unsupported_command", result["reason"])
        self.assertEqual("idle", result["session"]["mode"])

    def test_every_lifecycle_command_is_routed(self) -> None:
        reasons = [
            self.dispatcher.handle_command(name, {})["reason"]
            for name in ("start", "pause", "resume", "reset", "skip_break")
        ]

        self.assertEqual(
            ["started", "paused", "resumed", "reset", "not_on_break"],
            reasons,
        )


if __name__ == "__main__":
    unittest.main()
