import json
import unittest

from pomodoro import PomodoroSettings, sanitize_settings, segment_durations
from pomodoro.settings import settings_from_durations


class SanitizeSettingsTests(unittest.TestCase):
    def test_defaults_when_nothing_given(self) -> None:
        settings = sanitize_settings()

        self.assertEqual(PomodoroSettings(25, 5, 15, 4), settings)

    def test_values_are_rounded_and_clamped(self) -> None:
        settings = sanitize_settings(
            {
                "focus_minutes": 120,
                "short_break_minutes": 0,
                "long_break_minutes": 14.5,
                "long_break_every": -3,
            }
        )

        self.assertEqual(90, settings.focus_minutes)
        self.assertEqual(1, settings.short_break_minutes)
        self.assertEqual(15, settings.long_break_minutes)
        self.assertEqual(1, settings.long_break_every)

    def test_unusable_values_keep_previous(self) -> None:
        previous = PomodoroSettings(focus_minutes=40, short_break_minutes=7)
        settings = sanitize_settings(
            {
                "focus_minutes": "soon",
                "short_break_minutes": float("nan"),
                "long_break_minutes": True,
                "long_break_every": None,
            },
            previous,
        )

        self.assertEqual(previous, settings)

    def test_numeric_strings_and_camel_case_keys_are_accepted(self) -> None:
        settings = sanitize_settings({"focusMin": " 30 ", "longBreakEvery": "2"})

        self.assertEqual(30, settings.focus_minutes)
        self.assertEqual(2, settings.long_break_every)

    def test_long_break_every_has_no_upper_bound(self) -> None:
        settings = sanitize_settings({"long_break_every": 1000})

        self.assertEqual(1000, settings.long_break_every)

    def test_huge_integers_are_clamped(self) -> None:
        settings = sanitize_settings(
            json.loads('{"focusMin": ' + "9" * 400 + ', "shortBreakMin": -' + "9" * 400 + "}")
        )

        self.assertEqual(90, settings.focus_minutes)
        self.assertEqual(1, settings.short_break_minutes)

    def test_huge_float_strings_fall_back(self) -> None:
        settings = sanitize_settings({"focus_minutes": "1e400"})

        self.assertEqual(25, settings.focus_minutes)

    def test_sanitizing_twice_is_stable(self) -> None:
        once = sanitize_settings({"focus_minutes": 0.4, "long_break_minutes": 99.6})
        twice = sanitize_settings(once)

        self.assertEqual(once, twice)

    def test_partial_update_only_touches_given_fields(self) -> None:
        previous = PomodoroSettings(focus_minutes=50, long_break_every=3)
        settings = sanitize_settings({"short_break_minutes": 10}, previous)

        self.assertEqual(50, settings.focus_minutes)
        self.assertEqual(10, settings.short_break_minutes)
        self.assertEqual(3, settings.long_break_every)

    def test_to_dict_uses_camel_case_keys(self) -> None:
        self.assertEqual(
            {"focusMin": 25, "shortBreakMin": 5, "longBreakMin": 15, "longBreakEvery": 4},
            PomodoroSettings().to_dict(),
        )


class SegmentDurationsTests(unittest.TestCase):
    def test_durations_follow_minutes(self) -> None:
        durations = segment_durations(PomodoroSettings(30, 6, 20, 4))

        self.assertEqual(1800, durations.focus)
        self.assertEqual(360, durations.short_break)
        self.assertEqual(1200, durations.long_break)
        self.assertEqual(360, durations.for_segment("shortBreak"))

    def test_dev_durations_ignore_settings(self) -> None:
        durations = segment_durations(PomodoroSettings(30, 6, 20, 4), dev_durations=True)

        self.assertEqual(
            {"focus": 5, "shortBreak": 3, "longBreak": 5},
            durations.to_dict(),
        )

    def test_settings_can_be_derived_from_seconds(self) -> None:
        settings = settings_from_durations({"focus": 1500, "shortBreak": 290, "longBreak": "x"})

        self.assertEqual(25, settings.focus_minutes)
        self.assertEqual(5, settings.short_break_minutes)
        self.assertEqual(15, settings.long_break_minutes)


if __name__ == "__main__":
    unittest.main()
