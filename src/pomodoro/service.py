"""Pomodoro session state machine anchored to wall-clock end timestamps."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, Mapping, Optional

from .constants import (
    ACTION_ADVANCE,
    ACTION_PAUSE,
    ACTION_REHYDRATE,
    ACTION_RESET,
    ACTION_RESUME,
    ACTION_SKIP_BREAK,
    ACTION_START,
    ACTION_UPDATE_SETTINGS,
    BREAK_SEGMENTS,
    MODE_IDLE,
    MODE_PAUSED,
    REASON_ALREADY_RUNNING,
    REASON_BREAK_SKIPPED,
    REASON_CAUGHT_UP,
    REASON_CLOSED,
    REASON_COMPLETED,
    REASON_NOT_ON_BREAK,
    REASON_NOT_PAUSED,
    REASON_NOT_RUNNING,
    REASON_PAUSED,
    REASON_RESET,
    REASON_RESTORED,
    REASON_RESUMED,
    REASON_SETTINGS_UPDATED,
    REASON_STARTED,
    REMINDER_BREAK,
    REMINDER_FOCUS,
    SEGMENT_FOCUS,
    SEGMENT_LABELS,
)
from .contracts import FeedbackGateway, ReminderGateway, SessionStore, TransitionObserver
from .effects import EffectQueue
from .recovery import RestoredSession, next_segment, remaining_until, resolve_stored_session
from .settings import (
    SETTINGS_FIELDS,
    PomodoroSettings,
    SegmentDurations,
    sanitize_settings,
    segment_durations,
)
from .snapshot import StoredSession
from .types import (
    SessionAction,
    SessionActionResult,
    SessionTick,
    SessionTransition,
    SessionView,
)


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class PomodoroSession:
    """Single-instance pomodoro state machine.

    Remaining time is derived from an absolute end timestamp while running, so
    suspending the process never skews the countdown. Commands update state
    synchronously and hand persistence, reminders and cues to an ordered
    fire-and-forget effect queue; gateway failures never reach the caller.
    """

    def __init__(
        self,
        *,
        settings: Optional[Mapping[str, Any] | PomodoroSettings] = None,
        auto_start: bool = False,
        dev_durations: bool = False,
        store: Optional[SessionStore] = None,
        reminders: Optional[ReminderGateway] = None,
        feedback: Optional[FeedbackGateway] = None,
        observers: Iterable[TransitionObserver] = (),
        logger: Optional[logging.Logger] = None,
        now_ms_fn: Optional[Callable[[], int]] = None,
    ):
        self._settings = sanitize_settings(settings)
        self._auto_start = bool(auto_start)
        self._dev_durations = bool(dev_durations)
        self._store = store
        self._reminders = reminders
        self._feedback = feedback
        self._observers: list[TransitionObserver] = list(observers)
        self._logger = logger or logging.getLogger("pomodoro")
        self._now_ms = now_ms_fn or _wall_clock_ms
        self._effects = EffectQueue(logger=self._logger.getChild("effects"))

        self._segment: str = SEGMENT_FOCUS
        self._mode: str = MODE_IDLE
        self._is_running = False
        self._remaining_seconds = self.durations.focus
        self._end_timestamp_ms: Optional[int] = None
        self._pomodoros_completed = 0

        self._transitioning = False
        self._command_received = False
        self._closed = False
        self._last_emitted_remaining: Optional[int] = None

    @property
    def auto_start(self) -> bool:
        return self._auto_start

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def settings(self) -> PomodoroSettings:
        return self._settings

    @property
    def durations(self) -> SegmentDurations:
        return segment_durations(self._settings, dev_durations=self._dev_durations)

    @property
    def end_timestamp_ms(self) -> Optional[int]:
        return self._end_timestamp_ms

    def add_observer(self, observer: TransitionObserver) -> None:
        self._observers.append(observer)

    def view(self) -> SessionView:
        return self._view(self._now_ms())

    def start(self) -> SessionActionResult:
        self._command_received = True
        return self._start(ACTION_START, REASON_STARTED)

    def pause(self) -> SessionActionResult:
        self._command_received = True
        now = self._now_ms()
        if self._closed:
            return self._result(ACTION_PAUSE, False, REASON_CLOSED, now)
        if not self._is_running:
            return self._result(ACTION_PAUSE, False, REASON_NOT_RUNNING, now)

        previous = self._mode
        self._remaining_seconds = self._running_remaining(now)
        self._is_running = False
        self._end_timestamp_ms = None
        self._mode = MODE_PAUSED
        self._last_emitted_remaining = self._remaining_seconds
        self._logger.info(
            "Pomodoro paused: segment=%s remaining=%ss",
            self._segment,
            self._remaining_seconds,
        )

        self._submit_save(now)
        self._submit_cancel_reminders()
        return self._finish(ACTION_PAUSE, REASON_PAUSED, previous, now)

    def resume(self) -> SessionActionResult:
        self._command_received = True
        if self._mode != MODE_PAUSED:
            reason = REASON_ALREADY_RUNNING if self._is_running else REASON_NOT_PAUSED
            return self._result(ACTION_RESUME, False, reason, self._now_ms())
        return self._start(ACTION_RESUME, REASON_RESUMED)

    def reset(self) -> SessionActionResult:
        self._command_received = True
        now = self._now_ms()
        if self._closed:
            return self._result(ACTION_RESET, False, REASON_CLOSED, now)

        previous = self._mode
        self._segment = SEGMENT_FOCUS
        self._mode = MODE_IDLE
        self._is_running = False
        self._end_timestamp_ms = None
        self._remaining_seconds = self.durations.focus
        self._pomodoros_completed = 0
        self._last_emitted_remaining = None
        self._logger.info("Pomodoro reset")

        self._submit_cancel_reminders()
        self._submit_clear()
        return self._finish(ACTION_RESET, REASON_RESET, previous, now)

    def skip_break(self) -> SessionActionResult:
        self._command_received = True
        now = self._now_ms()
        if self._closed:
            return self._result(ACTION_SKIP_BREAK, False, REASON_CLOSED, now)
        if self._mode not in BREAK_SEGMENTS:
            return self._result(ACTION_SKIP_BREAK, False, REASON_NOT_ON_BREAK, now)

        previous = self._mode
        self._enter_segment(SEGMENT_FOCUS, run=True, now=now)
        self._logger.info(
            "Pomodoro break skipped: focus remaining=%ss",
            self._remaining_seconds,
        )

        self._submit_save(now)
        self._submit_reschedule_reminder()
        self._submit_start_cues()
        return self._finish(ACTION_SKIP_BREAK, REASON_BREAK_SKIPPED, previous, now)

    def update_settings(
        self,
        changes: Optional[Mapping[str, Any]] = None,
        **overrides: Any,
    ) -> SessionActionResult:
        """Sanitize and apply new settings.

        While stopped the current segment's remaining time follows the new
        duration immediately; a running segment keeps its countdown and the
        new durations apply from the next segment on.
        """
        self._command_received = True
        now = self._now_ms()
        if self._closed:
            return self._result(ACTION_UPDATE_SETTINGS, False, REASON_CLOSED, now)

        merged: dict[str, Any] = dict(changes or {})
        merged.update(overrides)
        unknown = sorted(key for key in merged if key not in SETTINGS_FIELDS)
        if unknown:
            self._logger.warning("Ignoring unknown settings: %s", ", ".join(unknown))

        previous = self._mode
        self._settings = sanitize_settings(merged, self._settings)
        if not self._is_running:
            self._remaining_seconds = self.durations.for_segment(self._segment)
            self._last_emitted_remaining = None
        self._logger.info("Pomodoro settings updated: %s", self._settings)

        self._submit_save(now)
        return self._finish(ACTION_UPDATE_SETTINGS, REASON_SETTINGS_UPDATED, previous, now)

    def tick(self) -> Optional[SessionTick]:
        """Re-derive remaining time; complete the segment once it runs out.

        Returns a tick when the displayed second changed or a segment
        completed, otherwise `None`.
        """
        if self._closed or not self._is_running or self._transitioning:
            return None

        now = self._now_ms()
        remaining = self._running_remaining(now)
        if remaining > 0:
            self._remaining_seconds = remaining
            if self._last_emitted_remaining == remaining:
                return None
            self._last_emitted_remaining = remaining
            return SessionTick(view=self._view(now))

        finished = self._segment
        self._transitioning = True
        try:
            self._remaining_seconds = 0
            self._submit_end_cues(finished)
            self._advance_segment(now)
        finally:
            self._transitioning = False
        return SessionTick(
            view=self._view(now),
            completed=True,
            finished_segment=finished,
        )

    async def rehydrate(self) -> Optional[RestoredSession]:
        """Restore the persisted session, catching up on time spent closed.

        Stored state is discarded when a command arrived before loading
        finished.
        """
        if self._store is None:
            return None

        try:
            stored = await self._store.load()
        except Exception as error:
            self._logger.warning("Failed to load persisted session: %s", error)
            stored = None

        if stored is None:
            self._logger.debug("No persisted session to restore")
            return None
        if self._command_received or self._closed:
            self._logger.info("Ignoring persisted session: a command arrived first")
            return None

        now = self._now_ms()
        restored = resolve_stored_session(
            stored,
            now_ms=now,
            auto_start=self._auto_start,
            durations=segment_durations(
                stored.settings,
                dev_durations=self._dev_durations,
            ),
        )

        previous = self._mode
        self._settings = restored.settings
        self._segment = restored.segment
        self._mode = restored.mode
        self._is_running = restored.is_running
        self._remaining_seconds = restored.remaining_seconds
        self._end_timestamp_ms = restored.end_timestamp_ms
        self._pomodoros_completed = restored.pomodoros_completed
        self._last_emitted_remaining = None
        self._logger.info(
            "Pomodoro restored: mode=%s running=%s remaining=%ss catch_up=%d",
            self._mode,
            self._is_running,
            self._remaining_seconds,
            restored.transitions,
        )

        self._submit_save(now)
        if self._is_running:
            self._submit_reschedule_reminder()
        reason = REASON_CAUGHT_UP if restored.transitions else REASON_RESTORED
        self._finish(ACTION_REHYDRATE, reason, previous, now)
        return restored

    async def flush(self) -> None:
        """Wait for every queued side effect to finish."""
        await self._effects.join()

    async def close(self) -> None:
        """Drain pending side effects and refuse further commands and ticks."""
        if self._closed:
            return
        self._closed = True
        await self._effects.join()
        await self._effects.close()

    def _start(self, action: SessionAction, reason: str) -> SessionActionResult:
        now = self._now_ms()
        if self._closed:
            return self._result(action, False, REASON_CLOSED, now)
        if self._is_running:
            return self._result(action, False, REASON_ALREADY_RUNNING, now)

        previous = self._mode
        segment = SEGMENT_FOCUS if self._mode == MODE_IDLE else self._segment
        if self._remaining_seconds <= 0:
            self._remaining_seconds = self.durations.for_segment(segment)
        self._segment = segment
        self._mode = segment
        self._is_running = True
        self._end_timestamp_ms = now + self._remaining_seconds * 1000
        self._last_emitted_remaining = None
        self._logger.info(
            "Pomodoro %s: segment=%s remaining=%ss",
            reason,
            segment,
            self._remaining_seconds,
        )

        self._submit_save(now)
        self._submit_reschedule_reminder()
        self._submit_start_cues()
        return self._finish(action, reason, previous, now)

    def _advance_segment(self, now: int) -> None:
        previous = self._mode
        finished = self._segment
        segment, completed = next_segment(
            finished,
            self._pomodoros_completed,
            self._settings.long_break_every,
        )
        self._pomodoros_completed = completed
        self._enter_segment(segment, run=self._auto_start, now=now)
        self._logger.info(
            "Pomodoro segment completed: finished=%s next=%s running=%s completed=%d",
            finished,
            segment,
            self._is_running,
            completed,
        )

        self._submit_save(now)
        if self._is_running:
            self._submit_reschedule_reminder()
        else:
            self._submit_cancel_reminders()
        self._finish(ACTION_ADVANCE, REASON_COMPLETED, previous, now)

    def _enter_segment(self, segment: str, *, run: bool, now: int) -> None:
        duration = self.durations.for_segment(segment)
        self._segment = segment
        self._mode = segment
        self._remaining_seconds = duration
        self._last_emitted_remaining = None
        if run:
            self._is_running = True
            self._end_timestamp_ms = now + duration * 1000
        else:
            self._is_running = False
            self._end_timestamp_ms = None

    def _running_remaining(self, now: int) -> int:
        if self._end_timestamp_ms is None:
            return self._remaining_seconds
        return max(0, remaining_until(self._end_timestamp_ms, now))

    def _view(self, now: int) -> SessionView:
        remaining = (
            self._running_remaining(now) if self._is_running else self._remaining_seconds
        )
        return SessionView(
            mode=self._mode,  # type: ignore[arg-type]
            segment=self._segment,  # type: ignore[arg-type]
            is_running=self._is_running,
            remaining_seconds=remaining,
            pomodoros_completed=self._pomodoros_completed,
            label=SEGMENT_LABELS[self._segment],
            settings=self._settings,
        )

    def _stored_session(self, now: int) -> StoredSession:
        return StoredSession(
            mode=self._mode,
            is_running=self._is_running,
            current_segment=self._segment,
            pomodoros_completed=self._pomodoros_completed,
            end_timestamp_ms=self._end_timestamp_ms,
            remaining_seconds=(
                self._running_remaining(now) if self._is_running else self._remaining_seconds
            ),
            settings=self._settings,
            durations=self.durations,
            updated_at_ms=now,
        )

    def _result(
        self,
        action: SessionAction,
        accepted: bool,
        reason: str,
        now: int,
    ) -> SessionActionResult:
        if not accepted:
            self._logger.debug("Pomodoro %s rejected: %s", action, reason)
        return SessionActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            view=self._view(now),
        )

    def _finish(
        self,
        action: SessionAction,
        reason: str,
        previous_mode: str,
        now: int,
    ) -> SessionActionResult:
        result = self._result(action, True, reason, now)
        transition = SessionTransition(
            action=action,
            reason=reason,
            previous_mode=previous_mode,  # type: ignore[arg-type]
            view=result.view,
        )
        for observer in tuple(self._observers):
            try:
                observer.on_transition(transition)
            except Exception as error:
                self._logger.warning("Transition observer failed: %s", error, exc_info=True)
        return result

    def _submit_save(self, now: int) -> None:
        store = self._store
        if store is None:
            return
        stored = self._stored_session(now)
        self._effects.submit("save", lambda: store.save(stored))

    def _submit_clear(self) -> None:
        store = self._store
        if store is None:
            return
        self._effects.submit("clear", store.clear)

    def _submit_cancel_reminders(self) -> None:
        reminders = self._reminders
        if reminders is None:
            return
        self._effects.submit("cancel_reminders", reminders.cancel_all_reminders)

    def _submit_reschedule_reminder(self) -> None:
        reminders = self._reminders
        if reminders is None:
            return
        kind = REMINDER_FOCUS if self._segment == SEGMENT_FOCUS else REMINDER_BREAK
        seconds = self._remaining_seconds

        async def reschedule() -> None:
            await reminders.cancel_all_reminders()
            await reminders.schedule_reminder(kind, seconds)

        self._effects.submit("schedule_reminder", reschedule)

    def _submit_start_cues(self) -> None:
        feedback = self._feedback
        if feedback is None:
            return
        self._effects.submit("start_cue", feedback.play_start_cue)
        self._effects.submit("start_haptic", feedback.haptic_start)

    def _submit_end_cues(self, finished: str) -> None:
        feedback = self._feedback
        if feedback is None:
            return
        if finished == SEGMENT_FOCUS:
            self._effects.submit("focus_end_cue", feedback.play_focus_end_cue)
        else:
            self._effects.submit("break_end_cue", feedback.play_break_end_cue)
        self._effects.submit("end_haptic", feedback.haptic_end)
