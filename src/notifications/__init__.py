"""Notification gateway: one pending segment-end reminder at a time."""

from .scheduler import REMINDER_CONTENT, Reminder, ReminderScheduler, ReminderSink

__all__ = [
    "REMINDER_CONTENT",
    "Reminder",
    "ReminderScheduler",
    "ReminderSink",
]
