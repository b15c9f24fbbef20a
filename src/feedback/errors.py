class FeedbackError(Exception):
    """Base exception for sound and haptic feedback."""


class FeedbackDependencyError(FeedbackError):
    """Raised when the audio backend or its native library is unavailable."""
