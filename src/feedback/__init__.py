"""Public exports for sound and haptic feedback."""

from .audio import SoundDeviceCuePlayer
from .cues import CUE_BREAK_END, CUE_FOCUS_END, CUE_START, render_cue
from .errors import FeedbackDependencyError, FeedbackError
from .haptics import HAPTIC_END_PATTERN, HAPTIC_START_PATTERN, HapticPulse, HapticSink
from .service import FeedbackService, build_feedback_service

__all__ = [
    "CUE_BREAK_END",
    "CUE_FOCUS_END",
    "CUE_START",
    "FeedbackDependencyError",
    "FeedbackError",
    "FeedbackService",
    "HAPTIC_END_PATTERN",
    "HAPTIC_START_PATTERN",
    "HapticPulse",
    "HapticSink",
    "SoundDeviceCuePlayer",
    "build_feedback_service",
    "render_cue",
]
