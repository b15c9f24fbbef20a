"""Synthesized sound cues for session start and segment end."""

from __future__ import annotations

from functools import lru_cache

import numpy as np

from .errors import FeedbackError

SAMPLE_RATE_HZ = 44100

CUE_START = "start"
CUE_FOCUS_END = "focus_end"
CUE_BREAK_END = "break_end"

# (frequency Hz, length seconds) per note.
_CUE_NOTES: dict[str, tuple[tuple[float, float], ...]] = {
    CUE_START: ((659.25, 0.09), (880.0, 0.12)),
    CUE_FOCUS_END: ((880.0, 0.12), (739.99, 0.12), (587.33, 0.24)),
    CUE_BREAK_END: ((587.33, 0.10), (739.99, 0.10), (880.0, 0.22)),
}
_GAP_SECONDS = 0.03
_FADE_SECONDS = 0.01


@lru_cache(maxsize=16)
def render_cue(
    name: str,
    sample_rate_hz: int = SAMPLE_RATE_HZ,
    volume: float = 0.4,
) -> np.ndarray:
    """Return a read-only mono float32 buffer for cue `name`."""
    notes = _CUE_NOTES.get(name)
    if notes is None:
        raise FeedbackError(f"Unknown feedback cue: {name}")
    if sample_rate_hz <= 0:
        raise FeedbackError("sample_rate_hz must be greater than zero")

    gain = float(np.clip(volume, 0.0, 1.0))
    gap = np.zeros(int(sample_rate_hz * _GAP_SECONDS), dtype=np.float32)
    parts: list[np.ndarray] = []
    for frequency_hz, seconds in notes:
        count = int(sample_rate_hz * seconds)
        t = np.arange(count, dtype=np.float32) / np.float32(sample_rate_hz)
        tone = np.sin(2.0 * np.pi * frequency_hz * t).astype(np.float32)
        fade = min(int(sample_rate_hz * _FADE_SECONDS), count // 2)
        if fade > 0:
            ramp = np.linspace(0.0, 1.0, fade, dtype=np.float32)
            tone[:fade] *= ramp
            tone[-fade:] *= ramp[::-1]
        parts.append(tone)
        parts.append(gap)

    wav = (np.concatenate(parts) * np.float32(gain)).astype(np.float32)
    # Cached buffers are shared between callers.
    wav.setflags(write=False)
    return wav
