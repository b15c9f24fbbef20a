"""Fire-and-forget sound and haptic feedback used at segment boundaries."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

import numpy as np

from .audio import SoundDeviceCuePlayer
from .cues import CUE_BREAK_END, CUE_FOCUS_END, CUE_START, SAMPLE_RATE_HZ, render_cue
from .errors import FeedbackDependencyError
from .haptics import HAPTIC_END_PATTERN, HAPTIC_START_PATTERN, HapticPulse, HapticSink


class CuePlayer(Protocol):
    def play(self, wav: np.ndarray, sample_rate_hz: int) -> None:
        ...


class FeedbackService:
    """Plays cues and emits haptic patterns; every failure is logged and dropped."""

    def __init__(
        self,
        *,
        player: Optional[CuePlayer] = None,
        haptics: Optional[HapticSink] = None,
        sound_enabled: bool = True,
        haptics_enabled: bool = True,
        volume: float = 0.4,
        sample_rate_hz: int = SAMPLE_RATE_HZ,
        logger: Optional[logging.Logger] = None,
    ):
        self._player = player
        self._haptics = haptics
        self._sound_enabled = sound_enabled
        self._haptics_enabled = haptics_enabled
        self._volume = volume
        self._sample_rate_hz = sample_rate_hz
        self._logger = logger or logging.getLogger("feedback")

    async def play_start_cue(self) -> None:
        await self._play(CUE_START)

    async def play_focus_end_cue(self) -> None:
        await self._play(CUE_FOCUS_END)

    async def play_break_end_cue(self) -> None:
        await self._play(CUE_BREAK_END)

    async def haptic_start(self) -> None:
        self._vibrate("start", HAPTIC_START_PATTERN)

    async def haptic_end(self) -> None:
        self._vibrate("end", HAPTIC_END_PATTERN)

    async def _play(self, cue: str) -> None:
        if not self._sound_enabled or self._player is None:
            return
        try:
            wav = render_cue(cue, self._sample_rate_hz, self._volume)
            await asyncio.to_thread(self._player.play, wav, self._sample_rate_hz)
        except Exception as error:
            self._logger.warning("Failed to play %s cue: %s", cue, error)

    def _vibrate(self, name: str, pattern: tuple[HapticPulse, ...]) -> None:
        if not self._haptics_enabled or self._haptics is None:
            return
        try:
            self._haptics.vibrate(name, pattern)
        except Exception as error:
            self._logger.warning("Failed to send %s haptic: %s", name, error)


def build_feedback_service(
    settings,
    *,
    haptics: Optional[HapticSink],
    logger: logging.Logger,
) -> FeedbackService:
    """Create the feedback service, degrading to silent cues without audio."""
    player: Optional[CuePlayer] = None
    if settings.sound_enabled:
        try:
            player = SoundDeviceCuePlayer(
                output_device_index=settings.output_device,
                logger=logger.getChild("audio"),
            )
            logger.info("Sound cues enabled")
        except FeedbackDependencyError as error:
            logger.warning("Sound cues unavailable: %s", error)

    return FeedbackService(
        player=player,
        haptics=haptics,
        sound_enabled=settings.sound_enabled,
        haptics_enabled=settings.haptics_enabled,
        volume=settings.volume,
        logger=logger,
    )
