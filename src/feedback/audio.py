"""Sounddevice-backed playback for feedback cues."""

import logging
import threading
from typing import Optional

import numpy as np

from .errors import FeedbackDependencyError, FeedbackError

# Extra wait on top of the cue length before playback counts as stuck.
_FINISH_GRACE_SECONDS = 0.5


class SoundDeviceCuePlayer:
    """Plays short mono cues through a selected sounddevice output.

    Cues are padded with silence to whole blocks, so the stream callback never
    sees a partial chunk and the device drains the tail before the stream stops.
    """
    def __init__(
        self,
        output_device_index: Optional[int] = None,
        blocksize: int = 512,
        logger: Optional[logging.Logger] = None,
    ):
        if blocksize <= 0:
            raise FeedbackError("blocksize must be greater than zero")
        self._output_device_index = output_device_index
        self._blocksize = blocksize
        self._logger = logger or logging.getLogger(__name__)
        self._sd = self._import_backend()

    @staticmethod
    def _import_backend():
        try:
            import sounddevice as sd
        except (ImportError, OSError) as error:  # pragma: no cover - depends on host audio stack
            raise FeedbackDependencyError(
                f"sounddevice import failed ({error}). Install sounddevice and "
                "the PortAudio library to enable sound cues."
            ) from error
        return sd

    def frames_for(self, wav: np.ndarray) -> np.ndarray:
        """Return `wav` as float32 blocks, zero padded to a multiple of the blocksize."""
        if wav.ndim != 1:
            raise FeedbackError("Expected mono PCM array for playback")
        if len(wav) == 0:
            raise FeedbackError("Cannot play empty audio buffer")

        blocks = -(-len(wav) // self._blocksize)
        padded = np.zeros((blocks, self._blocksize), dtype=np.float32)
        padded.reshape(-1)[: len(wav)] = wav
        return padded

    def play(self, wav: np.ndarray, sample_rate_hz: int) -> None:
        """Play one cue and return once the stream has finished."""
        blocks = self.frames_for(wav)
        sd = self._sd
        finished = threading.Event()
        index = 0

        def callback(outdata, frames, time_info, status):
            nonlocal index
            if status:
                self._logger.warning("Sounddevice status: %s", status)
            outdata[:, 0] = blocks[index]
            index += 1
            if index == len(blocks):
                raise sd.CallbackStop()

        timeout = blocks.size / sample_rate_hz + _FINISH_GRACE_SECONDS
        try:
            with sd.OutputStream(
                channels=1,
                samplerate=sample_rate_hz,
                blocksize=self._blocksize,
                dtype="float32",
                callback=callback,
                finished_callback=finished.set,
                device=self._output_device_index,
            ):
                if not finished.wait(timeout):
                    self._logger.warning("Cue playback did not finish within %.2fs", timeout)
        except Exception as error:
            raise FeedbackError(f"Cue playback failed: {error}") from error
