"""Microphone audio capture."""

from __future__ import annotations

import threading
import queue
import time
import logging
from typing import Optional

import numpy as np

from ...core.shutdown import StopSignal

from .types import AudioFormat, AudioFrame, FrameConfig

logger = logging.getLogger(__name__)


class Mic(threading.Thread):
    """
    Continuously captures microphone audio and pushes AudioFrame into frames_queue.

    Important: keep the callback lightweight; VAD and encoding happen in the session.
    """

    def __init__(
        self,
        stop_signal: StopSignal,
        audio_format: AudioFormat,
        frame_cfg: FrameConfig,
        frames_queue: queue.Queue[AudioFrame],
        device: Optional[int] = None,
    ):
        super().__init__(name="MicThread", daemon=True)
        self._stop_signal = stop_signal
        self._audio_format = audio_format
        self._frame_cfg = frame_cfg
        self._frames_queue = frames_queue
        self._device = device

    @property
    def blocksize(self) -> int:
        """Samples per captured frame."""
        return int(self._audio_format.sample_rate * self._frame_cfg.frame_ms / 1000)

    def _on_audio(self, indata: np.ndarray, frames: int, time_info, status) -> None:
        """sounddevice callback: first channel as float32, enqueue without blocking."""
        if status:
            logger.warning(f"Audio callback status: {status}")

        if indata.ndim == 2 and indata.shape[1] > 0:
            pcm = indata[:, 0].astype(np.float32)
        else:
            pcm = indata.flatten().astype(np.float32)

        frame = AudioFrame(
            pcm=pcm,
            sample_rate=self._audio_format.sample_rate,
            timestamp_s=time.time(),
        )
        try:
            self._frames_queue.put_nowait(frame)
        except queue.Full:
            logger.warning("Frames queue is full, dropping audio frame")

    def run(self) -> None:
        """Start microphone capture loop."""
        import sounddevice as sd

        try:
            with sd.InputStream(
                callback=self._on_audio,
                samplerate=self._audio_format.sample_rate,
                channels=self._audio_format.channels,
                blocksize=self.blocksize,
                dtype=self._audio_format.dtype,
                device=self._device,
            ):
                while not self._stop_signal.is_set():
                    time.sleep(0.1)
        except Exception as e:
            logger.error(f"Error in microphone capture: {e}", exc_info=True)
        finally:
            logger.info("Microphone capture stopped")
