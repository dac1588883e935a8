"""Replay a WAV file as a stream of capture frames."""

from __future__ import annotations

import logging
import queue
import threading
import time
import wave
from pathlib import Path
from typing import Optional

from ..pcm import pcm16le_to_float32
from ...core.shutdown import GracefulShutdown
from .types import AudioFormat, AudioFrame, FrameConfig

logger = logging.getLogger(__name__)


class WavFileSource(threading.Thread):
    """
    Reads a 16-bit mono WAV file and pushes frame_ms frames at real-time pace.

    When audio_format is given the file must be recorded at its sample rate.
    At end of file `finished` is set; the shutdown signal is left for the
    caller to stop.
    """

    def __init__(
        self,
        path: Path,
        stop_signal: GracefulShutdown,
        frame_cfg: FrameConfig,
        frames_queue: queue.Queue[AudioFrame],
        realtime: bool = True,
        audio_format: Optional[AudioFormat] = None,
    ):
        super().__init__(name="WavSourceThread", daemon=True)
        self._path = Path(path)
        self._stop_signal = stop_signal
        self._frame_cfg = frame_cfg
        self._frames_queue = frames_queue
        self._realtime = realtime
        self.finished = threading.Event()

        with wave.open(str(self._path), "rb") as wf:
            if wf.getsampwidth() != 2 or wf.getnchannels() != 1:
                raise ValueError(
                    f"{self._path}: expected 16-bit mono WAV, got "
                    f"{wf.getsampwidth() * 8}-bit with {wf.getnchannels()} channels"
                )
            self.sample_rate = wf.getframerate()

        if audio_format is not None and self.sample_rate != audio_format.sample_rate:
            raise ValueError(
                f"{self._path}: sample rate {self.sample_rate} Hz does not match "
                f"the session rate {audio_format.sample_rate} Hz"
            )

    def run(self) -> None:
        frame_samples = int(self.sample_rate * self._frame_cfg.frame_ms / 1000)
        frame_s = self._frame_cfg.frame_ms / 1000
        sent = 0
        try:
            with wave.open(str(self._path), "rb") as wf:
                while not self._stop_signal.is_set():
                    data = wf.readframes(frame_samples)
                    if not data:
                        break
                    frame = AudioFrame(
                        pcm=pcm16le_to_float32(data),
                        sample_rate=self.sample_rate,
                        timestamp_s=time.time(),
                    )
                    try:
                        self._frames_queue.put_nowait(frame)
                        sent += 1
                    except queue.Full:
                        logger.warning("Frames queue is full, dropping audio frame")
                    if self._realtime and self._stop_signal.wait(frame_s):
                        break
        finally:
            logger.info("WAV replay finished after %d frames", sent)
            self.finished.set()
