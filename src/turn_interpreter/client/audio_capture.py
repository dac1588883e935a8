"""Client-side audio capture: Mic or WAV file -> session.push_pcm."""

from __future__ import annotations

import asyncio
import logging
import queue
from pathlib import Path
from typing import Optional

from ..audio.input.mic import Mic
from ..audio.input.types import AudioFormat, AudioFrame, AudioSource, FrameConfig
from ..audio.input.wav_source import WavFileSource
from ..core.shutdown import GracefulShutdown
from .session import TurnInterpreterSession

logger = logging.getLogger("AudioCapture")


class ClientAudioCapture:
    """
    Captures float32 frames on a background thread and feeds them to a session.

    The capture thread only enqueues; push_pcm runs on the event loop.
    """

    def __init__(
        self,
        shutdown: GracefulShutdown,
        audio_format: AudioFormat = AudioFormat(),
        frame_cfg: FrameConfig = FrameConfig(),
        device: Optional[int] = None,
        wav_path: Optional[Path] = None,
    ):
        self._shutdown = shutdown
        self._frames_queue: queue.Queue[AudioFrame] = queue.Queue(maxsize=frame_cfg.max_frames_queue)
        self._source: AudioSource
        if wav_path is not None:
            self._source = WavFileSource(
                path=wav_path,
                stop_signal=shutdown,
                frame_cfg=frame_cfg,
                frames_queue=self._frames_queue,
                audio_format=audio_format,
            )
        else:
            self._source = Mic(
                stop_signal=shutdown,
                audio_format=audio_format,
                frame_cfg=frame_cfg,
                frames_queue=self._frames_queue,
                device=device,
            )

    @property
    def source(self) -> AudioSource:
        return self._source

    def start(self) -> None:
        """Start the capture thread."""
        self._source.start()

    async def drain_to_session(self, session: TurnInterpreterSession) -> None:
        """
        Async loop: drain captured frames into session.push_pcm.

        Frames arriving while the session is not recording are discarded by
        the session itself.
        """
        while not self._shutdown.is_set():
            try:
                frame = self._frames_queue.get_nowait()
            except queue.Empty:
                await asyncio.sleep(0.01)
                continue
            session.push_pcm(frame.pcm)
            # Let the transport tasks run between frames
            await asyncio.sleep(0)

    def stop(self) -> None:
        """Wait for the capture thread to finish."""
        self._source.join(timeout=2)
