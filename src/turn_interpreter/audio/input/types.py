"""Audio input data types and configuration."""

from __future__ import annotations

import queue
from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

import numpy as np

from ...core.shutdown import StopSignal


@dataclass
class AudioFrame:
    """Single audio frame from microphone or other source."""
    pcm: np.ndarray          # shape: (n_samples,) float32 in [-1, 1]
    sample_rate: int
    timestamp_s: float


@runtime_checkable
class AudioSource(Protocol):
    """Protocol for audio input sources."""
    def start(self) -> None:
        """Start capturing audio."""
        ...

    def join(self, timeout: float | None = None) -> None:
        """Wait for the source to stop."""
        ...


AudioSourceFactory = Callable[[queue.Queue["AudioFrame"], StopSignal], AudioSource]


@dataclass(frozen=True)
class AudioFormat:
    """Audio format specification."""
    sample_rate: int = 16000
    channels: int = 1
    dtype: str = "float32"  # sounddevice dtype name


@dataclass(frozen=True)
class FrameConfig:
    """Frame-level audio capture configuration."""
    frame_ms: int = 20
    max_frames_queue: int = 400


@dataclass(frozen=True)
class VADConfig:
    """Energy VAD (utterance endpointing) configuration."""
    energy_threshold: float = 0.015   # mean |sample| at or above which a frame is speech
    start_ms: float = 120             # continuous speech before "begin"
    silence_ms: float = 450           # continuous silence after speech before "end"
    min_utterance_ms: float = 280     # shorter utterances end without an "end" event
    max_utterance_ms: float = 0       # 0 disables the forced "end"
