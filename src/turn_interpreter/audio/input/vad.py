"""Energy-based voice activity detection with debounced utterance boundaries."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

import numpy as np

from .types import VADConfig

logger = logging.getLogger(__name__)


class VADEvent(str, Enum):
    """Utterance boundary emitted by the detector."""
    BEGIN = "begin"
    END = "end"


VAD_PRESETS: dict[str, VADConfig] = {
    # Quiet rooms: lower threshold, quicker turn ends
    "sensitive": VADConfig(energy_threshold=0.008, start_ms=80, silence_ms=350, min_utterance_ms=200),
    "balanced": VADConfig(),
    # Noisy rooms: louder and longer speech needed
    "conservative": VADConfig(energy_threshold=0.025, start_ms=200, silence_ms=650, min_utterance_ms=450),
}


def frame_energy(frame: np.ndarray) -> float:
    """Mean absolute sample magnitude."""
    return float(np.mean(np.abs(frame)))


def calculate_audio_level(frame: np.ndarray) -> float:
    """
    Display level for a frame: RMS scaled by 10, clamped to [0, 1].

    Not used for speech decisions; see frame_energy.
    """
    samples = np.asarray(frame, dtype=np.float64)
    if samples.size == 0:
        return 0.0
    rms = float(np.sqrt(np.mean(samples ** 2)))
    return min(1.0, rms * 10.0)


class EnergyVAD:
    """
    Single-pass, zero-lookahead speech/silence state machine.

    A frame is speech when its mean absolute magnitude reaches
    energy_threshold. Speech must last start_ms before BEGIN is emitted and
    silence must last silence_ms before the utterance ends. Utterances whose
    duration (counted from BEGIN, trailing silence included) is below
    min_utterance_ms end silently.
    """

    def __init__(self, cfg: VADConfig = VADConfig(), sample_rate: int = 16000):
        self._cfg = cfg
        self._sample_rate = sample_rate
        self.reset()

    @property
    def config(self) -> VADConfig:
        return self._cfg

    @property
    def speaking(self) -> bool:
        return self._speaking

    @property
    def speech_ms(self) -> float:
        return self._speech_ms

    @property
    def silence_ms(self) -> float:
        return self._silence_ms

    @property
    def utterance_ms(self) -> float:
        return self._utterance_ms

    def reset(self) -> None:
        self._speaking = False
        self._speech_ms = 0.0
        self._silence_ms = 0.0
        self._utterance_ms = 0.0

    def process(self, frame: np.ndarray) -> Optional[VADEvent]:
        """
        Feed one frame and return the boundary event it triggers, if any.

        Args:
            frame: float samples in [-1, 1] at the configured sample rate

        Returns:
            VADEvent.BEGIN, VADEvent.END or None
        """
        samples = np.asarray(frame, dtype=np.float64)
        if samples.size == 0:
            return None

        energy = frame_energy(samples)
        frame_ms = samples.size / self._sample_rate * 1000.0
        self._utterance_ms += frame_ms

        if energy >= self._cfg.energy_threshold:
            self._speech_ms += frame_ms
            self._silence_ms = 0.0

            if not self._speaking and self._speech_ms >= self._cfg.start_ms:
                self._speaking = True
                self._utterance_ms = 0.0
                logger.debug("VAD begin (speech %.0f ms, energy %.4f)", self._speech_ms, energy)
                return VADEvent.BEGIN

            if (
                self._speaking
                and self._cfg.max_utterance_ms > 0
                and self._utterance_ms >= self._cfg.max_utterance_ms
            ):
                logger.debug("VAD forced end after %.0f ms", self._utterance_ms)
                self._end_utterance()
                return VADEvent.END
            return None

        self._silence_ms += frame_ms
        self._speech_ms = 0.0

        if self._speaking and self._silence_ms >= self._cfg.silence_ms:
            long_enough = self._utterance_ms >= self._cfg.min_utterance_ms
            if not long_enough:
                logger.debug("VAD discarded short utterance (%.0f ms)", self._utterance_ms)
            else:
                logger.debug("VAD end (utterance %.0f ms)", self._utterance_ms)
            self._end_utterance()
            return VADEvent.END if long_enough else None
        return None

    def _end_utterance(self) -> None:
        self._speaking = False
        self._utterance_ms = 0.0
        self._silence_ms = 0.0
