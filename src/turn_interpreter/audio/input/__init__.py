"""Audio input module."""

from .types import AudioFrame, AudioFormat, FrameConfig, VADConfig
from .vad import EnergyVAD, VADEvent, VAD_PRESETS, calculate_audio_level

__all__ = [
    "AudioFrame",
    "AudioFormat",
    "FrameConfig",
    "VADConfig",
    "EnergyVAD",
    "VADEvent",
    "VAD_PRESETS",
    "calculate_audio_level",
]
