"""PCM sample conversion and base64 helpers for the wire format."""

from __future__ import annotations

import base64

import numpy as np

# Asymmetric int16 range: negatives scale to -32768, positives to 32767.
PCM16_NEG_SCALE = 32768.0
PCM16_POS_SCALE = 32767.0


def float32_to_pcm16le(frame) -> bytes:
    """
    Convert normalized float samples to signed 16-bit little-endian PCM.

    Samples are clamped to [-1, 1] before scaling; NaN becomes 0.
    Scaled values are truncated toward zero.
    """
    samples = np.nan_to_num(np.asarray(frame, dtype=np.float64), nan=0.0)
    samples = np.clip(samples, -1.0, 1.0)
    scaled = np.where(samples < 0, samples * PCM16_NEG_SCALE, samples * PCM16_POS_SCALE)
    return np.trunc(scaled).astype("<i2").tobytes()


def pcm16le_to_float32(data: bytes) -> np.ndarray:
    """Inverse of float32_to_pcm16le (up to quantization)."""
    if len(data) % 2:
        raise ValueError(f"PCM16 buffer must have an even byte count, got {len(data)}")
    ints = np.frombuffer(data, dtype="<i2").astype(np.float64)
    out = np.where(ints < 0, ints / PCM16_NEG_SCALE, ints / PCM16_POS_SCALE)
    return out.astype(np.float32)


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_base64(text: str) -> bytes:
    return base64.b64decode(text, validate=True)
