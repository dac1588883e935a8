"""Audio module."""

from .pcm import float32_to_pcm16le, pcm16le_to_float32, encode_base64, decode_base64

__all__ = ["float32_to_pcm16le", "pcm16le_to_float32", "encode_base64", "decode_base64"]
