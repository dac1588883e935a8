"""Session state and event types shared between the session and its callers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSING = "closing"


class RecordingState(str, Enum):
    IDLE = "idle"            # never started, or the connection dropped
    RECORDING = "recording"
    PAUSED = "paused"
    STOPPED = "stopped"      # idle, reached through stop()


class SessionStatus(str, Enum):
    """Statuses the client reports on its own; the server may send others."""
    LISTENING = "listening"
    PAUSED = "paused"


@dataclass(frozen=True)
class FinalResult:
    """One finalized utterance: transcript, translation, detected language."""
    asr: str
    translated_text: str
    language_id: Optional[str] = None


@dataclass
class InterpreterCallbacks:
    """Optional event hooks; any of them may be left as None."""
    on_partial: Optional[Callable[[str], None]] = None
    on_final: Optional[Callable[[FinalResult], None]] = None
    on_status: Optional[Callable[[str, Optional[str]], None]] = None
    on_error: Optional[Callable[[Exception], None]] = None
    on_close: Optional[Callable[[], None]] = None
    on_audio_level: Optional[Callable[[float], None]] = None
