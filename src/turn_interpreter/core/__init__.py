"""Core module."""

from .shutdown import GracefulShutdown, StopSignal
from .events import (
    ConnectionState,
    FinalResult,
    InterpreterCallbacks,
    RecordingState,
    SessionStatus,
)

__all__ = [
    "GracefulShutdown",
    "StopSignal",
    "ConnectionState",
    "FinalResult",
    "InterpreterCallbacks",
    "RecordingState",
    "SessionStatus",
]
