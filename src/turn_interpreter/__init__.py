"""Realtime turn interpreter client."""

from .client.session import TurnInterpreterSession
from .core.events import FinalResult, InterpreterCallbacks

__all__ = ["TurnInterpreterSession", "FinalResult", "InterpreterCallbacks"]
