import threading
from typing import Protocol


class StopSignal(Protocol):
    """Protocol for shutdown signals used by capture threads."""

    def is_set(self) -> bool: ...


class GracefulShutdown:
    """Shared stop flag for the capture thread and the drain loop."""

    def __init__(self):
        self.stop_event = threading.Event()

    def stop(self):
        self.stop_event.set()

    def is_set(self) -> bool:
        return self.stop_event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to timeout seconds; returns True once stopped."""
        return self.stop_event.wait(timeout)
