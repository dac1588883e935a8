"""Ordered buffer for outbound messages while the transport is not ready."""

from __future__ import annotations

from collections import deque
from typing import Callable


class OutboundMessageQueue:
    """FIFO of serialized messages awaiting a connected transport."""

    def __init__(self):
        self._items: deque[str] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def push(self, message: str) -> None:
        self._items.append(message)

    def flush(self, send: Callable[[str], None]) -> int:
        """
        Send every queued message in order, removing each before it is sent.

        Returns the number of messages handed to send. If send raises, the
        failing message is dropped and the rest stay queued.
        """
        sent = 0
        while self._items:
            send(self._items.popleft())
            sent += 1
        return sent

    def clear(self) -> None:
        self._items.clear()
