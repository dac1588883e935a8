"""Duplex message transport used by the session, with a websockets implementation."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Union, runtime_checkable

import websockets

from ..errors import TransportError

logger = logging.getLogger("InterpreterTransport")


@dataclass
class TransportHandlers:
    """Events a transport reports back to its owner."""
    on_open: Callable[[], None]
    on_message: Callable[[Union[str, bytes]], None]
    on_error: Callable[[Exception], None]
    on_close: Callable[[], None]


@runtime_checkable
class Transport(Protocol):
    """A single persistent message-oriented connection."""

    @property
    def is_open(self) -> bool: ...

    def open(self, handlers: TransportHandlers) -> None:
        """Begin connecting; must return immediately."""
        ...

    def send(self, data: str) -> None:
        """Hand one message to the connection; must not block."""
        ...

    def close(self) -> None:
        """Close after already-sent messages are written."""
        ...


TransportFactory = Callable[[str], Transport]


class WebSocketTransport:
    """
    Runs one WebSocket connection as asyncio tasks on the running loop.

    open() spawns a task that connects and then receives; send() enqueues
    onto a writer task so callers never wait on network I/O. Outbound order
    is the order of send() calls. close() lets the writer drain what was
    already sent before closing the socket.
    """

    def __init__(self, url: str, open_timeout: float = 10.0):
        self._url = url
        self._open_timeout = open_timeout
        self._ws: Optional[websockets.ClientConnection] = None
        self._handlers: Optional[TransportHandlers] = None
        self._task: Optional[asyncio.Task] = None
        self._outgoing: asyncio.Queue[Optional[str]] = asyncio.Queue()
        self._open = False
        self._closing = False

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_open(self) -> bool:
        return self._open and not self._closing

    def open(self, handlers: TransportHandlers) -> None:
        """Start the connection task. Requires a running event loop."""
        if self._task is not None:
            return
        self._handlers = handlers
        self._task = asyncio.get_running_loop().create_task(self._run(), name="ws-transport")

    def send(self, data: str) -> None:
        if not self.is_open:
            raise TransportError("WebSocket is not open")
        self._outgoing.put_nowait(data)

    def close(self) -> None:
        if self._closing:
            return
        self._closing = True
        if self._open:
            self._outgoing.put_nowait(None)
        elif self._task is not None and not self._task.done():
            # Still connecting
            self._task.cancel()

    async def wait_closed(self) -> None:
        """Wait for the connection task to finish (for tests and shutdown)."""
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def _run(self) -> None:
        handlers = self._handlers
        try:
            self._ws = await websockets.connect(self._url, open_timeout=self._open_timeout)
        except Exception as e:
            logger.error("Failed to connect to %s: %s", self._url, e)
            handlers.on_error(e)
            handlers.on_close()
            return

        if self._closing:
            await self._ws.close()
            handlers.on_close()
            return

        self._open = True
        logger.info("Connected to %s", self._url)
        writer = asyncio.create_task(self._write_loop(), name="ws-writer")
        handlers.on_open()

        try:
            async for message in self._ws:
                handlers.on_message(message)
        except websockets.ConnectionClosed as e:
            logger.info("WebSocket connection closed: %s", e)
        except Exception as e:
            logger.error("WebSocket receive error: %s", e)
            handlers.on_error(e)
        finally:
            self._open = False
            if not writer.done():
                writer.cancel()
            # No-op when the writer already closed it
            await self._ws.close()
            handlers.on_close()

    async def _write_loop(self) -> None:
        while True:
            data = await self._outgoing.get()
            if data is None:
                await self._ws.close()
                logger.info("Disconnected from %s", self._url)
                return
            try:
                await self._ws.send(data)
            except websockets.ConnectionClosed:
                logger.warning("Connection closed while sending; remaining outbound messages dropped")
                return
            except Exception as e:
                logger.exception("WebSocket send error")
                self._handlers.on_error(e)
                # Ends the receive loop, which reports the close
                await self._ws.close()
                return
