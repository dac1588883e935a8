"""Tests for WebSocketTransport."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import numpy as np
import pytest
import websockets

from turn_interpreter.client.session import TurnInterpreterSession
from turn_interpreter.client.transport import TransportHandlers, WebSocketTransport
from turn_interpreter.config.settings import InterpreterConfig
from turn_interpreter.core.events import InterpreterCallbacks, RecordingState
from turn_interpreter.errors import TransportError

MODULE = "turn_interpreter.client.transport"


def _mock_ws_connect(mock_ws):
    """Create a patch for websockets.connect that returns mock_ws as an awaitable."""
    return patch(f"{MODULE}.websockets.connect", AsyncMock(return_value=mock_ws))


def _make_async_iter_ws(items, hold: asyncio.Event | None = None):
    """Mock WebSocket that yields items via async for, then optionally waits on hold."""
    mock_ws = AsyncMock()

    async def async_iter():
        for item in items:
            yield item
        if hold is not None:
            await hold.wait()

    mock_ws.__aiter__ = lambda self: async_iter()
    return mock_ws


@pytest.fixture
def handlers():
    return TransportHandlers(
        on_open=MagicMock(),
        on_message=MagicMock(),
        on_error=MagicMock(),
        on_close=MagicMock(),
    )


@pytest.mark.asyncio
async def test_open_connects_and_dispatches_messages(handlers):
    mock_ws = _make_async_iter_ws(['{"type": "partial", "text": "hi"}', b"\x00"])
    transport = WebSocketTransport("ws://localhost:9999/interpret")

    with _mock_ws_connect(mock_ws) as connect:
        transport.open(handlers)
        await transport.wait_closed()

    connect.assert_awaited_once_with("ws://localhost:9999/interpret", open_timeout=10.0)
    handlers.on_open.assert_called_once()
    assert [c.args[0] for c in handlers.on_message.call_args_list] == [
        '{"type": "partial", "text": "hi"}',
        b"\x00",
    ]
    handlers.on_close.assert_called_once()
    handlers.on_error.assert_not_called()
    assert not transport.is_open


@pytest.mark.asyncio
async def test_send_preserves_order(handlers):
    hold = asyncio.Event()
    mock_ws = _make_async_iter_ws([], hold=hold)
    transport = WebSocketTransport("ws://localhost:9999/interpret")

    with _mock_ws_connect(mock_ws):
        transport.open(handlers)
        await asyncio.sleep(0.01)
        assert transport.is_open

        for i in range(3):
            transport.send(f'{{"n": {i}}}')
        transport.close()
        assert not transport.is_open
        await asyncio.sleep(0.01)
        hold.set()
        await transport.wait_closed()

    assert [c.args[0] for c in mock_ws.send.await_args_list] == ['{"n": 0}', '{"n": 1}', '{"n": 2}']
    mock_ws.close.assert_awaited()
    handlers.on_close.assert_called_once()


@pytest.mark.asyncio
async def test_send_when_not_open_raises():
    transport = WebSocketTransport("ws://localhost:9999/interpret")
    with pytest.raises(TransportError):
        transport.send("{}")


@pytest.mark.asyncio
async def test_connect_failure_reports_error_then_close(handlers):
    transport = WebSocketTransport("ws://localhost:9999/interpret")
    with patch(f"{MODULE}.websockets.connect", AsyncMock(side_effect=OSError("refused"))):
        transport.open(handlers)
        await transport.wait_closed()

    handlers.on_open.assert_not_called()
    assert isinstance(handlers.on_error.call_args[0][0], OSError)
    handlers.on_close.assert_called_once()


@pytest.mark.asyncio
async def test_connection_closed_is_not_an_error(handlers):
    mock_ws = AsyncMock()

    async def async_iter():
        yield '{"type": "status", "status": "listening"}'
        raise websockets.ConnectionClosed(None, None)

    mock_ws.__aiter__ = lambda self: async_iter()
    transport = WebSocketTransport("ws://localhost:9999/interpret")

    with _mock_ws_connect(mock_ws):
        transport.open(handlers)
        await transport.wait_closed()

    handlers.on_message.assert_called_once()
    handlers.on_error.assert_not_called()
    handlers.on_close.assert_called_once()


@pytest.mark.asyncio
async def test_receive_failure_reports_error(handlers):
    mock_ws = AsyncMock()

    async def async_iter():
        raise RuntimeError("boom")
        yield  # pragma: no cover

    mock_ws.__aiter__ = lambda self: async_iter()
    transport = WebSocketTransport("ws://localhost:9999/interpret")

    with _mock_ws_connect(mock_ws):
        transport.open(handlers)
        await transport.wait_closed()

    assert isinstance(handlers.on_error.call_args[0][0], RuntimeError)
    handlers.on_close.assert_called_once()
    mock_ws.close.assert_awaited()


@pytest.mark.asyncio
async def test_close_while_connecting_cancels(handlers):
    started = asyncio.Event()

    async def slow_connect(*args, **kwargs):
        started.set()
        await asyncio.sleep(10)

    transport = WebSocketTransport("ws://localhost:9999/interpret")
    with patch(f"{MODULE}.websockets.connect", slow_connect):
        transport.open(handlers)
        await started.wait()
        transport.close()
        await transport.wait_closed()

    handlers.on_open.assert_not_called()
    handlers.on_close.assert_not_called()


@pytest.mark.asyncio
async def test_open_twice_is_ignored(handlers):
    mock_ws = _make_async_iter_ws([])
    transport = WebSocketTransport("ws://localhost:9999/interpret")
    with _mock_ws_connect(mock_ws) as connect:
        transport.open(handlers)
        transport.open(handlers)
        await transport.wait_closed()
    assert connect.await_count == 1


@pytest.mark.asyncio
async def test_send_failure_is_reported_and_closes(handlers):
    hold = asyncio.Event()
    mock_ws = _make_async_iter_ws([], hold=hold)
    mock_ws.send.side_effect = RuntimeError("broken pipe")

    async def close():
        hold.set()

    mock_ws.close.side_effect = close
    transport = WebSocketTransport("ws://localhost:9999/interpret")

    with _mock_ws_connect(mock_ws):
        transport.open(handlers)
        await asyncio.sleep(0.01)
        transport.send("{}")
        await asyncio.wait_for(transport.wait_closed(), timeout=1)

    assert isinstance(handlers.on_error.call_args[0][0], RuntimeError)
    handlers.on_close.assert_called_once()
    mock_ws.close.assert_awaited()


@pytest.mark.asyncio
async def test_session_survives_raising_status_callback():
    hold = asyncio.Event()
    mock_ws = _make_async_iter_ws([], hold=hold)
    callbacks = InterpreterCallbacks(on_status=MagicMock(side_effect=RuntimeError("ui bug")), on_error=MagicMock())
    session = TurnInterpreterSession(InterpreterConfig(ws_url="ws://localhost:9999/interpret"), callbacks=callbacks)

    with _mock_ws_connect(mock_ws):
        session.start()
        await asyncio.sleep(0.01)
        assert session.recording_state == RecordingState.RECORDING

        session.push_pcm(np.zeros(320, dtype=np.float32))
        await asyncio.sleep(0.01)
        sent = [json.loads(c.args[0])["type"] for c in mock_ws.send.await_args_list]
        assert sent == ["start", "audio"]
        callbacks.on_error.assert_not_called()

        session.stop()
        await asyncio.sleep(0.01)
        hold.set()
        await asyncio.sleep(0.01)
