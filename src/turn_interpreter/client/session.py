"""Realtime turn interpreter session over a duplex message transport."""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Union

import numpy as np

from ..audio.input.vad import EnergyVAD, calculate_audio_level
from ..audio.pcm import encode_base64, float32_to_pcm16le
from ..config.settings import InterpreterConfig
from ..core.events import (
    ConnectionState,
    FinalResult,
    InterpreterCallbacks,
    RecordingState,
    SessionStatus,
)
from ..errors import ServerError, TransportError
from ..schemas import (
    AudioMessage,
    ClientMessage,
    ControlMessage,
    ErrorEvent,
    FinalEvent,
    PartialEvent,
    StartMessage,
    StatusEvent,
    VadMessage,
    parse_inbound,
    serialize,
)
from .message_queue import OutboundMessageQueue
from .transport import Transport, TransportFactory, TransportHandlers, WebSocketTransport

logger = logging.getLogger("TurnInterpreter")


class TurnInterpreterSession:
    """
    One interpretation conversation: connection, control messages, audio stream.

    Feed float32 frames with push_pcm() from your capture callback; the
    session runs the client VAD, encodes PCM16LE/base64 and sends. Server
    events arrive through the callbacks. All public operations return
    immediately and never raise; failures go to on_error.

    Must be used from a single thread (the event loop's). start() needs a
    running loop when the default WebSocket transport is used.
    """

    def __init__(
        self,
        config: InterpreterConfig,
        callbacks: Optional[InterpreterCallbacks] = None,
        transport_factory: Optional[TransportFactory] = None,
    ):
        self._config = config
        self._callbacks = callbacks or InterpreterCallbacks()
        self._transport_factory = transport_factory or (
            lambda url: WebSocketTransport(url, open_timeout=config.open_timeout_s)
        )
        self._transport: Optional[Transport] = None
        self._queue = OutboundMessageQueue()
        self._vad: Optional[EnergyVAD] = None
        self._session_id = ""
        self._connection_state = ConnectionState.DISCONNECTED
        self._recording_state = RecordingState.IDLE
        self._closing = False

    # ---- Observable state ----

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def connection_state(self) -> ConnectionState:
        return self._connection_state

    @property
    def recording_state(self) -> RecordingState:
        """
        IDLE before the first start() and after the connection drops; STOPPED
        after stop(). Both are idle: push_pcm() is ignored and start() works.
        """
        return self._recording_state

    @property
    def is_recording(self) -> bool:
        """True between the connection opening and stop()/close, paused or not."""
        return self._recording_state in (RecordingState.RECORDING, RecordingState.PAUSED)

    @property
    def is_paused(self) -> bool:
        return self._recording_state == RecordingState.PAUSED

    @property
    def pending_messages(self) -> int:
        return len(self._queue)

    def set_callbacks(self, **callbacks) -> None:
        """Replace individual callbacks, e.g. set_callbacks(on_partial=fn)."""
        for name, fn in callbacks.items():
            if not hasattr(self._callbacks, name):
                raise TypeError(f"Unknown callback: {name}")
            setattr(self._callbacks, name, fn)

    # ---- Public API ----

    def start(self) -> None:
        """Open the connection and announce a new session. No-op while active."""
        if self._connection_state in (ConnectionState.CONNECTING, ConnectionState.CONNECTED):
            return

        self._closing = False
        self._session_id = f"s_{uuid.uuid4().hex[:12]}"
        self._vad = EnergyVAD(self._config.vad_config(), sample_rate=self._config.sample_rate)
        self._connection_state = ConnectionState.CONNECTING

        logger.info("Starting session %s -> %s", self._session_id, self._config.ws_url)
        try:
            transport = self._transport_factory(self._config.ws_url)
            self._transport = transport
            transport.open(self._bind_handlers(transport))
        except Exception as e:
            logger.error("Could not open transport for session %s: %s", self._session_id, e)
            self._transport = None
            self._connection_state = ConnectionState.DISCONNECTED
            self._recording_state = RecordingState.IDLE
            self._vad = None
            self._handle_error(e)

    def stop(self) -> None:
        """Send stop, close the connection and reset to a stopped session."""
        if self._transport is None:
            return

        self._closing = True
        self._connection_state = ConnectionState.CLOSING
        self._send(ControlMessage(type="stop"))

        transport = self._transport
        self._transport = None
        transport.close()

        self._connection_state = ConnectionState.DISCONNECTED
        self._recording_state = RecordingState.STOPPED
        self._vad = None
        logger.info("Stopped session %s", self._session_id)

    def pause(self) -> None:
        if self._recording_state != RecordingState.RECORDING:
            return
        self._recording_state = RecordingState.PAUSED
        self._send(ControlMessage(type="pause"))
        self._emit_status(SessionStatus.PAUSED.value)

    def resume(self) -> None:
        if self._recording_state != RecordingState.PAUSED:
            return
        self._recording_state = RecordingState.RECORDING
        self._send(ControlMessage(type="resume"))
        self._emit_status(SessionStatus.LISTENING.value)

    def push_pcm(self, frame: np.ndarray) -> None:
        """Forward one float32 frame; ignored unless recording and connected."""
        if self._recording_state != RecordingState.RECORDING:
            return
        if self._connection_state != ConnectionState.CONNECTED:
            return

        samples = np.asarray(frame, dtype=np.float32).reshape(-1)

        if self._callbacks.on_audio_level:
            self._invoke("on_audio_level", calculate_audio_level(samples))

        if self._config.vad_enabled and self._vad is not None:
            event = self._vad.process(samples)
            if event is not None:
                self._send(VadMessage(event=event.value))

        pcm16 = encode_base64(float32_to_pcm16le(samples))
        self._send(AudioMessage(pcm16=pcm16, samples=int(samples.size)))

    # ---- Sending ----

    def _send(self, message: ClientMessage) -> None:
        data = serialize(message)
        transport = self._transport
        if (
            self._connection_state in (ConnectionState.CONNECTED, ConnectionState.CLOSING)
            and transport is not None
            and transport.is_open
        ):
            transport.send(data)
        else:
            self._queue.push(data)

    def _flush_queue(self) -> None:
        transport = self._transport
        if transport is None or not transport.is_open:
            return
        sent = self._queue.flush(transport.send)
        if sent:
            logger.debug("Flushed %d queued messages", sent)

    # ---- Transport events ----

    def _bind_handlers(self, transport: Transport) -> TransportHandlers:
        """Handlers that ignore events from a transport no longer attached."""

        def attached() -> bool:
            return self._transport is transport

        def on_open() -> None:
            if attached():
                self._handle_open()

        def on_message(raw: Union[str, bytes]) -> None:
            if attached():
                self._handle_message(raw)

        def on_error(exc: Exception) -> None:
            if attached():
                self._handle_error(exc)

        def on_close() -> None:
            if attached():
                self._handle_close()

        return TransportHandlers(on_open=on_open, on_message=on_message, on_error=on_error, on_close=on_close)

    def _handle_open(self) -> None:
        self._connection_state = ConnectionState.CONNECTED
        self._recording_state = RecordingState.RECORDING
        logger.info("Session %s connected", self._session_id)
        self._flush_queue()

        self._send(
            StartMessage(
                session_id=self._session_id,
                from_language=self._config.from_language,
                to_language=self._config.to_language,
                mode=self._config.mode,
                sample_rate=self._config.sample_rate,
                client_vad=self._config.vad_enabled,
            )
        )
        self._emit_status(SessionStatus.LISTENING.value)

    def _handle_message(self, raw: Union[str, bytes]) -> None:
        event = parse_inbound(raw)
        if event is None:
            return

        if isinstance(event, StatusEvent):
            self._emit_status(event.status, event.dir)
        elif isinstance(event, PartialEvent):
            self._invoke("on_partial", event.text)
        elif isinstance(event, FinalEvent):
            self._invoke("on_final", FinalResult(asr=event.asr, translated_text=event.mt, language_id=event.lid))
        elif isinstance(event, ErrorEvent):
            logger.warning("Server error: %s", event.message)
            self._invoke("on_error", ServerError(event.message))

    def _handle_error(self, exc: Exception) -> None:
        logger.error("Transport error in session %s: %s", self._session_id, exc)
        err = TransportError("WebSocket error")
        err.__cause__ = exc
        self._invoke("on_error", err)

    def _handle_close(self) -> None:
        self._transport = None
        self._connection_state = ConnectionState.DISCONNECTED
        self._recording_state = RecordingState.IDLE
        self._vad = None
        logger.info("Session %s connection closed", self._session_id)

        if not self._closing:
            # No dedicated "disconnected" status on the wire
            self._emit_status(SessionStatus.PAUSED.value)
        self._invoke("on_close")

    def _emit_status(self, status: str, direction: Optional[str] = None) -> None:
        self._invoke("on_status", status, direction)

    def _invoke(self, name: str, *args) -> None:
        """Call a caller callback; a failing callback is logged, not propagated."""
        fn = getattr(self._callbacks, name)
        if fn is None:
            return
        try:
            fn(*args)
        except Exception:
            logger.exception("%s callback failed in session %s", name, self._session_id)
