"""WebSocket message schemas for the turn interpreter protocol."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)


class TurnMode(str, Enum):
    """How the backend decides translation direction."""
    ALTERNATE = "alternate"   # manual turn-taking
    AUTO_LID = "auto-lid"     # direction picked by language identification


class ClientMessageType(str, Enum):
    """Types of messages the client sends."""
    START = "start"
    AUDIO = "audio"
    VAD = "vad"
    PAUSE = "pause"
    RESUME = "resume"
    STOP = "stop"


# ---- Client -> Server ----

class StartMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["start"] = "start"
    session_id: str = Field(..., alias="sessionId")
    from_language: str = Field(..., alias="from")
    to_language: str = Field(..., alias="to")
    mode: TurnMode = TurnMode.ALTERNATE
    sample_rate: int = Field(default=16000, alias="sampleRate")
    client_vad: bool = Field(default=True, alias="clientVad")


class AudioMessage(BaseModel):
    type: Literal["audio"] = "audio"
    pcm16: str = Field(..., description="Base64 of little-endian int16 samples")
    samples: int = Field(..., ge=0)


class VadMessage(BaseModel):
    type: Literal["vad"] = "vad"
    event: Literal["begin", "end"]


class ControlMessage(BaseModel):
    """Payload-free lifecycle control: pause, resume, stop."""
    type: Literal["pause", "resume", "stop"]


ClientMessage = Union[StartMessage, AudioMessage, VadMessage, ControlMessage]


def serialize(message: ClientMessage) -> str:
    """Render a client message as the JSON text sent on the wire."""
    return message.model_dump_json(by_alias=True, exclude_none=True)


# ---- Server -> Client ----

class StatusEvent(BaseModel):
    type: Literal["status"]
    status: str
    dir: Optional[Literal["AtoB", "BtoA"]] = None


class PartialEvent(BaseModel):
    type: Literal["partial"]
    text: str


class FinalEvent(BaseModel):
    type: Literal["final"]
    asr: str
    mt: str
    lid: Optional[str] = None


class ErrorEvent(BaseModel):
    type: Literal["error"]
    message: str


InboundEvent = Annotated[
    Union[StatusEvent, PartialEvent, FinalEvent, ErrorEvent],
    Field(discriminator="type"),
]

_inbound_adapter: TypeAdapter[InboundEvent] = TypeAdapter(InboundEvent)


def parse_inbound(raw: Union[str, bytes]) -> Optional[InboundEvent]:
    """
    Parse one inbound transport message.

    Returns None for binary frames, malformed JSON, unknown types and
    messages missing required fields.
    """
    if not isinstance(raw, str):
        return None
    try:
        return _inbound_adapter.validate_json(raw)
    except ValidationError as e:
        logger.debug("Dropping inbound message (%d errors): %.120s", e.error_count(), raw)
        return None
