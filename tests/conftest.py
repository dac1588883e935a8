import json

import numpy as np
import pytest

from turn_interpreter.config.settings import InterpreterConfig


class FakeTransport:
    """Records sends; the test drives open/message/error/close by hand."""

    instances: list["FakeTransport"] = []

    def __init__(self, url: str):
        self.url = url
        self.handlers = None
        self.sent: list[str] = []
        self.ready = False
        self.closed = False
        FakeTransport.instances.append(self)

    @property
    def is_open(self) -> bool:
        return self.ready and not self.closed

    def open(self, handlers) -> None:
        self.handlers = handlers

    def send(self, data: str) -> None:
        assert self.is_open, "send() on a transport that is not open"
        self.sent.append(data)

    def close(self) -> None:
        self.closed = True

    # Test drivers
    def connect(self) -> None:
        self.ready = True
        self.handlers.on_open()

    def receive(self, payload) -> None:
        raw = payload if isinstance(payload, (str, bytes)) else json.dumps(payload)
        self.handlers.on_message(raw)

    def drop(self) -> None:
        self.ready = False
        self.handlers.on_close()

    def messages(self) -> list[dict]:
        return [json.loads(m) for m in self.sent]


@pytest.fixture
def fake_transports():
    FakeTransport.instances = []
    yield FakeTransport.instances
    FakeTransport.instances = []


@pytest.fixture
def config():
    return InterpreterConfig(ws_url="ws://test.invalid/interpret", from_language="en", to_language="ur")


def make_frame(energy: float, n_samples: int = 1600) -> np.ndarray:
    """Constant-magnitude frame whose mean |sample| equals energy (alternating sign)."""
    signs = np.where(np.arange(n_samples) % 2 == 0, 1.0, -1.0)
    return (signs * energy).astype(np.float32)


@pytest.fixture
def silence_frame():
    return make_frame(0.001)


@pytest.fixture
def speech_frame():
    return make_frame(0.05)
