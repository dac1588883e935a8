"""Errors delivered to the session's on_error callback."""


class InterpreterError(Exception):
    """Base class for turn interpreter errors."""


class TransportError(InterpreterError):
    """The underlying connection failed or is not usable."""


class ServerError(InterpreterError):
    """The backend reported a failure; the message is the server's text."""
