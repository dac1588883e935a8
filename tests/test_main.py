"""Tests for the command line entry point."""

from turn_interpreter.config.settings import InterpreterConfig
from turn_interpreter.main import apply_overrides, build_parser, print_callbacks
from turn_interpreter.core.events import FinalResult
from turn_interpreter.core.shutdown import GracefulShutdown
from turn_interpreter.schemas import TurnMode


def test_overrides_apply_to_config():
    args = build_parser().parse_args(
        ["--server", "ws://example:9000/ws", "--from", "es", "--to", "en", "--mode", "auto-lid", "--no-vad"]
    )
    config = apply_overrides(InterpreterConfig(), args)
    assert config.ws_url == "ws://example:9000/ws"
    assert (config.from_language, config.to_language) == ("es", "en")
    assert config.mode == TurnMode.AUTO_LID
    assert not config.vad_enabled


def test_no_overrides_keeps_config():
    config = InterpreterConfig(from_language="it")
    assert apply_overrides(config, build_parser().parse_args([])) is config


def test_print_callbacks(capsys):
    shutdown = GracefulShutdown()
    callbacks = print_callbacks(shutdown)

    callbacks.on_final(FinalResult(asr="hello", translated_text="hola", language_id="en"))
    callbacks.on_status("translating", "AtoB")
    out = capsys.readouterr().out
    assert "hello [en]" in out
    assert "< hola" in out
    assert "translating (AtoB)" in out

    callbacks.on_close()
    assert shutdown.is_set()
