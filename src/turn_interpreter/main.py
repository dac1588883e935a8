"""Turn interpreter CLI - streams microphone or WAV audio to the realtime backend."""

import argparse
import asyncio
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from turn_interpreter.audio.input.types import AudioFormat, FrameConfig
from turn_interpreter.client.audio_capture import ClientAudioCapture
from turn_interpreter.client.session import TurnInterpreterSession
from turn_interpreter.config.settings import (
    InterpreterConfig,
    create_example_env_file,
    load_config,
    setup_logging,
)
from turn_interpreter.core.events import FinalResult, InterpreterCallbacks
from turn_interpreter.core.shutdown import GracefulShutdown


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Realtime Turn Interpreter Client")
    parser.add_argument("--config", type=str, help="Path to config file", default=".env")
    parser.add_argument("--server", help="Backend WebSocket URL (overrides INTERPRETER_WS_URL)")
    parser.add_argument("--from", dest="from_language", help="Source language label")
    parser.add_argument("--to", dest="to_language", help="Target language label")
    parser.add_argument("--mode", choices=["alternate", "auto-lid"], help="Turn mode")
    parser.add_argument("--wav", type=Path, help="Stream a 16-bit mono WAV file instead of the microphone")
    parser.add_argument("--device", type=int, help="Input device index for the microphone")
    parser.add_argument("--no-vad", action="store_true", help="Disable client-side VAD hints")
    parser.add_argument("--create-config", action="store_true", help="Create example config file")
    return parser


def apply_overrides(config: InterpreterConfig, args: argparse.Namespace) -> InterpreterConfig:
    updates = {}
    if args.server:
        updates["ws_url"] = args.server
    if args.from_language:
        updates["from_language"] = args.from_language
    if args.to_language:
        updates["to_language"] = args.to_language
    if args.mode:
        updates["mode"] = args.mode
    if args.no_vad:
        updates["vad_enabled"] = False
    if not updates:
        return config
    return InterpreterConfig.model_validate({**config.model_dump(), **updates})


def print_callbacks(shutdown: GracefulShutdown) -> InterpreterCallbacks:
    def on_partial(text: str) -> None:
        print(f"\r... {text}", end="", flush=True)

    def on_final(result: FinalResult) -> None:
        lid = f" [{result.language_id}]" if result.language_id else ""
        print(f"\r> {result.asr}{lid}\n< {result.translated_text}")

    def on_status(status: str, direction: Optional[str]) -> None:
        print(f"\n[Status] {status}" + (f" ({direction})" if direction else ""))

    def on_error(error: Exception) -> None:
        print(f"\n[Error] {error}")

    return InterpreterCallbacks(
        on_partial=on_partial,
        on_final=on_final,
        on_status=on_status,
        on_error=on_error,
        on_close=shutdown.stop,
    )


async def run(config: InterpreterConfig, wav: Optional[Path] = None, device: Optional[int] = None) -> None:
    shutdown = GracefulShutdown()
    session = TurnInterpreterSession(config, callbacks=print_callbacks(shutdown))
    capture = ClientAudioCapture(
        shutdown=shutdown,
        audio_format=AudioFormat(sample_rate=config.sample_rate),
        frame_cfg=FrameConfig(frame_ms=config.frame_ms),
        device=device,
        wav_path=wav,
    )

    async def stop_after_replay() -> None:
        await asyncio.to_thread(capture.source.finished.wait)
        # Leave time for the last final result
        await asyncio.sleep(2.0)
        shutdown.stop()

    session.start()
    capture.start()
    watcher = asyncio.create_task(stop_after_replay()) if wav is not None else None
    try:
        await capture.drain_to_session(session)
    finally:
        if watcher is not None:
            watcher.cancel()
        session.stop()
        shutdown.stop()
        capture.stop()
        # Give the writer task a chance to send "stop" and close the socket
        await asyncio.sleep(0.2)


def main():
    args = build_parser().parse_args()

    if args.create_config:
        create_example_env_file()
        print("Example configuration file created at .env.example")
        print("Please copy it to .env and adjust the backend URL and languages.")
        return

    try:
        config = apply_overrides(load_config(Path(args.config)), args)
        setup_logging(config.log_level)
        asyncio.run(run(config, wav=args.wav, device=args.device))
    except ValidationError as e:
        print(f"Configuration error: {e}")
        print("Please check your configuration file.")
    except ValueError as e:
        print(f"Error: {e}")
    except KeyboardInterrupt:
        print("\nGoodbye!")


if __name__ == "__main__":
    main()
