import os
from pathlib import Path
from typing import Literal, Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv
import logging

from ..audio.input.types import VADConfig
from ..audio.input.vad import VAD_PRESETS
from ..schemas import TurnMode

logger = logging.getLogger(__name__)

_DEFAULT_VAD = VADConfig()


class InterpreterConfig(BaseModel):
    ws_url: str = Field(default="ws://localhost:8000/interpret", min_length=1, description="WebSocket URL of the realtime interpreter backend")
    from_language: str = Field(default="en", description="Language label of side A")
    to_language: str = Field(default="ur", description="Language label of side B")
    mode: TurnMode = Field(default=TurnMode.ALTERNATE, description="Turn mode: alternate or auto-lid")
    sample_rate: int = Field(default=16000, gt=0, description="Sample rate (Hz) of frames pushed to the session")
    frame_ms: int = Field(default=20, gt=0, description="Capture frame length in milliseconds")
    vad_enabled: bool = Field(default=True, description="Run client-side VAD and send begin/end hints")
    vad_preset: Optional[Literal["sensitive", "balanced", "conservative"]] = Field(default=None, description="Named VAD preset; overrides the vad_* fields")
    vad_energy_threshold: float = Field(default=_DEFAULT_VAD.energy_threshold, ge=0.0, description="Mean |sample| threshold for speech")
    vad_start_ms: float = Field(default=_DEFAULT_VAD.start_ms, ge=0.0, description="Continuous speech before utterance begin")
    vad_silence_ms: float = Field(default=_DEFAULT_VAD.silence_ms, ge=0.0, description="Continuous silence before utterance end")
    vad_min_utterance_ms: float = Field(default=_DEFAULT_VAD.min_utterance_ms, ge=0.0, description="Shorter utterances are discarded")
    vad_max_utterance_ms: float = Field(default=_DEFAULT_VAD.max_utterance_ms, ge=0.0, description="Force utterance end after this long (0 disables)")
    open_timeout_s: float = Field(default=10.0, gt=0.0, description="WebSocket opening handshake timeout in seconds")
    log_level: str = Field(default="INFO", description="Logging level")

    def vad_config(self) -> VADConfig:
        if self.vad_preset is not None:
            return VAD_PRESETS[self.vad_preset]
        return VADConfig(
            energy_threshold=self.vad_energy_threshold,
            start_ms=self.vad_start_ms,
            silence_ms=self.vad_silence_ms,
            min_utterance_ms=self.vad_min_utterance_ms,
            max_utterance_ms=self.vad_max_utterance_ms,
        )


def load_config(config_path: Optional[Path] = None) -> InterpreterConfig:
    if config_path is None:
        config_path = Path(".env")

    if config_path.exists():
        load_dotenv(config_path)
        logger.info(f"Loaded environment variables from {config_path}")
    else:
        logger.warning(f"Config file {config_path} not found, using environment variables only")

    try:
        return InterpreterConfig(
            ws_url=os.getenv("INTERPRETER_WS_URL", "ws://localhost:8000/interpret"),
            from_language=os.getenv("FROM_LANGUAGE", "en"),
            to_language=os.getenv("TO_LANGUAGE", "ur"),
            mode=os.getenv("TURN_MODE", "alternate"),
            sample_rate=int(os.getenv("SAMPLE_RATE", "16000")),
            frame_ms=int(os.getenv("FRAME_MS", "20")),
            vad_enabled=os.getenv("VAD_ENABLED", "true").lower() in ("true", "1", "yes"),
            vad_preset=os.getenv("VAD_PRESET") or None,
            vad_energy_threshold=float(os.getenv("VAD_ENERGY_THRESHOLD", str(_DEFAULT_VAD.energy_threshold))),
            vad_start_ms=float(os.getenv("VAD_START_MS", str(_DEFAULT_VAD.start_ms))),
            vad_silence_ms=float(os.getenv("VAD_SILENCE_MS", str(_DEFAULT_VAD.silence_ms))),
            vad_min_utterance_ms=float(os.getenv("VAD_MIN_UTTERANCE_MS", str(_DEFAULT_VAD.min_utterance_ms))),
            vad_max_utterance_ms=float(os.getenv("VAD_MAX_UTTERANCE_MS", str(_DEFAULT_VAD.max_utterance_ms))),
            open_timeout_s=float(os.getenv("OPEN_TIMEOUT_S", "10.0")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise


def create_example_env_file(path: Path = Path(".env.example")):
    example_content = """# Realtime interpreter backend
INTERPRETER_WS_URL=ws://localhost:8000/interpret

# Language pair (opaque labels passed to the backend)
FROM_LANGUAGE=en
TO_LANGUAGE=ur

# Turn mode: alternate or auto-lid
TURN_MODE=alternate

# Capture format
SAMPLE_RATE=16000
FRAME_MS=20

# Client-side VAD (true/false)
VAD_ENABLED=true

# Optional preset: sensitive, balanced, conservative (overrides the values below)
VAD_PRESET=

# VAD tuning
VAD_ENERGY_THRESHOLD=0.015
VAD_START_MS=120
VAD_SILENCE_MS=450
VAD_MIN_UTTERANCE_MS=280
VAD_MAX_UTTERANCE_MS=0

# WebSocket handshake timeout in seconds
OPEN_TIMEOUT_S=10.0

# Logging level
LOG_LEVEL=INFO
"""

    with open(path, "w") as f:
        f.write(example_content)

    logger.info(f"Created example environment file at {path}")


def setup_logging(log_level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
