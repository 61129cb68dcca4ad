"""Typed application settings loaded from the environment.

Settings are read once from environment variables (``.env`` files are loaded
by the CLI before the first read) and cached. Tests and the CLI call
``reload_settings`` to rebuild them after changing the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 48000


@dataclass(frozen=True)
class AudioConfig:
    """Output audio format controls."""

    sample_rate: int = DEFAULT_SAMPLE_RATE
    codec: str = "libmp3lame"
    quality: int = 2
    extension: str = "mp3"


@dataclass(frozen=True)
class PathsConfig:
    """Input and output roots for a run."""

    input_dir: Path = Path("audio")
    output_dir: Path = Path("out")


@dataclass(frozen=True)
class ExecutionConfig:
    """Concurrency and timeout controls."""

    max_workers: int = 1
    probe_workers: int = 1
    merge_timeout_seconds: float = 0.0


@dataclass(frozen=True)
class AppConfig:
    """Complete callstereo configuration."""

    audio: AudioConfig
    paths: PathsConfig
    execution: ExecutionConfig


def _read_text_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _read_int_env(name: str, default: int, *, minimum: int = 1) -> int:
    """Reads an integer env var, falling back to ``default`` on bad input."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s.", name, raw, default)
        return default
    if value < minimum:
        logger.warning("Ignoring out-of-range %s=%r; using %s.", name, raw, default)
        return default
    return value


def _read_float_env(name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s.", name, raw, default)
        return default
    if value < minimum:
        logger.warning("Ignoring out-of-range %s=%r; using %s.", name, raw, default)
        return default
    return value


def _default_probe_workers() -> int:
    return os.cpu_count() or 1


def _build_settings() -> AppConfig:
    audio = AudioConfig(
        sample_rate=_read_int_env("CALLSTEREO_SAMPLE_RATE", DEFAULT_SAMPLE_RATE),
        codec=_read_text_env("CALLSTEREO_OUTPUT_CODEC", "libmp3lame"),
        quality=_read_int_env("CALLSTEREO_OUTPUT_QUALITY", 2, minimum=0),
        extension=_read_text_env("CALLSTEREO_OUTPUT_EXTENSION", "mp3").lstrip("."),
    )
    paths = PathsConfig(
        input_dir=Path(_read_text_env("CALLSTEREO_INPUT_DIR", "audio")),
        output_dir=Path(_read_text_env("CALLSTEREO_OUTPUT_DIR", "out")),
    )
    execution = ExecutionConfig(
        max_workers=_read_int_env("CALLSTEREO_MAX_WORKERS", 1),
        probe_workers=_read_int_env("CALLSTEREO_PROBE_WORKERS", _default_probe_workers()),
        merge_timeout_seconds=_read_float_env("CALLSTEREO_MERGE_TIMEOUT", 0.0),
    )
    return AppConfig(audio=audio, paths=paths, execution=execution)


_SETTINGS: AppConfig | None = None


def reload_settings() -> AppConfig:
    """Rebuilds settings from the current environment and caches them."""
    global _SETTINGS
    _SETTINGS = _build_settings()
    return _SETTINGS


def get_settings() -> AppConfig:
    """Returns cached settings, loading them on first use."""
    if _SETTINGS is None:
        return reload_settings()
    return _SETTINGS
