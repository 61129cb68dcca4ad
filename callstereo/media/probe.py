"""Clip duration lookup through ffprobe."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TypeAlias

import ffmpeg

from callstereo.domain import Turn
from callstereo.errors import DurationUnavailable
from callstereo.utils.logger import get_logger

DurationResolver: TypeAlias = Callable[[Path], float]

logger: logging.Logger = get_logger(__name__)


def probe_duration_seconds(path: Path) -> float:
    """
    Reads a clip's container duration with ffprobe.

    Arguments:
        path (Path): Clip to probe.

    Returns:
        float: Duration in seconds, positive and finite.

    Raises:
        DurationUnavailable: ffprobe failed or reported no usable duration.
    """
    try:
        info = ffmpeg.probe(str(path))
    except ffmpeg.Error as err:
        stderr_output = (
            err.stderr.decode("utf8", errors="replace").strip() if err.stderr else ""
        )
        raise DurationUnavailable(
            f"ffprobe failed for {path}: {stderr_output or 'no stderr output'}",
            source=str(path),
        ) from err
    except ValueError as err:
        raise DurationUnavailable(
            f"ffprobe output for {path} is not valid JSON: {err}",
            source=str(path),
        ) from err
    except OSError as err:
        raise DurationUnavailable(
            f"ffprobe could not be started for {path}: {err}",
            source=str(path),
        ) from err

    raw_duration = (info.get("format") or {}).get("duration")
    try:
        seconds = float(raw_duration)
    except (TypeError, ValueError) as err:
        raise DurationUnavailable(
            f"Could not read duration for {path}. ffprobe output: {raw_duration!r}",
            source=str(path),
        ) from err
    if not math.isfinite(seconds) or seconds <= 0:
        raise DurationUnavailable(
            f"Could not read duration for {path}. ffprobe output: {raw_duration!r}",
            source=str(path),
        )
    logger.debug("Probed %s: %.6fs", path, seconds)
    return seconds


def resolve_durations(
    turns: Sequence[Turn],
    resolver: DurationResolver = probe_duration_seconds,
    *,
    max_workers: int = 1,
) -> list[Turn]:
    """
    Attaches a duration to every turn, preserving turn order.

    Lookups run on a thread pool when ``max_workers`` is above one and are
    all joined before returning. The first failure in turn order is raised.
    """
    sources = [turn.source for turn in turns]
    if max_workers > 1 and len(sources) > 1:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(sources))) as executor:
            durations = list(executor.map(resolver, sources))
    else:
        durations = [resolver(source) for source in sources]
    return [turn.with_duration(duration) for turn, duration in zip(turns, durations)]
