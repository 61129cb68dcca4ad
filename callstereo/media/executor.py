"""Execution of merge graphs with ffmpeg."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Any

import ffmpeg

from callstereo.errors import MergeExecutionFailed
from callstereo.merge_graph import (
    ConcatStep,
    MergeGraph,
    NormalizeStep,
    SilenceStep,
    StereoCombineStep,
)
from callstereo.utils.logger import get_logger

DEFAULT_CODEC = "libmp3lame"
DEFAULT_QUALITY = 2

logger: logging.Logger = get_logger(__name__)


def _build_stream(graph: MergeGraph) -> Any:
    """Translates merge steps into an ffmpeg-python filter graph."""
    streams: dict[str, Any] = {}
    for step in graph.steps:
        if isinstance(step, NormalizeStep):
            streams[step.label] = (
                ffmpeg.input(str(graph.inputs[step.input_index]))
                .audio.filter("aresample", step.sample_rate)
                .filter(
                    "aformat",
                    sample_fmts=step.sample_format,
                    channel_layouts=step.channel_layout,
                )
                .filter("asetpts", "N/SR")
            )
        elif isinstance(step, SilenceStep):
            streams[step.label] = ffmpeg.input(
                f"anullsrc=r={step.sample_rate}:cl={step.channel_layout}"
                f":d={step.duration_seconds}",
                format="lavfi",
            ).audio
        elif isinstance(step, ConcatStep):
            streams[step.label] = ffmpeg.concat(
                *(streams[source] for source in step.sources), v=0, a=1
            )
        elif isinstance(step, StereoCombineStep):
            streams[step.label] = ffmpeg.filter(
                [streams[step.left], streams[step.right]], "amerge", inputs=2
            ).filter("pan", "stereo|c0=c0|c1=c1")
        else:
            raise TypeError(f"Unsupported merge step: {step!r}")
    return streams[graph.output_label]


def build_output_stream(
    graph: MergeGraph,
    output_path: Path,
    *,
    codec: str = DEFAULT_CODEC,
    quality: int = DEFAULT_QUALITY,
) -> Any:
    """Builds the ffmpeg-python output node writing ``graph`` to ``output_path``."""
    return ffmpeg.output(
        _build_stream(graph),
        str(output_path),
        acodec=codec,
        **{"q:a": quality},
    ).overwrite_output()


class FfmpegMergeExecutor:
    """Runs merge graphs through the ffmpeg command-line tool."""

    def __init__(
        self,
        *,
        codec: str = DEFAULT_CODEC,
        quality: int = DEFAULT_QUALITY,
        timeout_seconds: float | None = None,
        cmd: str = "ffmpeg",
    ) -> None:
        self.codec = codec
        self.quality = quality
        self.timeout_seconds = timeout_seconds
        self.cmd = cmd

    def build_command(self, graph: MergeGraph, output_path: Path) -> list[str]:
        """Returns the ffmpeg argv that would execute ``graph``."""
        stream = build_output_stream(
            graph, output_path, codec=self.codec, quality=self.quality
        )
        return ffmpeg.compile(stream, cmd=self.cmd)

    def execute(self, graph: MergeGraph, output_path: Path) -> None:
        """
        Executes ``graph`` and writes one stereo file to ``output_path``.

        Raises:
            MergeExecutionFailed: ffmpeg is missing, exits non-zero, or runs
                past the configured timeout. Partial output is removed.
        """
        stream = build_output_stream(
            graph, output_path, codec=self.codec, quality=self.quality
        )
        logger.debug("Running ffmpeg: %s", " ".join(ffmpeg.compile(stream, cmd=self.cmd)))
        try:
            if self.timeout_seconds:
                self._run_with_timeout(stream)
            else:
                ffmpeg.run(stream, cmd=self.cmd, capture_stdout=True, capture_stderr=True)
        except ffmpeg.Error as err:
            stderr_output = (
                err.stderr.decode("utf8", errors="replace").strip() if err.stderr else ""
            )
            _remove_partial_output(output_path)
            raise MergeExecutionFailed(
                f"ffmpeg failed writing {output_path}: "
                f"{stderr_output or 'no stderr output'}",
                stderr=stderr_output,
            ) from err
        except OSError as err:
            _remove_partial_output(output_path)
            raise MergeExecutionFailed(f"ffmpeg could not be started: {err}") from err

    def _run_with_timeout(self, stream: Any) -> None:
        process = ffmpeg.run_async(stream, cmd=self.cmd, pipe_stdout=True, pipe_stderr=True)
        try:
            stdout, stderr = process.communicate(timeout=self.timeout_seconds)
        except subprocess.TimeoutExpired as err:
            process.kill()
            process.communicate()
            raise ffmpeg.Error(
                self.cmd,
                b"",
                f"timed out after {self.timeout_seconds:.2f}s".encode(),
            ) from err
        if process.returncode:
            raise ffmpeg.Error(self.cmd, stdout, stderr)


def _remove_partial_output(output_path: Path) -> None:
    if output_path.exists():
        try:
            output_path.unlink()
        except OSError:
            logger.warning("Could not delete partial output file: %s", output_path)
