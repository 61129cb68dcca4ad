from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from pathlib import Path

import pytest

from callstereo.config import AppConfig, AudioConfig, ExecutionConfig, PathsConfig
from callstereo.errors import DurationUnavailable
from callstereo.media.executor import FfmpegMergeExecutor
from callstereo.merge_graph import MergeGraph

FIXED_NOW = datetime(2025, 12, 18, 9, 32, 17)


class FakeResolver:
    """Duration lookup keyed by clip file name."""

    def __init__(self, durations: Mapping[str, float], failing: Iterable[str] = ()) -> None:
        self.durations = dict(durations)
        self.failing = set(failing)
        self.calls: list[str] = []

    def __call__(self, path: Path) -> float:
        self.calls.append(path.name)
        if path.name in self.failing:
            raise DurationUnavailable(f"Could not read duration for {path}", source=str(path))
        return self.durations[path.name]


class RecordingExecutor:
    """Merge executor that records graphs and writes an empty artifact."""

    def __init__(self) -> None:
        self.calls: list[tuple[MergeGraph, Path]] = []

    def execute(self, graph: MergeGraph, output_path: Path) -> None:
        self.calls.append((graph, output_path))
        output_path.write_bytes(b"")

    def build_command(self, graph: MergeGraph, output_path: Path) -> list[str]:
        return FfmpegMergeExecutor().build_command(graph, output_path)


@pytest.fixture
def make_conversation(tmp_path: Path) -> Callable[..., Path]:
    """Creates a conversation directory of empty clip files."""

    def _make(conversation_id: str, names: Iterable[str], root: Path | None = None) -> Path:
        directory = (root or tmp_path / "audio") / conversation_id
        directory.mkdir(parents=True, exist_ok=True)
        for name in names:
            (directory / name).write_bytes(b"")
        return directory

    return _make


@pytest.fixture
def settings(tmp_path: Path) -> AppConfig:
    return AppConfig(
        audio=AudioConfig(sample_rate=48000),
        paths=PathsConfig(input_dir=tmp_path / "audio", output_dir=tmp_path / "out"),
        execution=ExecutionConfig(max_workers=1, probe_workers=1),
    )
