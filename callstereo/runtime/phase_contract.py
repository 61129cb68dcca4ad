"""Canonical phase names for per-conversation observability."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

PHASE_RUN_TOTAL: Final[str] = "run_total"
PHASE_DURATION_PROBE: Final[str] = "duration_probe"
PHASE_MERGE_COMPILE: Final[str] = "merge_compile"
PHASE_MERGE_EXECUTE: Final[str] = "merge_execute"

PHASE_LABELS: Final[Mapping[str, str]] = {
    PHASE_RUN_TOTAL: "Stereo rebuild run",
    PHASE_DURATION_PROBE: "Duration probe",
    PHASE_MERGE_COMPILE: "Merge graph compile",
    PHASE_MERGE_EXECUTE: "Stereo merge",
}


def phase_label(phase_name: str) -> str:
    """Returns a human-readable label for one phase identifier."""
    label = PHASE_LABELS.get(phase_name)
    if label is not None:
        return label
    fallback = phase_name.strip().replace("_", " ")
    if not fallback:
        return "Workflow step"
    return fallback[0].upper() + fallback[1:]
