"""Structured merge instructions for rebuilding a stereo call recording.

A merge graph describes, without executing anything, how the per-turn clips
become one stereo stream: every clip is normalized to a shared mono format,
every gap is generated as silence, each channel is concatenated in turn
order, and the two channels are combined with the agent on the left and the
customer on the right.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal
from pathlib import Path
from typing import Final, TypeAlias

from callstereo.domain import ChannelTimelines, Role, Silence, Speech

CHANNEL_LAYOUT: Final[str] = "mono"
SAMPLE_FORMAT: Final[str] = "s16"
SILENCE_PRECISION: Final[Decimal] = Decimal("0.000001")
STEREO_LABEL: Final[str] = "stereo"

_SEGMENT_PREFIX: Final[dict[Role, str]] = {Role.AGENT: "a", Role.CUSTOMER: "c"}


@dataclass(frozen=True, slots=True)
class NormalizeStep:
    """Resample one source clip to a shared mono format."""

    label: str
    input_index: int
    sample_rate: int
    channel_layout: str = CHANNEL_LAYOUT
    sample_format: str = SAMPLE_FORMAT


@dataclass(frozen=True, slots=True)
class SilenceStep:
    """Generate silence of an exact duration."""

    label: str
    sample_rate: int
    duration_seconds: Decimal
    channel_layout: str = CHANNEL_LAYOUT


@dataclass(frozen=True, slots=True)
class ConcatStep:
    """Join one channel's segments in turn order."""

    label: str
    role: Role
    sources: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class StereoCombineStep:
    """Map two mono streams onto the left and right channels."""

    label: str
    left: str
    right: str


MergeStep: TypeAlias = NormalizeStep | SilenceStep | ConcatStep | StereoCombineStep


@dataclass(frozen=True, slots=True)
class MergeGraph:
    """Ordered merge instructions plus the clips they read."""

    inputs: tuple[Path, ...]
    steps: tuple[MergeStep, ...]
    output_label: str = STEREO_LABEL

    def steps_of(self, step_type: type) -> list:
        return [step for step in self.steps if isinstance(step, step_type)]

    def concat_for(self, role: Role) -> ConcatStep:
        for step in self.steps:
            if isinstance(step, ConcatStep) and step.role is role:
                return step
        raise KeyError(role)


def quantize_duration(duration_seconds: float) -> Decimal:
    """
    Converts a duration to a microsecond-precision decimal.

    Positive durations never round down to zero; they keep at least one
    microsecond of silence.
    """
    quantized = Decimal(repr(duration_seconds)).quantize(
        SILENCE_PRECISION, rounding=ROUND_HALF_EVEN
    )
    if duration_seconds > 0:
        return max(quantized, SILENCE_PRECISION)
    return quantized


def _check_alignment(timelines: ChannelTimelines) -> None:
    if not timelines.agent or not timelines.customer:
        raise ValueError("Cannot compile a merge graph from empty timelines.")
    if len(timelines.agent) != len(timelines.customer):
        raise ValueError(
            "Channel timelines differ in length: "
            f"{len(timelines.agent)} agent vs {len(timelines.customer)} customer segments."
        )
    for index, (agent, customer) in enumerate(zip(timelines.agent, timelines.customer)):
        speech_count = isinstance(agent, Speech) + isinstance(customer, Speech)
        if speech_count != 1:
            raise ValueError(f"Segment {index} must carry speech on exactly one channel.")
        if agent.duration_seconds != customer.duration_seconds:
            raise ValueError(
                f"Segment {index} durations differ: "
                f"{agent.duration_seconds} vs {customer.duration_seconds}."
            )


def compile_merge_graph(timelines: ChannelTimelines, sample_rate: int) -> MergeGraph:
    """
    Compiles aligned channel timelines into merge instructions.

    Arguments:
        timelines (ChannelTimelines): Aligned agent and customer timelines.
        sample_rate (int): Output sample rate in Hz for every segment.

    Returns:
        MergeGraph: Normalization and silence steps per segment, one
            concatenation per channel, and the final stereo combine.

    Raises:
        ValueError: Timelines are empty or not aligned, or the sample rate
            is not positive.
    """
    if sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive, got {sample_rate}.")
    _check_alignment(timelines)

    inputs: list[Path] = []
    segment_steps: list[MergeStep] = []
    channel_labels: dict[Role, list[str]] = {Role.AGENT: [], Role.CUSTOMER: []}

    for index in range(len(timelines)):
        for role in (Role.AGENT, Role.CUSTOMER):
            segment = timelines.for_role(role)[index]
            label = f"{_SEGMENT_PREFIX[role]}{index}"
            if isinstance(segment, Speech):
                segment_steps.append(
                    NormalizeStep(label=label, input_index=len(inputs), sample_rate=sample_rate)
                )
                inputs.append(segment.source)
            elif isinstance(segment, Silence):
                segment_steps.append(
                    SilenceStep(
                        label=label,
                        sample_rate=sample_rate,
                        duration_seconds=quantize_duration(segment.duration_seconds),
                    )
                )
            else:
                raise TypeError(f"Unsupported channel segment: {segment!r}")
            channel_labels[role].append(label)

    steps: list[MergeStep] = [
        *segment_steps,
        ConcatStep(label=Role.AGENT.value, role=Role.AGENT, sources=tuple(channel_labels[Role.AGENT])),
        ConcatStep(
            label=Role.CUSTOMER.value,
            role=Role.CUSTOMER,
            sources=tuple(channel_labels[Role.CUSTOMER]),
        ),
        StereoCombineStep(label=STEREO_LABEL, left=Role.AGENT.value, right=Role.CUSTOMER.value),
    ]
    return MergeGraph(inputs=tuple(inputs), steps=tuple(steps))


def render_filter_complex(graph: MergeGraph) -> str:
    """Encodes a merge graph in ffmpeg ``-filter_complex`` syntax."""
    parts: list[str] = []
    for step in graph.steps:
        if isinstance(step, NormalizeStep):
            parts.append(
                f"[{step.input_index}:a]aresample={step.sample_rate},"
                f"aformat=sample_fmts={step.sample_format}:channel_layouts={step.channel_layout},"
                f"asetpts=N/SR[{step.label}]"
            )
        elif isinstance(step, SilenceStep):
            parts.append(
                f"anullsrc=r={step.sample_rate}:cl={step.channel_layout}:"
                f"d={step.duration_seconds}[{step.label}]"
            )
        elif isinstance(step, ConcatStep):
            sources = "".join(f"[{source}]" for source in step.sources)
            parts.append(f"{sources}concat=n={len(step.sources)}:v=0:a=1[{step.label}]")
        elif isinstance(step, StereoCombineStep):
            parts.append(
                f"[{step.left}][{step.right}]amerge=inputs=2,"
                f"pan=stereo|c0=c0|c1=c1[{step.label}]"
            )
    return ";".join(parts)
