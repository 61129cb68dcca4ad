"""Per-channel timeline construction for two-party conversations."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from callstereo.domain import ChannelSegment, ChannelTimelines, Role, Silence, Speech, Turn
from callstereo.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)


def build_channel_timelines(turns: Sequence[Turn]) -> ChannelTimelines:
    """
    Builds aligned agent and customer timelines from ordered turns.

    Each turn contributes its clip to the speaker's channel and a silence of
    the same duration to the other channel, so both timelines hold one
    segment per turn and share the same total duration.

    Arguments:
        turns (Sequence[Turn]): Turns in conversation order, each carrying a
            resolved duration.

    Returns:
        ChannelTimelines: The agent and customer timelines.

    Raises:
        ValueError: No turns were given, or a turn has no usable duration.
    """
    if not turns:
        raise ValueError("Cannot build channel timelines without turns.")

    channels: dict[Role, list[ChannelSegment]] = {Role.AGENT: [], Role.CUSTOMER: []}
    for turn in turns:
        duration = turn.duration_seconds
        if duration is None or not math.isfinite(duration) or duration <= 0:
            raise ValueError(
                f"Turn {turn.source} has no usable duration: {duration!r}"
            )
        channels[turn.role].append(Speech(source=turn.source, duration_seconds=duration))
        channels[turn.role.other].append(Silence(duration_seconds=duration))

    timelines = ChannelTimelines(
        agent=tuple(channels[Role.AGENT]),
        customer=tuple(channels[Role.CUSTOMER]),
    )
    logger.debug(
        "Built channel timelines: %d segments, %.3fs per channel.",
        len(timelines),
        timelines.total_seconds(Role.AGENT),
    )
    return timelines
