"""Domain data structures for turns, conversations, and channel timelines."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from pathlib import Path
from typing import TypeAlias


class Role(StrEnum):
    """Speaker role encoded in a turn clip's file name."""

    AGENT = "agent"
    CUSTOMER = "customer"

    @property
    def other(self) -> Role:
        """The opposite party of a two-party call."""
        return Role.CUSTOMER if self is Role.AGENT else Role.AGENT


@dataclass(frozen=True, slots=True)
class Turn:
    """One speaker's single utterance clip within a conversation."""

    sort_key: str
    role: Role
    source: Path
    duration_seconds: float | None = None

    def with_duration(self, duration_seconds: float) -> Turn:
        """Returns a copy of this turn carrying a resolved duration."""
        return replace(self, duration_seconds=duration_seconds)


@dataclass(frozen=True, slots=True)
class Conversation:
    """Turns of one conversation directory, sorted by sort key."""

    conversation_id: str
    turns: tuple[Turn, ...]


@dataclass(frozen=True, slots=True)
class Speech:
    """Channel segment carrying a speaker's own clip."""

    source: Path
    duration_seconds: float


@dataclass(frozen=True, slots=True)
class Silence:
    """Channel segment padding for the other speaker's turn."""

    duration_seconds: float


ChannelSegment: TypeAlias = Speech | Silence
ChannelTimeline: TypeAlias = tuple[ChannelSegment, ...]


@dataclass(frozen=True, slots=True)
class ChannelTimelines:
    """Aligned agent and customer timelines for one conversation."""

    agent: ChannelTimeline
    customer: ChannelTimeline

    def for_role(self, role: Role) -> ChannelTimeline:
        return self.agent if role is Role.AGENT else self.customer

    def total_seconds(self, role: Role) -> float:
        """Summed duration of one channel's segments."""
        return sum(segment.duration_seconds for segment in self.for_role(role))

    def __len__(self) -> int:
        return len(self.agent)
