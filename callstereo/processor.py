"""
Conversation Processor for the callstereo tool.

This module drives one stereo rebuild per conversation directory: it lists
and orders the turn clips, resolves their durations, builds the aligned
channel timelines, compiles the merge graph, and hands it to the merge
executor. Every outcome is captured as a ConversationResult so that one
conversation's failure never stops its siblings.

Classes:
    - ConversationStatus: Outcome of one conversation.
    - ConversationResult: Per-conversation outcome record.
    - RunReport: Ordered results for one run.
    - ConversationProcessor: Per-conversation and whole-run orchestration.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from pathlib import Path
from typing import Protocol

from callstereo.config import AppConfig, get_settings
from callstereo.domain import Conversation, Role
from callstereo.errors import (
    ConversationError,
    DurationUnavailable,
    IncompleteConversation,
    InputRootError,
    MergeExecutionFailed,
)
from callstereo.media.executor import FfmpegMergeExecutor
from callstereo.media.probe import DurationResolver, probe_duration_seconds, resolve_durations
from callstereo.merge_graph import MergeGraph, compile_merge_graph, render_filter_complex
from callstereo.runtime.phase_contract import (
    PHASE_DURATION_PROBE,
    PHASE_MERGE_COMPILE,
    PHASE_MERGE_EXECUTE,
    PHASE_RUN_TOTAL,
)
from callstereo.runtime.phase_timing import (
    log_phase_completed,
    log_phase_failed,
    log_phase_started,
)
from callstereo.timeline import build_channel_timelines
from callstereo.turns import assemble_conversation
from callstereo.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)


class MergeExecutor(Protocol):
    """Anything able to run, or describe the command for, one merge graph."""

    def execute(self, graph: MergeGraph, output_path: Path) -> None: ...

    def build_command(self, graph: MergeGraph, output_path: Path) -> list[str]: ...


class ConversationStatus(StrEnum):
    """Outcome of processing one conversation directory."""

    CREATED = "created"
    PLANNED = "planned"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ConversationResult:
    """Outcome record for one conversation."""

    conversation_id: str
    status: ConversationStatus
    output_path: Path | None = None
    reason: str = ""
    turn_count: int = 0
    total_seconds: float = 0.0
    command: tuple[str, ...] = ()


@dataclass(frozen=True)
class RunReport:
    """Results of one run, in conversation discovery order."""

    results: tuple[ConversationResult, ...] = field(default_factory=tuple)

    def counts(self) -> dict[ConversationStatus, int]:
        counter = Counter(result.status for result in self.results)
        return {status: counter.get(status, 0) for status in ConversationStatus}

    @property
    def failed(self) -> list[ConversationResult]:
        return [r for r in self.results if r.status is ConversationStatus.FAILED]

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


def discover_conversations(input_root: Path) -> list[Path]:
    """
    Lists conversation directories under the input root.

    Raises:
        InputRootError: The root does not exist or holds no subdirectories.
    """
    if not input_root.is_dir():
        raise InputRootError(f"Missing folder: {input_root}")
    directories = sorted(path for path in input_root.iterdir() if path.is_dir())
    if not directories:
        raise InputRootError(f"No subdirectories found in {input_root}")
    return directories


def output_file_name(conversation_id: str, extension: str, timestamp: datetime) -> str:
    """Names a stereo artifact ``<YYYYMMDDTHHMMSS>_<id>_stereo.<ext>``."""
    return f"{timestamp:%Y%m%dT%H%M%S}_{conversation_id}_stereo.{extension}"


class ConversationProcessor:
    """Rebuilds stereo recordings for conversation directories."""

    def __init__(
        self,
        settings: AppConfig | None = None,
        *,
        resolver: DurationResolver = probe_duration_seconds,
        executor: MergeExecutor | None = None,
        clock: Callable[[], datetime] = datetime.now,
        dry_run: bool = False,
    ) -> None:
        self.settings = settings if settings is not None else get_settings()
        self.resolver = resolver
        self.executor: MergeExecutor = (
            executor
            if executor is not None
            else FfmpegMergeExecutor(
                codec=self.settings.audio.codec,
                quality=self.settings.audio.quality,
                timeout_seconds=self.settings.execution.merge_timeout_seconds or None,
            )
        )
        self.clock = clock
        self.dry_run = dry_run

    def load_conversation(self, directory: Path) -> Conversation:
        """Assembles the ordered turns of one directory with durations attached."""
        conversation = assemble_conversation(
            directory.name,
            sorted(entry.name for entry in directory.iterdir() if entry.is_file()),
            directory,
        )
        started_at = log_phase_started(
            logger, phase_name=PHASE_DURATION_PROBE, subject=conversation.conversation_id
        )
        try:
            turns = resolve_durations(
                conversation.turns,
                self.resolver,
                max_workers=self.settings.execution.probe_workers,
            )
        except DurationUnavailable as err:
            err.conversation_id = conversation.conversation_id
            log_phase_failed(
                logger,
                phase_name=PHASE_DURATION_PROBE,
                started_at=started_at,
                subject=conversation.conversation_id,
            )
            raise
        log_phase_completed(
            logger,
            phase_name=PHASE_DURATION_PROBE,
            started_at=started_at,
            subject=conversation.conversation_id,
        )
        return Conversation(conversation.conversation_id, tuple(turns))

    def plan(self, conversation: Conversation) -> MergeGraph:
        """Builds the channel timelines and compiles them into a merge graph."""
        started_at = log_phase_started(
            logger, phase_name=PHASE_MERGE_COMPILE, subject=conversation.conversation_id
        )
        timelines = build_channel_timelines(conversation.turns)
        graph = compile_merge_graph(timelines, self.settings.audio.sample_rate)
        logger.debug(
            "Merge graph for %s: %s", conversation.conversation_id, render_filter_complex(graph)
        )
        log_phase_completed(
            logger,
            phase_name=PHASE_MERGE_COMPILE,
            started_at=started_at,
            subject=conversation.conversation_id,
        )
        return graph

    def process_conversation(self, directory: Path) -> ConversationResult:
        """Processes one conversation directory and reports its outcome."""
        conversation_id = directory.name
        try:
            conversation = self.load_conversation(directory)
            graph = self.plan(conversation)
        except IncompleteConversation as err:
            logger.info('Skipping "%s", %s', conversation_id, err)
            return ConversationResult(conversation_id, ConversationStatus.SKIPPED, reason=str(err))
        except ConversationError as err:
            logger.error('Failed processing "%s": %s', conversation_id, err)
            return ConversationResult(conversation_id, ConversationStatus.FAILED, reason=str(err))

        total_seconds = sum(turn.duration_seconds or 0.0 for turn in conversation.turns)
        output_path = self.settings.paths.output_dir / output_file_name(
            conversation_id, self.settings.audio.extension, self.clock()
        )
        result_fields = {
            "output_path": output_path,
            "turn_count": len(conversation.turns),
            "total_seconds": total_seconds,
        }
        if self.dry_run:
            result_fields["command"] = tuple(self.executor.build_command(graph, output_path))
            logger.info("Planned: %s (%d turns)", output_path, len(conversation.turns))
            return ConversationResult(conversation_id, ConversationStatus.PLANNED, **result_fields)

        started_at = log_phase_started(
            logger, phase_name=PHASE_MERGE_EXECUTE, subject=conversation_id
        )
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            self.executor.execute(graph, output_path)
        except MergeExecutionFailed as err:
            err.conversation_id = conversation_id
            log_phase_failed(
                logger,
                phase_name=PHASE_MERGE_EXECUTE,
                started_at=started_at,
                subject=conversation_id,
            )
            logger.error('Failed processing "%s": %s', conversation_id, err)
            return ConversationResult(
                conversation_id,
                ConversationStatus.FAILED,
                reason=str(err),
                turn_count=len(conversation.turns),
                total_seconds=total_seconds,
            )
        log_phase_completed(
            logger,
            phase_name=PHASE_MERGE_EXECUTE,
            started_at=started_at,
            subject=conversation_id,
        )
        logger.info(
            "Created: %s (%d turns, agent %.3fs / customer %.3fs)",
            output_path,
            len(conversation.turns),
            _role_seconds(conversation, Role.AGENT),
            _role_seconds(conversation, Role.CUSTOMER),
        )
        return ConversationResult(conversation_id, ConversationStatus.CREATED, **result_fields)

    def _process_isolated(self, directory: Path) -> ConversationResult:
        try:
            return self.process_conversation(directory)
        except Exception as err:
            logger.error(
                'Failed processing "%s": %s', directory.name, err, exc_info=True
            )
            return ConversationResult(
                directory.name, ConversationStatus.FAILED, reason=f"unexpected error: {err}"
            )

    def process_all(self, input_root: Path | None = None) -> RunReport:
        """
        Processes every conversation directory under the input root.

        Conversations are independent; with ``max_workers`` above one they run
        on a thread pool. Results keep discovery order.

        Raises:
            InputRootError: The input root is missing or empty.
        """
        root = input_root if input_root is not None else self.settings.paths.input_dir
        directories = discover_conversations(root)
        started_at = log_phase_started(logger, phase_name=PHASE_RUN_TOTAL, level=logging.INFO)
        max_workers = self.settings.execution.max_workers
        if max_workers > 1 and len(directories) > 1:
            with ThreadPoolExecutor(max_workers=min(max_workers, len(directories))) as pool:
                results = tuple(pool.map(self._process_isolated, directories))
        else:
            results = tuple(self._process_isolated(directory) for directory in directories)
        log_phase_completed(
            logger, phase_name=PHASE_RUN_TOTAL, started_at=started_at, level=logging.INFO
        )
        return RunReport(results=results)


def _role_seconds(conversation: Conversation, role: Role) -> float:
    return sum(
        turn.duration_seconds or 0.0 for turn in conversation.turns if turn.role is role
    )
