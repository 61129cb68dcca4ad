"""Turn clip name parsing and conversation assembly.

Turn clips are named ``<sortKey>_<role>.mp3`` where ``role`` is ``agent`` or
``customer`` (case-insensitive, as is the extension). The sort key is
everything before the final role suffix and orders turns with a plain
lexicographic comparison, so keys are expected to be fixed-width timestamps.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from callstereo.domain import Conversation, Role, Turn
from callstereo.errors import IncompleteConversation
from callstereo.utils.logger import get_logger

TURN_NAME_PATTERN = re.compile(r"^(?P<sort_key>.*)_(?P<role>agent|customer)\.mp3$", re.IGNORECASE)

logger: logging.Logger = get_logger(__name__)


def parse_turn_name(name: str, directory: Path | None = None) -> Turn | None:
    """
    Parses one clip file name into a turn.

    Arguments:
        name (str): Bare file name, e.g. ``20251218_093214_agent.mp3``.
        directory (Path, optional): Directory holding the clip; the turn
            source is resolved against it when given.

    Returns:
        Turn | None: The parsed turn, or None for non-conforming names.
    """
    match = TURN_NAME_PATTERN.match(name)
    if match is None:
        return None
    source = directory / name if directory is not None else Path(name)
    return Turn(
        sort_key=match.group("sort_key"),
        role=Role(match.group("role").lower()),
        source=source,
    )


def collect_turns(names: Iterable[str], directory: Path | None = None) -> list[Turn]:
    """Parses a directory listing and returns turns sorted by sort key."""
    turns: list[Turn] = []
    for name in names:
        turn = parse_turn_name(name, directory)
        if turn is None:
            logger.debug("Ignoring non-turn file: %s", name)
            continue
        turns.append(turn)
    turns.sort(key=lambda turn: turn.sort_key)
    return turns


def assemble_conversation(
    conversation_id: str,
    names: Iterable[str],
    directory: Path | None = None,
) -> Conversation:
    """
    Builds a two-party conversation from a directory listing.

    Raises:
        IncompleteConversation: No turn clips were found, or one of the two
            parties has no turns.
    """
    turns = collect_turns(names, directory)
    if not turns:
        raise IncompleteConversation(
            "no _agent/_customer mp3 files found",
            conversation_id=conversation_id,
        )
    roles = {turn.role for turn in turns}
    if roles != {Role.AGENT, Role.CUSTOMER}:
        raise IncompleteConversation(
            "missing agent or customer audio",
            conversation_id=conversation_id,
        )
    return Conversation(conversation_id=conversation_id, turns=tuple(turns))
