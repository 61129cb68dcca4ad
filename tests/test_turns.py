"""Behavior tests for turn name parsing and conversation assembly."""

from pathlib import Path

import pytest

from callstereo.domain import Role
from callstereo.errors import IncompleteConversation
from callstereo.turns import assemble_conversation, collect_turns, parse_turn_name


def test_parse_turn_name_extracts_sort_key_and_role() -> None:
    turn = parse_turn_name("20251218_agent.mp3")

    assert turn is not None
    assert turn.sort_key == "20251218"
    assert turn.role is Role.AGENT
    assert turn.duration_seconds is None


def test_parse_turn_name_keeps_underscores_in_sort_key() -> None:
    """Only the final role suffix is stripped from the sort key."""
    turn = parse_turn_name("20251218093217_20251218_093214_127_customer.mp3")

    assert turn is not None
    assert turn.sort_key == "20251218093217_20251218_093214_127"
    assert turn.role is Role.CUSTOMER


def test_parse_turn_name_is_case_insensitive_on_role_and_extension() -> None:
    turn = parse_turn_name("0001_AGENT.MP3")

    assert turn is not None
    assert turn.sort_key == "0001"
    assert turn.role is Role.AGENT


@pytest.mark.parametrize(
    "name",
    ["readme.txt", "0001_agent.wav", "0001-agent.mp3", "0001_supervisor.mp3", "agent.mp3"],
)
def test_parse_turn_name_rejects_non_turn_names(name: str) -> None:
    assert parse_turn_name(name) is None


def test_parse_turn_name_resolves_source_against_directory(tmp_path: Path) -> None:
    turn = parse_turn_name("01_customer.mp3", tmp_path)

    assert turn is not None
    assert turn.source == tmp_path / "01_customer.mp3"


def test_collect_turns_sorts_lexicographically_and_ignores_other_files() -> None:
    turns = collect_turns(["b_agent.mp3", "notes.txt", "a_customer.mp3", "c_agent.mp3"])

    assert [turn.sort_key for turn in turns] == ["a", "b", "c"]


def test_collect_turns_orders_inconsistent_key_widths_lexicographically() -> None:
    """Keys of differing width sort as strings, not as numbers."""
    turns = collect_turns(["9_agent.mp3", "10_customer.mp3", "100_agent.mp3"])

    assert [turn.sort_key for turn in turns] == ["10", "100", "9"]


def test_collect_turns_compares_sort_keys_by_code_point() -> None:
    """Underscore sorts after digits, unlike locale collation."""
    turns = collect_turns(["1_2_customer.mp3", "10_agent.mp3"])

    assert [turn.sort_key for turn in turns] == ["10", "1_2"]


def test_collect_turns_is_stable_for_equal_sort_keys() -> None:
    turns = collect_turns(["0001_customer.mp3", "0001_agent.mp3"])

    assert [turn.role for turn in turns] == [Role.CUSTOMER, Role.AGENT]


def test_assemble_conversation_returns_sorted_turns(tmp_path: Path) -> None:
    conversation = assemble_conversation(
        "call-1", ["02_customer.mp3", "01_agent.mp3"], tmp_path
    )

    assert conversation.conversation_id == "call-1"
    assert [turn.sort_key for turn in conversation.turns] == ["01", "02"]
    assert [turn.role for turn in conversation.turns] == [Role.AGENT, Role.CUSTOMER]


def test_assemble_conversation_rejects_empty_listing() -> None:
    with pytest.raises(IncompleteConversation, match="no _agent/_customer") as exc_info:
        assemble_conversation("empty", ["readme.txt"])

    assert exc_info.value.conversation_id == "empty"


def test_assemble_conversation_rejects_single_party() -> None:
    with pytest.raises(IncompleteConversation, match="missing agent or customer"):
        assemble_conversation("agent-only", ["01_agent.mp3", "02_agent.mp3"])
