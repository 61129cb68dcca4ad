"""Tests for run report printing and CSV export."""

import csv
from pathlib import Path

import pytest

from callstereo.processor import ConversationResult, ConversationStatus, RunReport
from callstereo.report import print_report, save_report_to_csv


@pytest.fixture
def report(tmp_path: Path) -> RunReport:
    return RunReport(
        results=(
            ConversationResult(
                "call-1",
                ConversationStatus.CREATED,
                output_path=tmp_path / "20251218T093217_call-1_stereo.mp3",
                turn_count=3,
                total_seconds=6.5,
            ),
            ConversationResult(
                "call-2", ConversationStatus.SKIPPED, reason="missing agent or customer audio"
            ),
            ConversationResult("call-3", ConversationStatus.FAILED, reason="ffprobe failed"),
        )
    )


def test_print_report_lists_each_conversation(
    report: RunReport, capsys: pytest.CaptureFixture[str]
) -> None:
    print_report(report)

    output = capsys.readouterr().out
    assert "call-1" in output
    assert "20251218T093217_call-1_stereo.mp3 (3 turns, 6.50s)" in output
    assert "missing agent or customer audio" in output
    assert "ffprobe failed" in output
    assert "Total: 1 created, 1 skipped, 1 failed" in output


def test_print_report_handles_empty_report(capsys: pytest.CaptureFixture[str]) -> None:
    print_report(RunReport())

    assert "No conversations processed." in capsys.readouterr().out


def test_save_report_to_csv_writes_header_and_rows(report: RunReport, tmp_path: Path) -> None:
    csv_path = save_report_to_csv(report, tmp_path / "reports" / "run.csv")

    with open(csv_path, newline="", encoding="utf-8") as file:
        rows = list(csv.reader(file))

    assert rows[0] == ["Conversation", "Status", "Turns", "Duration (s)", "Output", "Reason"]
    assert rows[1][:4] == ["call-1", "created", "3", "6.5"]
    assert rows[2] == ["call-2", "skipped", "0", "0.0", "", "missing agent or customer audio"]
    assert rows[3][1] == "failed"
