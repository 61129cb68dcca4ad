"""
Run Report Output for the callstereo tool

This module prints and saves the per-conversation outcomes of one run.

Functions:
    - color_txt: Colorizes a string.
    - print_report: Prints the run report as an aligned table.
    - save_report_to_csv: Saves the run report to a CSV file.
"""

import csv
import logging
from pathlib import Path

from colored import attr, bg, fg

from callstereo.processor import ConversationStatus, RunReport
from callstereo.utils import display_elapsed_time, get_logger

logger: logging.Logger = get_logger(__name__)

STATUS_COLORS: dict[ConversationStatus, str] = {
    ConversationStatus.CREATED: "green",
    ConversationStatus.PLANNED: "blue",
    ConversationStatus.SKIPPED: "yellow",
    ConversationStatus.FAILED: "red",
}

CSV_HEADER = ["Conversation", "Status", "Turns", "Duration (s)", "Output", "Reason"]


def color_txt(string: str, fg_color: str, bg_color: str | None = None, padding: int = 0) -> str:
    """
    Colorizes a string.

    Arguments:
        string (str): String to be colorized.
        fg_color (str): Foreground color.
        bg_color (str, optional): Background color.
        padding (int, optional): Width to left-justify the string to.

    Returns:
        str: Colorized string.
    """
    if padding:
        string = string.ljust(padding)
    background = bg(bg_color) if bg_color else ""
    return f"{fg(fg_color)}{background}{string}{attr('reset')}"


def print_report(report: RunReport) -> None:
    """Prints one row per conversation followed by status totals."""
    if not report.results:
        print("No conversations processed.")
        return

    id_width = max(len("Conversation"), *(len(r.conversation_id) for r in report.results))
    status_width = max(len(status.value) for status in ConversationStatus)

    print(
        color_txt("Conversation", "black", "green", id_width + 1)
        + color_txt("Status", "black", "yellow", status_width + 1)
        + color_txt("Detail", "black", "blue")
    )
    for result in report.results:
        if result.output_path is not None and result.status in (
            ConversationStatus.CREATED,
            ConversationStatus.PLANNED,
        ):
            detail = (
                f"{result.output_path} "
                f"({result.turn_count} turns, "
                f"{display_elapsed_time(result.total_seconds, _format='short')})"
            )
        else:
            detail = result.reason
        status_text = color_txt(
            result.status.value, STATUS_COLORS[result.status], padding=status_width
        )
        print(f"{result.conversation_id.ljust(id_width)} {status_text} {detail}")

    totals = ", ".join(
        f"{count} {status.value}" for status, count in report.counts().items() if count
    )
    print(f"Total: {totals}")


def save_report_to_csv(report: RunReport, file_path: Path) -> Path:
    """
    Saves the run report to a CSV file.

    Arguments:
        report (RunReport): Results of the run.
        file_path (Path): Destination CSV path; parent folders are created.

    Returns:
        Path: The path to the saved CSV file.
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, mode="w", newline="", encoding="utf-8") as file:
        writer = csv.writer(file)
        writer.writerow(CSV_HEADER)
        for result in report.results:
            writer.writerow(
                [
                    result.conversation_id,
                    result.status.value,
                    result.turn_count,
                    round(result.total_seconds, 3),
                    str(result.output_path) if result.output_path else "",
                    result.reason,
                ]
            )
    logger.info("Run report saved to %s", file_path)
    return file_path
