"""
Call Stereo Rebuild Tool

This module serves as the entry point for the callstereo tool. It rebuilds a
two-party call recording from per-turn agent/customer clips: every
subdirectory of the input root is one conversation, and each produces one
stereo file with the agent on the left channel and the customer on the right.

Usage:
    callstereo --input ./audio --output ./out
    callstereo --dry-run           # probe and plan only, print ffmpeg commands
"""

import argparse
import logging
import shlex
import sys
import time
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv
from halo import Halo

from callstereo.config import AppConfig, reload_settings
from callstereo.errors import InputRootError
from callstereo.processor import ConversationProcessor, ConversationStatus, RunReport
from callstereo.report import print_report, save_report_to_csv
from callstereo.utils import configure_logging, display_elapsed_time, get_logger

logger: logging.Logger = get_logger("callstereo")


def _build_parser(settings: AppConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="callstereo",
        description="Rebuild agent/customer stereo recordings from per-turn clips",
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=settings.paths.input_dir,
        help="Folder holding one subdirectory per conversation",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=settings.paths.output_dir,
        help="Folder where stereo files are written",
    )
    parser.add_argument(
        "--sample-rate",
        type=int,
        default=settings.audio.sample_rate,
        help="Output sample rate in Hz",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=settings.execution.max_workers,
        help="Number of conversations processed concurrently",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Probe and plan every conversation without running ffmpeg",
    )
    parser.add_argument(
        "--report-csv",
        type=Path,
        help="Save the per-conversation outcome report to this CSV file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level (overrides LOG_LEVEL)",
    )
    parser.add_argument(
        "--allow-failures",
        action="store_true",
        help="Exit with status 0 even when some conversations failed",
    )
    return parser


def _apply_overrides(settings: AppConfig, args: argparse.Namespace) -> AppConfig:
    if args.sample_rate <= 0:
        raise ValueError("--sample-rate must be positive")
    if args.workers <= 0:
        raise ValueError("--workers must be positive")
    return replace(
        settings,
        audio=replace(settings.audio, sample_rate=args.sample_rate),
        paths=replace(settings.paths, input_dir=args.input, output_dir=args.output),
        execution=replace(settings.execution, max_workers=args.workers),
    )


def _run(processor: ConversationProcessor) -> RunReport:
    with Halo(text="Rebuilding stereo conversations... ", spinner="dots", text_color="green"):
        return processor.process_all()


def main() -> None:
    """
    Main function to handle the command line interface logic.
    """
    load_dotenv()
    settings: AppConfig = reload_settings()
    args: argparse.Namespace = _build_parser(settings).parse_args()
    configure_logging(args.log_level)

    try:
        settings = _apply_overrides(settings, args)
    except ValueError as err:
        logger.error(msg=str(err))
        sys.exit(1)

    processor = ConversationProcessor(settings, dry_run=args.dry_run)
    start_time: float = time.time()
    try:
        report: RunReport = _run(processor)
    except InputRootError as err:
        logger.error(msg=str(err))
        sys.exit(1)

    print_report(report)
    if args.dry_run:
        for result in report.results:
            if result.status is ConversationStatus.PLANNED:
                print(f"{result.conversation_id}: {shlex.join(result.command)}")
    if args.report_csv:
        save_report_to_csv(report, args.report_csv)

    logger.info(
        msg=f"Run completed in {display_elapsed_time(time.time() - start_time)}"
    )
    if report.has_failures and not args.allow_failures:
        sys.exit(2)


if __name__ == "__main__":
    main()
