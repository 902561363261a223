"""Process today's tee time booking requests from the queue file."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import List, Optional

from automation.executors.tee_sheet_site import PlaywrightTeeSheetSite
from infrastructure.run_outputs import publish_run_outputs
from infrastructure.settings import AppSettings, get_settings
from logging_config import setup_logging
from reservations.queue.reservation_queue import BookingQueue
from reservations.queue.reservation_repository import QueueRepository
from reservations.queue.scheduler.metrics import RunSummary
from reservations.queue.scheduler.pipeline import (
    BookingOrchestrator,
    OrchestratorOptions,
    process_queue,
)
from reservations.queue.scheduler.time_gate import TimeGate


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Book queued tee times on the club tee sheet")
    parser.add_argument("--queue-file", type=Path, help="Queue JSON path (defaults to QUEUE_FILE)")
    parser.add_argument("--date", type=_parse_date, help="Treat this YYYY-MM-DD as today")
    parser.add_argument(
        "--scheduled",
        action="store_true",
        help="Wait for the release time after logging in",
    )
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--no-screenshots", action="store_true", help="Skip diagnostic screenshots")
    return parser


def apply_cli_overrides(settings: AppSettings, args: argparse.Namespace) -> AppSettings:
    overrides = {}
    if args.queue_file is not None:
        overrides["queue_file"] = args.queue_file
    if args.date is not None:
        overrides["date_override"] = args.date
    if args.scheduled:
        overrides["is_scheduled_run"] = True
    if args.headed:
        overrides["headless"] = False
    if args.no_screenshots:
        overrides["take_screenshots"] = False
    return replace(settings, **overrides) if overrides else settings


async def run(settings: AppSettings) -> RunSummary:
    """Wire the queue, the Playwright site and the orchestrator for one run."""

    queue = BookingQueue(
        QueueRepository(settings.queue_file, logger=logging.getLogger('BookingQueue'))
    )
    site = PlaywrightTeeSheetSite.from_settings(settings)
    orchestrator = BookingOrchestrator(
        site,
        options=OrchestratorOptions.from_settings(settings),
        time_gate=TimeGate(settings.reference_timezone),
    )
    return await process_queue(queue, orchestrator)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = apply_cli_overrides(get_settings(), args)
    setup_logging(settings.log_directory, production_mode=settings.production_mode)
    logger = logging.getLogger('BookingQueue')
    logger.info("Starting booking queue processing")

    try:
        summary = asyncio.run(run(settings))
    except Exception:
        logger.exception("FATAL ERROR")
        return 1

    publish_run_outputs(
        summary.success_count,
        summary.results_text,
        status=summary.status,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
