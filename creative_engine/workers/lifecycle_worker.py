"""Lifecycle background job process entrypoint.

Periodically classifies recent action outcomes and mines learning insights
from the decision history.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from contextlib import suppress
from typing import Any

from creative_engine.config import settings
from creative_engine.core.database import close_db
from creative_engine.core.db_kernel import DbKernelError
from creative_engine.core.logging import setup_logging
from creative_engine.services.container import build_services
from creative_engine.services.lifecycle.manager import LifecycleManager

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--interval",
        type=int,
        default=settings.lifecycle_job_interval_seconds,
        help="Seconds between job cycles.",
    )
    parser.add_argument(
        "--lookback-days",
        type=int,
        default=settings.outcome_lookback_days,
        help="Outcome analysis window in days.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle and exit.",
    )
    return parser.parse_args()


async def run_cycle(lifecycle: LifecycleManager, *, lookback_days: int) -> dict[str, Any]:
    """Run outcome analysis and learning-insight mining once."""
    outcomes = await lifecycle.analyze_outcomes(lookback_days)
    insights = await lifecycle.generate_learning_insights()

    by_outcome: dict[str, int] = {"improved": 0, "declined": 0, "neutral": 0}
    for outcome in outcomes:
        by_outcome[outcome.outcome] += 1

    summary = {
        "lookback_days": lookback_days,
        "outcomes": len(outcomes),
        "by_outcome": by_outcome,
        "insights": [insight.pattern for insight in insights],
    }
    logger.info("Lifecycle cycle completed", extra=summary)
    return summary


async def run_worker(*, interval: int, lookback_days: int, once: bool) -> None:
    """Run job cycles until a shutdown signal arrives."""
    setup_logging()
    services = build_services()

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _request_stop() -> None:
        if not stop_event.is_set():
            logger.info("Shutdown signal received")
            stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError):
            loop.add_signal_handler(sig, _request_stop)

    logger.info(
        "Lifecycle worker started",
        extra={"interval_seconds": interval, "lookback_days": lookback_days, "once": once},
    )
    try:
        while not stop_event.is_set():
            try:
                await run_cycle(services.lifecycle, lookback_days=lookback_days)
            except DbKernelError:
                logger.exception("Lifecycle cycle failed", extra={"lookback_days": lookback_days})
            if once:
                break
            with suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
    finally:
        logger.info("Stopping lifecycle worker")
        await close_db()


def main() -> int:
    """Run the worker process."""
    args = parse_args()
    try:
        asyncio.run(
            run_worker(
                interval=args.interval,
                lookback_days=args.lookback_days,
                once=args.once,
            )
        )
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
