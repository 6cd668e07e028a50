"""Timer runner for herald.

Drives the engine's periodic work:
- due-sweep: every HERALD_SWEEP_INTERVAL_SECONDS (default 60)
- weekly digest: every HERALD_DIGEST_WEEKDAY at HERALD_DIGEST_TIME in
  HERALD_DIGEST_TIMEZONE (default Friday 17:30 Europe/Sofia), covering the
  week that just ended

Jobs run in a worker thread so a slow mail API never stalls the other
timer. A failing run is logged and the timer keeps going.

Usage:
    python src/server.py                 # Run both timers
    python src/server.py --only sweep    # Only the due-sweep
    python src/server.py --only digest   # Only the weekly digest
"""

import argparse
import asyncio
import os

from herald.digest.period import (
    DEFAULT_DIGEST_TIME,
    DEFAULT_DIGEST_TIMEZONE,
    DEFAULT_DIGEST_WEEKDAY,
    next_weekly_run,
    weekly_period,
)
from herald.digest.runner import RunDigestForPeriod
from herald.domain import herald
from herald.notification.scheduler import ProcessDueNotifications
from herald.utils.logging import add_context, clear_context, get_logger
from herald.utils.time import utc_now

logger = get_logger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 60


def _run_sweep():
    add_context(job="due-sweep")
    try:
        with herald.domain_context():
            return herald.process(ProcessDueNotifications(), asynchronous=False)
    finally:
        clear_context()


def _run_weekly_digest(tz):
    period_start, period_end = weekly_period(tz=tz)
    add_context(job="weekly-digest")
    try:
        with herald.domain_context():
            return herald.process(
                RunDigestForPeriod(period_start=period_start, period_end=period_end),
                asynchronous=False,
            )
    finally:
        clear_context()


async def sweep_forever(interval_seconds):
    while True:
        try:
            await asyncio.to_thread(_run_sweep)
        except Exception:
            logger.exception("Due-sweep failed")
        await asyncio.sleep(interval_seconds)


async def digest_forever(weekday, at, tz):
    while True:
        next_run = next_weekly_run(weekday=weekday, at=at, tz=tz)
        delay = (next_run - utc_now()).total_seconds()
        logger.info("Weekly digest scheduled", next_run=next_run.isoformat())
        await asyncio.sleep(max(delay, 0))

        try:
            summary = await asyncio.to_thread(_run_weekly_digest, tz)
            logger.info("Weekly digest sent", **summary)
        except Exception:
            logger.exception("Weekly digest failed")


async def run(jobs):
    herald.init()

    tasks = []
    if "sweep" in jobs:
        interval = int(os.environ.get("HERALD_SWEEP_INTERVAL_SECONDS", DEFAULT_SWEEP_INTERVAL_SECONDS))
        tasks.append(sweep_forever(interval))
    if "digest" in jobs:
        tasks.append(
            digest_forever(
                weekday=int(os.environ.get("HERALD_DIGEST_WEEKDAY", DEFAULT_DIGEST_WEEKDAY)),
                at=os.environ.get("HERALD_DIGEST_TIME", DEFAULT_DIGEST_TIME),
                tz=os.environ.get("HERALD_DIGEST_TIMEZONE", DEFAULT_DIGEST_TIMEZONE),
            )
        )

    await asyncio.gather(*tasks)


def main():
    parser = argparse.ArgumentParser(description="Herald timer runner")
    parser.add_argument(
        "--only",
        choices=["sweep", "digest"],
        help="Run a single timer (default: run both)",
    )
    args = parser.parse_args()

    jobs = [args.only] if args.only else ["sweep", "digest"]

    asyncio.run(run(jobs))


if __name__ == "__main__":
    main()
