"""Herald management CLI.

Creates and drops the database schema, and runs the engine's periodic jobs
once on demand.

Usage:
    python src/manage.py setup-db                 # Create all tables
    python src/manage.py drop-db                  # Drop all tables
    python src/manage.py process-due              # Run the due-sweep once
    python src/manage.py run-digest               # Digest for the last week
    python src/manage.py run-digest --start 2026-10-09T17:30:00+03:00 --end 2026-10-16T17:30:00+03:00
"""

import argparse
import os
import sys
from datetime import datetime


def _domain():
    from herald.domain import herald

    herald.init()
    return herald


def setup_database(domain):
    """Create the herald database schema."""
    from herald.utils.db import setup_db

    print("Creating herald database schema...")
    setup_db(domain)
    print("Done.")


def drop_database(domain):
    """Drop the herald database schema."""
    from herald.utils.db import drop_db

    print("Dropping herald database schema...")
    drop_db(domain)
    print("Done.")


def process_due(domain):
    """Run the due-sweep once and report how many notifications were processed."""
    from herald.notification.scheduler import ProcessDueNotifications

    with domain.domain_context():
        processed = domain.process(ProcessDueNotifications(), asynchronous=False)
    print(f"Processed {processed} due notification(s).")


def run_digest(domain, start=None, end=None):
    """Send the digest for ``[start, end)``, defaulting to the past week."""
    from herald.digest.period import DEFAULT_DIGEST_TIMEZONE, weekly_period
    from herald.digest.runner import RunDigestForPeriod

    if bool(start) != bool(end):
        print("--start and --end must be given together.")
        sys.exit(1)

    if start:
        period_start, period_end = datetime.fromisoformat(start), datetime.fromisoformat(end)
    else:
        period_start, period_end = weekly_period(tz=os.environ.get("HERALD_DIGEST_TIMEZONE", DEFAULT_DIGEST_TIMEZONE))

    with domain.domain_context():
        summary = domain.process(
            RunDigestForPeriod(period_start=period_start, period_end=period_end),
            asynchronous=False,
        )
    print(f"Digest {period_start.isoformat()} - {period_end.isoformat()}: {summary}")


def main():
    parser = argparse.ArgumentParser(description="Herald management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("process-due", help="Deliver due scheduled notifications once")

    digest_parser = subparsers.add_parser("run-digest", help="Send the weekly digest once")
    digest_parser.add_argument("--start", help="Period start, ISO 8601 (default: a week ago)")
    digest_parser.add_argument("--end", help="Period end, ISO 8601 (default: now)")

    args = parser.parse_args()
    domain = _domain()

    if args.command == "setup-db":
        setup_database(domain)
    elif args.command == "drop-db":
        drop_database(domain)
    elif args.command == "process-due":
        process_due(domain)
    elif args.command == "run-digest":
        run_digest(domain, args.start, args.end)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
