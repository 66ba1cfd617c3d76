#!/usr/bin/env python3
"""
One-off script to manually trigger the planting reminder batch.

Usage (inside the API container):
    python scripts/run_planting_reminders.py
    python scripts/run_planting_reminders.py --date 2025-03-01

Or from the host:
    docker exec seedtrack-api-1 python scripts/run_planting_reminders.py
"""
import argparse
import asyncio
import logging
import sys
from datetime import datetime

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s: %(message)s",
    stream=sys.stdout,
)

from app.tasks.planting_reminders import run_planting_reminders


async def main(now: datetime | None) -> None:
    print("Starting planting reminder run...\n")
    result = await run_planting_reminders(now)
    print(f"\nDone. sent={result.sent} failed={result.failed} skipped={result.skipped}")
    for error in result.errors:
        print(f"  error: {error}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Send due planting reminders")
    parser.add_argument("--date", help="Pretend today is this date (YYYY-MM-DD)")
    args = parser.parse_args()
    now = datetime.fromisoformat(args.date) if args.date else None
    asyncio.run(main(now))
