"""
Sync holidays for one or more years from the public data API.

Usage:
    python scripts/sync_holidays.py                 # previous, current and next year
    python scripts/sync_holidays.py 2025 2026       # given years
    python scripts/sync_holidays.py 2025 --country KR --force

Without --force a year is skipped when it already holds HOLIDAY_MIN_EXPECTED rows.
"""
import argparse
import asyncio
import os
import sys
from datetime import date

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from calendar_backend.config import HolidaySyncSettings
from calendar_backend.db import AsyncSessionLocal, engine
from calendar_backend.services.holiday_errors import HolidayStorageError
from calendar_backend.services.holiday_sync import HolidaySyncEngine
from calendar_backend.services.public_data_client import PublicDataClient


def parse_args(argv=None):
    current = date.today().year
    parser = argparse.ArgumentParser(description="Sync public holidays into the holidays table")
    parser.add_argument("years", nargs="*", type=int, default=[current - 1, current, current + 1])
    parser.add_argument("--country", default=None, help="ISO country code (default: HOLIDAY_DEFAULT_COUNTRY)")
    parser.add_argument("--force", action="store_true", help="Sync even if the year already looks complete")
    return parser.parse_args(argv)


async def sync_holidays(years, country_code=None, force=False):
    settings = HolidaySyncSettings.from_env()
    if not settings.service_key:
        print("⚠️  HOLIDAY_API_SERVICE_KEY is not set; built-in holidays will be used")

    sync_engine = HolidaySyncEngine(PublicDataClient(settings), AsyncSessionLocal, settings)
    failed = 0
    try:
        for year in years:
            print(f"🔄 Syncing {year}...")
            try:
                if force:
                    result = await sync_engine.sync(year, country_code)
                else:
                    result = await sync_engine.sync_if_insufficient(year, country_code)
            except HolidayStorageError as e:
                failed += 1
                print(f"❌ {year}: {e}")
                continue

            if result is None:
                print(f"⏭️  {year}: already complete, skipped")
            else:
                print(
                    f"✅ {year}: {result.state.value} "
                    f"(attempts={result.attempts}, inserted {result.inserted_count}/{result.source_count})"
                )
    finally:
        await engine.dispose()
    return failed


if __name__ == "__main__":
    args = parse_args()
    failures = asyncio.run(sync_holidays(args.years, args.country, args.force))
    sys.exit(1 if failures else 0)
