"""
Report holidays stored more than once for the same (name, holiday_date, country_code).
The unique constraint should make this empty; run it after manual imports.
"""
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from sqlalchemy import select, func  # type: ignore

from calendar_backend.db import AsyncSessionLocal, engine
from calendar_backend.models import Holiday


async def find_duplicates():
    print("Scanning for duplicate holidays...")
    found = 0
    try:
        async with AsyncSessionLocal() as db:
            result = await db.execute(
                select(
                    Holiday.name,
                    Holiday.holiday_date,
                    Holiday.country_code,
                    func.count(Holiday.id).label("count"),
                )
                .group_by(Holiday.name, Holiday.holiday_date, Holiday.country_code)
                .having(func.count(Holiday.id) > 1)
            )
            for name, holiday_date, country_code, count in result.all():
                found += 1
                print(f"Duplicate found: {name} {holiday_date} {country_code} (Count: {count})")
                rows = await db.execute(
                    select(Holiday).where(
                        Holiday.name == name,
                        Holiday.holiday_date == holiday_date,
                        Holiday.country_code == country_code,
                    ).order_by(Holiday.id)
                )
                for holiday in rows.scalars():
                    print(f" - {holiday.id}: type={holiday.holiday_type.value} | created={holiday.created_at}")
    finally:
        await engine.dispose()

    if not found:
        print("✅ No duplicates")

if __name__ == "__main__":
    asyncio.run(find_duplicates())
