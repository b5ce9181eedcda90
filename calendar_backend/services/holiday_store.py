"""
Holiday persistence: dedup check, insert and date/range/year/month queries.
Works on whatever AsyncSession it is given; the caller owns commit/rollback.
"""
from collections import Counter
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select, and_, case, func  # type: ignore
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore

from calendar_backend.models import (
    Holiday,
    HolidayCreate,
    HolidaySyncLog,
    HOLIDAY_TYPE_PRIORITY,
    UNRANKED_PRIORITY,
)

_type_priority = case(
    *[(Holiday.holiday_type == holiday_type, priority) for holiday_type, priority in HOLIDAY_TYPE_PRIORITY.items()],
    else_=UNRANKED_PRIORITY,
)

_ORDERING = (Holiday.holiday_date.asc(), _type_priority.asc(), Holiday.id.asc())


def _year_bounds(year: int):
    return date(year, 1, 1), date(year, 12, 31)


def _month_bounds(year: int, month: int):
    start_date = date(year, month, 1)
    if month == 12:
        end_date = date(year, 12, 31)
    else:
        end_date = date(year, month + 1, 1) - timedelta(days=1)
    return start_date, end_date


class HolidayStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists(self, name: str, holiday_date: date, country_code: str) -> bool:
        """Dedup check on (name, holiday_date, country_code)."""
        result = await self.db.execute(
            select(Holiday.id).where(
                and_(
                    Holiday.name == name,
                    Holiday.holiday_date == holiday_date,
                    Holiday.country_code == country_code,
                )
            ).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def insert(self, entry: HolidayCreate) -> Holiday:
        """Add and flush. Does not commit."""
        holiday = Holiday(**entry.model_dump())
        self.db.add(holiday)
        await self.db.flush()
        return holiday

    async def _find_between(self, start_date: date, end_date: date, country_code: str) -> List[Holiday]:
        result = await self.db.execute(
            select(Holiday)
            .where(
                and_(
                    Holiday.country_code == country_code,
                    Holiday.holiday_date >= start_date,
                    Holiday.holiday_date <= end_date,
                )
            )
            .order_by(*_ORDERING)
        )
        return list(result.scalars().all())

    async def find_by_date(self, holiday_date: date, country_code: str) -> List[Holiday]:
        return await self._find_between(holiday_date, holiday_date, country_code)

    async def find_by_date_range(self, start_date: date, end_date: date, country_code: str) -> List[Holiday]:
        """Inclusive on both ends."""
        return await self._find_between(start_date, end_date, country_code)

    async def find_by_year(self, year: int, country_code: str) -> List[Holiday]:
        return await self._find_between(*_year_bounds(year), country_code)

    async def find_by_month(self, year: int, month: int, country_code: str) -> List[Holiday]:
        return await self._find_between(*_month_bounds(year, month), country_code)

    async def find_upcoming(self, from_date: date, days: int, country_code: str) -> List[Holiday]:
        return await self._find_between(from_date, from_date + timedelta(days=days), country_code)

    async def count_by_year(self, year: int, country_code: str) -> int:
        start_date, end_date = _year_bounds(year)
        total = await self.db.scalar(
            select(func.count(Holiday.id)).where(
                and_(
                    Holiday.country_code == country_code,
                    Holiday.holiday_date >= start_date,
                    Holiday.holiday_date <= end_date,
                )
            )
        )
        return total or 0

    async def statistics(self, year: int, country_code: str) -> Dict[str, Any]:
        """Totals per holiday type and per month for one year."""
        holidays = await self.find_by_year(year, country_code)
        type_counts = Counter(h.holiday_type.value for h in holidays)
        month_counts = Counter(h.holiday_date.month for h in holidays)
        return {
            "year": year,
            "country_code": country_code,
            "total_count": len(holidays),
            "type_statistics": dict(type_counts),
            "month_statistics": dict(sorted(month_counts.items())),
        }

    async def latest_sync_log(self, year: int, country_code: str) -> Optional[HolidaySyncLog]:
        result = await self.db.execute(
            select(HolidaySyncLog)
            .where(and_(HolidaySyncLog.year == year, HolidaySyncLog.country_code == country_code))
            .order_by(HolidaySyncLog.executed_at.desc(), HolidaySyncLog.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
