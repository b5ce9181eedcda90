"""
Holiday read path.

Year and range reads sync any year whose stored count is below
min_expected_holidays before answering. A failed sync never fails the read:
the caller gets whatever is stored.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError  # type: ignore
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore

from calendar_backend.models import Holiday, HolidaySchema
from calendar_backend.services.holiday_errors import HolidayStorageError
from calendar_backend.services.holiday_store import HolidayStore
from calendar_backend.services.holiday_sync import HolidaySyncEngine, SyncResult

logger = logging.getLogger(__name__)


def to_schemas(holidays: List[Holiday]) -> List[HolidaySchema]:
    return [HolidaySchema.model_validate(h) for h in holidays]


class HolidayService:
    def __init__(self, db: AsyncSession, engine: HolidaySyncEngine):
        self.db = db
        self.engine = engine
        self.store = HolidayStore(db)

    def _country(self, country_code: Optional[str]) -> str:
        return (country_code or self.engine.settings.default_country_code).upper()

    async def _sync_quietly(self, year: int, country_code: str) -> bool:
        """Run a sync for the read path. Storage failures are logged, not raised."""
        try:
            await self.engine.sync(year, country_code)
            return True
        except HolidayStorageError as e:
            logger.warning("Holiday sync failed for %s/%s, serving stored data: %s", year, country_code, e)
            return False

    async def _ensure_years(self, years: List[int], country_code: str) -> bool:
        """Sync every insufficient year. Returns True if any sync stored data."""
        synced = False
        if not self.engine.has_source(country_code):
            return synced
        threshold = self.engine.settings.min_expected_holidays
        for year in years:
            count = await self.store.count_by_year(year, country_code)
            if count >= threshold:
                continue
            logger.info("%s holidays stored for %s/%s (< %s), syncing", count, year, country_code, threshold)
            synced = await self._sync_quietly(year, country_code) or synced
        return synced

    async def _reread(self, start_date: date, end_date: date, country_code: str, current: List[Holiday]) -> List[HolidaySchema]:
        """
        Re-query in a fresh session so rows committed by the sync are visible
        even under REPEATABLE READ in the request session.
        """
        try:
            async with self.engine.session_factory() as fresh:
                holidays = await HolidayStore(fresh).find_by_date_range(start_date, end_date, country_code)
                return to_schemas(holidays)
        except SQLAlchemyError as e:
            logger.warning("Re-reading holidays after sync failed: %s", e)
            return to_schemas(current)

    async def sync_year(self, year: int, country_code: Optional[str] = None) -> SyncResult:
        return await self.engine.sync(year, self._country(country_code))

    async def get_by_year(self, year: int, country_code: Optional[str] = None) -> List[HolidaySchema]:
        country_code = self._country(country_code)
        logger.debug("Holiday lookup year=%s country=%s", year, country_code)
        holidays = await self.store.find_by_year(year, country_code)
        if len(holidays) >= self.engine.settings.min_expected_holidays:
            return to_schemas(holidays)

        if await self._ensure_years([year], country_code):
            return await self._reread(date(year, 1, 1), date(year, 12, 31), country_code, holidays)
        return to_schemas(holidays)

    async def get_by_date_range(self, start_date: date, end_date: date, country_code: Optional[str] = None) -> List[HolidaySchema]:
        country_code = self._country(country_code)
        logger.debug("Holiday lookup range=%s..%s country=%s", start_date, end_date, country_code)
        years = list(range(start_date.year, end_date.year + 1))
        holidays = await self.store.find_by_date_range(start_date, end_date, country_code)
        if await self._ensure_years(years, country_code):
            return await self._reread(start_date, end_date, country_code, holidays)
        return to_schemas(holidays)

    async def get_by_month(self, year: int, month: int, country_code: Optional[str] = None) -> List[HolidaySchema]:
        country_code = self._country(country_code)
        holidays = await self.store.find_by_month(year, month, country_code)
        return to_schemas(holidays)

    async def get_by_date(self, target: date, country_code: Optional[str] = None) -> List[HolidaySchema]:
        holidays = await self.store.find_by_date(target, self._country(country_code))
        return to_schemas(holidays)

    async def get_today(self, country_code: Optional[str] = None) -> List[HolidaySchema]:
        return await self.get_by_date(date.today(), country_code)

    async def get_upcoming(self, days: int = 30, country_code: Optional[str] = None) -> List[HolidaySchema]:
        holidays = await self.store.find_upcoming(date.today(), days, self._country(country_code))
        return to_schemas(holidays)

    async def get_statistics(self, year: int, country_code: Optional[str] = None) -> Dict[str, Any]:
        return await self.store.statistics(year, self._country(country_code))
