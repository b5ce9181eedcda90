"""
Holiday reconciliation engine.

sync(year, country) keeps the holidays table in line with the public data
provider:
1. Call the provider up to max_attempts times, retry_delay seconds apart.
   An error that is not retryable (4xx rejection) stops the loop at once.
   Countries the provider does not cover skip this step.
2. If no attempt produced usable entries, use the built-in fallback dataset.
3. Insert entries that are not already stored (name, date, country) in a
   session of its own, so a failure here never touches the caller's session.

Concurrent sync() calls for the same (year, country) share one in-flight task.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError  # type: ignore
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # type: ignore

from calendar_backend.config import HolidaySyncSettings
from calendar_backend.models import HolidayCreate, HolidaySyncLog, SyncStateEnum
from calendar_backend.services.holiday_defaults import DEFAULT_HOLIDAYS_BY_COUNTRY, generate_default_holidays
from calendar_backend.services.holiday_errors import HolidayStorageError, HolidaySyncError
from calendar_backend.services.holiday_parser import parse_holiday_response
from calendar_backend.services.holiday_store import HolidayStore
from calendar_backend.services.public_data_client import SUPPORTED_COUNTRIES, PublicDataClient

logger = logging.getLogger(__name__)

SyncKey = Tuple[int, str]


class SyncResult(BaseModel):
    year: int
    country_code: str
    state: SyncStateEnum
    attempts: int
    source_count: int
    inserted_count: int


class HolidaySyncEngine:
    def __init__(
        self,
        client: PublicDataClient,
        session_factory: async_sessionmaker,
        settings: Optional[HolidaySyncSettings] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.session_factory = session_factory
        self.settings = settings or client.settings
        self._sleep = sleep
        self._states: Dict[SyncKey, SyncStateEnum] = {}
        self._inflight: Dict[SyncKey, asyncio.Task] = {}
        self._lock = asyncio.Lock()

    def _key(self, year: int, country_code: Optional[str]) -> SyncKey:
        return year, (country_code or self.settings.default_country_code).upper()

    def get_state(self, year: int, country_code: Optional[str] = None) -> SyncStateEnum:
        return self._states.get(self._key(year, country_code), SyncStateEnum.UNSYNCED)

    async def is_sufficient(self, db: AsyncSession, year: int, country_code: Optional[str] = None) -> bool:
        year, country_code = self._key(year, country_code)
        count = await HolidayStore(db).count_by_year(year, country_code)
        return count >= self.settings.min_expected_holidays

    def has_source(self, country_code: Optional[str] = None) -> bool:
        """False when neither the provider nor the built-in dataset covers the country."""
        country_code = (country_code or self.settings.default_country_code).upper()
        return country_code in SUPPORTED_COUNTRIES or country_code in DEFAULT_HOLIDAYS_BY_COUNTRY

    async def sync_if_insufficient(self, year: int, country_code: Optional[str] = None) -> Optional[SyncResult]:
        """Check the threshold in a fresh session and sync when below it."""
        year, country_code = self._key(year, country_code)
        if not self.has_source(country_code):
            logger.info("No holiday source for %s, skipping sync", country_code)
            return None
        async with self.session_factory() as db:
            if await self.is_sufficient(db, year, country_code):
                logger.info("Holidays for %s/%s already sufficient, skipping sync", year, country_code)
                return None
        return await self.sync(year, country_code)

    async def sync(self, year: int, country_code: Optional[str] = None) -> SyncResult:
        """
        Reconcile one (year, country). Provider failures end in the fallback
        dataset; only HolidayStorageError is raised.
        """
        key = self._key(year, country_code)
        async with self._lock:
            task = self._inflight.get(key)
            if task is None:
                task = asyncio.create_task(self._run_sync(*key))
                self._inflight[key] = task
                task.add_done_callback(lambda done, k=key: self._forget(k, done))
            else:
                logger.debug("Joining in-flight holiday sync for %s/%s", *key)
        # shield: a cancelled waiter must not cancel the shared sync
        return await asyncio.shield(task)

    def _forget(self, key: SyncKey, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _run_sync(self, year: int, country_code: str) -> SyncResult:
        key = (year, country_code)
        self._states[key] = SyncStateEnum.SYNCING
        logger.info("Holiday sync started year=%s country=%s", year, country_code)

        try:
            entries, attempts = await self._fetch_with_retry(year, country_code)
            if entries:
                state = SyncStateEnum.SYNCED_FROM_PROVIDER
            else:
                entries = generate_default_holidays(year, country_code)
                state = SyncStateEnum.SYNCED_FROM_FALLBACK
                logger.warning(
                    "Using %s built-in holidays for %s/%s after %s provider attempt(s)",
                    len(entries), year, country_code, attempts,
                )
            inserted = await self._persist(year, country_code, entries, state, attempts)
        except Exception:
            # Any failed run goes back to UNSYNCED
            self._states[key] = SyncStateEnum.UNSYNCED
            raise

        self._states[key] = state
        logger.info(
            "Holiday sync finished year=%s country=%s state=%s inserted=%s/%s",
            year, country_code, state.value, inserted, len(entries),
        )
        return SyncResult(
            year=year,
            country_code=country_code,
            state=state,
            attempts=attempts,
            source_count=len(entries),
            inserted_count=inserted,
        )

    async def _fetch_with_retry(self, year: int, country_code: str) -> Tuple[List[HolidayCreate], int]:
        if country_code not in SUPPORTED_COUNTRIES:
            logger.info("Holiday API does not cover %s, skipping provider", country_code)
            return [], 0

        max_attempts = self.settings.max_attempts
        for attempt in range(1, max_attempts + 1):
            try:
                raw = await self.client.fetch(year, country_code)
                entries = parse_holiday_response(raw, year, country_code)
            except HolidaySyncError as exc:
                if not exc.retryable:
                    logger.warning(
                        "Holiday API gave up on %s/%s (attempt %s/%s, status=%s): %s",
                        year, country_code, attempt, max_attempts, getattr(exc, "status_code", None), exc,
                    )
                    return [], attempt
                logger.warning(
                    "Holiday API call failed for %s/%s (attempt %s/%s): %s",
                    year, country_code, attempt, max_attempts, exc,
                )
            else:
                if entries:
                    logger.info("Fetched %s holidays for %s/%s from provider", len(entries), year, country_code)
                    return entries, attempt
                logger.warning(
                    "Holiday API returned no usable holidays for %s/%s (attempt %s/%s)",
                    year, country_code, attempt, max_attempts,
                )

            if attempt < max_attempts:
                await self._sleep(self.settings.retry_delay)

        logger.error("Holiday API retries exhausted for %s/%s", year, country_code)
        return [], max_attempts

    async def _persist(
        self,
        year: int,
        country_code: str,
        entries: List[HolidayCreate],
        state: SyncStateEnum,
        attempts: int,
    ) -> int:
        try:
            try:
                return await self._insert_missing(year, country_code, entries, state, attempts)
            except IntegrityError as exc:
                # Another writer stored some rows first; the second pass skips them
                logger.info("Concurrent holiday insert for %s/%s, re-checking: %s", year, country_code, exc.orig)
                return await self._insert_missing(year, country_code, entries, state, attempts)
        except SQLAlchemyError as exc:
            logger.exception("Holiday sync could not store %s/%s", year, country_code)
            raise HolidayStorageError(f"Failed to store holidays for {year}/{country_code}") from exc

    async def _insert_missing(
        self,
        year: int,
        country_code: str,
        entries: List[HolidayCreate],
        state: SyncStateEnum,
        attempts: int,
    ) -> int:
        """One unit of work: commits on success, rolls back everything on error."""
        inserted = 0
        skipped = []
        async with self.session_factory() as db:
            async with db.begin():
                store = HolidayStore(db)
                for entry in entries:
                    if await store.exists(entry.name, entry.holiday_date, entry.country_code):
                        skipped.append(entry.name)
                        continue
                    await store.insert(entry)
                    inserted += 1
                db.add(HolidaySyncLog(
                    year=year,
                    country_code=country_code,
                    state=state,
                    attempts=attempts,
                    inserted_count=inserted,
                    details={"source_count": len(entries), "skipped": skipped},
                ))
        return inserted
