from datetime import date

from calendar_backend.models import HolidayCreate, HolidaySyncLog, HolidayTypeEnum, SyncStateEnum
from calendar_backend.services.holiday_store import HolidayStore


def entry(name, holiday_date, holiday_type=HolidayTypeEnum.PUBLIC, country_code="KR"):
    return HolidayCreate(name=name, holiday_date=holiday_date, holiday_type=holiday_type, country_code=country_code)


async def seed(db, entries):
    store = HolidayStore(db)
    for e in entries:
        await store.insert(e)
    await db.commit()
    return store


async def test_insert_sets_timestamps_and_exists(db):
    store = HolidayStore(db)
    holiday = await store.insert(entry("광복절", date(2025, 8, 15), HolidayTypeEnum.NATIONAL))
    await db.commit()

    assert holiday.id is not None
    assert holiday.created_at is not None
    assert await store.exists("광복절", date(2025, 8, 15), "KR")
    assert not await store.exists("광복절", date(2025, 8, 15), "JP")
    assert not await store.exists("광복절", date(2024, 8, 15), "KR")


async def test_same_day_ordered_by_type_priority(db):
    store = await seed(db, [
        entry("부처님오신날", date(2025, 5, 5), HolidayTypeEnum.RELIGIOUS),
        entry("대체공휴일", date(2025, 5, 5), HolidayTypeEnum.SUBSTITUTE),
        entry("어린이날", date(2025, 5, 5), HolidayTypeEnum.PUBLIC),
        entry("근로자의날", date(2025, 5, 1), HolidayTypeEnum.ANNIVERSARY),
    ])

    holidays = await store.find_by_month(2025, 5, "KR")
    assert [h.name for h in holidays] == ["근로자의날", "어린이날", "대체공휴일", "부처님오신날"]


async def test_range_is_inclusive_and_country_scoped(db):
    store = await seed(db, [
        entry("신정", date(2025, 1, 1)),
        entry("삼일절", date(2025, 3, 1), HolidayTypeEnum.NATIONAL),
        entry("크리스마스", date(2025, 12, 25)),
        entry("New Year", date(2025, 1, 1), country_code="US"),
    ])

    holidays = await store.find_by_date_range(date(2025, 1, 1), date(2025, 3, 1), "KR")
    assert [h.name for h in holidays] == ["신정", "삼일절"]
    assert [h.name for h in await store.find_by_date(date(2025, 1, 1), "US")] == ["New Year"]
    assert await store.count_by_year(2025, "KR") == 3
    assert await store.count_by_year(2024, "KR") == 0


async def test_december_month_bounds(db):
    store = await seed(db, [entry("크리스마스", date(2025, 12, 25)), entry("신정", date(2026, 1, 1))])
    assert [h.name for h in await store.find_by_month(2025, 12, "KR")] == ["크리스마스"]


async def test_upcoming(db):
    store = await seed(db, [
        entry("광복절", date(2025, 8, 15), HolidayTypeEnum.NATIONAL),
        entry("개천절", date(2025, 10, 3), HolidayTypeEnum.NATIONAL),
    ])
    holidays = await store.find_upcoming(date(2025, 8, 1), 30, "KR")
    assert [h.name for h in holidays] == ["광복절"]


async def test_statistics(db):
    store = await seed(db, [
        entry("삼일절", date(2025, 3, 1), HolidayTypeEnum.NATIONAL),
        entry("광복절", date(2025, 8, 15), HolidayTypeEnum.NATIONAL),
        entry("크리스마스", date(2025, 12, 25)),
    ])

    stats = await store.statistics(2025, "KR")
    assert stats["total_count"] == 3
    assert stats["type_statistics"] == {"NATIONAL": 2, "PUBLIC": 1}
    assert stats["month_statistics"] == {3: 1, 8: 1, 12: 1}


async def test_latest_sync_log(db):
    db.add(HolidaySyncLog(year=2025, country_code="KR", state=SyncStateEnum.SYNCED_FROM_FALLBACK, attempts=3))
    db.add(HolidaySyncLog(year=2025, country_code="KR", state=SyncStateEnum.SYNCED_FROM_PROVIDER, attempts=1))
    await db.commit()

    last_run = await HolidayStore(db).latest_sync_log(2025, "KR")
    assert last_run.state == SyncStateEnum.SYNCED_FROM_PROVIDER
    assert await HolidayStore(db).latest_sync_log(2024, "KR") is None
