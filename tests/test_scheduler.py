import datetime

from calendar_backend.config import HolidaySyncSettings
from calendar_backend.models import SyncStateEnum
from calendar_backend.services import scheduler as holiday_scheduler
from calendar_backend.services.holiday_errors import HolidayStorageError
from calendar_backend.services.holiday_sync import SyncResult


class FakeEngine:
    def __init__(self, failing_years=()):
        self.settings = HolidaySyncSettings(warmup_enabled=True)
        self.failing_years = set(failing_years)
        self.calls = []

    async def sync_if_insufficient(self, year, country_code=None):
        self.calls.append((year, country_code))
        if year in self.failing_years:
            raise HolidayStorageError(f"Failed to store holidays for {year}/{country_code}")
        return SyncResult(
            year=year, country_code=country_code, state=SyncStateEnum.SYNCED_FROM_PROVIDER,
            attempts=1, source_count=15, inserted_count=15,
        )


def test_warmup_years_order():
    assert holiday_scheduler.warmup_years(datetime.date(2025, 6, 1)) == [2025, 2026, 2024]


async def test_warmup_covers_current_next_previous():
    engine = FakeEngine()
    current = datetime.date.today().year

    await holiday_scheduler.warmup_holidays(engine)

    assert engine.calls == [(current, "KR"), (current + 1, "KR"), (current - 1, "KR")]


async def test_warmup_failure_does_not_stop_other_years():
    current = datetime.date.today().year
    engine = FakeEngine(failing_years={current})

    await holiday_scheduler.warmup_holidays(engine, "KR")

    assert [year for year, _ in engine.calls] == [current, current + 1, current - 1]


async def test_start_scheduler_registers_jobs(monkeypatch):
    engine = FakeEngine()
    started = []
    monkeypatch.setattr(holiday_scheduler.scheduler, "start", lambda: started.append(True))

    holiday_scheduler.start_scheduler(engine)
    try:
        warmup_job = holiday_scheduler.scheduler.get_job(holiday_scheduler.WARMUP_JOB_ID)
        refresh_job = holiday_scheduler.scheduler.get_job(holiday_scheduler.REFRESH_JOB_ID)
        assert warmup_job is not None
        assert warmup_job.args == (engine,)
        assert refresh_job is not None
        assert started == [True]
    finally:
        holiday_scheduler.scheduler.remove_all_jobs()


async def test_start_scheduler_without_warmup(monkeypatch):
    engine = FakeEngine()
    engine.settings = HolidaySyncSettings(warmup_enabled=False)
    monkeypatch.setattr(holiday_scheduler.scheduler, "start", lambda: None)

    holiday_scheduler.start_scheduler(engine)
    try:
        assert holiday_scheduler.scheduler.get_job(holiday_scheduler.WARMUP_JOB_ID) is None
        assert holiday_scheduler.scheduler.get_job(holiday_scheduler.REFRESH_JOB_ID) is not None
    finally:
        holiday_scheduler.scheduler.remove_all_jobs()
