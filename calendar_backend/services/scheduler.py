import logging
import datetime
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from calendar_backend.services.holiday_sync import HolidaySyncEngine

logger = logging.getLogger(__name__)
scheduler = AsyncIOScheduler()

WARMUP_JOB_ID = "holiday_warmup"
REFRESH_JOB_ID = "holiday_monthly_refresh"


def warmup_years(today: datetime.date = None):
    """Current year first, then next year, then last year."""
    current_year = (today or datetime.date.today()).year
    return [current_year, current_year + 1, current_year - 1]


async def warmup_holidays(engine: HolidaySyncEngine, country_code: str = None):
    """
    Make sure recent years have holiday data.
    Each year is handled on its own; a failure is logged and the next year still runs.
    """
    country_code = country_code or engine.settings.default_country_code
    logger.info("Holiday warmup started for %s", country_code)

    for year in warmup_years():
        try:
            result = await engine.sync_if_insufficient(year, country_code)
            if result is not None:
                logger.info(
                    "Holiday warmup %s/%s: %s, %s new record(s)",
                    year, country_code, result.state.value, result.inserted_count,
                )
        except Exception:
            logger.exception("Holiday warmup failed for %s/%s", year, country_code)

    logger.info("Holiday warmup complete")
    return None


def start_scheduler(engine: HolidaySyncEngine):
    # One-shot warmup right after startup; runs on the event loop, does not block lifespan
    if engine.settings.warmup_enabled:
        scheduler.add_job(
            warmup_holidays, 'date', args=[engine],
            id=WARMUP_JOB_ID, replace_existing=True, misfire_grace_time=60,
        )

    # Trigger: 1st day of month at 03:00, picks up next year's data once the provider publishes it
    scheduler.add_job(
        warmup_holidays, 'cron', day=1, hour=3, minute=0, args=[engine],
        id=REFRESH_JOB_ID, replace_existing=True,
    )

    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started")


def shutdown_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shutdown")
