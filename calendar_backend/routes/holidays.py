import logging
from datetime import date, datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from sqlalchemy.exc import SQLAlchemyError  # type: ignore
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore

from calendar_backend.db import get_db
from calendar_backend.models import HolidaySchema, HolidaySyncLogSchema
from calendar_backend.services.holiday_defaults import default_holidays_in_range
from calendar_backend.services.holiday_errors import HolidayStorageError
from calendar_backend.services.holiday_service import HolidayService
from calendar_backend.services.holiday_store import HolidayStore
from calendar_backend.services.holiday_sync import HolidaySyncEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/holidays", tags=["Holidays"])

# Widest range a single request may ask for; each year may trigger a provider sync
MAX_RANGE_YEARS = 5
# date() bounds
MIN_YEAR = 1
MAX_YEAR = 9999
FALLBACK_MESSAGE = "기본 공휴일 데이터를 제공합니다."


def get_holiday_sync_engine(request: Request) -> HolidaySyncEngine:
    return request.app.state.holiday_sync_engine


def get_holiday_service(
    db: AsyncSession = Depends(get_db),
    engine: HolidaySyncEngine = Depends(get_holiday_sync_engine),
) -> HolidayService:
    return HolidayService(db, engine)


def _fallback(start_date: date, end_date: date, country_code: str) -> List[HolidaySchema]:
    return [HolidaySchema(**h.model_dump()) for h in default_holidays_in_range(start_date, end_date, country_code)]


@router.get("/range")
async def get_holidays_by_date_range(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    country_code: str = Query("KR", alias="countryCode", min_length=2, max_length=2),
    service: HolidayService = Depends(get_holiday_service),
):
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="endDate must not be before startDate")
    if end_date.year - start_date.year >= MAX_RANGE_YEARS:
        raise HTTPException(status_code=400, detail=f"Range may span at most {MAX_RANGE_YEARS} years")

    country_code = country_code.upper()
    response = {"start_date": start_date.isoformat(), "end_date": end_date.isoformat(), "country_code": country_code}
    try:
        holidays = await service.get_by_date_range(start_date, end_date, country_code)
    except SQLAlchemyError as e:
        logger.error("Holiday range lookup failed: %s", e)
        holidays = _fallback(start_date, end_date, country_code)
        response.update(success=False, holidays=holidays, count=len(holidays), message=FALLBACK_MESSAGE)
        return response

    logger.info("Holiday range %s..%s %s: %s found", start_date, end_date, country_code, len(holidays))
    response.update(success=True, holidays=holidays, count=len(holidays))
    return response


@router.get("/date/{target_date}")
async def get_holidays_by_date(
    target_date: date,
    country_code: str = Query("KR", alias="countryCode", min_length=2, max_length=2),
    service: HolidayService = Depends(get_holiday_service),
):
    try:
        holidays = await service.get_by_date(target_date, country_code)
    except SQLAlchemyError as e:
        logger.error("Holiday date lookup failed: %s", e)
        raise HTTPException(status_code=500, detail="Holiday lookup failed")
    return {
        "success": True,
        "date": target_date.isoformat(),
        "holidays": holidays,
        "count": len(holidays),
        "is_holiday": bool(holidays),
    }


@router.get("/year/{year}")
async def get_holidays_by_year(
    year: int = Path(..., ge=MIN_YEAR, le=MAX_YEAR),
    country_code: str = Query("KR", alias="countryCode", min_length=2, max_length=2),
    service: HolidayService = Depends(get_holiday_service),
):
    country_code = country_code.upper()
    response = {"year": year, "country_code": country_code}
    try:
        holidays = await service.get_by_year(year, country_code)
    except SQLAlchemyError as e:
        logger.error("Holiday year lookup failed: %s", e)
        holidays = _fallback(date(year, 1, 1), date(year, 12, 31), country_code)
        response.update(success=False, holidays=holidays, count=len(holidays), message=FALLBACK_MESSAGE)
        return response

    logger.info("Holiday year %s %s: %s found", year, country_code, len(holidays))
    response.update(success=True, holidays=holidays, count=len(holidays))
    return response


@router.get("/month/{year}/{month}")
async def get_holidays_by_month(
    year: int = Path(..., ge=MIN_YEAR, le=MAX_YEAR),
    month: int = Path(...),
    country_code: str = Query("KR", alias="countryCode", min_length=2, max_length=2),
    service: HolidayService = Depends(get_holiday_service),
):
    if month < 1 or month > 12:
        raise HTTPException(status_code=400, detail="Month must be between 1 and 12")
    try:
        holidays = await service.get_by_month(year, month, country_code)
    except SQLAlchemyError as e:
        logger.error("Holiday month lookup failed: %s", e)
        raise HTTPException(status_code=500, detail="Holiday lookup failed")
    return {
        "success": True,
        "year": year,
        "month": month,
        "country_code": country_code.upper(),
        "holidays": holidays,
        "count": len(holidays),
    }


@router.get("/today")
async def get_today_holidays(
    country_code: str = Query("KR", alias="countryCode", min_length=2, max_length=2),
    service: HolidayService = Depends(get_holiday_service),
):
    holidays = await service.get_today(country_code)
    return {
        "success": True,
        "date": date.today().isoformat(),
        "holidays": holidays,
        "count": len(holidays),
        "is_holiday": bool(holidays),
    }


@router.get("/upcoming")
async def get_upcoming_holidays(
    days: int = Query(30, ge=1, le=366),
    country_code: str = Query("KR", alias="countryCode", min_length=2, max_length=2),
    service: HolidayService = Depends(get_holiday_service),
):
    holidays = await service.get_upcoming(days, country_code)
    return {"success": True, "days": days, "holidays": holidays, "count": len(holidays)}


@router.get("/stats/{year}")
async def get_holiday_statistics(
    year: int = Path(..., ge=MIN_YEAR, le=MAX_YEAR),
    country_code: str = Query("KR", alias="countryCode", min_length=2, max_length=2),
    service: HolidayService = Depends(get_holiday_service),
):
    stats = await service.get_statistics(year, country_code)
    return {"success": True, "statistics": stats}


@router.post("/sync/{year}")
async def sync_holidays(
    year: int = Path(..., ge=MIN_YEAR, le=MAX_YEAR),
    country_code: str = Query("KR", alias="countryCode", min_length=2, max_length=2),
    service: HolidayService = Depends(get_holiday_service),
):
    """Force a reconciliation run for one year (inserts only missing holidays)."""
    try:
        result = await service.sync_year(year, country_code)
    except HolidayStorageError as e:
        raise HTTPException(status_code=500, detail=f"Holiday sync failed: {str(e)}")
    return {"success": True, "result": result, "synced_at": datetime.utcnow().isoformat()}


@router.get("/sync/{year}/state")
async def get_sync_state(
    year: int = Path(..., ge=MIN_YEAR, le=MAX_YEAR),
    country_code: str = Query("KR", alias="countryCode", min_length=2, max_length=2),
    db: AsyncSession = Depends(get_db),
    engine: HolidaySyncEngine = Depends(get_holiday_sync_engine),
):
    country_code = country_code.upper()
    last_run = await HolidayStore(db).latest_sync_log(year, country_code)
    return {
        "year": year,
        "country_code": country_code,
        "state": engine.get_state(year, country_code),
        "last_run": HolidaySyncLogSchema.model_validate(last_run) if last_run else None,
    }
