"""
Parse SpcdeInfoService JSON into normalized HolidayCreate entries.

Holiday type and recurrence are guessed from the Korean display name.
This only works while the provider keeps its current naming; a renamed
holiday silently falls back to PUBLIC / recurring.
"""
import json
import logging
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from calendar_backend.models import HOLIDAY_TYPE_COLORS, HolidayCreate, HolidayTypeEnum
from calendar_backend.services.holiday_errors import HolidayParseError

logger = logging.getLogger(__name__)

SUCCESS_RESULT_CODE = "00"
SYNC_DESCRIPTION = "공공데이터에서 동기화된 {name}"

NATIONAL_KEYWORDS = ("삼일절", "광복절", "개천절", "한글날")
MEMORIAL_KEYWORDS = ("현충일",)
SUBSTITUTE_KEYWORDS = ("대체", "임시")
# Lunar-calendar holidays move every year
LUNAR_KEYWORDS = ("설날", "추석", "석가탄신일", "부처님오신날")

_LOCDATE_RE = re.compile(r"^\d{8}$")


def classify_holiday_type(name: str) -> HolidayTypeEnum:
    if any(keyword in name for keyword in NATIONAL_KEYWORDS):
        return HolidayTypeEnum.NATIONAL
    if any(keyword in name for keyword in MEMORIAL_KEYWORDS):
        return HolidayTypeEnum.MEMORIAL
    if any(keyword in name for keyword in SUBSTITUTE_KEYWORDS):
        return HolidayTypeEnum.SUBSTITUTE
    return HolidayTypeEnum.PUBLIC


def is_recurring_holiday(name: str) -> bool:
    """False for lunar-calendar holidays and substitute/temporary days."""
    return not any(keyword in name for keyword in LUNAR_KEYWORDS + SUBSTITUTE_KEYWORDS)


def color_for_type(holiday_type: HolidayTypeEnum) -> Optional[str]:
    return HOLIDAY_TYPE_COLORS.get(holiday_type)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _extract_items(body: Dict[str, Any]) -> List[Any]:
    # items is "" when the year has no data; item is an object when there is exactly one
    item = _as_dict(body.get("items")).get("item")
    if isinstance(item, list):
        return item
    if isinstance(item, dict):
        return [item]
    return []


def _parse_locdate(value: Any) -> Optional[date]:
    if value is None:
        return None
    text = str(value).strip()
    if not _LOCDATE_RE.match(text):
        return None
    try:
        return datetime.strptime(text, "%Y%m%d").date()
    except ValueError:
        return None


def parse_holiday_item(item: Any, year: int, country_code: str = "KR") -> Optional[HolidayCreate]:
    """
    Normalize one provider item. Returns None when the item should be skipped.

    Skipped: non-objects, a missing name or unparseable locdate, a date outside
    the requested year, isHoliday == "N" (observances that are not days off),
    and values the HolidayCreate model rejects (e.g. a name over 100 chars).
    """
    if not isinstance(item, dict):
        logger.warning("Skipping holiday item that is not an object: %r", item)
        return None

    name = str(item.get("dateName") or "").strip()
    holiday_date = _parse_locdate(item.get("locdate"))
    if not name or holiday_date is None:
        logger.warning("Skipping holiday item with missing name/date: %r", item)
        return None
    if holiday_date.year != year:
        logger.warning("Skipping holiday %s dated %s outside requested year %s", name, holiday_date, year)
        return None
    if str(item.get("isHoliday", "Y")).strip().upper() == "N":
        logger.debug("Skipping non day-off observance %s (%s)", name, holiday_date)
        return None

    holiday_type = classify_holiday_type(name)
    try:
        return HolidayCreate(
            name=name,
            holiday_date=holiday_date,
            country_code=country_code,
            holiday_type=holiday_type,
            description=SYNC_DESCRIPTION.format(name=name),
            is_recurring=is_recurring_holiday(name),
            color=color_for_type(holiday_type),
        )
    except ValidationError as exc:
        logger.warning("Skipping invalid holiday item %r: %s", item, exc)
        return None


def parse_holiday_response(raw: str, year: int, country_code: str = "KR") -> List[HolidayCreate]:
    """
    Parse a getRestDeInfo JSON body.

    Raises HolidayParseError when the body is unreadable or the header
    resultCode is not "00". Bad individual items are skipped.
    """
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise HolidayParseError("Failed to parse holiday API response") from exc
    if not isinstance(payload, dict):
        raise HolidayParseError("Holiday API response is not a JSON object")

    response = _as_dict(payload.get("response"))
    header = _as_dict(response.get("header"))
    result_code = str(header.get("resultCode") or "").strip()
    if result_code != SUCCESS_RESULT_CODE:
        result_msg = header.get("resultMsg") or "Unknown error"
        raise HolidayParseError(f"Holiday API error {result_code or 'missing'}: {result_msg}")

    holidays = []
    for item in _extract_items(_as_dict(response.get("body"))):
        entry = parse_holiday_item(item, year, country_code)
        if entry is not None:
            holidays.append(entry)
    return holidays
