"""
Built-in holidays used when the public data provider cannot be reached.
Only fixed solar-calendar days are listed, so every entry recurs yearly.
"""
from datetime import date
from typing import List

from calendar_backend.models import HOLIDAY_TYPE_COLORS, HolidayCreate, HolidayTypeEnum

# (month, day, name, type, description)
DEFAULT_KOREAN_HOLIDAYS = (
    (1, 1, "신정", HolidayTypeEnum.PUBLIC, "새해 첫날"),
    (3, 1, "삼일절", HolidayTypeEnum.NATIONAL, "3·1 독립운동 기념일"),
    (5, 5, "어린이날", HolidayTypeEnum.PUBLIC, "어린이날"),
    (6, 6, "현충일", HolidayTypeEnum.MEMORIAL, "호국영령을 추모하는 날"),
    (8, 15, "광복절", HolidayTypeEnum.NATIONAL, "일제강점기 해방 기념일"),
    (10, 3, "개천절", HolidayTypeEnum.NATIONAL, "단군왕검이 고조선을 건국한 날"),
    (10, 9, "한글날", HolidayTypeEnum.NATIONAL, "한글 창제를 기념하는 날"),
    (12, 25, "크리스마스", HolidayTypeEnum.PUBLIC, "예수 그리스도의 탄생을 기념하는 날"),
)

DEFAULT_HOLIDAYS_BY_COUNTRY = {
    "KR": DEFAULT_KOREAN_HOLIDAYS,
}


def generate_default_holidays(year: int, country_code: str = "KR") -> List[HolidayCreate]:
    """Fallback holidays for a year. Unsupported countries get an empty list."""
    table = DEFAULT_HOLIDAYS_BY_COUNTRY.get(country_code.upper(), ())
    return [
        HolidayCreate(
            name=name,
            holiday_date=date(year, month, day),
            country_code=country_code.upper(),
            holiday_type=holiday_type,
            description=description,
            is_recurring=True,
            color=HOLIDAY_TYPE_COLORS.get(holiday_type),
        )
        for month, day, name, holiday_type, description in table
    ]


def default_holidays_in_range(start_date: date, end_date: date, country_code: str = "KR") -> List[HolidayCreate]:
    """Fallback holidays for every year the range touches, clipped to the range."""
    holidays = []
    for year in range(start_date.year, end_date.year + 1):
        for holiday in generate_default_holidays(year, country_code):
            if start_date <= holiday.holiday_date <= end_date:
                holidays.append(holiday)
    return holidays
