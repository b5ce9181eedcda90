from datetime import date

import pytest

from calendar_backend.models import HolidayTypeEnum
from calendar_backend.services.holiday_errors import HolidayParseError
from calendar_backend.services.holiday_parser import (
    classify_holiday_type,
    is_recurring_holiday,
    parse_holiday_item,
    parse_holiday_response,
)
from tests.conftest import KR_2025_ITEMS, make_item, make_payload


class TestClassification:
    @pytest.mark.parametrize("name, expected", [
        ("광복절", HolidayTypeEnum.NATIONAL),
        ("삼일절", HolidayTypeEnum.NATIONAL),
        ("개천절", HolidayTypeEnum.NATIONAL),
        ("한글날", HolidayTypeEnum.NATIONAL),
        ("현충일", HolidayTypeEnum.MEMORIAL),
        ("대체공휴일", HolidayTypeEnum.SUBSTITUTE),
        ("임시공휴일", HolidayTypeEnum.SUBSTITUTE),
        ("설날", HolidayTypeEnum.PUBLIC),
        ("크리스마스", HolidayTypeEnum.PUBLIC),
    ])
    def test_classify_by_name(self, name, expected):
        assert classify_holiday_type(name) == expected

    @pytest.mark.parametrize("name, recurring", [
        ("설날", False),
        ("추석", False),
        ("부처님오신날", False),
        ("대체공휴일", False),
        ("광복절", True),
        ("어린이날", True),
    ])
    def test_recurring(self, name, recurring):
        assert is_recurring_holiday(name) is recurring

    def test_liberation_day_is_always_national_blue(self):
        for _ in range(3):
            entry = parse_holiday_item(make_item("광복절", 20250815), 2025)
            assert entry.holiday_type == HolidayTypeEnum.NATIONAL
            assert entry.color == "#4285F4"


class TestParseResponse:
    def test_full_year(self):
        entries = parse_holiday_response(make_payload(KR_2025_ITEMS), 2025)
        assert len(entries) == 15
        first = entries[0]
        assert first.name == "1월1일"
        assert first.holiday_date == date(2025, 1, 1)
        assert first.country_code == "KR"
        assert first.description == "공공데이터에서 동기화된 1월1일"

    def test_single_object_and_one_element_list_are_identical(self):
        item = make_item("광복절", 20250815)
        from_object = parse_holiday_response(make_payload(item), 2025)
        from_list = parse_holiday_response(make_payload([item]), 2025)
        assert from_object == from_list
        assert len(from_object) == 1

    def test_empty_items_string(self):
        assert parse_holiday_response(make_payload(""), 2030) == []

    def test_locdate_as_string(self):
        entries = parse_holiday_response(make_payload([make_item("한글날", "20251009")]), 2025)
        assert entries[0].holiday_date == date(2025, 10, 9)

    def test_bad_items_are_skipped(self):
        items = [
            make_item("", 20250101),
            {"dateName": "현충일"},
            make_item("현충일", 20250231),
            make_item("현충일", "2025-06-06"),
            "not-an-object",
            make_item("광복절", 20250815),
        ]
        entries = parse_holiday_response(make_payload(items), 2025)
        assert [e.name for e in entries] == ["광복절"]

    def test_non_day_off_and_other_year_skipped(self):
        items = [
            make_item("제헌절", 20250717, is_holiday="N"),
            make_item("신정", 20260101),
            make_item("크리스마스", 20251225),
        ]
        entries = parse_holiday_response(make_payload(items), 2025)
        assert [e.name for e in entries] == ["크리스마스"]

    def test_error_result_code(self):
        raw = make_payload([], result_code="30", result_msg="SERVICE_KEY_IS_NOT_REGISTERED_ERROR")
        with pytest.raises(HolidayParseError, match="SERVICE_KEY_IS_NOT_REGISTERED_ERROR"):
            parse_holiday_response(raw, 2025)

    @pytest.mark.parametrize("raw", ["<OpenAPI_ServiceResponse/>", "[]", "", '{"response": {}}'])
    def test_unreadable_body(self, raw):
        with pytest.raises(HolidayParseError):
            parse_holiday_response(raw, 2025)

    def test_over_long_name_is_skipped(self):
        items = [make_item("가" * 101, 20251225), make_item("크리스마스", 20251225)]
        entries = parse_holiday_response(make_payload(items), 2025)
        assert [e.name for e in entries] == ["크리스마스"]
