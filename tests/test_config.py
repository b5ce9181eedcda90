import pytest
from pydantic import ValidationError

from calendar_backend.config import DEFAULT_HOLIDAY_API_BASE_URL, HolidaySyncSettings


def test_defaults(monkeypatch):
    for name in ("HOLIDAY_API_BASE_URL", "HOLIDAY_API_SERVICE_KEY", "HOLIDAY_API_MAX_ATTEMPTS",
                 "HOLIDAY_API_RETRY_DELAY", "HOLIDAY_MIN_EXPECTED", "HOLIDAY_DEFAULT_COUNTRY",
                 "HOLIDAY_API_TIMEOUT", "HOLIDAY_WARMUP_ENABLED"):
        monkeypatch.delenv(name, raising=False)

    settings = HolidaySyncSettings.from_env()

    assert settings.api_base_url == DEFAULT_HOLIDAY_API_BASE_URL
    assert settings.max_attempts == 3
    assert settings.retry_delay == 2.0
    assert settings.timeout == 10.0
    assert settings.min_expected_holidays == 8
    assert settings.default_country_code == "KR"
    assert settings.warmup_enabled is True


def test_from_env(monkeypatch):
    monkeypatch.setenv("HOLIDAY_API_SERVICE_KEY", "abc")
    monkeypatch.setenv("HOLIDAY_API_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("HOLIDAY_API_RETRY_DELAY", "0.5")
    monkeypatch.setenv("HOLIDAY_DEFAULT_COUNTRY", "kr")
    monkeypatch.setenv("HOLIDAY_WARMUP_ENABLED", "false")

    settings = HolidaySyncSettings.from_env()

    assert settings.service_key == "abc"
    assert settings.max_attempts == 5
    assert settings.retry_delay == 0.5
    assert settings.default_country_code == "KR"
    assert settings.warmup_enabled is False


def test_max_attempts_must_be_positive(monkeypatch):
    monkeypatch.setenv("HOLIDAY_API_MAX_ATTEMPTS", "0")
    with pytest.raises(ValidationError):
        HolidaySyncSettings.from_env()
