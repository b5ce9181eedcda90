"""
Holiday synchronization settings.
Values come from the environment (.env is loaded via python-dotenv), same as the database settings in db.py.
"""
import os
from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

DEFAULT_COUNTRY_CODE = "KR"
DEFAULT_HOLIDAY_API_BASE_URL = "http://apis.data.go.kr/B090041/openapi/service/SpcdeInfoService"


class HolidaySyncSettings(BaseModel):
    """Knobs for the public data provider and the reconciliation engine"""
    api_base_url: str = DEFAULT_HOLIDAY_API_BASE_URL
    service_key: str = ""
    timeout: float = Field(10.0, gt=0, description="Connect/read timeout in seconds")
    max_attempts: int = Field(3, ge=1, description="Provider calls per sync before falling back")
    retry_delay: float = Field(2.0, ge=0, description="Seconds to wait between attempts")
    min_expected_holidays: int = Field(8, ge=0, description="Below this count a read triggers a sync")
    default_country_code: str = DEFAULT_COUNTRY_CODE
    warmup_enabled: bool = True

    @classmethod
    def from_env(cls) -> "HolidaySyncSettings":
        return cls(
            api_base_url=os.getenv("HOLIDAY_API_BASE_URL", DEFAULT_HOLIDAY_API_BASE_URL),
            service_key=os.getenv("HOLIDAY_API_SERVICE_KEY", ""),
            timeout=os.getenv("HOLIDAY_API_TIMEOUT", 10),
            max_attempts=os.getenv("HOLIDAY_API_MAX_ATTEMPTS", 3),
            retry_delay=os.getenv("HOLIDAY_API_RETRY_DELAY", 2),
            min_expected_holidays=os.getenv("HOLIDAY_MIN_EXPECTED", 8),
            default_country_code=os.getenv("HOLIDAY_DEFAULT_COUNTRY", DEFAULT_COUNTRY_CODE).upper(),
            warmup_enabled=os.getenv("HOLIDAY_WARMUP_ENABLED", "true"),
        )
