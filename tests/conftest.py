import json
import os
from typing import AsyncGenerator, Dict, List, Optional

# Must be set before calendar_backend.db creates its engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("HOLIDAY_WARMUP_ENABLED", "false")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from calendar_backend.config import HolidaySyncSettings
from calendar_backend.db import Base
import calendar_backend.models  # noqa: F401
from calendar_backend.services.holiday_sync import HolidaySyncEngine


def make_item(name: str, locdate, is_holiday: str = "Y") -> Dict:
    return {"dateKind": "01", "dateName": name, "isHoliday": is_holiday, "locdate": locdate, "seq": 1}


def make_payload(items, result_code: str = "00", result_msg: str = "NORMAL SERVICE.") -> str:
    """getRestDeInfo JSON body; items may be a list, a single dict or ''."""
    if isinstance(items, list):
        total = len(items)
        items_node = {"item": items} if items else ""
    elif isinstance(items, dict):
        total = 1
        items_node = {"item": items}
    else:
        total = 0
        items_node = items
    return json.dumps({
        "response": {
            "header": {"resultCode": result_code, "resultMsg": result_msg},
            "body": {"items": items_node, "numOfRows": 100, "pageNo": 1, "totalCount": total},
        }
    }, ensure_ascii=False)


# 15 day-off entries published for 2025
KR_2025_ITEMS = [
    make_item("1월1일", 20250101),
    make_item("설날", 20250128),
    make_item("설날", 20250129),
    make_item("설날", 20250130),
    make_item("삼일절", 20250301),
    make_item("대체공휴일", 20250303),
    make_item("어린이날", 20250505),
    make_item("부처님오신날", 20250505),
    make_item("대체공휴일", 20250506),
    make_item("현충일", 20250606),
    make_item("광복절", 20250815),
    make_item("추석", 20251006),
    make_item("개천절", 20251003),
    make_item("대체공휴일", 20251008),
    make_item("한글날", 20251009),
]


class FakeProviderClient:
    """Stands in for PublicDataClient. Each fetch() pops the next scripted outcome."""

    def __init__(self, settings: HolidaySyncSettings, outcomes: Optional[List] = None):
        self.settings = settings
        self.outcomes = list(outcomes or [])
        self.calls: List = []
        self.gate = None

    async def fetch(self, year: int, country_code: str = "KR") -> str:
        self.calls.append((year, country_code))
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def settings() -> HolidaySyncSettings:
    return HolidaySyncSettings(
        service_key="test-key",
        api_base_url="http://provider.test/SpcdeInfoService",
        max_attempts=3,
        retry_delay=2.0,
        min_expected_holidays=8,
        warmup_enabled=False,
    )


@pytest.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'holidays.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    await engine.dispose()


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def provider(settings) -> FakeProviderClient:
    return FakeProviderClient(settings, [make_payload(KR_2025_ITEMS)])


@pytest.fixture
def sync_engine(provider, session_factory, settings, sleep) -> HolidaySyncEngine:
    return HolidaySyncEngine(provider, session_factory, settings, sleep=sleep)
