"""
Holiday SQLAlchemy models
"""
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Enum as SQLEnum, JSON, Index, UniqueConstraint, text  # type: ignore
from datetime import datetime, date
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, computed_field
from calendar_backend.db import Base
from calendar_backend.models.enums import HolidayTypeEnum, SyncStateEnum


# Display ordering within a day: national days first, anything unranked last
HOLIDAY_TYPE_PRIORITY = {
    HolidayTypeEnum.NATIONAL: 1,
    HolidayTypeEnum.PUBLIC: 2,
    HolidayTypeEnum.SUBSTITUTE: 3,
    HolidayTypeEnum.MEMORIAL: 4,
    HolidayTypeEnum.ANNIVERSARY: 5,
}
UNRANKED_PRIORITY = 999

HOLIDAY_TYPE_COLORS = {
    HolidayTypeEnum.NATIONAL: "#4285F4",
    HolidayTypeEnum.PUBLIC: "#FF6B6B",
    HolidayTypeEnum.SUBSTITUTE: "#FF9800",
    HolidayTypeEnum.TRADITIONAL: None,
    HolidayTypeEnum.RELIGIOUS: None,
    HolidayTypeEnum.MEMORIAL: "#9C27B0",
    HolidayTypeEnum.ANNIVERSARY: "#607D8B",
}

HOLIDAY_TYPE_NAMES = {
    HolidayTypeEnum.NATIONAL: "국경일",
    HolidayTypeEnum.PUBLIC: "공휴일",
    HolidayTypeEnum.SUBSTITUTE: "대체공휴일",
    HolidayTypeEnum.MEMORIAL: "기념일",
}
OTHER_TYPE_NAME = "기타"

KOREAN_WEEKDAYS = ("월요일", "화요일", "수요일", "목요일", "금요일", "토요일", "일요일")


class Holiday(Base):
    """Holidays table"""
    __tablename__ = "holidays"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    holiday_date = Column(Date, nullable=False)
    country_code = Column(String(2), nullable=False, default="KR")
    holiday_type = Column(SQLEnum(HolidayTypeEnum), nullable=False, default=HolidayTypeEnum.PUBLIC)
    description = Column(String(500), nullable=True)
    is_recurring = Column(Boolean, nullable=False, default=False, comment="Same month/day every year")
    color = Column(String(7), nullable=True, comment="Display color derived from holiday_type")
    created_at = Column(DateTime, default=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"))

    __table_args__ = (
        UniqueConstraint("name", "holiday_date", "country_code", name="uq_holiday_name_date_country"),
        Index("idx_holiday_date", "holiday_date"),
        Index("idx_holiday_country", "country_code"),
        Index("idx_holiday_type", "holiday_type"),
        Index("idx_holiday_country_date", "country_code", "holiday_date"),
    )

    def __repr__(self) -> str:
        return f"<Holiday id={self.id} name={self.name!r} date={self.holiday_date} type={self.holiday_type} country={self.country_code}>"


class HolidaySyncLog(Base):
    """One row per completed holiday synchronization"""
    __tablename__ = "holiday_sync_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    year = Column(Integer, nullable=False)
    country_code = Column(String(2), nullable=False)
    state = Column(SQLEnum(SyncStateEnum), nullable=False)
    attempts = Column(Integer, nullable=False, default=0, comment="Provider calls made")
    inserted_count = Column(Integer, nullable=False, default=0)
    details = Column(JSON, nullable=True, comment="Result summary as JSON")
    executed_at = Column(DateTime, default=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"))

    __table_args__ = (
        Index("idx_sync_year_country", "year", "country_code"),
        Index("idx_sync_executed_at", "executed_at"),
    )


# Pydantic Models (for API request/response)

class HolidayBase(BaseModel):
    """Base holiday model"""
    name: str = Field(..., min_length=1, max_length=100)
    holiday_date: date
    country_code: str = Field("KR", min_length=2, max_length=2)
    holiday_type: HolidayTypeEnum = HolidayTypeEnum.PUBLIC
    description: Optional[str] = Field(None, max_length=500)
    is_recurring: bool = False
    color: Optional[str] = "#FF6B6B"


class HolidayCreate(HolidayBase):
    """Normalized holiday entry ready to be stored (provider or fallback)"""
    pass


class HolidaySchema(HolidayBase):
    """Model for holiday response"""
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @computed_field
    @property
    def priority(self) -> int:
        return HOLIDAY_TYPE_PRIORITY.get(self.holiday_type, UNRANKED_PRIORITY)

    @computed_field
    @property
    def holiday_type_name(self) -> str:
        return HOLIDAY_TYPE_NAMES.get(self.holiday_type, OTHER_TYPE_NAME)

    @computed_field
    @property
    def month_day(self) -> str:
        return f"{self.holiday_date.month:02d}-{self.holiday_date.day:02d}"

    @computed_field
    @property
    def day_of_week(self) -> str:
        return KOREAN_WEEKDAYS[self.holiday_date.weekday()]

    @computed_field
    @property
    def short_name(self) -> str:
        if len(self.name) <= 5:
            return self.name
        return self.name[:4] + ".."


class HolidaySyncLogSchema(BaseModel):
    """Model for holiday_sync_logs table"""
    id: Optional[int] = None
    year: int
    country_code: str
    state: SyncStateEnum
    attempts: int = 0
    inserted_count: int = 0
    details: Optional[Dict[str, Any]] = Field(default_factory=dict)
    executed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
