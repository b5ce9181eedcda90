"""
Models package for the calendar backend

SQLAlchemy ORM models and their Pydantic counterparts live in the same module.
"""

# Enums
from .enums import HolidayTypeEnum, SyncStateEnum

# SQLAlchemy Models
from .holiday import Holiday, HolidaySyncLog

# Pydantic Models
from .holiday import (
    HolidayBase,
    HolidayCreate,
    HolidaySchema,
    HolidaySyncLogSchema,
    HOLIDAY_TYPE_PRIORITY,
    HOLIDAY_TYPE_COLORS,
    HOLIDAY_TYPE_NAMES,
    UNRANKED_PRIORITY,
)

__all__ = [
    # Enums
    "HolidayTypeEnum",
    "SyncStateEnum",
    # SQLAlchemy Models
    "Holiday",
    "HolidaySyncLog",
    # Pydantic Models
    "HolidayBase",
    "HolidayCreate",
    "HolidaySchema",
    "HolidaySyncLogSchema",
    # Lookup tables
    "HOLIDAY_TYPE_PRIORITY",
    "HOLIDAY_TYPE_COLORS",
    "HOLIDAY_TYPE_NAMES",
    "UNRANKED_PRIORITY",
]
