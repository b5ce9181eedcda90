"""
SQLAlchemy Enum definitions
"""
import enum


class HolidayTypeEnum(str, enum.Enum):
    PUBLIC = "PUBLIC"
    NATIONAL = "NATIONAL"
    TRADITIONAL = "TRADITIONAL"
    RELIGIOUS = "RELIGIOUS"
    MEMORIAL = "MEMORIAL"
    SUBSTITUTE = "SUBSTITUTE"
    ANNIVERSARY = "ANNIVERSARY"


class SyncStateEnum(str, enum.Enum):
    UNSYNCED = "UNSYNCED"
    SYNCING = "SYNCING"
    SYNCED_FROM_PROVIDER = "SYNCED_FROM_PROVIDER"
    SYNCED_FROM_FALLBACK = "SYNCED_FROM_FALLBACK"
