"""
Errors raised while synchronizing holidays from the public data provider.

Provider and parse errors are recovered inside the sync engine (retry, then
fallback dataset). Only HolidayStorageError leaves HolidaySyncEngine.sync().
"""
from typing import Optional


class HolidaySyncError(Exception):
    """Base class for holiday synchronization errors"""
    retryable = False


class PublicDataApiError(HolidaySyncError):
    """The public data provider call failed"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProviderTimeout(PublicDataApiError):
    """Connect or read timeout"""
    retryable = True


class ProviderServerFailure(PublicDataApiError):
    """5xx, empty body or transport failure"""
    retryable = True


class ProviderRejected(PublicDataApiError):
    """4xx: bad parameters or service key. Retrying will not help."""
    retryable = False


class HolidayParseError(HolidaySyncError):
    """Payload-level failure: bad resultCode or unreadable body"""
    retryable = True


class HolidayStorageError(HolidaySyncError):
    """Persisting synchronized holidays failed"""
