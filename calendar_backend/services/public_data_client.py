"""
HTTP client for the data.go.kr special-day service (SpcdeInfoService/getRestDeInfo).
Classifies failures into ProviderTimeout / ProviderRejected / ProviderServerFailure.
"""
import logging
from typing import Optional

import httpx  # type: ignore

from calendar_backend.config import HolidaySyncSettings
from calendar_backend.services.holiday_errors import (
    ProviderRejected,
    ProviderServerFailure,
    ProviderTimeout,
)

logger = logging.getLogger(__name__)

# The provider only publishes Korean holidays
SUPPORTED_COUNTRIES = frozenset({"KR"})
HOLIDAY_ENDPOINT = "getRestDeInfo"
MAX_ROWS = 100

_REJECTION_MESSAGES = {
    400: "Bad request. Check the API parameters.",
    401: "Authentication failed. Check the service key.",
    403: "Access forbidden. Check the API permissions.",
    404: "Requested resource not found.",
    429: "API quota exceeded. Try again later.",
}


def _rejection_message(status_code: int) -> str:
    return _REJECTION_MESSAGES.get(status_code, f"Holiday API rejected the request (status {status_code})")


class PublicDataClient:
    """One outbound call per fetch(); no retries here (the sync engine owns those)."""

    def __init__(
        self,
        settings: HolidaySyncSettings,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings
        self.endpoint = f"{settings.api_base_url.rstrip('/')}/{HOLIDAY_ENDPOINT}"
        self._client = client

    async def fetch(self, year: int, country_code: str = "KR") -> str:
        """Return the raw JSON body for the given year."""
        if country_code.upper() not in SUPPORTED_COUNTRIES:
            raise ProviderRejected(f"Holiday API does not cover country {country_code}")

        params = {
            "serviceKey": self.settings.service_key,
            "solYear": str(year),
            "numOfRows": MAX_ROWS,
            "_type": "json",
        }
        timeout = httpx.Timeout(self.settings.timeout)
        logger.debug("Calling holiday API year=%s endpoint=%s", year, self.endpoint)

        try:
            if self._client is not None:
                response = await self._client.get(self.endpoint, params=params, timeout=timeout)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.get(self.endpoint, params=params)
        except httpx.TimeoutException as exc:
            raise ProviderTimeout(f"Holiday API timed out after {self.settings.timeout}s") from exc
        except httpx.HTTPError as exc:
            raise ProviderServerFailure(f"Holiday API transport error: {exc}") from exc

        status_code = response.status_code
        if 400 <= status_code < 500:
            logger.warning("Holiday API error status=%s reason=%s", status_code, response.reason_phrase)
            raise ProviderRejected(_rejection_message(status_code), status_code=status_code)
        if status_code >= 500:
            logger.warning("Holiday API error status=%s reason=%s", status_code, response.reason_phrase)
            raise ProviderServerFailure(f"Holiday API server error (status {status_code})", status_code=status_code)

        body = response.text
        if not body or not body.strip():
            raise ProviderServerFailure("Holiday API returned an empty body", status_code=status_code)
        return body
