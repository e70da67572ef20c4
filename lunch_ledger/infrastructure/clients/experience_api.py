"""Experience API HTTP client - Transaction and Preference Source over HTTP"""

import asyncio
import httpx
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from lunch_ledger.domain.models import Preferences, TransactionRecord
from lunch_ledger.domain.exceptions import SourceUnavailableError
from lunch_ledger.config import settings


class HttpExperienceSource:
    """Client for the experience log service (read-only)"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_attempts: int | None = None,
        backoff_base: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.experience_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_attempts = max_attempts or settings.http_max_attempts
        self.backoff_base = settings.http_backoff_base if backoff_base is None else backoff_base
        self._transport = transport

    async def query_by_date_range(self, user_id: str, start: date, end: date) -> List[TransactionRecord]:
        """
        Fetch experiences logged on start <= day < end.

        Raises:
            SourceUnavailableError: On timeout, HTTP errors, or invalid response
        """
        data = await self._get(
            f"/users/{user_id}/experiences",
            params={"start": start.isoformat(), "end": end.isoformat()},
        )
        return self._parse_experiences(data)

    async def query_all(self, user_id: str) -> List[TransactionRecord]:
        """Fetch the user's complete experience history"""
        data = await self._get(f"/users/{user_id}/experiences")
        return self._parse_experiences(data)

    async def get_preferences(self, user_id: Optional[str]) -> Optional[Preferences]:
        """Fetch the budget profile; None when no user is signed in or no profile exists"""
        if user_id is None:
            return None

        data = await self._get(f"/users/{user_id}/preferences", allow_missing=True)
        if data is None:
            return None

        try:
            return Preferences(
                weekly_capacity_cents=int(data["weekly_budget_cents"]),
                meal_frequency_per_day=int(data["meal_frequency_per_day"]),
                budget_level=int(data["budget_level"]),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise SourceUnavailableError(f"Invalid preference data from experience API: {e}") from e

    async def _get(
        self,
        path: str,
        params: Dict[str, str] | None = None,
        allow_missing: bool = False,
    ) -> Any:
        """
        GET with retry on network failures and 5xx responses.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base ... between attempts
        - 4xx responses fail immediately (404 returns None when allow_missing)
        """
        attempt = 0
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport) as client:
            while True:
                try:
                    response = await client.get(path, params=params)
                    if allow_missing and response.status_code == 404:
                        return None
                    response.raise_for_status()
                    return response.json()

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    retryable = not isinstance(e, httpx.HTTPStatusError) or e.response.status_code >= 500

                    if not retryable or attempt >= self.max_attempts:
                        raise SourceUnavailableError(self._describe(e)) from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)

                except ValueError as e:
                    raise SourceUnavailableError(f"Invalid JSON from experience API: {e}") from e

    def _describe(self, error: Exception) -> str:
        if isinstance(error, httpx.TimeoutException):
            return f"Experience API timeout after {self.timeout}s"
        if isinstance(error, httpx.HTTPStatusError):
            return f"Experience API error: {error.response.status_code}"
        return f"Experience API unreachable: {error}"

    @staticmethod
    def _parse_experiences(data: Any) -> List[TransactionRecord]:
        try:
            return [
                TransactionRecord(
                    id=str(item["id"]),
                    cost_cents=int(item["cost_cents"]),
                    timestamp=_local_time(item["timestamp"]),
                    category=item["category"],
                    restaurant_name=item.get("restaurant_name"),
                    notes=item.get("notes"),
                )
                for item in data.get("experiences", [])
            ]
        except (AttributeError, KeyError, ValueError, TypeError) as e:
            raise SourceUnavailableError(f"Invalid experience data from experience API: {e}") from e


def _local_time(value: str) -> datetime:
    """Parse an ISO-8601 timestamp as naive local time; offsets are converted first"""
    timestamp = datetime.fromisoformat(value)
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone().replace(tzinfo=None)
    return timestamp
