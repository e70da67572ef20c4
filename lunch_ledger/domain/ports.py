"""Interfaces of the external collaborators the engine reads from"""

from datetime import date
from typing import List, Optional, Protocol

from lunch_ledger.domain.models import Preferences, TransactionRecord


class TransactionSource(Protocol):
    """Read-only access to a user's logged experiences"""

    async def query_by_date_range(self, user_id: str, start: date, end: date) -> List[TransactionRecord]:
        """Records with start <= day < end. Raises SourceUnavailableError on I/O failure."""
        ...

    async def query_all(self, user_id: str) -> List[TransactionRecord]:
        """Full history. Raises SourceUnavailableError on I/O failure."""
        ...


class PreferenceSource(Protocol):
    """Budget profile lookup; None means the user has no profile yet"""

    async def get_preferences(self, user_id: Optional[str]) -> Optional[Preferences]:
        ...
