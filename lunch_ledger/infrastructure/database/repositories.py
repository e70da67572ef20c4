"""Data access layer - Transaction and Preference Source backed by SQLAlchemy"""

import asyncio
from datetime import date, datetime, time
from typing import Callable, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from lunch_ledger.infrastructure.database.models import DiningExperience, UserPreferences
from lunch_ledger.domain.models import Preferences, TransactionRecord
from lunch_ledger.domain.exceptions import SourceUnavailableError


def _to_record(row: DiningExperience) -> TransactionRecord:
    return TransactionRecord(
        id=str(row.id),
        cost_cents=row.cost_cents,
        timestamp=row.occurred_at,
        category=row.meal_type,
        restaurant_name=row.restaurant_name,
        notes=row.notes,
    )


class ExperienceRepository:
    """Synchronous queries over dining experiences and preferences"""

    def __init__(self, db: Session):
        self.db = db

    def get_experiences_between(self, user_id: str, start: date, end: date) -> List[DiningExperience]:
        """Experiences with start <= occurred_at < end (dates taken at midnight)"""
        return (
            self.db.query(DiningExperience)
            .filter(DiningExperience.user_id == user_id)
            .filter(DiningExperience.occurred_at >= datetime.combine(start, time.min))
            .filter(DiningExperience.occurred_at < datetime.combine(end, time.min))
            .order_by(DiningExperience.occurred_at)
            .all()
        )

    def get_experiences(self, user_id: str) -> List[DiningExperience]:
        return (
            self.db.query(DiningExperience)
            .filter(DiningExperience.user_id == user_id)
            .order_by(DiningExperience.occurred_at)
            .all()
        )

    def get_preferences(self, user_id: str) -> Optional[UserPreferences]:
        return self.db.get(UserPreferences, user_id)


class SqlExperienceSource:
    """
    Async adapter over ExperienceRepository.

    Each call opens its own session and runs in a worker thread so the event
    loop is never blocked by the database driver.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    async def query_by_date_range(self, user_id: str, start: date, end: date) -> List[TransactionRecord]:
        return await self._run(
            lambda repo: [_to_record(row) for row in repo.get_experiences_between(user_id, start, end)]
        )

    async def query_all(self, user_id: str) -> List[TransactionRecord]:
        return await self._run(lambda repo: [_to_record(row) for row in repo.get_experiences(user_id)])

    async def get_preferences(self, user_id: Optional[str]) -> Optional[Preferences]:
        if user_id is None:
            return None

        def load(repo: ExperienceRepository) -> Optional[Preferences]:
            row = repo.get_preferences(user_id)
            if row is None:
                return None
            return Preferences(
                weekly_capacity_cents=row.weekly_budget_cents,
                meal_frequency_per_day=row.meal_frequency_per_day,
                budget_level=row.budget_level,
            )

        return await self._run(load)

    async def _run(self, work):
        def call():
            db = self._session_factory()
            try:
                return work(ExperienceRepository(db))
            finally:
                db.close()

        try:
            return await asyncio.to_thread(call)
        except SQLAlchemyError as e:
            raise SourceUnavailableError(f"Experience database error: {e}") from e
