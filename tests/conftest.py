"""Pytest fixtures for testing"""

import asyncio
import pytest
from datetime import date, datetime
from typing import Generator, List, Optional, Tuple
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from lunch_ledger.api.main import create_app
from lunch_ledger.domain.exceptions import SourceUnavailableError
from lunch_ledger.domain.models import Preferences, TransactionRecord
from lunch_ledger.engine.facade import InvestmentEngine
from lunch_ledger.engine.state_store import InvestmentStateStore
from lunch_ledger.infrastructure.database.models import Base


# Wednesday; the window is Monday 2024-01-08 .. Monday 2024-01-15 (exclusive)
NOW = datetime(2024, 1, 10, 13, 0)
WEEK_START = date(2024, 1, 8)
USER_ID = "user_demo"

DEFAULT_PREFERENCES = Preferences(
    weekly_capacity_cents=20_000,  # $200
    meal_frequency_per_day=2,
    budget_level=4,
)

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def fixed_clock() -> datetime:
    return NOW


def make_record(
    record_id: str,
    cost_cents: int,
    timestamp: datetime,
    category: str = "lunch",
) -> TransactionRecord:
    return TransactionRecord(id=record_id, cost_cents=cost_cents, timestamp=timestamp, category=category)


class FakeExperienceSource:
    """
    In-memory Transaction and Preference Source.

    Date-range queries capture the records present at call time, then wait on
    the next gate in ``gates`` (if any) before returning, which lets tests
    control the order in which concurrent recomputes resolve.
    """

    def __init__(
        self,
        records: Optional[List[TransactionRecord]] = None,
        preferences: Optional[Preferences] = DEFAULT_PREFERENCES,
    ):
        self.records = list(records or [])
        self.preferences = preferences
        self.fail_transactions = False
        self.fail_preferences = False
        self.gates: List[asyncio.Event] = []
        self.range_calls: List[Tuple[str, date, date]] = []
        self.all_calls: List[str] = []

    async def query_by_date_range(self, user_id: str, start: date, end: date) -> List[TransactionRecord]:
        self.range_calls.append((user_id, start, end))
        records = [r for r in self.records if start <= r.timestamp.date() < end]
        if self.gates:
            await self.gates.pop(0).wait()
        if self.fail_transactions:
            raise SourceUnavailableError("connection refused")
        return records

    async def query_all(self, user_id: str) -> List[TransactionRecord]:
        self.all_calls.append(user_id)
        if self.fail_transactions:
            raise SourceUnavailableError("connection refused")
        return list(self.records)

    async def get_preferences(self, user_id: Optional[str]) -> Optional[Preferences]:
        if self.fail_preferences:
            raise SourceUnavailableError("profile service down")
        return self.preferences


@pytest.fixture
def week_records() -> List[TransactionRecord]:
    """Three experiences in the current window plus one from the previous week"""
    return [
        make_record("prev_1", 4_000, datetime(2024, 1, 7, 19, 0), "dinner"),
        make_record("tx_1", 1_250, datetime(2024, 1, 8, 12, 15), "lunch"),
        make_record("tx_2", 850, datetime(2024, 1, 9, 8, 30), "breakfast"),
        make_record("tx_3", 3_400, datetime(2024, 1, 10, 12, 45), "lunch"),
    ]


@pytest.fixture
def source(week_records: List[TransactionRecord]) -> FakeExperienceSource:
    return FakeExperienceSource(records=week_records)


@pytest.fixture
def store(source: FakeExperienceSource) -> InvestmentStateStore:
    return InvestmentStateStore(source, source, user_id=USER_ID, clock=fixed_clock)


@pytest.fixture
def investment_engine(source: FakeExperienceSource) -> InvestmentEngine:
    return InvestmentEngine(
        transaction_source=source,
        preference_source=source,
        user_id=USER_ID,
        refresh_interval_seconds=3600,
        clock=fixed_clock,
    )


@pytest.fixture
def client(investment_engine: InvestmentEngine) -> Generator[TestClient, None, None]:
    """FastAPI test client; entering it runs startup (cold-start recompute)"""
    app = create_app(investment_engine)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
