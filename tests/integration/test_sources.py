"""Integration tests for the HTTP and SQL experience sources"""

import httpx
import pytest
from datetime import date, datetime, timezone
from conftest import TestingSessionLocal, fixed_clock
from lunch_ledger.domain.exceptions import SourceUnavailableError
from lunch_ledger.domain.models import Preferences
from lunch_ledger.engine.state_store import InvestmentStateStore
from lunch_ledger.infrastructure.clients.experience_api import HttpExperienceSource
from lunch_ledger.infrastructure.database.models import DiningExperience, UserPreferences
from lunch_ledger.infrastructure.database.repositories import ExperienceRepository, SqlExperienceSource
from mock.experience_server.main import app as experience_app


pytestmark = pytest.mark.integration

BASE_URL = "http://experience.test"


def stub_source(**kwargs) -> HttpExperienceSource:
    """HTTP source wired to the in-process mock experience server"""
    return HttpExperienceSource(base_url=BASE_URL, transport=httpx.ASGITransport(app=experience_app), **kwargs)


def scripted_source(responses, calls, **kwargs) -> HttpExperienceSource:
    """HTTP source whose transport replays the given responses (or raises exceptions) in order"""

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        outcome = responses[min(len(calls), len(responses)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return HttpExperienceSource(
        base_url=BASE_URL,
        timeout=1.0,
        max_attempts=3,
        backoff_base=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


async def test_http_query_by_date_range():
    records = await stub_source().query_by_date_range("demo", date(2024, 1, 1), date(2024, 1, 4))

    assert [r.id for r in records] == ["exp_01", "exp_02", "exp_03"]
    assert records[0].cost_cents == 1_250
    assert records[0].timestamp == datetime(2024, 1, 1, 12, 15)
    assert records[0].category == "lunch"
    assert records[0].restaurant_name == "Noodle Bar"


async def test_http_query_all():
    records = await stub_source().query_all("demo")

    assert len(records) == 7
    assert records[-1].notes == "birthday"


async def test_http_preferences():
    source = stub_source()

    assert await source.get_preferences("demo") == Preferences(
        weekly_capacity_cents=20_000,
        meal_frequency_per_day=2,
        budget_level=4,
    )
    assert await source.get_preferences("newcomer") is None
    assert await source.get_preferences(None) is None


async def test_http_unknown_user_fails_without_retry():
    calls = []
    source = scripted_source([httpx.Response(404, json={"detail": "user not found"})], calls)

    with pytest.raises(SourceUnavailableError, match="Experience API error: 404"):
        await source.query_all("ghost")

    assert len(calls) == 1


async def test_http_retries_server_errors():
    calls = []
    source = scripted_source([httpx.Response(503)], calls)

    with pytest.raises(SourceUnavailableError, match="Experience API error: 503"):
        await source.query_all("demo")

    assert len(calls) == 3


async def test_http_recovers_after_transient_error():
    calls = []
    source = scripted_source(
        [httpx.Response(502), httpx.Response(200, json={"experiences": []})],
        calls,
    )

    assert await source.query_all("demo") == []
    assert len(calls) == 2


async def test_http_timeout():
    calls = []
    source = scripted_source([httpx.ReadTimeout("timed out")], calls)

    with pytest.raises(SourceUnavailableError, match=r"Experience API timeout after 1.0s"):
        await source.query_all("demo")

    assert len(calls) == 3


async def test_http_invalid_json():
    calls = []
    source = scripted_source([httpx.Response(200, content=b"<html>oops</html>")], calls)

    with pytest.raises(SourceUnavailableError, match="Invalid JSON"):
        await source.query_all("demo")


async def test_http_invalid_experience_payload():
    calls = []
    source = scripted_source([httpx.Response(200, json={"experiences": [{"id": "x"}]})], calls)

    with pytest.raises(SourceUnavailableError, match="Invalid experience data"):
        await source.query_all("demo")


async def test_http_offset_timestamps_become_local_time():
    calls = []
    payload = {
        "experiences": [
            {"id": "late", "cost_cents": 900, "timestamp": "2024-01-07T23:30:00+00:00", "category": "dinner"},
            {"id": "plain", "cost_cents": 500, "timestamp": "2024-01-08T12:00:00", "category": "lunch"},
        ]
    }
    source = scripted_source([httpx.Response(200, json=payload)], calls)

    late, plain = await source.query_all("demo")

    assert late.timestamp == datetime(2024, 1, 7, 23, 30, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert late.timestamp.tzinfo is None
    assert plain.timestamp == datetime(2024, 1, 8, 12, 0)


async def test_http_invalid_preference_payload():
    calls = []
    source = scripted_source([httpx.Response(200, json={"weekly_budget_cents": 100})], calls)

    with pytest.raises(SourceUnavailableError, match="Invalid preference data"):
        await source.get_preferences("demo")


@pytest.fixture
def seeded_db(db):
    db.add(UserPreferences(user_id="user_demo", weekly_budget_cents=20_000, meal_frequency_per_day=2, budget_level=4))
    db.add_all(
        [
            DiningExperience(user_id="user_demo", cost_cents=4_000, occurred_at=datetime(2024, 1, 7, 19, 0), meal_type="dinner"),
            DiningExperience(user_id="user_demo", cost_cents=1_250, occurred_at=datetime(2024, 1, 8, 0, 0), meal_type="lunch"),
            DiningExperience(user_id="user_demo", cost_cents=850, occurred_at=datetime(2024, 1, 9, 8, 30), meal_type="breakfast"),
            DiningExperience(user_id="user_demo", cost_cents=3_400, occurred_at=datetime(2024, 1, 15, 0, 0), meal_type="lunch"),
            DiningExperience(user_id="someone_else", cost_cents=999, occurred_at=datetime(2024, 1, 9, 12, 0), meal_type="lunch"),
        ]
    )
    db.commit()
    return db


def test_repository_half_open_range(seeded_db):
    repo = ExperienceRepository(seeded_db)

    rows = repo.get_experiences_between("user_demo", date(2024, 1, 8), date(2024, 1, 15))

    assert [row.cost_cents for row in rows] == [1_250, 850]


def test_repository_scopes_by_user(seeded_db):
    repo = ExperienceRepository(seeded_db)

    assert len(repo.get_experiences("user_demo")) == 4
    assert len(repo.get_experiences("someone_else")) == 1
    assert repo.get_preferences("nobody") is None


async def test_sql_source_queries(seeded_db):
    source = SqlExperienceSource(TestingSessionLocal)

    window = await source.query_by_date_range("user_demo", date(2024, 1, 8), date(2024, 1, 15))
    history = await source.query_all("user_demo")
    preferences = await source.get_preferences("user_demo")

    assert [r.category for r in window] == ["lunch", "breakfast"]
    assert len(history) == 4
    assert all(len(r.id) == 36 for r in history)
    assert preferences.weekly_capacity_cents == 20_000
    assert await source.get_preferences("nobody") is None
    assert await source.get_preferences(None) is None


async def test_store_over_sql_source(seeded_db):
    source = SqlExperienceSource(TestingSessionLocal)
    store = InvestmentStateStore(source, source, user_id="user_demo", clock=fixed_clock)

    snapshot = await store.recompute()

    assert snapshot.error_message is None
    assert snapshot.current_spent_cents == 2_100
    assert snapshot.experiences_logged == 2
    assert snapshot.remaining_capacity_cents == 17_900


async def test_sql_source_missing_tables_is_unavailable():
    # No db fixture: tables do not exist
    source = SqlExperienceSource(TestingSessionLocal)

    with pytest.raises(SourceUnavailableError, match="Experience database error"):
        await source.query_all("user_demo")
