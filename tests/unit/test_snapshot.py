"""Unit tests for snapshot construction and derived figures"""

import math
from datetime import date, datetime
from conftest import DEFAULT_PREFERENCES, WEEK_START, make_record
from lunch_ledger.domain.models import InvestmentSnapshot, Preferences
from lunch_ledger.domain.snapshot import build_snapshot


def test_build_snapshot_current_week(week_records):
    """Only records inside the window count towards spend and experiences"""
    snapshot = build_snapshot(DEFAULT_PREFERENCES, week_records, WEEK_START)

    assert snapshot.week_start == WEEK_START
    assert snapshot.week_end == date(2024, 1, 15)
    assert snapshot.weekly_capacity_cents == 20_000
    assert snapshot.current_spent_cents == 1_250 + 850 + 3_400
    assert snapshot.experiences_logged == 3
    assert snapshot.remaining_capacity_cents == 14_500
    assert snapshot.target_experiences == 14
    assert [r.id for r in snapshot.window_transactions] == ["tx_1", "tx_2", "tx_3"]
    assert snapshot.is_loading is False
    assert snapshot.error_message is None


def test_build_snapshot_window_boundaries():
    """Monday 00:00 included, next Monday 00:00 excluded"""
    records = [
        make_record("start", 100, datetime(2024, 1, 8, 0, 0)),
        make_record("last", 200, datetime(2024, 1, 14, 23, 59, 59)),
        make_record("next_week", 400, datetime(2024, 1, 15, 0, 0)),
    ]

    snapshot = build_snapshot(DEFAULT_PREFERENCES, records, WEEK_START)

    assert snapshot.current_spent_cents == 300
    assert snapshot.experiences_logged == 2


def test_build_snapshot_orders_by_timestamp():
    records = [
        make_record("late", 100, datetime(2024, 1, 12, 19, 0)),
        make_record("early", 100, datetime(2024, 1, 8, 8, 0)),
        make_record("middle", 100, datetime(2024, 1, 10, 12, 0)),
    ]

    snapshot = build_snapshot(DEFAULT_PREFERENCES, records, WEEK_START)

    assert [r.id for r in snapshot.window_transactions] == ["early", "middle", "late"]


def test_build_snapshot_empty_week():
    snapshot = build_snapshot(DEFAULT_PREFERENCES, [], WEEK_START)

    assert snapshot.current_spent_cents == 0
    assert snapshot.experiences_logged == 0
    assert snapshot.remaining_capacity_cents == 20_000
    assert snapshot.capacity_progress == 0.0
    assert snapshot.experience_progress == 0.0


def test_overspent_week_clamps_remaining():
    """Spending past capacity never yields negative remaining capacity"""
    preferences = Preferences(weekly_capacity_cents=5_000, meal_frequency_per_day=2, budget_level=4)
    records = [make_record("big", 7_500, datetime(2024, 1, 9, 20, 0), "dinner")]

    snapshot = build_snapshot(preferences, records, WEEK_START)

    assert snapshot.remaining_capacity_cents == 0
    assert snapshot.capacity_progress == 1.5


def test_remaining_capacity_invariant():
    for capacity, spent in [(0, 0), (0, 100), (20_000, 0), (20_000, 19_999), (20_000, 20_000), (20_000, 30_000)]:
        snapshot = InvestmentSnapshot(
            week_start=WEEK_START,
            weekly_capacity_cents=capacity,
            current_spent_cents=spent,
        )
        assert snapshot.remaining_capacity_cents == max(0, capacity - spent)


def test_capacity_progress_zero_capacity():
    """Without capacity, any spend is treated as unbounded progress"""
    nothing_spent = InvestmentSnapshot(week_start=WEEK_START)
    some_spent = InvestmentSnapshot(week_start=WEEK_START, current_spent_cents=100)

    assert nothing_spent.capacity_progress == 0.0
    assert math.isinf(some_spent.capacity_progress)


def test_experience_progress(week_records):
    snapshot = build_snapshot(DEFAULT_PREFERENCES, week_records, WEEK_START)
    assert snapshot.experience_progress == 3 / 14


def test_with_capacity_recomputes_remaining(week_records):
    snapshot = build_snapshot(DEFAULT_PREFERENCES, week_records, WEEK_START)

    updated = snapshot.with_capacity(10_000)

    assert updated.weekly_capacity_cents == 10_000
    assert updated.remaining_capacity_cents == 4_500
    assert updated.current_spent_cents == snapshot.current_spent_cents
    assert snapshot.weekly_capacity_cents == 20_000
