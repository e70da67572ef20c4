"""Unit tests for weekly window boundaries"""

from datetime import date, datetime, timedelta, timezone
from lunch_ledger.domain.window import in_window, week_bounds, week_end, week_start


def test_week_start_every_day_of_week():
    """Every moment from Monday to Sunday maps to the same Monday"""
    monday = date(2024, 1, 8)
    for offset in range(7):
        now = datetime(2024, 1, 8, 9, 30) + timedelta(days=offset)
        assert week_start(now) == monday


def test_week_start_is_monday_and_contains_now():
    """Window invariant across a month of hourly samples"""
    moment = datetime(2024, 2, 1, 0, 0)
    for _ in range(24 * 31):
        start = week_start(moment)
        assert start.isoweekday() == 1
        assert in_window(moment, start)
        moment += timedelta(hours=1)


def test_week_start_boundaries():
    """Monday midnight starts a new week; Sunday late night belongs to the previous one"""
    assert week_start(datetime(2024, 1, 8, 0, 0)) == date(2024, 1, 8)
    assert week_start(datetime(2024, 1, 7, 23, 59, 59)) == date(2024, 1, 1)


def test_week_start_crosses_year_boundary():
    """Wednesday 2025-01-01 belongs to the week starting Monday 2024-12-30"""
    assert week_start(datetime(2025, 1, 1, 12, 0)) == date(2024, 12, 30)


def test_week_start_aware_datetime_uses_own_offset():
    """Aware datetimes are truncated in their own timezone"""
    plus_two = timezone(timedelta(hours=2))
    # 00:30 Monday at +02:00 is still Sunday in UTC, but the local week applies
    assert week_start(datetime(2024, 1, 8, 0, 30, tzinfo=plus_two)) == date(2024, 1, 8)


def test_window_is_half_open():
    """Start day included, day seven excluded"""
    start = date(2024, 1, 8)
    assert in_window(datetime(2024, 1, 8, 0, 0), start)
    assert in_window(datetime(2024, 1, 14, 23, 59), start)
    assert not in_window(datetime(2024, 1, 15, 0, 0), start)
    assert not in_window(datetime(2024, 1, 7, 23, 59), start)


def test_week_bounds_and_end():
    now = datetime(2024, 1, 10, 13, 0)
    assert week_bounds(now) == (date(2024, 1, 8), date(2024, 1, 15))
    assert week_end(now) == date(2024, 1, 15)
