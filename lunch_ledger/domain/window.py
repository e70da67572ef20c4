"""Weekly window boundaries - Monday-anchored, half-open 7-day ranges"""

from datetime import date, datetime, timedelta
from typing import Tuple

WINDOW_DAYS = 7


def week_start(now: datetime) -> date:
    """
    Most recent Monday at local midnight on or before ``now``.

    Naive datetimes are treated as local wall-clock time; aware datetimes are
    truncated in their own offset.
    """
    return now.date() - timedelta(days=now.isoweekday() - 1)


def week_end(now: datetime) -> date:
    """Exclusive end of the window containing ``now``"""
    return week_start(now) + timedelta(days=WINDOW_DAYS)


def week_bounds(now: datetime) -> Tuple[date, date]:
    """(start, end) of the window containing ``now``; end is exclusive"""
    start = week_start(now)
    return start, start + timedelta(days=WINDOW_DAYS)


def in_window(moment: datetime, start: date) -> bool:
    """True when ``moment`` falls in [start, start + 7 days)"""
    return start <= moment.date() < start + timedelta(days=WINDOW_DAYS)
