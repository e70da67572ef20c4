"""Snapshot construction - aggregate the week's experiences into an InvestmentSnapshot"""

from datetime import date
from typing import Iterable

from lunch_ledger.domain.models import InvestmentSnapshot, Preferences, TransactionRecord
from lunch_ledger.domain.targets import target_experiences
from lunch_ledger.domain.window import in_window


def build_snapshot(
    preferences: Preferences,
    records: Iterable[TransactionRecord],
    week_start: date,
) -> InvestmentSnapshot:
    """
    Summarize the records that fall in [week_start, week_start + 7 days).

    Records outside the window are ignored even if the source returned them,
    so the half-open boundary holds regardless of how the source filters.
    """
    window = sorted(
        (r for r in records if in_window(r.timestamp, week_start)),
        key=lambda r: r.timestamp,
    )

    return InvestmentSnapshot(
        week_start=week_start,
        weekly_capacity_cents=preferences.weekly_capacity_cents,
        current_spent_cents=sum(r.cost_cents for r in window),
        experiences_logged=len(window),
        target_experiences=target_experiences(preferences),
        window_transactions=tuple(window),
        is_loading=False,
        error_message=None,
    )
