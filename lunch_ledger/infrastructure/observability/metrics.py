"""Prometheus metrics for monitoring recompute health, forecasts and achievement unlocks"""

from prometheus_client import Counter, Histogram, Gauge

# Recompute metrics
recompute_counter = Counter(
    "lunch_ledger_recompute_total",
    "Snapshot recompute requests",
    ["outcome"],  # applied | error | stale | dropped
)

recompute_duration_histogram = Histogram(
    "lunch_ledger_recompute_duration_seconds",
    "Time spent querying sources and building a snapshot",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

remaining_capacity_gauge = Gauge(
    "lunch_ledger_remaining_capacity_cents",
    "Remaining weekly capacity in the current snapshot",
)

# Source metrics
source_failures_counter = Counter(
    "lunch_ledger_source_failures_total",
    "Failed Transaction/Preference Source calls",
    ["source"],  # transactions | preferences
)

# Engagement metrics
achievement_unlock_counter = Counter(
    "lunch_ledger_achievement_unlocks_total",
    "Achievements unlocked",
    ["achievement_id"],
)

forecast_counter = Counter(
    "lunch_ledger_forecast_total",
    "Impact forecasts served by impact tier",
    ["impact_tier"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_recompute(outcome: str, remaining_capacity_cents: int | None = None) -> None:
    """Record recompute outcome and, when applied, the resulting remaining capacity"""
    recompute_counter.labels(outcome=outcome).inc()
    if remaining_capacity_cents is not None:
        remaining_capacity_gauge.set(remaining_capacity_cents)
