"""Impact forecasting - what logging a prospective experience does to this week"""

from typing import Dict, Tuple

from lunch_ledger.domain.models import GuidanceTier, ImpactForecast, ImpactTier, InvestmentSnapshot

# Exclusive upper bounds, ascending. Impact and guidance use separate tables.
IMPACT_THRESHOLDS: Tuple[Tuple[float, ImpactTier], ...] = (
    (0.3, ImpactTier.LOW),
    (0.7, ImpactTier.MODERATE),
    (0.9, ImpactTier.HIGH),
)

GUIDANCE_THRESHOLDS: Tuple[Tuple[float, GuidanceTier], ...] = (
    (0.5, GuidanceTier.EXCELLENT),
    (0.8, GuidanceTier.GOOD),
    (0.95, GuidanceTier.MODERATE),
)

IMPACT_MESSAGES: Dict[ImpactTier, str] = {
    ImpactTier.LOW: "Perfect! This investment keeps you well within your comfort zone.",
    ImpactTier.MODERATE: "Great balance between enjoyment and your weekly investment goals.",
    ImpactTier.HIGH: "This is a significant investment. Make sure it aligns with your priorities.",
    ImpactTier.VERY_HIGH: "This investment will exceed your weekly capacity. Consider adjusting the amount.",
}


def classify_impact(ratio: float) -> ImpactTier:
    """Impact band for a spent/capacity ratio"""
    for upper_bound, tier in IMPACT_THRESHOLDS:
        if ratio < upper_bound:
            return tier
    return ImpactTier.VERY_HIGH


def classify_guidance(ratio: float) -> GuidanceTier:
    """Guidance band for a spent/capacity ratio"""
    for upper_bound, tier in GUIDANCE_THRESHOLDS:
        if ratio < upper_bound:
            return tier
    return GuidanceTier.HIGH


def forecast(snapshot: InvestmentSnapshot, prospective_cost_cents: int) -> ImpactForecast:
    """
    Project a not-yet-logged cost onto the snapshot's week.

    Pure: the snapshot is not modified and no source is queried. A zero (or
    negative) capacity skips the division and lands in the top bands.
    """
    capacity = snapshot.weekly_capacity_cents
    projected_spent = snapshot.current_spent_cents + prospective_cost_cents

    if capacity > 0:
        ratio = projected_spent / capacity
        impact_tier = classify_impact(ratio)
        guidance_tier = classify_guidance(ratio)
    else:
        impact_tier = ImpactTier.VERY_HIGH
        guidance_tier = GuidanceTier.HIGH

    return ImpactForecast(
        prospective_cost_cents=prospective_cost_cents,
        projected_spent_cents=projected_spent,
        projected_remaining_cents=max(0, capacity - projected_spent),
        impact_tier=impact_tier,
        guidance_tier=guidance_tier,
        message=IMPACT_MESSAGES[impact_tier],
        exceeds_capacity=projected_spent > capacity,
    )
