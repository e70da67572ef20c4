"""Domain models - pure Python dataclasses representing business entities"""

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, Optional, Tuple


class ImpactTier(str, Enum):
    """How strongly a prospective cost moves the week's spending ratio"""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class GuidanceTier(str, Enum):
    """User-facing guidance band for a spending ratio"""

    EXCELLENT = "excellent"
    GOOD = "good"
    MODERATE = "moderate"
    HIGH = "high"


class Level(str, Enum):
    """Achievement level derived from total points"""

    BEGINNER = "Beginner"
    EXPLORER = "Explorer"
    OPTIMIZER = "Optimizer"
    EXPERT = "Expert"
    MASTER = "Master"


# Exclusive upper bounds, ascending; anything at or above the last bound is Master
LEVEL_THRESHOLDS: Tuple[Tuple[int, Level], ...] = (
    (50, Level.BEGINNER),
    (150, Level.EXPLORER),
    (300, Level.OPTIMIZER),
    (500, Level.EXPERT),
)


def calculate_level(points: int) -> Level:
    """Map total achievement points to a level (first matching band wins)"""
    for upper_bound, level in LEVEL_THRESHOLDS:
        if points < upper_bound:
            return level
    return Level.MASTER


@dataclass(frozen=True)
class TransactionRecord:
    """Logged dining experience as returned by the Transaction Source"""

    id: str
    cost_cents: int
    timestamp: datetime
    category: str  # meal type, e.g. "lunch", "brunch", "street_food"
    restaurant_name: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class Preferences:
    """Budget profile of the active user"""

    weekly_capacity_cents: int
    meal_frequency_per_day: int
    budget_level: int  # 1-4, matching the $ symbols shown at onboarding


@dataclass(frozen=True)
class InvestmentSnapshot:
    """Point-in-time summary of the current weekly spending window"""

    week_start: date
    weekly_capacity_cents: int = 0
    current_spent_cents: int = 0
    experiences_logged: int = 0
    target_experiences: int = 5
    window_transactions: Tuple[TransactionRecord, ...] = ()
    is_loading: bool = False
    error_message: Optional[str] = None

    @property
    def remaining_capacity_cents(self) -> int:
        return max(0, self.weekly_capacity_cents - self.current_spent_cents)

    @property
    def week_end(self) -> date:
        return self.week_start + timedelta(days=7)

    @property
    def capacity_progress(self) -> float:
        """Share of the weekly capacity already spent (may exceed 1.0)"""
        if self.weekly_capacity_cents > 0:
            return self.current_spent_cents / self.weekly_capacity_cents
        return math.inf if self.current_spent_cents > 0 else 0.0

    @property
    def experience_progress(self) -> float:
        if self.target_experiences <= 0:
            return 0.0
        return self.experiences_logged / self.target_experiences

    def with_capacity(self, weekly_capacity_cents: int) -> "InvestmentSnapshot":
        """Copy with a new capacity; remaining capacity follows automatically"""
        return replace(self, weekly_capacity_cents=weekly_capacity_cents)


@dataclass(frozen=True)
class ImpactForecast:
    """Projected effect of a not-yet-logged experience on the current week"""

    prospective_cost_cents: int
    projected_spent_cents: int
    projected_remaining_cents: int
    impact_tier: ImpactTier
    guidance_tier: GuidanceTier
    message: str
    exceeds_capacity: bool


@dataclass(frozen=True)
class Achievement:
    """Catalog entry; unlocking produces a copy with unlocked_at set"""

    id: str
    title: str
    description: str
    category: str
    points: int
    icon_ref: str
    unlocked_at: Optional[datetime] = None
    is_unlocked: bool = False

    def unlock(self, at: datetime) -> "Achievement":
        return replace(self, unlocked_at=at, is_unlocked=True)


@dataclass(frozen=True)
class AchievementState:
    """Read-only view of the achievement engine's state"""

    catalog: Tuple[Achievement, ...]
    unlocked: Dict[str, Achievement] = field(default_factory=dict)
    latest_unlocked: Optional[Achievement] = None

    @property
    def total_points(self) -> int:
        return sum(a.points for a in self.unlocked.values())

    @property
    def current_level(self) -> Level:
        return calculate_level(self.total_points)

    @property
    def achievements(self) -> Tuple[Achievement, ...]:
        """Catalog in seed order with unlocked entries substituted in"""
        return tuple(self.unlocked.get(a.id, a) for a in self.catalog)
