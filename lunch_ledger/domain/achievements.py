"""Achievement engine - rule catalog evaluated against the week and the full history"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from lunch_ledger.domain.models import Achievement, AchievementState, InvestmentSnapshot, TransactionRecord
from lunch_ledger.utils.date_utils import distinct_days, longest_consecutive_run
from lunch_ledger.utils.subscriptions import Subscribers, Subscription

OPTIMIZER_MAX_PROGRESS = 0.8
OPTIMIZER_MIN_EXPERIENCES = 5
EXPLORER_MIN_CATEGORIES = 5
TRACKER_STREAK_DAYS = 7


@dataclass(frozen=True)
class RuleContext:
    """Inputs every predicate sees"""

    snapshot: InvestmentSnapshot
    history: Sequence[TransactionRecord]


Predicate = Callable[[RuleContext], bool]


@dataclass(frozen=True)
class AchievementRule:
    """Catalog entry plus the predicate that unlocks it (None = reserved, never unlocks)"""

    definition: Achievement
    predicate: Optional[Predicate]


def has_any_experience(context: RuleContext) -> bool:
    return len(context.history) > 0


def stays_within_weekly_capacity(context: RuleContext) -> bool:
    snapshot = context.snapshot
    return (
        snapshot.capacity_progress <= OPTIMIZER_MAX_PROGRESS
        and snapshot.experiences_logged >= OPTIMIZER_MIN_EXPERIENCES
    )


def explores_categories(context: RuleContext) -> bool:
    return len({r.category for r in context.history}) >= EXPLORER_MIN_CATEGORIES


def has_daily_streak(context: RuleContext) -> bool:
    if len(context.history) < TRACKER_STREAK_DAYS:
        return False
    days = distinct_days(r.timestamp for r in context.history)
    return longest_consecutive_run(days) >= TRACKER_STREAK_DAYS


DEFAULT_RULES: Tuple[AchievementRule, ...] = (
    AchievementRule(
        Achievement(
            id="first_experience",
            title="First Investment",
            description="Log your first dining experience",
            category="Getting Started",
            points=10,
            icon_ref="celebration",
        ),
        has_any_experience,
    ),
    AchievementRule(
        Achievement(
            id="week_optimizer",
            title="Weekly Optimizer",
            description="Stay within 80% of weekly capacity for a full week",
            category="Budget Management",
            points=25,
            icon_ref="eco",
        ),
        stays_within_weekly_capacity,
    ),
    AchievementRule(
        Achievement(
            id="experience_explorer",
            title="Experience Explorer",
            description="Try 5 different types of dining experiences",
            category="Diversity",
            points=20,
            icon_ref="explore",
        ),
        explores_categories,
    ),
    AchievementRule(
        Achievement(
            id="consistent_tracker",
            title="Consistent Tracker",
            description="Log experiences for 7 consecutive days",
            category="Consistency",
            points=30,
            icon_ref="calendar_today",
        ),
        has_daily_streak,
    ),
    # Month-long distribution rule has no agreed definition yet; stays locked.
    AchievementRule(
        Achievement(
            id="smart_spender",
            title="Smart Investor",
            description="Complete a month with optimal investment distribution",
            category="Budget Management",
            points=50,
            icon_ref="psychology",
        ),
        None,
    ),
)


class AchievementEngine:
    """
    Owns achievement state for one user.

    Unlocks are one-way: an unlocked id is never evaluated again and never
    removed. Points and level are derived from the unlocked set on read.
    """

    def __init__(
        self,
        rules: Iterable[AchievementRule] = DEFAULT_RULES,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._rules = tuple(rules)
        ids = [rule.definition.id for rule in self._rules]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate achievement ids in rule table: {ids}")

        self._clock = clock
        self._catalog = tuple(rule.definition for rule in self._rules)
        self._unlocked: Dict[str, Achievement] = {}
        self._latest: Optional[Achievement] = None
        self._subscribers: Subscribers[AchievementState] = Subscribers("achievements")

    @property
    def state(self) -> AchievementState:
        return AchievementState(
            catalog=self._catalog,
            unlocked=dict(self._unlocked),
            latest_unlocked=self._latest,
        )

    def is_unlocked(self, achievement_id: str) -> bool:
        return achievement_id in self._unlocked

    def evaluate(
        self,
        snapshot: InvestmentSnapshot,
        full_history: Sequence[TransactionRecord],
    ) -> List[Achievement]:
        """
        Run every locked rule once and unlock those whose predicate holds.

        Each unlock is applied before the next rule runs, so if a predicate
        raises, earlier unlocks from the same call are kept and the error
        propagates to the caller.

        Returns:
            Achievements unlocked by this call, in rule order
        """
        context = RuleContext(snapshot=snapshot, history=tuple(full_history))
        newly_unlocked: List[Achievement] = []

        try:
            for rule in self._rules:
                if rule.predicate is None or rule.definition.id in self._unlocked:
                    continue
                if rule.predicate(context):
                    achievement = rule.definition.unlock(self._clock())
                    self._unlocked[achievement.id] = achievement
                    self._latest = achievement
                    newly_unlocked.append(achievement)
        finally:
            if newly_unlocked:
                self._subscribers.publish(self.state)

        return newly_unlocked

    def acknowledge(self) -> None:
        """Clear the one-shot 'latest unlocked' notification"""
        if self._latest is None:
            return
        self._latest = None
        self._subscribers.publish(self.state)

    def subscribe(self, callback: Callable[[AchievementState], None]) -> Subscription:
        return self._subscribers.subscribe(callback)
