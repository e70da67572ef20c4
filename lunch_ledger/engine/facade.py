"""InvestmentEngine - the single object the presentation layer talks to"""

from datetime import datetime
from typing import Callable, Iterable

from lunch_ledger.domain.achievements import DEFAULT_RULES, AchievementEngine, AchievementRule
from lunch_ledger.domain.models import AchievementState, ImpactForecast, InvestmentSnapshot
from lunch_ledger.domain.ports import PreferenceSource, TransactionSource
from lunch_ledger.engine.scheduler import RefreshScheduler
from lunch_ledger.engine.state_store import InvestmentStateStore
from lunch_ledger.utils.subscriptions import Subscription


class InvestmentEngine:
    """
    Weekly investment capacity and achievement engine.

    Usage
    -----
    ::

        engine = InvestmentEngine(source, source, user_id="user_demo")
        engine.subscribe_snapshot(render_week)
        engine.subscribe_achievements(show_badge)
        await engine.start()

        impact = engine.forecast_impact(1_250)
        ...
        await engine.shutdown()
    """

    def __init__(
        self,
        transaction_source: TransactionSource,
        preference_source: PreferenceSource,
        user_id: str | None = None,
        refresh_interval_seconds: float | None = None,
        clock: Callable[[], datetime] = datetime.now,
        rules: Iterable[AchievementRule] = DEFAULT_RULES,
    ):
        self.achievements = AchievementEngine(rules=rules, clock=clock)
        self.store = InvestmentStateStore(
            transaction_source,
            preference_source,
            achievements=self.achievements,
            user_id=user_id,
            clock=clock,
        )
        self.scheduler = RefreshScheduler(self.store, refresh_interval_seconds)

    async def start(self) -> None:
        """Cold start: rebuild from the sources, then refresh periodically"""
        await self.scheduler.start()

    async def shutdown(self) -> None:
        self.store.close()
        await self.scheduler.stop()

    @property
    def snapshot(self) -> InvestmentSnapshot:
        return self.store.snapshot

    @property
    def achievement_state(self) -> AchievementState:
        return self.achievements.state

    def subscribe_snapshot(self, callback: Callable[[InvestmentSnapshot], None]) -> Subscription:
        return self.store.subscribe(callback)

    def subscribe_achievements(self, callback: Callable[[AchievementState], None]) -> Subscription:
        return self.achievements.subscribe(callback)

    def forecast_impact(self, prospective_cost_cents: int) -> ImpactForecast:
        return self.store.forecast_impact(prospective_cost_cents)

    def acknowledge_achievement(self) -> None:
        self.achievements.acknowledge()

    def update_weekly_capacity(self, amount_cents: int) -> InvestmentSnapshot:
        return self.store.update_weekly_capacity(amount_cents)

    async def refresh(self) -> InvestmentSnapshot:
        return await self.scheduler.trigger()

    async def sign_in(self, user_id: str) -> InvestmentSnapshot:
        """Bind the active user and force a recompute that cannot be dropped"""
        self.store.set_active_user(user_id)
        return await self.store.recompute(force=True)
