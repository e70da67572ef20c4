"""Investment state store - owns the canonical weekly snapshot and its recompute cycle"""

import logging
import time
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, List, Optional, Tuple

from lunch_ledger.domain.achievements import AchievementEngine
from lunch_ledger.domain.exceptions import InvalidPreferencesError, NoActiveUserError, SourceUnavailableError
from lunch_ledger.domain.forecast import forecast
from lunch_ledger.domain.models import ImpactForecast, InvestmentSnapshot, TransactionRecord
from lunch_ledger.domain.ports import PreferenceSource, TransactionSource
from lunch_ledger.domain.snapshot import build_snapshot
from lunch_ledger.domain.window import week_bounds, week_start
from lunch_ledger.infrastructure.observability.logging import log_achievement_unlocked, log_recompute
from lunch_ledger.infrastructure.observability.metrics import (
    achievement_unlock_counter,
    forecast_counter,
    recompute_duration_histogram,
    record_recompute,
    source_failures_counter,
)
from lunch_ledger.utils.subscriptions import Subscribers, Subscription


class InvestmentStateStore:
    """
    Single writer of the weekly InvestmentSnapshot.

    Concurrency rules (one event loop, no locks):
    - A recompute requested while another is in flight is dropped unless forced.
    - Every issued recompute takes a sequence number; a result is applied only
      if it is newer than the last applied one and the store is still open.
    - Source failures never escape: they become the snapshot's error_message
      while the last successful figures for the week are kept.
    """

    def __init__(
        self,
        transaction_source: TransactionSource,
        preference_source: PreferenceSource,
        achievements: AchievementEngine | None = None,
        user_id: str | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._transactions = transaction_source
        self._preferences = preference_source
        self.achievements = achievements if achievements is not None else AchievementEngine(clock=clock)
        self._user_id = user_id
        self._clock = clock

        self._snapshot = InvestmentSnapshot(week_start=week_start(clock()))
        self._subscribers: Subscribers[InvestmentSnapshot] = Subscribers("snapshot")

        self._issued_sequence = 0
        self._applied_sequence = 0
        self._in_flight = 0
        self._closed = False

    @property
    def snapshot(self) -> InvestmentSnapshot:
        return self._snapshot

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def in_flight(self) -> bool:
        return self._in_flight > 0

    @property
    def closed(self) -> bool:
        return self._closed

    def set_active_user(self, user_id: str) -> None:
        """
        Attach the signed-in user.

        Achievement state belongs to a single user, so moving from one user to
        a different one requires a new store.
        """
        if self._user_id is not None and user_id != self._user_id:
            raise ValueError(
                f"Store already bound to user {self._user_id!r}; "
                "build a new engine to switch users."
            )
        self._user_id = user_id

    def subscribe(self, callback: Callable[[InvestmentSnapshot], None]) -> Subscription:
        """Register a listener for every snapshot the store publishes"""
        return self._subscribers.subscribe(callback)

    def close(self) -> None:
        """Tear down: results of recomputes still in flight are discarded"""
        self._closed = True

    async def recompute(self, force: bool = False) -> InvestmentSnapshot:
        """
        Rebuild the snapshot from the Preference and Transaction Sources.

        Flow:
        1. Drop the request if another recompute is running (unless forced)
        2. Publish the current snapshot flagged as loading
        3. Read preferences, this week's records and the full history
        4. Apply the result if still the newest request, then evaluate achievements

        Returns:
            The store's snapshot after this request was handled
        """
        if self._closed:
            return self._snapshot

        if self._in_flight and not force:
            record_recompute("dropped")
            logging.debug("Recompute dropped, another one is in flight", extra={"user_id": self._user_id})
            return self._snapshot

        self._issued_sequence += 1
        sequence = self._issued_sequence
        user_id = self._user_id
        start_time = time.time()

        self._in_flight += 1
        self._publish(replace(self._snapshot, is_loading=True, error_message=None))

        snapshot: InvestmentSnapshot | None = None
        history: List[TransactionRecord] = []
        error: str | None = None
        try:
            snapshot, history = await self._load(user_id)
        except SourceUnavailableError as e:
            error = str(e)
        except Exception as e:
            logging.exception("Recompute failed unexpectedly", extra={"user_id": user_id, "sequence": sequence})
            error = f"Failed to load investment data: {e}"
        finally:
            self._in_flight -= 1

        duration = time.time() - start_time
        recompute_duration_histogram.observe(duration)

        if self._closed or sequence <= self._applied_sequence:
            record_recompute("stale")
            logging.info(
                "Discarding stale recompute result",
                extra={"sequence": sequence, "applied_sequence": self._applied_sequence, "user_id": user_id},
            )
            return self._snapshot

        self._applied_sequence = sequence

        if error is not None or snapshot is None:
            self._publish(self._failed_snapshot(error))
            record_recompute("error")
            log_recompute(
                sequence,
                user_id,
                "error",
                self._snapshot.current_spent_cents,
                self._snapshot.experiences_logged,
                duration * 1000,
                error=error,
            )
            return self._snapshot

        self._publish(snapshot)
        record_recompute("applied", snapshot.remaining_capacity_cents)
        log_recompute(
            sequence,
            user_id,
            "applied",
            snapshot.current_spent_cents,
            snapshot.experiences_logged,
            duration * 1000,
        )

        self._evaluate_achievements(snapshot, history, user_id)
        return self._snapshot

    def _failed_snapshot(self, error: str | None) -> InvestmentSnapshot:
        """
        Snapshot published when a recompute fails.

        Within the same week the prior figures are retained and only the status
        fields change. Once the week has rolled over, last week's spending no
        longer applies: the window restarts empty while capacity and target carry.
        """
        current_week = week_start(self._clock())
        if current_week == self._snapshot.week_start:
            return replace(self._snapshot, is_loading=False, error_message=error)

        return replace(
            self._snapshot,
            week_start=current_week,
            current_spent_cents=0,
            experiences_logged=0,
            window_transactions=(),
            is_loading=False,
            error_message=error,
        )

    async def _load(self, user_id: str | None) -> Tuple[InvestmentSnapshot, List[TransactionRecord]]:
        """Query both sources; raises SourceUnavailableError with a user-facing message"""
        try:
            preferences = await self._preferences.get_preferences(user_id)
        except SourceUnavailableError as e:
            source_failures_counter.labels(source="preferences").inc()
            raise SourceUnavailableError(f"Failed to load user preferences: {e}") from e

        if preferences is None:
            raise SourceUnavailableError("User preferences not available")

        start, end = week_bounds(self._clock())

        try:
            window, history = await self._query_records(user_id, start, end)
        except NoActiveUserError:
            window, history = [], []
        except SourceUnavailableError as e:
            source_failures_counter.labels(source="transactions").inc()
            raise SourceUnavailableError(f"Failed to load investment data: {e}") from e

        return build_snapshot(preferences, window, start), history

    async def _query_records(
        self,
        user_id: str | None,
        start: date,
        end: date,
    ) -> Tuple[List[TransactionRecord], List[TransactionRecord]]:
        if user_id is None:
            raise NoActiveUserError("No user signed in")

        window = await self._transactions.query_by_date_range(user_id, start, end)
        history = await self._transactions.query_all(user_id)
        return list(window), list(history)

    def _evaluate_achievements(
        self,
        snapshot: InvestmentSnapshot,
        history: List[TransactionRecord],
        user_id: str | None,
    ) -> None:
        try:
            unlocked = self.achievements.evaluate(snapshot, history)
        except Exception:
            # Unlocks applied before the failing rule stay in place
            logging.exception("Achievement evaluation aborted", extra={"user_id": user_id})
            return

        total_points = self.achievements.state.total_points
        for achievement in unlocked:
            achievement_unlock_counter.labels(achievement_id=achievement.id).inc()
            log_achievement_unlocked(user_id, achievement.id, achievement.points, total_points)

    def forecast_impact(self, prospective_cost_cents: int) -> ImpactForecast:
        """Project a prospective cost onto the current snapshot; never mutates state"""
        result = forecast(self._snapshot, prospective_cost_cents)
        forecast_counter.labels(impact_tier=result.impact_tier.value).inc()
        return result

    def update_weekly_capacity(self, new_capacity_cents: int) -> InvestmentSnapshot:
        """
        Optimistically replace the weekly capacity without a source round-trip.

        The next recompute reconciles with the Preference Source.
        """
        if new_capacity_cents < 0:
            raise InvalidPreferencesError(f"Weekly capacity cannot be negative: {new_capacity_cents}")
        if not self._closed:
            self._publish(self._snapshot.with_capacity(new_capacity_cents))
        return self._snapshot

    def _publish(self, snapshot: InvestmentSnapshot) -> None:
        self._snapshot = snapshot
        self._subscribers.publish(snapshot)
