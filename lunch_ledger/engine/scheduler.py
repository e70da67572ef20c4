"""Periodic refresh of the investment snapshot on the running event loop"""

import asyncio
import contextlib
import logging
from typing import Optional, Set

from lunch_ledger.config import settings
from lunch_ledger.domain.models import InvestmentSnapshot
from lunch_ledger.engine.state_store import InvestmentStateStore


class RefreshScheduler:
    """
    Drives InvestmentStateStore.recompute() on a fixed interval.

    Triggers that arrive while a recompute is running are dropped by the store;
    the next tick retries naturally. Stopping cancels the timer but lets an
    in-flight recompute finish (the closed store discards its result).
    """

    def __init__(self, store: InvestmentStateStore, interval_seconds: float | None = None):
        self._store = store
        self.interval_seconds = interval_seconds if interval_seconds is not None else settings.refresh_interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Future] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self, initial_refresh: bool = True) -> None:
        """Run the cold-start recompute, then begin ticking"""
        if self.running:
            return
        if initial_refresh:
            await self.trigger()
        self._task = asyncio.create_task(self._run(), name="lunch-ledger-refresh")

    async def trigger(self) -> InvestmentSnapshot:
        """Manual (pull-to-refresh) or scheduled recompute"""
        return await self._store.recompute()

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)

            refresh = asyncio.ensure_future(self.trigger())
            self._pending.add(refresh)
            refresh.add_done_callback(self._pending.discard)
            try:
                # Cancelling the timer leaves the recompute itself running
                await asyncio.shield(refresh)
            except Exception:
                logging.exception("Scheduled refresh failed", extra={"user_id": self._store.user_id})
