"""WS /v1/stream - push snapshot and achievement updates to the presentation layer"""

import asyncio
import contextlib
import logging
from typing import Any, Dict
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from lunch_ledger.api.v1.schemas import AchievementStateResponse, SnapshotResponse
from lunch_ledger.domain.models import AchievementState, InvestmentSnapshot

router = APIRouter()


def snapshot_event(snapshot: InvestmentSnapshot) -> Dict[str, Any]:
    return {"type": "snapshot", "data": SnapshotResponse.from_snapshot(snapshot).model_dump(mode="json")}


def achievements_event(state: AchievementState) -> Dict[str, Any]:
    return {"type": "achievements", "data": AchievementStateResponse.from_state(state).model_dump(mode="json")}


@router.websocket("/stream")
async def stream_updates(websocket: WebSocket):
    """
    Subscribe to engine updates.

    The current snapshot and achievement state are sent on connect, followed
    by every update the engine publishes until the client disconnects.
    """
    engine = websocket.app.state.engine
    await websocket.accept()

    queue: asyncio.Queue = asyncio.Queue()
    subscriptions = [
        engine.subscribe_snapshot(lambda snapshot: queue.put_nowait(snapshot_event(snapshot))),
        engine.subscribe_achievements(lambda state: queue.put_nowait(achievements_event(state))),
    ]
    queue.put_nowait(snapshot_event(engine.snapshot))
    queue.put_nowait(achievements_event(engine.achievement_state))

    async def forward() -> None:
        while True:
            await websocket.send_json(await queue.get())

    sender = asyncio.create_task(forward())
    try:
        # Client messages are ignored; receiving only serves to detect disconnects
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logging.debug("Stream client disconnected")
    finally:
        for subscription in subscriptions:
            subscription.unsubscribe()
        sender.cancel()
        # A send racing the disconnect may fail after the socket closed
        with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect, RuntimeError):
            await sender
