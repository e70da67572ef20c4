"""Weekly snapshot endpoints - read, refresh, capacity adjustment and sign-in"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from lunch_ledger.api.v1.schemas import CapacityRequest, SessionRequest, SnapshotResponse
from lunch_ledger.api.dependencies import get_engine, get_request_id
from lunch_ledger.engine.facade import InvestmentEngine

router = APIRouter()


@router.get("/snapshot", response_model=SnapshotResponse)
def get_snapshot(engine: InvestmentEngine = Depends(get_engine)):
    """Current weekly investment snapshot (source failures show up in error_message)"""
    return SnapshotResponse.from_snapshot(engine.snapshot)


@router.post("/refresh", response_model=SnapshotResponse)
async def refresh_snapshot(engine: InvestmentEngine = Depends(get_engine)):
    """
    Manual pull-to-refresh.

    Coalesced with any recompute already running: in that case the current
    snapshot is returned immediately.
    """
    snapshot = await engine.refresh()
    return SnapshotResponse.from_snapshot(snapshot)


@router.put("/capacity", response_model=SnapshotResponse)
async def update_capacity(
    request_body: CapacityRequest,
    request: Request,
    engine: InvestmentEngine = Depends(get_engine),
):
    """Optimistic weekly capacity change; reconciled by the next recompute"""
    snapshot = engine.update_weekly_capacity(request_body.weekly_capacity_cents)
    logging.info(
        "Weekly capacity updated",
        extra={
            "request_id": get_request_id(request),
            "user_id": engine.store.user_id,
            "weekly_capacity_cents": request_body.weekly_capacity_cents,
        },
    )
    return SnapshotResponse.from_snapshot(snapshot)


@router.put("/session", response_model=SnapshotResponse)
async def sign_in(
    request_body: SessionRequest,
    request: Request,
    engine: InvestmentEngine = Depends(get_engine),
):
    """Bind the signed-in user; a different user needs a fresh engine"""
    try:
        snapshot = await engine.sign_in(request_body.user_id)
    except ValueError as e:
        logging.warning(f"Sign-in rejected: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=409, detail=str(e))

    return SnapshotResponse.from_snapshot(snapshot)
