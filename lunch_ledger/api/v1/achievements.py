"""Achievement endpoints - catalog, progress and notification acknowledgment"""

from fastapi import APIRouter, Depends

from lunch_ledger.api.v1.schemas import AchievementStateResponse
from lunch_ledger.api.dependencies import get_engine
from lunch_ledger.engine.facade import InvestmentEngine

router = APIRouter()


@router.get("/achievements", response_model=AchievementStateResponse)
def get_achievements(engine: InvestmentEngine = Depends(get_engine)):
    """Catalog with unlock status, total points and current level"""
    return AchievementStateResponse.from_state(engine.achievement_state)


@router.post("/achievements/acknowledge", response_model=AchievementStateResponse)
async def acknowledge_achievement(engine: InvestmentEngine = Depends(get_engine)):
    """Dismiss the latest-unlocked notification"""
    engine.acknowledge_achievement()
    return AchievementStateResponse.from_state(engine.achievement_state)
