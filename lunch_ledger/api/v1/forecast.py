"""POST /v1/forecast - real-time impact of an experience being entered"""

from fastapi import APIRouter, Depends

from lunch_ledger.api.v1.schemas import ForecastRequest, ForecastResponse
from lunch_ledger.api.dependencies import get_engine
from lunch_ledger.engine.facade import InvestmentEngine

router = APIRouter()


@router.post("/forecast", response_model=ForecastResponse)
def forecast_impact(
    request_body: ForecastRequest,
    engine: InvestmentEngine = Depends(get_engine),
):
    """
    Project the cost onto the current week without recording anything.

    Non-positive costs are rejected by validation (422); there is nothing to
    forecast for them.
    """
    impact = engine.forecast_impact(request_body.cost_cents)
    return ForecastResponse.from_forecast(impact)
