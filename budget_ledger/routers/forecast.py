from fastapi import APIRouter, Depends, Query

from budget_ledger.dependencies import require_workspace_member
from budget_ledger.models import Forecast, ForecastResponse, Workspace
from budget_ledger.services import ForecastService

router = APIRouter(prefix="/workspaces/{workspace_id}/forecast")


@router.get("", response_model=ForecastResponse)
async def get_forecast(
    year: int | None = Query(None, ge=1900, le=9999),
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to view the forecast.")
    ),
    forecast_service: ForecastService = Depends(),
) -> Forecast:
    return await forecast_service.forecast(workspace, year)
