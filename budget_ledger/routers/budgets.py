import uuid

from fastapi import APIRouter, Depends, status

from budget_ledger.dependencies import require_workspace_member
from budget_ledger.models import (
    AvailableBalanceResponse,
    Budget,
    BudgetResponse,
    BudgetUpsert,
    BudgetUpsertResponse,
    PublishForward,
    PublishForwardAll,
    PublishSummary,
    PublishSummaryResponse,
    Workspace,
)
from budget_ledger.models.common import Month
from budget_ledger.routers.utils import to_response
from budget_ledger.services import BudgetsService

router = APIRouter(prefix="/workspaces/{workspace_id}/budgets")


@router.put("", response_model=BudgetUpsertResponse)
async def upsert_budget(
    payload: BudgetUpsert,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage budgets.")
    ),
    budgets_service: BudgetsService = Depends(),
) -> BudgetUpsertResponse:
    budget = await budgets_service.upsert_budget(workspace, payload)
    if budget is None:
        return BudgetUpsertResponse(budget=None, deleted=True)
    return BudgetUpsertResponse(budget=to_response(BudgetResponse, budget))


@router.get("", response_model=list[BudgetResponse])
async def list_budgets(
    month: Month | None = None,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to view budgets.")
    ),
    budgets_service: BudgetsService = Depends(),
) -> list[Budget]:
    return await budgets_service.list_budgets(workspace, month=month)


@router.get("/available", response_model=AvailableBalanceResponse)
async def get_available_balance(
    month: Month,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to view budgets.")
    ),
    budgets_service: BudgetsService = Depends(),
) -> AvailableBalanceResponse:
    available = await budgets_service.projected_available_balance(workspace, month)
    return AvailableBalanceResponse(month=month, available=available)


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget(
    budget_id: uuid.UUID,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage budgets.")
    ),
    budgets_service: BudgetsService = Depends(),
) -> None:
    await budgets_service.delete_budget(workspace, budget_id)


@router.post("/publish", response_model=PublishSummaryResponse)
async def publish_forward(
    payload: PublishForward,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage budgets.")
    ),
    budgets_service: BudgetsService = Depends(),
) -> PublishSummary:
    return await budgets_service.publish_forward(workspace, payload)


@router.post("/publish-all", response_model=PublishSummaryResponse)
async def publish_forward_all(
    payload: PublishForwardAll,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage budgets.")
    ),
    budgets_service: BudgetsService = Depends(),
) -> PublishSummary:
    return await budgets_service.publish_forward_all(workspace, payload.from_month)
