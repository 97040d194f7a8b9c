import uuid

from fastapi import APIRouter, Depends, status

from budget_ledger.dependencies import require_workspace_member
from budget_ledger.models import (
    FinancialSummaryResponse,
    Transaction,
    TransactionCreate,
    TransactionResponse,
    TransactionUpdate,
    Workspace,
)
from budget_ledger.models.common import Month
from budget_ledger.routers.utils import extract_updates
from budget_ledger.services import TransactionsService

router = APIRouter(prefix="/workspaces/{workspace_id}/transactions")


@router.post(
    "", response_model=list[TransactionResponse], status_code=status.HTTP_201_CREATED
)
async def create_transaction(
    payload: TransactionCreate,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage transactions.")
    ),
    transactions_service: TransactionsService = Depends(),
) -> list[Transaction]:
    return await transactions_service.record_transaction(workspace, payload)


@router.get("", response_model=list[TransactionResponse])
async def list_transactions(
    month: Month | None = None,
    account_id: uuid.UUID | None = None,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to view transactions.")
    ),
    transactions_service: TransactionsService = Depends(),
) -> list[Transaction]:
    return await transactions_service.list_transactions(
        workspace, month=month, account_id=account_id
    )


@router.get("/summary", response_model=FinancialSummaryResponse)
async def get_summary(
    month: Month | None = None,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to view transactions.")
    ),
    transactions_service: TransactionsService = Depends(),
) -> FinancialSummaryResponse:
    summary = await transactions_service.summary(workspace, month=month)
    return FinancialSummaryResponse(
        month=month,
        income=summary.income,
        expense=summary.expense,
        balance=summary.balance,
    )


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: uuid.UUID,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to view transactions.")
    ),
    transactions_service: TransactionsService = Depends(),
) -> Transaction:
    return await transactions_service.get_transaction(workspace, transaction_id)


@router.patch("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: uuid.UUID,
    payload: TransactionUpdate,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage transactions.")
    ),
    transactions_service: TransactionsService = Depends(),
) -> Transaction:
    updates = extract_updates(payload)
    return await transactions_service.update_transaction(
        workspace, transaction_id, updates
    )


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: uuid.UUID,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage transactions.")
    ),
    transactions_service: TransactionsService = Depends(),
) -> None:
    await transactions_service.delete_transaction(workspace, transaction_id)
