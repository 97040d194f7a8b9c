import uuid
from datetime import date

from fastapi import APIRouter, Depends, status

from budget_ledger.dependencies import require_workspace_member
from budget_ledger.models import (
    Account,
    AccountCreate,
    AccountMove,
    AccountResponse,
    AccountUpdate,
    Workspace,
)
from budget_ledger.routers.utils import extract_updates, to_response
from budget_ledger.services import AccountsService

router = APIRouter(prefix="/workspaces/{workspace_id}/accounts")


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    payload: AccountCreate,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage accounts.")
    ),
    accounts_service: AccountsService = Depends(),
) -> Account:
    return await accounts_service.create_account(workspace, payload)


@router.get("", response_model=list[AccountResponse])
async def list_accounts(
    as_of: date | None = None,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to view accounts.")
    ),
    accounts_service: AccountsService = Depends(),
) -> list[AccountResponse]:
    accounts = await accounts_service.list_accounts_with_balances(workspace, as_of=as_of)
    return [
        to_response(AccountResponse, account, balance=balance)
        for account, balance in accounts
    ]


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: uuid.UUID,
    as_of: date | None = None,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to view accounts.")
    ),
    accounts_service: AccountsService = Depends(),
) -> AccountResponse:
    account = await accounts_service.get_account(workspace, account_id)
    balance = await accounts_service.get_balance(workspace, account_id, as_of=as_of)
    return to_response(AccountResponse, account, balance=balance)


@router.patch("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: uuid.UUID,
    payload: AccountUpdate,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage accounts.")
    ),
    accounts_service: AccountsService = Depends(),
) -> Account:
    updates = extract_updates(payload)
    return await accounts_service.update_account(workspace, account_id, updates)


@router.post("/{account_id}/move", response_model=AccountResponse)
async def move_account(
    account_id: uuid.UUID,
    payload: AccountMove,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage accounts.")
    ),
    accounts_service: AccountsService = Depends(),
) -> Account:
    return await accounts_service.move_account(workspace, account_id, payload.direction)


@router.post("/{account_id}/default", response_model=AccountResponse)
async def set_default_account(
    account_id: uuid.UUID,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage accounts.")
    ),
    accounts_service: AccountsService = Depends(),
) -> Account:
    return await accounts_service.set_default_account(workspace, account_id)


@router.post("/{account_id}/archive", response_model=AccountResponse)
async def archive_account(
    account_id: uuid.UUID,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage accounts.")
    ),
    accounts_service: AccountsService = Depends(),
) -> Account:
    return await accounts_service.archive_account(workspace, account_id)
