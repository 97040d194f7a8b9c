from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal

from fastapi import Depends

from budget_ledger.data_access import (
    AccountsDataAccess,
    CategoriesDataAccess,
    EventsDataAccess,
    TransactionsDataAccess,
)
from budget_ledger.domain.balances import account_balance, account_balances, is_settled
from budget_ledger.domain.months import round_money
from budget_ledger.errors import (
    ConflictError,
    NonZeroBalanceError,
    NotFoundError,
    ValidationError,
)
from budget_ledger.models import (
    Account,
    AccountCreate,
    AccountStatus,
    CategoryStatus,
    EventType,
    MoveDirection,
    Workspace,
)

logger = logging.getLogger(__name__)


class AccountsService:
    def __init__(
        self,
        accounts_store: AccountsDataAccess = Depends(),
        transactions_store: TransactionsDataAccess = Depends(),
        categories_store: CategoriesDataAccess = Depends(),
        events_store: EventsDataAccess = Depends(),
    ) -> None:
        self._accounts_store = accounts_store
        self._transactions_store = transactions_store
        self._categories_store = categories_store
        self._events_store = events_store

    async def _require_account(
        self, workspace: Workspace, account_id: uuid.UUID
    ) -> Account:
        account = await self._accounts_store.get_account(workspace.id, account_id)
        if account is None:
            raise NotFoundError("Account not found.", account_id=account_id)
        return account

    async def create_account(
        self, workspace: Workspace, payload: AccountCreate
    ) -> Account:
        accounts = await self._accounts_store.list_accounts(workspace.id)
        siblings = [
            account for account in accounts if account.account_type == payload.account_type
        ]
        sort_order = max((account.sort_order for account in siblings), default=-1) + 1
        initial_balance = round_money(payload.initial_balance)

        account = await self._accounts_store.create_account(
            workspace_id=workspace.id,
            name=payload.name,
            account_type=payload.account_type,
            subtype=payload.subtype,
            currency=payload.currency.upper(),
            initial_balance=initial_balance,
            initial_balance_date=payload.initial_balance_date,
            sort_order=sort_order,
            is_default=False,
        )
        self._events_store.record(
            workspace.id,
            EventType.account_created,
            account_id=account.id,
            name=account.name,
            account_type=account.account_type.value,
            subtype=account.subtype.value,
            currency=account.currency,
        )
        if initial_balance != 0:
            self._events_store.record(
                workspace.id,
                EventType.initial_balance_set,
                account_id=account.id,
                name=account.name,
                initial_balance=initial_balance,
                initial_balance_date=account.initial_balance_date,
            )
        return account

    async def list_accounts_with_balances(
        self, workspace: Workspace, *, as_of: date | None = None
    ) -> list[tuple[Account, Decimal]]:
        accounts = await self._accounts_store.list_accounts(workspace.id)
        transactions = await self._transactions_store.list_transactions(
            workspace.id, end=as_of
        )
        balances = account_balances(accounts, transactions, as_of=as_of)
        return [(account, balances[account.id]) for account in accounts]

    async def get_account(self, workspace: Workspace, account_id: uuid.UUID) -> Account:
        return await self._require_account(workspace, account_id)

    async def get_balance(
        self,
        workspace: Workspace,
        account_id: uuid.UUID,
        *,
        as_of: date | None = None,
    ) -> Decimal:
        account = await self._require_account(workspace, account_id)
        transactions = await self._transactions_store.list_transactions(
            workspace.id, account_id=account.id, end=as_of
        )
        return account_balance(account, transactions, as_of=as_of)

    async def update_account(
        self,
        workspace: Workspace,
        account_id: uuid.UUID,
        updates: dict[str, object],
    ) -> Account:
        account = await self._require_account(workspace, account_id)
        updated = await self._accounts_store.update_account(account.id, updates)
        if updated is None:
            raise NotFoundError("Account not found.", account_id=account_id)
        self._events_store.record(
            workspace.id,
            EventType.account_updated,
            account_id=account.id,
            changes=sorted(updates),
            name=updated.name,
        )
        return updated

    async def move_account(
        self, workspace: Workspace, account_id: uuid.UUID, direction: MoveDirection
    ) -> Account:
        account = await self._require_account(workspace, account_id)
        accounts = await self._accounts_store.list_accounts(workspace.id)
        siblings = sorted(
            (item for item in accounts if item.account_type == account.account_type),
            key=lambda item: (item.sort_order, item.name),
        )
        index = next(i for i, item in enumerate(siblings) if item.id == account.id)
        if direction == MoveDirection.up:
            partner = siblings[index - 1] if index > 0 else None
        else:
            partner = siblings[index + 1] if index < len(siblings) - 1 else None
        if partner is None:
            return account
        if partner.sort_order == account.sort_order:
            raise ConflictError(
                f'Accounts "{account.name}" and "{partner.name}" share sort order '
                f"{account.sort_order}; their order is ambiguous.",
                account=account.name,
                sibling=partner.name,
            )

        await self._accounts_store.swap_sort_order(account, partner)
        logger.info(
            "Moved account %s %s past %s", account.id, direction.value, partner.id
        )
        return await self._require_account(workspace, account.id)

    async def set_default_account(
        self, workspace: Workspace, account_id: uuid.UUID
    ) -> Account:
        account = await self._require_account(workspace, account_id)
        if account.status != AccountStatus.active:
            raise ValidationError(
                f'Account "{account.name}" is archived and cannot be the default.',
                account=account.name,
            )
        await self._accounts_store.set_default(workspace.id, account.id)
        self._events_store.record(
            workspace.id,
            EventType.default_account_set,
            account_id=account.id,
            name=account.name,
        )
        return await self._require_account(workspace, account.id)

    async def archive_account(
        self, workspace: Workspace, account_id: uuid.UUID
    ) -> Account:
        account = await self._require_account(workspace, account_id)
        if account.status == AccountStatus.archived:
            return account

        categories = await self._categories_store.list_categories(workspace.id)
        for category in categories:
            if (
                category.dedicated_account_id == account.id
                and category.status == CategoryStatus.active
            ):
                logger.warning(
                    "Refused to archive account %s dedicated to category %s",
                    account.id,
                    category.id,
                )
                raise ConflictError(
                    f'Account "{account.name}" is dedicated to category '
                    f'"{category.name}"; archive the category instead.',
                    account=account.name,
                    category=category.name,
                )

        balance = await self.get_balance(workspace, account.id)
        if not is_settled(balance):
            logger.warning(
                "Refused to archive account %s with balance %s", account.id, balance
            )
            raise NonZeroBalanceError(
                f'Account "{account.name}" still holds {balance}; bring the '
                "balance to zero before archiving it.",
                account=account.name,
                balance=balance,
            )

        await self._accounts_store.archive_accounts([account.id])
        self._events_store.record(
            workspace.id,
            EventType.account_archived,
            account_id=account.id,
            name=account.name,
        )
        return await self._require_account(workspace, account.id)
