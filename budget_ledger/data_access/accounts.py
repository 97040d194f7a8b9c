from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from fastapi import Depends
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from budget_ledger import db
from budget_ledger.data_access.store import flush, writing
from budget_ledger.models import Account, AccountStatus, AccountSubtype, AccountType
from budget_ledger.tables import AccountsTable


class AccountsDataAccess:
    def __init__(self, session: AsyncSession = Depends(db.get_session)) -> None:
        self._session = session

    async def get_account(
        self, workspace_id: uuid.UUID, account_id: uuid.UUID
    ) -> Account | None:
        account = await self._session.get(AccountsTable, account_id)
        if account is None or account.workspace_id != workspace_id:
            return None
        return _to_account(account)

    async def list_accounts(self, workspace_id: uuid.UUID) -> list[Account]:
        result = await self._session.execute(
            select(AccountsTable)
            .where(AccountsTable.workspace_id == workspace_id)
            .order_by(
                AccountsTable.account_type,
                AccountsTable.sort_order,
                AccountsTable.created_at,
                AccountsTable.name,
            )
        )
        return [_to_account(account) for account in result.scalars()]

    async def create_account(
        self,
        *,
        workspace_id: uuid.UUID,
        name: str,
        account_type: AccountType,
        subtype: AccountSubtype,
        currency: str,
        initial_balance: Decimal,
        initial_balance_date: date,
        sort_order: int,
        is_default: bool,
    ) -> Account:
        account = AccountsTable(
            workspace_id=workspace_id,
            name=name,
            account_type=account_type.value,
            subtype=subtype.value,
            currency=currency,
            initial_balance=initial_balance,
            initial_balance_date=initial_balance_date,
            status=AccountStatus.active.value,
            sort_order=sort_order,
            is_default=is_default,
        )
        self._session.add(account)
        await flush(self._session, action="creating an account")
        await self._session.refresh(account)
        return _to_account(account)

    async def update_account(
        self, account_id: uuid.UUID, updates: dict[str, object]
    ) -> Account | None:
        account = await self._session.get(AccountsTable, account_id)
        if account is None:
            return None
        for field, value in updates.items():
            setattr(account, field, value)
        await flush(self._session, action="updating an account")
        await self._session.refresh(account)
        return _to_account(account)

    async def swap_sort_order(self, first: Account, second: Account) -> None:
        first_row = await self._session.get(AccountsTable, first.id)
        second_row = await self._session.get(AccountsTable, second.id)
        first_row.sort_order, second_row.sort_order = (
            second.sort_order,
            first.sort_order,
        )
        await flush(self._session, action="reordering accounts")

    async def set_default(self, workspace_id: uuid.UUID, account_id: uuid.UUID) -> None:
        async with writing("setting the default account"):
            await self._session.execute(
                update(AccountsTable)
                .where(
                    AccountsTable.workspace_id == workspace_id,
                    AccountsTable.id != account_id,
                )
                .values(is_default=False)
                .execution_options(synchronize_session="fetch")
            )
            await self._session.execute(
                update(AccountsTable)
                .where(AccountsTable.id == account_id)
                .values(is_default=True)
                .execution_options(synchronize_session="fetch")
            )
            await self._session.flush()

    async def archive_accounts(self, account_ids: Sequence[uuid.UUID]) -> None:
        if not account_ids:
            return
        async with writing("archiving accounts"):
            await self._session.execute(
                update(AccountsTable)
                .where(AccountsTable.id.in_(account_ids))
                .values(status=AccountStatus.archived.value, is_default=False)
                .execution_options(synchronize_session="fetch")
            )
            await self._session.flush()


def _to_account(account: AccountsTable) -> Account:
    return Account(
        id=account.id,
        workspace_id=account.workspace_id,
        name=account.name,
        account_type=AccountType(account.account_type),
        subtype=AccountSubtype(account.subtype),
        currency=account.currency,
        initial_balance=account.initial_balance,
        initial_balance_date=account.initial_balance_date,
        status=AccountStatus(account.status),
        sort_order=account.sort_order,
        is_default=account.is_default,
        created_at=account.created_at,
    )
