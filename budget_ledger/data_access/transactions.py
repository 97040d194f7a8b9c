from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import date

from fastapi import Depends
from sqlalchemy import delete, desc, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from budget_ledger import db
from budget_ledger.data_access.store import flush, writing
from budget_ledger.models import (
    SingleTransaction,
    Transaction,
    TransactionDraft,
    TransactionPair,
    TransactionType,
    TransactionWrite,
)
from budget_ledger.tables import TransactionsTable


class TransactionsDataAccess:
    def __init__(self, session: AsyncSession = Depends(db.get_session)) -> None:
        self._session = session

    async def get_transaction(
        self, workspace_id: uuid.UUID, transaction_id: uuid.UUID
    ) -> Transaction | None:
        transaction = await self._session.get(TransactionsTable, transaction_id)
        if transaction is None or transaction.workspace_id != workspace_id:
            return None
        return _to_transaction(transaction)

    async def list_transactions(
        self,
        workspace_id: uuid.UUID,
        *,
        start: date | None = None,
        end: date | None = None,
        account_id: uuid.UUID | None = None,
        category_ids: Sequence[uuid.UUID] | None = None,
    ) -> list[Transaction]:
        """Transactions of a workspace, newest first.

        ``start`` and ``end`` are inclusive; ``account_id`` matches either leg
        of a transfer.
        """
        statement = select(TransactionsTable).where(
            TransactionsTable.workspace_id == workspace_id
        )
        if start is not None:
            statement = statement.where(TransactionsTable.transaction_date >= start)
        if end is not None:
            statement = statement.where(TransactionsTable.transaction_date <= end)
        if account_id is not None:
            statement = statement.where(
                or_(
                    TransactionsTable.account_id == account_id,
                    TransactionsTable.destination_account_id == account_id,
                )
            )
        if category_ids is not None:
            statement = statement.where(TransactionsTable.category_id.in_(category_ids))
        result = await self._session.execute(
            statement.order_by(
                desc(TransactionsTable.transaction_date),
                desc(TransactionsTable.created_at),
                desc(TransactionsTable.id),
            )
        )
        return [_to_transaction(transaction) for transaction in result.scalars()]

    async def write(
        self, workspace_id: uuid.UUID, write: TransactionWrite
    ) -> list[Transaction]:
        """Persist a single transaction or both legs of a linked pair.

        Returns the written rows, the visible leg first.
        """
        if isinstance(write, SingleTransaction):
            row = _to_row(workspace_id, write.draft)
            self._session.add(row)
            await flush(self._session, action="recording a transaction")
            await self._session.refresh(row)
            return [_to_transaction(row)]

        if not isinstance(write, TransactionPair):
            raise TypeError(f"Unsupported transaction write {write!r}")

        primary = _to_row(workspace_id, write.primary)
        self._session.add(primary)
        await flush(self._session, action="recording a paired transaction")

        mirror = _to_row(workspace_id, write.mirror)
        mirror.linked_transaction_id = primary.id
        self._session.add(mirror)
        await flush(self._session, action="recording a paired transaction")

        primary.linked_transaction_id = mirror.id
        await flush(self._session, action="linking a paired transaction")
        await self._session.refresh(primary)
        await self._session.refresh(mirror)
        return [_to_transaction(primary), _to_transaction(mirror)]

    async def update_transaction(
        self, transaction_id: uuid.UUID, updates: dict[str, object]
    ) -> Transaction | None:
        transaction = await self._session.get(TransactionsTable, transaction_id)
        if transaction is None:
            return None
        for field, value in updates.items():
            setattr(transaction, field, value)
        await flush(self._session, action="updating a transaction")
        await self._session.refresh(transaction)
        return _to_transaction(transaction)

    async def delete_transactions(self, transaction_ids: Sequence[uuid.UUID]) -> int:
        if not transaction_ids:
            return 0
        async with writing("deleting a transaction"):
            result = await self._session.execute(
                delete(TransactionsTable)
                .where(TransactionsTable.id.in_(transaction_ids))
                .execution_options(synchronize_session="fetch")
            )
            await self._session.flush()
        return result.rowcount


def _to_row(workspace_id: uuid.UUID, draft: TransactionDraft) -> TransactionsTable:
    return TransactionsTable(
        workspace_id=workspace_id,
        type=draft.type.value,
        amount=draft.amount,
        transaction_date=draft.transaction_date,
        notes=draft.notes,
        account_id=draft.account_id,
        destination_account_id=draft.destination_account_id,
        category_id=draft.category_id,
        on_budget=draft.on_budget,
    )


def _to_transaction(transaction: TransactionsTable) -> Transaction:
    return Transaction(
        id=transaction.id,
        workspace_id=transaction.workspace_id,
        type=TransactionType(transaction.type),
        amount=transaction.amount,
        transaction_date=transaction.transaction_date,
        notes=transaction.notes,
        account_id=transaction.account_id,
        destination_account_id=transaction.destination_account_id,
        category_id=transaction.category_id,
        on_budget=transaction.on_budget,
        linked_transaction_id=transaction.linked_transaction_id,
        created_at=transaction.created_at,
    )
