from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date
from decimal import Decimal

from fastapi import Depends

from budget_ledger.data_access import (
    AccountsDataAccess,
    CategoriesDataAccess,
    EventsDataAccess,
    TransactionsDataAccess,
)
from budget_ledger.domain.balances import financial_summary
from budget_ledger.domain.months import month_bounds, month_of, round_money
from budget_ledger.domain.pairing import (
    is_dedicated,
    paired_changes,
    plan_transaction_write,
)
from budget_ledger.errors import NotFoundError, ValidationError
from budget_ledger.models import (
    Account,
    AccountStatus,
    Category,
    EventType,
    FinancialSummary,
    Transaction,
    TransactionCreate,
    TransactionDraft,
    TransactionType,
    Workspace,
)

logger = logging.getLogger(__name__)


class TransactionsService:
    def __init__(
        self,
        transactions_store: TransactionsDataAccess = Depends(),
        accounts_store: AccountsDataAccess = Depends(),
        categories_store: CategoriesDataAccess = Depends(),
        events_store: EventsDataAccess = Depends(),
    ) -> None:
        self._transactions_store = transactions_store
        self._accounts_store = accounts_store
        self._categories_store = categories_store
        self._events_store = events_store

    async def _require_active_account(
        self, workspace: Workspace, account_id: uuid.UUID
    ) -> Account:
        account = await self._accounts_store.get_account(workspace.id, account_id)
        if account is None:
            raise NotFoundError("Account not found.", account_id=account_id)
        if account.status != AccountStatus.active:
            raise ValidationError(
                f'Account "{account.name}" is archived.', account=account.name
            )
        return account

    async def _require_transaction(
        self, workspace: Workspace, transaction_id: uuid.UUID
    ) -> Transaction:
        transaction = await self._transactions_store.get_transaction(
            workspace.id, transaction_id
        )
        if transaction is None:
            raise NotFoundError("Transaction not found.", transaction_id=transaction_id)
        return transaction

    async def _validate_draft(
        self, workspace: Workspace, draft: TransactionDraft
    ) -> Category | None:
        """Check a draft before anything is written; returns its category."""
        if draft.amount < 0:
            raise ValidationError(
                "Transaction amount cannot be negative.", amount=draft.amount
            )
        await self._require_active_account(workspace, draft.account_id)

        if draft.type == TransactionType.transfer:
            if draft.category_id is not None:
                raise ValidationError("A transfer cannot have a category.")
            if draft.destination_account_id is None:
                raise ValidationError("A transfer needs a destination account.")
            if draft.destination_account_id == draft.account_id:
                raise ValidationError(
                    "A transfer needs two different accounts.",
                    account_id=draft.account_id,
                )
            await self._require_active_account(workspace, draft.destination_account_id)
            return None

        if draft.destination_account_id is not None:
            raise ValidationError(
                f"An {draft.type.value} transaction cannot have a destination account."
            )
        if draft.category_id is None:
            raise ValidationError(
                f"An {draft.type.value} transaction needs a category."
            )
        category = await self._categories_store.get_category(
            workspace.id, draft.category_id
        )
        if category is None:
            raise NotFoundError("Category not found.", category_id=draft.category_id)
        if category.is_group:
            raise ValidationError(
                f'"{category.name}" is a group; record transactions on one of its '
                "subcategories.",
                category=category.name,
            )
        month = month_of(draft.transaction_date)
        if not category.is_visible_in(month):
            raise ValidationError(
                f'Category "{category.name}" is not available in {month}.',
                category=category.name,
                month=month,
            )
        if category.type.value != draft.type.value:
            raise ValidationError(
                f'Category "{category.name}" is an {category.type.value} category '
                f"and cannot take an {draft.type.value} transaction.",
                category=category.name,
            )
        if is_dedicated(category):
            await self._require_savings_account(workspace, category)
        return category

    async def _require_savings_account(
        self, workspace: Workspace, category: Category
    ) -> Account:
        savings = await self._accounts_store.get_account(
            workspace.id, category.dedicated_account_id
        )
        if savings is None or savings.status != AccountStatus.active:
            raise ValidationError(
                f'The savings account dedicated to "{category.name}" is archived.',
                category=category.name,
                account_id=category.dedicated_account_id,
            )
        return savings

    async def _record(
        self, workspace: Workspace, draft: TransactionDraft
    ) -> list[Transaction]:
        draft = replace(draft, amount=round_money(draft.amount))
        category = await self._validate_draft(workspace, draft)
        write = plan_transaction_write(draft, category)
        legs = await self._transactions_store.write(workspace.id, write)
        for leg in legs:
            self._events_store.record(
                workspace.id,
                EventType.transaction_created,
                transaction_id=leg.id,
                type=leg.type.value,
                amount=leg.amount,
                transaction_date=leg.transaction_date,
                account_id=leg.account_id,
                category_id=leg.category_id,
                on_budget=leg.on_budget,
                linked_transaction_id=leg.linked_transaction_id,
            )
        return legs

    async def record_transaction(
        self, workspace: Workspace, payload: TransactionCreate
    ) -> list[Transaction]:
        """Record one transaction, or a linked pair for a dedicated category.

        The visible leg comes first in the returned list.
        """
        draft = TransactionDraft(
            type=payload.type,
            amount=payload.amount,
            transaction_date=payload.transaction_date,
            notes=payload.notes,
            account_id=payload.account_id,
            destination_account_id=payload.destination_account_id,
            category_id=payload.category_id,
        )
        return await self._record(workspace, draft)

    async def record_income(
        self,
        workspace: Workspace,
        *,
        amount: Decimal,
        transaction_date: date,
        account_id: uuid.UUID,
        category_id: uuid.UUID,
        notes: str = "",
    ) -> list[Transaction]:
        return await self._record(
            workspace,
            TransactionDraft(
                type=TransactionType.income,
                amount=amount,
                transaction_date=transaction_date,
                notes=notes,
                account_id=account_id,
                category_id=category_id,
            ),
        )

    async def record_expense(
        self,
        workspace: Workspace,
        *,
        amount: Decimal,
        transaction_date: date,
        account_id: uuid.UUID,
        category_id: uuid.UUID,
        notes: str = "",
    ) -> list[Transaction]:
        return await self._record(
            workspace,
            TransactionDraft(
                type=TransactionType.expense,
                amount=amount,
                transaction_date=transaction_date,
                notes=notes,
                account_id=account_id,
                category_id=category_id,
            ),
        )

    async def record_transfer(
        self,
        workspace: Workspace,
        *,
        amount: Decimal,
        transaction_date: date,
        account_id: uuid.UUID,
        destination_account_id: uuid.UUID,
        notes: str = "",
    ) -> Transaction:
        legs = await self._record(
            workspace,
            TransactionDraft(
                type=TransactionType.transfer,
                amount=amount,
                transaction_date=transaction_date,
                notes=notes,
                account_id=account_id,
                destination_account_id=destination_account_id,
            ),
        )
        return legs[0]

    async def list_transactions(
        self,
        workspace: Workspace,
        *,
        month: str | None = None,
        account_id: uuid.UUID | None = None,
    ) -> list[Transaction]:
        start, end = month_bounds(month) if month is not None else (None, None)
        return await self._transactions_store.list_transactions(
            workspace.id, start=start, end=end, account_id=account_id
        )

    async def get_transaction(
        self, workspace: Workspace, transaction_id: uuid.UUID
    ) -> Transaction:
        return await self._require_transaction(workspace, transaction_id)

    async def update_transaction(
        self,
        workspace: Workspace,
        transaction_id: uuid.UUID,
        changes: dict[str, object],
    ) -> Transaction:
        transaction = await self._require_transaction(workspace, transaction_id)
        if "amount" in changes:
            changes["amount"] = round_money(changes["amount"])

        counterpart = None
        if transaction.linked_transaction_id is not None:
            counterpart = await self._transactions_store.get_transaction(
                workspace.id, transaction.linked_transaction_id
            )

        if counterpart is None:
            updated = await self._update_single(workspace, transaction, changes)
        else:
            updated = await self._update_pair(workspace, transaction, counterpart, changes)

        self._events_store.record(
            workspace.id,
            EventType.transaction_updated,
            transaction_id=transaction.id,
            changes=sorted(changes),
            linked_transaction_id=transaction.linked_transaction_id,
        )
        return updated

    async def _update_single(
        self,
        workspace: Workspace,
        transaction: Transaction,
        changes: dict[str, object],
    ) -> Transaction:
        merged = TransactionDraft(
            type=transaction.type,
            amount=changes.get("amount", transaction.amount),
            transaction_date=changes.get("transaction_date", transaction.transaction_date),
            notes=changes.get("notes", transaction.notes),
            account_id=changes.get("account_id", transaction.account_id),
            destination_account_id=changes.get(
                "destination_account_id", transaction.destination_account_id
            ),
            category_id=changes.get("category_id", transaction.category_id),
            on_budget=transaction.on_budget,
        )
        category = await self._validate_draft(workspace, merged)
        if is_dedicated(category) and merged.category_id != transaction.category_id:
            raise ValidationError(
                f'Category "{category.name}" is dedicated to a savings account; '
                "delete this transaction and record it again in that category.",
                category=category.name,
            )
        updated = await self._transactions_store.update_transaction(
            transaction.id, changes
        )
        if updated is None:
            raise NotFoundError("Transaction not found.", transaction_id=transaction.id)
        return updated

    async def _update_pair(
        self,
        workspace: Workspace,
        transaction: Transaction,
        counterpart: Transaction,
        changes: dict[str, object],
    ) -> Transaction:
        if changes.get("destination_account_id") is not None:
            raise ValidationError(
                "A paired savings transaction cannot have a destination account.",
                transaction_id=transaction.id,
            )
        changes = {
            key: value
            for key, value in changes.items()
            if key != "destination_account_id"
        }
        if "account_id" in changes:
            await self._require_active_account(workspace, changes["account_id"])
        if "transaction_date" in changes:
            category = await self._categories_store.get_category(
                workspace.id, transaction.category_id
            )
            month = month_of(changes["transaction_date"])
            if category is not None and not category.is_visible_in(month):
                raise ValidationError(
                    f'Category "{category.name}" is not available in {month}.',
                    category=category.name,
                    month=month,
                )

        own_updates, counterpart_updates = paired_changes(
            transaction, counterpart, changes
        )
        updated = await self._transactions_store.update_transaction(
            transaction.id, own_updates
        )
        if counterpart_updates:
            await self._transactions_store.update_transaction(
                counterpart.id, counterpart_updates
            )
        if updated is None:
            raise NotFoundError("Transaction not found.", transaction_id=transaction.id)
        return updated

    async def delete_transaction(
        self, workspace: Workspace, transaction_id: uuid.UUID
    ) -> list[uuid.UUID]:
        """Delete a transaction and, for a pair, its mirror leg too."""
        transaction = await self._require_transaction(workspace, transaction_id)
        transaction_ids = [transaction.id]
        if transaction.linked_transaction_id is not None:
            transaction_ids.append(transaction.linked_transaction_id)

        await self._transactions_store.delete_transactions(transaction_ids)
        self._events_store.record(
            workspace.id,
            EventType.transaction_deleted,
            transaction_id=transaction.id,
            type=transaction.type.value,
            amount=transaction.amount,
            transaction_date=transaction.transaction_date,
            deleted_ids=transaction_ids,
        )
        return transaction_ids

    async def summary(
        self, workspace: Workspace, *, month: str | None = None
    ) -> FinancialSummary:
        transactions = await self.list_transactions(workspace, month=month)
        return financial_summary(transactions)
