from __future__ import annotations

import logging
import uuid

from fastapi import Depends

from budget_ledger.data_access import (
    AccountsDataAccess,
    BudgetsDataAccess,
    CategoriesDataAccess,
    EventsDataAccess,
    TransactionsDataAccess,
)
from budget_ledger.domain.archive import plan_category_archive
from budget_ledger.domain.balances import account_balances
from budget_ledger.domain.tree import CategoryTree
from budget_ledger.errors import LedgerError
from budget_ledger.models import (
    ArchiveResult,
    ArchiveStatus,
    CategoryStatus,
    EventType,
    Workspace,
)

logger = logging.getLogger(__name__)


class ArchiveService:
    def __init__(
        self,
        categories_store: CategoriesDataAccess = Depends(),
        accounts_store: AccountsDataAccess = Depends(),
        transactions_store: TransactionsDataAccess = Depends(),
        budgets_store: BudgetsDataAccess = Depends(),
        events_store: EventsDataAccess = Depends(),
    ) -> None:
        self._categories_store = categories_store
        self._accounts_store = accounts_store
        self._transactions_store = transactions_store
        self._budgets_store = budgets_store
        self._events_store = events_store

    async def archive_category(
        self,
        workspace: Workspace,
        category_id: uuid.UUID,
        effective_month: str,
        *,
        force: bool = False,
    ) -> ArchiveResult:
        """Archive a category (and a group's children) from ``effective_month``.

        Every check runs before the first write. When active dedicated
        accounts would be archived along with the categories, nothing is
        written until the call is repeated with ``force``.
        """
        tree = CategoryTree.build(
            await self._categories_store.list_categories(workspace.id)
        )
        related = tree.with_children(category_id) if tree.get(category_id) else []
        related_ids = [category.id for category in related]

        accounts = {
            account.id: account
            for account in await self._accounts_store.list_accounts(workspace.id)
        }
        transactions = await self._transactions_store.list_transactions(workspace.id)
        budgets = await self._budgets_store.list_budgets(
            workspace.id, from_month=effective_month, category_ids=related_ids
        )

        try:
            plan = plan_category_archive(
                tree,
                category_id,
                effective_month,
                transactions=transactions,
                budgets=budgets,
                accounts=accounts,
                balances=account_balances(accounts.values(), transactions),
                force=force,
            )
        except LedgerError as exc:
            logger.warning(
                "Refused to archive category %s from %s: %s",
                category_id,
                effective_month,
                exc.detail,
            )
            raise

        account_ids = [account.id for account in plan.accounts_to_archive]
        if plan.needs_confirmation and not force:
            names = ", ".join(f'"{account.name}"' for account in plan.accounts_to_archive)
            return ArchiveResult(
                status=ArchiveStatus.needs_confirmation,
                category_ids=plan.category_ids,
                account_ids=account_ids,
                message=(
                    f"Archiving also archives the dedicated accounts {names}; "
                    "repeat with force to confirm."
                ),
            )

        unchanged = all(
            category.status == CategoryStatus.archived
            and category.archived_from == effective_month
            for category in plan.categories
        )
        if unchanged and not account_ids and not plan.budget_ids_to_delete:
            return ArchiveResult(
                status=ArchiveStatus.archived, category_ids=plan.category_ids
            )

        await self._categories_store.archive_categories(
            plan.category_ids, effective_month
        )
        await self._budgets_store.delete_budgets(plan.budget_ids_to_delete)
        await self._accounts_store.archive_accounts(account_ids)

        for category in plan.categories:
            self._events_store.record(
                workspace.id,
                EventType.category_archived,
                category_id=category.id,
                name=category.name,
                archived_from=effective_month,
            )
        for account in plan.accounts_to_archive:
            self._events_store.record(
                workspace.id,
                EventType.account_archived,
                account_id=account.id,
                name=account.name,
            )

        return ArchiveResult(
            status=ArchiveStatus.archived,
            category_ids=plan.category_ids,
            account_ids=account_ids,
            deleted_budget_ids=plan.budget_ids_to_delete,
        )
