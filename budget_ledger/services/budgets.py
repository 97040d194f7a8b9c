from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from fastapi import Depends

from budget_ledger.data_access import (
    AccountsDataAccess,
    BudgetsDataAccess,
    CategoriesDataAccess,
    EventsDataAccess,
    TransactionsDataAccess,
)
from budget_ledger.dependencies import get_today
from budget_ledger.domain.balances import ZERO, account_balances
from budget_ledger.domain.budgeting import (
    BudgetAction,
    BudgetChange,
    plan_publish_forward,
    projected_available_balance,
    resolve_upsert,
)
from budget_ledger.domain.months import month_of, remaining_months, round_money
from budget_ledger.domain.tree import CategoryTree
from budget_ledger.errors import NotFoundError, ValidationError
from budget_ledger.models import (
    AccountStatus,
    Budget,
    BudgetUpsert,
    Category,
    CategoryStatus,
    EventType,
    PublishForward,
    PublishSummary,
    Workspace,
)

logger = logging.getLogger(__name__)


class BudgetsService:
    def __init__(
        self,
        budgets_store: BudgetsDataAccess = Depends(),
        categories_store: CategoriesDataAccess = Depends(),
        accounts_store: AccountsDataAccess = Depends(),
        transactions_store: TransactionsDataAccess = Depends(),
        events_store: EventsDataAccess = Depends(),
        today: date = Depends(get_today),
    ) -> None:
        self._budgets_store = budgets_store
        self._categories_store = categories_store
        self._accounts_store = accounts_store
        self._transactions_store = transactions_store
        self._events_store = events_store
        self._today = today

    async def _require_subcategory(
        self, workspace: Workspace, category_id: uuid.UUID
    ) -> Category:
        category = await self._categories_store.get_category(workspace.id, category_id)
        if category is None:
            raise NotFoundError("Category not found.", category_id=category_id)
        if category.is_group:
            raise ValidationError(
                f'"{category.name}" is a group; budgets belong to its subcategories.',
                category=category.name,
            )
        return category

    async def _apply(
        self, workspace: Workspace, change: BudgetChange, summary: PublishSummary
    ) -> Budget | None:
        if change.action == BudgetAction.create:
            budget = await self._budgets_store.create_budget(
                workspace_id=workspace.id,
                category_id=change.category_id,
                month=change.month,
                amount=change.amount,
                note=change.note,
            )
            summary.created += 1
            self._events_store.record(
                workspace.id,
                EventType.budget_created,
                budget_id=budget.id,
                category_id=budget.category_id,
                month=budget.month,
                amount=budget.amount,
            )
            return budget

        if change.action == BudgetAction.update:
            budget = await self._budgets_store.update_budget(
                change.budget_id, {"amount": change.amount, "note": change.note}
            )
            summary.updated += 1
            self._events_store.record(
                workspace.id,
                EventType.budget_updated,
                budget_id=change.budget_id,
                category_id=change.category_id,
                month=change.month,
                amount=change.amount,
            )
            return budget

        await self._budgets_store.delete_budgets([change.budget_id])
        summary.deleted += 1
        self._events_store.record(
            workspace.id,
            EventType.budget_deleted,
            budget_id=change.budget_id,
            category_id=change.category_id,
            month=change.month,
        )
        return None

    async def projected_available_balance(
        self, workspace: Workspace, target_month: str
    ) -> Decimal:
        accounts = [
            account
            for account in await self._accounts_store.list_accounts(workspace.id)
            if account.status == AccountStatus.active
        ]
        transactions = await self._transactions_store.list_transactions(workspace.id)
        balances = account_balances(accounts, transactions)
        categories = {
            category.id: category
            for category in await self._categories_store.list_categories(workspace.id)
        }
        budgets = await self._budgets_store.list_budgets(
            workspace.id, to_month=target_month
        )
        return projected_available_balance(
            month_of(self._today),
            target_month,
            sum(balances.values(), ZERO),
            budgets,
            categories,
        )

    async def upsert_budget(
        self, workspace: Workspace, payload: BudgetUpsert
    ) -> Budget | None:
        """Create, update or delete the budget of one category and month.

        Returns the stored budget, or ``None`` when the row ended up deleted or
        never existed.
        """
        category = await self._require_subcategory(workspace, payload.category_id)
        existing = await self._budgets_store.find_budget(category.id, payload.month)
        change = resolve_upsert(
            category.id, payload.month, existing, payload.amount, payload.note
        )
        if change is None:
            return existing
        if change.action != BudgetAction.delete and not category.is_visible_in(
            payload.month
        ):
            raise ValidationError(
                f'Category "{category.name}" is not available in {payload.month}.',
                category=category.name,
                month=payload.month,
            )

        if category.is_saving:
            old_amount = existing.amount if existing is not None else ZERO
            increase = round_money(payload.amount) - old_amount
            if increase > 0:
                available = await self.projected_available_balance(
                    workspace, payload.month
                )
                if increase > available:
                    raise ValidationError(
                        f'Saving {increase} more in "{category.name}" for '
                        f"{payload.month} exceeds the projected available balance "
                        f"of {available} by {increase - available}.",
                        category=category.name,
                        month=payload.month,
                        available=available,
                    )

        return await self._apply(workspace, change, PublishSummary())

    async def list_budgets(
        self, workspace: Workspace, *, month: str | None = None
    ) -> list[Budget]:
        return await self._budgets_store.list_budgets(workspace.id, month=month)

    async def delete_budget(self, workspace: Workspace, budget_id: uuid.UUID) -> None:
        budget = await self._budgets_store.get_budget(workspace.id, budget_id)
        if budget is None:
            raise NotFoundError("Budget not found.", budget_id=budget_id)
        await self._apply(
            workspace,
            BudgetChange(
                BudgetAction.delete,
                budget.category_id,
                budget.month,
                budget_id=budget.id,
            ),
            PublishSummary(),
        )

    async def _publish(
        self,
        workspace: Workspace,
        categories: Iterable[Category],
        from_month: str,
    ) -> PublishSummary:
        """Publish forward for each category, within the months it is visible."""
        categories = list(categories)
        category_ids = [category.id for category in categories]
        summary = PublishSummary()
        if not categories or not remaining_months(from_month):
            return summary

        budgets = await self._budgets_store.list_budgets(
            workspace.id,
            from_month=from_month,
            to_month=f"{from_month[:4]}-12",
            category_ids=category_ids,
        )
        by_category: dict[uuid.UUID, dict[str, Budget]] = {}
        for budget in budgets:
            by_category.setdefault(budget.category_id, {})[budget.month] = budget

        for category in categories:
            existing = by_category.get(category.id, {})
            changes = plan_publish_forward(
                category.id, from_month, existing.get(from_month), existing
            )
            for change in changes:
                if category.is_visible_in(change.month):
                    await self._apply(workspace, change, summary)

        logger.info(
            "Published %s forward for %d categories: %d created, %d updated, "
            "%d deleted",
            from_month,
            len(category_ids),
            summary.created,
            summary.updated,
            summary.deleted,
        )
        return summary

    async def publish_forward(
        self, workspace: Workspace, payload: PublishForward
    ) -> PublishSummary:
        tree = CategoryTree.build(
            await self._categories_store.list_categories(workspace.id)
        )
        category = tree.get(payload.category_id)
        if category is None:
            raise NotFoundError("Category not found.", category_id=payload.category_id)

        targets = [category]
        if payload.include_subcategories:
            targets.extend(tree.children_of(category.id))
        return await self._publish(
            workspace,
            [item for item in targets if item.status == CategoryStatus.active],
            payload.from_month,
        )

    async def publish_forward_all(
        self, workspace: Workspace, from_month: str
    ) -> PublishSummary:
        categories = await self._categories_store.list_categories(workspace.id)
        return await self._publish(
            workspace,
            [
                category
                for category in categories
                if not category.is_group and category.status == CategoryStatus.active
            ],
            from_month,
        )
