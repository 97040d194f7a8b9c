from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from budget_ledger.domain.balances import ZERO, is_settled
from budget_ledger.domain.months import month_of
from budget_ledger.domain.tree import CategoryTree
from budget_ledger.errors import ConflictError, NonZeroBalanceError, NotFoundError
from budget_ledger.models import (
    Account,
    AccountStatus,
    Budget,
    Category,
    CategoryStatus,
    Transaction,
)


@dataclass(slots=True)
class CategoryArchivePlan:
    categories: list[Category]
    effective_month: str
    budget_ids_to_delete: list[uuid.UUID] = field(default_factory=list)
    accounts_to_archive: list[Account] = field(default_factory=list)

    @property
    def needs_confirmation(self) -> bool:
        return bool(self.accounts_to_archive)

    @property
    def category_ids(self) -> list[uuid.UUID]:
        return [category.id for category in self.categories]


def plan_category_archive(
    tree: CategoryTree,
    category_id: uuid.UUID,
    effective_month: str,
    *,
    transactions: Iterable[Transaction],
    budgets: Iterable[Budget],
    accounts: Mapping[uuid.UUID, Account],
    balances: Mapping[uuid.UUID, Decimal],
    force: bool = False,
) -> CategoryArchivePlan:
    """Check that archiving ``category_id`` from ``effective_month`` is safe.

    Raises ``ConflictError`` for transactions or budgets in or after the month
    and ``NonZeroBalanceError`` for dedicated accounts still holding money,
    unless ``force`` is set. A dedicated account that another active category
    still uses is left alone. The returned plan lists every row to change.
    """
    category = tree.get(category_id)
    if category is None:
        raise NotFoundError("Category not found.", category_id=category_id)

    related = tree.with_children(category_id)
    related_ids = {item.id for item in related}
    names = {item.id: item.name for item in related}

    if not force:
        for transaction in transactions:
            if (
                transaction.category_id in related_ids
                and month_of(transaction.transaction_date) >= effective_month
            ):
                raise ConflictError(
                    f'Category "{names[transaction.category_id]}" has a transaction '
                    f"dated {transaction.transaction_date.isoformat()}, in or after "
                    f"{effective_month}.",
                    category=names[transaction.category_id],
                    month=effective_month,
                    transaction_id=transaction.id,
                )

    budgets_to_delete: list[uuid.UUID] = []
    for budget in budgets:
        if budget.category_id not in related_ids or budget.month < effective_month:
            continue
        if budget.amount > 0 or budget.note:
            if not force:
                raise ConflictError(
                    f'Category "{names[budget.category_id]}" has a budget planned '
                    f"for {budget.month}, in or after {effective_month}.",
                    category=names[budget.category_id],
                    month=budget.month,
                )
            continue
        budgets_to_delete.append(budget.id)

    dedicated_accounts: list[Account] = []
    for item in related:
        if item.dedicated_account_id is None:
            continue
        account = accounts.get(item.dedicated_account_id)
        if account is None or account.status != AccountStatus.active:
            continue
        if account in dedicated_accounts:
            continue
        if any(
            other.id not in related_ids and other.status == CategoryStatus.active
            for other in tree.dedicated_to(account.id)
        ):
            continue
        balance = balances.get(account.id, ZERO)
        if not force and not is_settled(balance):
            raise NonZeroBalanceError(
                f'Account "{account.name}" dedicated to "{item.name}" still holds '
                f"{balance}; empty it before archiving.",
                category=item.name,
                account=account.name,
                balance=balance,
            )
        dedicated_accounts.append(account)

    return CategoryArchivePlan(
        categories=related,
        effective_month=effective_month,
        budget_ids_to_delete=budgets_to_delete,
        accounts_to_archive=dedicated_accounts,
    )
