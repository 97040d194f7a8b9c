from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from budget_ledger.domain.balances import ZERO
from budget_ledger.domain.months import remaining_months, round_money
from budget_ledger.models import Budget, Category, CategoryType


class BudgetAction(str, Enum):
    create = "create"
    update = "update"
    delete = "delete"


@dataclass(frozen=True, slots=True)
class BudgetChange:
    action: BudgetAction
    category_id: uuid.UUID
    month: str
    amount: Decimal = ZERO
    note: str = ""
    budget_id: uuid.UUID | None = None


def resolve_upsert(
    category_id: uuid.UUID,
    month: str,
    existing: Budget | None,
    amount: Decimal,
    note: str | None,
) -> BudgetChange | None:
    """The single write an upsert needs, or ``None`` when nothing changes.

    A ``None`` note keeps the stored note. A row that would end up with a
    zero amount and no note is deleted instead of stored.
    """
    amount = round_money(amount)
    if existing is None:
        note = note or ""
        if amount > 0 or note:
            return BudgetChange(BudgetAction.create, category_id, month, amount, note)
        return None

    note = existing.note if note is None else note
    if amount == 0 and not note:
        return BudgetChange(
            BudgetAction.delete, category_id, month, budget_id=existing.id
        )
    if amount == existing.amount and note == existing.note:
        return None
    return BudgetChange(
        BudgetAction.update, category_id, month, amount, note, budget_id=existing.id
    )


def plan_publish_forward(
    category_id: uuid.UUID,
    from_month: str,
    source: Budget | None,
    existing_by_month: Mapping[str, Budget],
) -> list[BudgetChange]:
    """Copy the ``from_month`` amount into every later month of the same year.

    Only months whose amount differs are written, so a second run with the
    same source plans nothing.
    """
    amount = source.amount if source is not None else ZERO
    note = source.note if source is not None else ""
    changes: list[BudgetChange] = []
    for month in remaining_months(from_month):
        existing = existing_by_month.get(month)
        if existing is None:
            if amount > 0:
                changes.append(
                    BudgetChange(BudgetAction.create, category_id, month, amount, note)
                )
            continue
        if existing.amount == amount:
            continue
        if amount == 0 and not existing.note:
            changes.append(
                BudgetChange(
                    BudgetAction.delete, category_id, month, budget_id=existing.id
                )
            )
        else:
            changes.append(
                BudgetChange(
                    BudgetAction.update,
                    category_id,
                    month,
                    amount,
                    existing.note,
                    budget_id=existing.id,
                )
            )
    return changes


def total_savings(
    budgets: Iterable[Budget], categories: Mapping[uuid.UUID, Category], until_month: str
) -> Decimal:
    """Sum of saving-category budgets planned up to and including ``until_month``."""
    total = sum(
        (
            budget.amount
            for budget in budgets
            if budget.month <= until_month
            and budget.category_id in categories
            and categories[budget.category_id].is_saving
        ),
        ZERO,
    )
    return round_money(total)


def projected_available_balance(
    current_month: str,
    target_month: str,
    current_balance: Decimal,
    budgets: Iterable[Budget],
    categories: Mapping[uuid.UUID, Category],
) -> Decimal:
    """Money still free for saving in ``target_month``.

    The combined balance of active accounts, plus the net planned income of
    non-saving categories from the current month up to ``target_month``,
    minus everything already earmarked by saving budgets.
    """
    budgets = list(budgets)
    projected_net = ZERO
    for budget in budgets:
        category = categories.get(budget.category_id)
        if category is None or category.is_saving:
            continue
        if not current_month <= budget.month <= target_month:
            continue
        if category.type == CategoryType.income:
            projected_net += budget.amount
        else:
            projected_net -= budget.amount
    available = (
        current_balance
        + projected_net
        - total_savings(budgets, categories, target_month)
    )
    return round_money(available)
