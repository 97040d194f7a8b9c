"""Year-long cash-flow projection.

The engine produces 13 points per year, a prior-year anchor followed by the
twelve months, each with up to three running balances:

* ``plan`` walks the anchor forward by budgeted income minus budgeted expense;
* ``actual`` walks it forward by recorded transactions, for closed months only;
* ``forecast`` starts on the last actual point, blends what has already been
  spent this month with what is still planned, then follows the plan.

Values accumulate at full precision and are rounded only when emitted.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from budget_ledger.domain.balances import ZERO, scope_effect
from budget_ledger.domain.months import format_month, month_of, parse_month, round_money
from budget_ledger.models import (
    Account,
    Budget,
    CategoryType,
    Forecast,
    ForecastPoint,
    Transaction,
    TransactionType,
)


@dataclass(slots=True)
class _Ledger:
    """Per-month aggregates of one snapshot, computed once per projection."""

    account_ids: set[uuid.UUID]
    initial_by_month: dict[str, Decimal] = field(default_factory=lambda: defaultdict(Decimal))
    actual_by_month: dict[str, Decimal] = field(default_factory=lambda: defaultdict(Decimal))
    planned_by_month: dict[str, Decimal] = field(default_factory=lambda: defaultdict(Decimal))
    planned_by_category: dict[tuple[str, uuid.UUID], Decimal] = field(
        default_factory=lambda: defaultdict(Decimal)
    )
    spent_by_category: dict[tuple[str, uuid.UUID], Decimal] = field(
        default_factory=lambda: defaultdict(Decimal)
    )


def _signed(category_type: CategoryType, amount: Decimal) -> Decimal:
    return amount if category_type == CategoryType.income else -amount


def _build_ledger(
    accounts: Sequence[Account],
    transactions: Iterable[Transaction],
    budgets: Iterable[Budget],
    category_types: Mapping[uuid.UUID, CategoryType],
) -> _Ledger:
    ledger = _Ledger(account_ids={account.id for account in accounts})

    for account in accounts:
        ledger.initial_by_month[month_of(account.initial_balance_date)] += account.initial_balance

    for transaction in transactions:
        effect = scope_effect(transaction, ledger.account_ids)
        month = month_of(transaction.transaction_date)
        ledger.actual_by_month[month] += effect
        if (
            transaction.on_budget
            and transaction.category_id is not None
            and transaction.type != TransactionType.transfer
            and transaction.account_id in ledger.account_ids
        ):
            ledger.spent_by_category[(month, transaction.category_id)] += transaction.amount

    for budget in budgets:
        category_type = category_types.get(budget.category_id)
        if category_type is None:
            continue
        ledger.planned_by_month[budget.month] += _signed(category_type, budget.amount)
        ledger.planned_by_category[(budget.month, budget.category_id)] += budget.amount

    return ledger


def _anchor_balance(
    accounts: Sequence[Account], transactions: Iterable[Transaction], year: int
) -> Decimal:
    year_start = date(year, 1, 1)
    account_ids = {account.id for account in accounts}
    balance = sum(
        (
            account.initial_balance
            for account in accounts
            if account.initial_balance_date < year_start
        ),
        ZERO,
    )
    for transaction in transactions:
        if transaction.transaction_date < year_start:
            balance += scope_effect(transaction, account_ids)
    return balance


def _blended_month_delta(
    ledger: _Ledger, month: str, category_types: Mapping[uuid.UUID, CategoryType]
) -> Decimal:
    """Delta of a month in progress: per category the larger of spent and planned."""
    category_ids = {
        category_id
        for (key_month, category_id) in (*ledger.planned_by_category, *ledger.spent_by_category)
        if key_month == month
    }
    delta = ZERO
    for category_id in category_ids:
        category_type = category_types.get(category_id)
        if category_type is None:
            continue
        spent = ledger.spent_by_category.get((month, category_id), ZERO)
        planned = ledger.planned_by_category.get((month, category_id), ZERO)
        delta += _signed(category_type, max(spent, planned))
    return delta


def _round(value: Decimal | None) -> Decimal | None:
    return None if value is None else round_money(value)


def _project_year(
    year: int,
    current_month: str,
    ledger: _Ledger,
    anchor: Decimal,
    category_types: Mapping[uuid.UUID, CategoryType],
) -> tuple[list[dict[str, Decimal | None]], Decimal]:
    """Raw (unrounded) rows for ``year`` plus the balance carried into next year."""
    current_year, current_month_number = parse_month(current_month)
    rows: list[dict[str, Decimal | None]] = [
        {
            "actual": anchor if year <= current_year else None,
            "plan": anchor,
            "forecast": None,
        }
    ]

    running_plan = anchor
    running_actual = anchor
    running_forecast: Decimal | None = None
    for month_number in range(1, 13):
        month = format_month(year, month_number)
        initial = ledger.initial_by_month.get(month, ZERO)
        row: dict[str, Decimal | None] = {"actual": None, "plan": None, "forecast": None}

        running_plan += initial + ledger.planned_by_month.get(month, ZERO)
        row["plan"] = running_plan

        month_is_closed = year < current_year or (
            year == current_year and month_number < current_month_number
        )
        if month_is_closed:
            running_actual += initial + ledger.actual_by_month.get(month, ZERO)
            row["actual"] = running_actual
        elif year == current_year:
            if running_forecast is None:
                # joins the forecast line to the last actual point
                rows[-1]["forecast"] = running_actual
                running_forecast = running_actual + initial + _blended_month_delta(
                    ledger, month, category_types
                )
            else:
                running_forecast += initial + ledger.planned_by_month.get(month, ZERO)
            row["forecast"] = running_forecast

        rows.append(row)

    if year < current_year:
        carried = running_actual
    elif year == current_year:
        carried = running_forecast if running_forecast is not None else running_actual
    else:
        carried = running_plan
    return rows, carried


def build_forecast(
    year: int,
    current_month: str,
    accounts: Sequence[Account],
    transactions: Sequence[Transaction],
    budgets: Sequence[Budget],
    category_types: Mapping[uuid.UUID, CategoryType],
) -> Forecast:
    """Project ``year`` from a snapshot of the workspace.

    Years after the current one are seeded with the current year's December
    forecast and carried forward year by year on the plan alone.
    """
    current_year, _ = parse_month(current_month)
    account_ids = {account.id for account in accounts}
    in_scope = [
        transaction
        for transaction in transactions
        if transaction.account_id in account_ids
        or transaction.destination_account_id in account_ids
    ]
    ledger = _build_ledger(accounts, in_scope, budgets, category_types)

    first_year = min(year, current_year)
    anchor = _anchor_balance(accounts, in_scope, first_year)
    rows: list[dict[str, Decimal | None]] = []
    for projected_year in range(first_year, year + 1):
        rows, anchor = _project_year(
            projected_year, current_month, ledger, anchor, category_types
        )

    labels = [str(year - 1)] + [format_month(year, month) for month in range(1, 13)]
    points = [
        ForecastPoint(
            label=label,
            actual=_round(row["actual"]),
            plan=_round(row["plan"]),
            forecast=_round(row["forecast"]),
        )
        for label, row in zip(labels, rows)
    ]
    return Forecast(year=year, current_month=current_month, points=points)
