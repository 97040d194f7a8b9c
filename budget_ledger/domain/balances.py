from __future__ import annotations

import uuid
from collections.abc import Collection, Iterable
from datetime import date
from decimal import Decimal

from budget_ledger.models import (
    Account,
    FinancialSummary,
    Transaction,
    TransactionType,
)

# Balances within this distance of zero count as settled.
BALANCE_EPSILON = Decimal("0.001")

ZERO = Decimal("0")


def leg_effect(transaction: Transaction, account_id: uuid.UUID) -> Decimal:
    """Signed amount ``transaction`` moves on ``account_id``."""
    if transaction.type == TransactionType.transfer:
        effect = ZERO
        if transaction.account_id == account_id:
            effect -= transaction.amount
        if transaction.destination_account_id == account_id:
            effect += transaction.amount
        return effect
    if transaction.account_id != account_id:
        return ZERO
    if transaction.type == TransactionType.income:
        return transaction.amount
    return -transaction.amount


def scope_effect(
    transaction: Transaction, account_ids: Collection[uuid.UUID]
) -> Decimal:
    """Net amount ``transaction`` adds to the combined balance of ``account_ids``.

    A transfer between two in-scope accounts nets to zero.
    """
    if transaction.type == TransactionType.transfer:
        effect = ZERO
        if transaction.account_id in account_ids:
            effect -= transaction.amount
        if transaction.destination_account_id in account_ids:
            effect += transaction.amount
        return effect
    if transaction.account_id not in account_ids:
        return ZERO
    if transaction.type == TransactionType.income:
        return transaction.amount
    return -transaction.amount


def account_balance(
    account: Account,
    transactions: Iterable[Transaction],
    *,
    as_of: date | None = None,
) -> Decimal:
    balance = ZERO
    if as_of is None or account.initial_balance_date <= as_of:
        balance += account.initial_balance
    for transaction in transactions:
        if as_of is not None and transaction.transaction_date > as_of:
            continue
        balance += leg_effect(transaction, account.id)
    return balance


def account_balances(
    accounts: Iterable[Account],
    transactions: Iterable[Transaction],
    *,
    as_of: date | None = None,
) -> dict[uuid.UUID, Decimal]:
    """Balances of several accounts in a single pass over ``transactions``."""
    balances: dict[uuid.UUID, Decimal] = {}
    for account in accounts:
        if as_of is None or account.initial_balance_date <= as_of:
            balances[account.id] = account.initial_balance
        else:
            balances[account.id] = ZERO
    for transaction in transactions:
        if as_of is not None and transaction.transaction_date > as_of:
            continue
        touched = {transaction.account_id, transaction.destination_account_id}
        for account_id in touched:
            if account_id in balances:
                balances[account_id] += leg_effect(transaction, account_id)
    return balances


def is_settled(balance: Decimal) -> bool:
    return abs(balance) <= BALANCE_EPSILON


def financial_summary(transactions: Iterable[Transaction]) -> FinancialSummary:
    """On-budget income and expense totals; mirror legs and transfers are skipped."""
    income = ZERO
    expense = ZERO
    for transaction in transactions:
        if not transaction.on_budget:
            continue
        if transaction.type == TransactionType.income:
            income += transaction.amount
        elif transaction.type == TransactionType.expense:
            expense += transaction.amount
    return FinancialSummary(income=income, expense=expense)
