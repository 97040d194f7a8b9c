"""Dedicated-savings pairing.

A subcategory linked to a savings account acts as a virtual sub-ledger of that
account. Spending in the category moves money into savings, income in the
category withdraws it again. Each visible leg gets an off-budget mirror leg on
the savings account so both balances stay correct without general double-entry.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from budget_ledger.errors import ValidationError
from budget_ledger.models import (
    Category,
    SingleTransaction,
    Transaction,
    TransactionDraft,
    TransactionPair,
    TransactionType,
    TransactionWrite,
)

SAVINGS_PREFIX = "Savings: "
WITHDRAWAL_PREFIX = "Savings withdrawal: "

_PREFIXES = (WITHDRAWAL_PREFIX, SAVINGS_PREFIX)

_MIRROR_TYPE = {
    TransactionType.expense: TransactionType.income,
    TransactionType.income: TransactionType.expense,
}


def is_dedicated(category: Category | None) -> bool:
    return category is not None and category.dedicated_account_id is not None


def strip_pairing_prefix(notes: str) -> str:
    for prefix in _PREFIXES:
        if notes.startswith(prefix):
            return notes[len(prefix):]
    return notes


def mirror_notes(primary_type: TransactionType, notes: str) -> str:
    prefix = SAVINGS_PREFIX if primary_type == TransactionType.expense else WITHDRAWAL_PREFIX
    return prefix + strip_pairing_prefix(notes)


def plan_transaction_write(
    draft: TransactionDraft, category: Category | None
) -> TransactionWrite:
    if not is_dedicated(category) or draft.type == TransactionType.transfer:
        return SingleTransaction(draft=draft)

    savings_account_id = category.dedicated_account_id
    if draft.account_id == savings_account_id:
        raise ValidationError(
            f'Category "{category.name}" already moves money on this savings '
            "account; record it on a standard account.",
            category=category.name,
            account_id=draft.account_id,
        )

    notes = strip_pairing_prefix(draft.notes)
    primary = replace(draft, notes=notes, on_budget=True)
    mirror = TransactionDraft(
        type=_MIRROR_TYPE[draft.type],
        amount=draft.amount,
        transaction_date=draft.transaction_date,
        notes=mirror_notes(draft.type, notes),
        account_id=savings_account_id,
        category_id=draft.category_id,
        on_budget=False,
    )
    return TransactionPair(primary=primary, mirror=mirror)


def paired_changes(
    edited: Transaction, counterpart: Transaction, changes: dict[str, Any]
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split ``changes`` to ``edited`` into updates for both legs of a pair.

    Amount and date are copied verbatim. Notes are normalised on the visible
    leg and regenerated with the pairing prefix on the mirror leg.
    """
    if "category_id" in changes and changes["category_id"] != edited.category_id:
        raise ValidationError(
            "A paired savings transaction cannot change category; delete it "
            "and record it again.",
            transaction_id=edited.id,
        )
    if "account_id" in changes and not edited.on_budget:
        if changes["account_id"] != edited.account_id:
            raise ValidationError(
                "The savings leg of a paired transaction stays on its "
                "dedicated account.",
                transaction_id=edited.id,
            )

    primary, mirror = (edited, counterpart) if edited.on_budget else (counterpart, edited)
    primary_updates: dict[str, Any] = {}
    mirror_updates: dict[str, Any] = {}

    for field in ("amount", "transaction_date"):
        if field in changes:
            primary_updates[field] = changes[field]
            mirror_updates[field] = changes[field]

    if "notes" in changes:
        notes = strip_pairing_prefix(changes["notes"] or "")
        primary_updates["notes"] = notes
        mirror_updates["notes"] = mirror_notes(primary.type, notes)

    if "account_id" in changes and edited.on_budget:
        if changes["account_id"] == mirror.account_id:
            raise ValidationError(
                "The visible leg of a paired transaction cannot sit on the "
                "dedicated savings account.",
                transaction_id=edited.id,
            )
        primary_updates["account_id"] = changes["account_id"]

    if edited.on_budget:
        return primary_updates, mirror_updates
    return mirror_updates, primary_updates
