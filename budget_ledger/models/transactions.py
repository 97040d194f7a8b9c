from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from budget_ledger.models.common import Money


class TransactionType(str, Enum):
    income = "income"
    expense = "expense"
    transfer = "transfer"


class TransactionCreate(BaseModel):
    type: TransactionType
    amount: Money = Field(..., ge=0)
    transaction_date: date
    notes: str = Field("", max_length=500)
    account_id: uuid.UUID
    destination_account_id: uuid.UUID | None = None
    category_id: uuid.UUID | None = None


class TransactionUpdate(BaseModel):
    amount: Money | None = Field(None, ge=0)
    transaction_date: date | None = None
    notes: str | None = Field(None, max_length=500)
    account_id: uuid.UUID | None = None
    destination_account_id: uuid.UUID | None = None
    category_id: uuid.UUID | None = None


class TransactionResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    type: TransactionType
    amount: Money
    transaction_date: date
    notes: str
    account_id: uuid.UUID
    destination_account_id: uuid.UUID | None
    category_id: uuid.UUID | None
    on_budget: bool
    linked_transaction_id: uuid.UUID | None
    created_at: datetime


class FinancialSummaryResponse(BaseModel):
    month: str | None
    income: Money
    expense: Money
    balance: Money


@dataclass(frozen=True, slots=True)
class Transaction:
    id: uuid.UUID
    workspace_id: uuid.UUID
    type: TransactionType
    amount: Decimal
    transaction_date: date
    notes: str
    account_id: uuid.UUID
    destination_account_id: uuid.UUID | None
    category_id: uuid.UUID | None
    on_budget: bool
    linked_transaction_id: uuid.UUID | None
    created_at: datetime


@dataclass(frozen=True, slots=True)
class TransactionDraft:
    type: TransactionType
    amount: Decimal
    transaction_date: date
    notes: str
    account_id: uuid.UUID
    destination_account_id: uuid.UUID | None = None
    category_id: uuid.UUID | None = None
    on_budget: bool = True


@dataclass(frozen=True, slots=True)
class SingleTransaction:
    draft: TransactionDraft


@dataclass(frozen=True, slots=True)
class TransactionPair:
    """A visible leg and its off-budget mirror on a dedicated savings account.

    Both legs are written together and reference each other through
    ``linked_transaction_id``.
    """

    primary: TransactionDraft
    mirror: TransactionDraft


TransactionWrite = SingleTransaction | TransactionPair


@dataclass(frozen=True, slots=True)
class FinancialSummary:
    income: Decimal
    expense: Decimal

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense
