from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from budget_ledger.models.categories import MoveDirection
from budget_ledger.models.common import Money


class AccountType(str, Enum):
    standard = "standard"
    savings = "savings"


class AccountSubtype(str, Enum):
    bank = "bank"
    cash = "cash"


class AccountStatus(str, Enum):
    active = "active"
    archived = "archived"


class AccountCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    account_type: AccountType = AccountType.standard
    subtype: AccountSubtype = AccountSubtype.bank
    currency: str = Field("EUR", min_length=3, max_length=3)
    initial_balance: Money = Decimal("0")
    initial_balance_date: date


class AccountUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=120)


class AccountMove(BaseModel):
    direction: MoveDirection


class AccountResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    name: str
    account_type: AccountType
    subtype: AccountSubtype
    currency: str
    initial_balance: Money
    initial_balance_date: date
    status: AccountStatus
    sort_order: int
    is_default: bool
    created_at: datetime
    balance: Money | None = None


@dataclass(frozen=True, slots=True)
class Account:
    id: uuid.UUID
    workspace_id: uuid.UUID
    name: str
    account_type: AccountType
    subtype: AccountSubtype
    currency: str
    initial_balance: Decimal
    initial_balance_date: date
    status: AccountStatus
    sort_order: int
    is_default: bool
    created_at: datetime
