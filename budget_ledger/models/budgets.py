from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal

from pydantic import BaseModel, Field

from budget_ledger.models.common import Money, Month


class BudgetUpsert(BaseModel):
    category_id: uuid.UUID
    month: Month
    amount: Money = Field(..., ge=0)
    note: str | None = Field(None, max_length=500)


class BudgetResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    category_id: uuid.UUID
    month: str
    amount: Money
    note: str


class BudgetUpsertResponse(BaseModel):
    budget: BudgetResponse | None
    # True when no row is stored for the category and month.
    deleted: bool = False


class PublishForward(BaseModel):
    category_id: uuid.UUID
    from_month: Month
    include_subcategories: bool = False


class PublishForwardAll(BaseModel):
    from_month: Month


class PublishSummaryResponse(BaseModel):
    created: int
    updated: int
    deleted: int


@dataclass(frozen=True, slots=True)
class Budget:
    id: uuid.UUID
    workspace_id: uuid.UUID
    category_id: uuid.UUID
    month: str
    amount: Decimal
    note: str


@dataclass(slots=True)
class PublishSummary:
    created: int = 0
    updated: int = 0
    deleted: int = 0

    @property
    def writes(self) -> int:
        return self.created + self.updated + self.deleted


class AvailableBalanceResponse(BaseModel):
    month: str
    available: Money
