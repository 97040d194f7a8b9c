from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field

from budget_ledger.models.common import Month


class CategoryType(str, Enum):
    income = "income"
    expense = "expense"


class CategoryStatus(str, Enum):
    active = "active"
    archived = "archived"


class MoveDirection(str, Enum):
    up = "up"
    down = "down"


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    type: CategoryType
    parent_id: uuid.UUID | None = None
    valid_from: Month
    dedicated_account_id: uuid.UUID | None = None
    is_saving: bool = False


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=120)
    valid_from: Month | None = None
    is_saving: bool | None = None


class CategoryMove(BaseModel):
    direction: MoveDirection


class CategoryArchive(BaseModel):
    effective_month: Month
    force: bool = False


class CategoryResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    name: str
    type: CategoryType
    parent_id: uuid.UUID | None
    sort_order: int
    valid_from: str
    archived_from: str | None
    status: CategoryStatus
    dedicated_account_id: uuid.UUID | None
    is_saving: bool


@dataclass(frozen=True, slots=True)
class Category:
    id: uuid.UUID
    workspace_id: uuid.UUID
    name: str
    type: CategoryType
    parent_id: uuid.UUID | None
    sort_order: int
    valid_from: str
    archived_from: str | None
    status: CategoryStatus
    dedicated_account_id: uuid.UUID | None = None
    is_saving: bool = False

    @property
    def is_group(self) -> bool:
        return self.parent_id is None

    def is_visible_in(self, month: str) -> bool:
        if self.valid_from > month:
            return False
        return self.archived_from is None or month < self.archived_from


class ArchiveStatus(str, Enum):
    archived = "archived"
    needs_confirmation = "needs_confirmation"


@dataclass(frozen=True, slots=True)
class ArchiveResult:
    status: ArchiveStatus
    category_ids: list[uuid.UUID] = field(default_factory=list)
    account_ids: list[uuid.UUID] = field(default_factory=list)
    deleted_budget_ids: list[uuid.UUID] = field(default_factory=list)
    message: str | None = None


class ArchiveResultResponse(BaseModel):
    status: ArchiveStatus
    category_ids: list[uuid.UUID]
    account_ids: list[uuid.UUID]
    deleted_budget_ids: list[uuid.UUID]
    message: str | None
