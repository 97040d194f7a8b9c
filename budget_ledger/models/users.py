from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel

from budget_ledger.models.workspaces import WorkspaceResponse


@dataclass(frozen=True, slots=True)
class User:
    id: uuid.UUID
    email: str
    created_at: datetime
    last_seen_at: datetime


class UserProfileResponse(BaseModel):
    """The signed-in user and the workspaces they can open."""

    id: uuid.UUID
    email: str
    created_at: datetime
    last_seen_at: datetime
    workspaces: list[WorkspaceResponse]
