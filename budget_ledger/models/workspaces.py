from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, Field


@dataclass(frozen=True, slots=True)
class Workspace:
    id: uuid.UUID
    name: str
    owner_user_id: uuid.UUID
    created_at: datetime


class WorkspaceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)


class WorkspaceResponse(BaseModel):
    id: uuid.UUID
    name: str
    owner_user_id: uuid.UUID
    created_at: datetime


class WorkspaceMemberCreate(BaseModel):
    user_id: uuid.UUID


@dataclass(frozen=True, slots=True)
class WorkspaceMember:
    user_id: uuid.UUID
    email: str
    joined_at: datetime


class WorkspaceMemberResponse(BaseModel):
    user_id: uuid.UUID
    email: str
    joined_at: datetime
