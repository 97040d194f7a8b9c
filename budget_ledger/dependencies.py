from __future__ import annotations

import uuid
from datetime import date

from fastapi import Depends, HTTPException, status

from budget_ledger.auth import get_or_create_current_user
from budget_ledger.data_access import WorkspacesDataAccess
from budget_ledger.models import User, Workspace


def get_today() -> date:
    return date.today()


def require_workspace_member(detail: str):
    async def _dependency(
        workspace_id: uuid.UUID,
        current_user: User = Depends(get_or_create_current_user),
        workspaces_store: WorkspacesDataAccess = Depends(),
    ) -> Workspace:
        workspace = await workspaces_store.get_workspace(workspace_id)
        if workspace is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Workspace not found.",
            )
        is_member = await workspaces_store.member_exists(workspace_id, current_user.id)
        if not is_member:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=detail,
            )
        return workspace

    return _dependency
