from __future__ import annotations

import uuid

from fastapi import Depends, HTTPException, status

from budget_ledger.data_access import EventsDataAccess, WorkspacesDataAccess
from budget_ledger.errors import ConflictError, NotFoundError
from budget_ledger.models import EventType, Workspace, WorkspaceMember


class WorkspacesService:
    def __init__(
        self,
        workspaces_store: WorkspacesDataAccess = Depends(),
        events_store: EventsDataAccess = Depends(),
    ) -> None:
        self._workspaces_store = workspaces_store
        self._events_store = events_store

    async def create_workspace(self, name: str, owner_user_id: uuid.UUID) -> Workspace:
        workspace = await self._workspaces_store.create_workspace(
            name=name, owner_user_id=owner_user_id
        )
        await self._workspaces_store.add_member(workspace.id, owner_user_id)
        self._events_store.record(
            workspace.id,
            EventType.workspace_created,
            workspace_id=workspace.id,
            name=workspace.name,
        )
        return workspace

    async def list_workspaces(self, user_id: uuid.UUID) -> list[Workspace]:
        return await self._workspaces_store.list_workspaces_for_user(user_id)

    async def add_member(
        self,
        workspace: Workspace,
        member_user_id: uuid.UUID,
        current_user_id: uuid.UUID,
    ) -> None:
        if workspace.owner_user_id != current_user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to manage workspace members.",
            )
        if not await self._workspaces_store.user_exists(member_user_id):
            raise NotFoundError("User not found.", user_id=member_user_id)
        if await self._workspaces_store.member_exists(workspace.id, member_user_id):
            raise ConflictError(
                "User already belongs to the workspace.", user_id=member_user_id
            )
        await self._workspaces_store.add_member(workspace.id, member_user_id)

    async def list_members(self, workspace: Workspace) -> list[WorkspaceMember]:
        return await self._workspaces_store.list_members(workspace.id)
