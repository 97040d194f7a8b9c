from __future__ import annotations

import uuid

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from budget_ledger import db
from budget_ledger.data_access.store import flush
from budget_ledger.models import Workspace, WorkspaceMember
from budget_ledger.tables import UsersTable, WorkspaceMembersTable, WorkspacesTable


class WorkspacesDataAccess:
    def __init__(self, session: AsyncSession = Depends(db.get_session)) -> None:
        self._session = session

    async def get_workspace(self, workspace_id: uuid.UUID) -> Workspace | None:
        workspace = await self._session.get(WorkspacesTable, workspace_id)
        if workspace is None:
            return None
        return _to_workspace(workspace)

    async def create_workspace(
        self, *, name: str, owner_user_id: uuid.UUID
    ) -> Workspace:
        workspace = WorkspacesTable(name=name, owner_user_id=owner_user_id)
        self._session.add(workspace)
        await flush(self._session, action="creating a workspace")
        await self._session.refresh(workspace)
        return _to_workspace(workspace)

    async def list_workspaces_for_user(self, user_id: uuid.UUID) -> list[Workspace]:
        result = await self._session.execute(
            select(WorkspacesTable)
            .join(
                WorkspaceMembersTable,
                WorkspaceMembersTable.workspace_id == WorkspacesTable.id,
            )
            .where(WorkspaceMembersTable.user_id == user_id)
            .order_by(WorkspacesTable.created_at, WorkspacesTable.name)
        )
        return [_to_workspace(workspace) for workspace in result.scalars()]

    async def user_exists(self, user_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            select(UsersTable.id).where(UsersTable.id == user_id)
        )
        return result.scalar_one_or_none() is not None

    async def member_exists(
        self, workspace_id: uuid.UUID, user_id: uuid.UUID
    ) -> bool:
        result = await self._session.execute(
            select(WorkspaceMembersTable.id).where(
                WorkspaceMembersTable.workspace_id == workspace_id,
                WorkspaceMembersTable.user_id == user_id,
            )
        )
        return result.scalar_one_or_none() is not None

    async def add_member(self, workspace_id: uuid.UUID, user_id: uuid.UUID) -> None:
        self._session.add(
            WorkspaceMembersTable(workspace_id=workspace_id, user_id=user_id)
        )
        await flush(self._session, action="adding a workspace member")

    async def list_members(self, workspace_id: uuid.UUID) -> list[WorkspaceMember]:
        result = await self._session.execute(
            select(
                UsersTable.id,
                UsersTable.email,
                WorkspaceMembersTable.created_at,
            )
            .join(WorkspaceMembersTable, WorkspaceMembersTable.user_id == UsersTable.id)
            .where(WorkspaceMembersTable.workspace_id == workspace_id)
            .order_by(WorkspaceMembersTable.created_at, UsersTable.email)
        )
        return [
            WorkspaceMember(user_id=row.id, email=row.email, joined_at=row.created_at)
            for row in result.all()
        ]


def _to_workspace(workspace: WorkspacesTable) -> Workspace:
    return Workspace(
        id=workspace.id,
        name=workspace.name,
        owner_user_id=workspace.owner_user_id,
        created_at=workspace.created_at,
    )
