from fastapi import APIRouter, Depends, status

from budget_ledger.auth import get_or_create_current_user
from budget_ledger.dependencies import require_workspace_member
from budget_ledger.models import (
    User,
    Workspace,
    WorkspaceCreate,
    WorkspaceMember,
    WorkspaceMemberCreate,
    WorkspaceMemberResponse,
    WorkspaceResponse,
)
from budget_ledger.services import WorkspacesService

router = APIRouter(prefix="/workspaces")


@router.post("", response_model=WorkspaceResponse, status_code=status.HTTP_201_CREATED)
async def create_workspace(
    payload: WorkspaceCreate,
    current_user: User = Depends(get_or_create_current_user),
    workspaces_service: WorkspacesService = Depends(),
) -> Workspace:
    return await workspaces_service.create_workspace(payload.name, current_user.id)


@router.get("", response_model=list[WorkspaceResponse])
async def list_workspaces(
    current_user: User = Depends(get_or_create_current_user),
    workspaces_service: WorkspacesService = Depends(),
) -> list[Workspace]:
    return await workspaces_service.list_workspaces(current_user.id)


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
async def get_workspace(
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to view workspace.")
    ),
) -> Workspace:
    return workspace


@router.get("/{workspace_id}/members", response_model=list[WorkspaceMemberResponse])
async def list_workspace_members(
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to view workspace members.")
    ),
    workspaces_service: WorkspacesService = Depends(),
) -> list[WorkspaceMember]:
    return await workspaces_service.list_members(workspace)


@router.post("/{workspace_id}/members", status_code=status.HTTP_204_NO_CONTENT)
async def add_workspace_member(
    payload: WorkspaceMemberCreate,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage workspace members.")
    ),
    current_user: User = Depends(get_or_create_current_user),
    workspaces_service: WorkspacesService = Depends(),
) -> None:
    await workspaces_service.add_member(workspace, payload.user_id, current_user.id)
