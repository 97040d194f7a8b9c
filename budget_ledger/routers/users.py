from fastapi import APIRouter, Depends

from budget_ledger.auth import get_or_create_current_user
from budget_ledger.models import User, UserProfileResponse, WorkspaceResponse
from budget_ledger.routers.utils import to_response
from budget_ledger.services import WorkspacesService

router = APIRouter(prefix="/users")


@router.get("/me", response_model=UserProfileResponse)
async def get_current_user_profile(
    current_user: User = Depends(get_or_create_current_user),
    workspaces_service: WorkspacesService = Depends(),
) -> UserProfileResponse:
    workspaces = await workspaces_service.list_workspaces(current_user.id)
    return to_response(
        UserProfileResponse,
        current_user,
        workspaces=[to_response(WorkspaceResponse, item) for item in workspaces],
    )
