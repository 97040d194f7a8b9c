import uuid

from fastapi import APIRouter, Depends, status

from budget_ledger.dependencies import require_workspace_member
from budget_ledger.models import (
    ArchiveResult,
    ArchiveResultResponse,
    Category,
    CategoryArchive,
    CategoryCreate,
    CategoryMove,
    CategoryResponse,
    CategoryUpdate,
    Workspace,
)
from budget_ledger.models.common import Month
from budget_ledger.routers.utils import extract_updates
from budget_ledger.services import ArchiveService, CategoriesService

router = APIRouter(prefix="/workspaces/{workspace_id}/categories")


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage categories.")
    ),
    categories_service: CategoriesService = Depends(),
) -> Category:
    return await categories_service.create_category(workspace, payload)


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    month: Month | None = None,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to view categories.")
    ),
    categories_service: CategoriesService = Depends(),
) -> list[Category]:
    if month is not None:
        return await categories_service.list_visible(workspace, month)
    return await categories_service.list_categories(workspace)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: uuid.UUID,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to view categories.")
    ),
    categories_service: CategoriesService = Depends(),
) -> Category:
    return await categories_service.get_category(workspace, category_id)


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: uuid.UUID,
    payload: CategoryUpdate,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage categories.")
    ),
    categories_service: CategoriesService = Depends(),
) -> Category:
    updates = extract_updates(payload)
    return await categories_service.update_category(workspace, category_id, updates)


@router.post("/{category_id}/move", response_model=CategoryResponse)
async def move_category(
    category_id: uuid.UUID,
    payload: CategoryMove,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage categories.")
    ),
    categories_service: CategoriesService = Depends(),
) -> Category:
    return await categories_service.move_category(
        workspace, category_id, payload.direction
    )


@router.post("/{category_id}/archive", response_model=ArchiveResultResponse)
async def archive_category(
    category_id: uuid.UUID,
    payload: CategoryArchive,
    workspace: Workspace = Depends(
        require_workspace_member("Not authorized to manage categories.")
    ),
    archive_service: ArchiveService = Depends(),
) -> ArchiveResult:
    return await archive_service.archive_category(
        workspace, category_id, payload.effective_month, force=payload.force
    )
