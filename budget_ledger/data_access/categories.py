from __future__ import annotations

import uuid
from collections.abc import Sequence

from fastapi import Depends
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from budget_ledger import db
from budget_ledger.data_access.store import flush, writing
from budget_ledger.models import Category, CategoryStatus, CategoryType
from budget_ledger.tables import CategoriesTable


class CategoriesDataAccess:
    def __init__(self, session: AsyncSession = Depends(db.get_session)) -> None:
        self._session = session

    async def get_category(
        self, workspace_id: uuid.UUID, category_id: uuid.UUID
    ) -> Category | None:
        category = await self._session.get(CategoriesTable, category_id)
        if category is None or category.workspace_id != workspace_id:
            return None
        return _to_category(category)

    async def list_categories(self, workspace_id: uuid.UUID) -> list[Category]:
        result = await self._session.execute(
            select(CategoriesTable)
            .where(CategoriesTable.workspace_id == workspace_id)
            .order_by(
                CategoriesTable.type,
                CategoriesTable.sort_order,
                CategoriesTable.name,
                CategoriesTable.id,
            )
        )
        return [_to_category(category) for category in result.scalars()]

    async def create_category(
        self,
        *,
        workspace_id: uuid.UUID,
        name: str,
        type: CategoryType,
        parent_id: uuid.UUID | None,
        sort_order: int,
        valid_from: str,
        dedicated_account_id: uuid.UUID | None,
        is_saving: bool,
    ) -> Category:
        category = CategoriesTable(
            workspace_id=workspace_id,
            name=name,
            type=type.value,
            parent_id=parent_id,
            sort_order=sort_order,
            valid_from=valid_from,
            status=CategoryStatus.active.value,
            dedicated_account_id=dedicated_account_id,
            is_saving=is_saving,
        )
        self._session.add(category)
        await flush(self._session, action="creating a category")
        await self._session.refresh(category)
        return _to_category(category)

    async def update_category(
        self, category_id: uuid.UUID, updates: dict[str, object]
    ) -> Category | None:
        category = await self._session.get(CategoriesTable, category_id)
        if category is None:
            return None
        for field, value in updates.items():
            setattr(category, field, value)
        await flush(self._session, action="updating a category")
        await self._session.refresh(category)
        return _to_category(category)

    async def swap_sort_order(self, first: Category, second: Category) -> None:
        first_row = await self._session.get(CategoriesTable, first.id)
        second_row = await self._session.get(CategoriesTable, second.id)
        first_row.sort_order, second_row.sort_order = (
            second.sort_order,
            first.sort_order,
        )
        await flush(self._session, action="reordering categories")

    async def archive_categories(
        self, category_ids: Sequence[uuid.UUID], archived_from: str
    ) -> None:
        if not category_ids:
            return
        async with writing("archiving categories"):
            await self._session.execute(
                update(CategoriesTable)
                .where(CategoriesTable.id.in_(category_ids))
                .values(
                    status=CategoryStatus.archived.value,
                    archived_from=archived_from,
                )
                .execution_options(synchronize_session="fetch")
            )
            await self._session.flush()


def _to_category(category: CategoriesTable) -> Category:
    return Category(
        id=category.id,
        workspace_id=category.workspace_id,
        name=category.name,
        type=CategoryType(category.type),
        parent_id=category.parent_id,
        sort_order=category.sort_order,
        valid_from=category.valid_from,
        archived_from=category.archived_from,
        status=CategoryStatus(category.status),
        dedicated_account_id=category.dedicated_account_id,
        is_saving=category.is_saving,
    )
