from __future__ import annotations

import logging
import uuid

from fastapi import Depends

from budget_ledger.data_access import (
    AccountsDataAccess,
    CategoriesDataAccess,
    EventsDataAccess,
)
from budget_ledger.domain.tree import CategoryTree, swap_partner, visible_in
from budget_ledger.errors import ConflictError, NotFoundError, ValidationError
from budget_ledger.models import (
    AccountStatus,
    AccountType,
    Category,
    CategoryCreate,
    CategoryStatus,
    EventType,
    MoveDirection,
    Workspace,
)

logger = logging.getLogger(__name__)


class CategoriesService:
    def __init__(
        self,
        categories_store: CategoriesDataAccess = Depends(),
        accounts_store: AccountsDataAccess = Depends(),
        events_store: EventsDataAccess = Depends(),
    ) -> None:
        self._categories_store = categories_store
        self._accounts_store = accounts_store
        self._events_store = events_store

    async def _tree(self, workspace: Workspace) -> CategoryTree:
        return CategoryTree.build(
            await self._categories_store.list_categories(workspace.id)
        )

    async def _require_category(
        self, workspace: Workspace, category_id: uuid.UUID
    ) -> Category:
        category = await self._categories_store.get_category(workspace.id, category_id)
        if category is None:
            raise NotFoundError("Category not found.", category_id=category_id)
        return category

    async def _validate_dedicated_account(
        self,
        workspace: Workspace,
        tree: CategoryTree,
        payload: CategoryCreate,
    ) -> None:
        if payload.parent_id is None:
            raise ValidationError(
                f'Group "{payload.name}" cannot be dedicated to a savings account; '
                "dedicate one of its subcategories instead.",
                category=payload.name,
            )
        account = await self._accounts_store.get_account(
            workspace.id, payload.dedicated_account_id
        )
        if account is None:
            raise NotFoundError(
                "Account not found.", account_id=payload.dedicated_account_id
            )
        if account.account_type != AccountType.savings:
            raise ValidationError(
                f'Account "{account.name}" is not a savings account.',
                account=account.name,
            )
        if account.status != AccountStatus.active:
            raise ValidationError(
                f'Account "{account.name}" is archived.', account=account.name
            )
        for other in tree.dedicated_to(account.id):
            if other.type == payload.type and other.status == CategoryStatus.active:
                raise ValidationError(
                    f'Account "{account.name}" is already dedicated to '
                    f'"{other.name}".',
                    account=account.name,
                    category=other.name,
                )

    async def create_category(
        self, workspace: Workspace, payload: CategoryCreate
    ) -> Category:
        tree = await self._tree(workspace)

        if payload.parent_id is not None:
            parent = tree.get(payload.parent_id)
            if parent is None:
                raise NotFoundError(
                    "Parent category not found.", parent_id=payload.parent_id
                )
            if not parent.is_group:
                raise ValidationError(
                    f'"{parent.name}" is a subcategory; categories nest only one '
                    "level deep.",
                    parent=parent.name,
                )
            if parent.type != payload.type:
                raise ValidationError(
                    f'Subcategory "{payload.name}" must have the same type as its '
                    f'group "{parent.name}" ({parent.type.value}).',
                    category=payload.name,
                    parent=parent.name,
                )

        if payload.dedicated_account_id is not None:
            await self._validate_dedicated_account(workspace, tree, payload)

        category = await self._categories_store.create_category(
            workspace_id=workspace.id,
            name=payload.name,
            type=payload.type,
            parent_id=payload.parent_id,
            sort_order=tree.next_sort_order(payload.parent_id, payload.type),
            valid_from=payload.valid_from,
            dedicated_account_id=payload.dedicated_account_id,
            is_saving=payload.is_saving,
        )
        self._events_store.record(
            workspace.id,
            EventType.category_created,
            category_id=category.id,
            name=category.name,
            type=category.type.value,
            parent_id=category.parent_id,
        )
        return category

    async def list_categories(self, workspace: Workspace) -> list[Category]:
        return await self._categories_store.list_categories(workspace.id)

    async def list_visible(self, workspace: Workspace, month: str) -> list[Category]:
        categories = await self._categories_store.list_categories(workspace.id)
        return visible_in(categories, month)

    async def get_category(
        self, workspace: Workspace, category_id: uuid.UUID
    ) -> Category:
        return await self._require_category(workspace, category_id)

    async def update_category(
        self,
        workspace: Workspace,
        category_id: uuid.UUID,
        updates: dict[str, object],
    ) -> Category:
        category = await self._require_category(workspace, category_id)

        valid_from = updates.get("valid_from")
        if (
            valid_from is not None
            and category.archived_from is not None
            and valid_from >= category.archived_from
        ):
            raise ValidationError(
                f'Category "{category.name}" is archived from '
                f"{category.archived_from}; it cannot start at {valid_from}.",
                category=category.name,
                month=valid_from,
            )

        updated = await self._categories_store.update_category(category.id, updates)
        if updated is None:
            raise NotFoundError("Category not found.", category_id=category_id)
        self._events_store.record(
            workspace.id,
            EventType.category_updated,
            category_id=category.id,
            changes=sorted(updates),
            name=updated.name,
        )
        return updated

    async def rename_category(
        self, workspace: Workspace, category_id: uuid.UUID, name: str
    ) -> Category:
        return await self.update_category(workspace, category_id, {"name": name})

    async def move_category(
        self, workspace: Workspace, category_id: uuid.UUID, direction: MoveDirection
    ) -> Category:
        """Swap ``sort_order`` with the adjacent sibling; no-op at either end."""
        tree = await self._tree(workspace)
        category = tree.get(category_id)
        if category is None:
            raise NotFoundError("Category not found.", category_id=category_id)

        siblings = tree.siblings(category.parent_id, category.type)
        partner = swap_partner(siblings, category.id, direction)
        if partner is None:
            return category
        if partner.sort_order == category.sort_order:
            raise ConflictError(
                f'Categories "{category.name}" and "{partner.name}" share sort '
                f"order {category.sort_order}; their order is ambiguous.",
                category=category.name,
                sibling=partner.name,
            )

        await self._categories_store.swap_sort_order(category, partner)
        logger.info(
            "Moved category %s %s past %s", category.id, direction.value, partner.id
        )
        return await self._require_category(workspace, category.id)
