from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field

from budget_ledger.models import Category, CategoryType, MoveDirection


@dataclass(slots=True)
class CategoryTree:
    """Group -> children index over a flat category snapshot."""

    categories: dict[uuid.UUID, Category] = field(default_factory=dict)
    children: dict[uuid.UUID, list[uuid.UUID]] = field(default_factory=dict)

    @classmethod
    def build(cls, categories: Iterable[Category]) -> CategoryTree:
        tree = cls()
        for category in categories:
            tree.categories[category.id] = category
        for category in tree.categories.values():
            if category.parent_id is not None:
                tree.children.setdefault(category.parent_id, []).append(category.id)
        for child_ids in tree.children.values():
            child_ids.sort(key=lambda child_id: tree.categories[child_id].sort_order)
        return tree

    def get(self, category_id: uuid.UUID) -> Category | None:
        return self.categories.get(category_id)

    def children_of(self, category_id: uuid.UUID) -> list[Category]:
        return [
            self.categories[child_id]
            for child_id in self.children.get(category_id, [])
        ]

    def with_children(self, category_id: uuid.UUID) -> list[Category]:
        """The category itself followed by its children (groups only have any)."""
        category = self.categories[category_id]
        return [category, *self.children_of(category_id)]

    def siblings(
        self, parent_id: uuid.UUID | None, type: CategoryType
    ) -> list[Category]:
        if parent_id is None:
            candidates: Iterable[Category] = (
                category
                for category in self.categories.values()
                if category.parent_id is None
            )
        else:
            candidates = self.children_of(parent_id)
        return sorted(
            (category for category in candidates if category.type == type),
            key=lambda category: (category.sort_order, category.name),
        )

    def next_sort_order(self, parent_id: uuid.UUID | None, type: CategoryType) -> int:
        siblings = self.siblings(parent_id, type)
        if not siblings:
            return 0
        return max(category.sort_order for category in siblings) + 1

    def dedicated_to(self, account_id: uuid.UUID) -> list[Category]:
        return [
            category
            for category in self.categories.values()
            if category.dedicated_account_id == account_id
        ]


def swap_partner(
    siblings: list[Category], category_id: uuid.UUID, direction: MoveDirection
) -> Category | None:
    """The adjacent sibling ``category_id`` trades places with, if any."""
    index = next(
        (position for position, sibling in enumerate(siblings) if sibling.id == category_id),
        None,
    )
    if index is None:
        return None
    if direction == MoveDirection.up:
        return siblings[index - 1] if index > 0 else None
    return siblings[index + 1] if index < len(siblings) - 1 else None


def visible_in(categories: Iterable[Category], month: str) -> list[Category]:
    """Categories visible in ``month``, each group followed by its children."""
    by_id = {category.id: category for category in categories}

    def sort_key(category: Category) -> tuple:
        group = by_id.get(category.parent_id) if category.parent_id else category
        if group is None:
            group = category
        return (
            category.type.value,
            group.sort_order,
            str(group.id),
            category.parent_id is not None,
            category.sort_order,
            category.name,
        )

    return sorted(
        (category for category in by_id.values() if category.is_visible_in(month)),
        key=sort_key,
    )
