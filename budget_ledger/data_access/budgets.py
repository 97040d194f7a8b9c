from __future__ import annotations

import uuid
from collections.abc import Sequence
from decimal import Decimal

from fastapi import Depends
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from budget_ledger import db
from budget_ledger.data_access.store import flush, writing
from budget_ledger.models import Budget
from budget_ledger.tables import BudgetsTable


class BudgetsDataAccess:
    def __init__(self, session: AsyncSession = Depends(db.get_session)) -> None:
        self._session = session

    async def get_budget(
        self, workspace_id: uuid.UUID, budget_id: uuid.UUID
    ) -> Budget | None:
        budget = await self._session.get(BudgetsTable, budget_id)
        if budget is None or budget.workspace_id != workspace_id:
            return None
        return _to_budget(budget)

    async def find_budget(self, category_id: uuid.UUID, month: str) -> Budget | None:
        result = await self._session.execute(
            select(BudgetsTable).where(
                BudgetsTable.category_id == category_id,
                BudgetsTable.month == month,
            )
        )
        budget = result.scalar_one_or_none()
        if budget is None:
            return None
        return _to_budget(budget)

    async def list_budgets(
        self,
        workspace_id: uuid.UUID,
        *,
        month: str | None = None,
        from_month: str | None = None,
        to_month: str | None = None,
        category_ids: Sequence[uuid.UUID] | None = None,
    ) -> list[Budget]:
        statement = select(BudgetsTable).where(BudgetsTable.workspace_id == workspace_id)
        if month is not None:
            statement = statement.where(BudgetsTable.month == month)
        if from_month is not None:
            statement = statement.where(BudgetsTable.month >= from_month)
        if to_month is not None:
            statement = statement.where(BudgetsTable.month <= to_month)
        if category_ids is not None:
            statement = statement.where(BudgetsTable.category_id.in_(category_ids))
        result = await self._session.execute(
            statement.order_by(BudgetsTable.month, BudgetsTable.category_id)
        )
        return [_to_budget(budget) for budget in result.scalars()]

    async def create_budget(
        self,
        *,
        workspace_id: uuid.UUID,
        category_id: uuid.UUID,
        month: str,
        amount: Decimal,
        note: str,
    ) -> Budget:
        budget = BudgetsTable(
            workspace_id=workspace_id,
            category_id=category_id,
            month=month,
            amount=amount,
            note=note,
        )
        self._session.add(budget)
        await flush(self._session, action="creating a budget")
        await self._session.refresh(budget)
        return _to_budget(budget)

    async def update_budget(
        self, budget_id: uuid.UUID, updates: dict[str, object]
    ) -> Budget | None:
        budget = await self._session.get(BudgetsTable, budget_id)
        if budget is None:
            return None
        for field, value in updates.items():
            setattr(budget, field, value)
        await flush(self._session, action="updating a budget")
        await self._session.refresh(budget)
        return _to_budget(budget)

    async def delete_budgets(self, budget_ids: Sequence[uuid.UUID]) -> int:
        if not budget_ids:
            return 0
        async with writing("deleting budgets"):
            result = await self._session.execute(
                delete(BudgetsTable)
                .where(BudgetsTable.id.in_(budget_ids))
                .execution_options(synchronize_session="fetch")
            )
            await self._session.flush()
        return result.rowcount


def _to_budget(budget: BudgetsTable) -> Budget:
    return Budget(
        id=budget.id,
        workspace_id=budget.workspace_id,
        category_id=budget.category_id,
        month=budget.month,
        amount=budget.amount,
        note=budget.note,
    )
