from __future__ import annotations

from datetime import date

from fastapi import Depends

from budget_ledger.data_access import (
    AccountsDataAccess,
    BudgetsDataAccess,
    CategoriesDataAccess,
    TransactionsDataAccess,
)
from budget_ledger.dependencies import get_today
from budget_ledger.domain.forecast import build_forecast
from budget_ledger.domain.months import month_of
from budget_ledger.models import Forecast, Workspace


class ForecastService:
    """Loads a workspace snapshot and hands it to the projection engine."""

    def __init__(
        self,
        accounts_store: AccountsDataAccess = Depends(),
        transactions_store: TransactionsDataAccess = Depends(),
        budgets_store: BudgetsDataAccess = Depends(),
        categories_store: CategoriesDataAccess = Depends(),
        today: date = Depends(get_today),
    ) -> None:
        self._accounts_store = accounts_store
        self._transactions_store = transactions_store
        self._budgets_store = budgets_store
        self._categories_store = categories_store
        self._today = today

    async def forecast(self, workspace: Workspace, year: int | None = None) -> Forecast:
        if year is None:
            year = self._today.year
        accounts = await self._accounts_store.list_accounts(workspace.id)
        transactions = await self._transactions_store.list_transactions(
            workspace.id, end=date(year, 12, 31)
        )
        budgets = await self._budgets_store.list_budgets(
            workspace.id, to_month=f"{year:04d}-12"
        )
        categories = await self._categories_store.list_categories(workspace.id)
        return build_forecast(
            year,
            month_of(self._today),
            accounts,
            transactions,
            budgets,
            {category.id: category.type for category in categories},
        )
