from datetime import date
from decimal import Decimal

from budget_ledger.domain.forecast import build_forecast
from budget_ledger.models import CategoryType, TransactionType
from tests.factories import make_account, make_budget, make_category, make_transaction


def _monthly_plan(category, amount: str, year: int = 2024):
    return [
        make_budget(category=category, month=f"{year}-{month:02d}", amount=amount)
        for month in range(1, 13)
    ]


def _column(forecast, name: str) -> list[Decimal | None]:
    return [getattr(point, name) for point in forecast.points]


def test_mid_year_projection_without_transactions() -> None:
    account = make_account(initial_balance="1000")
    rent = make_category(name="Rent", parent=make_category(name="Home"))
    budgets = _monthly_plan(rent, "200")

    forecast = build_forecast(
        2024, "2024-06", [account], [], budgets, {rent.id: CategoryType.expense}
    )

    assert [point.label for point in forecast.points] == [
        "2023",
        *(f"2024-{month:02d}" for month in range(1, 13)),
    ]
    assert _column(forecast, "plan") == [Decimal("0")] + [
        Decimal(1000 - 200 * month) for month in range(1, 13)
    ]
    assert forecast.points[-1].plan == Decimal("-1400")
    # Nothing was recorded, so the actual line stays at the opening balance.
    assert _column(forecast, "actual") == [Decimal("0")] + [Decimal("1000")] * 5 + [None] * 7
    # The forecast line starts on the last actual point, May.
    assert _column(forecast, "forecast") == [None] * 5 + [Decimal("1000")] + [
        Decimal(800 - 200 * step) for step in range(7)
    ]


def test_current_month_uses_the_larger_of_spent_and_planned() -> None:
    account = make_account(initial_balance="1000")
    group = make_category(name="Living")
    food = make_category(name="Food", parent=group)
    fun = make_category(name="Fun", parent=group)
    budgets = [
        make_budget(category=food, month="2024-03", amount="300"),
        make_budget(category=fun, month="2024-03", amount="100"),
    ]
    transactions = [
        make_transaction(
            type=TransactionType.expense,
            amount="50",
            on=date(2024, 3, 4),
            account=account,
            category=food,
        ),
        make_transaction(
            type=TransactionType.expense,
            amount="250",
            on=date(2024, 3, 5),
            account=account,
            category=fun,
        ),
    ]
    types = {food.id: CategoryType.expense, fun.id: CategoryType.expense}

    forecast = build_forecast(2024, "2024-03", [account], transactions, budgets, types)

    # food: planned 300 beats spent 50, fun: spent 250 beats planned 100
    assert forecast.points[3].forecast == Decimal("450")
    assert forecast.points[4].forecast == Decimal("450")
    assert forecast.points[3].actual is None
    assert forecast.points[2].forecast == forecast.points[2].actual == Decimal("1000")


def test_past_year_has_only_actual_and_plan() -> None:
    account = make_account(initial_balance="100", initial_balance_date=date(2023, 1, 1))
    salary = make_category(
        name="Salary",
        type=CategoryType.income,
        parent=make_category(name="Work", type=CategoryType.income),
    )
    income = make_transaction(
        type=TransactionType.income,
        amount="40",
        on=date(2023, 2, 10),
        account=account,
        category=salary,
    )

    forecast = build_forecast(
        2023, "2024-06", [account], [income], [], {salary.id: CategoryType.income}
    )

    assert all(point.forecast is None for point in forecast.points)
    assert forecast.points[1].actual == Decimal("100")
    assert forecast.points[2].actual == Decimal("140")
    assert forecast.points[12].actual == Decimal("140")


def test_future_year_carries_december_forecast_on_plan_only() -> None:
    account = make_account(initial_balance="1000")
    rent = make_category(name="Rent", parent=make_category(name="Home"))
    budgets = _monthly_plan(rent, "200") + _monthly_plan(rent, "100", year=2025)

    forecast = build_forecast(
        2025, "2024-06", [account], [], budgets, {rent.id: CategoryType.expense}
    )

    assert forecast.points[0].plan == Decimal("-400")
    assert forecast.points[0].actual is None
    assert forecast.points[12].plan == Decimal("-1600")
    assert all(point.actual is None for point in forecast.points)
    assert all(point.forecast is None for point in forecast.points)


def test_transfers_between_accounts_in_scope_net_to_zero() -> None:
    checking = make_account(initial_balance="500")
    savings = make_account(name="Savings")
    transfer = make_transaction(
        type=TransactionType.transfer,
        amount="200",
        on=date(2024, 2, 1),
        account=checking,
        destination=savings,
    )

    forecast = build_forecast(2024, "2024-04", [checking, savings], [transfer], [], {})

    assert forecast.points[2].actual == Decimal("500")
    assert forecast.points[3].actual == Decimal("500")
