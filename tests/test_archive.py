from sqlalchemy.exc import OperationalError

from budget_ledger.data_access import AccountsDataAccess
from budget_ledger.data_access.store import writing
from tests.helpers import (
    create_account,
    create_category,
    create_workspace,
    record,
    upsert_budget,
)


async def test_archive_conflicts_with_later_transactions(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    checking_id = await create_account(async_client, workspace_id, initial_balance=100)
    group_id = await create_category(async_client, workspace_id, name="Hobbies")
    climbing_id = await create_category(
        async_client, workspace_id, name="Climbing", parent_id=group_id
    )
    await record(
        async_client,
        workspace_id,
        type="expense",
        amount=30,
        transaction_date="2024-08-14",
        account_id=checking_id,
        category_id=climbing_id,
    )
    url = f"/workspaces/{workspace_id}/categories"

    response = await async_client.post(
        f"{url}/{group_id}/archive", json={"effective_month": "2024-07"}
    )
    assert response.status_code == 409
    assert response.json()["context"]["category"] == "Climbing"

    response = await async_client.post(
        f"{url}/{group_id}/archive", json={"effective_month": "2024-09"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "archived"
    assert set(body["category_ids"]) == {group_id, climbing_id}

    response = await async_client.get(f"{url}/{climbing_id}")
    assert response.json()["archived_from"] == "2024-09"
    assert response.json()["status"] == "archived"

    response = await async_client.get(url, params={"month": "2024-09"})
    assert response.json() == []
    response = await async_client.get(url, params={"month": "2024-08"})
    assert len(response.json()) == 2

    response = await async_client.post(
        f"{url}/{group_id}/archive", json={"effective_month": "2024-09"}
    )
    assert response.status_code == 200
    assert response.json()["deleted_budget_ids"] == []


async def test_archive_removes_empty_budgets_and_blocks_planned_ones(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    group_id = await create_category(async_client, workspace_id, name="Leisure")
    cinema_id = await create_category(
        async_client, workspace_id, name="Cinema", parent_id=group_id
    )
    response = await upsert_budget(
        async_client, workspace_id, category_id=cinema_id, month="2024-10", amount=20
    )
    budget_id = response.json()["budget"]["id"]
    url = f"/workspaces/{workspace_id}/categories/{cinema_id}/archive"

    response = await async_client.post(url, json={"effective_month": "2024-10"})
    assert response.status_code == 409

    await upsert_budget(
        async_client,
        workspace_id,
        category_id=cinema_id,
        month="2024-10",
        amount=0,
        note="Maybe",
    )
    response = await async_client.post(url, json={"effective_month": "2024-10"})
    assert response.status_code == 409

    response = await async_client.post(
        url, json={"effective_month": "2024-10", "force": True}
    )
    assert response.status_code == 200
    assert response.json()["deleted_budget_ids"] == []

    response = await async_client.get(
        f"/workspaces/{workspace_id}/budgets", params={"month": "2024-10"}
    )
    assert [item["id"] for item in response.json()] == [budget_id]


async def test_dedicated_account_needs_confirmation(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    savings_id = await create_account(
        async_client, workspace_id, name="Car fund", account_type="savings"
    )
    group_id = await create_category(async_client, workspace_id, name="Saving")
    car_id = await create_category(
        async_client,
        workspace_id,
        name="Car",
        parent_id=group_id,
        dedicated_account_id=savings_id,
    )
    url = f"/workspaces/{workspace_id}/categories/{car_id}/archive"

    response = await async_client.post(url, json={"effective_month": "2024-05"})
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "needs_confirmation"
    assert body["account_ids"] == [savings_id]
    assert "Car fund" in body["message"]

    response = await async_client.get(f"/workspaces/{workspace_id}/accounts/{savings_id}")
    assert response.json()["status"] == "active"

    response = await async_client.post(
        url, json={"effective_month": "2024-05", "force": True}
    )
    assert response.json()["status"] == "archived"
    assert response.json()["account_ids"] == [savings_id]

    response = await async_client.get(f"/workspaces/{workspace_id}/accounts/{savings_id}")
    assert response.json()["status"] == "archived"


async def test_shared_savings_account_follows_its_last_active_category(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    checking_id = await create_account(async_client, workspace_id, initial_balance=500)
    savings_id = await create_account(
        async_client, workspace_id, name="Rainy day", account_type="savings"
    )
    saving_id = await create_category(async_client, workspace_id, name="Saving")
    deposit_id = await create_category(
        async_client,
        workspace_id,
        name="Deposit",
        parent_id=saving_id,
        dedicated_account_id=savings_id,
    )
    withdrawals_id = await create_category(
        async_client, workspace_id, name="Withdrawals", type="income"
    )
    take_id = await create_category(
        async_client,
        workspace_id,
        name="Take",
        type="income",
        parent_id=withdrawals_id,
        dedicated_account_id=savings_id,
    )
    await record(
        async_client,
        workspace_id,
        type="expense",
        amount=100,
        transaction_date="2024-04-10",
        account_id=checking_id,
        category_id=deposit_id,
    )
    url = f"/workspaces/{workspace_id}/categories"
    account_url = f"/workspaces/{workspace_id}/accounts/{savings_id}"

    response = await async_client.post(
        f"{url}/{deposit_id}/archive", json={"effective_month": "2024-05"}
    )
    assert response.json()["status"] == "archived"
    assert response.json()["account_ids"] == []
    response = await async_client.get(account_url)
    assert response.json()["status"] == "active"

    for day, amount in (("2024-06-02", 40), ("2024-06-20", 60)):
        await record(
            async_client,
            workspace_id,
            type="income",
            amount=amount,
            transaction_date=day,
            account_id=checking_id,
            category_id=take_id,
        )
    response = await async_client.get(account_url)
    assert response.json()["balance"] == 0

    response = await async_client.post(
        f"{url}/{take_id}/archive", json={"effective_month": "2024-07"}
    )
    assert response.json()["status"] == "needs_confirmation"
    assert response.json()["account_ids"] == [savings_id]
    response = await async_client.post(
        f"{url}/{take_id}/archive", json={"effective_month": "2024-07", "force": True}
    )
    assert response.json()["status"] == "archived"
    response = await async_client.get(account_url)
    assert response.json()["status"] == "archived"

    # June is still inside Take's window, but its savings account is gone.
    response = await async_client.post(
        f"/workspaces/{workspace_id}/transactions",
        json={
            "type": "income",
            "amount": 10,
            "transaction_date": "2024-06-25",
            "account_id": checking_id,
            "category_id": take_id,
        },
    )
    assert response.status_code == 400
    assert response.json()["context"]["category"] == "Take"


async def test_failed_account_archive_rolls_back_the_categories(
    async_client, monkeypatch
) -> None:
    workspace_id = await create_workspace(async_client)
    savings_id = await create_account(
        async_client, workspace_id, name="Boat fund", account_type="savings"
    )
    group_id = await create_category(async_client, workspace_id, name="Saving")
    boat_id = await create_category(
        async_client,
        workspace_id,
        name="Boat",
        parent_id=group_id,
        dedicated_account_id=savings_id,
    )

    async def failing_archive_accounts(self, account_ids):
        async with writing("archiving accounts"):
            raise OperationalError("UPDATE accounts", {}, Exception("connection reset"))

    monkeypatch.setattr(AccountsDataAccess, "archive_accounts", failing_archive_accounts)
    response = await async_client.post(
        f"/workspaces/{workspace_id}/categories/{group_id}/archive",
        json={"effective_month": "2024-05", "force": True},
    )
    monkeypatch.undo()

    assert response.status_code == 503
    assert response.json()["context"] == {"action": "archiving accounts"}
    for category_id in (group_id, boat_id):
        response = await async_client.get(
            f"/workspaces/{workspace_id}/categories/{category_id}"
        )
        assert response.json()["status"] == "active"
        assert response.json()["archived_from"] is None
    response = await async_client.get(f"/workspaces/{workspace_id}/accounts/{savings_id}")
    assert response.json()["status"] == "active"
