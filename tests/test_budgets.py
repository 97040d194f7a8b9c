from datetime import date

from tests.helpers import (
    create_account,
    create_category,
    create_subcategory,
    create_workspace,
    upsert_budget,
)


async def test_upsert_creates_updates_and_deletes(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    groceries_id = await create_subcategory(async_client, workspace_id, name="Groceries")

    response = await upsert_budget(
        async_client, workspace_id, category_id=groceries_id, month="2024-03", amount=100
    )
    assert response.status_code == 200
    body = response.json()
    assert body["deleted"] is False
    assert body["budget"]["amount"] == 100
    assert body["budget"]["note"] == ""

    response = await upsert_budget(
        async_client,
        workspace_id,
        category_id=groceries_id,
        month="2024-03",
        amount=150,
        note="Guests",
    )
    assert response.json()["budget"]["amount"] == 150

    response = await upsert_budget(
        async_client, workspace_id, category_id=groceries_id, month="2024-03", amount=0
    )
    body = response.json()
    assert body["deleted"] is False
    assert body["budget"]["amount"] == 0
    assert body["budget"]["note"] == "Guests"

    response = await upsert_budget(
        async_client,
        workspace_id,
        category_id=groceries_id,
        month="2024-03",
        amount=0,
        note="",
    )
    assert response.json() == {"budget": None, "deleted": True}

    response = await async_client.get(
        f"/workspaces/{workspace_id}/budgets", params={"month": "2024-03"}
    )
    assert response.json() == []


async def test_budgets_belong_to_subcategories(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    group_id = await create_category(async_client, workspace_id, name="Living")

    response = await upsert_budget(
        async_client, workspace_id, category_id=group_id, month="2024-03", amount=10
    )

    assert response.status_code == 400
    assert response.json()["context"] == {"category": "Living"}


async def test_delete_budget(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    rent_id = await create_subcategory(async_client, workspace_id, name="Rent")
    response = await upsert_budget(
        async_client, workspace_id, category_id=rent_id, month="2024-02", amount=700
    )
    budget_id = response.json()["budget"]["id"]
    url = f"/workspaces/{workspace_id}/budgets/{budget_id}"

    response = await async_client.delete(url)
    assert response.status_code == 204

    response = await async_client.delete(url)
    assert response.status_code == 404


async def test_publish_forward_is_idempotent(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    group_id = await create_category(async_client, workspace_id, name="Home")
    rent_id = await create_category(
        async_client, workspace_id, name="Rent", parent_id=group_id
    )
    power_id = await create_category(
        async_client, workspace_id, name="Power", parent_id=group_id
    )
    await upsert_budget(
        async_client, workspace_id, category_id=rent_id, month="2024-09", amount=700
    )
    await upsert_budget(
        async_client, workspace_id, category_id=power_id, month="2024-09", amount=60
    )
    await upsert_budget(
        async_client, workspace_id, category_id=power_id, month="2024-11", amount=80
    )
    url = f"/workspaces/{workspace_id}/budgets"

    response = await async_client.post(
        f"{url}/publish", json={"category_id": rent_id, "from_month": "2024-09"}
    )
    assert response.json() == {"created": 3, "updated": 0, "deleted": 0}

    response = await async_client.post(
        f"{url}/publish", json={"category_id": rent_id, "from_month": "2024-09"}
    )
    assert response.json() == {"created": 0, "updated": 0, "deleted": 0}

    response = await async_client.post(
        f"{url}/publish",
        json={"category_id": group_id, "from_month": "2024-09", "include_subcategories": True},
    )
    assert response.json() == {"created": 2, "updated": 1, "deleted": 0}

    response = await async_client.get(url, params={"month": "2024-12"})
    amounts = {item["category_id"]: item["amount"] for item in response.json()}
    assert amounts == {rent_id: 700, power_id: 60}

    response = await async_client.post(f"{url}/publish-all", json={"from_month": "2024-09"})
    assert response.json() == {"created": 0, "updated": 0, "deleted": 0}

    response = await async_client.post(f"{url}/publish-all", json={"from_month": "2024-12"})
    assert response.json() == {"created": 0, "updated": 0, "deleted": 0}


async def test_saving_budget_cannot_exceed_available_balance(
    async_client, freeze_today
) -> None:
    freeze_today(date(2024, 6, 15))
    workspace_id = await create_workspace(async_client)
    await create_account(async_client, workspace_id, initial_balance=500)
    salary_id = await create_subcategory(
        async_client, workspace_id, name="Salary", type="income"
    )
    rent_id = await create_subcategory(async_client, workspace_id, name="Rent")
    pension_id = await create_subcategory(
        async_client, workspace_id, name="Pension", is_saving=True
    )
    await upsert_budget(
        async_client, workspace_id, category_id=salary_id, month="2024-06", amount=2000
    )
    await upsert_budget(
        async_client, workspace_id, category_id=rent_id, month="2024-06", amount=800
    )
    url = f"/workspaces/{workspace_id}/budgets"

    response = await async_client.get(f"{url}/available", params={"month": "2024-06"})
    assert response.json() == {"month": "2024-06", "available": 1700.0}

    response = await upsert_budget(
        async_client, workspace_id, category_id=pension_id, month="2024-06", amount=1700
    )
    assert response.status_code == 200

    response = await upsert_budget(
        async_client, workspace_id, category_id=pension_id, month="2024-06", amount=1800
    )
    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"

    response = await upsert_budget(
        async_client, workspace_id, category_id=pension_id, month="2024-06", amount=1000
    )
    assert response.status_code == 200

    response = await async_client.get(f"{url}/available", params={"month": "2024-06"})
    assert response.json()["available"] == 700


async def test_budgets_stay_inside_the_category_window(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    group_id = await create_category(async_client, workspace_id, name="Sport")
    gym_id = await create_category(
        async_client, workspace_id, name="Gym", parent_id=group_id
    )
    swim_id = await create_category(
        async_client, workspace_id, name="Swim", parent_id=group_id, valid_from="2024-09"
    )
    await upsert_budget(
        async_client, workspace_id, category_id=gym_id, month="2024-06", amount=40
    )
    response = await async_client.post(
        f"/workspaces/{workspace_id}/categories/{gym_id}/archive",
        json={"effective_month": "2024-07"},
    )
    assert response.json()["status"] == "archived"
    url = f"/workspaces/{workspace_id}/budgets"

    response = await upsert_budget(
        async_client, workspace_id, category_id=gym_id, month="2024-09", amount=40
    )
    assert response.status_code == 400
    assert response.json()["context"] == {"category": "Gym", "month": "2024-09"}

    response = await upsert_budget(
        async_client, workspace_id, category_id=swim_id, month="2024-08", amount=25
    )
    assert response.status_code == 400

    response = await upsert_budget(
        async_client, workspace_id, category_id=gym_id, month="2024-06", amount=45
    )
    assert response.status_code == 200

    response = await async_client.post(f"{url}/publish-all", json={"from_month": "2024-06"})
    assert response.json() == {"created": 0, "updated": 0, "deleted": 0}

    response = await async_client.post(
        f"{url}/publish",
        json={"category_id": group_id, "from_month": "2024-06", "include_subcategories": True},
    )
    assert response.json() == {"created": 0, "updated": 0, "deleted": 0}

    response = await async_client.get(url)
    assert [(item["category_id"], item["month"]) for item in response.json()] == [
        (gym_id, "2024-06")
    ]
