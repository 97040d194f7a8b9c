from uuid import UUID

from budget_ledger import db
from budget_ledger.data_access import (
    AccountsDataAccess,
    CategoriesDataAccess,
    EventsDataAccess,
    WorkspacesDataAccess,
)
from budget_ledger.services import CategoriesService
from tests.helpers import (
    create_account,
    create_category,
    create_subcategory,
    create_workspace,
)


async def test_create_group_and_subcategory(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    group_id = await create_category(async_client, workspace_id, name="Housing")
    rent_id = await create_category(
        async_client, workspace_id, name="Rent", parent_id=group_id
    )

    response = await async_client.get(f"/workspaces/{workspace_id}/categories/{rent_id}")
    assert response.status_code == 200
    body = response.json()
    assert body["parent_id"] == group_id
    assert body["status"] == "active"
    assert body["archived_from"] is None
    assert body["sort_order"] == 0

    response = await async_client.get(f"/workspaces/{workspace_id}/categories")
    assert {item["id"] for item in response.json()} == {group_id, rent_id}


async def test_nesting_rules(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    group_id = await create_category(async_client, workspace_id, name="Housing")
    rent_id = await create_category(
        async_client, workspace_id, name="Rent", parent_id=group_id
    )
    url = f"/workspaces/{workspace_id}/categories"

    response = await async_client.post(
        url,
        json={"name": "Deposit", "type": "expense", "parent_id": rent_id, "valid_from": "2024-01"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"

    response = await async_client.post(
        url,
        json={"name": "Refund", "type": "income", "parent_id": group_id, "valid_from": "2024-01"},
    )
    assert response.status_code == 400

    response = await async_client.post(
        url,
        json={
            "name": "Orphan",
            "type": "expense",
            "parent_id": "7d1c52b1-8e0a-4b43-a3f9-8f44ae7c1d55",
            "valid_from": "2024-01",
        },
    )
    assert response.status_code == 404

    response = await async_client.post(
        url, json={"name": "Bad month", "type": "expense", "valid_from": "2024-13"}
    )
    assert response.status_code == 422


async def test_dedicated_account_rules(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    checking_id = await create_account(async_client, workspace_id)
    savings_id = await create_account(
        async_client, workspace_id, name="Holiday pot", account_type="savings"
    )
    group_id = await create_category(async_client, workspace_id, name="Saving")
    url = f"/workspaces/{workspace_id}/categories"

    response = await async_client.post(
        url,
        json={
            "name": "Holiday",
            "type": "expense",
            "parent_id": group_id,
            "valid_from": "2024-01",
            "dedicated_account_id": checking_id,
        },
    )
    assert response.status_code == 400

    await create_category(
        async_client,
        workspace_id,
        name="Holiday",
        parent_id=group_id,
        dedicated_account_id=savings_id,
    )
    response = await async_client.post(
        url,
        json={
            "name": "Holiday again",
            "type": "expense",
            "parent_id": group_id,
            "valid_from": "2024-01",
            "dedicated_account_id": savings_id,
        },
    )
    assert response.status_code == 400
    assert response.json()["context"]["category"] == "Holiday"


async def test_move_swaps_with_adjacent_sibling(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    group_id = await create_category(async_client, workspace_id, name="Housing")
    ids = [
        await create_category(async_client, workspace_id, name=name, parent_id=group_id)
        for name in ("Rent", "Power", "Water")
    ]
    url = f"/workspaces/{workspace_id}/categories"

    async def sort_orders() -> list[int]:
        return [
            (await async_client.get(f"{url}/{category_id}")).json()["sort_order"]
            for category_id in ids
        ]

    assert await sort_orders() == [0, 1, 2]

    response = await async_client.post(f"{url}/{ids[2]}/move", json={"direction": "up"})
    assert response.status_code == 200
    assert response.json()["sort_order"] == 1
    assert await sort_orders() == [0, 2, 1]

    response = await async_client.post(f"{url}/{ids[2]}/move", json={"direction": "down"})
    assert response.status_code == 200
    assert await sort_orders() == [0, 1, 2]

    response = await async_client.post(f"{url}/{ids[0]}/move", json={"direction": "up"})
    assert response.status_code == 200
    assert await sort_orders() == [0, 1, 2]


async def test_list_visible_in_month_and_rename(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    gym_id = await create_subcategory(async_client, workspace_id, name="Gym")
    car_id = await create_subcategory(
        async_client, workspace_id, name="Car", valid_from="2024-09"
    )
    url = f"/workspaces/{workspace_id}/categories"

    response = await async_client.get(url, params={"month": "2024-05"})
    visible = [item["id"] for item in response.json()]
    assert gym_id in visible
    assert car_id not in visible

    response = await async_client.patch(f"{url}/{gym_id}", json={"name": "Climbing gym"})
    assert response.status_code == 200
    assert response.json()["name"] == "Climbing gym"

    response = await async_client.patch(f"{url}/{gym_id}", json={"name": None})
    assert response.status_code == 400

    response = await async_client.patch(f"{url}/{gym_id}", json={})
    assert response.status_code == 400


async def test_rename_category(async_client) -> None:
    workspace_id = await create_workspace(async_client)
    group_id = await create_category(async_client, workspace_id, name="Transport")

    async with db.get_session_scope() as session:
        workspace = await WorkspacesDataAccess(session).get_workspace(UUID(workspace_id))
        service = CategoriesService(
            CategoriesDataAccess(session),
            AccountsDataAccess(session),
            EventsDataAccess(session),
        )
        renamed = await service.rename_category(workspace, UUID(group_id), "Travel")

    assert renamed.name == "Travel"
    response = await async_client.get(f"/workspaces/{workspace_id}/categories/{group_id}")
    assert response.json()["name"] == "Travel"
