from uuid import uuid4


async def create_workspace(async_client, *, name: str | None = None) -> str:
    response = await async_client.post(
        "/workspaces", json={"name": name or f"Household-{uuid4()}"}
    )
    assert response.status_code == 201
    return response.json()["id"]


async def create_account(
    async_client,
    workspace_id: str,
    *,
    name: str = "Checking",
    account_type: str = "standard",
    initial_balance: float = 0,
    initial_balance_date: str = "2024-01-01",
) -> str:
    response = await async_client.post(
        f"/workspaces/{workspace_id}/accounts",
        json={
            "name": name,
            "account_type": account_type,
            "initial_balance": initial_balance,
            "initial_balance_date": initial_balance_date,
        },
    )
    assert response.status_code == 201
    return response.json()["id"]


async def create_category(
    async_client,
    workspace_id: str,
    *,
    name: str,
    type: str = "expense",
    parent_id: str | None = None,
    valid_from: str = "2024-01",
    dedicated_account_id: str | None = None,
    is_saving: bool = False,
) -> str:
    response = await async_client.post(
        f"/workspaces/{workspace_id}/categories",
        json={
            "name": name,
            "type": type,
            "parent_id": parent_id,
            "valid_from": valid_from,
            "dedicated_account_id": dedicated_account_id,
            "is_saving": is_saving,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def create_subcategory(
    async_client, workspace_id: str, *, name: str, type: str = "expense", **kwargs
) -> str:
    group_id = await create_category(
        async_client, workspace_id, name=f"{name} group", type=type
    )
    return await create_category(
        async_client, workspace_id, name=name, type=type, parent_id=group_id, **kwargs
    )


async def record(
    async_client,
    workspace_id: str,
    *,
    type: str,
    amount: float,
    transaction_date: str,
    account_id: str,
    category_id: str | None = None,
    destination_account_id: str | None = None,
    notes: str = "",
) -> list[dict]:
    response = await async_client.post(
        f"/workspaces/{workspace_id}/transactions",
        json={
            "type": type,
            "amount": amount,
            "transaction_date": transaction_date,
            "account_id": account_id,
            "category_id": category_id,
            "destination_account_id": destination_account_id,
            "notes": notes,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


async def upsert_budget(
    async_client,
    workspace_id: str,
    *,
    category_id: str,
    month: str,
    amount: float,
    note: str | None = None,
):
    body = {"category_id": category_id, "month": month, "amount": amount}
    if note is not None:
        body["note"] = note
    return await async_client.put(f"/workspaces/{workspace_id}/budgets", json=body)
