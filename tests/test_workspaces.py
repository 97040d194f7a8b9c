from contextlib import contextmanager
from uuid import uuid4

from budget_ledger.auth import get_token_claims
from tests.conftest import TEST_USER_ID
from tests.helpers import create_workspace

SECOND_USER_ID = "0b8f7c1e-5d1a-4c61-9a55-2f4a7d3e9b10"


@contextmanager
def signed_in_as(app, user_id: str, email: str):
    async def _claims() -> dict[str, str]:
        return {"sub": user_id, "email": email}

    previous = app.dependency_overrides[get_token_claims]
    app.dependency_overrides[get_token_claims] = _claims
    try:
        yield
    finally:
        app.dependency_overrides[get_token_claims] = previous


async def test_create_and_list_workspaces(async_client) -> None:
    workspace_id = await create_workspace(async_client, name="Family")

    response = await async_client.get(f"/workspaces/{workspace_id}")
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Family"
    assert body["owner_user_id"] == str(TEST_USER_ID)

    response = await async_client.get("/workspaces")
    assert response.status_code == 200
    assert workspace_id in [item["id"] for item in response.json()]

    response = await async_client.get(f"/workspaces/{workspace_id}/members")
    assert response.status_code == 200
    assert [member["user_id"] for member in response.json()] == [str(TEST_USER_ID)]


async def test_unknown_workspace_is_not_found(async_client) -> None:
    response = await async_client.get(f"/workspaces/{uuid4()}")
    assert response.status_code == 404


async def test_members_and_outsiders(app, async_client) -> None:
    workspace_id = await create_workspace(async_client)

    with signed_in_as(app, SECOND_USER_ID, "partner@example.com"):
        response = await async_client.get("/users/me")
        assert response.status_code == 200
        response = await async_client.get(f"/workspaces/{workspace_id}")
        assert response.status_code == 403

    response = await async_client.post(
        f"/workspaces/{workspace_id}/members", json={"user_id": str(uuid4())}
    )
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"

    response = await async_client.post(
        f"/workspaces/{workspace_id}/members", json={"user_id": SECOND_USER_ID}
    )
    assert response.status_code == 204

    response = await async_client.post(
        f"/workspaces/{workspace_id}/members", json={"user_id": SECOND_USER_ID}
    )
    assert response.status_code == 409

    with signed_in_as(app, SECOND_USER_ID, "partner@example.com"):
        response = await async_client.get(f"/workspaces/{workspace_id}")
        assert response.status_code == 200
        response = await async_client.post(
            f"/workspaces/{workspace_id}/members", json={"user_id": str(TEST_USER_ID)}
        )
        assert response.status_code == 403
