import os
from uuid import UUID

import pytest
from asgi_lifespan import LifespanManager
from fastapi import Depends
from httpx import ASGITransport, AsyncClient

from budget_ledger import db
from budget_ledger.auth import get_token_claims, oauth2_scheme
from budget_ledger.dependencies import get_today
from budget_ledger.main import app as fastapi_app
from budget_ledger.tables import Base

TEST_USER_ID = UUID("74f8e448-a061-70f2-64ce-b7a19aa3ed8a")
TEST_USER_EMAIL = "ledger-owner@example.com"
TEST_AUTH_TOKEN = "test-access-token"


async def _test_claims(token: str = Depends(oauth2_scheme)) -> dict[str, str]:
    return {"sub": str(TEST_USER_ID), "email": TEST_USER_EMAIL, "token": token}


@pytest.fixture(autouse=True, scope="session")
def anyio_backend():
    return ("asyncio", {"use_uvloop": True})


@pytest.fixture(scope="session")
def database_url(tmp_path_factory) -> str:
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        return database_url
    return f"sqlite+aiosqlite:///{tmp_path_factory.mktemp('ledger') / 'ledger.db'}"


@pytest.fixture(scope="session")
def app(database_url):
    db.reset_engine()
    db.init_engine(database_url)
    fastapi_app.dependency_overrides[get_token_claims] = _test_claims
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture(autouse=True, scope="session")
async def db_schema(app):
    engine = db.get_engine()
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    yield


@pytest.fixture(scope="session")
async def async_client(app):
    async with LifespanManager(app):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            headers={"Authorization": f"Bearer {TEST_AUTH_TOKEN}"},
        ) as client:
            yield client


@pytest.fixture
def freeze_today(app):
    """Pin the service clock to a given date for the duration of a test."""

    def _freeze(value):
        app.dependency_overrides[get_today] = lambda: value

    yield _freeze
    app.dependency_overrides.pop(get_today, None)
