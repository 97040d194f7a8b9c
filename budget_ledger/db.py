from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from budget_ledger.tables import Base

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

_ASYNC_DRIVERS = {
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


def _async_url(database_url: str) -> str:
    """Swap a sync driver name for its async counterpart."""
    scheme, separator, rest = database_url.partition("://")
    return f"{_ASYNC_DRIVERS.get(scheme, scheme)}{separator}{rest}"


def _create_engine(database_url: str) -> AsyncEngine:
    url = make_url(_async_url(database_url))
    options: dict[str, object] = {"echo": os.environ.get("SQL_ECHO") == "1"}
    if url.get_backend_name() == "postgresql":
        options["pool_pre_ping"] = True
    logger.info("Opening record store %s", url.render_as_string(hide_password=True))
    return create_async_engine(url, **options)


def init_engine(database_url: str) -> None:
    global _engine, _sessionmaker
    _engine = _create_engine(database_url)
    # Rows are mapped to dataclasses before commit, nothing reads them afterwards.
    _sessionmaker = async_sessionmaker(
        bind=_engine, autoflush=False, expire_on_commit=False
    )


def init_from_env() -> None:
    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL must be set to reach the record store.")
    init_engine(database_url)


def get_engine() -> AsyncEngine:
    if _engine is None:
        init_from_env()
    return _engine


async def init_db() -> None:
    async with get_engine().begin() as connection:
        await connection.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def get_session_scope() -> AsyncIterator[AsyncSession]:
    """One unit of work: committed on success, rolled back on any exception."""
    if _sessionmaker is None:
        init_from_env()
    async with _sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_session() -> AsyncIterator[AsyncSession]:
    async with get_session_scope() as session:
        yield session


async def dispose_engine() -> None:
    if _engine is not None:
        await _engine.dispose()


def reset_engine() -> None:
    global _engine, _sessionmaker
    if _engine is not None:
        _engine.sync_engine.dispose()
    _engine = None
    _sessionmaker = None
