from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from budget_ledger.errors import StoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def writing(action: str) -> AsyncIterator[None]:
    """Report driver failures inside the block as ``StoreError``.

    The request-scoped session is rolled back by ``db.get_session`` once the
    error propagates, so a partially written operation never commits.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Record store failed while %s", action)
        raise StoreError(
            f"The record store failed while {action}.", action=action
        ) from exc


async def flush(session: AsyncSession, *, action: str) -> None:
    async with writing(action):
        await session.flush()
