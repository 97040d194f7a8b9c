from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from budget_ledger import db
from budget_ledger.errors import jsonable
from budget_ledger.models import EventType
from budget_ledger.tables import SystemEventsTable

logger = logging.getLogger(__name__)


class EventsDataAccess:
    """Append-only sink for audit events.

    Rows are added to the request session and written with the operation that
    produced them, so an operation rolled back leaves no event behind.
    """

    def __init__(self, session: AsyncSession = Depends(db.get_session)) -> None:
        self._session = session

    def record(
        self, workspace_id: uuid.UUID, type: EventType, /, **details: Any
    ) -> None:
        payload = {key: jsonable(value) for key, value in details.items()}
        self._session.add(
            SystemEventsTable(workspace_id=workspace_id, type=type.value, details=payload)
        )
        logger.info("%s in workspace %s: %s", type.value, workspace_id, payload)
