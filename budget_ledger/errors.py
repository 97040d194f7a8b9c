from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status


class LedgerError(HTTPException):
    """Base for errors the ledger reports back to the caller.

    ``context`` names the records involved (category, account, month) so the
    caller can explain the failure without re-querying.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    kind = "ledger_error"

    def __init__(self, detail: str, **context: Any) -> None:
        super().__init__(status_code=type(self).status_code, detail=detail)
        self.context = {key: jsonable(value) for key, value in context.items()}


class ValidationError(LedgerError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "validation_error"


class NotFoundError(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"


class ConflictError(LedgerError):
    status_code = status.HTTP_409_CONFLICT
    kind = "conflict"


class NonZeroBalanceError(LedgerError):
    status_code = status.HTTP_409_CONFLICT
    kind = "non_zero_balance"


class StoreError(LedgerError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    kind = "store_error"


def jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (list, tuple, set)):
        return [jsonable(item) for item in value]
    return str(value)
