from __future__ import annotations

from dataclasses import asdict
from typing import Any, TypeVar

from pydantic import BaseModel

from budget_ledger.errors import ValidationError

ResponseT = TypeVar("ResponseT", bound=BaseModel)


def extract_updates(
    payload: BaseModel, *, empty_detail: str = "No fields to update."
) -> dict[str, object]:
    """The fields a PATCH body actually sets.

    Explicit nulls are rejected: every patchable field of the ledger is
    required once stored.
    """
    updates = payload.model_dump(exclude_unset=True)
    null_fields = sorted(key for key, value in updates.items() if value is None)
    if null_fields:
        raise ValidationError(
            f"Fields cannot be null: {', '.join(null_fields)}", fields=null_fields
        )
    if not updates:
        raise ValidationError(empty_detail)
    return updates


def to_response(model: type[ResponseT], record: Any, **extra: Any) -> ResponseT:
    """Build a response body from a domain dataclass plus computed fields."""
    return model(**asdict(record), **extra)
