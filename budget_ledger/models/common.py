from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator, PlainSerializer

from budget_ledger.domain.months import is_month, round_money


def _validate_month(value: str) -> str:
    if not is_month(value):
        raise ValueError("Month must be formatted as YYYY-MM.")
    return value


# Amounts travel as JSON numbers with two fractional digits.
Money = Annotated[
    Decimal,
    AfterValidator(round_money),
    PlainSerializer(float, return_type=float, when_used="json"),
]

Month = Annotated[str, AfterValidator(_validate_month)]
