from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from pydantic import BaseModel

from budget_ledger.models.common import Money


class ForecastPointResponse(BaseModel):
    label: str
    actual: Money | None
    plan: Money | None
    forecast: Money | None


class ForecastResponse(BaseModel):
    year: int
    current_month: str
    points: list[ForecastPointResponse]


@dataclass(frozen=True, slots=True)
class ForecastPoint:
    label: str
    actual: Decimal | None = None
    plan: Decimal | None = None
    forecast: Decimal | None = None


@dataclass(frozen=True, slots=True)
class Forecast:
    year: int
    current_month: str
    points: list[ForecastPoint]
