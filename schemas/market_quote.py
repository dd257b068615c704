"""Schema for a single current-price quote."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PriceQuote(BaseModel):
    model_config = {"extra": "forbid"}

    symbol: str
    price: float = Field(..., gt=0)
