"""Schemas for dated pick ledgers written by the upstream pick generator."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel
from pydantic.alias_generators import to_camel


class LedgerModel(BaseModel):
    """Base for ledger payloads: camelCase on the wire, unknown keys preserved."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class PickMetrics(LedgerModel):
    """Entry metrics recorded alongside a pick; only ``price`` is read here."""

    price: Optional[float] = None


class Pick(LedgerModel):
    """A single symbol+algorithm recommendation as recorded in a ledger."""

    symbol: str
    algorithm: Optional[str] = None
    timeframe: Optional[str] = None
    price: Optional[float] = None
    metrics: Optional[PickMetrics] = None

    def entry_price(self) -> Optional[float]:
        """Resolve the entry price: ``metrics.price`` first, then ``price``.

        Missing, null and zero values all count as absent, so a zero
        ``metrics.price`` falls through to the top-level price.
        """

        if self.metrics is not None and self.metrics.price:
            return self.metrics.price
        if self.price:
            return self.price
        return None


class Ledger(LedgerModel):
    """All picks recorded for one calendar date."""

    picks: List[Pick] = Field(default_factory=list)


class LedgerIndexEntry(LedgerModel):
    date: str


class LedgerIndex(RootModel[List[LedgerIndexEntry]]):
    """Ordered ``[{date: "YYYY-MM-DD", ...}]`` list maintained upstream."""


__all__ = ["LedgerModel", "PickMetrics", "Pick", "Ledger", "LedgerIndexEntry", "LedgerIndex"]
