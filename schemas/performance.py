"""Schemas for verification audits, the aggregate report and live statistics."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field

from .pick_ledger import LedgerModel, Pick


class VerifiedPick(Pick):
    """A pick copied verbatim plus its realized outcome."""

    exit_price: float
    realized_return: float
    verified_at: str


class Audit(LedgerModel):
    """Verification outcome for every mature pick of one ledger date."""

    date: str
    total_picks: int
    avg_return: float
    picks: List[VerifiedPick] = Field(default_factory=list)


class AggregateReport(LedgerModel):
    audits: List[Audit] = Field(default_factory=list)
    last_updated: str


class AlgorithmLiveStat(LedgerModel):
    """Live win rate for one algorithm; ``win_rate`` is a percentage."""

    win_rate: float = 0.0
    verified: int = 0
    picks: Optional[int] = None
    wins: Optional[int] = None
    losses: Optional[int] = None
    avg_return: Optional[float] = None


class LivePerformanceReport(LedgerModel):
    by_algorithm: Dict[str, AlgorithmLiveStat] = Field(default_factory=dict)
    last_verified: Optional[str] = None
    total_picks: Optional[int] = None
    verified: Optional[int] = None
    wins: Optional[int] = None
    losses: Optional[int] = None
    win_rate: Optional[float] = None
    avg_return: Optional[float] = None


__all__ = [
    "VerifiedPick",
    "Audit",
    "AggregateReport",
    "AlgorithmLiveStat",
    "LivePerformanceReport",
]
