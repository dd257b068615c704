"""Schemas for engine thresholds and the backtest tuning results that steer them."""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import Field

from .pick_ledger import LedgerModel


class EngineConfig(LedgerModel):
    """Per-algorithm thresholds consumed by the pick generator, with a change log."""

    last_optimized: Optional[str] = None
    thresholds: Dict[str, Union[int, float]] = Field(default_factory=dict)
    adjustments: List[str] = Field(default_factory=list)


class TuningResult(LedgerModel):
    """One simulated (algorithm, threshold) row from the backtest simulator."""

    algorithm: str
    threshold: float
    total_trades: int = 0
    win_rate: float = 0.0
    avg_return: float = 0.0
    sharpe_ratio: float = 0.0


class TuningResultSet(LedgerModel):
    last_run: Optional[str] = None
    results: List[TuningResult] = Field(default_factory=list)


__all__ = ["EngineConfig", "TuningResult", "TuningResultSet"]
