"""Schemas package for the JSON artifacts read and written by the batch jobs."""

from .pick_ledger import Ledger, LedgerIndex, LedgerIndexEntry, Pick, PickMetrics
from .performance import AggregateReport, AlgorithmLiveStat, Audit, LivePerformanceReport, VerifiedPick
from .engine_tuning import EngineConfig, TuningResult, TuningResultSet
from .market_quote import PriceQuote

__all__ = [
    "Ledger",
    "LedgerIndex",
    "LedgerIndexEntry",
    "Pick",
    "PickMetrics",
    "AggregateReport",
    "AlgorithmLiveStat",
    "Audit",
    "LivePerformanceReport",
    "VerifiedPick",
    "EngineConfig",
    "TuningResult",
    "TuningResultSet",
    "PriceQuote",
]
