"""Batch services closing the loop between recorded picks and their outcomes."""

from .ledger_store import LedgerStore
from .audit_store import AuditStore
from .maturity_scanner import MaturityScanner, parse_timeframe_to_days
from .market_data_client import PriceBook, YahooChartClient
from .performance_verifier import PerformanceVerifier
from .performance_aggregator import PerformanceAggregator
from .live_stats_builder import LiveStatsBuilder
from .engine_config_store import EngineConfigStore
from .threshold_optimizer import OptimizerPolicy, ThresholdOptimizer

__all__ = [
    "LedgerStore",
    "AuditStore",
    "MaturityScanner",
    "parse_timeframe_to_days",
    "PriceBook",
    "YahooChartClient",
    "PerformanceVerifier",
    "PerformanceAggregator",
    "LiveStatsBuilder",
    "EngineConfigStore",
    "OptimizerPolicy",
    "ThresholdOptimizer",
]
