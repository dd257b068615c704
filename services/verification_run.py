"""One scheduled verification batch: scan, verify, then aggregate."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from app.core.config import Settings
from app.core.errors import ArtifactError
from app.core.logging import get_logger
from services.audit_store import AuditStore
from services.ledger_store import LedgerStore
from services.market_data_client import MarketDataProvider, PriceBook
from services.maturity_scanner import MaturityScanner
from services.performance_aggregator import PerformanceAggregator
from services.performance_verifier import PerformanceVerifier

LOG = get_logger(__name__)


@dataclass
class RunReport:
    """What happened to each unit of work; ``failed_units`` drives the exit code."""

    audits_written: List[str] = field(default_factory=list)
    pending: List[str] = field(default_factory=list)
    failed_units: List[str] = field(default_factory=list)
    aggregated: int = 0

    @property
    def ok(self) -> bool:
        return not self.failed_units


def aggregate_only(settings: Settings, now: datetime) -> RunReport:
    report = RunReport()
    aggregator = PerformanceAggregator(AuditStore(settings.performance_dir), settings.report_path)
    try:
        outcome = aggregator.aggregate(now)
    except ArtifactError as exc:
        LOG.error("Aggregate report write failed", path=str(exc.path), detail=exc.detail)
        report.failed_units.append(f"aggregate:{exc.path}")
        return report
    report.failed_units.extend(f"audit:{path}" for path in outcome.failed_paths)
    report.aggregated = len(outcome.report.audits) if outcome.report else 0
    return report


async def run_verification(settings: Settings, provider: MarketDataProvider, now: datetime) -> RunReport:
    """Verify every mature ledger, then rebuild the aggregate report.

    Failures are isolated per ledger; a malformed ledger index aborts the
    verification step but aggregation still runs over existing audits.
    """

    report = RunReport()
    ledgers = LedgerStore(settings.data_dir)
    audits = AuditStore(settings.performance_dir)
    scanner = MaturityScanner(ledgers, default_timeframe_days=settings.default_timeframe_days)
    prices = PriceBook(
        provider,
        batch_size=settings.fetch_batch_size,
        batch_delay=settings.fetch_batch_delay_seconds,
    )
    verifier = PerformanceVerifier(audits, prices)

    try:
        entries = ledgers.load_index()
    except ArtifactError as exc:
        LOG.error("Ledger index unreadable", path=str(exc.path), detail=exc.detail)
        report.failed_units.append(f"index:{exc.path}")
        entries = []

    scan = scanner.scan(entries, now)
    report.failed_units.extend(f"ledger:{failure.ledger_date}" for failure in scan.failures)

    summary = await verifier.verify_units(scan.units, now)
    report.audits_written.extend(audit.date for audit in summary.audits)
    report.pending.extend(summary.pending_dates)
    report.failed_units.extend(f"audit:{failure.ledger_date}" for failure in summary.failures)

    aggregation = aggregate_only(settings, now)
    report.failed_units.extend(aggregation.failed_units)
    report.aggregated = aggregation.aggregated

    LOG.info(
        "Verification run finished",
        audits_written=len(report.audits_written),
        pending=len(report.pending),
        failed=len(report.failed_units),
        aggregated=report.aggregated,
    )
    return report


__all__ = ["RunReport", "aggregate_only", "run_verification"]
