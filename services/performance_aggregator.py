"""Consolidates the per-date audits into one report for the dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from app.core.clock import isoformat_z
from app.core.logging import get_logger
from app.core.storage import write_model_atomic
from schemas.performance import AggregateReport, Audit
from services.audit_store import AuditStore

LOG = get_logger(__name__)


def order_audits(audits: Sequence[Audit]) -> List[Audit]:
    """Newest date first; audits sharing a date keep their read order."""

    return sorted(audits, key=lambda audit: audit.date, reverse=True)


@dataclass
class AggregationOutcome:
    report: Optional[AggregateReport] = None
    failed_paths: List[Path] = field(default_factory=list)


class PerformanceAggregator:
    """Rebuilds the aggregate report wholesale from whatever audits are on disk.

    The report reflects exactly the audits persisted at the time of the run; a
    verification run that died before aggregating is picked up next time.
    """

    def __init__(self, audit_store: AuditStore, report_path: Path) -> None:
        self._audits = audit_store
        self.report_path = report_path

    def aggregate(self, now: datetime) -> AggregationOutcome:
        loaded = self._audits.load_all()
        outcome = AggregationOutcome(failed_paths=loaded.failed_paths)

        if not loaded.audits:
            LOG.info(
                "No audit files found to aggregate",
                performance_dir=str(self._audits.performance_dir),
            )
            return outcome

        report = AggregateReport(audits=order_audits(loaded.audits), last_updated=isoformat_z(now))
        write_model_atomic(self.report_path, report, exclude_unset=True)
        LOG.info("Aggregated performance reports", audits=len(report.audits), path=str(self.report_path))
        outcome.report = report
        return outcome


__all__ = ["order_audits", "AggregationOutcome", "PerformanceAggregator"]
