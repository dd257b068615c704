"""Derives per-algorithm live win rates from the persisted audits.

The output is the ``byAlgorithm`` report the threshold optimizer reads for its
live fine-tuning phase. A pick counts as a win when its realized return is
strictly positive.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from app.core.clock import isoformat_z
from app.core.logging import get_logger
from app.core.storage import write_model_atomic
from schemas.performance import AlgorithmLiveStat, Audit, LivePerformanceReport, VerifiedPick
from services.audit_store import AuditStore

LOG = get_logger(__name__)

UNKNOWN_ALGORITHM = "unknown"


def _win_rate(wins: int, verified: int) -> float:
    return round(wins / verified * 100, 1) if verified else 0.0


def _avg_return(returns: List[float]) -> float:
    return round(sum(returns) / len(returns), 2) if returns else 0.0


def _stat_for(picks: List[VerifiedPick]) -> AlgorithmLiveStat:
    returns = [pick.realized_return for pick in picks]
    wins = sum(1 for value in returns if value > 0)
    return AlgorithmLiveStat(
        picks=len(picks),
        verified=len(picks),
        wins=wins,
        losses=len(picks) - wins,
        win_rate=_win_rate(wins, len(picks)),
        avg_return=_avg_return(returns),
    )


def build_live_report(audits: Iterable[Audit], now: datetime) -> LivePerformanceReport:
    grouped: Dict[str, List[VerifiedPick]] = defaultdict(list)
    everything: List[VerifiedPick] = []
    for audit in audits:
        for pick in audit.picks:
            grouped[pick.algorithm or UNKNOWN_ALGORITHM].append(pick)
            everything.append(pick)

    overall = _stat_for(everything)
    return LivePerformanceReport(
        by_algorithm={algorithm: _stat_for(picks) for algorithm, picks in sorted(grouped.items())},
        last_verified=isoformat_z(now),
        total_picks=overall.picks,
        verified=overall.verified,
        wins=overall.wins,
        losses=overall.losses,
        win_rate=overall.win_rate,
        avg_return=overall.avg_return,
    )


@dataclass
class LiveStatsOutcome:
    report: Optional[LivePerformanceReport] = None
    failed_paths: List[Path] = field(default_factory=list)


class LiveStatsBuilder:
    def __init__(self, audit_store: AuditStore, output_path: Path) -> None:
        self._audits = audit_store
        self.output_path = output_path

    def build(self, now: datetime) -> LiveStatsOutcome:
        """Rewrite the live stats file from all audits; no write when there are none."""

        loaded = self._audits.load_all()
        outcome = LiveStatsOutcome(failed_paths=loaded.failed_paths)
        if not loaded.audits:
            LOG.info("No audits yet, live stats left untouched", path=str(self.output_path))
            return outcome

        report = build_live_report(loaded.audits, now)
        write_model_atomic(self.output_path, report)
        for algorithm, stat in report.by_algorithm.items():
            LOG.info(
                "Live algorithm performance",
                algorithm=algorithm,
                win_rate=stat.win_rate,
                avg_return=stat.avg_return,
                verified=stat.verified,
            )
        outcome.report = report
        return outcome


__all__ = ["UNKNOWN_ALGORITHM", "build_live_report", "LiveStatsOutcome", "LiveStatsBuilder"]
