from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from schemas.performance import Audit, VerifiedPick
from services.audit_store import AuditStore
from services.live_stats_builder import LiveStatsBuilder, build_live_report


NOW = datetime(2026, 3, 20, 12, 0, tzinfo=timezone.utc)


def _verified(algorithm: str | None, realized: float) -> VerifiedPick:
    payload = {
        "symbol": "ABC",
        "exitPrice": 10.0,
        "realizedReturn": realized,
        "verifiedAt": "2026-03-20T12:00:00.000Z",
    }
    if algorithm is not None:
        payload["algorithm"] = algorithm
    return VerifiedPick.model_validate(payload)


def _audit(date: str, picks: list[VerifiedPick]) -> Audit:
    returns = [pick.realized_return for pick in picks]
    return Audit(date=date, total_picks=len(picks), avg_return=sum(returns) / len(returns), picks=picks)


def test_groups_by_algorithm_and_counts_wins() -> None:
    audits = [
        _audit("2026-03-01", [_verified("Alpha Predator", 4.0), _verified("Alpha Predator", -2.0)]),
        _audit("2026-03-02", [_verified("Alpha Predator", 0.0), _verified("CAN SLIM", 6.0)]),
    ]

    report = build_live_report(audits, NOW)

    alpha = report.by_algorithm["Alpha Predator"]
    assert alpha.verified == 3
    assert alpha.wins == 1
    assert alpha.losses == 2
    assert alpha.win_rate == pytest.approx(33.3)
    assert alpha.avg_return == pytest.approx(0.67)
    assert report.by_algorithm["CAN SLIM"].win_rate == 100.0
    assert report.verified == 4
    assert report.wins == 2
    assert report.win_rate == 50.0
    assert report.last_verified == "2026-03-20T12:00:00.000Z"


def test_missing_algorithm_is_grouped_as_unknown() -> None:
    report = build_live_report([_audit("2026-03-01", [_verified(None, 1.0)])], NOW)

    assert list(report.by_algorithm) == ["unknown"]


def test_builder_writes_camel_case_report(tmp_path: Path, write_json, read_json) -> None:
    store = AuditStore(tmp_path / "performance")
    store.write(_audit("2026-03-01", [_verified("CAN SLIM", 2.0)]))
    builder = LiveStatsBuilder(store, tmp_path / "pick-performance.json")

    outcome = builder.build(NOW)

    assert outcome.report is not None
    written = read_json(builder.output_path)
    assert written["byAlgorithm"]["CAN SLIM"]["winRate"] == 100.0
    assert written["byAlgorithm"]["CAN SLIM"]["verified"] == 1
    assert written["lastVerified"] == "2026-03-20T12:00:00.000Z"


def test_builder_without_audits_writes_nothing(tmp_path: Path) -> None:
    builder = LiveStatsBuilder(AuditStore(tmp_path / "performance"), tmp_path / "pick-performance.json")

    outcome = builder.build(NOW)

    assert outcome.report is None
    assert not builder.output_path.exists()
