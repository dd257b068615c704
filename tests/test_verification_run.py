from __future__ import annotations

from datetime import timedelta

import pytest

from services.verification_run import aggregate_only, run_verification


def _ledger_path(settings, ledger_date: str):
    year, month, day = ledger_date.split("-")
    return settings.history_dir / year / month / f"{day}.json"


@pytest.mark.asyncio
async def test_full_batch_verifies_and_aggregates(settings, now, write_json, read_json, fake_provider) -> None:
    old = (now - timedelta(days=10)).strftime("%Y-%m-%d")
    fresh = (now - timedelta(days=2)).strftime("%Y-%m-%d")
    write_json(settings.ledger_index_path, [{"date": fresh, "count": 1}, {"date": old, "count": 2}])
    write_json(
        _ledger_path(settings, old),
        {"picks": [
            {"symbol": "ABC", "algorithm": "CAN SLIM", "timeframe": "7d", "price": 50, "metrics": {"price": 50}},
            {"symbol": "XYZ", "algorithm": "Alpha Predator", "timeframe": "7d", "price": 20, "metrics": {"price": 20}},
        ]},
    )
    write_json(
        _ledger_path(settings, fresh),
        {"picks": [{"symbol": "ABC", "algorithm": "CAN SLIM", "timeframe": "7d", "price": 52}]},
    )

    report = await run_verification(settings, fake_provider({"ABC": 55.0, "XYZ": 18.0}), now)

    assert report.ok
    assert report.audits_written == [old]
    assert report.aggregated == 1
    audit = read_json(settings.performance_dir / f"{old}-audit.json")
    assert audit["totalPicks"] == 2
    assert audit["avgReturn"] == pytest.approx((10.0 + -10.0) / 2)
    aggregate = read_json(settings.report_path)
    assert [entry["date"] for entry in aggregate["audits"]] == [old]


@pytest.mark.asyncio
async def test_missing_index_is_not_a_failure(settings, now, fake_provider) -> None:
    report = await run_verification(settings, fake_provider({}), now)

    assert report.ok
    assert report.audits_written == []
    assert not settings.report_path.exists()


@pytest.mark.asyncio
async def test_broken_units_fail_the_run_but_not_each_other(settings, now, write_json, read_json, fake_provider) -> None:
    broken = (now - timedelta(days=12)).strftime("%Y-%m-%d")
    good = (now - timedelta(days=11)).strftime("%Y-%m-%d")
    write_json(settings.ledger_index_path, [{"date": broken}, {"date": good}])
    path = _ledger_path(settings, broken)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("{", encoding="utf-8")
    write_json(_ledger_path(settings, good), {"picks": [{"symbol": "ABC", "timeframe": "7d", "price": 50}]})

    report = await run_verification(settings, fake_provider({"ABC": 60.0}), now)

    assert not report.ok
    assert report.failed_units == [f"ledger:{broken}"]
    assert report.audits_written == [good]
    assert read_json(settings.report_path)["audits"][0]["avgReturn"] == pytest.approx(20.0)


@pytest.mark.asyncio
async def test_malformed_index_still_aggregates_existing_audits(settings, now, write_json, fake_provider) -> None:
    settings.ledger_index_path.parent.mkdir(parents=True, exist_ok=True)
    settings.ledger_index_path.write_text("not json", encoding="utf-8")
    write_json(
        settings.performance_dir / "2026-03-01-audit.json",
        {"date": "2026-03-01", "totalPicks": 0, "avgReturn": 0.0, "picks": []},
    )

    report = await run_verification(settings, fake_provider({}), now)

    assert report.failed_units == [f"index:{settings.ledger_index_path}"]
    assert report.aggregated == 1


def test_aggregate_only_without_audits(settings, now) -> None:
    report = aggregate_only(settings, now)

    assert report.ok
    assert report.aggregated == 0


def test_aggregate_only_reports_unwritable_report(settings, now, write_json) -> None:
    write_json(
        settings.performance_dir / "2026-03-01-audit.json",
        {"date": "2026-03-01", "totalPicks": 0, "avgReturn": 0.0, "picks": []},
    )
    blocker = settings.report_path.parent / "blocker"
    write_json(blocker, {})
    blocked = settings.model_copy(update={"report_path": blocker / "performance-report.json"})

    report = aggregate_only(blocked, now)

    assert not report.ok
    assert report.failed_units == [f"aggregate:{blocker / 'performance-report.json'}"]
