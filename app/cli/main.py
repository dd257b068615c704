"""Typer CLI entrypoint for the verification and tuning batch jobs."""

from __future__ import annotations

import asyncio

import typer

from app.core.clock import utc_now
from app.core.config import Settings, get_settings
from app.core.errors import ArtifactError, ConfigurationError
from app.core.logging import setup_logging
from services.audit_store import AuditStore
from services.engine_config_store import EngineConfigStore
from services.live_stats_builder import LiveStatsBuilder
from services.market_data_client import YahooChartClient
from services.threshold_optimizer import OptimizerPolicy, ThresholdOptimizer
from services.verification_run import RunReport, aggregate_only, run_verification


app = typer.Typer(help="Pick verification, performance reporting and threshold tuning.")


def _bootstrap(json_logs: bool) -> Settings:
    settings = get_settings()
    setup_logging(settings.log_level, json_logs=json_logs)
    return settings


def _finish(report: RunReport) -> None:
    if report.ok:
        return
    typer.echo(f"{len(report.failed_units)} unit(s) failed: {', '.join(report.failed_units)}", err=True)
    raise typer.Exit(code=1)


@app.command("verify")
def verify(json_logs: bool = typer.Option(False, "--json-logs", help="Emit one JSON object per log line")) -> None:
    """Verify every mature pick, write per-date audits, then rebuild the report."""

    settings = _bootstrap(json_logs)
    report = asyncio.run(_verify(settings))
    typer.echo(
        f"audits_written={len(report.audits_written)} pending={len(report.pending)} "
        f"aggregated={report.aggregated}"
    )
    _finish(report)


async def _verify(settings: Settings) -> RunReport:
    async with YahooChartClient(settings) as client:
        return await run_verification(settings, client, utc_now())


@app.command("aggregate")
def aggregate(json_logs: bool = typer.Option(False, "--json-logs", help="Emit one JSON object per log line")) -> None:
    """Rebuild the aggregate performance report from the audits on disk."""

    settings = _bootstrap(json_logs)
    report = aggregate_only(settings, utc_now())
    typer.echo(f"aggregated={report.aggregated}")
    _finish(report)


@app.command("live-stats")
def live_stats(json_logs: bool = typer.Option(False, "--json-logs", help="Emit one JSON object per log line")) -> None:
    """Derive per-algorithm live win rates from the audits."""

    settings = _bootstrap(json_logs)
    builder = LiveStatsBuilder(AuditStore(settings.performance_dir), settings.live_stats_path)
    try:
        outcome = builder.build(utc_now())
    except ArtifactError as exc:
        typer.echo(f"Failed to write live stats: {exc} ({exc.detail})", err=True)
        raise typer.Exit(code=1) from exc

    algorithms = len(outcome.report.by_algorithm) if outcome.report else 0
    typer.echo(f"algorithms={algorithms}")
    if outcome.failed_paths:
        typer.echo(f"{len(outcome.failed_paths)} audit(s) unreadable", err=True)
        raise typer.Exit(code=1)


@app.command("optimize")
def optimize(json_logs: bool = typer.Option(False, "--json-logs", help="Emit one JSON object per log line")) -> None:
    """Nudge engine thresholds from simulation results and live win rates."""

    settings = _bootstrap(json_logs)
    optimizer = ThresholdOptimizer(
        EngineConfigStore(settings.engine_config_path),
        tuning_results_path=settings.tuning_results_path,
        live_stats_path=settings.live_stats_path,
        policy=OptimizerPolicy.from_settings(settings),
    )
    try:
        outcome = optimizer.run(utc_now())
    except ConfigurationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    except ArtifactError as exc:
        typer.echo(f"Optimization aborted: {exc} ({exc.detail})", err=True)
        raise typer.Exit(code=1) from exc

    if outcome.changed:
        for entry in outcome.adjustments:
            typer.echo(entry)
    else:
        typer.echo("No optimization needed.")


if __name__ == "__main__":
    app()
