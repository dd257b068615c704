"""Threshold Optimizer.

Two-phase control loop over the per-algorithm score thresholds consumed by the
pick generator:

1. Simulation guidance: move each threshold one bounded step toward the
   backtest's best Sharpe-ratio threshold. A slow, conservative prior.
2. Live fine-tuning: tighten algorithms whose verified win rate is poor. A
   faster corrective signal, applied after phase 1 in the same run.

Both phases edit one in-memory ``EngineConfig``; it is written once at the end
and only when something changed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, Field

from app.core.clock import ensure_utc, isoformat_z
from app.core.config import Settings
from app.core.logging import get_logger
from app.core.storage import read_model
from schemas.engine_tuning import EngineConfig, TuningResult, TuningResultSet
from schemas.performance import LivePerformanceReport
from services.engine_config_store import EngineConfigStore

LOG = get_logger(__name__)

Number = Union[int, float]
ModelT = TypeVar("ModelT", bound=BaseModel)


class OptimizerPolicy(BaseModel):
    """Gates, step sizes and the safety band used by both phases."""

    model_config = {"extra": "forbid"}

    default_threshold: float = 50
    min_simulated_trades: int = Field(3, ge=0)
    min_simulated_move: float = Field(5, ge=0)
    simulated_step: float = Field(5, gt=0)
    min_live_verified: int = Field(5, ge=0)
    live_win_rate_floor: float = Field(40, ge=0, le=100)
    live_step: float = Field(5, gt=0)
    threshold_floor: float = 0
    threshold_cap: float = 90

    @classmethod
    def from_settings(cls, settings: Settings) -> "OptimizerPolicy":
        return cls(
            default_threshold=settings.default_threshold,
            min_simulated_trades=settings.min_simulated_trades,
            min_simulated_move=settings.min_simulated_move,
            simulated_step=settings.simulated_step,
            min_live_verified=settings.min_live_verified,
            live_win_rate_floor=settings.live_win_rate_floor,
            live_step=settings.live_step,
            threshold_floor=settings.threshold_floor,
            threshold_cap=settings.threshold_cap,
        )


def _tidy(value: Number) -> Number:
    return int(value) if float(value).is_integer() else value


def _fmt(value: Number) -> str:
    return f"{value:g}" if isinstance(value, float) else str(value)


def _current_threshold(config: EngineConfig, algorithm: str, policy: OptimizerPolicy) -> Number:
    return config.thresholds.get(algorithm, _tidy(policy.default_threshold))


def simulated_optimum(rows: Iterable[TuningResult], min_trades: int) -> Optional[TuningResult]:
    """Best-Sharpe row among rows with enough simulated trades; first row wins ties."""

    eligible = [row for row in rows if row.total_trades >= min_trades]
    if not eligible:
        return None
    return max(eligible, key=lambda row: row.sharpe_ratio)


def nudge_toward(current: Number, target: Number, policy: OptimizerPolicy) -> Number:
    """One bounded step from ``current`` toward ``target``.

    Never overshoots the target and never pushes a threshold past the safety
    band; a threshold already outside the band is not dragged back by more
    than one step either.
    """

    gap = target - current
    step = min(policy.simulated_step, abs(gap))
    if gap > 0:
        moved = min(current + step, policy.threshold_cap)
        return _tidy(max(moved, current))
    moved = max(current - step, policy.threshold_floor)
    return _tidy(min(moved, current))


def apply_simulation_guidance(
    config: EngineConfig,
    results: Iterable[TuningResult],
    policy: OptimizerPolicy,
    today: str,
) -> List[str]:
    """Phase 1: nudge thresholds toward the simulated optimum. Returns log entries."""

    by_algorithm: Dict[str, List[TuningResult]] = {}
    for row in results:
        by_algorithm.setdefault(row.algorithm, []).append(row)

    entries: List[str] = []
    for algorithm, rows in by_algorithm.items():
        best = simulated_optimum(rows, policy.min_simulated_trades)
        if best is None:
            LOG.debug("Not enough simulated trades", algorithm=algorithm, min_trades=policy.min_simulated_trades)
            continue

        current = _current_threshold(config, algorithm, policy)
        optimum = _tidy(best.threshold)
        if abs(optimum - current) < policy.min_simulated_move:
            continue

        new_threshold = nudge_toward(current, optimum, policy)
        if new_threshold == current:
            continue

        config.thresholds[algorithm] = new_threshold
        entries.append(
            f"{today}: Simulation nudged {algorithm} to {_fmt(new_threshold)} "
            f"(simulated optimum: {_fmt(optimum)})"
        )
        LOG.info(
            "Simulation guidance applied",
            algorithm=algorithm,
            previous=current,
            threshold=new_threshold,
            optimum=optimum,
            sharpe_ratio=best.sharpe_ratio,
        )
    return entries


def apply_live_tuning(
    config: EngineConfig,
    live: LivePerformanceReport,
    policy: OptimizerPolicy,
    today: str,
) -> List[str]:
    """Phase 2: tighten under-performing algorithms. Returns log entries."""

    entries: List[str] = []
    for algorithm, stats in live.by_algorithm.items():
        if stats.verified < policy.min_live_verified:
            continue
        if stats.win_rate >= policy.live_win_rate_floor:
            continue

        current = _current_threshold(config, algorithm, policy)
        new_threshold = _tidy(min(current + policy.live_step, policy.threshold_cap))
        if new_threshold <= current:
            continue

        config.thresholds[algorithm] = new_threshold
        entries.append(
            f"{today}: Tightened {algorithm} to {_fmt(new_threshold)} (Win Rate: {_fmt(stats.win_rate)}%)"
        )
        LOG.info(
            "Algorithm underperforming, threshold tightened",
            algorithm=algorithm,
            win_rate=stats.win_rate,
            verified=stats.verified,
            previous=current,
            threshold=new_threshold,
        )
    return entries


@dataclass
class OptimizationOutcome:
    config: EngineConfig
    adjustments: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.adjustments)


class ThresholdOptimizer:
    def __init__(
        self,
        store: EngineConfigStore,
        tuning_results_path: Path,
        live_stats_path: Path,
        policy: Optional[OptimizerPolicy] = None,
    ) -> None:
        self._store = store
        self.tuning_results_path = tuning_results_path
        self.live_stats_path = live_stats_path
        self.policy = policy or OptimizerPolicy()

    def _load_optional(self, path: Path, model: Type[ModelT], label: str) -> Optional[ModelT]:
        try:
            return read_model(path, model)
        except FileNotFoundError:
            LOG.warning("Optimizer input missing, phase skipped", input=label, path=str(path))
            return None

    def run(self, now: datetime) -> OptimizationOutcome:
        """Evaluate both phases, then persist the config once if anything moved.

        Raises ``ConfigurationError`` when the engine config is missing and
        ``ArtifactParseError`` when any input is malformed; nothing is written
        in either case.
        """

        config = self._store.load()
        tuning = self._load_optional(self.tuning_results_path, TuningResultSet, "simulation results")
        live = self._load_optional(self.live_stats_path, LivePerformanceReport, "live performance data")
        today = ensure_utc(now).date().isoformat()

        adjustments: List[str] = []
        if tuning is not None:
            adjustments.extend(apply_simulation_guidance(config, tuning.results, self.policy, today))
        if live is not None:
            adjustments.extend(apply_live_tuning(config, live, self.policy, today))

        outcome = OptimizationOutcome(config=config, adjustments=adjustments)
        if not outcome.changed:
            LOG.info("No optimization needed, thresholds appear stable")
            return outcome

        config.adjustments.extend(adjustments)
        config.last_optimized = isoformat_z(now)
        self._store.save(config)
        LOG.info("Optimization complete, config updated", adjustments=len(adjustments), path=str(self._store.path))
        return outcome


__all__ = [
    "OptimizerPolicy",
    "simulated_optimum",
    "nudge_toward",
    "apply_simulation_guidance",
    "apply_live_tuning",
    "OptimizationOutcome",
    "ThresholdOptimizer",
]
