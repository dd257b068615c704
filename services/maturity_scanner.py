"""Maturity Scanner.

Walks the ledger index and decides, per pick, whether enough time has passed
since the ledger date to judge the pick against its own timeframe. Each ledger
with at least one mature pick becomes an independent work unit for the
verifier; a broken ledger only fails its own unit.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from app.core.clock import ensure_utc, parse_ledger_date
from app.core.errors import ArtifactParseError
from app.core.logging import get_logger
from schemas.pick_ledger import LedgerIndexEntry, Pick
from services.ledger_store import LedgerStore

LOG = get_logger(__name__)

DEFAULT_TIMEFRAME_DAYS = 7
SECONDS_PER_DAY = 86_400

_TIMEFRAME_RE = re.compile(r"^(\d+)([a-z])$")

# unit -> value-in-units to days
_TIMEFRAME_UNITS = {
    "h": lambda value: math.ceil(value / 24),
    "d": lambda value: value,
    "m": lambda value: value * 30,
    "y": lambda value: value * 365,
}


def parse_timeframe_to_days(timeframe: Optional[str], default: int = DEFAULT_TIMEFRAME_DAYS) -> int:
    """Convert ``24h``/``7d``/``1m``/``1y`` style strings to whole days.

    Hours round up to the next full day. Anything missing or unparsable maps
    to ``default``.
    """

    if not timeframe:
        return default
    match = _TIMEFRAME_RE.match(timeframe.strip().lower())
    if match is None:
        return default
    value, unit = int(match.group(1)), match.group(2)
    convert = _TIMEFRAME_UNITS.get(unit)
    if convert is None:
        return default
    return convert(value)


def days_passed(ledger_date: datetime, now: datetime) -> int:
    """Whole days elapsed between ``ledger_date`` and ``now`` (floored)."""

    elapsed = ensure_utc(now) - ensure_utc(ledger_date)
    return math.floor(elapsed.total_seconds() / SECONDS_PER_DAY)


@dataclass
class LedgerWorkUnit:
    """Mature picks from one ledger, ready for verification."""

    ledger_date: str
    days_passed: int
    picks: List[Pick] = field(default_factory=list)


@dataclass
class ScanFailure:
    ledger_date: str
    reason: str


@dataclass
class ScanResult:
    units: List[LedgerWorkUnit] = field(default_factory=list)
    failures: List[ScanFailure] = field(default_factory=list)

    def eligible_pairs(self) -> List[Tuple[str, Pick]]:
        return [(unit.ledger_date, pick) for unit in self.units for pick in unit.picks]


class MaturityScanner:
    def __init__(self, store: LedgerStore, *, default_timeframe_days: int = DEFAULT_TIMEFRAME_DAYS) -> None:
        self._store = store
        self._default_days = default_timeframe_days

    def mature_picks(self, picks: Iterable[Pick], elapsed_days: int) -> List[Pick]:
        """Return the picks whose timeframe has fully elapsed after ``elapsed_days``."""

        return [
            pick
            for pick in picks
            if elapsed_days >= parse_timeframe_to_days(pick.timeframe, self._default_days)
        ]

    def scan(self, entries: Iterable[LedgerIndexEntry], now: datetime) -> ScanResult:
        """Build one work unit per ledger that has at least one mature pick.

        Same-day ledgers are never candidates. Ledgers listed in the index but
        absent on disk are skipped; malformed ledgers are reported as failures.
        """

        result = ScanResult()
        for entry in entries:
            try:
                ledger_dt = parse_ledger_date(entry.date)
            except ValueError:
                LOG.warning("Skipping index entry with invalid date", ledger_date=entry.date)
                continue

            elapsed = days_passed(ledger_dt, now)
            if elapsed < 1:
                continue

            try:
                ledger = self._store.load_ledger(entry.date)
            except (ArtifactParseError, OSError) as exc:
                LOG.error("Ledger could not be read", ledger_date=entry.date, error=str(exc))
                result.failures.append(ScanFailure(ledger_date=entry.date, reason=str(exc)))
                continue
            if ledger is None:
                continue

            mature = self.mature_picks(ledger.picks, elapsed)
            LOG.info(
                "Evaluated ledger maturity",
                ledger_date=entry.date,
                days_passed=elapsed,
                picks=len(ledger.picks),
                mature=len(mature),
            )
            if mature:
                result.units.append(LedgerWorkUnit(ledger_date=entry.date, days_passed=elapsed, picks=mature))
        return result


__all__ = [
    "DEFAULT_TIMEFRAME_DAYS",
    "parse_timeframe_to_days",
    "days_passed",
    "LedgerWorkUnit",
    "ScanFailure",
    "ScanResult",
    "MaturityScanner",
]
