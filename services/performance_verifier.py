"""Performance Verifier.

Looks back at mature picks and prices them against the market: for every
eligible pick the current price becomes the exit price and the realized return
is measured from the recorded entry price. One audit per ledger date is written,
replacing any earlier audit for that date.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from app.core.clock import isoformat_z
from app.core.errors import ArtifactWriteError
from app.core.logging import get_logger
from schemas.performance import Audit, VerifiedPick
from schemas.pick_ledger import Pick
from services.audit_store import AuditStore
from services.market_data_client import PriceBook
from services.maturity_scanner import LedgerWorkUnit

LOG = get_logger(__name__)


def realized_return(entry_price: float, exit_price: float) -> float:
    """Percentage return from ``entry_price`` to ``exit_price``."""

    if entry_price <= 0:
        raise ValueError(f"entry price must be positive, got {entry_price}")
    return (exit_price - entry_price) / entry_price * 100


def _has_entry_price(pick: Pick) -> bool:
    entry_price = pick.entry_price()
    return entry_price is not None and entry_price > 0


def build_audit(ledger_date: str, picks: Sequence[VerifiedPick]) -> Optional[Audit]:
    """Summarise verified picks; ``None`` when nothing was verified."""

    if not picks:
        return None
    returns = [pick.realized_return for pick in picks]
    return Audit(
        date=ledger_date,
        total_picks=len(picks),
        avg_return=sum(returns) / len(returns),
        picks=list(picks),
    )


@dataclass
class VerificationFailure:
    ledger_date: str
    reason: str


@dataclass
class VerificationSummary:
    audits: List[Audit] = field(default_factory=list)
    pending_dates: List[str] = field(default_factory=list)
    failures: List[VerificationFailure] = field(default_factory=list)


class PerformanceVerifier:
    def __init__(self, audit_store: AuditStore, prices: PriceBook) -> None:
        self._audits = audit_store
        self._prices = prices

    async def verify_pick(self, pick: Pick, now: datetime) -> Optional[VerifiedPick]:
        """Price a single mature pick; ``None`` leaves it for a later run."""

        if not _has_entry_price(pick):
            LOG.warning(
                "Skipping pick with invalid entry price",
                symbol=pick.symbol,
                algorithm=pick.algorithm,
                entry_price=pick.entry_price(),
            )
            return None
        entry_price = pick.entry_price()

        quote = await self._prices.get(pick.symbol)
        if quote is None:
            LOG.info("Price unavailable, pick stays pending", symbol=pick.symbol)
            return None

        payload = pick.model_dump(by_alias=True, exclude_unset=True)
        payload.update(
            exitPrice=quote.price,
            realizedReturn=realized_return(entry_price, quote.price),
            verifiedAt=isoformat_z(now),
        )
        return VerifiedPick.model_validate(payload)

    async def verify(self, ledger_date: str, picks: Iterable[Pick], now: datetime) -> Optional[Audit]:
        """Verify ``picks`` from one ledger and persist the audit if any were priced.

        Raises ``ArtifactWriteError`` when the audit cannot be written.
        """

        eligible = list(picks)
        await self._prices.prefetch(pick.symbol for pick in eligible if _has_entry_price(pick))

        verified: List[VerifiedPick] = []
        for pick in eligible:
            result = await self.verify_pick(pick, now)
            if result is not None:
                verified.append(result)

        audit = build_audit(ledger_date, verified)
        if audit is None:
            LOG.info("No picks verified for ledger yet", ledger_date=ledger_date, eligible=len(eligible))
            return None

        path = self._audits.write(audit)
        LOG.info(
            "Audit written",
            ledger_date=ledger_date,
            verified=audit.total_picks,
            eligible=len(eligible),
            avg_return=round(audit.avg_return, 4),
            path=str(path),
        )
        return audit

    async def verify_units(self, units: Iterable[LedgerWorkUnit], now: datetime) -> VerificationSummary:
        """Run ``verify`` per work unit, isolating persistence failures to their unit."""

        summary = VerificationSummary()
        for unit in units:
            try:
                audit = await self.verify(unit.ledger_date, unit.picks, now)
            except ArtifactWriteError as exc:
                LOG.error("Audit write failed", ledger_date=unit.ledger_date, path=str(exc.path), detail=exc.detail)
                summary.failures.append(VerificationFailure(ledger_date=unit.ledger_date, reason=str(exc)))
                continue
            if audit is None:
                summary.pending_dates.append(unit.ledger_date)
            else:
                summary.audits.append(audit)
        return summary


__all__ = [
    "realized_return",
    "build_audit",
    "VerificationFailure",
    "VerificationSummary",
    "PerformanceVerifier",
]
