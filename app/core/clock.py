"""UTC time helpers shared by the batch jobs."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Return a timezone-aware datetime in UTC."""

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def isoformat_z(dt: datetime) -> str:
    """Render ``dt`` as ISO-8601 UTC with a trailing ``Z``, millisecond precision."""

    return ensure_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_ledger_date(value: str) -> datetime:
    """Parse a ``YYYY-MM-DD`` ledger date as UTC midnight."""

    return datetime.strptime(value, "%Y-%m-%d").replace(tzinfo=timezone.utc)


__all__ = ["utc_now", "ensure_utc", "isoformat_z", "parse_ledger_date"]
