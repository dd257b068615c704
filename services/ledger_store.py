"""Read-only access to the ledger index and the date-partitioned pick ledgers."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from app.core.logging import get_logger
from app.core.storage import read_model
from schemas.pick_ledger import Ledger, LedgerIndex, LedgerIndexEntry

LOG = get_logger(__name__)


class LedgerStore:
    """Resolves ledgers under ``<data_dir>/history/<year>/<month>/<day>.json``."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = data_dir

    @property
    def index_path(self) -> Path:
        return self.data_dir / "ledger-index.json"

    def ledger_path(self, ledger_date: str) -> Path:
        year, month, day = ledger_date.split("-")
        return self.data_dir / "history" / year / month / f"{day}.json"

    def load_index(self) -> List[LedgerIndexEntry]:
        """Return the index entries, or an empty list when no index exists yet.

        A malformed index raises ``ArtifactParseError``: without it there is
        nothing to verify.
        """

        try:
            index = read_model(self.index_path, LedgerIndex)
        except FileNotFoundError:
            LOG.warning("Ledger index missing, nothing to verify", path=str(self.index_path))
            return []
        return index.root

    def load_ledger(self, ledger_date: str) -> Optional[Ledger]:
        """Return the ledger for ``ledger_date`` or ``None`` when it is not on disk yet."""

        path = self.ledger_path(ledger_date)
        try:
            return read_model(path, Ledger)
        except FileNotFoundError:
            LOG.info("Ledger not yet available", ledger_date=ledger_date, path=str(path))
            return None


__all__ = ["LedgerStore"]
