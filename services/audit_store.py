"""Persistence for per-date verification audits."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from app.core.errors import ArtifactParseError
from app.core.logging import get_logger
from app.core.storage import read_model, write_model_atomic
from schemas.performance import Audit

LOG = get_logger(__name__)

AUDIT_SUFFIX = "-audit.json"


@dataclass
class AuditLoadResult:
    audits: List[Audit] = field(default_factory=list)
    failed_paths: List[Path] = field(default_factory=list)


class AuditStore:
    """One ``<date>-audit.json`` file per ledger date under ``performance_dir``."""

    def __init__(self, performance_dir: Path) -> None:
        self.performance_dir = performance_dir

    def audit_path(self, ledger_date: str) -> Path:
        return self.performance_dir / f"{ledger_date}{AUDIT_SUFFIX}"

    def write(self, audit: Audit) -> Path:
        """Persist ``audit``, replacing any previous audit for the same date."""

        path = self.audit_path(audit.date)
        write_model_atomic(path, audit, exclude_unset=True)
        return path

    def audit_files(self) -> List[Path]:
        if not self.performance_dir.is_dir():
            return []
        return sorted(self.performance_dir.glob(f"*{AUDIT_SUFFIX}"))

    def load_all(self) -> AuditLoadResult:
        """Read every audit in file-name order; unreadable files are reported, not raised."""

        result = AuditLoadResult()
        for path in self.audit_files():
            try:
                result.audits.append(read_model(path, Audit))
            except (ArtifactParseError, OSError) as exc:
                LOG.error("Skipping unreadable audit", path=str(path), error=str(exc))
                result.failed_paths.append(path)
        return result


__all__ = ["AUDIT_SUFFIX", "AuditLoadResult", "AuditStore"]
