"""JSON-backed storage for engine thresholds and their adjustment log."""

from __future__ import annotations

from pathlib import Path

from app.core.errors import ConfigurationError
from app.core.storage import read_model, write_model_atomic
from schemas.engine_tuning import EngineConfig


class EngineConfigStore:
    """Explicit load/modify/save over a single config file; no shared state."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or Path("data/engine-config.json")

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> EngineConfig:
        try:
            return read_model(self.path, EngineConfig)
        except FileNotFoundError as exc:
            raise ConfigurationError(f"Engine config not found at {self.path}") from exc

    def save(self, config: EngineConfig) -> None:
        write_model_atomic(self.path, config)


__all__ = ["EngineConfigStore"]
