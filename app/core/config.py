"""Application configuration loaded from environment via pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for verification, aggregation and tuning runs."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="allow",
    )

    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = Field("INFO", alias="LOG_LEVEL")

    data_dir: Path = Field(Path("data/v2"), alias="DATA_DIR")
    report_path: Path = Field(Path("public/data/v2/performance-report.json"), alias="REPORT_PATH")
    tuning_results_path: Path = Field(Path("public/data/scientific-tuning.json"), alias="TUNING_RESULTS_PATH")
    live_stats_path: Path = Field(Path("data/pick-performance.json"), alias="LIVE_STATS_PATH")
    engine_config_path: Path = Field(Path("data/engine-config.json"), alias="ENGINE_CONFIG_PATH")

    market_data_base_url: HttpUrl = Field("https://query1.finance.yahoo.com", alias="MARKET_DATA_BASE_URL")
    http_timeout_seconds: float = Field(15.0, alias="HTTP_TIMEOUT_SECONDS", gt=0)
    http_retry_attempts: int = Field(3, alias="HTTP_RETRY_ATTEMPTS", ge=1)
    http_retry_backoff_seconds: float = Field(0.5, alias="HTTP_RETRY_BACKOFF_SECONDS", gt=0)
    fetch_batch_size: int = Field(5, alias="FETCH_BATCH_SIZE", ge=1)
    fetch_batch_delay_seconds: float = Field(0.5, alias="FETCH_BATCH_DELAY_SECONDS", ge=0)

    default_timeframe_days: int = Field(7, alias="DEFAULT_TIMEFRAME_DAYS", ge=0)
    default_threshold: float = Field(50, alias="DEFAULT_THRESHOLD")
    min_simulated_trades: int = Field(3, alias="MIN_SIMULATED_TRADES", ge=0)
    min_simulated_move: float = Field(5, alias="MIN_SIMULATED_MOVE", ge=0)
    simulated_step: float = Field(5, alias="SIMULATED_STEP", gt=0)
    min_live_verified: int = Field(5, alias="MIN_LIVE_VERIFIED", ge=0)
    live_win_rate_floor: float = Field(40, alias="LIVE_WIN_RATE_FLOOR", ge=0, le=100)
    live_step: float = Field(5, alias="LIVE_STEP", gt=0)
    threshold_floor: float = Field(0, alias="THRESHOLD_FLOOR")
    threshold_cap: float = Field(90, alias="THRESHOLD_CAP")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        return value.upper() if isinstance(value, str) else value

    @property
    def ledger_index_path(self) -> Path:
        return self.data_dir / "ledger-index.json"

    @property
    def history_dir(self) -> Path:
        return self.data_dir / "history"

    @property
    def performance_dir(self) -> Path:
        return self.data_dir / "performance"


@lru_cache(1)
def get_settings() -> Settings:
    """Return cached Settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings"]
