from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

from app.core.config import Settings, get_settings
from schemas.market_quote import PriceQuote


NOW = datetime(2026, 3, 20, 12, 0, tzinfo=timezone.utc)


class FakePriceProvider:
    """In-memory provider: returns configured prices, ``None`` for unknown symbols."""

    def __init__(self, prices: Dict[str, float]) -> None:
        self.prices = prices
        self.calls: List[str] = []

    async def fetch_price(self, symbol: str) -> Optional[PriceQuote]:
        self.calls.append(symbol)
        price = self.prices.get(symbol)
        if price is None:
            return None
        return PriceQuote(symbol=symbol, price=price)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> None:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing every artifact into ``tmp_path``."""

    return Settings(
        data_dir=tmp_path / "data" / "v2",
        report_path=tmp_path / "public" / "data" / "v2" / "performance-report.json",
        tuning_results_path=tmp_path / "public" / "data" / "scientific-tuning.json",
        live_stats_path=tmp_path / "data" / "pick-performance.json",
        engine_config_path=tmp_path / "data" / "engine-config.json",
        fetch_batch_delay_seconds=0,
        http_retry_attempts=2,
        http_retry_backoff_seconds=0.01,
    )


@pytest.fixture
def write_json() -> Callable[[Path, Any], Path]:
    def _write(path: Path, payload: Any) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def read_json() -> Callable[[Path], Any]:
    def _read(path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    return _read


@pytest.fixture
def fake_provider() -> Callable[[Dict[str, float]], FakePriceProvider]:
    return FakePriceProvider
