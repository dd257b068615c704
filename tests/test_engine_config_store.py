from pathlib import Path

import pytest

from app.core.errors import ArtifactParseError, ConfigurationError
from schemas.engine_tuning import EngineConfig
from services.engine_config_store import EngineConfigStore


def test_store_saves_and_loads(tmp_path: Path) -> None:
    store = EngineConfigStore(tmp_path / "engine-config.json")
    config = EngineConfig(thresholds={"CAN SLIM": 60, "Alpha Predator": 72.5}, adjustments=["seed"])
    store.save(config)
    loaded = store.load()
    assert loaded.thresholds == {"CAN SLIM": 60, "Alpha Predator": 72.5}
    assert isinstance(loaded.thresholds["CAN SLIM"], int)
    assert loaded.adjustments == ["seed"]
    assert loaded.last_optimized is None


def test_store_writes_camel_case_without_temp_leftovers(tmp_path: Path, read_json) -> None:
    store = EngineConfigStore(tmp_path / "nested" / "engine-config.json")
    store.save(EngineConfig(last_optimized="2026-03-20T12:00:00.000Z", thresholds={"A": 55}))
    assert read_json(store.path) == {
        "lastOptimized": "2026-03-20T12:00:00.000Z",
        "thresholds": {"A": 55},
        "adjustments": [],
    }
    assert [path.name for path in store.path.parent.iterdir()] == ["engine-config.json"]


def test_missing_config_raises_configuration_error(tmp_path: Path) -> None:
    store = EngineConfigStore(tmp_path / "engine-config.json")
    assert not store.exists()
    with pytest.raises(ConfigurationError):
        store.load()


def test_malformed_config_raises_parse_error(tmp_path: Path) -> None:
    path = tmp_path / "engine-config.json"
    path.write_text('{"thresholds": {"A": "high"}}', encoding="utf-8")
    with pytest.raises(ArtifactParseError):
        EngineConfigStore(path).load()
