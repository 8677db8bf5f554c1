import json

import pytest

from bi_browser.config.model import DatasetConfig
from bi_browser.core.dataset_loader import DatasetConfigError, fallback_dataset
from bi_browser.services.dataset_service import DatasetManager


def _cfg(tmp_path, name, path):
    return DatasetConfig.from_raw({"name": name, "path": str(path)}, source_path=tmp_path / "cfg.json", index=0)


def test_datasets_load_lazily_and_are_cached(tmp_path):
    data = tmp_path / "sales.json"
    data.write_text(json.dumps({"fields": [], "data": [{"Region": "North"}]}))
    manager = DatasetManager({"Sales": _cfg(tmp_path, "Sales", data)})

    assert list(manager) == ["Sales"]
    assert not manager.is_loaded("Sales")

    ds = manager["Sales"]
    assert manager.is_loaded("Sales")
    assert manager["Sales"] is ds

    with pytest.raises(KeyError):
        manager["Other"]


def test_broken_dataset_raises_config_error(tmp_path):
    manager = DatasetManager({"Gone": _cfg(tmp_path, "Gone", tmp_path / "missing.json")})
    with pytest.raises(DatasetConfigError):
        manager["Gone"]


def test_added_datasets_are_listed_and_refresh_drops_them(tmp_path):
    manager = DatasetManager({})
    manager.add(fallback_dataset())

    assert list(manager) == ["Sample data"]
    assert len(manager) == 1

    manager.refresh_config({})
    assert len(manager) == 0
