import json
from pathlib import Path

import pytest

from bi_browser.config.io import load_datasets, load_global_config
from bi_browser.config.model import DatasetConfig
from bi_browser.core.dataset_loader import DatasetConfigError, fallback_dataset, from_config
from bi_browser.core.exceptions import ConfigError
from bi_browser.core.values import FieldType


def _write_payload(path: Path) -> Path:
    payload = {
        "fields": [
            {"name": "Region", "type": "string"},
            {"name": "Sales", "type": "number"},
        ],
        "data": [
            {"Region": "North", "Sales": 100},
            {"Region": "South", "Sales": 200},
        ],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload))
    return path


def _make_config_root(tmp_path: Path, global_json: dict) -> Path:
    # root/
    #   global.json
    #   datasets/
    config_root = tmp_path / "config"
    (config_root / "datasets").mkdir(parents=True)
    (config_root / "global.json").write_text(json.dumps(global_json))
    return config_root


def test_load_datasets_from_config_dir(tmp_path):
    data_path = _write_payload(tmp_path / "data" / "sales.json")
    config_root = _make_config_root(tmp_path, {"ui_title": "Test Browser", "top_n": 5})
    (config_root / "datasets" / "sales.json").write_text(
        json.dumps({"name": "Sales", "path": str(data_path)})
    )

    global_config, datasets = load_datasets(config_root)

    assert global_config.ui_title == "Test Browser"
    assert global_config.top_n == 5
    assert [ds.name for ds in datasets] == ["Sales"]
    assert datasets[0].field_type("Sales") is FieldType.NUMBER
    assert datasets[0].file_path == data_path


def test_invalid_dataset_is_skipped(tmp_path):
    data_path = _write_payload(tmp_path / "data" / "sales.json")
    config_root = _make_config_root(tmp_path, {})
    (config_root / "datasets" / "a_missing.json").write_text(
        json.dumps({"name": "Missing", "path": str(tmp_path / "nope.json")})
    )
    (config_root / "datasets" / "b_sales.json").write_text(
        json.dumps({"name": "Sales", "path": str(data_path)})
    )

    _, datasets = load_datasets(config_root)
    assert [ds.name for ds in datasets] == ["Sales"]


def test_no_valid_datasets_raises(tmp_path):
    config_root = _make_config_root(tmp_path, {})
    (config_root / "datasets" / "broken.json").write_text(json.dumps({"name": "Broken"}))

    with pytest.raises(RuntimeError):
        load_datasets(config_root)


def test_missing_global_json_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_global_config(tmp_path)


def test_global_defaults_and_bad_top_n(tmp_path):
    config_root = _make_config_root(tmp_path, {})
    cfg = load_global_config(config_root)
    assert cfg.ui_title == "My Dashboard"
    assert cfg.top_n == 15
    assert cfg.datasets == []
    assert cfg.storage_root is None

    (config_root / "global.json").write_text(json.dumps({"top_n": None, "storage_root": "state"}))
    cfg = load_global_config(config_root)
    assert cfg.top_n is None
    assert cfg.storage_root == (config_root / "state").resolve()

    (config_root / "global.json").write_text(json.dumps({"top_n": 0}))
    with pytest.raises(ConfigError):
        load_global_config(config_root)


def test_relative_path_uses_data_root_env(tmp_path, monkeypatch):
    _write_payload(tmp_path / "elsewhere" / "sales.json")
    monkeypatch.setenv("BI_BROWSER_DATA_ROOT", str(tmp_path / "elsewhere"))

    cfg = DatasetConfig.from_raw(
        {"name": "Sales", "file": "data/sales.json"},
        source_path=tmp_path / "config" / "datasets" / "sales.json",
        index=0,
    )
    ds = from_config(cfg)
    assert len(ds) == 2


def test_config_fields_override_file_fields(tmp_path):
    data_path = _write_payload(tmp_path / "sales.json")
    cfg = DatasetConfig.from_raw(
        {"name": "Sales", "path": str(data_path), "fields": [{"name": "Sales", "type": "string"}]},
        source_path=tmp_path / "cfg.json",
        index=0,
    )
    ds = from_config(cfg)
    assert ds.field_type("Sales") is FieldType.STRING
    assert ds.field_type("Region") is FieldType.STRING


def test_bad_payload_raises_config_error(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"fields": []}))
    cfg = DatasetConfig.from_raw({"name": "Bad", "path": str(bad)}, source_path=tmp_path / "cfg.json", index=0)
    with pytest.raises(DatasetConfigError):
        from_config(cfg)

    bad.write_text("{oops")
    with pytest.raises(DatasetConfigError):
        from_config(cfg)


def test_fallback_dataset():
    ds = fallback_dataset()
    assert ds.field_names == ["Region", "Product", "Sales"]
    assert len(ds) == 3
    assert ds.to_records() == [
        {"Region": "North", "Product": "A", "Sales": 100},
        {"Region": "South", "Product": "B", "Sales": 200},
        {"Region": "North", "Product": "B", "Sales": 150},
    ]
