from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from bi_browser.config.model import DatasetConfig
from bi_browser.core.dataset import Dataset, FieldMetadata
from bi_browser.core.exceptions import DatasetSchemaError
from bi_browser.core.values import FieldType

logger = logging.getLogger(__name__)

DATA_ROOT_ENV = "BI_BROWSER_DATA_ROOT"


class DatasetConfigError(ValueError):
    """
    Raised when a dataset config is structurally invalid for loading.
    """
    pass


def _resolve_path(cfg: DatasetConfig, data_root: Optional[Path]) -> Path:
    """
    Relative dataset paths resolve against $BI_BROWSER_DATA_ROOT if set,
    then the configured data root, then the directory holding the config root.
    """
    path = cfg.path
    if path.is_absolute():
        return path

    env_root = os.environ.get(DATA_ROOT_ENV)
    if env_root:
        root_path = Path(env_root)
    elif data_root is not None:
        root_path = Path(data_root)
    else:
        root_path = cfg.source_path.parent.parent.parent

    resolved_path = root_path / path

    # Fallback for redundant 'data/' prefix
    if not resolved_path.is_file() and path.parts and path.parts[0] == "data":
        alt_path = root_path / Path(*path.parts[1:])
        if alt_path.is_file():
            resolved_path = alt_path
    return resolved_path


def from_config(cfg: DatasetConfig, data_root: Optional[Path] = None) -> Dataset:
    """
    Materialise a Dataset from a DatasetConfig.

    The file is a JSON document ``{"fields": [...], "data": [...]}``. Fields
    declared in the config take precedence over the file's own declaration.
    """
    try:
        path = _resolve_path(cfg, data_root)
    except KeyError as e:
        raise DatasetConfigError(str(e))

    if not path.is_file():
        raise DatasetConfigError(f"Dataset file not found at {path}.")

    try:
        with path.open() as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise DatasetConfigError(f"Dataset file {path} is not valid JSON: {e}")

    try:
        config_fields = cfg.fields
        if config_fields is not None and isinstance(payload, dict):
            payload = dict(payload, fields=[f.to_dict() for f in config_fields])
        dataset = Dataset.from_payload(payload, name=cfg.name, file_path=path)
    except DatasetSchemaError as e:
        msg = f"Dataset '{cfg.name}': {e}"
        logger.error(msg, extra={"dataset": cfg.name, "path": str(path)})
        raise DatasetConfigError(msg)

    logger.info(
        "Loaded dataset",
        extra={"dataset": cfg.name, "path": str(path), "n_rows": len(dataset), "n_fields": len(dataset.fields)},
    )
    return dataset


def fallback_dataset() -> Dataset:
    """
    Tiny built-in dataset used when nothing else is available (e.g. the demo
    before any file was uploaded).
    """
    return Dataset.from_records(
        [
            {"Region": "North", "Product": "A", "Sales": 100},
            {"Region": "South", "Product": "B", "Sales": 200},
            {"Region": "North", "Product": "B", "Sales": 150},
        ],
        [
            FieldMetadata("Region", FieldType.STRING),
            FieldMetadata("Product", FieldType.STRING),
            FieldMetadata("Sales", FieldType.NUMBER),
        ],
        name="Sample data",
    )
