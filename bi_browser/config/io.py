from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple

from bi_browser.config.model import DatasetConfig, GlobalConfig
from bi_browser.core.aggregation import DEFAULT_TOP_N
from bi_browser.core.dataset import Dataset
from bi_browser.core import dataset_loader
from bi_browser.core.exceptions import ConfigError
from bi_browser.core.widget import DEFAULT_TITLE

logger = logging.getLogger(__name__)


def _resolve_dir(root: Path, raw: Any) -> Optional[Path]:
    # Absolute paths are used as-is, relative ones resolve against the config root
    if raw is None:
        return None
    path = Path(raw)
    if path.is_absolute():
        return path
    return (root / path).resolve()


def _parse_top_n(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    try:
        top_n = int(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"top_n must be an integer or null, got {raw!r}")
    if top_n < 1:
        raise ConfigError(f"top_n must be positive, got {top_n}")
    return top_n


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load configuration from a directory using the multi-file layout.

    Expected structure:

        root/
            global.json
            datasets/
                sales.json
                ...

    global.json keys:

    - ui_title: dashboard title, defaults to 'My Dashboard'
    - top_n: number of groups kept by charts, defaults to 15 (null keeps all)
    - data_root: directory that relative dataset paths resolve against,
      defaults to the parent of the config root
    - storage_root: directory where dashboard/selection state is persisted

    :param root: Directory containing 'global.json' and optionally 'datasets/'.
    :return: A GlobalConfig instance.
    :raises FileNotFoundError: if global.json does not exist.
    :raises ConfigError: if global.json holds invalid values.
    """
    root = Path(root)
    logger.info(
        "Loading global config",
        extra={"config_root": str(root)},
    )

    global_path = root / "global.json"
    if not global_path.is_file():
        raise FileNotFoundError(f"File not found at {global_path}")

    with global_path.open() as f:
        raw_global = json.load(f)

    if not isinstance(raw_global, dict):
        raise ConfigError(f"{global_path} must contain a JSON object")

    datasets_dir = root / "datasets"
    datasets: List[DatasetConfig] = []

    if datasets_dir.is_dir():
        for idx, config_file in enumerate(sorted(datasets_dir.glob("*.json"))):
            with config_file.open() as f:
                raw = json.load(f)
            datasets.append(
                DatasetConfig.from_raw(raw, source_path=config_file, index=idx)
            )

    return GlobalConfig(
        ui_title=raw_global.get("ui_title", DEFAULT_TITLE),
        top_n=_parse_top_n(raw_global.get("top_n", DEFAULT_TOP_N)),
        datasets=datasets,
        data_root=_resolve_dir(root, raw_global.get("data_root")) or root.resolve().parent,
        storage_root=_resolve_dir(root, raw_global.get("storage_root")),
    )


def load_datasets(path: Path) -> Tuple[GlobalConfig, List[Dataset]]:
    """
    Load the global configuration and instantiate all Dataset objects.

    Main entrypoint used by services.

    1. Loads the top-level GlobalConfig from 'path'.
    2. Iterates over GlobalConfig.datasets and calls `from_config` for each.
    3. Skips any dataset whose config is invalid, logging the error.
    4. Returns only successfully materialised Dataset objects.

    :param path: Path to config directory.
    :return: A tuple of (GlobalConfig, List[Dataset]).
    :raises RuntimeError: if no valid datasets could be loaded.
    """
    global_config = load_global_config(path)

    datasets: List[Dataset] = []
    failed = 0

    for ds_cfg in global_config.datasets:
        try:
            ds = dataset_loader.from_config(ds_cfg, data_root=global_config.data_root)
        except dataset_loader.DatasetConfigError as e:
            failed += 1
            logger.error(
                "Skipping dataset due to config error",
                extra={"dataset": ds_cfg.name, "error": str(e)},
            )
            continue
        except Exception:  # hard guard against unexpected issues
            failed += 1
            logger.exception(
                "Unexpected error while loading dataset; skipping",
                extra={"dataset": ds_cfg.name},
            )
            continue

        datasets.append(ds)

    logger.info(
        "Datasets loaded from config root",
        extra={
            "config_root": str(path),
            "n_datasets": len(datasets),
            "n_failed": failed,
            "dataset_names": [ds.name for ds in datasets],
        },
    )

    if not datasets:
        # At this point the dashboard would be useless anyway, so fail fast with a clear error.
        raise RuntimeError(
            f"No valid datasets could be loaded from config root: {path}"
        )

    return global_config, datasets
