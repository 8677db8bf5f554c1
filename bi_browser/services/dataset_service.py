from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional

from bi_browser.config.model import DatasetConfig
from bi_browser.core.dataset import Dataset
from bi_browser.core.dataset_loader import DatasetConfigError, from_config

logger = logging.getLogger(__name__)


class DatasetManager(Mapping[str, Dataset]):
    """
    Central service for managing datasets.
    Implements the Mapping interface (dict-like) so datasets are only read
    from disk the first time they are accessed.
    """

    def __init__(self, cfg_by_name: Dict[str, DatasetConfig], data_root: Optional[Path] = None):
        self._cfg_by_name = cfg_by_name
        self._data_root = data_root
        self._loaded: Dict[str, Dataset] = {}

    def __getitem__(self, name: str) -> Dataset:
        if name in self._loaded:
            return self._loaded[name]

        cfg = self._cfg_by_name.get(name)
        if cfg is None:
            raise KeyError(f"Unknown dataset '{name}'")

        try:
            logger.info("Lazy-loading dataset", extra={"dataset": cfg.name})
            ds = from_config(cfg, data_root=self._data_root)
        except DatasetConfigError as e:
            logger.error(
                "Dataset config error on load",
                extra={"dataset": cfg.name, "error": str(e)},
            )
            raise

        self._loaded[name] = ds
        return ds

    def _names(self) -> Dict[str, None]:
        # Configured datasets first, then ones registered via add()
        return dict.fromkeys([*self._cfg_by_name, *self._loaded])

    def __iter__(self) -> Iterator[str]:
        return iter(self._names())

    def __len__(self) -> int:
        return len(self._names())

    def is_loaded(self, name: str) -> bool:
        return name in self._loaded

    def add(self, dataset: Dataset) -> None:
        """Register an already materialised dataset (e.g. an uploaded file)."""
        self._loaded[dataset.name] = dataset

    def refresh_config(self, new_cfg_by_name: Dict[str, DatasetConfig]) -> None:
        """
        Swap the configuration map. Every loaded dataset is dropped and read
        again on next access.
        """
        self._cfg_by_name = new_cfg_by_name
        self._loaded.clear()
        logger.info("Dataset config refreshed", extra={"n_datasets": len(new_cfg_by_name)})
