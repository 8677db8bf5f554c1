from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from bi_browser.config.io import load_global_config
from bi_browser.config.model import DatasetConfig, GlobalConfig
from bi_browser.core.dataset import Dataset
from bi_browser.core.dataset_loader import DatasetConfigError, fallback_dataset
from bi_browser.core.selection import SelectionStore
from bi_browser.core.view_registry import ViewRegistry
from bi_browser.services.dashboard_service import DashboardService
from bi_browser.services.dataset_service import DatasetManager
from bi_browser.services.selection_persistence import StorageSelectionPersistence
from bi_browser.services.session_service import AnalysisSession
from bi_browser.services.storage import LocalFileSystemStorage, StorageBackend
from bi_browser.views import build_view_registry

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """
    Shared state of one running browser: config, datasets, the view registry
    and the storage-backed services. Passed around instead of module-level
    globals.
    """
    config_root: Path
    global_config: GlobalConfig
    datasets: DatasetManager
    default_dataset: Dataset
    registry: ViewRegistry
    storage: StorageBackend
    dashboards: DashboardService

    def open_session(self, dataset_name: Optional[str] = None) -> AnalysisSession:
        """
        Start an analysis session on a dataset (the default one if no name is
        given). Selections persist per dataset.
        """
        dataset = self.datasets[dataset_name] if dataset_name else self.default_dataset
        persistence = StorageSelectionPersistence(
            self.storage, path=f"selections/{_slug(dataset.name)}.json"
        )
        store = SelectionStore(persistence=persistence)
        return AnalysisSession(dataset, self.registry, store, top_n=self.global_config.top_n)


def _slug(name: str) -> str:
    return "".join(c if c.isalnum() or c in "-_" else "_" for c in name) or "dataset"


def _pick_default(manager: DatasetManager) -> Dataset:
    # First configured dataset that loads; the built-in sample otherwise
    for name in manager:
        try:
            return manager[name]
        except DatasetConfigError:
            continue
    logger.warning("No configured dataset could be loaded; using the built-in sample data")
    dataset = fallback_dataset()
    manager.add(dataset)
    return dataset


def create_app_context(config_root: Path | str = Path("config")) -> AppContext:
    config_root = Path(config_root)

    # 1) Load config
    global_config = load_global_config(config_root)
    cfg_by_name: Dict[str, DatasetConfig] = {}
    for cfg in global_config.datasets:
        if cfg.name in cfg_by_name:
            raise RuntimeError(f"Duplicate dataset name '{cfg.name}' in config")
        cfg_by_name[cfg.name] = cfg

    # 2) Initialise service layer
    manager = DatasetManager(cfg_by_name, data_root=global_config.data_root)
    storage_root = global_config.storage_root or (config_root.parent / "state")
    storage = LocalFileSystemStorage(storage_root)

    ctx = AppContext(
        config_root=config_root,
        global_config=global_config,
        datasets=manager,
        default_dataset=_pick_default(manager),
        registry=build_view_registry(),
        storage=storage,
        dashboards=DashboardService(storage, default_title=global_config.ui_title),
    )
    logger.info(
        "App context ready",
        extra={
            "config_root": str(config_root),
            "storage_root": str(storage.root),
            "n_datasets": len(manager),
            "default_dataset": ctx.default_dataset.name,
        },
    )
    return ctx
