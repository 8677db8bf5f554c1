from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from bi_browser.core.aggregation import DEFAULT_TOP_N
from bi_browser.core.dataset import FieldMetadata
from bi_browser.core.widget import DEFAULT_TITLE


@dataclass
class DatasetConfig:
    """
    Parsed config entry for a single dataset.
    """

    raw: Dict[str, Any]
    source_path: Path
    index: int

    @property
    def name(self) -> str:
        return self.raw.get("name", f"Dataset {self.index}")

    @property
    def path(self) -> Path:
        """
        Return the dataset JSON path.

        Supports both:
        - new schema:  "path": "data/sales.json"
        - legacy:      "file": "data/sales.json" or "file_path": "data/sales.json"
        """
        raw_path = (
            self.raw.get("path") or self.raw.get("file") or self.raw.get("file_path")
        )
        if raw_path is None:
            raise KeyError(
                f"No 'path', 'file', or 'file_path' in dataset config: {self.raw}"
            )
        return Path(raw_path)

    @property
    def fields(self) -> Optional[List[FieldMetadata]]:
        """
        Field metadata declared in the config, overriding the dataset file's own.
        None if the config does not declare fields.
        """
        raw_fields = self.raw.get("fields")
        if raw_fields is None:
            return None
        return [FieldMetadata.from_dict(f) for f in raw_fields]

    @classmethod
    def from_raw(
        cls, raw: Dict[str, Any], source_path: Path, index: int
    ) -> DatasetConfig:
        return cls(raw=raw, source_path=source_path, index=index)


@dataclass
class GlobalConfig:
    ui_title: str = DEFAULT_TITLE
    top_n: Optional[int] = DEFAULT_TOP_N
    datasets: List[DatasetConfig] = None
    data_root: Optional[Path] = None
    storage_root: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.datasets is None:
            self.datasets = []
