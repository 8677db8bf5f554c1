from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import AbstractSet, Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .exceptions import DatasetSchemaError
from .values import FieldType, infer_field_type, is_missing, sort_values

ConstraintKey = FrozenSet[Tuple[str, FrozenSet[Any]]]


@dataclass(frozen=True)
class FieldMetadata:
    """
    Name and declared type of a dataset field.
    """
    name: str
    type: FieldType = FieldType.STRING

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FieldMetadata:
        name = data.get("name")
        if not name:
            raise DatasetSchemaError(f"Field metadata without a name: {dict(data)}")
        raw_type = data.get("type", FieldType.STRING.value)
        try:
            field_type = FieldType(raw_type)
        except ValueError:
            raise DatasetSchemaError(
                f"Field '{name}' has unknown type '{raw_type}' "
                f"(expected one of {[t.value for t in FieldType]})"
            )
        return cls(name=str(name), type=field_type)

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.type.value}


def _normalise_frame(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Copy a frame into object columns of raw Python scalars with missing cells
    as None, so that ints stay ints even when a column has holes.
    """
    index = pd.RangeIndex(len(frame))
    columns: Dict[str, pd.Series] = {}
    for col in frame.columns:
        values = [None if is_missing(v) else v for v in frame[col].tolist()]
        columns[str(col)] = pd.Series(values, index=index, dtype=object)
    return pd.DataFrame(columns, index=index)


def constraints_key(constraints: Mapping[str, AbstractSet[Any]]) -> ConstraintKey:
    """Order-insensitive, hashable key for a set of field constraints (empty sets dropped)."""
    return frozenset(
        (field, frozenset(values)) for field, values in constraints.items() if values
    )


class Dataset:
    """
    Immutable tabular dataset used throughout the browser.

    Includes:
    - Field metadata (declared or inferred per column)
    - Raw cell values kept as Python scalars (object dtype), missing cells as None
    - Cached distinct values per field
    - Cached row masks per constraint set
    """

    MAX_MASK_CACHE = 256

    # -------------------------------------------------------------------------
    # Constructor
    # -------------------------------------------------------------------------
    def __init__(
        self,
        name: str,
        frame: pd.DataFrame,
        fields: Optional[Sequence[FieldMetadata]] = None,
        file_path: Optional[Path] = None,
    ) -> None:
        self.name = name
        self.file_path = file_path

        frame = _normalise_frame(frame)

        # ---------------------------------------------------------------------
        # Declared fields first (in declaration order), then any extra columns
        # found in the data with an inferred type
        # ---------------------------------------------------------------------
        declared: Dict[str, FieldMetadata] = {f.name: f for f in (fields or [])}
        for name_ in declared:
            if name_ not in frame.columns:
                frame[name_] = pd.Series([None] * len(frame), index=frame.index, dtype=object)

        self._fields: Dict[str, FieldMetadata] = dict(declared)
        for col in frame.columns:
            col = str(col)
            if col not in self._fields:
                self._fields[col] = FieldMetadata(col, infer_field_type(frame[col].tolist()))

        self._frame: pd.DataFrame = frame

        # ---------------------------------------------------------------------
        # Caches
        # ---------------------------------------------------------------------
        self._distinct_cache: Dict[str, List[Any]] = {}
        self._valid_sets: Optional[Dict[str, FrozenSet[Any]]] = None
        self._mask_cache: Dict[ConstraintKey, np.ndarray] = {}

    # -------------------------------------------------------------------------
    # Construction helpers
    # -------------------------------------------------------------------------
    @classmethod
    def from_records(
        cls,
        rows: Iterable[Mapping[str, Any]],
        fields: Optional[Sequence[FieldMetadata]] = None,
        *,
        name: str = "dataset",
        file_path: Optional[Path] = None,
    ) -> Dataset:
        """
        Build a Dataset from row mappings. Rows may omit fields; omitted
        cells are stored as missing.
        """
        rows = list(rows)
        for i, row in enumerate(rows):
            if not isinstance(row, Mapping):
                raise DatasetSchemaError(f"Row {i} must be an object, got {type(row).__name__}")

        columns: List[str] = [f.name for f in (fields or [])]
        for row in rows:
            for key in row:
                if key not in columns:
                    columns.append(str(key))

        frame = pd.DataFrame(
            [[row.get(c) for c in columns] for row in rows],
            columns=columns,
            dtype=object,
        )
        return cls(name=name, frame=frame, fields=fields, file_path=file_path)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, name: str = "dataset", file_path: Optional[Path] = None) -> Dataset:
        """
        Build a Dataset from a ``{"fields": [...], "data": [...]}`` document.
        """
        if not isinstance(payload, Mapping):
            raise DatasetSchemaError("Dataset payload must be a JSON object")
        data = payload.get("data")
        if not isinstance(data, list):
            raise DatasetSchemaError("Dataset payload must contain a 'data' list")
        raw_fields = payload.get("fields") or []
        if not isinstance(raw_fields, list):
            raise DatasetSchemaError("Dataset payload 'fields' must be a list")
        fields = [FieldMetadata.from_dict(f) for f in raw_fields]
        return cls.from_records(data, fields, name=name, file_path=file_path)

    def to_payload(self) -> Dict[str, Any]:
        """Inverse of from_payload: missing cells are omitted from the rows."""
        return {
            "fields": [f.to_dict() for f in self.fields],
            "data": self.to_records(),
        }

    # -------------------------------------------------------------------------
    # Properties & getters
    # -------------------------------------------------------------------------
    @property
    def frame(self) -> pd.DataFrame:
        """The underlying table. Read-only by contract: callers must not mutate it."""
        return self._frame

    @property
    def fields(self) -> List[FieldMetadata]:
        return list(self._fields.values())

    @property
    def field_names(self) -> List[str]:
        return list(self._fields)

    def field(self, name: str) -> Optional[FieldMetadata]:
        return self._fields.get(name)

    def field_type(self, name: str) -> Optional[FieldType]:
        meta = self._fields.get(name)
        return meta.type if meta is not None else None

    def __len__(self) -> int:
        return len(self._frame)

    @property
    def n_rows(self) -> int:
        return len(self._frame)

    def column(self, name: str) -> pd.Series:
        """
        Return the raw values of a field. Unknown fields yield an all-missing
        column, so a constraint on them matches no row.
        """
        if name in self._frame.columns:
            return self._frame[name]
        return pd.Series([None] * len(self._frame), index=self._frame.index, dtype=object)

    def to_records(self, mask: Optional[np.ndarray] = None) -> List[Dict[str, Any]]:
        frame = self._frame if mask is None else self._frame[mask]
        return [
            {k: v for k, v in row.items() if not is_missing(v)}
            for row in frame.to_dict(orient="records")
        ]

    # -------------------------------------------------------------------------
    # Cached distinct values
    # -------------------------------------------------------------------------
    def distinct_values(self, name: str) -> List[Any]:
        """
        Distinct non-missing values of a field, in canonical sort order.
        """
        cached = self._distinct_cache.get(name)
        if cached is not None:
            return list(cached)

        col = self.column(name).dropna()
        values = sort_values(pd.unique(col.to_numpy()).tolist(), self.field_type(name))
        self._distinct_cache[name] = values
        return list(values)

    def valid_sets(self) -> Dict[str, FrozenSet[Any]]:
        """
        Return cached valid values per field, for sanitising persisted selections.
        """
        if self._valid_sets is None:
            self._valid_sets = {
                name: frozenset(self.distinct_values(name)) for name in self._fields
            }
        return self._valid_sets

    # -------------------------------------------------------------------------
    # Row masks with caching
    # -------------------------------------------------------------------------
    def mask_for(self, constraints: Mapping[str, AbstractSet[Any]]) -> np.ndarray:
        """
        Boolean row mask for a set of field constraints.

        A row passes iff, for every constrained field, its value is one of the
        selected values (OR within a field, AND across fields). No constraints
        means every row passes. Masks are cached and returned read-only.
        """
        key = constraints_key(constraints)
        cached = self._mask_cache.get(key)
        if cached is not None:
            return cached

        mask = np.ones(len(self._frame), dtype=bool)
        for field, values in key:
            mask &= self.column(field).isin(list(values)).to_numpy(dtype=bool)

        mask.setflags(write=False)

        # Prevent unbounded growth
        if len(self._mask_cache) >= self.MAX_MASK_CACHE:
            self._mask_cache.clear()
        self._mask_cache[key] = mask
        return mask

    def subset(self, constraints: Mapping[str, AbstractSet[Any]]) -> pd.DataFrame:
        """Rows passing the given constraints (a new frame, original row order)."""
        return self._frame[self.mask_for(constraints)]

    # -------------------------------------------------------------------------
    # Cache management
    # -------------------------------------------------------------------------
    def clear_caches(self) -> None:
        """Reset caches for masks, distinct values and valid value sets."""
        self._mask_cache.clear()
        self._distinct_cache.clear()
        self._valid_sets = None
