from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set

import numpy as np
import pandas as pd

from .dataset import Dataset
from .selection import SelectionSnapshot

logger = logging.getLogger(__name__)


class SelectionState(str, Enum):
    """
    Classification of a field value under the current selections.

    - SELECTED: the value is selected in its own field
    - POSSIBLE: not selected, but some row with this value satisfies every
      other field's selection
    - EXCLUDED: no row with this value satisfies the other fields' selections
    - ALTERNATIVE: possible under the other fields' selections but superseded
      by a selection in its own field (only reported on request)
    """

    SELECTED = "SELECTED"
    POSSIBLE = "POSSIBLE"
    EXCLUDED = "EXCLUDED"
    ALTERNATIVE = "ALTERNATIVE"


@dataclass(frozen=True)
class ValueStatus:
    value: Any
    state: SelectionState


def possible_mask(dataset: Dataset, snapshot: SelectionSnapshot, exclude_field: Optional[str] = None) -> np.ndarray:
    """
    Row mask of the rows compatible with every selection in the snapshot,
    ignoring the selection of `exclude_field` if given.
    """
    constraints = snapshot.without(exclude_field) if exclude_field is not None else snapshot
    return dataset.mask_for(constraints)


def possible_rows(dataset: Dataset, snapshot: SelectionSnapshot, exclude_field: Optional[str] = None) -> pd.DataFrame:
    """
    Rows compatible with the snapshot (AND across fields, OR within a field).
    """
    return dataset.frame[possible_mask(dataset, snapshot, exclude_field)]


def _classify(
        field: str,
        dataset: Dataset,
        snapshot: SelectionSnapshot,
        mask: np.ndarray,
        alternatives: bool,
) -> List[ValueStatus]:
    own_selection = snapshot.selected(field)
    column = dataset.column(field)
    possible_values: Set[Any] = set(column[mask].dropna().tolist())

    possible_state = SelectionState.POSSIBLE
    if alternatives and own_selection:
        possible_state = SelectionState.ALTERNATIVE

    out: List[ValueStatus] = []
    for value in dataset.distinct_values(field):
        if value in own_selection:
            state = SelectionState.SELECTED
        elif value in possible_values:
            state = possible_state
        else:
            state = SelectionState.EXCLUDED
        out.append(ValueStatus(value=value, state=state))
    return out


def classify_field(
        field: str,
        dataset: Dataset,
        snapshot: SelectionSnapshot,
        *,
        alternatives: bool = False,
) -> List[ValueStatus]:
    """
    Classify every distinct value of `field` as SELECTED / POSSIBLE / EXCLUDED.

    The field's own selection is removed before computing which rows are
    possible, so selecting a value never excludes its siblings in the same
    field. Values are returned in canonical sort order.

    :param alternatives: if True, values that would be POSSIBLE are reported
        as ALTERNATIVE when the field has a selection of its own
    """
    mask = possible_mask(dataset, snapshot, exclude_field=field)
    return _classify(field, dataset, snapshot, mask, alternatives)


class AssociativeEvaluator:
    """
    Evaluates one snapshot against one dataset for a whole render pass.

    Filter panes that share the same "other constraints" (e.g. every field
    without a selection of its own) reuse a single row mask. The evaluator is
    read-only: build a new one for each new snapshot.
    """

    def __init__(self, dataset: Dataset, snapshot: SelectionSnapshot, *, alternatives: bool = False):
        self.dataset = dataset
        self.snapshot = snapshot
        self.alternatives = alternatives
        self._masks: Dict[Optional[str], np.ndarray] = {}

    def _mask(self, exclude_field: Optional[str]) -> np.ndarray:
        # A field without a selection of its own sees the full snapshot
        key = exclude_field if exclude_field in self.snapshot else None
        mask = self._masks.get(key)
        if mask is None:
            mask = possible_mask(self.dataset, self.snapshot, key)
            self._masks[key] = mask
        return mask

    def classify(self, field: str) -> List[ValueStatus]:
        return _classify(field, self.dataset, self.snapshot, self._mask(field), self.alternatives)

    def classify_all(self, fields: Optional[Iterable[str]] = None) -> Dict[str, List[ValueStatus]]:
        """Classify several fields (all dataset fields by default), keyed by field."""
        fields = list(fields) if fields is not None else self.dataset.field_names
        result = {field: self.classify(field) for field in fields}
        logger.debug(
            "Classified fields",
            extra={
                "dataset": self.dataset.name,
                "n_fields": len(result),
                "active_fields": self.snapshot.active_fields(),
                "n_masks": len(self._masks),
            },
        )
        return result

    def possible_rows(self) -> pd.DataFrame:
        """Rows compatible with every active selection (input for aggregation)."""
        return self.dataset.frame[self._mask(None)]

    def possible_count(self) -> int:
        return int(self._mask(None).sum())
