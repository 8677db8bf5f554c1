from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Union

import numpy as np
import pandas as pd

from .dataset import Dataset
from .values import display_key

DEFAULT_TOP_N = 15

# Value reported for each group when no measure is configured (plain listing)
UNIQUE_SENTINEL = "-"

Rows = Union[pd.DataFrame, Dataset, Iterable[Mapping[str, Any]]]


class AggOp(str, Enum):
    SUM = "sum"
    AVG = "avg"
    COUNT = "count"


@dataclass(frozen=True)
class AggregateRow:
    key: str
    value: Union[float, str]


@dataclass(frozen=True)
class KpiResult:
    label: str
    value: float


KPI_LABELS = {
    AggOp.SUM: "Total",
    AggOp.AVG: "Average",
    AggOp.COUNT: "Count",
}


def coerce_op(op: Union[AggOp, str, None]) -> AggOp:
    if op is None:
        return AggOp.SUM
    try:
        return AggOp(op)
    except ValueError:
        raise ValueError(f"Unknown aggregation op '{op}' (expected one of {[o.value for o in AggOp]})")


def round2(value: float) -> float:
    """Round half-up to 2 decimals."""
    return float(np.floor(value * 100 + 0.5) / 100)


def _as_frame(rows: Rows) -> pd.DataFrame:
    if isinstance(rows, Dataset):
        return rows.frame
    if isinstance(rows, pd.DataFrame):
        return rows
    return Dataset.from_records(rows).frame


def _column(frame: pd.DataFrame, name: str) -> pd.Series:
    if name in frame.columns:
        return frame[name]
    return pd.Series([None] * len(frame), index=frame.index, dtype=object)


def numeric_measure(frame: pd.DataFrame, measure: str) -> pd.Series:
    """Measure values as floats; missing and non-numeric cells count as 0."""
    return pd.to_numeric(_column(frame, measure), errors="coerce").fillna(0.0).astype(float)


def aggregate(
        rows: Rows,
        dimension: str,
        measure: Optional[str] = None,
        op: Union[AggOp, str, None] = AggOp.SUM,
        *,
        top_n: Optional[int] = DEFAULT_TOP_N,
) -> List[AggregateRow]:
    """
    Group rows by the string form of `dimension` and reduce `measure` per group.

    - Without a measure: the distinct group keys in first-appearance order,
      each with the UNIQUE_SENTINEL value (no truncation).
    - With a measure: sum (default), avg or count per group, rounded to 2
      decimals, ordered by value descending (ties keep first-appearance order)
      and truncated to the top `top_n` groups (None keeps every group).
    """
    frame = _as_frame(rows)
    if frame.empty:
        return []

    keys = _column(frame, dimension).map(display_key)

    if not measure:
        return [AggregateRow(key=str(k), value=UNIQUE_SENTINEL) for k in pd.unique(keys.to_numpy())]

    agg_op = coerce_op(op)
    values = numeric_measure(frame, measure)

    grouped = pd.DataFrame({"key": keys.to_numpy(), "value": values.to_numpy()}).groupby("key", sort=False)["value"]
    if agg_op is AggOp.COUNT:
        result = grouped.size().astype(float)
    elif agg_op is AggOp.AVG:
        result = grouped.sum() / grouped.size()
    else:
        result = grouped.sum()

    result = result.map(round2).sort_values(ascending=False, kind="mergesort")
    if top_n is not None:
        result = result.head(top_n)

    return [AggregateRow(key=str(k), value=float(v)) for k, v in result.items()]


def order_for_line(result: Iterable[AggregateRow]) -> List[AggregateRow]:
    """Re-sort an aggregated result ascending by key (point order for line charts)."""
    return sorted(result, key=lambda r: r.key)


def to_frame(result: Iterable[AggregateRow]) -> pd.DataFrame:
    """Aggregated rows as a two-column ('key', 'value') frame, order preserved."""
    result = list(result)
    return pd.DataFrame(
        {"key": [r.key for r in result], "value": [r.value for r in result]},
        columns=["key", "value"],
    )


def kpi_value(rows: Rows, measure: Optional[str], op: Union[AggOp, str, None] = AggOp.SUM) -> Optional[KpiResult]:
    """
    Single-number summary of a measure over all rows: total, mean per row, or
    row count. Returns None when no measure is configured.
    """
    if not measure:
        return None

    agg_op = coerce_op(op)
    frame = _as_frame(rows)
    n_rows = len(frame)
    total = float(numeric_measure(frame, measure).sum()) if n_rows else 0.0

    if agg_op is AggOp.AVG:
        value = total / (n_rows or 1)
    elif agg_op is AggOp.COUNT:
        value = float(n_rows)
    else:
        value = total
    return KpiResult(label=f"{KPI_LABELS[agg_op]} {measure}", value=value)
