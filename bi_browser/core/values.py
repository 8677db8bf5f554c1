from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")

# Display key used for rows that do not carry the grouped field at all
MISSING_KEY = ""


class FieldType(str, Enum):
    """Declared type of a dataset field, as supplied with the data."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"


class ValueKind(Enum):
    """
    Tag of a single cell value. The enum value is the rank used by the
    canonical comparator: numbers sort before dates, dates before strings.
    """

    NUMBER = 0
    DATE = 1
    STRING = 2


def is_missing(raw: Any) -> bool:
    """True for None and NaN-like scalars (a row that does not carry the field)."""
    if raw is None:
        return True
    try:
        return bool(pd.isna(raw))
    except (TypeError, ValueError):
        return False


def is_number(raw: Any) -> bool:
    if isinstance(raw, (bool, np.bool_)):
        return False
    return isinstance(raw, (int, float, np.integer, np.floating))


def _naive_utc(dt: datetime) -> datetime:
    # Offset-aware values compare as their UTC instant
    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_date(raw: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 date (``YYYY-MM-DD`` with optional time part and offset).
    Returns None if the value is not a date-like string. The result is always
    naive: values with an offset are converted to UTC first.
    """
    if isinstance(raw, datetime):
        return _naive_utc(raw)
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day)
    if not isinstance(raw, str) or not ISO_DATE_RE.match(raw):
        return None
    try:
        return _naive_utc(datetime.fromisoformat(raw))
    except ValueError:
        pass
    try:
        d = date.fromisoformat(raw[:10])
    except ValueError:
        return None
    return datetime(d.year, d.month, d.day)


@dataclass(frozen=True)
class CellValue:
    """
    Tagged scalar held by a dataset cell: a string, a number or a date.

    The raw scalar is kept untouched (selections and classifications speak in
    raw values); the tag only drives ordering and display.
    """

    kind: ValueKind
    raw: Any

    @classmethod
    def from_raw(cls, raw: Any, field_type: Optional[FieldType] = None) -> Optional[CellValue]:
        """
        Tag a raw scalar. Returns None for missing values.

        Strings are tagged DATE when they parse as ISO dates and the field is
        declared as a date field (or has no declared type).
        """
        if is_missing(raw):
            return None
        if is_number(raw):
            return cls(ValueKind.NUMBER, raw)
        if isinstance(raw, (datetime, date)):
            return cls(ValueKind.DATE, raw)
        if isinstance(raw, str) and field_type in (None, FieldType.DATE):
            if parse_iso_date(raw) is not None:
                return cls(ValueKind.DATE, raw)
        return cls(ValueKind.STRING, raw)

    def sort_key(self) -> Tuple[int, Any]:
        """Canonical ordering key: kind rank first, then natural order within the kind."""
        if self.kind is ValueKind.NUMBER:
            # ints keep full precision (no float round-trip)
            if isinstance(self.raw, (int, np.integer)):
                return self.kind.value, int(self.raw)
            return self.kind.value, float(self.raw)
        if self.kind is ValueKind.DATE:
            return self.kind.value, parse_iso_date(self.raw)
        return self.kind.value, str(self.raw)

    def as_key(self) -> str:
        """String form used as a group key (integral numbers print without '.0')."""
        if self.kind is ValueKind.NUMBER:
            if isinstance(self.raw, (int, np.integer)):
                return str(int(self.raw))
            value = float(self.raw)
            if value.is_integer():
                return str(int(value))
            return str(value)
        if self.kind is ValueKind.DATE and not isinstance(self.raw, str):
            return self.raw.isoformat()
        return str(self.raw)


def display_key(raw: Any, field_type: Optional[FieldType] = None) -> str:
    cell = CellValue.from_raw(raw, field_type)
    if cell is None:
        return MISSING_KEY
    return cell.as_key()


def sort_values(values: Iterable[Any], field_type: Optional[FieldType] = None) -> List[Any]:
    """Sort raw values with the canonical comparator, dropping missing ones."""
    cells = [CellValue.from_raw(v, field_type) for v in values]
    cells = [c for c in cells if c is not None]
    cells.sort(key=lambda c: c.sort_key())
    return [c.raw for c in cells]


def infer_field_type(values: Iterable[Any]) -> FieldType:
    """
    Infer a field's type from its present values:
    number if all numeric, date if all ISO date strings, string otherwise.
    An all-missing field is a string field.
    """
    present = [v for v in values if not is_missing(v)]
    if not present:
        return FieldType.STRING
    if all(is_number(v) for v in present):
        return FieldType.NUMBER
    if all(parse_iso_date(v) is not None for v in present):
        return FieldType.DATE
    return FieldType.STRING
