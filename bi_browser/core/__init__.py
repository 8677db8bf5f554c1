"""
Core domain layer: dataset abstraction, selection state, associative
evaluation, aggregation, view base class and the view registry
"""

from .dataset import Dataset, FieldMetadata
from .selection import SelectionSnapshot, SelectionStore
from .associative import AssociativeEvaluator, SelectionState, ValueStatus, classify_field, possible_rows
from .aggregation import AggregateRow, aggregate, kpi_value, order_for_line
from .base_view import BaseView
from .view_registry import ViewRegistry

__all__ = [
    "Dataset",
    "FieldMetadata",
    "SelectionSnapshot",
    "SelectionStore",
    "AssociativeEvaluator",
    "SelectionState",
    "ValueStatus",
    "classify_field",
    "possible_rows",
    "AggregateRow",
    "aggregate",
    "kpi_value",
    "order_for_line",
    "BaseView",
    "ViewRegistry",
]
