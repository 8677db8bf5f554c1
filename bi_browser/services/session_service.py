from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import plotly.graph_objs as go

from bi_browser.core.aggregation import DEFAULT_TOP_N
from bi_browser.core.associative import AssociativeEvaluator, ValueStatus
from bi_browser.core.dataset import Dataset
from bi_browser.core.selection import SelectionSnapshot, SelectionStore
from bi_browser.core.view_registry import ViewRegistry
from bi_browser.core.widget import Sheet, WidgetType
from bi_browser.validation.selection_validation import sanitise_snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionChip:
    """One entry of the current-selections bar."""
    field: str
    label: str
    n_selected: int


class AnalysisSession:
    """
    One user's view of one dataset: the selection store plus everything that is
    recomputed from (dataset, snapshot) after each selection change.
    """

    def __init__(
            self,
            dataset: Dataset,
            registry: ViewRegistry,
            store: Optional[SelectionStore] = None,
            *,
            top_n: Optional[int] = DEFAULT_TOP_N,
    ):
        self.dataset = dataset
        self.registry = registry
        self.store = store or SelectionStore()
        self.top_n = top_n

        restored = self.store.snapshot
        if restored:
            cleaned = sanitise_snapshot(restored, dataset)
            if cleaned is not restored:
                self.store.restore(cleaned)

    @property
    def snapshot(self) -> SelectionSnapshot:
        return self.store.snapshot

    # ------------------------------------------------------------------
    # Selection intents
    # ------------------------------------------------------------------
    def toggle(self, field: str, value: Any) -> SelectionSnapshot:
        return self.store.toggle(field, value)

    def clear_field(self, field: str) -> SelectionSnapshot:
        return self.store.clear_field(field)

    def clear_all(self) -> SelectionSnapshot:
        return self.store.clear_all()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    def evaluator(self) -> AssociativeEvaluator:
        return AssociativeEvaluator(self.dataset, self.store.snapshot)

    def classify(self, fields: Optional[Iterable[str]] = None) -> Dict[str, List[ValueStatus]]:
        return self.evaluator().classify_all(fields)

    def selection_summary(self) -> List[SelectionChip]:
        """
        Entries for the current-selections bar, first-selected-first. A single
        selected value is shown as-is; several as "N of M" (M = distinct values
        of the field).
        """
        snapshot = self.store.snapshot
        chips: List[SelectionChip] = []
        for field in snapshot.active_fields():
            values = snapshot.selected(field)
            if len(values) == 1:
                label = str(next(iter(values)))
            else:
                label = f"{len(values)} of {len(self.dataset.distinct_values(field))}"
            chips.append(SelectionChip(field=field, label=label, n_selected=len(values)))
        return chips

    def render_sheet(self, sheet: Sheet) -> Dict[str, go.Figure]:
        """
        Render every widget of a sheet against the current snapshot, keyed by widget id.
        Filter panes sharing the same other-field constraints reuse one cached row mask.
        """
        snapshot = self.store.snapshot
        figures: Dict[str, go.Figure] = {}

        for widget in sheet.widgets:
            view = self.registry.create_for_widget(widget, self.dataset, top_n=self.top_n)
            figures[widget.id] = view.render(snapshot)

        logger.info(
            "Rendered sheet",
            extra={
                "sheet_id": sheet.id,
                "n_widgets": len(figures),
                "n_filters": sum(1 for w in sheet.widgets if w.type is WidgetType.FILTER),
                "active_fields": snapshot.active_fields(),
            },
        )
        return figures
