from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional

import pandas as pd
import plotly.graph_objs as go

from .aggregation import DEFAULT_TOP_N, AggregateRow, aggregate
from .associative import possible_rows
from .dataset import Dataset
from .selection import SelectionSnapshot
from .widget import WidgetConfig


class BaseView(ABC):
    """
    Abstract base class for every widget view.

    A view is bound to one dataset and one widget config, and turns a
    SelectionSnapshot into a plotly figure in two steps:
    - 'compute_data' reduces the rows compatible with the snapshot
    - 'render_figure' draws whatever compute_data returned

    Subclasses set 'id' (the widget type they render) and 'label' (palette
    name). Chart views that are meaningless without a measure set
    'requires_measure'.
    """

    id: str = None
    label: str = None
    requires_measure: bool = False

    def __init__(self, dataset: Dataset, config: Optional[WidgetConfig] = None, *, top_n: Optional[int] = DEFAULT_TOP_N):
        self.dataset = dataset
        self.config = config or WidgetConfig()
        self.top_n = top_n

    @abstractmethod
    def compute_data(self, snapshot: SelectionSnapshot) -> Any:
        """
        :param snapshot: the current selections across all fields
        :return: the reduced data the figure is drawn from
        """
        raise NotImplementedError()

    @abstractmethod
    def render_figure(self, data: Any) -> go.Figure:
        """
        :param data: the value returned by compute_data()
        :return: the plotly figure for this widget
        """
        raise NotImplementedError()

    def render(self, snapshot: SelectionSnapshot) -> go.Figure:
        return self.render_figure(self.compute_data(snapshot))

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------
    def filtered_rows(self, snapshot: SelectionSnapshot) -> pd.DataFrame:
        """
        Rows compatible with every active selection. Views go through this
        rather than masking the dataset themselves.
        """
        return possible_rows(self.dataset, snapshot)

    def aggregated(self, snapshot: SelectionSnapshot) -> List[AggregateRow]:
        """
        The widget's dimension/measure/op applied to the filtered rows.
        Empty when the view requires a measure and none is configured.
        """
        if self.requires_measure and not self.config.measure:
            return []
        return aggregate(
            self.filtered_rows(snapshot),
            self.config.dimension,
            self.config.measure,
            self.config.measure_op,
            top_n=self.top_n,
        )

    @staticmethod
    def empty_figure(message: str) -> go.Figure:
        """
        Standardised 'no data' figure used by all views.
        """
        fig = go.Figure()
        fig.update_layout(
            title=message,
            xaxis={"visible": False},
            yaxis={"visible": False},
        )
        return fig
