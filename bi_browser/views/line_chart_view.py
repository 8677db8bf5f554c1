from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go

from bi_browser.core.aggregation import order_for_line, to_frame
from bi_browser.core.base_view import BaseView
from bi_browser.core.selection import SelectionSnapshot
from bi_browser.views.palette import PRIMARY


class LineChartView(BaseView):
    """
    Same aggregation as the bar chart, but points are ordered by key
    (chronological for ISO dates) instead of by value.
    """

    id = "line"
    label = "Line chart"

    requires_measure = True

    def compute_data(self, snapshot: SelectionSnapshot) -> pd.DataFrame:
        return to_frame(order_for_line(self.aggregated(snapshot)))

    def render_figure(self, data: pd.DataFrame) -> go.Figure:
        if data is None or data.empty:
            return self.empty_figure("No data for the current selections")

        fig = go.Figure(
            go.Scatter(
                x=data["key"],
                y=data["value"],
                mode="lines+markers",
                line=dict(color=PRIMARY, width=2, shape="spline"),
                marker=dict(size=6),
                name=self.config.measure,
            )
        )
        fig.update_layout(
            margin=dict(l=40, r=10, t=10, b=40),
            xaxis_title=self.config.dimension,
            yaxis_title=self.config.measure,
            xaxis={"type": "category"},
        )
        return fig
