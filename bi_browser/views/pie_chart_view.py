from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go

from bi_browser.core.aggregation import to_frame
from bi_browser.core.base_view import BaseView
from bi_browser.core.selection import SelectionSnapshot
from bi_browser.views.palette import SERIES_COLORS


class PieChartView(BaseView):
    id = "pie"
    label = "Pie chart"

    requires_measure = True

    def compute_data(self, snapshot: SelectionSnapshot) -> pd.DataFrame:
        return to_frame(self.aggregated(snapshot))

    def render_figure(self, data: pd.DataFrame) -> go.Figure:
        if data is None or data.empty:
            return self.empty_figure("No data for the current selections")

        colors = [SERIES_COLORS[i % len(SERIES_COLORS)] for i in range(len(data))]
        fig = go.Figure(
            go.Pie(
                labels=data["key"],
                values=data["value"],
                hole=0.4,
                marker=dict(colors=colors),
                sort=False,
            )
        )
        fig.update_layout(
            margin=dict(l=10, r=10, t=10, b=10),
            legend=dict(orientation="h"),
        )
        return fig
