from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go

from bi_browser.core.aggregation import to_frame
from bi_browser.core.base_view import BaseView
from bi_browser.core.selection import SelectionSnapshot


class TableView(BaseView):
    """
    Two-column table: aggregated measure per dimension value, or the plain
    list of distinct dimension values when no measure is configured.
    """

    id = "table"
    label = "Table"

    def compute_data(self, snapshot: SelectionSnapshot) -> pd.DataFrame:
        return to_frame(self.aggregated(snapshot))

    def render_figure(self, data: pd.DataFrame) -> go.Figure:
        if data is None or data.empty:
            return self.empty_figure("No data for the current selections")

        values = [f"{v:,}" if isinstance(v, float) else v for v in data["value"]]
        fig = go.Figure(
            go.Table(
                header=dict(
                    values=[self.config.dimension, self.config.measure or "-"],
                    fill_color="#f3f4f6",
                    align=["left", "right"],
                ),
                cells=dict(
                    values=[data["key"], values],
                    align=["left", "right"],
                ),
            )
        )
        fig.update_layout(margin=dict(l=0, r=0, t=0, b=0))
        return fig
