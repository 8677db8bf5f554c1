from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go

from bi_browser.core.associative import classify_field
from bi_browser.core.base_view import BaseView
from bi_browser.core.selection import SelectionSnapshot
from bi_browser.views.palette import STATE_FILL, STATE_FONT


class FilterPaneView(BaseView):
    """
    List of every value of the dimension field, colour-coded by its
    associative state (selected / possible / excluded).
    """

    id = "filter"
    label = "Filter pane"

    def compute_data(self, snapshot: SelectionSnapshot) -> pd.DataFrame:
        statuses = classify_field(self.config.dimension, self.dataset, snapshot)
        return pd.DataFrame(
            {
                "value": [s.value for s in statuses],
                "state": [s.state for s in statuses],
            },
            columns=["value", "state"],
        )

    def render_figure(self, data: pd.DataFrame) -> go.Figure:
        if data is None or data.empty:
            return self.empty_figure(f"No values for '{self.config.dimension}'")

        fig = go.Figure(
            go.Table(
                header=dict(values=[self.config.dimension], align="left"),
                cells=dict(
                    values=[[str(v) for v in data["value"]]],
                    fill_color=[[STATE_FILL[s] for s in data["state"]]],
                    font=dict(color=[[STATE_FONT[s] for s in data["state"]]]),
                    align="left",
                ),
            )
        )
        fig.update_layout(margin=dict(l=0, r=0, t=0, b=0))
        return fig
