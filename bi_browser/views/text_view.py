from __future__ import annotations

from typing import Optional

import plotly.graph_objects as go

from bi_browser.core.base_view import BaseView
from bi_browser.core.selection import SelectionSnapshot

PLACEHOLDER = "Double-click to edit"


class TextView(BaseView):
    id = "text"
    label = "Text"

    def compute_data(self, snapshot: SelectionSnapshot) -> Optional[str]:
        return self.config.text or None

    def render_figure(self, data: Optional[str]) -> go.Figure:
        fig = self.empty_figure("")
        fig.add_annotation(
            text=(data or PLACEHOLDER).replace("\n", "<br>"),
            showarrow=False,
            xref="paper",
            yref="paper",
            x=0.5,
            y=0.5,
            font=dict(color="#374151" if data else "#9ca3af"),
        )
        return fig
