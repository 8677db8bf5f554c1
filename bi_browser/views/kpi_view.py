from __future__ import annotations

from typing import Optional

import plotly.graph_objects as go

from bi_browser.core.aggregation import KpiResult, kpi_value
from bi_browser.core.base_view import BaseView
from bi_browser.core.selection import SelectionSnapshot
from bi_browser.views.palette import PRIMARY


class KpiView(BaseView):
    """
    Single headline number: total, average per row, or row count of the measure.
    """

    id = "kpi"
    label = "KPI"

    def compute_data(self, snapshot: SelectionSnapshot) -> Optional[KpiResult]:
        return kpi_value(self.filtered_rows(snapshot), self.config.measure, self.config.measure_op)

    def render_figure(self, data: Optional[KpiResult]) -> go.Figure:
        if data is None:
            return self.empty_figure("No measure configured")

        fig = go.Figure(
            go.Indicator(
                mode="number",
                value=data.value,
                title={"text": data.label},
                number={"valueformat": "~s", "font": {"color": PRIMARY}},
            )
        )
        fig.update_layout(margin=dict(l=10, r=10, t=30, b=10))
        return fig
