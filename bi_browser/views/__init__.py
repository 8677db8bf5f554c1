from .bar_chart_view import BarChartView
from .line_chart_view import LineChartView
from .pie_chart_view import PieChartView
from .kpi_view import KpiView
from .table_view import TableView
from .filter_pane_view import FilterPaneView
from .text_view import TextView

from bi_browser.core.view_registry import ViewRegistry

ALL_VIEWS = [BarChartView, LineChartView, PieChartView, KpiView, TableView, FilterPaneView, TextView]


def build_view_registry() -> ViewRegistry:
    registry = ViewRegistry()
    for view_cls in ALL_VIEWS:
        registry.register(view_cls)
    return registry


__all__ = [
    "BarChartView",
    "LineChartView",
    "PieChartView",
    "KpiView",
    "TableView",
    "FilterPaneView",
    "TextView",
    "ALL_VIEWS",
    "build_view_registry",
]
