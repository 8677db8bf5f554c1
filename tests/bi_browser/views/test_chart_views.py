import plotly.graph_objs as go
import pytest

from bi_browser.core.dataset import Dataset
from bi_browser.core.selection import EMPTY_SNAPSHOT, SelectionSnapshot
from bi_browser.core.widget import WidgetConfig
from bi_browser.views import BarChartView, LineChartView, PieChartView, TableView


def _make_dataset() -> Dataset:
    return Dataset.from_records(
        [
            {"Region": "North", "Month": "2024-02-01", "Sales": 100},
            {"Region": "South", "Month": "2024-01-01", "Sales": 200},
            {"Region": "North", "Month": "2024-03-01", "Sales": 150},
        ],
        name="sales",
    )


def test_bar_chart_compute_and_render():
    ds = _make_dataset()
    view = BarChartView(ds, WidgetConfig(dimension="Region", measure="Sales", measure_op="sum"))

    data = view.compute_data(EMPTY_SNAPSHOT)
    assert list(data.columns) == ["key", "value"]
    assert data["key"].tolist() == ["North", "South"]
    assert data["value"].tolist() == [250.0, 200.0]

    fig = view.render_figure(data)
    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 1
    assert fig.data[0].type == "bar"
    assert list(fig.data[0].x) == ["North", "South"]


def test_bar_chart_respects_selection():
    ds = _make_dataset()
    view = BarChartView(ds, WidgetConfig(dimension="Region", measure="Sales"))

    data = view.compute_data(SelectionSnapshot({"Region": ["South"]}))
    assert data["key"].tolist() == ["South"]


def test_bar_chart_top_n():
    ds = _make_dataset()
    view = BarChartView(ds, WidgetConfig(dimension="Region", measure="Sales"), top_n=1)
    assert view.compute_data(EMPTY_SNAPSHOT)["key"].tolist() == ["North"]


@pytest.mark.parametrize("view_cls", [BarChartView, LineChartView, PieChartView])
def test_chart_without_measure_renders_empty_figure(view_cls):
    view = view_cls(_make_dataset(), WidgetConfig(dimension="Region"))
    data = view.compute_data(EMPTY_SNAPSHOT)
    assert data.empty

    fig = view.render_figure(data)
    assert len(fig.data) == 0
    assert fig.layout.title.text == "No data for the current selections"


def test_line_chart_orders_points_by_key():
    view = LineChartView(_make_dataset(), WidgetConfig(dimension="Month", measure="Sales"))
    data = view.compute_data(EMPTY_SNAPSHOT)
    assert data["key"].tolist() == ["2024-01-01", "2024-02-01", "2024-03-01"]

    fig = view.render_figure(data)
    assert fig.data[0].mode == "lines+markers"


def test_pie_chart_render():
    view = PieChartView(_make_dataset(), WidgetConfig(dimension="Region", measure="Sales", measure_op="count"))
    data = view.compute_data(EMPTY_SNAPSHOT)
    assert data["value"].tolist() == [2.0, 1.0]

    fig = view.render_figure(data)
    assert fig.data[0].type == "pie"


def test_table_lists_values_without_measure():
    view = TableView(_make_dataset(), WidgetConfig(dimension="Region"))
    data = view.compute_data(EMPTY_SNAPSHOT)
    assert data["key"].tolist() == ["North", "South"]
    assert data["value"].tolist() == ["-", "-"]

    fig = view.render_figure(data)
    assert fig.data[0].type == "table"
