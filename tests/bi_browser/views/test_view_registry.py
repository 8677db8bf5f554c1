import pytest

from bi_browser.core.base_view import BaseView
from bi_browser.core.dataset import Dataset
from bi_browser.core.view_registry import ViewRegistry
from bi_browser.core.widget import Widget, WidgetConfig, WidgetType
from bi_browser.views import ALL_VIEWS, BarChartView, FilterPaneView, build_view_registry


def _make_dataset() -> Dataset:
    return Dataset.from_records([{"Region": "North", "Sales": 1}])


def test_registry_covers_every_widget_type():
    registry = build_view_registry()
    assert {cls.id for cls in registry.all_classes()} == {t.value for t in WidgetType}
    assert len(registry.all_classes()) == len(ALL_VIEWS)


def test_register_rejects_non_views_and_duplicates():
    registry = ViewRegistry()
    with pytest.raises(TypeError):
        registry.register(object)

    registry.register(BarChartView)
    with pytest.raises(ValueError):
        registry.register(BarChartView)


def test_create_by_id_and_enum():
    registry = build_view_registry()
    ds = _make_dataset()

    view = registry.create("bar", ds, WidgetConfig(dimension="Region", measure="Sales"), top_n=3)
    assert isinstance(view, BarChartView)
    assert view.top_n == 3

    assert isinstance(registry.create(WidgetType.FILTER, ds), FilterPaneView)

    with pytest.raises(KeyError):
        registry.create("scatter", ds)


def test_create_for_widget_passes_config():
    registry = build_view_registry()
    widget = Widget.new(WidgetType.BAR, config=WidgetConfig(dimension="Region", measure="Sales"))

    view = registry.create_for_widget(widget, _make_dataset())
    assert isinstance(view, BaseView)
    assert view.config.dimension == "Region"


def test_palette_and_membership():
    registry = build_view_registry()
    palette = dict(registry.palette())
    assert palette["bar"] == "Bar chart"
    assert palette["filter"] == "Filter pane"

    assert "kpi" in registry
    assert WidgetType.TEXT in registry
    assert "scatter" not in registry
