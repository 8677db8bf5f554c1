from __future__ import annotations

from typing import Dict, List, Optional, Tuple, Type

from .aggregation import DEFAULT_TOP_N
from .base_view import BaseView
from .dataset import Dataset
from .widget import Widget, WidgetConfig, WidgetType


class ViewRegistry:
    """
    Maps widget types to the BaseView subclass that renders them.

    The dashboard only ever deals in widget types; which class draws a "bar"
    widget is decided here. Classes (not instances) are stored, and a fresh
    view is built per render so views never hold on to a stale config.

    Invariants:
    - only BaseView subclasses can be registered
    - each view 'id' is registered once
    """

    def __init__(self):
        self._views: Dict[str, Type[BaseView]] = {}

    def __contains__(self, view_id: object) -> bool:
        return str(getattr(view_id, "value", view_id)) in self._views

    def register(self, view_cls: Type[BaseView]) -> None:
        """
        Raises:
            TypeError: if view_cls is not a BaseView subclass
            ValueError: if a view with the same 'id' is already registered
        """
        if not isinstance(view_cls, type) or not issubclass(view_cls, BaseView):
            raise TypeError(f"View '{getattr(view_cls, 'id', view_cls)}' must be a subclass of BaseView")

        if view_cls.id in self._views:
            raise ValueError(f"View '{view_cls.id}' already registered")

        self._views[view_cls.id] = view_cls

    def create(
            self,
            view_id: str | WidgetType,
            dataset: Dataset,
            config: Optional[WidgetConfig] = None,
            *,
            top_n: Optional[int] = DEFAULT_TOP_N,
    ) -> BaseView:
        """
        Build the view registered for a widget type.

        Raises:
            KeyError: if nothing is registered under view_id
        """
        key = str(getattr(view_id, "value", view_id))
        if key not in self._views:
            raise KeyError(f"View '{key}' not found")
        return self._views[key](dataset, config, top_n=top_n)

    def create_for_widget(self, widget: Widget, dataset: Dataset, *, top_n: Optional[int] = DEFAULT_TOP_N) -> BaseView:
        return self.create(widget.type, dataset, widget.config, top_n=top_n)

    def all_classes(self) -> List[Type[BaseView]]:
        return list(self._views.values())

    def palette(self) -> List[Tuple[str, str]]:
        """(id, label) of every registered view, in registration order, for the add-widget menu."""
        return [(cls.id, cls.label or cls.id) for cls in self._views.values()]
