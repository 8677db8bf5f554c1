from __future__ import annotations

import time
import uuid
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class WidgetType(str, Enum):
    KPI = "kpi"
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    TABLE = "table"
    FILTER = "filter"
    TEXT = "text"


# Default grid span (w, h) for a freshly dropped widget
DEFAULT_SIZES: Dict[WidgetType, Tuple[int, int]] = {
    WidgetType.KPI: (2, 2),
    WidgetType.FILTER: (2, 6),
    WidgetType.TEXT: (3, 2),
    WidgetType.BAR: (6, 5),
    WidgetType.LINE: (6, 5),
    WidgetType.PIE: (6, 5),
    WidgetType.TABLE: (6, 5),
}
FALLBACK_SIZE = (4, 4)


def generate_widget_id() -> str:
    return uuid.uuid4().hex[:9]


def generate_sheet_id() -> str:
    return f"sheet-{int(time.time() * 1000)}-{uuid.uuid4().hex[:4]}"


@dataclass(frozen=True)
class WidgetConfig:
    """
    Data binding of a widget.

    - dimension: field used for grouping (or the field a filter pane lists)
    - measure: field aggregated numerically, if any
    - measure_op: "sum" | "avg" | "count"
    - text: body of a text widget
    """
    dimension: str = ""
    measure: Optional[str] = None
    measure_op: Optional[str] = None
    text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"dimension": self.dimension}
        if self.measure is not None:
            out["measure"] = self.measure
        if self.measure_op is not None:
            out["measureOp"] = self.measure_op
        if self.text is not None:
            out["text"] = self.text
        return out

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> WidgetConfig:
        data = data or {}
        return cls(
            dimension=str(data.get("dimension", "")),
            measure=data.get("measure") or None,
            measure_op=data.get("measureOp", data.get("measure_op")),
            text=data.get("text"),
        )


@dataclass(frozen=True)
class Widget:
    id: str
    type: WidgetType
    title: str
    w: int
    h: int
    x: Optional[int] = None
    y: Optional[int] = None
    content: Optional[str] = None
    comment: Optional[str] = None
    config: WidgetConfig = field(default_factory=WidgetConfig)

    @classmethod
    def new(cls, widget_type: WidgetType | str, *, config: Optional[WidgetConfig] = None) -> Widget:
        """A widget with the default size and title for its type."""
        widget_type = WidgetType(widget_type)
        w, h = DEFAULT_SIZES.get(widget_type, FALLBACK_SIZE)
        if widget_type is WidgetType.KPI:
            title = "KPI"
        elif widget_type is WidgetType.TEXT:
            title = ""
        else:
            title = "Chart title"
        return cls(
            id=generate_widget_id(),
            type=widget_type,
            title=title,
            w=w,
            h=h,
            config=config or WidgetConfig(dimension="Dimension", measure="Measure"),
        )

    def with_changes(self, **changes: Any) -> Widget:
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        out = {k: v for k, v in asdict(self).items() if v is not None and k != "config"}
        out["type"] = self.type.value
        out["config"] = self.config.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Widget:
        return cls(
            id=str(data["id"]),
            type=WidgetType(data["type"]),
            title=str(data.get("title", "")),
            w=int(data.get("w", FALLBACK_SIZE[0])),
            h=int(data.get("h", FALLBACK_SIZE[1])),
            x=data.get("x"),
            y=data.get("y"),
            content=data.get("content"),
            comment=data.get("comment"),
            config=WidgetConfig.from_dict(data.get("config")),
        )


@dataclass
class Sheet:
    """
    One page of the dashboard.

    - name: label of the sheet tab
    - title: heading displayed on the page (defaults to the name)
    """
    id: str
    name: str
    title: str
    widgets: List[Widget] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "title": self.title,
            "widgets": [w.to_dict() for w in self.widgets],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Sheet:
        name = str(data.get("name", data["id"]))
        return cls(
            id=str(data["id"]),
            name=name,
            title=data.get("title") or name,
            widgets=[Widget.from_dict(w) for w in data.get("widgets", [])],
        )

    def find_widget(self, widget_id: str) -> Optional[int]:
        return next((i for i, w in enumerate(self.widgets) if w.id == widget_id), None)


DEFAULT_TITLE = "My Dashboard"
FIRST_SHEET_ID = "sheet-1"


def default_sheet(widgets: Optional[List[Widget]] = None) -> Sheet:
    return Sheet(id=FIRST_SHEET_ID, name="Sheet 1", title="Sheet 1", widgets=list(widgets or []))


@dataclass
class DashboardState:
    """
    Persisted dashboard layout: the sheets, which one is shown, and the app title.
    """
    sheets: List[Sheet] = field(default_factory=lambda: [default_sheet()])
    active_sheet_id: str = FIRST_SHEET_ID
    title: str = DEFAULT_TITLE

    def sheet(self, sheet_id: str) -> Optional[Sheet]:
        return next((s for s in self.sheets if s.id == sheet_id), None)

    @property
    def active_sheet(self) -> Sheet:
        """The active sheet, or the first sheet if the active id points nowhere."""
        return self.sheet(self.active_sheet_id) or self.sheets[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sheets": [s.to_dict() for s in self.sheets],
            "activeSheet": self.active_sheet_id,
            "title": self.title,
        }
