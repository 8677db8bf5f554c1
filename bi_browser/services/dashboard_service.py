from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from bi_browser.core.widget import (
    DEFAULT_TITLE,
    FIRST_SHEET_ID,
    DashboardState,
    Sheet,
    Widget,
    WidgetConfig,
    WidgetType,
    default_sheet,
    generate_sheet_id,
)
from bi_browser.services.storage import StorageBackend
from bi_browser.validation.dashboard_validation import validate_dashboard_dict

logger = logging.getLogger(__name__)

KEY_SHEETS = "sheets"
KEY_ACTIVE_SHEET = "activeSheet"
KEY_TITLE = "title"
# Single-sheet layouts written before sheets existed
KEY_LEGACY_WIDGETS = "widgets"


class DashboardService:
    """
    Manages the dashboard layout (sheets, widgets, title) and its persistence.
    Ensures that the layout is backed up to storage on every modification.
    """

    def __init__(
        self,
        storage: StorageBackend,
        prefix: str = "dashboard",
        default_title: str = DEFAULT_TITLE,
    ):
        self.storage = storage
        self.default_title = default_title
        self.prefix = prefix.strip("/")

    # ------------------------------------------------------------------
    # Storage helpers
    # ------------------------------------------------------------------
    def _path(self, key: str) -> str:
        return f"{self.prefix}/{key}.json" if self.prefix else f"{key}.json"

    def _read(self, key: str) -> Any:
        path = self._path(key)
        if not self.storage.exists(path):
            return None
        try:
            return json.loads(self.storage.read_bytes(path))
        except Exception:
            logger.exception("Failed to read dashboard key %s", key)
            return None

    def _write(self, key: str, value: Any) -> None:
        try:
            self.storage.write_bytes(self._path(key), json.dumps(value, indent=2).encode("utf-8"))
        except Exception:
            logger.exception("Failed to persist dashboard key %s", key)

    def _persist(self, state: DashboardState) -> None:
        """Internal helper to save every dashboard key."""
        self._write(KEY_SHEETS, [s.to_dict() for s in state.sheets])
        self._write(KEY_ACTIVE_SHEET, state.active_sheet_id)
        self._write(KEY_TITLE, state.title)

    def persist(self, state: DashboardState) -> None:
        """Public method to force a save (e.g. after import)."""
        self._persist(state)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def _load_sheets(self) -> List[Sheet]:
        raw_sheets = self._read(KEY_SHEETS)
        if isinstance(raw_sheets, list) and raw_sheets:
            try:
                return [Sheet.from_dict(s) for s in raw_sheets]
            except Exception:
                logger.exception("Stored sheets are invalid; starting from a blank sheet")
                return [default_sheet()]

        legacy = self._read(KEY_LEGACY_WIDGETS)
        if isinstance(legacy, list):
            try:
                widgets = [Widget.from_dict(w) for w in legacy]
            except Exception:
                logger.exception("Legacy widgets are invalid; starting from a blank sheet")
                return [default_sheet()]
            logger.info("Migrated legacy widget layout", extra={"n_widgets": len(widgets)})
            return [default_sheet(widgets)]

        return [default_sheet()]

    def load(self) -> DashboardState:
        """
        Load the dashboard from storage, falling back to a single empty sheet.
        An active sheet id that matches no sheet resets to the first sheet.
        """
        sheets = self._load_sheets()

        active = self._read(KEY_ACTIVE_SHEET)
        active = active if isinstance(active, str) and active else FIRST_SHEET_ID

        title = self._read(KEY_TITLE)
        title = title if isinstance(title, str) and title else self.default_title

        state = DashboardState(sheets=sheets, active_sheet_id=active, title=title)
        if state.sheet(active) is None:
            state.active_sheet_id = sheets[0].id
        return state

    def import_state(self, raw: Dict[str, Any]) -> DashboardState:
        """
        Replace the stored dashboard with an imported one.

        :raises ValidationError: if the JSON does not describe a dashboard
        """
        validate_dashboard_dict(raw)
        sheets = [Sheet.from_dict(s) for s in raw["sheets"]]
        state = DashboardState(
            sheets=sheets,
            active_sheet_id=str(raw.get(KEY_ACTIVE_SHEET) or sheets[0].id),
            title=raw.get(KEY_TITLE) or self.default_title,
        )
        if state.sheet(state.active_sheet_id) is None:
            state.active_sheet_id = sheets[0].id
        self._persist(state)
        logger.info("Imported dashboard", extra={"n_sheets": len(sheets)})
        return state

    # ------------------------------------------------------------------
    # Dashboard-level edits
    # ------------------------------------------------------------------
    def set_title(self, state: DashboardState, title: str) -> DashboardState:
        state.title = title
        self._persist(state)
        return state

    def set_active_sheet(self, state: DashboardState, sheet_id: str) -> DashboardState:
        if state.sheet(sheet_id) is None:
            raise KeyError(f"Sheet '{sheet_id}' not found")
        state.active_sheet_id = sheet_id
        self._persist(state)
        return state

    # ------------------------------------------------------------------
    # Sheet edits
    # ------------------------------------------------------------------
    def add_sheet(self, state: DashboardState) -> Tuple[DashboardState, Sheet]:
        """Append a new empty sheet and make it active."""
        name = f"Sheet {len(state.sheets) + 1}"
        sheet = Sheet(id=generate_sheet_id(), name=name, title=name)
        state.sheets.append(sheet)
        state.active_sheet_id = sheet.id
        self._persist(state)
        return state, sheet

    def remove_sheet(self, state: DashboardState, sheet_id: str) -> DashboardState:
        """
        Remove a sheet. The last remaining sheet is never removed; if the
        active sheet goes, the first remaining sheet becomes active.
        """
        if len(state.sheets) <= 1:
            logger.info("Refusing to remove the last sheet", extra={"sheet_id": sheet_id})
            return state

        remaining = [s for s in state.sheets if s.id != sheet_id]
        if len(remaining) == len(state.sheets):
            return state

        state.sheets = remaining
        if state.active_sheet_id == sheet_id:
            state.active_sheet_id = remaining[0].id
        self._persist(state)
        return state

    def _require_sheet(self, state: DashboardState, sheet_id: Optional[str]) -> Sheet:
        if sheet_id is None:
            return state.active_sheet
        sheet = state.sheet(sheet_id)
        if sheet is None:
            raise KeyError(f"Sheet '{sheet_id}' not found")
        return sheet

    def rename_sheet(self, state: DashboardState, sheet_id: str, name: str) -> DashboardState:
        self._require_sheet(state, sheet_id).name = name
        self._persist(state)
        return state

    def set_sheet_title(self, state: DashboardState, sheet_id: str, title: str) -> DashboardState:
        self._require_sheet(state, sheet_id).title = title
        self._persist(state)
        return state

    # ------------------------------------------------------------------
    # Widget edits (active sheet unless a sheet id is given)
    # ------------------------------------------------------------------
    def add_widget(
            self,
            state: DashboardState,
            widget_type: WidgetType | str,
            *,
            sheet_id: Optional[str] = None,
            config: Optional[WidgetConfig] = None,
    ) -> Tuple[DashboardState, Widget]:
        sheet = self._require_sheet(state, sheet_id)
        widget = Widget.new(widget_type, config=config)
        sheet.widgets.append(widget)
        self._persist(state)
        return state, widget

    def update_widget(self, state: DashboardState, widget: Widget, *, sheet_id: Optional[str] = None) -> DashboardState:
        """Replace the widget with the same id."""
        sheet = self._require_sheet(state, sheet_id)
        idx = sheet.find_widget(widget.id)
        if idx is None:
            raise KeyError(f"Widget '{widget.id}' not found on sheet '{sheet.id}'")
        sheet.widgets[idx] = widget
        self._persist(state)
        return state

    def remove_widget(self, state: DashboardState, widget_id: str, *, sheet_id: Optional[str] = None) -> DashboardState:
        sheet = self._require_sheet(state, sheet_id)
        initial_len = len(sheet.widgets)
        sheet.widgets = [w for w in sheet.widgets if w.id != widget_id]

        if len(sheet.widgets) != initial_len:
            self._persist(state)

        return state
