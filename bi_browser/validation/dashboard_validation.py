from __future__ import annotations

from typing import Any

from bi_browser.core.widget import WidgetType
from bi_browser.validation.errors import ValidationIssue, ValidationError

_WIDGET_TYPES = {t.value for t in WidgetType}


def validate_dashboard_dict(obj: Any) -> None:
    """
    Validate a raw dashboard JSON dict BEFORE building a DashboardState from it.
    This prevents half-valid imports from poisoning app state.

    Shape errors at the top level fail immediately; everything below is
    collected so the caller sees every issue in one ValidationError.
    """
    issues: list[ValidationIssue] = []

    if not isinstance(obj, dict):
        raise ValidationError([ValidationIssue("DASHBOARD_TYPE", "Dashboard must be a JSON object.")])

    sheets = obj.get("sheets")
    if not isinstance(sheets, list):
        raise ValidationError([ValidationIssue("DASHBOARD_SHEETS_TYPE", "sheets must be a list.", "sheets")])
    if not sheets:
        issues.append(ValidationIssue("DASHBOARD_NO_SHEETS", "A dashboard needs at least one sheet.", "sheets"))

    title = obj.get("title")
    if title is not None and not isinstance(title, str):
        issues.append(ValidationIssue("DASHBOARD_TITLE", "title must be a string.", "title"))

    seen_sheet_ids: set[str] = set()
    for i, sheet in enumerate(sheets):
        at = f"sheets[{i}]"
        if not isinstance(sheet, dict):
            issues.append(ValidationIssue("SHEET_TYPE", "Sheet must be an object.", at))
            continue

        sheet_id = sheet.get("id")
        if not sheet_id:
            issues.append(ValidationIssue("SHEET_ID", "Sheet id missing.", f"{at}.id"))
        elif sheet_id in seen_sheet_ids:
            issues.append(ValidationIssue("SHEET_ID_DUPLICATE", f"Sheet id '{sheet_id}' is used twice.", f"{at}.id"))
        else:
            seen_sheet_ids.add(sheet_id)

        widgets = sheet.get("widgets", [])
        if not isinstance(widgets, list):
            issues.append(ValidationIssue("SHEET_WIDGETS_TYPE", "widgets must be a list.", f"{at}.widgets"))
            continue

        for j, w in enumerate(widgets):
            where = f"{at}.widgets[{j}]"
            if not isinstance(w, dict):
                issues.append(ValidationIssue("WIDGET_TYPE", "Widget must be an object.", where))
                continue
            if not w.get("id"):
                issues.append(ValidationIssue("WIDGET_ID", "Widget id missing.", f"{where}.id"))
            if w.get("type") not in _WIDGET_TYPES:
                issues.append(
                    ValidationIssue("WIDGET_KIND", f"type must be one of {sorted(_WIDGET_TYPES)}.", f"{where}.type")
                )
            for dim in ("w", "h"):
                if dim in w and not (isinstance(w[dim], int) and w[dim] > 0):
                    issues.append(ValidationIssue("WIDGET_SIZE", f"{dim} must be a positive integer.", f"{where}.{dim}"))
            config = w.get("config")
            if config is not None and not isinstance(config, dict):
                issues.append(ValidationIssue("WIDGET_CONFIG", "config must be an object.", f"{where}.config"))

    if issues:
        raise ValidationError(issues)
