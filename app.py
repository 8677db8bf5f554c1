import html
import os
from pathlib import Path

import plotly.io as pio

from bi_browser.app_context import create_app_context
from bi_browser.logging_config import configure_logging

configure_logging()


def render_report(config_root: Path, output: Path) -> Path:
    """
    Render the active sheet of the stored dashboard against the stored
    selections of the default dataset into a single HTML page.
    """
    ctx = create_app_context(config_root)
    state = ctx.dashboards.load()
    sheet = state.active_sheet
    session = ctx.open_session()

    figures = session.render_sheet(sheet)
    chips = ", ".join(html.escape(f"{c.field}: {c.label}") for c in session.selection_summary()) or "No selections"

    parts = [
        f"<h1>{html.escape(state.title)}</h1>",
        f"<h2>{html.escape(sheet.title)}</h2>",
        f"<p>{chips}</p>",
    ]
    for widget in sheet.widgets:
        parts.append(f"<h3>{html.escape(widget.title)}</h3>")
        parts.append(pio.to_html(figures[widget.id], full_html=False, include_plotlyjs="cdn"))

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text("<html><body>" + "\n".join(parts) + "</body></html>", encoding="utf-8")
    return output


if __name__ == "__main__":
    config_root = Path(os.getenv("BI_BROWSER_CONFIG_ROOT", "config"))
    output = Path(os.getenv("BI_BROWSER_REPORT", "report.html"))
    path = render_report(config_root, output)
    print(f"Wrote {path}")
