from bi_browser.core.associative import SelectionState

PRIMARY = "#4477AA"

SERIES_COLORS = ["#4477AA", "#7DB8DA", "#B6D7EA", "#46c646", "#F9BA00", "#F76000"]

# Background / text colour per filter pane state
STATE_FILL = {
    SelectionState.SELECTED: "#009845",
    SelectionState.POSSIBLE: "#ffffff",
    SelectionState.ALTERNATIVE: "#d1d5db",
    SelectionState.EXCLUDED: "#e5e7eb",
}

STATE_FONT = {
    SelectionState.SELECTED: "#ffffff",
    SelectionState.POSSIBLE: "#1f2937",
    SelectionState.ALTERNATIVE: "#4b5563",
    SelectionState.EXCLUDED: "#9ca3af",
}
