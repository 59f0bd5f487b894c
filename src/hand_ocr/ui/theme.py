"""Minimal theme for the hand-ocr terminal UI."""

from rich.style import Style
from rich.theme import Theme

# Muted, zen-like colors
PRIMARY_COLOR = "#7C9CB5"      # Muted blue
ACCENT_COLOR = "#A8B5A0"       # Sage green
WARN_COLOR = "#C9A86C"         # Muted gold
ERROR_COLOR = "#B07878"        # Muted red
DIM_COLOR = "#6B7280"          # Gray
GEMINI_COLOR = "#7BA695"       # Sage

ENGINE_LABELS = {
    "gemini": "gemini",
}

# No emojis - simple text markers
STATUS_ICONS = {
    "success": "+",
    "warning": "!",
    "error": "x",
    "pending": ".",
    "running": "*",
    "skipped": "-",
}

APP_THEME = Theme({
    "gemini": Style(color=GEMINI_COLOR),
    "success": Style(color=ACCENT_COLOR),
    "warning": Style(color=WARN_COLOR),
    "error": Style(color=ERROR_COLOR),
    "info": Style(color=PRIMARY_COLOR),
    "dim": Style(color=DIM_COLOR),
    "header": Style(color="#D1D5DB"),
    "highlight": Style(color=WARN_COLOR),
    "table.header": Style(color=PRIMARY_COLOR, bold=True),
})
