"""Colour and style table for the dashboard.

One immutable Theme is built at startup and carried on the application
state; render and view functions read styles from it instead of module
globals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rich.color import ColorSystem
from rich.style import Style

PRIMARY = "#7C3AED"
SECONDARY = "#06B6D4"
SUCCESS = "#10B981"
WARNING = "#F59E0B"
ERROR = "#EF4444"
MUTED = "#6B7280"
FOCUSED = "#3B82F6"
SELECTED = "#1E40AF"
TEXT = "#E5E7EB"
SLATE = "#94A3B8"


@dataclass(frozen=True)
class Theme:
    border: Style = Style(color=MUTED)
    border_focused: Style = Style(color=FOCUSED)

    panel_title: Style = Style(color=SECONDARY, bold=True)
    panel_title_focused: Style = Style(color=FOCUSED, bold=True)
    panel_title_watch: Style = Style(color=WARNING, bold=True)

    item: Style = Style(color=TEXT)
    item_selected: Style = Style(color="#FFFFFF", bgcolor=SELECTED, bold=True)

    status_ok: Style = Style(color=SUCCESS)
    status_err: Style = Style(color=ERROR)
    status_unknown: Style = Style(color=MUTED)

    cond_true: Style = Style(color=SUCCESS, bold=True)
    cond_false: Style = Style(color=ERROR, bold=True)
    cond_unknown: Style = Style(color=MUTED)

    detail_key: Style = Style(color=MUTED, bold=True)
    detail_value: Style = Style(color=TEXT)
    detail_header: Style = Style(color=SECONDARY, bold=True, underline=True)

    help_key: Style = Style(color=SECONDARY, bold=True)
    help_desc: Style = Style(color=MUTED)

    status_msg: Style = Style(color=SUCCESS)
    error_msg: Style = Style(color=ERROR)

    modal_border: Style = Style(color=PRIMARY)
    modal_title: Style = Style(color=PRIMARY, bold=True)
    input_focused: Style = Style(color=FOCUSED)
    input_normal: Style = Style(color=MUTED)
    button: Style = Style(color="#FFFFFF", bgcolor=PRIMARY, bold=True)
    button_focused: Style = Style(color="#FFFFFF", bgcolor=FOCUSED, bold=True)

    watch_badge: Style = Style(color=WARNING, bold=True)
    filter_active: Style = Style(color=WARNING)
    mode_badge: Style = Style(color=SLATE)

    # Syntax highlighting for the JSON / YAML views
    syntax_key: Style = Style(color="#7DD3FC")
    syntax_string: Style = Style(color="#86EFAC")
    syntax_number: Style = Style(color="#FDE68A")
    syntax_bool: Style = Style(color="#C4B5FD")
    syntax_null: Style = Style(color=MUTED)
    syntax_punct: Style = Style(color=SLATE)

    search_bar: Style = Style(color=FOCUSED)
    search_count: Style = Style(color=MUTED)
    search_no_match: Style = Style(color=ERROR)

    # SGR background parameters for search hits
    match_sgr: str = "43"
    current_match_sgr: str = "42"

    # None renders plain text (no escape codes)
    color_system: Optional[ColorSystem] = ColorSystem.TRUECOLOR

    def paint(self, style: str, text: str) -> str:
        """Render ``text`` with the named style as an ANSI string."""
        return getattr(self, style).render(text, color_system=self.color_system)


DEFAULT_THEME = Theme()
