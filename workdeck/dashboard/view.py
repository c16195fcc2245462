"""Frame composition: AppState in, one ANSI string out.

``render_frame`` is pure. Every line it returns is exactly ``state.width``
cells wide and there are exactly ``state.height`` lines, so the driver can
paint the frame as-is. Panel sizes come from the same ``Layout`` the mouse
handler uses.
"""

from __future__ import annotations

from ..models import WorkSummary
from .ansi import clip, fit, visible_width
from .layout import Panel
from .render import work_status_icon
from .state import (
    CONNECT_BUTTON,
    CONNECT_ENDPOINT,
    CONNECT_INSECURE,
    CONNECT_TOKEN,
    SPINNER_FRAMES,
    AppState,
    Capture,
    Screen,
    TextField,
)
from .theme import Theme

MIN_WIDTH = 40
MIN_HEIGHT = 10

CURSOR = "█"

HELP = {
    Panel.CONSUMERS: [
        ("tab", "panel"), ("↑↓", "move"), ("enter", "open"), ("n", "new"),
        ("d", "delete"), ("r", "reload"), ("y", "copy"), ("q", "quit"),
    ],
    Panel.WORK: [
        ("tab", "panel"), ("↑↓", "move"), ("/", "filter"), ("w", "watch"),
        ("v", "view"), ("d", "delete"), ("r", "reload"), ("y", "copy"), ("q", "quit"),
    ],
    Panel.DETAIL: [
        ("tab", "panel"), ("↑↓", "scroll"), ("/", "search"), ("n/N", "next/prev"),
        ("w", "watch"), ("v", "view"), ("y", "copy"), ("r", "refresh"), ("q", "quit"),
    ],
}

CAPTURE_HELP = {
    Capture.FILTER: [("type", "filter"), ("enter", "apply"), ("esc", "clear")],
    Capture.SEARCH: [("type", "search"), ("enter", "done"), ("esc", "clear")],
    Capture.CREATE_CONSUMER: [("enter", "create"), ("esc", "cancel")],
    Capture.CONFIRM_DELETE: [("y", "confirm"), ("n/esc", "cancel")],
}

CONNECT_HELP = [("tab", "next field"), ("space", "toggle"), ("enter", "connect"), ("ctrl+c", "quit")]


def render_frame(state: AppState) -> str:
    """Compose the full screen for ``state``."""
    width, height = state.width, state.height
    if width <= 0 or height <= 0:
        return ""
    if width < MIN_WIDTH or height < MIN_HEIGHT:
        message = f"Terminal too small! Need {MIN_WIDTH}x{MIN_HEIGHT} minimum."
        return "\n".join([fit(message, width)] + [" " * width] * (height - 1))

    if state.screen is Screen.CONNECT:
        lines = _center(_connect_box(state), width, height)
    elif state.modal_open:
        lines = _center(_modal_box(state), width, height)
    else:
        lines = _main_body(state) + [_help_bar(state)]
    return "\n".join(fit(line, width) for line in lines[:height])


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

def _box(body: list[str], width: int, height: int, border: str, theme: Theme) -> list[str]:
    """Rounded border around ``body``, clipped and padded to the box size."""
    if width < 2 or height < 2:
        return [" " * max(0, width)] * max(0, height)
    inner = width - 2
    side = theme.paint(border, "│")
    rows = [theme.paint(border, "╭" + "─" * inner + "╮")]
    for i in range(height - 2):
        line = body[i] if i < len(body) else ""
        rows.append(side + fit(line, inner) + side)
    rows.append(theme.paint(border, "╰" + "─" * inner + "╯"))
    return rows


def _center(box: list[str], width: int, height: int) -> list[str]:
    box_width = max((visible_width(line) for line in box), default=0)
    left = " " * max(0, (width - box_width) // 2)
    top = max(0, (height - len(box)) // 2)
    lines = [""] * top + [left + line for line in box]
    return lines + [""] * max(0, height - len(lines))


def _title(state: AppState, text: str, panel: Panel, watching: bool = False) -> str:
    if watching:
        style = "panel_title_watch"
    else:
        style = "panel_title_focused" if state.focus is panel else "panel_title"
    return " " + state.theme.paint(style, text)


def _keys(pairs: list[tuple[str, str]], theme: Theme) -> str:
    return "  ".join(theme.paint("help_key", key) + " " + theme.paint("help_desc", desc) for key, desc in pairs)


def _input(field: TextField, focused: bool, theme: Theme) -> str:
    text = field.display()
    if not text and not focused:
        return theme.paint("help_desc", field.placeholder)
    style = "input_focused" if focused else "input_normal"
    return theme.paint(style, text + (CURSOR if focused else ""))


def _status_line(state: AppState) -> str:
    theme = state.theme
    if state.error_msg:
        return theme.paint("error_msg", "✗ " + state.error_msg)
    if state.loading or state.connect.loading:
        return theme.paint("panel_title", SPINNER_FRAMES[state.spinner_idx] + " Loading...")
    if state.status_msg:
        return theme.paint("status_msg", state.status_msg)
    return ""


def _list_row(text: str, selected: bool, focused: bool, width: int, theme: Theme) -> str:
    if selected:
        marker = "> " if focused else "  "
        return theme.paint("item_selected", fit(marker + text, width))
    return theme.paint("item", "  " + text)


# ---------------------------------------------------------------------------
# Main screen
# ---------------------------------------------------------------------------

def _main_body(state: AppState) -> list[str]:
    layout = state.layout
    left = _consumers_panel(state) + _work_panel(state)
    right = _detail_panel(state)
    return [
        fit(left[i] if i < len(left) else "", layout.left_width) + (right[i] if i < len(right) else "")
        for i in range(layout.body_height)
    ]


def _consumers_panel(state: AppState) -> list[str]:
    layout, theme = state.layout, state.theme
    inner = layout.left_width - 2
    focused = state.focus is Panel.CONSUMERS

    body = [_title(state, f"Consumers ({len(state.consumers)})", Panel.CONSUMERS)]
    if not state.consumers:
        body.append(theme.paint("help_desc", "  (no consumers)"))
    end = state.consumer_offset + layout.consumer_rows
    for idx in range(state.consumer_offset, min(end, len(state.consumers))):
        consumer = state.consumers[idx]
        name = consumer.name
        if consumer.name == state.active_consumer:
            name += " ●"
        body.append(_list_row(name, idx == state.consumer_cursor, focused, inner, theme))

    border = "border_focused" if focused else "border"
    return _box(body, layout.left_width, layout.consumers_height, border, theme)


def _work_row(state: AppState, work: WorkSummary, selected: bool, inner: int) -> str:
    theme = state.theme
    icon = work_status_icon(work, theme)
    if selected:
        return icon + " " + theme.paint("item_selected", fit(work.name, inner - 2))
    return icon + " " + theme.paint("item", work.name)


def _filter_row(state: AppState) -> str:
    theme = state.theme
    if state.filtering:
        return " " + theme.paint("filter_active", "/" + state.filter.value + CURSOR)
    if state.filter.value:
        return " " + theme.paint("filter_active", "filter: " + state.filter.value)
    return " " + theme.paint("help_desc", "/ to filter")


def _work_panel(state: AppState) -> list[str]:
    layout, theme = state.layout, state.theme
    inner = layout.left_width - 2
    focused = state.focus is Panel.WORK
    visible = state.visible_work

    title = "Work"
    if state.active_consumer:
        title += f" · {state.active_consumer}"
    if state.filter.value:
        title += f" ({len(visible)}/{len(state.work)})"
    else:
        title += f" ({len(state.work)})"
    header = _title(state, title, Panel.WORK)
    if state.watching:
        header += " " + theme.paint("watch_badge", "[WATCH]")

    body = [header, _filter_row(state)]
    if not visible:
        hint = "(no matches)" if state.work else "(no work)"
        body.append(theme.paint("help_desc", "  " + hint))
    end = state.work_offset + layout.work_rows
    for idx in range(state.work_offset, min(end, len(visible))):
        body.append(" " + _work_row(state, visible[idx], idx == state.work_cursor, inner - 1))

    border = "border_focused" if focused else "border"
    return _box(body, layout.left_width, layout.work_height, border, theme)


def _search_row(state: AppState) -> str:
    theme = state.theme
    search = state.search
    if not (state.searching or search.has_query):
        return ""
    text = "/" + search.query + (CURSOR if state.searching else "")
    if search.matches:
        count = theme.paint("search_count", f"{search.current + 1}/{len(search.matches)}")
    elif search.has_query:
        count = theme.paint("search_no_match", "(no matches)")
    else:
        count = ""
    return " " + theme.paint("search_bar", text) + "  " + count


def _detail_panel(state: AppState) -> list[str]:
    layout, theme = state.layout, state.theme
    focused = state.focus is Panel.DETAIL

    header = _title(state, "Detail", Panel.DETAIL, watching=state.watching)
    if state.watching:
        header += " " + theme.paint("watch_badge", "[WATCH]")
    header += " " + theme.paint("mode_badge", f"[{state.view_mode.value}]")

    body = [header, " " + _status_line(state), _search_row(state)]
    if state.detail.detail is None:
        body.append(" " + theme.paint("help_desc", "Select a work item to see its detail"))
    else:
        view_width = layout.viewport_width
        lines = state.viewport_lines[state.viewport_offset:state.viewport_offset + layout.viewport_height]
        body.extend(" " + clip(line, view_width) for line in lines)

    border = "border_focused" if focused else "border"
    return _box(body, layout.right_width, layout.body_height, border, theme)


def _help_bar(state: AppState) -> str:
    if state.capture is not None:
        pairs = CAPTURE_HELP[state.capture]
    else:
        pairs = HELP[state.focus]
    return " " + _keys(pairs, state.theme)


# ---------------------------------------------------------------------------
# Connect screen and modals
# ---------------------------------------------------------------------------

def _connect_box(state: AppState) -> list[str]:
    theme = state.theme
    form = state.connect
    width = min(60, state.width - 2)

    def label(text: str, idx: int) -> str:
        style = "input_focused" if form.focus == idx else "detail_key"
        return "  " + theme.paint(style, text)

    checkbox = "[x]" if form.insecure else "[ ]"
    checkbox_style = "input_focused" if form.focus == CONNECT_INSECURE else "input_normal"
    button_style = "button_focused" if form.focus == CONNECT_BUTTON else "button"

    body = [
        " " + theme.paint("modal_title", "Connect to backend"),
        "",
        label("HTTP endpoint", CONNECT_ENDPOINT),
        "  " + _input(form.endpoint, form.focus == CONNECT_ENDPOINT, theme),
        "",
        label("Token", CONNECT_TOKEN),
        "  " + _input(form.token, form.focus == CONNECT_TOKEN, theme),
        "",
        "  " + theme.paint(checkbox_style, f"{checkbox} Skip TLS verification"),
        "",
        "  " + theme.paint(button_style, " Connect "),
        "",
        " " + _status_line(state),
        " " + _keys(CONNECT_HELP, theme),
    ]
    return _box(body, width, len(body) + 2, "modal_border", theme)


def _modal_box(state: AppState) -> list[str]:
    theme = state.theme
    width = min(56, state.width - 2)

    if state.capture is Capture.CREATE_CONSUMER:
        body = [
            " " + theme.paint("modal_title", "Create consumer"),
            "",
            "  " + theme.paint("detail_key", "Name: ") + _input(state.create_input, True, theme),
        ]
    else:
        prompt = state.confirm.prompt if state.confirm is not None else ""
        body = [
            " " + theme.paint("modal_title", "Confirm delete"),
            "",
            "  " + theme.paint("detail_value", prompt),
        ]

    body.append("")
    if state.error_msg:
        body.append(" " + theme.paint("error_msg", "✗ " + state.error_msg))
    body.append(" " + _keys(CAPTURE_HELP[state.capture], theme))
    return _box(body, width, len(body) + 2, "modal_border", theme)
