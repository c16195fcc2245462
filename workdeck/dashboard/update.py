"""The dashboard state machine.

``update(state, event) -> (state, commands)`` is the only place state
changes. It never performs I/O: anything slow is returned as a command
descriptor, executed by the driver, and comes back later as another event.

Key routing, in priority order:

1. ``ctrl+c`` always quits.
2. The connect screen owns every key until a connection is made.
3. An active capture mode (filter, search, create, confirm) owns every key
   until it is closed with ``esc`` or committed with ``enter``.
4. Otherwise ``tab``/``shift+tab`` cycle panels and the focused panel
   handles the rest.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Optional

from ..config import (
    LIST_WHEEL_STEP,
    SPINNER_INTERVAL,
    VIEWPORT_WHEEL_STEP,
    WATCH_INTERVAL,
)
from ..models import WorkSummary
from . import search as search_engine
from .commands import (
    Connect,
    CopyToClipboard,
    CreateConsumer,
    DeleteConsumer,
    DeleteWork,
    LoadConsumers,
    LoadDetail,
    LoadWork,
    Quit,
    ScheduleTick,
)
from .events import (
    ClipboardWritten,
    CommandFailed,
    Connected,
    ConsumerCreated,
    ConsumerDeleted,
    ConsumersLoaded,
    DetailLoaded,
    DetailOrigin,
    KeyPressed,
    MouseButton,
    MouseEvent,
    Resized,
    SpinnerTick,
    WatchTick,
    WorkDeleted,
    WorkLoaded,
)
from .layout import Panel, ensure_visible, hit_test, list_index
from .render import colorize_json, colorize_yaml, render_detail
from .search import SearchState
from .state import (
    CONNECT_BUTTON,
    CONNECT_FIELDS,
    CONNECT_INSECURE,
    CONNECT_TOKEN,
    SPINNER_FRAMES,
    AppState,
    Capture,
    ConfirmDelete,
    DetailCache,
    Screen,
    TextField,
)

logger = logging.getLogger(__name__)

Result = tuple[AppState, list[Any]]

_HANDLERS: dict[type, Callable[[AppState, Any], Result]] = {}

# Viewport positioning after the detail content changes
SCROLL_TOP = "top"  # current match if any, else the first line
SCROLL_MATCH = "match"  # current match if any, else unchanged
SCROLL_KEEP = "keep"


def _on(event_type: type):
    def register(fn):
        _HANDLERS[event_type] = fn
        return fn
    return register


def update(state: AppState, event: Any) -> Result:
    """Apply one event and return the new state plus commands to run."""
    handler = _HANDLERS.get(type(event))
    if handler is None:
        logger.debug("ignoring unknown event %r", event)
        return state, []
    return handler(state, event)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _is_text(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


def _edit(field: TextField, key: str) -> Optional[TextField]:
    """Apply an editing key to a text field, or None if the key does not edit."""
    if key == "backspace":
        return field.backspace()
    if key == "ctrl+u":
        return field.cleared()
    if _is_text(key):
        return field.insert(key)
    return None


def _start_spinner(state: AppState) -> Result:
    if state.spinner_running:
        return state, []
    return replace(state, spinner_running=True), [ScheduleTick(SpinnerTick(), SPINNER_INTERVAL)]


def _start_loading(state: AppState) -> Result:
    return _start_spinner(replace(state, loading=True, error_msg=""))


def _schedule_watch(state: AppState) -> Result:
    # One tick or one fetch at a time; the next tick is armed when the fetch lands.
    if not state.watching or state.watch_tick_pending or state.watch_fetch_in_flight:
        return state, []
    return replace(state, watch_tick_pending=True), [ScheduleTick(WatchTick(), WATCH_INTERVAL)]


def _refresh_viewport(state: AppState, reset_search: bool = False, scroll: str = SCROLL_TOP) -> AppState:
    """Re-derive the displayed detail text, re-running any active search."""
    content = state.detail.content_for(state.view_mode)
    search = state.search
    if search.has_query:
        search = search_engine.rebuild(search, content, reset=reset_search)
        shown = search_engine.highlight(content, search.matches, search.current, state.theme)
    else:
        search = replace(search, matches=(), current=0)
        shown = content
    state = replace(state, search=search, viewport_content=shown)

    offset = state.viewport_offset
    if scroll != SCROLL_KEEP:
        target = search_engine.scroll_target(search, state.layout.viewport_height, len(state.viewport_lines))
        if target is not None:
            offset = target
        elif scroll == SCROLL_TOP:
            offset = 0
    return replace(state, viewport_offset=_clamp(offset, 0, state.max_viewport_offset))


def _clear_detail(state: AppState) -> AppState:
    return _refresh_viewport(replace(state, detail=DetailCache()), scroll=SCROLL_TOP)


def _load_detail(state: AppState, summary: WorkSummary, origin: DetailOrigin) -> Result:
    if state.client is None:
        return state, []
    command = LoadDetail(state.client, summary, origin)
    if origin is DetailOrigin.WATCH:
        return replace(state, watch_fetch_in_flight=True), [command]
    if origin is DetailOrigin.REFRESH:
        state, cmds = _start_loading(state)
        return state, cmds + [command]
    return state, [command]


def _load_work(state: AppState, consumer_name: str) -> Result:
    if state.client is None:
        return state, []
    state, cmds = _start_loading(replace(state, active_consumer=consumer_name))
    return state, cmds + [LoadWork(state.client, consumer_name)]


def _switch_consumer(state: AppState, consumer_name: str) -> Result:
    """Drop the previous consumer's work and detail, then load the new list."""
    state = _clear_detail(replace(state, work=(), work_cursor=0, work_offset=0))
    return _load_work(state, consumer_name)


def _reload_consumers(state: AppState) -> Result:
    if state.client is None:
        return state, []
    state, cmds = _start_loading(state)
    return state, cmds + [LoadConsumers(state.client)]


def _error_text(error: Exception) -> str:
    return str(error) or type(error).__name__


# ---------------------------------------------------------------------------
# Keyboard
# ---------------------------------------------------------------------------

@_on(KeyPressed)
def _on_key(state: AppState, event: KeyPressed) -> Result:
    key = event.key
    if key == "ctrl+c":
        return state, [Quit()]
    if state.screen is Screen.CONNECT:
        return _connect_key(state, key)

    capture_handlers = {
        Capture.FILTER: _filter_key,
        Capture.SEARCH: _search_key,
        Capture.CREATE_CONSUMER: _create_key,
        Capture.CONFIRM_DELETE: _confirm_key,
    }
    if state.capture is not None:
        return capture_handlers[state.capture](state, key)
    return _main_key(state, key)


def _connect_key(state: AppState, key: str) -> Result:
    form = state.connect
    if form.loading:
        return state, []

    if key == "tab":
        return replace(state, connect=replace(form, focus=(form.focus + 1) % CONNECT_FIELDS)), []
    if key == "shift+tab":
        return replace(state, connect=replace(form, focus=(form.focus - 1) % CONNECT_FIELDS)), []
    if key == "enter":
        if form.focus in (CONNECT_TOKEN, CONNECT_BUTTON):
            return _connect(state)
        return replace(state, connect=replace(form, focus=form.focus + 1)), []

    if form.focus == CONNECT_INSECURE:
        if key == " ":
            return replace(state, connect=replace(form, insecure=not form.insecure)), []
        return state, []

    field = form.field_at(form.focus)
    if field is None:
        return state, []
    edited = _edit(field, key)
    if edited is None:
        return state, []
    return replace(state, connect=form.with_field(form.focus, edited)), []


def _connect(state: AppState) -> Result:
    form = state.connect
    endpoint = form.endpoint.value.strip()
    if not endpoint:
        return replace(state, error_msg="endpoint must not be empty"), []

    config = state.config.with_overrides(
        http_endpoint=endpoint,
        token=form.token.value.strip(),
        insecure=form.insecure,
    )
    state = replace(state, config=config, connect=replace(form, loading=True), error_msg="", status_msg="")
    state, cmds = _start_spinner(state)
    return state, cmds + [Connect(config)]


def _main_key(state: AppState, key: str) -> Result:
    if key == "q":
        return state, [Quit()]
    if key == "tab":
        return replace(state, focus=state.focus.next()), []
    if key == "shift+tab":
        return replace(state, focus=state.focus.previous()), []

    panel_handlers = {
        Panel.CONSUMERS: _consumers_key,
        Panel.WORK: _work_key,
        Panel.DETAIL: _detail_key,
    }
    return panel_handlers[state.focus](state, key)


def _consumers_key(state: AppState, key: str) -> Result:
    if key in ("up", "k"):
        return _move_consumer(state, -1), []
    if key in ("down", "j"):
        return _move_consumer(state, 1), []
    if key == "enter":
        selected = state.selected_consumer
        if selected is None:
            return state, []
        return _switch_consumer(replace(state, focus=Panel.WORK), selected.name)
    if key == "n":
        return replace(state, capture=Capture.CREATE_CONSUMER, create_input=state.create_input.cleared()), []
    if key == "d":
        selected = state.selected_consumer
        if selected is None:
            return state, []
        confirm = ConfirmDelete("consumer", selected.id, selected.name, f'Delete consumer "{selected.name}"?')
        return replace(state, capture=Capture.CONFIRM_DELETE, confirm=confirm), []
    if key == "r":
        return _reload_consumers(state)
    if key == "y":
        return _copy(state)
    return state, []


def _work_key(state: AppState, key: str) -> Result:
    if key in ("up", "k"):
        return _move_work(state, -1)
    if key in ("down", "j"):
        return _move_work(state, 1)
    if key == "enter":
        return replace(state, focus=Panel.DETAIL), []
    if key == "/":
        return replace(state, capture=Capture.FILTER), []
    if key == "w":
        return _toggle_watch(state)
    if key == "v":
        return _cycle_view(state), []
    if key == "d":
        selected = state.selected_work
        if selected is None:
            return state, []
        confirm = ConfirmDelete("work", selected.id, selected.name, f'Delete work "{selected.name}"?')
        return replace(state, capture=Capture.CONFIRM_DELETE, confirm=confirm), []
    if key == "r":
        if state.active_consumer is None:
            return state, []
        return _load_work(state, state.active_consumer)
    if key == "y":
        return _copy(state)
    return state, []


def _detail_key(state: AppState, key: str) -> Result:
    if key == "/":
        return replace(state, capture=Capture.SEARCH), []
    if key == "n":
        return _step_search(state, 1), []
    if key == "N":
        return _step_search(state, -1), []
    if key == "esc":
        if not state.search.has_query:
            return state, []
        return _refresh_viewport(replace(state, search=SearchState()), scroll=SCROLL_KEEP), []
    if key == "w":
        return _toggle_watch(state)
    if key == "v":
        return _cycle_view(state), []
    if key == "y":
        return _copy(state)
    if key == "r":
        selected = state.selected_work
        if selected is None:
            return state, []
        return _load_detail(state, selected, DetailOrigin.REFRESH)

    page = state.layout.viewport_height
    scroll_keys = {
        "up": -1, "k": -1,
        "down": 1, "j": 1,
        "pgup": -page, "pgdown": page,
    }
    if key in scroll_keys:
        return _scroll_viewport(state, scroll_keys[key]), []
    if key in ("home", "g"):
        return replace(state, viewport_offset=0), []
    if key in ("end", "G"):
        return replace(state, viewport_offset=state.max_viewport_offset), []
    return state, []


def _filter_key(state: AppState, key: str) -> Result:
    if key == "esc":
        return replace(state, capture=None, filter=state.filter.cleared(), work_cursor=0, work_offset=0), []
    if key == "enter":
        return replace(state, capture=None), []
    edited = _edit(state.filter, key)
    if edited is None or edited == state.filter:
        return state, []
    return replace(state, filter=edited, work_cursor=0, work_offset=0), []


def _search_key(state: AppState, key: str) -> Result:
    if key == "esc":
        return _refresh_viewport(replace(state, capture=None, search=SearchState()), scroll=SCROLL_KEEP), []
    if key == "enter":
        return replace(state, capture=None), []
    edited = _edit(TextField(value=state.search.query), key)
    if edited is None or edited.value == state.search.query:
        return state, []
    state = replace(state, search=replace(state.search, query=edited.value))
    return _refresh_viewport(state, reset_search=True, scroll=SCROLL_MATCH), []


def _create_key(state: AppState, key: str) -> Result:
    if key == "esc":
        return replace(state, capture=None, create_input=state.create_input.cleared()), []
    if key == "enter":
        name = state.create_input.value.strip()
        if not name:
            return replace(state, error_msg="consumer name must not be empty"), []
        state = replace(state, capture=None, create_input=state.create_input.cleared(), status_msg="")
        if state.client is None:
            return state, []
        state, cmds = _start_loading(state)
        return state, cmds + [CreateConsumer(state.client, name)]
    edited = _edit(state.create_input, key)
    if edited is None:
        return state, []
    return replace(state, create_input=edited), []


def _confirm_key(state: AppState, key: str) -> Result:
    confirm = state.confirm
    if key in ("esc", "n", "N") or confirm is None:
        return replace(state, capture=None, confirm=None), []
    if key not in ("y", "Y"):
        return state, []

    state = replace(state, capture=None, confirm=None, status_msg="")
    if state.client is None:
        return state, []
    if confirm.kind == "consumer":
        command = DeleteConsumer(state.client, confirm.target_id, confirm.target_name)
    else:
        command = DeleteWork(state.client, confirm.target_id, confirm.target_name)
    state, cmds = _start_loading(state)
    return state, cmds + [command]


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

def _move_consumer(state: AppState, delta: int) -> AppState:
    if not state.consumers:
        return state
    cursor = _clamp(state.consumer_cursor + delta, 0, len(state.consumers) - 1)
    offset = ensure_visible(cursor, state.consumer_offset, state.layout.consumer_rows)
    return replace(state, consumer_cursor=cursor, consumer_offset=offset)


def _move_work(state: AppState, delta: int) -> Result:
    visible = state.visible_work
    if not visible:
        return state, []
    cursor = _clamp(state.work_cursor + delta, 0, len(visible) - 1)
    if cursor == state.work_cursor:
        return state, []
    offset = ensure_visible(cursor, state.work_offset, state.layout.work_rows)
    state = replace(state, work_cursor=cursor, work_offset=offset)
    return _load_detail(state, visible[cursor], DetailOrigin.SELECT)


def _scroll_viewport(state: AppState, delta: int) -> AppState:
    offset = _clamp(state.viewport_offset + delta, 0, state.max_viewport_offset)
    return replace(state, viewport_offset=offset)


def _step_search(state: AppState, delta: int) -> AppState:
    if not state.search.matches:
        return state
    state = replace(state, search=search_engine.step(state.search, delta))
    return _refresh_viewport(state, scroll=SCROLL_MATCH)


def _toggle_watch(state: AppState) -> Result:
    if state.watching:
        return replace(state, watching=False, status_msg="Watch mode OFF"), []
    return _schedule_watch(replace(state, watching=True, status_msg="Watch mode ON"))


def _cycle_view(state: AppState) -> AppState:
    return _refresh_viewport(replace(state, view_mode=state.view_mode.next()), scroll=SCROLL_TOP)


def _copy(state: AppState) -> Result:
    if state.detail.detail is None:
        return replace(state, error_msg="no work selected to copy"), []
    return state, [CopyToClipboard(state.detail.clipboard_text(state.view_mode))]


# ---------------------------------------------------------------------------
# Mouse and terminal
# ---------------------------------------------------------------------------

@_on(MouseEvent)
def _on_mouse(state: AppState, event: MouseEvent) -> Result:
    if state.screen is not Screen.MAIN or state.modal_open:
        return state, []
    hit = hit_test(state.layout, event.x, event.y)
    if hit is None:
        return state, []

    if event.button is MouseButton.LEFT:
        return _click(replace(state, focus=hit.panel), hit.panel, hit.row)

    delta = -1 if event.button is MouseButton.WHEEL_UP else 1
    if hit.panel is Panel.CONSUMERS:
        return _move_consumer(state, delta * LIST_WHEEL_STEP), []
    if hit.panel is Panel.WORK:
        return _move_work(state, delta * LIST_WHEEL_STEP)
    return _scroll_viewport(state, delta * VIEWPORT_WHEEL_STEP), []


def _click(state: AppState, panel: Panel, row: Optional[int]) -> Result:
    if panel is Panel.CONSUMERS:
        idx = list_index(row, state.consumer_offset, len(state.consumers))
        if idx is None:
            return state, []
        state = replace(state, consumer_cursor=idx)
        return _switch_consumer(state, state.consumers[idx].name)

    if panel is Panel.WORK:
        visible = state.visible_work
        idx = list_index(row, state.work_offset, len(visible))
        if idx is None:
            return state, []
        return _load_detail(replace(state, work_cursor=idx), visible[idx], DetailOrigin.SELECT)

    return state, []


@_on(Resized)
def _on_resize(state: AppState, event: Resized) -> Result:
    state = replace(state, width=event.width, height=event.height)
    layout = state.layout
    state = replace(
        state,
        consumer_offset=ensure_visible(state.consumer_cursor, state.consumer_offset, layout.consumer_rows),
        work_offset=ensure_visible(state.work_cursor, state.work_offset, layout.work_rows),
    )
    return replace(state, viewport_offset=_clamp(state.viewport_offset, 0, state.max_viewport_offset)), []


# ---------------------------------------------------------------------------
# Timers
# ---------------------------------------------------------------------------

@_on(SpinnerTick)
def _on_spinner(state: AppState, event: SpinnerTick) -> Result:
    if not (state.loading or state.connect.loading):
        return replace(state, spinner_running=False), []
    idx = (state.spinner_idx + 1) % len(SPINNER_FRAMES)
    return replace(state, spinner_idx=idx), [ScheduleTick(SpinnerTick(), SPINNER_INTERVAL)]


@_on(WatchTick)
def _on_watch_tick(state: AppState, event: WatchTick) -> Result:
    state = replace(state, watch_tick_pending=False)
    if not state.watching or state.watch_fetch_in_flight:
        return state, []
    selected = state.selected_work
    if selected is None or state.client is None:
        return _schedule_watch(state)
    return _load_detail(state, selected, DetailOrigin.WATCH)


# ---------------------------------------------------------------------------
# Command completions
# ---------------------------------------------------------------------------

@_on(Connected)
def _on_connected(state: AppState, event: Connected) -> Result:
    count = len(event.consumers)
    state = replace(
        state,
        screen=Screen.MAIN,
        client=event.client,
        connect=replace(state.connect, loading=False),
        consumers=event.consumers,
        consumer_cursor=0,
        consumer_offset=0,
        focus=Panel.CONSUMERS,
        error_msg="",
        status_msg=f"Connected: {count} consumer(s)",
    )
    if not event.consumers:
        return state, []
    if count == 1:
        state = replace(state, focus=Panel.WORK)
    return _load_work(state, event.consumers[0].name)


@_on(ConsumersLoaded)
def _on_consumers_loaded(state: AppState, event: ConsumersLoaded) -> Result:
    return replace(
        state,
        consumers=event.consumers,
        consumer_cursor=0,
        consumer_offset=0,
        loading=False,
        status_msg=f"{len(event.consumers)} consumer(s)",
    ), []


@_on(WorkLoaded)
def _on_work_loaded(state: AppState, event: WorkLoaded) -> Result:
    state = replace(
        state,
        active_consumer=event.consumer_name,
        work=event.work,
        work_cursor=0,
        work_offset=0,
        loading=False,
    )
    selected = state.selected_work
    if selected is None:
        return _clear_detail(state), []
    return _load_detail(state, selected, DetailOrigin.SELECT)


@_on(DetailLoaded)
def _on_detail_loaded(state: AppState, event: DetailLoaded) -> Result:
    theme = state.theme
    cache = DetailCache(
        detail=event.detail,
        formatted=render_detail(event.detail, theme),
        json=colorize_json(event.raw_json, theme),
        yaml=colorize_yaml(event.raw_yaml, theme),
        raw_json=event.raw_json,
        raw_yaml=event.raw_yaml,
    )
    if event.origin is DetailOrigin.WATCH:
        state = replace(state, detail=cache, watch_fetch_in_flight=False)
        state = _refresh_viewport(state, scroll=SCROLL_KEEP)
    else:
        state = replace(state, detail=cache, loading=False)
        state = _refresh_viewport(state, scroll=SCROLL_TOP)
    return _schedule_watch(state)


@_on(ConsumerCreated)
def _on_consumer_created(state: AppState, event: ConsumerCreated) -> Result:
    state = replace(state, loading=False, status_msg=f'Consumer "{event.consumer.name}" created')
    return _reload_consumers(state)


@_on(ConsumerDeleted)
def _on_consumer_deleted(state: AppState, event: ConsumerDeleted) -> Result:
    state = replace(state, loading=False, status_msg="Consumer deleted")
    if state.active_consumer == event.name:
        state = _clear_detail(replace(state, active_consumer=None, work=(), work_cursor=0, work_offset=0))
    return _reload_consumers(state)


@_on(WorkDeleted)
def _on_work_deleted(state: AppState, event: WorkDeleted) -> Result:
    state = replace(state, loading=False, status_msg="Work deleted")
    current = state.detail.detail
    if current is not None and current.id == event.work_id:
        state = _clear_detail(state)
    if state.active_consumer is None:
        return state, []
    return _load_work(state, state.active_consumer)


@_on(ClipboardWritten)
def _on_clipboard_written(state: AppState, event: ClipboardWritten) -> Result:
    return replace(state, error_msg="", status_msg="Copied to clipboard!"), []


@_on(CommandFailed)
def _on_command_failed(state: AppState, event: CommandFailed) -> Result:
    state = replace(
        state,
        loading=False,
        connect=replace(state.connect, loading=False),
        error_msg=_error_text(event.error),
        status_msg="",
    )
    command = event.command
    if isinstance(command, LoadDetail) and command.origin is DetailOrigin.WATCH:
        return _schedule_watch(replace(state, watch_fetch_in_flight=False))
    return state, []
