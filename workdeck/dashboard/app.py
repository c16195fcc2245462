"""Workdeck dashboard: Textual driver for the state machine.

The App owns exactly one AppState. Every input, timer and worker result is
turned into an engine event and passed through ``update`` on the UI thread;
the returned commands are either handled here (timers, quit) or run in a
thread worker whose single result event comes back via ``call_from_thread``.

Launch with: workdeck tui
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Optional

from rich.text import Text
from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from ..config import ClientConfig
from .commands import Quit, ScheduleTick, run_command
from .events import KeyPressed, MouseButton, MouseEvent, Resized
from .state import AppState
from .theme import DEFAULT_THEME, Theme
from .update import update
from .view import render_frame

logger = logging.getLogger(__name__)

# Textual key names that differ from the engine's
_KEY_NAMES = {
    "escape": "esc",
    "pageup": "pgup",
    "pagedown": "pgdown",
    "space": " ",
}


def translate_key(key: str, character: Optional[str] = None) -> Optional[str]:
    """Map a Textual key event onto an engine key string.

    Printable characters are passed through as themselves (so ``N`` stays
    distinct from ``n``); named keys use the engine's short names.
    """
    if character and len(character) == 1 and character.isprintable():
        return character
    if key in _KEY_NAMES:
        return _KEY_NAMES[key]
    if key in ("up", "down", "left", "right", "tab", "shift+tab", "enter",
               "backspace", "home", "end", "ctrl+c", "ctrl+u"):
        return key
    return None


class FrameView(Static, can_focus=True):
    """Full-screen canvas showing the composed frame; forwards input to the app."""

    DEFAULT_CSS = """
    FrameView {
        width: 100%;
        height: 100%;
        overflow: hidden hidden;
    }
    """

    def on_key(self, event: events.Key) -> None:
        key = translate_key(event.key, event.character)
        if key is None:
            return
        event.stop()
        event.prevent_default()
        self.app.feed(KeyPressed(key))

    def on_mouse_down(self, event: events.MouseDown) -> None:
        if event.button == 1:
            self.app.feed(MouseEvent(event.x, event.y, MouseButton.LEFT))

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        event.stop()
        self.app.feed(MouseEvent(event.x, event.y, MouseButton.WHEEL_UP))

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        event.stop()
        self.app.feed(MouseEvent(event.x, event.y, MouseButton.WHEEL_DOWN))


class WorkdeckApp(App):
    """Three-panel browser for consumers and their work records."""

    TITLE = "Workdeck"

    # Focus cycling and quit belong to the engine, not to Textual's focus chain.
    BINDINGS = [
        Binding("tab", "engine_key('tab')", "Next panel", show=False, priority=True),
        Binding("shift+tab", "engine_key('shift+tab')", "Previous panel", show=False, priority=True),
        Binding("ctrl+c", "engine_key('ctrl+c')", "Quit", show=False, priority=True),
    ]

    def __init__(self, config: ClientConfig, theme: Theme = DEFAULT_THEME, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.app_state = AppState.initial(config, theme)

    def compose(self) -> ComposeResult:
        yield FrameView(id="frame")

    def on_mount(self) -> None:
        self.query_one(FrameView).focus()
        self.feed(Resized(self.size.width, self.size.height))

    def on_resize(self, event: events.Resize) -> None:
        self.feed(Resized(event.size.width, event.size.height))

    def action_engine_key(self, key: str) -> None:
        self.feed(KeyPressed(key))

    def feed(self, event: Any) -> None:
        """Run one event through ``update`` and act on the resulting commands."""
        self.app_state, commands = update(self.app_state, event)
        for command in commands:
            self._perform(command)
        self._repaint()

    def _perform(self, command: Any) -> None:
        if isinstance(command, Quit):
            self.exit()
        elif isinstance(command, ScheduleTick):
            self.set_timer(command.delay, partial(self.feed, command.event))
        else:
            self._run_command(command)

    @work(thread=True)
    def _run_command(self, command: Any) -> None:
        """Execute an I/O command off the UI thread and feed back its result."""
        logger.debug("running %s", type(command).__name__)
        event = run_command(command)
        self.call_from_thread(self.feed, event)

    def _repaint(self) -> None:
        frame = render_frame(self.app_state)
        self.query_one(FrameView).update(Text.from_ansi(frame, no_wrap=True, end=""))
