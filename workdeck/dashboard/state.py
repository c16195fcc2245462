"""Application state for the dashboard.

Everything is a frozen dataclass: ``update`` never mutates a state, it
builds a new one with ``dataclasses.replace``. Lists are tuples and are
swapped wholesale, so a state handed to the view (or captured by a command)
can never change underneath it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional

from ..config import ClientConfig
from ..models import ConsumerRef, WorkDetail, WorkSummary
from .ansi import strip_ansi
from .layout import Layout, Panel
from .search import SearchState
from .theme import DEFAULT_THEME, Theme


class Screen(Enum):
    CONNECT = "connect"
    MAIN = "main"


class ViewMode(Enum):
    FORMATTED = "Formatted"
    JSON = "JSON"
    YAML = "YAML"

    def next(self) -> "ViewMode":
        order = list(ViewMode)
        return order[(order.index(self) + 1) % len(order)]


class Capture(Enum):
    """Input modes that own the keyboard until closed or committed."""

    FILTER = "filter"
    SEARCH = "search"
    CREATE_CONSUMER = "create_consumer"
    CONFIRM_DELETE = "confirm_delete"


MODAL_CAPTURES = (Capture.CREATE_CONSUMER, Capture.CONFIRM_DELETE)


@dataclass(frozen=True)
class TextField:
    value: str = ""
    placeholder: str = ""
    masked: bool = False

    def insert(self, text: str) -> "TextField":
        return replace(self, value=self.value + text)

    def backspace(self) -> "TextField":
        return replace(self, value=self.value[:-1])

    def cleared(self) -> "TextField":
        return replace(self, value="")

    def display(self) -> str:
        return "•" * len(self.value) if self.masked else self.value


# Connect form focus positions
CONNECT_ENDPOINT = 0
CONNECT_TOKEN = 1
CONNECT_INSECURE = 2
CONNECT_BUTTON = 3
CONNECT_FIELDS = 4


@dataclass(frozen=True)
class ConnectForm:
    endpoint: TextField = TextField(placeholder="http://localhost:8000")
    token: TextField = TextField(placeholder="Bearer token (optional)", masked=True)
    insecure: bool = False
    focus: int = CONNECT_ENDPOINT
    loading: bool = False

    @classmethod
    def from_config(cls, config: ClientConfig) -> "ConnectForm":
        form = cls()
        return replace(
            form,
            endpoint=replace(form.endpoint, value=config.http_endpoint),
            token=replace(form.token, value=config.token),
            insecure=config.insecure,
        )

    def field_at(self, idx: int) -> Optional[TextField]:
        if idx == CONNECT_ENDPOINT:
            return self.endpoint
        if idx == CONNECT_TOKEN:
            return self.token
        return None

    def with_field(self, idx: int, value: TextField) -> "ConnectForm":
        if idx == CONNECT_ENDPOINT:
            return replace(self, endpoint=value)
        return replace(self, token=value)


@dataclass(frozen=True)
class ConfirmDelete:
    kind: str  # "consumer" | "work"
    target_id: str
    target_name: str
    prompt: str


@dataclass(frozen=True)
class DetailCache:
    """The single current detail and its pre-rendered views."""

    detail: Optional[WorkDetail] = None
    formatted: str = ""
    json: str = ""
    yaml: str = ""
    raw_json: str = ""
    raw_yaml: str = ""

    def content_for(self, mode: ViewMode) -> str:
        if mode is ViewMode.JSON and self.json:
            return self.json
        if mode is ViewMode.YAML and self.yaml:
            return self.yaml
        return self.formatted

    def clipboard_text(self, mode: ViewMode) -> str:
        """Uncoloured export: canonical serialization, or stripped formatted text."""
        if mode is ViewMode.JSON and self.raw_json:
            return self.raw_json
        if mode is ViewMode.YAML and self.raw_yaml:
            return self.raw_yaml
        return strip_ansi(self.formatted)


@dataclass(frozen=True)
class AppState:
    theme: Theme = DEFAULT_THEME
    config: ClientConfig = ClientConfig()

    width: int = 0
    height: int = 0
    screen: Screen = Screen.CONNECT
    connect: ConnectForm = ConnectForm()

    # Read-only backend handle, set once connected
    client: Any = None

    focus: Panel = Panel.CONSUMERS
    capture: Optional[Capture] = None

    consumers: tuple[ConsumerRef, ...] = ()
    consumer_cursor: int = 0
    consumer_offset: int = 0
    active_consumer: Optional[str] = None

    work: tuple[WorkSummary, ...] = ()
    work_cursor: int = 0
    work_offset: int = 0
    filter: TextField = TextField(placeholder="filter...")

    detail: DetailCache = DetailCache()
    view_mode: ViewMode = ViewMode.FORMATTED
    viewport_content: str = ""
    viewport_offset: int = 0
    search: SearchState = SearchState()

    watching: bool = False
    watch_tick_pending: bool = False
    watch_fetch_in_flight: bool = False

    create_input: TextField = TextField(placeholder="consumer name")
    confirm: Optional[ConfirmDelete] = None

    loading: bool = False
    spinner_running: bool = False
    spinner_idx: int = 0
    status_msg: str = ""
    error_msg: str = ""

    @classmethod
    def initial(cls, config: ClientConfig, theme: Theme = DEFAULT_THEME) -> "AppState":
        return cls(theme=theme, config=config, connect=ConnectForm.from_config(config))

    @property
    def layout(self) -> Layout:
        return Layout.compute(self.width, self.height)

    @property
    def visible_work(self) -> tuple[WorkSummary, ...]:
        """Work list narrowed by the case-insensitive name filter."""
        if not self.filter.value:
            return self.work
        needle = self.filter.value.lower()
        return tuple(w for w in self.work if needle in w.name.lower())

    @property
    def selected_work(self) -> Optional[WorkSummary]:
        visible = self.visible_work
        if not visible or self.work_cursor >= len(visible):
            return None
        return visible[self.work_cursor]

    @property
    def selected_consumer(self) -> Optional[ConsumerRef]:
        if not self.consumers or self.consumer_cursor >= len(self.consumers):
            return None
        return self.consumers[self.consumer_cursor]

    @property
    def filtering(self) -> bool:
        return self.capture is Capture.FILTER

    @property
    def searching(self) -> bool:
        return self.capture is Capture.SEARCH

    @property
    def modal_open(self) -> bool:
        return self.capture in MODAL_CAPTURES

    @property
    def viewport_lines(self) -> list[str]:
        return self.viewport_content.split("\n")

    @property
    def max_viewport_offset(self) -> int:
        return max(0, len(self.viewport_lines) - self.layout.viewport_height)


SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")

__all__ = [
    "AppState",
    "Capture",
    "ConfirmDelete",
    "ConnectForm",
    "DetailCache",
    "Panel",
    "Screen",
    "SPINNER_FRAMES",
    "TextField",
    "ViewMode",
]
