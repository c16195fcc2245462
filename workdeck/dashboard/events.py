"""Events fed into ``update``.

Input and timer events come from the driver; the rest are completion events
produced by ``commands.run_command``, one per finished command.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..models import ConsumerRef, WorkDetail, WorkSummary


class MouseButton(Enum):
    LEFT = "left"
    WHEEL_UP = "wheel_up"
    WHEEL_DOWN = "wheel_down"


class DetailOrigin(Enum):
    """Why a detail fetch was issued."""

    SELECT = "select"
    REFRESH = "refresh"
    WATCH = "watch"


# ---------------------------------------------------------------------------
# Input and timers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class MouseEvent:
    x: int
    y: int
    button: MouseButton


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class SpinnerTick:
    pass


@dataclass(frozen=True)
class WatchTick:
    pass


# ---------------------------------------------------------------------------
# Command completions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Connected:
    client: Any
    consumers: tuple[ConsumerRef, ...]


@dataclass(frozen=True)
class ConsumersLoaded:
    consumers: tuple[ConsumerRef, ...]


@dataclass(frozen=True)
class WorkLoaded:
    consumer_name: str
    work: tuple[WorkSummary, ...]


@dataclass(frozen=True)
class DetailLoaded:
    summary: WorkSummary
    detail: WorkDetail
    raw_json: str
    raw_yaml: str
    origin: DetailOrigin = DetailOrigin.SELECT


@dataclass(frozen=True)
class ConsumerCreated:
    consumer: ConsumerRef


@dataclass(frozen=True)
class ConsumerDeleted:
    consumer_id: str
    name: str


@dataclass(frozen=True)
class WorkDeleted:
    work_id: str
    name: str


@dataclass(frozen=True)
class ClipboardWritten:
    chars: int


@dataclass(frozen=True)
class CommandFailed:
    command: Any
    error: Exception
