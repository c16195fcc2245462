"""Screen geometry and pointer hit-testing.

The main screen is two columns above a one-row help bar::

    +-- consumers --+---------- detail ----------+
    |               |                            |
    +-- work -------+                            |
    |               |                            |
    +---------------+----------------------------+
    help bar

The same Layout drives both the view (panel sizes) and mouse handling, so
a click always lands on the row that was drawn there.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..config import (
    CONSUMERS_HEADER_ROWS,
    CONSUMERS_HEIGHT_FRACTION,
    DETAIL_CHROME_ROWS,
    HELP_BAR_ROWS,
    LEFT_COLUMN_FRACTION,
    WORK_HEADER_ROWS,
)


class Panel(Enum):
    CONSUMERS = "consumers"
    WORK = "work"
    DETAIL = "detail"

    def next(self) -> "Panel":
        order = list(Panel)
        return order[(order.index(self) + 1) % len(order)]

    def previous(self) -> "Panel":
        order = list(Panel)
        return order[(order.index(self) - 1) % len(order)]


@dataclass(frozen=True)
class Layout:
    width: int
    height: int
    left_width: int
    right_width: int
    body_height: int
    consumers_height: int
    work_height: int

    @classmethod
    def compute(cls, width: int, height: int) -> "Layout":
        width = max(0, width)
        height = max(0, height)
        left = int(width * LEFT_COLUMN_FRACTION)
        body = max(0, height - HELP_BAR_ROWS)
        consumers = int(body * CONSUMERS_HEIGHT_FRACTION)
        return cls(
            width=width,
            height=height,
            left_width=left,
            right_width=width - left,
            body_height=body,
            consumers_height=consumers,
            work_height=body - consumers,
        )

    @property
    def consumer_rows(self) -> int:
        """List rows visible in the consumers panel (minus border and title)."""
        return max(0, self.consumers_height - CONSUMERS_HEADER_ROWS - 1)

    @property
    def work_rows(self) -> int:
        """List rows visible in the work panel (minus border, title, filter)."""
        return max(0, self.work_height - WORK_HEADER_ROWS - 1)

    @property
    def viewport_height(self) -> int:
        return max(1, self.body_height - DETAIL_CHROME_ROWS)

    @property
    def viewport_width(self) -> int:
        return max(1, self.right_width - 4)


@dataclass(frozen=True)
class Hit:
    """Where a pointer event landed.

    ``row`` is the list row relative to the first visible item, or None when
    the pointer is on panel chrome (border, title, filter row) or on the
    detail panel.
    """

    panel: Panel
    row: int | None = None


def hit_test(layout: Layout, x: int, y: int) -> Hit | None:
    """Resolve a terminal cell to a panel and list row.

    Returns None outside the panel area (help bar or beyond the screen).
    """
    if x < 0 or y < 0 or x >= layout.width or y >= layout.body_height:
        return None

    if x >= layout.left_width:
        return Hit(Panel.DETAIL)

    if y < layout.consumers_height:
        row = y - CONSUMERS_HEADER_ROWS
        if row < 0 or row >= layout.consumer_rows:
            return Hit(Panel.CONSUMERS)
        return Hit(Panel.CONSUMERS, row)

    row = y - layout.consumers_height - WORK_HEADER_ROWS
    if row < 0 or row >= layout.work_rows:
        return Hit(Panel.WORK)
    return Hit(Panel.WORK, row)


def list_index(row: int | None, offset: int, count: int) -> int | None:
    """Absolute list index for a visible row, or None past the last item."""
    if row is None:
        return None
    idx = row + offset
    if idx < 0 or idx >= count:
        return None
    return idx


def ensure_visible(cursor: int, offset: int, rows: int) -> int:
    """Scroll offset that keeps ``cursor`` inside a window of ``rows``."""
    if rows <= 0:
        return max(0, cursor)
    if cursor < offset:
        return cursor
    if cursor >= offset + rows:
        return cursor - rows + 1
    return max(0, offset)
