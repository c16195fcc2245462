"""In-detail search: find, highlight and step through matches.

Matching runs on the plain (escape-stripped) text of each rendered line;
highlighting maps the plain offsets back into the decorated line with
``ansi.inject_highlights`` so syntax colours survive.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .ansi import inject_highlights, strip_ansi
from .theme import Theme


@dataclass(frozen=True)
class SearchMatch:
    """One hit: plain-text ``[start, end)`` on a 0-indexed rendered line."""

    line: int
    start: int
    end: int


@dataclass(frozen=True)
class SearchState:
    query: str = ""
    matches: tuple[SearchMatch, ...] = ()
    current: int = 0

    @property
    def has_query(self) -> bool:
        return bool(self.query)

    @property
    def current_match(self) -> SearchMatch | None:
        if not self.matches:
            return None
        return self.matches[self.current]


def _fold(text: str) -> str:
    # Lower-case without changing length, so offsets stay valid.
    out = []
    for ch in text:
        low = ch.lower()
        out.append(low if len(low) == 1 else ch)
    return "".join(out)


def find_matches(content: str, query: str) -> tuple[SearchMatch, ...]:
    """All case-insensitive, non-overlapping hits of ``query`` in document order."""
    if not query:
        return ()
    needle = _fold(query)
    matches = []
    for line_idx, line in enumerate(content.split("\n")):
        haystack = _fold(strip_ansi(line))
        pos = haystack.find(needle)
        while pos >= 0:
            matches.append(SearchMatch(line_idx, pos, pos + len(needle)))
            pos = haystack.find(needle, pos + len(needle))
    return tuple(matches)


def highlight(content: str, matches: tuple[SearchMatch, ...], current: int, theme: Theme) -> str:
    """Return ``content`` with every match given a background colour."""
    if not matches:
        return content

    by_line: dict[int, tuple[list[tuple[int, int]], list[int]]] = {}
    for abs_idx, m in enumerate(matches):
        ranges, indices = by_line.setdefault(m.line, ([], []))
        ranges.append((m.start, m.end))
        indices.append(abs_idx)

    lines = content.split("\n")
    for line_idx, (ranges, indices) in by_line.items():
        if line_idx < len(lines):
            lines[line_idx] = inject_highlights(
                lines[line_idx], ranges, indices, current,
                theme.match_sgr, theme.current_match_sgr,
            )
    return "\n".join(lines)


def rebuild(search: SearchState, content: str, reset: bool = False) -> SearchState:
    """Recompute matches for new content or a new query.

    ``reset`` moves the current match back to the first hit; otherwise the
    index is kept and clamped to the new match list.
    """
    matches = find_matches(content, search.query)
    current = 0 if reset or search.current >= len(matches) else search.current
    return replace(search, matches=matches, current=current)


def step(search: SearchState, delta: int) -> SearchState:
    """Move the current match by ``delta``, wrapping; no-op without matches."""
    if not search.matches:
        return search
    return replace(search, current=(search.current + delta) % len(search.matches))


def scroll_target(search: SearchState, viewport_height: int, total_lines: int) -> int | None:
    """Viewport offset that puts the current match a quarter of the way down.

    Returns None when there is nothing to scroll to.
    """
    match = search.current_match
    if match is None:
        return None
    offset = match.line - viewport_height // 4
    max_offset = max(0, total_lines - viewport_height)
    return max(0, min(offset, max_offset))
