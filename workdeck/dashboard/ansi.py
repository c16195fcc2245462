"""ANSI-aware string helpers.

The detail views are colourised with SGR escape sequences before they reach
the search engine, so every operation on "what the user sees" has to map
plain-text positions back into the decorated string. ``build_char_map`` is
the single scanner that defines what counts as an escape sequence; every
other helper here is built on it so they can never disagree.
"""

from __future__ import annotations

from typing import Sequence

from rich.cells import cell_len, get_character_cell_size

ESC = "\x1b"
RESET = "\x1b[0m"
BG_RESET = "\x1b[49m"


def _csi_end(text: str, start: int) -> int:
    """Index just past the CSI sequence starting at ``start`` (ESC '[').

    Parameter bytes (0x30-0x3F) and intermediate bytes (0x20-0x2F) are
    consumed, then one final byte. An unterminated sequence runs to the end.
    """
    n = len(text)
    j = start + 2
    while j < n and "\x30" <= text[j] <= "\x3f":
        j += 1
    while j < n and "\x20" <= text[j] <= "\x2f":
        j += 1
    if j < n:
        j += 1
    return j


def build_char_map(text: str) -> list[int]:
    """Map each plain character to its index in the decorated string.

    ``result[i]`` is where the i-th visible character starts in ``text``;
    one trailing sentinel equal to ``len(text)`` is appended so that
    ``text[result[a]:result[b]]`` is the decorated span for plain ``[a, b)``.
    """
    char_map: list[int] = []
    i = 0
    n = len(text)
    while i < n:
        if text[i] == ESC and i + 1 < n and text[i + 1] == "[":
            i = _csi_end(text, i)
            continue
        char_map.append(i)
        i += 1
    char_map.append(n)
    return char_map


def strip_ansi(text: str) -> str:
    """Remove escape sequences, leaving the visible characters."""
    if ESC not in text:
        return text
    char_map = build_char_map(text)
    return "".join(text[i] for i in char_map[:-1])


def visible_width(text: str) -> int:
    """Terminal cell width of the visible part of ``text``."""
    return cell_len(strip_ansi(text))


def pad_right(text: str, width: int) -> str:
    """Pad with spaces to ``width`` visible cells (never truncates)."""
    gap = width - visible_width(text)
    return text + " " * gap if gap > 0 else text


def clip(text: str, width: int) -> str:
    """Truncate to at most ``width`` visible cells, keeping escape sequences intact."""
    if width <= 0:
        return ""
    char_map = build_char_map(text)
    used = 0
    for k, pos in enumerate(char_map[:-1]):
        size = get_character_cell_size(text[pos])
        if used + size > width:
            cut = char_map[k]
            head = text[:cut]
            return head + RESET if ESC in head else head
        used += size
    return text


def fit(text: str, width: int) -> str:
    """Clip then pad so the result is exactly ``width`` cells wide."""
    return pad_right(clip(text, width), width)


def inject_highlights(
    line: str,
    ranges: Sequence[tuple[int, int]],
    abs_indices: Sequence[int],
    current: int,
    match_sgr: str,
    current_sgr: str,
) -> str:
    """Wrap plain-text ranges of a decorated line in background colour codes.

    ``ranges`` are ``[start, end)`` offsets into the plain text of ``line``,
    in ascending order. ``abs_indices[k]`` is the document-wide index of
    ``ranges[k]``; the one equal to ``current`` gets ``current_sgr``, the rest
    ``match_sgr``. Text between matches is copied verbatim and only the
    background is reset after each match, so foreground styling survives.
    Ranges that start before the previous range ended are skipped.
    """
    if not ranges:
        return line

    char_map = build_char_map(line)
    last = len(char_map) - 1
    out: list[str] = []
    prev = 0

    for (start, end), abs_idx in zip(ranges, abs_indices):
        if start >= last or start < 0:
            continue
        end = min(end, last)
        byte_start = char_map[start]
        byte_end = char_map[end]
        if byte_start < prev:
            continue

        out.append(line[prev:byte_start])
        sgr = current_sgr if abs_idx == current else match_sgr
        out.append(f"{ESC}[{sgr}m")
        out.append(line[byte_start:byte_end])
        out.append(BG_RESET)
        prev = byte_end

    out.append(line[prev:])
    return "".join(out)
