"""Render primitives: colourised detail views and status icons.

Pure functions from text or records to ANSI-styled strings. Nothing here
keeps state; the Theme is always passed in.
"""

from __future__ import annotations

from ..models import CONDITION_TRUE, WorkDetail, WorkSummary, work_flags
from .ansi import pad_right
from .theme import Theme

_JSON_PUNCT_TOKENS = {"{", "}", "[", "]", "{}", "[]", "},", "],"}
_YAML_BOOLS = {"true", "false", "True", "False", "TRUE", "FALSE", "yes", "no"}
_YAML_NULLS = {"null", "~", "Null", "NULL"}


# ---------------------------------------------------------------------------
# Icons
# ---------------------------------------------------------------------------

def condition_icon(status: str, theme: Theme) -> str:
    if status == CONDITION_TRUE:
        return theme.paint("cond_true", "✓")
    if status == "False":
        return theme.paint("cond_false", "✗")
    return theme.paint("cond_unknown", "?")


def work_status_icon(work: WorkSummary, theme: Theme) -> str:
    """✓ when Applied and Available, ✗ otherwise, ? when nothing is reported."""
    if not work.conditions:
        return theme.paint("status_unknown", "?")
    applied, available = work_flags(work.conditions)
    if applied and available:
        return theme.paint("status_ok", "✓")
    return theme.paint("status_err", "✗")


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def _closing_quote(text: str, pos: int) -> int:
    """Index of the closing unescaped '"' at or after ``pos``, or -1."""
    i = pos
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == '"':
            return i
        i += 1
    return -1


def _json_value(text: str, theme: Theme) -> str:
    if not text:
        return ""
    prefix = ""
    if text[0] == " ":
        prefix, text = " ", text[1:]
    if not text:
        return prefix

    suffix = ""
    if text.endswith(","):
        suffix = theme.paint("syntax_punct", ",")
        text = text[:-1]

    if text in ("true", "false"):
        colored = theme.paint("syntax_bool", text)
    elif text == "null":
        colored = theme.paint("syntax_null", text)
    elif text.startswith('"'):
        colored = theme.paint("syntax_string", text)
    elif text in _JSON_PUNCT_TOKENS or text.startswith(("}", "]", "{", "[")):
        colored = theme.paint("syntax_punct", text)
    elif text[0] == "-" or text[0].isdigit():
        colored = theme.paint("syntax_number", text)
    else:
        colored = text
    return prefix + colored + suffix


def colorize_json_line(line: str, theme: Theme) -> str:
    if not line:
        return ""
    trimmed = line.lstrip(" \t")
    indent = line[: len(line) - len(trimmed)]

    if len(trimmed) >= 2 and trimmed[0] == '"':
        key_end = _closing_quote(trimmed, 1)
        if 0 < key_end < len(trimmed) - 1:
            after_key = trimmed[key_end + 1:].lstrip(" ")
            if after_key.startswith(":"):
                key = trimmed[: key_end + 1]
                return (
                    indent
                    + theme.paint("syntax_key", key)
                    + theme.paint("syntax_punct", ":")
                    + _json_value(after_key[1:], theme)
                )

    return indent + _json_value(trimmed, theme)


def colorize_json(text: str, theme: Theme) -> str:
    """Colourise indented JSON line by line."""
    return "\n".join(colorize_json_line(line, theme) for line in text.split("\n"))


# ---------------------------------------------------------------------------
# YAML
# ---------------------------------------------------------------------------

def _yaml_value(text: str, theme: Theme) -> str:
    if not text:
        return ""
    if text in _YAML_BOOLS:
        return theme.paint("syntax_bool", text)
    if text in _YAML_NULLS:
        return theme.paint("syntax_null", text)
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return theme.paint("syntax_string", text)
    if text[0] == "-" or text[0].isdigit():
        return theme.paint("syntax_number", text)
    return theme.paint("syntax_string", text)


def colorize_yaml_line(line: str, theme: Theme) -> str:
    if not line:
        return ""
    trimmed = line.lstrip(" ")
    indent = line[: len(line) - len(trimmed)]

    if trimmed in ("---", "..."):
        return theme.paint("syntax_punct", line)

    list_prefix = ""
    rest = trimmed
    if trimmed.startswith("- "):
        list_prefix = theme.paint("syntax_punct", "- ")
        rest = trimmed[2:]
    elif trimmed == "-":
        return indent + theme.paint("syntax_punct", "-")

    colon = rest.find(": ")
    if colon > 0:
        key, value = rest[:colon], rest[colon + 2:]
        return (
            indent
            + list_prefix
            + theme.paint("syntax_key", key)
            + theme.paint("syntax_punct", ": ")
            + _yaml_value(value, theme)
        )
    if rest.endswith(":") and ":" not in rest[:-1]:
        return indent + list_prefix + theme.paint("syntax_key", rest[:-1]) + theme.paint("syntax_punct", ":")

    return indent + list_prefix + _yaml_value(rest, theme)


def colorize_yaml(text: str, theme: Theme) -> str:
    """Colourise block-style YAML line by line."""
    return "\n".join(colorize_yaml_line(line, theme) for line in text.split("\n"))


# ---------------------------------------------------------------------------
# Formatted detail
# ---------------------------------------------------------------------------

def render_detail(detail: WorkDetail | None, theme: Theme) -> str:
    """Human-oriented summary of a work record."""
    if detail is None:
        return theme.paint("status_unknown", "(no detail available)")

    def kv(key: str, value: str) -> str:
        return theme.paint("detail_key", pad_right(key, 12)) + " " + theme.paint("detail_value", value)

    lines = [
        kv("Name:", detail.name),
        kv("Consumer:", detail.consumer_name),
        kv("Version:", str(detail.version)),
        kv("Created:", detail.created_at),
        kv("Updated:", detail.updated_at),
        "",
        theme.paint("detail_header", "Conditions:"),
    ]
    if not detail.conditions:
        lines.append("  " + theme.paint("status_unknown", "(none)"))
    for cond in detail.conditions:
        lines.append(f"  {condition_icon(cond.status, theme)} {theme.paint('detail_value', cond.type)}")
        if cond.message:
            lines.append("    " + theme.paint("help_desc", cond.message))

    lines.append("")
    lines.append(theme.paint("detail_header", f"Manifests ({len(detail.manifests)}):"))
    for manifest in detail.manifests:
        namespace = manifest.namespace or "(cluster)"
        lines.append(
            f"  • {theme.paint('detail_value', manifest.kind)}/{theme.paint('detail_value', manifest.name)}"
            f" ({theme.paint('help_desc', namespace)})"
        )

    if detail.resource_status:
        lines.append("")
        lines.append(theme.paint("detail_header", "Resource Status:"))
        for rs in detail.resource_status:
            lines.append(theme.paint("detail_key", f"  {rs.kind or 'Unknown'}/{rs.name}:"))
            for cond in rs.conditions:
                lines.append(f"    {condition_icon(cond.status, theme)} {theme.paint('detail_value', cond.type)}")

    return "\n".join(lines) + "\n"
