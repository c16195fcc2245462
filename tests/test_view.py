"""Tests for workdeck.dashboard.view (frame composition)."""

from dataclasses import replace

import pytest

from workdeck.dashboard.ansi import strip_ansi, visible_width
from workdeck.dashboard.events import DetailLoaded, KeyPressed
from workdeck.dashboard.layout import Panel
from workdeck.dashboard.state import AppState, Capture, ConfirmDelete, Screen
from workdeck.dashboard.update import update
from workdeck.dashboard.view import render_frame
from workdeck.config import ClientConfig
from workdeck.models import bundle_to_detail, bundle_to_raw_map, serialize_detail, summary_from_wire


def lines_of(state):
    return strip_ansi(render_frame(state)).split("\n")


def text_of(state):
    return strip_ansi(render_frame(state))


@pytest.fixture
def with_detail(main_state, bundle_factory):
    wire = bundle_factory(bundle_id="w-1", name="nginx-a")
    raw_json, raw_yaml = serialize_detail(bundle_to_raw_map(wire))
    event = DetailLoaded(summary_from_wire(wire), bundle_to_detail(wire), raw_json, raw_yaml)
    state, _ = update(main_state, event)
    return state


class TestFrameShape:
    def test_exact_dimensions(self, main_state):
        frame = render_frame(main_state)
        lines = frame.split("\n")
        assert len(lines) == main_state.height
        assert all(visible_width(line) == main_state.width for line in lines)

    def test_colored_frame_has_same_shape(self, main_state):
        from workdeck.dashboard.theme import DEFAULT_THEME

        lines = render_frame(replace(main_state, theme=DEFAULT_THEME)).split("\n")
        assert len(lines) == main_state.height
        assert all(visible_width(line) == main_state.width for line in lines)

    def test_unsized_terminal_renders_nothing(self, main_state):
        assert render_frame(replace(main_state, width=0, height=0)) == ""

    def test_too_small(self, main_state):
        lines = lines_of(replace(main_state, width=30, height=5))
        assert lines[0].startswith("Terminal too small")
        assert len(lines) == 5


class TestConnectScreen:
    def test_form_fields(self, plain_theme):
        state = AppState.initial(ClientConfig(http_endpoint="http://api:8000", token="abc"), plain_theme)
        text = text_of(replace(state, width=100, height=31))
        assert "Connect to backend" in text
        assert "http://api:8000█" in text
        assert "•••" in text
        assert "abc" not in text
        assert "[ ] Skip TLS verification" in text
        assert " Connect " in text

    def test_connecting_spinner(self, plain_theme):
        state = AppState.initial(ClientConfig(), plain_theme)
        state = replace(state, width=100, height=31, connect=replace(state.connect, loading=True))
        assert "⠋ Loading..." in text_of(state)


class TestMainScreen:
    def test_rows_line_up_with_hit_test(self, main_state):
        lines = lines_of(main_state)
        assert "cluster1" in lines[2]
        assert "cluster2" in lines[3]
        assert "nginx-a" in lines[15]
        assert "nginx-b" in lines[16]
        assert "redis-1" in lines[17]

    def test_titles_and_icons(self, main_state):
        text = text_of(main_state)
        assert "Consumers (2)" in text
        assert "cluster1 ●" in text
        assert "Work · cluster1 (3)" in text
        assert "✓ nginx-a" in text
        assert "? nginx-b" in text
        assert "[Formatted]" in text

    def test_filter_row(self, main_state):
        assert "/ to filter" in text_of(main_state)
        state, _ = update(main_state, KeyPressed("/"))
        state, _ = update(state, KeyPressed("n"))
        text = text_of(state)
        assert "/n█" in text
        assert "Work · cluster1 (2/3)" in text

    def test_detail_placeholder(self, main_state):
        assert "Select a work item" in text_of(main_state)

    def test_detail_content(self, with_detail):
        lines = lines_of(with_detail)
        assert lines[4][40:].strip().startswith("│ Name:")
        assert "Manifests (1):" in text_of(with_detail)

    def test_watch_badges(self, main_state):
        text = text_of(replace(main_state, watching=True))
        assert text.count("[WATCH]") == 2

    def test_detail_title_uses_watch_style(self, main_state):
        from workdeck.dashboard.theme import DEFAULT_THEME

        title = DEFAULT_THEME.paint("panel_title_watch", "Detail")
        colored = replace(main_state, theme=DEFAULT_THEME)
        assert title in render_frame(replace(colored, watching=True))
        assert title not in render_frame(colored)

    def test_search_bar_counts(self, with_detail):
        state = replace(with_detail, focus=Panel.DETAIL)
        for key in ("/", "n", "g", "i", "n", "x"):
            state, _ = update(state, KeyPressed(key))
        assert "/nginx█  1/2" in text_of(state)

    def test_search_bar_no_matches(self, with_detail):
        state = replace(with_detail, focus=Panel.DETAIL)
        for key in ("/", "q", "q", "enter"):
            state, _ = update(state, KeyPressed(key))
        assert "/qq  (no matches)" in text_of(state)

    def test_help_bar_follows_focus(self, main_state):
        assert "/ filter" in lines_of(main_state)[-1]
        assert "n/N next/prev" in lines_of(replace(main_state, focus=Panel.DETAIL))[-1]
        assert "esc clear" in lines_of(replace(main_state, capture=Capture.FILTER))[-1]

    def test_status_and_error_lines(self, main_state):
        assert "Watch mode ON" in text_of(replace(main_state, status_msg="Watch mode ON"))
        assert "✗ boom" in text_of(replace(main_state, error_msg="boom", status_msg="ignored"))

    def test_loading_spinner(self, main_state):
        assert "⠙ Loading..." in text_of(replace(main_state, loading=True, spinner_idx=1))


class TestModals:
    def test_create_modal(self, main_state):
        state = replace(main_state, capture=Capture.CREATE_CONSUMER)
        text = text_of(state)
        assert "Create consumer" in text
        assert "Name: █" in text
        assert "nginx-a" not in text

    def test_confirm_modal(self, main_state):
        confirm = ConfirmDelete("work", "w-1", "nginx-a", 'Delete work "nginx-a"?')
        state = replace(main_state, capture=Capture.CONFIRM_DELETE, confirm=confirm)
        text = text_of(state)
        assert "Confirm delete" in text
        assert 'Delete work "nginx-a"?' in text
        assert "y confirm" in text

    def test_modal_shows_validation_error(self, main_state):
        state = replace(main_state, capture=Capture.CREATE_CONSUMER, error_msg="consumer name must not be empty")
        assert "✗ consumer name must not be empty" in text_of(state)

    def test_connect_screen_ignores_main_state(self, main_state):
        state = replace(main_state, screen=Screen.CONNECT)
        assert "Connect to backend" in text_of(state)
