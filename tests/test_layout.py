"""Tests for workdeck.dashboard.layout (geometry and hit-testing)."""

import pytest

from workdeck.dashboard.layout import Hit, Layout, Panel, ensure_visible, hit_test, list_index


@pytest.fixture
def layout():
    # 100x31: body 30 rows, left column 40, consumers 12 rows, work 18 rows
    return Layout.compute(100, 31)


class TestLayoutCompute:
    def test_column_split(self, layout):
        assert layout.left_width == 40
        assert layout.right_width == 60

    def test_row_split(self, layout):
        assert layout.body_height == 30
        assert layout.consumers_height == 12
        assert layout.work_height == 18

    def test_visible_rows(self, layout):
        assert layout.consumer_rows == 9
        assert layout.work_rows == 14
        assert layout.viewport_height == 25

    def test_tiny_terminal_has_no_list_rows(self):
        tiny = Layout.compute(5, 3)
        assert tiny.consumer_rows == 0
        assert tiny.work_rows == 0
        assert tiny.viewport_height == 1

    def test_short_terminal_counts_only_drawn_rows(self):
        # 80x10: consumers box is border, title, border; work box has 2 list rows
        short = Layout.compute(80, 10)
        assert short.consumers_height == 3
        assert short.consumer_rows == 0
        assert short.work_rows == 2


class TestPanelCycle:
    def test_next_wraps(self):
        assert Panel.CONSUMERS.next() is Panel.WORK
        assert Panel.DETAIL.next() is Panel.CONSUMERS

    def test_previous_wraps(self):
        assert Panel.CONSUMERS.previous() is Panel.DETAIL


class TestHitTest:
    def test_first_consumer_row(self, layout):
        assert hit_test(layout, 5, 2) == Hit(Panel.CONSUMERS, 0)

    def test_consumer_title_is_chrome(self, layout):
        assert hit_test(layout, 5, 1) == Hit(Panel.CONSUMERS)

    def test_consumer_bottom_border_is_chrome(self, layout):
        assert hit_test(layout, 5, 11) == Hit(Panel.CONSUMERS)

    def test_border_is_chrome_when_no_rows_fit(self):
        # 80x10: row 2 is the consumers panel bottom border
        short = Layout.compute(80, 10)
        assert hit_test(short, 5, 2) == Hit(Panel.CONSUMERS)
        assert hit_test(short, 5, 6) == Hit(Panel.WORK, 0)
        assert hit_test(short, 5, 8) == Hit(Panel.WORK)

    def test_work_row_accounts_for_filter_row(self, layout):
        # work panel starts at y=12; border, title, filter take 3 rows
        assert hit_test(layout, 5, 15) == Hit(Panel.WORK, 0)
        assert hit_test(layout, 5, 20) == Hit(Panel.WORK, 5)

    def test_above_work_header_is_no_selection(self, layout):
        assert hit_test(layout, 5, 14) == Hit(Panel.WORK)

    def test_right_column_is_detail(self, layout):
        assert hit_test(layout, 40, 3) == Hit(Panel.DETAIL)

    def test_help_bar_is_outside(self, layout):
        assert hit_test(layout, 5, 30) is None

    def test_negative_coordinates(self, layout):
        assert hit_test(layout, -1, 3) is None


class TestListIndex:
    def test_adds_scroll_offset(self):
        assert list_index(5, 10, 30) == 15

    def test_past_last_item(self):
        assert list_index(3, 0, 3) is None

    def test_chrome_row(self):
        assert list_index(None, 0, 3) is None

    def test_click_scenario_with_offset(self, layout):
        hit = hit_test(layout, 10, 12 + 3 + 4)
        assert list_index(hit.row, 7, 40) == 11


class TestEnsureVisible:
    def test_scrolls_up(self):
        assert ensure_visible(2, 5, 10) == 2

    def test_scrolls_down(self):
        assert ensure_visible(15, 0, 10) == 6

    def test_inside_window_unchanged(self):
        assert ensure_visible(4, 2, 10) == 2

    def test_zero_rows_follows_cursor(self):
        assert ensure_visible(3, 0, 0) == 3
        assert ensure_visible(0, 2, 0) == 0
