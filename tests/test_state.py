from moltbook_tui.config import RowDisplay
from moltbook_tui.models import SortOrder, TimeFilter
from moltbook_tui.state import DEBUG_LOG_MAX, App, Screen

from tests.factories import (
    make_comment,
    make_leaderboard,
    make_pairings,
    make_post,
    make_posts,
    make_profile_response,
    make_submolt,
)


class TestCursorMovement:
    def test_select_next_stops_at_last_item(self):
        app = App(posts=make_posts(3))
        for _ in range(5):
            app.select_next()
        assert app.selected_index == 2

    def test_select_previous_stops_at_zero(self):
        app = App(posts=make_posts(3))
        app.select_previous()
        assert app.selected_index == 0

    def test_empty_collection_keeps_cursor_at_zero(self):
        app = App()
        app.select_next()
        assert app.selected_index == 0

    def test_screen_without_cursor_ignores_movement(self):
        app = App(screen=Screen.STATS)
        app.select_next()
        assert app.cursor(Screen.STATS) == 0

    def test_set_cursor_clamps_to_collection(self):
        app = App(posts=make_posts(3))
        app.set_cursor(Screen.FEED, 10)
        assert app.selected_index == 2

    def test_submolt_grid_moves_by_rows_and_columns(self):
        app = App(screen=Screen.SUBMOLTS, submolts=[make_submolt(f"s{index}") for index in range(10)])
        app.select_next()
        assert app.cursor() == 4
        app.select_right()
        assert app.cursor() == 5
        app.select_next()
        assert app.cursor() == 9
        # Row three holds only two cells; moving down from 9 would leave the grid.
        app.select_next()
        assert app.cursor() == 9
        app.select_left()
        app.select_previous()
        assert app.cursor() == 4

    def test_submolt_grid_right_stops_at_last_cell(self):
        app = App(screen=Screen.SUBMOLTS, submolts=[make_submolt(f"s{index}") for index in range(6)])
        app.set_cursor(Screen.SUBMOLTS, 5)
        app.select_right()
        assert app.cursor() == 5

    def test_submolt_grid_left_stops_at_column_zero(self):
        app = App(screen=Screen.SUBMOLTS, submolts=[make_submolt(f"s{index}") for index in range(8)])
        app.set_cursor(Screen.SUBMOLTS, 4)
        app.select_left()
        assert app.cursor() == 4

    def test_selected_agent_name_per_screen(self):
        app = App(leaderboard=make_leaderboard(3), top_pairings=make_pairings(2))
        app.screen = Screen.LEADERBOARD
        app.set_cursor(Screen.LEADERBOARD, 1)
        assert app.selected_agent_name() == "agent2"
        app.screen = Screen.TOP_PAIRINGS
        assert app.selected_agent_name() == "bot1"
        app.screen = Screen.FEED
        assert app.selected_agent_name() is None


class TestFeed:
    def test_new_posts_are_those_neither_seen_nor_loaded(self):
        a, b, c = make_post("A"), make_post("B"), make_post("C")
        app = App(posts=[a, b], seen_post_ids={"A"})
        app.update_posts([b, c], now=100.0)
        assert app.new_post_ids == {"C"}
        assert app.last_refresh == 100.0

    def test_opening_a_post_marks_it_seen(self):
        app = App(posts=[make_post("A")], new_post_ids={"A"})
        app.open_selected_post()
        assert "A" in app.seen_post_ids
        assert "A" not in app.new_post_ids
        assert app.screen == Screen.POST_DETAIL

    def test_update_posts_clamps_cursor(self):
        app = App(posts=make_posts(10))
        app.set_cursor(Screen.FEED, 9)
        app.update_posts(make_posts(4))
        assert app.selected_index == 3

    def test_previous_page_selects_last_post_on_load(self):
        app = App(current_page=2)
        assert app.prev_page() is True
        app.update_posts(make_posts(25))
        assert app.current_page == 1
        assert app.selected_index == 24
        assert app.select_bottom_on_load is False

    def test_bottom_selection_applies_to_one_load_only(self):
        app = App(current_page=1)
        app.prev_page()
        app.update_posts(make_posts(25))
        app.set_cursor(Screen.FEED, 3)
        app.update_posts(make_posts(25))
        assert app.selected_index == 3

    def test_previous_page_on_first_page_is_a_no_op(self):
        app = App()
        assert app.prev_page() is False
        assert app.select_bottom_on_load is False

    def test_next_page_requires_more_posts(self):
        app = App(has_more_posts=False)
        assert app.next_page() is False
        app.has_more_posts = True
        assert app.next_page() is True
        assert app.current_page == 1

    def test_ranked_sort_promotes_hour_to_day(self):
        app = App(time_filter=TimeFilter.HOUR)
        app.set_sort_order(SortOrder.TOP)
        assert app.time_filter == TimeFilter.DAY
        assert app.sort_display() == "Top - Day"
        assert app.time_filter_for_api() == TimeFilter.DAY

    def test_ranked_sort_keeps_wider_filter(self):
        app = App(sort_order=SortOrder.NEW, time_filter=TimeFilter.WEEK)
        app.set_sort_order(SortOrder.TOP)
        assert app.time_filter == TimeFilter.WEEK
        assert app.time_filter_for_api() == TimeFilter.WEEK
        assert app.sort_display() == "Top - Week"

    def test_new_sort_sends_no_time_filter(self):
        app = App(sort_order=SortOrder.NEW, time_filter=TimeFilter.WEEK)
        assert app.time_filter_for_api() is None
        assert app.sort_display() == "New"

    def test_time_filter_cycles_both_ways(self):
        app = App(time_filter=TimeFilter.ALL)
        app.cycle_time_filter()
        assert app.time_filter == TimeFilter.HOUR
        app.cycle_time_filter_reverse()
        assert app.time_filter == TimeFilter.ALL

    def test_seconds_until_refresh(self):
        app = App(refresh_interval_secs=30, last_refresh=100.0)
        assert app.seconds_until_refresh(now=110.5) == 20
        assert app.seconds_until_refresh(now=200.0) == 0

    def test_refresh_due_only_when_idle_on_feed(self):
        app = App(refresh_interval_secs=10, last_refresh=0.0)
        assert app.refresh_due(now=20.0) is True
        app.is_loading = True
        assert app.refresh_due(now=20.0) is False
        app.is_loading = False
        app.screen = Screen.STATS
        assert app.refresh_due(now=20.0) is False
        app.screen = Screen.FEED
        app.refresh_interval_secs = 0
        assert app.refresh_due(now=20.0) is False


class TestNavigation:
    def test_back_from_post_opened_in_feed_returns_to_feed(self):
        app = App(posts=[make_post("A")])
        app.open_selected_post()
        app.go_back()
        assert app.screen == Screen.FEED
        assert app.current_post is None

    def test_back_from_agent_post_returns_to_profile(self):
        app = App(screen=Screen.AGENT_PROFILE)
        app.install_agent_profile(make_profile_response("alpha"))
        app.open_agent_post()
        app.go_back()
        assert app.screen == Screen.AGENT_PROFILE
        assert app.agent_profile is not None

    def test_back_from_profile_returns_to_origin_screen(self):
        app = App(screen=Screen.TOP_PAIRINGS)
        app.open_agent_profile()
        app.go_back()
        assert app.screen == Screen.TOP_PAIRINGS
        assert app.agent_profile is None

    def test_back_from_profile_defaults_to_leaderboard(self):
        app = App(screen=Screen.AGENT_PROFILE)
        app.go_back()
        assert app.screen == Screen.LEADERBOARD

    def test_back_from_submolt_feed_clears_filter(self):
        app = App(screen=Screen.SUBMOLTS, submolts=[make_submolt("memes")])
        app.open_submolt_feed()
        assert app.screen == Screen.FEED
        app.go_back()
        assert app.current_submolt is None
        assert app.should_quit is False
        app.go_back()
        assert app.should_quit is True

    def test_back_from_other_screens_goes_to_feed(self):
        app = App(screen=Screen.SETTINGS)
        app.go_back()
        assert app.screen == Screen.FEED

    def test_leaving_post_detail_clears_comments(self):
        app = App(posts=[make_post("A")])
        app.open_selected_post()
        app.install_comments(make_post("A"), [make_comment("c1")])
        app.switch_screen(Screen.STATS)
        assert app.comments == []
        assert app.current_post is None


class TestCollections:
    def test_submolts_sorted_featured_first_then_subscribers(self):
        app = App()
        app.install_submolts(
            [
                make_submolt("small", 5),
                make_submolt("big", 500),
                make_submolt("picked", 1, featured=True),
            ]
        )
        assert [submolt.name for submolt in app.submolts] == ["picked", "big", "small"]

    def test_comment_collapse_hides_replies(self):
        app = App(comments=[make_comment("a", make_comment("b")), make_comment("c")])
        assert app.collection_length(Screen.POST_DETAIL) == 3
        app.toggle_comment_collapse("a")
        assert app.visible_comment_ids() == ["a", "c"]
        app.toggle_comment_collapse("a")
        assert not app.is_comment_collapsed("a")


class TestFlags:
    def test_debug_log_is_capped(self):
        app = App()
        for index in range(DEBUG_LOG_MAX + 20):
            app.add_debug(f"message {index}")
        assert len(app.debug_log) == DEBUG_LOG_MAX
        assert app.debug_log[-1].endswith(f"message {DEBUG_LOG_MAX + 19}")
        assert app.debug_log[0].startswith("[")

    def test_spinner_wraps(self):
        app = App(spinner_frame=9)
        app.advance_spinner()
        assert app.spinner_frame == 0

    def test_loading_indicator_priority(self):
        app = App()
        assert app.loading_indicator() == "none"
        app.is_loading = True
        assert app.loading_indicator() == "modal"
        app.is_background_loading = True
        assert app.loading_indicator() == "background"
        app.is_preview_loading = True
        assert app.loading_indicator() == "preview"

    def test_set_error_clears_loading(self):
        app = App(is_loading=True, is_background_loading=True, is_preview_loading=True)
        app.set_error("boom")
        assert app.error_message == "boom"
        assert app.loading_indicator() == "none"

    def test_refresh_interval_bounds(self):
        app = App(refresh_interval_secs=55)
        app.adjust_refresh_interval(10)
        assert app.refresh_interval_secs == 60
        app.adjust_refresh_interval(-100)
        assert app.refresh_interval_secs == 0

    def test_toggle_auto_refresh(self):
        app = App()
        app.toggle_auto_refresh()
        assert app.refresh_interval_secs == 30
        app.toggle_auto_refresh()
        assert app.refresh_interval_secs == 0

    def test_change_setting_cycles_options(self):
        app = App(screen=Screen.SETTINGS, row_display=RowDisplay.COMFORTABLE)
        assert app.change_setting(forward=True) is True
        assert app.row_display == RowDisplay.COMPACT
        app.set_cursor(Screen.SETTINGS, 1)
        app.refresh_interval_secs = 120
        app.change_setting(forward=True)
        assert app.refresh_interval_secs == 0

    def test_change_setting_with_unlisted_interval_starts_from_default(self):
        app = App(screen=Screen.SETTINGS, refresh_interval_secs=45)
        app.set_cursor(Screen.SETTINGS, 1)
        app.change_setting(forward=True)
        assert app.refresh_interval_secs == 30

    def test_preview_open_and_close(self):
        app = App()
        app.open_agent_preview("alpha")
        assert app.show_agent_preview and app.is_preview_loading
        app.close_agent_preview()
        assert app.preview_agent_name is None
        assert not app.is_preview_loading
