import io
from datetime import datetime, timezone

import pytest
from rich.console import Console

from moltbook_tui.models import SortOrder, Stats
from moltbook_tui.render import (
    format_count,
    format_number_with_commas,
    humanize_date,
    render,
    truncate,
)
from moltbook_tui.state import App, Screen

from tests.factories import (
    make_comment,
    make_leaderboard,
    make_pairings,
    make_post,
    make_posts,
    make_profile_response,
    make_recent_agents,
    make_submolt,
)

WIDTH = 140
HEIGHT = 40


def render_text(app, width=WIDTH, height=HEIGHT):
    console = Console(width=width, height=height, file=io.StringIO(), record=True, color_system=None)
    console.print(render(app, width, height))
    return console.export_text()


class TestFormatting:
    NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2026-03-01T11:59:30Z", "just now"),
            ("2026-03-01T11:15:00Z", "45m ago"),
            ("2026-03-01T09:00:00Z", "3h ago"),
            ("2026-02-25T12:00:00Z", "4d ago"),
            ("2025-12-01T12:00:00Z", "3mo ago"),
            ("2024-01-01T12:00:00Z", "2y ago"),
            ("", ""),
            ("not a date", ""),
        ],
    )
    def test_humanize_date(self, raw, expected):
        assert humanize_date(raw, now=self.NOW) == expected

    def test_format_count(self):
        assert format_count(999) == "999"
        assert format_count(1234) == "1.2K"
        assert format_count(2_500_000) == "2.5M"

    def test_format_number_with_commas(self):
        assert format_number_with_commas(1234567) == "1,234,567"

    def test_truncate(self):
        assert truncate("short", 10) == "short"
        assert truncate("a longer title", 6) == "a lon…"


class TestFrames:
    def test_feed_header_geometry(self):
        lines = render_text(App(posts=make_posts(3))).splitlines()
        assert lines[5].startswith("│ the front page of the agent internet")
        assert lines[9].index("[1] Feed") == 3
        assert lines[9].index("[2] Leaderboard") == 15
        assert lines[11].index("[N]ew") == 3
        # First post title sits on the row the mouse mapping expects.
        assert "Post p0" in lines[14]

    def test_feed_shows_posts_and_stats(self):
        app = App(posts=[make_post("A", title="Hello moltbook")], stats=Stats(1234, 56, 7890, 12))
        text = render_text(app)
        assert "Posts (New)" in text
        assert "Hello moltbook" in text
        assert "m/general • u/alpha" in text
        assert "1.2K agents" in text
        assert "Page 1" in text

    def test_feed_without_stats(self):
        assert "Loading stats..." in render_text(App())

    def test_ranked_sort_shows_time_filters(self):
        text = render_text(App(sort_order=SortOrder.TOP))
        assert "Sort: Top - Day" in text
        assert "[f] cycle" in text

    def test_submolt_feed_title(self):
        app = App(screen=Screen.SUBMOLTS, submolts=[make_submolt("memes")])
        app.open_submolt_feed()
        text = render_text(app)
        assert "m/memes (New)" in text
        assert "Esc: All posts" in text

    def test_new_post_marker_and_refresh_status(self):
        app = App(posts=make_posts(2), new_post_ids={"p1"})
        text = render_text(app)
        assert "(1 new)" in text
        assert "Refresh Off" in text

    def test_post_detail_scrolls_to_selection(self):
        comments = [make_comment(f"c{index}") for index in range(30)]
        app = App(screen=Screen.POST_DETAIL, current_post=make_post("A"), comments=comments)
        app.set_cursor(Screen.POST_DETAIL, 20)
        text = render_text(app)
        assert "Comments (30)" in text
        assert app.comment_scroll > 0
        assert "Comment c20" in text
        assert "Comment c0" not in text

    def test_collapsed_comment_summary(self):
        comments = [make_comment("a", make_comment("b"), make_comment("c"))]
        app = App(screen=Screen.POST_DETAIL, current_post=make_post("A"), comments=comments, collapsed_comments={"a"})
        assert "[+3 comments hidden]" in render_text(app)

    @pytest.mark.parametrize(
        "screen, expected",
        [
            (Screen.LEADERBOARD, "Top 10 Agents"),
            (Screen.TOP_PAIRINGS, "Top Pairings (Human + Agent)"),
            (Screen.RECENT_AGENTS, "Recent Agents (3)"),
            (Screen.SUBMOLTS, "Submolts (5) - 1 Featured"),
            (Screen.STATS, "Platform Statistics"),
            (Screen.SETTINGS, "Row Display"),
            (Screen.AGENT_PROFILE, "u/alpha"),
            (Screen.SETUP, "Enter your API key to get started"),
        ],
    )
    def test_every_screen_renders(self, screen, expected):
        app = App(
            screen=screen,
            stats=Stats(1, 2, 3, 4),
            leaderboard=make_leaderboard(5),
            top_pairings=make_pairings(3),
            recent_agents=make_recent_agents(3),
        )
        app.install_submolts([make_submolt(f"s{index}", index, featured=index == 0) for index in range(5)])
        app.install_agent_profile(make_profile_response("alpha"))
        assert expected in render_text(app)

    def test_agent_profile_loading(self):
        assert "Loading agent profile..." in render_text(App(screen=Screen.AGENT_PROFILE))

    def test_render_records_frame_size(self):
        app = App()
        render(app, 100, 30)
        assert app.last_frame_area == (100, 30)


class TestOverlays:
    def test_help_overlay(self):
        assert "Keybindings" in render_text(App(show_help=True))

    def test_error_overlay_hides_details_until_toggled(self):
        app = App(error_message="Failed to load posts: HTTP 500")
        text = render_text(app)
        assert "Something went wrong." in text
        assert "HTTP 500" not in text
        app.show_technical_error = True
        assert "HTTP 500" in render_text(app)

    def test_loading_popup(self):
        assert "Loading..." in render_text(App(is_loading=True))

    def test_background_refresh_uses_footer(self):
        text = render_text(App(is_loading=True, is_background_loading=True))
        assert "Refreshing..." in text
        assert " Loading... " not in text

    def test_agent_preview_sidebar(self):
        app = App(screen=Screen.LEADERBOARD, leaderboard=make_leaderboard(3))
        app.open_agent_preview("agent1")
        assert "Loading u/agent1" in render_text(app)
        app.is_preview_loading = False
        app.install_agent_profile(make_profile_response("agent1"))
        assert "Recent posts" in render_text(app)

    def test_debug_panel(self):
        app = App(debug_mode=True)
        app.add_debug("GET /posts")
        text = render_text(app)
        assert "Debug (` to close)" in text
        assert "GET /posts" in text

    def test_about_overlay(self):
        assert "Press 8 or Esc to close" in render_text(App(show_about=True))
