from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from moltbook_tui import comments as comment_tree
from moltbook_tui.config import REFRESH_INTERVAL_CHOICES, RowDisplay
from moltbook_tui.models import (
    TIME_FILTER_ORDER,
    AgentProfile,
    AgentProfileResponse,
    Comment,
    LeaderboardAgent,
    Post,
    RecentAgent,
    SortOrder,
    Stats,
    Submolt,
    TimeFilter,
    TopPairing,
    sort_submolts,
)

DEBUG_LOG_MAX = 100
SPINNER_FRAMES = 10
GRID_COLUMNS = 4
SETTINGS_COUNT = 2
AUTO_REFRESH_SECS = 30
MAX_REFRESH_INTERVAL_SECS = 60


class Screen(Enum):
    SETUP = "setup"
    FEED = "feed"
    POST_DETAIL = "post_detail"
    STATS = "stats"
    LEADERBOARD = "leaderboard"
    TOP_PAIRINGS = "top_pairings"
    RECENT_AGENTS = "recent_agents"
    SUBMOLTS = "submolts"
    SETTINGS = "settings"
    AGENT_PROFILE = "agent_profile"


CURSOR_SCREENS = (
    Screen.FEED,
    Screen.POST_DETAIL,
    Screen.LEADERBOARD,
    Screen.TOP_PAIRINGS,
    Screen.RECENT_AGENTS,
    Screen.SUBMOLTS,
    Screen.SETTINGS,
    Screen.AGENT_PROFILE,
)

# Screens reachable with the number keys / nav tabs.
NUMBERED_SCREENS = {
    1: Screen.FEED,
    2: Screen.LEADERBOARD,
    3: Screen.TOP_PAIRINGS,
    4: Screen.RECENT_AGENTS,
    5: Screen.SUBMOLTS,
    6: Screen.STATS,
    7: Screen.SETTINGS,
}


def clamp_index(index: int, length: int) -> int:
    if length <= 0:
        return 0
    return max(0, min(index, length - 1))


@dataclass
class App:
    screen: Screen = Screen.FEED
    cursors: dict[Screen, int] = field(default_factory=lambda: {screen: 0 for screen in CURSOR_SCREENS})

    posts: list[Post] = field(default_factory=list)
    sort_order: SortOrder = SortOrder.NEW
    time_filter: TimeFilter = TimeFilter.DAY
    current_page: int = 0
    has_more_posts: bool = False
    select_bottom_on_load: bool = False
    seen_post_ids: set[str] = field(default_factory=set)
    new_post_ids: set[str] = field(default_factory=set)
    last_refresh: float | None = None
    refresh_interval_secs: int = 0

    current_post: Post | None = None
    comments: list[Comment] = field(default_factory=list)
    comment_scroll: int = 0
    collapsed_comments: set[str] = field(default_factory=set)

    stats: Stats | None = None
    leaderboard: list[LeaderboardAgent] = field(default_factory=list)
    top_pairings: list[TopPairing] = field(default_factory=list)
    recent_agents: list[RecentAgent] = field(default_factory=list)
    submolts: list[Submolt] = field(default_factory=list)
    submolts_scroll_row: int = 0
    current_submolt: Submolt | None = None

    agent_profile: AgentProfile | None = None
    agent_posts: list[Post] = field(default_factory=list)
    preview_agent_name: str | None = None
    previous_screen: Screen | None = None

    is_loading: bool = False
    is_background_loading: bool = False
    is_preview_loading: bool = False
    spinner_frame: int = 0

    show_help: bool = False
    show_about: bool = False
    show_submolt_detail: bool = False
    show_agent_preview: bool = False
    error_message: str | None = None
    show_technical_error: bool = False
    should_quit: bool = False

    api_key_input: str = ""
    setup_error: str | None = None

    row_display: RowDisplay = RowDisplay.NORMAL
    debug_mode: bool = False
    debug_log: list[str] = field(default_factory=list)
    last_frame_area: tuple[int, int] | None = None

    # -- cursors ---------------------------------------------------------

    def cursor(self, screen: Screen | None = None) -> int:
        return self.cursors.get(screen or self.screen, 0)

    def set_cursor(self, screen: Screen, index: int) -> None:
        self.cursors[screen] = clamp_index(index, self.collection_length(screen))

    @property
    def selected_index(self) -> int:
        return self.cursors[Screen.FEED]

    @property
    def selected_comment_index(self) -> int:
        return self.cursors[Screen.POST_DETAIL]

    def collection_length(self, screen: Screen) -> int:
        if screen == Screen.FEED:
            return len(self.posts)
        if screen == Screen.POST_DETAIL:
            return len(self.visible_comment_ids())
        if screen == Screen.LEADERBOARD:
            return len(self.leaderboard)
        if screen == Screen.TOP_PAIRINGS:
            return len(self.top_pairings)
        if screen == Screen.RECENT_AGENTS:
            return len(self.recent_agents)
        if screen == Screen.SUBMOLTS:
            return len(self.submolts)
        if screen == Screen.SETTINGS:
            return SETTINGS_COUNT
        if screen == Screen.AGENT_PROFILE:
            return len(self.agent_posts)
        return 0

    def select_next(self) -> None:
        screen = self.screen
        if screen not in self.cursors:
            return
        length = self.collection_length(screen)
        index = self.cursors[screen]
        if screen == Screen.SUBMOLTS:
            if index + GRID_COLUMNS < length:
                self.cursors[screen] = index + GRID_COLUMNS
            return
        if length > 0 and index < length - 1:
            self.cursors[screen] = index + 1

    def select_previous(self) -> None:
        screen = self.screen
        if screen not in self.cursors:
            return
        index = self.cursors[screen]
        if screen == Screen.SUBMOLTS:
            if index >= GRID_COLUMNS:
                self.cursors[screen] = index - GRID_COLUMNS
            return
        if index > 0:
            self.cursors[screen] = index - 1

    def select_left(self) -> None:
        if self.screen != Screen.SUBMOLTS:
            return
        index = self.cursors[Screen.SUBMOLTS]
        if index % GRID_COLUMNS > 0:
            self.cursors[Screen.SUBMOLTS] = index - 1

    def select_right(self) -> None:
        if self.screen != Screen.SUBMOLTS:
            return
        index = self.cursors[Screen.SUBMOLTS]
        if index % GRID_COLUMNS < GRID_COLUMNS - 1 and index + 1 < len(self.submolts):
            self.cursors[Screen.SUBMOLTS] = index + 1

    def selected_post(self) -> Post | None:
        index = self.cursors[Screen.FEED]
        if 0 <= index < len(self.posts):
            return self.posts[index]
        return None

    def selected_submolt(self) -> Submolt | None:
        index = self.cursors[Screen.SUBMOLTS]
        if 0 <= index < len(self.submolts):
            return self.submolts[index]
        return None

    def selected_agent_post(self) -> Post | None:
        index = self.cursors[Screen.AGENT_PROFILE]
        if 0 <= index < len(self.agent_posts):
            return self.agent_posts[index]
        return None

    def selected_agent_name(self) -> str | None:
        index = self.cursor()
        if self.screen == Screen.LEADERBOARD and 0 <= index < len(self.leaderboard):
            return self.leaderboard[index].name
        if self.screen == Screen.TOP_PAIRINGS and 0 <= index < len(self.top_pairings):
            return self.top_pairings[index].bot_name
        if self.screen == Screen.RECENT_AGENTS and 0 <= index < len(self.recent_agents):
            return self.recent_agents[index].name
        return None

    # -- comments --------------------------------------------------------

    def visible_comment_ids(self) -> list[str]:
        return comment_tree.visible_comment_ids(self.comments, self.collapsed_comments)

    def selected_comment_id(self) -> str | None:
        return comment_tree.selected_comment_id(
            self.comments,
            self.collapsed_comments,
            self.cursors[Screen.POST_DETAIL],
        )

    def toggle_comment_collapse(self, comment_id: str) -> None:
        if comment_id in self.collapsed_comments:
            self.collapsed_comments.discard(comment_id)
        else:
            self.collapsed_comments.add(comment_id)

    def is_comment_collapsed(self, comment_id: str) -> bool:
        return comment_id in self.collapsed_comments

    def _clear_post_detail(self) -> None:
        self.current_post = None
        self.comments = []
        self.comment_scroll = 0
        self.cursors[Screen.POST_DETAIL] = 0
        self.collapsed_comments.clear()

    # -- navigation ------------------------------------------------------

    def open_selected_post(self) -> Post | None:
        post = self.selected_post()
        if post is None:
            return None
        self.new_post_ids.discard(post.id)
        self.seen_post_ids.add(post.id)
        self._clear_post_detail()
        self.current_post = post
        self.previous_screen = None
        self.screen = Screen.POST_DETAIL
        return post

    def open_agent_post(self) -> Post | None:
        post = self.selected_agent_post()
        if post is None:
            return None
        self._clear_post_detail()
        self.current_post = post
        self.previous_screen = Screen.AGENT_PROFILE
        self.screen = Screen.POST_DETAIL
        return post

    def open_agent_profile(self, from_preview: bool = False) -> None:
        self.previous_screen = self.screen
        self.screen = Screen.AGENT_PROFILE
        if not from_preview:
            self.agent_profile = None
            self.agent_posts = []
            self.cursors[Screen.AGENT_PROFILE] = 0
        self.close_agent_preview()

    def open_submolt_feed(self) -> Submolt | None:
        submolt = self.selected_submolt()
        if submolt is None:
            return None
        self.current_submolt = submolt
        self.screen = Screen.FEED
        self.current_page = 0
        self.cursors[Screen.FEED] = 0
        return submolt

    def switch_screen(self, screen: Screen) -> None:
        if self.screen == Screen.POST_DETAIL and screen != Screen.POST_DETAIL:
            self._clear_post_detail()
        self.screen = screen

    def go_back(self) -> None:
        screen = self.screen
        if screen == Screen.POST_DETAIL:
            if self.previous_screen == Screen.AGENT_PROFILE:
                self.screen = Screen.AGENT_PROFILE
                self.previous_screen = None
            else:
                self.screen = Screen.FEED
            self._clear_post_detail()
        elif screen == Screen.SETUP:
            self.should_quit = True
        elif screen == Screen.FEED:
            if self.current_submolt is not None:
                self.current_submolt = None
            else:
                self.should_quit = True
        elif screen == Screen.AGENT_PROFILE:
            self.screen = self.previous_screen or Screen.LEADERBOARD
            self.previous_screen = None
            self.agent_profile = None
            self.agent_posts = []
            self.cursors[Screen.AGENT_PROFILE] = 0
        else:
            self.screen = Screen.FEED

    # -- feed ------------------------------------------------------------

    def update_posts(self, posts: list[Post], now: float | None = None) -> None:
        current_ids = {post.id for post in self.posts}
        for post in posts:
            if post.id not in current_ids and post.id not in self.seen_post_ids:
                self.new_post_ids.add(post.id)

        self.posts = list(posts)
        self.last_refresh = time.monotonic() if now is None else now

        if self.select_bottom_on_load and self.posts:
            self.cursors[Screen.FEED] = len(self.posts) - 1
            self.select_bottom_on_load = False
        else:
            self.cursors[Screen.FEED] = clamp_index(self.cursors[Screen.FEED], len(self.posts))

    def sort_display(self) -> str:
        if self.sort_order == SortOrder.NEW:
            return SortOrder.NEW.label
        return f"{self.sort_order.label} - {self.time_filter.label}"

    def time_filter_for_api(self) -> TimeFilter | None:
        if self.sort_order == SortOrder.NEW:
            return None
        return self.time_filter

    def set_sort_order(self, order: SortOrder) -> None:
        self.sort_order = order
        # Hour is too narrow to pair with the ranked sorts.
        if order != SortOrder.NEW and self.time_filter == TimeFilter.HOUR:
            self.time_filter = TimeFilter.DAY

    def cycle_time_filter(self) -> None:
        index = TIME_FILTER_ORDER.index(self.time_filter)
        self.time_filter = TIME_FILTER_ORDER[(index + 1) % len(TIME_FILTER_ORDER)]

    def cycle_time_filter_reverse(self) -> None:
        index = TIME_FILTER_ORDER.index(self.time_filter)
        self.time_filter = TIME_FILTER_ORDER[(index - 1) % len(TIME_FILTER_ORDER)]

    def next_page(self) -> bool:
        if not self.has_more_posts:
            return False
        self.current_page += 1
        self.cursors[Screen.FEED] = 0
        return True

    def prev_page(self) -> bool:
        if self.current_page <= 0:
            return False
        self.current_page -= 1
        self.select_bottom_on_load = True
        return True

    def reset_paging(self) -> None:
        self.current_page = 0
        self.cursors[Screen.FEED] = 0
        self.select_bottom_on_load = False

    def seconds_until_refresh(self, now: float | None = None) -> int:
        if self.last_refresh is None:
            return self.refresh_interval_secs
        current = time.monotonic() if now is None else now
        elapsed = int(max(0.0, current - self.last_refresh))
        return max(0, self.refresh_interval_secs - elapsed)

    def refresh_due(self, now: float | None = None) -> bool:
        return (
            self.screen == Screen.FEED
            and not self.is_loading
            and self.refresh_interval_secs > 0
            and self.seconds_until_refresh(now) == 0
        )

    # -- collections -----------------------------------------------------

    def install_comments(self, post: Post | None, comments: list[Comment]) -> None:
        if post is not None and self.current_post is not None and post.id == self.current_post.id:
            self.current_post = post
        self.comments = list(comments)
        self.set_cursor(Screen.POST_DETAIL, self.cursors[Screen.POST_DETAIL])

    def install_leaderboard(self, agents: list[LeaderboardAgent]) -> None:
        self.leaderboard = list(agents)
        self.set_cursor(Screen.LEADERBOARD, self.cursors[Screen.LEADERBOARD])

    def install_top_pairings(self, pairings: list[TopPairing]) -> None:
        self.top_pairings = list(pairings)
        self.set_cursor(Screen.TOP_PAIRINGS, self.cursors[Screen.TOP_PAIRINGS])

    def install_recent_agents(self, agents: list[RecentAgent]) -> None:
        self.recent_agents = list(agents)
        self.set_cursor(Screen.RECENT_AGENTS, self.cursors[Screen.RECENT_AGENTS])

    def install_submolts(self, submolts: list[Submolt]) -> None:
        self.submolts = sort_submolts(submolts)
        self.set_cursor(Screen.SUBMOLTS, self.cursors[Screen.SUBMOLTS])

    def install_agent_profile(self, response: AgentProfileResponse) -> None:
        self.agent_profile = response.agent
        self.agent_posts = list(response.recent_posts)
        self.cursors[Screen.AGENT_PROFILE] = 0

    # -- modals and flags ------------------------------------------------

    def open_agent_preview(self, name: str) -> None:
        self.preview_agent_name = name
        self.agent_profile = None
        self.agent_posts = []
        self.show_agent_preview = True
        self.is_preview_loading = True

    def close_agent_preview(self) -> None:
        self.show_agent_preview = False
        self.preview_agent_name = None
        self.is_preview_loading = False

    def set_error(self, message: str) -> None:
        self.error_message = message
        self.show_technical_error = False
        self.is_loading = False
        self.is_background_loading = False
        if self.show_agent_preview:
            self.close_agent_preview()
        self.is_preview_loading = False

    def dismiss_error(self) -> None:
        self.error_message = None
        self.show_technical_error = False

    def toggle_help(self) -> None:
        self.show_help = not self.show_help

    def toggle_about(self) -> None:
        self.show_about = not self.show_about

    def toggle_debug(self) -> None:
        self.debug_mode = not self.debug_mode

    def advance_spinner(self) -> None:
        self.spinner_frame = (self.spinner_frame + 1) % SPINNER_FRAMES

    def loading_indicator(self) -> str:
        if self.is_preview_loading:
            return "preview"
        if self.is_loading and self.is_background_loading:
            return "background"
        if self.is_loading:
            return "modal"
        return "none"

    def add_debug(self, message: str) -> None:
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        self.debug_log.append(f"[{timestamp}] {message}")
        if len(self.debug_log) > DEBUG_LOG_MAX:
            self.debug_log = self.debug_log[-DEBUG_LOG_MAX:]

    # -- settings --------------------------------------------------------

    def adjust_refresh_interval(self, delta: int) -> None:
        self.refresh_interval_secs = max(0, min(MAX_REFRESH_INTERVAL_SECS, self.refresh_interval_secs + delta))

    def toggle_auto_refresh(self) -> None:
        self.refresh_interval_secs = 0 if self.refresh_interval_secs else AUTO_REFRESH_SECS

    def change_setting(self, forward: bool) -> bool:
        selected = self.cursors[Screen.SETTINGS]
        if selected == 0:
            self.row_display = self.row_display.cycle_next() if forward else self.row_display.cycle_prev()
            return True
        if selected == 1:
            choices = REFRESH_INTERVAL_CHOICES
            try:
                index = choices.index(self.refresh_interval_secs)
            except ValueError:
                index = 1
            step = 1 if forward else -1
            self.refresh_interval_secs = choices[(index + step) % len(choices)]
            return True
        return False
