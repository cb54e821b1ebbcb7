from __future__ import annotations

import subprocess
import sys
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from moltbook_tui import events
from moltbook_tui.config import AppConfig, default_config_path, save_api_key, save_settings
from moltbook_tui.events import Event, EventBus
from moltbook_tui.gateway import POSTS_LIMIT, MoltbookClient
from moltbook_tui.models import SortOrder
from moltbook_tui.mouse import action_at
from moltbook_tui.state import NUMBERED_SCREENS, App, Screen

WEB_BASE_URL = "https://www.moltbook.com"

SORT_KEYS = {
    "n": SortOrder.NEW,
    "t": SortOrder.TOP,
    "d": SortOrder.DISCUSSED,
    "R": SortOrder.RANDOM,
    "s": SortOrder.RANDOM,
}
DOWN_KEYS = {"j", "DOWN"}
UP_KEYS = {"k", "UP"}
LEFT_KEYS = {"h", "LEFT"}
RIGHT_KEYS = {"l", "f", "RIGHT"}

SCREEN_NAMES = {
    Screen.FEED: "Feed",
    Screen.LEADERBOARD: "Leaderboard",
    Screen.TOP_PAIRINGS: "TopPairings",
    Screen.RECENT_AGENTS: "RecentAgents",
    Screen.SUBMOLTS: "Submolts",
    Screen.STATS: "Stats",
    Screen.SETTINGS: "Settings",
}


@dataclass
class LoopContext:
    client: MoltbookClient
    bus: EventBus
    config: AppConfig

    @property
    def config_path(self) -> Path:
        return self.config.config_path or default_config_path()


def open_link(url: str) -> str:
    clean_url = url.strip()
    if not clean_url:
        return "No URL available for the current selection."
    try:
        if sys.platform == "darwin":
            subprocess.Popen(["open", clean_url], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        else:
            webbrowser.open(clean_url, new=2)
        return ""
    except (OSError, webbrowser.Error) as exc:
        return f"Failed to open link: {exc}"


def item_url(app: App) -> str | None:
    screen = app.screen
    if screen == Screen.FEED:
        post = app.selected_post()
        return f"{WEB_BASE_URL}/posts/{post.id}" if post else None
    if screen == Screen.POST_DETAIL:
        post = app.current_post
        return f"{WEB_BASE_URL}/posts/{post.id}" if post else None
    if screen == Screen.AGENT_PROFILE:
        profile = app.agent_profile
        return f"{WEB_BASE_URL}/agent/{profile.name}" if profile else None
    if screen == Screen.SUBMOLTS:
        submolt = app.selected_submolt()
        return f"{WEB_BASE_URL}/s/{submolt.name}" if submolt else None
    if screen in (Screen.LEADERBOARD, Screen.RECENT_AGENTS):
        name = app.selected_agent_name()
        return f"{WEB_BASE_URL}/agent/{name}" if name else None
    return None


# -- fetch requests -------------------------------------------------------


def request_posts(app: App, ctx: LoopContext, background: bool = False) -> None:
    app.is_loading = True
    app.is_background_loading = background
    submolt = app.current_submolt.name if app.current_submolt else None
    events.load_posts(
        ctx.bus,
        ctx.client,
        app.sort_order,
        app.time_filter_for_api(),
        app.current_page * POSTS_LIMIT,
        submolt,
    )


def request_screen_data(app: App, ctx: LoopContext, screen: Screen) -> None:
    if screen == Screen.FEED:
        request_posts(app, ctx)
    elif screen == Screen.LEADERBOARD:
        app.is_loading = True
        events.load_leaderboard(ctx.bus, ctx.client)
    elif screen == Screen.TOP_PAIRINGS:
        app.is_loading = True
        events.load_top_pairings(ctx.bus, ctx.client)
    elif screen == Screen.RECENT_AGENTS:
        app.is_loading = True
        events.load_recent_agents(ctx.bus, ctx.client)
    elif screen == Screen.SUBMOLTS:
        app.is_loading = True
        events.load_submolts(ctx.bus, ctx.client)
    elif screen == Screen.STATS:
        app.is_loading = True
        events.load_stats(ctx.bus, ctx.client)
    elif screen == Screen.AGENT_PROFILE and app.agent_profile is not None:
        app.is_loading = True
        events.load_agent_profile(ctx.bus, ctx.client, app.agent_profile.name)


def request_initial_load(app: App, ctx: LoopContext) -> None:
    request_posts(app, ctx)
    events.load_stats(ctx.bus, ctx.client)


def screen_is_empty(app: App, screen: Screen) -> bool:
    if screen == Screen.STATS:
        return app.stats is None
    if screen in (Screen.LEADERBOARD, Screen.TOP_PAIRINGS, Screen.RECENT_AGENTS, Screen.SUBMOLTS):
        return app.collection_length(screen) == 0
    return False


def switch_to(app: App, ctx: LoopContext, number: int, source: str = "") -> None:
    if number == 8:
        app.toggle_about()
        return
    screen = NUMBERED_SCREENS.get(number)
    if screen is None:
        return
    suffix = f" ({source})" if source else ""
    app.add_debug(f"-> {SCREEN_NAMES[screen]}{suffix}")
    app.switch_screen(screen)
    if screen_is_empty(app, screen):
        request_screen_data(app, ctx, screen)


def change_sort(app: App, ctx: LoopContext, order: SortOrder) -> None:
    if app.screen != Screen.FEED or app.is_loading:
        return
    app.set_sort_order(order)
    app.reset_paging()
    request_posts(app, ctx)


def change_time_filter(app: App, ctx: LoopContext, step: int) -> None:
    if app.screen != Screen.FEED or app.is_loading or app.sort_order == SortOrder.NEW:
        return
    if step > 0:
        app.cycle_time_filter()
    else:
        app.cycle_time_filter_reverse()
    app.reset_paging()
    request_posts(app, ctx)


def request_agent_preview(app: App, ctx: LoopContext) -> None:
    name = app.selected_agent_name()
    if name is None:
        return
    app.open_agent_preview(name)
    events.load_agent_profile(ctx.bus, ctx.client, name, preview=True)


# -- settings -------------------------------------------------------------


def persist_settings(app: App, ctx: LoopContext) -> None:
    try:
        save_settings(app.row_display, app.refresh_interval_secs, ctx.config_path)
    except OSError as exc:
        app.add_debug(f"Failed to save settings: {exc}")


def describe_refresh_interval(app: App) -> str:
    if app.refresh_interval_secs == 0:
        return "Refresh interval: Off"
    return f"Refresh interval: {app.refresh_interval_secs}s"


def change_setting(app: App, ctx: LoopContext, forward: bool) -> None:
    if not app.change_setting(forward):
        return
    if app.cursor(Screen.SETTINGS) == 0:
        app.add_debug(f"Row display: {app.row_display.value}")
    else:
        app.add_debug(describe_refresh_interval(app))
    persist_settings(app, ctx)


def save_api_key_worker(bus: EventBus, api_key: str, path: Path, api_url: str) -> None:
    try:
        config = save_api_key(api_key, path, api_url)
    except OSError as exc:
        bus.post(("config_saved", (None, f"Failed to save config: {exc}")))
        return
    bus.post(("config_saved", (config, None)))


# -- keyboard -------------------------------------------------------------


def handle_setup_key(app: App, ctx: LoopContext, key: str) -> None:
    if key == "ESC":
        app.should_quit = True
    elif key == "BACKSPACE":
        app.api_key_input = app.api_key_input[:-1]
        app.setup_error = None
    elif key == "ENTER":
        api_key = app.api_key_input.strip()
        if not api_key:
            app.setup_error = "API key cannot be empty"
            return
        app.is_loading = True
        app.setup_error = None
        ctx.bus.spawn(save_api_key_worker, ctx.bus, api_key, ctx.config_path, ctx.config.api_url)
    elif len(key) == 1:
        app.api_key_input += key
        app.setup_error = None


def handle_error_key(app: App, ctx: LoopContext, key: str) -> None:
    if key == "e":
        app.show_technical_error = not app.show_technical_error
    elif key == "r":
        if app.screen == Screen.FEED:
            app.dismiss_error()
            request_posts(app, ctx)
    elif key == "ESC":
        app.dismiss_error()


def handle_preview_key(app: App, ctx: LoopContext, key: str) -> bool:
    """Handle a key while the agent preview is open; False lets it fall through."""
    if key in ("TAB", "ESC"):
        app.close_agent_preview()
        return True
    if key == "ENTER":
        name = app.preview_agent_name
        loaded = not app.is_preview_loading and app.agent_profile is not None
        app.open_agent_profile(from_preview=loaded)
        if not loaded and name:
            app.is_loading = True
            events.load_agent_profile(ctx.bus, ctx.client, name)
        return True
    return key not in DOWN_KEYS | UP_KEYS


def handle_enter(app: App, ctx: LoopContext) -> None:
    screen = app.screen
    if screen == Screen.FEED:
        post = app.open_selected_post()
        if post is not None:
            app.is_loading = True
            events.load_post_with_comments(ctx.bus, ctx.client, post.id)
    elif screen == Screen.POST_DETAIL:
        comment_id = app.selected_comment_id()
        if comment_id is not None:
            app.toggle_comment_collapse(comment_id)
    elif screen in (Screen.LEADERBOARD, Screen.TOP_PAIRINGS, Screen.RECENT_AGENTS):
        name = app.selected_agent_name()
        if name is not None:
            app.open_agent_profile()
            app.is_loading = True
            events.load_agent_profile(ctx.bus, ctx.client, name)
    elif screen == Screen.AGENT_PROFILE:
        post = app.open_agent_post()
        if post is not None:
            app.is_loading = True
            events.load_post_with_comments(ctx.bus, ctx.client, post.id)
    elif screen == Screen.SUBMOLTS:
        if app.open_submolt_feed() is not None:
            request_posts(app, ctx)


def handle_vertical(app: App, ctx: LoopContext, down: bool) -> None:
    feed_index = app.cursor(Screen.FEED)
    on_feed = app.screen == Screen.FEED and not app.is_loading and bool(app.posts)
    if down:
        was_at_last = feed_index == len(app.posts) - 1
        app.select_next()
        if on_feed and was_at_last and app.next_page():
            request_posts(app, ctx)
    else:
        was_at_first = feed_index == 0
        app.select_previous()
        if on_feed and was_at_first and app.prev_page():
            request_posts(app, ctx)
    if app.show_agent_preview:
        request_agent_preview(app, ctx)


def handle_horizontal(app: App, ctx: LoopContext, forward: bool) -> None:
    if app.screen == Screen.SUBMOLTS:
        if forward:
            app.select_right()
        else:
            app.select_left()
    elif app.screen == Screen.SETTINGS:
        change_setting(app, ctx, forward)
    else:
        change_time_filter(app, ctx, 1 if forward else -1)


def handle_key(app: App, ctx: LoopContext, key: str) -> None:
    app.add_debug(f"Key: {key}")

    if key == "QUIT":
        app.should_quit = True
        return

    if app.screen == Screen.SETUP:
        handle_setup_key(app, ctx, key)
        return

    if app.show_help:
        if key in ("?", "ESC"):
            app.toggle_help()
        return

    if app.show_about:
        if key in ("8", "ESC"):
            app.toggle_about()
        return

    if app.show_submolt_detail:
        if key in (" ", "ESC"):
            app.show_submolt_detail = False
        return

    if app.show_agent_preview and handle_preview_key(app, ctx, key):
        return

    if app.error_message is not None:
        handle_error_key(app, ctx, key)
        return

    if key == "q":
        app.should_quit = True
    elif key == "?":
        app.toggle_help()
    elif key == "`":
        app.toggle_debug()
    elif key in DOWN_KEYS:
        handle_vertical(app, ctx, down=True)
    elif key in UP_KEYS:
        handle_vertical(app, ctx, down=False)
    elif key in LEFT_KEYS:
        handle_horizontal(app, ctx, forward=False)
    elif key in RIGHT_KEYS:
        handle_horizontal(app, ctx, forward=True)
    elif key == " ":
        if app.screen == Screen.SUBMOLTS and app.submolts:
            app.show_submolt_detail = True
    elif key == "TAB":
        request_agent_preview(app, ctx)
    elif key == "ENTER":
        handle_enter(app, ctx)
    elif key == "ESC":
        app.go_back()
    elif key == "r":
        if not app.is_loading:
            request_screen_data(app, ctx, app.screen)
    elif key in SORT_KEYS:
        change_sort(app, ctx, SORT_KEYS[key])
    elif key == "N":
        if app.screen == Screen.FEED and not app.is_loading and app.next_page():
            request_posts(app, ctx)
    elif key == "P":
        if app.screen == Screen.FEED and not app.is_loading and app.prev_page():
            request_posts(app, ctx)
    elif key.isdigit() and len(key) == 1:
        switch_to(app, ctx, int(key))
    elif key == "o":
        url = item_url(app)
        if url:
            error = open_link(url)
            app.add_debug(error or f"Opened: {url}")
    elif key in ("+", "="):
        app.adjust_refresh_interval(5)
        app.add_debug(describe_refresh_interval(app))
    elif key in ("-", "_"):
        app.adjust_refresh_interval(-5)
        app.add_debug(describe_refresh_interval(app))
    elif key == "a":
        app.toggle_auto_refresh()
        if app.refresh_interval_secs:
            app.add_debug(f"Auto-refresh: On ({app.refresh_interval_secs}s)")
        else:
            app.add_debug("Auto-refresh: Off")


# -- mouse ----------------------------------------------------------------


def handle_mouse(app: App, ctx: LoopContext, x: int, y: int) -> None:
    app.add_debug(f"Mouse click at ({x}, {y})")
    action = action_at(app, x, y)
    if action is None:
        return
    kind, value = action
    if kind == "dismiss_about":
        app.show_about = False
    elif kind == "screen":
        switch_to(app, ctx, value, source="click")
    elif kind == "sort":
        change_sort(app, ctx, value)
    elif kind == "shuffle":
        change_sort(app, ctx, SortOrder.RANDOM)
    elif kind == "time":
        if app.screen == Screen.FEED and not app.is_loading and app.sort_order != SortOrder.NEW:
            app.time_filter = value
            app.reset_paging()
            request_posts(app, ctx)
    elif kind == "select":
        screen, index = value
        app.set_cursor(screen, index)
        app.add_debug(f"Selected {SCREEN_NAMES.get(screen, 'item')} {index}")


# -- completions and timers -----------------------------------------------


def apply_config_saved(app: App, ctx: LoopContext, payload: tuple[AppConfig | None, str | None]) -> None:
    config, error = payload
    app.is_loading = False
    if config is None:
        app.setup_error = error
        return
    ctx.config.api_key = config.api_key
    ctx.client = MoltbookClient(ctx.config.api_url, config.api_key)
    app.setup_error = None
    app.screen = Screen.FEED
    app.reset_paging()
    request_initial_load(app, ctx)


def apply_agent_preview(app: App, payload: tuple[str, Any]) -> None:
    name, response = payload
    if not app.show_agent_preview or name != app.preview_agent_name:
        app.add_debug(f"Discarded preview for {name}")
        return
    app.is_preview_loading = False
    app.error_message = None
    app.install_agent_profile(response)


def handle_event(app: App, ctx: LoopContext, event: Event) -> None:
    kind, payload = event
    if kind == "key":
        handle_key(app, ctx, payload)
    elif kind == "mouse":
        handle_mouse(app, ctx, *payload)
    elif kind == "resize":
        app.last_frame_area = payload
    elif kind == "posts_loaded":
        posts, has_more = payload
        app.is_loading = False
        app.is_background_loading = False
        app.error_message = None
        app.has_more_posts = has_more
        app.update_posts(posts)
    elif kind == "comments_loaded":
        post, comments = payload
        app.is_loading = False
        app.error_message = None
        app.install_comments(post, comments)
    elif kind == "stats_loaded":
        app.stats = payload
        if app.screen == Screen.STATS:
            app.is_loading = False
    elif kind == "leaderboard_loaded":
        app.is_loading = False
        app.error_message = None
        app.install_leaderboard(payload)
    elif kind == "top_pairings_loaded":
        app.is_loading = False
        app.error_message = None
        app.install_top_pairings(payload)
    elif kind == "recent_agents_loaded":
        app.is_loading = False
        app.error_message = None
        app.install_recent_agents(payload)
    elif kind == "submolts_loaded":
        app.is_loading = False
        app.error_message = None
        app.install_submolts(payload)
    elif kind == "agent_profile_loaded":
        _, response = payload
        app.is_loading = False
        app.error_message = None
        app.install_agent_profile(response)
        if app.show_agent_preview:
            app.close_agent_preview()
    elif kind == "agent_preview_loaded":
        apply_agent_preview(app, payload)
    elif kind == "config_saved":
        apply_config_saved(app, ctx, payload)
    elif kind == "error":
        app.set_error(payload)
        app.add_debug(f"ERROR: {payload}")
    elif kind == "debug":
        app.add_debug(payload)
    elif kind == "tick":
        if app.refresh_due():
            request_posts(app, ctx, background=True)
    elif kind == "spinner":
        if app.is_loading or app.is_preview_loading:
            app.advance_spinner()
