from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from dateutil import parser as date_parser
from rich.align import Align
from rich.console import Group, RenderableType
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from moltbook_tui import __version__
from moltbook_tui.comments import LINES_PER_COMMENT, scroll_for_selection, tree_rows, wrap_text
from moltbook_tui.config import REFRESH_INTERVAL_CHOICES, RowDisplay
from moltbook_tui.models import TIME_FILTER_ORDER, Post, SortOrder, count_total_comments
from moltbook_tui.mouse import (
    FEED_ITEM_HEIGHT,
    FOOTER_HEIGHT,
    RECENT_ITEM_HEIGHT,
    SUBMOLT_ROW_HEIGHT,
    header_height,
)
from moltbook_tui.state import GRID_COLUMNS, App, Screen

RED = "#e01b24"
TEAL = "#08d1a9"
BLUE = "#4a9efc"
YELLOW = "#ffd72e"
DIM = "grey50"

LOGO_ART = (
    "                 ██  ██  ██                   ██   ",
    " ██▀██▀█▄ ▄█▀▀█▄ ██ ▀██▀ ██▀▀█▄ ▄█▀▀█▄ ▄█▀▀█▄ ██▄█▀",
    " ██ ██ ██ ██  ██ ██  ██  ██  ██ ██  ██ ██  ██ ███▄ ",
    " ▀▀ ▀▀ ▀▀  ▀▀▀▀  ▀▀  ▀▀▀ ▀▀▀▀▀   ▀▀▀▀   ▀▀▀▀  ▀▀ ▀▀",
)
TAGLINE = " the front page of the agent internet"
SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
ACTIVE_TAB = f"bold black on {RED}"

NAV_TABS = (
    ("1", "Feed", Screen.FEED),
    ("2", "Leaderboard", Screen.LEADERBOARD),
    ("3", "Top Pairings", Screen.TOP_PAIRINGS),
    ("4", "Agents", Screen.RECENT_AGENTS),
    ("5", "Submolts", Screen.SUBMOLTS),
    ("6", "Stats", Screen.STATS),
    ("7", "Settings", Screen.SETTINGS),
)

SORT_TABS = (
    ("N", "ew", SortOrder.NEW),
    ("T", "op", SortOrder.TOP),
    ("D", "iscussed", SortOrder.DISCUSSED),
    ("R", "andom", SortOrder.RANDOM),
)

HELP_LINES = (
    ("Keybindings", None),
    ("", None),
    ("  j / ↓     Move down", ""),
    ("  k / ↑     Move up", ""),
    ("  Enter     Open / collapse", ""),
    ("  Tab       Agent preview", ""),
    ("  Esc       Go back", ""),
    ("", None),
    ("  Sorting", TEAL),
    ("  n         Sort by New", ""),
    ("  t         Sort by Top", ""),
    ("  d         Sort by Discussed", ""),
    ("  R / s     Random / shuffle", ""),
    ("  f / ←/→   Cycle time filter", ""),
    ("", None),
    ("  r         Refresh", ""),
    ("  o         Open in browser", ""),
    ("  a         Toggle auto-refresh", ""),
    ("  +/-       Adjust refresh interval", ""),
    ("  N / P     Next / previous page", ""),
    ("  1-8       Navigate screens", ""),
    ("  `         Toggle debug panel", ""),
    ("  ?         Toggle help", ""),
    ("  q         Quit", ""),
)


# -- formatting -----------------------------------------------------------


def parse_date(raw: Any) -> datetime | None:
    if not raw:
        return None
    try:
        parsed = date_parser.parse(str(raw))
    except (TypeError, ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def humanize_date(raw: Any, now: datetime | None = None) -> str:
    parsed = parse_date(raw)
    if parsed is None:
        return ""
    current = now or datetime.now(timezone.utc)
    seconds = int((current - parsed).total_seconds())
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 30:
        return f"{days}d ago"
    if days < 365:
        return f"{days // 30}mo ago"
    return f"{days // 365}y ago"


def format_count(value: int) -> str:
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return str(value)


def format_number_with_commas(value: int) -> str:
    return f"{value:,}"


def truncate(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    if width <= 1:
        return value[:width]
    return f"{value[: width - 1]}…"


def join_lines(lines: list[Text | str]) -> Text:
    text = Text(no_wrap=True, overflow="ellipsis")
    for index, line in enumerate(lines):
        if index:
            text.append("\n")
        text.append(line)
    return text


def pad_lines(lines: list[Text | str], height: int) -> list[Text | str]:
    lines = lines[:height]
    return lines + [""] * (height - len(lines))


def spinner_char(app: App) -> str:
    return SPINNER_FRAMES[app.spinner_frame % len(SPINNER_FRAMES)]


def window_start(selected: int, visible: int) -> int:
    if visible <= 0:
        return selected
    return max(0, selected - visible + 1)


# -- header and footer ----------------------------------------------------


def nav_tabs_line(screen: Screen) -> Text:
    line = Text(" ")
    for index, (key, label, target) in enumerate(NAV_TABS):
        if index:
            line.append("  ")
        line.append(f" [{key}] {label} ", style=ACTIVE_TAB if screen == target else DIM)
    line.append("  ")
    line.append(" [8] About ", style=DIM)
    return line


def sort_tabs_line(app: App) -> Text:
    line = Text(" ")
    for index, (key, rest, order) in enumerate(SORT_TABS):
        if index:
            line.append("    ")
        line.append(f" [{key}]{rest} ", style=ACTIVE_TAB if app.sort_order == order else DIM)
    line.append(" | ", style=DIM)
    line.append(" [s]huffle ", style=f"black on {TEAL}")
    time_filter = app.time_filter_for_api()
    if time_filter is not None:
        for option in TIME_FILTER_ORDER:
            line.append("  ")
            line.append(f" {option.label} ", style=ACTIVE_TAB if option == time_filter else DIM)
        line.append("  [f] cycle", style=DIM)
    return line


def stats_line(app: App, with_sort: bool = False) -> Text:
    line = Text(" ")
    if with_sort:
        line.append("Sort: ", style=f"bold {TEAL}")
        line.append(app.sort_display(), style=f"bold {TEAL}")
        if app.new_post_ids:
            line.append(f" ({len(app.new_post_ids)} new)", style=f"bold {TEAL}")
        line.append(" │ ", style=DIM)
    stats = app.stats
    if stats is None:
        line.append("Loading stats...", style=DIM)
        return line
    line.append(f"{format_count(stats.agents)} agents", style=RED)
    line.append(" │ ", style=DIM)
    line.append(f"{format_count(stats.submolts)} submolts", style=TEAL)
    line.append(" │ ", style=DIM)
    line.append(f"{format_count(stats.posts)} posts", style=BLUE)
    line.append(" │ ", style=DIM)
    line.append(f"{format_count(stats.comments)} comments", style=YELLOW)
    return line


def render_header(app: App) -> Panel:
    if app.screen == Screen.POST_DETAIL:
        post = app.current_post
        title = Text(" ")
        if post is not None:
            submolt = f"m/{post.submolt.name}" if post.submolt else "m/unknown"
            title.append(submolt, style=TEAL)
            if post.author:
                title.append(f" • u/{post.author.name}", style=DIM)
            title.append(f" • {humanize_date(post.created_at)}", style=DIM)
        return Panel(title, border_style=RED, padding=(0, 0))

    lines: list[Text | str] = [Text(row, style=f"bold {RED}") for row in LOGO_ART]
    lines.append(Text(TAGLINE, style=DIM))
    lines.append("")
    lines.append(stats_line(app, with_sort=app.screen == Screen.FEED))
    lines.append("")
    lines.append(nav_tabs_line(app.screen))
    if app.screen == Screen.FEED:
        lines.append("")
        lines.append(sort_tabs_line(app))
    return Panel(join_lines(lines), border_style=RED, padding=(0, 0))


def feed_footer(app: App) -> Text:
    page = f"Page {app.current_page + 1}{' (more)' if app.has_more_posts else ''}"
    countdown = app.seconds_until_refresh()
    if app.loading_indicator() == "background" or (app.refresh_interval_secs and countdown == 0):
        spinner, refresh = f"{spinner_char(app)} ", "Refreshing..."
    elif app.refresh_interval_secs == 0:
        spinner, refresh = "  ", "Refresh Off"
    else:
        spinner, refresh = "  ", f"Refresh {countdown:>2}s"
    if app.current_submolt is not None:
        hint = f" j/k: Nav • Esc: All posts • ?: Help • {page} • "
    else:
        hint = f" j/k: Nav • N/P: Page • ?: Help • {page} • "
    line = Text(spinner, style=TEAL)
    line.append(hint, style=DIM)
    line.append(refresh, style=TEAL if app.refresh_interval_secs else DIM)
    line.append(" • +/-: interval", style=DIM)
    return line


FOOTER_HINTS = {
    Screen.POST_DETAIL: "j/k: Nav • Enter: Collapse • o: Open • Esc: Back • ?: Help",
    Screen.STATS: "1-7: Navigate • r: Refresh • ?: Help • q: Quit",
    Screen.LEADERBOARD: "j/k: Nav • Enter: Profile • Tab: Preview • 1-7: Screens • ?: Help",
    Screen.TOP_PAIRINGS: "j/k: Nav • Enter: Profile • Tab: Preview • 1-7: Screens • ?: Help",
    Screen.RECENT_AGENTS: "j/k: Nav • Enter: Profile • Tab: Preview • 1-7: Screens • ?: Help",
    Screen.SUBMOLTS: "h/j/k/l: Nav • Enter: Posts • Space: Details • o: Open • ?: Help",
    Screen.SETTINGS: "j/k: Select • ←/→: Change • 1-7: Navigate • ?: Help • q: Quit",
    Screen.AGENT_PROFILE: "j/k: Nav • Enter: Open Post • r: Refresh • Esc: Back • ?: Help",
}


def render_footer(app: App) -> Panel:
    if app.screen == Screen.FEED:
        body = feed_footer(app)
    else:
        body = Text(f" {FOOTER_HINTS.get(app.screen, '?: Help • q: Quit')}", style=DIM)
    body.no_wrap = True
    body.overflow = "ellipsis"
    return Panel(body, border_style=RED, padding=(0, 0))


# -- screens --------------------------------------------------------------


def post_meta_line(post: Post, selected: bool) -> Text:
    meta_style = "grey70" if selected else DIM
    submolt = f"m/{post.submolt.name}" if post.submolt else "m/unknown"
    line = Text("    ")
    line.append(submolt, style=TEAL)
    if post.author:
        line.append(f" • u/{post.author.name}", style=meta_style)
    line.append(f" • {humanize_date(post.created_at)}", style=meta_style)
    line.append(f" • {format_number_with_commas(post.score)} pts", style=meta_style)
    line.append(f" • {format_number_with_commas(post.comment_count)} comments", style=meta_style)
    return line


def post_list_lines(app: App, posts: list[Post], selected: int, height: int, mark_new: bool) -> list[Text | str]:
    item_height = FEED_ITEM_HEIGHT[app.row_display]
    start = window_start(selected, max(1, height // item_height))
    lines: list[Text | str] = []
    for index in range(start, len(posts)):
        post = posts[index]
        is_selected = index == selected
        title = Text("▶ " if is_selected else "  ", style=TEAL)
        if mark_new and post.id in app.new_post_ids:
            title.append("● ", style=YELLOW)
        title.append(post.title, style=f"bold {TEAL}" if is_selected else "white")
        lines.append(title)
        lines.append(post_meta_line(post, is_selected))
        if item_height == 3:
            lines.append("")
        if len(lines) >= height:
            break
    return lines


def render_feed(app: App, height: int) -> Panel:
    if app.current_submolt is not None:
        title = f"m/{app.current_submolt.name} ({app.sort_display()})"
    else:
        title = f"Posts ({app.sort_display()})"
    inner = max(0, height - 2)
    if app.posts:
        body = join_lines(post_list_lines(app, app.posts, app.cursor(Screen.FEED), inner, mark_new=True))
    else:
        body = Text("  No posts yet.", style=DIM)
    return Panel(body, title=title, title_align="left", border_style=RED, padding=(0, 0))


def render_post_body(app: App, width: int) -> Panel:
    post = app.current_post
    if post is None:
        return Panel(Text("  No post selected.", style=DIM), border_style=RED)
    lines: list[Text | str] = [Text(f" {post.title}", style="bold white")]
    lines.append(
        Text(
            f" ↑ {format_number_with_commas(post.score)} • {format_number_with_commas(post.comment_count)} comments",
            style=DIM,
        )
    )
    lines.append("")
    for wrapped in wrap_text(post.content or "", max(10, width - 4)):
        lines.append(Text(f" {wrapped}", style="white"))
    if post.url:
        lines.append("")
        lines.append(Text(f" {post.url}", style=f"underline {BLUE}"))
    return Panel(join_lines(lines), border_style=RED, padding=(0, 0))


def comment_lines(app: App, width: int) -> list[Text | str]:
    lines: list[Text | str] = []
    for row in tree_rows(app.comments, app.collapsed_comments, app.selected_comment_id()):
        marker = "▶ " if row.selected else "  "
        header = Text(marker, style=TEAL)
        header.append(row.prefix, style=DIM)
        if row.summary:
            header.append(row.summary, style=f"bold reverse {YELLOW}" if row.selected else YELLOW)
            lines.append(header)
            lines.append("")
            continue
        if row.comment.replies:
            header.append("[-] ", style=YELLOW)
        author = f"{row.comment.author.name} • " if row.comment.author else ""
        header_style = f"bold reverse {TEAL}" if row.selected else f"bold {TEAL}"
        header.append(f"{author}↑ {row.comment.score}", style=header_style)
        lines.append(header)
        content_prefix = "  " + row.content_prefix
        for wrapped in wrap_text(row.comment.content, max(10, width - len(content_prefix) - 2)):
            line = Text(content_prefix, style=DIM)
            line.append(wrapped, style="white")
            lines.append(line)
        lines.append("")
    return lines


def render_comments(app: App, width: int, height: int) -> Panel:
    visible_height = max(0, height - 2)
    lines = comment_lines(app, width)
    selected_line = app.cursor(Screen.POST_DETAIL) * LINES_PER_COMMENT
    app.comment_scroll = scroll_for_selection(selected_line, app.comment_scroll, visible_height)
    title = f"Comments ({count_total_comments(app.comments)}) - j/k: nav, Enter: collapse"
    body = join_lines(lines[app.comment_scroll :]) if lines else Text("  No comments yet.", style=DIM)
    return Panel(body, title=title, title_align="left", border_style=RED, padding=(0, 0))


def render_post_detail(app: App, width: int, height: int) -> Layout:
    layout = Layout(name="post_detail")
    comments_height = max(3, height - 15)
    layout.split_column(
        Layout(render_post_body(app, width), name="post", size=15),
        Layout(render_comments(app, width, comments_height), name="comments"),
    )
    return layout


def claimed_suffix(is_claimed: bool) -> str:
    return "" if is_claimed else " (unclaimed)"


def render_leaderboard(app: App, height: int) -> Panel:
    selected = app.cursor(Screen.LEADERBOARD)
    lines: list[Text | str] = []
    for index, agent in enumerate(app.leaderboard):
        is_selected = index == selected
        name_style = f"bold {TEAL}" if is_selected else "bold white"
        marker = "▶" if is_selected else " "
        owner = agent.owner
        verified = " ★" if owner and owner.x_verified else ""
        head = Text(f"{marker}{agent.rank:>2}  ", style=YELLOW if agent.rank <= 3 else DIM)
        head.append(f"u/{agent.name}", style=name_style)
        head.append(claimed_suffix(agent.is_claimed), style=DIM)
        karma = Text(f"     ↑ {format_number_with_commas(agent.karma)} karma", style=RED)
        handle = Text("     ")
        if owner and owner.x_handle:
            handle.append(f"@{owner.x_handle}{verified}", style=BLUE)
        item: list[Text | str] = [head, karma, handle]
        if agent.rank <= 3:
            medal = ("", "GOLD", "SILVER", "BRONZE")[agent.rank]
            item = ["", Text(f"     ★ {medal} ★", style=f"bold {YELLOW}"), head, karma, handle]
        lines.extend(pad_lines(item, 7 if agent.rank <= 3 else 4))
    body = join_lines(lines) if lines else Text("  No agents yet.", style=DIM)
    return Panel(body, title=" ★ Top 10 Agents ★ ", border_style=RED, padding=(0, 0))


def render_top_pairings(app: App, height: int) -> Panel:
    selected = app.cursor(Screen.TOP_PAIRINGS)
    start = window_start(selected, max(1, (height - 2) // 4))
    lines: list[Text | str] = []
    for index in range(start, len(app.top_pairings)):
        pairing = app.top_pairings[index]
        is_selected = index == selected
        head = Text(f"{'▶' if is_selected else ' '}{pairing.rank:>2}  ", style=YELLOW if pairing.rank <= 3 else DIM)
        head.append(pairing.x_name or pairing.x_handle, style=f"bold {TEAL}" if is_selected else "bold white")
        head.append(f" @{pairing.x_handle}{' ★' if pairing.x_verified else ''}", style=BLUE)
        bot = Text(f"     u/{pairing.bot_name}", style=TEAL)
        reach = Text(
            f"     {format_count(pairing.x_follower_count)} followers • {pairing.bot_count} bots",
            style=DIM,
        )
        lines.extend([head, bot, reach, ""])
    body = join_lines(lines) if lines else Text("  No pairings yet.", style=DIM)
    return Panel(body, title=" Top Pairings (Human + Agent) ", border_style=RED, padding=(0, 0))


def render_recent_agents(app: App, height: int) -> Panel:
    selected = app.cursor(Screen.RECENT_AGENTS)
    item_height = RECENT_ITEM_HEIGHT[app.row_display]
    start = window_start(selected, max(1, (height - 2) // item_height))
    lines: list[Text | str] = []
    for index in range(start, len(app.recent_agents)):
        agent = app.recent_agents[index]
        is_selected = index == selected
        verified = "★" if agent.owner and agent.owner.x_verified else ""
        head = Text(f"{'▶' if is_selected else ' '}{index + 1:>2}  ", style=DIM)
        head.append(f"u/{agent.name}", style=f"bold {TEAL}" if is_selected else "bold white")
        head.append(f" {verified}{claimed_suffix(agent.is_claimed)}".rstrip(), style=DIM)
        meta = Text(f"     ↑ {format_number_with_commas(agent.karma)} karma", style=RED)
        meta.append(f" • {humanize_date(agent.created_at)}", style=DIM)
        item: list[Text | str] = [head, meta]
        if item_height == 4:
            item.insert(1, Text(f"     {agent.description or 'No description'}", style="white"))
        lines.extend(pad_lines(item, item_height))
    body = join_lines(lines) if lines else Text("  No agents yet.", style=DIM)
    title = f"Recent Agents ({len(app.recent_agents)})"
    return Panel(body, title=title, title_align="left", border_style=RED, padding=(0, 0))


def submolt_cell(app: App, index: int, row_height: int) -> Panel:
    submolt = app.submolts[index]
    is_selected = index == app.cursor(Screen.SUBMOLTS)
    lines: list[Text | str] = [Text(submolt.display_name, style=f"bold {TEAL}" if is_selected else "bold white")]
    if app.row_display != RowDisplay.COMPACT:
        lines.append(Text(f"m/{submolt.name}", style=DIM))
        lines.append(Text(submolt.description or "No description", style="white"))
    lines.append(Text(f"{format_count(submolt.subscriber_count)} subscribers", style=RED))
    if app.row_display == RowDisplay.COMFORTABLE and submolt.last_activity_at:
        lines.append(Text(f"active {humanize_date(submolt.last_activity_at)}", style=DIM))
    border = TEAL if is_selected else (YELLOW if submolt.featured_at else DIM)
    return Panel(join_lines(pad_lines(lines, row_height - 2)), border_style=border, height=row_height, padding=(0, 0))


def update_submolt_scroll(app: App, visible_rows: int) -> None:
    selected_row = app.cursor(Screen.SUBMOLTS) // GRID_COLUMNS
    if selected_row < app.submolts_scroll_row:
        app.submolts_scroll_row = selected_row
    elif visible_rows > 0 and selected_row >= app.submolts_scroll_row + visible_rows:
        app.submolts_scroll_row = selected_row - visible_rows + 1


def render_submolts(app: App, height: int) -> Panel:
    featured = sum(1 for submolt in app.submolts if submolt.featured_at)
    title = f"Submolts ({len(app.submolts)})"
    if featured:
        title += f" - {featured} Featured"
    if not app.submolts:
        return Panel(Text("  No submolts yet.", style=DIM), title=title, border_style=RED)

    row_height = SUBMOLT_ROW_HEIGHT[app.row_display]
    visible_rows = max(1, (height - 2) // row_height)
    update_submolt_scroll(app, visible_rows)

    grid = Table.grid(expand=True)
    for _ in range(GRID_COLUMNS):
        grid.add_column(ratio=1)
    first = app.submolts_scroll_row * GRID_COLUMNS
    last = min(len(app.submolts), first + visible_rows * GRID_COLUMNS)
    for row_start in range(first, last, GRID_COLUMNS):
        cells: list[RenderableType] = [
            submolt_cell(app, index, row_height) for index in range(row_start, min(row_start + GRID_COLUMNS, last))
        ]
        cells.extend([""] * (GRID_COLUMNS - len(cells)))
        grid.add_row(*cells)
    return Panel(grid, title=title, title_align="left", border_style=RED, padding=(0, 0))


def render_stats(app: App) -> Panel:
    stats = app.stats
    if stats is None:
        body = Text("\n  Loading stats...", style=DIM)
    else:
        lines: list[Text | str] = ["", Text("  Platform Statistics", style=f"bold {TEAL}"), ""]
        for label, value, noun, style in (
            ("Agents:   ", stats.agents, "agents", RED),
            ("Submolts: ", stats.submolts, "submolts", TEAL),
            ("Posts:    ", stats.posts, "posts", BLUE),
            ("Comments: ", stats.comments, "comments", YELLOW),
        ):
            line = Text(f"  {label} ")
            line.append(f"{format_number_with_commas(value)} {noun}", style=style)
            lines.append(line)
        lines.extend(["", Text("  Navigation", style=TEAL)])
        for number, label, _ in NAV_TABS:
            lines.append(Text(f"  Press {number} - {label}", style=DIM))
        body = join_lines(lines)
    return Panel(body, title="Stats", title_align="left", border_style=RED, padding=(0, 0))


def option_pills(options: list[tuple[str, bool]], row_selected: bool) -> Text:
    line = Text()
    for label, active in options:
        if active:
            line.append(f"[{label}]", style=f"bold {TEAL}" if row_selected else "bold white")
        else:
            line.append(f" {label} ", style=DIM)
        line.append(" ")
    return line


def render_settings(app: App) -> Panel:
    selected = app.cursor(Screen.SETTINGS)
    rows = (
        (
            "Row Display",
            [(option.label, option == app.row_display) for option in RowDisplay],
            "Affects post list, comments, agents, and submolts",
        ),
        (
            "Refresh Interval",
            [
                ("Off" if seconds == 0 else f"{seconds}s", seconds == app.refresh_interval_secs)
                for seconds in REFRESH_INTERVAL_CHOICES
            ],
            "Auto-refresh interval for the feed",
        ),
    )
    lines: list[Text | str] = []
    for index, (label, options, description) in enumerate(rows):
        is_selected = index == selected
        line = Text("▶ " if is_selected else "  ", style=TEAL)
        line.append(f"{label:<18}", style=f"bold {TEAL}" if is_selected else "bold white")
        line.append(option_pills(options, is_selected))
        lines.append(line)
        lines.append(Text(f"    {description}", style=DIM))
    return Panel(join_lines(lines), title=" Settings ", border_style=RED, padding=(0, 0))


def render_agent_profile(app: App, height: int) -> RenderableType:
    profile = app.agent_profile
    if profile is None:
        return Panel(Text("Loading agent profile...", style=DIM), title=" Agent ", border_style=RED)

    owner = profile.owner
    info: list[Text | str] = [Text(f"  u/{profile.name}{claimed_suffix(profile.is_claimed)}", style=f"bold {TEAL}")]
    info.append(Text(f"  {profile.description or 'No description'}", style="white"))
    counts = Text(f"  ↑ {format_number_with_commas(profile.karma)} karma", style=RED)
    counts.append(f" • {format_number_with_commas(profile.follower_count)} followers", style=DIM)
    counts.append(f" • {format_number_with_commas(profile.following_count)} following", style=DIM)
    if profile.post_count is not None:
        counts.append(f" • {profile.post_count} posts", style=DIM)
    info.append(counts)
    if owner and owner.x_handle:
        verified = " ★" if owner.x_verified else ""
        info.append(Text(f"  Owner: @{owner.x_handle}{verified}", style=BLUE))
    info.append(Text(f"  Joined {humanize_date(profile.created_at)}", style=DIM))

    posts_height = max(3, height - 8)
    selected = app.cursor(Screen.AGENT_PROFILE)
    if app.agent_posts:
        posts_body = join_lines(post_list_lines(app, app.agent_posts, selected, posts_height - 2, mark_new=False))
    else:
        posts_body = Text("  No posts yet.", style=DIM)

    layout = Layout(name="agent_profile")
    layout.split_column(
        Layout(Panel(join_lines(info), title=f" u/{profile.name} ", border_style=RED, padding=(0, 0)), size=8),
        Layout(Panel(posts_body, title=f" Posts ({len(app.agent_posts)}) ", border_style=RED, padding=(0, 0))),
    )
    return layout


def render_setup(app: App) -> RenderableType:
    lines: list[Text | str] = [Text(row, style=f"bold {RED}") for row in LOGO_ART]
    lines.extend(["", Text("Enter your API key to get started", style="bold white"), ""])
    key_line = Text("> ", style=TEAL)
    key_line.append(app.api_key_input)
    key_line.append("█", style=TEAL)
    lines.append(key_line)
    lines.append("")
    if app.setup_error:
        lines.append(Text(app.setup_error, style="bold red"))
    elif app.is_loading:
        lines.append(Text(f"{spinner_char(app)} Saving...", style=TEAL))
    else:
        lines.append("")
    lines.append(Text("Enter: save • Esc: quit", style=DIM))
    panel = Panel(join_lines(lines), title=" Setup ", border_style=RED, width=60)
    return Align.center(panel, vertical="middle")


# -- overlays -------------------------------------------------------------


def centered(renderable: RenderableType) -> Align:
    return Align.center(renderable, vertical="middle")


def render_loading(app: App) -> Align:
    panel = Panel(Text(f"{spinner_char(app)} Loading...", style=TEAL, justify="center"), border_style=RED, width=18)
    return centered(panel)


def render_help() -> Align:
    lines: list[Text | str] = []
    for content, style in HELP_LINES:
        if style is None and content:
            lines.append(Text(content, style=f"bold {TEAL}"))
        else:
            lines.append(Text(content, style=style or ""))
    lines.extend(["", Text("Press ? to close", style=DIM)])
    return centered(Panel(join_lines(lines), title=" Help ", border_style=RED, width=45))


def render_about() -> Align:
    lines: list[Text | str] = [Text(row, style=f"bold {RED}") for row in LOGO_ART]
    lines.extend(
        [
            "",
            Text("A read-only terminal client for moltbook,", style="white"),
            Text("the social network for AI agents.", style="white"),
            "",
            Text(f"Version {__version__}", style=DIM),
            Text("https://www.moltbook.com", style=f"underline {BLUE}"),
            "",
            Text("Press 8 or Esc to close", style=DIM),
        ]
    )
    return centered(Panel(join_lines(lines), title=" About ", border_style=RED, width=58))


def render_error(app: App) -> Align:
    message = app.error_message or ""
    display = message if app.show_technical_error else "Something went wrong."
    body = Group(
        Text(""),
        Text(display, style="red", justify="center"),
        Text(""),
        Text(""),
        Text("Esc: dismiss    e: toggle details    r: retry", style=DIM, justify="center"),
    )
    return centered(Panel(body, title=" Error ", border_style="red", width=50))


def render_submolt_detail(app: App) -> Align | None:
    submolt = app.selected_submolt()
    if submolt is None:
        return None
    lines: list[Text | str] = [
        Text(submolt.display_name, style=f"bold {TEAL}"),
        Text(f"m/{submolt.name}", style=DIM),
        "",
    ]
    for wrapped in wrap_text(submolt.description or "No description", 52):
        lines.append(Text(wrapped, style="white"))
    lines.append("")
    lines.append(Text(f"{format_number_with_commas(submolt.subscriber_count)} subscribers", style=RED))
    lines.append(Text(f"Created {humanize_date(submolt.created_at)}", style=DIM))
    if submolt.last_activity_at:
        lines.append(Text(f"Last active {humanize_date(submolt.last_activity_at)}", style=DIM))
    if submolt.created_by:
        lines.append(Text(f"Created by u/{submolt.created_by.name}", style=DIM))
    if submolt.featured_at:
        lines.append(Text("★ Featured", style=YELLOW))
    lines.extend(["", Text("Space/Esc: close • Enter: posts • o: open", style=DIM)])
    return centered(Panel(join_lines(lines), title=" Submolt ", border_style=RED, width=58))


def render_agent_preview(app: App) -> Panel:
    name = app.preview_agent_name or ""
    if app.is_preview_loading or app.agent_profile is None:
        body: Text = Text(f"\n {spinner_char(app)} Loading u/{name}...", style=TEAL)
    else:
        profile = app.agent_profile
        lines: list[Text | str] = [Text(f" u/{profile.name}{claimed_suffix(profile.is_claimed)}", style=f"bold {TEAL}")]
        for wrapped in wrap_text(profile.description or "No description", 36):
            lines.append(Text(f" {wrapped}", style="white"))
        lines.append("")
        lines.append(Text(f" ↑ {format_number_with_commas(profile.karma)} karma", style=RED))
        lines.append(Text(f" {format_number_with_commas(profile.follower_count)} followers", style=DIM))
        if profile.owner and profile.owner.x_handle:
            lines.append(Text(f" @{profile.owner.x_handle}", style=BLUE))
        lines.extend(["", Text(" Recent posts", style=f"bold {TEAL}")])
        for post in app.agent_posts[:5]:
            lines.append(Text(f" • {truncate(post.title, 36)}", style="white"))
        if not app.agent_posts:
            lines.append(Text(" No posts yet.", style=DIM))
        body = join_lines(lines)
    return Panel(body, title=" Agent Preview ", subtitle="Enter: profile • Tab: close", border_style=TEAL, padding=(0, 0))


def render_debug(app: App, height: int) -> Panel:
    visible = app.debug_log[-max(1, height - 2) :]
    lines: list[Text | str] = []
    for message in visible:
        if "ERROR" in message:
            style = "red"
        elif "OK:" in message:
            style = "green"
        elif "GET" in message:
            style = "yellow"
        else:
            style = "white"
        lines.append(Text(message, style=style))
    return Panel(join_lines(lines), title=" Debug (` to close) ", border_style="magenta", padding=(0, 0))


def active_modal(app: App) -> RenderableType | None:
    if app.show_help:
        return render_help()
    if app.show_about:
        return render_about()
    if app.show_submolt_detail:
        modal = render_submolt_detail(app)
        if modal is not None:
            return modal
    if app.error_message is not None:
        return render_error(app)
    if app.loading_indicator() == "modal":
        return render_loading(app)
    return None


# -- frame ----------------------------------------------------------------


def render_body(app: App, width: int, height: int) -> RenderableType:
    screen = app.screen
    if screen == Screen.FEED:
        return render_feed(app, height)
    if screen == Screen.POST_DETAIL:
        return render_post_detail(app, width, height)
    if screen == Screen.LEADERBOARD:
        return render_leaderboard(app, height)
    if screen == Screen.TOP_PAIRINGS:
        return render_top_pairings(app, height)
    if screen == Screen.RECENT_AGENTS:
        return render_recent_agents(app, height)
    if screen == Screen.SUBMOLTS:
        return render_submolts(app, height)
    if screen == Screen.STATS:
        return render_stats(app)
    if screen == Screen.SETTINGS:
        return render_settings(app)
    return render_agent_profile(app, height)


def render(app: App, width: int, height: int) -> RenderableType:
    app.last_frame_area = (width, height)

    if app.screen == Screen.SETUP:
        main: RenderableType = render_setup(app)
    else:
        top = header_height(app.screen)
        body_height = max(0, height - top - FOOTER_HEIGHT)
        body = render_body(app, width, body_height)
        modal = active_modal(app)
        if modal is not None:
            body = modal
        if app.show_agent_preview:
            with_preview = Layout(name="body")
            with_preview.split_row(Layout(body, name="content", ratio=3), Layout(render_agent_preview(app), ratio=2))
            body = with_preview
        layout = Layout(name="root")
        layout.split_column(
            Layout(render_header(app), name="header", size=top),
            Layout(body, name="body"),
            Layout(render_footer(app), name="footer", size=FOOTER_HEIGHT),
        )
        main = layout

    if not app.debug_mode:
        return main
    framed = Layout(name="frame")
    debug_width = max(20, width * 40 // 100)
    framed.split_row(Layout(main, name="main"), Layout(render_debug(app, height), name="debug", size=debug_width))
    return framed
