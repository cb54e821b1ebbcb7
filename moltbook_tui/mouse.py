"""Map a mouse click to the action the equivalent keypress would take.

Everything here is pure geometry over the frame layout drawn by render.py:
a shared header with nav tabs on row 9 (Feed adds sort tabs on row 11), a
content region and a 3-row footer.
"""

from __future__ import annotations

from typing import Any

from moltbook_tui.config import RowDisplay
from moltbook_tui.models import SortOrder, TimeFilter
from moltbook_tui.state import GRID_COLUMNS, App, Screen

DEFAULT_FRAME = (80, 24)
FOOTER_HEIGHT = 3
NAV_ROW = 9
SORT_ROW = 11
COMMENTS_TOP = 18
SETTINGS_TOP = 11

# Inclusive column spans of the tab labels, border included.
NAV_TABS = (
    (2, 11, 1),
    (14, 30, 2),
    (33, 50, 3),
    (53, 64, 4),
    (67, 80, 5),
    (83, 93, 6),
    (96, 109, 7),
    (112, 122, 8),
)

SORT_TABS = (
    (2, 8, ("sort", SortOrder.NEW)),
    (13, 19, ("sort", SortOrder.TOP)),
    (24, 36, ("sort", SortOrder.DISCUSSED)),
    (41, 50, ("sort", SortOrder.RANDOM)),
    (54, 64, ("shuffle", None)),
    (67, 72, ("time", TimeFilter.HOUR)),
    (75, 79, ("time", TimeFilter.DAY)),
    (82, 87, ("time", TimeFilter.WEEK)),
    (90, 96, ("time", TimeFilter.MONTH)),
    (99, 104, ("time", TimeFilter.YEAR)),
    (107, 111, ("time", TimeFilter.ALL)),
)

FEED_ITEM_HEIGHT = {RowDisplay.COMPACT: 2, RowDisplay.NORMAL: 2, RowDisplay.COMFORTABLE: 3}
RECENT_ITEM_HEIGHT = {RowDisplay.COMPACT: 3, RowDisplay.NORMAL: 4, RowDisplay.COMFORTABLE: 4}
SUBMOLT_ROW_HEIGHT = {RowDisplay.COMPACT: 4, RowDisplay.NORMAL: 6, RowDisplay.COMFORTABLE: 7}
TOP_PAIRING_HEIGHT = 4
PODIUM_HEIGHT = 7
LEADERBOARD_HEIGHT = 4
COMMENT_HEIGHT = 3
SETTING_HEIGHT = 2

Action = tuple[str, Any]


def header_height(screen: Screen) -> int:
    if screen == Screen.FEED:
        return 13
    if screen == Screen.POST_DETAIL:
        return 3
    return 11


def tab_at(screen: Screen, x: int, y: int) -> Action | None:
    if y == NAV_ROW:
        for start, end, number in NAV_TABS:
            if start <= x <= end:
                return ("screen", number)
    if screen == Screen.FEED and y == SORT_ROW:
        for start, end, action in SORT_TABS:
            if start <= x <= end:
                return action
    return None


def leaderboard_index_at(app: App, relative_y: int) -> int | None:
    top = 0
    for index, agent in enumerate(app.leaderboard):
        height = PODIUM_HEIGHT if agent.rank <= 3 else LEADERBOARD_HEIGHT
        if top <= relative_y < top + height:
            return index
        top += height
    return None


def submolt_index_at(app: App, x: int, relative_y: int, width: int) -> int:
    row = relative_y // SUBMOLT_ROW_HEIGHT[app.row_display]
    col_width = max(1, (width - 2) // GRID_COLUMNS)
    col = min(max(0, x - 1) // col_width, GRID_COLUMNS - 1)
    return (app.submolts_scroll_row + row) * GRID_COLUMNS + col


def content_index_at(app: App, x: int, y: int) -> int | None:
    width, height = app.last_frame_area or DEFAULT_FRAME
    screen = app.screen

    if screen == Screen.SETTINGS:
        if y <= SETTINGS_TOP:
            return None
        return (y - SETTINGS_TOP - 1) // SETTING_HEIGHT

    top = COMMENTS_TOP if screen == Screen.POST_DETAIL else header_height(screen)
    if not (top < y < height - FOOTER_HEIGHT):
        return None
    relative_y = y - top - 1

    if screen == Screen.FEED:
        return relative_y // FEED_ITEM_HEIGHT[app.row_display]
    if screen == Screen.LEADERBOARD:
        return leaderboard_index_at(app, relative_y)
    if screen == Screen.TOP_PAIRINGS:
        return relative_y // TOP_PAIRING_HEIGHT
    if screen == Screen.RECENT_AGENTS:
        return relative_y // RECENT_ITEM_HEIGHT[app.row_display]
    if screen == Screen.SUBMOLTS:
        return submolt_index_at(app, x, relative_y, width)
    if screen == Screen.POST_DETAIL:
        return relative_y // COMMENT_HEIGHT
    return None


def action_at(app: App, x: int, y: int) -> Action | None:
    if app.show_about:
        return ("dismiss_about", None)
    if app.show_help or app.show_submolt_detail or app.show_agent_preview:
        return None
    if app.error_message is not None or app.screen == Screen.SETUP:
        return None

    if 0 < y < header_height(app.screen):
        tab = tab_at(app.screen, x, y)
        if tab is not None:
            return tab

    index = content_index_at(app, x, y)
    if index is None or index >= app.collection_length(app.screen):
        return None
    return ("select", (app.screen, index))
