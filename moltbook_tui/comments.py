"""Flatten a nested, collapsible comment tree into a selectable list."""

from __future__ import annotations

import textwrap
from dataclasses import dataclass
from typing import Iterable

from moltbook_tui.models import Comment, count_total_comments

# Approximate terminal lines per comment used when scrolling to the selection.
LINES_PER_COMMENT = 3


@dataclass(frozen=True)
class CommentRow:
    comment: Comment
    depth: int
    guide: str
    branch: str
    selected: bool
    collapsed: bool
    hidden_count: int = 0
    has_more_siblings: bool = False

    @property
    def prefix(self) -> str:
        return f"{self.guide}{self.branch}"

    @property
    def content_prefix(self) -> str:
        if self.depth == 0:
            return ""
        return self.guide + ("│ " if self.has_more_siblings else "  ")

    @property
    def summary(self) -> str | None:
        if not self.hidden_count:
            return None
        return f"[+{self.hidden_count} comments hidden]"


def visible_comment_ids(comments: Iterable[Comment], collapsed: set[str]) -> list[str]:
    visible: list[str] = []
    _collect_visible(comments, collapsed, visible)
    return visible


def _collect_visible(comments: Iterable[Comment], collapsed: set[str], visible: list[str]) -> None:
    for comment in comments:
        visible.append(comment.id)
        if comment.id not in collapsed:
            _collect_visible(comment.replies, collapsed, visible)


def selected_comment_id(comments: Iterable[Comment], collapsed: set[str], index: int) -> str | None:
    visible = visible_comment_ids(comments, collapsed)
    if 0 <= index < len(visible):
        return visible[index]
    return None


def tree_rows(
    comments: Iterable[Comment],
    collapsed: set[str],
    selected_id: str | None = None,
) -> list[CommentRow]:
    rows: list[CommentRow] = []
    _walk(list(comments), collapsed, selected_id, [], rows)
    return rows


def _walk(
    comments: list[Comment],
    collapsed: set[str],
    selected_id: str | None,
    prefix_stack: list[bool],
    rows: list[CommentRow],
) -> None:
    depth = len(prefix_stack)
    guide = "".join("│ " if more else "  " for more in prefix_stack)
    for position, comment in enumerate(comments):
        is_last = position == len(comments) - 1
        if depth == 0:
            branch = ""
        else:
            branch = "└─" if is_last else "├─"
        is_collapsed = comment.id in collapsed and bool(comment.replies)
        rows.append(
            CommentRow(
                comment=comment,
                depth=depth,
                guide=guide,
                branch=branch,
                selected=comment.id == selected_id,
                collapsed=is_collapsed,
                hidden_count=count_total_comments(comment.replies) + 1 if is_collapsed else 0,
                has_more_siblings=not is_last,
            )
        )
        if comment.id in collapsed:
            continue
        prefix_stack.append(not is_last)
        _walk(list(comment.replies), collapsed, selected_id, prefix_stack, rows)
        prefix_stack.pop()


def wrap_text(text: str, width: int) -> list[str]:
    width = max(1, width)
    lines: list[str] = []
    for paragraph in text.splitlines() or [""]:
        if not paragraph.strip():
            lines.append("")
            continue
        lines.extend(textwrap.wrap(paragraph, width=width, break_long_words=True) or [""])
    return lines


def scroll_for_selection(selected_line: int, scroll: int, height: int) -> int:
    if height <= 0:
        return scroll
    if selected_line >= scroll + height:
        return max(0, selected_line - height // 2)
    if selected_line < scroll:
        return max(0, selected_line - height // 4)
    return scroll
