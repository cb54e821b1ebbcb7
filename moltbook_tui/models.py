from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SortOrder(Enum):
    NEW = "new"
    TOP = "top"
    DISCUSSED = "comments"
    RANDOM = "random"

    @property
    def label(self) -> str:
        return self.name.capitalize()


class TimeFilter(Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"

    @property
    def label(self) -> str:
        return self.name.capitalize()


TIME_FILTER_ORDER = (
    TimeFilter.HOUR,
    TimeFilter.DAY,
    TimeFilter.WEEK,
    TimeFilter.MONTH,
    TimeFilter.YEAR,
    TimeFilter.ALL,
)


@dataclass(frozen=True)
class Author:
    id: str
    name: str


@dataclass(frozen=True)
class SubmoltRef:
    name: str
    id: str | None = None
    display_name: str | None = None


@dataclass(frozen=True)
class Post:
    id: str
    title: str
    content: str | None
    url: str | None
    upvotes: int
    downvotes: int
    comment_count: int
    created_at: str
    author: Author | None = None
    submolt: SubmoltRef | None = None

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes


@dataclass(frozen=True)
class Comment:
    id: str
    content: str
    upvotes: int
    downvotes: int
    created_at: str
    depth: int = 0
    author: Author | None = None
    replies: tuple[Comment, ...] = ()

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes


@dataclass(frozen=True)
class Submolt:
    id: str
    name: str
    display_name: str
    subscriber_count: int
    created_at: str
    description: str | None = None
    last_activity_at: str | None = None
    featured_at: str | None = None
    created_by: Author | None = None


@dataclass(frozen=True)
class Stats:
    agents: int
    submolts: int
    posts: int
    comments: int


@dataclass(frozen=True)
class AgentOwner:
    x_handle: str | None = None
    x_name: str | None = None
    x_follower_count: int | None = None
    x_verified: bool | None = None


@dataclass(frozen=True)
class LeaderboardAgent:
    id: str
    name: str
    karma: int
    is_claimed: bool
    rank: int
    avatar_url: str | None = None
    owner: AgentOwner | None = None


@dataclass(frozen=True)
class RecentAgent:
    id: str
    name: str
    karma: int
    follower_count: int
    created_at: str
    is_claimed: bool
    description: str | None = None
    owner: AgentOwner | None = None


@dataclass(frozen=True)
class AgentProfile:
    id: str
    name: str
    karma: int
    follower_count: int
    following_count: int
    created_at: str
    is_claimed: bool
    description: str | None = None
    post_count: int | None = None
    owner: AgentOwner | None = None


@dataclass(frozen=True)
class AgentProfileResponse:
    agent: AgentProfile
    recent_posts: list[Post] = field(default_factory=list)
    is_following: bool = False


@dataclass(frozen=True)
class TopPairing:
    id: str
    x_handle: str
    x_name: str
    x_follower_count: int
    x_verified: bool
    bot_count: int
    bot_name: str
    rank: int
    x_avatar: str | None = None


def _text(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw)


def _optional_text(raw: Any) -> str | None:
    if raw is None:
        return None
    return str(raw)


def _int(raw: Any) -> int:
    try:
        return int(raw or 0)
    except (TypeError, ValueError):
        return 0


def _optional_int(raw: Any) -> int | None:
    if raw is None:
        return None
    return _int(raw)


def _optional_bool(raw: Any) -> bool | None:
    if raw is None:
        return None
    return bool(raw)


def _dicts(raw: Any) -> list[dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    return [entry for entry in raw if isinstance(entry, dict)]


def parse_author(raw: Any) -> Author | None:
    if not isinstance(raw, dict):
        return None
    return Author(id=_text(raw.get("id")), name=_text(raw.get("name")))


def parse_submolt_ref(raw: Any) -> SubmoltRef | None:
    if not isinstance(raw, dict):
        return None
    return SubmoltRef(
        name=_text(raw.get("name")),
        id=_optional_text(raw.get("id")),
        display_name=_optional_text(raw.get("display_name")),
    )


def parse_owner(raw: Any) -> AgentOwner | None:
    if not isinstance(raw, dict):
        return None
    return AgentOwner(
        x_handle=_optional_text(raw.get("x_handle")),
        x_name=_optional_text(raw.get("x_name")),
        x_follower_count=_optional_int(raw.get("x_follower_count")),
        x_verified=_optional_bool(raw.get("x_verified")),
    )


def parse_post(raw: dict[str, Any]) -> Post:
    return Post(
        id=_text(raw.get("id")),
        title=_text(raw.get("title")),
        content=_optional_text(raw.get("content")),
        url=_optional_text(raw.get("url")),
        upvotes=_int(raw.get("upvotes")),
        downvotes=_int(raw.get("downvotes")),
        comment_count=_int(raw.get("comment_count")),
        created_at=_text(raw.get("created_at")),
        author=parse_author(raw.get("author")),
        submolt=parse_submolt_ref(raw.get("submolt")),
    )


def parse_comment(raw: dict[str, Any]) -> Comment:
    return Comment(
        id=_text(raw.get("id")),
        content=_text(raw.get("content")),
        upvotes=_int(raw.get("upvotes")),
        downvotes=_int(raw.get("downvotes")),
        created_at=_text(raw.get("created_at")),
        depth=_int(raw.get("depth")),
        author=parse_author(raw.get("author")),
        replies=tuple(parse_comment(reply) for reply in _dicts(raw.get("replies"))),
    )


def parse_submolt(raw: dict[str, Any]) -> Submolt:
    return Submolt(
        id=_text(raw.get("id")),
        name=_text(raw.get("name")),
        display_name=_text(raw.get("display_name") or raw.get("name")),
        subscriber_count=_int(raw.get("subscriber_count")),
        created_at=_text(raw.get("created_at")),
        description=_optional_text(raw.get("description")),
        last_activity_at=_optional_text(raw.get("last_activity_at")),
        featured_at=_optional_text(raw.get("featured_at")),
        created_by=parse_author(raw.get("created_by")),
    )


def parse_stats(raw: dict[str, Any]) -> Stats:
    return Stats(
        agents=_int(raw.get("agents")),
        submolts=_int(raw.get("submolts")),
        posts=_int(raw.get("posts")),
        comments=_int(raw.get("comments")),
    )


def parse_leaderboard_agent(raw: dict[str, Any]) -> LeaderboardAgent:
    return LeaderboardAgent(
        id=_text(raw.get("id")),
        name=_text(raw.get("name")),
        karma=_int(raw.get("karma")),
        is_claimed=bool(raw.get("is_claimed")),
        rank=_int(raw.get("rank")),
        avatar_url=_optional_text(raw.get("avatar_url")),
        owner=parse_owner(raw.get("owner")),
    )


def parse_recent_agent(raw: dict[str, Any]) -> RecentAgent:
    return RecentAgent(
        id=_text(raw.get("id")),
        name=_text(raw.get("name")),
        karma=_int(raw.get("karma")),
        follower_count=_int(raw.get("follower_count")),
        created_at=_text(raw.get("created_at")),
        is_claimed=bool(raw.get("is_claimed")),
        description=_optional_text(raw.get("description")),
        owner=parse_owner(raw.get("owner")),
    )


def parse_agent_profile(raw: dict[str, Any]) -> AgentProfile:
    return AgentProfile(
        id=_text(raw.get("id")),
        name=_text(raw.get("name")),
        karma=_int(raw.get("karma")),
        follower_count=_int(raw.get("follower_count")),
        following_count=_int(raw.get("following_count")),
        created_at=_text(raw.get("created_at")),
        is_claimed=bool(raw.get("is_claimed")),
        description=_optional_text(raw.get("description")),
        post_count=_optional_int(raw.get("post_count")),
        owner=parse_owner(raw.get("owner")),
    )


def parse_agent_profile_response(raw: dict[str, Any]) -> AgentProfileResponse:
    return AgentProfileResponse(
        agent=parse_agent_profile(raw.get("agent") or {}),
        recent_posts=[parse_post(post) for post in _dicts(raw.get("recentPosts"))],
        is_following=bool(raw.get("isFollowing")),
    )


def parse_top_pairing(raw: dict[str, Any]) -> TopPairing:
    return TopPairing(
        id=_text(raw.get("id")),
        x_handle=_text(raw.get("x_handle")),
        x_name=_text(raw.get("x_name")),
        x_follower_count=_int(raw.get("x_follower_count")),
        x_verified=bool(raw.get("x_verified")),
        bot_count=_int(raw.get("bot_count")),
        bot_name=_text(raw.get("bot_name")),
        rank=_int(raw.get("rank")),
        x_avatar=_optional_text(raw.get("x_avatar")),
    )


def sort_submolts(submolts: list[Submolt]) -> list[Submolt]:
    # Featured first, then by subscriber count descending. Stable within ties.
    return sorted(
        submolts,
        key=lambda submolt: (submolt.featured_at is None, -submolt.subscriber_count),
    )


def count_total_comments(comments: tuple[Comment, ...] | list[Comment]) -> int:
    return sum(1 + count_total_comments(comment.replies) for comment in comments)
