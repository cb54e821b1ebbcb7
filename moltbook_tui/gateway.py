"""Read-only HTTP client for the Moltbook API."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from moltbook_tui import __version__
from moltbook_tui.models import (
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
    parse_agent_profile_response,
    parse_comment,
    parse_leaderboard_agent,
    parse_post,
    parse_recent_agent,
    parse_stats,
    parse_submolt,
    parse_top_pairing,
)

DEFAULT_API_URL = "https://www.moltbook.com/api/v1"
POSTS_LIMIT = 25
RETRIES = 2
BASE_BACKOFF_SECONDS = 0.5
CONNECT_TIMEOUT_SECONDS = 10
READ_TIMEOUT_SECONDS = 30


class GatewayError(Exception):
    def __init__(self, message: str, status_code: int | None = None, retryable: bool = False):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.retryable = retryable


def retry_strategy() -> Retry:
    # Three attempts in total, sleeping 0.5 s then 1 s; 4xx responses are never retried.
    return Retry(
        total=RETRIES,
        connect=RETRIES,
        read=RETRIES,
        status=RETRIES,
        backoff_factor=BASE_BACKOFF_SECONDS,
        status_forcelist=range(500, 600),
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )


class MoltbookClient:
    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        api_key: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.strip().rstrip("/")
        self.api_key = (api_key or "").strip() or None
        self.session = session or requests.Session()
        adapter = HTTPAdapter(max_retries=retry_strategy())
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.session.headers.update(
            {
                "User-Agent": f"moltbook-tui/{__version__}",
                "Accept": "application/json",
            }
        )

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}

    def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.get(
                url,
                params=params,
                headers=self._headers(),
                timeout=(CONNECT_TIMEOUT_SECONDS, READ_TIMEOUT_SECONDS),
            )
        except requests.Timeout as exc:
            raise GatewayError(f"Request to {url} timed out: {exc}", retryable=True) from exc
        except requests.ConnectionError as exc:
            raise GatewayError(f"Could not connect to {url}: {exc}", retryable=True) from exc
        except requests.RequestException as exc:
            raise GatewayError(f"Request to {url} failed: {exc}") from exc

        if response.status_code >= 400:
            raise GatewayError(
                f"HTTP {response.status_code} from {url}",
                status_code=response.status_code,
                retryable=response.status_code >= 500,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(f"Malformed response from {url}: {exc}") from exc

    def get_posts(
        self,
        sort: SortOrder,
        time_filter: TimeFilter | None = None,
        limit: int = POSTS_LIMIT,
        offset: int = 0,
        submolt: str | None = None,
    ) -> list[Post]:
        params: dict[str, Any] = {"sort": sort.value, "limit": limit, "offset": offset}
        if time_filter is not None and sort != SortOrder.NEW:
            params["time"] = time_filter.value
        if sort == SortOrder.RANDOM:
            params["shuffle"] = int(time.time() * 1000)
        if submolt:
            params["submolt"] = submolt
        payload = _expect_dict(self.get_json("posts", params), "posts")
        with malformed("posts"):
            return [parse_post(post) for post in _expect_list(payload, "posts")]

    def get_post(self, post_id: str) -> tuple[Post, list[Comment]]:
        payload = _expect_dict(self.get_json(f"posts/{quote(post_id, safe='')}"), "post detail")
        post = payload.get("post")
        if not isinstance(post, dict):
            raise GatewayError("Malformed post detail: missing 'post'")
        with malformed("post detail"):
            comments = [parse_comment(comment) for comment in _expect_list(payload, "comments")]
            return parse_post(post), comments

    def get_stats(self) -> Stats:
        payload = _expect_dict(self.get_json("stats"), "stats")
        with malformed("stats"):
            return parse_stats(payload)

    def get_leaderboard(self) -> list[LeaderboardAgent]:
        payload = _expect_dict(self.get_json("agents/leaderboard"), "leaderboard")
        with malformed("leaderboard"):
            return [parse_leaderboard_agent(agent) for agent in _expect_list(payload, "leaderboard")]

    def get_recent_agents(self) -> list[RecentAgent]:
        payload = _expect_dict(self.get_json("agents/recent"), "recent agents")
        with malformed("recent agents"):
            return [parse_recent_agent(agent) for agent in _expect_list(payload, "agents")]

    def get_submolts(self) -> list[Submolt]:
        payload = _expect_dict(self.get_json("submolts"), "submolts")
        with malformed("submolts"):
            return [parse_submolt(submolt) for submolt in _expect_list(payload, "submolts")]

    def get_top_pairings(self) -> list[TopPairing]:
        payload = _expect_dict(self.get_json("homepage"), "homepage")
        with malformed("homepage"):
            return [parse_top_pairing(human) for human in _expect_list(payload, "topHumans")]

    def get_agent_profile(self, name: str) -> AgentProfileResponse:
        payload = _expect_dict(self.get_json("agents/profile", {"name": name}), "agent profile")
        if not isinstance(payload.get("agent"), dict):
            raise GatewayError("Malformed agent profile: missing 'agent'")
        with malformed("agent profile"):
            return parse_agent_profile_response(payload)


@contextmanager
def malformed(what: str) -> Iterator[None]:
    try:
        yield
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise GatewayError(f"Malformed {what} response: {exc}") from exc


def _expect_dict(payload: Any, what: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise GatewayError(f"Malformed {what} response: expected an object")
    return payload


def _expect_list(payload: dict[str, Any], key: str) -> list[dict[str, Any]]:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise GatewayError(f"Malformed response: '{key}' is not a list")
    return [entry for entry in value if isinstance(entry, dict)]
