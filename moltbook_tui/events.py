"""Event tuples, the shared event queue and the threads that feed it.

Every producer (input poller, tickers, fetch threads) posts ``(kind, payload)``
tuples into one bounded queue. Only the main loop reads from it.
"""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

from moltbook_tui.gateway import POSTS_LIMIT, GatewayError, MoltbookClient
from moltbook_tui.models import SortOrder, TimeFilter

Event = tuple[str, Any]

EVENT_QUEUE_SIZE = 100
TICK_SECONDS = 1.0
SPINNER_SECONDS = 0.08
POST_RETRY_SECONDS = 0.1
SHUTDOWN_GRACE_SECONDS = 0.1


def make_event_queue() -> queue.Queue[Event]:
    return queue.Queue(maxsize=EVENT_QUEUE_SIZE)


def post_event(events: queue.Queue[Event], stop_event: threading.Event, event: Event) -> bool:
    while not stop_event.is_set():
        try:
            events.put(event, timeout=POST_RETRY_SECONDS)
            return True
        except queue.Full:
            continue
    return False


def ticker_worker(
    events: queue.Queue[Event],
    stop_event: threading.Event,
    interval: float,
    kind: str,
) -> None:
    while not stop_event.wait(interval):
        post_event(events, stop_event, (kind, None))


@dataclass
class EventBus:
    events: queue.Queue[Event] = field(default_factory=make_event_queue)
    stop_event: threading.Event = field(default_factory=threading.Event)
    threads: list[threading.Thread] = field(default_factory=list)

    def post(self, event: Event) -> bool:
        return post_event(self.events, self.stop_event, event)

    def spawn(self, target: Callable[..., None], *args: Any) -> threading.Thread:
        self.threads = [thread for thread in self.threads if thread.is_alive()]
        thread = threading.Thread(target=target, args=args, daemon=True)
        thread.start()
        self.threads.append(thread)
        return thread

    def start_tickers(self) -> None:
        self.spawn(ticker_worker, self.events, self.stop_event, TICK_SECONDS, "tick")
        self.spawn(ticker_worker, self.events, self.stop_event, SPINNER_SECONDS, "spinner")

    def shutdown(self, grace: float = SHUTDOWN_GRACE_SECONDS) -> None:
        self.stop_event.set()
        # Fetch threads still blocked on the network are daemons and die with the process.
        for thread in self.threads:
            thread.join(timeout=grace)


def run_fetch(
    bus: EventBus,
    description: str,
    request: Callable[[], Any],
    on_success: Callable[[Any], list[Event]],
    failure: str,
) -> None:
    bus.post(("debug", description))
    try:
        result = request()
    except GatewayError as exc:
        bus.post(("error", f"{failure}: {exc}"))
        return
    for event in on_success(result):
        bus.post(event)


def load_posts(
    bus: EventBus,
    client: MoltbookClient,
    sort: SortOrder,
    time_filter: TimeFilter | None,
    offset: int,
    submolt: str | None,
) -> None:
    def request():
        return client.get_posts(sort, time_filter, POSTS_LIMIT, offset, submolt)

    def on_success(posts):
        first_author = posts[0].author.name if posts and posts[0].author else "NONE"
        return [
            ("debug", f"First post author: {first_author}"),
            ("debug", f"OK: {len(posts)} posts loaded"),
            ("posts_loaded", (posts, len(posts) == POSTS_LIMIT)),
        ]

    time_label = time_filter.value if time_filter else "none"
    description = f"GET /posts?sort={sort.value}&time={time_label}&offset={offset}&submolt={submolt or 'none'}"
    bus.spawn(run_fetch, bus, description, request, on_success, "Failed to load posts")


def load_post_with_comments(bus: EventBus, client: MoltbookClient, post_id: str) -> None:
    def on_success(result):
        post, comments = result
        return [
            ("debug", f"OK: {len(comments)} comments loaded"),
            ("comments_loaded", (post, comments)),
        ]

    bus.spawn(
        run_fetch,
        bus,
        f"GET /posts/{post_id}",
        lambda: client.get_post(post_id),
        on_success,
        "Failed to load comments",
    )


def load_stats(bus: EventBus, client: MoltbookClient) -> None:
    def on_success(stats):
        return [
            ("debug", f"OK: stats loaded (agents={stats.agents}, posts={stats.posts})"),
            ("stats_loaded", stats),
        ]

    bus.spawn(run_fetch, bus, "GET /stats", client.get_stats, on_success, "Failed to load stats")


def load_leaderboard(bus: EventBus, client: MoltbookClient) -> None:
    def on_success(agents):
        return [
            ("debug", f"OK: {len(agents)} agents in leaderboard"),
            ("leaderboard_loaded", agents),
        ]

    bus.spawn(
        run_fetch,
        bus,
        "GET /agents/leaderboard",
        client.get_leaderboard,
        on_success,
        "Failed to load leaderboard",
    )


def load_top_pairings(bus: EventBus, client: MoltbookClient) -> None:
    def on_success(pairings):
        return [
            ("debug", f"OK: {len(pairings)} top humans loaded"),
            ("top_pairings_loaded", pairings),
        ]

    bus.spawn(
        run_fetch,
        bus,
        "GET /homepage",
        client.get_top_pairings,
        on_success,
        "Failed to load top pairings",
    )


def load_recent_agents(bus: EventBus, client: MoltbookClient) -> None:
    def on_success(agents):
        return [
            ("debug", f"OK: {len(agents)} recent agents loaded"),
            ("recent_agents_loaded", agents),
        ]

    bus.spawn(
        run_fetch,
        bus,
        "GET /agents/recent",
        client.get_recent_agents,
        on_success,
        "Failed to load recent agents",
    )


def load_submolts(bus: EventBus, client: MoltbookClient) -> None:
    def on_success(submolts):
        return [
            ("debug", f"OK: {len(submolts)} submolts loaded"),
            ("submolts_loaded", submolts),
        ]

    bus.spawn(run_fetch, bus, "GET /submolts", client.get_submolts, on_success, "Failed to load submolts")


def load_agent_profile(bus: EventBus, client: MoltbookClient, name: str, preview: bool = False) -> None:
    kind = "agent_preview_loaded" if preview else "agent_profile_loaded"
    label = "agent preview" if preview else "agent profile"

    def on_success(response):
        return [
            ("debug", f"OK: {label} loaded with {len(response.recent_posts)} posts"),
            (kind, (name, response)),
        ]

    suffix = " (preview)" if preview else ""
    bus.spawn(
        run_fetch,
        bus,
        f"GET /agents/profile?name={name}{suffix}",
        lambda: client.get_agent_profile(name),
        on_success,
        "Failed to load agent profile",
    )
