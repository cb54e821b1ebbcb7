from __future__ import annotations

import queue
import sys

from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live

from moltbook_tui.config import AppConfig, parse_args
from moltbook_tui.controller import LoopContext, handle_event, request_initial_load
from moltbook_tui.events import EventBus
from moltbook_tui.gateway import MoltbookClient
from moltbook_tui.render import render
from moltbook_tui.state import App, Screen
from moltbook_tui.terminal import input_worker, terminal_session

IDLE_WAIT_SECONDS = 0.25


def make_app(config: AppConfig) -> App:
    app = App(
        screen=Screen.SETUP if config.start_in_setup else Screen.FEED,
        row_display=config.row_display,
        refresh_interval_secs=config.refresh_interval_secs,
        debug_mode=config.debug,
    )
    app.add_debug(f"API: {config.api_url}")
    app.add_debug(f"API key: {'set' if config.api_key else 'not set'}")
    return app


def apply_next_event(app: App, ctx: LoopContext) -> bool:
    try:
        event = ctx.bus.events.get(timeout=IDLE_WAIT_SECONDS)
    except queue.Empty:
        return False
    handle_event(app, ctx, event)
    return True


def run(config: AppConfig, console: Console) -> int:
    app = make_app(config)
    bus = EventBus()
    ctx = LoopContext(client=MoltbookClient(config.api_url, config.api_key), bus=bus, config=config)

    with terminal_session():
        bus.spawn(input_worker, bus.events, bus.stop_event)
        bus.start_tickers()
        if app.screen != Screen.SETUP:
            request_initial_load(app, ctx)

        size = console.size
        with Live(
            render(app, size.width, size.height),
            console=console,
            auto_refresh=False,
            screen=True,
            vertical_overflow="crop",
        ) as live:
            try:
                while not app.should_quit:
                    apply_next_event(app, ctx)
                    size = console.size
                    live.update(render(app, size.width, size.height), refresh=True)
            finally:
                bus.shutdown()
    return 0


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    console = Console()
    try:
        config = parse_args(argv if argv is not None else sys.argv[1:])
    except ValueError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        return 2

    try:
        return run(config, console)
    except KeyboardInterrupt:
        console.print("\n[bold]Stopped.[/bold]")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
