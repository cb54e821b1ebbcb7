from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from moltbook_tui.gateway import DEFAULT_API_URL

DEFAULT_REFRESH_INTERVAL_SECS = 10
REFRESH_INTERVAL_CHOICES = (0, 10, 30, 60, 120)


class RowDisplay(Enum):
    COMPACT = "compact"
    NORMAL = "normal"
    COMFORTABLE = "comfortable"

    @property
    def label(self) -> str:
        return self.name.capitalize()

    def cycle_next(self) -> RowDisplay:
        order = list(RowDisplay)
        return order[(order.index(self) + 1) % len(order)]

    def cycle_prev(self) -> RowDisplay:
        order = list(RowDisplay)
        return order[(order.index(self) - 1) % len(order)]


@dataclass
class AppConfig:
    api_key: str | None
    api_url: str
    row_display: RowDisplay
    refresh_interval_secs: int
    no_refresh: bool = False
    start_in_setup: bool = False
    debug: bool = False
    config_path: Path | None = None


def default_config_path() -> Path:
    override = os.getenv("MOLTBOOK_TUI_CONFIG")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".moltbook-tui" / "config.toml"


def _strip_value(raw: str) -> str:
    return raw.strip().strip('"').strip("'")


def read_config_file(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    values: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = _strip_value(value)
    return values


def parse_row_display(raw: str) -> RowDisplay:
    lowered = raw.strip().lower()
    for option in RowDisplay:
        if option.value == lowered:
            return option
    return RowDisplay.NORMAL


def parse_refresh_interval(raw: str) -> int:
    try:
        parsed = int(raw.strip())
    except ValueError:
        return DEFAULT_REFRESH_INTERVAL_SECS
    return max(0, parsed)


def load_api_key(path: Path) -> str | None:
    env_key = os.getenv("MOLTBOOK_API_KEY", "").strip()
    if env_key:
        return env_key
    file_key = read_config_file(path).get("api_key", "").strip()
    return file_key or None


def load_settings(path: Path) -> tuple[RowDisplay, int]:
    values = read_config_file(path)
    row_display = parse_row_display(values.get("row_display", "normal"))
    refresh_interval_secs = DEFAULT_REFRESH_INTERVAL_SECS
    if "refresh_interval_secs" in values:
        refresh_interval_secs = parse_refresh_interval(values["refresh_interval_secs"])
    return row_display, refresh_interval_secs


def render_config_file(api_key: str | None, row_display: RowDisplay, refresh_interval_secs: int) -> str:
    lines: list[str] = []
    if api_key:
        lines.append(f'api_key = "{api_key}"')
    lines.append(f'row_display = "{row_display.value}"')
    lines.append(f"refresh_interval_secs = {refresh_interval_secs}")
    return "\n".join(lines) + "\n"


def save_api_key(api_key: str, path: Path, api_url: str = DEFAULT_API_URL) -> AppConfig:
    row_display, refresh_interval_secs = load_settings(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_config_file(api_key, row_display, refresh_interval_secs), encoding="utf-8")
    return AppConfig(
        api_key=api_key,
        api_url=api_url,
        row_display=row_display,
        refresh_interval_secs=refresh_interval_secs,
        config_path=path,
    )


def save_settings(row_display: RowDisplay, refresh_interval_secs: int, path: Path) -> None:
    # Keep a file-stored key; an env-only key is never written to disk.
    api_key = read_config_file(path).get("api_key", "").strip() or None
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_config_file(api_key, row_display, refresh_interval_secs), encoding="utf-8")


def parse_args(argv: list[str]) -> AppConfig:
    parser = argparse.ArgumentParser(
        prog="moltbook",
        description="A read-only TUI client for moltbook, the social network for AI agents.",
        epilog="Examples:\n  moltbook\n  moltbook --no-refresh",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--no-refresh", action="store_true", help="Disable auto-refresh on startup")
    parser.add_argument("--setup", action="store_true", help="Start on the API key setup screen")
    parser.add_argument("--debug", action="store_true", help="Show the debug log overlay")
    parser.add_argument(
        "--api-url",
        default=os.getenv("MOLTBOOK_API_URL", DEFAULT_API_URL),
        help="Base URL of the Moltbook API",
    )
    parser.add_argument("--config", default="", help="Path to the config file")

    args = parser.parse_args(argv)

    api_url = args.api_url.strip()
    if not api_url.startswith(("http://", "https://")):
        raise ValueError("--api-url must start with http:// or https://")

    config_path = Path(args.config).expanduser() if args.config else default_config_path()
    row_display, refresh_interval_secs = load_settings(config_path)

    return AppConfig(
        api_key=load_api_key(config_path),
        api_url=api_url,
        row_display=row_display,
        refresh_interval_secs=0 if args.no_refresh else refresh_interval_secs,
        no_refresh=args.no_refresh,
        start_in_setup=args.setup,
        debug=args.debug,
        config_path=config_path,
    )
