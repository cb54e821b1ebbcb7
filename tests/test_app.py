from unittest.mock import Mock

import pytest

from moltbook_tui.app import apply_next_event, make_app
from moltbook_tui.config import AppConfig, RowDisplay
from moltbook_tui.controller import LoopContext
from moltbook_tui.events import EventBus
from moltbook_tui.gateway import DEFAULT_API_URL, MoltbookClient
from moltbook_tui.state import App, Screen


@pytest.fixture
def config(tmp_path):
    return AppConfig(
        api_key=None,
        api_url=DEFAULT_API_URL,
        row_display=RowDisplay.COMFORTABLE,
        refresh_interval_secs=30,
        config_path=tmp_path / "config.toml",
    )


class TestMainLoop:
    def test_applies_one_event_per_redraw(self, config):
        bus = EventBus()
        ctx = LoopContext(client=Mock(spec=MoltbookClient), bus=bus, config=config)
        app = App()
        for _ in range(3):
            bus.post(("key", "?"))

        assert apply_next_event(app, ctx)
        assert app.show_help
        assert bus.events.qsize() == 2

        assert apply_next_event(app, ctx)
        assert not app.show_help
        assert bus.events.qsize() == 1

    def test_idle_wait_applies_nothing(self, config, monkeypatch):
        monkeypatch.setattr("moltbook_tui.app.IDLE_WAIT_SECONDS", 0.01)
        ctx = LoopContext(client=Mock(spec=MoltbookClient), bus=EventBus(), config=config)
        assert not apply_next_event(App(), ctx)


class TestMakeApp:
    def test_carries_config_into_state(self, config):
        app = make_app(config)
        assert app.screen == Screen.FEED
        assert app.row_display == RowDisplay.COMFORTABLE
        assert app.refresh_interval_secs == 30
        assert any("API key: not set" in line for line in app.debug_log)

    def test_setup_flag_starts_on_setup(self, config):
        config.start_in_setup = True
        assert make_app(config).screen == Screen.SETUP
