from __future__ import annotations

import io
import unittest
from datetime import datetime, timezone
from pathlib import Path
import sys

from rich.console import Console, Group
from rich.layout import Layout
from rich.panel import Panel

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from hub_tui.app import App  # noqa: E402
from hub_tui.config import Config, JsonConfigStore  # noqa: E402
from hub_tui.messages import KeyPressed  # noqa: E402
from hub_tui.modals.help import HelpModal  # noqa: E402
from hub_tui.modals.tasks import TasksModal  # noqa: E402
from hub_tui.models import Run  # noqa: E402
from hub_tui.panels import modals as modal_panels  # noqa: E402
from hub_tui.panels import status  # noqa: E402
from hub_tui.panels.screen import render  # noqa: E402

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def text_of(renderable, width=120) -> str:
    console = Console(file=io.StringIO(), width=width, height=40, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class NullClient:
    def __init__(self, base_url, token="", timeout=30.0):
        self.base_url = base_url
        self.token = token

    def set_token(self, token):
        self.token = token

    def request(self, method, path, body=None, params=None):
        return {}


def make_app(token="t") -> App:
    store = JsonConfigStore(Path("/nonexistent/hub-tui/config.json"))
    return App(store, Config(server_url="http://hub.local", token=token), client_factory=NullClient)


class ScreenTests(unittest.TestCase):
    def test_login_screen(self):
        app = make_app(token="")
        out = text_of(render(app, 120))
        self.assertIn("Hub Login", out)
        self.assertIn("Username", out)
        self.assertIn("Server: http://hub.local", out)

    def test_chat_only_without_modal(self):
        app = make_app()
        app.conversation.add_system("Logged in")
        screen = render(app, 120)
        self.assertIsInstance(screen, Group)
        self.assertIn("* Logged in", text_of(screen))

    def test_modal_replaces_chat_when_narrow(self):
        app = make_app()
        app.modals.open(HelpModal())
        screen = render(app, 80)
        self.assertIsInstance(screen, Group)
        out = text_of(screen, width=80)
        self.assertIn("Help", out)
        self.assertNotIn("No messages yet", out)

    def test_modal_beside_chat_when_wide(self):
        app = make_app()
        app.modals.open(HelpModal())
        screen = render(app, 160)
        self.assertIsInstance(screen, Layout)
        out = text_of(screen, width=160)
        self.assertIn("No messages yet", out)
        self.assertIn("Help", out)

    def test_streaming_message_shows_cursor(self):
        app = make_app()
        app.conversation.open_stream(1)
        app.conversation.append_chunk(1, "partial")
        self.assertIn("partial▌", text_of(render(app, 120)))


class StatusBarTests(unittest.TestCase):
    def test_counts_and_quit_hint(self):
        line = status.render("http://hub.local", True, "@chef", running=2, attention=1, quit_hint=True)
        self.assertIn("connected", line.plain)
        self.assertIn("context: @chef", line.plain)
        self.assertIn("running: 2", line.plain)
        self.assertIn("attention: 1", line.plain)
        self.assertIn("Press ctrl+c again to quit", line.plain)

    def test_offline(self):
        line = status.render("", False, "hub", running=0, attention=0, quit_hint=False, error="timeout")
        self.assertIn("offline", line.plain)
        self.assertNotIn("running", line.plain)
        self.assertIn("timeout", line.plain)


class TasksPanelTests(unittest.TestCase):
    def test_sections_and_pending_dismiss(self):
        attention = Run(
            id="a1",
            workflow="inbox_sweep",
            status="failed",
            started_at="2026-10-18T11:00:00Z",
            ended_at="2026-10-18T11:02:05Z",
            needs_attention=True,
        )
        running = Run(id="r1", workflow="nightly", status="running", started_at="2026-10-18T11:50:00Z")
        modal = TasksModal(NullClient(""), running=[running])
        modal.sections["attention"] = [attention]
        modal._build_rows()
        modal.loading = False
        modal.update(KeyPressed("d"))

        panel = modal_panels.render_tasks(modal, now=NOW)
        self.assertIsInstance(panel, Panel)
        out = text_of(panel)
        self.assertIn("Needs attention (1)", out)
        self.assertIn("Running (1)", out)
        self.assertIn("started 10 mins ago", out)
        self.assertIn("2m 5s", out)
        self.assertIn("press d again to dismiss", out)

    def test_unknown_kind_falls_back(self):
        class Odd:
            kind = "odd"
            title = "Odd one"

        self.assertIn("Odd one", text_of(modal_panels.render(Odd())))


if __name__ == "__main__":
    unittest.main()
