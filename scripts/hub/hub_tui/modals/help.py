"""Command and key reference."""

from __future__ import annotations

from typing import Any

from hub_tui.messages import KeyPressed
from hub_tui.modals import NOT_HANDLED, Modal, clamp

HELP_LINES: list[tuple[str, str]] = [
    ("Commands", ""),
    ("/help", "Show this reference"),
    ("/clear", "Clear the conversation"),
    ("/hub", "Return to hub context"),
    ("/refresh", "Reload assistants, workflows and modules"),
    ("/tasks", "Running, finished and attention-needing runs"),
    ("/workflows", "Browse and run workflows"),
    ("/modules", "Enable or disable modules"),
    ("/integrations", "Configure integration credentials and LLM profiles"),
    ("/settings", "Server URL and session"),
    ("/exit", "Quit"),
    ("", ""),
    ("Input", ""),
    ("@name ...", "Ask through the hub, routed to an assistant"),
    ("#workflow", "Trigger a workflow run"),
    ("tab", "Complete @, # or / names"),
    ("", ""),
    ("Keys", ""),
    ("ctrl+c", "Cancel a streaming answer; press twice to quit"),
    ("ctrl+l", "Redraw the screen"),
    ("esc", "Close the open panel or go back"),
    ("ctrl+s", "Save the open form"),
    ("d (twice)", "Confirm a delete or dismiss"),
]

VISIBLE_LINES = 14


class HelpModal(Modal):
    kind = "help"
    title = "Help"

    def __init__(self) -> None:
        self.scroll = 0

    def update(self, msg: Any):
        if not isinstance(msg, KeyPressed):
            return self, []
        max_scroll = max(0, len(HELP_LINES) - VISIBLE_LINES)
        if msg.key in ("up", "k"):
            self.scroll = clamp(self.scroll - 1, max_scroll + 1)
        elif msg.key in ("down", "j"):
            self.scroll = clamp(self.scroll + 1, max_scroll + 1)
        else:
            return NOT_HANDLED, []
        return self, []

    @property
    def visible(self) -> list[tuple[str, str]]:
        return HELP_LINES[self.scroll:self.scroll + VISIBLE_LINES]
