"""Conversation transcript and input line."""

from __future__ import annotations

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from hub_tui.conversation import ROLE_HUB, ROLE_SYSTEM, ROLE_USER, ChatMessage, Conversation
from hub_tui.panels.form import CURSOR

MAX_MESSAGES = 60
MAX_SUGGESTIONS = 8

ROLE_STYLE = {
    ROLE_USER: "bold cyan",
    ROLE_HUB: "default",
    ROLE_SYSTEM: "yellow",
}


def _message(message: ChatMessage) -> Text:
    style = ROLE_STYLE.get(message.role, "default")
    if message.role == ROLE_USER:
        return Text(f"> {message.content}", style=style)
    if message.role == ROLE_SYSTEM:
        return Text(f"* {message.content}", style=style)
    text = Text(message.content, style=style)
    if message.streaming:
        text.append("▌", style="bold green")
    return text


def render_input(conv: Conversation, placeholder: str) -> Group:
    line = Text("› ", style="bold green")
    if conv.input:
        line.append(conv.input[: conv.cursor])
        line.append(CURSOR, style="bold cyan")
        line.append(conv.input[conv.cursor:])
    else:
        line.append(CURSOR, style="bold cyan")
        line.append(placeholder, style="dim")
    parts = [line]
    if conv.suggesting:
        start = max(0, conv.suggestion_index - MAX_SUGGESTIONS + 1)
        for idx, item in enumerate(conv.suggestions[start:start + MAX_SUGGESTIONS], start=start):
            label = f"{conv.suggestion_prefix}{item}"
            if idx == conv.suggestion_index:
                parts.append(Text(f"  {label}", style="reverse"))
            else:
                parts.append(Text(f"  {label}", style="dim"))
    return Group(*parts)


def render(conv: Conversation, title: str, placeholder: str = "Ask the hub, @assistant, #workflow or /help") -> Panel:
    shown = conv.messages[-MAX_MESSAGES:]
    if shown:
        body = [_message(m) for m in shown]
    else:
        body = [Text("No messages yet. Type /help for commands.", style="dim")]
    body.append(Text(""))
    body.append(render_input(conv, placeholder))
    return Panel(Group(*body), title=f"[bold]{title}[/bold]", border_style="cyan")
