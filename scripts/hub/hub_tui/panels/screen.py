"""Whole-screen composition for the app state."""

from __future__ import annotations

from rich.console import Group
from rich.layout import Layout

from hub_tui.layout import modal_width, select_layout_mode
from hub_tui.panels import chat, login, modals, status


def _title(app) -> str:
    context = app.session.context
    if context.type == "assistant" and context.target:
        return f"Chat with @{context.target}"
    return "Hub"


def render(app, width: int):
    """Build the renderable for the current state at the given terminal width."""
    context = app.session.context
    bar = status.render(
        server_url=app.config.server_url,
        connected=app.connected,
        context=f"@{context.target}" if context.type == "assistant" and context.target else "hub",
        running=len(app.tracker.running),
        attention=app.tracker.attention_count,
        quit_hint=app.quit_hint,
        error=app.status_error or app.session.cache.error,
    )
    if app.state == "login":
        return Group(login.render(app.login_form, app.config.server_url, app.login_error, app.logging_in), bar)

    conversation = chat.render(app.conversation, _title(app))
    modal = app.modals.active
    if modal is None:
        return Group(conversation, bar)

    overlay = modals.render(modal)
    if select_layout_mode(width) == "narrow":
        return Group(overlay, bar)

    layout = Layout()
    layout.split_column(Layout(name="body"), Layout(bar, name="status", size=1))
    layout["body"].split_row(
        Layout(conversation, name="chat"),
        Layout(overlay, name="modal", size=modal_width(width)),
    )
    return layout
