"""Login screen renderer."""

from __future__ import annotations

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from hub_tui.form import Form
from hub_tui.panels import border_for, footer, status_of
from hub_tui.panels.form import render_form


def render(form: Form | None, server_url: str, error: str, busy: bool) -> Panel:
    parts = []
    if server_url:
        parts.append(Text(f"Server: {server_url}", style="dim"))
    if form is not None:
        parts.append(render_form(form))
    parts.extend(footer(error=error, notice="Logging in..." if busy else "", hint="tab/enter: next field  ctrl+s: log in"))
    return Panel(Group(*parts), title="[bold]Hub Login[/bold]", border_style=border_for(status_of(error, busy)))
