"""Status bar renderer."""

from __future__ import annotations

from rich.text import Text


def render(
    server_url: str,
    connected: bool,
    context: str,
    running: int,
    attention: int,
    quit_hint: bool,
    error: str = "",
) -> Text:
    line = Text()
    if connected:
        line.append("● connected", style="green")
    else:
        line.append("● offline", style="red")
    if server_url:
        line.append(f" {server_url}", style="dim")
    line.append("   context: ", style="dim")
    line.append(context, style="bold")
    if running:
        line.append(f"   running: {running}", style="yellow")
    if attention:
        line.append(f"   attention: {attention}", style="bold red")
    if error:
        line.append(f"   {error}", style="red")
    if quit_hint:
        line.append("   Press ctrl+c again to quit", style="bold yellow")
    return line
