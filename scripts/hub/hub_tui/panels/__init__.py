"""Panel rendering helpers."""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

STATUS_BORDER = {
    "ok": "cyan",
    "busy": "yellow",
    "error": "red",
}


def border_for(status: str) -> str:
    return STATUS_BORDER.get(status, "cyan")


def status_of(error: str, busy: bool = False) -> str:
    if error:
        return "error"
    return "busy" if busy else "ok"


def empty_panel(title: str, message: str = "Nothing here yet") -> Panel:
    return Panel(Text(message, style="dim"), title=f"[bold]{title}[/bold]", border_style="cyan")


def kv_table(rows: list[tuple[str, str]]) -> Table:
    table = Table(box=None, show_header=False, expand=True, pad_edge=False)
    table.add_column("key", style="bold", no_wrap=True)
    table.add_column("value", style="default", overflow="fold")
    for key, value in rows:
        table.add_row(key, value)
    return table


def select_table(rows: list[Text], selected: int) -> Table:
    """One row per entry with the selected row marked."""
    table = Table.grid(expand=True)
    table.add_column(no_wrap=True, width=2)
    table.add_column(overflow="ellipsis")
    for idx, row in enumerate(rows):
        if idx == selected:
            row = row.copy()
            row.stylize("reverse")
            table.add_row(Text(">", style="bold cyan"), row)
        else:
            table.add_row("", row)
    return table


def panel_from_table(title: str, status: str, table: Table) -> Panel:
    return Panel(table, title=f"[bold]{title}[/bold]", border_style=border_for(status))


def panel_from_text(title: str, status: str, text: str) -> Panel:
    return Panel(Text(text), title=f"[bold]{title}[/bold]", border_style=border_for(status))


def footer(error: str = "", notice: str = "", hint: str = "") -> list[Text]:
    lines = []
    if error:
        lines.append(Text(error, style="red"))
    if notice:
        lines.append(Text(notice, style="yellow"))
    if hint:
        lines.append(Text(hint, style="dim"))
    return lines
