"""Form renderer shared by login, settings and modal forms."""

from __future__ import annotations

from rich.table import Table
from rich.text import Text

from hub_tui.form import BUTTON, CHECKBOX, SELECT, TEXTAREA, Form, FormField

CURSOR = "▏"


def _with_cursor(value: str, cursor: int) -> Text:
    return Text(value[:cursor]) + Text(CURSOR, style="bold cyan") + Text(value[cursor:])


def field_value(f: FormField, focused: bool) -> Text:
    if f.kind == CHECKBOX:
        return Text("[x]" if f.checked else "[ ]", style="bold" if focused else "")
    if f.kind == BUTTON:
        return Text(f"[ {f.label} ]", style="reverse bold" if focused else "bold")
    if f.kind == SELECT:
        if not f.options:
            return Text("(no options)", style="dim")
        shown = f.label_for(f.value) if f.value else "(select)"
        return Text(f"< {shown} >" if focused else shown)
    value = "•" * len(f.value) if f.password else f.value
    if focused:
        return _with_cursor(value, min(f.cursor, len(value)))
    if not value and f.kind != TEXTAREA:
        return Text("-", style="dim")
    return Text(value)


def render_form(form: Form) -> Table:
    table = Table.grid(expand=True, padding=(0, 1))
    table.add_column("label", style="bold", no_wrap=True)
    table.add_column("value", overflow="fold")
    for idx, f in enumerate(form.fields):
        focused = idx == form.focus
        if f.kind == BUTTON:
            table.add_row("", field_value(f, focused))
            continue
        label = Text(f"{f.label}{' *' if f.required else ''}", style="cyan bold" if focused else "bold")
        table.add_row(label, field_value(f, focused))
        if f.description and focused:
            table.add_row("", Text(f.description, style="dim"))
        if f.error:
            table.add_row("", Text(f.error, style="red"))
    return table
