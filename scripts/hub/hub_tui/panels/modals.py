"""Renderers for every modal kind."""

from __future__ import annotations

from datetime import datetime, timezone

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from hub_tui.formatting import format_duration, format_elapsed, format_run_output, format_timestamp, run_duration
from hub_tui.modals.integrations import VIEW_CONFIGURE, VIEW_NAME
from hub_tui.modals.resource_config import ITEM_ACCOUNT, ITEM_PROFILE, VIEW_LIST
from hub_tui.modals.tasks import (
    ITEMS_PER_PAGE,
    SECTION_ATTENTION,
    SECTION_COMPLETED,
    SECTION_FAILED,
    SECTION_RUNNING,
    VIEW_DETAIL,
    VIEW_HISTORY,
)
from hub_tui.models import STATUS_RUNNING, Run
from hub_tui.panels import border_for, footer, kv_table, select_table, status_of
from hub_tui.panels.form import render_form

SECTION_TITLES = {
    SECTION_ATTENTION: "Needs attention",
    SECTION_RUNNING: "Running",
    SECTION_COMPLETED: "Completed today",
    SECTION_FAILED: "Failed today",
}

STATUS_STYLE = {
    "running": "yellow",
    "pending": "yellow",
    "completed": "green",
    "failed": "red",
    "cancelled": "dim",
}


def _panel(title: str, parts: list, error: str = "", busy: bool = False) -> Panel:
    return Panel(Group(*parts), title=f"[bold]{title}[/bold]", border_style=border_for(status_of(error, busy)))


def _loading(parts: list, loading: bool, empty: bool, message: str) -> None:
    if loading:
        parts.append(Text("Loading...", style="dim"))
    elif empty:
        parts.append(Text(message, style="dim"))


def render_help(modal) -> Panel:
    rows = []
    for key, text in modal.visible:
        if key and not text:
            rows.append(Text(key, style="bold underline"))
        else:
            row = Text(f"{key:<14}", style="cyan")
            row.append(text)
            rows.append(row)
    rows.extend(footer(hint="j/k: scroll  esc: close"))
    return _panel(modal.title, rows)


def render_settings(modal) -> Panel:
    if modal.editing:
        parts = [render_form(modal.form)]
        parts.extend(footer(error=modal.error, hint="ctrl+s: save  esc: cancel"))
        return _panel("Edit Settings", parts, modal.error)
    settings = modal.config.settings
    rows = [
        ("Server", modal.config.server_url or "-"),
        ("Connection", "connected" if modal.connected else "offline"),
        ("Session", "logged in" if modal.config.token else "logged out"),
        ("Token expires", modal.config.token_expires or "-"),
        ("Poll interval", f"{settings['poll_interval_seconds']:g}s"),
        ("Models per page", str(settings["models_page_size"])),
    ]
    parts = [kv_table(rows)]
    parts.extend(footer(error=modal.error, hint="e: edit  esc: close"))
    return _panel(modal.title, parts, modal.error)


def render_modules(modal) -> Panel:
    rows = []
    for module in modal.modules:
        row = Text("[on] " if module.enabled else "[off] ", style="green" if module.enabled else "dim")
        row.append(module.name, style="bold")
        if module.version:
            row.append(f" {module.version}", style="dim")
        if module.description:
            row.append(f"  {module.description}", style="dim")
        rows.append(row)
    parts = [select_table(rows, modal.selected)]
    _loading(parts, modal.loading, not modal.modules, "No modules installed")
    parts.extend(footer(error=modal.error, hint="enter: toggle  r: reload  esc: close"))
    return _panel(modal.title, parts, modal.error, modal.loading)


def render_workflows(modal) -> Panel:
    rows = []
    for workflow in modal.workflows:
        row = Text(f"#{workflow.name}", style="bold" if workflow.enabled else "dim")
        if not workflow.enabled:
            row.append(" (disabled)", style="dim")
        if workflow.description:
            row.append(f"  {workflow.description}", style="dim")
        rows.append(row)
    parts = [select_table(rows, modal.selected)]
    _loading(parts, modal.loading, not modal.workflows, "No workflows available")
    parts.extend(footer(error=modal.error, hint="enter: run  r: reload  esc: close"))
    return _panel(modal.title, parts, modal.error, modal.loading)


def _render_credential_flow(flow) -> Panel:
    if flow.view == VIEW_NAME:
        parts = [Text("Profile name: ", style="bold") + Text(flow.new_name + "▏")]
        parts.extend(footer(hint="letters, digits, - and _  enter: continue  esc: back"))
        return _panel(flow.title, parts)
    if flow.view == VIEW_CONFIGURE and flow.form is not None:
        parts = [render_form(flow.form)]
        parts.extend(footer(error=flow.error, notice="Saving..." if flow.saving else "", hint="ctrl+s: save  esc: back"))
        return _panel(flow.title, parts, flow.error, flow.saving)
    rows = []
    for option in flow.options:
        row = Text(option)
        if option == flow.integration.default_profile:
            row.append(" (default)", style="green")
        rows.append(row)
    parts = [select_table(rows, flow.selected)]
    notice = "Testing..." if flow.testing else flow.notice
    parts.extend(footer(error=flow.error, notice=notice, hint="enter: configure  t: test  r: reload  esc: back"))
    return _panel(flow.title, parts, flow.error, flow.refreshing)


def _render_llm_flow(flow) -> Panel:
    if flow.view != VIEW_LIST:
        parts = []
        if flow.form is not None:
            parts.append(render_form(flow.form))
        else:
            parts.append(Text("Loading providers...", style="dim"))
        if flow.fields_loading:
            parts.append(Text("Loading provider fields...", style="dim"))
        if flow.models_loading:
            parts.append(Text("Loading models...", style="dim"))
        elif flow.form is not None and flow.form.field("model") is not None:
            more = " (n: next page)" if flow.models.has_more else ""
            back = " (p: previous page)" if flow.models.page > 1 else ""
            parts.append(Text(f"Models page {flow.models.page}{more}{back}", style="dim"))
        parts.extend(footer(error=flow.error, notice="Saving..." if flow.saving else "", hint="ctrl+s: save  esc: back"))
        return _panel(flow.title, parts, flow.error, flow.saving)

    rows = []
    for item in flow.items:
        row = Text(item.label, style="bold" if item.kind in (ITEM_PROFILE, ITEM_ACCOUNT) else "cyan")
        if item.kind == ITEM_PROFILE and item.profile is not None:
            profile = item.profile
            row.append(f"  {profile.provider}/{profile.account} {profile.model}", style="dim")
            if profile.is_default:
                row.append(" (default)", style="green")
            if flow.confirm.is_pending("delete_profile", profile.name):
                row.append("  press d again to delete", style="bold red")
        elif item.kind == ITEM_ACCOUNT and flow.confirm.is_pending("delete_account", item.account_id):
            row.append("  press d again to delete", style="bold red")
        rows.append(row)
    parts = [select_table(rows, flow.selected)]
    _loading(parts, flow.loading, False, "")
    parts.extend(
        footer(
            error=flow.error,
            notice=flow.notice,
            hint="enter: open  d: delete  t: test  s: set default  r: reload  esc: back",
        )
    )
    return _panel(flow.title, parts, flow.error, flow.loading)


FLOW_RENDERERS = {
    "api_key": _render_credential_flow,
    "llm": _render_llm_flow,
}


def render_integrations(modal) -> Panel:
    if modal.flow is not None:
        return FLOW_RENDERERS[modal.flow.kind](modal.flow)
    rows = []
    for integration in modal.integrations:
        row = Text(integration.name, style="bold")
        row.append(f" [{integration.config_type}]", style="dim")
        if integration.configured:
            row.append(" configured", style="green")
        else:
            row.append(" not configured", style="yellow")
        if integration.description:
            row.append(f"  {integration.description}", style="dim")
        rows.append(row)
    parts = [select_table(rows, modal.selected)]
    _loading(parts, modal.loading, not modal.integrations, "No integrations available")
    parts.extend(footer(error=modal.error, notice=modal.notice, hint="enter: configure  t: test  r: reload  esc: close"))
    return _panel(modal.title, parts, modal.error, modal.loading)


def _run_row(run: Run, now: datetime, dismiss_pending: bool) -> Text:
    row = Text(f"{run.workflow or run.id}", style="bold")
    row.append(f" {run.status}", style=STATUS_STYLE.get(run.status, "default"))
    if run.status == STATUS_RUNNING:
        row.append(f"  started {format_elapsed(run.started_at, now)}", style="dim")
    else:
        row.append(f"  {format_duration(run_duration(run.started_at, run.ended_at, now))}", style="dim")
    if run.needs_attention:
        row.append("  !", style="bold red")
    if dismiss_pending:
        row.append("  press d again to dismiss", style="bold red")
    return row


def _render_task_detail(modal, now: datetime) -> Panel:
    run = modal.detail
    duration = run_duration(run.started_at, run.ended_at, now)
    rows = [
        ("Workflow", run.workflow or "-"),
        ("Run", run.id),
        ("Status", run.status),
        ("Started", format_timestamp(run.started_at)),
        ("Finished", format_timestamp(run.ended_at)),
        ("Duration", format_duration(duration)),
        ("Needs attention", "yes" if run.needs_attention else "no"),
    ]
    if run.error_text:
        rows.append(("Error", run.error_text))
    parts = [kv_table(rows)]
    output = format_run_output(run.result)
    if output:
        parts.append(Text(""))
        parts.append(Text("Output", style="bold underline"))
        parts.append(Text(output))
    if modal.detail_loading:
        parts.append(Text("Loading...", style="dim"))
    if modal.confirm.is_pending("dismiss", run.id):
        parts.append(Text("Press d again to dismiss", style="bold red"))
    parts.extend(footer(error=modal.detail_error or modal.error, hint="c: cancel  d: dismiss  r: refresh  esc: back"))
    return _panel(modal.title, parts, modal.detail_error, modal.detail_loading)


def _render_task_history(modal, now: datetime) -> Panel:
    rows = [_run_row(run, now, modal.confirm.is_pending("dismiss", run.id)) for run in modal.history]
    parts = [select_table(rows, modal.selected)]
    _loading(parts, modal.loading, not modal.history, "No runs recorded")
    total = f" of {modal.history_total}" if modal.history_total else ""
    parts.append(Text(f"Page {modal.history_page + 1}{total}", style="dim"))
    parts.extend(footer(error=modal.error, hint="enter: detail  n/p: page  d: dismiss  esc: back"))
    return _panel(modal.title, parts, modal.error, modal.loading)


def render_tasks(modal, now: datetime | None = None) -> Panel:
    now = now or datetime.now(timezone.utc)
    if modal.view == VIEW_DETAIL and modal.detail is not None:
        return _render_task_detail(modal, now)
    if modal.view == VIEW_HISTORY:
        return _render_task_history(modal, now)

    parts = []
    index = 0
    for section in (SECTION_ATTENTION, SECTION_RUNNING, SECTION_COMPLETED, SECTION_FAILED):
        runs = modal.sections[section]
        shown = [run for name, run in modal.rows if name == section]
        heading = Text(f"{SECTION_TITLES[section]} ({len(runs)})", style="bold underline")
        if section in modal.pages and len(runs) > ITEMS_PER_PAGE:
            pages = (len(runs) - 1) // ITEMS_PER_PAGE + 1
            heading.append(f"  page {modal.pages[section] + 1}/{pages}", style="dim")
        parts.append(heading)
        rows = [_run_row(run, now, modal.confirm.is_pending("dismiss", run.id)) for run in shown]
        selected = modal.selected - index if index <= modal.selected < index + len(shown) else -1
        if rows:
            parts.append(select_table(rows, selected))
        else:
            parts.append(Text("  none", style="dim"))
        index += len(shown)
    _loading(parts, modal.loading, False, "")
    parts.extend(footer(error=modal.error, hint="enter: detail  c: cancel  d: dismiss  n/p: page  h: history  esc: close"))
    return _panel(modal.title, parts, modal.error, modal.loading)


def render_paramform(modal) -> Panel:
    parts = []
    if modal.schema.description:
        parts.append(Text(modal.schema.description, style="dim"))
    parts.append(render_form(modal.form))
    parts.extend(footer(hint="tab: next field  ctrl+s: submit  esc: cancel"))
    return _panel(modal.title, parts, "error" if modal.form.has_errors() else "")


MODAL_RENDERERS = {
    "help": render_help,
    "settings": render_settings,
    "modules": render_modules,
    "workflows": render_workflows,
    "integrations": render_integrations,
    "tasks": render_tasks,
    "paramform": render_paramform,
}


def render(modal) -> Panel:
    renderer = MODAL_RENDERERS.get(modal.kind)
    if renderer is None:
        return Panel(Text(modal.title or modal.kind), title=f"[bold]{modal.kind}[/bold]")
    return renderer(modal)
