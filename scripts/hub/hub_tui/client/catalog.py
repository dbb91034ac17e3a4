"""Assistants, workflows and modules listings."""

from __future__ import annotations

from hub_tui.client import HubClient, segment
from hub_tui.errors import APIError
from hub_tui.models import Assistant, Module, Workflow


def list_assistants(client: HubClient) -> list[Assistant]:
    body = client.request("GET", "/assistants")
    return [Assistant.from_dict(a) for a in body.get("assistants") or []]


def list_workflows(client: HubClient) -> list[Workflow]:
    body = client.request("GET", "/workflows")
    return [Workflow.from_dict(w) for w in body.get("workflows") or []]


def run_workflow(client: HubClient, name: str) -> str:
    body = client.request("POST", f"/workflows/{segment(name)}/run")
    run_id = str(body.get("run_id") or "")
    if not run_id:
        raise APIError(200, f"workflow {name} started without a run id")
    return run_id


def list_modules(client: HubClient) -> list[Module]:
    body = client.request("GET", "/modules")
    return [Module.from_dict(m) for m in body.get("modules") or []]


def set_module_enabled(client: HubClient, name: str, enabled: bool) -> None:
    action = "enable" if enabled else "disable"
    client.request("POST", f"/modules/{segment(name)}/{action}")
