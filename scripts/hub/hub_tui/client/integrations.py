"""Integration listing and credential configuration."""

from __future__ import annotations

from hub_tui.client import HubClient, segment
from hub_tui.errors import ExecutionError
from hub_tui.models import Integration


def list_integrations(client: HubClient) -> list[Integration]:
    body = client.request("GET", "/integrations")
    return [Integration.from_dict(i) for i in body.get("integrations") or []]


def configure(client: HubClient, name: str, profile: str, config: dict[str, str]) -> None:
    client.request("POST", f"/integrations/{segment(name)}/configure", {"profile": profile, "config": config})


def test(client: HubClient, name: str) -> None:
    body = client.request("POST", f"/integrations/{segment(name)}/test")
    if isinstance(body, dict) and body.get("success") is False:
        raise ExecutionError(str(body.get("error") or body.get("message") or "test failed"))
