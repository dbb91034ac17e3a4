"""Ask and assistant-chat streams, plus direct parameter submission."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from hub_tui.client import HubClient, segment
from hub_tui.models import AskOutcome


@dataclass(frozen=True)
class Route:
    type: str
    target: str


@dataclass(frozen=True)
class Chunk:
    content: str


@dataclass(frozen=True)
class Done:
    outcome: AskOutcome


def _events(client: HubClient, path: str, body: dict[str, Any], token) -> Iterator[Route | Chunk | Done]:
    saw_chunk = False
    for event in client.stream(path, body, token):
        data = event.data
        if event.event == "route":
            yield Route(type=str(data.get("type") or ""), target=str(data.get("target") or ""))
        elif event.event == "assistant":
            yield Route(type="assistant", target=str(data.get("name") or ""))
        elif event.event == "chunk":
            content = str(data.get("content") or "")
            if content:
                saw_chunk = True
                yield Chunk(content)
        elif event.event == "done":
            outcome = AskOutcome.from_dict(data)
            if outcome.message and not saw_chunk and not outcome.status:
                yield Chunk(outcome.message)
            yield Done(outcome)
            return


def ask(client: HubClient, text: str, token=None) -> Iterator[Route | Chunk | Done]:
    """Stream an ask request. The iterator ends after ``Done`` or on cancellation."""
    return _events(client, "/ask", {"input": text}, token)


def assistant_chat(client: HubClient, assistant: str, text: str, token=None) -> Iterator[Route | Chunk | Done]:
    return _events(client, f"/assistants/{segment(assistant)}/chat", {"message": text}, token)


def submit_params(client: HubClient, target: str, params: dict[str, Any]) -> AskOutcome:
    body = client.request("POST", "/ask", {"target": target, "params": params})
    return AskOutcome.from_dict(body if isinstance(body, dict) else {})
