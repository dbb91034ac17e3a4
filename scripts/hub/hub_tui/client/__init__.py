"""HTTP transport for the hub service and shared response helpers."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator
from urllib.parse import quote

import requests

from hub_tui.errors import (
    APIError,
    AuthError,
    NotFoundError,
    ServerValidationError,
    TransportError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
SSE_CONTENT_TYPE = "text/event-stream"


@dataclass(frozen=True)
class SSEEvent:
    event: str
    data: dict[str, Any] = field(default_factory=dict)


def segment(value: str) -> str:
    """Quote a value for use as one URL path segment."""
    return quote(str(value), safe="")


def error_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        for key in ("error", "message"):
            value = body.get(key)
            if isinstance(value, dict):
                value = value.get("message")
            if value:
                return str(value)
    return fallback


def raise_for_response(response: requests.Response) -> None:
    if 200 <= response.status_code < 300:
        return
    try:
        body = response.json()
    except ValueError:
        body = None
    message = error_message(body, response.text.strip() or response.reason or "request failed")
    status = response.status_code
    if status == 401:
        raise AuthError(message)
    if status == 404:
        raise NotFoundError(message)
    if status in (400, 422) and isinstance(body, dict) and isinstance(body.get("errors"), dict):
        field_errors = {str(k): str(v) for k, v in body["errors"].items()}
        raise ServerValidationError(field_errors, message, status_code=status)
    raise APIError(status, message)


def parse_sse(lines: Iterable[str], token=None) -> Iterator[SSEEvent]:
    """Yield typed events from server-sent-event lines.

    ``event:`` sets the type for the following ``data:`` line; a blank line
    resets it. Data that is not a JSON object is skipped. Iteration stops as
    soon as ``token`` is cancelled.
    """
    current = ""
    for raw in lines:
        if token is not None and token.cancelled:
            return
        line = raw.rstrip("\r") if isinstance(raw, str) else raw.decode("utf-8").rstrip("\r")
        if not line:
            current = ""
            continue
        if line.startswith("event:"):
            current = line[len("event:"):].strip()
            continue
        if not line.startswith("data:"):
            continue
        payload = line[len("data:"):].strip()
        try:
            data = json.loads(payload)
        except json.JSONDecodeError:
            logger.debug("skipping non-JSON SSE data for event %r", current)
            continue
        if isinstance(data, dict):
            yield SSEEvent(event=current, data=data)


class HubClient:
    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._session = session or requests.Session()

    def set_token(self, token: str) -> None:
        self.token = token

    def _headers(self, accept: str = "application/json") -> dict[str, str]:
        headers = {"Accept": accept, "Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _send(self, method: str, path: str, body: Any, params: dict | None, accept: str, stream: bool):
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            return self._session.request(
                method=method,
                url=url,
                json=body,
                params={k: v for k, v in (params or {}).items() if v not in (None, "")} or None,
                headers=self._headers(accept),
                timeout=self.timeout,
                stream=stream,
            )
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"cannot connect to server: {exc}") from exc

    def request(self, method: str, path: str, body: Any = None, params: dict | None = None) -> Any:
        response = self._send(method, path, body, params, "application/json", stream=False)
        raise_for_response(response)
        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise APIError(response.status_code, "invalid response from server") from exc

    def stream(self, path: str, body: Any, token=None) -> Iterator[SSEEvent]:
        """POST ``body`` and yield SSE events until the stream ends or ``token`` is cancelled.

        A server that answers with plain JSON instead of an event stream is
        treated as a single ``done`` event.
        """
        response = self._send("POST", path, body, None, SSE_CONTENT_TYPE, stream=True)
        try:
            raise_for_response(response)
            content_type = response.headers.get("Content-Type", "")
            if SSE_CONTENT_TYPE not in content_type:
                try:
                    data = response.json()
                except ValueError as exc:
                    raise APIError(response.status_code, "invalid response from server") from exc
                yield SSEEvent(event="done", data=data if isinstance(data, dict) else {})
                return
            response.encoding = "utf-8"
            try:
                yield from parse_sse(response.iter_lines(decode_unicode=True), token)
            except requests.exceptions.RequestException as exc:
                raise TransportError(f"stream interrupted: {exc}") from exc
        finally:
            response.close()
