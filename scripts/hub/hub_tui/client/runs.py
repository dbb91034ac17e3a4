"""Workflow run listing, detail and lifecycle calls."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date

from hub_tui.client import HubClient, segment
from hub_tui.errors import NotFoundError
from hub_tui.models import Pagination, Run, RunsPage

logger = logging.getLogger(__name__)

DETAIL_RETRIES = 3
DETAIL_RETRY_DELAY = 0.3


@dataclass
class RunFilter:
    limit: int = 0
    cursor: str = ""
    status: str = ""
    since: str = ""
    until: str = ""
    needs_attention: bool | None = None

    def to_params(self) -> dict[str, str]:
        params = {
            "limit": str(self.limit) if self.limit > 0 else "",
            "cursor": self.cursor,
            "status": self.status,
            "since": self.since,
            "until": self.until,
        }
        if self.needs_attention is not None:
            params["needs_attention"] = "true" if self.needs_attention else "false"
        return params


def list_runs(client: HubClient, run_filter: RunFilter | None = None) -> RunsPage:
    params = (run_filter or RunFilter()).to_params()
    body = client.request("GET", "/runs", params=params)
    return RunsPage(
        runs=[Run.from_dict(r) for r in body.get("runs") or []],
        pagination=Pagination.from_dict(body.get("pagination")),
    )


def list_today(client: HubClient) -> RunsPage:
    """Runs started since local midnight, the window the poller reconciles against."""
    return list_runs(client, RunFilter(since=date.today().isoformat()))


def get_run(client: HubClient, run_id: str) -> Run:
    return Run.from_dict(client.request("GET", f"/runs/{segment(run_id)}"))


def get_run_with_retry(client: HubClient, run_id: str, retries: int = DETAIL_RETRIES, delay: float = DETAIL_RETRY_DELAY, sleep=time.sleep) -> Run:
    """Fetch a run, retrying while the server does not know it yet.

    A just-finished run can be listed before its detail record is written.
    """
    for attempt in range(retries):
        try:
            return get_run(client, run_id)
        except NotFoundError:
            if attempt == retries - 1:
                raise
            logger.debug("run %s not found, retry %d/%d", run_id, attempt + 1, retries)
            sleep(delay)
    raise NotFoundError(f"run {run_id} not found")


def cancel_run(client: HubClient, run_id: str) -> None:
    client.request("POST", f"/runs/{segment(run_id)}/cancel")


def dismiss_run(client: HubClient, run_id: str) -> None:
    client.request("POST", f"/runs/{segment(run_id)}/dismiss")
