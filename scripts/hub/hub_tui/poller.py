"""Tracking of triggered workflow runs and reconciliation against polled snapshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Iterable

from hub_tui.models import STATUS_COMPLETED, STATUS_PENDING, STATUS_RUNNING, Run

logger = logging.getLogger(__name__)

IN_FLIGHT = (STATUS_RUNNING, STATUS_PENDING)


@dataclass(frozen=True)
class Notification:
    text: str
    success: bool


def completion_notice(run: Run) -> Notification:
    if run.succeeded:
        return Notification(f"Workflow completed: {run.workflow}", True)
    error = run.error_text
    suffix = f": {error}" if error else ""
    return Notification(f"Workflow failed: {run.workflow}{suffix}", False)


class TaskTracker:
    """Running, completed and failed runs known to this session, deduplicated by id."""

    def __init__(self) -> None:
        self.running: list[Run] = []
        self.completed: list[Run] = []
        self.failed: list[Run] = []

    @property
    def has_running(self) -> bool:
        return bool(self.running)

    @property
    def attention_count(self) -> int:
        return sum(1 for run in self.completed + self.failed if run.needs_attention)

    def find(self, run_id: str) -> Run | None:
        for run in self.running + self.completed + self.failed:
            if run.id == run_id:
                return run
        return None

    def track(self, run_id: str, workflow: str, started_at: str | None = None) -> bool:
        """Record a freshly triggered run; return True when it is the first running one."""
        if self.find(run_id) is not None:
            return False
        was_idle = not self.running
        started = started_at or datetime.now(timezone.utc).isoformat()
        self.running.append(Run(id=run_id, workflow=workflow, status=STATUS_RUNNING, started_at=started))
        return was_idle

    def reconcile(self, snapshot: Iterable[Run]) -> list[Notification]:
        """Fold a polled snapshot into the buckets; return one notice per finished tracked run.

        Applying the same snapshot again changes nothing and notifies nothing.
        """
        by_id = {run.id: run for run in snapshot}
        notices: list[Notification] = []

        still_running: list[Run] = []
        for run in self.running:
            current = by_id.get(run.id)
            if current is None:
                # Gone from today's listing; it can only have finished.
                finished = replace(run, status=STATUS_COMPLETED)
                self._file(finished)
                notices.append(completion_notice(finished))
                logger.info("run %s absent from snapshot, marked completed", run.id)
            elif current.status in IN_FLIGHT:
                still_running.append(current)
            else:
                self._file(current)
                notices.append(completion_notice(current))
                logger.info("run %s finished with status %s", run.id, current.status)
        self.running = still_running

        for run in list(self.completed + self.failed):
            current = by_id.get(run.id)
            if current is not None and current.status not in IN_FLIGHT:
                self._file(current)

        for run in by_id.values():
            if self.find(run.id) is not None:
                continue
            if run.status in IN_FLIGHT:
                self.running.append(run)
            else:
                self._file(run)
        return notices

    def _file(self, run: Run) -> None:
        target, other = (self.completed, self.failed) if run.succeeded else (self.failed, self.completed)
        other[:] = [r for r in other if r.id != run.id]
        for idx, existing in enumerate(target):
            if existing.id == run.id:
                target[idx] = run
                return
        target.append(run)
