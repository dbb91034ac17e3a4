"""Tasks modal: attention, running and finished runs with detail and history views."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from hub_tui.client import HubClient
from hub_tui.client import runs as runs_api
from hub_tui.commands import Command
from hub_tui.confirm import DEFAULT_CONFIRM_TIMEOUT, Confirmation
from hub_tui.errors import HubError
from hub_tui.formatting import parse_iso_timestamp
from hub_tui.messages import (
    ConfirmationExpired,
    KeyPressed,
    TaskCancelled,
    TaskDetailLoaded,
    TaskDismissed,
    TaskHistoryLoaded,
    TasksLoaded,
)
from hub_tui.modals import Modal, clamp
from hub_tui.models import STATUS_RUNNING, Run

ITEMS_PER_PAGE = 5
DEFAULT_HISTORY_PAGE_SIZE = 15

VIEW_LIST = "list"
VIEW_DETAIL = "detail"
VIEW_HISTORY = "history"

SECTION_ATTENTION = "attention"
SECTION_RUNNING = "running"
SECTION_COMPLETED = "completed"
SECTION_FAILED = "failed"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _recency(run: Run) -> datetime:
    if run.status == STATUS_RUNNING:
        return parse_iso_timestamp(run.started_at) or _EPOCH
    return parse_iso_timestamp(run.ended_at) or parse_iso_timestamp(run.started_at) or _EPOCH


def most_recent_first(runs: list[Run]) -> list[Run]:
    return sorted(runs, key=lambda r: (r.needs_attention, _recency(r)), reverse=True)


def classify(attention: list[Run], today: list[Run]) -> dict[str, list[Run]]:
    """Split runs into sections; attention runs are listed only once."""
    attention_ids = {r.id for r in attention}
    sections: dict[str, list[Run]] = {
        SECTION_ATTENTION: list(attention),
        SECTION_RUNNING: [],
        SECTION_COMPLETED: [],
        SECTION_FAILED: [],
    }
    for run in today:
        if run.id in attention_ids:
            continue
        if run.status == STATUS_RUNNING:
            sections[SECTION_RUNNING].append(run)
        elif run.succeeded:
            sections[SECTION_COMPLETED].append(run)
        else:
            sections[SECTION_FAILED].append(run)
    return {name: most_recent_first(runs) for name, runs in sections.items()}


def _page(runs: list[Run], page: int) -> list[Run]:
    start = page * ITEMS_PER_PAGE
    return runs[start:start + ITEMS_PER_PAGE]


def _max_page(runs: list[Run]) -> int:
    return max(0, (len(runs) - 1) // ITEMS_PER_PAGE)


class TasksModal(Modal):
    kind = "tasks"
    custom_close = True

    def __init__(
        self,
        client: HubClient,
        running: list[Run] | None = None,
        completed: list[Run] | None = None,
        failed: list[Run] | None = None,
        confirm_timeout: float = DEFAULT_CONFIRM_TIMEOUT,
        history_page_size: int = DEFAULT_HISTORY_PAGE_SIZE,
    ):
        self.client = client
        self.confirm = Confirmation(confirm_timeout)
        self.history_page_size = history_page_size
        self.sections = {
            SECTION_ATTENTION: [],
            SECTION_RUNNING: most_recent_first(list(running or [])),
            SECTION_COMPLETED: most_recent_first(list(completed or [])),
            SECTION_FAILED: most_recent_first(list(failed or [])),
        }
        self.pages = {SECTION_COMPLETED: 0, SECTION_FAILED: 0}
        self.rows: list[tuple[str, Run]] = []
        self.selected = 0
        self.loading = True
        self.error = ""

        self.view = VIEW_LIST
        self.previous_view = VIEW_LIST
        self.detail: Run | None = None
        self.detail_loading = False
        self.detail_error = ""

        self.history: list[Run] = []
        self.history_page = 0
        self.history_cursors: dict[int, str] = {0: ""}
        self.history_has_more = False
        self.history_total = 0
        self._build_rows()

    @property
    def title(self) -> str:
        if self.view == VIEW_DETAIL and self.detail is not None:
            return f"Task: {self.detail.workflow}"
        if self.view == VIEW_HISTORY:
            return "Task History"
        return "Tasks"

    def init(self) -> list:
        return [self._load()]

    # rows

    def _build_rows(self) -> None:
        rows: list[tuple[str, Run]] = []
        for section in (SECTION_ATTENTION, SECTION_RUNNING):
            rows.extend((section, run) for run in self.sections[section])
        for section in (SECTION_COMPLETED, SECTION_FAILED):
            rows.extend((section, run) for run in _page(self.sections[section], self.pages[section]))
        self.rows = rows
        self.selected = clamp(self.selected, len(rows))

    def _section_start(self, section: str) -> int:
        for idx, (name, _) in enumerate(self.rows):
            if name == section:
                return idx
        return self.selected

    @property
    def selected_run(self) -> Run | None:
        if 0 <= self.selected < len(self.rows):
            return self.rows[self.selected][1]
        return None

    @property
    def selected_section(self) -> str:
        if 0 <= self.selected < len(self.rows):
            return self.rows[self.selected][0]
        return ""

    # commands

    def _load(self) -> Command:
        client = self.client

        def run():
            try:
                attention = runs_api.list_runs(client, runs_api.RunFilter(needs_attention=True))
                today = runs_api.list_today(client)
            except HubError as exc:
                return TasksLoaded(error=exc)
            return TasksLoaded(attention=tuple(attention.runs), today=tuple(today.runs))

        return Command(run, label="list-tasks")

    def _load_detail(self, run_id: str) -> Command:
        client = self.client
        self.detail_loading = True
        self.detail_error = ""

        def run():
            try:
                return TaskDetailLoaded(run_id=run_id, run=runs_api.get_run_with_retry(client, run_id))
            except HubError as exc:
                return TaskDetailLoaded(run_id=run_id, error=exc)

        return Command(run, label="run-detail")

    def _load_history(self, page: int) -> Command:
        client, limit = self.client, self.history_page_size
        cursor = self.history_cursors.get(page, "")
        self.loading = True

        def run():
            try:
                result = runs_api.list_runs(client, runs_api.RunFilter(limit=limit, cursor=cursor))
            except HubError as exc:
                return TaskHistoryLoaded(page=page, error=exc)
            return TaskHistoryLoaded(page=page, runs=tuple(result.runs), pagination=result.pagination)

        return Command(run, label="run-history")

    def _cancel(self, run_id: str) -> Command:
        client = self.client

        def run():
            try:
                runs_api.cancel_run(client, run_id)
            except HubError as exc:
                return TaskCancelled(run_id=run_id, error=exc)
            return TaskCancelled(run_id=run_id)

        return Command(run, label="cancel-run")

    def _dismiss(self, run_id: str) -> Command:
        client = self.client

        def run():
            try:
                runs_api.dismiss_run(client, run_id)
            except HubError as exc:
                return TaskDismissed(run_id=run_id, error=exc)
            return TaskDismissed(run_id=run_id)

        return Command(run, label="dismiss-run")

    def _check_dismiss(self, run: Run | None) -> tuple[bool, list]:
        if run is None or not run.needs_attention:
            return False, []
        confirmed, cmds = self.confirm.check("dismiss", run.id)
        if confirmed:
            return True, [self._dismiss(run.id)]
        return False, cmds

    # update

    def update(self, msg: Any):
        if isinstance(msg, ConfirmationExpired):
            self.confirm.handle_expired(msg)
            return self, []
        if isinstance(msg, TasksLoaded):
            self.loading = False
            if msg.error is not None:
                self.error = str(msg.error)
                return self, []
            self.error = ""
            self.sections = classify(list(msg.attention), list(msg.today))
            self.pages = {SECTION_COMPLETED: 0, SECTION_FAILED: 0}
            self._build_rows()
            return self, []
        if isinstance(msg, TaskDetailLoaded):
            if self.detail is None or msg.run_id != self.detail.id:
                return self, []
            self.detail_loading = False
            if msg.error is not None:
                self.detail_error = str(msg.error)
            elif msg.run is not None:
                self.detail = msg.run
                self.detail_error = ""
            return self, []
        if isinstance(msg, TaskHistoryLoaded):
            self.loading = False
            if msg.error is not None:
                self.error = str(msg.error)
                return self, []
            self.error = ""
            self.history = list(msg.runs)
            self.history_page = msg.page
            self.history_total = msg.pagination.total
            self.history_has_more = msg.pagination.has_more
            self.selected = 0
            if msg.pagination.has_more and msg.pagination.next_cursor:
                self.history_cursors[msg.page + 1] = msg.pagination.next_cursor
            return self, []
        if isinstance(msg, (TaskCancelled, TaskDismissed)):
            self.confirm.clear()
            if msg.error is not None:
                self.error = str(msg.error)
                return self, []
            if self.view == VIEW_HISTORY:
                return self, [self._load_history(self.history_page)]
            self.loading = True
            return self, [self._load()]
        if not isinstance(msg, KeyPressed):
            return self, []
        if self.view == VIEW_DETAIL:
            return self._detail_key(msg.key)
        if self.view == VIEW_HISTORY:
            return self._history_key(msg.key)
        return self._list_key(msg.key)

    def _open_detail(self, run: Run, origin: str) -> list:
        self.detail = run
        self.previous_view = origin
        self.view = VIEW_DETAIL
        return [self._load_detail(run.id)]

    def _list_key(self, key: str):
        run = self.selected_run
        if key == "d":
            _, cmds = self._check_dismiss(run)
            return self, cmds
        self.confirm.clear()
        if key == "esc":
            return None, []
        if key in ("up", "k"):
            self.selected = clamp(self.selected - 1, len(self.rows))
        elif key in ("down", "j"):
            self.selected = clamp(self.selected + 1, len(self.rows))
        elif key == "enter" and run is not None:
            return self, self._open_detail(run, VIEW_LIST)
        elif key == "c" and run is not None and run.status == STATUS_RUNNING:
            return self, [self._cancel(run.id)]
        elif key in ("n", "p"):
            section = self.selected_section
            if section in self.pages:
                page = self.pages[section] + (1 if key == "n" else -1)
                if 0 <= page <= _max_page(self.sections[section]) and page != self.pages[section]:
                    self.pages[section] = page
                    self._build_rows()
                    self.selected = self._section_start(section)
        elif key == "h":
            self.view = VIEW_HISTORY
            self.selected = 0
            self.history = []
            self.history_page = 0
            self.history_cursors = {0: ""}
            return self, [self._load_history(0)]
        elif key == "r":
            self.loading = True
            return self, [self._load()]
        return self, []

    def _leave_detail(self) -> None:
        self.view = self.previous_view
        self.detail = None
        self.detail_error = ""
        self.detail_loading = False

    def _detail_key(self, key: str):
        run = self.detail
        if key == "d":
            confirmed, cmds = self._check_dismiss(run)
            if confirmed:
                self._leave_detail()
            return self, cmds
        self.confirm.clear()
        if key == "esc":
            self._leave_detail()
        elif key == "r" and run is not None and not self.detail_loading:
            return self, [self._load_detail(run.id)]
        elif key == "c" and run is not None and run.status == STATUS_RUNNING:
            return self, [self._cancel(run.id)]
        return self, []

    def _history_key(self, key: str):
        run = self.history[self.selected] if 0 <= self.selected < len(self.history) else None
        if key == "d":
            _, cmds = self._check_dismiss(run)
            return self, cmds
        self.confirm.clear()
        if key == "esc":
            self.view = VIEW_LIST
            self.selected = 0
        elif key in ("up", "k"):
            self.selected = clamp(self.selected - 1, len(self.history))
        elif key in ("down", "j"):
            self.selected = clamp(self.selected + 1, len(self.history))
        elif key == "enter" and run is not None:
            return self, self._open_detail(run, VIEW_HISTORY)
        elif key == "n" and self.history_has_more and not self.loading:
            if self.history_page + 1 in self.history_cursors:
                return self, [self._load_history(self.history_page + 1)]
        elif key == "p" and self.history_page > 0 and not self.loading:
            return self, [self._load_history(self.history_page - 1)]
        return self, []
