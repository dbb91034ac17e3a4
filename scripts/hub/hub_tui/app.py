"""Terminal client for the hub service: root dispatcher, event loop and entrypoint."""

from __future__ import annotations

import logging
import os
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

import readchar
from rich.console import Console
from rich.live import Live

from hub_tui.client import HubClient
from hub_tui.client import ask as ask_api
from hub_tui.client import auth, catalog
from hub_tui.client import runs as runs_api
from hub_tui.commands import CancelToken, ClearScreen, Command, Scheduler, StreamCommand, Tick, batch
from hub_tui.config import Config, JsonConfigStore, default_config_dir
from hub_tui.conversation import (
    KNOWN_COMMANDS,
    PREFIX_ASSISTANT,
    PREFIX_COMMAND,
    PREFIX_WORKFLOW,
    Conversation,
    detect_prefix,
    filter_suggestions,
    parse_command,
)
from hub_tui.errors import AuthError, HubError, describe
from hub_tui.form import BUTTON, Form, FormField
from hub_tui.messages import (
    CacheRefreshed,
    CommandFailed,
    HealthChecked,
    KeyPressed,
    LoginResult,
    ModalMessage,
    ParamFormCancelled,
    ParamFormSubmitted,
    ParamsResolved,
    PollTasks,
    QuitHintExpired,
    RouteChanged,
    SettingsSaved,
    StreamChunk,
    StreamFinished,
    TaskCancelled,
    TaskDismissed,
    TaskStatus,
    WorkflowFailed,
    WorkflowRequested,
    WorkflowStarted,
)
from hub_tui.modals import ModalStack
from hub_tui.modals.catalog import ModulesModal, WorkflowsModal
from hub_tui.modals.help import HelpModal
from hub_tui.modals.integrations import IntegrationsModal
from hub_tui.modals.paramform import ParamFormModal, merge_previous
from hub_tui.modals.settings import SettingsModal
from hub_tui.modals.tasks import TasksModal
from hub_tui.models import ASK_ERROR, ASK_EXECUTED, ASK_NEEDS_INPUT, AskOutcome
from hub_tui.panels.screen import render
from hub_tui.poller import TaskTracker

logger = logging.getLogger(__name__)

STATE_LOGIN = "login"
STATE_MAIN = "main"

CONTEXT_HUB = "hub"
CONTEXT_ASSISTANT = "assistant"

SESSION_EXPIRED = "Session expired. Please log in again."
STREAM_LABEL = "ask"

ClientFactory = Callable[..., HubClient]


@dataclass
class Context:
    type: str = CONTEXT_HUB
    target: str = ""


@dataclass
class Cache:
    assistants: list[str] = field(default_factory=list)
    workflows: list[str] = field(default_factory=list)
    modules: list[str] = field(default_factory=list)
    last_update: datetime | None = None
    error: str = ""


@dataclass
class Session:
    context: Context = field(default_factory=Context)
    cache: Cache = field(default_factory=Cache)
    ask_token: CancelToken | None = None
    stream_id: int = 0


def build_login_form(server_url: str) -> Form:
    fields = []
    if not server_url:
        fields.append(FormField(label="Server URL", key="server_url", required=True))
    fields.extend(
        [
            FormField(label="Username", key="username", required=True),
            FormField(label="Password", key="password", password=True, required=True),
            FormField(label="Log in", key="submit", kind=BUTTON),
        ]
    )
    return Form(fields, title="Log in to hub")


class App:
    """Owns all client state; ``update`` is the only place it changes."""

    def __init__(self, store: JsonConfigStore, config: Config | None = None, client_factory: ClientFactory = HubClient):
        self.store = store
        self.config = config if config is not None else store.load()
        self.client_factory = client_factory
        self.client = self._make_client(self.config.server_url, self.config.token)
        self.session = Session()
        self.conversation = Conversation()
        self.modals = ModalStack()
        self.tracker = TaskTracker()
        self.poll_generation = 0
        self.polling = False
        self.quit_hint = False
        self.quit_seq = 0
        self.quitting = False
        self.connected = False
        self.status_error = ""

        self.login_form: Form | None = None
        self.login_error = ""
        self.logging_in = False

        self.param_stream_id = 0
        self.param_values: dict[str, Any] = {}

        token = self.config.token
        if self.config.server_url and token and not auth.is_token_expired(token):
            self.state = STATE_MAIN
        else:
            self.state = STATE_LOGIN
            self.login_form = build_login_form(self.config.server_url)
            if token:
                self.login_error = SESSION_EXPIRED

    @property
    def settings(self) -> dict[str, Any]:
        return self.config.settings

    def _make_client(self, server_url: str, token: str = "") -> HubClient:
        return self.client_factory(server_url, token=token, timeout=self.settings["request_timeout_seconds"])

    def init(self) -> list:
        if self.state == STATE_MAIN:
            return [self._health_check()]
        return []

    # dispatch

    def update(self, msg: Any) -> list:
        if self.quitting:
            return []
        cmds = batch(self._update(msg))
        if self.quitting:
            return []
        return cmds

    def _update(self, msg: Any) -> list:
        if isinstance(getattr(msg, "error", None), AuthError):
            return self._reset_auth()

        if isinstance(msg, KeyPressed):
            handled = self._global_key(msg.key)
            if handled is not None:
                return handled
            if self.state == STATE_LOGIN:
                return self._login_key(msg.key)
            if self.modals.is_open:
                consumed, cmds = self.modals.update(msg)
                if consumed:
                    return cmds
                return cmds + self._main_key(msg.key)
            return self._main_key(msg.key)

        if isinstance(msg, ModalMessage):
            _, cmds = self.modals.update(msg)
            return cmds + self._after_modal_message(msg)

        handler = self._handlers().get(type(msg))
        if handler is None:
            logger.debug("unhandled message %r", msg)
            return []
        return handler(msg)

    def _handlers(self) -> dict[type, Callable[[Any], list]]:
        return {
            CommandFailed: self._on_command_failed,
            QuitHintExpired: self._on_quit_hint_expired,
            LoginResult: self._on_login,
            HealthChecked: self._on_health,
            CacheRefreshed: self._on_cache,
            RouteChanged: self._on_route,
            StreamChunk: self._on_chunk,
            StreamFinished: self._on_stream_finished,
            ParamFormSubmitted: self._on_params_submitted,
            ParamFormCancelled: self._on_params_cancelled,
            ParamsResolved: self._on_params_resolved,
            WorkflowRequested: self._on_workflow_requested,
            WorkflowStarted: self._on_workflow_started,
            WorkflowFailed: self._on_workflow_failed,
            PollTasks: self._on_poll,
            TaskStatus: self._on_task_status,
        }

    def _after_modal_message(self, msg: ModalMessage) -> list:
        if isinstance(msg, (TaskCancelled, TaskDismissed)) and msg.error is None:
            return [self._fetch_task_status()]
        if isinstance(msg, SettingsSaved) and msg.error is None:
            self.config.server_url = msg.server_url
            self.client = self._make_client(msg.server_url, self.config.token)
            self.connected = False
            return [self._health_check()]
        return []

    def _reset_auth(self) -> list:
        if self.state == STATE_LOGIN:
            return []
        logger.warning("bearer token rejected, returning to login")
        self._cancel_stream()
        self.config.clear_token()
        self.client.set_token("")
        self.modals.close()
        self.polling = False
        self.poll_generation += 1
        self.connected = False
        self.state = STATE_LOGIN
        self.login_form = build_login_form(self.config.server_url)
        self.login_error = SESSION_EXPIRED
        self.logging_in = False
        return [self._save_config()]

    # global keys

    def _global_key(self, key: str) -> list | None:
        if key == "ctrl+c":
            if self.quit_hint:
                self._cancel_stream()
                self.quitting = True
                return []
            self._cancel_stream()
            self.quit_hint = True
            self.quit_seq += 1
            return [Tick(self.settings["quit_hint_seconds"], QuitHintExpired(seq=self.quit_seq))]
        self.quit_hint = False
        if key == "ctrl+l":
            return [ClearScreen()]
        return None

    def _on_quit_hint_expired(self, msg: QuitHintExpired) -> list:
        if msg.seq == self.quit_seq:
            self.quit_hint = False
        return []

    def _on_command_failed(self, msg: CommandFailed) -> list:
        if msg.label == STREAM_LABEL:
            self.session.ask_token = None
            self.conversation.freeze()
        self.conversation.add_system(f"Error: {describe(msg.error)}")
        return []

    # login

    def _login_key(self, key: str) -> list:
        form = self.login_form
        if form is None or self.logging_in:
            return []
        if key == "ctrl+s" or form.update(key):
            return self._submit_login()
        return []

    def _submit_login(self) -> list:
        form = self.login_form
        form.clear_errors()
        errors = form.validate_required()
        if errors:
            form.apply_errors(errors)
            return []
        values = form.values()
        server_url = (values.get("server_url") or self.config.server_url).rstrip("/")
        username, password = values["username"], form.value("password")
        client = self._make_client(server_url)
        self.logging_in = True
        self.login_error = ""

        def run():
            try:
                response = auth.login(client, username, password)
            except HubError as exc:
                return LoginResult(server_url=server_url, error=exc)
            return LoginResult(server_url=server_url, token=response.token, expires_at=response.expires_at)

        return [Command(run, label="login")]

    def _on_login(self, msg: LoginResult) -> list:
        self.logging_in = False
        if msg.error is not None:
            self.login_error = describe(msg.error)
            return []
        self.config.server_url = msg.server_url
        self.config.token = msg.token
        self.config.token_expires = msg.expires_at
        self.client = self._make_client(msg.server_url, msg.token)
        self.state = STATE_MAIN
        self.login_form = None
        self.login_error = ""
        self.conversation.add_system(f"Logged in to {msg.server_url}")
        return [self._save_config(), self._health_check()]

    def _save_config(self) -> Command:
        store = self.store
        snapshot = Config(
            server_url=self.config.server_url,
            token=self.config.token,
            token_expires=self.config.token_expires,
            settings=dict(self.config.settings),
        )

        def run():
            try:
                store.save(snapshot)
            except OSError:
                logger.exception("could not save config to %s", store.path)
            return None

        return Command(run, label="save-config")

    # connection and cache

    def _health_check(self) -> Command:
        client = self.client

        def run():
            try:
                auth.health(client)
            except HubError as exc:
                return HealthChecked(error=exc)
            return HealthChecked()

        return Command(run, label="health")

    def _on_health(self, msg: HealthChecked) -> list:
        if msg.error is not None:
            self.connected = False
            self.status_error = describe(msg.error)
            self.conversation.add_system(f"Cannot reach hub: {self.status_error}")
            return []
        self.connected = True
        self.status_error = ""
        return [self._refresh_cache(), self._fetch_task_status()]

    def _refresh_cache(self) -> Command:
        client = self.client

        def run():
            try:
                assistants = catalog.list_assistants(client)
                workflows = catalog.list_workflows(client)
                modules = catalog.list_modules(client)
            except HubError as exc:
                return CacheRefreshed(error=exc)
            return CacheRefreshed(
                assistants=tuple(a.name for a in assistants),
                workflows=tuple(w.name for w in workflows if w.enabled),
                modules=tuple(m.name for m in modules if m.enabled),
            )

        return Command(run, label="refresh-cache")

    def _on_cache(self, msg: CacheRefreshed) -> list:
        cache = self.session.cache
        if msg.error is not None:
            # keep the last good listing
            cache.error = describe(msg.error)
            logger.warning("cache refresh failed: %s", msg.error)
            return []
        cache.assistants = list(msg.assistants)
        cache.workflows = list(msg.workflows)
        cache.modules = list(msg.modules)
        cache.last_update = datetime.now()
        cache.error = ""
        return []

    # main screen input

    def _main_key(self, key: str) -> list:
        conv = self.conversation
        if conv.suggesting:
            if key in ("tab", "enter"):
                conv.complete()
                return []
            if key == "esc":
                conv.hide_suggestions()
                return []
            if key in ("up", "down"):
                conv.move_suggestion(-1 if key == "up" else 1)
                return []
        if key == "tab":
            self._suggest(complete_single=True)
            return []
        if key == "enter":
            text = conv.take_input()
            if not text:
                return []
            return self._submit(text)
        if conv.edit(key) and conv.suggesting:
            self._suggest(complete_single=False)
        return []

    def _suggest(self, complete_single: bool) -> None:
        conv = self.conversation
        prefix, partial = detect_prefix(conv.input)
        if not prefix or " " in partial:
            conv.hide_suggestions()
            return
        cache = self.session.cache
        items = {
            PREFIX_COMMAND: KNOWN_COMMANDS,
            PREFIX_ASSISTANT: cache.assistants,
            PREFIX_WORKFLOW: cache.workflows,
        }[prefix]
        matches = filter_suggestions(items, partial)
        if not matches:
            conv.hide_suggestions()
            return
        conv.show_suggestions(prefix, matches)
        if complete_single and len(matches) == 1:
            conv.complete()

    def _submit(self, text: str) -> list:
        prefix, rest = detect_prefix(text)
        if prefix == PREFIX_COMMAND:
            return self._slash_command(text)
        self.conversation.add_user(text)
        if prefix == PREFIX_WORKFLOW:
            name = rest.split()[0] if rest.split() else ""
            if not name:
                self.conversation.add_system("Usage: #workflow_name")
                return []
            return self._run_workflow(name)
        context = self.session.context
        if prefix != PREFIX_ASSISTANT and context.type == CONTEXT_ASSISTANT and context.target:
            return [self._start_stream(text, assistant=context.target)]
        return [self._start_stream(text)]

    def _slash_command(self, text: str) -> list:
        command = parse_command(text)
        name = command.name if command else ""
        if name == "exit":
            self._cancel_stream()
            self.quitting = True
            return []
        if name == "clear":
            self.conversation.clear()
            return [ClearScreen()]
        if name == "hub":
            self.session.context = Context()
            self.conversation.add_system("Switched to hub context.")
            return []
        if name == "refresh":
            self.conversation.add_system("Refreshing assistants, workflows and modules...")
            return [self._refresh_cache()]
        modal = self._modal_for(name)
        if modal is None:
            self.conversation.add_system(f"Unknown command: /{name}")
            return []
        return self.modals.open(modal)

    def _modal_for(self, name: str):
        settings = self.settings
        if name == "help":
            return HelpModal()
        if name == "settings":
            return SettingsModal(self.config, self.store, self.connected)
        if name == "modules":
            return ModulesModal(self.client)
        if name == "workflows":
            return WorkflowsModal(self.client)
        if name == "integrations":
            return IntegrationsModal(
                self.client,
                confirm_timeout=settings["confirm_timeout_seconds"],
                models_page_size=settings["models_page_size"],
            )
        if name == "tasks":
            return TasksModal(
                self.client,
                running=list(self.tracker.running),
                completed=list(self.tracker.completed),
                failed=list(self.tracker.failed),
                confirm_timeout=settings["confirm_timeout_seconds"],
                history_page_size=settings["history_page_size"],
            )
        return None

    # streaming conversation

    def _cancel_stream(self) -> bool:
        token = self.session.ask_token
        if token is None:
            return False
        token.cancel()
        self.session.ask_token = None
        self.conversation.freeze()
        return True

    def _live(self, stream_id: int) -> bool:
        return stream_id == self.session.stream_id and self.session.ask_token is not None

    def _start_stream(self, text: str, assistant: str = "") -> StreamCommand:
        self._cancel_stream()
        self.session.stream_id += 1
        stream_id = self.session.stream_id
        token = CancelToken()
        self.session.ask_token = token
        self.conversation.open_stream(stream_id)
        client = self.client

        def run(push, token):
            if assistant:
                events = ask_api.assistant_chat(client, assistant, text, token)
            else:
                events = ask_api.ask(client, text, token)
            try:
                for event in events:
                    if token.cancelled:
                        return None
                    if isinstance(event, ask_api.Route):
                        push(RouteChanged(stream_id=stream_id, type=event.type, target=event.target))
                    elif isinstance(event, ask_api.Chunk):
                        push(StreamChunk(stream_id=stream_id, content=event.content))
                    elif isinstance(event, ask_api.Done):
                        return StreamFinished(stream_id=stream_id, outcome=event.outcome)
            except HubError as exc:
                return StreamFinished(stream_id=stream_id, error=exc)
            except Exception as exc:
                logger.exception("ask stream %d failed", stream_id)
                return StreamFinished(stream_id=stream_id, error=exc)
            finally:
                events.close()
            return None if token.cancelled else StreamFinished(stream_id=stream_id)

        return StreamCommand(run, token=token, label=STREAM_LABEL)

    def _on_route(self, msg: RouteChanged) -> list:
        if not self._live(msg.stream_id):
            return []
        if msg.type == CONTEXT_ASSISTANT and msg.target:
            self.session.context = Context(CONTEXT_ASSISTANT, msg.target)
        else:
            self.session.context = Context()
        return []

    def _on_chunk(self, msg: StreamChunk) -> list:
        if self._live(msg.stream_id):
            self.conversation.append_chunk(msg.stream_id, msg.content)
        return []

    def _on_stream_finished(self, msg: StreamFinished) -> list:
        if not self._live(msg.stream_id):
            return []
        self.session.ask_token = None
        if msg.error is not None:
            self.conversation.set_content(msg.stream_id, f"Error: {describe(msg.error)}")
            return []
        if msg.outcome is None:
            self.conversation.finish(msg.stream_id)
            return []
        return self._apply_outcome(msg.stream_id, msg.outcome)

    def _apply_outcome(self, stream_id: int, outcome: AskOutcome, previous: dict[str, Any] | None = None) -> list:
        conv = self.conversation
        message = conv.hub_message(stream_id)
        if outcome.status == ASK_NEEDS_INPUT and outcome.schema is not None:
            if message is None or not message.content:
                conv.set_content(stream_id, outcome.message or "More information is needed.")
            conv.finish(stream_id)
            self.param_stream_id = stream_id
            schema = merge_previous(outcome.schema, previous)
            return self.modals.open(ParamFormModal(outcome.target, schema))
        if outcome.status == ASK_EXECUTED:
            conv.set_content(stream_id, outcome.result_message)
            return []
        if outcome.status == ASK_ERROR or not outcome.success:
            reason = outcome.error_message or outcome.message or "request failed"
            conv.set_content(stream_id, f"Error: {reason}")
            return []
        if (message is None or not message.content) and outcome.message:
            conv.set_content(stream_id, outcome.message)
        conv.finish(stream_id)
        return []

    def _on_params_submitted(self, msg: ParamFormSubmitted) -> list:
        self.param_values = dict(msg.params)
        self.conversation.set_content(self.param_stream_id, "Submitting...")
        client, target, params = self.client, msg.target, dict(msg.params)

        def run():
            try:
                return ParamsResolved(target=target, outcome=ask_api.submit_params(client, target, params))
            except HubError as exc:
                return ParamsResolved(target=target, error=exc)

        return [Command(run, label="submit-params")]

    def _on_params_cancelled(self, msg: ParamFormCancelled) -> list:
        self.param_values = {}
        self.conversation.set_content(self.param_stream_id, "Form cancelled.")
        return []

    def _on_params_resolved(self, msg: ParamsResolved) -> list:
        if msg.error is not None:
            self.conversation.set_content(self.param_stream_id, f"Error: {describe(msg.error)}")
            return []
        return self._apply_outcome(self.param_stream_id, msg.outcome, previous=self.param_values)

    # workflows and task polling

    def _run_workflow(self, name: str) -> list:
        client = self.client
        self.conversation.add_system(f"Starting workflow: {name}")

        def run():
            try:
                return WorkflowStarted(name=name, run_id=catalog.run_workflow(client, name))
            except HubError as exc:
                return WorkflowFailed(name=name, error=exc)

        return [Command(run, label="run-workflow")]

    def _on_workflow_requested(self, msg: WorkflowRequested) -> list:
        return self._run_workflow(msg.name)

    def _on_workflow_started(self, msg: WorkflowStarted) -> list:
        self.conversation.add_system(f"Workflow started: {msg.name} ({msg.run_id})")
        self.tracker.track(msg.run_id, msg.name)
        return self._ensure_polling()

    def _on_workflow_failed(self, msg: WorkflowFailed) -> list:
        self.conversation.add_system(f"Workflow failed to start: {msg.name}: {describe(msg.error)}")
        return []

    def _ensure_polling(self) -> list:
        if self.polling or not self.tracker.has_running:
            return []
        self.polling = True
        self.poll_generation += 1
        return [Tick(self.settings["poll_interval_seconds"], PollTasks(generation=self.poll_generation))]

    def _fetch_task_status(self) -> Command:
        client = self.client

        def run():
            try:
                return TaskStatus(runs=tuple(runs_api.list_today(client).runs))
            except HubError as exc:
                return TaskStatus(error=exc)

        return Command(run, label="task-status")

    def _on_poll(self, msg: PollTasks) -> list:
        if msg.generation != self.poll_generation or not self.polling:
            return []
        if not self.tracker.has_running:
            self.polling = False
            return []
        return [
            self._fetch_task_status(),
            Tick(self.settings["poll_interval_seconds"], PollTasks(generation=msg.generation)),
        ]

    def _on_task_status(self, msg: TaskStatus) -> list:
        if msg.error is not None:
            logger.warning("task status fetch failed: %s", msg.error)
            return []
        for notice in self.tracker.reconcile(msg.runs):
            self.conversation.add_system(notice.text)
        if not self.tracker.has_running:
            self.polling = False
            self.poll_generation += 1
            return []
        return self._ensure_polling()


# terminal runtime

SHIFT_TAB = "\x1b[Z"

KEY_NAMES = {
    readchar.key.ENTER: "enter",
    readchar.key.CR: "enter",
    readchar.key.LF: "enter",
    readchar.key.ESC: "esc",
    readchar.key.TAB: "tab",
    SHIFT_TAB: "shift+tab",
    readchar.key.BACKSPACE: "backspace",
    "\x08": "backspace",
    readchar.key.SUPR: "delete",
    readchar.key.CTRL_C: "ctrl+c",
    readchar.key.CTRL_S: "ctrl+s",
    readchar.key.CTRL_L: "ctrl+l",
    readchar.key.UP: "up",
    readchar.key.DOWN: "down",
    readchar.key.LEFT: "left",
    readchar.key.RIGHT: "right",
    readchar.key.HOME: "home",
    readchar.key.END: "end",
}


def key_name(raw: str) -> str | None:
    """Map a raw key sequence to the name the dispatcher understands."""
    name = KEY_NAMES.get(raw)
    if name is not None:
        return name
    if len(raw) == 1 and raw.isprintable():
        return raw
    return None


def read_keys(put: Callable[[Any], None], stop: threading.Event) -> None:
    while not stop.is_set():
        try:
            raw = readchar.readkey()
        except KeyboardInterrupt:
            raw = readchar.key.CTRL_C
        name = key_name(raw)
        if name is not None:
            put(KeyPressed(key=name))


class EventLoop:
    """Feeds queued messages to the app one at a time and redraws after each."""

    def __init__(self, app: App, console: Console | None = None):
        self.app = app
        self.console = console or Console()
        self.inbox: queue.Queue = queue.Queue()
        self.scheduler = Scheduler(self.inbox)
        self._stop = threading.Event()

    def dispatch(self, cmds: list, live: Live | None = None) -> None:
        for cmd in cmds:
            if isinstance(cmd, ClearScreen):
                if live is not None:
                    live.console.clear()
                continue
            self.scheduler.submit(cmd)

    def _renderable(self):
        return render(self.app, self.console.size.width)

    def run(self) -> int:
        reader = threading.Thread(target=read_keys, args=(self.inbox.put, self._stop), name="hub-keys", daemon=True)
        reader.start()
        try:
            with Live(self._renderable(), console=self.console, screen=True, auto_refresh=False) as live:
                self.dispatch(self.app.init(), live)
                while not self.app.quitting:
                    msg = self.inbox.get()
                    cmds = self.app.update(msg)
                    if self.app.quitting:
                        break
                    self.dispatch(cmds, live)
                    live.update(self._renderable(), refresh=True)
        finally:
            self._stop.set()
            self.scheduler.shutdown()
        return 0


def configure_logging() -> Path:
    path = Path(os.environ.get("HUB_TUI_LOG_FILE") or default_config_dir() / "hub-tui.log")
    level_name = os.environ.get("HUB_TUI_LOG_LEVEL", "WARNING").upper()
    path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(path),
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return path


def main() -> int:
    configure_logging()
    console = Console()
    store = JsonConfigStore()
    try:
        config = store.load()
    except ValueError as exc:
        console.print(f"[red]hub-tui:[/red] {exc}")
        return 1
    return EventLoop(App(store, config), console=console).run()


if __name__ == "__main__":
    raise SystemExit(main())
