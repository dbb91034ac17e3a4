"""Deferred work issued by the dispatcher and the scheduler that runs it."""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable

from hub_tui.messages import CommandFailed

logger = logging.getLogger(__name__)

Emit = Callable[[Any], None]


class CancelToken:
    """Cooperative cancellation flag shared between the loop and one producer."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class Command:
    """Blocking work run off the loop; returns at most one message."""

    fn: Callable[[], Any]
    label: str = ""


@dataclass(frozen=True)
class StreamCommand:
    """Streaming work that may emit intermediate messages until cancelled."""

    fn: Callable[[Emit, CancelToken], Any]
    token: CancelToken = field(default_factory=CancelToken)
    label: str = ""


@dataclass(frozen=True)
class Tick:
    """Deliver ``msg`` after ``delay`` seconds."""

    delay: float
    msg: Any


@dataclass(frozen=True)
class ClearScreen:
    pass


def emit(msg: Any) -> Command:
    """Return a command that immediately resolves to ``msg``."""
    return Command(lambda: msg, label=type(msg).__name__)


def batch(*items: Any) -> list:
    """Flatten commands and command lists, dropping ``None``."""
    out: list = []
    for item in items:
        if item is None:
            continue
        if isinstance(item, (list, tuple)):
            out.extend(batch(*item))
        else:
            out.append(item)
    return out


class Scheduler:
    def __init__(self, inbox: "queue.Queue[Any]", max_workers: int = 8):
        self._inbox = inbox
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="hub-cmd")
        self._timers: list[threading.Timer] = []
        self._closed = False

    def submit(self, cmd: Any) -> None:
        if self._closed:
            return
        if isinstance(cmd, Tick):
            timer = threading.Timer(cmd.delay, self.deliver, args=(cmd.msg,))
            timer.daemon = True
            self._timers = [t for t in self._timers if t.is_alive()]
            self._timers.append(timer)
            timer.start()
        elif isinstance(cmd, StreamCommand):
            self._executor.submit(self._run_stream, cmd)
        elif isinstance(cmd, Command):
            self._executor.submit(self._run, cmd)
        else:
            raise TypeError(f"not a schedulable command: {cmd!r}")

    def deliver(self, msg: Any) -> None:
        if msg is not None and not self._closed:
            self._inbox.put(msg)

    def _run(self, cmd: Command) -> None:
        try:
            msg = cmd.fn()
        except Exception as exc:
            logger.exception("command %s failed", cmd.label or cmd.fn)
            msg = CommandFailed(label=cmd.label, error=exc)
        self.deliver(msg)

    def _run_stream(self, cmd: StreamCommand) -> None:
        token = cmd.token

        def push(msg: Any) -> None:
            if not token.cancelled:
                self.deliver(msg)

        try:
            msg = cmd.fn(push, token)
        except Exception as exc:
            logger.exception("stream %s failed", cmd.label or cmd.fn)
            msg = CommandFailed(label=cmd.label, error=exc)
        if token.cancelled:
            return
        self.deliver(msg)

    def shutdown(self) -> None:
        self._closed = True
        for timer in self._timers:
            timer.cancel()
        self._executor.shutdown(wait=False, cancel_futures=True)
