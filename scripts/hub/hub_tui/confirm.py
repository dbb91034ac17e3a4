"""Timed two-press guard for destructive actions."""

from __future__ import annotations

import itertools
import time

from hub_tui.commands import Tick
from hub_tui.messages import ConfirmationExpired

DEFAULT_CONFIRM_TIMEOUT = 2.0

_arming_seq = itertools.count(1)


class Confirmation:
    """Tracks at most one pending ``(key, id)`` awaiting a second press.

    A press only confirms when both the operation key and the target id match
    the pending entry, so moving to another row and pressing again starts a
    fresh confirmation instead of executing the stale one. Each arming gets a
    sequence number that is unique across instances, and an expiry message
    clears state only when key, id and sequence all still match.
    """

    def __init__(self, timeout: float = DEFAULT_CONFIRM_TIMEOUT, clock=time.monotonic):
        self.timeout = timeout
        self._clock = clock
        self._seq = 0
        self.pending_key = ""
        self.pending_id = ""
        self.deadline: float | None = None

    def check(self, key: str, target_id: str) -> tuple[bool, list]:
        if self.is_pending(key, target_id) and not self._expired():
            self.clear()
            return True, []
        self._seq = next(_arming_seq)
        self.pending_key = key
        self.pending_id = target_id
        self.deadline = self._clock() + self.timeout
        return False, [Tick(self.timeout, ConfirmationExpired(key=key, id=target_id, seq=self._seq))]

    def clear(self) -> None:
        self.pending_key = ""
        self.pending_id = ""
        self.deadline = None

    def is_pending(self, key: str, target_id: str | None = None) -> bool:
        if not self.pending_key or self.pending_key != key:
            return False
        return target_id is None or self.pending_id == target_id

    @property
    def pending_any(self) -> bool:
        return bool(self.pending_key)

    def handle_expired(self, msg: ConfirmationExpired) -> bool:
        """Clear the pending entry if ``msg`` is its own timer; return whether it did."""
        if (msg.key, msg.id, msg.seq) != (self.pending_key, self.pending_id, self._seq):
            return False
        self.clear()
        return True

    def _expired(self) -> bool:
        return self.deadline is not None and self._clock() > self.deadline
