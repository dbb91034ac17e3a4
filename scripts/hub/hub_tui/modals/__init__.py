"""Modal base class and the single-slot modal stack."""

from __future__ import annotations

from typing import Any

from hub_tui.messages import KeyPressed

CLOSE_KEY = "esc"


class _NotHandled:
    def __repr__(self) -> str:
        return "NOT_HANDLED"


NOT_HANDLED = _NotHandled()

UP_KEYS = ("up", "k")
DOWN_KEYS = ("down", "j")


def clamp(index: int, length: int) -> int:
    """Keep a selection index inside a list that may have shrunk."""
    return max(0, min(index, length - 1))


def step_selection(index: int, key: str, length: int) -> int:
    if key in UP_KEYS:
        return clamp(index - 1, length)
    if key in DOWN_KEYS:
        return clamp(index + 1, length)
    return index


class Modal:
    """A nested state machine that owns input focus while open.

    ``update`` returns ``(next, commands)`` where ``next`` is the modal to keep
    (usually ``self``), ``None`` to close, or ``NOT_HANDLED`` to let the key
    fall through to the main screen.
    """

    kind = "modal"
    title = ""
    custom_close = False

    def init(self) -> list:
        return []

    def update(self, msg: Any) -> tuple[Any, list]:
        return NOT_HANDLED, []


class ModalStack:
    def __init__(self) -> None:
        self.active: Modal | None = None

    @property
    def is_open(self) -> bool:
        return self.active is not None

    def open(self, modal: Modal) -> list:
        self.active = modal
        return modal.init()

    def close(self) -> None:
        self.active = None

    def update(self, msg: Any) -> tuple[bool, list]:
        modal = self.active
        if modal is None:
            return False, []
        if isinstance(msg, KeyPressed) and msg.key == CLOSE_KEY and not modal.custom_close:
            self.close()
            return True, []
        nxt, cmds = modal.update(msg)
        if nxt is NOT_HANDLED:
            return False, list(cmds)
        if nxt is None:
            self.close()
        else:
            self.active = nxt
        return True, list(cmds)
