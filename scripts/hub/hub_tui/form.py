"""Generic form state: ordered fields, focus and cursor handling."""

from __future__ import annotations

from dataclasses import dataclass, field

TEXT = "text"
SELECT = "select"
CHECKBOX = "checkbox"
TEXTAREA = "textarea"
BUTTON = "button"

SELECT_NEXT_KEYS = ("down", "j")
SELECT_PREV_KEYS = ("up", "k")


def is_printable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


@dataclass
class FormField:
    label: str
    key: str
    kind: str = TEXT
    value: str = ""
    password: bool = False
    options: list[str] = field(default_factory=list)
    option_labels: list[str] = field(default_factory=list)
    selected: int = -1
    checked: bool = False
    required: bool = False
    error: str = ""
    description: str = ""
    param_type: str = ""
    cursor: int = 0

    def label_for(self, option: str) -> str:
        if option in self.options:
            idx = self.options.index(option)
            if idx < len(self.option_labels) and self.option_labels[idx]:
                return self.option_labels[idx]
        return option


class Form:
    def __init__(self, fields: list[FormField], title: str = ""):
        self.title = title
        self.fields = list(fields)
        self.focus = 0
        for f in self.fields:
            f.cursor = len(f.value)
            if f.kind == SELECT and f.value in f.options:
                f.selected = f.options.index(f.value)

    @property
    def focused(self) -> FormField | None:
        if 0 <= self.focus < len(self.fields):
            return self.fields[self.focus]
        return None

    def field(self, key: str) -> FormField | None:
        for f in self.fields:
            if f.key == key:
                return f
        return None

    def is_focused(self, key: str) -> bool:
        current = self.focused
        return current is not None and current.key == key

    def focus_key(self, key: str) -> None:
        for idx, f in enumerate(self.fields):
            if f.key == key:
                self.focus = idx
                return

    def value(self, key: str) -> str:
        f = self.field(key)
        return f.value if f is not None else ""

    def checked(self, key: str) -> bool:
        f = self.field(key)
        return bool(f and f.checked)

    def set_value(self, key: str, value: str) -> None:
        f = self.field(key)
        if f is None:
            return
        f.value = value
        f.cursor = len(value)
        if f.kind == SELECT:
            f.selected = f.options.index(value) if value in f.options else -1

    def set_options(self, key: str, options: list[str], keep: str = "", labels: list[str] | None = None) -> None:
        """Replace a select's options; the value survives only if still offered."""
        f = self.field(key)
        if f is None:
            return
        f.options = list(options)
        f.option_labels = list(labels or [])
        if keep and keep in f.options:
            f.selected = f.options.index(keep)
            f.value = keep
        else:
            f.selected = -1
            f.value = ""

    def values(self) -> dict[str, str]:
        return {f.key: f.value.strip() for f in self.fields if f.kind != BUTTON}

    def validate_required(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        for f in self.fields:
            if f.required and f.kind not in (CHECKBOX, BUTTON) and not f.value.strip():
                errors[f.key] = f"{f.label} is required"
        return errors

    def apply_errors(self, errors: dict[str, str]) -> None:
        for key, message in errors.items():
            self.set_error(key, message)

    def set_error(self, key: str, message: str) -> None:
        f = self.field(key)
        if f is not None:
            f.error = message

    def clear_errors(self) -> None:
        for f in self.fields:
            f.error = ""

    def has_errors(self) -> bool:
        return any(f.error for f in self.fields)

    def update(self, key: str) -> bool:
        """Apply one key press; return True when a button was activated."""
        current = self.focused
        if current is None:
            return False

        if key == "tab":
            self._move(1)
            return False
        if key == "shift+tab":
            self._move(-1)
            return False

        if current.kind == SELECT:
            if key in SELECT_NEXT_KEYS:
                self._cycle(current, 1)
            elif key in SELECT_PREV_KEYS:
                self._cycle(current, -1)
            elif key == "enter":
                self._move(1)
            return False

        if current.kind == CHECKBOX:
            if key in ("enter", " "):
                current.checked = not current.checked
            elif key == "down":
                self._move(1)
            elif key == "up":
                self._move(-1)
            return False

        if current.kind == BUTTON:
            if key == "enter":
                return True
            if key == "down":
                self._move(1)
            elif key == "up":
                self._move(-1)
            return False

        if current.kind == TEXTAREA:
            if key == "enter":
                self._insert(current, "\n")
            elif key == "up":
                self._line_move(current, -1)
            elif key == "down":
                self._line_move(current, 1)
            else:
                self._edit(current, key)
            return False

        if key in ("enter", "down"):
            self._move(1)
        elif key == "up":
            self._move(-1)
        else:
            self._edit(current, key)
        return False

    def _move(self, step: int) -> None:
        if self.fields:
            self.focus = (self.focus + step) % len(self.fields)

    @staticmethod
    def _cycle(f: FormField, step: int) -> None:
        if not f.options:
            return
        if f.selected < 0:
            f.selected = 0 if step > 0 else len(f.options) - 1
        else:
            f.selected = (f.selected + step) % len(f.options)
        f.value = f.options[f.selected]

    @staticmethod
    def _insert(f: FormField, text: str) -> None:
        f.value = f.value[: f.cursor] + text + f.value[f.cursor:]
        f.cursor += len(text)

    def _edit(self, f: FormField, key: str) -> None:
        if key == "left":
            f.cursor = max(0, f.cursor - 1)
        elif key == "right":
            f.cursor = min(len(f.value), f.cursor + 1)
        elif key == "home":
            f.cursor = 0
        elif key == "end":
            f.cursor = len(f.value)
        elif key == "backspace":
            if f.cursor > 0:
                f.value = f.value[: f.cursor - 1] + f.value[f.cursor:]
                f.cursor -= 1
        elif key == "delete":
            f.value = f.value[: f.cursor] + f.value[f.cursor + 1:]
        elif is_printable(key):
            self._insert(f, key)

    def _line_move(self, f: FormField, step: int) -> None:
        lines = f.value.split("\n")
        before = f.value[: f.cursor]
        row = before.count("\n")
        col = len(before) - (before.rfind("\n") + 1)
        target = row + step
        if target < 0 or target >= len(lines):
            self._move(step)
            return
        col = min(col, len(lines[target]))
        f.cursor = sum(len(line) + 1 for line in lines[:target]) + col
