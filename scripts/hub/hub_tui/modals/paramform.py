"""Schema-driven parameter form opened when an ask needs structured input."""

from __future__ import annotations

import json
from typing import Any

from hub_tui.commands import emit
from hub_tui.form import CHECKBOX, TEXT, TEXTAREA, Form, FormField
from hub_tui.formatting import humanize_name
from hub_tui.messages import KeyPressed, ParamFormCancelled, ParamFormSubmitted
from hub_tui.modals import Modal
from hub_tui.models import ParamSchema, ParamSpec

SAVE_KEY = "ctrl+s"
CANCEL_KEY = "esc"


def _number_text(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def field_for_param(param: ParamSpec) -> FormField:
    f = FormField(
        label=humanize_name(param.name),
        key=param.name,
        required=param.required,
        description=param.description,
        error=param.error,
        param_type=param.type,
    )
    value = param.value
    if param.type == "boolean":
        f.kind = CHECKBOX
        f.checked = bool(value)
    elif param.type == "array":
        f.kind = TEXTAREA
        if isinstance(value, list):
            f.value = "\n".join(str(v) for v in value)
        elif value is not None:
            f.value = str(value)
    elif param.type == "object":
        f.kind = TEXTAREA
        if isinstance(value, (dict, list)):
            f.value = json.dumps(value, indent=2)
        elif value is not None:
            f.value = str(value)
    elif param.type in ("number", "integer"):
        f.kind = TEXT
        f.value = _number_text(value)
    else:
        f.kind = TEXT
        f.value = "" if value is None else str(value)
    f.cursor = len(f.value)
    return f


def _parse_number(text: str) -> Any:
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def build_params(form: Form) -> dict[str, Any]:
    """Convert form fields back into typed parameter values."""
    params: dict[str, Any] = {}
    for f in form.fields:
        text = f.value.strip()
        if f.param_type == "boolean":
            params[f.key] = f.checked
        elif f.param_type in ("number", "integer"):
            params[f.key] = _parse_number(text) if text else None
        elif f.param_type == "array":
            params[f.key] = [line.strip() for line in f.value.split("\n") if line.strip()]
        elif f.param_type == "object":
            if not text:
                params[f.key] = None
            else:
                try:
                    params[f.key] = json.loads(text)
                except json.JSONDecodeError:
                    params[f.key] = text
        else:
            params[f.key] = text
    return params


def merge_previous(schema: ParamSchema, previous: dict[str, Any] | None) -> ParamSchema:
    """Carry submitted values into a re-sent schema wherever the server left them blank."""
    if not previous:
        return schema
    for param in schema.params:
        if param.value is None and param.name in previous:
            param.value = previous[param.name]
    return schema


class ParamFormModal(Modal):
    kind = "paramform"
    custom_close = True

    def __init__(self, target: str, schema: ParamSchema):
        self.target = target
        self.schema = schema
        self.title = schema.title or humanize_name(target) or "Parameters"
        self.form = Form([field_for_param(p) for p in schema.params], title=self.title)

    def update(self, msg: Any):
        if not isinstance(msg, KeyPressed):
            return self, []
        if msg.key == CANCEL_KEY:
            return None, [emit(ParamFormCancelled(target=self.target))]
        if msg.key == SAVE_KEY:
            self.form.clear_errors()
            errors = self.form.validate_required()
            if errors:
                self.form.apply_errors(errors)
                return self, []
            return None, [emit(ParamFormSubmitted(target=self.target, params=build_params(self.form)))]
        self.form.update(msg.key)
        return self, []
