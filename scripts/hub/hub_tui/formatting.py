"""Shared text and time formatting helpers for human-facing panels."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import Any

from hub_tui.models import RunResult

TOKEN_LABELS = {
    "api": "API",
    "id": "ID",
    "llm": "LLM",
    "url": "URL",
    "ui": "UI",
}

DELIMITER_RE = re.compile(r"[._/\-]+")


def humanize_name(name: str | None) -> str:
    """Turn ``snake_case`` identifiers into ``Title Case`` labels."""
    if not name:
        return ""
    tokens = [t for t in DELIMITER_RE.split(str(name).strip()) if t]
    parts: list[str] = []
    for token in tokens:
        for word in token.split("_"):
            if not word:
                continue
            lower = word.lower()
            if lower in TOKEN_LABELS:
                parts.append(TOKEN_LABELS[lower])
            elif word.isupper():
                parts.append(word)
            else:
                parts.append(lower.capitalize())
    return " ".join(parts)


def parse_iso_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _plural(count: int, unit: str) -> str:
    return f"1 {unit} ago" if count == 1 else f"{count} {unit}s ago"


def format_elapsed(started: str | None, now: datetime | None = None) -> str:
    moment = parse_iso_timestamp(started)
    if moment is None:
        return ""
    now = now or datetime.now(timezone.utc)
    seconds = max(0, int((now - moment).total_seconds()))
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return _plural(seconds // 60, "min")
    if seconds < 86400:
        return _plural(seconds // 3600, "hour")
    return _plural(seconds // 86400, "day")


def format_duration(seconds: float | None) -> str:
    if seconds is None:
        return "-"
    total = int(seconds)
    if seconds < 1:
        return "< 1s"
    if total < 60:
        return f"{total}s"
    if total < 3600:
        return f"{total // 60}m {total % 60}s"
    return f"{total // 3600}h {(total % 3600) // 60}m"


def run_duration(started: str | None, ended: str | None, now: datetime | None = None) -> float | None:
    start = parse_iso_timestamp(started)
    if start is None:
        return None
    end = parse_iso_timestamp(ended) or now or datetime.now(timezone.utc)
    return max(0.0, (end - start).total_seconds())


def format_timestamp(value: str | None) -> str:
    moment = parse_iso_timestamp(value)
    if moment is None:
        return "-"
    return moment.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, sort_keys=True, default=str)


def format_run_output(result: RunResult | None) -> str:
    if result is None:
        return ""
    lines: list[str] = []
    for step in result.steps:
        if step.error:
            lines.append(f"[{step.step_name}] Error: {step.error}")
        elif isinstance(step.output, str):
            lines.append(f"[{step.step_name}] {step.output}")
        elif isinstance(step.output, dict) and isinstance(step.output.get("message"), str):
            lines.append(f"[{step.step_name}] {step.output['message']}")
        elif step.output is not None:
            lines.append(f"[{step.step_name}]\n{_dump(step.output)}")
    return "\n".join(lines)


def truncate(text: str, width: int) -> str:
    if width <= 0 or len(text) <= width:
        return text
    if width <= 3:
        return text[:width]
    return text[: width - 3] + "..."
