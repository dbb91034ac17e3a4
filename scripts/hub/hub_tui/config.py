"""Persisted client config and settings resolution."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

APP_DIR_NAME = "hub-tui"

DEFAULT_SETTINGS: dict[str, Any] = {
    "poll_interval_seconds": 3.0,
    "confirm_timeout_seconds": 2.0,
    "quit_hint_seconds": 2.0,
    "models_page_size": 15,
    "history_page_size": 15,
    "request_timeout_seconds": 30.0,
}

SETTING_MINIMUMS: dict[str, float] = {
    "poll_interval_seconds": 1.0,
    "confirm_timeout_seconds": 0.5,
    "quit_hint_seconds": 0.5,
    "models_page_size": 1,
    "history_page_size": 1,
    "request_timeout_seconds": 1.0,
}


def default_config_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_DIR_NAME


def default_config_path() -> Path:
    override = os.environ.get("HUB_TUI_CONFIG")
    if override:
        return Path(override)
    return default_config_dir() / "config.json"


def resolve_settings(overrides: dict | None) -> dict[str, Any]:
    resolved = dict(DEFAULT_SETTINGS)
    if not isinstance(overrides, dict):
        return resolved
    for key, default in DEFAULT_SETTINGS.items():
        if key not in overrides:
            continue
        try:
            value = type(default)(overrides[key])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid setting {key}: {overrides[key]!r}") from exc
        resolved[key] = max(type(default)(SETTING_MINIMUMS[key]), value)
    return resolved


@dataclass
class Config:
    server_url: str = ""
    token: str = ""
    token_expires: str = ""
    settings: dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_SETTINGS))

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "server_url": self.server_url,
            "token": self.token,
            "token_expires": self.token_expires,
        }
        custom = {k: v for k, v in self.settings.items() if DEFAULT_SETTINGS.get(k) != v}
        if custom:
            payload["settings"] = custom
        return payload

    def clear_token(self) -> None:
        self.token = ""
        self.token_expires = ""


class JsonConfigStore:
    """Loads and saves ``Config`` as a private JSON file."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else default_config_path()

    def load(self) -> Config:
        if not self.path.exists():
            return Config()
        try:
            raw = json.loads(self.path.read_text())
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid JSON config: {exc}") from exc
        if not isinstance(raw, dict):
            raise ValueError(f"invalid config in {self.path}: expected an object")
        return Config(
            server_url=str(raw.get("server_url") or ""),
            token=str(raw.get("token") or ""),
            token_expires=str(raw.get("token_expires") or ""),
            settings=resolve_settings(raw.get("settings")),
        )

    def save(self, config: Config) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = json.dumps(config.to_dict(), indent=2)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as handle:
            handle.write(data)
        os.chmod(self.path, 0o600)
