"""Settings modal: show the session and edit the server URL."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from hub_tui.commands import Command
from hub_tui.config import Config
from hub_tui.form import Form, FormField
from hub_tui.messages import KeyPressed, SettingsSaved
from hub_tui.modals import Modal


class SettingsModal(Modal):
    kind = "settings"
    title = "Settings"
    custom_close = True

    def __init__(self, config: Config, store, connected: bool):
        self.config = replace(config, settings=dict(config.settings))
        self.store = store
        self.connected = connected
        self.form: Form | None = None
        self.error = ""

    @property
    def editing(self) -> bool:
        return self.form is not None

    def update(self, msg: Any):
        if isinstance(msg, SettingsSaved):
            if msg.error is not None:
                self.error = str(msg.error)
            else:
                self.config.server_url = msg.server_url
                self.form = None
                self.error = ""
            return self, []
        if not isinstance(msg, KeyPressed):
            return self, []
        if self.form is None:
            if msg.key == "esc":
                return None, []
            if msg.key == "e":
                self.error = ""
                self.form = Form(
                    [FormField(label="Server URL", key="server_url", value=self.config.server_url, required=True)],
                    title="Edit Settings",
                )
            return self, []
        if msg.key == "esc":
            self.form = None
            self.error = ""
            return self, []
        if msg.key == "ctrl+s":
            errors = self.form.validate_required()
            if errors:
                self.form.apply_errors(errors)
                return self, []
            return self, [self._save(self.form.value("server_url").strip().rstrip("/"))]
        self.form.update(msg.key)
        return self, []

    def _save(self, server_url: str) -> Command:
        updated = replace(self.config, server_url=server_url, settings=dict(self.config.settings))
        store = self.store

        def run():
            try:
                store.save(updated)
            except OSError as exc:
                return SettingsSaved(server_url=server_url, error=exc)
            return SettingsSaved(server_url=server_url)

        return Command(run, label="save-settings")
