"""Modules and workflows browsers."""

from __future__ import annotations

from typing import Any

from hub_tui.client import HubClient
from hub_tui.client import catalog
from hub_tui.commands import Command, emit
from hub_tui.errors import HubError
from hub_tui.messages import KeyPressed, ModulesLoaded, ModuleToggled, WorkflowRequested, WorkflowsLoaded
from hub_tui.modals import Modal, clamp, step_selection
from hub_tui.models import Module, Workflow


class ModulesModal(Modal):
    kind = "modules"
    title = "Modules"

    def __init__(self, client: HubClient):
        self.client = client
        self.modules: list[Module] = []
        self.selected = 0
        self.loading = True
        self.error = ""

    def init(self) -> list:
        return [self._load()]

    def _load(self) -> Command:
        client = self.client

        def run():
            try:
                return ModulesLoaded(modules=tuple(catalog.list_modules(client)))
            except HubError as exc:
                return ModulesLoaded(error=exc)

        return Command(run, label="list-modules")

    def _toggle(self, module: Module) -> Command:
        client, name, enabled = self.client, module.name, not module.enabled

        def run():
            try:
                catalog.set_module_enabled(client, name, enabled)
            except HubError as exc:
                return ModuleToggled(name=name, enabled=enabled, error=exc)
            return ModuleToggled(name=name, enabled=enabled)

        return Command(run, label="toggle-module")

    def update(self, msg: Any):
        if isinstance(msg, ModulesLoaded):
            self.loading = False
            if msg.error is not None:
                self.error = str(msg.error)
            else:
                self.modules = list(msg.modules)
                self.selected = clamp(self.selected, len(self.modules))
                self.error = ""
            return self, []
        if isinstance(msg, ModuleToggled):
            if msg.error is not None:
                self.error = str(msg.error)
                return self, []
            self.loading = True
            return self, [self._load()]
        if not isinstance(msg, KeyPressed):
            return self, []
        key = msg.key
        if key == "enter":
            if not self.loading and self.modules:
                return self, [self._toggle(self.modules[self.selected])]
        elif key == "r":
            self.loading = True
            self.error = ""
            return self, [self._load()]
        else:
            self.selected = step_selection(self.selected, key, len(self.modules))
        return self, []


class WorkflowsModal(Modal):
    kind = "workflows"
    title = "Workflows"

    def __init__(self, client: HubClient):
        self.client = client
        self.workflows: list[Workflow] = []
        self.selected = 0
        self.loading = True
        self.error = ""

    def init(self) -> list:
        return [self._load()]

    def _load(self) -> Command:
        client = self.client

        def run():
            try:
                return WorkflowsLoaded(workflows=tuple(catalog.list_workflows(client)))
            except HubError as exc:
                return WorkflowsLoaded(error=exc)

        return Command(run, label="list-workflows")

    def update(self, msg: Any):
        if isinstance(msg, WorkflowsLoaded):
            self.loading = False
            if msg.error is not None:
                self.error = str(msg.error)
            else:
                self.workflows = list(msg.workflows)
                self.selected = clamp(self.selected, len(self.workflows))
                self.error = ""
            return self, []
        if not isinstance(msg, KeyPressed):
            return self, []
        key = msg.key
        if key == "enter":
            if self.workflows and not self.loading:
                workflow = self.workflows[self.selected]
                if workflow.enabled:
                    return None, [emit(WorkflowRequested(name=workflow.name))]
                self.error = f"{workflow.name} is disabled"
        elif key == "r":
            self.loading = True
            self.error = ""
            return self, [self._load()]
        else:
            self.selected = step_selection(self.selected, key, len(self.workflows))
        return self, []
