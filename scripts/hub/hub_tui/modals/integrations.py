"""Integrations modal and config-type routing into its configuration flows."""

from __future__ import annotations

import re
from typing import Any

from hub_tui.client import HubClient
from hub_tui.client import integrations as integrations_api
from hub_tui.commands import Command
from hub_tui.confirm import DEFAULT_CONFIRM_TIMEOUT
from hub_tui.errors import HubError, ServerValidationError, UnsupportedConfigType
from hub_tui.form import Form, FormField
from hub_tui.formatting import humanize_name
from hub_tui.messages import IntegrationConfigured, IntegrationsLoaded, IntegrationTested, KeyPressed, ModalMessage
from hub_tui.modals import Modal, clamp, step_selection
from hub_tui.modals.resource_config import DEFAULT_MODELS_PAGE_SIZE, ProviderProfileFlow
from hub_tui.models import Integration

NEW_PROFILE = "+ New profile"
PROFILE_NAME_RE = re.compile(r"[A-Za-z0-9_-]")
SECRET_MARKERS = ("key", "secret", "password", "token")

VIEW_PROFILES = "profiles"
VIEW_NAME = "name"
VIEW_CONFIGURE = "configure"


def is_secret_field(name: str) -> bool:
    lower = name.lower()
    return any(marker in lower for marker in SECRET_MARKERS)


class CredentialFlow:
    """Pick or name a profile, then fill the integration's declared credential fields."""

    kind = "api_key"

    def __init__(self, client: HubClient, integration: Integration, **_: Any):
        self.client = client
        self.integration = integration
        self.view = VIEW_PROFILES
        self.options = list(integration.profiles) + [NEW_PROFILE]
        self.selected = 0
        self.new_name = ""
        self.profile = ""
        self.form: Form | None = None
        self.saving = False
        self.testing = False
        self.refreshing = False
        self.error = ""
        self.notice = ""

    @property
    def title(self) -> str:
        if self.view == VIEW_CONFIGURE:
            return f"Configure {self.integration.name} ({self.profile})"
        return f"{self.integration.name}: profiles"

    def init(self) -> list:
        return []

    def build_form(self) -> Form:
        names = self.integration.fields or ["api_key"]
        fields = [
            FormField(label=humanize_name(name), key=name, password=is_secret_field(name), required=True)
            for name in names
        ]
        return Form(fields, title=f"Configure {self.integration.name}")

    def _configure(self) -> Command:
        client, name, profile = self.client, self.integration.name, self.profile
        config = {k: v for k, v in self.form.values().items() if v} if self.form else {}

        def run():
            try:
                integrations_api.configure(client, name, profile, config)
            except HubError as exc:
                return IntegrationConfigured(name=name, error=exc)
            return IntegrationConfigured(name=name)

        return Command(run, label="configure-integration")

    def _test(self) -> Command:
        client, name = self.client, self.integration.name

        def run():
            try:
                integrations_api.test(client, name)
            except HubError as exc:
                return IntegrationTested(name=name, error=exc)
            return IntegrationTested(name=name)

        return Command(run, label="test-integration")

    def _refresh(self) -> Command:
        client = self.client

        def run():
            try:
                return IntegrationsLoaded(integrations=tuple(integrations_api.list_integrations(client)))
            except HubError as exc:
                return IntegrationsLoaded(error=exc)

        return Command(run, label="list-integrations")

    def _on_refreshed(self, msg: IntegrationsLoaded) -> None:
        self.refreshing = False
        if msg.error is not None:
            self.error = str(msg.error)
            return
        for integration in msg.integrations:
            if integration.name == self.integration.name:
                self.integration = integration
                self.options = list(integration.profiles) + [NEW_PROFILE]
                self.selected = clamp(self.selected, len(self.options))
                break
        self.error = ""

    def update(self, msg: Any) -> tuple[bool, list]:
        if isinstance(msg, IntegrationConfigured):
            self.saving = False
            if msg.error is None:
                return True, []
            if isinstance(msg.error, ServerValidationError) and self.form is not None:
                self.form.apply_errors(msg.error.field_errors)
            else:
                self.error = str(msg.error)
            return False, []
        if isinstance(msg, IntegrationTested):
            if msg.name == self.integration.name:
                self.testing = False
                self.notice = f"Test failed: {msg.error}" if msg.error is not None else "Connection successful"
            return False, []
        if isinstance(msg, IntegrationsLoaded):
            self._on_refreshed(msg)
            return False, []
        if not isinstance(msg, KeyPressed):
            return False, []
        key = msg.key

        if self.view == VIEW_NAME:
            if key == "esc":
                self.view = VIEW_PROFILES
                self.new_name = ""
            elif key == "enter":
                if self.new_name:
                    self._enter_configure(self.new_name)
            elif key == "backspace":
                self.new_name = self.new_name[:-1]
            elif len(key) == 1 and PROFILE_NAME_RE.fullmatch(key):
                self.new_name += key
            return False, []

        if self.view == VIEW_CONFIGURE:
            if key == "esc":
                self.view = VIEW_PROFILES
                self.form = None
                self.error = ""
                return False, []
            if key == "ctrl+s" and self.form is not None and not self.saving:
                self.form.clear_errors()
                errors = self.form.validate_required()
                if errors:
                    self.form.apply_errors(errors)
                    return False, []
                self.saving = True
                self.error = ""
                return False, [self._configure()]
            if self.form is not None:
                self.form.update(key)
            return False, []

        if key == "esc":
            return True, []
        if key == "enter":
            option = self.options[self.selected]
            if option == NEW_PROFILE:
                self.view = VIEW_NAME
                self.new_name = ""
            else:
                self._enter_configure(option)
        elif key == "t":
            if not self.testing:
                self.testing = True
                self.notice = ""
                return False, [self._test()]
        elif key == "r":
            if not self.refreshing:
                self.refreshing = True
                self.error = ""
                self.notice = ""
                return False, [self._refresh()]
        else:
            before = self.selected
            self.selected = step_selection(self.selected, key, len(self.options))
            if self.selected != before:
                self.notice = ""
        return False, []

    def _enter_configure(self, profile: str) -> None:
        self.profile = profile
        self.view = VIEW_CONFIGURE
        self.error = ""
        self.form = self.build_form()


CONFIG_FLOWS: dict[str, type] = {
    CredentialFlow.kind: CredentialFlow,
    ProviderProfileFlow.kind: ProviderProfileFlow,
}


def open_flow(client: HubClient, integration: Integration, **options: Any):
    """Instantiate the configuration flow registered for the integration's config type."""
    flow_cls = CONFIG_FLOWS.get(integration.config_type)
    if flow_cls is None:
        raise UnsupportedConfigType(integration.config_type)
    return flow_cls(client, integration, **options)


class IntegrationsModal(Modal):
    kind = "integrations"
    title = "Integrations"
    custom_close = True

    def __init__(
        self,
        client: HubClient,
        confirm_timeout: float = DEFAULT_CONFIRM_TIMEOUT,
        models_page_size: int = DEFAULT_MODELS_PAGE_SIZE,
    ):
        self.client = client
        self.confirm_timeout = confirm_timeout
        self.models_page_size = models_page_size
        self.integrations: list[Integration] = []
        self.selected = 0
        self.loading = True
        self.error = ""
        self.notice = ""
        self.testing = False
        self.flow = None

    def init(self) -> list:
        return [self._load()]

    def _load(self) -> Command:
        client = self.client

        def run():
            try:
                return IntegrationsLoaded(integrations=tuple(integrations_api.list_integrations(client)))
            except HubError as exc:
                return IntegrationsLoaded(error=exc)

        return Command(run, label="list-integrations")

    def _test(self, name: str) -> Command:
        client = self.client

        def run():
            try:
                integrations_api.test(client, name)
            except HubError as exc:
                return IntegrationTested(name=name, error=exc)
            return IntegrationTested(name=name)

        return Command(run, label="test-integration")

    def update(self, msg: Any):
        if isinstance(msg, IntegrationsLoaded):
            self.loading = False
            if msg.error is not None:
                self.error = str(msg.error)
            else:
                self.integrations = list(msg.integrations)
                self.selected = clamp(self.selected, len(self.integrations))
                self.error = ""
            if self.flow is not None:
                _, cmds = self.flow.update(msg)
                return self, cmds
            return self, []
        if isinstance(msg, IntegrationTested):
            self.testing = False
            if self.flow is not None:
                _, cmds = self.flow.update(msg)
                return self, cmds
            self.notice = f"Test failed: {msg.error}" if msg.error is not None else "Connection successful"
            return self, []

        if self.flow is not None and isinstance(msg, (KeyPressed, ModalMessage)):
            finished, cmds = self.flow.update(msg)
            if finished:
                self.flow = None
                self.loading = True
                return self, list(cmds) + [self._load()]
            return self, cmds

        if not isinstance(msg, KeyPressed):
            return self, []
        key = msg.key
        if key == "esc":
            return None, []
        if key == "r":
            self.loading = True
            self.error = ""
            self.notice = ""
            return self, [self._load()]
        if key == "enter" and not self.loading and self.integrations:
            return self, self._open(self.integrations[self.selected])
        if key == "t" and not self.loading and not self.testing and self.integrations:
            self.testing = True
            self.notice = ""
            return self, [self._test(self.integrations[self.selected].name)]
        before = self.selected
        self.selected = step_selection(self.selected, key, len(self.integrations))
        if self.selected != before:
            self.notice = ""
        return self, []

    def _open(self, integration: Integration) -> list:
        try:
            self.flow = open_flow(
                self.client,
                integration,
                confirm_timeout=self.confirm_timeout,
                page_size=self.models_page_size,
            )
        except UnsupportedConfigType as exc:
            self.error = str(exc)
            return []
        self.error = ""
        return self.flow.init()
