"""Provider account and profile management for LLM-type integrations.

The flow has three views: a navigable list, an add-provider form whose extra
fields are declared by the server per provider, and a profile form whose
account and model fields cascade from the selected provider. Deletes go
through a two-press confirmation keyed by operation and target.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable

from hub_tui.client import HubClient
from hub_tui.client import llm
from hub_tui.commands import Command
from hub_tui.confirm import DEFAULT_CONFIRM_TIMEOUT, Confirmation
from hub_tui.errors import HubError, ServerValidationError, ValidationError
from hub_tui.form import CHECKBOX, SELECT, Form, FormField
from hub_tui.messages import (
    AvailableProvidersLoaded,
    ConfirmationExpired,
    KeyPressed,
    ModelsLoaded,
    ProfileTested,
    ProvidersLoaded,
    ProviderFieldsLoaded,
    ResourceSaved,
)
from hub_tui.modals import clamp
from hub_tui.models import AvailableProvider, Integration, ModelsPage, Profile, ProviderAccount, ProviderField

logger = logging.getLogger(__name__)

_models_request_ids = itertools.count(1)

DEFAULT_MODELS_PAGE_SIZE = 15
DEFAULT_ACCOUNT = "default"

VIEW_LIST = "list"
VIEW_PROVIDER_FORM = "provider_form"
VIEW_PROFILE_FORM = "profile_form"

ITEM_PROFILE = "profile"
ITEM_NEW_PROFILE = "new_profile"
ITEM_ACCOUNT = "account"
ITEM_NEW_PROVIDER = "new_provider"

GROUP_PROFILES = "profiles"
GROUP_PROVIDERS = "providers"

SAVE_KEY = "ctrl+s"


@dataclass(frozen=True)
class ListItem:
    kind: str
    group: str
    label: str
    profile: Profile | None = None
    provider: str = ""
    account: str = ""

    @property
    def account_id(self) -> str:
        return f"{self.provider}/{self.account}"


def build_items(profiles: list[Profile], providers: list[ProviderAccount]) -> list[ListItem]:
    """Flatten profiles and provider accounts, each group closed by its create entry."""
    items = [ListItem(ITEM_PROFILE, GROUP_PROFILES, p.name, profile=p) for p in profiles]
    items.append(ListItem(ITEM_NEW_PROFILE, GROUP_PROFILES, "+ New profile"))
    for provider in providers:
        for account in provider.accounts:
            items.append(
                ListItem(
                    ITEM_ACCOUNT,
                    GROUP_PROVIDERS,
                    f"{provider.label} / {account}",
                    provider=provider.provider,
                    account=account,
                )
            )
    items.append(ListItem(ITEM_NEW_PROVIDER, GROUP_PROVIDERS, "+ Add provider"))
    return items


class ProviderProfileFlow:
    kind = "llm"

    def __init__(
        self,
        client: HubClient,
        integration: Integration,
        confirm_timeout: float = DEFAULT_CONFIRM_TIMEOUT,
        page_size: int = DEFAULT_MODELS_PAGE_SIZE,
    ):
        self.client = client
        self.integration = integration
        self.page_size = page_size
        self.confirm = Confirmation(confirm_timeout)

        self.view = VIEW_LIST
        self.providers: list[ProviderAccount] = []
        self.profiles: list[Profile] = []
        self.items: list[ListItem] = build_items([], [])
        self.selected = 0
        self.loading = True
        self.error = ""
        self.notice = ""

        self.form: Form | None = None
        self.available: list[AvailableProvider] = []
        self.provider_fields: list[ProviderField] = []
        self.fields_loading = False
        self.editing: Profile | None = None
        self._preset = ("", DEFAULT_ACCOUNT)
        self.models = ModelsPage()
        self.models_request = 0
        self.models_loading = False
        self.saving = False

    @property
    def title(self) -> str:
        if self.view == VIEW_PROVIDER_FORM:
            return f"{self.integration.name}: Add Provider"
        if self.view == VIEW_PROFILE_FORM:
            return f"{self.integration.name}: {'Edit' if self.editing else 'New'} Profile"
        return self.integration.name

    @property
    def selected_item(self) -> ListItem | None:
        if 0 <= self.selected < len(self.items):
            return self.items[self.selected]
        return None

    def init(self) -> list:
        return [self._load()]

    # commands

    def _load(self) -> Command:
        client, name = self.client, self.integration.name

        def run():
            try:
                providers = llm.list_providers(client, name)
                profiles = llm.list_profiles(client, name)
            except HubError as exc:
                return ProvidersLoaded(error=exc)
            return ProvidersLoaded(providers=tuple(providers), profiles=tuple(profiles))

        return Command(run, label="list-providers")

    def _mutation(self, action: str, target: str, fn: Callable[[], None]) -> Command:
        def run():
            try:
                fn()
            except HubError as exc:
                return ResourceSaved(action=action, name=target, error=exc)
            return ResourceSaved(action=action, name=target)

        return Command(run, label=action)

    def _load_available(self) -> Command:
        client, name = self.client, self.integration.name

        def run():
            try:
                return AvailableProvidersLoaded(providers=tuple(llm.list_available_providers(client, name)))
            except HubError as exc:
                return AvailableProvidersLoaded(error=exc)

        return Command(run, label="list-available-providers")

    def _load_fields(self, provider: str) -> Command:
        client, name = self.client, self.integration.name
        self.fields_loading = True

        def run():
            try:
                fields = llm.provider_fields(client, name, provider)
            except HubError as exc:
                return ProviderFieldsLoaded(provider=provider, error=exc)
            return ProviderFieldsLoaded(provider=provider, fields=tuple(fields))

        return Command(run, label="provider-fields")

    def _load_models(self, cursor: str = "") -> Command:
        self.models_request = next(_models_request_ids)
        self.models_loading = True
        request_id = self.models_request
        client, name = self.client, self.integration.name
        provider = self.form.value("provider") if self.form else ""
        account = self.form.value("account") if self.form else ""
        limit = self.page_size

        def run():
            try:
                models, pagination = llm.list_models(client, name, provider, account, limit, cursor)
            except HubError as exc:
                return ModelsLoaded(request_id=request_id, error=exc)
            return ModelsLoaded(request_id=request_id, models=tuple(models), pagination=pagination)

        return Command(run, label="list-models")

    def _test(self, name: str) -> Command:
        client, integration = self.client, self.integration.name

        def run():
            try:
                return ProfileTested(name=name, result=llm.test_profile(client, integration, name))
            except HubError as exc:
                return ProfileTested(name=name, error=exc)

        return Command(run, label="test-profile")

    # update

    def update(self, msg: Any) -> tuple[bool, list]:
        """Apply one message; return ``(finished, commands)``."""
        if isinstance(msg, ConfirmationExpired):
            self.confirm.handle_expired(msg)
            return False, []
        if isinstance(msg, ProvidersLoaded):
            self._on_loaded(msg)
            return False, []
        if isinstance(msg, AvailableProvidersLoaded):
            return False, self._on_available(msg)
        if isinstance(msg, ProviderFieldsLoaded):
            self._on_fields(msg)
            return False, []
        if isinstance(msg, ModelsLoaded):
            self._on_models(msg)
            return False, []
        if isinstance(msg, ResourceSaved):
            return False, self._on_saved(msg)
        if isinstance(msg, ProfileTested):
            self._on_tested(msg)
            return False, []
        if not isinstance(msg, KeyPressed):
            return False, []
        if self.view == VIEW_PROVIDER_FORM:
            return False, self._provider_form_key(msg.key)
        if self.view == VIEW_PROFILE_FORM:
            return False, self._profile_form_key(msg.key)
        return self._list_key(msg.key)

    def _on_loaded(self, msg: ProvidersLoaded) -> None:
        self.loading = False
        if msg.error is not None:
            self.error = str(msg.error)
            return
        self.error = ""
        self.providers = list(msg.providers)
        self.profiles = list(msg.profiles)
        self.items = build_items(self.profiles, self.providers)
        self.selected = clamp(self.selected, len(self.items))

    def _on_tested(self, msg: ProfileTested) -> None:
        if msg.error is not None:
            self.notice = f"Test failed: {msg.error}"
        elif msg.result is not None and msg.result.success:
            self.notice = f"{msg.name}: OK ({msg.result.model}, {msg.result.latency_ms} ms)"
        else:
            reason = msg.result.error if msg.result is not None else "unknown error"
            self.notice = f"{msg.name}: failed ({reason})"

    def _on_saved(self, msg: ResourceSaved) -> list:
        self.saving = False
        if msg.error is None:
            self.notice = {
                "delete_profile": f"Deleted profile {msg.name}",
                "delete_account": f"Deleted account {msg.name}",
                "set_default": f"{msg.name} is now the default profile",
                "save_provider": f"Saved {msg.name}",
                "save_profile": f"Saved profile {msg.name}",
            }.get(msg.action, "")
            if msg.action in ("save_provider", "save_profile"):
                self._close_form()
            self.loading = True
            return [self._load()]
        if self.form is not None and msg.action in ("save_provider", "save_profile"):
            if isinstance(msg.error, ServerValidationError):
                self.form.apply_errors(msg.error.field_errors)
                self.error = ""
            else:
                self.error = str(msg.error)
            return []
        self.error = str(msg.error)
        return []

    # list view

    def _list_key(self, key: str) -> tuple[bool, list]:
        item = self.selected_item
        if key == "esc":
            self.confirm.clear()
            return True, []
        if key in ("up", "k", "down", "j"):
            self.confirm.clear()
            self.notice = ""
            step = -1 if key in ("up", "k") else 1
            self.selected = clamp(self.selected + step, len(self.items))
            return False, []
        if key == "r":
            self.confirm.clear()
            self.loading = True
            self.error = ""
            return False, [self._load()]
        if item is None:
            return False, []
        if key == "enter":
            self.confirm.clear()
            if item.kind == ITEM_NEW_PROVIDER:
                return False, self._open_provider_form()
            if item.kind == ITEM_ACCOUNT:
                return False, self._open_provider_form(item.provider, item.account)
            if item.kind == ITEM_NEW_PROFILE:
                return False, self._open_profile_form(None)
            return False, self._open_profile_form(item.profile)
        if key == "d":
            return False, self._delete(item)
        if key in ("t", "s"):
            self.confirm.clear()
        if key == "t" and item.kind == ITEM_PROFILE:
            self.notice = f"Testing {item.label}..."
            return False, [self._test(item.label)]
        if key == "s" and item.kind == ITEM_PROFILE:
            client, integration, name = self.client, self.integration.name, item.label
            return False, [self._mutation("set_default", name, lambda: llm.set_default_profile(client, integration, name))]
        return False, []

    def _delete(self, item: ListItem) -> list:
        client, integration = self.client, self.integration.name
        if item.kind == ITEM_PROFILE:
            confirmed, cmds = self.confirm.check("delete_profile", item.label)
            if not confirmed:
                return cmds
            name = item.label
            return [self._mutation("delete_profile", name, lambda: llm.delete_profile(client, integration, name))]
        if item.kind == ITEM_ACCOUNT:
            confirmed, cmds = self.confirm.check("delete_account", item.account_id)
            if not confirmed:
                return cmds
            provider, account = item.provider, item.account
            return [
                self._mutation(
                    "delete_account",
                    item.account_id,
                    lambda: llm.delete_provider(client, integration, provider, account),
                )
            ]
        return []

    def _close_form(self) -> None:
        self.view = VIEW_LIST
        self.form = None
        self.editing = None
        self.provider_fields = []
        self.fields_loading = False
        self.models.reset()
        self.models_loading = False

    # add-provider form

    def _open_provider_form(self, provider: str = "", account: str = "") -> list:
        self.view = VIEW_PROVIDER_FORM
        self.form = None
        self.error = ""
        self.provider_fields = []
        self._preset = (provider, account or DEFAULT_ACCOUNT)
        return [self._load_available()]

    def _on_available(self, msg: AvailableProvidersLoaded) -> list:
        if self.view != VIEW_PROVIDER_FORM:
            return []
        if msg.error is not None:
            self.error = str(msg.error)
            return []
        self.available = list(msg.providers)
        if not self.available:
            self.error = "No providers available"
            return []
        provider, account = self._preset
        names = [p.name for p in self.available]
        if provider not in names:
            provider = names[0]
        self.form = self.build_provider_form(provider, account, [], None)
        return [self._load_fields(provider)]

    def build_provider_form(
        self,
        provider: str,
        account: str,
        dynamic: list[ProviderField],
        previous: Form | None,
    ) -> Form:
        """Build the add-provider form, keeping anything typed into fields that still exist."""
        fields = [
            FormField(
                label="Provider",
                key="provider",
                kind=SELECT,
                options=[p.name for p in self.available],
                option_labels=[p.label for p in self.available],
                value=provider,
                required=True,
            ),
            FormField(label="Account", key="account", value=account, required=True),
        ]
        for spec in dynamic:
            typed = ""
            if previous is not None and previous.field(spec.key) is not None:
                typed = previous.value(spec.key)
            fields.append(
                FormField(
                    label=spec.label,
                    key=spec.key,
                    value=typed or spec.default,
                    password=spec.secret,
                    required=spec.required,
                )
            )
        form = Form(fields, title="Add Provider")
        if previous is not None and previous.focused is not None:
            form.focus_key(previous.focused.key)
        return form

    def _on_fields(self, msg: ProviderFieldsLoaded) -> None:
        if self.view != VIEW_PROVIDER_FORM or self.form is None:
            return
        if msg.provider != self.form.value("provider"):
            return
        self.fields_loading = False
        if msg.error is not None:
            self.error = str(msg.error)
            return
        self.provider_fields = list(msg.fields)
        self.form = self.build_provider_form(
            self.form.value("provider"),
            self.form.value("account"),
            self.provider_fields,
            self.form,
        )

    def validate_provider_form(self) -> tuple[str, str, dict[str, str]]:
        """Check required fields locally; raise ``ValidationError`` before any request."""
        form = self.form
        if form is None:
            raise ValidationError({"provider": "Provider is required"})
        form.clear_errors()
        errors: dict[str, str] = {}
        provider = form.value("provider").strip()
        account = form.value("account").strip()
        if not provider:
            errors["provider"] = "Provider is required"
        if not account:
            errors["account"] = "Account is required"
        values: dict[str, str] = {}
        for spec in self.provider_fields:
            value = form.value(spec.key).strip()
            if spec.required and not value:
                errors[spec.key] = f"{spec.label} is required"
            if value:
                values[spec.key] = value
        if errors:
            raise ValidationError(errors)
        return provider, account, values

    def _provider_form_key(self, key: str) -> list:
        if key == "esc":
            self._close_form()
            return []
        form = self.form
        if form is None:
            return []
        if key == SAVE_KEY:
            if self.fields_loading or self.saving:
                return []
            try:
                provider, account, values = self.validate_provider_form()
            except ValidationError as exc:
                form.apply_errors(exc.field_errors)
                return []
            self.saving = True
            self.error = ""
            client, integration = self.client, self.integration.name
            return [
                self._mutation(
                    "save_provider",
                    f"{provider}/{account}",
                    lambda: llm.create_provider(client, integration, provider, account, values),
                )
            ]
        before = form.value("provider")
        form.update(key)
        after = form.value("provider")
        if after != before and after:
            return [self._load_fields(after)]
        return []

    # profile form

    def _providers_with_accounts(self) -> list[ProviderAccount]:
        return [p for p in self.providers if p.accounts]

    def _accounts_for(self, provider: str) -> list[str]:
        for p in self.providers:
            if p.provider == provider:
                return list(p.accounts)
        return []

    def _open_profile_form(self, profile: Profile | None) -> list:
        choices = self._providers_with_accounts()
        if not choices:
            self.error = "Add a provider account before creating a profile"
            return []
        self.view = VIEW_PROFILE_FORM
        self.error = ""
        self.editing = profile
        provider = profile.provider if profile else choices[0].provider
        if provider not in [p.provider for p in choices]:
            provider = choices[0].provider
        accounts = self._accounts_for(provider)
        account = profile.account if profile and profile.account in accounts else (accounts[0] if accounts else "")
        self.form = Form(
            [
                FormField(label="Name", key="name", value=profile.name if profile else "", required=True),
                FormField(
                    label="Provider",
                    key="provider",
                    kind=SELECT,
                    options=[p.provider for p in choices],
                    option_labels=[p.label for p in choices],
                    value=provider,
                    required=True,
                ),
                FormField(label="Account", key="account", kind=SELECT, options=accounts, value=account, required=True),
                FormField(
                    label="Model",
                    key="model",
                    kind=SELECT,
                    options=[profile.model] if profile and profile.model else [],
                    value=profile.model if profile else "",
                    required=True,
                ),
                FormField(label="Default", key="is_default", kind=CHECKBOX, checked=bool(profile and profile.is_default)),
            ],
            title="Profile",
        )
        self.models.reset()
        return [self._load_models()]

    def _reset_models(self) -> list:
        self.models.reset()
        if self.form is not None:
            self.form.set_options("model", [])
        return [self._load_models()]

    def _on_models(self, msg: ModelsLoaded) -> None:
        if msg.request_id != self.models_request or self.form is None or self.view != VIEW_PROFILE_FORM:
            return
        self.models_loading = False
        if msg.error is not None:
            self.models.abandon()
            self.error = str(msg.error)
            return
        self.error = ""
        self.models.apply(list(msg.models), msg.pagination)
        keep = self.form.value("model") or (self.editing.model if self.editing else "")
        self.form.set_options("model", self.models.ids, keep=keep)

    def _profile_form_key(self, key: str) -> list:
        if key == "esc":
            self._close_form()
            return []
        form = self.form
        if form is None:
            return []
        if key == SAVE_KEY:
            return self._save_profile()
        if key in ("n", "p") and form.is_focused("model"):
            if self.models_loading:
                return []
            cursor = self.models.advance() if key == "n" else self.models.retreat()
            if cursor is None:
                return []
            return [self._load_models(cursor)]
        before = (form.value("provider"), form.value("account"))
        form.update(key)
        provider, account = form.value("provider"), form.value("account")
        if provider != before[0]:
            form.set_options("account", self._accounts_for(provider), keep=account)
            return self._reset_models()
        if account != before[1]:
            return self._reset_models()
        return []

    def _save_profile(self) -> list:
        form = self.form
        if form is None or self.saving:
            return []
        form.clear_errors()
        errors = form.validate_required()
        if errors:
            form.apply_errors(errors)
            return []
        values = form.values()
        profile = Profile(
            name=values["name"],
            provider=values["provider"],
            account=values["account"],
            model=values["model"],
            is_default=form.checked("is_default"),
        )
        previous = self.editing.name if self.editing else ""
        client, integration = self.client, self.integration.name
        self.saving = True
        self.error = ""

        def save() -> None:
            # Edits replace the profile: delete the old one, then create.
            if previous:
                try:
                    llm.delete_profile(client, integration, previous)
                except HubError as exc:
                    logger.warning("deleting profile %s before re-create failed: %s", previous, exc)
            llm.create_profile(client, integration, profile)
            if profile.is_default:
                llm.set_default_profile(client, integration, profile.name)

        return [self._mutation("save_profile", profile.name, save)]
