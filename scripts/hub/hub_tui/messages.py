"""Immutable messages delivered to the dispatcher.

Every state transition is triggered by exactly one of these. Results of
network commands carry the raised ``HubError`` in ``error`` instead of
raising, so the loop can route auth failures uniformly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from hub_tui.models import (
    AskOutcome,
    AvailableProvider,
    Integration,
    LLMModel,
    Module,
    Pagination,
    Profile,
    ProfileTestResult,
    ProviderAccount,
    ProviderField,
    Run,
    Workflow,
)


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class CommandFailed:
    label: str
    error: BaseException


@dataclass(frozen=True)
class QuitHintExpired:
    seq: int


@dataclass(frozen=True)
class LoginResult:
    server_url: str
    token: str = ""
    expires_at: str = ""
    error: BaseException | None = None


@dataclass(frozen=True)
class HealthChecked:
    error: BaseException | None = None


@dataclass(frozen=True)
class CacheRefreshed:
    assistants: tuple[str, ...] = ()
    workflows: tuple[str, ...] = ()
    modules: tuple[str, ...] = ()
    error: BaseException | None = None


# streaming conversation


@dataclass(frozen=True)
class RouteChanged:
    stream_id: int
    type: str
    target: str


@dataclass(frozen=True)
class StreamChunk:
    stream_id: int
    content: str


@dataclass(frozen=True)
class StreamFinished:
    stream_id: int
    outcome: AskOutcome | None = None
    error: BaseException | None = None


@dataclass(frozen=True)
class ParamsResolved:
    target: str
    outcome: AskOutcome | None = None
    error: BaseException | None = None


@dataclass(frozen=True)
class ParamFormSubmitted:
    target: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ParamFormCancelled:
    target: str


# workflows and the task poller


@dataclass(frozen=True)
class WorkflowRequested:
    name: str


@dataclass(frozen=True)
class WorkflowStarted:
    name: str
    run_id: str


@dataclass(frozen=True)
class WorkflowFailed:
    name: str
    error: BaseException


@dataclass(frozen=True)
class PollTasks:
    generation: int


@dataclass(frozen=True)
class TaskStatus:
    runs: tuple[Run, ...] = ()
    error: BaseException | None = None


# messages routed to the active modal


@dataclass(frozen=True)
class ModalMessage:
    pass


@dataclass(frozen=True)
class ConfirmationExpired(ModalMessage):
    key: str
    id: str
    seq: int = 0


@dataclass(frozen=True)
class SettingsSaved(ModalMessage):
    server_url: str
    error: BaseException | None = None


@dataclass(frozen=True)
class ModulesLoaded(ModalMessage):
    modules: tuple[Module, ...] = ()
    error: BaseException | None = None


@dataclass(frozen=True)
class ModuleToggled(ModalMessage):
    name: str
    enabled: bool
    error: BaseException | None = None


@dataclass(frozen=True)
class WorkflowsLoaded(ModalMessage):
    workflows: tuple[Workflow, ...] = ()
    error: BaseException | None = None


@dataclass(frozen=True)
class IntegrationsLoaded(ModalMessage):
    integrations: tuple[Integration, ...] = ()
    error: BaseException | None = None


@dataclass(frozen=True)
class IntegrationConfigured(ModalMessage):
    name: str
    error: BaseException | None = None


@dataclass(frozen=True)
class IntegrationTested(ModalMessage):
    name: str
    error: BaseException | None = None


@dataclass(frozen=True)
class ProvidersLoaded(ModalMessage):
    providers: tuple[ProviderAccount, ...] = ()
    profiles: tuple[Profile, ...] = ()
    error: BaseException | None = None


@dataclass(frozen=True)
class AvailableProvidersLoaded(ModalMessage):
    providers: tuple[AvailableProvider, ...] = ()
    error: BaseException | None = None


@dataclass(frozen=True)
class ProviderFieldsLoaded(ModalMessage):
    provider: str
    fields: tuple[ProviderField, ...] = ()
    error: BaseException | None = None


@dataclass(frozen=True)
class ModelsLoaded(ModalMessage):
    request_id: int
    models: tuple[LLMModel, ...] = ()
    pagination: Pagination = field(default_factory=Pagination)
    error: BaseException | None = None


@dataclass(frozen=True)
class ResourceSaved(ModalMessage):
    """Result of a provider or profile mutation (save, delete, default)."""

    action: str
    name: str
    error: BaseException | None = None


@dataclass(frozen=True)
class ProfileTested(ModalMessage):
    name: str
    result: ProfileTestResult | None = None
    error: BaseException | None = None


@dataclass(frozen=True)
class TasksLoaded(ModalMessage):
    attention: tuple[Run, ...] = ()
    today: tuple[Run, ...] = ()
    error: BaseException | None = None


@dataclass(frozen=True)
class TaskDetailLoaded(ModalMessage):
    run_id: str
    run: Run | None = None
    error: BaseException | None = None


@dataclass(frozen=True)
class TaskHistoryLoaded(ModalMessage):
    page: int
    runs: tuple[Run, ...] = ()
    pagination: Pagination = field(default_factory=Pagination)
    error: BaseException | None = None


@dataclass(frozen=True)
class TaskCancelled(ModalMessage):
    run_id: str
    error: BaseException | None = None


@dataclass(frozen=True)
class TaskDismissed(ModalMessage):
    run_id: str
    error: BaseException | None = None
