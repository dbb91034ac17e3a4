"""Shared model contracts for data returned by the hub service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_CONFIG_TYPE = "api_key"

STATUS_PENDING = "pending"
STATUS_RUNNING = "running"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
STATUS_CANCELLED = "cancelled"

ASK_NEEDS_INPUT = "needs_input"
ASK_EXECUTED = "executed"
ASK_ERROR = "error"


def _str(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class Assistant:
    name: str
    display_name: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Assistant":
        return cls(
            name=_str(raw.get("name")),
            display_name=_str(raw.get("display_name")),
            description=_str(raw.get("description")),
        )


@dataclass
class Workflow:
    name: str
    description: str = ""
    enabled: bool = True

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Workflow":
        return cls(
            name=_str(raw.get("name")),
            description=_str(raw.get("description")),
            enabled=bool(raw.get("enabled", True)),
        )


@dataclass
class Module:
    name: str
    description: str = ""
    enabled: bool = False
    version: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Module":
        return cls(
            name=_str(raw.get("name")),
            description=_str(raw.get("description")),
            enabled=bool(raw.get("enabled", False)),
            version=_str(raw.get("version")),
        )


@dataclass
class Integration:
    name: str
    description: str = ""
    config_type: str = DEFAULT_CONFIG_TYPE
    configured: bool = False
    profiles: list[str] = field(default_factory=list)
    default_profile: str = ""
    fields: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Integration":
        return cls(
            name=_str(raw.get("name")),
            description=_str(raw.get("description")),
            config_type=_str(raw.get("config_type")) or DEFAULT_CONFIG_TYPE,
            configured=bool(raw.get("configured", False)),
            profiles=[_str(p) for p in raw.get("profiles") or []],
            default_profile=_str(raw.get("default_profile")),
            fields=[_str(f) for f in raw.get("fields") or []],
        )


@dataclass
class ProviderAccount:
    provider: str
    display_name: str = ""
    accounts: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ProviderAccount":
        return cls(
            provider=_str(raw.get("provider")),
            display_name=_str(raw.get("display_name")),
            accounts=[_str(a) for a in raw.get("accounts") or []],
        )

    @property
    def label(self) -> str:
        return self.display_name or self.provider


@dataclass
class AvailableProvider:
    name: str
    display_name: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "AvailableProvider":
        return cls(name=_str(raw.get("name")), display_name=_str(raw.get("display_name")))

    @property
    def label(self) -> str:
        return self.display_name or self.name


@dataclass
class ProviderField:
    key: str
    label: str = ""
    required: bool = False
    secret: bool = False
    default: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ProviderField":
        key = _str(raw.get("key"))
        return cls(
            key=key,
            label=_str(raw.get("label")) or key,
            required=bool(raw.get("required", False)),
            secret=bool(raw.get("secret", False)),
            default=_str(raw.get("default")),
        )


@dataclass
class Profile:
    name: str
    provider: str = ""
    account: str = ""
    model: str = ""
    is_default: bool = False

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Profile":
        return cls(
            name=_str(raw.get("name")),
            provider=_str(raw.get("provider")),
            account=_str(raw.get("account")),
            model=_str(raw.get("model")),
            is_default=bool(raw.get("is_default", False)),
        )


@dataclass
class ProfileTestResult:
    success: bool
    model: str = ""
    latency_ms: int = 0
    error: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ProfileTestResult":
        return cls(
            success=bool(raw.get("success", False)),
            model=_str(raw.get("model")),
            latency_ms=int(raw.get("latency_ms") or 0),
            error=_str(raw.get("error")),
        )


@dataclass
class LLMModel:
    id: str
    description: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "LLMModel":
        return cls(id=_str(raw.get("id")), description=_str(raw.get("description")))


@dataclass
class Pagination:
    total: int = 0
    limit: int = 0
    has_more: bool = False
    next_cursor: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> "Pagination":
        raw = raw or {}
        return cls(
            total=int(raw.get("total") or 0),
            limit=int(raw.get("limit") or 0),
            has_more=bool(raw.get("has_more", False)),
            next_cursor=_str(raw.get("next_cursor")),
        )


@dataclass
class ModelsPage:
    """Cursor-paginated view over a remote model listing.

    ``cursor_stack`` holds the opaque cursor that loaded each page after the
    first, so going back never derives a token from the page number. A page
    move only lands in ``page`` and ``cursor_stack`` once its items arrive.
    """

    items: list[LLMModel] = field(default_factory=list)
    cursor_stack: list[str] = field(default_factory=list)
    has_more: bool = False
    next_cursor: str = ""
    page: int = 1
    pending: int = 0

    def reset(self) -> None:
        self.items = []
        self.cursor_stack = []
        self.has_more = False
        self.next_cursor = ""
        self.page = 1
        self.pending = 0

    def advance(self) -> str | None:
        """Start a move to the next page and return the cursor to load it with."""
        if self.pending or not self.has_more or not self.next_cursor:
            return None
        self.pending = 1
        return self.next_cursor

    def retreat(self) -> str | None:
        """Start a move to the previous page and return the cursor to load it with."""
        if self.pending or self.page <= 1:
            return None
        self.pending = -1
        return self.cursor_stack[-2] if len(self.cursor_stack) > 1 else ""

    def abandon(self) -> None:
        self.pending = 0

    def apply(self, items: list[LLMModel], pagination: Pagination) -> None:
        if self.pending > 0:
            self.cursor_stack.append(self.next_cursor)
            self.page += 1
        elif self.pending < 0:
            if self.cursor_stack:
                self.cursor_stack.pop()
            self.page -= 1
        self.pending = 0
        self.items = list(items)
        self.has_more = pagination.has_more
        self.next_cursor = pagination.next_cursor

    @property
    def ids(self) -> list[str]:
        return [m.id for m in self.items]


@dataclass
class StepResult:
    step_name: str
    success: bool = False
    output: Any = None
    error: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "StepResult":
        return cls(
            step_name=_str(raw.get("step_name")),
            success=bool(raw.get("success", False)),
            output=raw.get("output"),
            error=_str(raw.get("error")),
        )


@dataclass
class RunResult:
    workflow_name: str = ""
    success: bool = False
    output: Any = None
    steps: list[StepResult] = field(default_factory=list)
    error: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> "RunResult | None":
        if raw is None:
            return None
        return cls(
            workflow_name=_str(raw.get("workflow_name")),
            success=bool(raw.get("success", False)),
            output=raw.get("output"),
            steps=[StepResult.from_dict(s) for s in raw.get("steps") or []],
            error=_str(raw.get("error")),
        )


@dataclass
class Run:
    id: str
    workflow: str = ""
    status: str = STATUS_PENDING
    started_at: str = ""
    ended_at: str = ""
    error: str = ""
    result: RunResult | None = None
    needs_attention: bool = False

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Run":
        return cls(
            id=_str(raw.get("id")),
            workflow=_str(raw.get("workflow_name") or raw.get("workflow")),
            status=_str(raw.get("status")) or STATUS_PENDING,
            started_at=_str(raw.get("started_at")),
            ended_at=_str(raw.get("finished_at") or raw.get("ended_at")),
            error=_str(raw.get("error")),
            result=RunResult.from_dict(raw.get("result")),
            needs_attention=bool(raw.get("needs_attention", False)),
        )

    @property
    def is_terminal(self) -> bool:
        return self.status in (STATUS_COMPLETED, STATUS_FAILED, STATUS_CANCELLED)

    @property
    def succeeded(self) -> bool:
        if self.status == STATUS_FAILED:
            return False
        return self.result is None or self.result.success

    @property
    def error_text(self) -> str:
        if self.error:
            return self.error
        if self.result is not None and self.result.error:
            return self.result.error
        return ""


@dataclass
class RunsPage:
    runs: list[Run] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)


@dataclass
class ParamSpec:
    name: str
    type: str = "string"
    required: bool = False
    description: str = ""
    value: Any = None
    error: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ParamSpec":
        return cls(
            name=_str(raw.get("name")),
            type=_str(raw.get("type")) or "string",
            required=bool(raw.get("required", False)),
            description=_str(raw.get("description")),
            value=raw.get("value"),
            error=_str(raw.get("error")),
        )


@dataclass
class ParamSchema:
    title: str = ""
    description: str = ""
    params: list[ParamSpec] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> "ParamSchema":
        raw = raw or {}
        return cls(
            title=_str(raw.get("title")),
            description=_str(raw.get("description")),
            params=[ParamSpec.from_dict(p) for p in raw.get("params") or []],
        )


@dataclass
class AskOutcome:
    """Terminal payload of an ask request, streamed or direct."""

    status: str = ""
    target: str = ""
    success: bool = True
    message: str = ""
    schema: ParamSchema | None = None
    result: dict[str, Any] | None = None
    error_code: str = ""
    error_message: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "AskOutcome":
        error = raw.get("error")
        if isinstance(error, dict):
            code, message = _str(error.get("code")), _str(error.get("message"))
        else:
            code, message = "", _str(error)
        schema = raw.get("schema")
        result = raw.get("result")
        return cls(
            status=_str(raw.get("status")),
            target=_str(raw.get("target")),
            success=bool(raw.get("success", True)),
            message=_str(raw.get("message")),
            schema=ParamSchema.from_dict(schema) if schema is not None else None,
            result=result if isinstance(result, dict) else None,
            error_code=code,
            error_message=message,
        )

    @property
    def result_message(self) -> str:
        if self.result and self.result.get("message"):
            return str(self.result["message"])
        return "Done."
