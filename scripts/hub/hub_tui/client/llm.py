"""Provider account, profile and model calls for LLM-type integrations."""

from __future__ import annotations

from hub_tui.client import HubClient, segment
from hub_tui.models import (
    AvailableProvider,
    LLMModel,
    Pagination,
    Profile,
    ProfileTestResult,
    ProviderAccount,
    ProviderField,
)


def _base(integration: str) -> str:
    return f"/integrations/{segment(integration)}"


def list_providers(client: HubClient, integration: str) -> list[ProviderAccount]:
    body = client.request("GET", f"{_base(integration)}/providers")
    return [ProviderAccount.from_dict(p) for p in body.get("providers") or []]


def list_available_providers(client: HubClient, integration: str) -> list[AvailableProvider]:
    body = client.request("GET", f"{_base(integration)}/providers/available")
    return [AvailableProvider.from_dict(p) for p in body.get("providers") or []]


def provider_fields(client: HubClient, integration: str, provider: str) -> list[ProviderField]:
    body = client.request("GET", f"{_base(integration)}/providers/{segment(provider)}/fields")
    return [ProviderField.from_dict(f) for f in body.get("fields") or []]


def create_provider(client: HubClient, integration: str, provider: str, account: str, fields: dict[str, str]) -> None:
    client.request(
        "POST",
        f"{_base(integration)}/providers",
        {"provider": provider, "account": account, "fields": fields},
    )


def delete_provider(client: HubClient, integration: str, provider: str, account: str) -> None:
    client.request("DELETE", f"{_base(integration)}/providers/{segment(provider)}/{segment(account)}")


def list_profiles(client: HubClient, integration: str) -> list[Profile]:
    body = client.request("GET", f"{_base(integration)}/profiles")
    return [Profile.from_dict(p) for p in body.get("profiles") or []]


def create_profile(client: HubClient, integration: str, profile: Profile) -> None:
    client.request(
        "POST",
        f"{_base(integration)}/profiles",
        {
            "name": profile.name,
            "provider": profile.provider,
            "account": profile.account,
            "model": profile.model,
        },
    )


def delete_profile(client: HubClient, integration: str, name: str) -> None:
    client.request("DELETE", f"{_base(integration)}/profiles/{segment(name)}")


def test_profile(client: HubClient, integration: str, name: str) -> ProfileTestResult:
    body = client.request("POST", f"{_base(integration)}/profiles/{segment(name)}/test")
    return ProfileTestResult.from_dict(body)


def set_default_profile(client: HubClient, integration: str, name: str) -> None:
    client.request("PUT", f"{_base(integration)}/profiles/set-default", {"profile": name})


def list_models(
    client: HubClient,
    integration: str,
    provider: str,
    account: str,
    limit: int,
    cursor: str = "",
) -> tuple[list[LLMModel], Pagination]:
    body = client.request(
        "GET",
        f"{_base(integration)}/models",
        params={"provider": provider, "account": account, "limit": str(limit), "cursor": cursor},
    )
    models = [LLMModel.from_dict(m) for m in body.get("models") or []]
    return models, Pagination.from_dict(body.get("pagination"))
