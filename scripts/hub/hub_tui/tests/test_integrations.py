from __future__ import annotations

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from hub_tui.errors import APIError, ServerValidationError, UnsupportedConfigType  # noqa: E402
from hub_tui.messages import KeyPressed  # noqa: E402
from hub_tui.modals import integrations as integrations_modal  # noqa: E402
from hub_tui.modals.integrations import (  # noqa: E402
    NEW_PROFILE,
    VIEW_CONFIGURE,
    VIEW_NAME,
    VIEW_PROFILES,
    CredentialFlow,
    IntegrationsModal,
    is_secret_field,
)
from hub_tui.modals.resource_config import ProviderProfileFlow  # noqa: E402
from hub_tui.models import Integration  # noqa: E402


class FakeClient:
    def __init__(self, integrations=None):
        self.integrations = integrations or []
        self.calls = []
        self.failures = {}

    def request(self, method, path, body=None, params=None):
        self.calls.append((method, path, body))
        failure = self.failures.get((method, path))
        if failure is not None:
            raise failure
        if path == "/integrations":
            return {"integrations": self.integrations}
        if path.endswith("/test"):
            return {"success": True}
        return {"providers": [], "profiles": []}


def run_all(target, cmds):
    """Execute commands in order, feeding results to ``target.update``."""
    pending = list(cmds)
    while pending:
        msg = pending.pop(0).fn()
        _, more = target.update(msg)
        pending.extend(more)


def keys(target, *names):
    out = []
    for name in names:
        _, cmds = target.update(KeyPressed(name))
        out.extend(cmds)
    return out


class SecretFieldTests(unittest.TestCase):
    def test_markers(self):
        self.assertTrue(is_secret_field("api_key"))
        self.assertTrue(is_secret_field("CLIENT_SECRET"))
        self.assertTrue(is_secret_field("access_token"))
        self.assertFalse(is_secret_field("base_url"))


class OpenFlowTests(unittest.TestCase):
    def test_config_type_routes_to_flow(self):
        client = FakeClient()
        flow = integrations_modal.open_flow(client, Integration(name="slack", config_type="api_key"))
        self.assertIsInstance(flow, CredentialFlow)
        flow = integrations_modal.open_flow(client, Integration(name="llm", config_type="llm"))
        self.assertIsInstance(flow, ProviderProfileFlow)

    def test_missing_config_type_defaults_to_credentials(self):
        integration = Integration.from_dict({"name": "github"})
        flow = integrations_modal.open_flow(FakeClient(), integration)
        self.assertIsInstance(flow, CredentialFlow)

    def test_unknown_config_type_raises(self):
        with self.assertRaises(UnsupportedConfigType) as ctx:
            integrations_modal.open_flow(FakeClient(), Integration(name="x", config_type="oauth"))
        self.assertEqual(ctx.exception.config_type, "oauth")


class CredentialFlowTests(unittest.TestCase):
    def setUp(self):
        self.client = FakeClient()
        self.integration = Integration(
            name="github",
            config_type="api_key",
            profiles=["work"],
            fields=["api_key", "org_name"],
        )
        self.flow = CredentialFlow(self.client, self.integration)

    def test_profiles_list_ends_with_new_entry(self):
        self.assertEqual(self.flow.options, ["work", NEW_PROFILE])
        self.assertEqual(self.flow.view, VIEW_PROFILES)

    def test_new_profile_name_accepts_only_identifier_chars(self):
        keys(self.flow, "down", "enter")
        self.assertEqual(self.flow.view, VIEW_NAME)
        keys(self.flow, "m", "e", " ", "!", "-", "2", "backspace")
        self.assertEqual(self.flow.new_name, "me-")
        keys(self.flow, "enter")
        self.assertEqual(self.flow.view, VIEW_CONFIGURE)
        self.assertEqual(self.flow.profile, "me-")

    def test_empty_name_does_not_advance(self):
        keys(self.flow, "down", "enter", "enter")
        self.assertEqual(self.flow.view, VIEW_NAME)

    def test_form_fields_follow_declared_names(self):
        keys(self.flow, "enter")
        form = self.flow.form
        self.assertEqual([f.key for f in form.fields], ["api_key", "org_name"])
        self.assertEqual(form.field("api_key").label, "API Key")
        self.assertTrue(form.field("api_key").password)
        self.assertFalse(form.field("org_name").password)

    def test_required_fields_block_save(self):
        keys(self.flow, "enter")
        self.assertEqual(keys(self.flow, "ctrl+s"), [])
        self.assertEqual(self.flow.form.field("api_key").error, "API Key is required")
        self.assertEqual(self.client.calls, [])

    def test_save_posts_profile_and_finishes(self):
        keys(self.flow, "enter")
        self.flow.form.set_value("api_key", "ghp_1")
        self.flow.form.set_value("org_name", "acme")
        cmds = keys(self.flow, "ctrl+s")
        self.assertTrue(self.flow.saving)
        finished, _ = self.flow.update(cmds[0].fn())
        self.assertTrue(finished)
        method, path, body = self.client.calls[-1]
        self.assertEqual((method, path), ("POST", "/integrations/github/configure"))
        self.assertEqual(body, {"profile": "work", "config": {"api_key": "ghp_1", "org_name": "acme"}})

    def test_server_errors_stay_on_form(self):
        self.client.failures[("POST", "/integrations/github/configure")] = ServerValidationError(
            {"api_key": "bad token"}
        )
        keys(self.flow, "enter")
        self.flow.form.set_value("api_key", "x")
        self.flow.form.set_value("org_name", "acme")
        cmds = keys(self.flow, "ctrl+s")
        finished, _ = self.flow.update(cmds[0].fn())
        self.assertFalse(finished)
        self.assertFalse(self.flow.saving)
        self.assertEqual(self.flow.form.field("api_key").error, "bad token")

    def test_escape_walks_back(self):
        keys(self.flow, "enter")
        keys(self.flow, "esc")
        self.assertEqual(self.flow.view, VIEW_PROFILES)
        self.assertIsNone(self.flow.form)
        finished, _ = self.flow.update(KeyPressed("esc"))
        self.assertTrue(finished)

    def test_t_tests_integration_from_profile_list(self):
        cmds = keys(self.flow, "t")
        self.assertTrue(self.flow.testing)
        self.assertEqual(keys(self.flow, "t"), [])
        finished, _ = self.flow.update(cmds[0].fn())
        self.assertFalse(finished)
        self.assertFalse(self.flow.testing)
        self.assertEqual(self.flow.notice, "Connection successful")
        self.assertIn(("POST", "/integrations/github/test", None), self.client.calls)
        keys(self.flow, "down")
        self.assertEqual(self.flow.notice, "")

    def test_failed_test_is_reported(self):
        self.client.failures[("POST", "/integrations/github/test")] = APIError(502, "bad gateway")
        cmds = keys(self.flow, "t")
        self.flow.update(cmds[0].fn())
        self.assertEqual(self.flow.notice, "Test failed: API error 502: bad gateway")

    def test_r_refreshes_profiles(self):
        self.client.integrations = [{"name": "github", "profiles": ["work", "personal"]}]
        cmds = keys(self.flow, "r")
        self.assertTrue(self.flow.refreshing)
        self.flow.update(cmds[0].fn())
        self.assertFalse(self.flow.refreshing)
        self.assertEqual(self.flow.options, ["work", "personal", NEW_PROFILE])
        self.assertEqual(self.flow.integration.profiles, ["work", "personal"])


class IntegrationsModalTests(unittest.TestCase):
    def setUp(self):
        self.client = FakeClient(
            [
                {"name": "github", "fields": ["token"], "profiles": ["default"]},
                {"name": "calendar", "config_type": "oauth"},
            ]
        )
        self.modal = IntegrationsModal(self.client)
        run_all(self.modal, self.modal.init())

    def test_lists_integrations(self):
        self.assertFalse(self.modal.loading)
        self.assertEqual([i.name for i in self.modal.integrations], ["github", "calendar"])
        self.assertEqual(self.modal.integrations[0].config_type, "api_key")

    def test_unsupported_type_shows_error_without_flow(self):
        keys(self.modal, "down", "enter")
        self.assertIsNone(self.modal.flow)
        self.assertIn("oauth", self.modal.error)

    def test_finished_flow_reloads_list(self):
        keys(self.modal, "enter")
        self.assertIsInstance(self.modal.flow, CredentialFlow)
        keys(self.modal, "enter")
        self.modal.flow.form.set_value("token", "t-1")
        save = keys(self.modal, "ctrl+s")
        _, cmds = self.modal.update(save[0].fn())
        self.assertIsNone(self.modal.flow)
        self.assertTrue(self.modal.loading)
        run_all(self.modal, cmds)
        self.assertFalse(self.modal.loading)

    def test_escape_inside_flow_does_not_close_modal(self):
        keys(self.modal, "enter")
        nxt, _ = self.modal.update(KeyPressed("esc"))
        self.assertIs(nxt, self.modal)
        self.assertIsNone(self.modal.flow)
        nxt, _ = self.modal.update(KeyPressed("esc"))
        self.assertIsNone(nxt)

    def test_connection_test_reports_result(self):
        cmds = keys(self.modal, "t")
        self.assertTrue(self.modal.testing)
        self.modal.update(cmds[0].fn())
        self.assertFalse(self.modal.testing)
        self.assertEqual(self.modal.notice, "Connection successful")

    def test_test_and_refresh_inside_credential_flow(self):
        keys(self.modal, "enter")
        flow = self.modal.flow
        run_all(self.modal, keys(self.modal, "t"))
        self.assertIs(self.modal.flow, flow)
        self.assertEqual(flow.notice, "Connection successful")
        self.assertEqual(self.modal.notice, "")

        self.client.integrations[0]["profiles"] = ["default", "ci"]
        run_all(self.modal, keys(self.modal, "r"))
        self.assertIs(self.modal.flow, flow)
        self.assertEqual(flow.options, ["default", "ci", NEW_PROFILE])
        self.assertEqual(self.modal.integrations[0].profiles, ["default", "ci"])


if __name__ == "__main__":
    unittest.main()
