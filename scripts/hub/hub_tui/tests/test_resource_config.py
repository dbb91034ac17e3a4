from __future__ import annotations

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from hub_tui.commands import Command, Tick  # noqa: E402
from hub_tui.errors import APIError, ServerValidationError, ValidationError  # noqa: E402
from hub_tui.messages import KeyPressed, ModelsLoaded  # noqa: E402
from hub_tui.modals.resource_config import (  # noqa: E402
    ITEM_ACCOUNT,
    ITEM_NEW_PROFILE,
    ITEM_NEW_PROVIDER,
    ITEM_PROFILE,
    VIEW_LIST,
    VIEW_PROFILE_FORM,
    VIEW_PROVIDER_FORM,
    ProviderProfileFlow,
    build_items,
)
from hub_tui.models import Integration, Pagination, Profile, ProviderAccount  # noqa: E402

BASE = "/integrations/llm"


class FakeHub:
    """Answers the LLM integration endpoints from in-memory state."""

    def __init__(self, providers=None, profiles=None, models=None, available=None, fields=None):
        self.providers = providers or []
        self.profiles = profiles or []
        self.models = models or []
        self.available = available or [{"name": "openai", "display_name": "OpenAI"}]
        self.fields = fields or {}
        self.calls = []
        self.failures = {}

    def request(self, method, path, body=None, params=None):
        self.calls.append((method, path, body, dict(params or {})))
        failure = self.failures.get((method, path))
        if failure is not None:
            raise failure
        if method == "GET" and path == f"{BASE}/providers":
            return {"providers": self.providers}
        if method == "GET" and path == f"{BASE}/profiles":
            return {"profiles": self.profiles}
        if method == "GET" and path == f"{BASE}/providers/available":
            return {"providers": self.available}
        if method == "GET" and path.startswith(f"{BASE}/providers/") and path.endswith("/fields"):
            provider = path[len(f"{BASE}/providers/"):-len("/fields")]
            return {"fields": self.fields.get(provider, [])}
        if method == "GET" and path == f"{BASE}/models":
            return self._models(params or {})
        return {}

    def _models(self, params):
        cursor = params.get("cursor", "")
        limit = int(params["limit"])
        start = int(cursor[1:]) if cursor else 0
        page = self.models[start:start + limit]
        more = start + limit < len(self.models)
        return {
            "models": [{"id": m} for m in page],
            "pagination": {
                "total": len(self.models),
                "limit": limit,
                "has_more": more,
                "next_cursor": f"c{start + limit}" if more else "",
            },
        }

    def paths(self, method):
        return [path for m, path, _, _ in self.calls if m == method]


def drive(flow, cmds):
    """Run commands synchronously, feeding results back; return the ticks issued."""
    ticks = []
    pending = list(cmds)
    while pending:
        cmd = pending.pop(0)
        if isinstance(cmd, Tick):
            ticks.append(cmd)
            continue
        msg = cmd.fn()
        if msg is not None:
            _, more = flow.update(msg)
            pending.extend(more)
    return ticks


def press(flow, *keys):
    cmds = []
    for key in keys:
        _, out = flow.update(KeyPressed(key))
        cmds.extend(out)
    return cmds


def open_flow(hub, page_size=15):
    flow = ProviderProfileFlow(hub, Integration(name="llm", config_type="llm"), page_size=page_size)
    drive(flow, flow.init())
    return flow


def select(flow, kind, label=None):
    for idx, item in enumerate(flow.items):
        if item.kind == kind and (label is None or item.label == label):
            flow.selected = idx
            return item
    raise AssertionError(f"no {kind} item {label}")


class BuildItemsTests(unittest.TestCase):
    def test_order_and_sentinels(self):
        items = build_items(
            [Profile(name="fast")],
            [ProviderAccount(provider="openai", display_name="OpenAI", accounts=["default", "work"])],
        )
        self.assertEqual(
            [i.kind for i in items],
            [ITEM_PROFILE, ITEM_NEW_PROFILE, ITEM_ACCOUNT, ITEM_ACCOUNT, ITEM_NEW_PROVIDER],
        )
        self.assertEqual(items[3].account_id, "openai/work")
        self.assertEqual(items[3].label, "OpenAI / work")


class ProviderFormTests(unittest.TestCase):
    def setUp(self):
        self.hub = FakeHub(
            fields={
                "openai": [
                    {"key": "api_key", "label": "API Key", "required": True, "secret": True},
                    {"key": "base_url", "label": "Base URL", "default": "https://api.openai.com"},
                ]
            }
        )
        self.flow = open_flow(self.hub)
        select(self.flow, ITEM_NEW_PROVIDER)
        drive(self.flow, press(self.flow, "enter"))

    def test_form_built_from_declared_fields(self):
        form = self.flow.form
        self.assertEqual(self.flow.view, VIEW_PROVIDER_FORM)
        self.assertFalse(self.flow.fields_loading)
        self.assertEqual([f.key for f in form.fields], ["provider", "account", "api_key", "base_url"])
        self.assertTrue(form.field("api_key").password)
        self.assertEqual(form.value("base_url"), "https://api.openai.com")
        self.assertEqual(form.value("account"), "default")

    def test_empty_api_key_fails_locally(self):
        with self.assertRaises(ValidationError) as ctx:
            self.flow.validate_provider_form()
        self.assertEqual(ctx.exception.field_errors, {"api_key": "API Key is required"})

        cmds = press(self.flow, "ctrl+s")
        self.assertEqual(cmds, [])
        self.assertEqual(self.flow.form.field("api_key").error, "API Key is required")
        self.assertEqual(self.hub.paths("POST"), [])

    def test_save_posts_and_returns_to_list(self):
        self.flow.form.set_value("api_key", "sk-123")
        drive(self.flow, press(self.flow, "ctrl+s"))
        post = [c for c in self.hub.calls if c[0] == "POST"][0]
        self.assertEqual(post[1], f"{BASE}/providers")
        self.assertEqual(post[2]["fields"], {"api_key": "sk-123", "base_url": "https://api.openai.com"})
        self.assertEqual(self.flow.view, VIEW_LIST)
        self.assertEqual(self.flow.notice, "Saved openai/default")

    def test_server_field_errors_land_on_form(self):
        self.hub.failures[("POST", f"{BASE}/providers")] = ServerValidationError({"api_key": "key rejected"})
        self.flow.form.set_value("api_key", "sk-bad")
        drive(self.flow, press(self.flow, "ctrl+s"))
        self.assertEqual(self.flow.view, VIEW_PROVIDER_FORM)
        self.assertEqual(self.flow.form.field("api_key").error, "key rejected")
        self.assertFalse(self.flow.saving)

    def test_typed_values_survive_field_reload(self):
        self.flow.form.set_value("api_key", "sk-keep")
        self.flow.form.focus_key("api_key")
        drive(self.flow, [self.flow._load_fields("openai")])
        self.assertEqual(self.flow.form.value("api_key"), "sk-keep")
        self.assertTrue(self.flow.form.is_focused("api_key"))


class ModelPaginationTests(unittest.TestCase):
    def setUp(self):
        self.hub = FakeHub(
            providers=[{"provider": "openai", "accounts": ["default"]}],
            models=[f"model-{i:02d}" for i in range(32)],
        )
        self.flow = open_flow(self.hub, page_size=15)
        select(self.flow, ITEM_NEW_PROFILE)
        drive(self.flow, press(self.flow, "enter"))
        self.flow.form.focus_key("model")

    def test_thirty_two_models_in_three_pages(self):
        flow = self.flow
        self.assertEqual(flow.view, VIEW_PROFILE_FORM)
        self.assertEqual(flow.models.ids, [f"model-{i:02d}" for i in range(15)])
        self.assertTrue(flow.models.has_more)

        drive(flow, press(flow, "n"))
        self.assertEqual(flow.models.page, 2)
        self.assertEqual(flow.models.ids[0], "model-15")

        drive(flow, press(flow, "n"))
        self.assertEqual(flow.models.page, 3)
        self.assertEqual(flow.models.ids, ["model-30", "model-31"])
        self.assertFalse(flow.models.has_more)
        self.assertEqual(press(flow, "n"), [])

        drive(flow, press(flow, "p"))
        self.assertEqual(flow.models.page, 2)
        self.assertEqual(flow.models.ids[0], "model-15")

        drive(flow, press(flow, "p"))
        self.assertEqual(flow.models.page, 1)
        self.assertEqual(flow.models.ids[0], "model-00")
        self.assertEqual(press(flow, "p"), [])

        cursors = [c[3].get("cursor", "") for c in self.hub.calls if c[1] == f"{BASE}/models"]
        self.assertEqual(cursors, ["", "c15", "c30", "c15", ""])
        self.assertTrue(all(c[3]["limit"] == "15" for c in self.hub.calls if c[1] == f"{BASE}/models"))

    def test_repeated_next_while_loading_moves_one_page(self):
        flow = self.flow
        cmds = press(flow, "n", "n")
        self.assertEqual(len(cmds), 1)
        self.assertEqual(flow.models.page, 1)
        drive(flow, cmds)
        self.assertEqual(flow.models.page, 2)
        self.assertEqual(flow.models.cursor_stack, ["c15"])
        self.assertEqual(flow.models.ids[0], "model-15")

        drive(flow, press(flow, "p"))
        self.assertEqual(flow.models.page, 1)
        self.assertEqual(flow.models.ids[0], "model-00")

    def test_failed_page_load_keeps_current_page(self):
        flow = self.flow
        self.hub.failures[("GET", f"{BASE}/models")] = APIError(500, "models unavailable")
        drive(flow, press(flow, "n"))
        self.assertEqual(flow.error, "API error 500: models unavailable")
        self.assertEqual(flow.models.page, 1)
        self.assertEqual(flow.models.cursor_stack, [])
        self.assertEqual(flow.models.ids[0], "model-00")

        del self.hub.failures[("GET", f"{BASE}/models")]
        drive(flow, press(flow, "n"))
        self.assertEqual(flow.models.page, 2)
        self.assertEqual(flow.models.cursor_stack, ["c15"])

    def test_page_keys_only_page_when_model_focused(self):
        self.flow.form.focus_key("name")
        press(self.flow, "n")
        self.assertEqual(self.flow.models.page, 1)
        self.assertEqual(self.flow.form.value("name"), "n")


class CascadeTests(unittest.TestCase):
    def setUp(self):
        self.hub = FakeHub(
            providers=[
                {"provider": "openai", "accounts": ["default", "work"]},
                {"provider": "anthropic", "accounts": ["main"]},
            ],
            models=["m1", "m2"],
        )
        self.flow = open_flow(self.hub)
        select(self.flow, ITEM_NEW_PROFILE)
        drive(self.flow, press(self.flow, "enter"))

    def test_initial_defaults(self):
        form = self.flow.form
        self.assertEqual(form.value("provider"), "openai")
        self.assertEqual(form.field("account").options, ["default", "work"])
        self.assertEqual(form.value("account"), "default")
        self.assertEqual(form.field("model").options, ["m1", "m2"])

    def test_provider_change_clears_account_and_models(self):
        form = self.flow.form
        form.set_value("model", "m2")
        form.focus_key("provider")
        cmds = press(self.flow, "down")
        self.assertEqual(form.value("provider"), "anthropic")
        self.assertEqual(form.field("account").options, ["main"])
        self.assertEqual(form.value("account"), "")
        self.assertEqual(form.field("model").options, [])
        self.assertEqual(form.value("model"), "")
        self.assertEqual(len(cmds), 1)
        self.assertTrue(self.flow.models_loading)

    def test_account_change_refetches_models(self):
        form = self.flow.form
        form.focus_key("account")
        before = len(self.hub.paths("GET"))
        drive(self.flow, press(self.flow, "down"))
        self.assertEqual(form.value("account"), "work")
        models_call = self.hub.calls[-1]
        self.assertEqual(models_call[1], f"{BASE}/models")
        self.assertEqual(models_call[3]["account"], "work")
        self.assertGreater(len(self.hub.paths("GET")), before)

    def test_stale_models_response_is_ignored(self):
        form = self.flow.form
        form.focus_key("provider")
        first = press(self.flow, "down")
        second = press(self.flow, "up")
        stale = first[0].fn()
        fresh = second[0].fn()
        self.flow.update(ModelsLoaded(request_id=stale.request_id, models=(), pagination=Pagination()))
        self.assertTrue(self.flow.models_loading)
        self.flow.update(fresh)
        self.assertFalse(self.flow.models_loading)
        self.assertEqual(form.field("model").options, ["m1", "m2"])

    def test_models_response_from_closed_flow_is_ignored(self):
        closed = open_flow(self.hub)
        select(closed, ITEM_NEW_PROFILE)
        leftover = press(closed, "enter")[0].fn()
        reopened = open_flow(self.hub)
        select(reopened, ITEM_NEW_PROFILE)
        pending = press(reopened, "enter")
        self.assertNotEqual(leftover.request_id, reopened.models_request)
        reopened.update(ModelsLoaded(request_id=leftover.request_id, models=(), pagination=Pagination()))
        self.assertTrue(reopened.models_loading)
        drive(reopened, pending)
        self.assertEqual(reopened.form.field("model").options, ["m1", "m2"])


class ProfileSaveTests(unittest.TestCase):
    def setUp(self):
        self.hub = FakeHub(
            providers=[{"provider": "openai", "accounts": ["default"]}],
            profiles=[{"name": "fast", "provider": "openai", "account": "default", "model": "m1"}],
            models=["m1", "m2"],
        )
        self.flow = open_flow(self.hub)

    def test_edit_deletes_then_recreates_then_sets_default(self):
        select(self.flow, ITEM_PROFILE, "fast")
        drive(self.flow, press(self.flow, "enter"))
        form = self.flow.form
        self.assertEqual(form.value("model"), "m1")
        form.set_value("model", "m2")
        form.field("is_default").checked = True
        self.hub.calls.clear()
        drive(self.flow, press(self.flow, "ctrl+s"))
        mutations = [(m, p) for m, p, _, _ in self.hub.calls if m != "GET"]
        self.assertEqual(
            mutations,
            [
                ("DELETE", f"{BASE}/profiles/fast"),
                ("POST", f"{BASE}/profiles"),
                ("PUT", f"{BASE}/profiles/set-default"),
            ],
        )
        self.assertEqual(self.flow.view, VIEW_LIST)

    def test_new_profile_requires_name(self):
        select(self.flow, ITEM_NEW_PROFILE)
        drive(self.flow, press(self.flow, "enter"))
        self.flow.form.set_value("model", "m1")
        self.assertEqual(press(self.flow, "ctrl+s"), [])
        self.assertEqual(self.flow.form.field("name").error, "Name is required")

    def test_profile_form_needs_an_account(self):
        hub = FakeHub(providers=[{"provider": "openai", "accounts": []}])
        flow = open_flow(hub)
        select(flow, ITEM_NEW_PROFILE)
        self.assertEqual(press(flow, "enter"), [])
        self.assertEqual(flow.view, VIEW_LIST)
        self.assertIn("provider account", flow.error)


class DeleteConfirmationTests(unittest.TestCase):
    def setUp(self):
        self.hub = FakeHub(
            providers=[{"provider": "openai", "accounts": ["default"]}],
            profiles=[{"name": "a"}, {"name": "b"}],
        )
        self.flow = open_flow(self.hub)

    def test_second_press_on_same_row_deletes(self):
        select(self.flow, ITEM_PROFILE, "a")
        ticks = press(self.flow, "d")
        self.assertIsInstance(ticks[0], Tick)
        expiry = ticks[0].msg
        self.assertEqual((expiry.key, expiry.id), ("delete_profile", "a"))
        cmds = press(self.flow, "d")
        self.assertIsInstance(cmds[0], Command)
        drive(self.flow, cmds)
        self.assertIn(f"{BASE}/profiles/a", self.hub.paths("DELETE"))

    def test_confirmation_does_not_carry_across_rows(self):
        select(self.flow, ITEM_PROFILE, "a")
        press(self.flow, "d")
        press(self.flow, "down")
        self.assertFalse(self.flow.confirm.pending_any)
        press(self.flow, "d")
        self.assertTrue(self.flow.confirm.is_pending("delete_profile", "b"))
        self.assertEqual(self.hub.paths("DELETE"), [])

    def test_account_delete_is_keyed_by_provider_and_account(self):
        select(self.flow, ITEM_ACCOUNT)
        press(self.flow, "d")
        self.assertTrue(self.flow.confirm.is_pending("delete_account", "openai/default"))
        drive(self.flow, press(self.flow, "d"))
        self.assertIn(f"{BASE}/providers/openai/default", self.hub.paths("DELETE"))

    def test_expiry_clears_pending(self):
        select(self.flow, ITEM_PROFILE, "a")
        tick = press(self.flow, "d")[0]
        self.flow.update(tick.msg)
        self.assertFalse(self.flow.confirm.pending_any)

    def test_timer_from_closed_flow_does_not_clear_new_confirmation(self):
        select(self.flow, ITEM_PROFILE, "a")
        leftover = press(self.flow, "d")[0]
        reopened = open_flow(self.hub)
        select(reopened, ITEM_PROFILE, "a")
        press(reopened, "d")
        reopened.update(leftover.msg)
        self.assertTrue(reopened.confirm.is_pending("delete_profile", "a"))


if __name__ == "__main__":
    unittest.main()
