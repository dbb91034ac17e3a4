from __future__ import annotations

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from hub_tui.commands import Command, emit  # noqa: E402
from hub_tui.config import Config  # noqa: E402
from hub_tui.messages import KeyPressed, ModulesLoaded, SettingsSaved, WorkflowRequested, WorkflowsLoaded  # noqa: E402
from hub_tui.modals import NOT_HANDLED, Modal, ModalStack, clamp  # noqa: E402
from hub_tui.modals.catalog import ModulesModal, WorkflowsModal  # noqa: E402
from hub_tui.modals.help import HELP_LINES, VISIBLE_LINES, HelpModal  # noqa: E402
from hub_tui.modals.settings import SettingsModal  # noqa: E402
from hub_tui.models import Module, Workflow  # noqa: E402


class RecordingModal(Modal):
    kind = "recording"

    def __init__(self, result=None, custom_close=False):
        self.seen = []
        self.result = result
        self.custom_close = custom_close

    def init(self):
        return [emit("opened")]

    def update(self, msg):
        self.seen.append(msg)
        if self.result is None:
            return self, []
        return self.result


class FakeClient:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def request(self, method, path, body=None, params=None):
        self.calls.append((method, path, body))
        return self.responses.get((method, path), {})


class ModalStackTests(unittest.TestCase):
    def test_open_returns_init_commands(self):
        stack = ModalStack()
        cmds = stack.open(RecordingModal())
        self.assertTrue(stack.is_open)
        self.assertEqual(cmds[0].fn(), "opened")

    def test_esc_closes_without_consulting_modal(self):
        stack = ModalStack()
        modal = RecordingModal()
        stack.open(modal)
        handled, cmds = stack.update(KeyPressed("esc"))
        self.assertTrue(handled)
        self.assertEqual(cmds, [])
        self.assertFalse(stack.is_open)
        self.assertEqual(modal.seen, [])

    def test_custom_close_modal_receives_esc(self):
        stack = ModalStack()
        modal = RecordingModal(custom_close=True)
        stack.open(modal)
        stack.update(KeyPressed("esc"))
        self.assertTrue(stack.is_open)
        self.assertEqual(modal.seen, [KeyPressed("esc")])

    def test_not_handled_falls_through(self):
        stack = ModalStack()
        stack.open(RecordingModal(result=(NOT_HANDLED, [])))
        handled, _ = stack.update(KeyPressed("x"))
        self.assertFalse(handled)
        self.assertTrue(stack.is_open)

    def test_closing_modal_still_returns_follow_up(self):
        follow_up = emit(WorkflowRequested(name="daily"))
        stack = ModalStack()
        stack.open(RecordingModal(result=(None, [follow_up])))
        handled, cmds = stack.update(KeyPressed("enter"))
        self.assertTrue(handled)
        self.assertEqual(cmds, [follow_up])
        self.assertFalse(stack.is_open)

    def test_update_without_modal(self):
        self.assertEqual(ModalStack().update(KeyPressed("x")), (False, []))

    def test_clamp(self):
        self.assertEqual(clamp(5, 3), 2)
        self.assertEqual(clamp(-1, 3), 0)
        self.assertEqual(clamp(2, 0), 0)


class HelpModalTests(unittest.TestCase):
    def test_scroll_is_bounded(self):
        modal = HelpModal()
        modal.update(KeyPressed("up"))
        self.assertEqual(modal.scroll, 0)
        for _ in range(len(HELP_LINES) + 5):
            modal.update(KeyPressed("j"))
        self.assertEqual(modal.scroll, max(0, len(HELP_LINES) - VISIBLE_LINES))
        self.assertLessEqual(len(modal.visible), VISIBLE_LINES)

    def test_other_keys_fall_through(self):
        nxt, _ = HelpModal().update(KeyPressed("a"))
        self.assertIs(nxt, NOT_HANDLED)


class CatalogModalTests(unittest.TestCase):
    def test_modules_toggle_issues_disable_then_reload(self):
        client = FakeClient({("GET", "/modules"): {"modules": [{"name": "mail", "enabled": True}]}})
        modal = ModulesModal(client)
        loaded = modal.init()[0].fn()
        self.assertIsInstance(loaded, ModulesLoaded)
        modal.update(loaded)
        _, cmds = modal.update(KeyPressed("enter"))
        toggled = cmds[0].fn()
        self.assertIn(("POST", "/modules/mail/disable", None), client.calls)
        _, cmds = modal.update(toggled)
        self.assertTrue(modal.loading)
        self.assertIsInstance(cmds[0], Command)

    def test_workflow_enter_closes_and_requests_run(self):
        modal = WorkflowsModal(FakeClient({}))
        modal.update(WorkflowsLoaded(workflows=(Workflow(name="off", enabled=False), Workflow(name="daily"))))
        nxt, cmds = modal.update(KeyPressed("enter"))
        self.assertIs(nxt, modal)
        self.assertEqual(cmds, [])
        self.assertIn("disabled", modal.error)
        modal.update(KeyPressed("down"))
        nxt, cmds = modal.update(KeyPressed("enter"))
        self.assertIsNone(nxt)
        self.assertEqual(cmds[0].fn(), WorkflowRequested(name="daily"))

    def test_selection_clamped_after_reload(self):
        modal = ModulesModal(FakeClient({}))
        modal.update(ModulesLoaded(modules=(Module(name="a"), Module(name="b"), Module(name="c"))))
        modal.update(KeyPressed("down"))
        modal.update(KeyPressed("down"))
        modal.update(ModulesLoaded(modules=(Module(name="a"),)))
        self.assertEqual(modal.selected, 0)


class MemoryStore:
    def __init__(self, fail=False):
        self.fail = fail
        self.saved = []

    def save(self, config):
        if self.fail:
            raise PermissionError("read-only")
        self.saved.append(config)


class SettingsModalTests(unittest.TestCase):
    def test_edit_and_save_server_url(self):
        store = MemoryStore()
        modal = SettingsModal(Config(server_url="http://old", token="t"), store, connected=True)
        modal.update(KeyPressed("e"))
        self.assertTrue(modal.editing)
        modal.form.set_value("server_url", " http://new.local/ ")
        _, cmds = modal.update(KeyPressed("ctrl+s"))
        result = cmds[0].fn()
        self.assertEqual(result, SettingsSaved(server_url="http://new.local"))
        self.assertEqual(store.saved[0].server_url, "http://new.local")
        self.assertEqual(store.saved[0].token, "t")
        nxt, _ = modal.update(result)
        self.assertIs(nxt, modal)
        self.assertFalse(modal.editing)
        self.assertEqual(modal.config.server_url, "http://new.local")

    def test_blank_url_is_rejected(self):
        modal = SettingsModal(Config(server_url="http://old"), MemoryStore(), connected=False)
        modal.update(KeyPressed("e"))
        modal.form.set_value("server_url", "")
        _, cmds = modal.update(KeyPressed("ctrl+s"))
        self.assertEqual(cmds, [])
        self.assertTrue(modal.form.field("server_url").error)

    def test_save_failure_stays_in_form(self):
        modal = SettingsModal(Config(server_url="http://old"), MemoryStore(fail=True), connected=True)
        modal.update(KeyPressed("e"))
        _, cmds = modal.update(KeyPressed("ctrl+s"))
        modal.update(cmds[0].fn())
        self.assertTrue(modal.editing)
        self.assertIn("read-only", modal.error)

    def test_escape_leaves_form_then_closes(self):
        modal = SettingsModal(Config(server_url="http://old"), MemoryStore(), connected=True)
        modal.update(KeyPressed("e"))
        nxt, _ = modal.update(KeyPressed("esc"))
        self.assertIs(nxt, modal)
        self.assertFalse(modal.editing)
        nxt, _ = modal.update(KeyPressed("esc"))
        self.assertIsNone(nxt)


if __name__ == "__main__":
    unittest.main()
