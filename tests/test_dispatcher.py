import os
from pathlib import Path
from unittest.mock import Mock, patch

from gpt_cli.core import AIMessage, Command, CommandRequest, HumanMessage, SystemMessage
from gpt_cli.utils import CodeBlock

from .test_base import BaseChatCLITest


class TestDispatcher(BaseChatCLITest):
    def run_command(self, command, argument=None, messages=None):
        return self.dispatcher.dispatch(
            CommandRequest(command, argument),
            self.messages if messages is None else messages,
        )

    def autosaves(self):
        return [n for n in self.store.list() if n.startswith("autosave-")]

    # ---------------- Clear ---------------

    def test_clear_keeps_system_messages(self):
        history = [
            SystemMessage("first"),
            HumanMessage("q"),
            SystemMessage("second"),
            AIMessage("a"),
        ]
        result = self.run_command(Command.CLEAR, messages=history)

        self.assertEqual(result, [SystemMessage("first"), SystemMessage("second")])
        self.assertIn("Context clear successful", self.printed())

    def test_clear_is_idempotent(self):
        once = self.run_command(Command.CLEAR)
        twice = self.run_command(Command.CLEAR, messages=once)
        self.assertEqual(once, twice)
        self.assertEqual(once, [SystemMessage("be brief")])

    # ---------------- Autosave ---------------

    def test_commands_autosave(self):
        self.run_command(Command.HELP)

        names = self.autosaves()
        self.assertEqual(len(names), 1)
        self.assertEqual(self.store.load(names[0]), ("gpt-4o", self.messages))

    def test_autosave_failure_is_reported_not_raised(self):
        with patch.object(self.store, "autosave", side_effect=OSError("disk full")):
            result = self.run_command(Command.CLEAR)

        self.assertEqual(result, [SystemMessage("be brief")])
        self.assertIn("AutoSave failed: disk full", self.printed())

    def test_bye_exits_without_autosave(self):
        with self.assertRaises(SystemExit) as ctx:
            self.run_command(Command.BYE)

        self.assertEqual(ctx.exception.code, 0)
        self.assertEqual(self.store.list(), [])

    # ---------------- Help / ModelStack ---------------

    def test_help(self):
        result = self.run_command(Command.HELP)
        self.assertEqual(result, self.messages)
        self.assertIn("/resume-latest", self.printed())

    def test_model_stack(self):
        self.context.model_stack.update({"gpt-4o", "claude-3"})
        self.run_command(Command.MODEL_STACK)
        self.assertIn("gpt-4o", self.printed())
        self.assertIn("claude-3", self.printed())

    # ---------------- Save / Load / Delete / Sessions ---------------

    def test_save_and_load(self):
        self.run_command(Command.SAVE, "work")
        self.assertIn("Session 'work' saved.", self.printed())

        self.params.model = "claude-3"
        result = self.run_command(Command.LOAD, "work", messages=[])

        self.assertEqual(result, self.messages)
        self.assertEqual(self.params.model, "gpt-4o")
        self.assertIn("gpt-4o", self.context.model_stack)

    def test_load_missing_session_propagates(self):
        with self.assertRaises(FileNotFoundError):
            self.run_command(Command.LOAD, "missing")
        self.assertEqual(self.autosaves(), [])

    def test_delete(self):
        self.store.save("test", self.messages, "gpt-4o")

        self.run_command(Command.DELETE, "test")

        self.assertNotIn("test", self.store.list())
        self.assertIn("Session 'test' deleted.", self.printed())

    def test_delete_missing_session_propagates(self):
        self.sessions_dir.mkdir(parents=True)
        with self.assertRaises(FileNotFoundError):
            self.run_command(Command.DELETE, "ghost")

    def test_sessions_lists_names(self):
        self.store.save("alpha", [], "gpt-4o")
        self.store.save("beta", [], "gpt-4o")

        self.run_command(Command.SESSIONS)

        self.assertIn("alpha", self.printed())
        self.assertIn("beta", self.printed())
        self.assertNotIn(".json", self.printed())

    def test_save_without_name_prints_usage(self):
        self.run_command(Command.SAVE)
        self.assertIn("Usage: /save <name>", self.printed())

    @patch("gpt_cli.core.dispatcher.questionary.select")
    def test_load_without_name_uses_picker(self, mock_select):
        self.store.save("picked", [HumanMessage("from picker")], "grok-2")
        mock_select.return_value.ask.return_value = "picked"

        result = self.run_command(Command.LOAD, messages=[])

        mock_select.assert_called_once()
        self.assertEqual(result, [HumanMessage("from picker")])
        self.assertEqual(self.params.model, "grok-2")

    @patch("gpt_cli.core.dispatcher.questionary.select")
    def test_delete_picker_cancelled(self, mock_select):
        self.store.save("keep", [], "gpt-4o")
        mock_select.return_value.ask.return_value = None

        self.run_command(Command.DELETE)

        self.assertIn("keep", self.store.list())

    # ---------------- ResumeLatest ---------------

    def test_resume_latest(self):
        old = self.store.save("old", [HumanMessage("old")], "gpt-4o")
        new = self.store.save("new", [SystemMessage("s"), HumanMessage("new")], "claude-3")
        os.utime(old, (1000, 1000))
        os.utime(new, (2000, 2000))

        result = self.run_command(Command.RESUME_LATEST, messages=[])

        self.assertEqual(result, [SystemMessage("s"), HumanMessage("new")])
        self.assertEqual(self.params.model, "claude-3")
        self.assertIn("claude-3", self.context.model_stack)

    def test_resume_latest_without_sessions(self):
        result = self.run_command(Command.RESUME_LATEST)

        self.assertEqual(result, self.messages)
        self.assertEqual(self.params.model, "gpt-4o")
        self.assertIn("No session found to resume.", self.printed())

    # ---------------- File ---------------

    def test_file_attaches_matching_files(self):
        (self.tmp_path / "a.py").write_text("print('a')\n")
        (self.tmp_path / "b.py").write_text("print('b')\n")
        (self.tmp_path / "c.txt").write_text("not matched")

        result = self.run_command(Command.FILE, str(self.tmp_path / "*.py"))

        self.assertEqual(len(result), len(self.messages) + 1)
        attachment = result[-1]
        self.assertIsInstance(attachment, HumanMessage)
        self.assertTrue(attachment.content.startswith("Here are the file(s) I'm attaching (2 file(s)):"))
        self.assertIn("print('a')", attachment.content)
        self.assertIn("```python", attachment.content)
        self.assertNotIn("not matched", attachment.content)

    def test_file_failures_do_not_stop_other_files(self):
        loader = Mock()
        loader.match_files.return_value = iter([Path("bad.bin"), Path("good.py")])
        loader.read_and_format.side_effect = [
            UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"),
            CodeBlock(Path("good.py"), "x = 1", "python"),
        ]
        self.dispatcher.file_loader = loader

        result = self.run_command(Command.FILE, "*")

        self.assertIn("(1 file(s))", result[-1].content)
        self.assertIn("x = 1", result[-1].content)
        self.assertIn("Error processing file bad.bin", self.printed())

    def test_file_without_matches(self):
        result = self.run_command(Command.FILE, str(self.tmp_path / "*.nothing"))

        self.assertEqual(result, self.messages)
        self.assertIn("No files found matching pattern", self.printed())

    def test_file_skips_empty_files(self):
        (self.tmp_path / "empty.py").write_text("")
        result = self.run_command(Command.FILE, str(self.tmp_path / "empty.py"))
        self.assertEqual(result, self.messages)
