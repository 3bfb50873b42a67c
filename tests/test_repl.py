import os
from unittest.mock import Mock, patch

import anthropic
import openai

from gpt_cli import ChatCLI, Params, build_cli
from gpt_cli.core import AIMessage, HumanMessage, SystemMessage

from .test_base import BaseChatCLITest


def fake_backend(*replies):
    backend = Mock()
    backend.stream.side_effect = [iter([reply]) for reply in replies]
    return backend


class TestREPL(BaseChatCLITest):
    def setUp(self):
        super().setUp()
        self.cli = ChatCLI(self.context, self.dispatcher, [SystemMessage("be brief")])

    @patch("gpt_cli.cli.create_backend")
    @patch("builtins.input")
    def test_repl_basic_interaction(self, mock_input, mock_create):
        """A message gets an answer and /bye leaves the loop"""
        mock_input.side_effect = ["Hello", "/bye"]
        mock_create.return_value = fake_backend("Hi there!")

        with self.assertRaises(SystemExit):
            self.cli.repl()

        self.assertEqual(
            self.cli.messages,
            [SystemMessage("be brief"), HumanMessage("Hello"), AIMessage("Hi there!")],
        )
        mock_create.assert_called_once_with("gpt-4o", self.params)
        self.assertIn("Hi there!", self.printed())
        self.assertIn("gpt-4o", self.context.model_stack)

    @patch("gpt_cli.cli.create_backend")
    @patch("builtins.input")
    def test_at_mention_targets_other_model_once(self, mock_input, mock_create):
        mock_input.side_effect = ["Hello", "@claude-3", "Again", EOFError()]
        mock_create.return_value = fake_backend("one", "two", "three")

        self.cli.repl()

        models = [c.args[0] for c in mock_create.call_args_list]
        self.assertEqual(models, ["gpt-4o", "claude-3", "gpt-4o"])
        self.assertEqual(
            [m.content for m in self.cli.messages],
            ["be brief", "Hello", "one", "Hello", "two", "Again", "three"],
        )
        self.assertEqual(self.params.model, "gpt-4o")
        self.assertEqual(self.context.model_stack, {"gpt-4o", "claude-3"})

    @patch("builtins.input")
    def test_chat_turns_autosave(self, mock_input):
        mock_input.side_effect = ["Hello", EOFError()]
        with patch("gpt_cli.cli.create_backend", return_value=fake_backend("Hi")):
            self.cli.repl()

        autosaves = self.store.list()
        self.assertEqual(len(autosaves), 1)
        _, saved = self.store.load(autosaves[0])
        self.assertEqual(saved, self.cli.messages)

    @patch("builtins.input")
    def test_unknown_command_leaves_history_unchanged(self, mock_input):
        mock_input.side_effect = ["/bogus", EOFError()]

        self.cli.repl()

        self.assertEqual(self.cli.messages, [SystemMessage("be brief")])
        self.assertIn("Unknown command: /bogus", self.printed())

    @patch("builtins.input")
    def test_unsupported_model_drops_the_turn(self, mock_input):
        mock_input.side_effect = ["@llama-3 hi", EOFError()]

        self.cli.repl()

        self.assertEqual(self.cli.messages, [SystemMessage("be brief")])
        self.assertIn("Unsupported model", self.printed())

    @patch("gpt_cli.cli.create_backend")
    @patch("builtins.input")
    def test_backend_error_drops_the_turn(self, mock_input, mock_create):
        mock_input.side_effect = ["Hello", EOFError()]
        backend = Mock()
        backend.stream.side_effect = openai.OpenAIError("boom")
        mock_create.return_value = backend

        self.cli.repl()

        self.assertEqual(self.cli.messages, [SystemMessage("be brief")])
        self.assertIn("boom", self.printed())

    @patch("gpt_cli.cli.create_backend")
    @patch("builtins.input")
    def test_anthropic_error_drops_the_turn_and_continues(self, mock_input, mock_create):
        mock_input.side_effect = ["@claude-3-haiku hi", "Hello", EOFError()]
        failing = Mock()
        failing.stream.side_effect = anthropic.AnthropicError("no key")
        mock_create.side_effect = [failing, fake_backend("Hi there!")]

        self.cli.repl()

        self.assertEqual(
            self.cli.messages,
            [SystemMessage("be brief"), HumanMessage("Hello"), AIMessage("Hi there!")],
        )
        self.assertIn("no key", self.printed())
        self.assertNotIn("claude-3-haiku", self.context.model_stack)

    @patch("builtins.input")
    def test_missing_anthropic_key_is_reported(self, mock_input):
        mock_input.side_effect = ["@claude-3-haiku hi", EOFError()]

        with patch.dict(os.environ, {}, clear=True):
            self.cli.repl()

        self.assertEqual(self.cli.messages, [SystemMessage("be brief")])
        self.assertIn("ANTHROPIC_API_KEY", self.printed())

    @patch("builtins.input")
    def test_commands_run_through_the_repl(self, mock_input):
        self.cli.messages.append(HumanMessage("question"))
        mock_input.side_effect = ["/save keep", "/clear", "/load keep", EOFError()]

        self.cli.repl()

        self.assertEqual(
            self.cli.messages, [SystemMessage("be brief"), HumanMessage("question")]
        )
        self.assertIn("keep", self.store.list())

    @patch("builtins.input")
    def test_missing_session_is_reported(self, mock_input):
        mock_input.side_effect = ["/load nothing-here", EOFError()]

        self.cli.repl()

        self.assertIn("Session 'nothing-here' does not exist.", self.printed())


class TestBuildCLI(BaseChatCLITest):
    def test_system_prompt_starts_history(self):
        cli = build_cli(Params(model="claude-3", system_prompt="terse"), self.store)
        self.assertEqual(cli.messages, [SystemMessage("terse")])
        self.assertEqual(cli.context.model_stack, {"claude-3"})

    def test_empty_system_prompt(self):
        cli = build_cli(Params(system_prompt=""), self.store)
        self.assertEqual(cli.messages, [])
