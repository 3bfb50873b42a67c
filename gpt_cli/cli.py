"""Interactive REPL and command-line entry point."""
from __future__ import annotations

import argparse
import logging
import readline  # noqa: F401 – side-effect: history & line editing
from typing import List, Optional, Sequence

import anthropic
import openai
from google.genai import errors as genai_errors
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from .core import (
    ChatContext,
    CommandDispatcher,
    HumanMessage,
    Message,
    Params,
    SessionStore,
    SystemMessage,
    UnsupportedModelError,
    create_backend,
    is_slash_command,
    parse_command,
    resolve_at_mention,
)
from .core.client import ChatBackend
from .core.messages import AIMessage
from .core.models import find_strategy
from .utils import (
    ASSISTANT_LABEL,
    ERROR_LABEL,
    USER_LABEL,
    WARNING_LABEL,
    Ansi,
    Spinner,
    console,
)

logger = logging.getLogger(__name__)

# Failures that end a single chat turn without ending the program
CHAT_ERRORS = (
    ValueError,
    openai.OpenAIError,
    anthropic.AnthropicError,
    genai_errors.APIError,
)


class ChatCLI:
    """High-level orchestration class for the interactive REPL."""

    def __init__(
        self,
        context: ChatContext,
        dispatcher: Optional[CommandDispatcher] = None,
        messages: Optional[List[Message]] = None,
    ):
        self.context = context
        self.dispatcher = dispatcher or CommandDispatcher(context)
        self.messages: List[Message] = messages if messages is not None else []

    @property
    def console(self):
        return self.context.console

    # ---------------- Command handling ---------------

    def handle_command(self, line: str) -> None:
        """Classify and run a slash command, reporting any failure."""
        try:
            request = parse_command(line)
            self.messages = self.dispatcher.dispatch(request, self.messages)
        except (OSError, ValueError) as exc:
            logger.debug("command %r failed", line, exc_info=True)
            self.console.print(f"{ERROR_LABEL}: {escape(str(exc))}")

    # ---------------- Chat turns ---------------

    def _stream_reply(self, backend: ChatBackend) -> AIMessage:
        accumulator: List[str] = []
        spinner = Spinner(prefix=f"{ASSISTANT_LABEL}> ", out=self.console)
        spinner.start()
        try:
            for token in backend.stream(self.messages):
                spinner.stop()
                self.console.print(token, end="", markup=False, highlight=False)
                accumulator.append(token)
        finally:
            spinner.stop()
        self.console.print()  # new line after stream ends
        return AIMessage("".join(accumulator))

    def chat(self, text: str) -> None:
        """Send *text* (possibly ``@model``-prefixed) and record the reply."""
        params = self.context.params
        self.messages.append(HumanMessage(text))
        mention = resolve_at_mention(text, self.messages, params.model)
        self.messages[-1] = HumanMessage(mention.message)

        try:
            backend = create_backend(mention.model, params)
            logger.debug("sending %d messages to %r", len(self.messages), backend)
            reply = self._stream_reply(backend)
        except CHAT_ERRORS as exc:
            self.messages.pop()
            self.console.print(f"\n{ERROR_LABEL}: {escape(str(exc))}")
            return
        except KeyboardInterrupt:
            self.messages.pop()
            self.console.print(escape("\n[interrupted]"))
            return

        self.messages.append(reply)
        self.context.model_stack.add(mention.model)
        self.dispatcher.autosave(self.messages)

    # ---------------- Interaction loop ---------------

    def repl(self) -> None:
        """Run the interactive read–eval–print-loop."""
        self.console.print(Panel.fit("GPT CLI", style="bold magenta"))

        self.console.print(
            Ansi.style("Type your message and press Enter. Commands start with '/'.", Ansi.FG_YELLOW),
            Ansi.style(f"Current model: {escape(self.context.params.model)}.", Ansi.FG_YELLOW),
            Ansi.style("Prefix a message with @model to ask another model.", Ansi.FG_YELLOW),
            Ansi.style("Type /help for help.", Ansi.FG_YELLOW),
            sep="\n",
        )

        while True:
            try:
                line = self.console.input(f"{USER_LABEL}> ").strip()
            except (EOFError, KeyboardInterrupt):
                self.console.print(escape("\n[signal caught – exiting]"))
                break

            if not line:
                continue

            if is_slash_command(line):
                self.handle_command(line)
                continue

            self.chat(line)


# ---------------------------------------------------------------------------
# Entrypoint helpers
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Interactive CLI for OpenAI, Anthropic, Gemini, xAI and Azure chat models."
    )
    parser.add_argument("--model", "-m", help="Default model (env GPT_CLI_MODEL)")
    parser.add_argument("--temperature", "-t", type=float, help="Sampling temperature")
    parser.add_argument("--max-tokens", "-x", type=int, help="Maximum output tokens")
    parser.add_argument(
        "--system-prompt", "-s", help="System prompt ('' disables it)"
    )
    parser.add_argument(
        "--resume", action="store_true", help="Resume the most recent session"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def build_cli(params: Params, store: Optional[SessionStore] = None) -> ChatCLI:
    context = ChatContext(params, store or SessionStore())
    context.model_stack.add(params.model)
    messages: List[Message] = []
    if params.system_prompt:
        messages.append(SystemMessage(params.system_prompt))
    return ChatCLI(context, CommandDispatcher(context), messages)


def run_cli(argv: Optional[Sequence[str]] = None) -> None:  # pragma: no cover
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    try:
        params = Params.from_env(
            model=args.model,
            temperature=args.temperature,
            max_tokens=args.max_tokens,
            system_prompt=args.system_prompt,
        )
    except ValueError as exc:
        parser.error(f"invalid configuration: {exc}")

    try:
        find_strategy(params.model)
    except UnsupportedModelError as exc:
        console.print(f"{WARNING_LABEL}: {escape(str(exc))}")

    cli = build_cli(params)
    if args.resume:
        cli.handle_command("/resume-latest")
    cli.repl()


if __name__ == "__main__":  # pragma: no cover
    run_cli()
