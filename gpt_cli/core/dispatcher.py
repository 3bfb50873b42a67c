"""Execution of slash commands against the conversation history."""

from __future__ import annotations

import logging
import sys
from typing import Callable, Iterable, Iterator, List, Optional, Set, Tuple

import questionary
from rich.console import Console
from rich.markup import escape

from ..utils import (
    Ansi,
    CodeBlock,
    console as default_console,
    iter_files,
    parse_file_content,
    print_gray,
    print_gray_error,
)
from .commands import Command, CommandRequest
from .messages import HumanMessage, Message, SystemMessage
from .params import Params
from .session import SessionStore

logger = logging.getLogger(__name__)


class FileLoader:
    """Default attachment source: local files matched by glob patterns."""

    def match_files(self, patterns: Iterable[str]) -> Iterator:
        return iter_files(patterns)

    def read_and_format(self, path) -> CodeBlock:
        return parse_file_content(path)


class ChatContext:
    """State shared by every turn of one running chat."""

    def __init__(
        self,
        params: Params,
        store: SessionStore,
        out: Optional[Console] = None,
    ) -> None:
        self.params = params
        self.store = store
        self.console = out or default_console
        # Every model used so far in this process
        self.model_stack: Set[str] = set()


Handler = Callable[[CommandRequest, List[Message]], List[Message]]


class CommandDispatcher:
    """Runs a :class:`CommandRequest` and returns the next history."""

    def __init__(self, context: ChatContext, file_loader: Optional[FileLoader] = None):
        self.context = context
        self.file_loader = file_loader or FileLoader()
        self._handlers: List[Tuple[Command, Handler]] = [
            (Command.HELP, self._help),
            (Command.CLEAR, self._clear),
            (Command.MODEL_STACK, self._model_stack),
            (Command.BYE, self._bye),
            (Command.FILE, self._file),
            (Command.SAVE, self._save),
            (Command.LOAD, self._load),
            (Command.SESSIONS, self._sessions),
            (Command.DELETE, self._delete),
            (Command.RESUME_LATEST, self._resume_latest),
        ]

    @property
    def console(self) -> Console:
        return self.context.console

    # ---------------- Entry points ---------------

    def dispatch(self, request: CommandRequest, messages: List[Message]) -> List[Message]:
        """Run *request*; errors from Save, Load and Delete propagate."""
        for command, handler in self._handlers:
            if command is request.command:
                break
        else:
            raise ValueError(f"No handler for {request.command}")

        messages = handler(request, messages)
        self.autosave(messages)
        return messages

    def autosave(self, messages: List[Message]) -> Optional[str]:
        """Best-effort snapshot of *messages*; failures are only reported."""
        try:
            return self.context.store.autosave(messages, self.context.params.model)
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("autosave failed: %s", exc)
            print_gray_error(self.console, f"AutoSave failed: {exc}")
            return None

    # ---------------- Helpers ---------------

    def _adopt(self, model: str, messages: List[Message]) -> List[Message]:
        self.context.params.model = model
        self.context.model_stack.add(model)
        return list(messages)

    def _pick_session(self, title: str) -> Optional[str]:
        names = sorted(self.context.store.list())
        if not names:
            self.console.print("(no saved sessions)")
            return None
        try:
            return questionary.select(title, choices=names).ask()
        except (KeyboardInterrupt, EOFError):
            self.console.print()
            return None

    # ---------------- Handlers ---------------

    def _help(self, request: CommandRequest, messages: List[Message]) -> List[Message]:
        from .. import __doc__ as _doc

        self.console.print(escape(_doc or "(no help available)"))
        return messages

    def _clear(self, request: CommandRequest, messages: List[Message]) -> List[Message]:
        self.console.print("Context clear successful")
        return [m for m in messages if isinstance(m, SystemMessage)]

    def _model_stack(self, request: CommandRequest, messages: List[Message]) -> List[Message]:
        self.console.print("You were chatting with:")
        for model in self.context.model_stack:
            self.console.print(f"  {escape(model)}")
        return messages

    def _bye(self, request: CommandRequest, messages: List[Message]) -> List[Message]:
        sys.exit(0)

    def _file(self, request: CommandRequest, messages: List[Message]) -> List[Message]:
        pattern = request.argument
        if pattern is None:
            self.console.print("Usage: /file <pattern>")
            return messages

        print_gray(self.console, f"Attaching file(s) matching pattern: {pattern}...")
        blocks: List[str] = []
        for path in self.file_loader.match_files([pattern]):
            try:
                block = self.file_loader.read_and_format(path)
            except (OSError, UnicodeDecodeError) as exc:
                print_gray_error(self.console, f"Error processing file {path}: {exc}")
                continue
            if block.content:
                blocks.append(str(block))
                print_gray(self.console, f"Attached: {path}")

        if not blocks:
            print_gray(self.console, f"No files found matching pattern: {pattern}")
            return messages

        attachment = HumanMessage(
            f"Here are the file(s) I'm attaching ({len(blocks)} file(s)):\n"
            + "\n\n".join(blocks)
        )
        print_gray(self.console, f"Successfully attached {len(blocks)} file(s)")
        return messages + [attachment]

    def _save(self, request: CommandRequest, messages: List[Message]) -> List[Message]:
        if request.argument is None:
            self.console.print("Usage: /save <name>")
            return messages
        self.context.store.save(request.argument, messages, self.context.params.model)
        self.console.print(f"Session '{escape(request.argument)}' saved.")
        return messages

    def _load(self, request: CommandRequest, messages: List[Message]) -> List[Message]:
        name = request.argument or self._pick_session("Load session:")
        if not name:
            return messages
        model, loaded = self.context.store.load(name)
        self.console.print(f"Session '{escape(name)}' loaded with model '{escape(model)}'.")
        return self._adopt(model, loaded)

    def _sessions(self, request: CommandRequest, messages: List[Message]) -> List[Message]:
        names = self.context.store.list()
        if not names:
            self.console.print("(no saved sessions)")
            return messages
        self.console.print(Ansi.style("Saved sessions:", Ansi.BOLD, Ansi.FG_MAGENTA))
        for name in names:
            self.console.print(f"  - {Ansi.style(escape(name), Ansi.FG_CYAN)}")
        return messages

    def _delete(self, request: CommandRequest, messages: List[Message]) -> List[Message]:
        name = request.argument or self._pick_session("Delete session:")
        if not name:
            return messages
        self.context.store.delete(name)
        self.console.print(f"Session '{escape(name)}' deleted.")
        return messages

    def _resume_latest(self, request: CommandRequest, messages: List[Message]) -> List[Message]:
        record = self.context.store.resume_latest()
        if record is None:
            self.console.print(Ansi.style("No session found to resume.", Ansi.FG_YELLOW))
            return messages
        self.console.print(f"Resumed latest session with model '{escape(record.model)}'.")
        return self._adopt(record.model, record.messages)
