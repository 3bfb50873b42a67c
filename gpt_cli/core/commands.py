"""Parsing of slash commands and ``@model`` mentions."""

import re
from enum import Enum
from typing import NamedTuple, Optional, Sequence

from .messages import HumanMessage, Message


class Command(Enum):
    HELP = "HELP"
    CLEAR = "CLEAR"
    MODEL_STACK = "MODELSTACK"
    BYE = "BYE"
    FILE = "FILE"
    SAVE = "SAVE"
    LOAD = "LOAD"
    SESSIONS = "SESSIONS"
    DELETE = "DELETE"
    RESUME_LATEST = "RESUME_LATEST"


COMMAND_TOKENS = (
    ("/help", Command.HELP),
    ("/?", Command.HELP),
    ("/clear", Command.CLEAR),
    ("/modelStack", Command.MODEL_STACK),
    ("/bye", Command.BYE),
    ("/exit", Command.BYE),
    ("/quit", Command.BYE),
    ("/file", Command.FILE),
    ("/save", Command.SAVE),
    ("/load", Command.LOAD),
    ("/sessions", Command.SESSIONS),
    ("/delete", Command.DELETE),
    ("/resume-latest", Command.RESUME_LATEST),
)

# Commands taking a single path or session name
ARGUMENT_COMMANDS = frozenset({Command.FILE, Command.SAVE, Command.LOAD, Command.DELETE})

_AT_MODEL = re.compile(r"^@\S+")


class UnknownCommandError(ValueError):
    def __init__(self, token: str) -> None:
        super().__init__(f"Unknown command: {token} (see /help)")
        self.token = token


class CommandRequest:
    """A command, optionally with the one argument it accepts."""

    __slots__ = ("command", "argument")

    def __init__(self, command: Command, argument: Optional[str] = None) -> None:
        if argument is not None and command not in ARGUMENT_COMMANDS:
            raise ValueError(f"{command.name} does not take an argument")
        self.command = command
        self.argument = argument

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommandRequest):
            return NotImplemented
        return (self.command, self.argument) == (other.command, other.argument)

    def __hash__(self) -> int:
        return hash((self.command, self.argument))

    def __repr__(self) -> str:
        if self.argument is None:
            return f"CommandRequest({self.command.name})"
        return f"CommandRequest({self.command.name}, {self.argument!r})"


class AtMention(NamedTuple):
    model: str
    message: str


def is_slash_command(text: str) -> bool:
    return text.startswith("/")


def parse_command(text: str) -> CommandRequest:
    """Classify *text* (which starts with ``/``) as a :class:`CommandRequest`.

    Only the second whitespace-separated token is kept as the argument.
    Raises :class:`UnknownCommandError` for an unrecognised first token.
    """
    parts = text.split()
    token = parts[0] if parts else text
    for candidate, command in COMMAND_TOKENS:
        if token == candidate:
            break
    else:
        raise UnknownCommandError(token)

    if command in ARGUMENT_COMMANDS and len(parts) > 1:
        return CommandRequest(command, parts[1])
    return CommandRequest(command)


def extract_at_model(text: str) -> AtMention:
    """Split ``@model rest`` into ``AtMention("model", "rest")``.

    Text without a leading mention comes back unchanged with an empty model.
    """
    match = _AT_MODEL.match(text)
    if not match:
        return AtMention("", text)
    return AtMention(match.group(0)[1:], text[match.end():].strip())


def _previous_user_text(history: Sequence[Message]) -> Optional[str]:
    # history[-1] is the turn being resolved
    for message in reversed(history[:-1]):
        if isinstance(message, HumanMessage):
            return message.content
    return None


def resolve_at_mention(text: str, history: Sequence[Message], default_model: str) -> AtMention:
    """Work out which model answers *text* and what it is asked.

    ``@model`` with nothing after it repeats the previous user prompt, found by
    walking *history* back from its second-to-last entry.
    """
    if not text.startswith("@"):
        return AtMention(default_model, text)

    mention = extract_at_model(text)
    message = mention.message or _previous_user_text(history) or ""
    return AtMention(mention.model or default_model, message)
