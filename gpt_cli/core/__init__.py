from .commands import (
    AtMention,
    Command,
    CommandRequest,
    UnknownCommandError,
    is_slash_command,
    parse_command,
    resolve_at_mention,
)
from .dispatcher import ChatContext, CommandDispatcher, FileLoader
from .messages import AIMessage, HumanMessage, Message, SystemMessage
from .models import ModelConfigurationError, UnsupportedModelError, create_backend
from .params import Params, SYSTEM_PROMPT
from .session import SessionRecord, SessionStore

__all__ = [
    "AtMention",
    "Command",
    "CommandRequest",
    "UnknownCommandError",
    "is_slash_command",
    "parse_command",
    "resolve_at_mention",
    "ChatContext",
    "CommandDispatcher",
    "FileLoader",
    "AIMessage",
    "HumanMessage",
    "Message",
    "SystemMessage",
    "ModelConfigurationError",
    "UnsupportedModelError",
    "create_backend",
    "Params",
    "SYSTEM_PROMPT",
    "SessionRecord",
    "SessionStore",
]
