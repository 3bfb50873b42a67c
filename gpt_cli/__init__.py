"""Terminal chat client for OpenAI, Anthropic, Gemini, xAI and Azure OpenAI models.

Type a message and press Enter to chat with the current model.

Slash commands:

    /help, /?               show this help
    /clear                  forget the conversation (the system prompt is kept)
    /modelStack             list every model used in this run
    /file PATTERN           attach files matching PATTERN (file, directory or glob)
    /save NAME              save the conversation as session NAME
    /load [NAME]            load session NAME (pick from a list when omitted)
    /sessions               list saved sessions
    /delete [NAME]          delete session NAME (pick from a list when omitted)
    /resume-latest          load the most recently written session
    /bye, /exit, /quit      leave

At-mentions:

    @MODEL text             ask MODEL instead of the current model, once
    @MODEL                  ask MODEL the previous question again

Model names starting with gpt, o<digit>, claude, gem, grok or azure- are
supported. Every turn is auto-saved under ~/.gpt-cli/sessions/.
"""
from .core import (
    ChatContext,
    CommandDispatcher,
    Params,
    SessionStore,
    SYSTEM_PROMPT,
)
from .cli import ChatCLI, build_cli, run_cli

__all__ = [
    "ChatContext",
    "CommandDispatcher",
    "Params",
    "SessionStore",
    "SYSTEM_PROMPT",
    "ChatCLI",
    "build_cli",
    "run_cli",
]
