"""Chat message variants and their storage records."""

from typing import Any, Dict, Iterable, List


class Message:
    """One turn of a conversation.

    The role is a property of the concrete variant; instances only carry the
    text. A bare ``Message`` is the ``unknown`` variant.
    """

    role = "unknown"

    def __init__(self, content: str = "") -> None:
        self.content = content

    def to_record(self) -> Dict[str, str]:
        return {"type": self.role, "content": self.content}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Message):
            return NotImplemented
        return type(self) is type(other) and self.content == other.content

    def __hash__(self) -> int:
        return hash((self.role, self.content))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.content!r})"


class SystemMessage(Message):
    role = "system"


class HumanMessage(Message):
    role = "human"


class AIMessage(Message):
    role = "ai"


MESSAGE_TYPES = {
    SystemMessage.role: SystemMessage,
    HumanMessage.role: HumanMessage,
    AIMessage.role: AIMessage,
}


def message_from_record(record: Dict[str, Any]) -> Message:
    """Rebuild a message from its stored record.

    Unknown or missing types become a :class:`HumanMessage` so a single odd
    entry never prevents a session from being restored.
    """
    if not isinstance(record, dict):
        return HumanMessage(str(record))
    rtype = record.get("type")
    cls = MESSAGE_TYPES.get(rtype, HumanMessage) if isinstance(rtype, str) else HumanMessage
    content = record.get("content")
    if content is None:
        content = ""
    elif not isinstance(content, str):
        content = str(content)
    return cls(content)


def messages_to_records(messages: Iterable[Message]) -> List[Dict[str, str]]:
    return [m.to_record() for m in messages]


def messages_from_records(records: Iterable[Dict[str, Any]]) -> List[Message]:
    return [message_from_record(r) for r in records]
