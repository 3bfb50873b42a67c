"""Chat backends for the supported providers.

Every backend answers an ordered list of :class:`Message` objects by streaming
text chunks. SDK clients are created on first use, so building a backend never
requires credentials.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import openai
import anthropic
from anthropic import Anthropic
from google import genai
from google.genai import types
from openai import AzureOpenAI, OpenAI

from .messages import AIMessage, Message

OPENAI_ROLES = {"system": "system", "human": "user", "ai": "assistant"}


class ChatBackend:
    """Base class: subclasses implement :meth:`stream` and :meth:`_create_client`."""

    def __init__(
        self,
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        client: Any = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _create_client(self) -> Any:
        raise NotImplementedError

    def stream(self, messages: Sequence[Message]) -> Iterator[str]:
        raise NotImplementedError

    def invoke(self, messages: Sequence[Message]) -> AIMessage:
        return AIMessage("".join(self.stream(messages)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"


def _split_system(messages: Sequence[Message]) -> Tuple[Optional[str], List[Message]]:
    system = [m.content for m in messages if m.role == "system"]
    turns = [m for m in messages if m.role != "system"]
    return ("\n\n".join(system) or None), turns


# ---------------------------------------------------------------------------
# OpenAI and OpenAI-compatible APIs
# ---------------------------------------------------------------------------


class OpenAIChatBackend(ChatBackend):
    """Streaming Chat Completions backend."""

    def _create_client(self) -> OpenAI:
        return OpenAI()

    def _request_params(self, messages: Sequence[Message]) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": OPENAI_ROLES.get(m.role, "user"), "content": m.content}
                for m in messages
            ],
            "stream": True,
        }
        if self.temperature is not None:
            params["temperature"] = self.temperature
        if self.max_tokens is not None:
            params["max_tokens"] = self.max_tokens
        return params

    def stream(self, messages: Sequence[Message]) -> Iterator[str]:
        response = self.client.chat.completions.create(**self._request_params(messages))
        for chunk in response:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta
            if delta.content:
                yield delta.content


class XAIChatBackend(OpenAIChatBackend):
    """Grok models through xAI's OpenAI-compatible endpoint."""

    BASE_URL = "https://api.x.ai/v1"

    def _create_client(self) -> OpenAI:
        api_key = os.getenv("XAI_API_KEY")
        if not api_key:
            raise openai.OpenAIError("XAI_API_KEY environment variable is not set.")
        return OpenAI(api_key=api_key, base_url=self.BASE_URL)


class AzureOpenAIChatBackend(OpenAIChatBackend):
    """Azure OpenAI; requests address a deployment rather than a model."""

    def __init__(
        self,
        deployment: str,
        api_key: str,
        api_version: str,
        endpoint: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        client: Any = None,
    ) -> None:
        super().__init__(deployment, temperature, max_tokens, client)
        self.deployment = deployment
        self.api_key = api_key
        self.api_version = api_version
        self.endpoint = endpoint

    def _create_client(self) -> AzureOpenAI:
        return AzureOpenAI(
            api_key=self.api_key,
            api_version=self.api_version,
            azure_endpoint=self.endpoint,
        )


# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------


class AnthropicChatBackend(ChatBackend):
    # Anthropic requires max_tokens on every request
    DEFAULT_MAX_TOKENS = 4096

    def _create_client(self) -> Anthropic:
        if not os.getenv("ANTHROPIC_API_KEY"):
            raise anthropic.AnthropicError("ANTHROPIC_API_KEY environment variable is not set.")
        return Anthropic()

    def stream(self, messages: Sequence[Message]) -> Iterator[str]:
        system, turns = _split_system(messages)
        params: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "assistant" if m.role == "ai" else "user", "content": m.content}
                for m in turns
            ],
            "max_tokens": self.max_tokens or self.DEFAULT_MAX_TOKENS,
        }
        if self.temperature is not None:
            params["temperature"] = self.temperature
        if system:
            params["system"] = system

        with self.client.messages.stream(**params) as stream:
            yield from stream.text_stream


# ---------------------------------------------------------------------------
# Google Gemini
# ---------------------------------------------------------------------------


class GeminiChatBackend(ChatBackend):
    """Gemini via ``google-genai``; the token limit is ``max_output_tokens``."""

    def __init__(
        self,
        model: str,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
        client: Any = None,
    ) -> None:
        super().__init__(model, temperature, None, client)
        self.max_output_tokens = max_output_tokens

    def _create_client(self) -> genai.Client:
        return genai.Client()

    def stream(self, messages: Sequence[Message]) -> Iterator[str]:
        system, turns = _split_system(messages)
        contents = [
            types.Content(
                role="model" if m.role == "ai" else "user",
                parts=[types.Part(text=m.content)],
            )
            for m in turns
        ]
        config = types.GenerateContentConfig(
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
            system_instruction=system,
        )
        for chunk in self.client.models.generate_content_stream(
            model=self.model, contents=contents, config=config
        ):
            if chunk.text:
                yield chunk.text
