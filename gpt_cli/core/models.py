"""Map model identifiers to the backend that serves them.

Adding a provider
-----------------
1. Write a backend in :mod:`gpt_cli.core.client`.
2. Write a strategy ``(model, params) -> backend`` below.
3. Append ``(re.compile("^prefix"), strategy)`` to :data:`MODEL_RULES`.

Rules are tried in order and the first match wins, so keep the patterns
mutually exclusive.
"""

import re
from typing import Callable, List, Pattern, Tuple

from .client import (
    AnthropicChatBackend,
    AzureOpenAIChatBackend,
    ChatBackend,
    GeminiChatBackend,
    OpenAIChatBackend,
    XAIChatBackend,
)
from .params import Params

AZURE_PREFIX = "azure-"

Strategy = Callable[[str, Params], ChatBackend]


class UnsupportedModelError(ValueError):
    """No rule in :data:`MODEL_RULES` matches the identifier."""


class ModelConfigurationError(ValueError):
    """A matching provider is missing required configuration."""


def create_openai(model: str, params: Params) -> ChatBackend:
    return OpenAIChatBackend(model, params.temperature, params.max_tokens)


def create_openai_o_series(model: str, params: Params) -> ChatBackend:
    # o-series models reject max_tokens
    return OpenAIChatBackend(model, params.temperature)


def create_anthropic(model: str, params: Params) -> ChatBackend:
    return AnthropicChatBackend(model, params.temperature, params.max_tokens)


def create_gemini(model: str, params: Params) -> ChatBackend:
    return GeminiChatBackend(model, params.temperature, max_output_tokens=params.max_tokens)


def create_xai(model: str, params: Params) -> ChatBackend:
    return XAIChatBackend(model, params.temperature, params.max_tokens)


def create_azure_openai(model: str, params: Params) -> ChatBackend:
    deployment = model[len(AZURE_PREFIX):] if model.startswith(AZURE_PREFIX) else model
    missing = [
        env
        for env, value in (
            ("AZURE_OPENAI_API_KEY", params.azure_api_key),
            ("AZURE_OPENAI_API_VERSION", params.azure_api_version),
            ("AZURE_OPENAI_ENDPOINT", params.azure_endpoint),
        )
        if not value
    ]
    if missing:
        raise ModelConfigurationError(
            f"Model '{model}' needs Azure OpenAI settings: {', '.join(missing)}"
        )
    return AzureOpenAIChatBackend(
        deployment,
        api_key=params.azure_api_key,
        api_version=params.azure_api_version,
        endpoint=params.azure_endpoint,
        temperature=params.temperature,
        max_tokens=params.max_tokens,
    )


MODEL_RULES: List[Tuple[Pattern[str], Strategy]] = [
    (re.compile(r"^gpt"), create_openai),
    (re.compile(r"^o[0-9]"), create_openai_o_series),
    (re.compile(r"^claude"), create_anthropic),
    (re.compile(r"^gem"), create_gemini),
    (re.compile(r"^grok"), create_xai),
    (re.compile(r"^azure"), create_azure_openai),
]


def find_strategy(model: str) -> Strategy:
    for pattern, strategy in MODEL_RULES:
        if pattern.match(model):
            return strategy
    raise UnsupportedModelError(
        f"Unsupported model: '{model}'. Model names must start with one of: "
        + ", ".join(p.pattern.lstrip("^") for p, _ in MODEL_RULES)
    )


def create_backend(model: str, params: Params) -> ChatBackend:
    """Build the backend serving *model* with the sampling settings in *params*."""
    return find_strategy(model)(model, params)
