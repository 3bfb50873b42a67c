"""Generation settings shared by every turn of a chat."""

import os
from typing import Optional

# A single, persistent system message ensures the model is aware that it is
# interacting in a terminal context and should optimise readability for that
# form factor.
SYSTEM_PROMPT = (
    "You are an AI assistant running in a terminal (CLI) environment. "
    "Optimise all answers for 80-column readability, prefer plain text, "
    "ASCII art or concise bullet lists over heavy markup, and wrap code "
    "snippets in fenced blocks when helpful. Do not emit trailing spaces or "
    "control characters."
)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 1.0
DEFAULT_MAX_TOKENS = 8192


class Params:
    """Model selection, sampling parameters and provider credentials."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        system_prompt: str = SYSTEM_PROMPT,
        azure_api_key: Optional[str] = None,
        azure_api_version: Optional[str] = None,
        azure_endpoint: Optional[str] = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt
        self.azure_api_key = azure_api_key
        self.azure_api_version = azure_api_version
        self.azure_endpoint = azure_endpoint

    @classmethod
    def from_env(cls, **overrides) -> "Params":
        """Build params from ``GPT_CLI_*``/``AZURE_OPENAI_*`` variables.

        Keyword arguments that are not ``None`` win over the environment.
        Raises ``ValueError`` for non-numeric temperature or token values.
        """
        values = {
            "model": os.getenv("GPT_CLI_MODEL", DEFAULT_MODEL),
            "temperature": float(os.getenv("GPT_CLI_TEMPERATURE", DEFAULT_TEMPERATURE)),
            "max_tokens": int(os.getenv("GPT_CLI_MAX_TOKENS", DEFAULT_MAX_TOKENS)),
            "system_prompt": os.getenv("GPT_CLI_SYSTEM_PROMPT", SYSTEM_PROMPT),
            "azure_api_key": os.getenv("AZURE_OPENAI_API_KEY"),
            "azure_api_version": os.getenv("AZURE_OPENAI_API_VERSION"),
            "azure_endpoint": os.getenv("AZURE_OPENAI_ENDPOINT"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def __repr__(self) -> str:
        return (
            f"Params(model={self.model!r}, temperature={self.temperature!r}, "
            f"max_tokens={self.max_tokens!r})"
        )
