from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from autogen import LLMConfig


@dataclass(frozen=True, slots=True)
class OpenAICompatibleSettings:
    """Where the narrator's LLM lives: a hosted OpenAI key or a local compatible server."""

    model: str
    base_url: str | None
    api_key: str | None

    @property
    def configured(self) -> bool:
        """True when either a hosted key or a local OpenAI-compatible endpoint is set."""

        return bool(self.api_key or self.base_url)

    @property
    def effective_api_key(self) -> str | None:
        # Local servers (Ollama) ignore the key but the OpenAI client refuses to start without one.
        return self.api_key or ("ollama" if self.base_url else None)

    def to_llm_config(self) -> LLMConfig:
        api_key = self.effective_api_key
        if not api_key:
            raise RuntimeError(
                "Set OPENAI_API_KEY for hosted OpenAI, or set OPENAI_BASE_URL for a local OpenAI-compatible server"
            )

        entry: dict[str, Any] = {"model": self.model, "api_key": api_key}
        if self.base_url:
            entry["base_url"] = self.base_url
        return LLMConfig(config_list=[entry])


def settings_from_env(*, default_model: str) -> OpenAICompatibleSettings:
    return OpenAICompatibleSettings(
        model=os.environ.get("OPENAI_MODEL") or default_model,
        # For Ollama, typically http://127.0.0.1:11434/v1
        base_url=os.environ.get("OPENAI_BASE_URL") or None,
        api_key=os.environ.get("OPENAI_API_KEY") or None,
    )
