from __future__ import annotations

import httpx
import pytest

from piracy_patrol.agents.autogen_config import settings_from_env
from piracy_patrol.agents.factory import create_narrator_agent
from piracy_patrol.narrative import DEFAULT_MODEL, FALLBACK_ERROR, FALLBACK_NOT_CONFIGURED, generate_end_message


def _ollama_healthy(base_url: str) -> bool:
    # base_url might be http://127.0.0.1:11434/v1
    root = base_url.removesuffix("/v1")
    try:
        r = httpx.get(f"{root}/api/tags", timeout=1.0)
        return r.status_code == 200
    except Exception:
        return False


@pytest.mark.asyncio
async def test_ag2_end_message_integration_env_gated() -> None:
    settings = settings_from_env(default_model=DEFAULT_MODEL)
    if not settings.configured:
        pytest.skip("Set OPENAI_API_KEY or OPENAI_BASE_URL")

    if settings.base_url and not _ollama_healthy(settings.base_url):
        pytest.skip("Ollama not reachable at OPENAI_BASE_URL")

    agent = create_narrator_agent(default_model=DEFAULT_MODEL, settings=settings)

    text = await generate_end_message(1800, agent=agent)

    assert text
    assert text not in {FALLBACK_ERROR, FALLBACK_NOT_CONFIGURED}
