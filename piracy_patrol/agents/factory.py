from __future__ import annotations

from typing import cast

from piracy_patrol.agents.ag2_backend import Ag2ChatAgent
from piracy_patrol.agents.autogen_config import OpenAICompatibleSettings, settings_from_env
from piracy_patrol.agents.base import Agent

NARRATOR_NAME = "chief_bogo"


def create_narrator_agent(
    *,
    default_model: str,
    settings: OpenAICompatibleSettings | None = None,
) -> Agent:
    """Build the Chief Bogo agent that writes the game-over verdict.

    `OPENAI_MODEL` overrides `default_model` when settings are read from env.
    """

    if settings is None:
        settings = settings_from_env(default_model=default_model)
    return cast(Agent, Ag2ChatAgent(name=NARRATOR_NAME, settings=settings))
