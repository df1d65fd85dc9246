from __future__ import annotations

import logging

from piracy_patrol.agents.autogen_config import settings_from_env
from piracy_patrol.agents.base import Agent
from piracy_patrol.core.context import RenderedContext
from piracy_patrol.prompts import load_prompt, render_prompt

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

# Shown when no LLM credential/endpoint is configured.
FALLBACK_NOT_CONFIGURED = "牛局长说：你被解雇了！(未配置 API Key)"
# Shown when the LLM call fails.
FALLBACK_ERROR = "任务失败。请重试。"
# Shown when the LLM answers with nothing usable.
FALLBACK_EMPTY = "游戏结束"


def narrator_context() -> RenderedContext:
    return RenderedContext(system_prompt=load_prompt("chief_bogo.txt").strip())


def render_game_over_prompt(score: int) -> str:
    return render_prompt("game_over.txt", score=score)


def _clean(text: str) -> str:
    return text.strip().strip("\"'“”「」").strip()


async def generate_end_message(score: int, *, agent: Agent | None = None) -> str:
    """Ask Chief Bogo for a one- or two-line verdict on the final score.

    Never raises: a missing credential, a failing backend or an empty reply all
    resolve to a fixed fallback so the game-over screen can always render.
    """

    if agent is None:
        settings = settings_from_env(default_model=DEFAULT_MODEL)
        if not settings.configured:
            return FALLBACK_NOT_CONFIGURED

        from piracy_patrol.agents.factory import create_narrator_agent

        agent = create_narrator_agent(default_model=DEFAULT_MODEL, settings=settings)

    try:
        prompt = render_game_over_prompt(score)
        reply = await agent.reply(prompt=prompt, ctx=narrator_context())
    except Exception:
        logger.exception("Narrative generation failed for score=%s", score)
        return FALLBACK_ERROR

    text = _clean(reply.content)
    return text or FALLBACK_EMPTY
