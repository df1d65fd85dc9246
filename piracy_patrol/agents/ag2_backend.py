from __future__ import annotations

import asyncio
from dataclasses import dataclass

from autogen import ConversableAgent

from piracy_patrol.agents.autogen_config import OpenAICompatibleSettings
from piracy_patrol.agents.base import AgentReply
from piracy_patrol.core.context import RenderedContext


def last_reply(messages: object, *, prompt: str) -> str:
    """Newest non-empty message in an AG2 chat history, skipping our own prompt.

    AG2 records the outgoing prompt in the same history, so when the model
    answers with nothing the prompt would otherwise come back as the verdict.
    """

    if not isinstance(messages, list):
        return ""

    sent = prompt.strip()
    for msg in reversed(messages):
        if not isinstance(msg, dict):
            continue
        content = msg.get("content")
        if not isinstance(content, str):
            continue
        text = content.strip()
        if text and text != sent:
            return text
    return ""


@dataclass(slots=True)
class Ag2ChatAgent:
    """Single-turn AG2 agent: one system persona, one prompt, one reply."""

    name: str
    settings: OpenAICompatibleSettings

    @property
    def model(self) -> str:
        return self.settings.model

    def _run_blocking(self, *, prompt: str, ctx: RenderedContext) -> str:
        agent = ConversableAgent(
            name=self.name,
            system_message=ctx.system_prompt,
            llm_config=self.settings.to_llm_config(),
            human_input_mode="NEVER",
        )

        result = agent.run(message=prompt, max_turns=1)
        result.process()

        text = last_reply(list(result.messages), prompt=prompt)
        if not text and isinstance(result.summary, str) and result.summary.strip() != prompt.strip():
            text = result.summary.strip()
        return text

    async def reply(self, *, prompt: str, ctx: RenderedContext) -> AgentReply:
        # AG2's run() is synchronous; keep it off the event loop that drives ticks.
        text = await asyncio.to_thread(self._run_blocking, prompt=prompt, ctx=ctx)
        return AgentReply(content=text, metadata={"model": self.model})
