from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from piracy_patrol.core.context import RenderedContext


@dataclass(frozen=True, slots=True)
class AgentReply:
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)


class Agent(Protocol):
    name: str

    async def reply(self, *, prompt: str, ctx: RenderedContext) -> AgentReply:  # pragma: no cover
        ...
