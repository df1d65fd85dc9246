from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID, uuid4

import redis

from piracy_patrol.cues import create_cue_sink
from piracy_patrol.game_loop import AsyncioScheduler, AsyncNarrativeRequester, SessionRunner
from piracy_patrol.infra.redis_client import create_redis
from piracy_patrol.session import GameSession
from piracy_patrol.websocket_hub import hub

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionHandle:
    session: GameSession
    runner: SessionRunner
    narrator: AsyncNarrativeRequester


class SessionStore:
    """In-process registry of live sessions and their runners.

    Sessions live only as long as the process; there is no persistence.
    With `autorun=False` runners are created but never started, which keeps
    API tests deterministic.
    """

    def __init__(
        self,
        *,
        autorun: bool = True,
        redis_factory: Callable[[], redis.Redis] = create_redis,
        narrator_factory: Callable[[], AsyncNarrativeRequester] = AsyncNarrativeRequester,
    ) -> None:
        self.autorun = autorun
        self._redis_factory = redis_factory
        self._narrator_factory = narrator_factory
        self._redis: redis.Redis | None = None
        self._by_id: dict[UUID, SessionHandle] = {}

    @property
    def redis(self) -> redis.Redis:
        if self._redis is None:
            self._redis = self._redis_factory()
        return self._redis

    def create_session(self) -> GameSession:
        seed = random.SystemRandom().randint(1, 2**31 - 1)
        session_id = uuid4()
        narrator = self._narrator_factory()

        session = GameSession(
            scheduler=AsyncioScheduler(),
            rng=random.Random(seed),
            cues=create_cue_sink(session_id=str(session_id), r=self.redis),
            narrator=narrator,
            session_id=session_id,
            seed=seed,
        )

        runner = SessionRunner(session, on_update=hub.broadcast_snapshot, narrator=narrator)
        self._by_id[session.session_id] = SessionHandle(session=session, runner=runner, narrator=narrator)
        if self.autorun:
            runner.start()

        logger.info("Created session %s (seed=%s)", session.session_id, seed)
        return session

    def get_session(self, session_id: UUID) -> GameSession | None:
        handle = self._by_id.get(session_id)
        return handle.session if handle is not None else None

    def require_session(self, session_id: UUID) -> GameSession:
        session = self.get_session(session_id)
        if session is None:
            raise ValueError("Session not found")
        return session

    def list_sessions(self) -> list[GameSession]:
        out = [h.session for h in self._by_id.values()]
        out.sort(key=lambda s: s.state.created_at, reverse=True)
        return out

    async def shutdown(self) -> None:
        for handle in list(self._by_id.values()):
            await handle.runner.stop()
        self._by_id.clear()
        if self._redis is not None:
            try:
                self._redis.close()
            except Exception:
                # Some redis client versions don't require explicit close.
                pass
            self._redis = None


store = SessionStore()
