from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from piracy_patrol.api.models import SessionSnapshot
from piracy_patrol.narrative import FALLBACK_ERROR, generate_end_message
from piracy_patrol.session import TICK_INTERVAL, GameSession

logger = logging.getLogger(__name__)

OnUpdate = Callable[[SessionSnapshot], Awaitable[None]]
EndMessageGenerator = Callable[[int], Awaitable[str]]


class AsyncioScheduler:
    """Scheduler backed by the running loop; handles are `asyncio.TimerHandle`s."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


class AsyncNarrativeRequester:
    """Fire-and-forget end-message fetches on the running loop.

    The session guards delivery with its episode token, so a result that lands
    after a restart is simply dropped there.
    """

    def __init__(self, *, generate: EndMessageGenerator = generate_end_message) -> None:
        self._generate = generate
        self._tasks: set[asyncio.Task[None]] = set()

    def request(self, *, score: int, deliver: Callable[[str], None]) -> None:
        task = asyncio.get_running_loop().create_task(self._run(score=score, deliver=deliver))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, *, score: int, deliver: Callable[[str], None]) -> None:
        try:
            text = await self._generate(score)
        except Exception:
            logger.exception("End message generation failed for score=%s", score)
            text = FALLBACK_ERROR
        deliver(text)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()


class SessionRunner:
    """Periodic driver for one session.

    Wakes every `poll_interval` seconds, feeds the measured elapsed time to
    `GameSession.advance` (which only ticks while playing) and publishes a
    snapshot whenever the session revision moved.
    """

    def __init__(
        self,
        session: GameSession,
        *,
        on_update: OnUpdate | None = None,
        poll_interval: float = TICK_INTERVAL,
        narrator: AsyncNarrativeRequester | None = None,
    ) -> None:
        self.session = session
        self.poll_interval = poll_interval
        self._on_update = on_update
        self._narrator = narrator
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task[None]:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        last = loop.time()
        published = self.session.revision
        while True:
            await asyncio.sleep(self.poll_interval)
            now = loop.time()
            self.session.advance(now - last)
            last = now

            if self._on_update is None or self.session.revision == published:
                continue
            published = self.session.revision
            try:
                await self._on_update(self.session.snapshot())
            except Exception:
                logger.exception("Snapshot publish failed for session %s", self.session.session_id)

    async def stop(self) -> None:
        self.session.close()
        if self._narrator is not None:
            self._narrator.cancel_all()
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
