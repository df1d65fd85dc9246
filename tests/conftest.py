from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterable
from dataclasses import dataclass, field
from pathlib import Path

import pytest


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs (PyCharm/CLI).

    This makes OPENAI_BASE_URL / OPENAI_MODEL available to tests without needing
    to manually export them in your shell.

    In CI, we *don't* auto-load `.env` by default, so integration tests that require
    a live LLM endpoint stay skipped unless explicitly opted-in.
    """

    # Opt-in in CI with: PIRACY_PATROL_LOAD_DOTENV_FOR_TESTS=1
    if os.environ.get("CI") and os.environ.get("PIRACY_PATROL_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


class ScriptedRandom:
    """Random source returning queued draws first, then `default` forever."""

    def __init__(self, draws: Iterable[float] = (), *, default: float = 0.99) -> None:
        self.draws = list(draws)
        self.default = default
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self.draws:
            return self.draws.pop(0)
        return self.default


@dataclass
class ManualHandle:
    delay: float
    callback: Callable[[], None]
    due: float
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose clock only moves when a test calls `advance`."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: list[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(delay=delay, callback=callback, due=self.now + delay)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: float) -> int:
        self.now += seconds
        fired = 0
        for handle in sorted(self.handles, key=lambda h: h.due):
            if handle.cancelled or handle.due > self.now + 1e-9:
                continue
            self.handles.remove(handle)
            handle.callback()
            fired += 1
        return fired


@dataclass
class RecordingCueSink:
    cues: list[str] = field(default_factory=list)

    def emit(self, cue: str) -> None:
        self.cues.append(cue)


@dataclass
class RecordingNarrator:
    """Captures narrative requests; tests deliver results explicitly."""

    requests: list[tuple[int, Callable[[str], None]]] = field(default_factory=list)

    def request(self, *, score: int, deliver: Callable[[str], None]) -> None:
        self.requests.append((score, deliver))


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def cues() -> RecordingCueSink:
    return RecordingCueSink()


@pytest.fixture()
def narrator() -> RecordingNarrator:
    return RecordingNarrator()


@pytest.fixture()
def make_session(
    scheduler: ManualScheduler,
    cues: RecordingCueSink,
    narrator: RecordingNarrator,
) -> Callable[..., object]:
    """Build a GameSession wired to the manual scheduler and recording collaborators."""

    from piracy_patrol.session import GameSession

    def _make(*, rng: object | None = None, clock: Callable[[], float] = lambda: 1234.5) -> GameSession:
        return GameSession(
            scheduler=scheduler,
            rng=rng if rng is not None else ScriptedRandom(),  # type: ignore[arg-type]
            clock=clock,
            cues=cues,
            narrator=narrator,
        )

    return _make


@pytest.fixture()
def client_and_redis():
    """FastAPI TestClient with fakeredis and a non-ticking session store.

    Runners are not started so that seat state only changes when a test says so.
    """

    import fakeredis
    from fastapi.testclient import TestClient

    from piracy_patrol.api.deps import get_redis, get_store
    from piracy_patrol.main import app
    from piracy_patrol.session_store import SessionStore

    r = fakeredis.FakeRedis(decode_responses=True)
    test_store = SessionStore(autorun=False, redis_factory=lambda: r)

    def _override_redis() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override_redis
    app.dependency_overrides[get_store] = lambda: test_store
    with TestClient(app) as c:
        yield c, r, test_store
    app.dependency_overrides.clear()
