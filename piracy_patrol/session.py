from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from datetime import UTC, datetime
from functools import partial
from typing import Protocol
from uuid import UUID, uuid4

from piracy_patrol.api.models import Cue, Feedback, GameStatus, SessionSnapshot, SessionState
from piracy_patrol.core.capabilities import Cancellable, Clock, RandomSource, Scheduler
from piracy_patrol.core.seat_simulation import init_seats, simulate_tick
from piracy_patrol.cues import CueSink, NullCueSink
from piracy_patrol.fsm import SessionFSM
from piracy_patrol.interactions import InteractionResult, resolve_interaction
from piracy_patrol.levels import first_level, get_level, has_next_level, level_or_first
from piracy_patrol.narrative import FALLBACK_NOT_CONFIGURED

logger = logging.getLogger(__name__)

MAX_LEAK = 100.0
LEAK_DAMPING = 0.1

TICKS_PER_SECOND = 10
TICK_INTERVAL = 1.0 / TICKS_PER_SECOND
# Upper bound on catch-up ticks when the driver stalls.
MAX_TICKS_PER_ADVANCE = 10

LEVEL_TRANSITION_DELAY = 2.5
LEVEL_UP_LEAK_HEAL = 20.0
FEEDBACK_DURATION = 0.5

_TICK_EPSILON = 1e-9


class NarrativeRequester(Protocol):
    """Starts a game-over message fetch and later calls `deliver` with the text."""

    def request(self, *, score: int, deliver: Callable[[str], None]) -> None:  # pragma: no cover
        ...


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


class GameSession:
    """One play-through owner: status, score, leak meter, level and seats.

    Entry points are `start_game`, `tick`/`advance` and `interact`. None of them
    await, so when called from a single event loop they never interleave.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        rng: RandomSource | None = None,
        clock: Clock = time.time,
        cues: CueSink | None = None,
        narrator: NarrativeRequester | None = None,
        session_id: UUID | None = None,
        seed: int | None = None,
    ) -> None:
        now = _now()
        self.state = SessionState(
            session_id=session_id or uuid4(),
            created_at=now,
            last_updated_at=now,
            seed=seed,
        )
        self.fsm = SessionFSM(self.state)

        self._scheduler = scheduler
        self._rng: RandomSource = rng if rng is not None else random.Random(seed)
        self._clock = clock
        self._cues: CueSink = cues if cues is not None else NullCueSink()
        self._narrator = narrator

        self.tick_count = 0
        # Bumped on every observable change; drivers use it to decide when to publish.
        self.revision = 0

        self._tick_debt = 0.0
        self._transition_token = 0
        self._pending_advance: Cancellable | None = None
        self._pending_feedback_clear: Cancellable | None = None
        self._narrative_requested_episode = 0

    @property
    def session_id(self) -> UUID:
        return self.state.session_id

    @property
    def status(self) -> GameStatus:
        return self.state.status

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_game(self) -> None:
        """Begin a fresh run at level 1; only high_score survives."""

        self._cancel_pending()
        self.fsm.start_game()
        self.fsm.sync_status_to_model()

        cfg = first_level()
        s = self.state
        s.score = 0
        s.leak_level = 0.0
        s.level = cfg.level
        s.seats = init_seats(cfg.rows)
        s.feedback = None
        s.end_message = None
        self._tick_debt = 0.0

        logger.info("Session %s started at level %s (%s seats)", s.session_id, cfg.level, cfg.seat_count)
        self._emit("start")
        self._touch()

    def close(self) -> None:
        self._cancel_pending()

    def _cancel_pending(self) -> None:
        if self._pending_advance is not None:
            self._pending_advance.cancel()
            self._pending_advance = None
        if self._pending_feedback_clear is not None:
            self._pending_feedback_clear.cancel()
            self._pending_feedback_clear = None
        # Anything already in flight is invalidated by the token bump.
        self._transition_token += 1

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def advance(self, elapsed: float) -> int:
        """Run as many whole ticks as `elapsed` seconds allow; returns the count."""

        if self.state.status != GameStatus.playing:
            self._tick_debt = 0.0
            return 0

        self._tick_debt = min(self._tick_debt + max(0.0, elapsed), MAX_TICKS_PER_ADVANCE * TICK_INTERVAL)
        ticks = 0
        while self._tick_debt + _TICK_EPSILON >= TICK_INTERVAL and self.state.status == GameStatus.playing:
            self._tick_debt -= TICK_INTERVAL
            self.tick()
            ticks += 1
        return ticks

    def tick(self) -> None:
        s = self.state
        if s.status != GameStatus.playing:
            return

        self.tick_count += 1
        cfg = level_or_first(s.level)

        # A reached target ends the tick before any seat evolves.
        if s.score >= cfg.target_score:
            if has_next_level(s.level):
                self._complete_level()
            else:
                self._win()
            return

        outcome = simulate_tick(s.seats, cfg, rng=self._rng, clock=self._clock)
        s.seats = outcome.seats
        s.leak_level = _clamp(s.leak_level + outcome.leak_contribution * LEAK_DAMPING, 0.0, MAX_LEAK)

        if s.leak_level >= MAX_LEAK:
            self._lose()
        self._touch()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _complete_level(self) -> None:
        self.fsm.complete_level()
        self.fsm.sync_status_to_model()

        self._transition_token += 1
        token = self._transition_token
        self._pending_advance = self._scheduler.call_later(
            LEVEL_TRANSITION_DELAY, partial(self._advance_level_if_current, token)
        )

        logger.info("Session %s cleared level %s with score %s", self.state.session_id, self.state.level, self.state.score)
        self._emit("levelUp")
        self._touch()

    def _advance_level_if_current(self, token: int) -> None:
        if self.state.status != GameStatus.level_transition or token != self._transition_token:
            logger.debug("Dropping stale level advance for session %s", self.state.session_id)
            return
        self._pending_advance = None
        self.advance_level()

    def advance_level(self) -> None:
        """Move from the level-clear screen to the next level, or to victory past the last one."""

        s = self.state
        if s.status != GameStatus.level_transition:
            logger.debug("Ignoring advance_level for session %s in status %s", s.session_id, s.status)
            return

        next_cfg = get_level(s.level + 1)
        if next_cfg is None:
            self._win()
            return

        self.fsm.advance_level()
        self.fsm.sync_status_to_model()

        s.level = next_cfg.level
        s.leak_level = max(0.0, s.leak_level - LEVEL_UP_LEAK_HEAL)
        s.seats = init_seats(next_cfg.rows)
        s.feedback = None
        self._tick_debt = 0.0

        logger.info("Session %s advanced to level %s (%s)", s.session_id, next_cfg.level, next_cfg.name)
        self._emit("start")
        self._touch()

    def _win(self) -> None:
        self.fsm.win()
        self.fsm.sync_status_to_model()
        self._record_high_score()

        logger.info("Session %s won with score %s", self.state.session_id, self.state.score)
        self._emit("win")
        self._touch()

    def _lose(self) -> None:
        s = self.state
        self.fsm.lose()
        self.fsm.sync_status_to_model()

        s.leak_level = MAX_LEAK
        s.episode += 1
        self._record_high_score()

        logger.info("Session %s game over at level %s with score %s", s.session_id, s.level, s.score)
        self._emit("error")
        self._request_end_message()
        self._touch()

    def _record_high_score(self) -> None:
        self.state.high_score = max(self.state.high_score, self.state.score)

    # ------------------------------------------------------------------
    # Narrative
    # ------------------------------------------------------------------

    def _request_end_message(self) -> None:
        episode = self.state.episode
        if self._narrative_requested_episode == episode:
            return
        self._narrative_requested_episode = episode

        if self._narrator is None:
            self.apply_end_message(episode, FALLBACK_NOT_CONFIGURED)
            return
        self._narrator.request(score=self.state.score, deliver=partial(self.apply_end_message, episode))

    def apply_end_message(self, episode: int, text: str) -> bool:
        """Store the game-over message for `episode` once; late or duplicate results are dropped."""

        s = self.state
        if episode != s.episode or s.status != GameStatus.game_over:
            logger.debug("Discarding narrative for stale episode %s (current %s)", episode, s.episode)
            return False
        if s.end_message is not None:
            logger.debug("Discarding duplicate narrative for episode %s", episode)
            return False
        s.end_message = text
        self._touch()
        return True

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def interact(self, seat_id: int) -> InteractionResult | None:
        result = resolve_interaction(state=self.state, seat_id=seat_id)
        if result is None:
            return None

        self.state.feedback = result.feedback
        if self._pending_feedback_clear is not None:
            self._pending_feedback_clear.cancel()
        self._pending_feedback_clear = self._scheduler.call_later(
            FEEDBACK_DURATION, partial(self._clear_feedback, result.feedback)
        )

        self._emit(result.cue)
        self._touch()
        return result

    def _clear_feedback(self, feedback: Feedback) -> None:
        if self.state.feedback is not feedback:
            return
        self.state.feedback = None
        self._pending_feedback_clear = None
        self._touch()

    # ------------------------------------------------------------------
    # Presentation / collaborators
    # ------------------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        s = self.state
        cfg = level_or_first(s.level)
        return SessionSnapshot(
            session_id=s.session_id,
            status=s.status,
            score=s.score,
            leak_level=s.leak_level,
            level=s.level,
            level_name=cfg.name,
            target_score=cfg.target_score,
            high_score=s.high_score,
            seats=[seat.model_copy() for seat in s.seats],
            feedback=s.feedback.model_copy() if s.feedback is not None else None,
            end_message=s.end_message,
            tick_count=self.tick_count,
        )

    def _emit(self, cue: Cue) -> None:
        try:
            self._cues.emit(cue)
        except Exception:
            logger.warning("Cue sink failed for session %s cue=%s", self.state.session_id, cue, exc_info=True)

    def _touch(self) -> None:
        self.state.last_updated_at = _now()
        self.revision += 1
