from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from piracy_patrol.api.models import Cue, Feedback, GameStatus, SessionState

CATCH_REWARD = 100
CATCH_LEAK_HEAL = 5.0
DISTURB_PENALTY = 50

Outcome = Literal["caught", "penalty"]


@dataclass(frozen=True, slots=True)
class InteractionResult:
    outcome: Outcome
    seat_id: int
    score_delta: int
    feedback: Feedback
    cue: Cue


def _find_seat_index(state: SessionState, seat_id: int) -> int | None:
    for idx, seat in enumerate(state.seats):
        if seat.id == seat_id:
            return idx
    return None


def resolve_interaction(*, state: SessionState, seat_id: int) -> InteractionResult | None:
    """Apply a player's click on `seat_id` to the session state.

    Returns None when nothing happened: not playing, unknown seat, or an empty seat.
    Catching a recording viewer clears the recording, rewards score and heals the
    leak meter; poking an idle viewer costs score (never below zero).
    """

    if state.status != GameStatus.playing:
        return None

    idx = _find_seat_index(state, seat_id)
    if idx is None:
        return None

    seat = state.seats[idx]

    if seat.is_recording:
        state.seats[idx] = seat.model_copy(
            update={"is_recording": False, "recording_duration": 0, "recording_started_at": None}
        )
        state.score += CATCH_REWARD
        state.leak_level = max(0.0, state.leak_level - CATCH_LEAK_HEAL)
        return InteractionResult(
            outcome="caught",
            seat_id=seat_id,
            score_delta=CATCH_REWARD,
            feedback=Feedback(seat_id=seat_id, text=f"+{CATCH_REWARD}", positive=True),
            cue="zap",
        )

    if seat.is_occupied:
        before = state.score
        state.score = max(0, state.score - DISTURB_PENALTY)
        return InteractionResult(
            outcome="penalty",
            seat_id=seat_id,
            score_delta=state.score - before,
            feedback=Feedback(seat_id=seat_id, text=f"-{DISTURB_PENALTY}", positive=False),
            cue="error",
        )

    return None
