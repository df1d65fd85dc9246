from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

import pytest
from statemachine.exceptions import TransitionNotAllowed

from piracy_patrol.api.models import GameStatus, SessionState
from piracy_patrol.fsm import SessionFSM


def _state(status: GameStatus = GameStatus.idle) -> SessionState:
    now = datetime.now(tz=UTC)
    return SessionState(session_id=uuid4(), created_at=now, last_updated_at=now, status=status)


def test_fsm_walks_a_full_run() -> None:
    s = _state()
    fsm = SessionFSM(s)

    for event, expected in (
        (fsm.start_game, GameStatus.playing),
        (fsm.complete_level, GameStatus.level_transition),
        (fsm.advance_level, GameStatus.playing),
        (fsm.win, GameStatus.victory),
    ):
        event()
        fsm.sync_status_to_model()
        assert s.status == expected


@pytest.mark.parametrize(
    "status",
    [GameStatus.idle, GameStatus.playing, GameStatus.level_transition, GameStatus.game_over, GameStatus.victory],
)
def test_start_game_is_accepted_from_every_state(status: GameStatus) -> None:
    s = _state(status)
    fsm = SessionFSM(s)
    fsm.start_game()
    fsm.sync_status_to_model()
    assert s.status == GameStatus.playing


def test_fsm_resumes_from_model_status() -> None:
    fsm = SessionFSM(_state(GameStatus.level_transition))
    assert fsm.current_state.value == GameStatus.level_transition.value


def test_lose_only_from_playing() -> None:
    fsm = SessionFSM(_state(GameStatus.level_transition))
    with pytest.raises(TransitionNotAllowed):
        fsm.lose()


def test_terminal_states_do_not_advance() -> None:
    fsm = SessionFSM(_state(GameStatus.game_over))
    with pytest.raises(TransitionNotAllowed):
        fsm.advance_level()
    with pytest.raises(TransitionNotAllowed):
        fsm.complete_level()


def test_idle_cannot_complete_level() -> None:
    fsm = SessionFSM(_state())
    with pytest.raises(TransitionNotAllowed):
        fsm.complete_level()
