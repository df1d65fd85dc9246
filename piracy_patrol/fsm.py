from __future__ import annotations

from statemachine import State, StateMachine

from piracy_patrol.api.models import GameStatus, SessionState


class SessionFSM(StateMachine):
    """FSM wrapper around SessionState.status.

    - idle -> playing -> (level_transition -> playing)* -> victory | game_over
    - start_game is accepted from every state; it is how a finished or
      interrupted run is replaced by a fresh one.
    The session mutates score/leak/seats; the FSM only guards the status changes.
    """

    idle = State(GameStatus.idle.value, value=GameStatus.idle.value, initial=True)
    playing = State(GameStatus.playing.value, value=GameStatus.playing.value)
    level_transition = State(GameStatus.level_transition.value, value=GameStatus.level_transition.value)
    game_over = State(GameStatus.game_over.value, value=GameStatus.game_over.value)
    victory = State(GameStatus.victory.value, value=GameStatus.victory.value)

    start_game = (
        idle.to(playing)
        | playing.to.itself()
        | level_transition.to(playing)
        | game_over.to(playing)
        | victory.to(playing)
    )
    complete_level = playing.to(level_transition)
    advance_level = level_transition.to(playing)
    win = playing.to(victory) | level_transition.to(victory)
    lose = playing.to(game_over)

    def __init__(self, state: SessionState):
        self.session_state = state
        super().__init__(start_value=state.status.value)

    def sync_status_to_model(self) -> None:
        self.session_state.status = GameStatus(str(self.current_state.value))
