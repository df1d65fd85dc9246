from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, computed_field

# Ticks of continuous recording before the seat shows the on-screen alert banner.
RECORDING_ALERT_TICKS = 50


class Occupant(StrEnum):
    judy = "JUDY"
    nick = "NICK"
    flash = "FLASH"
    clawhauser = "CLAWHAUSER"


OCCUPANTS: tuple[Occupant, ...] = (Occupant.judy, Occupant.nick, Occupant.flash, Occupant.clawhauser)


class GameStatus(StrEnum):
    idle = "IDLE"
    playing = "PLAYING"
    level_transition = "LEVEL_TRANSITION"
    game_over = "GAME_OVER"
    victory = "VICTORY"


Cue = Literal["start", "zap", "error", "levelUp", "win"]


class Seat(BaseModel):
    id: int
    occupant: Occupant | None = None
    is_recording: bool = False
    recording_duration: int = Field(default=0, ge=0)

    # Wall-clock stamp of when recording began; display/diagnostics only.
    recording_started_at: float | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_occupied(self) -> bool:
        return self.occupant is not None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def alert_visible(self) -> bool:
        return self.is_recording and self.recording_duration > RECORDING_ALERT_TICKS


class Feedback(BaseModel):
    """Transient click feedback shown over a seat for a moment."""

    seat_id: int
    text: str
    positive: bool


class SessionState(BaseModel):
    session_id: UUID
    created_at: datetime
    last_updated_at: datetime

    # For reproducibility/debugging.
    seed: int | None = None

    status: GameStatus = GameStatus.idle
    score: int = Field(default=0, ge=0)
    leak_level: float = Field(default=0.0, ge=0.0, le=100.0)
    level: int = 1

    # Best terminal score seen by this session object; survives start_game.
    high_score: int = 0

    seats: list[Seat] = Field(default_factory=list)
    feedback: Feedback | None = None

    # Game-over narrative for the current episode.
    end_message: str | None = None
    episode: int = 0


class SessionSnapshot(BaseModel):
    """Read-only view handed to presenters after each tick or interaction."""

    session_id: UUID
    status: GameStatus
    score: int
    leak_level: float
    level: int
    level_name: str
    target_score: int
    high_score: int
    seats: list[Seat]
    feedback: Feedback | None = None
    end_message: str | None = None
    tick_count: int = 0


class SessionListResponse(BaseModel):
    sessions: list[SessionSnapshot]


class LevelInfo(BaseModel):
    level: int
    rows: int
    seat_count: int
    target_score: int
    spawn_rate: float
    record_rate: float
    leak_multiplier: float
    name: str


class LevelListResponse(BaseModel):
    levels: list[LevelInfo]


class InteractResponse(BaseModel):
    outcome: Literal["caught", "penalty", "ignored"]
    snapshot: SessionSnapshot
