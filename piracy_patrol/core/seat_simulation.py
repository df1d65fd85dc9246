from __future__ import annotations

from dataclasses import dataclass

from piracy_patrol.api.models import OCCUPANTS, Seat
from piracy_patrol.core.capabilities import Clock, RandomSource
from piracy_patrol.levels import SEATS_PER_ROW, LevelConfig

# Level-independent chance that an idle viewer leaves on a given tick.
DESPAWN_RATE = 0.005
BASE_LEAK_PER_RECORDING = 1.5


@dataclass(frozen=True, slots=True)
class TickOutcome:
    """Result of one simulation tick.

    - `seats`: a new seat list; the input list is left untouched.
    - `leak_contribution`: undamped leak added by recording seats this tick.
    """

    seats: list[Seat]
    leak_contribution: float


def init_seats(rows: int) -> list[Seat]:
    return [Seat(id=i) for i in range(rows * SEATS_PER_ROW)]


def _step_seat(seat: Seat, config: LevelConfig, *, rng: RandomSource, clock: Clock) -> tuple[Seat, float]:
    if not seat.is_occupied:
        if rng.random() < config.spawn_rate:
            occupant = OCCUPANTS[int(rng.random() * len(OCCUPANTS)) % len(OCCUPANTS)]
            return (
                seat.model_copy(
                    update={
                        "occupant": occupant,
                        "is_recording": False,
                        "recording_duration": 0,
                        "recording_started_at": None,
                    }
                ),
                0.0,
            )
        return seat, 0.0

    if not seat.is_recording:
        if rng.random() < DESPAWN_RATE:
            return seat.model_copy(update={"occupant": None}), 0.0
        if rng.random() < config.record_rate:
            return (
                seat.model_copy(
                    update={"is_recording": True, "recording_duration": 0, "recording_started_at": clock()}
                ),
                0.0,
            )
        return seat, 0.0

    return (
        seat.model_copy(update={"recording_duration": seat.recording_duration + 1}),
        BASE_LEAK_PER_RECORDING * config.leak_multiplier,
    )


def simulate_tick(seats: list[Seat], config: LevelConfig, *, rng: RandomSource, clock: Clock) -> TickOutcome:
    """Advance every seat by exactly one tick.

    Rules per seat, first match wins: spawn (empty seat), despawn (idle viewer),
    start recording (idle viewer), keep recording (recording viewer).
    """

    new_seats: list[Seat] = []
    leak = 0.0
    for seat in seats:
        stepped, contribution = _step_seat(seat, config, rng=rng, clock=clock)
        new_seats.append(stepped)
        leak += contribution
    return TickOutcome(seats=new_seats, leak_contribution=leak)
