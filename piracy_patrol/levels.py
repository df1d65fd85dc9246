from __future__ import annotations

from dataclasses import dataclass

from piracy_patrol.api.models import LevelInfo

SEATS_PER_ROW = 5


@dataclass(frozen=True, slots=True)
class LevelConfig:
    level: int
    rows: int
    target_score: int
    spawn_rate: float
    record_rate: float
    leak_multiplier: float
    name: str

    @property
    def seat_count(self) -> int:
        return self.rows * SEATS_PER_ROW

    def to_info(self) -> LevelInfo:
        return LevelInfo(
            level=self.level,
            rows=self.rows,
            seat_count=self.seat_count,
            target_score=self.target_score,
            spawn_rate=self.spawn_rate,
            record_rate=self.record_rate,
            leak_multiplier=self.leak_multiplier,
            name=self.name,
        )


LEVELS: tuple[LevelConfig, ...] = (
    LevelConfig(
        level=1,
        rows=1,
        target_score=500,
        spawn_rate=0.02,
        record_rate=0.02,
        leak_multiplier=1.0,
        name="第一关: 预告片",
    ),
    LevelConfig(
        level=2,
        rows=2,
        target_score=1500,
        spawn_rate=0.03,
        record_rate=0.04,
        leak_multiplier=1.2,
        name="第二关: 正片开始",
    ),
    LevelConfig(
        level=3,
        rows=4,
        target_score=5000,
        spawn_rate=0.08,
        record_rate=0.12,
        leak_multiplier=1.5,
        name="第三关: 决战时刻",
    ),
)

_BY_LEVEL: dict[int, LevelConfig] = {cfg.level: cfg for cfg in LEVELS}


def get_level(level: int) -> LevelConfig | None:
    return _BY_LEVEL.get(level)


def first_level() -> LevelConfig:
    return LEVELS[0]


def final_level() -> LevelConfig:
    return LEVELS[-1]


def level_or_first(level: int) -> LevelConfig:
    """Config for an in-play level, falling back to level 1 if the table has no entry."""

    return _BY_LEVEL.get(level, LEVELS[0])


def has_next_level(level: int) -> bool:
    return (level + 1) in _BY_LEVEL
