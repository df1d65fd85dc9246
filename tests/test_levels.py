from __future__ import annotations

import dataclasses

import pytest

from piracy_patrol.levels import LEVELS, final_level, first_level, get_level, has_next_level, level_or_first


def test_levels_are_numbered_contiguously_from_one() -> None:
    assert [cfg.level for cfg in LEVELS] == list(range(1, len(LEVELS) + 1))


def test_level_one_parameters() -> None:
    cfg = first_level()
    assert cfg.rows == 1
    assert cfg.seat_count == 5
    assert cfg.target_score == 500
    assert cfg.spawn_rate == pytest.approx(0.02)
    assert cfg.record_rate == pytest.approx(0.02)
    assert cfg.leak_multiplier == pytest.approx(1.0)


def test_difficulty_ramps_up() -> None:
    for prev, nxt in zip(LEVELS, LEVELS[1:]):
        assert nxt.rows >= prev.rows
        assert nxt.target_score > prev.target_score
        assert nxt.leak_multiplier >= prev.leak_multiplier


def test_lookup_and_fallback() -> None:
    assert get_level(2) is LEVELS[1]
    assert get_level(99) is None
    assert level_or_first(99) is LEVELS[0]
    assert level_or_first(0) is LEVELS[0]


def test_has_next_level_stops_at_final() -> None:
    last = final_level().level
    assert has_next_level(last - 1) is True
    assert has_next_level(last) is False


def test_level_configs_are_immutable() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        LEVELS[0].target_score = 1  # type: ignore[misc]


def test_to_info_carries_seat_count() -> None:
    info = LEVELS[2].to_info()
    assert info.seat_count == 20
    assert info.name == LEVELS[2].name
