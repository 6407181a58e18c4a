from __future__ import annotations

from dataclasses import replace

import pytest

from game_logic import GameState, Point


def make_rng(seed: int = 1):
    """Linear congruential source, stable across platforms."""
    value = seed & 0xFFFFFFFF

    def rng() -> float:
        nonlocal value
        value = (value * 1664525 + 1013904223) & 0xFFFFFFFF
        return value / 0x100000000

    return rng


def constant_rng(value: float):
    return lambda: value


def with_state(**overrides) -> GameState:
    """A 5x5 board, snake of three heading right, food in the far corner."""
    base = GameState(
        width=5,
        height=5,
        snake=(Point(2, 2), Point(1, 2), Point(0, 2)),
        direction="right",
        next_direction="right",
        food=Point(4, 4),
        score=0,
        game_over=False,
        paused=False,
        won=False,
    )
    if "snake" in overrides:
        overrides["snake"] = tuple(Point(*segment) for segment in overrides["snake"])
    if overrides.get("food") is not None:
        overrides["food"] = Point(*overrides["food"])
    return replace(base, **overrides)


@pytest.fixture()
def rng():
    return make_rng()
