import random

import pytest

from merge2048.board import Difficulty, from_grid
from merge2048.config import GameConfig
from merge2048.core import GameState
from merge2048.powerups import GameHistory, PowerUpState, initial_power_ups

# Full board with no adjacent equal values.
STUCK_GRID = [
    [2, 4, 2, 4],
    [4, 2, 4, 2],
    [2, 4, 2, 4],
    [4, 2, 4, 16],
]


class FixedRandom:
    """Stand-in for random.Random with a fixed draw and a fixed cell pick."""

    def __init__(self, value=0.0, index=0):
        self.value = value
        self.index = index

    def random(self):
        return self.value

    def choice(self, seq):
        return seq[self.index]


def no_power_ups(**remaining) -> PowerUpState:
    counters = {"divider": 0, "doubler": 0, "swapper": 0, "undo": 0}
    counters.update(remaining)
    return PowerUpState(**counters)


def make_state(grid, powerups=None, config=None, score=0) -> GameState:
    config = config or GameConfig(difficulty=Difficulty.EASY)
    return GameState(
        config=config,
        snapshot=from_grid(grid, score=score),
        powerups=powerups or initial_power_ups(config.difficulty),
        history=GameHistory(depth=config.history_depth),
    )


@pytest.fixture
def rng():
    return random.Random(2048)
