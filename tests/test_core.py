import random

import pytest

from conftest import STUCK_GRID, FixedRandom, make_state, no_power_ups
from merge2048.board import Difficulty, Direction, find_tile, to_grid
from merge2048.config import GameConfig
from merge2048.core import new_game, play_move, undo_last, use_power_up
from merge2048.errors import InvalidTarget, NoHistory
from merge2048.powerups import PowerUpKind
from merge2048.status import GameProgressState

NEARLY_FULL = [
    [2, 2, 8, 16],
    [8, 16, 32, 64],
    [16, 32, 64, 128],
    [32, 64, 128, 0],
]


def test_new_game_places_two_tiles():
    config = GameConfig(grid_size=5, difficulty=Difficulty.HARD)

    state = new_game(config, random.Random(1))

    assert state.snapshot.grid_size == 5
    assert len(state.snapshot.tiles) == 2
    assert all(tile.is_new for tile in state.snapshot.tiles)
    assert state.snapshot.score == 0
    assert state.powerups.undo == 1
    assert state.history.entries == ()
    assert state.progress == GameProgressState.IN_PROGRESS


def test_new_game_is_reproducible_with_seed():
    assert new_game(rng=random.Random(5)) == new_game(rng=random.Random(5))


def test_merge_then_spawn_keeps_game_going():
    state = make_state(NEARLY_FULL, powerups=no_power_ups())

    next_state, moved = play_move(state, Direction.LEFT, FixedRandom(0.0, index=0))

    assert moved
    grid = to_grid(next_state.snapshot)
    assert grid[0] == [4, 8, 16, 2]
    assert grid[3] == [32, 64, 128, 0]
    assert next_state.snapshot.score == 4
    assert len(next_state.snapshot.tiles) == 15
    assert not next_state.game_over
    assert next_state.progress == GameProgressState.IN_PROGRESS


def test_ineffective_move_returns_same_state():
    state = make_state(NEARLY_FULL)

    next_state, moved = play_move(state, Direction.UP, random.Random(0))

    assert not moved
    assert next_state is state


def test_move_records_history_and_undo_restores_it(rng):
    state = make_state(NEARLY_FULL)

    moved_state, _ = play_move(state, Direction.LEFT, rng)
    restored = undo_last(moved_state)

    assert restored.snapshot.tiles == state.snapshot.tiles
    assert restored.snapshot.score == state.snapshot.score
    assert restored.powerups.undo == state.powerups.undo - 1
    assert restored.powerups.divider == state.powerups.divider

    again = undo_last(restored)
    assert again.snapshot == restored.snapshot


def test_undo_before_any_move():
    with pytest.raises(NoHistory):
        undo_last(make_state(NEARLY_FULL))


def test_move_clears_pending_swapper_selection(rng):
    state = make_state(NEARLY_FULL)
    picked, _ = use_power_up(state, PowerUpKind.SWAPPER, "tile-0")
    assert picked.powerups.selected_tile_id == "tile-0"

    moved_state, _ = play_move(picked, Direction.LEFT, rng)

    assert moved_state.powerups.selected_tile_id is None


def test_doubler_win_is_reported():
    state = make_state([[1024, 0, 0, 0], [0] * 4, [0] * 4, [0] * 4])

    next_state, won = use_power_up(state, PowerUpKind.DOUBLER, "tile-0")

    assert won
    assert next_state.won
    assert next_state.progress == GameProgressState.GAME_WON
    assert len(next_state.history.entries) == 1


def test_last_power_up_on_stuck_board_ends_game():
    state = make_state(STUCK_GRID, powerups=no_power_ups(divider=1))
    assert state.progress != GameProgressState.GAME_OVER

    next_state, _ = use_power_up(state, PowerUpKind.DIVIDER, "tile-15")

    assert find_tile(next_state.snapshot, "tile-15").value == 8
    assert next_state.game_over
    assert next_state.progress == GameProgressState.GAME_OVER


def test_undo_reopens_game_when_it_gates_game_over():
    config = GameConfig(undo_blocks_game_over=True)
    state = make_state(STUCK_GRID, powerups=no_power_ups(divider=1, undo=1), config=config)

    divided, _ = use_power_up(state, PowerUpKind.DIVIDER, "tile-15")
    assert not divided.game_over

    restored, _ = use_power_up(divided, PowerUpKind.UNDO)
    assert restored.powerups.undo == 0
    assert restored.powerups.divider == 1
    assert not restored.game_over


def test_rejected_power_up_leaves_state_alone():
    state = make_state(NEARLY_FULL)
    with pytest.raises(InvalidTarget):
        use_power_up(state, PowerUpKind.DIVIDER, "tile-0")
    assert state.powerups.divider == 3
