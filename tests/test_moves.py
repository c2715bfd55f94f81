import random

import pytest

from conftest import STUCK_GRID
from merge2048.board import Direction, Position, Tile, build_snapshot, from_grid, is_power_of_two, to_grid
from merge2048.moves import available_directions, build_traversals, is_move_possible, move


def _grid_with_row(row):
    return [list(row)] + [[0] * 4 for _ in range(3)]


def test_traversal_starts_from_far_edge():
    assert build_traversals(4, Direction.RIGHT) == ([0, 1, 2, 3], [3, 2, 1, 0])
    assert build_traversals(4, Direction.DOWN) == ([3, 2, 1, 0], [0, 1, 2, 3])
    assert build_traversals(4, Direction.LEFT) == ([0, 1, 2, 3], [0, 1, 2, 3])


def test_merge_does_not_cascade_toward_the_four():
    snapshot = from_grid(_grid_with_row([2, 2, 4, 0]))

    result = move(snapshot, Direction.RIGHT)

    assert result.moved
    assert to_grid(result.snapshot)[0] == [0, 0, 4, 4]
    assert result.snapshot.score == 4


def test_merge_does_not_cascade_moving_left():
    result = move(from_grid(_grid_with_row([2, 2, 4, 0])), Direction.LEFT)
    assert to_grid(result.snapshot)[0] == [4, 4, 0, 0]


def test_four_equal_tiles_merge_in_pairs():
    result = move(from_grid(_grid_with_row([2, 2, 2, 2])), Direction.LEFT)

    assert to_grid(result.snapshot)[0] == [4, 4, 0, 0]
    assert result.snapshot.score == 8


def test_three_equal_tiles_merge_the_pair_farthest_along():
    result = move(from_grid(_grid_with_row([2, 2, 2, 0])), Direction.RIGHT)
    assert to_grid(result.snapshot)[0] == [0, 0, 2, 4]


@pytest.mark.parametrize("direction, expected", [
    (Direction.UP, [4, 4, 0, 0]),
    (Direction.DOWN, [0, 0, 4, 4]),
])
def test_vertical_moves(direction, expected):
    grid = [[2, 0, 0, 0], [0, 0, 0, 0], [2, 0, 0, 0], [4, 0, 0, 0]]

    result = move(from_grid(grid), direction)

    column = [row[0] for row in to_grid(result.snapshot)]
    assert column == expected


def test_merged_tile_gets_fresh_id_and_flags():
    snapshot = from_grid(_grid_with_row([2, 2, 0, 0]))

    result = move(snapshot, Direction.LEFT)

    (merged,) = result.snapshot.tiles
    assert merged.id == "tile-2"
    assert merged.value == 4
    assert merged.is_merged
    assert not merged.is_new
    assert merged.position == (0, 0)
    assert merged.previous_position == Position(row=0, col=1)
    assert result.snapshot.next_tile_id == 3


def test_sliding_tile_keeps_id_and_records_previous_position():
    snapshot = from_grid(_grid_with_row([0, 0, 0, 2]))

    result = move(snapshot, Direction.LEFT)

    (tile,) = result.snapshot.tiles
    assert tile.id == "tile-0"
    assert tile.position == (0, 0)
    assert tile.previous_position == Position(row=0, col=3)


def test_stationary_tile_has_flags_cleared():
    tiles = [
        Tile(id="tile-0", value=2, row=0, col=0, is_new=True),
        Tile(id="tile-1", value=8, row=1, col=0, is_merged=True,
             previous_position=Position(row=1, col=2)),
        Tile(id="tile-2", value=4, row=2, col=3),
    ]
    snapshot = build_snapshot(4, tiles, 0, 3)

    result = move(snapshot, Direction.LEFT)

    by_id = {tile.id: tile for tile in result.snapshot.tiles}
    for tile_id in ("tile-0", "tile-1"):
        tile = by_id[tile_id]
        assert not tile.is_new
        assert not tile.is_merged
        assert tile.previous_position is None
    assert by_id["tile-2"].previous_position == Position(row=2, col=3)


def test_ineffective_move_returns_input_snapshot():
    snapshot = from_grid(_grid_with_row([2, 4, 0, 0]))

    result = move(snapshot, Direction.LEFT)

    assert not result.moved
    assert result.snapshot is snapshot


def test_move_does_not_modify_input_and_is_deterministic():
    grid = [[2, 2, 4, 8], [0, 4, 4, 0], [2, 0, 0, 2], [16, 16, 16, 0]]
    snapshot = from_grid(grid)

    first = move(snapshot, Direction.RIGHT)
    second = move(snapshot, Direction.RIGHT)

    assert to_grid(snapshot) == grid
    assert first == second


def test_max_tile_value_updates_after_merge():
    result = move(from_grid(_grid_with_row([64, 64, 0, 0])), Direction.LEFT)
    assert result.snapshot.max_tile_value == 128


def test_invalid_direction():
    with pytest.raises(ValueError):
        move(from_grid(_grid_with_row([2, 0, 0, 0])), "left")


def test_random_boards_keep_invariants():
    rng = random.Random(7)
    for _ in range(200):
        grid = [[rng.choice([0, 0, 2, 4, 8]) for _ in range(4)] for _ in range(4)]
        snapshot = from_grid(grid)
        total = sum(map(sum, grid))
        for direction in Direction:
            result = move(snapshot, direction)
            positions = [tile.position for tile in result.snapshot.tiles]
            assert len(positions) == len(set(positions))
            assert all(is_power_of_two(tile.value) for tile in result.snapshot.tiles)
            # merging conserves the sum of values
            assert sum(tile.value for tile in result.snapshot.tiles) == total
            assert result.moved == is_move_possible(snapshot, direction)


def test_available_directions():
    assert available_directions(from_grid(STUCK_GRID)) == []
    snapshot = from_grid(_grid_with_row([2, 0, 0, 0]))
    assert set(available_directions(snapshot)) == {Direction.RIGHT, Direction.DOWN}
