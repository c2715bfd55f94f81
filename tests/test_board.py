import pytest
from pydantic import ValidationError

from merge2048.board import (
    BoardSnapshot,
    Direction,
    Tile,
    empty_snapshot,
    find_tile,
    from_grid,
    get_board_size,
    get_empty_cells,
    replace_tiles,
    to_grid,
)


def test_direction_vectors():
    assert Direction.UP.vector == (-1, 0)
    assert Direction.DOWN.vector == (1, 0)
    assert Direction.LEFT.vector == (0, -1)
    assert Direction.RIGHT.vector == (0, 1)


@pytest.mark.parametrize("value", [0, 1, 3, 6, 12])
def test_tile_rejects_non_power_of_two(value):
    with pytest.raises(ValidationError):
        Tile(id="tile-0", value=value, row=0, col=0)


def test_snapshot_rejects_shared_position():
    tiles = (
        Tile(id="tile-0", value=2, row=1, col=1),
        Tile(id="tile-1", value=4, row=1, col=1),
    )
    with pytest.raises(ValidationError):
        BoardSnapshot(grid_size=4, tiles=tiles)


def test_snapshot_rejects_out_of_bounds_tile():
    with pytest.raises(ValidationError):
        BoardSnapshot(grid_size=4, tiles=(Tile(id="tile-0", value=2, row=4, col=0),))


def test_snapshot_is_immutable():
    snapshot = from_grid([[2, 0], [0, 0]])
    with pytest.raises(ValidationError):
        snapshot.score = 10


def test_grid_round_trip_assigns_row_major_ids():
    grid = [[2, 0, 4, 0], [0, 0, 0, 0], [0, 8, 0, 0], [0, 0, 0, 2]]
    snapshot = from_grid(grid, score=12)

    assert to_grid(snapshot) == grid
    assert [tile.id for tile in snapshot.tiles] == ["tile-0", "tile-1", "tile-2", "tile-3"]
    assert snapshot.score == 12
    assert snapshot.max_tile_value == 8
    assert snapshot.next_tile_id == 4


def test_get_board_size_rejects_ragged_grid():
    with pytest.raises(ValueError):
        get_board_size([[0, 0], [0]])


def test_empty_snapshot():
    snapshot = empty_snapshot(5)
    assert snapshot.tiles == ()
    assert len(get_empty_cells(snapshot)) == 25
    with pytest.raises(ValueError):
        empty_snapshot(0)


def test_get_empty_cells_scans_row_major():
    snapshot = from_grid([[2, 0], [0, 4]])
    assert get_empty_cells(snapshot) == [(0, 1), (1, 0)]


def test_replace_tiles_recomputes_max():
    snapshot = from_grid([[2, 8], [0, 0]])
    big = find_tile(snapshot, "tile-1")
    updated = replace_tiles(snapshot, big.model_copy(update={"value": 4}))

    assert to_grid(updated) == [[2, 4], [0, 0]]
    assert updated.max_tile_value == 4
    assert to_grid(snapshot) == [[2, 8], [0, 0]]


def test_find_tile_missing():
    snapshot = from_grid([[2, 0], [0, 0]])
    assert find_tile(snapshot, "tile-9") is None
    assert find_tile(snapshot, None) is None
