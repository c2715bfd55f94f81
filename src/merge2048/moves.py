# moves.py
# Move Engine: slide and merge simulation for one direction.

import logging
from typing import Dict, List, NamedTuple, Optional, Tuple

from merge2048.board import (
    BoardSnapshot,
    Direction,
    Position,
    Tile,
    build_snapshot,
    make_tile_id,
    tile_map,
)

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


class MoveResult(NamedTuple):
    snapshot: BoardSnapshot
    moved: bool


# --- Traversal Helpers ---

def build_traversals(size: int, direction: Direction) -> Tuple[List[int], List[int]]:
    """
    Row and column orders to visit cells in, starting from the far edge in the
    movement direction so a tile is never processed before the tiles ahead of it.
    Args:
        size (int): The grid dimension.
        direction (Direction): Direction of the move.
    Returns:
        Tuple[List[int], List[int]]: Row indices and column indices in visiting order.
    """
    d_row, d_col = direction.vector
    rows = list(range(size))
    cols = list(range(size))
    if d_row == 1:
        rows.reverse()
    if d_col == 1:
        cols.reverse()
    return rows, cols


def _within_bounds(cell: Cell, size: int) -> bool:
    return 0 <= cell[0] < size and 0 <= cell[1] < size


def find_farthest_position(
    cells: Dict[Cell, Tile], start: Cell, direction: Direction, size: int
) -> Tuple[Cell, Optional[Cell]]:
    """
    Walks from start along the direction vector.
    Returns:
        Tuple[Cell, Optional[Cell]]: The farthest empty cell reached (start if
        none) and the first occupied cell blocking further travel, or None when
        the walk hits the edge.
    """
    d_row, d_col = direction.vector
    previous = start
    candidate = (start[0] + d_row, start[1] + d_col)
    while _within_bounds(candidate, size) and candidate not in cells:
        previous = candidate
        candidate = (candidate[0] + d_row, candidate[1] + d_col)
    blocker = candidate if _within_bounds(candidate, size) else None
    return previous, blocker


def _clear_transient_flags(tile: Tile) -> Tile:
    if tile.previous_position is None and not tile.is_new and not tile.is_merged:
        return tile
    return tile.model_copy(update={"previous_position": None, "is_new": False, "is_merged": False})


# --- Core Game Move Processing ---

def move(snapshot: BoardSnapshot, direction: Direction) -> MoveResult:
    """
    Slides every tile as far as possible in the direction, merging equal pairs.

    A tile produced by a merge during this move never merges again, so a line
    2-2-4 moved toward the 4 becomes 4-4, not 8.

    Args:
        snapshot (BoardSnapshot): Board before the move. Never modified.
        direction (Direction): The direction to move.
    Returns:
        MoveResult: The new snapshot and whether anything moved or merged. When
        nothing moved the input snapshot is returned as-is.
    Raises:
        ValueError: If an invalid direction is specified.
    """
    if not isinstance(direction, Direction):
        raise ValueError("Invalid direction specified for move.")

    size = snapshot.grid_size
    cells = {cell: _clear_transient_flags(tile) for cell, tile in tile_map(snapshot).items()}
    score = snapshot.score
    next_id = snapshot.next_tile_id
    moved = False

    rows, cols = build_traversals(size, direction)
    for row in rows:
        for col in cols:
            tile = cells.get((row, col))
            if tile is None:
                continue

            farthest, blocker = find_farthest_position(cells, (row, col), direction, size)
            other = cells.get(blocker) if blocker is not None else None

            if other is not None and other.value == tile.value and not other.is_merged:
                merged = Tile(
                    id=make_tile_id(next_id),
                    value=tile.value * 2,
                    row=blocker[0],
                    col=blocker[1],
                    previous_position=Position(row=row, col=col),
                    is_merged=True,
                )
                next_id += 1
                del cells[(row, col)]
                cells[blocker] = merged
                score += merged.value
                moved = True
            elif farthest != (row, col):
                del cells[(row, col)]
                cells[farthest] = tile.model_copy(update={
                    "row": farthest[0],
                    "col": farthest[1],
                    "previous_position": Position(row=row, col=col),
                })
                moved = True

    if not moved:
        logger.debug("Move %s left the board unchanged", direction.value)
        return MoveResult(snapshot, False)

    new_snapshot = build_snapshot(size, cells.values(), score, next_id)
    logger.debug("Move %s: score %d -> %d", direction.value, snapshot.score, new_snapshot.score)
    return MoveResult(new_snapshot, True)


# --- Move Availability ---

def is_move_possible(snapshot: BoardSnapshot, direction: Direction) -> bool:
    """
    Check if any tile can slide or merge in the given direction.
    """
    cells = tile_map(snapshot)
    d_row, d_col = direction.vector
    for (row, col), tile in cells.items():
        neighbour = (row + d_row, col + d_col)
        if not _within_bounds(neighbour, snapshot.grid_size):
            continue
        other = cells.get(neighbour)
        if other is None or other.value == tile.value:
            return True
    return False


def available_directions(snapshot: BoardSnapshot) -> List[Direction]:
    return [direction for direction in Direction if is_move_possible(snapshot, direction)]
