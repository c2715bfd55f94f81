# board.py
# Tile Store: the immutable value types that describe board contents.

from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Direction(Enum):
    """Represents the possible move directions."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def vector(self) -> Tuple[int, int]:
        """(row, col) unit vector of the direction."""
        return _VECTORS[self]


_VECTORS = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}


class Difficulty(Enum):
    """Game difficulty, fixed at game start."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


DEFAULT_WIN_TILE = 2048


def is_power_of_two(value: int) -> bool:
    return value >= 2 and value & (value - 1) == 0


# --- Value Types ---

class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)


class Tile(BaseModel):
    """
    A single numbered tile.

    The id stays with the tile while it slides; a merge destroys both source
    tiles and produces a tile with a fresh id.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    value: int
    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)
    previous_position: Optional[Position] = None
    is_new: bool = False
    is_merged: bool = False

    @field_validator("value")
    @classmethod
    def _value_is_power_of_two(cls, value: int) -> int:
        if not is_power_of_two(value):
            raise ValueError(f"Tile value must be a power of two >= 2, got {value}.")
        return value

    @property
    def position(self) -> Tuple[int, int]:
        return self.row, self.col


class BoardSnapshot(BaseModel):
    """
    Immutable board contents for one turn.

    Attributes:
        grid_size (int): Dimension N of the N x N grid.
        tiles (Tuple[Tile, ...]): Tiles ordered by (row, col).
        score (int): Cumulative merge score.
        max_tile_value (int): Highest tile value on the board (0 when empty).
        next_tile_id (int): Counter used to mint ids for new tiles.
    """
    model_config = ConfigDict(frozen=True)

    grid_size: int = Field(..., gt=0)
    tiles: Tuple[Tile, ...] = ()
    score: int = Field(default=0, ge=0)
    max_tile_value: int = Field(default=0, ge=0)
    next_tile_id: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_tiles(self) -> "BoardSnapshot":
        seen_positions = set()
        seen_ids = set()
        for tile in self.tiles:
            if tile.row >= self.grid_size or tile.col >= self.grid_size:
                raise ValueError(f"Tile {tile.id} at {tile.position} is outside a {self.grid_size}x{self.grid_size} grid.")
            if tile.position in seen_positions:
                raise ValueError(f"Two tiles occupy position {tile.position}.")
            if tile.id in seen_ids:
                raise ValueError(f"Duplicate tile id {tile.id}.")
            seen_positions.add(tile.position)
            seen_ids.add(tile.id)
        return self


# --- Board Helper Functions ---

def make_tile_id(counter: int) -> str:
    return f"tile-{counter}"


def empty_snapshot(size: int) -> BoardSnapshot:
    """
    Creates a board with no tiles.
    Args:
        size (int): The dimension of the N x N board.
    Returns:
        BoardSnapshot: An empty board with score 0.
    Raises:
        ValueError: If board size is not a positive integer.
    """
    if not isinstance(size, int) or size <= 0:
        raise ValueError("Board size must be a positive integer.")
    return BoardSnapshot(grid_size=size)


def get_board_size(grid: List[List[int]]) -> int:
    """
    Gets the size (N) of an N x N grid of values.
    Args:
        grid (List[List[int]]): Rows of tile values, 0 for empty.
    Returns:
        int: The dimension of the grid.
    Raises:
        ValueError: If the grid is not square or empty.
    """
    if not grid or not all(len(row) == len(grid) for row in grid):
        raise ValueError("Board must be a non-empty square matrix.")
    return len(grid)


def tile_map(snapshot: BoardSnapshot) -> Dict[Tuple[int, int], Tile]:
    """Maps (row, col) to the tile occupying it."""
    return {tile.position: tile for tile in snapshot.tiles}


def get_empty_cells(snapshot: BoardSnapshot) -> List[Tuple[int, int]]:
    """
    Get coordinates of empty cells, scanning the full grid row by row.
    Args:
        snapshot (BoardSnapshot): The board to check.
    Returns:
        List[Tuple[int, int]]: List of (row, col) tuples for empty cells.
    """
    occupied = tile_map(snapshot)
    n = snapshot.grid_size
    empty_cells = []
    for row in range(n):
        for col in range(n):
            if (row, col) not in occupied:
                empty_cells.append((row, col))
    return empty_cells


def find_tile(snapshot: BoardSnapshot, tile_id: Optional[str]) -> Optional[Tile]:
    if tile_id is None:
        return None
    for tile in snapshot.tiles:
        if tile.id == tile_id:
            return tile
    return None


def highest_value(tiles: Iterable[Tile]) -> int:
    return max((tile.value for tile in tiles), default=0)


def build_snapshot(grid_size: int, tiles: Iterable[Tile], score: int, next_tile_id: int) -> BoardSnapshot:
    """
    Assembles a snapshot, ordering tiles by position and recomputing the max tile.
    """
    ordered = tuple(sorted(tiles, key=lambda tile: tile.position))
    return BoardSnapshot(
        grid_size=grid_size,
        tiles=ordered,
        score=score,
        max_tile_value=highest_value(ordered),
        next_tile_id=next_tile_id,
    )


def replace_tiles(snapshot: BoardSnapshot, *updated: Tile) -> BoardSnapshot:
    """
    Returns a copy of the snapshot where tiles are swapped for their updated
    versions (matched by id).
    """
    by_id = {tile.id: tile for tile in updated}
    tiles = [by_id.get(tile.id, tile) for tile in snapshot.tiles]
    return build_snapshot(snapshot.grid_size, tiles, snapshot.score, snapshot.next_tile_id)


# --- Grid Conversion ---

def to_grid(snapshot: BoardSnapshot) -> List[List[int]]:
    """
    Renders the snapshot as rows of values, 0 for empty cells.
    """
    n = snapshot.grid_size
    grid = [[0] * n for _ in range(n)]
    for tile in snapshot.tiles:
        grid[tile.row][tile.col] = tile.value
    return grid


def from_grid(grid: List[List[int]], score: int = 0) -> BoardSnapshot:
    """
    Builds a snapshot from rows of values (0 for empty), assigning ids in
    row-major order.
    Args:
        grid (List[List[int]]): The N x N values.
        score (int): Score to carry on the snapshot.
    Returns:
        BoardSnapshot: A snapshot with no transient flags set.
    Raises:
        ValueError: If the grid is not square or holds a non power-of-two value.
    """
    n = get_board_size(grid)
    tiles = []
    counter = 0
    for row in range(n):
        for col in range(n):
            value = grid[row][col]
            if value == 0:
                continue
            tiles.append(Tile(id=make_tile_id(counter), value=value, row=row, col=col))
            counter += 1
    return build_snapshot(n, tiles, score, counter)
