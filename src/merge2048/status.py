# status.py
# Terminal-State Detector: win and game-over evaluation.

from enum import Enum

from merge2048.board import DEFAULT_WIN_TILE, BoardSnapshot, get_empty_cells, tile_map
from merge2048.powerups import PowerUpKind, PowerUpState

GATING_POWER_UPS = (PowerUpKind.DIVIDER, PowerUpKind.DOUBLER, PowerUpKind.SWAPPER)


class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    IN_PROGRESS = 1
    GAME_OVER = 2  # Lost
    GAME_WON = 3


def has_adjacent_match(snapshot: BoardSnapshot) -> bool:
    """
    Check if any two horizontally or vertically adjacent tiles share a value.
    """
    cells = tile_map(snapshot)
    for (row, col), tile in cells.items():
        for neighbour in ((row, col + 1), (row + 1, col)):
            other = cells.get(neighbour)
            if other is not None and other.value == tile.value:
                return True
    return False


def power_ups_exhausted(powerups: PowerUpState, include_undo: bool = False) -> bool:
    kinds = GATING_POWER_UPS + ((PowerUpKind.UNDO,) if include_undo else ())
    return all(powerups.remaining(kind) == 0 for kind in kinds)


def is_game_over(snapshot: BoardSnapshot, powerups: PowerUpState, include_undo: bool = False) -> bool:
    """
    The game is over when the grid is full, no merge exists in any direction
    and every power-up that could change the board is used up.
    Args:
        snapshot (BoardSnapshot): The board to evaluate.
        powerups (PowerUpState): Remaining power-up uses.
        include_undo (bool): Also require the undo budget to be spent.
    Returns:
        bool: True if the player has no way to continue.
    """
    if get_empty_cells(snapshot):
        return False
    if has_adjacent_match(snapshot):
        return False
    return power_ups_exhausted(powerups, include_undo)


def has_won(snapshot: BoardSnapshot, win_tile: int = DEFAULT_WIN_TILE) -> bool:
    """
    Check if the game is won (a tile with at least the win_tile value exists).
    """
    return snapshot.max_tile_value >= win_tile or any(tile.value >= win_tile for tile in snapshot.tiles)


def determine_game_status(
    snapshot: BoardSnapshot,
    powerups: PowerUpState,
    win_tile: int = DEFAULT_WIN_TILE,
    include_undo: bool = False,
) -> GameProgressState:
    """
    Determines the current progress state of the game.

    Winning does not end play by itself, so a stuck board reports GAME_OVER
    even when a winning tile is present.
    Returns:
        GameProgressState: The current state (IN_PROGRESS, GAME_WON, GAME_OVER).
    """
    if is_game_over(snapshot, powerups, include_undo):
        return GameProgressState.GAME_OVER
    if has_won(snapshot, win_tile):
        return GameProgressState.GAME_WON
    return GameProgressState.IN_PROGRESS
