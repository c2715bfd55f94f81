# spawn.py
# Spawn Generator: difficulty-scaled random tile insertion.

import logging
import math
import random
from typing import Optional, Tuple

from merge2048.board import BoardSnapshot, Tile, build_snapshot, get_empty_cells, make_tile_id

logger = logging.getLogger(__name__)

SPAWN_VALUES: Tuple[int, ...] = (2, 4, 8, 16)
MAX_DIFFICULTY = 7.0
MAX_TILE_WEIGHT = 20
W16_THRESHOLD = 4.5
W16_SLOPE = 40.0


def difficulty_scalar(score: int, max_tile_value: int) -> float:
    """
    Difficulty D = min(log10(score + 20 * max_tile_value), 7).

    Progress below 1 (a fresh board) yields 0.
    """
    progress = score + max_tile_value * MAX_TILE_WEIGHT
    if progress < 1:
        return 0.0
    return min(math.log10(progress), MAX_DIFFICULTY)


def spawn_weights(level: float) -> Tuple[float, float, float, float]:
    """
    Unnormalized weights for spawning 2, 4, 8 and 16 at difficulty level D.

    2s dominate at D=0 and fall to a floor of 1; 4s grow steadily; 8s appear
    past D=3 and 16s past D=4.5.
    """
    w2 = max(1.0, 100 - 20 * level)
    w4 = max(1.0, 5 + 30 * level)
    w8 = max(0.0, (level - 3) * 25)
    w16 = max(0.0, (level - W16_THRESHOLD) * W16_SLOPE)
    return w2, w4, w8, w16


def spawn_distribution(level: float) -> Tuple[float, float, float, float]:
    weights = spawn_weights(level)
    total = sum(weights)
    return tuple(weight / total for weight in weights)


def choose_spawn_value(level: float, rng=random) -> int:
    """
    Draws one spawn value with a single uniform draw over the cumulative weights.
    Args:
        level (float): Difficulty level D.
        rng: Source of randomness exposing random(). Defaults to the random module.
    Returns:
        int: One of 2, 4, 8 or 16.
    """
    weights = spawn_weights(level)
    roll = rng.random() * sum(weights)
    cumulative = 0.0
    for value, weight in zip(SPAWN_VALUES, weights):
        cumulative += weight
        if roll < cumulative:
            return value
    # float rounding can leave roll at the upper bound
    return max(value for value, weight in zip(SPAWN_VALUES, weights) if weight > 0)


def spawn(
    snapshot: BoardSnapshot,
    level: Optional[float] = None,
    rng: Optional[random.Random] = None,
) -> BoardSnapshot:
    """
    Adds one tile to a uniformly chosen empty cell.

    Call this only after a move that changed the board.

    Args:
        snapshot (BoardSnapshot): The current board.
        level (Optional[float]): Difficulty level D. Derived from the snapshot's
            score and max tile on every call when omitted.
        rng (Optional[random.Random]): Injectable randomness. Defaults to the
            random module.
    Returns:
        BoardSnapshot: A new board with the added tile, or the same snapshot
        when the board is full.
    """
    rng = rng or random
    empty_cells = get_empty_cells(snapshot)
    if not empty_cells:
        logger.debug("Board full, no tile spawned")
        return snapshot

    row, col = rng.choice(empty_cells)
    if level is None:
        level = difficulty_scalar(snapshot.score, snapshot.max_tile_value)
    value = choose_spawn_value(level, rng)

    tile = Tile(
        id=make_tile_id(snapshot.next_tile_id),
        value=value,
        row=row,
        col=col,
        is_new=True,
    )
    logger.debug("Spawned %d at (%d, %d), difficulty %.2f", value, row, col, level)
    return build_snapshot(
        snapshot.grid_size,
        snapshot.tiles + (tile,),
        snapshot.score,
        snapshot.next_tile_id + 1,
    )
