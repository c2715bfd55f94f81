# powerups.py
# Power-Up Engine: divider, doubler, swapper and undo. Each operation consumes
# one use and returns new values; a rejected request raises a PowerUpError and
# changes nothing.

import logging
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from merge2048.board import (
    DEFAULT_WIN_TILE,
    BoardSnapshot,
    Difficulty,
    Position,
    Tile,
    find_tile,
    replace_tiles,
)
from merge2048.errors import Exhausted, InvalidTarget, NoHistory

logger = logging.getLogger(__name__)


class PowerUpKind(Enum):
    """The four power-ups, each with its own handler."""
    DIVIDER = "divider"
    DOUBLER = "doubler"
    SWAPPER = "swapper"
    UNDO = "undo"


POWER_UP_BUDGETS = {
    Difficulty.EASY: 3,
    Difficulty.MEDIUM: 2,
    Difficulty.HARD: 1,
}

# --- State ---

class PowerUpState(BaseModel):
    """Remaining uses per power-up and the swapper's pending selection."""
    model_config = ConfigDict(frozen=True)

    divider: int = Field(..., ge=0)
    doubler: int = Field(..., ge=0)
    swapper: int = Field(..., ge=0)
    undo: int = Field(..., ge=0)
    selected_tile_id: Optional[str] = None

    def remaining(self, kind: PowerUpKind) -> int:
        return getattr(self, kind.value)

    def consume(self, kind: PowerUpKind) -> "PowerUpState":
        return self.model_copy(update={kind.value: self.remaining(kind) - 1})


def initial_power_ups(difficulty: Difficulty) -> PowerUpState:
    """
    Budgets for a new game. They are never replenished mid-game.
    Args:
        difficulty (Difficulty): The game difficulty.
    Returns:
        PowerUpState: Easy=3, Medium=2, Hard=1 uses of every power-up.
    """
    budget = POWER_UP_BUDGETS[difficulty]
    return PowerUpState(divider=budget, doubler=budget, swapper=budget, undo=budget)


class HistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    snapshot: BoardSnapshot
    powerups: PowerUpState


class GameHistory(BaseModel):
    """
    Bounded stack of earlier states. The default depth of 1 keeps only the
    state before the last move.
    """
    model_config = ConfigDict(frozen=True)

    depth: int = Field(default=1, ge=1)
    entries: Tuple[HistoryEntry, ...] = ()


def record(history: GameHistory, snapshot: BoardSnapshot, powerups: PowerUpState) -> GameHistory:
    """Pushes a state, evicting the oldest entries beyond the history depth."""
    entries = history.entries + (HistoryEntry(snapshot=snapshot, powerups=powerups),)
    return history.model_copy(update={"entries": entries[-history.depth:]})


class PowerUpResult(NamedTuple):
    snapshot: BoardSnapshot
    powerups: PowerUpState
    won: bool = False
    history: Optional[GameHistory] = None


class UndoResult(NamedTuple):
    snapshot: BoardSnapshot
    powerups: PowerUpState
    history: GameHistory


# --- Preconditions ---

def _require_uses(powerups: PowerUpState, kind: PowerUpKind) -> None:
    if powerups.remaining(kind) <= 0:
        raise Exhausted(f"No {kind.value} uses left.")


def _require_tile(snapshot: BoardSnapshot, tile_id: Optional[str]) -> Tile:
    tile = find_tile(snapshot, tile_id)
    if tile is None:
        raise InvalidTarget(f"Tile {tile_id!r} is not on the board.")
    return tile


# --- Handlers ---

def _apply_divider(snapshot, powerups, tile_id, history, win_tile) -> PowerUpResult:
    _require_uses(powerups, PowerUpKind.DIVIDER)
    tile = _require_tile(snapshot, tile_id)
    if tile.value <= 2:
        raise InvalidTarget(f"Tile {tile.id} has value {tile.value} and cannot be divided.")

    halved = tile.model_copy(update={"value": tile.value // 2})
    logger.debug("Divider: %s %d -> %d", tile.id, tile.value, halved.value)
    return PowerUpResult(
        replace_tiles(snapshot, halved),
        powerups.consume(PowerUpKind.DIVIDER),
        False,
        history,
    )


def _apply_doubler(snapshot, powerups, tile_id, history, win_tile) -> PowerUpResult:
    _require_uses(powerups, PowerUpKind.DOUBLER)
    tile = _require_tile(snapshot, tile_id)

    doubled = tile.model_copy(update={"value": tile.value * 2})
    won = doubled.value >= win_tile
    logger.debug("Doubler: %s %d -> %d (won=%s)", tile.id, tile.value, doubled.value, won)
    return PowerUpResult(
        replace_tiles(snapshot, doubled),
        powerups.consume(PowerUpKind.DOUBLER),
        won,
        history,
    )


def _apply_swapper(snapshot, powerups, tile_id, history, win_tile) -> PowerUpResult:
    _require_uses(powerups, PowerUpKind.SWAPPER)
    target = _require_tile(snapshot, tile_id)

    selected = find_tile(snapshot, powerups.selected_tile_id)
    if selected is None:
        # first pick, or the previous pick no longer exists
        logger.debug("Swapper: selected %s", target.id)
        return PowerUpResult(snapshot, powerups.model_copy(update={"selected_tile_id": target.id}), False, history)

    if selected.id == target.id:
        logger.debug("Swapper: deselected %s", target.id)
        return PowerUpResult(snapshot, powerups.model_copy(update={"selected_tile_id": None}), False, history)

    first = selected.model_copy(update={
        "row": target.row,
        "col": target.col,
        "previous_position": Position(row=selected.row, col=selected.col),
    })
    second = target.model_copy(update={
        "row": selected.row,
        "col": selected.col,
        "previous_position": Position(row=target.row, col=target.col),
    })
    logger.debug("Swapper: %s <-> %s", selected.id, target.id)
    consumed = powerups.consume(PowerUpKind.SWAPPER)
    return PowerUpResult(
        replace_tiles(snapshot, first, second),
        consumed.model_copy(update={"selected_tile_id": None}),
        False,
        history,
    )


def _apply_undo(snapshot, powerups, tile_id, history, win_tile) -> PowerUpResult:
    result = undo(history if history is not None else GameHistory(), powerups, current=snapshot)
    return PowerUpResult(result.snapshot, result.powerups, False, result.history)


_HANDLERS = {
    PowerUpKind.DIVIDER: _apply_divider,
    PowerUpKind.DOUBLER: _apply_doubler,
    PowerUpKind.SWAPPER: _apply_swapper,
    PowerUpKind.UNDO: _apply_undo,
}


def apply_power_up(
    snapshot: BoardSnapshot,
    powerups: PowerUpState,
    kind: PowerUpKind,
    target_tile_id: Optional[str] = None,
    *,
    history: Optional[GameHistory] = None,
    win_tile: int = DEFAULT_WIN_TILE,
) -> PowerUpResult:
    """
    Applies one power-up.
    Args:
        snapshot (BoardSnapshot): The current board.
        powerups (PowerUpState): Remaining uses and pending swapper selection.
        kind (PowerUpKind): Which power-up to apply.
        target_tile_id (Optional[str]): Target tile; required by divider,
            doubler and swapper.
        history (Optional[GameHistory]): Earlier states, used by undo and
            passed through unchanged by the others.
        win_tile (int): Value that wins the game, checked by the doubler.
    Returns:
        PowerUpResult: New snapshot, new power-up state, the doubler's won flag
        and the (possibly updated) history.
    Raises:
        Exhausted: No uses left for the power-up.
        InvalidTarget: Missing tile or a tile the power-up cannot act on.
        NoHistory: Undo with nothing recorded.
    """
    if not isinstance(kind, PowerUpKind):
        raise ValueError(f"Unknown power-up: {kind!r}")
    return _HANDLERS[kind](snapshot, powerups, target_tile_id, history, win_tile)


def undo(
    history: GameHistory,
    powerups: PowerUpState,
    current: Optional[BoardSnapshot] = None,
) -> UndoResult:
    """
    Restores the most recently recorded state as one atomic replacement.

    Tiles, score and the divider/doubler/swapper counters come from the
    recorded state; the undo counter is the current one minus the use just
    spent. The last remaining entry is kept, so repeated undos without an
    intervening move restore the same state.

    Args:
        history (GameHistory): Recorded states.
        powerups (PowerUpState): Current power-up state.
        current (Optional[BoardSnapshot]): The board being replaced. Its tile id
            counter is carried forward so ids are not reused.
    Returns:
        UndoResult: Restored snapshot, power-up state and history.
    Raises:
        Exhausted: The undo budget is 0.
        NoHistory: Nothing has been recorded yet.
    """
    _require_uses(powerups, PowerUpKind.UNDO)
    if not history.entries:
        raise NoHistory("There is no earlier state to restore.")

    entry = history.entries[-1]
    snapshot = entry.snapshot
    if current is not None and current.next_tile_id > snapshot.next_tile_id:
        snapshot = snapshot.model_copy(update={"next_tile_id": current.next_tile_id})

    restored = entry.powerups.model_copy(update={
        "undo": powerups.undo - 1,
        "selected_tile_id": None,
    })
    remaining = history.entries[:-1] if len(history.entries) > 1 else history.entries
    logger.debug("Undo: restored score %d, %d undo(s) left", snapshot.score, restored.undo)
    return UndoResult(snapshot, restored, history.model_copy(update={"entries": remaining}))


# --- Queries ---

def valid_targets(snapshot: BoardSnapshot, kind: PowerUpKind) -> List[str]:
    """Tile ids the power-up may be applied to."""
    if kind == PowerUpKind.DIVIDER:
        return [tile.id for tile in snapshot.tiles if tile.value > 2]
    if kind in (PowerUpKind.DOUBLER, PowerUpKind.SWAPPER):
        return [tile.id for tile in snapshot.tiles]
    return []
