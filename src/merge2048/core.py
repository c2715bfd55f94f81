# core.py
# Stateless turn orchestration. The caller keeps the returned GameState and
# hands it back on the next call.

import logging
import random
from typing import NamedTuple, Optional

from pydantic import BaseModel, ConfigDict

from merge2048.board import BoardSnapshot, Direction, empty_snapshot
from merge2048.config import GameConfig
from merge2048.moves import move
from merge2048.powerups import (
    GameHistory,
    PowerUpKind,
    PowerUpState,
    apply_power_up,
    initial_power_ups,
    record,
)
from merge2048.spawn import spawn
from merge2048.status import GameProgressState, determine_game_status, has_won, is_game_over

logger = logging.getLogger(__name__)

INITIAL_TILES = 2


class GameState(BaseModel):
    """Everything that crosses turns for one game session."""
    model_config = ConfigDict(frozen=True)

    config: GameConfig
    snapshot: BoardSnapshot
    powerups: PowerUpState
    history: GameHistory
    won: bool = False
    game_over: bool = False

    @property
    def progress(self) -> GameProgressState:
        return determine_game_status(
            self.snapshot,
            self.powerups,
            self.config.win_tile,
            self.config.undo_blocks_game_over,
        )


class TurnResult(NamedTuple):
    state: GameState
    moved: bool


class PowerUpTurn(NamedTuple):
    state: GameState
    won: bool


def _evaluate(state: GameState, snapshot: BoardSnapshot, powerups: PowerUpState,
              history: GameHistory, won: bool = False) -> GameState:
    """Builds the next state and re-evaluates win and game-over flags."""
    config = state.config
    return state.model_copy(update={
        "snapshot": snapshot,
        "powerups": powerups,
        "history": history,
        "won": state.won or won or has_won(snapshot, config.win_tile),
        "game_over": is_game_over(snapshot, powerups, config.undo_blocks_game_over),
    })


def new_game(config: Optional[GameConfig] = None, rng: Optional[random.Random] = None) -> GameState:
    """
    Initializes a new game with two random tiles.
    Args:
        config (Optional[GameConfig]): Game settings. Defaults to GameConfig().
        rng (Optional[random.Random]): Injectable randomness for the initial spawns.
    Returns:
        GameState: The initial state with score 0 and full power-up budgets.
    """
    config = config or GameConfig()
    snapshot = empty_snapshot(config.grid_size)
    for _ in range(INITIAL_TILES):
        snapshot = spawn(snapshot, rng=rng)

    logger.info("New %dx%d game on %s", config.grid_size, config.grid_size, config.difficulty.value)
    return GameState(
        config=config,
        snapshot=snapshot,
        powerups=initial_power_ups(config.difficulty),
        history=GameHistory(depth=config.history_depth),
    )


def play_move(state: GameState, direction: Direction, rng: Optional[random.Random] = None) -> TurnResult:
    """
    Processes one move: slide and merge, spawn a tile if the board changed,
    remember the pre-move state for undo and re-evaluate the terminal flags.
    Args:
        state (GameState): The current state.
        direction (Direction): The direction to move.
        rng (Optional[random.Random]): Injectable randomness for the spawn.
    Returns:
        TurnResult: The next state and whether the move changed the board. An
        ineffective move returns the state unchanged.
    """
    result = move(state.snapshot, direction)
    if not result.moved:
        return TurnResult(state, False)

    snapshot = spawn(result.snapshot, rng=rng)
    # a pending swapper pick does not survive a move
    powerups = state.powerups.model_copy(update={"selected_tile_id": None})
    history = record(state.history, state.snapshot, state.powerups)
    return TurnResult(_evaluate(state, snapshot, powerups, history), True)


def use_power_up(state: GameState, kind: PowerUpKind, target_tile_id: Optional[str] = None) -> PowerUpTurn:
    """
    Applies a power-up and re-evaluates the terminal flags.

    The pre-application state is recorded for undo when the board changes.
    Raises:
        PowerUpError: The request was rejected; nothing changed.
    """
    history = state.history
    result = apply_power_up(
        state.snapshot,
        state.powerups,
        kind,
        target_tile_id,
        history=history,
        win_tile=state.config.win_tile,
    )

    if kind == PowerUpKind.UNDO:
        history = result.history
        # a restored board is judged on its own merits
        next_state = state.model_copy(update={"won": False})
        return PowerUpTurn(_evaluate(next_state, result.snapshot, result.powerups, history), False)

    if result.snapshot is not state.snapshot:
        history = record(history, state.snapshot, state.powerups)
    return PowerUpTurn(_evaluate(state, result.snapshot, result.powerups, history, result.won), result.won)


def undo_last(state: GameState) -> GameState:
    return use_power_up(state, PowerUpKind.UNDO).state
