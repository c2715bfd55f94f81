"""Tile-merging puzzle engine with power-ups."""

from merge2048.board import BoardSnapshot, Difficulty, Direction, Position, Tile
from merge2048.core import GameState, new_game, play_move, use_power_up
from merge2048.errors import Exhausted, InvalidTarget, NoHistory, PowerUpError
from merge2048.moves import move
from merge2048.powerups import GameHistory, PowerUpKind, PowerUpState, apply_power_up, undo
from merge2048.spawn import spawn
from merge2048.status import GameProgressState, is_game_over

__version__ = "1.0.0"

__all__ = [
    "BoardSnapshot",
    "Difficulty",
    "Direction",
    "Exhausted",
    "GameHistory",
    "GameProgressState",
    "GameState",
    "InvalidTarget",
    "NoHistory",
    "Position",
    "PowerUpError",
    "PowerUpKind",
    "PowerUpState",
    "Tile",
    "apply_power_up",
    "is_game_over",
    "move",
    "new_game",
    "play_move",
    "spawn",
    "undo",
    "use_power_up",
]
