# config.py
# Game settings and logging setup.

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from merge2048.board import DEFAULT_WIN_TILE, Difficulty, is_power_of_two

SUPPORTED_GRID_SIZES = (4, 5, 6)
ENV_PREFIX = "MERGE2048_"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class GameConfig(BaseModel):
    """Settings fixed at game start."""
    model_config = ConfigDict(frozen=True)

    grid_size: int = Field(
        default=4,
        description="Dimension of the N x N board (4, 5 or 6).",
    )
    difficulty: Difficulty = Field(
        default=Difficulty.MEDIUM,
        description="Sets the power-up budgets (Easy 3, Medium 2, Hard 1).",
    )
    win_tile: int = Field(
        default=DEFAULT_WIN_TILE,
        description="Tile value that wins the game.",
    )
    history_depth: int = Field(
        default=1,
        ge=1,
        description="Number of earlier states kept for undo.",
    )
    undo_blocks_game_over: bool = Field(
        default=False,
        description="Whether remaining undo uses keep a stuck game alive.",
    )
    log_level: str = Field(default="WARNING")

    @field_validator("grid_size")
    @classmethod
    def _supported_grid_size(cls, value: int) -> int:
        if value not in SUPPORTED_GRID_SIZES:
            raise ValueError(f"Grid size must be one of {SUPPORTED_GRID_SIZES}, got {value}.")
        return value

    @field_validator("win_tile")
    @classmethod
    def _win_tile_power_of_two(cls, value: int) -> int:
        if not is_power_of_two(value):
            raise ValueError(f"Win tile must be a power of two >= 2, got {value}.")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level {value!r}.")
        return level


def load_config(environ: Optional[Mapping[str, str]] = None, **overrides) -> GameConfig:
    """
    Builds a GameConfig from MERGE2048_* environment variables.
    Args:
        environ (Optional[Mapping[str, str]]): Variables to read. Defaults to os.environ.
        **overrides: Values that take precedence over the environment (None is ignored).
    Returns:
        GameConfig: The validated settings.
    Raises:
        pydantic.ValidationError: If a value is invalid.
    """
    environ = os.environ if environ is None else environ
    values = {}
    for field_name in GameConfig.model_fields:
        raw = environ.get(ENV_PREFIX + field_name.upper())
        if raw is not None:
            values[field_name] = raw
    values.update({key: value for key, value in overrides.items() if value is not None})
    return GameConfig.model_validate(values)


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
