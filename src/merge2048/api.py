import logging
import random
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from merge2048 import core
from merge2048.board import Difficulty, Direction
from merge2048.config import load_config
from merge2048.errors import PowerUpError
from merge2048.powerups import PowerUpKind
from merge2048.status import GameProgressState

logger = logging.getLogger(__name__)

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="Merge 2048 Game API",
    description="A stateless API for playing 2048 with power-ups. "\
                "Keep the returned game state on the client side and send it back with every request.",
    version="1.0.0"
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# --- Pydantic Models for API requests and responses ---

class NewGameSettings(BaseModel):
    """Settings for creating a new game. Omitted values fall back to MERGE2048_* settings."""
    size: Optional[int] = Field(
        default=None,
        description="Size of the N x N game board (4, 5 or 6)."
    )
    difficulty: Optional[Difficulty] = Field(
        default=None,
        description="Difficulty, which sets the power-up budgets."
    )
    win_tile: Optional[int] = Field(
        default=None,
        gt=0,
        description="The tile value to achieve for winning the game (e.g., 2048)."
    )
    seed: Optional[int] = Field(default=None, description="Seed for the initial tiles.")


class GameStateData(BaseModel):
    """Represents the complete state of a game instance."""
    state: core.GameState = Field(..., description="Full game state; send it back unchanged with the next request.")
    progress: GameProgressState = Field(
        ...,
        description="Current progress state of the game (IN_PROGRESS, GAME_WON, GAME_OVER)."
    )
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was invalid, game ended, or other info."
    )


class MoveRequestData(BaseModel):
    """Data required to make a move."""
    state: core.GameState = Field(..., description="Game state before the move.")
    direction: Direction = Field(
        ...,
        description="Direction of the move (up, down, left, right)."
    )
    seed: Optional[int] = Field(default=None, description="Seed for the spawned tile.")


class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    move_was_effective: bool = Field(
        ...,
        description="True if the move resulted in a change to the board state, False otherwise."
    )


class PowerUpRequestData(BaseModel):
    """Data required to apply a power-up."""
    state: core.GameState
    kind: PowerUpKind = Field(..., description="divider, doubler, swapper or undo.")
    target_tile_id: Optional[str] = Field(default=None, description="Tile to act on; not used by undo.")


class UndoRequestData(BaseModel):
    state: core.GameState


class PowerUpResponseData(GameStateData):
    won: bool = Field(default=False, description="True if the doubler produced a winning tile.")


def _status_message(state: core.GameState) -> Optional[str]:
    progress = state.progress
    if progress == GameProgressState.GAME_WON:
        return "Congratulations! You won!"
    if progress == GameProgressState.GAME_OVER:
        return "Game Over. No more valid moves or power-ups."
    return None


def _power_up_error(e: PowerUpError) -> HTTPException:
    return HTTPException(status_code=400, detail=f"{e.kind}: {e}")

# --- API Endpoints ---

@app.post("/game/new", response_model=GameStateData, summary="Start a New Game")
@limiter.limit("100/minute")
async def start_new_game(request: Request, settings: NewGameSettings):
    """
    Initializes a new game based on the provided settings.

    - **size**: Dimension of the N x N board (4, 5 or 6).
    - **difficulty**: easy, medium or hard.
    - **win_tile**: Tile value to reach to win (e.g., 2048).

    Returns the initial game state with two random tiles, score 0, full
    power-up budgets and an empty undo history.
    """
    try:
        config = load_config(
            grid_size=settings.size,
            difficulty=settings.difficulty,
            win_tile=settings.win_tile,
        )
        rng = random.Random(settings.seed) if settings.seed is not None else None
        state = core.new_game(config, rng)
        return GameStateData(state=state, progress=state.progress)
    except ValueError as e:
        # Invalid settings, including pydantic validation errors from load_config
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Unexpected error in /game/new: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")


@app.post("/game/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit("100/minute")
async def make_move(request: Request, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    The API will:
    1. Slide and merge the tiles.
    2. If the move changed the board, add a new random tile.
    3. Determine the new game status (IN_PROGRESS, GAME_WON, GAME_OVER).

    Returns the updated game state, whether the move was effective, and an optional message.
    """
    try:
        rng = random.Random(request_data.seed) if request_data.seed is not None else None
        state, moved = core.play_move(request_data.state, request_data.direction, rng)

        message_for_client = _status_message(state)
        if not moved and message_for_client is None:
            message_for_client = "Move was not effective; board state unchanged by slide."

        return MoveResponseData(
            state=state,
            progress=state.progress,
            move_was_effective=moved,
            message=message_for_client,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Error processing move: {str(e)}")
    except Exception as e:
        logger.error("Unexpected error in /game/move: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")


@app.post("/game/power-up", response_model=PowerUpResponseData, summary="Apply a Power-Up")
@limiter.limit("100/minute")
async def apply_power_up(request: Request, request_data: PowerUpRequestData):
    """
    Applies a divider, doubler, swapper or undo.

    The swapper takes two requests: the first selects a tile, the second swaps
    it with another one. Rejected requests return 400 and the caller keeps its
    current state.
    """
    try:
        state, won = core.use_power_up(request_data.state, request_data.kind, request_data.target_tile_id)
        return PowerUpResponseData(
            state=state,
            progress=state.progress,
            won=won,
            message=_status_message(state),
        )
    except PowerUpError as e:
        raise _power_up_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Error applying power-up: {str(e)}")
    except Exception as e:
        logger.error("Unexpected error in /game/power-up: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while applying the power-up: {str(e)}")


@app.post("/game/undo", response_model=GameStateData, summary="Undo the Last Move")
@limiter.limit("100/minute")
async def undo_move(request: Request, request_data: UndoRequestData):
    """
    Restores the state recorded before the last move, spending one undo.
    """
    try:
        state = core.undo_last(request_data.state)
        return GameStateData(state=state, progress=state.progress, message=_status_message(state))
    except PowerUpError as e:
        raise _power_up_error(e)
    except Exception as e:
        logger.error("Unexpected error in /game/undo: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred during undo: {str(e)}")
