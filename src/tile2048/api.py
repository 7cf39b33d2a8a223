import logging
import os
import random

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from typing import List, Optional
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from tile2048 import core

logger = logging.getLogger(__name__)

RATE_LIMIT = os.environ.get("TILE2048_RATE_LIMIT", "100/minute")

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="2048 Game API",
    description="A stateless API for playing the 2048 game. "\
                "Manage your game state (board, score) on the client side.",
    version="1.0.0"
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# --- Pydantic Models for API requests and responses ---

class NewGameSettings(BaseModel):
    """Settings for creating a new game."""
    seed: Optional[int] = Field(
        default=None,
        description="Seed for the tile spawner, for reproducible openings."
    )

class GameStateData(BaseModel):
    """Represents the complete state of a game instance."""
    board: List[List[int]] = Field(..., description="The 4 x 4 game board, represented as a list of lists.")
    score: int = Field(..., ge=0, description="Current score of the game.")
    progress: core.GameProgressState = Field(
        ...,
        description="Current progress state of the game (IN_PROGRESS, GAME_OVER)."
    )
    board_size: int = Field(default=core.BOARD_SIZE, description="The dimension N of the N x N board.")


class MoveRequestData(BaseModel):
    """Data required to make a move."""
    board: List[List[int]] = Field(..., description="Current 4 x 4 game board state before the move.")
    score: int = Field(..., ge=0, description="Current score before the move.")
    direction: core.DIRECTION = Field(
        ...,
        description="Direction of the move (up, down, left, right)."
    )

class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    move_was_effective: bool = Field(
        ...,
        description="True if the move resulted in a change to the board state, False otherwise."
    )
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g. if a move was not effective or the game ended."
    )

# --- API Endpoints ---

@app.post("/game/new", response_model=GameStateData, summary="Start a New 2048 Game")
@limiter.limit(RATE_LIMIT)
async def start_new_game(request: Request, settings: Optional[NewGameSettings] = None):
    """
    Starts a new 2048 game.

    - **seed**: Optional seed for the tile spawner.

    Returns the initial game state: the board with two random tiles,
    score (0) and progress status (IN_PROGRESS).
    """
    rng = None
    if settings is not None and settings.seed is not None:
        rng = random.Random(settings.seed)

    try:
        state = core.new_game(rng)
    except Exception as e:
        logger.error("Unexpected error in /game/new: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")

    return GameStateData(
        board=state.board,
        score=state.score,
        progress=state.progress,
        board_size=core.BOARD_SIZE
    )


@app.post("/game/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit(RATE_LIMIT)
async def make_move(request: Request, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    Requires the current `board` state, `score` and the `direction` of the move.

    The API will:
    1. Attempt to process the move (slide tiles, merge).
    2. If the move changed the board, add a new random tile (2 or 4).
    3. Determine the new game status (IN_PROGRESS, GAME_OVER).

    Returns the updated game state, whether the move was effective, and an optional message.
    """
    try:
        board_size_from_request = core.validate_board(request_data.board)
        current_state = core.GameState(
            board=request_data.board,
            score=request_data.score,
            progress=core.determine_game_status(request_data.board),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid board structure in request: {str(e)}")

    message_for_client: Optional[str] = None

    try:
        next_state, move_was_effective = core.play_move(current_state, request_data.direction)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Error processing move: {str(e)}")
    except Exception as e:
        logger.error("Unexpected error in /game/move: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")

    if not move_was_effective:
        message_for_client = "Move was not effective; board state unchanged by slide."
    if next_state.progress == core.GameProgressState.GAME_OVER:
        message_for_client = "Game Over. No more valid moves."

    return MoveResponseData(
        board=next_state.board,
        score=next_state.score,
        progress=next_state.progress,
        board_size=board_size_from_request,
        move_was_effective=move_was_effective,
        message=message_for_client
    )
