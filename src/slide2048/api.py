import logging
import random
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, Field, StrictInt
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from slide2048 import core
from slide2048.advisor import AdvisorError, MoveAdvisor, MoveSuggestion
from slide2048.settings import AdvisorSettings, BOARD_COLS, BOARD_ROWS, RATE_LIMIT, WIN_TILE

logger = logging.getLogger(__name__)

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="2048 Game API",
    description="A stateless API for playing the 2048 game. "\
                "Manage your game state (board, status, win_tile) on the client side.",
    version="1.0.0"
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

BoardRows = List[List[Optional[StrictInt]]]


def get_advisor() -> MoveAdvisor:
    """Dependency providing the move advisor, configured from the environment."""
    return MoveAdvisor(AdvisorSettings.from_env())


def _make_rng(seed: Optional[int]) -> random.Random:
    return random.Random(seed)

# --- Pydantic Models for API requests and responses ---

class NewGameSettings(BaseModel):
    """Settings for creating a new game."""
    rows: int = Field(default=BOARD_ROWS, gt=0, description="Number of board rows.")
    cols: int = Field(default=BOARD_COLS, gt=0, description="Number of board columns.")
    win_tile: int = Field(
        default=WIN_TILE,
        gt=0,
        description="The tile value to achieve for winning the game (e.g., 2048)."
    )
    min_tiles: int = Field(
        default=0,
        ge=0,
        description="Smallest number of starting 2-tiles. 0 allows an empty start board."
    )
    seed: Optional[int] = Field(default=None, description="Seed for a reproducible start board.")


class GameStateData(BaseModel):
    """Represents the complete state of a game instance."""
    board: BoardRows = Field(..., description="The game board, rows of nullable integers (null = empty).")
    status: core.GameStatus = Field(..., description="Current game status (playing, won, lost).")
    win_tile: int = Field(..., gt=0, description="The tile value required to win this game instance.")
    rows: int = Field(..., gt=0)
    cols: int = Field(..., gt=0)
    legal_moves: List[core.Direction] = Field(
        ...,
        description="Directions that would change the board. Empty while the game is over."
    )


class MoveRequestData(BaseModel):
    """Data required to make a move."""
    board: BoardRows = Field(..., description="Current game board state before the move.")
    direction: core.Direction = Field(..., description="Direction of the move (left, right, up, down).")
    status: core.GameStatus = Field(
        default=core.GameStatus.PLAYING,
        description="Game status before the move. Moves are ignored unless it is 'playing'."
    )
    win_tile: int = Field(default=WIN_TILE, gt=0, description="The win condition tile for this game instance.")
    seed: Optional[int] = Field(default=None, description="Seed for a reproducible tile spawn.")


class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    move_was_effective: bool = Field(
        ...,
        description="True if the move resulted in a change to the board state, False otherwise."
    )
    tile_spawned: bool = Field(..., description="True if a new tile was placed after the move.")
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was ignored or the game ended."
    )


class SuggestMoveRequest(BaseModel):
    """Board snapshot sent to the move advisor."""
    board: BoardRows = Field(..., description="Current game board state.")
    api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key for this request. Falls back to the server's OPENAI_API_KEY."
    )


def _state_payload(board, status: core.GameStatus, win_tile: int) -> dict:
    rows, cols = core.get_board_shape(board)
    moves = core.legal_moves(board) if status == core.GameStatus.PLAYING else []
    return dict(board=board, status=status, win_tile=win_tile, rows=rows, cols=cols, legal_moves=moves)

# --- API Endpoints ---

@app.post("/game/new", response_model=GameStateData, summary="Start a New 2048 Game")
@limiter.limit(RATE_LIMIT)
async def start_new_game(request: Request, settings: NewGameSettings):
    """
    Initializes a new 2048 game based on the provided settings.

    - **rows** / **cols**: Board dimensions. Default is 4 x 4.
    - **win_tile**: Tile value to reach to win. Default is 2048.
    - **min_tiles**: Lower bound on the random number of starting 2-tiles.

    Returns the initial board and status (playing).
    """
    try:
        initial_board = core.initialize_board(
            settings.rows, settings.cols, rng=_make_rng(settings.seed), min_tiles=settings.min_tiles
        )
        return GameStateData(**_state_payload(initial_board, core.GameStatus.PLAYING, settings.win_tile))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Unexpected error in /game/new")
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")


@app.post("/game/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit(RATE_LIMIT)
async def make_move(request: Request, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    The API will:
    1. Ignore the move if the game is already won or lost.
    2. Slide and merge tiles in the chosen direction.
    3. If the board changed and the goal tile appeared, report a win.
    4. Otherwise add a new random tile (2 or 4) and check for a loss.
    """
    try:
        core.validate_board(request_data.board)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid board structure in request: {str(e)}")

    try:
        result = core.play_move(
            request_data.board,
            request_data.direction,
            status=request_data.status,
            rng=_make_rng(request_data.seed),
            win_tile=request_data.win_tile,
        )

        message_for_client: Optional[str] = None
        if request_data.status != core.GameStatus.PLAYING:
            message_for_client = f"Game is already {request_data.status.value}; move ignored."
        elif not result.changed:
            message_for_client = "Move was not effective; board state unchanged."
        elif result.status == core.GameStatus.WON:
            message_for_client = "Congratulations! You won!"
        elif result.status == core.GameStatus.LOST:
            message_for_client = "Game Over. No more valid moves."

        return MoveResponseData(
            **_state_payload(result.board, result.status, request_data.win_tile),
            move_was_effective=result.changed,
            tile_spawned=result.spawned,
            message=message_for_client
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Error processing move: {str(e)}")
    except Exception as e:
        logger.exception("Unexpected error in /game/move")
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")


@app.post("/game/suggest-move", response_model=MoveSuggestion, summary="Ask the AI Advisor for a Move")
@limiter.limit(RATE_LIMIT)
async def suggest_move(
    request: Request,
    request_data: SuggestMoveRequest,
    advisor: MoveAdvisor = Depends(get_advisor),
):
    """
    Asks the language-model advisor which direction to play next.

    The suggestion is advice only: it never changes the game, and clients
    should keep playing normally if this endpoint fails.
    """
    try:
        return await advisor.suggest(request_data.board, api_key=request_data.api_key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid board structure in request: {str(e)}")
    except AdvisorError as e:
        logger.warning("Move suggestion failed (%s): %s", type(e).__name__, e)
        raise HTTPException(status_code=e.status_code, detail=str(e))
