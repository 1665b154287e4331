# advisor.py
# Client for the language-model move advisor. Takes a board snapshot, returns a suggested direction.
# Nothing here touches game state; callers decide what to do with a suggestion or a failure.

import json
import logging
from typing import Callable, List, Optional, Sequence

import openai
from pydantic import BaseModel, Field

from slide2048.core import Cell, Direction, parse_direction, validate_board
from slide2048.settings import AdvisorSettings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a 2048 game strategy expert. "
    "Always respond with valid JSON containing a move direction and reasoning."
)

USER_PROMPT = """You are an expert 2048 game AI. Analyze the current board state and suggest the best move.

Current board state ({rows}x{cols} grid, null means empty cell):
{board_json}

Rules:
- Tiles slide in the chosen direction until blocked
- Adjacent tiles with the same value merge (2+2=4, etc.)
- Each tile can only merge once per move
- A new tile (2 or 4) appears after each move
- Goal: Reach 2048 tile while avoiding game over

Analyze the board and suggest ONE move from: left, right, up, or down.

Respond in JSON format:
{{
  "move": "left|right|up|down",
  "reasoning": "Brief explanation of why this is the best move"
}}"""

DEFAULT_REASONING = "No reasoning provided"


class MoveSuggestion(BaseModel):
    """A direction proposed by the advisor, with its explanation."""
    move: Direction = Field(..., description="Suggested move direction.")
    reasoning: str = Field(..., description="Free-text rationale from the advisor.")


# --- Errors ---

class AdvisorError(Exception):
    """Base class for advisor failures. status_code is the HTTP status the API answers with."""
    status_code = 503


class MissingCredentialError(AdvisorError):
    status_code = 400


class InvalidCredentialError(AdvisorError):
    status_code = 401


class AdvisorRateLimitedError(AdvisorError):
    status_code = 429


class InvalidSuggestionError(AdvisorError):
    """The advisor answered, but not with a usable suggestion."""
    status_code = 502


class AdvisorUnavailableError(AdvisorError):
    status_code = 503


# --- Snapshot and Prompt ---

def serialize_board(board: Sequence[Sequence[Cell]]) -> List[List[Optional[int]]]:
    """
    Produces the snapshot sent to the advisor: rows of nullable integers.
    Raises:
        ValueError: If the board is malformed.
    """
    validate_board(board)
    return [[None if cell is None else int(cell) for cell in row] for row in board]


def build_prompt(board: Sequence[Sequence[Cell]]) -> str:
    snapshot = serialize_board(board)
    return USER_PROMPT.format(
        rows=len(snapshot),
        cols=len(snapshot[0]),
        board_json=json.dumps(snapshot, indent=2),
    )


def parse_suggestion(content: Optional[str]) -> MoveSuggestion:
    """
    Parses the advisor's JSON reply into a MoveSuggestion.
    Args:
        content (str): Raw message content, expected to be a JSON object with "move" and "reasoning".
    Returns:
        MoveSuggestion: The validated suggestion.
    Raises:
        InvalidSuggestionError: If the reply is empty, not a JSON object, or names an unknown move.
    """
    if not content:
        raise InvalidSuggestionError("No response from AI")
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise InvalidSuggestionError(f"AI response is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise InvalidSuggestionError("AI response is not a JSON object")

    try:
        move = parse_direction(payload.get("move"))
    except ValueError as e:
        raise InvalidSuggestionError("Invalid move suggested by AI") from e

    reasoning = payload.get("reasoning")
    if not isinstance(reasoning, str) or not reasoning.strip():
        reasoning = DEFAULT_REASONING
    return MoveSuggestion(move=move, reasoning=reasoning)


def _reply_content(completion) -> Optional[str]:
    """Message text of the first choice, or None when the reply has no usable message."""
    choices = getattr(completion, "choices", None)
    if not choices:
        return None
    content = getattr(getattr(choices[0], "message", None), "content", None)
    return content if isinstance(content, str) else None


# --- Client ---

class MoveAdvisor:
    """
    Asks an OpenAI chat model for the next move.
    Args:
        settings (AdvisorSettings): Model, sampling and transport settings.
        client_factory (Callable): Builds an async OpenAI client from keyword arguments.
                                   Tests pass a fake here.
    """

    def __init__(self, settings: AdvisorSettings, client_factory: Callable = openai.AsyncOpenAI):
        self.settings = settings
        self._client_factory = client_factory

    def _resolve_key(self, api_key: Optional[str]) -> str:
        key = api_key or self.settings.api_key
        if not key:
            raise MissingCredentialError(
                "No API key provided. Please provide an API key or set OPENAI_API_KEY."
            )
        return key

    async def suggest(self, board: Sequence[Sequence[Cell]], api_key: Optional[str] = None) -> MoveSuggestion:
        """
        Requests a suggestion for the given board.
        Args:
            board (Sequence[Sequence[Cell]]): Current board snapshot.
            api_key (str, optional): Credential for this request; falls back to the configured key.
        Returns:
            MoveSuggestion: The advisor's move and reasoning.
        Raises:
            ValueError: If the board is malformed.
            AdvisorError: If the advisor cannot be reached or answers badly.
        """
        prompt = build_prompt(board)
        client = self._client_factory(
            api_key=self._resolve_key(api_key),
            timeout=self.settings.timeout,
            max_retries=self.settings.max_retries,
        )
        logger.debug("Requesting move suggestion from %s", self.settings.model)

        async with client:
            try:
                completion = await client.chat.completions.create(
                    model=self.settings.model,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    response_format={"type": "json_object"},
                    temperature=self.settings.temperature,
                    max_tokens=self.settings.max_tokens,
                )
            except openai.AuthenticationError as e:
                logger.warning("Advisor rejected the API key: %s", e)
                raise InvalidCredentialError("Invalid API key. Please check your OpenAI API key.") from e
            except openai.RateLimitError as e:
                logger.warning("Advisor rate limit hit: %s", e)
                raise AdvisorRateLimitedError("Rate limit exceeded. Please try again in a moment.") from e
            except openai.APIError as e:
                # Connection, timeout, status and response-validation errors
                logger.warning("Advisor request failed: %s", e)
                raise AdvisorUnavailableError("Failed to get AI suggestion. Please try again.") from e

        content = _reply_content(completion)
        try:
            return parse_suggestion(content)
        except InvalidSuggestionError:
            logger.warning("Discarding malformed advisor reply: %r", content)
            raise
