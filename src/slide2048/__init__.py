"""
A stateless 2048 game engine with an HTTP API, a terminal driver and an optional AI move advisor.
"""

from slide2048.core import (
    Board,
    Cell,
    Direction,
    GameStatus,
    MoveCycleResult,
    MoveResult,
    apply_move,
    has_lost,
    has_won,
    initialize_board,
    play_move,
    spawn_tile,
)

__all__ = [
    "Board",
    "Cell",
    "Direction",
    "GameStatus",
    "MoveCycleResult",
    "MoveResult",
    "apply_move",
    "has_lost",
    "has_won",
    "initialize_board",
    "play_move",
    "spawn_tile",
]
