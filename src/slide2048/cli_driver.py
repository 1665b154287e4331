# cli_driver.py
# This file is intended to be run to play the 2048 game on the CLI

import asyncio
import logging
import random
from typing import Callable, List, Optional

from slide2048.advisor import AdvisorError, MoveAdvisor
from slide2048.core import (
    Cell,
    Direction,
    GameStatus,
    initialize_board,
    legal_moves,
    play_move,
)
from slide2048.settings import AdvisorSettings, WIN_TILE, configure_logging

logger = logging.getLogger(__name__)

DIRECTION_KEYS = {'W': Direction.UP, 'A': Direction.LEFT, 'S': Direction.DOWN, 'D': Direction.RIGHT}


def ask_advisor(advisor: MoveAdvisor, board: List[List[Cell]]) -> Optional[str]:
    """
    Fetches a hint, giving up after the advisor's timeout.
    Returns:
        Optional[str]: A printable hint, or None if the advisor failed.
    """
    try:
        suggestion = asyncio.run(asyncio.wait_for(advisor.suggest(board), advisor.settings.timeout))
    except asyncio.TimeoutError:
        logger.warning("Advisor did not answer within %ss", advisor.settings.timeout)
        return None
    except AdvisorError as e:
        logger.warning("Advisor unavailable: %s", e)
        return None
    return f"Advisor suggests {suggestion.move.value.upper()}: {suggestion.reasoning}"


def run_game(
    rng: Optional[random.Random] = None,
    advisor: Optional[MoveAdvisor] = None,
    read_input: Callable[[str], str] = input,
) -> GameStatus:
    rng = rng or random.Random()
    advisor = advisor or MoveAdvisor(AdvisorSettings.from_env())

    # 1. Initialize game
    current_board = initialize_board(rng=rng)
    current_status = GameStatus.PLAYING
    display_board_state(current_board, current_status)

    # 2. Game Loop
    while current_status == GameStatus.PLAYING:
        move_input = read_input("Enter move (W/A/S/D for Up/Left/Down/Right, H for a hint, Q to quit): ").strip().upper()

        if move_input == 'Q':
            print("Quitting game.")
            break

        if move_input == 'H':
            hint = ask_advisor(advisor, current_board)
            print(hint or "No hint available right now. Keep playing!")
            continue

        chosen_direction = DIRECTION_KEYS.get(move_input)
        if not chosen_direction:
            print("Invalid input. Use W, A, S, D.")
            continue

        # 3. Run the move cycle (move, win check, spawn, loss check)
        result = play_move(current_board, chosen_direction, current_status, rng=rng, win_tile=WIN_TILE)
        if not result.changed:
            print("Move did not change the board. Try a different direction.")
            continue

        current_board, current_status = result.board, result.status
        display_board_state(current_board, current_status)

    # 4. Game Ended
    if current_status == GameStatus.WON:
        print(f"Congratulations! You reached the {WIN_TILE} tile!")
    elif current_status == GameStatus.LOST:
        print("No more moves possible. Better luck next time!")
    return current_status


def main():
    configure_logging()
    run_game()


# --- Display Function ---
def display_board_state(board: List[List[Cell]], status: GameStatus):
    """Prints the board, game status and available moves to the console."""
    status_message = {
        GameStatus.PLAYING: f"Status: {status.name}",
        GameStatus.WON: "YOU WON!",
        GameStatus.LOST: "GAME OVER!"
    }
    print()
    print(status_message[status])

    for row in board:
        print("\t".join("." if cell is None else str(cell) for cell in row))
    print("-" * (len(board[0]) * 6))

    if status == GameStatus.PLAYING:
        moves = legal_moves(board)
        if moves:
            print("Moves available: " + ", ".join(d.value for d in moves))
        else:
            print("No move changes this board.")


if __name__ == "__main__":
    main()
