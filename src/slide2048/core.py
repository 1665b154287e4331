# core.py
# Stateless board engine for the 2048 game: sliding, merging, spawning and endgame checks.
# Every function returns a fresh board and never mutates its input.

from enum import Enum
from typing import List, NamedTuple, Optional, Sequence, Tuple
import random

from slide2048.settings import BOARD_COLS, BOARD_ROWS, INITIAL_TILE, SPAWN_VALUES, WIN_TILE

Cell = Optional[int]
Row = List[Cell]
Board = List[Row]


class GameStatus(str, Enum):
    """Represents the current progress state of the game."""
    PLAYING = "playing"
    WON = "won"  # Terminal
    LOST = "lost"  # Terminal


class Direction(str, Enum):
    """Represents the possible move directions."""
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


class MoveResult(NamedTuple):
    board: Board
    changed: bool


class MoveCycleResult(NamedTuple):
    board: Board
    status: GameStatus
    changed: bool
    spawned: bool


# --- Validation ---

def get_board_shape(board: Sequence[Sequence[Cell]]) -> Tuple[int, int]:
    """
    Gets the (rows, cols) shape of a board.
    Args:
        board (Sequence[Sequence[Cell]]): The game board.
    Returns:
        Tuple[int, int]: Number of rows and number of columns.
    Raises:
        ValueError: If the board is empty or not rectangular.
    """
    if not board or not board[0]:
        raise ValueError("Board must have at least one row and one column.")
    cols = len(board[0])
    if not all(len(row) == cols for row in board):
        raise ValueError("Board must be rectangular (every row the same length).")
    return len(board), cols


def _is_valid_cell(cell: Cell) -> bool:
    if cell is None:
        return True
    if isinstance(cell, bool) or not isinstance(cell, int):
        return False
    return cell >= 2 and cell & (cell - 1) == 0


def validate_board(board: Sequence[Sequence[Cell]]) -> Tuple[int, int]:
    """
    Checks that a board is rectangular and holds only empty cells or powers of two.
    Args:
        board (Sequence[Sequence[Cell]]): The board to check.
    Returns:
        Tuple[int, int]: The (rows, cols) shape of the board.
    Raises:
        ValueError: If the board is malformed.
    """
    shape = get_board_shape(board)
    for r, row in enumerate(board):
        for c, cell in enumerate(row):
            if not _is_valid_cell(cell):
                raise ValueError(
                    f"Invalid cell value {cell!r} at ({r}, {c}); expected None or a power of two of at least 2."
                )
    return shape


def parse_direction(value) -> Direction:
    """
    Converts a wire value such as "Left" into a Direction.
    Raises:
        ValueError: If the value is not one of left, right, up, down.
    """
    if isinstance(value, Direction):
        return value
    if isinstance(value, str):
        try:
            return Direction(value.strip().lower())
        except ValueError:
            pass
    raise ValueError(f"Invalid direction {value!r}; expected one of {[d.value for d in Direction]}.")


def get_empty_cells(board: Sequence[Sequence[Cell]]) -> List[Tuple[int, int]]:
    """
    Get coordinates of empty cells in the given board, in row-major order.
    Args:
        board (Sequence[Sequence[Cell]]): The board to check.
    Returns:
        List[Tuple[int, int]]: List of (row, col) tuples for empty cells.
    """
    return [
        (r, c)
        for r, row in enumerate(board)
        for c, cell in enumerate(row)
        if cell is None
    ]


def copy_board(board: Sequence[Sequence[Cell]]) -> Board:
    return [list(row) for row in board]


# --- Line Manipulation ---

def slide_row_left(row: Sequence[Cell]) -> Tuple[Row, bool]:
    """
    Slides and merges a single line toward index 0.
    Each source tile takes part in at most one merge, so [2, 2, 2] becomes [4, 2], never [8].
    Args:
        row (Sequence[Cell]): The line to process (a row, or a column after transposing).
    Returns:
        Tuple[Row, bool]: The new line, padded with None to the original length,
                          and whether it differs from the input.
    """
    tiles = [cell for cell in row if cell is not None]
    result: Row = []
    merged = False
    i = 0

    while i < len(tiles):
        if i + 1 < len(tiles) and tiles[i] == tiles[i + 1]:
            result.append(tiles[i] * 2)
            merged = True
            i += 2  # Both source tiles are consumed
        else:
            result.append(tiles[i])
            i += 1

    result += [None] * (len(row) - len(result))
    changed = merged or any(before != after for before, after in zip(row, result))
    return result, changed


# --- Board Transformations ---

def reverse_row(row: Sequence[Cell]) -> Row:
    return list(reversed(row))


def reverse_rows(board: Sequence[Sequence[Cell]]) -> Board:
    """Reverses each row in a given board, returning a new board."""
    return [reverse_row(row) for row in board]


def transpose_board(board: Sequence[Sequence[Cell]]) -> Board:
    """
    Transposes a board (swaps rows and columns); an R x C board becomes C x R.
    Args:
        board (Sequence[Sequence[Cell]]): The board to transpose.
    Returns:
        Board: A new transposed board.
    """
    if not board:
        return []
    return [[row[c] for row in board] for c in range(len(board[0]))]


# --- Core Game Move Processing ---

def move_left(board: Sequence[Sequence[Cell]]) -> MoveResult:
    new_board: Board = []
    any_changed = False
    for row in board:
        new_row, changed = slide_row_left(row)
        new_board.append(new_row)
        any_changed = any_changed or changed
    return MoveResult(new_board, any_changed)


def move_right(board: Sequence[Sequence[Cell]]) -> MoveResult:
    moved, changed = move_left(reverse_rows(board))
    return MoveResult(reverse_rows(moved), changed)


def move_up(board: Sequence[Sequence[Cell]]) -> MoveResult:
    moved, changed = move_left(transpose_board(board))
    return MoveResult(transpose_board(moved), changed)


def move_down(board: Sequence[Sequence[Cell]]) -> MoveResult:
    moved, changed = move_right(transpose_board(board))
    return MoveResult(transpose_board(moved), changed)


_MOVES = {
    Direction.LEFT: move_left,
    Direction.RIGHT: move_right,
    Direction.UP: move_up,
    Direction.DOWN: move_down,
}


def apply_move(board: Sequence[Sequence[Cell]], direction: Direction) -> MoveResult:
    """
    Processes a move in the specified direction.
    Args:
        board (Sequence[Sequence[Cell]]): The current game board. Not modified.
        direction (Direction): The direction to move.
    Returns:
        MoveResult: The new board and whether the move changed any cell.
                    When nothing changed the new board equals the input cell for cell.
    Raises:
        ValueError: If the board is malformed or the direction is not a Direction.
    """
    if not isinstance(direction, Direction):
        raise ValueError(f"Invalid direction specified for apply_move: {direction!r}")
    validate_board(board)
    return _MOVES[direction](board)


def legal_moves(board: Sequence[Sequence[Cell]]) -> List[Direction]:
    """
    Lists the directions that would change the board, in Direction order.
    Args:
        board (Sequence[Sequence[Cell]]): The game board.
    Returns:
        List[Direction]: Directions whose move is effective.
    """
    validate_board(board)
    return [direction for direction in Direction if _MOVES[direction](board).changed]


def is_any_move_possible(board: Sequence[Sequence[Cell]]) -> bool:
    return bool(legal_moves(board))


# --- Random Population ---

def spawn_tile(board: Sequence[Sequence[Cell]], rng: Optional[random.Random] = None) -> Optional[Board]:
    """
    Adds a new tile (2 or 4 with equal probability) to a uniformly chosen empty cell.
    Args:
        board (Sequence[Sequence[Cell]]): The current game board. Not modified.
        rng (random.Random, optional): Source of randomness. A fresh generator is used if omitted.
    Returns:
        Optional[Board]: A new board with the added tile, or None if there is no empty cell.
    Raises:
        ValueError: If the board is malformed.
    """
    validate_board(board)
    empty_cells = get_empty_cells(board)
    if not empty_cells:
        return None

    if rng is None:
        rng = random.Random()
    row, col = rng.choice(empty_cells)
    new_board = copy_board(board)
    new_board[row][col] = rng.choice(SPAWN_VALUES)
    return new_board


def initialize_board(
    rows: int = BOARD_ROWS,
    cols: int = BOARD_COLS,
    rng: Optional[random.Random] = None,
    min_tiles: int = 0,
) -> Board:
    """
    Initializes a new game board with a random number of 2-tiles at distinct random positions.
    The tile count is drawn uniformly from [min_tiles, rows * cols]; with min_tiles=0
    an all-empty board is a legal start.
    Args:
        rows (int): Number of rows. Default is 4.
        cols (int): Number of columns. Default is 4.
        rng (random.Random, optional): Source of randomness. A fresh generator is used if omitted.
        min_tiles (int): Smallest number of seed tiles. Default is 0.
    Returns:
        Board: The starting board.
    Raises:
        ValueError: If the dimensions are not positive or min_tiles is out of range.
    """
    for name, value in (("rows", rows), ("cols", cols)):
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(f"Board {name} must be a positive integer.")
    if not 0 <= min_tiles <= rows * cols:
        raise ValueError(f"min_tiles must be between 0 and {rows * cols}.")

    if rng is None:
        rng = random.Random()
    board: Board = [[None] * cols for _ in range(rows)]
    positions = [(r, c) for r in range(rows) for c in range(cols)]
    count = rng.randint(min_tiles, len(positions))
    for row, col in rng.sample(positions, count):
        board[row][col] = INITIAL_TILE
    return board


# --- Game State Checks ---

def has_won(board: Sequence[Sequence[Cell]], win_tile: int = WIN_TILE) -> bool:
    """True if any cell holds the goal value."""
    validate_board(board)
    return any(cell == win_tile for row in board for cell in row)


def is_full(board: Sequence[Sequence[Cell]]) -> bool:
    validate_board(board)
    return all(cell is not None for row in board for cell in row)


def has_adjacent_equal_pair(board: Sequence[Sequence[Cell]]) -> bool:
    """
    Checks for two horizontally or vertically adjacent cells holding the same tile.
    Args:
        board (Sequence[Sequence[Cell]]): The game board.
    Returns:
        bool: True if at least one such pair exists. Empty cells never pair.
    """
    rows, cols = validate_board(board)
    for r in range(rows):
        for c in range(cols):
            cell = board[r][c]
            if cell is None:
                continue
            if c + 1 < cols and board[r][c + 1] == cell:
                return True
            if r + 1 < rows and board[r + 1][c] == cell:
                return True
    return False


def has_lost(board: Sequence[Sequence[Cell]]) -> bool:
    """
    Checks the loss condition: the board is full and no adjacent pair can merge.
    A board with an empty cell is never a loss.
    """
    return is_full(board) and not has_adjacent_equal_pair(board)


# --- Move Cycle ---

def play_move(
    board: Sequence[Sequence[Cell]],
    direction: Direction,
    status: GameStatus = GameStatus.PLAYING,
    rng: Optional[random.Random] = None,
    win_tile: int = WIN_TILE,
) -> MoveCycleResult:
    """
    Runs one full move cycle: move, win check, spawn, loss check.
    Args:
        board (Sequence[Sequence[Cell]]): The current game board. Not modified.
        direction (Direction): The direction to move.
        status (GameStatus): The status before the move. Terminal statuses ignore the move.
        rng (random.Random, optional): Source of randomness for the spawned tile.
        win_tile (int): The goal value. Default is 2048.
    Returns:
        MoveCycleResult: The resulting board, status, whether the move changed the board,
                         and whether a tile was spawned.
    Raises:
        ValueError: If the board is malformed or the direction is not a Direction.
    """
    if status != GameStatus.PLAYING:
        validate_board(board)
        return MoveCycleResult(copy_board(board), status, False, False)

    moved, changed = apply_move(board, direction)
    if not changed:
        return MoveCycleResult(moved, status, False, False)

    if has_won(moved, win_tile):
        return MoveCycleResult(moved, GameStatus.WON, True, False)

    spawned = spawn_tile(moved, rng)
    final_board = spawned if spawned is not None else moved
    next_status = GameStatus.LOST if has_lost(final_board) else GameStatus.PLAYING
    return MoveCycleResult(final_board, next_status, True, spawned is not None)
