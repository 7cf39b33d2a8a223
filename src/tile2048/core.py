# core.py
# Stateless rule engine for a 4x4 game of 2048. Every function takes a board and
# returns a new one; the caller owns the running score and the game state.

import logging
import random
from enum import Enum
from typing import List, NamedTuple, Tuple, Union

logger = logging.getLogger(__name__)

BOARD_SIZE = 4
TILE_VALUES = (2, 4)
TILE_PROBABILITIES = (0.9, 0.1)

Board = List[List[int]]


class InvalidBoard(ValueError):
    """Raised when a board is not a BOARD_SIZE x BOARD_SIZE grid of tile values."""


class InvalidDirection(ValueError):
    """Raised when a move direction is not one of up, down, left or right."""


class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    IN_PROGRESS = "IN_PROGRESS"
    GAME_OVER = "GAME_OVER"  # No legal move remains


class DIRECTION(Enum):
    """Represents the possible move directions."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class MoveResult(NamedTuple):
    board: Board
    score_delta: int
    changed: bool


class GameState(NamedTuple):
    board: Board
    score: int
    progress: GameProgressState

# --- Board Helper Functions ---

def create_empty_board() -> Board:
    """Returns a new BOARD_SIZE x BOARD_SIZE board with every cell empty."""
    return [[0] * BOARD_SIZE for _ in range(BOARD_SIZE)]

def _is_tile_value(value) -> bool:
    if not isinstance(value, int) or isinstance(value, bool):
        return False
    return value == 0 or (value >= 2 and value & (value - 1) == 0)

def get_board_size(board: Board) -> int:
    """
    Gets the size (N) of an N x N board.
    Args:
        board (Board): The game board.
    Returns:
        int: The dimension of the board.
    Raises:
        InvalidBoard: If the board is empty, not square, or not BOARD_SIZE wide.
    """
    if not isinstance(board, (list, tuple)) or not board:
        raise InvalidBoard("Board must be a non-empty square matrix.")
    if not all(isinstance(row, (list, tuple)) and len(row) == len(board) for row in board):
        raise InvalidBoard("Board must be a non-empty square matrix.")
    if len(board) != BOARD_SIZE:
        raise InvalidBoard(f"Board must be {BOARD_SIZE}x{BOARD_SIZE}, got {len(board)}x{len(board)}.")
    return len(board)

def validate_board(board: Board) -> int:
    """
    Checks the board's shape and that every cell holds 0 or a power of two >= 2.
    Args:
        board (Board): The game board.
    Returns:
        int: The dimension of the board.
    Raises:
        InvalidBoard: If the shape or any cell value is invalid.
    """
    n = get_board_size(board)
    for r, row in enumerate(board):
        for c, value in enumerate(row):
            if not _is_tile_value(value):
                raise InvalidBoard(f"Invalid tile value {value!r} at ({r}, {c}).")
    return n

def get_empty_cells(board: Board) -> List[Tuple[int, int]]:
    """
    Get coordinates of empty (0-value) cells in the given board.
    Args:
        board (Board): The board to check.
    Returns:
        List[Tuple[int, int]]: List of (row, col) tuples for empty cells, row-major.
    """
    n = validate_board(board)
    empty_cells = []
    for row in range(n):
        for col in range(n):
            if board[row][col] == 0:
                empty_cells.append((row, col))
    return empty_cells

def add_random_tile(board: Board, rng=None) -> Board:
    """
    Adds a new tile (90% chance of 2, 10% chance of 4) to a uniformly chosen
    empty cell on a copy of the board.
    Args:
        board (Board): The current game board.
        rng: Randomness source exposing randrange() and random(), e.g. random.Random.
             Defaults to the module-level random functions.
    Returns:
        Board: A new board with exactly one more tile. A full board comes back
               unchanged (as a copy).
    """
    if rng is None:
        rng = random
    empty_cells = get_empty_cells(board)
    new_board = [list(row) for row in board]  # Work on a copy
    if not empty_cells:
        logger.debug("No empty cell to spawn a tile into")
        return new_board

    row, col = empty_cells[rng.randrange(len(empty_cells))]
    value = TILE_VALUES[0] if rng.random() < TILE_PROBABILITIES[0] else TILE_VALUES[1]
    new_board[row][col] = value
    logger.debug("Spawned %d at (%d, %d)", value, row, col)
    return new_board

# --- Line Manipulation (Core Move Logic Helpers) ---

def _compress_line(line: List[int]) -> List[int]:
    """Moves all non-zero tiles to the start of the line, keeping their order."""
    compressed = [value for value in line if value != 0]
    return compressed + [0] * (len(line) - len(compressed))

def _merge_line(line: List[int]) -> Tuple[List[int], int]:
    """
    Merges adjacent identical numbers in a compressed line, moving left.
    A single pass: a tile produced by a merge is never compared again, so
    [2, 2, 2, 0] becomes [4, 0, 2, 0] rather than [8, 0, 0, 0].
    Args:
        line (List[int]): A line already compressed to the left.
    Returns:
        Tuple[List[int], int]: The merged (not re-compressed) line and the score
                               increase from its merges.
    """
    merged = list(line)
    score_increase = 0
    for i in range(len(merged) - 1):
        if merged[i] != 0 and merged[i] == merged[i + 1]:
            merged[i] *= 2
            merged[i + 1] = 0
            score_increase += merged[i]
    return merged, score_increase

def reduce_line_left(line: List[int]) -> Tuple[List[int], int]:
    """
    Applies compress, merge, then compress again to a single line, moving left.
    Args:
        line (List[int]): The line to process.
    Returns:
        Tuple[List[int], int]: The processed line and the score increase.
    """
    merged_line, score_delta = _merge_line(_compress_line(line))
    return _compress_line(merged_line), score_delta

# --- Board Transformations ---

def transpose_board(board: Board) -> Board:
    """
    Transposes a given board (swaps rows and columns).
    Args:
        board (Board): The board to transpose.
    Returns:
        Board: A new transposed board.
    """
    n = get_board_size(board)
    new_board = [[0] * n for _ in range(n)]
    for r in range(n):
        for c in range(n):
            new_board[c][r] = board[r][c]
    return new_board

def reverse_rows(board: Board) -> Board:
    """
    Reverses each row in a given board.
    Args:
        board (Board): The board whose rows are to be reversed.
    Returns:
        Board: A new board with rows reversed.
    """
    get_board_size(board)
    return [list(row)[::-1] for row in board]

# --- Core Game Move Processing ---

def _coerce_direction(direction: Union[DIRECTION, str]) -> DIRECTION:
    if isinstance(direction, DIRECTION):
        return direction
    try:
        return DIRECTION(direction)
    except ValueError:
        raise InvalidDirection(f"Invalid direction: {direction!r}") from None

def _apply_left_processing_to_all_lines(board: Board) -> MoveResult:
    """Reduces every row leftwards and reports whether any row changed."""
    processed_board = []
    total_score_increase = 0
    changed = False
    for row in board:
        final_line, score_from_line = reduce_line_left(row)
        processed_board.append(final_line)
        total_score_increase += score_from_line
        if final_line != list(row):
            changed = True
    return MoveResult(processed_board, total_score_increase, changed)

def process_move(board: Board, direction: Union[DIRECTION, str]) -> MoveResult:
    """
    Resolves a move in the specified direction without touching the input board.
    Right, up and down are reduced to a left move with reverse_rows and
    transpose_board, then mapped back.
    Args:
        board (Board): The current game board.
        direction (DIRECTION | str): The direction to move, or its value ("up", ...).
    Returns:
        MoveResult: The new board, the score gained from this move, and whether
                    the board changed.
    Raises:
        InvalidBoard: If the board is malformed.
        InvalidDirection: If an invalid direction is specified.
    """
    validate_board(board)
    direction = _coerce_direction(direction)

    if direction == DIRECTION.LEFT:
        result = _apply_left_processing_to_all_lines(board)
    elif direction == DIRECTION.RIGHT:
        moved = process_move(reverse_rows(board), DIRECTION.LEFT)
        result = moved._replace(board=reverse_rows(moved.board))
    elif direction == DIRECTION.UP:
        moved = process_move(transpose_board(board), DIRECTION.LEFT)
        result = moved._replace(board=transpose_board(moved.board))
    elif direction == DIRECTION.DOWN:
        moved = process_move(transpose_board(board), DIRECTION.RIGHT)
        result = moved._replace(board=transpose_board(moved.board))
    else:
        raise InvalidDirection(f"Invalid direction: {direction!r}")

    logger.debug("Resolved %s: score_delta=%d changed=%s",
                 direction.value, result.score_delta, result.changed)
    return result

# --- Game State Checks ---

def has_moves(board: Board) -> bool:
    """
    Checks whether any move is still possible: an empty cell, or two equal
    neighbours in a row or a column.
    Args:
        board (Board): The game board.
    Returns:
        bool: False only when the board is full and no tiles can merge.
    """
    n = validate_board(board)
    for r in range(n):
        for c in range(n):
            if board[r][c] == 0:
                return True
            if c < n - 1 and board[r][c] == board[r][c + 1]:
                return True
            if r < n - 1 and board[r][c] == board[r + 1][c]:
                return True
    return False

def determine_game_status(board: Board) -> GameProgressState:
    """
    Determines the current progress state of the game based on the board.
    Args:
        board (Board): The current game board.
    Returns:
        GameProgressState: IN_PROGRESS while a move remains, GAME_OVER otherwise.
    """
    if has_moves(board):
        return GameProgressState.IN_PROGRESS
    return GameProgressState.GAME_OVER

# --- Game Orchestration ---

def new_game(rng=None) -> GameState:
    """
    Starts a game: an empty board seeded with two random tiles and a score of 0.
    Args:
        rng: Optional randomness source, passed to add_random_tile.
    Returns:
        GameState: The initial state, IN_PROGRESS.
    """
    board = add_random_tile(create_empty_board(), rng)
    board = add_random_tile(board, rng)
    return GameState(board, 0, GameProgressState.IN_PROGRESS)

def play_move(state: GameState, direction: Union[DIRECTION, str],
              rng=None) -> Tuple[GameState, bool]:
    """
    Applies one player move to a game state.
    Args:
        state (GameState): The state before the move.
        direction (DIRECTION | str): The direction to move.
        rng: Optional randomness source for the spawned tile.
    Returns:
        Tuple[GameState, bool]: The next state and whether the move was accepted.
                                Rejected moves and finished games return the
                                given state untouched.
    """
    if state.progress == GameProgressState.GAME_OVER:
        return state, False

    result = process_move(state.board, direction)
    if not result.changed:
        return state, False

    board = add_random_tile(result.board, rng)
    progress = determine_game_status(board)
    if progress == GameProgressState.GAME_OVER:
        logger.debug("Game over with score %d", state.score + result.score_delta)
    return GameState(board, state.score + result.score_delta, progress), True
