"""Board models for the playable marking game and the grid traversal game."""

from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

import numpy as np
import numpy.typing as npt
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import IllegalMoveError

BOARD_SIZE = 3


class GameKind(str, Enum):
    """Games the prediction service knows about.

    The value is the path segment the service uses for the game.
    """

    TIC_TAC_TOE = "TicTacToe"
    GRID = "Grid"


class CellState(str, Enum):
    """Content of one marking-game cell."""

    EMPTY = "Empty"
    X = "X"
    O = "O"


class Mark(str, Enum):
    """A player's mark. X always moves first."""

    X = "X"
    O = "O"

    @property
    def opponent(self) -> "Mark":
        return Mark.O if self is Mark.X else Mark.X

    @property
    def cell(self) -> CellState:
        return CellState(self.value)


class Direction(str, Enum):
    """Action of the grid traversal policy."""

    UP = "Up"
    DOWN = "Down"
    LEFT = "Left"
    RIGHT = "Right"


class Move(NamedTuple):
    """Target cell of a marking-game move."""

    row: int
    col: int


Cells = Tuple[Tuple[CellState, ...], ...]


class Board(BaseModel):
    """
    Immutable marking-game board.

    State representation:
        - 3x3 grid of cells, each Empty, X or O
        - player: the mark to move next
        - done: whether the game has finished (win or draw)

    Every transition returns a new Board; instances are never mutated.
    """

    model_config = ConfigDict(frozen=True)

    cells: Cells = Field(..., description="Rows of cells, row-major")
    player: Mark = Field(default=Mark.X, description="Mark to move")
    done: bool = Field(default=False, description="Whether the game is over")

    @field_validator("cells")
    @classmethod
    def validate_shape(cls, v: Cells) -> Cells:
        """Validate that the board is square with the expected size."""
        if len(v) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in v):
            raise ValueError(f"cells must be a {BOARD_SIZE}x{BOARD_SIZE} grid")
        return v

    def cell(self, move: Move) -> CellState:
        return self.cells[move.row][move.col]


class GridPosition(BaseModel):
    """State of the grid traversal game: where the walker stands."""

    model_config = ConfigDict(frozen=True)

    position: Tuple[int, int]
    done: bool = False

    @field_validator("position")
    @classmethod
    def validate_position(cls, v: Tuple[int, int]) -> Tuple[int, int]:
        """Validate that coordinates are non-negative."""
        if v[0] < 0 or v[1] < 0:
            raise ValueError("position coordinates must be non-negative")
        return v


def create_initial() -> Board:
    """
    Create a fresh marking-game board.

    Returns:
        Board with all cells empty, X to move and done unset
    """
    empty_row = tuple(CellState.EMPTY for _ in range(BOARD_SIZE))
    return Board(cells=tuple(empty_row for _ in range(BOARD_SIZE)))


def apply_move(board: Board, move: Move, mover: Mark) -> Board:
    """
    Apply a move and return the resulting board.

    Args:
        board: Board before the move
        move: Target cell
        mover: Mark placing the move

    Returns:
        New board with the cell set, the turn flipped and done recomputed

    Raises:
        IllegalMoveError: If the game is over, it is not mover's turn,
            the cell is out of bounds or already taken
    """
    if board.done:
        raise IllegalMoveError("Game is already over")
    if mover != board.player:
        raise IllegalMoveError(f"It is {board.player.value}'s turn, not {mover.value}'s")
    if not (0 <= move.row < BOARD_SIZE and 0 <= move.col < BOARD_SIZE):
        raise IllegalMoveError(f"Cell ({move.row}, {move.col}) is out of bounds")
    if board.cell(move) != CellState.EMPTY:
        raise IllegalMoveError(f"Cell ({move.row}, {move.col}) is already taken")

    cells = tuple(
        tuple(
            mover.cell if (r, c) == (move.row, move.col) else cell
            for c, cell in enumerate(row)
        )
        for r, row in enumerate(board.cells)
    )
    return Board(cells=cells, player=mover.opponent, done=_compute_done(cells))


def is_terminal(board: Board) -> bool:
    """Check if a board is finished (done flag set, a win or a full board)."""
    return board.done or _compute_done(board.cells)


def legal_moves(board: Board) -> List[Move]:
    """
    Get the moves available on a board.

    Returns:
        Empty cells in row-major order, or an empty list if the game is over
    """
    if is_terminal(board):
        return []
    return [
        Move(r, c)
        for r, row in enumerate(board.cells)
        for c, cell in enumerate(row)
        if cell == CellState.EMPTY
    ]


def winner(board: Board) -> Optional[Mark]:
    """Get the mark holding a full line, if any."""
    state = _to_array(board.cells)
    for mark, value in ((Mark.X, 1), (Mark.O, -1)):
        if _check_win(value, state):
            return mark
    return None


def is_draw(board: Board) -> bool:
    """Check if the board is full with no winner."""
    return winner(board) is None and not np.any(_to_array(board.cells) == 0)


def step_position(
    position: Tuple[int, int], direction: Direction, shape: Tuple[int, int]
) -> Optional[Tuple[int, int]]:
    """
    Move one cell in a direction on a rows x cols grid.

    Returns:
        New position, or None if the move would leave the grid
    """
    rows, cols = shape
    row, col = position
    if direction == Direction.UP:
        row -= 1
    elif direction == Direction.DOWN:
        row += 1
    elif direction == Direction.LEFT:
        col -= 1
    else:
        col += 1
    if 0 <= row < rows and 0 <= col < cols:
        return (row, col)
    return None


def _to_array(cells: Cells) -> npt.NDArray[np.int_]:
    # 0 = empty, 1 = X, -1 = O
    values = {CellState.EMPTY: 0, CellState.X: 1, CellState.O: -1}
    return np.array([[values[cell] for cell in row] for row in cells], dtype=np.int_)


def _compute_done(cells: Cells) -> bool:
    state = _to_array(cells)
    if _check_win(1, state) or _check_win(-1, state):
        return True
    return not np.any(state == 0)


def _check_win(player: int, state: npt.NDArray[np.int_]) -> bool:
    for i in range(BOARD_SIZE):
        if np.all(state[i, :] == player) or np.all(state[:, i] == player):
            return True
    if np.all(np.diag(state) == player):
        return True
    return bool(np.all(np.diag(np.fliplr(state)) == player))
