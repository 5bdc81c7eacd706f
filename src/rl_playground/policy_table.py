"""Reconstruction of a dense policy table from the service's flat policy records."""

from enum import Enum
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from .board import Direction, step_position
from .exceptions import MalformedPolicyTableError

Position = Tuple[int, int]


class StateDescriptor(BaseModel):
    """Identifying part of a state in a policy record."""

    model_config = ConfigDict(frozen=True, extra="allow")

    position: Tuple[StrictInt, StrictInt]
    done: bool = False


class PolicyRecord(BaseModel):
    """One (state, action) pair of the service's full policy."""

    model_config = ConfigDict(frozen=True)

    state: StateDescriptor
    action: Direction


class PolicyTable(BaseModel):
    """
    Dense 2-D materialization of a grid policy.

    Row i holds the actions of the states whose position has row index i,
    in column order. All rows have the same length.
    """

    model_config = ConfigDict(frozen=True)

    rows: Tuple[Tuple[Direction, ...], ...] = Field(default=())

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def col_count(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.row_count, self.col_count)

    @property
    def checkpoint(self) -> Optional[Position]:
        """The highlighted center cell, or None for an empty table."""
        if not self.rows:
            return None
        return (self.row_count // 2, self.col_count // 2)

    def is_checkpoint(self, row: int, col: int) -> bool:
        return self.checkpoint == (row, col)

    def action_at(self, row: int, col: int) -> Direction:
        return self.rows[row][col]

    def to_lists(self) -> List[List[str]]:
        """Get the table as nested lists of direction tokens."""
        return [[d.value for d in row] for row in self.rows]


def build_policy_table(records: Sequence[PolicyRecord]) -> PolicyTable:
    """
    Build a policy table from records sorted in row-major order.

    A new row starts whenever a record's row index differs from the row
    being accumulated. The row tracker starts at the first record's row
    index, and the last accumulated row is always kept.

    The records must cover a dense grid: row indices step by one, and
    every row holds the same run of consecutive column indices.

    Args:
        records: Policy records as returned by the service

    Returns:
        Immutable policy table (empty for empty input)

    Raises:
        MalformedPolicyTableError: If records are not row-major sorted or do
            not form a dense grid
    """
    if not records:
        return PolicyTable()

    _check_sorted(records)

    table: List[Tuple[Direction, ...]] = []
    row_indices: List[int] = [records[0].state.position[0]]
    row_columns: List[Tuple[int, ...]] = []
    current: List[Direction] = []
    columns: List[int] = []

    for record in records:
        row, col = record.state.position
        if row != row_indices[-1]:
            table.append(tuple(current))
            row_columns.append(tuple(columns))
            current = []
            columns = []
            row_indices.append(row)
        current.append(record.action)
        columns.append(col)

    table.append(tuple(current))
    row_columns.append(tuple(columns))

    _check_dense(table, row_indices, row_columns)
    return PolicyTable(rows=tuple(table))


def _check_sorted(records: Sequence[PolicyRecord]) -> None:
    previous = records[0].state.position
    for index, record in enumerate(records[1:], start=1):
        position = record.state.position
        if position[0] < previous[0] or (
            position[0] == previous[0] and position[1] <= previous[1]
        ):
            raise MalformedPolicyTableError(
                f"Record {index} at {tuple(position)} is out of row-major order "
                f"after {tuple(previous)}"
            )
        previous = position


def _check_dense(
    table: List[Tuple[Direction, ...]],
    row_indices: List[int],
    row_columns: List[Tuple[int, ...]],
) -> None:
    expected = len(table[0])
    for index, row_actions in enumerate(table):
        if len(row_actions) != expected:
            raise MalformedPolicyTableError(
                f"Row {index} has {len(row_actions)} entries, expected {expected}"
            )

    for previous, row in zip(row_indices, row_indices[1:]):
        if row != previous + 1:
            raise MalformedPolicyTableError(
                f"Row index jumps from {previous} to {row}; rows must be contiguous"
            )

    first_columns = row_columns[0]
    start = first_columns[0]
    if first_columns != tuple(range(start, start + len(first_columns))):
        raise MalformedPolicyTableError(
            f"Row {row_indices[0]} has non-consecutive columns {list(first_columns)}"
        )

    for row, columns in zip(row_indices[1:], row_columns[1:]):
        if columns != first_columns:
            raise MalformedPolicyTableError(
                f"Row {row} has columns {list(columns)}, "
                f"expected {list(first_columns)}"
            )


class TraceOutcome(str, Enum):
    """Why a policy trace stopped."""

    REACHED_CHECKPOINT = "reached_checkpoint"
    LEFT_GRID = "left_grid"
    CYCLE = "cycle"
    STEP_LIMIT = "step_limit"


class TraceResult(BaseModel):
    """Path followed through a policy table."""

    path: List[Position]
    outcome: TraceOutcome

    @property
    def steps(self) -> int:
        return len(self.path) - 1


def trace_policy(
    table: PolicyTable, start: Position, max_steps: Optional[int] = None
) -> TraceResult:
    """
    Follow the table's directions from a start cell.

    Moving off the edge ends the walk, as in the grid environment the
    policy was learned on.

    Args:
        table: Policy table to follow
        start: Starting (row, col)
        max_steps: Step limit (default: number of cells)

    Returns:
        TraceResult with the visited cells, start included

    Raises:
        ValueError: If the table is empty or start is outside it
    """
    if not table.rows:
        raise ValueError("Cannot trace an empty policy table")
    row, col = start
    if not (0 <= row < table.row_count and 0 <= col < table.col_count):
        raise ValueError(f"Start {start} is outside the {table.shape} table")

    limit = max_steps if max_steps is not None else table.row_count * table.col_count
    position: Position = (row, col)
    path = [position]

    while True:
        if table.is_checkpoint(*position):
            return TraceResult(path=path, outcome=TraceOutcome.REACHED_CHECKPOINT)
        if len(path) - 1 >= limit:
            return TraceResult(path=path, outcome=TraceOutcome.STEP_LIMIT)

        next_position = step_position(position, table.action_at(*position), table.shape)
        if next_position is None:
            return TraceResult(path=path, outcome=TraceOutcome.LEFT_GRID)
        if next_position in path:
            return TraceResult(path=path, outcome=TraceOutcome.CYCLE)

        path.append(next_position)
        position = next_position
