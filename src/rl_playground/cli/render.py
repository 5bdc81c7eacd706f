"""Rich renderables for boards and policy tables."""

from typing import Optional, Set

from rich import box
from rich.table import Table
from rich.text import Text

from rl_playground.board import Board, CellState, Direction
from rl_playground.policy_table import Position, PolicyTable, TraceResult
from rl_playground.session_state import SessionState

CELL_STYLES = {
    CellState.X: "bold blue",
    CellState.O: "bold red",
    CellState.EMPTY: "dim",
}

DIRECTION_ARROWS = {
    Direction.UP: "↑",
    Direction.DOWN: "↓",
    Direction.LEFT: "←",
    Direction.RIGHT: "→",
}

CHECKPOINT_SYMBOL = "🏁"


def render_board(board: Board, title: str = "Tic Tac Toe") -> Table:
    """Render a marking-game board with row and column indices."""
    table = Table(title=title, box=box.SQUARE, show_lines=True)
    table.add_column("", style="dim", justify="right")
    for col in range(len(board.cells[0])):
        table.add_column(str(col), justify="center", min_width=3)

    for row_index, row in enumerate(board.cells):
        cells = [
            Text(cell.value if cell != CellState.EMPTY else ".", style=CELL_STYLES[cell])
            for cell in row
        ]
        table.add_row(str(row_index), *cells)

    return table


def describe_state(state: SessionState, outcome: Optional[str]) -> str:
    """One-line status for the play loop."""
    if state == SessionState.HUMAN_TURN:
        return "[green]Your move[/green] (row col, 'r' to reset, 'q' to quit)"
    if state == SessionState.AWAITING_AGENT:
        return "[yellow]Waiting for the agent...[/yellow]"
    if outcome == "draw":
        return "[bold]Game over: draw[/bold]"
    return f"[bold]Game over: {outcome} wins[/bold]"


def render_policy_table(
    policy: PolicyTable,
    title: str = "Policy Table",
    highlight: Optional[Set[Position]] = None,
) -> Table:
    """
    Render a policy table as arrows.

    The checkpoint cell is shown as a flag instead of its action; this
    only affects the rendering, not the table's content.

    Args:
        policy: Table to render
        title: Table title
        highlight: Optional cells to emphasise (e.g. a traced path)
    """
    highlight = highlight or set()
    table = Table(title=title, box=box.SQUARE, show_lines=True)
    table.add_column("", style="dim", justify="right")
    for col in range(policy.col_count):
        table.add_column(str(col), justify="center", min_width=3)

    for row_index, row in enumerate(policy.rows):
        cells = []
        for col_index, direction in enumerate(row):
            if policy.is_checkpoint(row_index, col_index):
                cells.append(Text(CHECKPOINT_SYMBOL, style="bold white on green"))
            elif (row_index, col_index) in highlight:
                cells.append(Text(DIRECTION_ARROWS[direction], style="bold yellow"))
            else:
                cells.append(Text(DIRECTION_ARROWS[direction]))
        table.add_row(str(row_index), *cells)

    return table


def describe_trace(trace: TraceResult) -> str:
    """Summarise a traced path."""
    path = " → ".join(f"({r}, {c})" for r, c in trace.path)
    endings = {
        "reached_checkpoint": "[green]reached the checkpoint[/green]",
        "left_grid": "[red]walked off the grid[/red]",
        "cycle": "[yellow]entered a cycle[/yellow]",
        "step_limit": "[yellow]hit the step limit[/yellow]",
    }
    return f"{path}\n{trace.steps} step(s), {endings[trace.outcome.value]}"
