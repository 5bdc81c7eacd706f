"""rl-playground predict command."""

import click
from rich.console import Console

from rl_playground.board import GridPosition
from rl_playground.cli.common import create_client, get_config
from rl_playground.cli.render import DIRECTION_ARROWS
from rl_playground.exceptions import PredictionError

console = Console()


@click.command()
@click.argument("row", type=click.IntRange(min=0))
@click.argument("col", type=click.IntRange(min=0))
@click.pass_context
def predict_command(ctx: click.Context, row: int, col: int) -> None:
    """Ask the grid agent which way to go from ROW COL.

    Examples:
        rl-playground predict 0 0
    """
    config = get_config(ctx)

    with create_client(ctx, config) as client:
        try:
            direction = client.request_grid_action(GridPosition(position=(row, col)))
        except PredictionError as e:
            console.print(f"[red]Prediction failed:[/red] {e}")
            ctx.exit(1)

    console.print(
        f"From ({row}, {col}) the agent goes "
        f"[bold]{DIRECTION_ARROWS[direction]} {direction.value}[/bold]"
    )
