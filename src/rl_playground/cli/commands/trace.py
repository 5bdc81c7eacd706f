"""rl-playground trace command."""

from typing import Optional

import click
from rich.console import Console

from rl_playground.board import GameKind
from rl_playground.cli.commands.policy import fetch_policy_table
from rl_playground.cli.common import create_activity_logger, create_client, get_config
from rl_playground.cli.render import describe_trace, render_policy_table
from rl_playground.policy_table import trace_policy

console = Console()


@click.command()
@click.argument("row", type=click.IntRange(min=0))
@click.argument("col", type=click.IntRange(min=0))
@click.option(
    "--max-steps",
    type=click.IntRange(min=1),
    default=None,
    help="Step limit (default: from configuration)",
)
@click.pass_context
def trace_command(ctx: click.Context, row: int, col: int, max_steps: Optional[int]) -> None:
    """Follow the grid policy from ROW COL and show the path.

    Examples:
        rl-playground trace 0 0
        rl-playground trace 4 1 --max-steps 5
    """
    config = get_config(ctx)
    activity = create_activity_logger(config)

    with create_client(ctx, config) as client:
        table = fetch_policy_table(client, GameKind.GRID, activity)

    if table is None:
        ctx.exit(1)

    try:
        trace = trace_policy(
            table, (row, col), max_steps=max_steps or config.play.trace_max_steps
        )
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="ROW COL")

    console.print(render_policy_table(table, title="Grid Policy", highlight=set(trace.path)))
    console.print(describe_trace(trace))
