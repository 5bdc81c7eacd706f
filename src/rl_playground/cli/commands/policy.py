"""rl-playground policy command."""

import time
from typing import Optional

import click
from rich.console import Console

from rl_playground.board import GameKind
from rl_playground.cli.common import create_activity_logger, create_client, get_config
from rl_playground.cli.render import render_policy_table
from rl_playground.client import PredictionClient
from rl_playground.exceptions import MalformedPolicyTableError, PredictionError
from rl_playground.policy_table import PolicyTable
from rl_playground.tracking.activity_logger import ActivityLogger

console = Console()


@click.command()
@click.option(
    "--game",
    "-g",
    type=click.Choice([g.value for g in GameKind]),
    default=None,
    help="Game whose policy to show (default: from configuration)",
)
@click.pass_context
def policy_command(ctx: click.Context, game: Optional[str]) -> None:
    """Show the agent's full policy as a table.

    The center cell is the checkpoint the grid agent walks to and is shown
    as a flag.

    Examples:
        rl-playground policy
        rl-playground policy --game Grid
    """
    config = get_config(ctx)
    kind = GameKind(game) if game else config.play.policy_game
    activity = create_activity_logger(config)

    with create_client(ctx, config) as client:
        table = fetch_policy_table(client, kind, activity)

    if table is None:
        ctx.exit(1)

    if not table.rows:
        console.print("[yellow]The agent returned an empty policy[/yellow]")
        return

    console.print(render_policy_table(table, title=f"{kind.value} Policy"))
    console.print(f"[dim]{table.row_count}x{table.col_count} states[/dim]")


def fetch_policy_table(
    client: PredictionClient, game: GameKind, activity: Optional[ActivityLogger] = None
) -> Optional[PolicyTable]:
    """Fetch a policy table, reporting failures as unavailable.

    Returns:
        The table, or None if it could not be fetched or rebuilt
    """
    started = time.monotonic()
    try:
        with console.status(f"Fetching {game.value} policy..."):
            table = client.request_full_policy(game)
    except (PredictionError, MalformedPolicyTableError) as e:
        console.print(f"[red]Policy table unavailable:[/red] {e}")
        if activity:
            activity.log_policy_unavailable(game.value, e)
        return None

    if activity:
        activity.log_policy_fetched(
            game.value,
            table.row_count,
            table.col_count,
            int((time.monotonic() - started) * 1000),
        )
    return table
