"""Main CLI entry point for rl-playground."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from rl_playground.cli.commands.init import init_command
from rl_playground.cli.commands.play import play_command
from rl_playground.cli.commands.policy import policy_command
from rl_playground.cli.commands.predict import predict_command
from rl_playground.cli.commands.trace import trace_command
from rl_playground.exceptions import PlaygroundError

console = Console()


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: Optional[Path]) -> None:
    """rl-playground: play against a learned policy and inspect it.

    Talks to an external prediction service that serves the agent's
    actions and its full policy.

    \b
    Examples:
        rl-playground init          # Write a default configuration
        rl-playground play          # Play tic-tac-toe against the agent
        rl-playground policy        # Show the grid policy table
        rl-playground predict 0 0   # Ask the grid agent for one action
        rl-playground trace 0 0     # Follow the grid policy from a cell
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config

    if verbose:
        console.print("[dim]rl-playground starting with verbose output enabled[/dim]")


cli.add_command(init_command, name="init")
cli.add_command(play_command, name="play")
cli.add_command(policy_command, name="policy")
cli.add_command(predict_command, name="predict")
cli.add_command(trace_command, name="trace")


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except PlaygroundError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        if "--verbose" in sys.argv or "-v" in sys.argv:
            console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
