"""rl-playground play command."""

import re
from typing import Optional

import click
from rich.console import Console

from rl_playground.board import Move
from rl_playground.cli.common import create_activity_logger, create_client, get_config
from rl_playground.cli.render import describe_state, render_board
from rl_playground.exceptions import PredictionError
from rl_playground.session import GameSession
from rl_playground.session_state import SessionState

console = Console()

MOVE_PATTERN = re.compile(r"^\s*(\d+)\s*[, ]\s*(\d+)\s*$")


@click.command()
@click.pass_context
def play_command(ctx: click.Context) -> None:
    """Play tic-tac-toe against the agent.

    You are X and move first. Enter a move as "row col" (0-based),
    'r' to reset the board or 'q' to quit.

    Examples:
        rl-playground play
    """
    config = get_config(ctx)
    activity = create_activity_logger(config)

    with create_client(ctx, config) as client:
        session = GameSession(
            client,
            session_id=activity.session_id if activity else None,
            activity_logger=activity,
        )
        _run(session)


def _run(session: GameSession) -> None:
    while True:
        console.print(render_board(session.board))
        console.print(describe_state(session.state, session.outcome))

        if session.state == SessionState.DONE:
            if click.confirm("Play again?", default=True):
                session.reset()
                continue
            return

        if session.state == SessionState.AWAITING_AGENT:
            choice = click.prompt(
                "Agent request failed. [r]etry, re[s]et or [q]uit",
                type=click.Choice(["r", "s", "q"]),
                default="r",
            )
            if choice == "q":
                return
            if choice == "s":
                session.reset()
            else:
                _agent_turn(session)
            continue

        raw = click.prompt("Move", prompt_suffix="> ").strip().lower()
        if raw == "q":
            return
        if raw == "r":
            session.reset()
            continue

        move = _parse_move(raw)
        if move is None:
            console.print("[dim]Enter a move as 'row col', e.g. '1 2'[/dim]")
            continue

        if session.play(move) and session.state == SessionState.AWAITING_AGENT:
            _agent_turn(session)


def _agent_turn(session: GameSession) -> None:
    try:
        with console.status("Agent is thinking..."):
            session.agent_turn()
    except PredictionError as e:
        console.print(f"[red]Agent unavailable:[/red] {e}")


def _parse_move(raw: str) -> Optional[Move]:
    match = MOVE_PATTERN.match(raw)
    if not match:
        return None
    return Move(int(match.group(1)), int(match.group(2)))
