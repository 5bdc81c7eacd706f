"""rl-playground init command."""

from pathlib import Path

import click
from rich.console import Console

from rl_playground.config.loader import CONFIG_FILE_NAME, PROJECT_DIR_NAME, save_config
from rl_playground.config.models import PlaygroundConfig

console = Console()


@click.command()
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite an existing configuration",
)
def init_command(force: bool) -> None:
    """Initialize rl-playground in the current directory.

    Creates a .rl-playground directory with a default configuration and a
    directory for session logs.

    Examples:
        rl-playground init          # Initialize with default settings
        rl-playground init --force  # Overwrite existing configuration
    """
    project_root = Path.cwd()
    project_dir = project_root / PROJECT_DIR_NAME

    if project_dir.exists() and not force:
        console.print(
            f"[yellow]rl-playground already initialized in {project_root}[/yellow]\n"
            "Use --force to reinitialize"
        )
        return

    try:
        project_dir.mkdir(exist_ok=True)
        (project_dir / "logs").mkdir(exist_ok=True)

        config_path = project_dir / CONFIG_FILE_NAME
        save_config(PlaygroundConfig(), config_path)

        gitignore_path = project_dir / ".gitignore"
        gitignore_path.write_text("logs/\n", encoding="utf-8")

        console.print(f"[green]✓[/green] rl-playground initialized in {project_root}")
        console.print(f"[dim]Configuration:[/dim] {config_path}")
        console.print("\n[bold]Next steps:[/bold]")
        console.print("1. Point service.base_url at your prediction service")
        console.print("2. Play a game: rl-playground play")
        console.print("3. Inspect the grid policy: rl-playground policy")

    except Exception as e:
        console.print(f"[red]Failed to initialize rl-playground:[/red] {e}")
        raise click.ClickException(f"Initialization failed: {e}")
