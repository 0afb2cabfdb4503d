"""
Main CLI entry point for vidy.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel

from vidy import __version__
from vidy.cli.commands.api import api_app
from vidy.cli.commands.db import db_app
from vidy.config.settings import settings

console = Console()

app = typer.Typer(
    name="vidy",
    help="Video-sharing platform backend",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Add subcommands
app.add_typer(api_app, name="api", help="API server commands")
app.add_typer(db_app, name="db", help="Database management commands")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(
        Panel(
            f"[bold blue]vidy[/bold blue] v{__version__}",
            title="Version",
            border_style="blue",
        )
    )


@app.command()
def status() -> None:
    """Show application status."""
    backend = "PostgreSQL" if settings.is_postgresql else (
        "SQLite" if settings.is_sqlite else "custom"
    )
    console.print(
        Panel(
            f"[green]✓[/green] vidy is ready to use\n"
            f"[blue]i[/blue] Database backend: {backend}\n"
            f"[blue]i[/blue] Media directory: {settings.media_dir}\n"
            "[yellow]![/yellow] Use 'vidy db check' to test the database connection\n"
            "[blue]i[/blue] Use 'vidy --help' for available commands",
            title="Status",
            border_style="green",
        )
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit"
    ),
) -> None:
    """
    vidy - Video-sharing platform backend.

    Run the REST API for channels, videos, tweets, comments, likes,
    playlists and subscriptions, and manage its database.
    """
    if version:
        console.print(f"vidy v{__version__}")
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        console.print("[yellow]Use 'vidy --help' for available commands[/yellow]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
