"""CLI commands for database schema management."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError

from vidy.config.database import db_manager

console = Console()

db_app = typer.Typer(
    name="db",
    help="Database management commands",
    no_args_is_help=True,
)


def _safe_url() -> str:
    """Database URL with the password masked."""
    return make_url(db_manager.database_url).render_as_string(hide_password=True)


async def _create() -> None:
    try:
        await db_manager.create_tables()
    finally:
        await db_manager.close()


async def _drop() -> None:
    try:
        await db_manager.drop_tables()
    finally:
        await db_manager.close()


async def _check() -> float:
    try:
        return await db_manager.check_connection()
    finally:
        await db_manager.close()


@db_app.command()
def create() -> None:
    """Create all tables (use Alembic migrations for production databases)."""
    try:
        asyncio.run(_create())
    except SQLAlchemyError as e:
        console.print(f"[red]✗ Failed to create tables:[/red] {e}")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] Tables created on {_safe_url()}")


@db_app.command()
def drop(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Drop all tables. This deletes every row."""
    if not yes:
        typer.confirm(f"Drop all tables on {_safe_url()}?", abort=True)
    try:
        asyncio.run(_drop())
    except SQLAlchemyError as e:
        console.print(f"[red]✗ Failed to drop tables:[/red] {e}")
        raise typer.Exit(code=1)
    console.print("[yellow]![/yellow] All tables dropped")


@db_app.command()
def check() -> None:
    """Check that the database is reachable."""
    try:
        latency_ms = asyncio.run(_check())
    except (SQLAlchemyError, OSError) as e:
        console.print(
            Panel(
                f"[red]✗ Cannot connect to[/red] {_safe_url()}\n{e}",
                title="Database",
                border_style="red",
            )
        )
        raise typer.Exit(code=1)

    console.print(
        Panel(
            f"[green]✓[/green] Connected to {_safe_url()} ({latency_ms:.1f} ms)",
            title="Database",
            border_style="green",
        )
    )
