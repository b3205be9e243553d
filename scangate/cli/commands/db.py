"""CLI commands for the run-record database."""

from __future__ import annotations

import asyncio

import click
from sqlalchemy.exc import SQLAlchemyError

from scangate.cli.output import console


@click.group("db")
def db_cmd() -> None:
    """Manage the run-record database."""


@db_cmd.command("init")
def db_init() -> None:
    """Create the scangate tables if they do not exist."""
    from scangate.core.database import close_engine, init_db

    async def _init() -> None:
        try:
            await init_db()
        finally:
            await close_engine()

    try:
        asyncio.run(_init())
    except (SQLAlchemyError, OSError) as e:
        console.print(f"[red]Database error:[/red] {e}")
        raise SystemExit(1)
    console.print("[green]Database ready[/green]")
