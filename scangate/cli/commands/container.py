"""CLI commands for inspecting scan records and aborting scanner containers."""

from __future__ import annotations

import asyncio

import click
from sqlalchemy.exc import SQLAlchemyError

from scangate.cli.output import console, record_summary
from scangate.container.images import Image
from scangate.container.lifecycle import ContainerLifecycle
from scangate.core.exceptions import ScanGateError


@click.group("container")
def container_cmd() -> None:
    """Inspect, stop or remove a scanner container by ID."""


def _admin(operation: str, cid: str) -> None:
    async def _go() -> None:
        lifecycle = ContainerLifecycle(Image(name="admin"))
        await lifecycle.connect()
        try:
            if operation == "stop":
                await lifecycle.stop(cid)
            else:
                await lifecycle.remove(cid, force=True)
        finally:
            lifecycle.close()

    try:
        asyncio.run(_go())
    except ScanGateError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


@container_cmd.command("stop")
@click.argument("cid")
def container_stop(cid: str) -> None:
    """Gracefully stop container CID."""
    _admin("stop", cid)
    console.print(f"Stopped [bold]{cid[:12]}[/bold]")


@container_cmd.command("rm")
@click.argument("cid")
def container_rm(cid: str) -> None:
    """Force-remove container CID."""
    _admin("remove", cid)
    console.print(f"Removed [bold]{cid[:12]}[/bold]")


@container_cmd.command("show")
@click.argument("cid")
def container_show(cid: str) -> None:
    """Show the stored record and verdict for container CID."""
    from scangate.core.database import close_engine, get_session_factory
    from scangate.core.gateway import SqlContainerGateway

    async def _load():
        try:
            return await SqlContainerGateway(get_session_factory()).get_by_cid(cid)
        finally:
            await close_engine()

    try:
        record = asyncio.run(_load())
    except (SQLAlchemyError, OSError) as e:
        console.print(f"[red]Database error:[/red] {e}")
        raise SystemExit(1)

    if record is None:
        console.print(f"[yellow]No record for container {cid[:12]}[/yellow]")
        raise SystemExit(1)
    record_summary(record)
