"""CLI commands for scanner image housekeeping."""

from __future__ import annotations

import asyncio

import click

from scangate.cli.output import console, images_table
from scangate.container.images import Image
from scangate.container.lifecycle import ContainerLifecycle
from scangate.core.exceptions import ScanGateError


@click.group("images")
def images_cmd() -> None:
    """Inspect and prune images on the Docker daemon."""


@images_cmd.command("list")
def images_list() -> None:
    """List images known to the daemon."""

    async def _list():
        lifecycle = ContainerLifecycle(Image(name="admin"))
        await lifecycle.connect()
        try:
            return await lifecycle.list_images()
        finally:
            lifecycle.close()

    try:
        items = asyncio.run(_list())
    except ScanGateError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    console.print(images_table(items))


@images_cmd.command("rm")
@click.argument("image_id")
def images_rm(image_id: str) -> None:
    """Force-remove IMAGE_ID from the daemon."""

    async def _remove():
        lifecycle = ContainerLifecycle(Image(name="admin"))
        await lifecycle.connect()
        try:
            await lifecycle.remove_image(image_id)
        finally:
            lifecycle.close()

    try:
        asyncio.run(_remove())
    except ScanGateError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    console.print(f"Removed [bold]{image_id}[/bold]")
