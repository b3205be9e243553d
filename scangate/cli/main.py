"""scangate CLI entry point — `scangate` command group."""

from __future__ import annotations

import asyncio

import click

from scangate.cli.commands.container import container_cmd
from scangate.cli.commands.db import db_cmd
from scangate.cli.commands.images import images_cmd
from scangate.cli.commands.scan import scan_cmd
from scangate.cli.output import console


@click.group()
@click.version_option(package_name="scangate")
def cli() -> None:
    """scangate — run security scanners in throwaway containers.

    \b
    Quick start:
      scangate db init
      scangate health
      scangate run --image retirejs --tag latest \\
          --cmd 'scan.sh %GIT_REPO% %GIT_BRANCH%' \\
          --repo git@github.com:org/app.git --branch main

    Daemon and database settings are read from the environment / .env
    (DOCKER_API_ADDR, DOCKER_API_CERT_PATH, DATABASE_URL, ...).
    """


cli.add_command(scan_cmd)
cli.add_command(images_cmd)
cli.add_command(container_cmd)
cli.add_command(db_cmd)


@cli.command("health")
def health() -> None:
    """Ping the Docker daemon."""
    from scangate.container.lifecycle import health_check
    from scangate.core.exceptions import ScanGateError

    try:
        asyncio.run(health_check())
    except ScanGateError as e:
        console.print(f"[red]Docker API unhealthy:[/red] {e}")
        raise SystemExit(1)
    console.print("[green]Docker API is up[/green]")


if __name__ == "__main__":
    cli()
