"""CLI command for running a scan end to end."""

from __future__ import annotations

import asyncio

import click
from sqlalchemy.exc import SQLAlchemyError

from scangate.analyzers import RetirejsAnalyzer
from scangate.analyzers.base import BaseAnalyzer
from scangate.cli.output import console, container_summary

# Analyzers the CLI can pick from; the caller decides which one judges the output
ANALYZERS: dict[str, type[BaseAnalyzer]] = {
    RetirejsAnalyzer.metadata.name: RetirejsAnalyzer,
}


@click.command("run")
@click.option("--image", "image_name", required=True, help="Scanner image name")
@click.option("--tag", "image_tag", default="latest", show_default=True, help="Scanner image tag")
@click.option(
    "--canonical-url",
    default="",
    help="Fully qualified reference to pull (defaults to IMAGE:TAG)",
)
@click.option(
    "--cmd",
    "command_template",
    required=True,
    help="Command template; %GIT_REPO% and %GIT_BRANCH% are substituted",
)
@click.option("--repo", "repository_url", required=True, help="Repository URL to scan")
@click.option("--branch", required=True, help="Branch to scan")
@click.option(
    "--analyzer",
    type=click.Choice(sorted(ANALYZERS)),
    default="retirejs",
    show_default=True,
    help="How to interpret the scanner output",
)
def scan_cmd(
    image_name: str,
    image_tag: str,
    canonical_url: str,
    command_template: str,
    repository_url: str,
    branch: str,
    analyzer: str,
) -> None:
    """Run one scanner image against a repository and print the verdict.

    Exits with status 1 when the scan fails or cannot be executed.

    Example:

        scangate run --image scanners/retirejs --tag 2.0.0 \\
            --cmd 'git clone -b %GIT_BRANCH% %GIT_REPO% code && retire --outputformat json' \\
            --repo https://github.com/org/app.git --branch main
    """
    from scangate.container.images import Image
    from scangate.core.exceptions import ScanGateError

    image = Image(name=image_name, tag=image_tag, canonical_url=canonical_url)
    console.print(f"[bold cyan]Scanning[/bold cyan] [bold]{repository_url}[/bold] ({branch})")
    console.print(f"  Image:    [dim]{image.reference}[/dim]")
    console.print(f"  Analyzer: [dim]{analyzer}[/dim]")

    try:
        with console.status("[dim]Running scanner container…[/dim]"):
            outcome = asyncio.run(
                _run(image, command_template, repository_url, branch, ANALYZERS[analyzer])
            )
    except ScanGateError as e:
        console.print(f"[red]Scan aborted:[/red] {e}")
        raise SystemExit(1)
    except (SQLAlchemyError, OSError) as e:
        console.print(f"[red]Database error:[/red] {e}")
        raise SystemExit(1)

    verdict = outcome.verdict.value if outcome.verdict else None
    container_summary(outcome.container, verdict)
    if not outcome.passed:
        raise SystemExit(1)


async def _run(image, command_template, repository_url, branch, analyzer_cls):
    from scangate.container.lifecycle import ContainerLifecycle
    from scangate.core.database import close_engine, get_session_factory, init_db
    from scangate.core.gateway import SqlContainerGateway
    from scangate.core.runner import run_scan

    await init_db()
    try:
        gateway = SqlContainerGateway(get_session_factory())
        return await run_scan(
            ContainerLifecycle(image, command_template),
            analyzer_cls(gateway),
            gateway,
            repository_url,
            branch,
        )
    finally:
        await close_engine()
