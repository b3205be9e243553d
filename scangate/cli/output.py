"""Rich output helpers — tables and status display."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from scangate.container.lifecycle import ScanContainer
from scangate.models.container_record import ContainerRecord

console = Console()


def status_style(status: str | None) -> str:
    return {
        "passed": "green",
        "failed": "red",
        "finished": "green",
        "running": "yellow",
        "created": "dim",
    }.get(status or "", "white")


def fmt_date(value: datetime | None) -> str:
    if value is None:
        return "—"
    return value.strftime("%Y-%m-%d %H:%M:%S")


def fmt_size(size: int | None) -> str:
    if not size:
        return "—"
    value = float(size)
    for unit in ("B", "kB", "MB", "GB"):
        if value < 1000:
            return f"{value:.0f} {unit}"
        value /= 1000
    return f"{value:.1f} TB"


def container_summary(container: ScanContainer, verdict: str | None) -> None:
    """Print the outcome of one scan run."""
    console.rule(f"[bold cyan]Scan — {container.image.reference}")

    fields = [
        ("Container", (container.cid or "")[:12]),
        ("Status", container.status.value if container.status else None),
        ("Exit code", None if container.exit_code is None else str(container.exit_code)),
        ("Started", fmt_date(container.started_at)),
        ("Finished", fmt_date(container.finished_at)),
    ]
    for label, value in fields:
        if value:
            console.print(f"  [dim]{label:<12}[/dim] {value}")

    result_text = Text(verdict or "unresolved", style=status_style(verdict) if verdict else "yellow")
    console.print("  [dim]Result      [/dim] ", end="")
    console.print(result_text)


def record_summary(record: ContainerRecord) -> None:
    """Print a persisted scan record."""
    console.rule(f"[bold cyan]Record — {record.image_name}:{record.image_tag}")

    fields = [
        ("Container", record.cid[:12]),
        ("Repository", f"{record.repository_url} ({record.branch})"),
        ("Analyzer", record.analyzer),
        ("Command", record.command),
        ("Status", record.status),
        ("Exit code", None if record.exit_code is None else str(record.exit_code)),
        ("Started", fmt_date(record.started_at)),
        ("Finished", fmt_date(record.finished_at)),
        ("Output", record.output),
    ]
    for label, value in fields:
        if value:
            console.print(f"  [dim]{label:<12}[/dim] {value}")

    result_text = Text(record.result or "unresolved", style=status_style(record.result))
    console.print("  [dim]Result      [/dim] ", end="")
    console.print(result_text)


def images_table(items: list[dict[str, Any]]) -> Table:
    table = Table(
        title=f"Images ({len(items)})",
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Tags")
    table.add_column("Size", justify="right")
    table.add_column("Created", style="dim")

    for image in items:
        image_id = (image.get("Id") or "").removeprefix("sha256:")
        created = image.get("Created")
        created_at = datetime.fromtimestamp(created, tz=timezone.utc) if created else None
        table.add_row(
            image_id[:12],
            ", ".join(image.get("RepoTags") or []) or "<none>",
            fmt_size(image.get("Size")),
            fmt_date(created_at),
        )
    return table
