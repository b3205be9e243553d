"""Scan pipeline — run one scanner container, record it, judge its output."""

from __future__ import annotations

from dataclasses import dataclass

from scangate.analyzers.base import BaseAnalyzer
from scangate.container.lifecycle import ContainerLifecycle, ScanContainer
from scangate.core.gateway import SqlContainerGateway
from scangate.core.logging import get_logger
from scangate.schemas.analysis import Verdict

logger = get_logger(__name__)


@dataclass
class ScanOutcome:
    container: ScanContainer
    verdict: Verdict | None

    @property
    def passed(self) -> bool:
        return self.verdict is Verdict.PASSED


async def run_scan(
    lifecycle: ContainerLifecycle,
    analyzer: BaseAnalyzer,
    gateway: SqlContainerGateway,
    repository_url: str,
    branch: str,
) -> ScanOutcome:
    """Execute a single scan request end to end.

    Container and connection errors propagate to the caller; analysis errors
    are logged and surface as a ``None`` verdict.
    """
    log = logger.bind(
        image=lifecycle.container.image.reference,
        analyzer=analyzer.metadata.name,
        repository_url=repository_url,
        branch=branch,
    )
    log.info("Scan started")

    try:
        container = await lifecycle.run(repository_url, branch)
    finally:
        lifecycle.close()

    await gateway.save_container(
        container,
        command_template=lifecycle.command_template,
        repository_url=repository_url,
        branch=branch,
        analyzer=analyzer.metadata.name,
    )

    verdict = await analyzer.evaluate(container.cid, container.output)
    log.info(
        "Scan complete",
        cid=container.cid[:12],
        exit_code=container.exit_code,
        result=verdict.value if verdict else None,
    )
    return ScanOutcome(container=container, verdict=verdict)
