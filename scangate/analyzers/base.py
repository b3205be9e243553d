"""Base analyzer contract — every scanner integration implements this interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

import structlog

from scangate.core.exceptions import OutputParseError, PersistenceError
from scangate.core.gateway import PersistenceGateway
from scangate.core.logging import get_logger
from scangate.schemas.analysis import AnalysisOutput, Verdict

# Written by the scanner images' clone step when the repository is unreachable
CLONE_FAILURE_MARKER = "ERROR_CLONING"
NO_ISSUES_OUTPUT = "No issues found."


@dataclass
class AnalyzerMetadata:
    name: str               # Unique slug (e.g. "retirejs")
    display_name: str
    language: str           # Ecosystem the scanner targets
    description: str


class BaseAnalyzer(ABC):
    """Turns one scanner's raw container output into a persisted verdict.

    Subclasses set ``metadata`` and implement :meth:`parse`; the evaluation
    steps in :meth:`evaluate` are shared by all scanner families.
    """

    metadata: ClassVar[AnalyzerMetadata]
    clone_failure_marker: ClassVar[str] = CLONE_FAILURE_MARKER

    def __init__(
        self,
        gateway: PersistenceGateway,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.gateway = gateway
        self.logger = (logger or get_logger(__name__)).bind(analyzer=self.metadata.name)

    @abstractmethod
    def parse(self, raw_output: str) -> AnalysisOutput:
        """Deserialize scanner output.

        Raises:
            OutputParseError: the output does not match the scanner's schema.
        """
        ...

    def classify(self, output: AnalysisOutput) -> Verdict:
        """``failed`` as soon as one vulnerability is medium or worse."""
        for vulnerability in output.vulnerabilities():
            if vulnerability.is_failing:
                return Verdict.FAILED
        return Verdict.PASSED

    async def evaluate(self, cid: str, raw_output: str) -> Verdict | None:
        """Judge ``raw_output`` and persist the outcome on record ``cid``.

        Returns the verdict, or ``None`` when the output could not be parsed
        (nothing is persisted in that case).
        """
        log = self.logger.bind(cid=cid[:12])

        if self.clone_failure_marker in raw_output:
            log.warning("Scanner could not clone the repository")
            await self._persist(
                log, cid, {"output": f"Container error: {raw_output}", "result": Verdict.FAILED.value}
            )
            return Verdict.FAILED

        try:
            output = self.parse(raw_output)
        except OutputParseError as exc:
            log.error("Cannot parse scanner output", error=str(exc))
            log.error("Raw scanner output", raw_output=raw_output)
            return None

        if not output.has_findings:
            log.info("No issues found")
            # only the output text is written here; existing records rely on it
            await self._persist(log, cid, {"output": NO_ISSUES_OUTPUT})
            return Verdict.PASSED

        verdict = self.classify(output)
        log.info("Analysis complete", result=verdict.value, severities=output.severity_counts())
        await self._persist(log, cid, {"result": verdict.value})
        return verdict

    async def _persist(
        self, log: structlog.BoundLogger, cid: str, fields: dict[str, Any]
    ) -> None:
        try:
            await self.gateway.update_one_by_cid(cid, fields)
        except PersistenceError as exc:
            log.error("Error updating container record", error=str(exc))

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        # Concrete subclasses must declare metadata
        if not getattr(cls, "__abstractmethods__", None):
            if not hasattr(cls, "metadata"):
                raise TypeError(
                    f"Analyzer {cls.__name__} must define a 'metadata' class variable."
                )
