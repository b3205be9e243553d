"""RetireJS analyzer — known-vulnerable JavaScript libraries."""

from __future__ import annotations

from pydantic import ValidationError

from scangate.analyzers.base import AnalyzerMetadata, BaseAnalyzer
from scangate.core.exceptions import OutputParseError
from scangate.schemas.analysis import AnalysisOutput, Issue, Vulnerability
from scangate.schemas.retirejs import RetirejsOutput


class RetirejsAnalyzer(BaseAnalyzer):
    metadata = AnalyzerMetadata(
        name="retirejs",
        display_name="RetireJS",
        language="javascript",
        description=(
            "Flags JavaScript dependencies with known vulnerabilities. "
            "Any medium or high severity finding fails the scan."
        ),
    )

    def parse(self, raw_output: str) -> AnalysisOutput:
        try:
            report = RetirejsOutput.model_validate_json(raw_output)
        except ValidationError as exc:
            raise OutputParseError(
                self.metadata.name,
                f"{exc.error_count()} validation error(s): {exc.errors()[0]['msg']}",
                raw_output,
            ) from exc

        issues = []
        for raw_issue in report.issues:
            vulnerabilities = [
                Vulnerability(
                    component=result.component,
                    version=result.version,
                    detection=result.detection,
                    severity=vuln.severity,
                    summary=vuln.identifiers.summary,
                    issue=vuln.identifiers.issue,
                    identifiers=vuln.identifiers.cve,
                    below=vuln.below,
                    info=vuln.info,
                )
                for result in raw_issue.results
                for vuln in result.vulnerabilities
            ]
            issues.append(Issue(file=raw_issue.file, vulnerabilities=vulnerabilities))

        return AnalysisOutput(issues=issues)
