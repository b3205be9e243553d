"""Normalized findings shared by every analyzer."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Verdict(str, Enum):
    PASSED = "passed"
    FAILED = "failed"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    @classmethod
    def parse(cls, value: str | None) -> Severity | None:
        """Map a scanner-reported severity string onto the fixed scale.

        Matching is case-insensitive; unknown values return ``None`` and are
        never treated as failing.
        """
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


_SEVERITY_ORDER = (Severity.LOW, Severity.MEDIUM, Severity.HIGH)

# Lowest severity that fails a scan
FAILING_SEVERITY = Severity.MEDIUM


# ── Findings ──────────────────────────────────────────────────────────────────

class Vulnerability(BaseModel):
    model_config = ConfigDict(frozen=True)

    component: str = ""
    version: str = ""
    detection: str = ""
    severity: str = ""            # as reported by the scanner
    summary: str = ""
    issue: str = ""
    identifiers: list[str] = []   # CVE-XXXX-XXXXX and friends
    below: str = ""               # first fixed version, when known
    info: list[str] = []

    @property
    def level(self) -> Severity | None:
        return Severity.parse(self.severity)

    @property
    def is_failing(self) -> bool:
        level = self.level
        return level is not None and level.rank >= FAILING_SEVERITY.rank


class Issue(BaseModel):
    """One scanned file or component with the vulnerabilities found in it."""
    model_config = ConfigDict(frozen=True)

    file: str = ""
    vulnerabilities: list[Vulnerability] = Field(default_factory=list)


class AnalysisOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    issues: list[Issue] = Field(default_factory=list)

    @property
    def has_findings(self) -> bool:
        return bool(self.issues)

    def vulnerabilities(self) -> list[Vulnerability]:
        return [v for issue in self.issues for v in issue.vulnerabilities]

    def severity_counts(self) -> dict[str, int]:
        counts = {s.value: 0 for s in _SEVERITY_ORDER}
        for vuln in self.vulnerabilities():
            level = vuln.level
            if level is not None:
                counts[level.value] += 1
        return counts
