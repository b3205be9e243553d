"""Schemas for the JSON report written by ``retire --outputformat json``."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

# retire.js emits `null` for absent arrays and strings in some versions
_NullAsEmpty = BeforeValidator(lambda value: [] if value is None else value)
_Text = Annotated[str, BeforeValidator(lambda value: "" if value is None else value)]


class RetirejsIdentifier(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    issue: _Text = ""
    summary: _Text = ""
    cve: Annotated[list[str], _NullAsEmpty] = Field(default_factory=list, alias="CVE")


class RetirejsVulnerability(BaseModel):
    info: Annotated[list[str], _NullAsEmpty] = Field(default_factory=list)
    below: _Text = ""
    severity: _Text = ""
    identifiers: Annotated[
        RetirejsIdentifier, BeforeValidator(lambda value: {} if value is None else value)
    ] = Field(default_factory=RetirejsIdentifier)


class RetirejsResult(BaseModel):
    version: _Text = ""
    component: _Text = ""
    detection: _Text = ""
    vulnerabilities: Annotated[list[RetirejsVulnerability], _NullAsEmpty] = Field(
        default_factory=list
    )


class RetirejsIssue(BaseModel):
    file: _Text = ""
    results: Annotated[list[RetirejsResult], _NullAsEmpty] = Field(default_factory=list)


class RetirejsOutput(BaseModel):
    """Top-level report. ``messages`` and ``errors`` are kept opaque."""
    model_config = ConfigDict(populate_by_name=True)

    issues: Annotated[list[RetirejsIssue], _NullAsEmpty] = Field(
        default_factory=list, alias="data"
    )
    messages: Any = None
    errors: Any = None
