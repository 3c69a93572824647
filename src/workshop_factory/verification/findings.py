"""
workshop-factory — validation findings

File: src/workshop_factory/verification/findings.py
Last updated: 2026-10-17

Purpose
- Result envelope of the validation engine: one ``Finding`` per evaluated
  condition and a ``ValidationResult`` that classifies them by severity.

Functional requirements
- Findings are reported, never raised.
- ``overall_valid`` is false only when an error-severity finding fails;
  failing suggestions never block.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from workshop_factory.domain.models import JSONValue


class Severity(StrEnum):
    """Blocking errors versus non-blocking pedagogical suggestions."""

    ERROR = "error"
    SUGGESTION = "suggestion"


@dataclass(frozen=True, slots=True)
class Finding:
    rule: str
    passed: bool
    severity: Severity
    message: str
    remediation: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "severity", Severity(self.severity))
        if self.passed and self.remediation is not None:
            object.__setattr__(self, "remediation", None)

    @property
    def blocking(self) -> bool:
        return not self.passed and self.severity is Severity.ERROR

    def to_dict(self) -> dict[str, JSONValue]:
        payload: dict[str, JSONValue] = {
            "rule": self.rule,
            "passed": self.passed,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.remediation is not None:
            payload["remediation"] = self.remediation
        return payload


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Findings in evaluation order plus the overall verdict."""

    overall_valid: bool
    findings: tuple[Finding, ...] = ()

    @classmethod
    def from_findings(cls, findings: Iterable[Finding]) -> ValidationResult:
        ordered = tuple(findings)
        return cls(
            overall_valid=not any(finding.blocking for finding in ordered),
            findings=ordered,
        )

    @property
    def failed(self) -> tuple[Finding, ...]:
        return tuple(finding for finding in self.findings if not finding.passed)

    @property
    def errors(self) -> tuple[Finding, ...]:
        return tuple(finding for finding in self.failed if finding.severity is Severity.ERROR)

    @property
    def suggestions(self) -> tuple[Finding, ...]:
        return tuple(
            finding for finding in self.failed if finding.severity is Severity.SUGGESTION
        )

    def for_rule(self, rule: str) -> tuple[Finding, ...]:
        return tuple(finding for finding in self.findings if finding.rule == rule)

    def extend(self, findings: Iterable[Finding]) -> ValidationResult:
        return ValidationResult.from_findings((*self.findings, *findings))

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "overall_valid": self.overall_valid,
            "findings": [finding.to_dict() for finding in self.findings],
        }


__all__ = ["Finding", "Severity", "ValidationResult"]
