"""
workshop-factory — validation rule registry

File: src/workshop_factory/verification/registry.py
Last updated: 2026-10-17

Purpose
- Hold validation rules as independent (check, severity) entries that the
  engine runs uniformly, so rules can be added, removed and tested alone.

Functional requirements
- Registration order is evaluation order; duplicate names are rejected.
- A rule's check yields ``RuleOutcome`` values; the registry stamps each with
  the rule name and severity to build ``Finding`` objects.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from workshop_factory.domain.models import Workshop
from workshop_factory.verification.findings import Finding, Severity
from workshop_factory.verification.thresholds import ValidationThresholds


@dataclass(frozen=True, slots=True)
class RuleOutcome:
    """One evaluated condition before it is attributed to a rule."""

    passed: bool
    message: str
    remediation: str | None = None


RuleCheck = Callable[[Workshop, ValidationThresholds], Iterable[RuleOutcome]]


@dataclass(frozen=True, slots=True)
class ValidationRule:
    name: str
    severity: Severity
    check: RuleCheck
    description: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("ValidationRule.name: must be a non-empty string")
        if not callable(self.check):
            raise ValueError("ValidationRule.check: must be callable")
        object.__setattr__(self, "severity", Severity(self.severity))

    def evaluate(self, workshop: Workshop, thresholds: ValidationThresholds) -> tuple[Finding, ...]:
        return tuple(
            Finding(
                rule=self.name,
                passed=outcome.passed,
                severity=self.severity,
                message=outcome.message,
                remediation=None if outcome.passed else outcome.remediation,
            )
            for outcome in self.check(workshop, thresholds)
        )


class RuleRegistry:
    """Ordered, name-unique collection of validation rules."""

    def __init__(self, rules: Iterable[ValidationRule] = ()) -> None:
        self._rules: dict[str, ValidationRule] = {}
        for rule in rules:
            self.register(rule)

    def register(self, rule: ValidationRule) -> None:
        if not isinstance(rule, ValidationRule):
            raise TypeError(f"expected ValidationRule, got {type(rule).__name__}")
        existing = self._rules.get(rule.name)
        if existing is not None:
            raise ValueError(f"rule {rule.name!r} is already registered")
        self._rules[rule.name] = rule

    def unregister(self, name: str) -> ValidationRule:
        try:
            return self._rules.pop(name)
        except KeyError:
            raise ValueError(self._unknown_message(name)) from None

    def get(self, name: str) -> ValidationRule:
        rule = self._rules.get(name)
        if rule is None:
            raise ValueError(self._unknown_message(name))
        return rule

    def names(self) -> tuple[str, ...]:
        return tuple(self._rules)

    def subset(self, names: Iterable[str]) -> RuleRegistry:
        """New registry with only ``names``, kept in registration order."""

        wanted = set(names)
        for name in sorted(wanted):
            self.get(name)
        return RuleRegistry(rule for rule in self if rule.name in wanted)

    def copy(self) -> RuleRegistry:
        return RuleRegistry(self)

    def evaluate(
        self, workshop: Workshop, thresholds: ValidationThresholds
    ) -> tuple[Finding, ...]:
        findings: list[Finding] = []
        for rule in self:
            findings.extend(rule.evaluate(workshop, thresholds))
        return tuple(findings)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[ValidationRule]:
        return iter(tuple(self._rules.values()))

    def __len__(self) -> int:
        return len(self._rules)

    def _unknown_message(self, name: str) -> str:
        known = ", ".join(self._rules)
        return f"unknown rule {name!r}; registered: [{known}]"


__all__ = ["RuleCheck", "RuleOutcome", "RuleRegistry", "ValidationRule"]
