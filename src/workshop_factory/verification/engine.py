"""
workshop-factory — validation engine

File: src/workshop_factory/verification/engine.py
Last updated: 2026-10-17

Purpose
- Evaluate the rule catalog over a workshop and return a deterministic
  ``ValidationResult``.
- Async variant adds the ``reference_sources`` readability check.

Functional requirements
- ``validate_workshop`` performs no mutation and no file access; it never
  raises for a failing check.
- ``validate_workshop_async`` checks every declared source concurrently in
  worker threads and appends exactly one ``reference_sources`` finding when
  at least one source is declared.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Iterable
from pathlib import Path

import structlog

from workshop_factory.domain.models import Workshop
from workshop_factory.verification.findings import Finding, Severity, ValidationResult
from workshop_factory.verification.registry import RuleRegistry
from workshop_factory.verification.rules import DEFAULT_RULES
from workshop_factory.verification.thresholds import DEFAULT_THRESHOLDS, ValidationThresholds

REFERENCE_SOURCES_RULE = "reference_sources"

_logger = structlog.get_logger(__name__)


def default_registry() -> RuleRegistry:
    """Fresh registry holding the built-in catalog; safe to modify."""

    return RuleRegistry(DEFAULT_RULES)


def validate_workshop(
    workshop: Workshop,
    *,
    thresholds: ValidationThresholds | None = None,
    registry: RuleRegistry | None = None,
    rules: Iterable[str] | None = None,
) -> ValidationResult:
    """Run the registered rules (optionally only ``rules``) over ``workshop``."""

    active = registry if registry is not None else default_registry()
    if rules is not None:
        active = active.subset(rules)
    findings = active.evaluate(workshop, thresholds or DEFAULT_THRESHOLDS)
    result = ValidationResult.from_findings(findings)
    _logger.debug(
        "validation_completed",
        overall_valid=result.overall_valid,
        checks=len(result.findings),
        errors=len(result.errors),
        suggestions=len(result.suggestions),
    )
    return result


async def validate_workshop_async(
    workshop: Workshop,
    *,
    thresholds: ValidationThresholds | None = None,
    registry: RuleRegistry | None = None,
    rules: Iterable[str] | None = None,
    base_dir: str | os.PathLike[str] | None = None,
) -> ValidationResult:
    """``validate_workshop`` plus the reference-source readability check.

    Relative sources resolve against ``base_dir`` (the working directory when
    omitted).
    """

    result = validate_workshop(workshop, thresholds=thresholds, registry=registry, rules=rules)
    if not workshop.reference_sources:
        return result
    finding = await check_reference_sources(workshop.reference_sources, base_dir=base_dir)
    return result.extend((finding,))


async def check_reference_sources(
    sources: Iterable[str],
    *,
    base_dir: str | os.PathLike[str] | None = None,
) -> Finding:
    declared = list(sources)
    readable = await asyncio.gather(
        *(asyncio.to_thread(_is_readable_file, _resolve(source, base_dir)) for source in declared)
    )
    missing = [source for source, ok in zip(declared, readable, strict=True) if not ok]
    if missing:
        return Finding(
            rule=REFERENCE_SOURCES_RULE,
            passed=False,
            severity=Severity.ERROR,
            message=(
                f"{len(missing)} reference source(s) not found or not readable: "
                f"{', '.join(missing)}"
            ),
            remediation="Check that paths are correct relative to your working directory",
        )
    return Finding(
        rule=REFERENCE_SOURCES_RULE,
        passed=True,
        severity=Severity.ERROR,
        message=f"All {len(declared)} reference source files exist and are readable",
    )


def _resolve(source: str, base_dir: str | os.PathLike[str] | None) -> Path:
    path = Path(source).expanduser()
    if base_dir is not None and not path.is_absolute():
        path = Path(base_dir) / path
    return path


def _is_readable_file(path: Path) -> bool:
    try:
        return path.is_file() and os.access(path, os.R_OK)
    except OSError:
        return False


__all__ = [
    "REFERENCE_SOURCES_RULE",
    "check_reference_sources",
    "default_registry",
    "validate_workshop",
    "validate_workshop_async",
]
