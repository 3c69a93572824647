"""Validation engine: rule catalog, registry and severity-classified findings."""

from workshop_factory.verification.bloom import (
    CANONICAL_VERBS,
    TIER_LEVELS,
    allowed_levels,
    starts_with_canonical_verb,
)
from workshop_factory.verification.engine import (
    REFERENCE_SOURCES_RULE,
    check_reference_sources,
    default_registry,
    validate_workshop,
    validate_workshop_async,
)
from workshop_factory.verification.findings import Finding, Severity, ValidationResult
from workshop_factory.verification.registry import (
    RuleCheck,
    RuleOutcome,
    RuleRegistry,
    ValidationRule,
)
from workshop_factory.verification.rules import DEFAULT_RULES
from workshop_factory.verification.thresholds import DEFAULT_THRESHOLDS, ValidationThresholds

__all__ = [
    "CANONICAL_VERBS",
    "DEFAULT_RULES",
    "DEFAULT_THRESHOLDS",
    "REFERENCE_SOURCES_RULE",
    "TIER_LEVELS",
    "Finding",
    "RuleCheck",
    "RuleOutcome",
    "RuleRegistry",
    "Severity",
    "ValidationResult",
    "ValidationRule",
    "ValidationThresholds",
    "allowed_levels",
    "check_reference_sources",
    "default_registry",
    "starts_with_canonical_verb",
    "validate_workshop",
    "validate_workshop_async",
]
