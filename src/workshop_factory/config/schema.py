"""
workshop-factory — configuration schema and validation.

File: src/workshop_factory/config/schema.py
Last updated: 2026-10-17

Purpose
- Define configuration defaults and strict validation for the extraction,
  validation and observability sections.

Functional requirements
- Validate payloads and report every problem with a dotted field path.
- Reject unknown sections and keys.
- Deterministic deep-merge used for file, env and override layering.
"""

from __future__ import annotations

import copy
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict, cast

from workshop_factory import constants

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")

PATH_FIELDS: Final[tuple[tuple[str, ...], ...]] = (("observability", "log_dir"),)

_PERCENT_KEYS: Final[frozenset[str]] = frozenset(
    {"min_practice_percent", "max_exposition_percent", "min_checkpoint_percent"}
)


class ExtractionConfig(TypedDict):
    repair_window: int


class ValidationConfig(TypedDict):
    module_duration_tolerance: float
    total_duration_tolerance: float
    min_section_duration: float
    max_checkpoint_gap: float
    max_exposition_duration: float
    min_practice_percent: float
    max_exposition_percent: float
    min_checkpoint_percent: float


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_dir: str
    log_to_stdout: bool
    redact_secrets: bool


class WorkshopFactoryConfig(TypedDict):
    extraction: ExtractionConfig
    validation: ValidationConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[WorkshopFactoryConfig] = {
    "extraction": {
        "repair_window": constants.DEFAULT_REPAIR_WINDOW,
    },
    "validation": {
        "module_duration_tolerance": constants.MODULE_DURATION_TOLERANCE,
        "total_duration_tolerance": constants.TOTAL_DURATION_TOLERANCE,
        "min_section_duration": constants.MIN_SECTION_DURATION,
        "max_checkpoint_gap": constants.MAX_CHECKPOINT_GAP,
        "max_exposition_duration": constants.MAX_EXPOSITION_DURATION,
        "min_practice_percent": constants.MIN_PRACTICE_PERCENT,
        "max_exposition_percent": constants.MAX_EXPOSITION_PERCENT,
        "min_checkpoint_percent": constants.MIN_CHECKPOINT_PERCENT,
    },
    "observability": {
        "log_level": "INFO",
        "log_dir": "",
        "log_to_stdout": False,
        "redact_secrets": True,
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> WorkshopFactoryConfig:
    """Return a deep copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = copy.deepcopy(dict(base))
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> tuple[ConfigValidationIssue, ...]:
    """Return every issue found in a complete config payload."""

    issues = _IssueCollector()
    if not isinstance(config, Mapping):
        issues.add("<root>", f"expected object, got {type(config).__name__}")
        return issues.items()

    _reject_unknown_keys(config, set(DEFAULT_CONFIG), "", issues)
    for section_name in sorted(DEFAULT_CONFIG):
        section = config.get(section_name)
        if not isinstance(section, Mapping):
            issues.add(section_name, f"expected object, got {type(section).__name__}")
            continue
        _reject_unknown_keys(section, set(DEFAULT_CONFIG[section_name]), section_name, issues)
        _require_keys(section, set(DEFAULT_CONFIG[section_name]), section_name, issues)

    extraction = config.get("extraction")
    if isinstance(extraction, Mapping) and "repair_window" in extraction:
        _check_int(extraction["repair_window"], "extraction.repair_window", issues, minimum=0)

    validation = config.get("validation")
    if isinstance(validation, Mapping):
        for key in sorted(validation):
            if key not in DEFAULT_CONFIG["validation"]:
                continue
            _check_number(
                validation[key],
                f"validation.{key}",
                issues,
                maximum=100 if key in _PERCENT_KEYS else None,
            )

    observability = config.get("observability")
    if isinstance(observability, Mapping):
        if "log_level" in observability:
            level = observability["log_level"]
            if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
                expected = ", ".join(LOG_LEVELS)
                issues.add(
                    "observability.log_level",
                    f"invalid value {level!r}; expected one of: {expected}",
                )
        if "log_dir" in observability:
            log_dir = observability["log_dir"]
            if not isinstance(log_dir, str):
                issues.add(
                    "observability.log_dir", f"expected string, got {type(log_dir).__name__}"
                )
            elif "\x00" in log_dir:
                issues.add("observability.log_dir", "must not contain NUL bytes")
        for key in ("log_to_stdout", "redact_secrets"):
            if key in observability and not isinstance(observability[key], bool):
                issues.add(
                    f"observability.{key}",
                    f"expected boolean, got {type(observability[key]).__name__}",
                )

    return issues.items()


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    issues = validate_config(config)
    if issues:
        raise ConfigValidationError(issues)
    normalized = copy.deepcopy(dict(cast(Mapping[str, Any], config)))
    normalized["observability"]["log_level"] = normalized["observability"]["log_level"].upper()
    return normalized


def _check_int(value: object, path: str, issues: _IssueCollector, *, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
    elif value < minimum:
        issues.add(path, f"must be >= {minimum}")


def _check_number(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    maximum: float | None = None,
) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        issues.add(path, f"expected number, got {type(value).__name__}")
    elif not math.isfinite(value):
        issues.add(path, "must be finite")
    elif value < 0:
        issues.add(path, "must be >= 0")
    elif maximum is not None and value > maximum:
        issues.add(path, f"must be <= {maximum}")


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _require_keys(
    payload: Mapping[str, object],
    required: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(required):
        if key not in payload:
            issues.add(_join(path, key), "missing required field")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        existing = target.get(key)
        if isinstance(value, Mapping) and isinstance(existing, dict):
            _merge_into(existing, value)
        elif isinstance(value, Mapping):
            nested: dict[str, Any] = {}
            _merge_into(nested, value)
            target[key] = nested
        else:
            target[key] = copy.deepcopy(value)


__all__ = [
    "ConfigValidationError",
    "ConfigValidationIssue",
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "PATH_FIELDS",
    "WorkshopFactoryConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "validate_config",
]
