"""
workshop-factory — built-in validation rule catalog

File: src/workshop_factory/verification/rules.py
Last updated: 2026-10-17

Purpose
- Structural, numeric and categorical checks over a ``Workshop``. Each rule is
  a pure function registered into ``DEFAULT_RULES`` in catalog order.

Rule catalog
- duration_sum             error       per module: |sections - module| <= tolerance
- total_duration           error       |modules - workshop| <= tolerance
- practice_completeness    error       practice sections carry starter and solution
- min_item_duration        error       every section >= minimum
- checkpoint_spacing       suggestion  per module: longest run without a checkpoint
- practice_ratio           suggestion  practice + reflection share >= minimum
- exposition_ratio         suggestion  exposition share <= maximum
- checkpoint_ratio         suggestion  checkpoint share >= minimum
- max_exposition_duration  suggestion  no exposition section above the cap
- outcome_alignment        suggestion  outcome level fits the audience tier and
                                       starts with a verb for that level

Ratio checks compare by cross-multiplication (``100 * part`` against
``percent * total``) so boundary values are exact.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator
from fractions import Fraction

from workshop_factory.domain.models import (
    CheckpointSection,
    ExpositionSection,
    Minutes,
    PracticeSection,
    ReflectionSection,
    Workshop,
)
from workshop_factory.verification.bloom import (
    CANONICAL_VERBS,
    allowed_levels,
    starts_with_canonical_verb,
)
from workshop_factory.verification.findings import Severity
from workshop_factory.verification.registry import RuleCheck, RuleOutcome, ValidationRule
from workshop_factory.verification.thresholds import ValidationThresholds

_CATALOG: list[ValidationRule] = []


def _catalog_rule(
    name: str, severity: Severity, description: str
) -> Callable[[RuleCheck], RuleCheck]:
    def decorator(check: RuleCheck) -> RuleCheck:
        _CATALOG.append(
            ValidationRule(name=name, severity=severity, check=check, description=description)
        )
        return check

    return decorator


def _minutes(value: Minutes | Fraction) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{float(value):.1f}"


def _share_summary(label: str, part: Minutes, total: Minutes) -> str:
    return (
        f"{label} time is {100 * part / total:.1f}% of total "
        f"({_minutes(part)}/{_minutes(total)}min)"
    )


def _ceil_minutes(numerator: Minutes, denominator: int = 100) -> int:
    return math.ceil(Fraction(numerator) / denominator)


def _where(module_index: int, section_index: int, title: str) -> str:
    return f'Module {module_index + 1}, Section {section_index + 1} "{title}"'


def _kind_minutes(workshop: Workshop, *kinds: type) -> Minutes:
    return sum(
        section.duration
        for _, _, section in workshop.iter_sections()
        if isinstance(section, kinds)
    )


@_catalog_rule("duration_sum", Severity.ERROR, "module sections add up to the module duration")
def check_duration_sum(
    workshop: Workshop, thresholds: ValidationThresholds
) -> Iterator[RuleOutcome]:
    tolerance = thresholds.module_duration_tolerance
    for module_index, module in enumerate(workshop.modules):
        total = module.section_minutes
        diff = abs(total - module.duration)
        number = module_index + 1
        if diff <= tolerance:
            yield RuleOutcome(
                True,
                f"Module {number} sections sum to {_minutes(total)}min "
                f"(module: {_minutes(module.duration)}min)",
            )
            continue
        yield RuleOutcome(
            False,
            f"Module {number} sections sum to {_minutes(total)}min but module duration is "
            f"{_minutes(module.duration)}min (diff: {_minutes(diff)}min, "
            f"tolerance: +/-{_minutes(tolerance)}min)",
            f"Adjust section durations to total {_minutes(module.duration)}min, "
            f"or update module {number} duration to {_minutes(total)}min",
        )


@_catalog_rule("total_duration", Severity.ERROR, "module durations add up to the workshop")
def check_total_duration(
    workshop: Workshop, thresholds: ValidationThresholds
) -> Iterator[RuleOutcome]:
    total = sum(module.duration for module in workshop.modules)
    diff = abs(total - workshop.duration)
    if diff <= thresholds.total_duration_tolerance:
        yield RuleOutcome(
            True,
            f"Module durations sum to {_minutes(total)}min "
            f"(workshop: {_minutes(workshop.duration)}min)",
        )
        return
    yield RuleOutcome(
        False,
        f"Module durations sum to {_minutes(total)}min but workshop duration is "
        f"{_minutes(workshop.duration)}min (diff: {_minutes(diff)}min, "
        f"tolerance: +/-{_minutes(thresholds.total_duration_tolerance)}min)",
        f"Adjust module durations to total {_minutes(workshop.duration)}min, "
        f"or update workshop duration to {_minutes(total)}min",
    )


@_catalog_rule(
    "practice_completeness",
    Severity.ERROR,
    "at least one practice section; each has starter and solution content",
)
def check_practice_completeness(
    workshop: Workshop, _thresholds: ValidationThresholds
) -> Iterator[RuleOutcome]:
    practice_count = 0
    incomplete = 0
    for module_index, section_index, section in workshop.iter_sections():
        if not isinstance(section, PracticeSection):
            continue
        practice_count += 1
        missing = [
            name
            for name, value in (
                ("starter_content", section.starter_content),
                ("solution_content", section.solution_content),
            )
            if not value.strip()
        ]
        if not missing:
            continue
        incomplete += 1
        if missing == ["starter_content"]:
            remediation = (
                f'Add a starter template for participants to begin from in "{section.title}"'
            )
        elif missing == ["solution_content"]:
            remediation = f'Add a complete working solution to "{section.title}"'
        else:
            remediation = f'Add a starter template and a working solution to "{section.title}"'
        yield RuleOutcome(
            False,
            f"{_where(module_index, section_index, section.title)}: "
            f"missing {' and '.join(missing)}",
            remediation,
        )

    if practice_count == 0:
        yield RuleOutcome(
            False,
            "No practice sections found in workshop",
            "Add at least one practice section to enable active learning",
        )
    elif incomplete == 0:
        yield RuleOutcome(
            True, f"All {practice_count} practice sections have starter and solution content"
        )


@_catalog_rule("min_item_duration", Severity.ERROR, "every section meets the minimum duration")
def check_min_item_duration(
    workshop: Workshop, thresholds: ValidationThresholds
) -> Iterator[RuleOutcome]:
    minimum = thresholds.min_section_duration
    offenders = 0
    for module_index, section_index, section in workshop.iter_sections():
        if section.duration >= minimum:
            continue
        offenders += 1
        yield RuleOutcome(
            False,
            f"{_where(module_index, section_index, section.title)}: duration is "
            f"{_minutes(section.duration)}min, should be >= {_minutes(minimum)}min",
            f'Extend "{section.title}" to at least {_minutes(minimum)}min '
            "or merge it with an adjacent section",
        )
    if offenders == 0:
        yield RuleOutcome(True, f"All sections are >= {_minutes(minimum)} minutes")


@_catalog_rule(
    "checkpoint_spacing",
    Severity.SUGGESTION,
    "no long stretch of content without a checkpoint inside a module",
)
def check_checkpoint_spacing(
    workshop: Workshop, thresholds: ValidationThresholds
) -> Iterator[RuleOutcome]:
    limit = thresholds.max_checkpoint_gap
    for module_index, module in enumerate(workshop.modules):
        since_checkpoint: Minutes = 0
        max_gap: Minutes = 0
        for section in module.sections:
            if isinstance(section, CheckpointSection):
                since_checkpoint = 0
                continue
            since_checkpoint += section.duration
            max_gap = max(max_gap, since_checkpoint)
        number = module_index + 1
        if max_gap <= limit:
            yield RuleOutcome(
                True,
                f"Module {number} has checkpoints every <= {_minutes(limit)}min "
                f"(max gap: {_minutes(max_gap)}min)",
            )
            continue
        yield RuleOutcome(
            False,
            f"Module {number} has a {_minutes(max_gap)}min gap without checkpoints "
            f"(max allowed: {_minutes(limit)}min)",
            f"Add a checkpoint section in module {number} to assess understanding "
            f"every <= {_minutes(limit)}min",
        )


@_catalog_rule(
    "practice_ratio",
    Severity.SUGGESTION,
    "practice and reflection time share of the workshop",
)
def check_practice_ratio(
    workshop: Workshop, thresholds: ValidationThresholds
) -> Iterator[RuleOutcome]:
    practice = _kind_minutes(workshop, PracticeSection, ReflectionSection)
    total = workshop.duration
    percent = thresholds.min_practice_percent
    summary = _share_summary("Practice", practice, total)
    if 100 * practice >= percent * total:
        yield RuleOutcome(True, summary)
        return
    yield RuleOutcome(
        False,
        f"{summary}, needs >= {_minutes(percent)}%",
        f"Convert {_ceil_minutes(percent * total - 100 * practice)}min of exposition "
        "into practice or reflection",
    )


@_catalog_rule("exposition_ratio", Severity.SUGGESTION, "exposition time share of the workshop")
def check_exposition_ratio(
    workshop: Workshop, thresholds: ValidationThresholds
) -> Iterator[RuleOutcome]:
    exposition = _kind_minutes(workshop, ExpositionSection)
    total = workshop.duration
    percent = thresholds.max_exposition_percent
    summary = _share_summary("Exposition", exposition, total)
    if 100 * exposition <= percent * total:
        yield RuleOutcome(True, summary)
        return
    yield RuleOutcome(
        False,
        f"{summary}, should be <= {_minutes(percent)}%",
        f"Reduce exposition by {_ceil_minutes(100 * exposition - percent * total)}min "
        "and convert it to practice or reflection",
    )


@_catalog_rule("checkpoint_ratio", Severity.SUGGESTION, "checkpoint time share of the workshop")
def check_checkpoint_ratio(
    workshop: Workshop, thresholds: ValidationThresholds
) -> Iterator[RuleOutcome]:
    checkpoint = _kind_minutes(workshop, CheckpointSection)
    total = workshop.duration
    percent = thresholds.min_checkpoint_percent
    summary = _share_summary("Checkpoint", checkpoint, total)
    if 100 * checkpoint >= percent * total:
        yield RuleOutcome(True, summary)
        return
    yield RuleOutcome(
        False,
        f"{summary}, needs >= {_minutes(percent)}%",
        f"Add {_ceil_minutes(percent * total - 100 * checkpoint)}min "
        "of checkpoint activities across modules",
    )


@_catalog_rule(
    "max_exposition_duration",
    Severity.SUGGESTION,
    "no single exposition section above the cap",
)
def check_max_exposition_duration(
    workshop: Workshop, thresholds: ValidationThresholds
) -> Iterator[RuleOutcome]:
    cap = thresholds.max_exposition_duration
    offenders = 0
    for module_index, section_index, section in workshop.iter_sections():
        if not isinstance(section, ExpositionSection) or section.duration <= cap:
            continue
        offenders += 1
        yield RuleOutcome(
            False,
            f"{_where(module_index, section_index, section.title)}: exposition is "
            f"{_minutes(section.duration)}min, should be <= {_minutes(cap)}min",
            f'Break "{section.title}" into segments <= {_minutes(cap)}min each, '
            "interleaved with practice or reflection",
        )
    if offenders == 0:
        yield RuleOutcome(True, f"All exposition sections are <= {_minutes(cap)} minutes")


@_catalog_rule(
    "outcome_alignment",
    Severity.SUGGESTION,
    "learning outcomes fit the audience tier and lead with a matching verb",
)
def check_outcome_alignment(
    workshop: Workshop, _thresholds: ValidationThresholds
) -> Iterator[RuleOutcome]:
    audience = workshop.audience.level
    expected = allowed_levels(audience)
    expected_names = [level.value for level in expected]
    example_verbs = '" or "'.join(CANONICAL_VERBS[expected[0]][:2])
    issues = 0
    outcome_count = 0
    for module_index, module in enumerate(workshop.modules):
        for outcome_index, outcome in enumerate(module.learning_outcomes):
            outcome_count += 1
            where = f"Module {module_index + 1}, Outcome {outcome_index + 1}"
            level = outcome.cognitive_level
            if level not in expected:
                issues += 1
                yield RuleOutcome(
                    False,
                    f'{where}: "{outcome.text}" targets "{level.value}", but '
                    f"{audience.value} workshops should focus on: {', '.join(expected_names)}",
                    f"Rewrite to target {' or '.join(expected_names)} cognitive level, "
                    f'e.g. start with "{example_verbs}"',
                )
            if not starts_with_canonical_verb(outcome.text, level):
                issues += 1
                verbs = CANONICAL_VERBS[level][:3]
                quoted_verbs = '", "'.join(verbs)
                yield RuleOutcome(
                    False,
                    f'{where}: "{outcome.text}" does not start with a typical '
                    f'"{level.value}" verb (expected: {", ".join(verbs)}, ...)',
                    f'Start the outcome with a "{level.value}" action verb, '
                    f'e.g. "{quoted_verbs}"',
                )
    if issues == 0:
        yield RuleOutcome(
            True,
            f"All {outcome_count} learning outcomes use levels and verbs suited to a "
            f"{audience.value} audience",
        )


DEFAULT_RULES: tuple[ValidationRule, ...] = tuple(_CATALOG)

__all__ = [
    "DEFAULT_RULES",
    "check_checkpoint_ratio",
    "check_checkpoint_spacing",
    "check_duration_sum",
    "check_exposition_ratio",
    "check_max_exposition_duration",
    "check_min_item_duration",
    "check_outcome_alignment",
    "check_practice_completeness",
    "check_practice_ratio",
    "check_total_duration",
]
