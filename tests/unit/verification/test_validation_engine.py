"""
workshop-factory — unit tests for the validation engine and rule registry.

File: tests/unit/verification/test_validation_engine.py

Purpose
- Severity-aware overall validity and deterministic output.
- Registry add/remove/subset semantics.
- Async reference-source readability check.
"""

from __future__ import annotations

import pytest

from workshop_factory.verification import (
    DEFAULT_RULES,
    REFERENCE_SOURCES_RULE,
    Finding,
    RuleOutcome,
    RuleRegistry,
    Severity,
    ValidationResult,
    ValidationRule,
    ValidationThresholds,
    check_reference_sources,
    default_registry,
    validate_workshop,
    validate_workshop_async,
)

CATALOG_ORDER = (
    "duration_sum",
    "total_duration",
    "practice_completeness",
    "min_item_duration",
    "checkpoint_spacing",
    "practice_ratio",
    "exposition_ratio",
    "checkpoint_ratio",
    "max_exposition_duration",
    "outcome_alignment",
)


def _sixty_minute_workshop(build, **kwargs):
    return build.workshop(
        [
            build.module(
                [
                    build.exposition(10),
                    build.practice(20),
                    build.checkpoint(10),
                    build.reflection(20),
                ],
                duration=60,
            )
        ],
        duration=60,
        **kwargs,
    )


@pytest.mark.unit
class TestValidateWorkshop:
    def test_sixty_minute_scenario(self, build) -> None:
        result = validate_workshop(_sixty_minute_workshop(build))

        assert result.overall_valid
        assert [finding.rule for finding in result.failed] == ["checkpoint_spacing"]
        assert result.errors == ()
        [spacing] = result.suggestions
        assert spacing.severity is Severity.SUGGESTION
        assert "30min gap" in spacing.message
        assert result.for_rule("exposition_ratio")[0].message == (
            "Exposition time is 16.7% of total (10/60min)"
        )
        assert result.for_rule("practice_ratio")[0].message == (
            "Practice time is 66.7% of total (40/60min)"
        )
        assert result.for_rule("checkpoint_ratio")[0].passed

    def test_findings_follow_catalog_order(self, build) -> None:
        result = validate_workshop(_sixty_minute_workshop(build))

        assert tuple(dict.fromkeys(finding.rule for finding in result.findings)) == CATALOG_ORDER

    def test_error_failure_blocks_validity(self, build) -> None:
        workshop = build.workshop([build.module([build.exposition(10)])])

        result = validate_workshop(workshop)

        assert not result.overall_valid
        assert "practice_completeness" in {finding.rule for finding in result.errors}

    def test_result_is_deterministic(self, build) -> None:
        workshop = _sixty_minute_workshop(build)

        first = validate_workshop(workshop)
        second = validate_workshop(workshop)

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_passing_findings_carry_no_remediation(self, build) -> None:
        result = validate_workshop(_sixty_minute_workshop(build))

        for finding in result.findings:
            if finding.passed:
                assert finding.remediation is None
                assert "remediation" not in finding.to_dict()
            else:
                assert finding.remediation

    def test_thresholds_and_rule_selection(self, build) -> None:
        workshop = _sixty_minute_workshop(build)

        wider_gap = ValidationThresholds(max_checkpoint_gap=30)
        relaxed = validate_workshop(workshop, thresholds=wider_gap)
        only_ratios = validate_workshop(workshop, rules=["practice_ratio", "checkpoint_ratio"])

        assert relaxed.failed == ()
        assert [finding.rule for finding in only_ratios.findings] == [
            "practice_ratio",
            "checkpoint_ratio",
        ]

    def test_unknown_rule_selection_raises(self, build) -> None:
        with pytest.raises(ValueError, match="unknown rule 'pacing'"):
            validate_workshop(_sixty_minute_workshop(build), rules=["pacing"])

    def test_sync_validation_skips_reference_sources(self, build) -> None:
        workshop = _sixty_minute_workshop(build, reference_sources=["missing.md"])

        result = validate_workshop(workshop)

        assert result.for_rule(REFERENCE_SOURCES_RULE) == ()


@pytest.mark.unit
class TestFindings:
    def test_suggestions_never_block(self) -> None:
        result = ValidationResult.from_findings(
            [
                Finding("a", False, Severity.SUGGESTION, "meh", "do better"),
                Finding("b", True, Severity.ERROR, "fine"),
            ]
        )

        assert result.overall_valid
        assert [finding.rule for finding in result.suggestions] == ["a"]

    def test_passed_finding_drops_remediation(self) -> None:
        finding = Finding("a", True, "error", "ok", "ignored")  # type: ignore[arg-type]

        assert finding.remediation is None
        assert finding.severity is Severity.ERROR
        assert finding.to_dict() == {
            "rule": "a",
            "passed": True,
            "severity": "error",
            "message": "ok",
        }

    def test_extend_recomputes_validity(self) -> None:
        result = ValidationResult.from_findings([Finding("a", True, Severity.ERROR, "ok")])

        extended = result.extend([Finding("b", False, Severity.ERROR, "bad", "fix")])

        assert result.overall_valid
        assert not extended.overall_valid
        assert len(extended.findings) == 2


@pytest.mark.unit
class TestRuleRegistry:
    def _always(self, passed: bool):
        def check(workshop, thresholds):
            yield RuleOutcome(passed, f"always {passed}", None if passed else "nothing to do")

        return check

    def test_default_registry_is_independent_copy(self) -> None:
        first = default_registry()
        first.unregister("outcome_alignment")

        assert first.names() == CATALOG_ORDER[:-1]
        assert default_registry().names() == CATALOG_ORDER
        assert len(DEFAULT_RULES) == len(CATALOG_ORDER)

    def test_custom_rule_runs_after_builtins(self, build) -> None:
        registry = default_registry()
        registry.register(ValidationRule("house_style", Severity.ERROR, self._always(False)))

        result = validate_workshop(_sixty_minute_workshop(build), registry=registry)

        assert result.findings[-1].rule == "house_style"
        assert result.findings[-1].remediation == "nothing to do"
        assert not result.overall_valid

    def test_duplicate_registration_is_rejected(self) -> None:
        registry = RuleRegistry([ValidationRule("x", Severity.ERROR, self._always(True))])

        with pytest.raises(ValueError, match="already registered"):
            registry.register(ValidationRule("x", Severity.SUGGESTION, self._always(True)))

    def test_register_rejects_non_rules(self) -> None:
        with pytest.raises(TypeError):
            RuleRegistry().register(lambda workshop, thresholds: ())  # type: ignore[arg-type]

    def test_unknown_names_list_registered_rules(self) -> None:
        registry = RuleRegistry([ValidationRule("x", Severity.ERROR, self._always(True))])

        with pytest.raises(ValueError, match=r"unknown rule 'y'; registered: \[x\]"):
            registry.get("y")
        with pytest.raises(ValueError):
            registry.unregister("y")

    def test_subset_keeps_registration_order(self) -> None:
        registry = default_registry()

        subset = registry.subset(["outcome_alignment", "duration_sum"])

        assert subset.names() == ("duration_sum", "outcome_alignment")
        assert "duration_sum" in subset
        assert len(registry) == len(CATALOG_ORDER)

    def test_rule_requires_name_and_callable(self) -> None:
        with pytest.raises(ValueError):
            ValidationRule(" ", Severity.ERROR, self._always(True))
        with pytest.raises(ValueError):
            ValidationRule("x", Severity.ERROR, "not callable")  # type: ignore[arg-type]


@pytest.mark.unit
class TestReferenceSources:
    @pytest.mark.asyncio
    async def test_all_sources_readable(self, tmp_path) -> None:
        (tmp_path / "a.md").write_text("a", encoding="utf-8")
        (tmp_path / "b.md").write_text("b", encoding="utf-8")

        finding = await check_reference_sources(["a.md", "b.md"], base_dir=tmp_path)

        assert finding.passed
        assert finding.rule == REFERENCE_SOURCES_RULE
        assert finding.message == "All 2 reference source files exist and are readable"

    @pytest.mark.asyncio
    async def test_missing_and_directory_sources_fail(self, tmp_path) -> None:
        (tmp_path / "a.md").write_text("a", encoding="utf-8")
        (tmp_path / "docs").mkdir()

        finding = await check_reference_sources(
            ["a.md", "gone.md", "docs"], base_dir=tmp_path
        )

        assert not finding.passed
        assert finding.severity is Severity.ERROR
        assert finding.message == "2 reference source(s) not found or not readable: gone.md, docs"
        assert finding.remediation == (
            "Check that paths are correct relative to your working directory"
        )

    @pytest.mark.asyncio
    async def test_absolute_paths_ignore_base_dir(self, tmp_path) -> None:
        source = tmp_path / "abs.md"
        source.write_text("x", encoding="utf-8")

        finding = await check_reference_sources([str(source)], base_dir=tmp_path / "elsewhere")

        assert finding.passed

    @pytest.mark.asyncio
    async def test_async_validation_appends_one_finding(self, build, tmp_path) -> None:
        workshop = _sixty_minute_workshop(build, reference_sources=["missing.md"])

        result = await validate_workshop_async(workshop, base_dir=tmp_path)

        assert result.findings[-1].rule == REFERENCE_SOURCES_RULE
        assert len(result.for_rule(REFERENCE_SOURCES_RULE)) == 1
        assert not result.overall_valid

    @pytest.mark.asyncio
    async def test_async_validation_without_sources_matches_sync(self, build) -> None:
        workshop = _sixty_minute_workshop(build)

        assert await validate_workshop_async(workshop) == validate_workshop(workshop)
