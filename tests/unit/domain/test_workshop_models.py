"""
workshop-factory — unit tests for the workshop document model.

File: tests/unit/domain/test_workshop_models.py

Purpose
- Strict schema parsing with dotted violation paths.
- Canonical JSON export and dict round trips.
- Construction-time invariants of sections and modules.
"""

from __future__ import annotations

import copy
import json

import pytest

from workshop_factory.domain import (
    AudienceLevel,
    CheckpointSection,
    CognitiveLevel,
    ExpositionSection,
    PracticeSection,
    SchemaViolation,
    SectionKind,
    Workshop,
    canonical_section_json,
    parse_workshop,
    section_from_dict,
)


def _payload() -> dict[str, object]:
    return {
        "title": "Parsing Workshop",
        "topic": "parsers",
        "audience": {"level": "intermediate", "stack": "python", "size": 20},
        "duration": 45,
        "prerequisites": ["basic python"],
        "reference_sources": [],
        "modules": [
            {
                "title": "Tokens",
                "duration": 45,
                "learning_outcomes": [
                    {"text": "Implement a tokenizer", "cognitive_level": "apply"}
                ],
                "sections": [
                    {
                        "type": "exposition",
                        "title": "What is a token",
                        "duration": 10,
                        "talking_points": ["lexemes", "kinds"],
                    },
                    {
                        "type": "practice",
                        "title": "Tokenize",
                        "duration": 20,
                        "instructions": "Write tokenize().",
                        "starter_content": "def tokenize(s): ...",
                        "solution_content": "def tokenize(s): return s.split()",
                        "hints": [],
                    },
                    {
                        "type": "reflection",
                        "title": "Debrief",
                        "duration": 5,
                        "prompts": ["What was hard?"],
                    },
                    {
                        "type": "checkpoint",
                        "title": "Quiz",
                        "duration": 10,
                        "questions": ["q1", "q2"],
                        "expected_answers": ["a1", "a2"],
                        "explanations": ["e1", "e2"],
                    },
                ],
            }
        ],
    }


@pytest.mark.unit
class TestParsing:
    def test_parses_all_section_variants(self) -> None:
        workshop = parse_workshop(json.dumps(_payload()))

        assert workshop.audience.level is AudienceLevel.INTERMEDIATE
        kinds = [section.kind for _, _, section in workshop.iter_sections()]
        assert kinds == [
            SectionKind.EXPOSITION,
            SectionKind.PRACTICE,
            SectionKind.REFLECTION,
            SectionKind.CHECKPOINT,
        ]
        outcome = workshop.modules[0].learning_outcomes[0]
        assert outcome.cognitive_level is CognitiveLevel.APPLY
        assert outcome.leading_word == "Implement"

    def test_dict_round_trip_is_lossless(self) -> None:
        payload = _payload()
        workshop = Workshop.from_dict(payload)

        assert workshop.to_dict() == payload
        assert Workshop.from_json(workshop.to_json()) == workshop

    def test_canonical_json_is_key_order_independent(self) -> None:
        payload = _payload()
        reordered = dict(reversed(list(payload.items())))

        assert Workshop.from_dict(payload).to_json() == Workshop.from_dict(reordered).to_json()

    def test_invalid_json_text_is_a_schema_violation(self) -> None:
        with pytest.raises(SchemaViolation) as excinfo:
            parse_workshop('{"title": ')
        assert excinfo.value.path == "Workshop"
        assert "invalid JSON" in excinfo.value.reason

    @pytest.mark.parametrize(
        "raw",
        ['{"duration": ' + "1" * 5000 + "}", "[" * 100_000],
        ids=["oversized-integer", "deep-nesting"],
    )
    def test_undecodable_text_is_always_a_schema_violation(self, raw: str) -> None:
        with pytest.raises(SchemaViolation) as excinfo:
            parse_workshop(raw)
        assert excinfo.value.path == "Workshop"
        assert excinfo.value.reason.startswith("invalid JSON")

    def test_unknown_section_type_reports_path(self) -> None:
        payload = copy.deepcopy(_payload())
        payload["modules"][0]["sections"][1]["type"] = "lecture"  # type: ignore[index]

        with pytest.raises(SchemaViolation) as excinfo:
            Workshop.from_dict(payload)
        assert excinfo.value.path == "Workshop.modules[0].sections[1].type"

    def test_missing_field_reports_section_path(self) -> None:
        payload = copy.deepcopy(_payload())
        del payload["modules"][0]["sections"][1]["starter_content"]  # type: ignore[index]

        with pytest.raises(SchemaViolation) as excinfo:
            Workshop.from_dict(payload)
        assert excinfo.value.path == "Workshop.modules[0].sections[1]"
        assert "starter_content" in excinfo.value.reason

    def test_unexpected_root_field_is_rejected(self) -> None:
        payload = _payload()
        payload["status"] = "draft"

        with pytest.raises(SchemaViolation, match="unexpected fields"):
            Workshop.from_dict(payload)

    @pytest.mark.parametrize("duration", [0, -5, True, "10", float("inf")])
    def test_bad_section_duration_is_rejected(self, duration: object) -> None:
        payload = copy.deepcopy(_payload())
        payload["modules"][0]["sections"][0]["duration"] = duration  # type: ignore[index]

        with pytest.raises(SchemaViolation) as excinfo:
            Workshop.from_dict(payload)
        assert excinfo.value.path == "Workshop.modules[0].sections[0].duration"

    def test_fractional_duration_is_accepted(self) -> None:
        section = section_from_dict(
            {"type": "reflection", "title": "r", "duration": 7.5, "prompts": []}
        )
        assert section.duration == 7.5

    def test_unknown_audience_level_lists_allowed_values(self) -> None:
        payload = _payload()
        payload["audience"] = {"level": "expert"}

        with pytest.raises(SchemaViolation) as excinfo:
            Workshop.from_dict(payload)
        assert excinfo.value.path == "Workshop.audience.level"
        assert "beginner, intermediate, advanced" in excinfo.value.reason


@pytest.mark.unit
class TestSectionInvariants:
    def test_checkpoint_lists_must_align(self) -> None:
        with pytest.raises(SchemaViolation, match="same length"):
            CheckpointSection(
                title="Quiz",
                duration=5,
                questions=("q1", "q2"),
                expected_answers=("a1",),
                explanations=("e1", "e2"),
            )

    def test_sequences_are_frozen_to_tuples(self) -> None:
        section = PracticeSection(title="Lab", duration=10, hints=["a", "b"])  # type: ignore[arg-type]
        assert section.hints == ("a", "b")

    def test_canonical_section_json_includes_discriminator(self) -> None:
        rendered = canonical_section_json(ExpositionSection(title="Intro", duration=5))
        assert rendered == '{"duration":5,"talking_points":[],"title":"Intro","type":"exposition"}'

    def test_cognitive_levels_rank_in_declaration_order(self) -> None:
        ranks = [level.rank for level in CognitiveLevel]

        assert ranks == list(range(6))
        assert CognitiveLevel.REMEMBER.rank < CognitiveLevel.CREATE.rank

    def test_section_minutes_and_count(self, build) -> None:
        workshop = build.workshop(
            [
                build.module([build.exposition(10), build.practice(20)]),
                build.module([build.checkpoint(5)]),
            ]
        )
        assert workshop.modules[0].section_minutes == 30
        assert workshop.section_count == 3
        assert workshop.duration == 35
