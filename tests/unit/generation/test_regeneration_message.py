"""Tests for the regeneration request framing."""

from __future__ import annotations

import pytest
import yaml

from workshop_factory.domain import SectionPosition
from workshop_factory.generation import build_regeneration_message, render_workshop_yaml


@pytest.mark.unit
class TestRegenerationMessage:
    def test_yaml_snapshot_round_trips_to_the_document(self, build) -> None:
        workshop = build.numbered([2, 1])

        rendered = render_workshop_yaml(workshop)

        assert rendered.endswith("\n")
        assert rendered.startswith("title: Parsing Workshop\n")
        assert yaml.safe_load(rendered) == workshop.to_dict()

    def test_parts_are_framed_in_order(self, build) -> None:
        workshop = build.numbered([2, 1])

        message = build_regeneration_message(
            workshop,
            [SectionPosition(0, 1), SectionPosition(1, 0)],
            instructions="  Make the labs harder.  ",
        )

        parts = message.split("\n\n")
        assert parts[0] == "Make the labs harder."
        assert parts[1].startswith("Current workshop:\n```yaml\ntitle: Parsing Workshop\n")
        assert message.count("```") == 2
        assert "Sections to regenerate:\n- Module 1, Section 2\n- Module 2, Section 1" in message
        assert message.endswith("Return the complete updated workshop as a single JSON object.\n")
        assert "Reference material" not in message

    def test_blank_instructions_are_omitted(self, build) -> None:
        message = build_regeneration_message(build.numbered([1]), [SectionPosition(0, 0)], "  ")
        assert message.startswith("Current workshop:\n")

    def test_reference_material_is_appended(self, build) -> None:
        message = build_regeneration_message(
            build.numbered([1]),
            [SectionPosition(0, 0)],
            reference_material={"notes.md": "Use recursive descent."},
        )

        assert "Reference material:\n\n### notes.md\n```\nUse recursive descent.\n```" in message
