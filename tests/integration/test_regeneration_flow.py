"""
workshop-factory — integration tests for targeted regeneration.

File: tests/integration/test_regeneration_flow.py

Purpose
- Drive ``regenerate_sections`` end to end against a scripted session:
  request framing, streamed response, extraction, schema parse, splice.
- Validate the spliced result, including reference sources on disk.
"""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path

import pytest

from workshop_factory.domain import SchemaViolation, SectionIndexError, canonical_section_json
from workshop_factory.generation import ChunkKind, StreamChunk, regenerate_sections
from workshop_factory.verification import REFERENCE_SOURCES_RULE, validate_workshop_async

from . import ScriptedSession


def _rewritten(workshop):
    """What a generator returns: every section and the title changed."""

    modules = tuple(
        dataclasses.replace(
            module,
            sections=tuple(
                dataclasses.replace(section, title=f"new {section.title}", duration=15)
                for section in module.sections
            ),
        )
        for module in workshop.modules
    )
    return dataclasses.replace(workshop, title="Renamed by generator", modules=modules)


def _sections(workshop) -> list[str]:
    return [canonical_section_json(section) for _, _, section in workshop.iter_sections()]


@pytest.mark.integration
class TestRegenerationFlow:
    @pytest.mark.asyncio
    async def test_fenced_streamed_response_is_spliced(self, build) -> None:
        workshop = build.numbered([3, 2])
        response = (
            "Here is the updated workshop:\n```json\n"
            + json.dumps(_rewritten(workshop).to_dict(), indent=2)
            + "\n```\nLet me know if you need more changes."
        )
        session = ScriptedSession(response, chunk_size=64)
        chunks: list[StreamChunk] = []

        result = await regenerate_sections(
            session,
            workshop,
            targets=[4, 2],
            instructions="Make these sections more hands-on.",
            on_chunk=chunks.append,
        )

        [message] = session.sent
        assert message.startswith("Make these sections more hands-on.\n\nCurrent workshop:\n")
        assert "Sections to regenerate:\n- Module 2, Section 1\n- Module 1, Section 2" in message

        assert chunks and all(chunk.kind is ChunkKind.DELTA for chunk in chunks)
        assert chunks[-1].accumulated == response
        assert session.subscriber_count == 0

        spliced = result.workshop
        assert result.updated == (4, 2)
        assert not result.mismatch
        assert spliced.title == workshop.title
        titles = [section.title for _, _, section in spliced.iter_sections()]
        assert titles == ["S1", "new S2", "S3", "new S4", "S5"]
        before, after = _sections(workshop), _sections(spliced)
        assert [after[i] for i in (0, 2, 4)] == [before[i] for i in (0, 2, 4)]

    @pytest.mark.asyncio
    async def test_default_targets_regenerate_everything(self, build) -> None:
        workshop = build.numbered([2, 1])
        session = ScriptedSession(_rewritten(workshop).to_json(), final_message=True)

        result = await regenerate_sections(session, workshop)

        assert result.requested == (1, 2, 3)
        assert [s.title for _, _, s in result.workshop.iter_sections()] == [
            "new S1",
            "new S2",
            "new S3",
        ]

    @pytest.mark.asyncio
    async def test_truncated_response_is_repaired(self, build) -> None:
        workshop = build.numbered([2, 2])
        text = json.dumps(_rewritten(workshop).to_dict())
        session = ScriptedSession("Sure, working on it: " + text[:-2])

        result = await regenerate_sections(session, workshop, targets=[3])

        assert result.updated == (3,)
        assert result.workshop.modules[1].sections[0].title == "new S3"

    @pytest.mark.asyncio
    async def test_truncation_inside_a_module_fails_schema(self, build) -> None:
        workshop = build.numbered([2, 2])
        text = json.dumps(_rewritten(workshop).to_dict())
        cut = text.index('"title": "M2"') + len('"title": "M')
        session = ScriptedSession(text[:cut])

        with pytest.raises(SchemaViolation):
            await regenerate_sections(session, workshop, targets=[3])

    @pytest.mark.asyncio
    async def test_short_fragment_is_partially_spliced(self, build) -> None:
        workshop = build.numbered([3, 2])
        fragment = _rewritten(build.numbered([3]))
        session = ScriptedSession(fragment.to_json())

        result = await regenerate_sections(session, workshop, targets=[2, 4])

        assert result.updated == (2,)
        assert result.missing == (4,)
        assert result.workshop.modules[1] is workshop.modules[1]

    @pytest.mark.asyncio
    async def test_invalid_target_fails_before_sending(self, build) -> None:
        workshop = build.numbered([3, 2])
        session = ScriptedSession("{}")

        with pytest.raises(SectionIndexError, match="workshop has 5 sections"):
            await regenerate_sections(session, workshop, targets=[2, 9])

        assert session.sent == []
        assert session.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_reference_sources_are_merged_and_checked(
        self, build, tmp_path: Path
    ) -> None:
        (tmp_path / "notes.md").write_text("Recursive descent basics.", encoding="utf-8")
        workshop = build.numbered([1, 1])
        session = ScriptedSession(_rewritten(workshop).to_json())

        result = await regenerate_sections(
            session,
            workshop,
            targets=[1],
            reference_sources=["notes.md"],
            reference_material={"notes.md": "Recursive descent basics."},
        )

        assert result.workshop.reference_sources == ("notes.md",)
        assert "reference_sources:\n- notes.md\n" in session.sent[0]
        assert "### notes.md" in session.sent[0]

        validation = await validate_workshop_async(result.workshop, base_dir=tmp_path)
        [reference] = validation.for_rule(REFERENCE_SOURCES_RULE)
        assert reference.passed
