"""
workshop-factory — targeted section regeneration

File: src/workshop_factory/generation/regeneration.py
Last updated: 2026-10-17

Purpose
- Run one regeneration attempt end to end: resolve targets, merge reference
  sources, render the request, stream the response, extract and parse the
  payload, then splice the targeted sections back in.

Functional requirements
- Invalid targets raise ``SectionIndexError`` before the session is touched.
- Transport failures and schema violations propagate to the caller; there is
  no retry here.
- Instruction wording is supplied by the caller; this module only frames the
  document snapshot, the target list and any reference material.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

import structlog
import yaml

from workshop_factory.constants import DEFAULT_REPAIR_WINDOW
from workshop_factory.domain.indexing import (
    FlatIndex,
    SectionPosition,
    describe_targets,
    resolve_targets,
)
from workshop_factory.domain.models import Workshop, parse_workshop
from workshop_factory.generation.extraction import extract_json
from workshop_factory.generation.splice import (
    SpliceResult,
    merge_reference_sources,
    splice_sections,
)
from workshop_factory.generation.stream import GeneratorSession, StreamChunk, collect_response


def render_workshop_yaml(workshop: Workshop) -> str:
    rendered = yaml.safe_dump(
        workshop.to_dict(),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        indent=2,
        width=80,
    )
    if not rendered.endswith("\n"):
        rendered = rendered + "\n"
    return rendered


def build_regeneration_message(
    workshop: Workshop,
    positions: Sequence[SectionPosition],
    instructions: str = "",
    reference_material: Mapping[str, str] | None = None,
) -> str:
    """Frame the caller's instructions around a YAML snapshot and target list."""

    parts: list[str] = []
    if instructions.strip():
        parts.append(instructions.strip())
    parts.append(f"Current workshop:\n```yaml\n{render_workshop_yaml(workshop)}```")
    targets = "\n".join(
        f"- Module {position.module_index + 1}, Section {position.section_index + 1}"
        for position in positions
    )
    parts.append(f"Sections to regenerate:\n{targets}")
    if reference_material:
        blocks = "\n\n".join(
            f"### {label}\n```\n{content}\n```" for label, content in reference_material.items()
        )
        parts.append(f"Reference material:\n\n{blocks}")
    parts.append("Return the complete updated workshop as a single JSON object.")
    return "\n\n".join(parts) + "\n"


async def regenerate_sections(
    session: GeneratorSession,
    workshop: Workshop,
    *,
    targets: Iterable[int] | None = None,
    instructions: str = "",
    reference_sources: Iterable[str] = (),
    reference_material: Mapping[str, str] | None = None,
    on_chunk: Callable[[StreamChunk], None] | None = None,
    repair_window: int = DEFAULT_REPAIR_WINDOW,
    logger: Any | None = None,
) -> SpliceResult:
    """Regenerate the sections at ``targets`` (all sections when omitted)."""

    log = logger if logger is not None else structlog.get_logger(__name__)

    resolved = resolve_targets(workshop, targets)
    log.info(
        "regeneration_started",
        target_count=len(resolved),
        targets=describe_targets(workshop, resolved),
    )

    base = merge_reference_sources(workshop, reference_sources)
    flat_index = FlatIndex.build(base)
    positions = [flat_index.position_of(target) for target in resolved]
    message = build_regeneration_message(
        base,
        positions,
        instructions=instructions,
        reference_material=reference_material,
    )

    response = await collect_response(session, message, on_chunk=on_chunk, logger=log)
    fragment = parse_workshop(extract_json(response, repair_window=repair_window))

    result = splice_sections(base, fragment, resolved, logger=log)
    log.info(
        "regeneration_completed",
        updated=len(result.updated),
        requested=len(result.requested),
    )
    return result


__all__ = [
    "build_regeneration_message",
    "regenerate_sections",
    "render_workshop_yaml",
]
