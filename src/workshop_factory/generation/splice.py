"""
workshop-factory — partial section splicing

File: src/workshop_factory/generation/splice.py
Last updated: 2026-10-17

Purpose
- Copy regenerated sections from a schema-valid replacement workshop into the
  authoritative workshop at specific flat positions.

Functional requirements
- Positions are resolved against the authoritative workshop; the fragment is
  read at the same ``(module, section)`` address.
- Untouched sections, modules and root metadata are carried over as the same
  objects, so their canonical serialization stays byte-identical.
- Root metadata is never taken from the fragment. Reference sources are merged
  separately with ``merge_reference_sources``.
- A target the fragment cannot resolve is reported in ``SpliceResult.missing``
  and logged as a warning; the splice still succeeds for the rest.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import structlog

from workshop_factory.domain.indexing import FlatIndex, section_at
from workshop_factory.domain.models import Module, Section, Workshop


@dataclass(frozen=True, slots=True)
class SpliceResult:
    """Outcome of one splice: the new workshop plus what resolved."""

    workshop: Workshop
    requested: tuple[int, ...]
    updated: tuple[int, ...]
    missing: tuple[int, ...]

    @property
    def mismatch(self) -> bool:
        return len(self.updated) != len(self.requested)

    def summary(self) -> str:
        if not self.mismatch:
            return f"updated {len(self.updated)} section(s)"
        return (
            f"updated {len(self.updated)} of {len(self.requested)} section(s); "
            f"fragment had no section for {list(self.missing)}"
        )


def splice_sections(
    workshop: Workshop,
    fragment: Workshop,
    targets: Iterable[int],
    *,
    logger: Any | None = None,
) -> SpliceResult:
    """Return ``workshop`` with the sections at ``targets`` taken from ``fragment``.

    ``targets`` are flat indices already checked with ``resolve_targets``;
    an index that does not exist in ``workshop`` raises ``SectionIndexError``.
    """

    log = logger if logger is not None else structlog.get_logger(__name__)
    flat_index = FlatIndex.build(workshop)
    requested = tuple(dict.fromkeys(targets))

    replacements: dict[int, dict[int, Section]] = {}
    updated: list[int] = []
    missing: list[int] = []
    for target in requested:
        position = flat_index.position_of(target)
        replacement = section_at(fragment, position)
        if replacement is None:
            missing.append(target)
            continue
        replacements.setdefault(position.module_index, {})[position.section_index] = replacement
        updated.append(target)

    modules = tuple(
        _replace_sections(module, replacements[module_index])
        if module_index in replacements
        else module
        for module_index, module in enumerate(workshop.modules)
    )
    spliced = dataclasses.replace(workshop, modules=modules) if replacements else workshop

    result = SpliceResult(
        workshop=spliced,
        requested=requested,
        updated=tuple(updated),
        missing=tuple(missing),
    )
    if result.mismatch:
        log.warning(
            "splice_count_mismatch",
            requested=len(requested),
            updated=len(updated),
            missing=list(missing),
        )
    return result


def _replace_sections(module: Module, replacements: dict[int, Section]) -> Module:
    sections = tuple(
        replacements.get(section_index, section)
        for section_index, section in enumerate(module.sections)
    )
    return dataclasses.replace(module, sections=sections)


def merge_reference_sources(workshop: Workshop, sources: Iterable[str]) -> Workshop:
    """Union ``sources`` into the declared reference sources.

    Existing order is kept, new sources are appended in the order given and
    duplicates are dropped. Returns ``workshop`` itself when nothing is new.
    """

    merged = tuple(dict.fromkeys((*workshop.reference_sources, *sources)))
    if merged == workshop.reference_sources:
        return workshop
    return dataclasses.replace(workshop, reference_sources=merged)


__all__ = ["SpliceResult", "merge_reference_sources", "splice_sections"]
