"""Flat section numbering across a workshop.

Sections are numbered 1..N by depth-first traversal: modules in order, then
sections within each module in order. Numbering does not restart at module
boundaries. A ``FlatIndex`` is a side table built from one workshop snapshot;
rebuild it after any change to section counts.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from workshop_factory.domain.models import Section, Workshop


class SectionIndexError(IndexError):
    """Raised when a flat index or position does not exist in the workshop."""


@dataclass(frozen=True, slots=True, order=True)
class SectionPosition:
    """Zero-based ``(module_index, section_index)`` address of a section."""

    module_index: int
    section_index: int

    def label(self) -> str:
        return f"module {self.module_index + 1}, section {self.section_index + 1}"


class FlatIndex:
    """Bidirectional map between 1-based flat indices and section positions."""

    __slots__ = ("_by_position", "_positions")

    def __init__(self, positions: Iterable[SectionPosition]) -> None:
        self._positions: tuple[SectionPosition, ...] = tuple(positions)
        self._by_position: dict[SectionPosition, int] = {
            position: flat for flat, position in enumerate(self._positions, start=1)
        }

    @classmethod
    def build(cls, workshop: Workshop) -> FlatIndex:
        return cls(
            SectionPosition(module_index, section_index)
            for module_index, section_index, _ in workshop.iter_sections()
        )

    @classmethod
    def from_module_sizes(cls, sizes: Iterable[int]) -> FlatIndex:
        positions: list[SectionPosition] = []
        for module_index, size in enumerate(sizes):
            if size < 0:
                raise ValueError("module sizes must be >= 0")
            positions.extend(SectionPosition(module_index, offset) for offset in range(size))
        return cls(positions)

    def __len__(self) -> int:
        return len(self._positions)

    def __iter__(self) -> Iterator[int]:
        return iter(range(1, len(self._positions) + 1))

    def __contains__(self, flat_index: object) -> bool:
        return (
            isinstance(flat_index, int)
            and not isinstance(flat_index, bool)
            and 1 <= flat_index <= len(self._positions)
        )

    def position_of(self, flat_index: int) -> SectionPosition:
        if flat_index not in self:
            raise self.range_error(flat_index)
        return self._positions[flat_index - 1]

    def flat_index_of(self, position: SectionPosition) -> int:
        try:
            return self._by_position[position]
        except KeyError:
            raise SectionIndexError(f"no section at {position.label()}") from None

    def items(self) -> Iterator[tuple[int, SectionPosition]]:
        return iter(enumerate(self._positions, start=1))

    def range_error(self, flat_index: object) -> SectionIndexError:
        total = len(self._positions)
        if total == 0:
            return SectionIndexError(
                f"invalid section index {flat_index!r}: workshop has no sections"
            )
        return SectionIndexError(
            f"invalid section index {flat_index!r}: workshop has {total} sections (1-{total})"
        )


def section_at(workshop: Workshop, position: SectionPosition) -> Section | None:
    """Return the section at ``position`` or ``None`` when the shape has no such slot."""

    if not 0 <= position.module_index < len(workshop.modules):
        return None
    sections = workshop.modules[position.module_index].sections
    if not 0 <= position.section_index < len(sections):
        return None
    return sections[position.section_index]


def resolve_targets(workshop: Workshop, indices: Iterable[int] | None = None) -> list[int]:
    """Validate requested flat indices; ``None`` or empty selects every section.

    Order of first appearance is kept and duplicates are dropped.
    """

    flat_index = FlatIndex.build(workshop)
    requested = list(indices) if indices is not None else []
    if not requested:
        return list(flat_index)

    resolved: list[int] = []
    seen: set[int] = set()
    for value in requested:
        if value not in flat_index:
            raise flat_index.range_error(value)
        if value in seen:
            continue
        seen.add(value)
        resolved.append(value)
    return resolved


def describe_targets(workshop: Workshop, targets: Iterable[int]) -> list[str]:
    flat_index = FlatIndex.build(workshop)
    lines: list[str] = []
    for target in targets:
        position = flat_index.position_of(target)
        section = section_at(workshop, position)
        title = section.title if section is not None else "?"
        lines.append(f"{target}. {title}")
    return lines


__all__ = [
    "FlatIndex",
    "SectionIndexError",
    "SectionPosition",
    "describe_targets",
    "resolve_targets",
    "section_at",
]
