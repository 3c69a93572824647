"""
workshop-factory — workshop document model

File: src/workshop_factory/domain/models.py
Last updated: 2026-10-17

Purpose
- Frozen dataclass model for a workshop: root metadata, ordered modules, and
  four closed section variants.
- Schema boundary: strict ``from_dict`` parsing that raises ``SchemaViolation``
  with a dotted field path, and canonical ``to_dict``/``to_json`` export.

Functional requirements
- The model is created whole and never mutated field-by-field; the only
  supported change is whole-section replacement (see ``generation.splice``).
- ``to_json`` output is canonical (sorted keys, compact separators) so two
  snapshots can be compared byte-for-byte.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, NoReturn, TypeAlias, assert_never

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

Minutes: TypeAlias = int | float


class SchemaViolation(ValueError):
    """Raised when a parsed value does not conform to the workshop shape."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.reason = message


class CognitiveLevel(StrEnum):
    """Bloom's taxonomy level, declared in ascending order."""

    REMEMBER = "remember"
    UNDERSTAND = "understand"
    APPLY = "apply"
    ANALYZE = "analyze"
    EVALUATE = "evaluate"
    CREATE = "create"

    @property
    def rank(self) -> int:
        return _COGNITIVE_ORDER.index(self)


_COGNITIVE_ORDER: tuple[CognitiveLevel, ...] = tuple(CognitiveLevel)


class AudienceLevel(StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class SectionKind(StrEnum):
    EXPOSITION = "exposition"
    PRACTICE = "practice"
    REFLECTION = "reflection"
    CHECKPOINT = "checkpoint"


def _fail(path: str, message: str) -> NoReturn:
    raise SchemaViolation(path, message)


def _canonical_json(value: JSONValue) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _expect_object(
    value: object,
    path: str,
    *,
    required: set[str],
    optional: set[str] | None = None,
) -> dict[str, object]:
    if not isinstance(value, Mapping):
        _fail(path, f"expected object, got {type(value).__name__}")

    parsed: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            _fail(path, f"object keys must be strings, got {type(key).__name__}")
        parsed[key] = item

    allowed = required | (optional or set())
    unknown = sorted(key for key in parsed if key not in allowed)
    if unknown:
        _fail(path, f"unexpected fields: {unknown}")

    missing = sorted(key for key in required if key not in parsed)
    if missing:
        _fail(path, f"missing required fields: {missing}")

    return parsed


def _as_text(value: object, path: str) -> str:
    if not isinstance(value, str):
        _fail(path, f"expected string, got {type(value).__name__}")
    return value


def _as_optional_text(value: object, path: str) -> str | None:
    if value is None:
        return None
    return _as_text(value, path)


def _as_text_tuple(value: object, path: str) -> tuple[str, ...]:
    if isinstance(value, (str, bytes, bytearray)) or not isinstance(value, Sequence):
        _fail(path, f"expected array, got {type(value).__name__}")
    return tuple(_as_text(item, f"{path}[{index}]") for index, item in enumerate(value))


def _as_duration(value: object, path: str) -> Minutes:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        _fail(path, f"expected number, got {type(value).__name__}")
    if isinstance(value, float) and not math.isfinite(value):
        _fail(path, "must be finite")
    if value <= 0:
        _fail(path, "must be > 0")
    return value


def _as_optional_count(value: object, path: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        _fail(path, f"expected number, got {type(value).__name__}")
    if isinstance(value, float):
        if not value.is_integer():
            _fail(path, "must be a whole number")
        value = int(value)
    if value < 0:
        _fail(path, "must be >= 0")
    return value


def _as_enum(enum_type: type[StrEnum], value: object, path: str) -> StrEnum:
    if isinstance(value, enum_type):
        return value
    if not isinstance(value, str):
        _fail(path, f"expected string, got {type(value).__name__}")
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        _fail(path, f"unknown value {value!r}; expected one of [{allowed}]")


def _freeze_texts(instance: object, *names: str) -> None:
    for name in names:
        object.__setattr__(instance, name, tuple(getattr(instance, name)))


@dataclass(frozen=True, slots=True)
class LearningOutcome:
    """Outcome statement tagged with the cognitive level it targets."""

    text: str
    cognitive_level: CognitiveLevel

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "cognitive_level",
            _as_enum(CognitiveLevel, self.cognitive_level, "LearningOutcome.cognitive_level"),
        )

    @property
    def leading_word(self) -> str:
        words = self.text.split()
        return words[0] if words else ""

    @classmethod
    def from_dict(cls, payload: object, path: str = "LearningOutcome") -> LearningOutcome:
        parsed = _expect_object(payload, path, required={"text", "cognitive_level"})
        return cls(
            text=_as_text(parsed["text"], f"{path}.text"),
            cognitive_level=CognitiveLevel(
                _as_enum(CognitiveLevel, parsed["cognitive_level"], f"{path}.cognitive_level")
            ),
        )

    def to_dict(self) -> dict[str, JSONValue]:
        return {"text": self.text, "cognitive_level": self.cognitive_level.value}


@dataclass(frozen=True, slots=True)
class ExpositionSection:
    """Presenter-led segment built from talking points."""

    title: str
    duration: Minutes
    talking_points: tuple[str, ...] = ()

    kind: ClassVar[SectionKind] = SectionKind.EXPOSITION

    def __post_init__(self) -> None:
        _as_duration(self.duration, "ExpositionSection.duration")
        _freeze_texts(self, "talking_points")


@dataclass(frozen=True, slots=True)
class PracticeSection:
    """Hands-on exercise with starter and reference solution."""

    title: str
    duration: Minutes
    instructions: str = ""
    starter_content: str = ""
    solution_content: str = ""
    hints: tuple[str, ...] = ()

    kind: ClassVar[SectionKind] = SectionKind.PRACTICE

    def __post_init__(self) -> None:
        _as_duration(self.duration, "PracticeSection.duration")
        _freeze_texts(self, "hints")


@dataclass(frozen=True, slots=True)
class ReflectionSection:
    """Open discussion driven by prompts."""

    title: str
    duration: Minutes
    prompts: tuple[str, ...] = ()

    kind: ClassVar[SectionKind] = SectionKind.REFLECTION

    def __post_init__(self) -> None:
        _as_duration(self.duration, "ReflectionSection.duration")
        _freeze_texts(self, "prompts")


@dataclass(frozen=True, slots=True)
class CheckpointSection:
    """Knowledge check; questions, answers and explanations are parallel lists."""

    title: str
    duration: Minutes
    questions: tuple[str, ...] = ()
    expected_answers: tuple[str, ...] = ()
    explanations: tuple[str, ...] = ()

    kind: ClassVar[SectionKind] = SectionKind.CHECKPOINT

    def __post_init__(self) -> None:
        _as_duration(self.duration, "CheckpointSection.duration")
        _freeze_texts(self, "questions", "expected_answers", "explanations")
        lengths = {len(self.questions), len(self.expected_answers), len(self.explanations)}
        if len(lengths) > 1:
            _fail(
                "CheckpointSection",
                "questions, expected_answers and explanations must have the same length",
            )


Section: TypeAlias = ExpositionSection | PracticeSection | ReflectionSection | CheckpointSection


def section_from_dict(payload: object, path: str = "Section") -> Section:
    """Parse one section, dispatching on its ``type`` discriminator."""

    if not isinstance(payload, Mapping):
        _fail(path, f"expected object, got {type(payload).__name__}")
    kind = _as_enum(SectionKind, payload.get("type"), f"{path}.type")

    try:
        match kind:
            case SectionKind.EXPOSITION:
                parsed = _expect_object(
                    payload, path, required={"type", "title", "duration", "talking_points"}
                )
                return ExpositionSection(
                    title=_as_text(parsed["title"], f"{path}.title"),
                    duration=_as_duration(parsed["duration"], f"{path}.duration"),
                    talking_points=_as_text_tuple(
                        parsed["talking_points"], f"{path}.talking_points"
                    ),
                )
            case SectionKind.PRACTICE:
                parsed = _expect_object(
                    payload,
                    path,
                    required={
                        "type",
                        "title",
                        "duration",
                        "instructions",
                        "starter_content",
                        "solution_content",
                        "hints",
                    },
                )
                return PracticeSection(
                    title=_as_text(parsed["title"], f"{path}.title"),
                    duration=_as_duration(parsed["duration"], f"{path}.duration"),
                    instructions=_as_text(parsed["instructions"], f"{path}.instructions"),
                    starter_content=_as_text(
                        parsed["starter_content"], f"{path}.starter_content"
                    ),
                    solution_content=_as_text(
                        parsed["solution_content"], f"{path}.solution_content"
                    ),
                    hints=_as_text_tuple(parsed["hints"], f"{path}.hints"),
                )
            case SectionKind.REFLECTION:
                parsed = _expect_object(
                    payload, path, required={"type", "title", "duration", "prompts"}
                )
                return ReflectionSection(
                    title=_as_text(parsed["title"], f"{path}.title"),
                    duration=_as_duration(parsed["duration"], f"{path}.duration"),
                    prompts=_as_text_tuple(parsed["prompts"], f"{path}.prompts"),
                )
            case SectionKind.CHECKPOINT:
                parsed = _expect_object(
                    payload,
                    path,
                    required={
                        "type",
                        "title",
                        "duration",
                        "questions",
                        "expected_answers",
                        "explanations",
                    },
                )
                return CheckpointSection(
                    title=_as_text(parsed["title"], f"{path}.title"),
                    duration=_as_duration(parsed["duration"], f"{path}.duration"),
                    questions=_as_text_tuple(parsed["questions"], f"{path}.questions"),
                    expected_answers=_as_text_tuple(
                        parsed["expected_answers"], f"{path}.expected_answers"
                    ),
                    explanations=_as_text_tuple(parsed["explanations"], f"{path}.explanations"),
                )
            case _:
                assert_never(kind)
    except SchemaViolation as exc:
        if exc.path.startswith(path):
            raise
        raise SchemaViolation(path, exc.reason) from exc


def section_to_dict(section: Section) -> dict[str, JSONValue]:
    """Canonical wire form of one section."""

    payload: dict[str, JSONValue] = {
        "type": section.kind.value,
        "title": section.title,
        "duration": section.duration,
    }
    match section:
        case ExpositionSection():
            payload["talking_points"] = list(section.talking_points)
        case PracticeSection():
            payload["instructions"] = section.instructions
            payload["starter_content"] = section.starter_content
            payload["solution_content"] = section.solution_content
            payload["hints"] = list(section.hints)
        case ReflectionSection():
            payload["prompts"] = list(section.prompts)
        case CheckpointSection():
            payload["questions"] = list(section.questions)
            payload["expected_answers"] = list(section.expected_answers)
            payload["explanations"] = list(section.explanations)
        case _:
            assert_never(section)
    return payload


@dataclass(frozen=True, slots=True)
class Audience:
    level: AudienceLevel
    stack: str | None = None
    size: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "level", _as_enum(AudienceLevel, self.level, "Audience.level"))

    @classmethod
    def from_dict(cls, payload: object, path: str = "Audience") -> Audience:
        parsed = _expect_object(payload, path, required={"level"}, optional={"stack", "size"})
        return cls(
            level=AudienceLevel(_as_enum(AudienceLevel, parsed["level"], f"{path}.level")),
            stack=_as_optional_text(parsed.get("stack"), f"{path}.stack"),
            size=_as_optional_count(parsed.get("size"), f"{path}.size"),
        )

    def to_dict(self) -> dict[str, JSONValue]:
        payload: dict[str, JSONValue] = {"level": self.level.value}
        if self.stack is not None:
            payload["stack"] = self.stack
        if self.size is not None:
            payload["size"] = self.size
        return payload


@dataclass(frozen=True, slots=True)
class Module:
    """Ordered group of sections with its learning outcomes."""

    title: str
    duration: Minutes
    learning_outcomes: tuple[LearningOutcome, ...] = ()
    sections: tuple[Section, ...] = ()

    def __post_init__(self) -> None:
        _as_duration(self.duration, "Module.duration")
        _freeze_texts(self, "learning_outcomes", "sections")

    @property
    def section_minutes(self) -> Minutes:
        return sum(section.duration for section in self.sections)

    @classmethod
    def from_dict(cls, payload: object, path: str = "Module") -> Module:
        parsed = _expect_object(
            payload,
            path,
            required={"title", "duration", "learning_outcomes", "sections"},
        )
        outcomes = parsed["learning_outcomes"]
        sections = parsed["sections"]
        if not isinstance(outcomes, list):
            _fail(f"{path}.learning_outcomes", f"expected array, got {type(outcomes).__name__}")
        if not isinstance(sections, list):
            _fail(f"{path}.sections", f"expected array, got {type(sections).__name__}")
        return cls(
            title=_as_text(parsed["title"], f"{path}.title"),
            duration=_as_duration(parsed["duration"], f"{path}.duration"),
            learning_outcomes=tuple(
                LearningOutcome.from_dict(item, f"{path}.learning_outcomes[{index}]")
                for index, item in enumerate(outcomes)
            ),
            sections=tuple(
                section_from_dict(item, f"{path}.sections[{index}]")
                for index, item in enumerate(sections)
            ),
        )

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "title": self.title,
            "duration": self.duration,
            "learning_outcomes": [outcome.to_dict() for outcome in self.learning_outcomes],
            "sections": [section_to_dict(section) for section in self.sections],
        }


@dataclass(frozen=True, slots=True)
class Workshop:
    """Root document: metadata plus ordered modules."""

    title: str
    topic: str
    audience: Audience
    duration: Minutes
    prerequisites: tuple[str, ...] = ()
    reference_sources: tuple[str, ...] = ()
    modules: tuple[Module, ...] = ()

    def __post_init__(self) -> None:
        _as_duration(self.duration, "Workshop.duration")
        _freeze_texts(self, "prerequisites", "reference_sources", "modules")

    @property
    def section_count(self) -> int:
        return sum(len(module.sections) for module in self.modules)

    def iter_sections(self) -> Iterator[tuple[int, int, Section]]:
        """Yield ``(module_index, section_index, section)`` in depth-first order."""

        for module_index, module in enumerate(self.modules):
            for section_index, section in enumerate(module.sections):
                yield module_index, section_index, section

    @classmethod
    def from_dict(cls, payload: object, path: str = "Workshop") -> Workshop:
        parsed = _expect_object(
            payload,
            path,
            required={
                "title",
                "topic",
                "audience",
                "duration",
                "prerequisites",
                "reference_sources",
                "modules",
            },
        )
        modules = parsed["modules"]
        if not isinstance(modules, list):
            _fail(f"{path}.modules", f"expected array, got {type(modules).__name__}")
        return cls(
            title=_as_text(parsed["title"], f"{path}.title"),
            topic=_as_text(parsed["topic"], f"{path}.topic"),
            audience=Audience.from_dict(parsed["audience"], f"{path}.audience"),
            duration=_as_duration(parsed["duration"], f"{path}.duration"),
            prerequisites=_as_text_tuple(parsed["prerequisites"], f"{path}.prerequisites"),
            reference_sources=_as_text_tuple(
                parsed["reference_sources"], f"{path}.reference_sources"
            ),
            modules=tuple(
                Module.from_dict(item, f"{path}.modules[{index}]")
                for index, item in enumerate(modules)
            ),
        )

    @classmethod
    def from_json(cls, raw: str) -> Workshop:
        return parse_workshop(raw)

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "title": self.title,
            "topic": self.topic,
            "audience": self.audience.to_dict(),
            "duration": self.duration,
            "prerequisites": list(self.prerequisites),
            "reference_sources": list(self.reference_sources),
            "modules": [module.to_dict() for module in self.modules],
        }

    def to_json(self) -> str:
        return _canonical_json(self.to_dict())


def parse_workshop(raw: str) -> Workshop:
    """Decode JSON text and validate it against the workshop shape.

    Raises ``SchemaViolation`` both for undecodable text and for payloads of
    the wrong shape; callers treat either as a failed generation attempt.
    """

    if not isinstance(raw, str):
        _fail("Workshop", f"expected JSON string, got {type(raw).__name__}")
    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        # ValueError also covers oversized integer literals, not only JSONDecodeError.
        raise SchemaViolation("Workshop", f"invalid JSON: {exc}") from exc
    return Workshop.from_dict(payload)


def canonical_section_json(section: Section) -> str:
    return _canonical_json(section_to_dict(section))


__all__ = [
    "Audience",
    "AudienceLevel",
    "CheckpointSection",
    "CognitiveLevel",
    "ExpositionSection",
    "LearningOutcome",
    "Module",
    "PracticeSection",
    "ReflectionSection",
    "SchemaViolation",
    "Section",
    "SectionKind",
    "Workshop",
    "canonical_section_json",
    "parse_workshop",
    "section_from_dict",
    "section_to_dict",
]
