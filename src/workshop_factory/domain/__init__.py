"""Workshop document model and flat section indexing."""

from workshop_factory.domain.indexing import (
    FlatIndex,
    SectionIndexError,
    SectionPosition,
    describe_targets,
    resolve_targets,
    section_at,
)
from workshop_factory.domain.models import (
    Audience,
    AudienceLevel,
    CheckpointSection,
    CognitiveLevel,
    ExpositionSection,
    LearningOutcome,
    Module,
    PracticeSection,
    ReflectionSection,
    SchemaViolation,
    Section,
    SectionKind,
    Workshop,
    canonical_section_json,
    parse_workshop,
    section_from_dict,
    section_to_dict,
)

__all__ = [
    "Audience",
    "AudienceLevel",
    "CheckpointSection",
    "CognitiveLevel",
    "ExpositionSection",
    "FlatIndex",
    "LearningOutcome",
    "Module",
    "PracticeSection",
    "ReflectionSection",
    "SchemaViolation",
    "Section",
    "SectionIndexError",
    "SectionKind",
    "SectionPosition",
    "Workshop",
    "canonical_section_json",
    "describe_targets",
    "parse_workshop",
    "resolve_targets",
    "section_at",
    "section_from_dict",
    "section_to_dict",
]
