"""Generation path: streaming, payload extraction, splicing and regeneration."""

from workshop_factory.generation.extraction import (
    close_truncated,
    extract_json,
    find_object_end,
    repair_truncated,
)
from workshop_factory.generation.regeneration import (
    build_regeneration_message,
    regenerate_sections,
    render_workshop_yaml,
)
from workshop_factory.generation.splice import (
    SpliceResult,
    merge_reference_sources,
    splice_sections,
)
from workshop_factory.generation.stream import (
    ChunkKind,
    GeneratorSession,
    SessionEvent,
    StreamChunk,
    TransportFailure,
    collect_response,
    stream_response,
)

__all__ = [
    "ChunkKind",
    "GeneratorSession",
    "SessionEvent",
    "SpliceResult",
    "StreamChunk",
    "TransportFailure",
    "build_regeneration_message",
    "close_truncated",
    "collect_response",
    "extract_json",
    "find_object_end",
    "merge_reference_sources",
    "regenerate_sections",
    "render_workshop_yaml",
    "repair_truncated",
    "splice_sections",
    "stream_response",
]
