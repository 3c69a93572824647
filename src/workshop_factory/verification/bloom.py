"""Bloom's taxonomy verb catalog and audience tier expectations."""

from __future__ import annotations

import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Final

from workshop_factory.domain.models import AudienceLevel, CognitiveLevel

CANONICAL_VERBS: Final[Mapping[CognitiveLevel, tuple[str, ...]]] = MappingProxyType(
    {
        CognitiveLevel.REMEMBER: (
            "define", "list", "identify", "recall", "name", "recognize", "state", "label",
        ),
        CognitiveLevel.UNDERSTAND: (
            "explain", "describe", "summarize", "interpret", "classify", "compare", "discuss",
            "paraphrase",
        ),
        CognitiveLevel.APPLY: (
            "implement", "use", "execute", "demonstrate", "solve", "apply", "build", "operate",
            "navigate", "craft", "practice", "calculate", "modify", "construct", "produce",
            "select", "show",
        ),
        CognitiveLevel.ANALYZE: (
            "differentiate", "examine", "compare", "contrast", "debug", "test", "investigate",
            "categorize", "diagnose", "classify", "infer", "identify", "outline", "attribute",
            "organize",
        ),
        CognitiveLevel.EVALUATE: (
            "assess", "critique", "justify", "defend", "judge", "recommend", "prioritize",
            "validate", "determine", "decide", "appraise", "rank", "measure", "evaluate",
        ),
        CognitiveLevel.CREATE: (
            "design", "build", "construct", "develop", "compose", "formulate", "plan", "architect",
            "synthesize", "generate", "hypothesize", "engineer",
        ),
    }
)

TIER_LEVELS: Final[Mapping[AudienceLevel, tuple[CognitiveLevel, ...]]] = MappingProxyType(
    {
        AudienceLevel.BEGINNER: (
            CognitiveLevel.REMEMBER,
            CognitiveLevel.UNDERSTAND,
            CognitiveLevel.APPLY,
        ),
        AudienceLevel.INTERMEDIATE: (
            CognitiveLevel.UNDERSTAND,
            CognitiveLevel.APPLY,
            CognitiveLevel.ANALYZE,
        ),
        AudienceLevel.ADVANCED: (
            CognitiveLevel.ANALYZE,
            CognitiveLevel.EVALUATE,
            CognitiveLevel.CREATE,
        ),
    }
)

_NON_LETTERS = re.compile(r"[^a-z]")


def normalize_leading_word(text: str) -> str:
    """First whitespace-delimited word, lowercased, with non-letters removed."""

    words = text.split()
    if not words:
        return ""
    return _NON_LETTERS.sub("", words[0].lower())


def starts_with_canonical_verb(text: str, level: CognitiveLevel) -> bool:
    """True when the leading word is (an inflection of) one of the level's verbs.

    "Builds" and "implementing" match "build" and "implement".
    """

    word = normalize_leading_word(text)
    return bool(word) and any(word.startswith(verb) for verb in CANONICAL_VERBS[level])


def allowed_levels(audience: AudienceLevel) -> tuple[CognitiveLevel, ...]:
    return TIER_LEVELS[AudienceLevel(audience)]


__all__ = [
    "CANONICAL_VERBS",
    "TIER_LEVELS",
    "allowed_levels",
    "normalize_leading_word",
    "starts_with_canonical_verb",
]
