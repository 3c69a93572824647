"""Shared deterministic builders for workshop documents."""

from __future__ import annotations

from collections.abc import Sequence

import pytest

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
    Section,
    Workshop,
)


class WorkshopBuilder:
    """Small factory for valid sections, modules and workshops."""

    def exposition(self, duration: float = 10, title: str = "Overview") -> ExpositionSection:
        return ExpositionSection(title=title, duration=duration, talking_points=("why", "how"))

    def practice(
        self,
        duration: float = 20,
        title: str = "Lab",
        *,
        starter: str = "def solve():\n    ...\n",
        solution: str = "def solve():\n    return 42\n",
    ) -> PracticeSection:
        return PracticeSection(
            title=title,
            duration=duration,
            instructions="Implement solve().",
            starter_content=starter,
            solution_content=solution,
            hints=("Start small",),
        )

    def reflection(self, duration: float = 10, title: str = "Discussion") -> ReflectionSection:
        return ReflectionSection(title=title, duration=duration, prompts=("What surprised you?",))

    def checkpoint(self, duration: float = 10, title: str = "Quiz") -> CheckpointSection:
        return CheckpointSection(
            title=title,
            duration=duration,
            questions=("What does solve return?",),
            expected_answers=("42",),
            explanations=("It is hard-coded.",),
        )

    def outcome(
        self, text: str = "Implement a parser", level: CognitiveLevel = CognitiveLevel.APPLY
    ) -> LearningOutcome:
        return LearningOutcome(text=text, cognitive_level=level)

    def module(
        self,
        sections: Sequence[Section],
        *,
        duration: float | None = None,
        title: str = "Module",
        outcomes: Sequence[LearningOutcome] | None = None,
    ) -> Module:
        return Module(
            title=title,
            duration=duration if duration is not None else sum(s.duration for s in sections),
            learning_outcomes=tuple(outcomes) if outcomes is not None else (self.outcome(),),
            sections=tuple(sections),
        )

    def workshop(
        self,
        modules: Sequence[Module],
        *,
        duration: float | None = None,
        level: AudienceLevel = AudienceLevel.BEGINNER,
        reference_sources: Sequence[str] = (),
        title: str = "Parsing Workshop",
    ) -> Workshop:
        return Workshop(
            title=title,
            topic="parsers",
            audience=Audience(level=level, stack="python", size=12),
            duration=duration if duration is not None else sum(m.duration for m in modules),
            prerequisites=("basic python",),
            reference_sources=tuple(reference_sources),
            modules=tuple(modules),
        )

    def numbered(self, sizes: Sequence[int]) -> Workshop:
        """Workshop whose sections are titled ``S1``..``SN`` in flat order."""

        counter = 0
        modules: list[Module] = []
        for module_index, size in enumerate(sizes):
            sections: list[Section] = []
            for _ in range(size):
                counter += 1
                sections.append(self.practice(duration=10, title=f"S{counter}"))
            modules.append(self.module(sections, title=f"M{module_index + 1}"))
        return self.workshop(modules)


@pytest.fixture
def build() -> WorkshopBuilder:
    return WorkshopBuilder()
