"""Numeric thresholds consumed by the validation rule catalog."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields

from workshop_factory import constants
from workshop_factory.domain.models import JSONValue


@dataclass(frozen=True, slots=True)
class ValidationThresholds:
    """Tolerances in minutes and ratio bounds in whole percent."""

    module_duration_tolerance: float = constants.MODULE_DURATION_TOLERANCE
    total_duration_tolerance: float = constants.TOTAL_DURATION_TOLERANCE
    min_section_duration: float = constants.MIN_SECTION_DURATION
    max_checkpoint_gap: float = constants.MAX_CHECKPOINT_GAP
    max_exposition_duration: float = constants.MAX_EXPOSITION_DURATION
    min_practice_percent: float = constants.MIN_PRACTICE_PERCENT
    max_exposition_percent: float = constants.MAX_EXPOSITION_PERCENT
    min_checkpoint_percent: float = constants.MIN_CHECKPOINT_PERCENT

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"ValidationThresholds.{item.name}: expected number")
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"ValidationThresholds.{item.name}: must be finite and >= 0")
            if item.name.endswith("_percent") and value > 100:
                raise ValueError(f"ValidationThresholds.{item.name}: must be <= 100")

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object]) -> ValidationThresholds:
        known = {item.name for item in fields(cls)}
        unknown = sorted(key for key in payload if key not in known)
        if unknown:
            raise ValueError(f"ValidationThresholds: unexpected fields: {unknown}")
        return cls(**payload)  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, JSONValue]:
        return dict(asdict(self))


DEFAULT_THRESHOLDS = ValidationThresholds()

__all__ = ["DEFAULT_THRESHOLDS", "ValidationThresholds"]
