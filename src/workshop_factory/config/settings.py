"""Typed, frozen views over a validated config payload."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from workshop_factory import constants
from workshop_factory.verification.thresholds import ValidationThresholds


@dataclass(frozen=True, slots=True)
class ExtractionSettings:
    repair_window: int = constants.DEFAULT_REPAIR_WINDOW

    def __post_init__(self) -> None:
        if isinstance(self.repair_window, bool) or not isinstance(self.repair_window, int):
            raise ValueError("ExtractionSettings.repair_window: expected integer")
        if self.repair_window < 0:
            raise ValueError("ExtractionSettings.repair_window: must be >= 0")


@dataclass(frozen=True, slots=True)
class ObservabilitySettings:
    """Sink configuration for ``observability.logging.setup_structured_logging``."""

    log_level: str = "INFO"
    log_dir: Path | None = None
    log_to_stdout: bool = False
    redact_secrets: bool = True


@dataclass(frozen=True, slots=True)
class Settings:
    extraction: ExtractionSettings = field(default_factory=ExtractionSettings)
    validation: ValidationThresholds = field(default_factory=ValidationThresholds)
    observability: ObservabilitySettings = field(default_factory=ObservabilitySettings)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> Settings:
        """Build settings from a payload that already passed ``assert_valid_config``."""

        observability = config["observability"]
        log_dir = observability["log_dir"]
        return cls(
            extraction=ExtractionSettings(repair_window=config["extraction"]["repair_window"]),
            validation=ValidationThresholds.from_mapping(config["validation"]),
            observability=ObservabilitySettings(
                log_level=observability["log_level"],
                log_dir=Path(log_dir) if log_dir else None,
                log_to_stdout=observability["log_to_stdout"],
                redact_secrets=observability["redact_secrets"],
            ),
        )


__all__ = ["ExtractionSettings", "ObservabilitySettings", "Settings"]
