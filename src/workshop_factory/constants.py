"""Stable constants shared across the generation and verification layers."""

from __future__ import annotations

from typing import Final

# Default config file and environment prefix.
DEFAULT_CONFIG_FILE: Final[str] = "workshop_factory.toml"
ENV_PREFIX: Final[str] = "WORKSHOP_FACTORY_"

# Truncation repair looks back at most this many characters from the end.
DEFAULT_REPAIR_WINDOW: Final[int] = 200

# Validation thresholds (minutes unless noted).
MODULE_DURATION_TOLERANCE: Final[float] = 2
TOTAL_DURATION_TOLERANCE: Final[float] = 5
MIN_SECTION_DURATION: Final[float] = 5
MAX_CHECKPOINT_GAP: Final[float] = 25
MAX_EXPOSITION_DURATION: Final[float] = 15
MIN_PRACTICE_PERCENT: Final[float] = 60
MAX_EXPOSITION_PERCENT: Final[float] = 25
MIN_CHECKPOINT_PERCENT: Final[float] = 15

# Generator session event names.
DELTA_EVENT: Final[str] = "assistant.message_delta"
MESSAGE_EVENT: Final[str] = "assistant.message"
IDLE_EVENT: Final[str] = "session.idle"

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_REPAIR_WINDOW",
    "DELTA_EVENT",
    "ENV_PREFIX",
    "IDLE_EVENT",
    "MAX_CHECKPOINT_GAP",
    "MAX_EXPOSITION_DURATION",
    "MAX_EXPOSITION_PERCENT",
    "MESSAGE_EVENT",
    "MIN_CHECKPOINT_PERCENT",
    "MIN_PRACTICE_PERCENT",
    "MIN_SECTION_DURATION",
    "MODULE_DURATION_TOLERANCE",
    "TOTAL_DURATION_TOLERANCE",
]
