"""
workshop-factory config package public API.

File: src/workshop_factory/config/__init__.py
Last updated: 2026-10-17

Purpose
- Export config loading/validation entrypoints, settings types and errors.
- Support loading from ``workshop_factory.toml`` + ``WORKSHOP_FACTORY_`` env
  overrides.
"""

from workshop_factory.config.loader import (
    ConfigLoadError,
    env_name_for_path,
    load_config,
    load_settings,
    normalize_paths,
)
from workshop_factory.config.schema import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    ConfigValidationIssue,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)
from workshop_factory.config.settings import ExtractionSettings, ObservabilitySettings, Settings

__all__ = [
    "DEFAULT_CONFIG",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ExtractionSettings",
    "ObservabilitySettings",
    "Settings",
    "assert_valid_config",
    "default_config",
    "env_name_for_path",
    "load_config",
    "load_settings",
    "merge_config",
    "normalize_paths",
    "validate_config",
]
