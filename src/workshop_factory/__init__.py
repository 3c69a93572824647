"""
workshop-factory — generation core

File: src/workshop_factory/__init__.py
Last updated: 2026-10-17

Purpose
- Package root. Recovers structured workshop documents from streamed generator
  output, splices regenerated sections into an existing workshop, and checks
  structural and pedagogical invariants.

Import boundary rules
- No side effects at import time (no config loading, no logging init).
- Submodules are imported lazily by callers; only the version is exported here.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
