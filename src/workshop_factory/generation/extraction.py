"""
workshop-factory — JSON payload extraction and truncation repair

File: src/workshop_factory/generation/extraction.py
Last updated: 2026-10-17

Purpose
- Recover the best-effort JSON payload from noisy generator text: fenced
  blocks, prose-wrapped objects, and output truncated mid-stream.

Extraction order (first success wins)
1. Interior of the first fenced block (```` ``` ```` or ```` ```json ````), trimmed.
2. The whole trimmed text, when it opens with ``{`` or ``[`` and already
   decodes as JSON.
3. The first balanced ``{...}`` region found by a string-aware depth scan.
4. Truncation repair over the text from the first ``{``: drop up to
   ``repair_window`` trailing characters one at a time, close any open string
   and open containers, and keep the first candidate that decodes.
5. Otherwise the trimmed text unchanged.

Functional requirements
- ``extract_json`` never raises. A miss is a string that fails the schema
  parse that follows; that failure is the caller's signal.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Final

import structlog

from workshop_factory.constants import DEFAULT_REPAIR_WINDOW

_FENCED_BLOCK_RE: Final[re.Pattern[str]] = re.compile(
    r"```(?:json)?\s*\n?(?P<body>.*?)```",
    flags=re.DOTALL,
)
_TRAILING_NOISE: Final[str] = " \t\r\n,:"
_CLOSERS: Final[dict[str, str]] = {"{": "}", "[": "]"}

_logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class _ScanState:
    """Result of a left-to-right scan that skips string contents."""

    in_string: bool
    dangling_escape: bool
    open_containers: tuple[str, ...]


def extract_json(text: str, *, repair_window: int = DEFAULT_REPAIR_WINDOW) -> str:
    """Return the most plausible JSON payload contained in ``text``."""

    fenced = _extract_fenced(text)
    if fenced:
        return fenced

    trimmed = text.strip()
    if trimmed.startswith(("{", "[")) and _decodes(trimmed):
        return trimmed

    start = text.find("{")
    if start < 0:
        return trimmed

    end = find_object_end(text, start)
    if end is not None:
        return text[start : end + 1]

    repaired = repair_truncated(text[start:], window=max(repair_window, 0))
    if repaired is not None:
        _logger.debug("extraction_repaired", original_length=len(text) - start)
        return repaired

    _logger.debug("extraction_repair_failed", window=repair_window, length=len(text) - start)
    return trimmed


def find_object_end(text: str, start: int) -> int | None:
    """Index of the ``}`` that returns depth to zero, scanning from ``text[start]``.

    Braces inside string literals are ignored; a backslash escapes the next
    character only inside a string. ``None`` means the object never closes.
    """

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if escaped:
            escaped = False
            continue
        if in_string:
            if char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def repair_truncated(fragment: str, *, window: int = DEFAULT_REPAIR_WINDOW) -> str | None:
    """Try progressively shorter prefixes of ``fragment`` until one closes into valid JSON."""

    if window < 0:
        raise ValueError("window must be >= 0")
    max_trim = min(window, len(fragment) - 1)
    for trim in range(max_trim + 1):
        prefix = fragment[: len(fragment) - trim]
        candidate = close_truncated(prefix)
        if _decodes(candidate):
            if trim:
                _logger.debug("extraction_repair_trimmed", trimmed=trim)
            return candidate
    return None


def close_truncated(prefix: str) -> str:
    """Append the characters that would close ``prefix`` as a JSON value.

    Trailing comma/colon/whitespace noise is stripped first. An open string is
    closed (after dropping a dangling escape backslash), then every unmatched
    ``{``/``[`` outside strings is closed in reverse order.
    """

    candidate = prefix.rstrip(_TRAILING_NOISE)
    state = _scan(candidate)
    if state.in_string:
        if state.dangling_escape:
            candidate = candidate[:-1]
        candidate += '"'
        state = _scan(candidate)
    closers = "".join(_CLOSERS[opener] for opener in reversed(state.open_containers))
    return candidate + closers


def _scan(text: str) -> _ScanState:
    stack: list[str] = []
    in_string = False
    escaped = False
    for char in text:
        if escaped:
            escaped = False
            continue
        if in_string:
            if char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(char)
        elif char in "}]" and stack and _CLOSERS[stack[-1]] == char:
            stack.pop()
    return _ScanState(
        in_string=in_string,
        dangling_escape=escaped,
        open_containers=tuple(stack),
    )


def _extract_fenced(text: str) -> str | None:
    match = _FENCED_BLOCK_RE.search(text)
    if match is None:
        return None
    body = match.group("body").strip()
    return body or None


def _decodes(candidate: str) -> bool:
    if not candidate:
        return False
    try:
        json.loads(candidate)
    except (ValueError, RecursionError):
        return False
    return True


__all__ = [
    "close_truncated",
    "extract_json",
    "find_object_end",
    "repair_truncated",
]
