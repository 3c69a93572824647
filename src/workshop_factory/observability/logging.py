"""
workshop-factory — structured logging sinks

File: src/workshop_factory/observability/logging.py
Last updated: 2026-10-17

Purpose
- Route the package's structlog events through stdlib ``logging`` into
  queue-backed JSON-lines sinks (a file under ``log_dir`` and/or a stream).
- Bind correlation fields (``run_id``, ``workshop_title``, ...) per context
  with ``contextvars`` so concurrent regenerations stay distinguishable.
- Redact secret-looking keys and values before anything is written.

Lifecycle
- ``setup_structured_logging`` replaces any previous setup; the handle is
  also shut down at interpreter exit.
- Logging never changes the control flow of the code that emits it.
"""

from __future__ import annotations

import atexit
import contextvars
import json
import logging
import logging.handlers
import math
import queue
import re
import sys
import threading
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

import structlog

from workshop_factory.config.settings import ObservabilitySettings
from workshop_factory.domain.models import JSONValue

LogRedactor = Callable[[JSONValue], JSONValue]

PACKAGE_LOGGER: Final[str] = "workshop_factory"
LOG_FILENAME: Final[str] = "workshop_factory.jsonl"

_REDACTED: Final[str] = "***REDACTED***"
_QUEUE_SIZE: Final[int] = 4096

_SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = (
    "secret",
    "token",
    "password",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "cookie",
)
_SENSITIVE_ASSIGNMENT: Final[re.Pattern[str]] = re.compile(
    r"(?i)\b(api[_-]?key|token|password|secret|authorization)\b\s*([:=])\s*([^\s,;]+)"
)
_BEARER_TOKEN: Final[re.Pattern[str]] = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/-]+=*")

_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "correlation"}

_CorrelationState = tuple[tuple[str, str], ...]
_CORRELATION: contextvars.ContextVar[_CorrelationState] = contextvars.ContextVar(
    "workshop_factory_correlation", default=()
)

_ACTIVE_LOCK = threading.Lock()
_ACTIVE: LoggingHandle | None = None
_ATEXIT_REGISTERED = False


class _CorrelatingQueueHandler(logging.handlers.QueueHandler):
    """Captures the caller's correlation context before the record changes threads."""

    def __init__(self, log_queue: queue.Queue[logging.LogRecord]) -> None:
        super().__init__(log_queue)
        self.dropped = 0

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        context = get_correlation_context()
        if context:
            record.correlation = context
        return super().prepare(record)

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            self.dropped += 1


class _JsonLineFormatter(logging.Formatter):
    def __init__(self, *, redactor: LogRedactor, base_context: Mapping[str, str]) -> None:
        super().__init__()
        self._redactor = redactor
        self._base_context = dict(base_context)

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "event": _as_text(self._redactor(record.getMessage())),
        }
        correlation = dict(self._base_context)
        bound = getattr(record, "correlation", None)
        if isinstance(bound, Mapping):
            correlation.update(bound)
        for key in sorted(correlation):
            event[key] = correlation[key]

        extras = {
            key: _to_json(value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_FIELDS and not key.startswith("_")
        }
        if extras:
            event["fields"] = self._redactor(extras)
        if record.exc_info is not None:
            event["exception"] = _as_text(self._redactor(self.formatException(record.exc_info)))
        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class _DrainingQueueListener(logging.handlers.QueueListener):
    """Waits for queue space when stopping instead of failing on a full queue."""

    def enqueue_sentinel(self) -> None:
        self.queue.put(self._sentinel)


class LoggingHandle:
    """Active sink setup; ``shutdown`` drains the queue and closes sinks."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        log_path: Path | None,
        queue_handler: _CorrelatingQueueHandler,
        sinks: tuple[logging.Handler, ...],
        listener: _DrainingQueueListener,
    ) -> None:
        self.logger = logger
        self.log_path = log_path
        self._queue_handler = queue_handler
        self._sinks = sinks
        self._listener = listener
        self._lock = threading.Lock()
        self._closed = False

    @property
    def dropped_records(self) -> int:
        return self._queue_handler.dropped

    @property
    def is_shutdown(self) -> bool:
        return self._closed

    def shutdown(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self.logger.removeHandler(self._queue_handler)
            self._queue_handler.close()
            try:
                self._listener.stop()
            finally:
                for sink in self._sinks:
                    sink.flush()
                    sink.close()


def configure_structlog() -> None:
    """Send structlog events to stdlib loggers named after the emitting module."""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def setup_structured_logging(
    settings: ObservabilitySettings | None = None,
    *,
    run_id: str | None = None,
    stream: object | None = None,
    redactor: LogRedactor | None = None,
) -> LoggingHandle:
    """Install JSON-lines sinks on the package logger and route structlog into them.

    Writes to ``<log_dir>/<run_id>/workshop_factory.jsonl`` when ``log_dir`` is
    set (``<log_dir>/workshop_factory.jsonl`` without a run id), and to
    ``stream`` (stdout when ``log_to_stdout``) otherwise or additionally.
    """

    global _ACTIVE
    resolved = settings or ObservabilitySettings()
    shutdown_logging()

    level = _parse_level(resolved.log_level)
    if redactor is None:
        redactor = default_log_redactor if resolved.redact_secrets else _identity
    run_id = run_id.strip() if run_id else None
    formatter = _JsonLineFormatter(
        redactor=redactor, base_context={"run_id": run_id} if run_id else {}
    )

    sinks: list[logging.Handler] = []
    log_path: Path | None = None
    if resolved.log_dir is not None:
        directory = Path(resolved.log_dir)
        if run_id:
            directory = directory / run_id
        directory.mkdir(parents=True, exist_ok=True)
        log_path = directory / LOG_FILENAME
        sinks.append(logging.FileHandler(log_path, encoding="utf-8"))
    if stream is not None:
        sinks.append(logging.StreamHandler(stream))  # type: ignore[arg-type]
    elif resolved.log_to_stdout or not sinks:
        sinks.append(logging.StreamHandler(sys.stdout if resolved.log_to_stdout else sys.stderr))
    for sink in sinks:
        sink.setLevel(level)
        sink.setFormatter(formatter)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(maxsize=_QUEUE_SIZE)
    queue_handler = _CorrelatingQueueHandler(log_queue)
    queue_handler.setLevel(level)
    listener = _DrainingQueueListener(log_queue, *sinks, respect_handler_level=True)
    listener.start()
    logger.addHandler(queue_handler)

    configure_structlog()

    handle = LoggingHandle(
        logger=logger,
        log_path=log_path,
        queue_handler=queue_handler,
        sinks=tuple(sinks),
        listener=listener,
    )
    with _ACTIVE_LOCK:
        _ACTIVE = handle
    _register_atexit()
    return handle


def shutdown_logging(handle: LoggingHandle | None = None) -> None:
    global _ACTIVE
    with _ACTIVE_LOCK:
        target = handle if handle is not None else _ACTIVE
        if target is None:
            return
        if _ACTIVE is target:
            _ACTIVE = None
    target.shutdown()


def get_active_logging_handle() -> LoggingHandle | None:
    with _ACTIVE_LOCK:
        return _ACTIVE


def get_correlation_context() -> dict[str, str]:
    return dict(_CORRELATION.get())


@contextmanager
def correlation_scope(**fields: str | None) -> Iterator[None]:
    """Bind correlation fields for every record emitted in this context.

    A ``None`` value removes a field bound by an outer scope.
    """

    state = get_correlation_context()
    for key, value in fields.items():
        if value is None:
            state.pop(key, None)
            continue
        text = str(value).strip()
        if not text:
            raise ValueError(f"correlation field {key!r} must not be empty")
        state[key] = text
    token = _CORRELATION.set(tuple(state.items()))
    try:
        yield
    finally:
        _CORRELATION.reset(token)


def default_log_redactor(value: JSONValue) -> JSONValue:
    """Mask values under secret-looking keys and credential patterns in text."""

    return _redact(value, key=None)


def _redact(value: JSONValue, *, key: str | None) -> JSONValue:
    if key is not None and any(term in key.lower() for term in _SENSITIVE_KEY_TERMS):
        return _REDACTED
    if isinstance(value, str):
        masked = _SENSITIVE_ASSIGNMENT.sub(
            lambda match: f"{match.group(1)}{match.group(2)}{_REDACTED}", value
        )
        return _BEARER_TOKEN.sub(f"Bearer {_REDACTED}", masked)
    if isinstance(value, list):
        return [_redact(item, key=None) for item in value]
    if isinstance(value, dict):
        return {name: _redact(item, key=name) for name, item in value.items()}
    return value


def _identity(value: JSONValue) -> JSONValue:
    return value


def _to_json(value: object) -> JSONValue:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if isinstance(value, Path):
        return value.as_posix()
    if isinstance(value, Mapping):
        return {str(key): _to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_json(item) for item in value]
    return repr(value)


def _as_text(value: JSONValue) -> str:
    return value if isinstance(value, str) else json.dumps(value, sort_keys=True)


def _parse_level(value: int | str) -> int:
    if isinstance(value, int):
        return value
    parsed = logging.getLevelName(value.strip().upper())
    if isinstance(parsed, int):
        return parsed
    raise ValueError(f"unsupported logging level {value!r}")


def _register_atexit() -> None:
    global _ATEXIT_REGISTERED
    if not _ATEXIT_REGISTERED:
        atexit.register(shutdown_logging)
        _ATEXIT_REGISTERED = True


__all__ = [
    "LOG_FILENAME",
    "PACKAGE_LOGGER",
    "LogRedactor",
    "LoggingHandle",
    "configure_structlog",
    "correlation_scope",
    "default_log_redactor",
    "get_active_logging_handle",
    "get_correlation_context",
    "setup_structured_logging",
    "shutdown_logging",
]
