"""Observability: structured logging sinks and correlation context."""

from workshop_factory.observability.logging import (
    LoggingHandle,
    configure_structlog,
    correlation_scope,
    default_log_redactor,
    get_active_logging_handle,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingHandle",
    "configure_structlog",
    "correlation_scope",
    "default_log_redactor",
    "get_active_logging_handle",
    "setup_structured_logging",
    "shutdown_logging",
]
