"""
bulkops Framework Logging - Structured, operation-aware logging.

This module provides:
- Structured logging with structlog
- Operation context propagation via contextvars
- Timing utilities for step tracking

Usage:
    from bulkops.framework.logging import get_logger, configure_logging, log_step, set_context

    configure_logging()
    log = get_logger(__name__)

    set_context(operation="notify", entity_type="node")

    with log_step("operation.execute"):
        operation.execute(record, {})
"""

from bulkops.framework.logging.config import configure_logging, is_configured
from bulkops.framework.logging.context import (
    LogContext,
    bind_context,
    clear_context,
    get_context,
    get_logger,
    push_context,
    set_context,
)
from bulkops.framework.logging.timing import TimingResult, log_step

__all__ = [
    "configure_logging",
    "is_configured",
    "get_logger",
    "set_context",
    "clear_context",
    "get_context",
    "bind_context",
    "push_context",
    "LogContext",
    "log_step",
    "TimingResult",
]
