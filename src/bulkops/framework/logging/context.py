"""
Logging context management using contextvars.

This module provides operation-aware context that automatically attaches
to all log entries. Context is propagated through the call stack without
explicit parameter passing.
"""

from contextvars import ContextVar
from dataclasses import asdict, dataclass
from typing import Any

import structlog


@dataclass
class LogContext:
    """
    Context attached to all log entries.

    Operation identifiers:
        operation: Operation key (e.g., "notify")
        entity_type: Entity type the operation targets

    Tracing (for nested timing blocks):
        span_id: Current span identifier
        parent_span_id: Parent span for nested steps

    Batch context:
        batch_id: Bulk submission identifier
        step: Current processing step name
    """

    operation: str | None = None
    entity_type: str | None = None

    span_id: str | None = None
    parent_span_id: str | None = None

    batch_id: str | None = None
    step: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def merge(self, **kwargs) -> "LogContext":
        """Create new context with merged values."""
        current = asdict(self)
        current.update({k: v for k, v in kwargs.items() if v is not None and k in current})
        return LogContext(**current)


_log_context: ContextVar[LogContext] = ContextVar("log_context")  # noqa: B039


def get_context() -> LogContext:
    """Get the current log context."""
    return _log_context.get(LogContext())


def set_context(
    operation: str | None = None,
    entity_type: str | None = None,
    batch_id: str | None = None,
    step: str | None = None,
    span_id: str | None = None,
    parent_span_id: str | None = None,
) -> LogContext:
    """
    Set the current log context.

    This replaces the current context. Use bind_context() to add to existing.
    """
    ctx = LogContext(
        operation=operation,
        entity_type=entity_type,
        batch_id=batch_id,
        step=step,
        span_id=span_id,
        parent_span_id=parent_span_id,
    )
    _log_context.set(ctx)
    return ctx


def bind_context(**kwargs) -> LogContext:
    """Merge values into the current context and return it."""
    updated = get_context().merge(**kwargs)
    _log_context.set(updated)
    return updated


def clear_context() -> None:
    """Clear the current context (reset to empty)."""
    _log_context.set(LogContext())


class _ContextToken:
    """Token for restoring context after a scoped block."""

    def __init__(self, token):
        self._token = token

    def restore(self):
        """Restore the previous context."""
        _log_context.reset(self._token)


def push_context(**kwargs) -> _ContextToken:
    """
    Push new context values, returning a token to restore later.

    Usage:
        token = push_context(operation="notify")
        try:
            do_work()
        finally:
            token.restore()
    """
    updated = get_context().merge(**kwargs)
    token = _log_context.set(updated)
    return _ContextToken(token)


def add_context_processor(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """
    Structlog processor that adds the current context to every log entry.

    Existing keys in the event win over context values.
    """
    for key, value in get_context().to_dict().items():
        if key not in event_dict:
            event_dict[key] = value
    return event_dict


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (typically ``get_logger(__name__)``)."""
    return structlog.get_logger(name)
