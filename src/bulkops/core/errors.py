"""
Structured error types for bulkops.

Every error raised by the operation pipeline derives from BulkOpsError and
carries a category, a retryable flag and an optional ErrorContext, so callers
can log and report failures without parsing messages.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                       BulkOpsError                           │
        │  (category, retryable, context, cause)                       │
        ├─────────────────────────────────────────────────────────────┤
        │  NotFoundError        ValidationError      ConfigError       │
        │  (NOT_FOUND)          (VALIDATION)         (CONFIG)          │
        │       │                    │                    │            │
        │  OperationNotFound    BadParamsError       MissingConfig     │
        │                                            InvalidConfig     │
        │                                                              │
        │  OperationError       ExecutionError       AuthError         │
        │  (OPERATION)          (EXECUTION)          (AUTH)            │
        │       │                                         │            │
        │  UnconfiguredOperation                   AuthorizationError  │
        └─────────────────────────────────────────────────────────────┘

Failures raised by an invoked action are never wrapped by the pipeline; an
implementation that wants typed reporting raises ExecutionError itself.

Tags:
    error-handling, exception-hierarchy, bulkops

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and reporting."""

    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    AUTH = "AUTH"
    OPERATION = "OPERATION"
    EXECUTION = "EXECUTION"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Typed fields cover what the pipeline knows when it fails: which operation,
    which entity type, which parameter. Anything else goes into ``metadata``.
    """

    operation: str | None = None
    entity_type: str | None = None
    parameter: str | None = None
    batch_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the non-empty fields as a flat dict."""
        result: dict[str, Any] = {}
        for key in ("operation", "entity_type", "parameter", "batch_id"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class BulkOpsError(Exception):
    """
    Base class for all bulkops errors.

    Subclasses set ``default_category`` and ``default_retryable``; both can be
    overridden per instance.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> BulkOpsError:
        """
        Add context to this error (fluent API).

        Usage:
            raise OperationError("Form not available").with_context(
                operation="notify", entity_type="node"
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# LOOKUP ERRORS
# =============================================================================


class NotFoundError(BulkOpsError):
    """A requested item is not registered."""

    default_category = ErrorCategory.NOT_FOUND


class OperationNotFoundError(NotFoundError):
    """Operation key is not registered for the entity type."""

    def __init__(self, key: str, entity_type: str | None = None, available: list[str] | None = None):
        self.key = key
        self.entity_type = entity_type
        self.available = available or []
        target = f" for entity type '{entity_type}'" if entity_type else ""
        message = f"Operation '{key}' not found{target}"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(message, context=ErrorContext(operation=key, entity_type=entity_type))


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(BulkOpsError):
    """
    Input validation error.

    Never retryable - the input must be fixed. ``errors`` holds the per-field
    markers reported by the form validation step, if any.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        errors: dict[str, str] | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.errors = dict(errors or {})

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        if self.errors:
            result["errors"] = dict(self.errors)
        return result


class BadParamsError(ValidationError):
    """Invocation parameters are missing or invalid."""

    def __init__(
        self,
        message: str,
        *,
        missing_params: list[str] | None = None,
        invalid_params: list[str] | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.missing_params = missing_params or []
        self.invalid_params = invalid_params or []


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(BulkOpsError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class MissingConfigError(ConfigError):
    """Required configuration is missing."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}")


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# AUTHORIZATION ERRORS
# =============================================================================


class AuthError(BulkOpsError):
    """Authentication or authorization error."""

    default_category = ErrorCategory.AUTH
    default_retryable = False


class AuthorizationError(AuthError):
    """Account is not allowed to run the operation."""

    pass


# =============================================================================
# OPERATION ERRORS
# =============================================================================


class OperationError(BulkOpsError):
    """Operation misuse (wrong call order, missing state)."""

    default_category = ErrorCategory.OPERATION
    default_retryable = False


class UnconfiguredOperationError(OperationError):
    """A configurable operation was executed before its form was submitted."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(
            f"Operation '{key}' requires a submitted configuration before execute()",
            context=ErrorContext(operation=key),
        )


class ExecutionError(BulkOpsError):
    """Failure raised by an invoked action."""

    default_category = ErrorCategory.EXECUTION
    default_retryable = False


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "BulkOpsError",
    "NotFoundError",
    "OperationNotFoundError",
    "ValidationError",
    "BadParamsError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "AuthError",
    "AuthorizationError",
    "OperationError",
    "UnconfiguredOperationError",
    "ExecutionError",
]
