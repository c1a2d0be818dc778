"""bulkops framework exceptions.

Re-exports from bulkops.core.errors. The canonical error hierarchy lives there.
"""

from bulkops.core.errors import (
    AuthorizationError,
    BadParamsError,
    BulkOpsError,
    ExecutionError,
    InvalidConfigError,
    NotFoundError,
    OperationError,
    OperationNotFoundError,
    UnconfiguredOperationError,
    ValidationError,
)

__all__ = [
    "BulkOpsError",
    "NotFoundError",
    "OperationNotFoundError",
    "BadParamsError",
    "ValidationError",
    "InvalidConfigError",
    "OperationError",
    "UnconfiguredOperationError",
    "ExecutionError",
    "AuthorizationError",
]
