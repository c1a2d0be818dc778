"""
bulkops core - errors and configuration shared by every layer.
"""

from bulkops.core.config import BulkOpsSettings, clear_settings_cache, get_settings
from bulkops.core.errors import (
    BulkOpsError,
    ErrorCategory,
    ErrorContext,
    NotFoundError,
    OperationNotFoundError,
    ValidationError,
)

__all__ = [
    "BulkOpsError",
    "ErrorCategory",
    "ErrorContext",
    "NotFoundError",
    "OperationNotFoundError",
    "ValidationError",
    "BulkOpsSettings",
    "get_settings",
    "clear_settings_cache",
]
