"""Operation interface, shared behaviour and rules component operations."""

from bulkops.framework.operations.base import (
    AccessMask,
    BaseOperation,
    Operation,
    OperationResult,
    OperationStatus,
)
from bulkops.framework.operations.rules_component import RulesComponentOperation, create_operation

__all__ = [
    "AccessMask",
    "BaseOperation",
    "Operation",
    "OperationResult",
    "OperationStatus",
    "RulesComponentOperation",
    "create_operation",
]
