"""
bulkops Framework - configuring and executing bulk operations.

This module provides:
- Operation descriptors and the descriptor registry
- Token resolution of admin-provided parameters
- Declarative configuration and admin options forms
- The rule engine boundary and its in-process adapter
- Rules component operations and the bulk runner
"""

from bulkops.framework.descriptors import OperationDescriptor
from bulkops.framework.engine import BoundUnit, LocalRuleEngine, RuleEngine
from bulkops.framework.operations import (
    AccessMask,
    Operation,
    OperationResult,
    OperationStatus,
    RulesComponentOperation,
    create_operation,
)
from bulkops.framework.params import AdminConfig, ParameterSpec
from bulkops.framework.registry import (
    OperationDescriptorRegistry,
    clear_registry,
    get_descriptor,
    get_registry,
    list_descriptors,
    load_descriptors,
    register_action,
)
from bulkops.framework.runner import BulkOperationRunner, get_runner
from bulkops.framework.tokens import ListingArgument, ListingContext, RowContext

__all__ = [
    # Descriptors
    "OperationDescriptor",
    "ParameterSpec",
    "AdminConfig",
    # Registry
    "OperationDescriptorRegistry",
    "register_action",
    "get_descriptor",
    "get_registry",
    "list_descriptors",
    "load_descriptors",
    "clear_registry",
    # Listing
    "ListingArgument",
    "ListingContext",
    "RowContext",
    # Engine
    "BoundUnit",
    "RuleEngine",
    "LocalRuleEngine",
    # Operations
    "AccessMask",
    "Operation",
    "OperationResult",
    "OperationStatus",
    "RulesComponentOperation",
    "create_operation",
    # Runner
    "BulkOperationRunner",
    "get_runner",
]
