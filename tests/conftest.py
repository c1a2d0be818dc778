"""
Shared pytest fixtures for bulkops tests.

This module provides:
- Registry cleanup for test isolation
- Sample descriptors (notify, assign_reviewer, archive...)
- Listing contexts with positional arguments
- A recording action implementation
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from bulkops.core.config import clear_settings_cache
from bulkops.framework.descriptors import OperationDescriptor
from bulkops.framework.engine import LocalRuleEngine
from bulkops.framework.logging import clear_context
from bulkops.framework.params import ParameterSpec
from bulkops.framework.registry import OperationDescriptorRegistry, clear_registry
from bulkops.framework.tokens import ListingArgument, ListingContext


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests without an explicit marker as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_global_state():
    """Clear the global registry, settings cache and log context around each test."""
    clear_registry()
    clear_settings_cache()
    clear_context()
    yield
    clear_registry()
    clear_settings_cache()
    clear_context()


# =============================================================================
# Descriptors
# =============================================================================


class Recorder:
    """Action implementation that records every call."""

    def __init__(self, result: Any = "ok") -> None:
        self.calls: list[tuple[Any, dict[str, Any]]] = []
        self.result = result

    def __call__(self, subject, **values):
        self.calls.append((subject, values))
        return self.result


@pytest.fixture
def notify_descriptor() -> OperationDescriptor:
    return OperationDescriptor(
        key="notify",
        entity_type="node",
        label="Send notification",
        parameters=(
            ParameterSpec("node", "node", subject=True),
            ParameterSpec("message", "text", label="Message"),
        ),
    )


@pytest.fixture
def reviewer_descriptor() -> OperationDescriptor:
    return OperationDescriptor(
        key="assign_reviewer",
        entity_type="node",
        label="Assign reviewer",
        parameters=(
            ParameterSpec("node", "node", subject=True),
            ParameterSpec("reviewer", "entity", label="Reviewer"),
        ),
    )


@pytest.fixture
def mixed_descriptor() -> OperationDescriptor:
    return OperationDescriptor(
        key="escalate",
        entity_type="node",
        label="Escalate",
        parameters=(
            ParameterSpec("node", "node", subject=True),
            ParameterSpec("reason", "text", label="Reason"),
            ParameterSpec("owner", "user", label="Owner"),
        ),
    )


@pytest.fixture
def priority_descriptor() -> OperationDescriptor:
    return OperationDescriptor(
        key="set_priority",
        entity_type="node",
        label="Set priority",
        parameters=(
            ParameterSpec("node", "node", subject=True),
            ParameterSpec("priority", "integer", label="Priority"),
            ParameterSpec("weight", "decimal", label="Weight", optional=True),
        ),
    )


@pytest.fixture
def archive_descriptor() -> OperationDescriptor:
    return OperationDescriptor(
        key="archive",
        entity_type="node",
        label="Archive",
        parameters=(ParameterSpec("nodes", "list<node>", subject=True),),
        aggregate=True,
    )


@pytest.fixture
def registry(
    notify_descriptor,
    reviewer_descriptor,
    mixed_descriptor,
    priority_descriptor,
    archive_descriptor,
) -> OperationDescriptorRegistry:
    """A private registry; each descriptor gets its own Recorder."""
    reg = OperationDescriptorRegistry()
    reg.recorders = {}
    for descriptor in (
        notify_descriptor,
        reviewer_descriptor,
        mixed_descriptor,
        priority_descriptor,
        archive_descriptor,
    ):
        recorder = Recorder()
        reg.recorders[descriptor.key] = recorder
        reg.register(descriptor, implementation=recorder)
    return reg


@pytest.fixture
def engine(registry) -> LocalRuleEngine:
    return LocalRuleEngine(registry)


# =============================================================================
# Listings
# =============================================================================


@pytest.fixture
def listing() -> ListingContext:
    """A listing with two arguments and two rows."""
    return ListingContext(
        arguments=[ListingArgument("Status", "Overdue"), ListingArgument("Priority", "3")],
        rows=[{"title": "First <em>row</em>", "nid": 7}, {"title": "Second", "nid": 8}],
    )


@pytest.fixture
def empty_listing() -> ListingContext:
    return ListingContext(arguments=[ListingArgument("Status", "Overdue")], rows=[])


@pytest.fixture
def descriptor_file(tmp_path: Path) -> Path:
    path = tmp_path / "operations.yaml"
    path.write_text(
        """
operations:
  - key: notify
    entity_type: node
    label: Send notification
    parameters:
      - {name: node, type: node, subject: true}
      - {name: message, type: text}
  - key: archive
    entity_type: node
    aggregate: true
    parameters:
      - {name: nodes, type: "list<node>", subject: true}
  - key: block
    entity_type: user
    label: Block account
    parameters:
      - {name: account, type: user, subject: true}
      - {name: days, type: integer, default: 7}
""",
        encoding="utf-8",
    )
    return path
