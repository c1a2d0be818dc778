"""Operation interface and default behaviour.

``Operation`` is the capability interface the listing talks to.
``BaseOperation`` holds the behaviour every operation type shares; concrete
operation types compose it and delegate to it rather than subclassing.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntFlag
from typing import Any, Protocol

from bulkops.framework.descriptors import OperationDescriptor
from bulkops.framework.forms import Dependency, FieldSpec, FormSpec, FormState
from bulkops.framework.params import AdminConfig


class AccessMask(IntFlag):
    """Entity access levels an operation needs on each record."""

    VIEW = 1
    UPDATE = 2
    CREATE = 4
    DELETE = 8


class OperationStatus(str, Enum):
    """Bulk run status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class OperationResult:
    """Result of running an operation over a selection."""

    status: OperationStatus
    started_at: datetime
    completed_at: datetime | None = None
    error: str | None = None
    metrics: dict[str, Any] = field(default_factory=dict)
    results: list[Any] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float | None:
        """Duration in seconds if completed."""
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()


class Operation(Protocol):
    """What a listing can do with a configured bulk operation."""

    @property
    def key(self) -> str: ...

    @property
    def label(self) -> str: ...

    @property
    def aggregate(self) -> bool: ...

    def configurable(self) -> bool: ...

    def form(self, state: FormState, context: Mapping[str, Any] | None = None) -> FormSpec: ...

    def form_validate(self, form: FormSpec, state: FormState) -> dict[str, str]: ...

    def form_submit(self, form: FormSpec, state: FormState) -> Any: ...

    def admin_options_form(self, dom_id: str) -> FormSpec: ...

    def admin_options_submit(self, values: Mapping[str, Any]) -> AdminConfig: ...

    def execute(self, data: Any, context: Mapping[str, Any] | None = None) -> Any: ...

    def access(self, account: Any) -> bool: ...


class BaseOperation:
    """Shared operation behaviour, used by delegation."""

    def __init__(self, descriptor: OperationDescriptor, entity_type: str, admin_config: AdminConfig) -> None:
        self.descriptor = descriptor
        self.entity_type = entity_type
        self.admin_config = admin_config

    @property
    def key(self) -> str:
        return self.descriptor.key

    @property
    def operation_id(self) -> str:
        return f"rules_component::{self.descriptor.key}"

    @property
    def label(self) -> str:
        """Admin label override, falling back to the descriptor label."""
        if self.admin_config.override_label and self.admin_config.label:
            return self.admin_config.label
        return self.descriptor.label

    @property
    def aggregate(self) -> bool:
        return self.descriptor.aggregate

    @property
    def access_mask(self) -> AccessMask:
        return AccessMask.UPDATE

    def get_admin_option(self, name: str, default: Any = None) -> Any:
        return self.admin_config.get(name, default)

    def configurable(self) -> bool:
        """An operation needs a form when it has anything beyond its subject."""
        return len(self.descriptor.non_subject_parameters) > 0

    def admin_options_form(self, dom_id: str) -> FormSpec:
        selected = Dependency(f"{dom_id}-selected", (1,))
        return FormSpec(
            (
                FieldSpec(
                    name="skip_confirmation",
                    widget="checkbox",
                    title="Skip confirmation step",
                    default=self.admin_config.skip_confirmation,
                    dependencies=(selected,),
                ),
                FieldSpec(
                    name="override_label",
                    widget="checkbox",
                    title="Override label",
                    default=self.admin_config.override_label,
                    dependencies=(selected,),
                ),
                FieldSpec(
                    name="label",
                    widget="textfield",
                    title="Provide label",
                    default=self.admin_config.label or self.descriptor.label,
                    dependencies=(selected, Dependency(f"{dom_id}-override-label", (1,))),
                ),
            )
        )

    def admin_options_submit(self, values: Mapping[str, Any]) -> AdminConfig:
        merged = {**self.admin_config.to_options(), **dict(values)}
        return AdminConfig.from_options(merged)
