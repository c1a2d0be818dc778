"""Parameter definitions and admin configuration for bulk operations.

Manifesto:
    An operation declares its formal parameters once. Everything else
    (admin token selectors, end-user forms, invocation) is derived from
    those declarations, so parameter names and types are spelled in one
    place.

Parameter keys in persisted admin configuration are ``"<name>:<type>"``.
Types are either one of the primitive names (``text``, ``integer``,
``decimal``) or an opaque entity kind (``node``, ``user``,
``list<node>``...). Only primitive parameters can be satisfied by a
rendered token.

Tags:
    bulkops, framework, params, admin-config

Doc-Types:
    api-reference
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bulkops.core.errors import InvalidConfigError, ValidationError

PRIMITIVE_TYPES = frozenset({"decimal", "integer", "text"})


def is_primitive(type_name: str) -> bool:
    """Whether a parameter type can be supplied as free text."""
    return type_name in PRIMITIVE_TYPES


def list_type(type_name: str) -> str:
    """Wrap an entity type as a list type (``node`` -> ``list<node>``)."""
    return f"list<{type_name}>"


def is_list_type(type_name: str) -> bool:
    return type_name.startswith("list<") and type_name.endswith(">")


@dataclass(frozen=True)
class ParameterSpec:
    """Definition of one formal parameter of an operation."""

    name: str
    type: str
    label: str = ""
    subject: bool = False
    optional: bool = False
    default: Any = None
    description: str = ""

    def __post_init__(self) -> None:
        if not self.name or ":" in self.name:
            raise ValueError(f"Invalid parameter name: {self.name!r}")
        if not self.type:
            raise ValueError(f"Parameter '{self.name}' has no type")

    @property
    def key(self) -> str:
        """Admin configuration key for this parameter."""
        return parameter_key(self.name, self.type)

    @property
    def primitive(self) -> bool:
        return is_primitive(self.type)

    @property
    def title(self) -> str:
        return self.label or self.name


def parameter_key(name: str, type_name: str) -> str:
    return f"{name}:{type_name}"


def parse_parameter_key(key: str) -> tuple[str, str]:
    """
    Split an admin configuration key into (name, type).

    Raises:
        InvalidConfigError: If the key is not ``"<name>:<type>"``.
    """
    name, sep, type_name = key.partition(":")
    if not sep or not name or not type_name:
        raise InvalidConfigError(key, key, f"Parameter key must be '<name>:<type>', got {key!r}")
    return name, type_name


def coerce_value(type_name: str, raw: Any) -> Any:
    """
    Convert a rendered value to the scalar a parameter expects.

    Non-primitive types pass through unchanged.

    Raises:
        ValidationError: If the value cannot be converted.
    """
    if type_name == "text":
        return str(raw)
    if type_name == "integer":
        if isinstance(raw, bool):
            raise ValidationError("Expected an integer", value=raw)
        if isinstance(raw, int):
            return raw
        try:
            return int(str(raw).strip())
        except ValueError:
            raise ValidationError(f"Expected an integer, got {raw!r}", value=raw) from None
    if type_name == "decimal":
        if isinstance(raw, Decimal):
            return raw
        try:
            value = Decimal(str(raw).strip())
        except InvalidOperation:
            raise ValidationError(f"Expected a decimal number, got {raw!r}", value=raw) from None
        if not value.is_finite():
            raise ValidationError(f"Expected a finite decimal number, got {raw!r}", value=raw)
        return value
    return raw


class AdminConfig(BaseModel):
    """
    Options the site builder stored for one operation of a bulk-operations field.

    Persisted layout is ``{provide_parameters: bool, parameters: {"<name>:<type>": str}}``
    plus the generic operation options. Unknown keys are kept so the listing
    can store its own options next to ours.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    selected: bool = Field(default=False, description="Operation enabled on the field")
    skip_confirmation: bool = Field(default=False)
    override_label: bool = Field(default=False)
    label: str = Field(default="")
    provide_parameters: bool = Field(default=False)
    parameters: dict[str, str] = Field(default_factory=dict)

    @field_validator("parameters", mode="before")
    @classmethod
    def _drop_unset(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {k: ("" if v is None else str(v)) for k, v in value.items()}
        return value

    @field_validator("parameters")
    @classmethod
    def _check_keys(cls, value: dict[str, str]) -> dict[str, str]:
        for key in value:
            parse_parameter_key(key)
        return value

    @classmethod
    def from_options(cls, options: dict[str, Any] | None) -> "AdminConfig":
        """Build from the listing's stored option mapping (``None`` -> defaults)."""
        return cls.model_validate(options or {})

    def to_options(self) -> dict[str, Any]:
        return self.model_dump()

    def get(self, name: str, default: Any = None) -> Any:
        """Read any option, including extra ones stored by the listing."""
        if name in type(self).model_fields:
            return getattr(self, name)
        return (self.model_extra or {}).get(name, default)
