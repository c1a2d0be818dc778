"""Operation descriptors.

A descriptor is the immutable description of one invocable unit of logic:
its key, the entity type it targets, a label and its formal parameters with
the subject parameter first.

Descriptors can be built in code or loaded from YAML::

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
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from bulkops.framework.params import ParameterSpec, is_primitive


@dataclass(frozen=True)
class OperationDescriptor:
    """Immutable metadata for one registered operation."""

    key: str
    entity_type: str
    label: str
    parameters: tuple[ParameterSpec, ...] = field(default_factory=tuple)
    aggregate: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", tuple(self.parameters))
        if not self.key:
            raise ValueError("Descriptor key must not be empty")
        if not self.parameters or not self.parameters[0].subject:
            raise ValueError(f"Descriptor '{self.key}' must declare its subject parameter first")
        if sum(1 for p in self.parameters if p.subject) != 1:
            raise ValueError(f"Descriptor '{self.key}' must declare exactly one subject parameter")
        names = [p.name for p in self.parameters]
        if len(set(names)) != len(names):
            raise ValueError(f"Descriptor '{self.key}' has duplicate parameter names")

    @property
    def subject_parameter(self) -> ParameterSpec:
        return self.parameters[0]

    @property
    def non_subject_parameters(self) -> tuple[ParameterSpec, ...]:
        return self.parameters[1:]

    @property
    def primitive_parameters(self) -> tuple[ParameterSpec, ...]:
        return tuple(p for p in self.non_subject_parameters if is_primitive(p.type))

    def parameter(self, name: str) -> ParameterSpec | None:
        for param in self.parameters:
            if param.name == name:
                return param
        return None


# =============================================================================
# Declarative loading
# =============================================================================


class ParameterModel(BaseModel):
    """One parameter entry of a descriptor file."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    label: str = ""
    subject: bool = False
    optional: bool = False
    default: Any = None
    description: str = ""

    def to_spec(self) -> ParameterSpec:
        return ParameterSpec(**self.model_dump())


class DescriptorModel(BaseModel):
    """One operation entry of a descriptor file."""

    model_config = ConfigDict(extra="forbid")

    key: str = Field(..., min_length=1)
    entity_type: str = Field(..., min_length=1)
    label: str = ""
    aggregate: bool = False
    description: str = ""
    parameters: list[ParameterModel] = Field(..., min_length=1)

    def to_descriptor(self) -> OperationDescriptor:
        return OperationDescriptor(
            key=self.key,
            entity_type=self.entity_type,
            label=self.label or self.key,
            parameters=tuple(p.to_spec() for p in self.parameters),
            aggregate=self.aggregate,
            description=self.description,
        )


class DescriptorFileSpec(BaseModel):
    """Top-level layout of a descriptor YAML file."""

    model_config = ConfigDict(extra="forbid")

    operations: list[DescriptorModel] = Field(default_factory=list)

    def to_descriptors(self) -> list[OperationDescriptor]:
        return [op.to_descriptor() for op in self.operations]

    @classmethod
    def from_yaml(cls, yaml_content: str) -> DescriptorFileSpec:
        """Parse and validate YAML content.

        Raises
        ------
        ValueError
            If YAML is invalid or doesn't match the schema.
        """
        import yaml

        try:
            data = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("Descriptor file must contain a mapping")
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: str | Path) -> DescriptorFileSpec:
        return cls.from_yaml(Path(path).read_text(encoding="utf-8"))
