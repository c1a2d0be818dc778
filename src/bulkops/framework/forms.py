"""Declarative form model.

Forms are immutable lists of FieldSpec. Rather than mutating a nested
structure in place, callers derive new forms with pure passes
(``without``, ``map``) so the form an engine built stays untouched.

Widgets are named by the form framework's primitives (``checkbox``,
``select``, ``container``, ``fieldset``, ``textfield``...). Dependencies are
only declared here; evaluating them is the form framework's job.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

SWITCH_BUTTON = "switch_button"


@dataclass(frozen=True)
class Dependency:
    """Enable a field only while sibling ``field`` has one of ``values``."""

    field: str
    values: tuple[Any, ...] = (1,)


@dataclass(frozen=True)
class FieldSpec:
    name: str
    widget: str
    title: str | None = None
    default: Any = None
    options: Mapping[str, str] | None = None
    dependencies: tuple[Dependency, ...] = ()
    children: tuple[FieldSpec, ...] = ()
    access: bool = True
    parameter: str | None = None
    required: bool = False
    description: str = ""

    def child(self, name: str) -> FieldSpec | None:
        for item in self.children:
            if item.name == name:
                return item
        return None

    def with_children(self, children: Iterable[FieldSpec]) -> FieldSpec:
        return replace(self, children=tuple(children))


@dataclass(frozen=True)
class FormSpec:
    fields: tuple[FieldSpec, ...] = ()

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, name: object) -> bool:
        return any(f.name == name for f in self.fields)

    @property
    def names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get(self, name: str) -> FieldSpec | None:
        for item in self.fields:
            if item.name == name:
                return item
        return None

    def without(self, predicate: Callable[[FieldSpec], bool]) -> FormSpec:
        """New form without the top-level fields matching ``predicate``."""
        return FormSpec(tuple(f for f in self.fields if not predicate(f)))

    def map(self, transform: Callable[[FieldSpec], FieldSpec]) -> FormSpec:
        return FormSpec(tuple(transform(f) for f in self.fields))

    def extend(self, fields: Iterable[FieldSpec]) -> FormSpec:
        return FormSpec(self.fields + tuple(fields))


@dataclass
class FormState:
    """
    Request-scoped state of one form submission.

    ``element`` is the draft invocation unit built while assembling the form;
    ``errors`` are the markers set by validation, keyed by field name.
    """

    values: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    parameter_mode: dict[str, str] = field(default_factory=dict)
    element: Any = None

    def set_error(self, name: str, message: str) -> None:
        self.errors.setdefault(name, message)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


# =============================================================================
# Passes
# =============================================================================


def remove_parameters(form: FormSpec, names: Iterable[str]) -> FormSpec:
    """Drop the widgets of the given parameters."""
    dropped = set(names)
    return form.without(lambda f: f.parameter is not None and f.parameter in dropped)


def flatten_parameter_fieldset(spec: FieldSpec) -> FieldSpec:
    """
    Make a parameter widget end-user friendly.

    The wrapping fieldset becomes a plain container whose title moves onto
    the input widget, and the data-selection switch button is hidden.
    """
    if spec.parameter is None:
        return spec

    children = []
    for item in spec.children:
        if item.name == spec.parameter and spec.widget == "fieldset" and item.title is not None:
            item = replace(item, title=spec.title)
        elif item.name == SWITCH_BUTTON:
            item = replace(item, access=False)
        children.append(item)

    flattened = spec.with_children(children)
    input_widget = spec.child(spec.parameter)
    if spec.widget == "fieldset" and input_widget is not None and input_widget.title is not None:
        flattened = replace(flattened, widget="container")
    return flattened


def flatten_parameter_fieldsets(form: FormSpec) -> FormSpec:
    return form.map(flatten_parameter_fieldset)
