"""Rule engine boundary and the in-process adapter.

The operation pipeline never calls action code directly. It asks a
RuleEngine for a bound invocation unit, for the unit's configuration form,
and finally to invoke the unit with a wrapped subject. LocalRuleEngine
implements that contract over the descriptor registry and the Python
callables registered with it.

Manifesto:
    Keep the pipeline decoupled from any particular rule system: swapping
    engines means writing one adapter, not touching operations.

Tags:
    bulkops, framework, engine, invocation

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, Protocol

from bulkops.core.errors import BadParamsError, OperationError, ValidationError
from bulkops.framework.forms import SWITCH_BUTTON, FieldSpec, FormSpec, FormState
from bulkops.framework.logging import get_logger
from bulkops.framework.params import ParameterSpec, coerce_value
from bulkops.framework.registry import OperationDescriptorRegistry, get_registry
from bulkops.framework.wrappers import EntityWrapper

log = get_logger(__name__)

_INPUT_WIDGETS = {
    "text": "textfield",
    "integer": "number",
    "decimal": "number",
}


@dataclass(frozen=True)
class BoundUnit:
    """
    An invocable unit: one action wired to a subject and some parameters.

    ``placeholders`` are parameter names taken positionally, after the
    subject, when the unit is invoked. ``bindings`` are values already
    wired in (admin-provided or submitted through the form).
    """

    key: str
    entity_type: str
    subject_name: str
    subject_type: str
    placeholders: tuple[str, ...] = ()
    bindings: Mapping[str, Any] = field(default_factory=dict)
    label: str = ""


class RuleEngine(Protocol):
    """What the operation pipeline needs from a rule/action system."""

    def lookup_action(self, key: str, entity_type: str, bindings: Mapping[str, Any] | None = None) -> BoundUnit: ...

    def access(self, key: str, entity_type: str, account: Any) -> bool: ...

    def action_set(
        self,
        key: str,
        entity_type: str,
        subject_type: str,
        provided: Mapping[str, str] | None = None,
    ) -> BoundUnit: ...

    def build_form(self, unit: BoundUnit, state: FormState) -> FormSpec: ...

    def validate_form(self, unit: BoundUnit, state: FormState) -> dict[str, str]: ...

    def submit_form(self, unit: BoundUnit, state: FormState) -> BoundUnit: ...

    def invoke(self, unit: BoundUnit, subject: EntityWrapper, args: Sequence[Any]) -> Any: ...


class LocalRuleEngine:
    """RuleEngine over an OperationDescriptorRegistry of Python callables."""

    def __init__(self, registry: OperationDescriptorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else get_registry()

    # ── Lookup ───────────────────────────────────────────────────

    def lookup_action(self, key: str, entity_type: str, bindings: Mapping[str, Any] | None = None) -> BoundUnit:
        descriptor = self.registry.resolve(key, entity_type)
        subject = descriptor.subject_parameter
        known = {p.name for p in descriptor.non_subject_parameters}
        return BoundUnit(
            key=key,
            entity_type=entity_type,
            subject_name=subject.name,
            subject_type=subject.type,
            bindings={k: v for k, v in (bindings or {}).items() if k in known},
            label=descriptor.label,
        )

    def access(self, key: str, entity_type: str, account: Any) -> bool:
        check = self.registry.access_check(key, entity_type)
        if check is None:
            return True
        return bool(check(account))

    def action_set(
        self,
        key: str,
        entity_type: str,
        subject_type: str,
        provided: Mapping[str, str] | None = None,
    ) -> BoundUnit:
        """Wrap the action in a set taking the subject and the provided parameters."""
        descriptor = self.registry.resolve(key, entity_type)
        placeholders = []
        for name, type_name in (provided or {}).items():
            param = descriptor.parameter(name)
            if param is None or param.subject or param.type != type_name:
                raise BadParamsError(
                    f"Operation '{key}' has no parameter {name}:{type_name}",
                    invalid_params=[name],
                )
            placeholders.append(name)
        return BoundUnit(
            key=key,
            entity_type=entity_type,
            subject_name=descriptor.subject_parameter.name,
            subject_type=subject_type,
            placeholders=tuple(placeholders),
            label=descriptor.label,
        )

    # ── Forms ────────────────────────────────────────────────────

    def build_form(self, unit: BoundUnit, state: FormState) -> FormSpec:
        descriptor = self.registry.resolve(unit.key, unit.entity_type)
        return FormSpec(tuple(self._parameter_widget(p, state) for p in descriptor.parameters))

    def _parameter_widget(self, param: ParameterSpec, state: FormState) -> FieldSpec:
        mode = state.parameter_mode.get(param.name, "input")
        if mode == "input":
            value_widget = FieldSpec(
                name=param.name,
                widget=_INPUT_WIDGETS.get(param.type, "textfield"),
                title=param.title,
                default=state.values.get(param.name, param.default),
                required=not param.optional and param.default is None,
                description=param.description,
            )
            switch_title = "Switch to data selection"
        else:
            value_widget = FieldSpec(
                name=f"{param.name}:select",
                widget="textfield",
                title="Data selector",
                default=state.values.get(f"{param.name}:select"),
            )
            switch_title = "Switch to direct input"
        return FieldSpec(
            name=param.name,
            widget="fieldset",
            title=param.title,
            parameter=param.name,
            children=(value_widget, FieldSpec(name=SWITCH_BUTTON, widget="button", title=switch_title)),
        )

    def _configurable_parameters(self, unit: BoundUnit) -> list[ParameterSpec]:
        descriptor = self.registry.resolve(unit.key, unit.entity_type)
        return [
            p
            for p in descriptor.non_subject_parameters
            if p.name not in unit.placeholders and p.name not in unit.bindings
        ]

    def validate_form(self, unit: BoundUnit, state: FormState) -> dict[str, str]:
        for param in self._configurable_parameters(unit):
            raw = state.values.get(param.name)
            if raw is None or raw == "":
                if not param.optional and param.default is None:
                    state.set_error(param.name, f"{param.title} field is required.")
                continue
            try:
                coerce_value(param.type, raw)
            except ValidationError as e:
                state.set_error(param.name, e.message)
        return state.errors

    def submit_form(self, unit: BoundUnit, state: FormState) -> BoundUnit:
        bindings = dict(unit.bindings)
        for param in self._configurable_parameters(unit):
            raw = state.values.get(param.name)
            if raw is None or raw == "":
                continue
            bindings[param.name] = coerce_value(param.type, raw)
        return replace(unit, bindings=bindings)

    # ── Invocation ───────────────────────────────────────────────

    def invoke(self, unit: BoundUnit, subject: EntityWrapper, args: Sequence[Any]) -> Any:
        """
        Call the action as ``impl(subject, **values)``.

        Positional ``args`` fill the unit's placeholders, or the action's
        non-subject parameters in order when the unit has none. Remaining
        parameters come from bindings, then declared defaults.

        Raises:
            BadParamsError: Too many arguments, or a required parameter is unbound.
            OperationError: No implementation is registered for the action.
        """
        descriptor = self.registry.resolve(unit.key, unit.entity_type)
        impl = self.registry.implementation(unit.key, unit.entity_type)
        if impl is None:
            raise OperationError(f"Operation '{unit.key}' has no implementation").with_context(
                operation=unit.key, entity_type=unit.entity_type
            )

        targets = unit.placeholders or tuple(p.name for p in descriptor.non_subject_parameters)
        if len(args) > len(targets):
            raise BadParamsError(
                f"Operation '{unit.key}' takes {len(targets)} argument(s) after the subject, got {len(args)}"
            )

        values: dict[str, Any] = {}
        invalid: list[str] = []
        for name, arg in zip(targets, args, strict=False):
            param = descriptor.parameter(name)
            try:
                values[name] = coerce_value(param.type, arg)
            except ValidationError:
                invalid.append(name)

        missing: list[str] = []
        for param in descriptor.non_subject_parameters:
            if param.name in values or param.name in invalid:
                continue
            if param.name in unit.bindings:
                values[param.name] = unit.bindings[param.name]
            elif param.default is not None:
                values[param.name] = param.default
            elif not param.optional:
                missing.append(param.name)

        if missing or invalid:
            parts = []
            if missing:
                parts.append(f"missing {', '.join(missing)}")
            if invalid:
                parts.append(f"invalid {', '.join(invalid)}")
            raise BadParamsError(
                f"Operation '{unit.key}' cannot be invoked: {'; '.join(parts)}",
                missing_params=missing,
                invalid_params=invalid,
            )

        log.debug("engine.invoke", operation=unit.key, subject_type=subject.type, parameters=sorted(values))
        return impl(subject, **values)
