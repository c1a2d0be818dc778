"""Rules component operations (rule, rule set, action).

A RulesComponentOperation is built once per request for one bulk-operations
field. On construction it resolves the admin-provided parameters against the
first row of the listing; the listing then asks whether an end-user form is
needed, collects and submits it, and executes the operation per record or
once for the whole selection.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from bulkops.core.errors import OperationError, UnconfiguredOperationError, ValidationError
from bulkops.framework.descriptors import OperationDescriptor
from bulkops.framework.engine import BoundUnit, LocalRuleEngine, RuleEngine
from bulkops.framework.forms import (
    Dependency,
    FieldSpec,
    FormSpec,
    FormState,
    flatten_parameter_fieldsets,
    remove_parameters,
)
from bulkops.framework.logging import get_logger, log_step
from bulkops.framework.operations.base import AccessMask, BaseOperation
from bulkops.framework.params import AdminConfig, list_type
from bulkops.framework.registry import OperationDescriptorRegistry, get_registry
from bulkops.framework.tokens import (
    ListingContext,
    ResolvedParameters,
    RowContext,
    TokenOptions,
    TokenRenderer,
    resolve_parameters,
)
from bulkops.framework.wrappers import is_batch, wrap_subject

log = get_logger(__name__)


class RulesComponentOperation:
    """A configured bulk operation backed by a rule engine component."""

    def __init__(
        self,
        descriptor: OperationDescriptor,
        entity_type: str,
        admin_config: AdminConfig,
        listing: ListingContext,
        engine: RuleEngine,
        renderer: TokenRenderer | None = None,
    ) -> None:
        self._base = BaseOperation(descriptor, entity_type, admin_config)
        self.engine = engine
        self._token_options = listing.token_options()
        # Provided parameters are resolved against the first row, also for
        # aggregate operations.
        self._provided = resolve_parameters(
            descriptor,
            admin_config.parameters,
            listing.row_context(0),
            renderer,
        )
        self._renderer = renderer
        self._bound: BoundUnit | None = None

        log.debug(
            "operation.constructed",
            operation=descriptor.key,
            entity_type=entity_type,
            provided=sorted(self._provided),
        )

    # ── Delegated basics ─────────────────────────────────────────

    @property
    def descriptor(self) -> OperationDescriptor:
        return self._base.descriptor

    @property
    def entity_type(self) -> str:
        return self._base.entity_type

    @property
    def admin_config(self) -> AdminConfig:
        return self._base.admin_config

    @property
    def key(self) -> str:
        return self._base.key

    @property
    def operation_id(self) -> str:
        return self._base.operation_id

    @property
    def label(self) -> str:
        return self._base.label

    @property
    def aggregate(self) -> bool:
        return self._base.aggregate

    @property
    def access_mask(self) -> AccessMask:
        # The rule engine enforces its own permissions.
        return AccessMask.VIEW

    def get_admin_option(self, name: str, default: Any = None) -> Any:
        return self._base.get_admin_option(name, default)

    # ── Parameters ───────────────────────────────────────────────

    @property
    def provided_parameters(self) -> ResolvedParameters:
        return dict(self._provided)

    @property
    def token_options(self) -> TokenOptions:
        return dict(self._token_options)

    @property
    def bound_configuration(self) -> BoundUnit | None:
        return self._bound

    def _provides_parameters(self) -> bool:
        return bool(self.get_admin_option("provide_parameters", False))

    def configurable(self) -> bool:
        """
        Whether the end user must fill a configuration form.

        With admin-provided parameters, no form is needed when there are no
        primitive parameters at all, or when every parameter is primitive and
        each has a resolved value.
        """
        if self._provides_parameters():
            params = self.descriptor.non_subject_parameters
            primitive = self.descriptor.primitive_parameters
            provided = [name for name, value in self._provided.items() if value not in ("", None)]
            if len(params) > 0 and (
                (len(params) <= len(primitive) and len(primitive) <= len(provided)) or len(primitive) == 0
            ):
                return False
        return self._base.configurable()

    # ── End-user configuration form ──────────────────────────────

    def _wired_parameters(self) -> dict[str, str]:
        if not self._provides_parameters():
            return {}
        return {name: self.descriptor.parameter(name).type for name in self._provided}

    def form(self, state: FormState, context: Mapping[str, Any] | None = None) -> FormSpec:
        """
        Build the configuration form shared by the whole batch.

        The subject and the provided parameters are wired programmatically,
        so their widgets are removed; the remaining parameters default to
        direct input.
        """
        if not self.configurable():
            raise OperationError(f"Operation '{self.key}' has no configuration form").with_context(
                operation=self.key, entity_type=self.entity_type
            )

        subject_type = list_type(self.entity_type) if self.aggregate else self.entity_type
        wired = self._wired_parameters()
        unit = self.engine.action_set(self.key, self.entity_type, subject_type, wired)
        state.element = unit

        for param in self.descriptor.parameters:
            state.parameter_mode[param.name] = "input"

        form = self.engine.build_form(unit, state)
        form = remove_parameters(form, [self.descriptor.subject_parameter.name, *wired])
        return flatten_parameter_fieldsets(form)

    def form_validate(self, form: FormSpec, state: FormState) -> dict[str, str]:
        """Run the engine's validation; markers end up in ``state.errors``."""
        if state.element is None:
            raise OperationError("form() must be called before form_validate()")
        return self.engine.validate_form(state.element, state)

    def form_submit(self, form: FormSpec, state: FormState) -> BoundUnit:
        """Keep the bound unit produced by the engine for execute()."""
        if state.element is None:
            raise OperationError("form() must be called before form_submit()")
        if state.has_errors:
            raise ValidationError("Configuration form has errors", errors=state.errors).with_context(
                operation=self.key
            )
        self._bound = self.engine.submit_form(state.element, state)
        log.info("operation.configured", operation=self.key, bindings=sorted(self._bound.bindings))
        return self._bound

    # ── Admin options form ───────────────────────────────────────

    def admin_options_form(self, dom_id: str) -> FormSpec:
        form = self._base.admin_options_form(dom_id)
        params = self.descriptor.non_subject_parameters
        if not params:
            return form

        selected = Dependency(f"{dom_id}-selected", (1,))
        provide = Dependency(f"{dom_id}-provide-parameters", (1,))
        stored = self.admin_config.parameters

        selectors = tuple(
            FieldSpec(
                name=param.key,
                widget="select",
                title=param.name,
                options=self.token_options,
                default=stored.get(param.key, ""),
                dependencies=(selected, provide),
                parameter=param.name,
            )
            for param in params
        )
        return form.extend(
            (
                FieldSpec(
                    name="provide_parameters",
                    widget="checkbox",
                    title="Provide parameters",
                    default=self.admin_config.provide_parameters,
                    dependencies=(selected,),
                ),
                FieldSpec(
                    name="parameters",
                    widget="container",
                    dependencies=(selected, provide),
                    children=selectors,
                ),
            )
        )

    def admin_options_submit(self, values: Mapping[str, Any]) -> AdminConfig:
        """Store the admin selections; parameter keys must belong to this operation."""
        values = dict(values)
        if "parameters" in values:
            known = {p.key for p in self.descriptor.non_subject_parameters}
            submitted = values["parameters"] or {}
            unknown = sorted(set(submitted) - known)
            if unknown:
                raise ValidationError(
                    f"Unknown parameters for operation '{self.key}': {', '.join(unknown)}",
                    field="parameters",
                    value=unknown,
                )
            values["parameters"] = {k: v for k, v in submitted.items() if k in known}
        return self._base.admin_options_submit(values)

    # ── Execution ────────────────────────────────────────────────

    def execute(self, data: Any, context: Mapping[str, Any] | None = None) -> Any:
        """
        Run the operation on one record or on a list of records.

        Positional ``context["parameters"]`` follow the subject. Errors
        raised by the action propagate unchanged.

        Raises:
            UnconfiguredOperationError: Configurable operation without a submitted form.
        """
        context = context or {}
        if self.configurable():
            if self._bound is None:
                raise UnconfiguredOperationError(self.key)
            unit = self._bound
        else:
            unit = self.engine.lookup_action(
                self.key,
                self.entity_type,
                bindings=self._provided if self._provides_parameters() else None,
            )

        subject = wrap_subject(data, self.entity_type)
        parameters = context.get("parameters")

        with log_step("operation.execute", operation=self.key, subject=subject.kind, records=len(subject)):
            if is_batch(parameters):
                return self.engine.invoke(unit, subject, list(parameters))
            return self.engine.invoke(unit, subject, [])

    def execution_context(self, row: RowContext | None = None) -> dict[str, Any]:
        """
        Context for execute() carrying the values of wired provided parameters.

        Values come from the construction-time resolution, or are resolved
        against ``row`` alone when one is given. When a placeholder has no
        value for that row, no parameters are returned and invocation reports
        it as missing.
        """
        if self._bound is None or not self._bound.placeholders:
            return {}
        if row is None:
            values = self._provided
        else:
            values = resolve_parameters(self.descriptor, self.admin_config.parameters, row, self._renderer)
        missing = [name for name in self._bound.placeholders if name not in values]
        if missing:
            log.warning(
                "operation.parameters_unresolved",
                operation=self.key,
                row=None if row is None else row.index,
                missing=missing,
            )
            return {}
        return {"parameters": [values[name] for name in self._bound.placeholders]}

    def access(self, account: Any) -> bool:
        return self.engine.access(self.key, self.entity_type, account)


def create_operation(
    key: str,
    entity_type: str,
    admin_config: AdminConfig | Mapping[str, Any] | None,
    listing: ListingContext | None = None,
    *,
    engine: RuleEngine | None = None,
    registry: OperationDescriptorRegistry | None = None,
    renderer: TokenRenderer | None = None,
) -> RulesComponentOperation:
    """
    Instantiate an operation for a bulk-operations field.

    Raises:
        OperationNotFoundError: If ``key`` is not registered for ``entity_type``.
    """
    registry = registry if registry is not None else get_registry()
    descriptor = registry.resolve(key, entity_type)
    if not isinstance(admin_config, AdminConfig):
        admin_config = AdminConfig.from_options(admin_config)
    return RulesComponentOperation(
        descriptor,
        entity_type,
        admin_config,
        listing or ListingContext(),
        engine if engine is not None else LocalRuleEngine(registry),
        renderer,
    )
