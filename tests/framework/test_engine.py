"""Tests for ``bulkops.framework.engine`` — the in-process rule engine."""

from __future__ import annotations

import pytest

from bulkops.core.errors import BadParamsError, OperationError, OperationNotFoundError
from bulkops.framework.descriptors import OperationDescriptor
from bulkops.framework.engine import LocalRuleEngine
from bulkops.framework.forms import SWITCH_BUTTON, FormState
from bulkops.framework.params import ParameterSpec
from bulkops.framework.registry import OperationDescriptorRegistry
from bulkops.framework.wrappers import wrap_subject


class TestLookupAction:
    def test_unit_for_descriptor(self, engine):
        unit = engine.lookup_action("notify", "node")
        assert unit.key == "notify"
        assert unit.subject_name == "node"
        assert unit.subject_type == "node"
        assert unit.placeholders == ()
        assert unit.bindings == {}

    def test_bindings_limited_to_non_subject_parameters(self, engine):
        unit = engine.lookup_action("notify", "node", bindings={"message": "hi", "node": 1, "x": 2})
        assert unit.bindings == {"message": "hi"}

    def test_unknown_key_raises(self, engine):
        with pytest.raises(OperationNotFoundError):
            engine.lookup_action("missing", "node")

    def test_default_registry_is_global(self):
        from bulkops.framework.registry import get_registry

        assert LocalRuleEngine().registry is get_registry()


class TestActionSet:
    def test_placeholders_in_given_order(self, engine):
        unit = engine.action_set("escalate", "node", "node", {"owner": "user", "reason": "text"})
        assert unit.placeholders == ("owner", "reason")

    def test_subject_type_can_be_a_list(self, engine):
        assert engine.action_set("archive", "node", "list<node>").subject_type == "list<node>"

    def test_type_mismatch_rejected(self, engine):
        with pytest.raises(BadParamsError):
            engine.action_set("notify", "node", "node", {"message": "integer"})

    def test_subject_cannot_be_a_placeholder(self, engine):
        with pytest.raises(BadParamsError):
            engine.action_set("notify", "node", "node", {"node": "node"})


class TestForms:
    def test_one_fieldset_per_parameter(self, engine):
        unit = engine.action_set("escalate", "node", "node")
        form = engine.build_form(unit, FormState())
        assert form.names == ["node", "reason", "owner"]
        reason = form.get("reason")
        assert reason.widget == "fieldset"
        assert reason.parameter == "reason"
        assert reason.child("reason").widget == "textfield"
        assert reason.child(SWITCH_BUTTON) is not None

    def test_number_widgets_for_numeric_types(self, engine):
        form = engine.build_form(engine.action_set("set_priority", "node", "node"), FormState())
        assert form.get("priority").child("priority").widget == "number"
        assert form.get("priority").child("priority").required is True
        assert form.get("weight").child("weight").required is False

    def test_selector_mode(self, engine):
        state = FormState(parameter_mode={"message": "selector"})
        form = engine.build_form(engine.action_set("notify", "node", "node"), state)
        assert form.get("message").child("message:select") is not None

    def test_validate_required(self, engine):
        unit = engine.action_set("set_priority", "node", "node")
        state = FormState(values={})
        errors = engine.validate_form(unit, state)
        assert errors == {"priority": "Priority field is required."}

    def test_validate_bad_number(self, engine):
        unit = engine.action_set("set_priority", "node", "node")
        state = FormState(values={"priority": "high"})
        assert "priority" in engine.validate_form(unit, state)

    def test_placeholders_are_not_validated(self, engine):
        unit = engine.action_set("escalate", "node", "node", {"reason": "text"})
        state = FormState(values={"owner": 5})
        assert engine.validate_form(unit, state) == {}

    def test_submit_binds_coerced_values(self, engine):
        unit = engine.action_set("set_priority", "node", "node")
        bound = engine.submit_form(unit, FormState(values={"priority": "4", "weight": ""}))
        assert bound.bindings == {"priority": 4}
        assert unit.bindings == {}


class TestInvoke:
    def test_subject_only(self, engine, registry):
        unit = engine.lookup_action("notify", "node", bindings={"message": "Overdue"})
        subject = wrap_subject({"nid": 1}, "node")
        assert engine.invoke(unit, subject, []) == "ok"
        assert registry.recorders["notify"].calls == [(subject, {"message": "Overdue"})]

    def test_positional_args_fill_non_subject_parameters(self, engine, registry):
        unit = engine.lookup_action("escalate", "node")
        subject = wrap_subject(1, "node")
        engine.invoke(unit, subject, ["Late", {"uid": 2}])
        assert registry.recorders["escalate"].calls[0][1] == {"reason": "Late", "owner": {"uid": 2}}

    def test_positional_args_fill_placeholders(self, engine, registry):
        unit = engine.submit_form(
            engine.action_set("escalate", "node", "node", {"owner": "user"}),
            FormState(values={"reason": "Late"}),
        )
        engine.invoke(unit, wrap_subject(1, "node"), [{"uid": 9}])
        assert registry.recorders["escalate"].calls[0][1] == {"reason": "Late", "owner": {"uid": 9}}

    def test_args_are_coerced(self, engine, registry):
        engine.invoke(engine.lookup_action("set_priority", "node"), wrap_subject(1, "node"), ["2"])
        assert registry.recorders["set_priority"].calls[0][1] == {"priority": 2}

    def test_too_many_args(self, engine):
        with pytest.raises(BadParamsError, match="takes 1"):
            engine.invoke(engine.lookup_action("notify", "node"), wrap_subject(1, "node"), ["a", "b"])

    def test_missing_required_parameter(self, engine):
        with pytest.raises(BadParamsError) as exc_info:
            engine.invoke(engine.lookup_action("assign_reviewer", "node"), wrap_subject(1, "node"), [])
        assert exc_info.value.missing_params == ["reviewer"]

    def test_invalid_argument(self, engine):
        with pytest.raises(BadParamsError) as exc_info:
            engine.invoke(engine.lookup_action("set_priority", "node"), wrap_subject(1, "node"), ["x"])
        assert exc_info.value.invalid_params == ["priority"]

    def test_defaults_fill_unbound_parameters(self):
        registry = OperationDescriptorRegistry()
        calls = []
        registry.register(
            OperationDescriptor(
                key="block",
                entity_type="user",
                label="Block",
                parameters=(ParameterSpec("account", "user", subject=True), ParameterSpec("days", "integer", default=7)),
            ),
            implementation=lambda subject, **values: calls.append(values),
        )
        engine = LocalRuleEngine(registry)
        engine.invoke(engine.lookup_action("block", "user"), wrap_subject(1, "user"), [])
        assert calls == [{"days": 7}]

    def test_missing_implementation(self, notify_descriptor):
        registry = OperationDescriptorRegistry()
        registry.register(notify_descriptor)
        engine = LocalRuleEngine(registry)
        with pytest.raises(OperationError, match="no implementation"):
            engine.invoke(engine.lookup_action("notify", "node"), wrap_subject(1, "node"), ["hi"])

    def test_action_errors_propagate_unchanged(self, notify_descriptor):
        registry = OperationDescriptorRegistry()
        boom = RuntimeError("mail server down")

        def fail(subject, **values):
            raise boom

        registry.register(notify_descriptor, implementation=fail)
        engine = LocalRuleEngine(registry)
        with pytest.raises(RuntimeError) as exc_info:
            engine.invoke(engine.lookup_action("notify", "node"), wrap_subject(1, "node"), ["hi"])
        assert exc_info.value is boom


class TestAccess:
    def test_allowed_without_access_check(self, engine):
        assert engine.access("notify", "node", object()) is True

    def test_access_check_is_consulted(self, reviewer_descriptor):
        registry = OperationDescriptorRegistry()
        registry.register(reviewer_descriptor, access=lambda account: account == "editor")
        engine = LocalRuleEngine(registry)
        assert engine.access("assign_reviewer", "node", "editor") is True
        assert engine.access("assign_reviewer", "node", "guest") is False
