"""
Tests for the logging module.

Tests verify:
- Log context carries operation and batch identifiers
- Timing logs emit duration and span ids
- Errors inside a step are logged and re-raised
"""

import logging

import pytest
from structlog.testing import capture_logs

from bulkops.framework.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_context,
    get_logger,
    is_configured,
    log_step,
    push_context,
    set_context,
)
from bulkops.framework.logging.context import add_context_processor


class TestLogContext:
    """Test LogContext dataclass."""

    def test_to_dict_excludes_none(self):
        ctx = LogContext(operation="notify", entity_type=None)
        d = ctx.to_dict()
        assert d == {"operation": "notify"}

    def test_merge_creates_new_context(self):
        ctx1 = LogContext(operation="notify")
        ctx2 = ctx1.merge(batch_id="b-1")

        assert ctx1.batch_id is None
        assert ctx2.operation == "notify"
        assert ctx2.batch_id == "b-1"

    def test_merge_ignores_unknown_keys(self):
        ctx = LogContext().merge(operation="notify", records=3)
        assert ctx.to_dict() == {"operation": "notify"}


class TestContextManagement:
    """Test context set/get/clear operations."""

    def test_set_context_returns_context(self):
        ctx = set_context(operation="notify", entity_type="node")

        assert ctx.operation == "notify"
        assert get_context().entity_type == "node"

    def test_clear_context_resets(self):
        set_context(operation="notify")
        clear_context()
        assert get_context().operation is None

    def test_bind_context_merges(self):
        set_context(operation="notify")
        bind_context(batch_id="b-1")
        ctx = get_context()

        assert ctx.operation == "notify"
        assert ctx.batch_id == "b-1"

    def test_push_context_restores(self):
        set_context(operation="notify")
        token = push_context(operation="archive", batch_id="b-2")
        assert get_context().operation == "archive"
        token.restore()
        assert get_context().operation == "notify"
        assert get_context().batch_id is None

    def test_context_processor_does_not_override_event_keys(self):
        set_context(operation="notify", batch_id="b-1")
        event = add_context_processor(None, "info", {"event": "x", "operation": "explicit"})
        assert event["operation"] == "explicit"
        assert event["batch_id"] == "b-1"


class TestLogStep:
    """Test log_step context manager."""

    def test_log_step_sets_step_context(self):
        with log_step("operation.execute"):
            assert get_context().step == "operation.execute"

        assert get_context().step is None

    def test_log_step_emits_start_and_end(self):
        with capture_logs() as logs:
            with log_step("operation.execute", records=2) as timer:
                timer.add_metric("invocations", 1)

        events = [entry["event"] for entry in logs]
        assert events == ["operation.execute.start", "operation.execute.end"]
        end = logs[-1]
        assert end["records"] == 2
        assert end["invocations"] == 1
        assert "duration_ms" in end
        assert end["span_id"] == timer.span_id

    def test_log_step_without_start(self):
        with capture_logs() as logs:
            with log_step("quiet", log_start=False):
                pass
        assert [entry["event"] for entry in logs] == ["quiet.end"]

    def test_log_step_logs_and_reraises_errors(self):
        with capture_logs() as logs:
            with pytest.raises(ValueError, match="bad"):
                with log_step("operation.execute") as timer:
                    raise ValueError("bad")

        assert timer.status == "error"
        error = logs[-1]
        assert error["event"] == "operation.execute.error"
        assert error["log_level"] == "error"
        assert error["error_type"] == "ValueError"
        assert get_context().step is None

    def test_nested_steps_track_parent_span(self):
        with log_step("outer") as outer:
            with log_step("inner") as inner:
                assert inner.parent_span_id == outer.span_id
                assert get_context().parent_span_id == outer.span_id
            assert get_context().span_id == outer.span_id

    def test_nested_end_event_carries_parent_span(self):
        with capture_logs() as logs:
            with log_step("runner.run", log_start=False) as outer:
                with log_step("operation.execute", log_start=False) as inner:
                    pass

        inner_end, outer_end = logs
        assert inner_end["event"] == "operation.execute.end"
        assert inner_end["span_id"] == inner.span_id
        assert inner_end["parent_span_id"] == outer.span_id
        assert "parent_span_id" not in outer_end


class TestConfigureLogging:
    """Test logging configuration."""

    def test_configure_logging_sets_level(self):
        configure_logging(level="WARNING", force=True)

        assert logging.getLogger().level == logging.WARNING
        assert is_configured()

    def test_configure_logging_reads_settings(self, monkeypatch):
        monkeypatch.setenv("BULKOPS_LOG_LEVEL", "error")
        configure_logging(force=True)

        assert logging.getLogger("bulkops").level == logging.ERROR

    def test_json_format(self):
        configure_logging(level="INFO", format="json", force=True)
        assert is_configured()

    def test_get_logger_returns_bound_logger(self):
        log = get_logger("test.module")

        assert hasattr(log, "info")
        assert hasattr(log, "debug")
        assert hasattr(log, "error")
