"""
Step timing for bulk runs.

A bulk run is a tree of steps: ``runner.run`` wraps one ``operation.execute``
per record (or a single one for aggregate operations). Each step gets a span
id and remembers its parent span, so the log lines of one record can be told
apart from those of the next inside the same batch.

Emitted events:
    <step>.start  DEBUG, before the block runs (optional)
    <step>.end    at the requested level, with duration_ms and metrics
    <step>.error  ERROR, with the exception type and message; re-raised

Tags:
    bulkops, logging, timing, tracing

Doc-Types:
    api-reference
"""

import time
import traceback
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from bulkops.framework.logging.context import get_context, get_logger, push_context


def new_span_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass
class TimingResult:
    """
    Timing record of one step.

    ``metrics`` are merged into the ``.end`` event, so a step can report
    what it processed (records, invocations) once it knows.
    """

    step: str
    span_id: str = field(default_factory=new_span_id)
    parent_span_id: str | None = None
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    metrics: dict[str, Any] = field(default_factory=dict)
    status: str = "ok"
    error_info: dict[str, Any] | None = None

    def stop(self) -> "TimingResult":
        if self.ended_at is None:
            self.ended_at = time.perf_counter()
        return self

    @property
    def duration_seconds(self) -> float:
        end = self.ended_at if self.ended_at is not None else time.perf_counter()
        return end - self.started_at

    @property
    def duration_ms(self) -> float:
        return self.duration_seconds * 1000

    def add_metric(self, key: str, value: Any) -> "TimingResult":
        self.metrics[key] = value
        return self

    def set_error(self, error: Exception) -> "TimingResult":
        """Mark the step failed; the traceback is kept for the error event."""
        self.status = "error"
        self.error_info = {
            "error_type": type(error).__name__,
            "error_message": str(error),
            "error_stack": traceback.format_exc(),
        }
        return self

    def span_fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {"span_id": self.span_id}
        if self.parent_span_id:
            fields["parent_span_id"] = self.parent_span_id
        return fields

    def to_log_dict(self) -> dict[str, Any]:
        return {"duration_ms": round(self.duration_ms, 2), **self.span_fields(), **self.metrics}

    def to_error_dict(self) -> dict[str, Any]:
        return {**self.to_log_dict(), "status": "error", **(self.error_info or {})}


@contextmanager
def log_step(event: str, log_start: bool = True, level: str = "info", **extra_metrics) -> Iterator[TimingResult]:
    """
    Time a block and log it as ``event``.

    Usage:
        with log_step("runner.run", records=len(records)) as timer:
            for record in records:
                operation.execute(record, context)
            timer.add_metric("invocations", len(records))

    While the block runs, the log context carries ``step=event`` and the new
    span id; the previous context is restored afterwards.
    """
    log = get_logger("bulkops.timing")
    parent_span = get_context().span_id
    timer = TimingResult(step=event, parent_span_id=parent_span, metrics=dict(extra_metrics))
    token = push_context(span_id=timer.span_id, parent_span_id=parent_span, step=event)

    try:
        if log_start:
            log.debug(f"{event}.start", **timer.span_fields(), **extra_metrics)
        yield timer
    except Exception as e:
        timer.stop().set_error(e)
        log.error(f"{event}.error", **timer.to_error_dict())
        raise
    finally:
        timer.stop()
        token.restore()

    getattr(log, level)(f"{event}.end", **timer.to_log_dict())
