"""Synchronous bulk operation runner.

Manifesto:
    The runner applies an operation to a selection with one consistent
    loop (access check, per-record or aggregate dispatch, result record)
    so listings never re-implement it.

There is no retry and no rollback: the first failure propagates unchanged
and side effects already applied to earlier records stay applied.

Tags:
    bulkops, framework, runner, synchronous

Doc-Types:
    api-reference
"""

import uuid
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from bulkops.core.errors import AuthorizationError
from bulkops.framework.logging import get_logger, log_step, push_context
from bulkops.framework.operations import OperationResult, OperationStatus

log = get_logger(__name__)

_UNSET = object()


class BulkOperationRunner:
    """
    Synchronous runner.

    Executes operations immediately in the current thread.
    """

    def run(
        self,
        operation: Any,
        selection: Sequence[Any],
        context: Mapping[str, Any] | None = None,
        *,
        account: Any = _UNSET,
    ) -> OperationResult:
        """
        Apply ``operation`` to the selected records.

        Aggregate operations receive the whole selection in one call; other
        operations are executed once per record, in selection order.

        Args:
            operation: A configured operation (see ``Operation``)
            selection: Selected records
            context: Extra execute() context; operation-provided parameters
                are added when it has none
            account: When given, access is checked before anything runs

        Returns:
            OperationResult with the return values of each invocation

        Raises:
            AuthorizationError: If ``account`` may not run the operation
        """
        if account is not _UNSET and not operation.access(account):
            raise AuthorizationError(f"Access denied to operation '{operation.key}'").with_context(
                operation=operation.key
            )

        exec_context = dict(context or {})
        if "parameters" not in exec_context and hasattr(operation, "execution_context"):
            exec_context.update(operation.execution_context())

        batch_id = uuid.uuid4().hex[:12]
        started_at = datetime.now(UTC)
        records = list(selection)
        results: list[Any] = []

        token = push_context(operation=operation.key, batch_id=batch_id)
        try:
            with log_step("runner.run", records=len(records), aggregate=operation.aggregate) as timer:
                if operation.aggregate:
                    results.append(operation.execute(records, exec_context))
                else:
                    for record in records:
                        results.append(operation.execute(record, exec_context))
                timer.add_metric("invocations", len(results))
        finally:
            token.restore()

        return OperationResult(
            status=OperationStatus.COMPLETED,
            started_at=started_at,
            completed_at=datetime.now(UTC),
            metrics={"records": len(records), "invocations": len(results), "batch_id": batch_id},
            results=results,
        )


# Default runner instance
_runner: BulkOperationRunner | None = None


def get_runner() -> BulkOperationRunner:
    """Get or create runner instance."""
    global _runner
    if _runner is None:
        _runner = BulkOperationRunner()
    return _runner
