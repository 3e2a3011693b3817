from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from idvmock.application.services.mock_result_builder import MockResultBuilder, workflow_definition
from idvmock.application.services.status_classifier import classify
from idvmock.core.config import DEFAULT_CALLBACK_DELAY_MS
from idvmock.core.time import now_utc, parse_timestamp, to_iso
from idvmock.domain.models.verification import WorkflowLifecycleStatus

logger = logging.getLogger(__name__)


def lifecycle_status(elapsed_ms: float, delay_ms: int, completed: bool = False) -> WorkflowLifecycleStatus:
    """Map elapsed time since creation onto a lifecycle stage.

    Windows are half-open: ``[0, delay/2)`` is INITIATED, ``[delay/2, delay)``
    is PROCESSING and anything from ``delay`` on is PROCESSED. A completed
    workflow is always PROCESSED.
    """
    if completed:
        return WorkflowLifecycleStatus.PROCESSED
    if elapsed_ms < delay_ms / 2:
        return WorkflowLifecycleStatus.INITIATED
    if elapsed_ms < delay_ms:
        return WorkflowLifecycleStatus.PROCESSING
    return WorkflowLifecycleStatus.PROCESSED


class ProgressiveResultEngine:
    def __init__(
        self,
        builder: MockResultBuilder | None = None,
        delay_ms: int = DEFAULT_CALLBACK_DELAY_MS,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.builder = builder or MockResultBuilder()
        self.delay_ms = delay_ms
        self.clock = clock

    def compute_status(
        self,
        started_at: str | datetime,
        completed_at: str | datetime | None,
        email: str | None,
        account_id: str,
        workflow_execution_id: str,
        delay_ms: int | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Report the workflow as it would appear at ``now``.

        Raises ``InvalidTimestampError`` when ``started_at`` (or a stored
        ``completed_at``) cannot be parsed.
        """
        current = now if now is not None else self.clock()
        effective_delay = self.delay_ms if delay_ms is None else delay_ms
        started = parse_timestamp(started_at)
        completed = parse_timestamp(completed_at) if completed_at else None

        elapsed_ms = (current - started).total_seconds() * 1000
        status = lifecycle_status(elapsed_ms, effective_delay, completed=completed is not None)
        logger.debug(
            "Workflow %s elapsed=%.0fms delay=%sms status=%s",
            workflow_execution_id,
            elapsed_ms,
            effective_delay,
            status.value,
        )

        if status is not WorkflowLifecycleStatus.PROCESSED:
            return {
                "timestamp": to_iso(current),
                "account": {"id": account_id},
                "workflowExecution": {
                    "id": workflow_execution_id,
                    "status": status.value,
                    "definition": workflow_definition(),
                    "startedAt": to_iso(started),
                },
            }

        # Synthetic completion is reported only; the stored record is left untouched.
        return self.builder.build_result(
            classify(email),
            account_id=account_id,
            workflow_execution_id=workflow_execution_id,
            started_at=started,
            completed_at=completed or current,
            now=current,
        )
