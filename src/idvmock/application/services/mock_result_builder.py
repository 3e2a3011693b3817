from __future__ import annotations

import secrets
import string
from datetime import datetime
from typing import Any, Callable

from idvmock.core.time import now_utc, to_iso
from idvmock.domain.models.verification import (
    WORKFLOW_DEFINITION,
    CapabilityScore,
    VerificationOutcome,
    WorkflowLifecycleStatus,
)

_DOCUMENT_NUMBER_ALPHABET = string.digits + string.ascii_uppercase

APPROVED_SCORES = {
    "similarity": CapabilityScore("MATCH", 0.95),
    "liveness": CapabilityScore("PASSED", 0.98),
    "authentication": CapabilityScore("AUTHENTIC", 0.92),
}
REVIEW_SCORES = {
    "similarity": CapabilityScore("REVIEW", 0.75),
    "liveness": CapabilityScore("REVIEW", 0.72),
    "authentication": CapabilityScore("REVIEW", 0.68),
}
IMAGE_QUALITY_SCORE = CapabilityScore("PASSED", 0.88)

REJECT_REASON = {
    "rejectReasonCode": "UNSUPPORTED_ID_TYPE",
    "rejectReasonDescription": "The provided document type is not supported",
    "rejectReasonDetails": [
        {
            "detailsCode": "DOCUMENT_NOT_SUPPORTED",
            "detailsDescription": "Document verification failed",
        }
    ],
}


def random_document_number() -> str:
    """Return ``DL`` followed by nine random uppercase base-36 characters."""
    suffix = "".join(secrets.choice(_DOCUMENT_NUMBER_ALPHABET) for _ in range(9))
    return f"DL{suffix}"


def workflow_definition() -> dict[str, str]:
    return dict(WORKFLOW_DEFINITION)


class MockResultBuilder:
    """Builds terminal verification result documents for a mock outcome."""

    def __init__(
        self,
        document_number_factory: Callable[[], str] = random_document_number,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.document_number_factory = document_number_factory
        self.clock = clock

    def build_result(
        self,
        outcome: VerificationOutcome,
        account_id: str,
        workflow_execution_id: str,
        started_at: datetime,
        completed_at: datetime,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        timestamp = now if now is not None else self.clock()
        result: dict[str, Any] = {
            "timestamp": to_iso(timestamp),
            "account": {"id": account_id},
            "workflowExecution": {
                "id": workflow_execution_id,
                "status": WorkflowLifecycleStatus.PROCESSED.value,
                "definition": workflow_definition(),
                "startedAt": to_iso(started_at),
                "completedAt": to_iso(completed_at),
            },
            "decision": {
                "type": outcome.decision_type,
                "details": {"label": outcome.decision_label},
            },
        }

        if outcome is VerificationOutcome.REJECTED:
            result["rejectReason"] = _reject_reason()
        else:
            result["capabilities"] = self.build_capabilities(outcome)
        return result

    def build_capabilities(self, outcome: VerificationOutcome) -> dict[str, Any]:
        scores = APPROVED_SCORES if outcome is VerificationOutcome.APPROVED else REVIEW_SCORES
        document = self.build_document()
        capabilities: dict[str, Any] = {
            "extraction": {
                "data": {
                    "document": document,
                    "usAddress": dict(document["address"]),
                }
            }
        }
        for name, score in scores.items():
            capabilities[name] = {"decision": score.decision, "score": score.score}
        capabilities["imageQuality"] = {
            "decision": IMAGE_QUALITY_SCORE.decision,
            "score": IMAGE_QUALITY_SCORE.score,
        }
        return capabilities

    def build_document(self) -> dict[str, Any]:
        return {
            "type": "DRIVING_LICENSE",
            "country": "USA",
            "firstName": "John",
            "lastName": "Doe",
            "dateOfBirth": "1990-01-15",
            "expiryDate": "2028-12-31",
            "issuingDate": "2023-01-15",
            "documentNumber": self.document_number_factory(),
            "address": {
                "line1": "123 Main Street",
                "city": "San Francisco",
                "subdivision": "CA",
                "postalCode": "94102",
                "country": "USA",
            },
        }


def _reject_reason() -> dict[str, Any]:
    return {
        "rejectReasonCode": REJECT_REASON["rejectReasonCode"],
        "rejectReasonDescription": REJECT_REASON["rejectReasonDescription"],
        "rejectReasonDetails": [dict(detail) for detail in REJECT_REASON["rejectReasonDetails"]],
    }
