from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class VerificationOutcome(str, Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    MANUAL_REVIEW = "MANUAL_REVIEW"

    @property
    def verification_status(self) -> str:
        """Provider status label persisted on submission and sent in callbacks."""
        return _VERIFICATION_STATUS_LABELS[self]

    @property
    def decision_type(self) -> str:
        return _DECISION_TYPES[self]

    @property
    def decision_label(self) -> str:
        return _DECISION_LABELS[self]


class WorkflowLifecycleStatus(str, Enum):
    INITIATED = "INITIATED"
    PROCESSING = "PROCESSING"
    PROCESSED = "PROCESSED"


_VERIFICATION_STATUS_LABELS = {
    VerificationOutcome.APPROVED: "APPROVED_VERIFIED",
    VerificationOutcome.REJECTED: "REJECTED_UNSUPPORTED_ID_TYPE",
    VerificationOutcome.MANUAL_REVIEW: "REQUIRES_MANUAL_REVIEW",
}

_DECISION_TYPES = {
    VerificationOutcome.APPROVED: "ACCEPTED",
    VerificationOutcome.REJECTED: "REJECTED",
    VerificationOutcome.MANUAL_REVIEW: "REVIEW",
}

_DECISION_LABELS = {
    VerificationOutcome.APPROVED: "OK",
    VerificationOutcome.REJECTED: "REJECTED",
    VerificationOutcome.MANUAL_REVIEW: "MANUAL_REVIEW",
}

WORKFLOW_DEFINITION = {"key": "10164", "name": "ID + Selfie Verification"}


@dataclass(frozen=True, slots=True)
class CapabilityScore:
    decision: str
    score: float
