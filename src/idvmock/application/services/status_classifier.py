from __future__ import annotations

from idvmock.domain.models.verification import VerificationOutcome

REJECTED_MARKERS = ("rejected", "failed")
REVIEW_MARKERS = ("review", "manual")


def classify(email: str | None) -> VerificationOutcome:
    """Derive the mock verification outcome from an email address.

    Matching is a case-insensitive substring test. Rejection markers are
    checked before review markers; anything unmatched (or no email) is approved.
    """
    if not email:
        return VerificationOutcome.APPROVED

    lowered = email.lower()
    if any(marker in lowered for marker in REJECTED_MARKERS):
        return VerificationOutcome.REJECTED
    if any(marker in lowered for marker in REVIEW_MARKERS):
        return VerificationOutcome.MANUAL_REVIEW
    return VerificationOutcome.APPROVED
