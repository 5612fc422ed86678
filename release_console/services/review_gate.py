"""
Review gate — three-way verdict on the code review attached to a publish.

Read-only: never touches the session. Used by publish admission to decide
whether a publish awaiting review may resume.
"""

from enum import Enum

from release_console.models.registry import REVIEW_APPROVED, REVIEW_REJECTED


class ReviewVerdict(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    PENDING = "pending"


def verdict_for_code(code: str | None) -> ReviewVerdict:
    """7001 → APPROVED, 7002 → REJECTED, anything else → PENDING."""
    if code == REVIEW_APPROVED:
        return ReviewVerdict.APPROVED
    if code == REVIEW_REJECTED:
        return ReviewVerdict.REJECTED
    return ReviewVerdict.PENDING


def evaluate_review(review) -> ReviewVerdict:
    """Return the verdict for a Review row.

    Callers must handle a missing review themselves; a publish without one
    has not entered review at all.
    """
    return verdict_for_code(review.review_status_code)
