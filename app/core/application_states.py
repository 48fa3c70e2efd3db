"""
Application status lifecycle.

applied -> under-review -> shortlisted -> interview-scheduled -> interviewed
-> offered -> {hired | rejected}; withdrawn from any non-terminal status.
hired, rejected and withdrawn are terminal.
"""
import enum
from typing import List

from app.core.errors import InvalidStateError, ValidationError


class ApplicationStatus(str, enum.Enum):
    APPLIED = "applied"
    UNDER_REVIEW = "under-review"
    SHORTLISTED = "shortlisted"
    INTERVIEW_SCHEDULED = "interview-scheduled"
    INTERVIEWED = "interviewed"
    OFFERED = "offered"
    HIRED = "hired"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


TERMINAL_STATUSES = frozenset({
    ApplicationStatus.HIRED.value,
    ApplicationStatus.REJECTED.value,
    ApplicationStatus.WITHDRAWN.value,
})

# Forward hiring pipeline, in funnel order
PIPELINE_STATUSES: List[str] = [
    ApplicationStatus.APPLIED.value,
    ApplicationStatus.UNDER_REVIEW.value,
    ApplicationStatus.SHORTLISTED.value,
    ApplicationStatus.INTERVIEW_SCHEDULED.value,
    ApplicationStatus.INTERVIEWED.value,
    ApplicationStatus.OFFERED.value,
    ApplicationStatus.HIRED.value,
]

# Only the job seeker may withdraw
EMPLOYER_SETTABLE_STATUSES = frozenset(
    s.value for s in ApplicationStatus if s is not ApplicationStatus.WITHDRAWN
)

ALL_STATUSES = frozenset(s.value for s in ApplicationStatus)


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def ensure_employer_transition(current: str, requested: str) -> None:
    """
    Validate an employer-initiated status change.

    Any non-terminal status may move to any employer-settable status,
    including backwards. Terminal statuses never change.
    """
    if requested not in EMPLOYER_SETTABLE_STATUSES:
        raise ValidationError(f"Invalid status: {requested}")
    if is_terminal(current):
        raise InvalidStateError(f"Cannot change status of an application that is {current}")


def ensure_withdrawable(current: str) -> None:
    if is_terminal(current):
        raise InvalidStateError("Cannot withdraw this application")
