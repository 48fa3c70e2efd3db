"""
Pydantic schemas for applications and their status changes.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from app.core.application_states import ApplicationStatus
from app.core.timeutils import to_naive_utc, utcnow
from app.schemas.common import CamelModel
from app.schemas.job import JobOut


class CustomAnswer(CamelModel):
    question: str = Field(..., max_length=500)
    answer: str = Field(..., max_length=2000)


class InterviewDetails(CamelModel):
    scheduled_date: datetime
    interview_type: Literal["phone", "video", "in-person", "technical"]
    location: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)


class StatusUpdate(CamelModel):
    """
    Employer-initiated status change.

    ``rejected`` needs a reason; ``interview-scheduled`` needs interview
    details with a date in the future.
    """
    status: ApplicationStatus
    notes: Optional[str] = Field(None, max_length=1000)
    rejection_reason: Optional[str] = Field(None, max_length=500)
    interview_details: Optional[InterviewDetails] = None

    @model_validator(mode="after")
    def check_required_details(self):
        if self.status == ApplicationStatus.REJECTED:
            if not self.rejection_reason or not self.rejection_reason.strip():
                raise ValueError("Rejection reason is required when rejecting an application")
        if self.status == ApplicationStatus.INTERVIEW_SCHEDULED:
            if self.interview_details is None:
                raise ValueError("Interview details are required when scheduling an interview")
            if to_naive_utc(self.interview_details.scheduled_date) <= utcnow():
                raise ValueError("Interview date must be in the future")
        return self


class RatingUpdate(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    notes: Optional[str] = Field(None, max_length=1000)


class DeclineOffer(CamelModel):
    reason: Optional[str] = Field(None, max_length=500)


class JobBrief(CamelModel):
    id: int
    title: str
    department: Optional[str] = None
    location: Optional[str] = None
    job_type: Optional[str] = None
    status: Optional[str] = None


class CandidateBrief(CamelModel):
    id: int
    first_name: str
    last_name: str
    location: Optional[str] = None
    skills: List[str] = []


class ApplicationOut(CamelModel):
    id: int
    job_id: int
    job_seeker_id: int
    employer_id: int
    status: str
    cover_letter: Optional[str] = None
    resume_ref: Optional[str] = None
    resume_filename: Optional[str] = None
    custom_answers: List[CustomAnswer] = []
    interview_details: Optional[dict] = None
    rating: Optional[int] = None
    employer_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    applied_at: datetime
    last_status_update: datetime

    @field_validator("custom_answers", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []


def application_payload(application, with_job: bool = False, with_candidate: bool = False) -> dict:
    """Serialize an application, optionally denormalizing its job or candidate."""
    data = ApplicationOut.model_validate(application).dump()
    if with_job and application.job is not None:
        data["job"] = JobOut.from_job(application.job).dump()
    if with_candidate and application.job_seeker is not None:
        data["candidate"] = CandidateBrief.model_validate(application.job_seeker).dump()
        if application.job is not None:
            data["job"] = JobBrief.model_validate(application.job).dump()
    return data
