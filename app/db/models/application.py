"""
Application: one job seeker's candidacy for one job.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.timeutils import utcnow
from app.db.base import Base


class Application(Base):
    """
    Job application with a status lifecycle.

    ``employer_id`` is copied from the job when the application is created
    and is never re-derived afterwards.
    """
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    job_seeker_id = Column(Integer, ForeignKey("jobseeker_profiles.id"), nullable=False, index=True)
    employer_id = Column(Integer, ForeignKey("company_profiles.id"), nullable=False, index=True)

    status = Column(String(30), default="applied", nullable=False, index=True)
    cover_letter = Column(Text, nullable=True)
    resume_ref = Column(String, nullable=True)
    resume_filename = Column(String, nullable=True)
    custom_answers = Column(JSON, nullable=False, default=list)  # [{question, answer}]
    interview_details = Column(JSON, nullable=True)  # scheduledDate, interviewType, location, notes

    rating = Column(Integer, nullable=True)  # 1..5
    employer_notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    applied_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    last_status_update = Column(DateTime, default=utcnow, nullable=False)

    job = relationship("Job")
    job_seeker = relationship("JobSeekerProfile")
    employer = relationship("CompanyProfile")

    __table_args__ = (
        UniqueConstraint("job_id", "job_seeker_id", name="uq_applications_job_seeker"),
        Index("idx_applications_employer_status", "employer_id", "status"),
    )

    def __repr__(self):
        return f"<Application(id={self.id}, job_id={self.job_id}, status='{self.status}')>"
