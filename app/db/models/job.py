"""
Job posting owned by a company profile.
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship

from app.core.timeutils import utcnow
from app.db.base import Base

JOB_STATUSES = ["draft", "active", "paused", "closed"]
JOB_TYPES = ["full-time", "part-time", "contract", "internship", "remote"]
EXPERIENCE_LEVELS = ["entry", "junior", "mid", "senior", "executive"]


class Job(Base):
    """
    Job posting.

    ``applications_count`` is a denormalized counter, changed only through
    atomic SQL deltas on apply/withdraw (see application_service).
    """
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    employer_id = Column(Integer, ForeignKey("company_profiles.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False, index=True)
    department = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)
    requirements = Column(JSON, nullable=False, default=list)
    responsibilities = Column(JSON, nullable=False, default=list)
    location = Column(String(255), nullable=False, index=True)
    job_type = Column(String(20), nullable=False)
    experience_level = Column(String(20), nullable=False)

    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)
    salary_currency = Column(String(10), default="GHS", nullable=False)
    salary_negotiable = Column(Boolean, default=False, nullable=False)

    skills = Column(JSON, nullable=False, default=list)
    benefits = Column(JSON, nullable=False, default=list)
    application_deadline = Column(DateTime, nullable=True)

    status = Column(String(20), default="active", nullable=False, index=True)
    views = Column(Integer, default=0, nullable=False)
    applications_count = Column(Integer, default=0, nullable=False)
    featured = Column(Boolean, default=False, nullable=False)
    urgent_hiring = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    employer = relationship("CompanyProfile", back_populates="jobs")

    __table_args__ = (
        Index("idx_jobs_employer_status", "employer_id", "status"),
    )

    def __repr__(self):
        return f"<Job(id={self.id}, title='{self.title}', status='{self.status}')>"
