from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.timeutils import utcnow
from app.db.base import Base


class SavedJob(Base):
    """Job seeker bookmark. No lifecycle."""
    __tablename__ = "saved_jobs"

    id = Column(Integer, primary_key=True, index=True)
    job_seeker_id = Column(Integer, ForeignKey("jobseeker_profiles.id"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    saved_at = Column(DateTime, default=utcnow, nullable=False)

    job = relationship("Job")

    __table_args__ = (
        UniqueConstraint("job_seeker_id", "job_id", name="uq_saved_jobs_seeker_job"),
    )
