"""
Notification model: append-only user-facing events.
"""
import enum
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON, Index

from app.core.timeutils import utcnow
from app.db.base import Base


class NotificationType(str, enum.Enum):
    APPLICATION_RECEIVED = "application_received"
    APPLICATION_STATUS_CHANGED = "application_status_changed"
    JOB_RECOMMENDATION = "job_recommendation"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    PROFILE_VIEWED = "profile_viewed"
    NEW_JOB_POSTED = "new_job_posted"


class Notification(Base):
    """Only ``is_read`` changes after creation, and only by the target identity."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    identity_id = Column(Integer, ForeignKey("identities.id"), nullable=False, index=True)
    type = Column(String(40), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    __table_args__ = (
        Index("idx_notifications_identity_read", "identity_id", "is_read"),
    )

    def __repr__(self):
        return f"<Notification(id={self.id}, identity_id={self.identity_id}, type='{self.type}')>"
