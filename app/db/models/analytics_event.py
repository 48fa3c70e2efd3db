from sqlalchemy import Column, Integer, String, DateTime, JSON, Index

from app.core.timeutils import utcnow
from app.db.base import Base

ENTITY_TYPES = ["job", "company", "jobseeker"]
EVENT_TYPES = ["view", "application", "save", "click", "search"]


class AnalyticsEvent(Base):
    """
    Append-only analytics log keyed by entity type + id.

    Read only through aggregate queries.
    """
    __tablename__ = "analytics_events"

    id = Column(Integer, primary_key=True, index=True)
    entity_type = Column(String(20), nullable=False)  # job | company | jobseeker
    entity_id = Column(Integer, nullable=False)
    event_type = Column(String(20), nullable=False)  # view | application | save | click | search
    event_metadata = Column("metadata", JSON, nullable=True)
    user_agent = Column(String, nullable=True)
    ip_address = Column(String(64), nullable=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)

    __table_args__ = (
        Index("idx_analytics_entity_event", "entity_type", "entity_id", "event_type"),
    )
