from sqlalchemy import Column, Integer, String, Float, Index

from app.db.base import Base


class RateLimitHit(Base):
    """One attempt against a rate-limited operation (shared-store backend)."""
    __tablename__ = "rate_limit_hits"

    id = Column(Integer, primary_key=True)
    operation = Column(String(40), nullable=False)
    client_key = Column(String(128), nullable=False)
    hit_at = Column(Float, nullable=False)  # epoch seconds

    __table_args__ = (
        Index("idx_rate_limit_lookup", "operation", "client_key", "hit_at"),
    )
