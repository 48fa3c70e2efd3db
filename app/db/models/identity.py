"""
Identity model: credentials and role, separate from profile data.
"""
import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from app.core.timeutils import utcnow
from app.db.base import Base


class IdentityRole(str, enum.Enum):
    JOBSEEKER = "jobseeker"
    EMPLOYER = "employer"
    ADMIN = "admin"


class Identity(Base):
    """
    Authenticatable account.

    Never deleted; ``is_active=False`` soft-disables the account.
    """
    __tablename__ = "identities"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String(20), nullable=False, index=True)  # jobseeker | employer | admin
    is_active = Column(Boolean, default=True, nullable=False)
    email_verified = Column(Boolean, default=False, nullable=False)
    last_login_at = Column(DateTime, nullable=True)

    # Password reset: only the keyed hash of the emailed token is stored
    reset_token_hash = Column(String(64), nullable=True, index=True)
    reset_token_expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    jobseeker_profile = relationship("JobSeekerProfile", back_populates="identity", uselist=False)
    company_profile = relationship("CompanyProfile", back_populates="identity", uselist=False)

    def __repr__(self):
        return f"<Identity(id={self.id}, email='{self.email}', role='{self.role}')>"
