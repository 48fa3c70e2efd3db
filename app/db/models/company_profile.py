"""
Company (employer) profile and its offices.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship

from app.core.timeutils import utcnow
from app.db.base import Base

COMPANY_SIZES = ["1-10", "11-50", "51-100", "101-500", "501-1000", "1000+"]
VERIFICATION_STATUSES = ["pending", "verified", "rejected"]
OFFICE_TYPES = ["headquarters", "branch", "remote"]


class CompanyProfile(Base):
    __tablename__ = "company_profiles"

    id = Column(Integer, primary_key=True, index=True)
    identity_id = Column(Integer, ForeignKey("identities.id"), unique=True, nullable=False, index=True)

    company_name = Column(String(255), nullable=False, index=True)
    industry = Column(String(255), nullable=False)
    company_size = Column(String(20), nullable=False)
    founded_year = Column(Integer, nullable=True)
    website = Column(String, nullable=True)
    phone = Column(String(50), nullable=True)
    location = Column(JSON, nullable=False, default=dict)  # address, city, state, country
    description = Column(Text, nullable=True)
    culture = Column(JSON, nullable=False, default=list)
    benefits = Column(JSON, nullable=False, default=list)
    social_links = Column(JSON, nullable=False, default=dict)

    logo_ref = Column(String, nullable=True)
    logo_filename = Column(String, nullable=True)
    logo_uploaded_at = Column(DateTime, nullable=True)

    verification_status = Column(String(20), default="pending", nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    identity = relationship("Identity", back_populates="company_profile")
    offices = relationship("Office", order_by="Office.id", cascade="all, delete-orphan", back_populates="company")
    jobs = relationship("Job", back_populates="employer")

    def __repr__(self):
        return f"<CompanyProfile(id={self.id}, company_name='{self.company_name}')>"


class Office(Base):
    __tablename__ = "company_offices"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("company_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=False)
    type = Column(String(20), nullable=False)  # headquarters | branch | remote

    company = relationship("CompanyProfile", back_populates="offices")
