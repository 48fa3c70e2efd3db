"""
Job seeker profile and the sub-entities it owns.
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, Date, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship

from app.core.timeutils import utcnow
from app.db.base import Base


class JobSeekerProfile(Base):
    __tablename__ = "jobseeker_profiles"

    id = Column(Integer, primary_key=True, index=True)
    identity_id = Column(Integer, ForeignKey("identities.id"), unique=True, nullable=False, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=True)
    location = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    social_links = Column(JSON, nullable=False, default=dict)  # linkedin, github, portfolio, twitter
    preferences = Column(JSON, nullable=False, default=dict)  # jobTypes, salaryRange, preferredLocations, availability

    # Opaque blob store references
    resume_ref = Column(String, nullable=True)
    resume_filename = Column(String, nullable=True)
    resume_uploaded_at = Column(DateTime, nullable=True)
    picture_ref = Column(String, nullable=True)
    picture_filename = Column(String, nullable=True)
    picture_uploaded_at = Column(DateTime, nullable=True)

    profile_views = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    identity = relationship("Identity", back_populates="jobseeker_profile")
    experience = relationship(
        "Experience", order_by="Experience.id", cascade="all, delete-orphan", back_populates="profile"
    )
    education = relationship(
        "Education", order_by="Education.id", cascade="all, delete-orphan", back_populates="profile"
    )
    certifications = relationship(
        "Certification", order_by="Certification.id", cascade="all, delete-orphan", back_populates="profile"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<JobSeekerProfile(id={self.id}, identity_id={self.identity_id})>"


class Experience(Base):
    __tablename__ = "jobseeker_experience"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("jobseeker_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(String(255), nullable=False)
    company = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    is_current_job = Column(Boolean, default=False, nullable=False)
    description = Column(Text, nullable=True)

    profile = relationship("JobSeekerProfile", back_populates="experience")


class Education(Base):
    __tablename__ = "jobseeker_education"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("jobseeker_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    degree = Column(String(255), nullable=False)
    institution = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    is_current_study = Column(Boolean, default=False, nullable=False)
    gpa = Column(String(20), nullable=True)

    profile = relationship("JobSeekerProfile", back_populates="education")


class Certification(Base):
    __tablename__ = "jobseeker_certifications"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("jobseeker_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    issuer = Column(String(255), nullable=True)
    issue_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=True)
    credential_id = Column(String(255), nullable=True)

    profile = relationship("JobSeekerProfile", back_populates="certifications")
