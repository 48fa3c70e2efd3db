"""
Pydantic schemas for job seeker and company profiles.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator

from app.schemas.common import CamelModel


# --- Job seeker sub-entities ---

class ExperienceIn(CamelModel):
    position: str = Field(..., min_length=1, max_length=255)
    company: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: Optional[date] = None
    is_current_job: bool = False
    description: Optional[str] = Field(None, max_length=2000)


class ExperienceOut(ExperienceIn):
    id: int


class EducationIn(CamelModel):
    degree: str = Field(..., min_length=1, max_length=255)
    institution: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: Optional[date] = None
    is_current_study: bool = False
    gpa: Optional[str] = Field(None, max_length=20)


class EducationOut(EducationIn):
    id: int


class CertificationIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    issuer: Optional[str] = Field(None, max_length=255)
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    credential_id: Optional[str] = Field(None, max_length=255)


class CertificationOut(CertificationIn):
    id: int


# --- Job seeker profile ---

class JobSeekerProfileUpdate(CamelModel):
    """Partial update; omitted fields are left untouched."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = Field(None, max_length=1000)
    skills: Optional[List[str]] = None
    social_links: Optional[Dict[str, str]] = None
    preferences: Optional[Dict[str, Any]] = None

    @field_validator("skills")
    @classmethod
    def dedupe_skills(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        seen = []
        for skill in (s.strip() for s in v):
            if skill and skill not in seen:
                seen.append(skill)
        return seen


class JobSeekerProfileOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    skills: List[str] = []
    social_links: Dict[str, Any] = {}
    preferences: Dict[str, Any] = {}
    resume_ref: Optional[str] = None
    resume_filename: Optional[str] = None
    picture_ref: Optional[str] = None
    profile_views: int = 0
    experience: List[ExperienceOut] = []
    education: List[EducationOut] = []
    certifications: List[CertificationOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- Company profile ---

class CompanyLocation(CamelModel):
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


class OfficeIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=500)
    type: Literal["headquarters", "branch", "remote"] = "branch"


class OfficeOut(OfficeIn):
    id: int


class CompanyProfileUpdate(CamelModel):
    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    industry: Optional[str] = Field(None, min_length=1, max_length=255)
    company_size: Optional[Literal["1-10", "11-50", "51-100", "101-500", "501-1000", "1000+"]] = None
    founded_year: Optional[int] = Field(None, ge=1800, le=2100)
    website: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=50)
    location: Optional[CompanyLocation] = None
    description: Optional[str] = Field(None, max_length=2000)
    culture: Optional[List[str]] = None
    benefits: Optional[List[str]] = None
    social_links: Optional[Dict[str, str]] = None


class CompanyProfileOut(CamelModel):
    id: int
    company_name: str
    industry: str
    company_size: str
    founded_year: Optional[int] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    location: Dict[str, Any] = {}
    description: Optional[str] = None
    logo_ref: Optional[str] = None
    culture: List[str] = []
    benefits: List[str] = []
    social_links: Dict[str, Any] = {}
    verification_status: str
    offices: List[OfficeOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CompanySummary(CamelModel):
    id: int
    company_name: str
    industry: Optional[str] = None
    logo_ref: Optional[str] = None
    verification_status: Optional[str] = None


class VerificationUpdate(CamelModel):
    verification_status: Literal["pending", "verified", "rejected"]
