"""
Pydantic schemas for job endpoints.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, model_validator

from app.schemas.common import CamelModel
from app.schemas.profile import CompanySummary

JobType = Literal["full-time", "part-time", "contract", "internship", "remote"]
ExperienceLevel = Literal["entry", "junior", "mid", "senior", "executive"]


class Salary(CamelModel):
    min: Optional[int] = Field(None, ge=0)
    max: Optional[int] = Field(None, ge=0)
    currency: str = "GHS"
    negotiable: bool = False

    @model_validator(mode="after")
    def check_range(self):
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("Salary minimum cannot exceed maximum")
        return self


class JobCreate(CamelModel):
    """Schema for creating a new job posting."""
    title: str = Field(..., min_length=1, max_length=255)
    department: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=5000)
    requirements: List[str] = []
    responsibilities: List[str] = []
    location: str = Field(..., min_length=1, max_length=255)
    job_type: JobType
    experience_level: ExperienceLevel
    salary: Optional[Salary] = None
    skills: List[str] = []
    benefits: List[str] = []
    application_deadline: Optional[datetime] = None
    status: Literal["draft", "active"] = "active"
    featured: bool = False
    urgent_hiring: bool = False


class JobUpdate(CamelModel):
    """Partial update of a job posting."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    department: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    requirements: Optional[List[str]] = None
    responsibilities: Optional[List[str]] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    job_type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    salary: Optional[Salary] = None
    skills: Optional[List[str]] = None
    benefits: Optional[List[str]] = None
    application_deadline: Optional[datetime] = None
    featured: Optional[bool] = None
    urgent_hiring: Optional[bool] = None


class JobStatusUpdate(CamelModel):
    status: Literal["active", "paused", "closed"]


class JobOut(CamelModel):
    id: int
    employer_id: int
    title: str
    department: str
    description: str
    requirements: List[str] = []
    responsibilities: List[str] = []
    location: str
    job_type: str
    experience_level: str
    salary: Salary
    skills: List[str] = []
    benefits: List[str] = []
    application_deadline: Optional[datetime] = None
    status: str
    views: int
    applications_count: int
    featured: bool
    urgent_hiring: bool
    created_at: datetime
    updated_at: datetime
    company: Optional[CompanySummary] = None

    @classmethod
    def from_job(cls, job) -> "JobOut":
        return cls(
            id=job.id,
            employer_id=job.employer_id,
            title=job.title,
            department=job.department,
            description=job.description,
            requirements=job.requirements or [],
            responsibilities=job.responsibilities or [],
            location=job.location,
            job_type=job.job_type,
            experience_level=job.experience_level,
            salary=Salary(
                min=job.salary_min,
                max=job.salary_max,
                currency=job.salary_currency,
                negotiable=job.salary_negotiable,
            ),
            skills=job.skills or [],
            benefits=job.benefits or [],
            application_deadline=job.application_deadline,
            status=job.status,
            views=job.views,
            applications_count=job.applications_count,
            featured=job.featured,
            urgent_hiring=job.urgent_hiring,
            created_at=job.created_at,
            updated_at=job.updated_at,
            company=CompanySummary.model_validate(job.employer) if job.employer else None,
        )
