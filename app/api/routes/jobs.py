"""
Job endpoints: public catalog plus employer posting management.
"""
import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_optional_identity, require_employer, require_jobseeker
from app.db.models import Identity, IdentityRole, JobSeekerProfile
from app.schemas.common import envelope, pagination
from app.schemas.job import JobCreate, JobOut, JobStatusUpdate, JobUpdate
from app.services import job_service, ownership

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])

SortBy = Literal["newest", "salary-desc", "salary-asc", "views", "applications"]


def _optional_seeker(db: Session, identity: Optional[Identity]) -> Optional[JobSeekerProfile]:
    if identity is None or identity.role != IdentityRole.JOBSEEKER.value:
        return None
    return db.query(JobSeekerProfile).filter(JobSeekerProfile.identity_id == identity.id).first()


def _job_list(db: Session, jobs, seeker: Optional[JobSeekerProfile]) -> list:
    saved = job_service.saved_job_ids(db, seeker, [job.id for job in jobs])
    items = []
    for job in jobs:
        item = JobOut.from_job(job).dump()
        if seeker is not None:
            item["isSaved"] = job.id in saved
        items.append(item)
    return items


@router.get("")
def browse_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=200),
    location: Optional[str] = None,
    job_type: Optional[str] = Query(None, alias="jobType"),
    experience_level: Optional[str] = Query(None, alias="experienceLevel"),
    department: Optional[str] = None,
    salary_min: Optional[int] = Query(None, alias="salaryMin", ge=0),
    salary_max: Optional[int] = Query(None, alias="salaryMax", ge=0),
    sort_by: SortBy = Query("newest", alias="sortBy"),
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
):
    """Browse active jobs. Job seekers also get ``isSaved`` per item."""
    jobs, total = job_service.browse_jobs(
        db,
        page=page,
        limit=limit,
        search=search,
        location=location,
        job_type=job_type,
        experience_level=experience_level,
        department=department,
        salary_min=salary_min,
        salary_max=salary_max,
        sort_by=sort_by,
    )
    seeker = _optional_seeker(db, identity)
    return envelope(_job_list(db, jobs, seeker), pagination=pagination(page, limit, total))


@router.get("/featured")
def featured_jobs(
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
):
    jobs = job_service.featured_jobs(db)
    return envelope(_job_list(db, jobs, _optional_seeker(db, identity)))


@router.get("/recommendations")
def recommendations(
    identity: Identity = Depends(require_jobseeker),
    db: Session = Depends(get_db),
):
    seeker = ownership.get_jobseeker_profile(db, identity)
    jobs = job_service.recommended_jobs(db)
    return envelope(_job_list(db, jobs, seeker))


@router.get("/stats/overview")
def market_stats(db: Session = Depends(get_db)):
    return envelope(job_service.market_stats(db))


@router.get("/{job_id}")
def job_detail(
    job_id: int,
    request: Request,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
):
    job = job_service.get_job_detail(db, job_id, request=request)
    seeker = _optional_seeker(db, identity)
    data = JobOut.from_job(job).dump()
    if seeker is not None:
        data["isSaved"] = bool(job_service.saved_job_ids(db, seeker, [job.id]))
        data["hasApplied"] = job_service.has_applied(db, seeker, job.id)
    data["relatedJobs"] = [JobOut.from_job(j).dump() for j in job_service.related_jobs(db, job)]
    return envelope(data)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_job(
    data: JobCreate,
    identity: Identity = Depends(require_employer),
    db: Session = Depends(get_db),
):
    company = ownership.get_company_profile(db, identity)
    job = job_service.create_job(db, company, data)
    return envelope(JobOut.from_job(job).dump(), message="Job created successfully")


@router.put("/{job_id}")
def update_job(
    job_id: int,
    data: JobUpdate,
    identity: Identity = Depends(require_employer),
    db: Session = Depends(get_db),
):
    company = ownership.get_company_profile(db, identity)
    job = job_service.update_job(db, company, job_id, data)
    return envelope(JobOut.from_job(job).dump(), message="Job updated successfully")


@router.delete("/{job_id}")
def delete_job(
    job_id: int,
    identity: Identity = Depends(require_employer),
    db: Session = Depends(get_db),
):
    company = ownership.get_company_profile(db, identity)
    job_service.delete_job(db, company, job_id)
    return envelope(message="Job deleted successfully")


@router.put("/{job_id}/status")
def set_job_status(
    job_id: int,
    data: JobStatusUpdate,
    identity: Identity = Depends(require_employer),
    db: Session = Depends(get_db),
):
    company = ownership.get_company_profile(db, identity)
    job = job_service.set_job_status(db, company, job_id, data.status)
    return envelope(JobOut.from_job(job).dump(), message=f"Job status updated to {data.status}")
