"""
Job catalog: public browsing plus employer-owned posting management.
"""
import logging
from collections import Counter
from typing import List, Optional, Set, Tuple

from fastapi import Request
from sqlalchemy import func, or_, update
from sqlalchemy.orm import Session, joinedload

from app.core.application_states import ApplicationStatus
from app.core.errors import NotFoundError, ValidationError
from app.core.timeutils import to_naive_utc, utcnow
from app.db.models import Application, CompanyProfile, Job, JobSeekerProfile, SavedJob
from app.schemas.job import JobCreate, JobUpdate
from app.services import analytics_service, ownership

logger = logging.getLogger(__name__)

SORT_OPTIONS = {
    "newest": (Job.created_at.desc(), Job.id.desc()),
    "salary-desc": (Job.salary_max.desc(), Job.id.desc()),
    "salary-asc": (Job.salary_min.asc(), Job.id.desc()),
    "views": (Job.views.desc(), Job.id.desc()),
    "applications": (Job.applications_count.desc(), Job.id.desc()),
}


def _salary_columns(salary) -> dict:
    if salary is None:
        return {}
    return {
        "salary_min": salary.min,
        "salary_max": salary.max,
        "salary_currency": salary.currency,
        "salary_negotiable": salary.negotiable,
    }


def _check_deadline(deadline) -> None:
    if deadline is not None and to_naive_utc(deadline) <= utcnow():
        raise ValidationError("Application deadline must be in the future")


def saved_job_ids(db: Session, seeker: Optional[JobSeekerProfile], job_ids: List[int]) -> Set[int]:
    if seeker is None or not job_ids:
        return set()
    rows = db.query(SavedJob.job_id).filter(
        SavedJob.job_seeker_id == seeker.id, SavedJob.job_id.in_(job_ids)
    ).all()
    return {row[0] for row in rows}


def browse_jobs(
    db: Session,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    location: Optional[str] = None,
    job_type: Optional[str] = None,
    experience_level: Optional[str] = None,
    department: Optional[str] = None,
    salary_min: Optional[int] = None,
    salary_max: Optional[int] = None,
    sort_by: str = "newest",
) -> Tuple[List[Job], int]:
    """Active jobs only, filtered and paginated."""
    query = db.query(Job).options(joinedload(Job.employer)).filter(Job.status == "active")

    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            Job.title.ilike(pattern),
            Job.description.ilike(pattern),
            Job.department.ilike(pattern),
        ))
    if location:
        query = query.filter(Job.location.ilike(f"%{location.strip()}%"))
    if job_type:
        query = query.filter(Job.job_type == job_type)
    if experience_level:
        query = query.filter(Job.experience_level == experience_level)
    if department:
        query = query.filter(Job.department.ilike(f"%{department.strip()}%"))
    if salary_min is not None:
        query = query.filter(Job.salary_max >= salary_min)
    if salary_max is not None:
        query = query.filter(Job.salary_min <= salary_max)

    total = query.count()
    order = SORT_OPTIONS.get(sort_by, SORT_OPTIONS["newest"])
    jobs = query.order_by(*order).offset((page - 1) * limit).limit(limit).all()
    return jobs, total


def featured_jobs(db: Session, limit: int = 10) -> List[Job]:
    return (
        db.query(Job)
        .options(joinedload(Job.employer))
        .filter(Job.status == "active", Job.featured.is_(True))
        .order_by(Job.created_at.desc(), Job.id.desc())
        .limit(limit)
        .all()
    )


def recommended_jobs(db: Session, limit: int = 20) -> List[Job]:
    # Popularity order; no per-seeker ranking
    return (
        db.query(Job)
        .options(joinedload(Job.employer))
        .filter(Job.status == "active")
        .order_by(Job.views.desc(), Job.created_at.desc(), Job.id.desc())
        .limit(limit)
        .all()
    )


def get_job_detail(db: Session, job_id: int, request: Optional[Request] = None) -> Job:
    """Load a job and count the view."""
    job = db.get(Job, job_id)
    if job is None:
        raise NotFoundError("Job not found")
    db.execute(update(Job).where(Job.id == job_id).values(views=Job.views + 1))
    analytics_service.record_event(db, "job", job_id, "view", request=request)
    db.commit()
    db.refresh(job)
    return job


def related_jobs(db: Session, job: Job, limit: int = 6) -> List[Job]:
    """Active jobs sharing the department, a skill, or the employer."""
    candidates = (
        db.query(Job)
        .options(joinedload(Job.employer))
        .filter(Job.status == "active", Job.id != job.id)
        .order_by(Job.created_at.desc(), Job.id.desc())
        .limit(200)
        .all()
    )
    skills = {s.lower() for s in (job.skills or [])}
    related = []
    for other in candidates:
        if (
            other.department == job.department
            or other.employer_id == job.employer_id
            or skills.intersection(s.lower() for s in (other.skills or []))
        ):
            related.append(other)
            if len(related) >= limit:
                break
    return related


def has_applied(db: Session, seeker: Optional[JobSeekerProfile], job_id: int) -> bool:
    if seeker is None:
        return False
    return db.query(Application.id).filter(
        Application.job_id == job_id, Application.job_seeker_id == seeker.id
    ).first() is not None


def create_job(db: Session, company: CompanyProfile, data: JobCreate) -> Job:
    _check_deadline(data.application_deadline)
    values = data.model_dump(exclude={"salary", "application_deadline"})
    job = Job(
        employer_id=company.id,
        application_deadline=to_naive_utc(data.application_deadline),
        **values,
        **_salary_columns(data.salary),
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    logger.info(f"Job created: job_id={job.id}, employer_id={company.id}")
    return job


def update_job(db: Session, company: CompanyProfile, job_id: int, data: JobUpdate) -> Job:
    job = ownership.get_owned_job(db, company, job_id)
    changes = data.model_dump(exclude_unset=True, exclude={"salary", "application_deadline"})
    for field, value in changes.items():
        if value is None:
            continue
        setattr(job, field, value)
    if "salary" in data.model_fields_set and data.salary is not None:
        for field, value in _salary_columns(data.salary).items():
            setattr(job, field, value)
    if "application_deadline" in data.model_fields_set:
        _check_deadline(data.application_deadline)
        job.application_deadline = to_naive_utc(data.application_deadline)
    db.commit()
    db.refresh(job)
    logger.info(f"Job updated: job_id={job.id}")
    return job


def delete_job(db: Session, company: CompanyProfile, job_id: int) -> None:
    job = ownership.get_owned_job(db, company, job_id)
    db.query(Application).filter(Application.job_id == job.id).delete(synchronize_session=False)
    db.query(SavedJob).filter(SavedJob.job_id == job.id).delete(synchronize_session=False)
    db.delete(job)
    db.commit()
    logger.info(f"Job deleted: job_id={job_id}, employer_id={company.id}")


def set_job_status(db: Session, company: CompanyProfile, job_id: int, status: str) -> Job:
    job = ownership.get_owned_job(db, company, job_id)
    job.status = status
    db.commit()
    db.refresh(job)
    logger.info(f"Job status changed: job_id={job.id}, status={status}")
    return job


def list_own_jobs(
    db: Session, company: CompanyProfile, status: Optional[str], page: int, limit: int
) -> Tuple[List[Job], int]:
    query = db.query(Job).filter(Job.employer_id == company.id)
    if status:
        query = query.filter(Job.status == status)
    total = query.count()
    jobs = query.order_by(Job.created_at.desc(), Job.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return jobs, total


def market_stats(db: Session) -> dict:
    active = db.query(Job).filter(Job.status == "active")
    departments = Counter(j.department for j in active.with_entities(Job.department))
    locations = Counter(j.location for j in active.with_entities(Job.location))
    return {
        "totalJobs": db.query(func.count(Job.id)).scalar() or 0,
        "activeJobs": active.count(),
        "totalApplications": db.query(func.count(Application.id)).scalar() or 0,
        "companiesHiring": (
            db.query(func.count(func.distinct(Job.employer_id))).filter(Job.status == "active").scalar() or 0
        ),
        "topDepartments": [{"name": name, "count": count} for name, count in departments.most_common(10)],
        "topLocations": [{"name": name, "count": count} for name, count in locations.most_common(10)],
    }


def reconcile_applications_count(db: Session, job_id: int) -> Tuple[int, int]:
    """
    Recompute ``applications_count`` from the non-withdrawn applications.

    Returns:
        (previous, reconciled) counter values
    """
    job = db.get(Job, job_id)
    if job is None:
        raise NotFoundError("Job not found")
    actual = (
        db.query(func.count(Application.id))
        .filter(
            Application.job_id == job_id,
            Application.status != ApplicationStatus.WITHDRAWN.value,
        )
        .scalar()
    ) or 0
    previous = job.applications_count
    if previous != actual:
        job.applications_count = actual
        db.commit()
        logger.warning(f"Counter drift fixed: job_id={job_id}, was={previous}, now={actual}")
    return previous, actual
