"""
Saved-jobs index: a job seeker's bookmarks.
"""
import logging
from typing import List, Optional

from fastapi import Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.errors import ConflictError, NotFoundError
from app.db.models import Job, JobSeekerProfile, SavedJob
from app.services import analytics_service

logger = logging.getLogger(__name__)

ALREADY_SAVED = "Job already saved"


def save_job(db: Session, seeker: JobSeekerProfile, job_id: int, request: Optional[Request] = None) -> SavedJob:
    """
    Bookmark a job. A repeat save changes nothing and records no event.
    """
    if db.get(Job, job_id) is None:
        raise NotFoundError("Job not found")

    existing = db.query(SavedJob.id).filter(
        SavedJob.job_seeker_id == seeker.id, SavedJob.job_id == job_id
    ).first()
    if existing is not None:
        raise ConflictError(ALREADY_SAVED, extra={"alreadySaved": True})

    saved = SavedJob(job_seeker_id=seeker.id, job_id=job_id)
    db.add(saved)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError(ALREADY_SAVED, extra={"alreadySaved": True})

    analytics_service.record_event(db, "job", job_id, "save", metadata={"jobSeekerId": seeker.id}, request=request)
    db.commit()
    db.refresh(saved)
    logger.info(f"Job saved: job_id={job_id}, seeker_id={seeker.id}")
    return saved


def unsave_job(db: Session, seeker: JobSeekerProfile, job_id: int) -> None:
    deleted = (
        db.query(SavedJob)
        .filter(SavedJob.job_seeker_id == seeker.id, SavedJob.job_id == job_id)
        .delete(synchronize_session=False)
    )
    if not deleted:
        raise NotFoundError("Saved job not found")
    db.commit()


def list_saved_jobs(db: Session, seeker: JobSeekerProfile) -> List[SavedJob]:
    return (
        db.query(SavedJob)
        .options(joinedload(SavedJob.job).joinedload(Job.employer))
        .filter(SavedJob.job_seeker_id == seeker.id)
        .order_by(SavedJob.saved_at.desc(), SavedJob.id.desc())
        .all()
    )
