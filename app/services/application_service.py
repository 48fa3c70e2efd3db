"""
Application engine: apply, status lifecycle, withdraw and offer handling.

Counter changes on ``Job.applications_count`` are SQL-side deltas, and
status changes are compare-and-set updates on the status that was read,
so two concurrent requests can never both win the same transition.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import BackgroundTasks, Request
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.application_states import (
    TERMINAL_STATUSES,
    ApplicationStatus,
    ensure_employer_transition,
    ensure_withdrawable,
)
from app.core.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from app.core.timeutils import utcnow
from app.db.models import Application, CompanyProfile, Job, JobSeekerProfile, NotificationType
from app.schemas.application import StatusUpdate
from app.services import analytics_service, notification_service, ownership
from app.services.blob_store import StoredBlob
from app.services.dashboard_service import percent

logger = logging.getLogger(__name__)

PENDING_STATUSES = (ApplicationStatus.APPLIED.value, ApplicationStatus.UNDER_REVIEW.value)


def _employer_identity_id(db: Session, company_id: int) -> Optional[int]:
    return db.query(CompanyProfile.identity_id).filter(CompanyProfile.id == company_id).scalar()


def _status_label(status: str) -> str:
    return status.replace("-", " ")


def _existing_application_id(db: Session, job_id: int, seeker_id: int) -> Optional[int]:
    row = db.query(Application.id).filter(
        Application.job_id == job_id, Application.job_seeker_id == seeker_id
    ).first()
    return row[0] if row is not None else None


def apply_to_job(
    db: Session,
    seeker: JobSeekerProfile,
    job_id: int,
    cover_letter: Optional[str] = None,
    custom_answers: Optional[List[Dict[str, str]]] = None,
    resume: Optional[StoredBlob] = None,
    request: Optional[Request] = None,
    background_tasks: Optional[BackgroundTasks] = None,
) -> Application:
    """
    Submit an application.

    The insert, the counter increment, the employer notification and the
    analytics event commit together or not at all.

    Raises:
        NotFoundError: job does not exist
        ValidationError: job not active or deadline passed
        ConflictError: the seeker already applied to this job
    """
    job = db.get(Job, job_id)
    if job is None:
        raise NotFoundError("Job not found")
    if job.status != "active":
        raise ValidationError("This job is no longer accepting applications")
    if job.application_deadline is not None and job.application_deadline < utcnow():
        raise ValidationError("Application deadline has passed")

    if _existing_application_id(db, job.id, seeker.id) is not None:
        raise ConflictError("You have already applied for this job")

    now = utcnow()
    application = Application(
        job_id=job.id,
        job_seeker_id=seeker.id,
        employer_id=job.employer_id,
        status=ApplicationStatus.APPLIED.value,
        cover_letter=cover_letter,
        custom_answers=custom_answers or [],
        resume_ref=resume.ref if resume else seeker.resume_ref,
        resume_filename=resume.filename if resume else seeker.resume_filename,
        applied_at=now,
        last_status_update=now,
    )
    db.add(application)
    try:
        # The unique (job_id, job_seeker_id) constraint decides concurrent duplicates
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError("You have already applied for this job")

    db.execute(
        update(Job)
        .where(Job.id == job.id)
        .values(applications_count=Job.applications_count + 1)
    )

    employer_identity_id = _employer_identity_id(db, job.employer_id)
    if employer_identity_id is not None:
        notification_service.create_notification(
            db,
            identity_id=employer_identity_id,
            type=NotificationType.APPLICATION_RECEIVED.value,
            title="New Application Received",
            message=f"{seeker.full_name} applied for {job.title}",
            data={"applicationId": application.id, "jobId": job.id, "jobSeekerId": seeker.id},
            background_tasks=background_tasks,
        )
    analytics_service.record_event(
        db, "job", job.id, "application",
        metadata={"applicationId": application.id}, request=request,
    )
    db.commit()
    db.refresh(application)
    logger.info(
        f"Application submitted: application_id={application.id}, job_id={job.id}, seeker_id={seeker.id}"
    )
    return application


def _compare_and_set(db: Session, application: Application, expected: str, values: Dict[str, Any]) -> bool:
    result = db.execute(
        update(Application)
        .where(Application.id == application.id, Application.status == expected)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def set_status_by_employer(
    db: Session,
    company: CompanyProfile,
    application_id: int,
    data: StatusUpdate,
    background_tasks: Optional[BackgroundTasks] = None,
) -> Application:
    """
    Move an application through the pipeline on the employer's behalf.

    Raises:
        NotFoundError: not one of the caller's applications
        ValidationError: status not settable by employers
        InvalidStateError: application already terminal, or changed concurrently
    """
    application = ownership.get_employer_application(db, company, application_id)
    requested = data.status.value
    current = application.status
    ensure_employer_transition(current, requested)

    values: Dict[str, Any] = {"status": requested, "last_status_update": utcnow()}
    if data.notes is not None:
        values["employer_notes"] = data.notes
    if requested == ApplicationStatus.REJECTED.value:
        values["rejection_reason"] = data.rejection_reason.strip()
    if data.interview_details is not None:
        values["interview_details"] = data.interview_details.dump()

    if not _compare_and_set(db, application, current, values):
        db.rollback()
        raise InvalidStateError("Application status changed concurrently, please retry")

    job = db.get(Job, application.job_id)
    seeker = db.get(JobSeekerProfile, application.job_seeker_id)
    job_title = job.title if job else "a job"
    if requested == ApplicationStatus.INTERVIEW_SCHEDULED.value:
        title = "Interview Scheduled"
        notification_type = NotificationType.INTERVIEW_SCHEDULED.value
        message = f"An interview has been scheduled for your application to {job_title}"
    else:
        title = "Application Status Updated"
        notification_type = NotificationType.APPLICATION_STATUS_CHANGED.value
        message = f"Your application for {job_title} is now {_status_label(requested)}"
    if seeker is not None:
        notification_service.create_notification(
            db,
            identity_id=seeker.identity_id,
            type=notification_type,
            title=title,
            message=message,
            data={"applicationId": application.id, "jobId": application.job_id, "status": requested},
            background_tasks=background_tasks,
        )
    db.commit()
    db.refresh(application)
    logger.info(f"Application status: application_id={application.id}, {current} -> {requested}")
    return application


def rate_candidate(
    db: Session, company: CompanyProfile, application_id: int, rating: int, notes: Optional[str] = None
) -> Application:
    application = ownership.get_employer_application(db, company, application_id)
    application.rating = rating
    if notes is not None:
        application.employer_notes = notes
    db.commit()
    db.refresh(application)
    return application


def withdraw(
    db: Session,
    seeker: JobSeekerProfile,
    application_id: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> Application:
    """
    Withdraw a non-terminal application.

    Only the request whose compare-and-set wins decrements the job counter.
    """
    application = ownership.get_seeker_application(db, seeker, application_id)
    ensure_withdrawable(application.status)

    result = db.execute(
        update(Application)
        .where(
            Application.id == application.id,
            Application.status.notin_(sorted(TERMINAL_STATUSES)),
        )
        .values(status=ApplicationStatus.WITHDRAWN.value, last_status_update=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise InvalidStateError("Cannot withdraw this application")

    db.execute(
        update(Job)
        .where(Job.id == application.job_id)
        .values(applications_count=Job.applications_count - 1)
    )
    job = db.get(Job, application.job_id)
    employer_identity_id = _employer_identity_id(db, application.employer_id)
    if employer_identity_id is not None:
        notification_service.create_notification(
            db,
            identity_id=employer_identity_id,
            type=NotificationType.APPLICATION_STATUS_CHANGED.value,
            title="Application Withdrawn",
            message=f"{seeker.full_name} withdrew their application for {job.title if job else 'a job'}",
            data={"applicationId": application.id, "jobId": application.job_id, "status": "withdrawn"},
            background_tasks=background_tasks,
        )
    db.commit()
    db.refresh(application)
    logger.info(f"Application withdrawn: application_id={application.id}, job_id={application.job_id}")
    return application


def _respond_to_offer(
    db: Session,
    seeker: JobSeekerProfile,
    application_id: int,
    accept: bool,
    reason: Optional[str],
    background_tasks: Optional[BackgroundTasks],
) -> Application:
    application = (
        db.query(Application)
        .filter(
            Application.id == application_id,
            Application.job_seeker_id == seeker.id,
            Application.status == ApplicationStatus.OFFERED.value,
        )
        .first()
    )
    if application is None:
        raise NotFoundError("Job offer not found")

    target = ApplicationStatus.HIRED.value if accept else ApplicationStatus.REJECTED.value
    values: Dict[str, Any] = {"status": target, "last_status_update": utcnow()}
    if not accept:
        values["rejection_reason"] = reason or "Offer declined by candidate"
    if not _compare_and_set(db, application, ApplicationStatus.OFFERED.value, values):
        db.rollback()
        raise NotFoundError("Job offer not found")

    job = db.get(Job, application.job_id)
    job_title = job.title if job else "a job"
    employer_identity_id = _employer_identity_id(db, application.employer_id)
    if employer_identity_id is not None:
        verb = "accepted" if accept else "declined"
        notification_service.create_notification(
            db,
            identity_id=employer_identity_id,
            type=NotificationType.APPLICATION_STATUS_CHANGED.value,
            title=f"Offer {verb.capitalize()}",
            message=f"{seeker.full_name} {verb} your offer for {job_title}",
            data={"applicationId": application.id, "jobId": application.job_id, "status": target},
            background_tasks=background_tasks,
        )
    db.commit()
    db.refresh(application)
    logger.info(f"Offer {'accepted' if accept else 'declined'}: application_id={application.id}")
    return application


def accept_offer(db: Session, seeker: JobSeekerProfile, application_id: int,
                 background_tasks: Optional[BackgroundTasks] = None) -> Application:
    return _respond_to_offer(db, seeker, application_id, True, None, background_tasks)


def decline_offer(db: Session, seeker: JobSeekerProfile, application_id: int, reason: Optional[str] = None,
                  background_tasks: Optional[BackgroundTasks] = None) -> Application:
    return _respond_to_offer(db, seeker, application_id, False, reason, background_tasks)


# --- Reads ---

def list_for_seeker(
    db: Session, seeker: JobSeekerProfile, status: Optional[str], page: int, limit: int
) -> Tuple[List[Application], int]:
    query = (
        db.query(Application)
        .options(joinedload(Application.job).joinedload(Job.employer))
        .filter(Application.job_seeker_id == seeker.id)
    )
    if status:
        query = query.filter(Application.status == status)
    total = query.count()
    items = (
        query.order_by(Application.applied_at.desc(), Application.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def list_for_employer(
    db: Session,
    company: CompanyProfile,
    status: Optional[str],
    job_id: Optional[int],
    page: int,
    limit: int,
) -> Tuple[List[Application], int]:
    query = (
        db.query(Application)
        .options(joinedload(Application.job), joinedload(Application.job_seeker))
        .filter(Application.employer_id == company.id)
    )
    if status:
        query = query.filter(Application.status == status)
    if job_id is not None:
        query = query.filter(Application.job_id == job_id)
    total = query.count()
    items = (
        query.order_by(Application.applied_at.desc(), Application.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def seeker_stats(db: Session, seeker: JobSeekerProfile) -> Dict[str, Any]:
    rows = (
        db.query(Application.status, func.count(Application.id))
        .filter(Application.job_seeker_id == seeker.id)
        .group_by(Application.status)
        .all()
    )
    breakdown = {status: count for status, count in rows}
    total = sum(breakdown.values())
    responded = total - breakdown.get(ApplicationStatus.APPLIED.value, 0)

    recent = (
        db.query(Application)
        .options(joinedload(Application.job).joinedload(Job.employer))
        .filter(Application.job_seeker_id == seeker.id)
        .order_by(Application.applied_at.desc(), Application.id.desc())
        .limit(5)
        .all()
    )
    return {
        "overview": {
            "total": total,
            "pending": sum(breakdown.get(s, 0) for s in PENDING_STATUSES),
            "interviewsScheduled": breakdown.get(ApplicationStatus.INTERVIEW_SCHEDULED.value, 0),
            "rejected": breakdown.get(ApplicationStatus.REJECTED.value, 0),
            "hired": breakdown.get(ApplicationStatus.HIRED.value, 0),
            "responseRate": f"{percent(responded, total)}%",
        },
        "statusBreakdown": [{"status": status, "count": count} for status, count in sorted(breakdown.items())],
        "recentApplications": recent,
    }
