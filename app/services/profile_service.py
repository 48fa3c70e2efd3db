"""
Profile repository: job seeker and company profiles with their owned
sub-collections (experience, education, certifications, offices).
"""
import logging
from typing import List, Optional, Tuple

from fastapi import BackgroundTasks, Request
from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.core.timeutils import utcnow
from app.db.models import (
    Application,
    Certification,
    CompanyProfile,
    Education,
    Experience,
    JobSeekerProfile,
    NotificationType,
    Office,
)
from app.schemas.profile import CompanyProfileUpdate, JobSeekerProfileUpdate, OfficeIn
from app.services import analytics_service, notification_service, ownership
from app.services.blob_store import IMAGE, RESUME, LocalBlobStore

logger = logging.getLogger(__name__)

_SUB_MODELS = {
    "experience": Experience,
    "education": Education,
    "certifications": Certification,
}


# --- Job seeker profile ---

_SEEKER_JSON_DEFAULTS = {"skills": [], "social_links": {}, "preferences": {}}


def update_jobseeker_profile(db: Session, profile: JobSeekerProfile, data: JobSeekerProfileUpdate) -> JobSeekerProfile:
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None:
            if field in ("first_name", "last_name"):
                continue
            value = _SEEKER_JSON_DEFAULTS.get(field)
        setattr(profile, field, value)
    db.commit()
    db.refresh(profile)
    logger.info(f"Job seeker profile updated: profile_id={profile.id}")
    return profile


def upload_jobseeker_files(
    db: Session,
    profile: JobSeekerProfile,
    store: LocalBlobStore,
    resume: Optional[tuple] = None,
    picture: Optional[tuple] = None,
) -> JobSeekerProfile:
    """
    Store a resume and/or profile picture. Each file is a
    ``(data, content_type, filename)`` tuple.
    """
    now = utcnow()
    if resume is not None:
        blob = store.store(resume[0], resume[1], RESUME, profile.id, resume[2])
        profile.resume_ref = blob.ref
        profile.resume_filename = blob.filename
        profile.resume_uploaded_at = now
    if picture is not None:
        blob = store.store(picture[0], picture[1], IMAGE, profile.id, picture[2])
        profile.picture_ref = blob.ref
        profile.picture_filename = blob.filename
        profile.picture_uploaded_at = now
    db.commit()
    db.refresh(profile)
    return profile


def add_sub_entity(db: Session, profile: JobSeekerProfile, kind: str, data) -> List:
    model = _SUB_MODELS[kind]
    db.add(model(profile_id=profile.id, **data.model_dump()))
    db.commit()
    db.refresh(profile)
    return list(getattr(profile, kind))


def update_sub_entity(db: Session, profile: JobSeekerProfile, kind: str, item_id: int, data) -> List:
    item = ownership.get_profile_sub_entity(db, profile, kind, item_id)
    for field, value in data.model_dump().items():
        setattr(item, field, value)
    db.commit()
    db.refresh(profile)
    return list(getattr(profile, kind))


def delete_sub_entity(db: Session, profile: JobSeekerProfile, kind: str, item_id: int) -> None:
    item = ownership.get_profile_sub_entity(db, profile, kind, item_id)
    db.delete(item)
    db.commit()


# --- Company profile ---

_COMPANY_REQUIRED = ("company_name", "industry", "company_size")
_COMPANY_JSON_DEFAULTS = {"location": {}, "culture": [], "benefits": [], "social_links": {}}


def update_company_profile(db: Session, company: CompanyProfile, data: CompanyProfileUpdate) -> CompanyProfile:
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None:
            if field in _COMPANY_REQUIRED:
                continue
            value = _COMPANY_JSON_DEFAULTS.get(field)
        setattr(company, field, value)
    db.commit()
    db.refresh(company)
    logger.info(f"Company profile updated: company_id={company.id}")
    return company


def upload_logo(db: Session, company: CompanyProfile, store: LocalBlobStore, data: bytes, content_type: str, filename: str) -> CompanyProfile:
    blob = store.store(data, content_type, IMAGE, company.id, filename)
    company.logo_ref = blob.ref
    company.logo_filename = blob.filename
    company.logo_uploaded_at = utcnow()
    db.commit()
    db.refresh(company)
    return company


def add_office(db: Session, company: CompanyProfile, data: OfficeIn) -> List[Office]:
    db.add(Office(company_id=company.id, **data.model_dump()))
    db.commit()
    db.refresh(company)
    return list(company.offices)


def update_office(db: Session, company: CompanyProfile, office_id: int, data: OfficeIn) -> List[Office]:
    office = ownership.get_owned_office(db, company, office_id)
    for field, value in data.model_dump().items():
        setattr(office, field, value)
    db.commit()
    db.refresh(company)
    return list(company.offices)


def delete_office(db: Session, company: CompanyProfile, office_id: int) -> None:
    office = ownership.get_owned_office(db, company, office_id)
    db.delete(office)
    db.commit()


def set_verification_status(db: Session, company_id: int, verification_status: str) -> CompanyProfile:
    company = db.get(CompanyProfile, company_id)
    if company is None:
        raise NotFoundError("Company not found")
    company.verification_status = verification_status
    db.commit()
    db.refresh(company)
    logger.info(f"Company verification set: company_id={company.id}, status={verification_status}")
    return company


# --- Employer view of a candidate ---

def view_candidate(
    db: Session,
    company: CompanyProfile,
    candidate_id: int,
    request: Optional[Request] = None,
    background_tasks: Optional[BackgroundTasks] = None,
) -> Tuple[JobSeekerProfile, Application]:
    """
    Visible only when the candidate applied to one of the caller's jobs.
    Bumps the candidate's view counter and tells them who looked.
    """
    candidate = db.get(JobSeekerProfile, candidate_id)
    application = None
    if candidate is not None:
        application = (
            db.query(Application)
            .filter(Application.job_seeker_id == candidate.id, Application.employer_id == company.id)
            .order_by(Application.applied_at.desc())
            .first()
        )
    if application is None:
        raise NotFoundError("Candidate not found")

    db.execute(
        update(JobSeekerProfile)
        .where(JobSeekerProfile.id == candidate.id)
        .values(profile_views=JobSeekerProfile.profile_views + 1)
    )
    analytics_service.record_event(
        db, "jobseeker", candidate.id, "view",
        metadata={"companyId": company.id}, request=request,
    )
    notification_service.create_notification(
        db,
        identity_id=candidate.identity_id,
        type=NotificationType.PROFILE_VIEWED.value,
        title="Profile Viewed",
        message=f"{company.company_name} viewed your profile",
        data={"companyId": company.id},
        background_tasks=background_tasks,
    )
    db.commit()
    db.refresh(candidate)
    return candidate, application
