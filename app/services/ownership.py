"""
Ownership resolution: identity -> profile -> owned record.

Every owned lookup filters by both the record id and the owner id, so a
record owned by someone else is indistinguishable from one that does not
exist.
"""
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.db.models import (
    Application,
    Certification,
    CompanyProfile,
    Education,
    Experience,
    Identity,
    Job,
    JobSeekerProfile,
    Office,
)


def get_jobseeker_profile(db: Session, identity: Identity) -> JobSeekerProfile:
    profile = db.query(JobSeekerProfile).filter(JobSeekerProfile.identity_id == identity.id).first()
    if profile is None:
        raise NotFoundError("Job seeker profile not found")
    return profile


def get_company_profile(db: Session, identity: Identity) -> CompanyProfile:
    profile = db.query(CompanyProfile).filter(CompanyProfile.identity_id == identity.id).first()
    if profile is None:
        raise NotFoundError("Company profile not found")
    return profile


def get_owned_job(db: Session, company: CompanyProfile, job_id: int) -> Job:
    job = db.query(Job).filter(Job.id == job_id, Job.employer_id == company.id).first()
    if job is None:
        raise NotFoundError("Job not found")
    return job


def get_seeker_application(db: Session, seeker: JobSeekerProfile, application_id: int) -> Application:
    application = (
        db.query(Application)
        .filter(Application.id == application_id, Application.job_seeker_id == seeker.id)
        .first()
    )
    if application is None:
        raise NotFoundError("Application not found")
    return application


def get_employer_application(db: Session, company: CompanyProfile, application_id: int) -> Application:
    application = (
        db.query(Application)
        .filter(Application.id == application_id, Application.employer_id == company.id)
        .first()
    )
    if application is None:
        raise NotFoundError("Application not found")
    return application


_SUB_ENTITIES = {
    "experience": (Experience, "Experience not found"),
    "education": (Education, "Education not found"),
    "certifications": (Certification, "Certification not found"),
}


def get_profile_sub_entity(db: Session, profile: JobSeekerProfile, kind: str, item_id: int):
    """Resolve an experience/education/certification row within one profile."""
    model, missing = _SUB_ENTITIES[kind]
    item = db.query(model).filter(model.id == item_id, model.profile_id == profile.id).first()
    if item is None:
        raise NotFoundError(missing)
    return item


def get_owned_office(db: Session, company: CompanyProfile, office_id: int) -> Office:
    office = db.query(Office).filter(Office.id == office_id, Office.company_id == company.id).first()
    if office is None:
        raise NotFoundError("Office not found")
    return office
