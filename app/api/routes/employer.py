"""
Employer endpoints: company profile, offices, postings, candidate pipeline
and dashboards.
"""
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, require_employer
from app.db.models import Identity
from app.schemas.application import RatingUpdate, StatusUpdate, application_payload
from app.schemas.common import envelope, pagination
from app.schemas.job import JobOut
from app.schemas.profile import CompanyProfileOut, CompanyProfileUpdate, JobSeekerProfileOut, OfficeIn, OfficeOut
from app.services import application_service, dashboard_service, job_service, ownership, profile_service
from app.services.blob_store import LocalBlobStore, get_blob_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employer", tags=["Employer"])


@router.get("/profile")
def get_profile(identity: Identity = Depends(require_employer), db: Session = Depends(get_db)):
    company = ownership.get_company_profile(db, identity)
    return envelope(CompanyProfileOut.model_validate(company).dump())


@router.put("/profile")
def update_profile(
    data: CompanyProfileUpdate,
    identity: Identity = Depends(require_employer),
    db: Session = Depends(get_db),
):
    company = ownership.get_company_profile(db, identity)
    company = profile_service.update_company_profile(db, company, data)
    return envelope(CompanyProfileOut.model_validate(company).dump(), message="Company profile updated successfully")


@router.post("/upload-logo")
def upload_logo(
    logo: UploadFile = File(...),
    identity: Identity = Depends(require_employer),
    db: Session = Depends(get_db),
    store: LocalBlobStore = Depends(get_blob_store),
):
    company = ownership.get_company_profile(db, identity)
    company = profile_service.upload_logo(db, company, store, logo.file.read(), logo.content_type, logo.filename)
    return envelope({"logoRef": company.logo_ref}, message="Logo uploaded successfully")


# --- Offices ---

def _offices(offices) -> list:
    return [OfficeOut.model_validate(o).dump() for o in offices]


@router.post("/offices", status_code=status.HTTP_201_CREATED)
def add_office(data: OfficeIn, identity: Identity = Depends(require_employer), db: Session = Depends(get_db)):
    company = ownership.get_company_profile(db, identity)
    return envelope(_offices(profile_service.add_office(db, company, data)), message="Office added successfully")


@router.put("/offices/{office_id}")
def update_office(
    office_id: int,
    data: OfficeIn,
    identity: Identity = Depends(require_employer),
    db: Session = Depends(get_db),
):
    company = ownership.get_company_profile(db, identity)
    offices = profile_service.update_office(db, company, office_id, data)
    return envelope(_offices(offices), message="Office updated successfully")


@router.delete("/offices/{office_id}")
def delete_office(office_id: int, identity: Identity = Depends(require_employer), db: Session = Depends(get_db)):
    company = ownership.get_company_profile(db, identity)
    profile_service.delete_office(db, company, office_id)
    return envelope(message="Office deleted successfully")


# --- Postings and pipeline ---

@router.get("/jobs")
def list_jobs(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    identity: Identity = Depends(require_employer),
    db: Session = Depends(get_db),
):
    company = ownership.get_company_profile(db, identity)
    jobs, total = job_service.list_own_jobs(db, company, status_filter, page, limit)
    return envelope([JobOut.from_job(j).dump() for j in jobs], pagination=pagination(page, limit, total))


@router.get("/applications")
def list_applications(
    status_filter: Optional[str] = Query(None, alias="status"),
    job_id: Optional[int] = Query(None, alias="jobId"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    identity: Identity = Depends(require_employer),
    db: Session = Depends(get_db),
):
    company = ownership.get_company_profile(db, identity)
    items, total = application_service.list_for_employer(db, company, status_filter, job_id, page, limit)
    return envelope(
        [application_payload(a, with_candidate=True) for a in items],
        pagination=pagination(page, limit, total),
    )


@router.put("/applications/{application_id}/status")
def update_application_status(
    application_id: int,
    data: StatusUpdate,
    background_tasks: BackgroundTasks,
    identity: Identity = Depends(require_employer),
    db: Session = Depends(get_db),
):
    company = ownership.get_company_profile(db, identity)
    application = application_service.set_status_by_employer(
        db, company, application_id, data, background_tasks=background_tasks
    )
    return envelope(application_payload(application), message="Application status updated successfully")


@router.put("/applications/{application_id}/rating")
def rate_application(
    application_id: int,
    data: RatingUpdate,
    identity: Identity = Depends(require_employer),
    db: Session = Depends(get_db),
):
    company = ownership.get_company_profile(db, identity)
    application = application_service.rate_candidate(db, company, application_id, data.rating, data.notes)
    return envelope(application_payload(application), message="Candidate rated successfully")


# --- Dashboards ---

@router.get("/dashboard-stats")
def dashboard_stats(identity: Identity = Depends(require_employer), db: Session = Depends(get_db)):
    company = ownership.get_company_profile(db, identity)
    return envelope(dashboard_service.employer_dashboard(db, company))


@router.get("/analytics")
def analytics(identity: Identity = Depends(require_employer), db: Session = Depends(get_db)):
    company = ownership.get_company_profile(db, identity)
    return envelope(dashboard_service.employer_analytics(db, company))


@router.get("/candidate/{candidate_id}")
def candidate_profile(
    candidate_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    identity: Identity = Depends(require_employer),
    db: Session = Depends(get_db),
):
    company = ownership.get_company_profile(db, identity)
    candidate, application = profile_service.view_candidate(
        db, company, candidate_id, request=request, background_tasks=background_tasks
    )
    return envelope({
        "candidate": JobSeekerProfileOut.model_validate(candidate).dump(),
        "application": {
            "id": application.id,
            "status": application.status,
            "appliedAt": application.applied_at.isoformat(),
            "coverLetter": application.cover_letter,
            "rating": application.rating,
            "employerNotes": application.employer_notes,
            "jobTitle": application.job.title if application.job else None,
        },
    })
