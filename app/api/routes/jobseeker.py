"""
Job seeker endpoints: profile, sub-sections, saved jobs and dashboard.
"""
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, require_jobseeker
from app.core.errors import ValidationError
from app.db.models import Identity
from app.schemas.application import application_payload
from app.schemas.common import envelope, pagination
from app.schemas.job import JobOut
from app.schemas.profile import (
    CertificationIn,
    CertificationOut,
    EducationIn,
    EducationOut,
    ExperienceIn,
    ExperienceOut,
    JobSeekerProfileOut,
    JobSeekerProfileUpdate,
)
from app.services import (
    application_service,
    dashboard_service,
    ownership,
    profile_service,
    saved_job_service,
)
from app.services.blob_store import LocalBlobStore, get_blob_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobseeker", tags=["Job Seeker"])


@router.get("/profile")
def get_profile(identity: Identity = Depends(require_jobseeker), db: Session = Depends(get_db)):
    profile = ownership.get_jobseeker_profile(db, identity)
    return envelope(JobSeekerProfileOut.model_validate(profile).dump())


@router.put("/profile")
def update_profile(
    data: JobSeekerProfileUpdate,
    identity: Identity = Depends(require_jobseeker),
    db: Session = Depends(get_db),
):
    profile = ownership.get_jobseeker_profile(db, identity)
    profile = profile_service.update_jobseeker_profile(db, profile, data)
    return envelope(JobSeekerProfileOut.model_validate(profile).dump(), message="Profile updated successfully")


def _read(upload: Optional[UploadFile]):
    if upload is None or not upload.filename:
        return None
    return upload.file.read(), upload.content_type, upload.filename


@router.post("/upload")
def upload_files(
    resume: Optional[UploadFile] = File(None),
    profile_picture: Optional[UploadFile] = File(None, alias="profilePicture"),
    identity: Identity = Depends(require_jobseeker),
    db: Session = Depends(get_db),
    store: LocalBlobStore = Depends(get_blob_store),
):
    """Upload a resume and/or a profile picture."""
    resume_file = _read(resume)
    picture_file = _read(profile_picture)
    if resume_file is None and picture_file is None:
        raise ValidationError("No files uploaded")
    profile = ownership.get_jobseeker_profile(db, identity)
    profile = profile_service.upload_jobseeker_files(db, profile, store, resume=resume_file, picture=picture_file)
    return envelope(
        {
            "resumeRef": profile.resume_ref,
            "resumeFilename": profile.resume_filename,
            "pictureRef": profile.picture_ref,
        },
        message="Files uploaded successfully",
    )


# --- Experience / education / certifications ---

def _register_sub_entity_routes(kind: str, path: str, schema_in, schema_out, label: str) -> None:
    """Add, update and delete routes for one owned profile section."""

    def _items(items) -> list:
        return [schema_out.model_validate(item).dump() for item in items]

    @router.post(f"/{path}", status_code=status.HTTP_201_CREATED, name=f"add_{kind}")
    def add_item(
        data: schema_in,
        identity: Identity = Depends(require_jobseeker),
        db: Session = Depends(get_db),
    ):
        profile = ownership.get_jobseeker_profile(db, identity)
        items = profile_service.add_sub_entity(db, profile, kind, data)
        return envelope(_items(items), message=f"{label} added successfully")

    @router.put(f"/{path}/{{item_id}}", name=f"update_{kind}")
    def update_item(
        item_id: int,
        data: schema_in,
        identity: Identity = Depends(require_jobseeker),
        db: Session = Depends(get_db),
    ):
        profile = ownership.get_jobseeker_profile(db, identity)
        items = profile_service.update_sub_entity(db, profile, kind, item_id, data)
        return envelope(_items(items), message=f"{label} updated successfully")

    @router.delete(f"/{path}/{{item_id}}", name=f"delete_{kind}")
    def delete_item(
        item_id: int,
        identity: Identity = Depends(require_jobseeker),
        db: Session = Depends(get_db),
    ):
        profile = ownership.get_jobseeker_profile(db, identity)
        profile_service.delete_sub_entity(db, profile, kind, item_id)
        return envelope(message=f"{label} deleted successfully")


_register_sub_entity_routes("experience", "experience", ExperienceIn, ExperienceOut, "Experience")
_register_sub_entity_routes("education", "education", EducationIn, EducationOut, "Education")
_register_sub_entity_routes("certifications", "certifications", CertificationIn, CertificationOut, "Certification")


# --- Saved jobs ---

@router.get("/saved-jobs")
def saved_jobs(identity: Identity = Depends(require_jobseeker), db: Session = Depends(get_db)):
    seeker = ownership.get_jobseeker_profile(db, identity)
    saved = saved_job_service.list_saved_jobs(db, seeker)
    return envelope([
        {"id": s.id, "savedAt": s.saved_at.isoformat(), "job": JobOut.from_job(s.job).dump()}
        for s in saved
    ])


@router.post("/save-job/{job_id}", status_code=status.HTTP_201_CREATED)
def save_job(
    job_id: int,
    request: Request,
    identity: Identity = Depends(require_jobseeker),
    db: Session = Depends(get_db),
):
    seeker = ownership.get_jobseeker_profile(db, identity)
    saved = saved_job_service.save_job(db, seeker, job_id, request=request)
    return envelope({"id": saved.id, "jobId": saved.job_id}, message="Job saved successfully")


@router.delete("/unsave-job/{job_id}")
def unsave_job(job_id: int, identity: Identity = Depends(require_jobseeker), db: Session = Depends(get_db)):
    seeker = ownership.get_jobseeker_profile(db, identity)
    saved_job_service.unsave_job(db, seeker, job_id)
    return envelope(message="Job removed from saved list")


# --- Applications and dashboard ---

@router.get("/applications")
def applications(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    identity: Identity = Depends(require_jobseeker),
    db: Session = Depends(get_db),
):
    seeker = ownership.get_jobseeker_profile(db, identity)
    items, total = application_service.list_for_seeker(db, seeker, status_filter, page, limit)
    return envelope(
        [application_payload(a, with_job=True) for a in items],
        pagination=pagination(page, limit, total),
    )


@router.put("/applications/{application_id}/withdraw")
def withdraw_application(
    application_id: int,
    background_tasks: BackgroundTasks,
    identity: Identity = Depends(require_jobseeker),
    db: Session = Depends(get_db),
):
    seeker = ownership.get_jobseeker_profile(db, identity)
    application = application_service.withdraw(db, seeker, application_id, background_tasks=background_tasks)
    return envelope(application_payload(application), message="Application withdrawn successfully")


@router.get("/dashboard-stats")
def dashboard_stats(identity: Identity = Depends(require_jobseeker), db: Session = Depends(get_db)):
    seeker = ownership.get_jobseeker_profile(db, identity)
    return envelope(dashboard_service.jobseeker_dashboard(db, seeker))
