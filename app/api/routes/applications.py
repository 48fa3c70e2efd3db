"""
Application endpoints for job seekers: apply, track, withdraw, respond to offers.
"""
import json
import logging
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, Request, UploadFile, status
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, require_jobseeker
from app.core.errors import ValidationError
from app.db.models import Identity
from app.schemas.application import CustomAnswer, DeclineOffer, application_payload
from app.schemas.common import envelope, pagination
from app.services import application_service, ownership
from app.services.blob_store import RESUME, LocalBlobStore, get_blob_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])

_custom_answers_adapter = TypeAdapter(List[CustomAnswer])


def parse_custom_answers(raw: Optional[str]) -> list:
    """``customAnswers`` arrives as a JSON string inside the multipart form."""
    if not raw:
        return []
    try:
        answers = _custom_answers_adapter.validate_python(json.loads(raw))
    except (ValueError, PydanticValidationError):
        raise ValidationError("customAnswers must be a JSON list of {question, answer}")
    return [answer.model_dump() for answer in answers]


@router.post("/apply/{job_id}", status_code=status.HTTP_201_CREATED)
def apply(
    job_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    cover_letter: Optional[str] = Form(None, alias="coverLetter", max_length=2000),
    custom_answers: Optional[str] = Form(None, alias="customAnswers"),
    resume: Optional[UploadFile] = File(None),
    identity: Identity = Depends(require_jobseeker),
    db: Session = Depends(get_db),
    store: LocalBlobStore = Depends(get_blob_store),
):
    seeker = ownership.get_jobseeker_profile(db, identity)
    answers = parse_custom_answers(custom_answers)

    blob = None
    if resume is not None and resume.filename:
        data = resume.file.read()
        blob = store.store(data, resume.content_type, RESUME, seeker.id, resume.filename)

    try:
        application = application_service.apply_to_job(
            db,
            seeker,
            job_id,
            cover_letter=cover_letter,
            custom_answers=answers,
            resume=blob,
            request=request,
            background_tasks=background_tasks,
        )
    except Exception:
        # the application was not created; drop the resume that came with it
        if blob is not None:
            store.delete(blob.ref)
        raise
    return envelope(application_payload(application), message="Application submitted successfully")


@router.get("/my-applications")
def my_applications(
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


@router.get("/stats/overview")
def application_stats(
    identity: Identity = Depends(require_jobseeker),
    db: Session = Depends(get_db),
):
    seeker = ownership.get_jobseeker_profile(db, identity)
    stats = application_service.seeker_stats(db, seeker)
    stats["recentApplications"] = [application_payload(a, with_job=True) for a in stats["recentApplications"]]
    return envelope(stats)


@router.get("/{application_id}")
def get_application(
    application_id: int,
    identity: Identity = Depends(require_jobseeker),
    db: Session = Depends(get_db),
):
    seeker = ownership.get_jobseeker_profile(db, identity)
    application = ownership.get_seeker_application(db, seeker, application_id)
    return envelope(application_payload(application, with_job=True))


@router.put("/{application_id}/withdraw")
def withdraw(
    application_id: int,
    background_tasks: BackgroundTasks,
    identity: Identity = Depends(require_jobseeker),
    db: Session = Depends(get_db),
):
    seeker = ownership.get_jobseeker_profile(db, identity)
    application = application_service.withdraw(db, seeker, application_id, background_tasks=background_tasks)
    return envelope(application_payload(application), message="Application withdrawn successfully")


@router.put("/{application_id}/accept-offer")
def accept_offer(
    application_id: int,
    background_tasks: BackgroundTasks,
    identity: Identity = Depends(require_jobseeker),
    db: Session = Depends(get_db),
):
    seeker = ownership.get_jobseeker_profile(db, identity)
    application = application_service.accept_offer(db, seeker, application_id, background_tasks=background_tasks)
    return envelope(application_payload(application), message="Job offer accepted successfully")


@router.put("/{application_id}/decline-offer")
def decline_offer(
    application_id: int,
    background_tasks: BackgroundTasks,
    data: Optional[DeclineOffer] = None,
    identity: Identity = Depends(require_jobseeker),
    db: Session = Depends(get_db),
):
    seeker = ownership.get_jobseeker_profile(db, identity)
    reason = data.reason if data is not None else None
    application = application_service.decline_offer(
        db, seeker, application_id, reason=reason, background_tasks=background_tasks
    )
    return envelope(application_payload(application), message="Job offer declined")
