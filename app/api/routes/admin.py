"""
Admin endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, require_admin
from app.db.models import Identity
from app.schemas.common import envelope
from app.schemas.profile import CompanyProfileOut, VerificationUpdate
from app.services import profile_service

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.put("/companies/{company_id}/verification")
def set_company_verification(
    company_id: int,
    data: VerificationUpdate,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    company = profile_service.set_verification_status(db, company_id, data.verification_status)
    return envelope(
        CompanyProfileOut.model_validate(company).dump(),
        message=f"Company verification set to {data.verification_status}",
    )
