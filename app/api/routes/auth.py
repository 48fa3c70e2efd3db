"""
Authentication endpoints: registration, login and credential lifecycle.
"""
import logging

from fastapi import APIRouter, BackgroundTasks, Body, Depends, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_identity, get_db
from app.core.rate_limit import LOGIN, PASSWORD_RESET, REGISTER, rate_limited
from app.db.models.identity import Identity, IdentityRole
from app.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    IdentityResponse,
    JobSeekerRegistration,
    JobSeekerSignupRequest,
    LoginRequest,
    RegistrationRequest,
    ResetPasswordRequest,
)
from app.schemas.common import envelope
from app.services import identity_service
from app.services.notifier import send_password_reset_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

FORGOT_PASSWORD_MESSAGE = "If an account exists with this email, a password reset link has been sent"


def _session_payload(identity: Identity) -> dict:
    return {
        "token": identity_service.issue_token(identity),
        "user": IdentityResponse.model_validate(identity).dump(),
        "profile": identity_service.profile_summary(identity),
    }


@router.post("/register", status_code=status.HTTP_201_CREATED, dependencies=[Depends(rate_limited(REGISTER))])
def register(
    data: RegistrationRequest = Body(..., discriminator="role"),
    db: Session = Depends(get_db),
):
    """Register a job seeker or an employer, depending on ``role``."""
    identity = identity_service.register(db, data)
    return envelope(_session_payload(identity), message="User registered successfully")


@router.post(
    "/jobseeker/signup",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limited(REGISTER))],
)
def jobseeker_signup(data: JobSeekerSignupRequest, db: Session = Depends(get_db)):
    registration = JobSeekerRegistration(role="jobseeker", **data.model_dump())
    identity = identity_service.register(db, registration)
    return envelope(_session_payload(identity), message="Job seeker registered successfully")


@router.post("/login", dependencies=[Depends(rate_limited(LOGIN))])
def login(data: LoginRequest, db: Session = Depends(get_db)):
    identity = identity_service.authenticate(db, data.email, data.password)
    return envelope(_session_payload(identity), message="Login successful")


@router.post("/jobseeker/login", dependencies=[Depends(rate_limited(LOGIN))])
def jobseeker_login(data: LoginRequest, db: Session = Depends(get_db)):
    identity = identity_service.authenticate(
        db, data.email, data.password, required_role=IdentityRole.JOBSEEKER.value
    )
    return envelope(_session_payload(identity), message="Login successful")


@router.post("/logout")
def logout(identity: Identity = Depends(get_current_identity)):
    # Tokens are stateless; the client discards its copy
    return envelope(message="Logged out successfully")


@router.get("/me")
def me(identity: Identity = Depends(get_current_identity)):
    return envelope({
        "user": IdentityResponse.model_validate(identity).dump(),
        "profile": identity_service.profile_summary(identity),
    })


@router.put("/change-password")
def change_password(
    data: ChangePasswordRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    identity_service.change_password(db, identity, data.current_password, data.new_password)
    return envelope(message="Password changed successfully")


@router.post("/forgot-password", dependencies=[Depends(rate_limited(PASSWORD_RESET))])
def forgot_password(
    data: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Same answer whether or not the email is registered."""
    raw_token = identity_service.start_password_reset(db, data.email)
    if raw_token is not None:
        background_tasks.add_task(send_password_reset_email, data.email, raw_token)
    return envelope(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", dependencies=[Depends(rate_limited(PASSWORD_RESET))])
def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db)):
    identity_service.reset_password(db, data.token, data.new_password)
    return envelope(message="Password reset successfully")


@router.put("/verify-email")
def verify_email(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    identity_service.verify_email(db, identity)
    return envelope(message="Email verified successfully")


@router.delete("/deactivate")
def deactivate(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    identity_service.deactivate(db, identity)
    return envelope(message="Account deactivated successfully")
