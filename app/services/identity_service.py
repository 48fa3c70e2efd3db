"""
Identity store: registration, login and credential lifecycle.
"""
import logging
from typing import Any, Dict, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import AuthenticationError, ConflictError, ValidationError
from app.core.security import (
    create_access_token,
    generate_password_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)
from app.core.timeutils import utcnow
from app.db.models import CompanyProfile, Identity, IdentityRole, JobSeekerProfile
from app.schemas.auth import EmployerRegistration, JobSeekerRegistration

logger = logging.getLogger(__name__)


def get_identity_by_email(db: Session, email: str) -> Optional[Identity]:
    return db.query(Identity).filter(Identity.email == email.strip().lower()).first()


def register(db: Session, data: Union[JobSeekerRegistration, EmployerRegistration]) -> Identity:
    """
    Create an identity and its role profile in one transaction.

    Raises:
        ConflictError: the email is already registered
    """
    if get_identity_by_email(db, data.email) is not None:
        raise ConflictError("User already exists with this email")

    identity = Identity(
        email=data.email,
        password_hash=hash_password(data.password),
        role=data.role,
    )
    db.add(identity)
    try:
        db.flush()
        if isinstance(data, JobSeekerRegistration):
            db.add(JobSeekerProfile(
                identity_id=identity.id,
                first_name=data.first_name,
                last_name=data.last_name,
            ))
        else:
            db.add(CompanyProfile(
                identity_id=identity.id,
                company_name=data.company_name,
                industry=data.industry,
                company_size=data.company_size,
            ))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User already exists with this email")

    db.refresh(identity)
    logger.info(f"Identity registered: identity_id={identity.id}, role={identity.role}")
    return identity


def authenticate(db: Session, email: str, password: str, required_role: Optional[str] = None) -> Identity:
    """
    Check credentials and stamp ``last_login_at``.

    Unknown email, wrong password and (when required) wrong role all fail
    the same way.
    """
    identity = get_identity_by_email(db, email)
    if identity is None or not verify_password(password, identity.password_hash):
        raise AuthenticationError("Invalid credentials")
    if required_role is not None and identity.role != required_role:
        raise AuthenticationError("Invalid credentials")
    if not identity.is_active:
        raise AuthenticationError("Account is deactivated. Please contact support.")

    identity.last_login_at = utcnow()
    db.commit()
    db.refresh(identity)
    logger.info(f"Login: identity_id={identity.id}")
    return identity


def issue_token(identity: Identity) -> str:
    return create_access_token(identity.id, identity.role)


def profile_summary(identity: Identity) -> Optional[Dict[str, Any]]:
    if identity.role == IdentityRole.JOBSEEKER.value and identity.jobseeker_profile is not None:
        profile = identity.jobseeker_profile
        return {
            "id": profile.id,
            "firstName": profile.first_name,
            "lastName": profile.last_name,
            "pictureRef": profile.picture_ref,
        }
    if identity.role == IdentityRole.EMPLOYER.value and identity.company_profile is not None:
        profile = identity.company_profile
        return {
            "id": profile.id,
            "companyName": profile.company_name,
            "industry": profile.industry,
            "logoRef": profile.logo_ref,
            "verificationStatus": profile.verification_status,
        }
    return None


def change_password(db: Session, identity: Identity, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, identity.password_hash):
        raise ValidationError("Current password is incorrect")
    identity.password_hash = hash_password(new_password)
    db.commit()
    logger.info(f"Password changed: identity_id={identity.id}")


def start_password_reset(db: Session, email: str) -> Optional[str]:
    """
    Issue a reset token for ``email`` if such an identity exists.

    Returns:
        The raw token to email, or None. Callers must answer the same way
        in both cases.
    """
    identity = get_identity_by_email(db, email)
    if identity is None or not identity.is_active:
        return None
    raw_token, token_hash, expires_at = generate_password_reset_token()
    identity.reset_token_hash = token_hash
    identity.reset_token_expires_at = expires_at
    db.commit()
    logger.info(f"Password reset requested: identity_id={identity.id}")
    return raw_token


def reset_password(db: Session, raw_token: str, new_password: str) -> Identity:
    identity = (
        db.query(Identity)
        .filter(
            Identity.reset_token_hash == hash_reset_token(raw_token),
            Identity.reset_token_expires_at > utcnow(),
        )
        .first()
    )
    if identity is None:
        raise ValidationError("Invalid or expired reset token")
    identity.password_hash = hash_password(new_password)
    identity.reset_token_hash = None
    identity.reset_token_expires_at = None
    db.commit()
    logger.info(f"Password reset completed: identity_id={identity.id}")
    return identity


def verify_email(db: Session, identity: Identity) -> None:
    identity.email_verified = True
    db.commit()


def deactivate(db: Session, identity: Identity) -> None:
    identity.is_active = False
    db.commit()
    logger.info(f"Identity deactivated: identity_id={identity.id}")
