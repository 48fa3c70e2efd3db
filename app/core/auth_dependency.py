from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.errors import AuthenticationError, AuthorizationError
from app.core.security import decode_access_token
from app.db.session import SessionLocal
from app.db.models.identity import Identity, IdentityRole

bearer_scheme = HTTPBearer(auto_error=False)


def get_db():
    """Database session dependency. Rolls back whatever a failed request left behind."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def _load_identity(token: str, db: Session) -> Identity:
    claims = decode_access_token(token)
    identity = db.get(Identity, claims.identity_id)
    if identity is None:
        raise AuthenticationError("User not found")
    if not identity.is_active:
        raise AuthenticationError("Account is deactivated")
    return identity


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Identity:
    """Get the authenticated Identity from the bearer token."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token is required")
    return _load_identity(credentials.credentials, db)


def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[Identity]:
    """Like get_current_identity, but anonymous callers and bad tokens yield None."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return _load_identity(credentials.credentials, db)
    except AuthenticationError:
        return None


def require_role(*roles: IdentityRole):
    allowed = {role.value for role in roles}
    labels = {
        IdentityRole.JOBSEEKER.value: "Job seeker",
        IdentityRole.EMPLOYER.value: "Employer",
        IdentityRole.ADMIN.value: "Admin",
    }

    def role_checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in allowed:
            required = " or ".join(labels[r.value] for r in roles).lower()
            raise AuthorizationError(f"Access denied. {required.capitalize()} account required.")
        return identity

    return role_checker


require_jobseeker = require_role(IdentityRole.JOBSEEKER)
require_employer = require_role(IdentityRole.EMPLOYER)
require_admin = require_role(IdentityRole.ADMIN)
