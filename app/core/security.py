import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import bcrypt
from jose import jwt, ExpiredSignatureError, JWTError
from passlib.context import CryptContext

from app.core.config import (
    SECRET_KEY,
    ALGORITHM,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    PASSWORD_RESET_TOKEN_TTL_HOURS,
)
from app.core.errors import AuthenticationError
from app.core.timeutils import utcnow

logger = logging.getLogger(__name__)

# passlib context kept for verifying hashes produced by older deployments;
# new hashes go through bcrypt directly
try:
    pwd_context = CryptContext(
        schemes=["bcrypt"],
        deprecated="auto",
    )
except Exception as e:
    logger.warning(f"Failed to initialize passlib context: {e}, using bcrypt directly")
    pwd_context = None

BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    # bcrypt ignores everything past 72 bytes; schemas reject longer input
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt directly.

    Args:
        password: Plain text password (max 72 bytes in UTF-8)

    Returns:
        Hashed password string (bcrypt format compatible with passlib)

    Raises:
        ValueError: If password cannot be hashed
    """
    try:
        return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=12)).decode("utf-8")
    except (TypeError, ValueError) as e:
        logger.error(f"Password hashing failed: {e}")
        raise ValueError("Invalid password") from e


def verify_password(password: str, hashed: Optional[str]) -> bool:
    """
    Verify a password against its hash.

    Supports both bcrypt-native hashes and passlib-wrapped hashes.
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        if pwd_context:
            try:
                return pwd_context.verify(password, hashed)
            except (ValueError, TypeError):
                return False
        return False


@dataclass(frozen=True)
class TokenClaims:
    identity_id: int
    role: str


def create_access_token(identity_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": str(identity_id), "role": role, "exp": expire}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    """
    Verify a bearer token and return its claims.

    Raises:
        AuthenticationError: "Token expired" or "Invalid token"
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except JWTError:
        raise AuthenticationError("Invalid token")

    subject = payload.get("sub")
    role = payload.get("role")
    if subject is None or role is None:
        raise AuthenticationError("Invalid token")
    try:
        return TokenClaims(identity_id=int(subject), role=role)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token")


def hash_reset_token(raw_token: str) -> str:
    # keyed with SECRET_KEY; only this digest is stored
    return hmac.new(SECRET_KEY.encode("utf-8"), raw_token.encode("utf-8"), hashlib.sha256).hexdigest()


def generate_password_reset_token() -> Tuple[str, str, datetime]:
    """
    Create a password-reset token.

    Returns:
        (raw_token, token_hash, expires_at). Only the hash is persisted;
        the raw value is what gets emailed to the user.
    """
    raw_token = secrets.token_urlsafe(32)
    expires_at = utcnow() + timedelta(hours=PASSWORD_RESET_TOKEN_TTL_HOURS)
    return raw_token, hash_reset_token(raw_token), expires_at
